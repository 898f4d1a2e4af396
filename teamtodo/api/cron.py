"""Scheduled job endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from teamtodo.auth.middleware import verify_cron_secret
from teamtodo.config import settings
from teamtodo.database import get_db
from teamtodo.mail.sender import MailConfig, Mailer, SmtpMailer
from teamtodo.reminders.dispatcher import run_reminders
from teamtodo.schemas.session import ReminderRunResponse

router = APIRouter()


def get_mailer() -> Mailer:
    """Dependency for the reminder mail collaborator."""
    return SmtpMailer(MailConfig.from_settings(settings))


@router.post(
    "/cron/reminders",
    response_model=ReminderRunResponse,
    dependencies=[Depends(verify_cron_secret)],
)
async def trigger_reminders(
    db: Annotated[AsyncSession, Depends(get_db)],
    mailer: Annotated[Mailer, Depends(get_mailer)],
):
    """Send due-soon and overdue reminder emails. Protected by CRON_SECRET."""
    result = await run_reminders(db, mailer, app_url=settings.app_url)
    return ReminderRunResponse(
        due_soon_sent=result.due_soon_sent, overdue_sent=result.overdue_sent
    )
