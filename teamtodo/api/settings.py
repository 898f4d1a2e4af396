"""User settings endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from teamtodo.auth.middleware import CurrentUserDep
from teamtodo.database import get_db
from teamtodo.errors import UnauthenticatedError
from teamtodo.schemas.auth import NotificationSettings
from teamtodo.storage.repositories import get_user_by_id, set_email_reminders

router = APIRouter()


@router.get("/settings/notifications", response_model=NotificationSettings)
async def get_notification_settings(
    current: CurrentUserDep,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    user = await get_user_by_id(db, current.user_id)
    if user is None:
        raise UnauthenticatedError()
    return NotificationSettings(email_reminders_enabled=user.email_reminders_enabled)


@router.put("/settings/notifications", response_model=NotificationSettings)
async def update_notification_settings(
    body: NotificationSettings,
    current: CurrentUserDep,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Opt in or out of reminder emails."""
    user = await set_email_reminders(db, current.user_id, body.email_reminders_enabled)
    if user is None:
        raise UnauthenticatedError()
    return NotificationSettings(email_reminders_enabled=user.email_reminders_enabled)
