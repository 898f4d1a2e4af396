#!/usr/bin/env python3
"""
Run one reminder pass directly against the database (for cron hosts that
cannot reach the HTTP trigger).
"""

import asyncio
import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from teamtodo.config import settings
from teamtodo.database import async_session_maker, engine
from teamtodo.mail.sender import MailConfig, SmtpMailer
from teamtodo.reminders.dispatcher import run_reminders


async def main() -> int:
    mailer = SmtpMailer(MailConfig.from_settings(settings))
    async with async_session_maker() as session:
        result = await run_reminders(session, mailer, app_url=settings.app_url)
        await session.commit()
    await engine.dispose()
    print(f"dueSoonSent={result.due_soon_sent} overdueSent={result.overdue_sent} failed={result.failed}")
    return 0


if __name__ == "__main__":
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    sys.exit(asyncio.run(main()))
