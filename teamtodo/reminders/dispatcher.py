"""Reminder dispatch - send each reminder at most once per todo and kind.

A reminder is claimed before it is sent: the marker column is written with a
conditional UPDATE that repeats the full eligibility check (marker still NULL,
todo pending and inside the window, owner opted in) and is committed. Only the
run whose UPDATE touched the row sends. A failed send clears the marker again
so the todo stays eligible while it is still inside its window.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from teamtodo.config import settings
from teamtodo.errors import DispatchError
from teamtodo.mail.sender import Mailer
from teamtodo.models import Todo
from teamtodo.reminders.selector import (
    ReminderCandidate,
    ReminderKind,
    eligibility_clauses,
    select_candidates,
)
from teamtodo.reminders.templates import render_reminder
from teamtodo.utils.clock import Clock, utcnow

logger = logging.getLogger(__name__)


@dataclass
class DispatchOutcome:
    """Per-kind tally for one dispatch pass."""

    sent: int = 0
    skipped: int = 0
    errors: list[DispatchError] = field(default_factory=list)


@dataclass
class ReminderRunResult:
    due_soon_sent: int = 0
    overdue_sent: int = 0
    failed: int = 0


class ReminderDispatcher:
    """Claims, sends, and confirms or releases reminder markers."""

    def __init__(
        self,
        db: AsyncSession,
        mailer: Mailer,
        app_url: str = settings.app_url,
        clock: Clock = utcnow,
    ):
        self.db = db
        self.mailer = mailer
        self.app_url = app_url
        self.clock = clock

    async def _claim(self, kind: ReminderKind, todo_id: str, now: datetime) -> bool:
        """Set the marker only if the todo is still eligible at `now`."""
        result = await self.db.execute(
            update(Todo)
            .where(Todo.id == todo_id, *eligibility_clauses(kind, now))
            .values({kind.marker_attr: now})
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        return result.rowcount == 1

    async def _release(self, kind: ReminderKind, todo_id: str, claimed_at: datetime) -> None:
        marker = getattr(Todo, kind.marker_attr)
        await self.db.execute(
            update(Todo)
            .where(Todo.id == todo_id, marker == claimed_at)
            .values({kind.marker_attr: None})
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()

    async def _send(self, kind: ReminderKind, candidate: ReminderCandidate) -> None:
        subject, body = render_reminder(
            kind, candidate.title, candidate.due_date, self.app_url
        )
        try:
            delivered = await self.mailer.send(candidate.email, subject, body)
        except Exception as exc:
            raise DispatchError(f"{kind.value} reminder for todo {candidate.todo_id}: {exc}") from exc
        if not delivered:
            raise DispatchError(f"{kind.value} reminder for todo {candidate.todo_id} not delivered")

    async def dispatch(
        self,
        kind: ReminderKind,
        candidates: list[ReminderCandidate],
        now: datetime | None = None,
    ) -> DispatchOutcome:
        """Send one reminder per candidate; a failure never aborts the batch."""
        now = now or self.clock()
        outcome = DispatchOutcome()
        for candidate in candidates:
            if not await self._claim(kind, candidate.todo_id, now):
                outcome.skipped += 1
                logger.warning(
                    "Reminder claimed elsewhere or no longer eligible",
                    extra={"kind": kind.value, "todo_id": candidate.todo_id},
                )
                continue
            try:
                await self._send(kind, candidate)
            except DispatchError as e:
                await self._release(kind, candidate.todo_id, now)
                outcome.errors.append(e)
                logger.warning(
                    "Reminder dispatch failed",
                    extra={"kind": kind.value, "todo_id": candidate.todo_id, "error": str(e)},
                )
                continue
            outcome.sent += 1
        return outcome


async def run_reminders(
    db: AsyncSession,
    mailer: Mailer,
    app_url: str = settings.app_url,
    clock: Clock = utcnow,
) -> ReminderRunResult:
    """Select and dispatch due-soon then overdue reminders against one 'now'."""
    now = clock()
    dispatcher = ReminderDispatcher(db, mailer, app_url=app_url, clock=clock)

    due_soon = await dispatcher.dispatch(
        ReminderKind.DUE_SOON, await select_candidates(db, ReminderKind.DUE_SOON, now), now
    )
    overdue = await dispatcher.dispatch(
        ReminderKind.OVERDUE, await select_candidates(db, ReminderKind.OVERDUE, now), now
    )

    result = ReminderRunResult(
        due_soon_sent=due_soon.sent,
        overdue_sent=overdue.sent,
        failed=len(due_soon.errors) + len(overdue.errors),
    )
    logger.info(
        "Reminder run complete",
        extra={
            "due_soon_sent": result.due_soon_sent,
            "overdue_sent": result.overdue_sent,
            "failed": result.failed,
        },
    )
    return result
