"""Reminder selection - which todos need a due-soon or overdue email right now."""

import enum
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from teamtodo.models import Todo, User
from teamtodo.models.todo import STATUS_PENDING

DUE_SOON_FROM = timedelta(hours=24)
DUE_SOON_UNTIL = timedelta(hours=48)
OVERDUE_LOOKBACK = timedelta(hours=24)


class ReminderKind(str, enum.Enum):
    DUE_SOON = "due_soon"
    OVERDUE = "overdue"

    @property
    def marker_attr(self) -> str:
        """Todo column holding this kind's dispatch marker."""
        return f"{self.value}_reminder_sent_at"


@dataclass(frozen=True)
class TimeWindow:
    """Half-open interval [start, end)."""

    start: datetime
    end: datetime

    def __contains__(self, value: datetime) -> bool:
        return self.start <= value < self.end


@dataclass(frozen=True)
class ReminderWindows:
    due_soon: TimeWindow
    overdue: TimeWindow

    def for_kind(self, kind: ReminderKind) -> TimeWindow:
        return self.due_soon if kind is ReminderKind.DUE_SOON else self.overdue


@dataclass(frozen=True)
class ReminderCandidate:
    """A todo selected for one reminder kind, with its owner's address."""

    todo_id: str
    title: str
    due_date: datetime
    email: str


def reminder_windows(now: datetime) -> ReminderWindows:
    """
    Due soon: [now+24h, now+48h). Overdue: [now-24h, now).
    The 24h gap between them means a todo is never in both.
    """
    return ReminderWindows(
        due_soon=TimeWindow(now + DUE_SOON_FROM, now + DUE_SOON_UNTIL),
        overdue=TimeWindow(now - OVERDUE_LOOKBACK, now),
    )


def eligibility_clauses(kind: ReminderKind, now: datetime) -> list:
    """
    WHERE terms for a todo that still needs this kind of reminder at `now`.
    Shared by selection and by the dispatch claim.
    """
    window = reminder_windows(now).for_kind(kind)
    owner = aliased(User)
    owner_opted_in = (
        select(owner.id)
        .where(owner.id == Todo.created_by_id, owner.email_reminders_enabled.is_(True))
        .exists()
    )
    return [
        Todo.status == STATUS_PENDING,
        Todo.due_date >= window.start,
        Todo.due_date < window.end,
        getattr(Todo, kind.marker_attr).is_(None),
        owner_opted_in,
    ]


async def select_candidates(
    db: AsyncSession, kind: ReminderKind, now: datetime
) -> list[ReminderCandidate]:
    """
    PENDING todos with due_date in the kind's window, marker still NULL,
    and an owner who has email reminders enabled.
    """
    result = await db.execute(
        select(Todo.id, Todo.title, Todo.due_date, User.email)
        .join(User, User.id == Todo.created_by_id)
        .where(*eligibility_clauses(kind, now))
        .order_by(Todo.due_date)
    )
    return [
        ReminderCandidate(todo_id=row.id, title=row.title, due_date=row.due_date, email=row.email)
        for row in result.all()
    ]


async def select_due_soon(db: AsyncSession, now: datetime) -> list[ReminderCandidate]:
    return await select_candidates(db, ReminderKind.DUE_SOON, now)


async def select_overdue(db: AsyncSession, now: datetime) -> list[ReminderCandidate]:
    return await select_candidates(db, ReminderKind.OVERDUE, now)
