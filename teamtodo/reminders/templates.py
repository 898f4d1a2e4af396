"""Plain-text reminder email content."""

from datetime import datetime

from teamtodo.reminders.selector import ReminderKind


def format_due_date(value: datetime) -> str:
    """e.g. 'January 15, 2025' (UTC)."""
    return f"{value:%B} {value.day}, {value.year}"


def render_reminder(
    kind: ReminderKind, title: str, due_date: datetime, app_url: str
) -> tuple[str, str]:
    """Return (subject, body) for a reminder email."""
    todos_url = f"{app_url.rstrip('/')}/todos"
    due = format_due_date(due_date)
    if kind is ReminderKind.DUE_SOON:
        subject = f"Reminder: {title} is due soon"
        body = (
            "Hello,\n\n"
            f'Your todo "{title}" is due on {due}.\n\n'
            f"View your todos: {todos_url}\n"
        )
    else:
        subject = f"Overdue: {title}"
        body = (
            "Hello,\n\n"
            f'Your todo "{title}" was due on {due} and is now overdue.\n\n'
            f"View your todos: {todos_url}\n"
        )
    return subject, body
