"""Database models."""

from teamtodo.models.tenant import Tenant
from teamtodo.models.user import User
from teamtodo.models.session import Session
from teamtodo.models.todo import Comment, Todo
from teamtodo.models.label import Label, TodoTemplate
from teamtodo.models.notification import Notification

__all__ = [
    "Tenant",
    "User",
    "Session",
    "Todo",
    "Comment",
    "Label",
    "TodoTemplate",
    "Notification",
]
