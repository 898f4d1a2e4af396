"""User model."""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text, Uuid, true
from sqlalchemy.orm import Mapped, mapped_column

from teamtodo.database import Base
from teamtodo.utils.clock import utcnow

ROLE_ADMIN = "ADMIN"
ROLE_MEMBER = "MEMBER"


class User(Base):
    """User table - belongs to exactly one tenant for its lifetime."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), primary_key=True, default=lambda: str(uuid4())
    )
    tenant_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("tenants.id"), nullable=False, index=True
    )
    # Unique across all tenants
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ROLE_MEMBER
    )  # ADMIN|MEMBER
    email_reminders_enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
