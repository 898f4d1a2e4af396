"""Tenant model."""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import DateTime, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from teamtodo.database import Base
from teamtodo.utils.clock import utcnow


class Tenant(Base):
    """Tenant table - one isolated workspace."""

    __tablename__ = "tenants"

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), primary_key=True, default=lambda: str(uuid4())
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
