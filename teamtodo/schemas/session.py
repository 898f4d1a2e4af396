"""Session management and reminder trigger schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class DeviceInfo(BaseModel):
    device_type: str
    browser: str
    os: str
    display_name: str


class SessionInfo(BaseModel):
    """One entry of GET /api/sessions."""

    id: str
    device: DeviceInfo
    last_active: str
    created_at: datetime
    is_current: bool


class RevokeOthersResponse(BaseModel):
    success: bool = True
    revoked_count: int


class ReminderRunResponse(BaseModel):
    """POST /api/cron/reminders response."""

    success: bool = True
    due_soon_sent: int = Field(serialization_alias="dueSoonSent")
    overdue_sent: int = Field(serialization_alias="overdueSent")
