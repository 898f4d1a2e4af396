"""Auth and settings API schemas."""

from pydantic import BaseModel, EmailStr, Field


class RegisterRequest(BaseModel):
    """POST /api/auth/register request."""

    tenant_name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=8)


class LoginRequest(BaseModel):
    """POST /api/auth/login request."""

    email: EmailStr
    password: str = Field(min_length=1)


class MeResponse(BaseModel):
    user_id: str
    tenant_id: str
    email: str
    role: str


class NotificationSettings(BaseModel):
    """GET/PUT /api/settings/notifications body."""

    email_reminders_enabled: bool
