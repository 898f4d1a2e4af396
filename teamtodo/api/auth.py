"""Auth endpoints - register, login, logout, me."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from teamtodo.auth.middleware import CurrentUserDep, SessionManagerDep
from teamtodo.auth.passwords import hash_password, verify_password
from teamtodo.database import get_db
from teamtodo.errors import ConflictError, InvalidCredentialsError, UnauthenticatedError
from teamtodo.schemas.auth import LoginRequest, MeResponse, RegisterRequest
from teamtodo.storage.repositories import (
    create_tenant_with_admin,
    get_user_by_email,
    get_user_by_id,
)

router = APIRouter()


def _client_context(request: Request) -> dict:
    return {
        "user_agent": request.headers.get("user-agent"),
        "ip_address": request.client.host if request.client else None,
    }


@router.post("/register", status_code=201)
async def register(
    body: RegisterRequest,
    request: Request,
    manager: SessionManagerDep,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Create a tenant with an ADMIN user and log them in."""
    if await get_user_by_email(db, body.email):
        raise ConflictError("An account with this email already exists")
    tenant, user = await create_tenant_with_admin(
        db, body.tenant_name, body.email, hash_password(body.password)
    )
    await manager.create_session(user.id, tenant.id, **_client_context(request))
    return {"user_id": user.id, "tenant_id": tenant.id}


@router.post("/login")
async def login(
    body: LoginRequest,
    request: Request,
    manager: SessionManagerDep,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Verify credentials and issue a session cookie."""
    user = await get_user_by_email(db, body.email)
    if user is None or not verify_password(body.password, user.password_hash):
        raise InvalidCredentialsError()
    await manager.create_session(user.id, user.tenant_id, **_client_context(request))
    return {"user_id": user.id, "tenant_id": user.tenant_id}


@router.post("/logout")
async def logout(manager: SessionManagerDep):
    """Destroy the current session; a no-op when not logged in."""
    await manager.destroy_session()
    return {"success": True}


@router.get("/me", response_model=MeResponse)
async def me(
    current: CurrentUserDep,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    user = await get_user_by_id(db, current.user_id)
    if user is None:
        raise UnauthenticatedError()
    return MeResponse(
        user_id=user.id, tenant_id=user.tenant_id, email=user.email, role=user.role
    )
