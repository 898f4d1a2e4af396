"""Request authentication dependencies: session cookie and cron bearer secret."""

import secrets
from typing import Annotated

from fastapi import Depends, HTTPException, Request, Response, status
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession

from teamtodo.auth.session import CookieTransport, SessionData, SessionManager
from teamtodo.config import settings
from teamtodo.database import get_db
from teamtodo.errors import UnauthenticatedError

AUTHORIZATION_HEADER = APIKeyHeader(name="Authorization", auto_error=False)


def get_session_manager(
    request: Request,
    response: Response,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SessionManager:
    """Session manager bound to this request's cookie."""
    return SessionManager(db, CookieTransport(request, response))


SessionManagerDep = Annotated[SessionManager, Depends(get_session_manager)]


async def get_current_user(manager: SessionManagerDep) -> SessionData:
    """Resolve {user_id, tenant_id} from the session, or fail with 401."""
    current = await manager.get_session()
    if current is None:
        raise UnauthenticatedError()
    return current


# Type alias for dependency injection
CurrentUserDep = Annotated[SessionData, Depends(get_current_user)]


def verify_cron_secret(auth_header: str | None = Depends(AUTHORIZATION_HEADER)) -> None:
    """Require exactly 'Bearer <CRON_SECRET>'. Unset secret rejects everything."""
    secret = settings.cron_secret
    if not secret or auth_header is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
    if not secrets.compare_digest(auth_header.encode(), f"Bearer {secret}".encode()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
