"""Session lifecycle: issue, validate, destroy.

The manager never touches request/response objects. The opaque token is
bound to the caller through a ``SessionTransport``; ``CookieTransport`` is
the HTTP implementation.
"""

import logging
import secrets
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Protocol

from fastapi import Request, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from teamtodo.config import settings
from teamtodo.errors import BadRequestError, NotFoundError, StorageError
from teamtodo.models import Session
from teamtodo.storage import sessions as store
from teamtodo.utils.clock import Clock, as_aware_utc, utcnow

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32


@dataclass(frozen=True)
class SessionData:
    """Identity resolved from a valid session."""

    user_id: str
    tenant_id: str


class SessionTransport(Protocol):
    """Carries the opaque session token to and from the caller."""

    def get_token(self) -> str | None: ...

    def set_token(self, token: str, expires_at: datetime) -> None: ...

    def delete_token(self) -> None: ...


class CookieTransport:
    """HttpOnly, Secure, SameSite=Lax cookie binding."""

    def __init__(
        self,
        request: Request,
        response: Response,
        cookie_name: str = settings.session_cookie_name,
        secure: bool = settings.cookie_secure,
    ):
        self._request = request
        self._response = response
        self._cookie_name = cookie_name
        self._secure = secure

    def get_token(self) -> str | None:
        return self._request.cookies.get(self._cookie_name) or None

    def set_token(self, token: str, expires_at: datetime) -> None:
        self._response.set_cookie(
            self._cookie_name,
            token,
            expires=as_aware_utc(expires_at),
            path="/",
            httponly=True,
            secure=self._secure,
            samesite="lax",
        )

    def delete_token(self) -> None:
        self._response.delete_cookie(
            self._cookie_name,
            path="/",
            httponly=True,
            secure=self._secure,
            samesite="lax",
        )


@contextmanager
def _storage_errors(action: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("Session store failure", extra={"action": action, "error": str(exc)})
        raise StorageError() from exc


class SessionManager:
    """Issues, validates and destroys login sessions."""

    def __init__(
        self,
        db: AsyncSession,
        transport: SessionTransport,
        clock: Clock = utcnow,
        ttl: timedelta = timedelta(days=settings.session_ttl_days),
        activity_debounce: timedelta = timedelta(
            minutes=settings.session_activity_debounce_minutes
        ),
    ):
        self.db = db
        self.transport = transport
        self.clock = clock
        self.ttl = ttl
        self.activity_debounce = activity_debounce

    async def create_session(
        self,
        user_id: str,
        tenant_id: str,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> Session:
        """Persist a new session and bind its token to the transport."""
        now = self.clock()
        expires_at = now + self.ttl
        token = secrets.token_urlsafe(TOKEN_BYTES)
        with _storage_errors("create"):
            record = await store.insert_session(
                self.db,
                session_id=token,
                user_id=user_id,
                tenant_id=tenant_id,
                created_at=now,
                expires_at=expires_at,
                user_agent=user_agent,
                ip_address=ip_address,
            )
        self.transport.set_token(token, expires_at)
        logger.info("Session created", extra={"user_id": user_id, "tenant_id": tenant_id})
        return record

    async def get_session(self) -> SessionData | None:
        """
        Resolve the bound session. Returns None when no token is bound, the
        record is gone, or it has expired; the three cases look the same.
        """
        token = self.transport.get_token()
        if not token:
            return None

        now = self.clock()
        with _storage_errors("get"):
            record = await store.get_session_by_id(self.db, token)
            if record is None:
                return None
            if record.expires_at <= now:
                await self._delete_expired(token)
                return None

            stale_before = now - self.activity_debounce
            if record.last_active_at < stale_before:
                if await store.touch_session(self.db, token, now, stale_before):
                    logger.debug("Session activity recorded", extra={"user_id": record.user_id})

        return SessionData(user_id=record.user_id, tenant_id=record.tenant_id)

    async def _delete_expired(self, token: str) -> None:
        """Delete in a separate transaction; the caller's session is not committed."""
        async with AsyncSession(self.db.bind) as cleanup:
            await store.delete_session(cleanup, token)
            await cleanup.commit()

    async def destroy_session(self) -> None:
        """Delete the bound session, if any. Safe to call when logged out."""
        token = self.transport.get_token()
        if token:
            with _storage_errors("destroy"):
                await store.delete_session(self.db, token)
            logger.info("Session destroyed")
        self.transport.delete_token()

    def current_session_id(self) -> str | None:
        return self.transport.get_token()

    async def list_sessions(self, user_id: str) -> list[Session]:
        with _storage_errors("list"):
            return await store.list_active_sessions(self.db, user_id, self.clock())

    async def revoke_session(self, user_id: str, session_id: str) -> None:
        """Revoke another of the user's sessions. The current one is refused."""
        if session_id == self.current_session_id():
            raise BadRequestError("Cannot revoke current session")
        with _storage_errors("revoke"):
            removed = await store.delete_user_session(self.db, user_id, session_id)
        if not removed:
            raise NotFoundError()

    async def revoke_other_sessions(self, user_id: str) -> int:
        with _storage_errors("revoke_others"):
            return await store.delete_other_sessions(
                self.db, user_id, self.current_session_id()
            )
