"""Repository functions for login sessions."""

from datetime import datetime

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from teamtodo.models import Session


async def insert_session(
    db: AsyncSession,
    session_id: str,
    user_id: str,
    tenant_id: str,
    created_at: datetime,
    expires_at: datetime,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> Session:
    """Persist a new session record."""
    record = Session(
        id=session_id,
        user_id=user_id,
        tenant_id=tenant_id,
        created_at=created_at,
        expires_at=expires_at,
        last_active_at=created_at,
        user_agent=user_agent,
        ip_address=ip_address,
    )
    db.add(record)
    await db.flush()
    return record


async def get_session_by_id(db: AsyncSession, session_id: str) -> Session | None:
    """Fetch a session record by token, bypassing the identity map."""
    result = await db.execute(
        select(Session)
        .where(Session.id == session_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def touch_session(
    db: AsyncSession, session_id: str, now: datetime, stale_before: datetime
) -> bool:
    """
    Set last_active_at = now only when the stored value is older than
    stale_before. Returns True if a row was written.
    """
    result = await db.execute(
        update(Session)
        .where(Session.id == session_id, Session.last_active_at < stale_before)
        .values(last_active_at=now)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount > 0


async def delete_session(db: AsyncSession, session_id: str) -> int:
    """Delete a session record; returns rows removed (0 if already gone)."""
    result = await db.execute(
        delete(Session)
        .where(Session.id == session_id)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount


async def list_active_sessions(
    db: AsyncSession, user_id: str, now: datetime
) -> list[Session]:
    """Unexpired sessions for a user, most recently active first."""
    result = await db.execute(
        select(Session)
        .where(Session.user_id == user_id, Session.expires_at > now)
        .order_by(Session.last_active_at.desc())
    )
    return list(result.scalars().all())


async def delete_user_session(db: AsyncSession, user_id: str, session_id: str) -> int:
    """Delete one session owned by user_id."""
    result = await db.execute(
        delete(Session)
        .where(Session.id == session_id, Session.user_id == user_id)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount


async def delete_other_sessions(
    db: AsyncSession, user_id: str, keep_session_id: str | None
) -> int:
    """Delete all of a user's sessions except keep_session_id."""
    stmt = delete(Session).where(Session.user_id == user_id)
    if keep_session_id is not None:
        stmt = stmt.where(Session.id != keep_session_id)
    result = await db.execute(stmt.execution_options(synchronize_session=False))
    return result.rowcount
