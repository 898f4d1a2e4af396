"""Tests for session issuance, validation, debounce and destruction."""

from datetime import timedelta

import pytest
from fastapi import Response
from sqlalchemy import delete, select
from sqlalchemy.exc import OperationalError
from starlette.requests import Request

from teamtodo.auth.session import CookieTransport, SessionManager
from teamtodo.errors import BadRequestError, NotFoundError, StorageError
from teamtodo.models import Session, Tenant, User

from conftest import T0, MemoryTransport


def _manager(db, clock, transport=None):
    return SessionManager(db, transport or MemoryTransport(), clock=clock)


async def _stored(db, token):
    result = await db.execute(
        select(Session).where(Session.id == token).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def test_create_session_persists_and_binds_token(db, clock, make_user):
    """New session expires 7 days after creation and its token is bound."""
    alice = await make_user("alice@example.com")
    transport = MemoryTransport()
    record = await _manager(db, clock, transport).create_session(
        alice.user_id, alice.tenant_id, user_agent="Mozilla/5.0 Firefox", ip_address="10.0.0.1"
    )

    assert transport.token == record.id
    assert transport.expires_at == T0 + timedelta(days=7)
    stored = await _stored(db, record.id)
    assert stored.expires_at == T0 + timedelta(days=7)
    assert stored.last_active_at == T0
    assert stored.ip_address == "10.0.0.1"


async def test_session_tokens_are_unique_and_long(db, clock, make_user):
    """Tokens come from a CSPRNG and are not sequential."""
    alice = await make_user("alice@example.com")
    manager = _manager(db, clock)
    first = await manager.create_session(alice.user_id, alice.tenant_id)
    second = await manager.create_session(alice.user_id, alice.tenant_id)
    assert first.id != second.id
    assert len(first.id) >= 43


async def test_get_session_without_token_is_none(db, clock):
    """No bound token means unauthenticated, not an error."""
    assert await _manager(db, clock).get_session() is None


async def test_get_session_unknown_token_is_none(db, clock):
    """A token with no record looks the same as no session."""
    assert await _manager(db, clock, MemoryTransport("forged-token")).get_session() is None


async def test_get_session_returns_identity(db, clock, make_user):
    """Valid session resolves to user and tenant ids."""
    alice = await make_user("alice@example.com")
    transport = MemoryTransport()
    manager = _manager(db, clock, transport)
    await manager.create_session(alice.user_id, alice.tenant_id)

    clock.advance(days=6, hours=23)
    current = await manager.get_session()
    assert current.user_id == alice.user_id
    assert current.tenant_id == alice.tenant_id


async def test_session_expires_exactly_at_expires_at(db, clock, make_user):
    """At now == expires_at the session is already expired and gets deleted."""
    alice = await make_user("alice@example.com")
    transport = MemoryTransport()
    manager = _manager(db, clock, transport)
    record = await manager.create_session(alice.user_id, alice.tenant_id)

    clock.advance(days=7)
    assert await manager.get_session() is None
    assert await _stored(db, record.id) is None


async def test_expired_cleanup_does_not_commit_callers_work(db, clock, make_user):
    """The expired row is removed without committing other pending changes."""
    alice = await make_user("alice@example.com")
    manager = _manager(db, clock, MemoryTransport())
    record = await manager.create_session(alice.user_id, alice.tenant_id)
    await db.commit()
    token = record.id

    clock.advance(days=8)
    db.add(Tenant(name="Pending tenant", created_at=T0))
    assert await manager.get_session() is None
    await db.rollback()

    result = await db.execute(select(Tenant).where(Tenant.name == "Pending tenant"))
    assert result.scalar_one_or_none() is None
    assert await _stored(db, token) is None


async def test_expiry_is_not_sliding(db, clock, make_user):
    """Activity does not extend expiry: created at T, queried at T+8d is None."""
    alice = await make_user("alice@example.com")
    transport = MemoryTransport()
    manager = _manager(db, clock, transport)
    await manager.create_session(alice.user_id, alice.tenant_id)

    clock.advance(days=6)
    assert await manager.get_session() is not None
    clock.advance(days=2)
    assert await manager.get_session() is None


async def test_activity_write_is_debounced(db, clock, make_user):
    """Two reads within 5 minutes produce no write; after 5 minutes one write."""
    alice = await make_user("alice@example.com")
    transport = MemoryTransport()
    manager = _manager(db, clock, transport)
    record = await manager.create_session(alice.user_id, alice.tenant_id)

    clock.advance(minutes=2)
    await manager.get_session()
    clock.advance(minutes=2)
    await manager.get_session()
    assert (await _stored(db, record.id)).last_active_at == T0

    clock.advance(minutes=2)
    await manager.get_session()
    touched_at = T0 + timedelta(minutes=6)
    assert (await _stored(db, record.id)).last_active_at == touched_at

    clock.advance(minutes=1)
    await manager.get_session()
    assert (await _stored(db, record.id)).last_active_at == touched_at


async def test_destroy_session_removes_record_and_binding(db, clock, make_user):
    """Logout deletes the store record and the transport binding."""
    alice = await make_user("alice@example.com")
    transport = MemoryTransport()
    manager = _manager(db, clock, transport)
    record = await manager.create_session(alice.user_id, alice.tenant_id)

    await manager.destroy_session()
    assert transport.token is None
    assert await _stored(db, record.id) is None
    assert await manager.get_session() is None


async def test_destroy_session_is_idempotent(db, clock):
    """Destroying with no session is a no-op that still clears the binding."""
    transport = MemoryTransport()
    manager = _manager(db, clock, transport)
    await manager.destroy_session()
    await manager.destroy_session()
    assert transport.deleted == 2


async def test_sessions_cascade_with_user(db, clock, make_user):
    """Deleting the owning user removes its sessions."""
    alice = await make_user("alice@example.com")
    record = await _manager(db, clock).create_session(alice.user_id, alice.tenant_id)
    await db.commit()

    await db.execute(delete(User).where(User.id == alice.user_id))
    await db.commit()
    assert await _stored(db, record.id) is None


async def test_revoke_session_only_for_owner(db, clock, make_user):
    """A user cannot revoke someone else's session, nor the current one."""
    alice = await make_user("alice@example.com")
    bob = await make_user("bob@example.com", tenant_id=alice.tenant_id)
    bob_session = await _manager(db, clock).create_session(bob.user_id, bob.tenant_id)

    transport = MemoryTransport()
    manager = _manager(db, clock, transport)
    current = await manager.create_session(alice.user_id, alice.tenant_id)

    with pytest.raises(NotFoundError):
        await manager.revoke_session(alice.user_id, bob_session.id)
    with pytest.raises(BadRequestError):
        await manager.revoke_session(alice.user_id, current.id)
    assert await _stored(db, bob_session.id) is not None


async def test_revoke_other_sessions_keeps_current(db, clock, make_user):
    """Signing out elsewhere leaves the current session intact."""
    alice = await make_user("alice@example.com")
    other = _manager(db, clock)
    await other.create_session(alice.user_id, alice.tenant_id)
    await other.create_session(alice.user_id, alice.tenant_id)

    transport = MemoryTransport()
    manager = _manager(db, clock, transport)
    current = await manager.create_session(alice.user_id, alice.tenant_id)

    assert await manager.revoke_other_sessions(alice.user_id) == 2
    remaining = await manager.list_sessions(alice.user_id)
    assert [s.id for s in remaining] == [current.id]


class _BrokenDb:
    """Stands in for an AsyncSession whose database is unreachable."""

    async def execute(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    def add(self, obj):
        pass

    async def flush(self):
        raise OperationalError("INSERT", {}, Exception("connection refused"))


async def test_store_failure_raises_storage_error(clock):
    """Store outages propagate as StorageError instead of failing open."""
    manager = SessionManager(_BrokenDb(), MemoryTransport("some-token"), clock=clock)
    with pytest.raises(StorageError):
        await manager.get_session()
    with pytest.raises(StorageError):
        await manager.create_session("u", "t")


def test_cookie_transport_sets_secure_attributes():
    """Cookie is HttpOnly, Secure, SameSite=Lax and expires with the session."""
    request = Request({"type": "http", "headers": [(b"cookie", b"session=abc123")]})
    response = Response()
    transport = CookieTransport(request, response, cookie_name="session", secure=True)

    assert transport.get_token() == "abc123"
    transport.set_token("newtoken", T0 + timedelta(days=7))
    header = response.headers["set-cookie"]
    assert header.startswith("session=newtoken;")
    assert "HttpOnly" in header
    assert "Secure" in header
    assert "SameSite=lax" in header
    assert "expires=Mon, 09 Mar 2026 12:00:00 GMT" in header
