"""
Pytest fixtures: in-memory SQLite database, fake clock, in-memory session
transport and a recording mailer.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from datetime import datetime, timedelta

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from teamtodo.auth.session import SessionData
from teamtodo.database import Base
from teamtodo.models import Tenant, User

T0 = datetime(2026, 3, 2, 12, 0, 0)


class FakeClock:
    """Callable clock pinned to a settable instant."""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class MemoryTransport:
    """Session transport that keeps the token in memory."""

    def __init__(self, token: str | None = None):
        self.token = token
        self.expires_at: datetime | None = None
        self.deleted = 0

    def get_token(self) -> str | None:
        return self.token

    def set_token(self, token: str, expires_at: datetime) -> None:
        self.token = token
        self.expires_at = expires_at

    def delete_token(self) -> None:
        self.token = None
        self.deleted += 1


class RecordingMailer:
    """Mailer double; addresses in fail_for are rejected."""

    def __init__(self, fail_for=(), raise_for=()):
        self.sent: list[tuple[str, str, str]] = []
        self.fail_for = set(fail_for)
        self.raise_for = set(raise_for)

    async def send(self, to: str, subject: str, body: str) -> bool:
        if to in self.raise_for:
            raise ConnectionError("smtp down")
        if to in self.fail_for:
            return False
        self.sent.append((to, subject, body))
        return True


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def make_user(session_maker):
    """Create a user (and a new tenant unless tenant_id is given); returns SessionData."""

    async def _make_user(
        email: str,
        tenant_id: str | None = None,
        reminders: bool = True,
    ) -> SessionData:
        async with session_maker() as session:
            if tenant_id is None:
                tenant = Tenant(name=f"Tenant of {email}", created_at=T0)
                session.add(tenant)
                await session.flush()
                tenant_id = tenant.id
            user = User(
                tenant_id=tenant_id,
                email=email,
                password_hash="not-a-real-hash",
                email_reminders_enabled=reminders,
                created_at=T0,
            )
            session.add(user)
            await session.commit()
            return SessionData(user_id=user.id, tenant_id=tenant_id)

    return _make_user
