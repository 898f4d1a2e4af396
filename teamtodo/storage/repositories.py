"""Repository functions for tenants, users and todos."""

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from teamtodo.auth.session import SessionData
from teamtodo.auth.tenant_guard import scoped_delete, scoped_get, scoped_update, tenant_clause
from teamtodo.models import Tenant, Todo, User
from teamtodo.models.todo import STATUS_PENDING
from teamtodo.models.user import ROLE_ADMIN


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Find user by email (globally unique)."""
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def get_user_by_id(db: AsyncSession, user_id: str) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def create_tenant_with_admin(
    db: AsyncSession, tenant_name: str, email: str, password_hash: str
) -> tuple[Tenant, User]:
    """Create a tenant and its first (ADMIN) user in the current transaction."""
    tenant = Tenant(name=tenant_name)
    db.add(tenant)
    await db.flush()
    user = User(
        tenant_id=tenant.id,
        email=email,
        password_hash=password_hash,
        role=ROLE_ADMIN,
    )
    db.add(user)
    await db.flush()
    return tenant, user


async def set_email_reminders(db: AsyncSession, user_id: str, enabled: bool) -> User | None:
    user = await get_user_by_id(db, user_id)
    if user is None:
        return None
    user.email_reminders_enabled = enabled
    await db.flush()
    return user


async def list_todos(
    db: AsyncSession, current: SessionData, status: str | None = None
) -> list[Todo]:
    """Todos in the caller's tenant, newest first."""
    stmt = select(Todo).where(tenant_clause(Todo, current))
    if status:
        stmt = stmt.where(Todo.status == status)
    result = await db.execute(stmt.order_by(Todo.created_at.desc()))
    return list(result.scalars().all())


async def create_todo(
    db: AsyncSession,
    current: SessionData,
    title: str,
    description: str | None = None,
    due_date: datetime | None = None,
) -> Todo:
    """Create a todo owned by the caller in the caller's tenant."""
    todo = Todo(
        tenant_id=current.tenant_id,
        created_by_id=current.user_id,
        title=title,
        description=description,
        due_date=due_date,
        status=STATUS_PENDING,
    )
    db.add(todo)
    await db.flush()
    return todo


async def get_todo(db: AsyncSession, todo_id: str, current: SessionData) -> Todo:
    """Get todo by ID (tenant-scoped)."""
    return await scoped_get(db, Todo, todo_id, current)


async def update_todo(
    db: AsyncSession, todo_id: str, current: SessionData, **values
) -> Todo:
    """Update a todo (tenant-scoped). Reminder markers are never cleared here."""
    await scoped_update(db, Todo, todo_id, current, **values)
    return await scoped_get(db, Todo, todo_id, current)


async def delete_todo(db: AsyncSession, todo_id: str, current: SessionData) -> None:
    """Delete todo (tenant-scoped)."""
    await scoped_delete(db, Todo, todo_id, current)
