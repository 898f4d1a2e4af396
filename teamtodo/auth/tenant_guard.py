"""Tenant isolation for caller-supplied object ids.

Every fetch, update or delete of a tenant-owned row combines ``id = X`` with
``tenant_id = caller tenant`` in a single statement. Zero matching rows is
reported as NotFoundError whether the row is missing or belongs to another
tenant.
"""

from typing import Any, TypeVar

from sqlalchemy import ColumnElement, delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from teamtodo.auth.session import SessionData
from teamtodo.errors import NotFoundError

ModelT = TypeVar("ModelT")


def _require_tenant_column(model: type) -> None:
    if not hasattr(model, "tenant_id"):
        raise TypeError(f"{model.__name__} is not tenant scoped")


def tenant_clause(model: type, current: SessionData) -> ColumnElement[bool]:
    """Equality predicate restricting model rows to the caller's tenant."""
    _require_tenant_column(model)
    return model.tenant_id == current.tenant_id


def _scoped_where(model: type, object_id: str, current: SessionData) -> tuple:
    return (model.id == object_id, tenant_clause(model, current))


async def scoped_get(
    db: AsyncSession, model: type[ModelT], object_id: str, current: SessionData
) -> ModelT:
    """Fetch one row owned by the caller's tenant."""
    result = await db.execute(
        select(model)
        .where(*_scoped_where(model, object_id, current))
        .execution_options(populate_existing=True)
    )
    obj = result.scalar_one_or_none()
    if obj is None:
        raise NotFoundError()
    return obj


async def scoped_update(
    db: AsyncSession,
    model: type,
    object_id: str,
    current: SessionData,
    **values: Any,
) -> None:
    """UPDATE ... WHERE id = X AND tenant_id = T; zero rows is NotFoundError."""
    if not values:
        # Empty patch still reports NotFoundError for foreign ids
        await scoped_get(db, model, object_id, current)
        return
    result = await db.execute(
        update(model)
        .where(*_scoped_where(model, object_id, current))
        .values(**values)
        .execution_options(synchronize_session="fetch")
    )
    if result.rowcount == 0:
        raise NotFoundError()


async def scoped_delete(
    db: AsyncSession, model: type, object_id: str, current: SessionData
) -> None:
    """DELETE ... WHERE id = X AND tenant_id = T; zero rows is NotFoundError."""
    result = await db.execute(
        delete(model)
        .where(*_scoped_where(model, object_id, current))
        .execution_options(synchronize_session="fetch")
    )
    if result.rowcount == 0:
        raise NotFoundError()
