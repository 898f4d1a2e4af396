"""Tests for tenant-scoped get/update/delete helpers."""

import pytest
from sqlalchemy import select

from teamtodo.auth.tenant_guard import scoped_delete, scoped_get, scoped_update, tenant_clause
from teamtodo.errors import NotFoundError
from teamtodo.models import Comment, Label, Notification, Tenant, Todo, TodoTemplate
from teamtodo.storage.repositories import create_todo, list_todos


@pytest.fixture
async def two_tenants(make_user):
    alice = await make_user("alice@one.example")
    bob = await make_user("bob@two.example")
    return alice, bob


async def _reload(db, model, object_id):
    result = await db.execute(
        select(model).where(model.id == object_id).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def test_scoped_get_hides_other_tenant(db, two_tenants):
    """Foreign id and missing id produce the same generic error."""
    alice, bob = two_tenants
    todo = await create_todo(db, alice, "Alice only")

    assert (await scoped_get(db, Todo, todo.id, alice)).title == "Alice only"
    with pytest.raises(NotFoundError) as foreign:
        await scoped_get(db, Todo, todo.id, bob)
    with pytest.raises(NotFoundError) as missing:
        await scoped_get(db, Todo, "00000000-0000-0000-0000-000000000000", bob)
    assert str(foreign.value) == str(missing.value) == "Not found or no permission"


async def test_scoped_update_from_other_tenant_changes_nothing(db, two_tenants):
    """Tenant 2 updating a tenant 1 todo affects zero rows."""
    alice, bob = two_tenants
    todo = await create_todo(db, alice, "Original")
    await db.commit()

    with pytest.raises(NotFoundError):
        await scoped_update(db, Todo, todo.id, bob, title="Hijacked")
    await db.commit()
    assert (await _reload(db, Todo, todo.id)).title == "Original"

    await scoped_update(db, Todo, todo.id, alice, title="Renamed")
    assert (await _reload(db, Todo, todo.id)).title == "Renamed"


async def test_scoped_update_with_no_values_still_checks_tenant(db, two_tenants):
    alice, bob = two_tenants
    todo = await create_todo(db, alice, "Original")
    with pytest.raises(NotFoundError):
        await scoped_update(db, Todo, todo.id, bob)
    await scoped_update(db, Todo, todo.id, alice)


async def test_scoped_delete_from_other_tenant_keeps_row(db, two_tenants):
    alice, bob = two_tenants
    todo = await create_todo(db, alice, "Keep me")

    with pytest.raises(NotFoundError):
        await scoped_delete(db, Todo, todo.id, bob)
    assert await _reload(db, Todo, todo.id) is not None

    await scoped_delete(db, Todo, todo.id, alice)
    assert await _reload(db, Todo, todo.id) is None


async def test_guard_applies_to_every_tenant_entity(db, two_tenants):
    """Labels, templates, comments and notifications are isolated the same way."""
    alice, bob = two_tenants
    todo = await create_todo(db, alice, "Parent")
    objects = [
        Label(tenant_id=alice.tenant_id, name="urgent", color="#ff0000"),
        TodoTemplate(
            tenant_id=alice.tenant_id, name="Weekly", title="Weekly sync", created_by_id=alice.user_id
        ),
        Comment(tenant_id=alice.tenant_id, todo_id=todo.id, author_id=alice.user_id, content="hi"),
        Notification(
            tenant_id=alice.tenant_id, user_id=alice.user_id, type="ASSIGNED", message="x"
        ),
    ]
    db.add_all(objects)
    await db.flush()

    for obj in objects:
        model = type(obj)
        with pytest.raises(NotFoundError):
            await scoped_get(db, model, obj.id, bob)
        with pytest.raises(NotFoundError):
            await scoped_delete(db, model, obj.id, bob)
        assert (await scoped_get(db, model, obj.id, alice)).id == obj.id


async def test_guard_rejects_unscoped_models(db, two_tenants):
    alice, _ = two_tenants
    with pytest.raises(TypeError):
        tenant_clause(Tenant, alice)


async def test_list_only_returns_own_tenant(db, two_tenants):
    alice, bob = two_tenants
    await create_todo(db, alice, "A1")
    await create_todo(db, alice, "A2")
    await create_todo(db, bob, "B1")

    assert sorted(t.title for t in await list_todos(db, alice)) == ["A1", "A2"]
    assert [t.title for t in await list_todos(db, bob)] == ["B1"]
