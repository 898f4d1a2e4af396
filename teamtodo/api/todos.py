"""Todo endpoints (tenant-scoped)."""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from teamtodo.auth.middleware import CurrentUserDep
from teamtodo.database import get_db
from teamtodo.schemas.todo import CreateTodoRequest, TodoResponse, UpdateTodoRequest
from teamtodo.storage.repositories import (
    create_todo,
    delete_todo,
    get_todo,
    list_todos,
    update_todo,
)

router = APIRouter()

NON_NULLABLE_FIELDS = ("title", "status")


@router.get("/todos", response_model=list[TodoResponse])
async def list_tenant_todos(
    current: CurrentUserDep,
    db: Annotated[AsyncSession, Depends(get_db)],
    todo_status: Annotated[
        Literal["PENDING", "COMPLETED"] | None, Query(alias="status")
    ] = None,
):
    """List todos in the caller's tenant."""
    return await list_todos(db, current, status=todo_status)


@router.post("/todos", response_model=TodoResponse, status_code=status.HTTP_201_CREATED)
async def create_tenant_todo(
    body: CreateTodoRequest,
    current: CurrentUserDep,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Create a todo owned by the caller."""
    return await create_todo(
        db, current, title=body.title, description=body.description, due_date=body.due_date
    )


@router.get("/todos/{todo_id}", response_model=TodoResponse)
async def get_tenant_todo(
    todo_id: str,
    current: CurrentUserDep,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    return await get_todo(db, todo_id, current)


@router.patch("/todos/{todo_id}", response_model=TodoResponse)
async def update_tenant_todo(
    todo_id: str,
    body: UpdateTodoRequest,
    current: CurrentUserDep,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Partial update; only fields present in the body change."""
    values = body.model_dump(exclude_unset=True)
    for name in NON_NULLABLE_FIELDS:
        if values.get(name, ...) is None:
            values.pop(name)
    return await update_todo(db, todo_id, current, **values)


@router.delete("/todos/{todo_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tenant_todo(
    todo_id: str,
    current: CurrentUserDep,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    await delete_todo(db, todo_id, current)
