"""Health endpoint."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from teamtodo.database import get_db
from teamtodo.errors import StorageError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health(db: Annotated[AsyncSession, Depends(get_db)]):
    """Liveness plus one database round trip; 503 when the database is unreachable."""
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Health check failed", extra={"error": str(e)})
        raise StorageError() from e
    return {"status": "ok", "database": "ok"}
