"""TeamTodo FastAPI application."""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from teamtodo.api.auth import router as auth_router
from teamtodo.api.cron import router as cron_router
from teamtodo.api.health import router as health_router
from teamtodo.api.sessions import router as sessions_router
from teamtodo.api.settings import router as settings_router
from teamtodo.api.todos import router as todos_router
from teamtodo.config import settings
from teamtodo.errors import TeamTodoError

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="TeamTodo",
    description="Multi-tenant todos with session auth and reminder emails",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.app_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TeamTodoError)
async def teamtodo_error_handler(request: Request, exc: TeamTodoError):
    """Map domain errors to generic JSON responses."""
    if exc.status_code >= 500:
        logger.error("Request failed", extra={"path": request.url.path, "error": exc.detail})
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


app.include_router(health_router, tags=["Health"])
app.include_router(auth_router, prefix="/api/auth", tags=["Auth"])
app.include_router(todos_router, prefix="/api", tags=["Todos"])
app.include_router(sessions_router, prefix="/api", tags=["Sessions"])
app.include_router(settings_router, prefix="/api", tags=["Settings"])
app.include_router(cron_router, prefix="/api", tags=["Cron"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {"service": "TeamTodo", "version": "0.1.0", "docs": "/docs"}
