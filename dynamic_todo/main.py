"""
Dynamic Todo FastAPI application.

Entry point for the API server.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from dynamic_todo import db
from dynamic_todo.config import settings
from dynamic_todo.routes import mcp as mcp_routes
from dynamic_todo.routes import ui as ui_routes
from dynamic_todo.routes import ws as ws_routes
from dynamic_todo.services.change_feed import ChangeFeed
from dynamic_todo.services.mcp_server import ToolServer
from dynamic_todo.services.tools import UITools
from uikernel.errors import UIError
from uikernel.postgres_storage import PostgresStorage
from uikernel.registry import default_registry
from uikernel.store import MemoryStorage, StateStorage, UIStateStore

logger = logging.getLogger(__name__)


def configure_services(app: FastAPI, storage: StateStorage, *, strict_validation: bool = False) -> None:
    """
    Build the registry, store, tools and tool server and hang them on app.state.

    Called from the lifespan with the configured backend, and directly by
    tests with a MemoryStorage.
    """
    registry = default_registry()
    store = UIStateStore(storage)
    feed = ChangeFeed()
    tools = UITools(store, registry, strict_validation=strict_validation, notifier=feed.publish)

    app.state.registry = registry
    app.state.store = store
    app.state.feed = feed
    app.state.tools = tools
    app.state.tool_server = ToolServer(tools)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI application.

    Handles startup and shutdown logic:
    - Open the database pool when DATABASE_URL is set, else use memory storage
    - Seed the configured subjects with the default tree
    - Let pending change notifications finish, then close the database pool
    """
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    storage: StateStorage
    if settings.DATABASE_URL:
        storage = PostgresStorage(await db.init_pool())
        logger.info("Database pool initialized")
    else:
        storage = MemoryStorage()
        logger.info("DATABASE_URL not set, using in-memory storage")

    configure_services(app, storage, strict_validation=settings.STRICT_TREE_VALIDATION)

    for user_id in settings.seed_subjects:
        await app.state.store.initialize(user_id)
    logger.info("Seeded %d subject(s)", len(settings.seed_subjects))

    yield

    await app.state.tools.drain_notifications()
    await db.close_pool()
    logger.info("Database pool closed")


app = FastAPI(
    title="Dynamic Todo",
    docs_url=None,
    redoc_url=None,
    lifespan=lifespan,
)


@app.exception_handler(UIError)
async def ui_error_handler(request: Request, exc: UIError) -> JSONResponse:
    """Domain errors become {error, code, suggestion} with the error's status."""
    if exc.status_code >= 500:
        logger.error("Unhandled %s on %s: %s", exc.code, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "code": exc.code, "suggestion": exc.suggestion},
    )


# Register routes
app.include_router(ui_routes.router)
app.include_router(mcp_routes.router)
app.include_router(ws_routes.router)


@app.get("/health")
async def health():
    """Health check endpoint for uptime monitoring."""
    return {"status": "ok"}
