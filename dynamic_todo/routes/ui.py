"""UI state routes: read, overwrite and reset a tree, plus history and the component list."""

from __future__ import annotations

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Response, status
from fastapi.responses import JSONResponse

from dynamic_todo.config import settings
from dynamic_todo.dependencies import get_feed, get_registry, get_store
from dynamic_todo.models.ui import (
    ChangeLogResponse,
    ComponentListResponse,
    HistoryResponse,
    ResetRequest,
    SaveStateRequest,
    UIStateResponse,
)
from dynamic_todo.services.change_feed import ChangeFeed
from uikernel.errors import NotFoundError, VersionConflictError
from uikernel.registry import ComponentRegistry
from uikernel.store import UIStateStore
from uikernel.types import COMPONENT_CATEGORIES, DEFAULT_USER_ID, ModifyResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ui", tags=["ui"])

_NO_CACHE = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


async def _announce(feed: ChangeFeed, user_id: str, result: ModifyResult) -> None:
    delivered = await feed.publish(user_id, result.to_dict())
    logger.info("ui: announced %s to %d subscriber(s) for user_id=%s", result.description, delivered, user_id)


@router.get("/state", status_code=200)
async def get_state(
    response: Response,
    user_id: str = Query(default=DEFAULT_USER_ID, alias="userId"),
    store: UIStateStore = Depends(get_store),
) -> UIStateResponse:
    """Current tree and version for a subject."""
    state = await store.load(user_id)
    if state is None:
        raise NotFoundError("User", user_id)
    response.headers.update(_NO_CACHE)
    return UIStateResponse.from_state(state)


@router.put("/state", status_code=200, response_model=UIStateResponse)
async def put_state(
    req: SaveStateRequest,
    background_tasks: BackgroundTasks,
    store: UIStateStore = Depends(get_store),
    feed: ChangeFeed = Depends(get_feed),
):
    """
    Overwrite a subject's tree, guarded by the caller's version.

    A stale version returns 409 with both versions so the client can reload.
    """
    if not isinstance(req.tree.get("component"), str) or not req.tree["component"]:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="tree is required and must have a component",
        )

    try:
        state = await store.save(req.user_id, req.tree, req.version)
    except VersionConflictError as e:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"error": "Version conflict", "currentVersion": e.actual, "providedVersion": e.expected},
        )

    background_tasks.add_task(
        _announce,
        feed,
        req.user_id,
        ModifyResult(success=True, new_tree=state.tree, description="Replaced tree", version=state.version),
    )
    return UIStateResponse.from_state(state)


@router.post("/reset", status_code=200)
async def reset_state(
    req: ResetRequest,
    background_tasks: BackgroundTasks,
    store: UIStateStore = Depends(get_store),
    feed: ChangeFeed = Depends(get_feed),
) -> UIStateResponse:
    """Replace a subject's tree with the default one."""
    state = await store.reset(req.user_id)
    background_tasks.add_task(
        _announce,
        feed,
        req.user_id,
        ModifyResult(success=True, new_tree=state.tree, description="Reset UI to default", version=state.version),
    )
    return UIStateResponse.from_state(state)


@router.get("/history", status_code=200)
async def get_history(
    user_id: str = Query(default=DEFAULT_USER_ID, alias="userId"),
    limit: int = Query(default=settings.HISTORY_LIMIT_DEFAULT, ge=0),
    store: UIStateStore = Depends(get_store),
) -> HistoryResponse:
    """Newest-first change history, capped at HISTORY_LIMIT_MAX entries."""
    entries = await store.history(user_id, min(limit, settings.HISTORY_LIMIT_MAX))
    total = await store.history_count(user_id)
    return HistoryResponse(
        user_id=user_id,
        changes=[ChangeLogResponse.from_entry(e) for e in entries],
        total=total,
    )


@router.get("/components", status_code=200)
async def list_components(
    category: str | None = None,
    registry: ComponentRegistry = Depends(get_registry),
) -> ComponentListResponse:
    """Registered components, optionally filtered by category."""
    if category is None:
        return ComponentListResponse.from_details(registry.all())
    if category not in COMPONENT_CATEGORIES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown category '{category}'. Use one of: {', '.join(COMPONENT_CATEGORIES)}",
        )
    return ComponentListResponse.from_details(registry.by_category(category))
