"""
WebSocket change feed.

Accepts connections at /ws/ui/{user_id}. On connect the client receives the
subject's current state, then a ui/changed notification after every
successful write to that subject (modify_ui, state PUT, reset).

Protocol:
  Server -> Client:  {"jsonrpc": "2.0", "method": "ui/state",   "params": UIState}
                     {"jsonrpc": "2.0", "method": "ui/changed", "params": {userId, result}}
                     {"type": "pong"}
  Client -> Server:  {"type": "ping"}   (anything else is ignored)
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from dynamic_todo.services.change_feed import ChangeFeed
from uikernel.store import UIStateStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["websocket"])


@router.websocket("/ws/ui/{user_id}")
async def ui_websocket(websocket: WebSocket, user_id: str) -> None:
    """Push UI changes for one subject to the client."""
    store: UIStateStore = websocket.app.state.store
    feed: ChangeFeed = websocket.app.state.feed

    await websocket.accept()
    logger.info("ws: accepted user_id=%s", user_id)

    async def forward(notification: dict[str, Any]) -> None:
        await websocket.send_text(json.dumps(notification))

    sub_id = feed.subscribe(user_id, forward)
    try:
        state = await store.load(user_id)
        if state is not None:
            await websocket.send_text(json.dumps({"jsonrpc": "2.0", "method": "ui/state", "params": state.to_dict()}))

        while True:
            raw = await websocket.receive_text()
            try:
                msg = json.loads(raw)
            except json.JSONDecodeError:
                logger.debug("ws: ignoring non-JSON message for user_id=%s", user_id)
                continue
            if isinstance(msg, dict) and msg.get("type") == "ping":
                await websocket.send_text(json.dumps({"type": "pong"}))
    except WebSocketDisconnect:
        logger.info("ws: disconnected user_id=%s", user_id)
    finally:
        feed.unsubscribe(sub_id)
