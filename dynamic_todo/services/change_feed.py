"""
Change feed: fan-out of ui/changed notifications to live subscribers.

Subscribers register per subject (or "*" for every subject) with an async
callback. Delivery is best-effort: a callback that raises is logged and
dropped, and publishing never raises into the caller that saved the change.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)

Subscriber = Callable[[dict[str, Any]], Awaitable[None]]

ALL_SUBJECTS = "*"


def make_notification(user_id: str, result: dict[str, Any]) -> dict[str, Any]:
    """JSON-RPC notification announcing a new tree for `user_id`."""
    return {
        "jsonrpc": "2.0",
        "method": "ui/changed",
        "params": {"userId": user_id, "result": result},
    }


class ChangeFeed:
    def __init__(self) -> None:
        self._subscribers: dict[str, dict[str, Subscriber]] = {}

    def subscribe(self, user_id: str, callback: Subscriber) -> str:
        """Register a callback. Returns a subscription id for unsubscribe()."""
        sub_id = f"sub_{uuid.uuid4().hex[:12]}"
        self._subscribers.setdefault(user_id, {})[sub_id] = callback
        logger.info("feed: subscribed %s to user_id=%s", sub_id, user_id)
        return sub_id

    def unsubscribe(self, sub_id: str) -> None:
        for user_id, subs in list(self._subscribers.items()):
            if subs.pop(sub_id, None) is not None:
                logger.info("feed: unsubscribed %s from user_id=%s", sub_id, user_id)
            if not subs:
                del self._subscribers[user_id]

    def subscriber_count(self, user_id: str | None = None) -> int:
        if user_id is None:
            return sum(len(s) for s in self._subscribers.values())
        return len(self._subscribers.get(user_id, {}))

    async def publish(self, user_id: str, result: dict[str, Any]) -> int:
        """Deliver a ui/changed notification. Returns how many callbacks succeeded."""
        notification = make_notification(user_id, result)
        targets = list(self._subscribers.get(user_id, {}).items())
        if user_id != ALL_SUBJECTS:
            targets += list(self._subscribers.get(ALL_SUBJECTS, {}).items())

        delivered = 0
        for sub_id, callback in targets:
            try:
                await callback(notification)
                delivered += 1
            except Exception:
                logger.warning("feed: dropping subscriber %s for user_id=%s", sub_id, user_id, exc_info=True)
                self.unsubscribe(sub_id)
        return delivered
