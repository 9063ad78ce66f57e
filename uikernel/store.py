"""
UI Kernel: Versioned State Store

Sits between the pure patch engine and persistence. Holds one UIState record
per subject and guards writes with an optimistic version check: a write names
the version it was computed from and succeeds only if that is still the
stored version. No locks, no merging; the loser of a race reloads and retries.

The compare-and-write itself is the storage backend's job (swap), so it can
be atomic where the backend allows it (a conditional UPDATE in Postgres).
"""

from __future__ import annotations

import copy
import logging
import uuid
from typing import Any

from uikernel.errors import NotFoundError, VersionConflictError
from uikernel.types import (
    INITIAL_UI_VERSION,
    MAX_HISTORY_ENTRIES,
    ChangeLog,
    UIState,
    default_tree,
    now_iso,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Storage protocol
# ---------------------------------------------------------------------------


class StateStorage:
    """
    Abstract storage interface.
    Implement with Postgres for production, or in-memory for tests.

    Records are UIState.to_dict() / ChangeLog.to_dict() payloads.
    """

    async def get(self, user_id: str) -> dict[str, Any] | None:
        """Fetch a subject's state record. Returns None if not found."""
        raise NotImplementedError

    async def create(self, user_id: str, record: dict[str, Any]) -> bool:
        """Insert a state record only if the subject has none. Returns whether it was written."""
        raise NotImplementedError

    async def swap(self, user_id: str, expected_version: int, record: dict[str, Any]) -> bool:
        """
        Overwrite the record only if the stored version equals expected_version.
        Returns False, writing nothing, otherwise (including when absent).
        """
        raise NotImplementedError

    async def delete(self, user_id: str) -> None:
        """Remove a subject's state and history."""
        raise NotImplementedError

    async def append_change(self, user_id: str, entry: dict[str, Any]) -> None:
        """Record a change-log entry."""
        raise NotImplementedError

    async def list_changes(self, user_id: str, limit: int) -> list[dict[str, Any]]:
        """Newest-first change-log entries, at most `limit`."""
        raise NotImplementedError

    async def count_changes(self, user_id: str) -> int:
        raise NotImplementedError


class MemoryStorage(StateStorage):
    """In-memory storage for testing and DB-less runs."""

    def __init__(self) -> None:
        self.states: dict[str, dict[str, Any]] = {}
        self.changes: dict[str, list[dict[str, Any]]] = {}

    async def get(self, user_id: str) -> dict[str, Any] | None:
        record = self.states.get(user_id)
        return copy.deepcopy(record) if record is not None else None

    async def create(self, user_id: str, record: dict[str, Any]) -> bool:
        if user_id in self.states:
            return False
        self.states[user_id] = copy.deepcopy(record)
        return True

    async def swap(self, user_id: str, expected_version: int, record: dict[str, Any]) -> bool:
        current = self.states.get(user_id)
        if current is None or current["version"] != expected_version:
            return False
        self.states[user_id] = copy.deepcopy(record)
        return True

    async def delete(self, user_id: str) -> None:
        self.states.pop(user_id, None)
        self.changes.pop(user_id, None)

    async def append_change(self, user_id: str, entry: dict[str, Any]) -> None:
        entries = self.changes.setdefault(user_id, [])
        entries.insert(0, copy.deepcopy(entry))
        del entries[MAX_HISTORY_ENTRIES:]

    async def list_changes(self, user_id: str, limit: int) -> list[dict[str, Any]]:
        return copy.deepcopy(self.changes.get(user_id, [])[:limit])

    async def count_changes(self, user_id: str) -> int:
        return len(self.changes.get(user_id, []))


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class UIStateStore:
    """
    Per-subject UI state with optimistic concurrency.

    Versions start at 1 and every successful save or reset moves them up by
    exactly one.
    """

    def __init__(self, storage: StateStorage):
        self._storage = storage

    @property
    def storage(self) -> StateStorage:
        return self._storage

    async def load(self, user_id: str) -> UIState | None:
        record = await self._storage.get(user_id)
        return UIState.from_dict(record) if record is not None else None

    async def initialize(self, user_id: str) -> UIState:
        """Create the default record for a subject unless one already exists."""
        existing = await self.load(user_id)
        if existing is not None:
            return existing

        state = UIState(
            version=INITIAL_UI_VERSION,
            user_id=user_id,
            tree=default_tree(),
            last_modified=now_iso(),
        )
        if await self._storage.create(user_id, state.to_dict()):
            logger.info("store: initialized user_id=%s", user_id)
            return state

        # Another caller created it between our read and insert
        existing = await self.load(user_id)
        if existing is None:
            raise NotFoundError("User", user_id)
        return existing

    async def save(self, user_id: str, tree: dict[str, Any], expected_version: int) -> UIState:
        """
        Persist `tree` as version expected_version + 1.

        Raises NotFoundError if the subject has no state, VersionConflictError
        if the stored version is no longer expected_version. Nothing is
        written on failure.
        """
        new_state = UIState(
            version=expected_version + 1,
            user_id=user_id,
            tree=tree,
            last_modified=now_iso(),
        )
        if await self._storage.swap(user_id, expected_version, new_state.to_dict()):
            logger.info("store: saved user_id=%s version=%d", user_id, new_state.version)
            return new_state

        raise await self._write_failure(user_id, expected_version)

    async def reset(self, user_id: str) -> UIState:
        """
        Replace a subject's tree with the default at current version + 1 (or 1).

        Goes through the same version check as save: a write landing between
        the read and the reset raises VersionConflictError and the reset
        writes nothing. A subject with no state is created at version 1;
        losing that insert to a concurrent one is a conflict against version 0.
        """
        current = await self.load(user_id)

        if current is None:
            state = UIState(version=INITIAL_UI_VERSION, user_id=user_id, tree=default_tree(), last_modified=now_iso())
            if not await self._storage.create(user_id, state.to_dict()):
                raise await self._write_failure(user_id, 0)
            logger.info("store: reset user_id=%s version=%d", user_id, state.version)
            return state

        state = UIState(version=current.version + 1, user_id=user_id, tree=default_tree(), last_modified=now_iso())
        if not await self._storage.swap(user_id, current.version, state.to_dict()):
            raise await self._write_failure(user_id, current.version)

        try:
            await self.record_change(user_id, "Reset UI to default", current.tree, state.tree, triggered_by="reset")
        except Exception:
            logger.warning("store: history write failed after reset user_id=%s", user_id, exc_info=True)
        logger.info("store: reset user_id=%s version=%d", user_id, state.version)
        return state

    async def _write_failure(self, user_id: str, expected_version: int) -> NotFoundError | VersionConflictError:
        current = await self._storage.get(user_id)
        if current is None:
            return NotFoundError("User", user_id)

        logger.warning(
            "store: version conflict user_id=%s expected=%d actual=%d",
            user_id,
            expected_version,
            current["version"],
        )
        return VersionConflictError(expected_version, current["version"])

    async def record_change(
        self,
        user_id: str,
        description: str,
        before_tree: dict[str, Any],
        after_tree: dict[str, Any],
        triggered_by: str | None = None,
    ) -> ChangeLog:
        entry = ChangeLog(
            id=f"chg_{uuid.uuid4().hex[:12]}",
            timestamp=now_iso(),
            description=description,
            before_tree=before_tree,
            after_tree=after_tree,
            triggered_by=triggered_by,
        )
        await self._storage.append_change(user_id, entry.to_dict())
        return entry

    async def history(self, user_id: str, limit: int = 20) -> list[ChangeLog]:
        """Newest-first change history."""
        records = await self._storage.list_changes(user_id, max(limit, 0))
        return [ChangeLog.from_dict(r) for r in records]

    async def history_count(self, user_id: str) -> int:
        return await self._storage.count_changes(user_id)
