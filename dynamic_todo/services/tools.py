"""
Tool operations exposed to the assistant.

get_current_tree, get_component_details and validate_tree are read-only.
modify_ui is the one operation with a persisted side effect:

  load (tree, version) -> apply_patch -> [strict: validate] -> save(version)
    -> record change -> schedule subscriber notification

History and notification failures are logged; once the save succeeds the
call succeeds. Notifications run as background tasks so a slow subscriber
never delays the result.

Results are JSON-compatible dicts in the camelCase wire format. Failures
leave as the kernel's domain errors (not_found, validation, version_conflict).
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from uikernel.errors import NotFoundError, ValidationError
from uikernel.patch import apply_patch
from uikernel.registry import ComponentRegistry
from uikernel.store import UIStateStore
from uikernel.types import ModifyResult
from uikernel.validator import validate_tree

logger = logging.getLogger(__name__)

Notifier = Callable[[str, dict[str, Any]], Awaitable[Any]]


class UITools:
    def __init__(
        self,
        store: UIStateStore,
        registry: ComponentRegistry,
        *,
        strict_validation: bool = False,
        notifier: Notifier | None = None,
    ):
        self.store = store
        self.registry = registry
        self.strict_validation = strict_validation
        self.notifier = notifier
        self._pending: set[asyncio.Task] = set()

    async def get_current_tree(self, user_id: str) -> dict[str, Any]:
        """The subject's current tree. NotFoundError if the subject has no state."""
        state = await self.store.load(user_id)
        if state is None:
            raise NotFoundError("User", user_id)
        return state.tree

    def get_component_details(self, component_name: str) -> dict[str, Any]:
        """Full registry entry for one component, examples included."""
        details = self.registry.get(component_name)
        if details is None:
            raise NotFoundError("Component", component_name)
        return details.to_dict()

    def validate_tree(self, tree: Any) -> dict[str, Any]:
        return validate_tree(tree, self.registry).to_dict()

    async def modify_ui(
        self,
        user_id: str,
        operation: str,
        path: str,
        component: dict[str, Any] | None = None,
        props: dict[str, Any] | None = None,
        version: int | None = None,
        triggered_by: str | None = None,
    ) -> dict[str, Any]:
        """
        Apply one patch operation to the subject's tree and persist it.

        `version` pins the expected version; when omitted the version read
        here is used, so a concurrent write between load and save still
        surfaces as a VersionConflictError.
        """
        current = await self.store.load(user_id)
        if current is None:
            raise NotFoundError("User", user_id)

        expected = version if version is not None else current.version

        patch = apply_patch(
            current.tree,
            operation,
            path,
            registry=self.registry,
            component=component,
            props=props,
        )

        if self.strict_validation:
            check = validate_tree(patch.tree, self.registry)
            if not check.valid:
                first = check.errors[0]
                raise ValidationError(
                    f"Resulting tree is invalid: {first.message} ({len(check.errors)} error(s))",
                    field="tree",
                    suggestion=first.suggestion,
                )

        saved = await self.store.save(user_id, patch.tree, expected)
        try:
            await self.store.record_change(user_id, patch.description, current.tree, saved.tree, triggered_by)
        except Exception:
            # the save stands even when the change log is unavailable
            logger.warning("tools: history write failed user_id=%s version=%d", user_id, saved.version, exc_info=True)

        result = ModifyResult(success=True, new_tree=saved.tree, description=patch.description, version=saved.version)
        logger.info("tools: modify_ui user_id=%s op=%s path=%s version=%d", user_id, operation, path, saved.version)

        self._notify(user_id, result.to_dict())
        return result.to_dict()

    def _notify(self, user_id: str, result: dict[str, Any]) -> None:
        """Schedule delivery to subscribers without waiting for it."""
        if self.notifier is None:
            return
        task = asyncio.create_task(self._deliver(user_id, result))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _deliver(self, user_id: str, result: dict[str, Any]) -> None:
        try:
            await self.notifier(user_id, result)
        except Exception:
            logger.warning("tools: change notification failed for user_id=%s", user_id, exc_info=True)

    async def drain_notifications(self) -> None:
        """Wait for every scheduled notification to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending))
