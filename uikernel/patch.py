"""
UI Kernel: Patch Engine

Pure function: (tree, operation, path, payload) -> PatchResult
No IO. The input tree is never modified; every handler works on a deep copy.

Operations:
  add      insert a component fragment at a child slot (splice semantics)
  remove   delete the child at a slot
  update   shallow-merge props into the addressed node
  replace  swap the child at a slot, or overwrite the root's fields in place

Every failure leaves as a ValidationError naming the operation.
"""

from __future__ import annotations

import copy
from collections.abc import Callable
from typing import Any

from uikernel.errors import UIError, ValidationError
from uikernel.paths import is_root, is_root_children, navigate_to_parent, navigate_to_path, parse_path
from uikernel.registry import ComponentRegistry
from uikernel.types import OPERATIONS, PatchResult

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def apply_patch(
    tree: dict[str, Any],
    operation: str,
    path: str,
    *,
    registry: ComponentRegistry,
    component: dict[str, Any] | None = None,
    props: dict[str, Any] | None = None,
) -> PatchResult:
    """
    Apply one operation to a copy of `tree`.

    Returns the new tree and a description of the change. Raises
    ValidationError("Failed to apply <operation>: ...") on any failure.
    """
    snap = copy.deepcopy(tree)
    try:
        handler = _HANDLERS.get(operation)
        if handler is None:
            raise ValidationError(
                f"Unknown operation: {operation}",
                field="operation",
                suggestion=f"Use one of: {', '.join(OPERATIONS)}",
            )
        description = handler(snap, path, registry, component, props)
    except UIError as e:
        raise ValidationError(
            f"Failed to apply {operation}: {e.message}", field=getattr(e, "field", None), suggestion=e.suggestion
        ) from e
    except (TypeError, KeyError, IndexError, AttributeError, ValueError) as e:
        raise ValidationError(f"Failed to apply {operation}: {e}") from e
    return PatchResult(tree=snap, description=description)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _require_fragment(operation: str, component: Any, registry: ComponentRegistry) -> dict[str, Any]:
    if component is None:
        raise ValidationError(f"component is required for {operation} operation", field="component")
    if not isinstance(component, dict):
        raise ValidationError("component must be an object", field="component")
    name = component.get("component")
    if not registry.has(name):
        raise ValidationError(
            f"Unknown component: {name}",
            field="component",
            suggestion="Check available components using get_component_details",
        )
    return copy.deepcopy(component)


def _children(node: dict[str, Any]) -> list[Any]:
    children = node.get("children")
    if children is None:
        children = node["children"] = []
    elif not isinstance(children, list):
        raise ValidationError(f"children of {node.get('component')} is not a list")
    return children


def _child_name(child: Any) -> str:
    if isinstance(child, dict):
        return str(child.get("component"))
    return repr(child)


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def _apply_add(
    tree: dict[str, Any],
    path: str,
    registry: ComponentRegistry,
    component: dict[str, Any] | None,
    props: dict[str, Any] | None,
) -> str:
    fragment = _require_fragment("add", component, registry)
    segments = parse_path(path)

    if is_root(segments) or is_root_children(segments):
        _children(tree).append(fragment)
        return f"Added {fragment['component']} to root children"

    parent, index = navigate_to_parent(tree, segments)
    # list.insert appends when index >= len
    _children(parent).insert(index, fragment)
    return f"Added {fragment['component']} at {path}"


def _apply_remove(
    tree: dict[str, Any],
    path: str,
    registry: ComponentRegistry,
    component: dict[str, Any] | None,
    props: dict[str, Any] | None,
) -> str:
    parent, index = navigate_to_parent(tree, parse_path(path))
    children = parent.get("children")
    if not isinstance(children, list) or index >= len(children):
        raise ValidationError(f"No child at {path}")

    removed = children.pop(index)
    return f"Removed {_child_name(removed)} from {path}"


def _apply_update(
    tree: dict[str, Any],
    path: str,
    registry: ComponentRegistry,
    component: dict[str, Any] | None,
    props: dict[str, Any] | None,
) -> str:
    if props is None:
        raise ValidationError("props is required for update operation", field="props")
    if not isinstance(props, dict):
        raise ValidationError("props must be an object", field="props")

    segments = parse_path(path)
    target = tree if is_root(segments) else navigate_to_path(tree, segments).target
    if not isinstance(target, dict) or "component" not in target:
        raise ValidationError(f"No valid node at {path}")

    current = target.get("props")
    if current is None:
        current = target["props"] = {}
    elif not isinstance(current, dict):
        raise ValidationError(f"Props at {path} must be an object")

    current.update(copy.deepcopy(props))
    return f"Updated {target['component']} props: {', '.join(props)}"


def _apply_replace(
    tree: dict[str, Any],
    path: str,
    registry: ComponentRegistry,
    component: dict[str, Any] | None,
    props: dict[str, Any] | None,
) -> str:
    fragment = _require_fragment("replace", component, registry)
    segments = parse_path(path)

    if is_root(segments):
        # Field assignment onto the existing root; fields the fragment omits survive
        tree.update(fragment)
        return f"Replaced root with {fragment['component']}"

    parent, index = navigate_to_parent(tree, segments)
    children = parent.get("children")
    if not isinstance(children, list) or index >= len(children):
        raise ValidationError(f"No child at {path}")

    old = _child_name(children[index])
    children[index] = fragment
    return f"Replaced {old} with {fragment['component']} at {path}"


_Handler = Callable[
    [dict[str, Any], str, ComponentRegistry, dict[str, Any] | None, dict[str, Any] | None],
    str,
]

_HANDLERS: dict[str, _Handler] = {
    "add": _apply_add,
    "remove": _apply_remove,
    "update": _apply_update,
    "replace": _apply_replace,
}
