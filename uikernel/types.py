"""
UI Kernel: Shared Types

Data classes used across the registry, patch engine, validator and store.
Trees themselves stay plain dicts ({component, props?, children?}) so they
round-trip through JSON and Postgres JSONB without conversion.

Python attributes are snake_case; to_dict()/from_dict() speak the camelCase
wire format the front end and tool callers use.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

COMPONENT_CATEGORIES: tuple[str, ...] = ("layout", "input", "display", "todo")

OPERATIONS: tuple[str, ...] = ("add", "remove", "update", "replace")

INITIAL_UI_VERSION = 1

DEFAULT_USER_ID = "default"

DEFAULT_UI_TREE: dict[str, Any] = {
    "component": "TodoApp",
    "props": {"showHeader": True},
    "children": [
        {
            "component": "TaskInput",
            "props": {"placeholder": "What needs to be done?"},
        },
        {
            "component": "TaskList",
            "props": {"filter": "all"},
            "children": [],
        },
    ],
}

# Stored history is trimmed to this many entries per subject
MAX_HISTORY_ENTRIES = 100


def default_tree() -> dict[str, Any]:
    """A fresh copy of the default tree. Callers may mutate it."""
    return copy.deepcopy(DEFAULT_UI_TREE)


def now_iso() -> str:
    """Current UTC time as ISO 8601 string."""
    return datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


# ---------------------------------------------------------------------------
# Registry entries
# ---------------------------------------------------------------------------


@dataclass
class PropDefinition:
    """One declared prop of a component. `type` is a free-text schema description."""

    name: str
    type: str
    required: bool = False
    description: str = ""
    default_value: Any = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "name": self.name,
            "type": self.type,
            "required": self.required,
            "description": self.description,
        }
        if self.default_value is not None:
            d["defaultValue"] = self.default_value
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> PropDefinition:
        return cls(
            name=d["name"],
            type=d.get("type", "unknown"),
            required=d.get("required", False),
            description=d.get("description", ""),
            default_value=d.get("defaultValue"),
        )


@dataclass
class ComponentExample:
    description: str
    tree: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"description": self.description, "tree": self.tree}


@dataclass
class ComponentDetails:
    """
    Registry entry for one renderable component type.

    `examples` are documentation for the assistant only; nothing at runtime
    reads them.
    """

    name: str
    description: str
    category: str
    can_have_children: bool
    props: list[PropDefinition] = field(default_factory=list)
    examples: list[ComponentExample] = field(default_factory=list)

    @property
    def prop_names(self) -> list[str]:
        return [p.name for p in self.props]

    def to_dict(self, include_examples: bool = True) -> dict[str, Any]:
        d: dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "canHaveChildren": self.can_have_children,
            "props": [p.to_dict() for p in self.props],
        }
        if include_examples:
            d["examples"] = [e.to_dict() for e in self.examples]
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> ComponentDetails:
        return cls(
            name=d["name"],
            description=d.get("description", ""),
            category=d.get("category", "display"),
            can_have_children=d.get("canHaveChildren", False),
            props=[PropDefinition.from_dict(p) for p in d.get("props", [])],
            examples=[ComponentExample(e.get("description", ""), e.get("tree", {})) for e in d.get("examples", [])],
        )


# ---------------------------------------------------------------------------
# Persisted state
# ---------------------------------------------------------------------------


@dataclass
class UIState:
    """
    A subject's persisted UI record.

    `version` starts at 1 and moves up by exactly one per successful write.
    """

    version: int
    user_id: str
    tree: dict[str, Any]
    last_modified: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "userId": self.user_id,
            "tree": self.tree,
            "lastModified": self.last_modified,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> UIState:
        return cls(
            version=d["version"],
            user_id=d["userId"],
            tree=d["tree"],
            last_modified=d.get("lastModified", ""),
        )


@dataclass
class ChangeLog:
    """One entry of a subject's modification history."""

    id: str
    timestamp: str
    description: str
    before_tree: dict[str, Any]
    after_tree: dict[str, Any]
    triggered_by: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "description": self.description,
            "beforeTree": self.before_tree,
            "afterTree": self.after_tree,
            "triggeredBy": self.triggered_by,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> ChangeLog:
        return cls(
            id=d["id"],
            timestamp=d["timestamp"],
            description=d.get("description", ""),
            before_tree=d.get("beforeTree", {}),
            after_tree=d.get("afterTree", {}),
            triggered_by=d.get("triggeredBy"),
        )


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass
class PatchResult:
    """Tree produced by one patch operation plus a human-readable summary."""

    tree: dict[str, Any]
    description: str


@dataclass
class ModifyResult:
    success: bool
    new_tree: dict[str, Any]
    description: str
    version: int | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "success": self.success,
            "newTree": self.new_tree,
            "description": self.description,
        }
        if self.version is not None:
            d["version"] = self.version
        return d


@dataclass
class ValidationIssue:
    path: str
    message: str
    suggestion: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"path": self.path, "message": self.message}
        if self.suggestion is not None:
            d["suggestion"] = self.suggestion
        return d


@dataclass
class ValidationResult:
    """
    Outcome of validating a tree.
    The validator never throws; invalid trees come back with valid=False.
    """

    valid: bool
    errors: list[ValidationIssue] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"valid": self.valid, "errors": [e.to_dict() for e in self.errors]}
