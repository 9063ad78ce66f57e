"""
UI Kernel: Path Resolver

Location expressions address nodes and fields inside a UI tree:

    $                         the root node
    $.children[2]             third child of the root
    $.children[0].children[1] a grandchild
    $.children[1].props       the props map of the second child

A path is parsed once into a tuple of Field/Index segments, then walked.
The leading `$` is optional; an unanchored path is read from the root.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from uikernel.errors import PathError

_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_INDEX_RE = re.compile(r"\[(\d+)\]")


@dataclass(frozen=True)
class Field:
    name: str

    def __str__(self) -> str:
        return f".{self.name}"


@dataclass(frozen=True)
class Index:
    value: int

    def __str__(self) -> str:
        return f"[{self.value}]"


Segment = Field | Index
ParsedPath = tuple[Segment, ...]

CHILDREN = Field("children")


@dataclass
class Resolved:
    """
    Result of walking a path.

    `parent` is the container the final segment was read from (None for the
    root), `key` the field name or list index used, `target` the value found
    there or None when the final slot is empty.
    """

    parent: dict[str, Any] | list[Any] | None
    key: str | int | None
    target: Any


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_path(text: str) -> ParsedPath:
    """Parse a location expression into segments. Raises PathError on bad syntax."""
    if not isinstance(text, str):
        raise PathError(f"Path must be a string, got {type(text).__name__}", field="path")

    s = text.strip()
    pos = 1 if s.startswith("$") else 0
    segments: list[Segment] = []

    while pos < len(s):
        ch = s[pos]
        if ch == ".":
            m = _NAME_RE.match(s, pos + 1)
            if not m:
                raise PathError(f"Invalid path '{text}': expected a field name at offset {pos + 1}", field="path")
            segments.append(Field(m.group()))
            pos = m.end()
        elif ch == "[":
            m = _INDEX_RE.match(s, pos)
            if not m:
                raise PathError(f"Invalid path '{text}': expected [N] at offset {pos}", field="path")
            segments.append(Index(int(m.group(1))))
            pos = m.end()
        elif pos == 0:
            # Unanchored path such as "children[0]"
            m = _NAME_RE.match(s, pos)
            if not m:
                raise PathError(f"Invalid path '{text}': unexpected '{ch}' at offset {pos}", field="path")
            segments.append(Field(m.group()))
            pos = m.end()
        else:
            raise PathError(f"Invalid path '{text}': unexpected '{ch}' at offset {pos}", field="path")

    return tuple(segments)


def format_path(segments: ParsedPath) -> str:
    return "$" + "".join(str(seg) for seg in segments)


def _segments(path: str | ParsedPath) -> ParsedPath:
    if isinstance(path, tuple):
        return path
    return parse_path(path)


def is_root(path: str | ParsedPath) -> bool:
    return _segments(path) == ()


def is_root_children(path: str | ParsedPath) -> bool:
    return _segments(path) == (CHILDREN,)


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


def navigate_to_path(tree: dict[str, Any], path: str | ParsedPath) -> Resolved:
    """
    Walk `path` from the root and return the addressed value with its parent.

    Fails if an intermediate value is missing or the segment does not fit the
    container (a field on a list, an index on a map). A missing final value
    is not an error; it comes back as target=None.
    """
    segments = _segments(path)
    current: Any = tree
    parent: Any = None
    key: str | int | None = None

    for seg in segments:
        if current is None:
            raise PathError(f"Cannot navigate to path: {format_path(segments)} (failed at {seg})", field="path")
        parent = current
        if isinstance(seg, Field):
            if not isinstance(current, dict):
                raise PathError(
                    f"Cannot navigate to path: {format_path(segments)} ({seg} is not addressable on a list or value)",
                    field="path",
                )
            key = seg.name
            current = current.get(seg.name)
        else:
            if not isinstance(current, list):
                raise PathError(
                    f"Cannot navigate to path: {format_path(segments)} ({seg} applied to a non-list)",
                    field="path",
                )
            key = seg.value
            current = current[seg.value] if seg.value < len(current) else None

    return Resolved(parent=parent, key=key, target=current)


def navigate_to_parent(tree: dict[str, Any], path: str | ParsedPath) -> tuple[dict[str, Any], int]:
    """
    Split a `...children[N]` path into (parent node, N).

    The prefix before the final children[N] must resolve to a tree node;
    an empty prefix means the root.
    """
    segments = _segments(path)
    if len(segments) < 2 or segments[-2] != CHILDREN or not isinstance(segments[-1], Index):
        raise PathError(
            f"Invalid path for add/remove operation: {format_path(segments)}",
            field="path",
            suggestion="Address a child slot, e.g. $.children[0]",
        )

    parent_segments = segments[:-2]
    if parent_segments:
        parent = navigate_to_path(tree, parent_segments).target
    else:
        parent = tree

    if not isinstance(parent, dict) or "component" not in parent:
        raise PathError(f"Parent at {format_path(parent_segments)} is not a valid UITree node", field="path")

    return parent, segments[-1].value
