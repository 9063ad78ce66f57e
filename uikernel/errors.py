"""
UI Kernel: Errors

Three domain error kinds reach callers: not_found, validation and
version_conflict. Low-level failures inside the kernel are rewrapped into
one of these before they leave it.
"""

from __future__ import annotations

from typing import Any


class UIError(Exception):
    """Base class for every error the kernel surfaces."""

    kind = "internal"
    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str, suggestion: str | None = None):
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"kind": self.kind, "code": self.code, "message": self.message}
        if self.suggestion is not None:
            d["suggestion"] = self.suggestion
        return d


class NotFoundError(UIError):
    """A referenced subject or component does not exist."""

    kind = "not_found"
    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, resource: str, id: str):
        super().__init__(
            f"{resource} with id '{id}' not found",
            f"Check that the {resource.lower()} exists and the ID is correct",
        )
        self.resource = resource
        self.id = id


class ValidationError(UIError):
    """Malformed input or a structurally invalid tree edit."""

    kind = "validation"
    code = "VALIDATION_ERROR"
    status_code = 400

    def __init__(self, message: str, field: str | None = None, suggestion: str | None = None):
        super().__init__(message, suggestion)
        self.field = field


class PathError(ValidationError):
    """A location expression failed to parse or resolve."""


class VersionConflictError(UIError):
    """The caller's expected version no longer matches the stored one."""

    kind = "version_conflict"
    code = "VERSION_CONFLICT"
    status_code = 409

    def __init__(self, expected: int, actual: int):
        super().__init__(
            f"Version conflict: expected {expected}, got {actual}",
            "Refresh to get the latest state and try again",
        )
        self.expected = expected
        self.actual = actual

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d["expectedVersion"] = self.expected
        d["actualVersion"] = self.actual
        return d
