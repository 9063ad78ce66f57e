"""UI state models for the REST routes. Fields speak camelCase on the wire."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from uikernel.types import ChangeLog, ComponentDetails, UIState


class SaveStateRequest(BaseModel):
    """What the client sends to PUT /api/ui/state."""

    model_config = {"extra": "forbid", "populate_by_name": True}

    user_id: str = Field(alias="userId", min_length=1)
    version: int = Field(ge=1)
    tree: dict[str, Any]


class ResetRequest(BaseModel):
    """What the client sends to POST /api/ui/reset."""

    model_config = {"extra": "forbid", "populate_by_name": True}

    user_id: str = Field(alias="userId", min_length=1)


class UIStateResponse(BaseModel):
    """A subject's current tree and version."""

    model_config = {"populate_by_name": True}

    version: int
    user_id: str = Field(alias="userId")
    tree: dict[str, Any]
    last_modified: str = Field(alias="lastModified")

    @classmethod
    def from_state(cls, state: UIState) -> UIStateResponse:
        return cls(
            version=state.version,
            user_id=state.user_id,
            tree=state.tree,
            last_modified=state.last_modified,
        )


class ChangeLogResponse(BaseModel):
    """One history entry."""

    model_config = {"populate_by_name": True}

    id: str
    timestamp: str
    description: str
    before_tree: dict[str, Any] = Field(alias="beforeTree")
    after_tree: dict[str, Any] = Field(alias="afterTree")
    triggered_by: str | None = Field(default=None, alias="triggeredBy")

    @classmethod
    def from_entry(cls, entry: ChangeLog) -> ChangeLogResponse:
        return cls(
            id=entry.id,
            timestamp=entry.timestamp,
            description=entry.description,
            before_tree=entry.before_tree,
            after_tree=entry.after_tree,
            triggered_by=entry.triggered_by,
        )


class HistoryResponse(BaseModel):
    """GET /api/ui/history: newest-first entries plus the stored total."""

    model_config = {"populate_by_name": True}

    user_id: str = Field(alias="userId")
    changes: list[ChangeLogResponse]
    total: int


class ComponentListResponse(BaseModel):
    """Registry listing. Component entries keep the registry's wire shape."""

    components: list[dict[str, Any]]
    count: int

    @classmethod
    def from_details(cls, details: list[ComponentDetails]) -> ComponentListResponse:
        return cls(components=[d.to_dict(include_examples=False) for d in details], count=len(details))
