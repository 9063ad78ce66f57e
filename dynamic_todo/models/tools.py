"""Argument models for the four tool operations, as sent in tools/call."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


class GetCurrentTreeArgs(BaseModel):
    model_config = {"extra": "forbid", "populate_by_name": True}

    user_id: str = Field(alias="userId", min_length=1)


class GetComponentDetailsArgs(BaseModel):
    model_config = {"extra": "forbid", "populate_by_name": True}

    component_name: str = Field(alias="componentName", min_length=1)


class ValidateTreeArgs(BaseModel):
    """Any JSON value is accepted; a tree that is not an object is reported as invalid, not rejected."""

    model_config = {"extra": "forbid"}

    tree: Any


class ModifyUIArgs(BaseModel):
    """
    modify_ui arguments.

    `component` is required for add/replace and `props` for update; the patch
    engine enforces that so the error names the operation.
    """

    model_config = {"extra": "forbid", "populate_by_name": True}

    user_id: str = Field(alias="userId", min_length=1)
    operation: Literal["add", "remove", "update", "replace"]
    path: str = Field(min_length=1)
    component: dict[str, Any] | None = None
    props: dict[str, Any] | None = None
    version: int | None = Field(default=None, ge=1)
    triggered_by: str | None = Field(default=None, alias="triggeredBy")
