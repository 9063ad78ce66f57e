"""
Pydantic models for Dynamic Todo.

Request and response shapes for the REST routes and tool arguments.
No imports from db, services, or routes.
"""

from dynamic_todo.models.tools import (
    GetComponentDetailsArgs,
    GetCurrentTreeArgs,
    ModifyUIArgs,
    ValidateTreeArgs,
)
from dynamic_todo.models.ui import (
    ChangeLogResponse,
    ComponentListResponse,
    HistoryResponse,
    ResetRequest,
    SaveStateRequest,
    UIStateResponse,
)

__all__ = [
    "ChangeLogResponse",
    "ComponentListResponse",
    "GetComponentDetailsArgs",
    "GetCurrentTreeArgs",
    "HistoryResponse",
    "ModifyUIArgs",
    "ResetRequest",
    "SaveStateRequest",
    "UIStateResponse",
    "ValidateTreeArgs",
]
