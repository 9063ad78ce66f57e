"""
Tool definitions for the UI tools.

MCP_TOOLS is the tool set in the JSON-RPC tools/list shape (inputSchema),
built from one schema table that also names the tools.
"""

from __future__ import annotations

from typing import Any

from uikernel.types import OPERATIONS

_SCHEMAS: list[tuple[str, str, dict[str, Any]]] = [
    (
        "get_current_tree",
        "Get the current UI tree for a user",
        {
            "type": "object",
            "properties": {
                "userId": {
                    "type": "string",
                    "description": "The user ID to get the tree for",
                },
            },
            "required": ["userId"],
        },
    ),
    (
        "get_component_details",
        "Get detailed information about a specific UI component including props and examples",
        {
            "type": "object",
            "properties": {
                "componentName": {
                    "type": "string",
                    "description": "The name of the component (e.g., TaskItem, Container)",
                },
            },
            "required": ["componentName"],
        },
    ),
    (
        "validate_tree",
        "Validate a UI tree structure before applying changes",
        {
            "type": "object",
            "properties": {
                "tree": {
                    "description": "The UI tree to validate (a component node object)",
                },
            },
            "required": ["tree"],
        },
    ),
    (
        "modify_ui",
        "Modify the UI tree for a user by applying add, remove, update, or replace operations",
        {
            "type": "object",
            "properties": {
                "userId": {
                    "type": "string",
                    "description": "Target user ID",
                },
                "operation": {
                    "type": "string",
                    "enum": list(OPERATIONS),
                    "description": "The operation to perform",
                },
                "path": {
                    "type": "string",
                    "description": "JSONPath to the target location (e.g., $.children[0], $.children[1].props)",
                },
                "component": {
                    "type": "object",
                    "description": "The component tree to add or replace (for add/replace operations)",
                },
                "props": {
                    "type": "object",
                    "description": "Props to update (for update operation)",
                },
                "version": {
                    "type": "integer",
                    "description": "Expected current version; the call fails with a conflict if it has moved on",
                },
            },
            "required": ["userId", "operation", "path"],
        },
    ),
]

MCP_TOOLS: list[dict[str, Any]] = [
    {"name": name, "description": description, "inputSchema": schema} for name, description, schema in _SCHEMAS
]

TOOL_NAMES: tuple[str, ...] = tuple(name for name, _, _ in _SCHEMAS)

MCP_RESOURCES: list[dict[str, Any]] = [
    {
        "uri": "components://registry",
        "name": "Component Registry",
        "description": "List of all available UI components",
        "mimeType": "application/json",
    },
]
