"""
JSON-RPC 2.0 tool server.

Methods:
  initialize      protocol handshake, server info and capabilities
  tools/list      the four UI tools (MCP inputSchema format)
  resources/list  the component registry resource
  resources/read  registry listing as JSON text
  tools/call      run a tool; the result is returned as a JSON text block

Domain errors map onto JSON-RPC error codes; everything unexpected becomes
INTERNAL_ERROR. handle() always returns a response envelope and never raises.
"""

from __future__ import annotations

import json
import logging
from enum import IntEnum
from typing import Any

import pydantic

from dynamic_todo.models.tools import GetComponentDetailsArgs, GetCurrentTreeArgs, ModifyUIArgs, ValidateTreeArgs
from dynamic_todo.services.tool_defs import MCP_RESOURCES, MCP_TOOLS, TOOL_NAMES
from dynamic_todo.services.tools import UITools
from uikernel.errors import NotFoundError, UIError, ValidationError, VersionConflictError

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"
PROTOCOL_VERSION = "2024-11-05"
SERVER_INFO = {"name": "dynamic-todo-mcp", "version": "1.0.0"}
REGISTRY_URI = "components://registry"


class ErrorCode(IntEnum):
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    NOT_FOUND = -32000
    INVALID_TREE = -32001
    VERSION_CONFLICT = -32002


_HTTP_STATUS: dict[int, int] = {
    ErrorCode.PARSE_ERROR: 400,
    ErrorCode.INVALID_REQUEST: 400,
    ErrorCode.INVALID_PARAMS: 400,
    ErrorCode.METHOD_NOT_FOUND: 404,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.INVALID_TREE: 422,
    ErrorCode.VERSION_CONFLICT: 409,
}


def http_status_for(code: int) -> int:
    """HTTP status for a JSON-RPC error code (500 for anything unmapped)."""
    return _HTTP_STATUS.get(code, 500)


def error_code_for(exc: UIError) -> ErrorCode:
    if isinstance(exc, NotFoundError):
        return ErrorCode.NOT_FOUND
    if isinstance(exc, ValidationError):
        return ErrorCode.INVALID_PARAMS
    if isinstance(exc, VersionConflictError):
        return ErrorCode.VERSION_CONFLICT
    return ErrorCode.INTERNAL_ERROR


class JsonRpcError(Exception):
    """Raised inside method handlers to produce a specific error envelope."""

    def __init__(self, code: int, message: str, data: dict[str, Any] | None = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data


def error_response(request_id: Any, code: int, message: str, data: dict[str, Any] | None = None) -> dict[str, Any]:
    error: dict[str, Any] = {"code": int(code), "message": message}
    if data:
        error["data"] = data
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "error": error}


def _pydantic_message(exc: pydantic.ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"])
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "Invalid arguments: " + "; ".join(parts)


class ToolServer:
    def __init__(self, tools: UITools):
        self.tools = tools
        self._methods = {
            "initialize": self._initialize,
            "tools/list": self._tools_list,
            "resources/list": self._resources_list,
            "resources/read": self._resources_read,
            "tools/call": self._tools_call,
        }

    async def handle(self, body: Any) -> dict[str, Any]:
        """Process one decoded JSON-RPC request body and return the response envelope."""
        if not isinstance(body, dict) or body.get("jsonrpc") != JSONRPC_VERSION:
            request_id = body.get("id") if isinstance(body, dict) else None
            return error_response(request_id, ErrorCode.INVALID_REQUEST, "Invalid JSON-RPC request")

        method = body.get("method")
        if not method or not isinstance(method, str):
            return error_response(body.get("id"), ErrorCode.INVALID_REQUEST, "Method is required")

        request_id = body.get("id", 1)
        params = body.get("params")
        if params is None:
            params = {}
        if not isinstance(params, dict):
            return error_response(request_id, ErrorCode.INVALID_PARAMS, "params must be an object")

        handler = self._methods.get(method)
        if handler is None:
            return error_response(request_id, ErrorCode.METHOD_NOT_FOUND, f"Method not found: {method}")

        try:
            result = await handler(params, request_id)
        except JsonRpcError as e:
            return error_response(request_id, e.code, e.message, e.data)
        except UIError as e:
            data: dict[str, Any] = {"kind": e.kind}
            if e.suggestion:
                data["suggestion"] = e.suggestion
            return error_response(request_id, error_code_for(e), e.message, data)
        except pydantic.ValidationError as e:
            return error_response(request_id, ErrorCode.INVALID_PARAMS, _pydantic_message(e), {"kind": "validation"})
        except Exception as e:
            logger.exception("mcp: %s failed (id=%s)", method, request_id)
            return error_response(request_id, ErrorCode.INTERNAL_ERROR, str(e) or "Internal error")

        return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}

    # -----------------------------------------------------------------------
    # Methods
    # -----------------------------------------------------------------------

    async def _initialize(self, params: dict[str, Any], request_id: Any) -> dict[str, Any]:
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {"tools": {}, "resources": {}},
            "serverInfo": dict(SERVER_INFO),
        }

    async def _tools_list(self, params: dict[str, Any], request_id: Any) -> dict[str, Any]:
        return {"tools": MCP_TOOLS}

    async def _resources_list(self, params: dict[str, Any], request_id: Any) -> dict[str, Any]:
        return {"resources": MCP_RESOURCES}

    async def _resources_read(self, params: dict[str, Any], request_id: Any) -> dict[str, Any]:
        uri = params.get("uri")
        if uri != REGISTRY_URI:
            raise JsonRpcError(ErrorCode.INVALID_PARAMS, f"Unknown resource: {uri}")

        components = [c.to_dict(include_examples=False) for c in self.tools.registry.all()]
        return {
            "contents": [
                {
                    "uri": uri,
                    "mimeType": "application/json",
                    "text": json.dumps({"components": components}, indent=2),
                }
            ]
        }

    async def _tools_call(self, params: dict[str, Any], request_id: Any) -> dict[str, Any]:
        name = params.get("name")
        if name not in TOOL_NAMES:
            raise JsonRpcError(ErrorCode.INVALID_PARAMS, f"Unknown tool: {name}")
        args = params.get("arguments") or {}
        if not isinstance(args, dict):
            raise JsonRpcError(ErrorCode.INVALID_PARAMS, "arguments must be an object")

        if name == "get_current_tree":
            a = GetCurrentTreeArgs.model_validate(args)
            result = await self.tools.get_current_tree(a.user_id)
        elif name == "get_component_details":
            c = GetComponentDetailsArgs.model_validate(args)
            result = self.tools.get_component_details(c.component_name)
        elif name == "validate_tree":
            v = ValidateTreeArgs.model_validate(args)
            result = self.tools.validate_tree(v.tree)
        elif name == "modify_ui":
            m = ModifyUIArgs.model_validate(args)
            result = await self.tools.modify_ui(
                m.user_id,
                m.operation,
                m.path,
                component=m.component,
                props=m.props,
                version=m.version,
                triggered_by=m.triggered_by or f"mcp:{request_id}",
            )

        logger.info("mcp: tools/call %s ok (id=%s)", name, request_id)
        return {"content": [{"type": "text", "text": json.dumps(result, indent=2)}]}
