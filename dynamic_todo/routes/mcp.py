"""JSON-RPC tool endpoint: POST /api/mcp."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from dynamic_todo.dependencies import get_tool_server
from dynamic_todo.services.mcp_server import ErrorCode, ToolServer, error_response, http_status_for

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["mcp"])


@router.post("/mcp")
async def mcp_endpoint(request: Request, server: ToolServer = Depends(get_tool_server)) -> JSONResponse:
    """
    Handle one JSON-RPC request.

    The HTTP status mirrors the JSON-RPC outcome: 200 on success, otherwise
    the status mapped from the error code (400/404/409/422/500).
    """
    try:
        body = json.loads(await request.body())
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning("mcp: unparseable request body: %s", e)
        return JSONResponse(
            status_code=http_status_for(ErrorCode.PARSE_ERROR),
            content=error_response(None, ErrorCode.PARSE_ERROR, "Parse error"),
        )

    response = await server.handle(body)
    error = response.get("error")
    status_code = http_status_for(error["code"]) if error else 200
    return JSONResponse(status_code=status_code, content=response)
