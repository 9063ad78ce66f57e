"""
Request-scoped accessors for the services built at startup.

Everything lives on app.state (see main.configure_services); routes reach
it through these Depends() helpers rather than module-level singletons.
"""

from __future__ import annotations

from fastapi import Request

from dynamic_todo.services.change_feed import ChangeFeed
from dynamic_todo.services.mcp_server import ToolServer
from dynamic_todo.services.tools import UITools
from uikernel.registry import ComponentRegistry
from uikernel.store import UIStateStore


def get_store(request: Request) -> UIStateStore:
    return request.app.state.store


def get_registry(request: Request) -> ComponentRegistry:
    return request.app.state.registry


def get_tools(request: Request) -> UITools:
    return request.app.state.tools


def get_tool_server(request: Request) -> ToolServer:
    return request.app.state.tool_server


def get_feed(request: Request) -> ChangeFeed:
    return request.app.state.feed
