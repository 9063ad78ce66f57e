"""
Pytest configuration and fixtures for Dynamic Todo tests.

Route tests run the real app on MemoryStorage: services are wired straight
onto app.state, so no lifespan or database is involved.
"""

from __future__ import annotations

import httpx
import pytest
import pytest_asyncio

from dynamic_todo.main import app, configure_services
from dynamic_todo.services.tools import UITools
from uikernel.registry import default_registry
from uikernel.store import MemoryStorage, UIStateStore

SEEDED = ("default", "alice")


@pytest_asyncio.fixture
async def services():
    """Fresh services on app.state with the seeded subjects at version 1."""
    configure_services(app, MemoryStorage())
    for user_id in SEEDED:
        await app.state.store.initialize(user_id)
    return app.state


@pytest_asyncio.fixture
async def client(services):
    """Async HTTP client against the ASGI app."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def registry():
    return default_registry()


@pytest_asyncio.fixture
async def store():
    s = UIStateStore(MemoryStorage())
    await s.initialize("alice")
    return s


@pytest.fixture
def tools(store, registry):
    return UITools(store, registry)
