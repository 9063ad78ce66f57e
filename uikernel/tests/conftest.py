"""
UI kernel test configuration.

Kernel tests use MemoryStorage and need no database. PostgresStorage tests
that need DATABASE_URL are skipped automatically when it is not set.
"""

import pytest

from uikernel.registry import default_registry
from uikernel.store import MemoryStorage, UIStateStore
from uikernel.types import default_tree


@pytest.fixture
def registry():
    return default_registry()


@pytest.fixture
def tree():
    """The default TodoApp tree: TaskInput at [0], TaskList at [1]."""
    return default_tree()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage):
    return UIStateStore(storage)
