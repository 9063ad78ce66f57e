"""
UI Kernel: the pure tree engine.

Components:
  registry   catalog of component types and their props
  paths      location expression parser and resolver
  patch      (tree, operation) -> tree  (pure, deterministic)
  validator  tree -> {valid, errors}    (never raises)
  store      versioned per-subject state with optimistic concurrency
"""

from uikernel.errors import NotFoundError, PathError, UIError, ValidationError, VersionConflictError
from uikernel.patch import apply_patch
from uikernel.paths import navigate_to_parent, navigate_to_path, parse_path
from uikernel.registry import ComponentRegistry, default_registry
from uikernel.store import MemoryStorage, StateStorage, UIStateStore
from uikernel.validator import validate_tree

__all__ = [
    "ComponentRegistry",
    "default_registry",
    "parse_path",
    "navigate_to_path",
    "navigate_to_parent",
    "apply_patch",
    "validate_tree",
    "StateStorage",
    "MemoryStorage",
    "UIStateStore",
    "UIError",
    "NotFoundError",
    "ValidationError",
    "PathError",
    "VersionConflictError",
]
