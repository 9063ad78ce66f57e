"""
UI Kernel: Tree Validation

Checks a tree against the component registry and reports every problem it
finds. Returns data, never raises, never modifies the tree.

Two passes, errors in this order:
  1. flat scan for component names the registry does not know
  2. depth-first structural walk: node shape, props container, unknown
     props, children container, children on leaf components

Missing required props are deliberately not reported: callers often supply
them at render time rather than in the authored tree.
"""

from __future__ import annotations

from typing import Any

from uikernel.registry import ComponentRegistry
from uikernel.types import ValidationIssue, ValidationResult


def validate_tree(tree: Any, registry: ComponentRegistry) -> ValidationResult:
    errors: list[ValidationIssue] = []

    for path, name in registry.unknown_components(tree):
        errors.append(
            ValidationIssue(
                path=path,
                message=f'Unknown component "{name}" at {path}',
                suggestion="Check available components using get_component_details",
            )
        )

    _validate_node(tree, "$", registry, errors)

    return ValidationResult(valid=not errors, errors=errors)


def _validate_node(node: Any, path: str, registry: ComponentRegistry, errors: list[ValidationIssue]) -> None:
    if not isinstance(node, dict) or not isinstance(node.get("component"), str) or not node["component"]:
        errors.append(ValidationIssue(path=path, message='Node must have a "component" string property'))
        return

    name = node["component"]
    details = registry.get(name)

    props = node.get("props")
    if details is not None and props is not None:
        if not isinstance(props, dict):
            errors.append(ValidationIssue(path=f"{path}.props", message="Props must be an object"))
        else:
            valid_names = details.prop_names
            for prop_name in props:
                if prop_name not in valid_names:
                    errors.append(
                        ValidationIssue(
                            path=f"{path}.props.{prop_name}",
                            message=f'Unknown prop "{prop_name}" for component {name}',
                            suggestion=f"Valid props: {', '.join(valid_names)}",
                        )
                    )

    children = node.get("children")
    if children is None:
        return
    if not isinstance(children, list):
        errors.append(ValidationIssue(path=f"{path}.children", message="Children must be an array"))
        return
    if details is not None and not details.can_have_children and children:
        errors.append(
            ValidationIssue(
                path=f"{path}.children",
                message=f"Component {name} cannot have children",
                suggestion="Remove children or use a container component",
            )
        )

    for i, child in enumerate(children):
        _validate_node(child, f"{path}.children[{i}]", registry, errors)
