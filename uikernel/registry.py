"""
UI Kernel: Component Registry

Catalog of renderable component types, their declared props, and whether
each may hold children. Built once at startup via default_registry() and
passed to whoever needs it; there is no module-level instance.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from uikernel.errors import ValidationError
from uikernel.types import (
    COMPONENT_CATEGORIES,
    ComponentDetails,
    ComponentExample,
    PropDefinition,
)


class ComponentRegistry:
    """Name-keyed lookup of ComponentDetails."""

    def __init__(self, components: list[ComponentDetails] | None = None):
        self._components: dict[str, ComponentDetails] = {}
        for details in components or []:
            self.register(details)

    def __len__(self) -> int:
        return len(self._components)

    def __contains__(self, name: object) -> bool:
        return name in self._components

    def has(self, name: Any) -> bool:
        return isinstance(name, str) and name in self._components

    def get(self, name: str) -> ComponentDetails | None:
        return self._components.get(name)

    def all(self) -> list[ComponentDetails]:
        """Every registered component, in registration order, without examples."""
        return [
            ComponentDetails(
                name=c.name,
                description=c.description,
                category=c.category,
                can_have_children=c.can_have_children,
                props=list(c.props),
            )
            for c in self._components.values()
        ]

    def by_category(self, category: str) -> list[ComponentDetails]:
        return [c for c in self.all() if c.category == category]

    def names(self) -> list[str]:
        return list(self._components)

    def register(self, details: ComponentDetails) -> None:
        """Add or overwrite a component by name."""
        if details.category not in COMPONENT_CATEGORIES:
            raise ValidationError(
                f"Invalid category '{details.category}' for component {details.name}",
                field="category",
                suggestion=f"Use one of: {', '.join(COMPONENT_CATEGORIES)}",
            )
        self._components[details.name] = details

    def can_be_child_of(self, child: str, parent: str) -> bool:
        if not self.has(child) or not self.has(parent):
            return False
        return self._components[parent].can_have_children

    def unknown_components(self, tree: Any) -> list[tuple[str, str]]:
        """
        Flat scan for component names missing from the registry.

        Returns (path, name) pairs in depth-first order. Nodes without a string
        `component` are left to the structural validator.
        """
        found: list[tuple[str, str]] = []

        def walk(node: Any, path: str) -> None:
            if not isinstance(node, dict):
                return
            name = node.get("component")
            if isinstance(name, str) and not self.has(name):
                found.append((path, name))
            children = node.get("children")
            if isinstance(children, list):
                for i, child in enumerate(children):
                    walk(child, f"{path}.children[{i}]")

        walk(tree, "$")
        return found


# ---------------------------------------------------------------------------
# Built-in components
# ---------------------------------------------------------------------------


def _prop(
    name: str,
    type: str,
    required: bool,
    description: str,
    default_value: Any = None,
) -> PropDefinition:
    return PropDefinition(name, type, required, description, default_value)


_CLASS_NAME = ("className", "string", False, "Additional CSS classes")


def _builtin_components() -> list[ComponentDetails]:
    return [
        # Layout
        ComponentDetails(
            name="Container",
            description="Flex container with configurable direction and spacing",
            category="layout",
            can_have_children=True,
            props=[
                _prop("direction", "'row' | 'column'", False, "Flex direction", "column"),
                _prop("gap", "number", False, "Gap between children in pixels", 16),
                _prop("padding", "number", False, "Padding in pixels", 0),
                _prop(*_CLASS_NAME),
            ],
            examples=[
                ComponentExample(
                    "Vertical stack with gap",
                    {"component": "Container", "props": {"direction": "column", "gap": 16}, "children": []},
                ),
            ],
        ),
        ComponentDetails(
            name="Card",
            description="Bordered card container with optional header",
            category="layout",
            can_have_children=True,
            props=[
                _prop("title", "string", False, "Card header title"),
                _prop("padding", "number", False, "Internal padding", 16),
                _prop(*_CLASS_NAME),
            ],
            examples=[
                ComponentExample(
                    "Card with title",
                    {"component": "Card", "props": {"title": "My Tasks", "padding": 16}, "children": []},
                ),
            ],
        ),
        ComponentDetails(
            name="Divider",
            description="Horizontal or vertical divider line",
            category="layout",
            can_have_children=False,
            props=[
                _prop("orientation", "'horizontal' | 'vertical'", False, "Divider direction", "horizontal"),
                _prop(*_CLASS_NAME),
            ],
            examples=[
                ComponentExample(
                    "Horizontal divider",
                    {"component": "Divider", "props": {"orientation": "horizontal"}},
                ),
            ],
        ),
        # Input
        ComponentDetails(
            name="TextInput",
            description="Single-line text input field",
            category="input",
            can_have_children=False,
            props=[
                _prop("value", "string", False, "Current input value", ""),
                _prop("placeholder", "string", False, "Placeholder text"),
                _prop("onChange", "(value: string) => void", False, "Change handler"),
                _prop("disabled", "boolean", False, "Whether input is disabled", False),
                _prop(*_CLASS_NAME),
            ],
            examples=[
                ComponentExample(
                    "Task input field",
                    {"component": "TextInput", "props": {"placeholder": "What needs to be done?"}},
                ),
            ],
        ),
        ComponentDetails(
            name="Checkbox",
            description="Boolean toggle checkbox with optional label",
            category="input",
            can_have_children=False,
            props=[
                _prop("checked", "boolean", False, "Whether checkbox is checked", False),
                _prop("label", "string", False, "Label text"),
                _prop("onChange", "(checked: boolean) => void", False, "Change handler"),
                _prop("disabled", "boolean", False, "Whether checkbox is disabled", False),
                _prop(*_CLASS_NAME),
            ],
            examples=[
                ComponentExample(
                    "Task completion checkbox",
                    {"component": "Checkbox", "props": {"checked": False, "label": "Complete task"}},
                ),
            ],
        ),
        ComponentDetails(
            name="Select",
            description="Dropdown selection input",
            category="input",
            can_have_children=False,
            props=[
                _prop("value", "string", False, "Selected value"),
                _prop("options", "Array<{value: string, label: string}>", True, "Available options"),
                _prop("onChange", "(value: string) => void", False, "Change handler"),
                _prop("placeholder", "string", False, "Placeholder when no selection"),
                _prop("disabled", "boolean", False, "Whether select is disabled", False),
                _prop(*_CLASS_NAME),
            ],
            examples=[
                ComponentExample(
                    "Priority selector",
                    {
                        "component": "Select",
                        "props": {
                            "placeholder": "Select priority",
                            "options": [
                                {"value": "low", "label": "Low"},
                                {"value": "medium", "label": "Medium"},
                                {"value": "high", "label": "High"},
                            ],
                        },
                    },
                ),
            ],
        ),
        ComponentDetails(
            name="DatePicker",
            description="Date selection input",
            category="input",
            can_have_children=False,
            props=[
                _prop("value", "string", False, "Selected date (ISO format)"),
                _prop("onChange", "(date: string) => void", False, "Change handler"),
                _prop("min", "string", False, "Minimum selectable date"),
                _prop("max", "string", False, "Maximum selectable date"),
                _prop("disabled", "boolean", False, "Whether picker is disabled", False),
                _prop(*_CLASS_NAME),
            ],
            examples=[
                ComponentExample(
                    "Due date picker",
                    {"component": "DatePicker", "props": {"min": date.today().isoformat()}},
                ),
            ],
        ),
        ComponentDetails(
            name="Button",
            description="Clickable button with variants",
            category="input",
            can_have_children=False,
            props=[
                _prop("label", "string", True, "Button text"),
                _prop("onClick", "() => void", False, "Click handler"),
                _prop(
                    "variant", "'primary' | 'secondary' | 'danger' | 'ghost'", False, "Button style variant", "primary"
                ),
                _prop("size", "'sm' | 'md' | 'lg'", False, "Button size", "md"),
                _prop("disabled", "boolean", False, "Whether button is disabled", False),
                _prop(*_CLASS_NAME),
            ],
            examples=[
                ComponentExample(
                    "Add task button",
                    {"component": "Button", "props": {"label": "Add Task", "variant": "primary"}},
                ),
            ],
        ),
        # Display
        ComponentDetails(
            name="Text",
            description="Text display with styling options",
            category="display",
            can_have_children=False,
            props=[
                _prop("content", "string", True, "Text content to display"),
                _prop("variant", "'body' | 'heading' | 'caption' | 'label'", False, "Text style variant", "body"),
                _prop("bold", "boolean", False, "Whether text is bold", False),
                _prop("muted", "boolean", False, "Whether text is muted/gray", False),
                _prop(*_CLASS_NAME),
            ],
            examples=[
                ComponentExample(
                    "Section heading",
                    {"component": "Text", "props": {"content": "My Tasks", "variant": "heading"}},
                ),
            ],
        ),
        ComponentDetails(
            name="Badge",
            description="Small status indicator badge",
            category="display",
            can_have_children=False,
            props=[
                _prop("label", "string", True, "Badge text"),
                _prop(
                    "variant",
                    "'default' | 'success' | 'warning' | 'error' | 'info'",
                    False,
                    "Badge color variant",
                    "default",
                ),
                _prop(*_CLASS_NAME),
            ],
            examples=[
                ComponentExample(
                    "High priority badge",
                    {"component": "Badge", "props": {"label": "High", "variant": "error"}},
                ),
            ],
        ),
        ComponentDetails(
            name="Icon",
            description="Icon display from icon set",
            category="display",
            can_have_children=False,
            props=[
                _prop("name", "string", True, "Icon name (check, trash, plus, calendar, etc.)"),
                _prop("size", "number", False, "Icon size in pixels", 20),
                _prop(*_CLASS_NAME),
            ],
            examples=[
                ComponentExample("Checkmark icon", {"component": "Icon", "props": {"name": "check", "size": 16}}),
            ],
        ),
        # Todo
        ComponentDetails(
            name="TodoApp",
            description="Main container for the Todo application",
            category="todo",
            can_have_children=True,
            props=[
                _prop("title", "string", False, "App title", "Todo"),
                _prop("showHeader", "boolean", False, "Whether to show the app header", True),
                _prop("showStats", "boolean", False, "Whether to show task statistics", False),
                _prop(*_CLASS_NAME),
            ],
            examples=[
                ComponentExample(
                    "Default Todo app",
                    {
                        "component": "TodoApp",
                        "props": {"title": "My Tasks"},
                        "children": [{"component": "TaskInput"}, {"component": "TaskList"}],
                    },
                ),
            ],
        ),
        ComponentDetails(
            name="TaskList",
            description="List container for displaying tasks",
            category="todo",
            can_have_children=True,
            props=[
                _prop("filter", "'all' | 'active' | 'completed'", False, "Task filter", "all"),
                _prop("sortBy", "'createdAt' | 'dueDate' | 'priority'", False, "Sort order", "createdAt"),
                _prop("sortOrder", "'asc' | 'desc'", False, "Sort direction", "desc"),
                _prop(*_CLASS_NAME),
            ],
            examples=[
                ComponentExample(
                    "Active tasks sorted by due date",
                    {"component": "TaskList", "props": {"filter": "active", "sortBy": "dueDate", "sortOrder": "asc"}},
                ),
            ],
        ),
        ComponentDetails(
            name="TaskItem",
            description="Individual task display with completion toggle and delete",
            category="todo",
            can_have_children=False,
            props=[
                _prop("task", "Task", True, "The task data to display"),
                _prop("onToggle", "(id: string) => void", True, "Toggle completion handler"),
                _prop("onDelete", "(id: string) => void", True, "Delete handler"),
                _prop("showDueDate", "boolean", False, "Show due date field", False),
                _prop("showPriority", "boolean", False, "Show priority indicator", False),
                _prop("showNotes", "boolean", False, "Show notes field", False),
                _prop(*_CLASS_NAME),
            ],
            examples=[
                ComponentExample(
                    "Task with priority and due date",
                    {"component": "TaskItem", "props": {"showDueDate": True, "showPriority": True}},
                ),
            ],
        ),
        ComponentDetails(
            name="TaskInput",
            description="Input component for creating new tasks",
            category="todo",
            can_have_children=False,
            props=[
                _prop("placeholder", "string", False, "Input placeholder", "What needs to be done?"),
                _prop("onSubmit", "(title: string) => void", False, "Submit handler"),
                _prop("showPriorityPicker", "boolean", False, "Show priority selector", False),
                _prop("showDueDatePicker", "boolean", False, "Show due date picker", False),
                _prop(*_CLASS_NAME),
            ],
            examples=[
                ComponentExample(
                    "Full-featured task input",
                    {"component": "TaskInput", "props": {"showPriorityPicker": True, "showDueDatePicker": True}},
                ),
            ],
        ),
        ComponentDetails(
            name="TaskFilter",
            description="Filter buttons for All/Active/Completed tasks",
            category="todo",
            can_have_children=False,
            props=[
                _prop("current", "'all' | 'active' | 'completed'", False, "Currently active filter", "all"),
                _prop(
                    "onChange", "(filter: 'all' | 'active' | 'completed') => void", False, "Filter change handler"
                ),
                _prop(*_CLASS_NAME),
            ],
            examples=[
                ComponentExample("Task filter buttons", {"component": "TaskFilter", "props": {"current": "all"}}),
            ],
        ),
        ComponentDetails(
            name="TaskStats",
            description="Task count statistics display",
            category="todo",
            can_have_children=False,
            props=[
                _prop("totalCount", "number", False, "Total task count"),
                _prop("completedCount", "number", False, "Completed task count"),
                _prop("activeCount", "number", False, "Active task count"),
                _prop(*_CLASS_NAME),
            ],
            examples=[
                ComponentExample("Task statistics", {"component": "TaskStats"}),
            ],
        ),
    ]


def default_registry() -> ComponentRegistry:
    """A new registry holding the built-in components."""
    return ComponentRegistry(_builtin_components())
