"""
UI Kernel -- Tree Validator Tests

The validator returns every problem as data: unknown components first, then
structural issues in depth-first order. It never raises and never mutates.
"""

import copy

import pytest

from uikernel.validator import validate_tree


def messages(result):
    return [e.message for e in result.errors]


class TestValidTrees:
    def test_default_tree_is_valid(self, registry, tree):
        result = validate_tree(tree, registry)
        assert result.valid
        assert result.errors == []

    def test_missing_required_props_not_reported(self, registry):
        tree = {"component": "Card", "children": [{"component": "Button"}, {"component": "Text"}]}
        assert validate_tree(tree, registry).valid

    def test_leaf_with_empty_children_is_valid(self, registry):
        tree = {"component": "TodoApp", "children": [{"component": "Text", "children": []}]}
        assert validate_tree(tree, registry).valid

    def test_to_dict(self, registry, tree):
        assert validate_tree(tree, registry).to_dict() == {"valid": True, "errors": []}


class TestUnknownComponents:
    def test_unknown_component(self, registry):
        tree = {"component": "TodoApp", "children": [{"component": "Table"}]}
        result = validate_tree(tree, registry)

        assert not result.valid
        assert len(result.errors) == 1
        issue = result.errors[0]
        assert issue.path == "$.children[0]"
        assert issue.message == 'Unknown component "Table" at $.children[0]'
        assert issue.suggestion == "Check available components using get_component_details"

    def test_unknown_reported_before_structural(self, registry):
        tree = {
            "component": "TodoApp",
            "props": {"bogus": 1},
            "children": [{"component": "Widget"}],
        }
        result = validate_tree(tree, registry)
        assert messages(result) == [
            'Unknown component "Widget" at $.children[0]',
            'Unknown prop "bogus" for component TodoApp',
        ]

    def test_children_of_unknown_still_walked(self, registry):
        tree = {
            "component": "TodoApp",
            "children": [{"component": "Widget", "children": [{"component": "Text", "props": {"size": 3}}]}],
        }
        result = validate_tree(tree, registry)
        assert [e.path for e in result.errors] == [
            "$.children[0]",
            "$.children[0].children[0].props.size",
        ]


class TestStructure:
    def test_missing_component(self, registry):
        tree = {"component": "TodoApp", "children": [{"props": {}}]}
        result = validate_tree(tree, registry)
        assert messages(result) == ['Node must have a "component" string property']
        assert result.errors[0].path == "$.children[0]"

    def test_non_string_component(self, registry):
        result = validate_tree({"component": 5}, registry)
        assert messages(result) == ['Node must have a "component" string property']
        assert result.errors[0].path == "$"

    def test_non_dict_child(self, registry):
        tree = {"component": "Card", "children": ["hello"]}
        result = validate_tree(tree, registry)
        assert result.errors[0].path == "$.children[0]"
        assert result.errors[0].message == 'Node must have a "component" string property'

    def test_non_dict_root(self, registry):
        result = validate_tree(["not", "a", "node"], registry)
        assert not result.valid
        assert result.errors[0].path == "$"

    def test_props_must_be_object(self, registry):
        result = validate_tree({"component": "Card", "props": ["title"]}, registry)
        assert messages(result) == ["Props must be an object"]
        assert result.errors[0].path == "$.props"

    def test_unknown_prop(self, registry):
        tree = {"component": "TodoApp", "children": [{"component": "Badge", "props": {"label": "x", "color": "red"}}]}
        result = validate_tree(tree, registry)

        assert len(result.errors) == 1
        issue = result.errors[0]
        assert issue.path == "$.children[0].props.color"
        assert issue.message == 'Unknown prop "color" for component Badge'
        assert issue.suggestion == "Valid props: label, variant, className"

    def test_children_must_be_array(self, registry):
        result = validate_tree({"component": "Card", "children": {"component": "Text"}}, registry)
        assert messages(result) == ["Children must be an array"]
        assert result.errors[0].path == "$.children"

    def test_leaf_with_children(self, registry):
        tree = {"component": "TodoApp", "children": [{"component": "Button", "children": [{"component": "Icon"}]}]}
        result = validate_tree(tree, registry)

        assert len(result.errors) == 1
        issue = result.errors[0]
        assert issue.path == "$.children[0].children"
        assert issue.message == "Component Button cannot have children"
        assert issue.suggestion == "Remove children or use a container component"

    def test_children_of_leaf_still_walked(self, registry):
        tree = {"component": "Text", "children": [{"component": "Icon", "props": {"glyph": "x"}}]}
        result = validate_tree(tree, registry)
        assert messages(result) == [
            "Component Text cannot have children",
            'Unknown prop "glyph" for component Icon',
        ]

    def test_errors_in_depth_first_order(self, registry):
        tree = {
            "component": "TodoApp",
            "children": [
                {"component": "Card", "props": {"a": 1}, "children": [{"component": "Text", "props": {"b": 2}}]},
                {"component": "Divider", "props": {"c": 3}},
            ],
        }
        result = validate_tree(tree, registry)
        assert [e.path for e in result.errors] == [
            "$.children[0].props.a",
            "$.children[0].children[0].props.b",
            "$.children[1].props.c",
        ]


class TestPurity:
    @pytest.mark.parametrize(
        "tree",
        [
            {"component": "TodoApp", "children": [{"component": "Table"}, {"props": 1}]},
            {"component": "Button", "props": {"x": 1}, "children": [{"component": "Text"}]},
            {"component": "TodoApp"},
        ],
    )
    def test_idempotent_and_side_effect_free(self, registry, tree):
        before = copy.deepcopy(tree)
        first = validate_tree(tree, registry)
        second = validate_tree(tree, registry)

        assert first == second
        assert tree == before

    def test_never_raises_on_garbage(self, registry):
        for value in [None, 0, "TodoApp", [], {"children": None}, {"component": "Card", "children": [None, 3]}]:
            result = validate_tree(value, registry)
            assert not result.valid
