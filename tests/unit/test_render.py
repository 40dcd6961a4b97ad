"""Tests for text and JSON rendering of content trees."""

import json

import pytest

from content_tree.core.importer.repository import ExportRepository
from content_tree.core.tree.builder import NodeBuilder
from content_tree.core.tree.render import node_to_dict, render_tree_as_text, tree_to_dict
from content_tree.models.node import ContentTree


@pytest.fixture
def home_tree(repository: ExportRepository) -> ContentTree:
    builder = NodeBuilder.from_repository(repository)
    return builder.build_tree("pages", repository.require("pages", 1))


def test_render_lists_nested_elements(home_tree: ContentTree) -> None:
    text = render_tree_as_text(home_tree.node)
    lines = text.splitlines()

    assert lines[0] == "- Home [pages:1]"
    assert "    sDEF/lDEF/field_content/vDEF:" in lines
    assert "    - Columns [tt_content:10]" in lines
    assert "        sDEF/lDEF/field_columns/3/column/field_items/vDEF:" in lines
    assert "        - Shared footer [tt_content:12] (used 2x) (from page 3)" in lines
    assert "          > Used on every page" in lines
    assert "    - Hello [tt_content:11]" in lines


def test_render_without_descriptions(home_tree: ContentTree) -> None:
    text = render_tree_as_text(home_tree.node, include_descriptions=False)
    assert "Used on every page" not in text


def test_render_with_depth_limit_shows_truncation(home_tree: ContentTree) -> None:
    text = render_tree_as_text(home_tree.node, max_depth=1)
    assert "Columns" in text
    assert "Shared footer" not in text
    assert "        - ... (2 more children)" in text


def test_render_shows_schema_errors(repository: ExportRepository) -> None:
    builder = NodeBuilder.from_repository(repository)
    node = builder.build_node("pages", repository.require("pages", 5))

    text = render_tree_as_text(node)

    assert text.startswith("- Orphan [pages:5]\n")
    assert "  ! No data structure found" in text


def test_tree_to_dict_is_json_serializable(home_tree: ContentTree) -> None:
    data = json.loads(json.dumps(tree_to_dict(home_tree)))

    assert data["usage"]["tt_content"] == {"10": 1, "12": 2, "11": 1}
    root = data["node"]
    assert root["schema"]["sheets"] == ["sDEF"]
    slot = root["children"]["sDEF"]["lDEF"]["field_content"]["vDEF"]
    assert list(slot) == ["tt_content:10", "tt_content:11"]
    assert slot["tt_content:11"]["localized_variants"]["1"]["uid"] == 14


def test_node_to_dict_keeps_rendering(home_tree: ContentTree) -> None:
    data = node_to_dict(home_tree.node)
    assert data["rendering"]["self_location_pointer"] == "pages:1"
    assert data["rendering"]["count_used_on_page"] == 1


def test_node_to_dict_keeps_raw_record_and_values(home_tree: ContentTree) -> None:
    data = json.loads(json.dumps(tree_to_dict(home_tree)))

    root = data["node"]
    assert root["record"]["title"] == "Home"
    values = root["stored_data"]["data"]["sDEF"]["lDEF"]["field_content"]
    assert values == {"vDEF": "10,11"}
    hello = root["children"]["sDEF"]["lDEF"]["field_content"]["vDEF"]["tt_content:11"]
    assert hello["record"]["header"] == "Hello"
    assert hello["stored_data"] == {}
