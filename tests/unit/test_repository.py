"""Tests for the JSON export repository."""

import json
from pathlib import Path

import pytest

from content_tree.core.importer.repository import ExportRepository
from content_tree.exceptions import (
    MappingConfigurationError,
    MissingRecordError,
    SchemaResolutionError,
)
from content_tree.protocols import (
    LocalizationLookup,
    MappingConfigLookup,
    RecordFetcher,
    RecordLookup,
    RelationResolver,
    SchemaResolver,
)


def test_repository_implements_collaborator_protocols(repository: ExportRepository) -> None:
    for protocol in (
        RecordLookup,
        RecordFetcher,
        RelationResolver,
        LocalizationLookup,
        SchemaResolver,
        MappingConfigLookup,
    ):
        assert isinstance(repository, protocol)


def test_from_data_rejects_unknown_layout() -> None:
    with pytest.raises(ValueError, match="bad export keys"):
        ExportRepository.from_data({"records": {}})


def test_records_need_a_uid() -> None:
    with pytest.raises(ValueError, match="without uid"):
        ExportRepository({"pages": [{"title": "x"}]})


def test_from_file_loads_export(export_file: Path) -> None:
    repository = ExportRepository.from_file(export_file)
    assert repository.fetch("pages", 1) is not None


def test_title_falls_back_to_placeholder(repository: ExportRepository) -> None:
    assert repository.title_of("tt_content", {"uid": 1, "header": "  Intro "}) == "Intro"
    assert repository.title_of("tt_content", {"uid": 1, "header": ""}) == "[No title]"
    assert repository.title_of("pages", {"uid": 1}) == "[No title]"


def test_icon_hint_marks_hidden_records(repository: ExportRepository) -> None:
    assert repository.icon_hint_of("tt_content", {"uid": 11, "hidden": 1}) == "id=11 - Hidden"
    assert repository.icon_hint_of("tt_content", {"uid": 12, "hidden": 0}) == "id=12"


def test_truncate_appends_ellipsis(repository: ExportRepository) -> None:
    assert repository.truncate("abcdef", 3) == "abc..."
    assert repository.truncate("abc", 3) == "abc"
    assert repository.truncate("abcdef", 0) == "abcdef"


def test_fetch_skips_deleted_but_keeps_hidden(repository: ExportRepository) -> None:
    assert repository.fetch("tt_content", 13) is None
    assert repository.fetch("tt_content", 99) is None
    assert repository.fetch("tt_content", 11) is not None
    assert repository.get("tt_content", 13) is not None


def test_require_raises_for_missing_record(repository: ExportRepository) -> None:
    with pytest.raises(MissingRecordError):
        repository.require("tt_content", 13)


def test_resolve_relations_handles_plain_and_prefixed_ids(repository: ExportRepository) -> None:
    resolved = repository.resolve_relations("11, tt_content_12,pages_3,,x,0,13", "tt_content")
    assert resolved == [(1, 11), (2, 12), (3, 13)]


def test_variants_of_finds_translations(repository: ExportRepository) -> None:
    variants = repository.variants_of("tt_content", 11)
    assert [v["uid"] for v in variants] == [14]
    assert repository.variants_of("tt_content", 12) == []


def test_identifier_uses_record_data_structure(repository: ExportRepository) -> None:
    record = repository.require("tt_content", 10)
    identifier = json.loads(repository.identifier_for("tt_content", record))
    assert identifier == {
        "type": "tca",
        "tableName": "tt_content",
        "fieldName": "tx_templavoilaplus_flex",
        "dataStructureKey": "fce_columns",
    }


def test_page_inherits_data_structure_from_rootline(repository: ExportRepository) -> None:
    identifier = repository.identifier_for("pages", repository.require("pages", 2))
    assert json.loads(identifier)["dataStructureKey"] == "page"


def test_rootline_walk_stops_on_cycles() -> None:
    repository = ExportRepository(
        {"pages": [{"uid": 1, "pid": 2}, {"uid": 2, "pid": 1}, {"uid": 3, "pid": 1}]}
    )
    identifier = repository.identifier_for("pages", repository.require("pages", 3))
    assert json.loads(identifier)["dataStructureKey"] == ""


def test_resolve_data_structure_parses_xml(repository: ExportRepository) -> None:
    identifier = repository.identifier_for("tt_content", repository.require("tt_content", 10))
    data = repository.resolve_data_structure(identifier)
    assert "field_columns" in data["sheets"]["sDEF"]["ROOT"]["el"]


@pytest.mark.parametrize(
    "identifier",
    [
        "not json",
        '{"dataStructureKey": ""}',
        '{"dataStructureKey": "missing"}',
        '{"dataStructureKey": "broken"}',
        '{"dataStructureKey": "numeric"}',
    ],
)
def test_resolve_data_structure_errors(identifier: str) -> None:
    repository = ExportRepository(
        {}, data_structures={"broken": "<T3DataStructure>", "numeric": 42}
    )
    with pytest.raises(SchemaResolutionError):
        repository.resolve_data_structure(identifier)


def test_resolve_mapping_builds_configuration(repository: ExportRepository) -> None:
    configuration = repository.resolve_mapping("fce_columns_map")
    assert configuration.combined_backend_layout_identifier == "fce_columns_map/two_columns"


@pytest.mark.parametrize("value", ["unknown", "list", "bad_layout"])
def test_resolve_mapping_errors(value: str) -> None:
    repository = ExportRepository(
        {},
        mapping_configurations={"list": ["x"], "bad_layout": {"backend_layout": 3}},
    )
    with pytest.raises(MappingConfigurationError):
        repository.resolve_mapping(value)
