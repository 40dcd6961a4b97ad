"""Fake collaborators for testing the tree builder."""

import json
from typing import Any

from content_tree.exceptions import (
    MappingConfigurationError,
    SchemaResolutionError,
    StoredDataParseError,
)
from content_tree.models.node import MappingConfiguration


def relation_field(target: str = "tt_content") -> dict[str, Any]:
    """Raw data structure config of a database group field."""
    return {
        "TCEforms": {
            "label": "Content",
            "config": {"type": "group", "internal_type": "db", "allowed": target},
        }
    }


def input_field() -> dict[str, Any]:
    return {"TCEforms": {"label": "Title", "config": {"type": "input"}}}


def single_sheet(fields: dict[str, Any], sheet: str = "sDEF") -> dict[str, Any]:
    """Raw data structure with one sheet holding the given fields."""
    return {"sheets": {sheet: {"ROOT": {"type": "array", "el": fields}}}}


def flex_payload(values: dict[str, Any], sheet: str = "sDEF") -> str:
    """Stored flexform payload with values in the default language slot."""
    return json.dumps({"data": {sheet: {"lDEF": values}}})


class FakeContentStore:
    """In-memory fake implementing every collaborator Protocol.

    Stored payloads are JSON instead of XML. Fetches are recorded for assertions.
    """

    def __init__(self) -> None:
        self.records: dict[tuple[str, int], dict[str, Any]] = {}
        self.deleted: set[tuple[str, int]] = set()
        self.data_structures: dict[str, dict[str, Any]] = {}
        self.mappings: dict[str, MappingConfiguration] = {}
        self.localizations: dict[tuple[str, int], list[dict[str, Any]]] = {}
        self.fetch_calls: list[tuple[str, int]] = []

    def add(self, table: str, record: dict[str, Any], *, deleted: bool = False) -> dict[str, Any]:
        key = (table, int(record["uid"]))
        self.records[key] = record
        if deleted:
            self.deleted.add(key)
        return record

    def title_of(self, table: str, record: dict[str, Any]) -> str:
        return str(record.get("title") or record.get("header") or "")

    def icon_hint_of(self, table: str, record: dict[str, Any]) -> str:
        return f"id={record['uid']}"

    def truncate(self, text: str, max_length: int) -> str:
        return text if len(text) <= max_length else text[:max_length] + "..."

    def identifier_for(self, table: str, record: dict[str, Any]) -> str:
        return f"{table}:{record.get('ds', '')}"

    def resolve_data_structure(self, identifier: str) -> dict[str, Any]:
        if identifier not in self.data_structures:
            msg = f"Unknown data structure {identifier!r}"
            raise SchemaResolutionError(msg)
        return self.data_structures[identifier]

    def parse(self, payload: str) -> dict[str, Any] | None:
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as e:
            raise StoredDataParseError(str(e)) from e
        return data if isinstance(data, dict) else None

    def resolve_relations(self, id_list: str, table: str) -> list[tuple[int, int]]:
        return [(i, int(uid)) for i, uid in enumerate(id_list.split(","), start=1) if uid]

    def fetch(self, table: str, uid: int) -> dict[str, Any] | None:
        self.fetch_calls.append((table, uid))
        if (table, uid) in self.deleted:
            return None
        return self.records.get((table, uid))

    def variants_of(self, table: str, uid: int) -> list[dict[str, Any]]:
        return self.localizations.get((table, uid), [])

    def resolve_mapping(self, mapping_value: str) -> MappingConfiguration:
        if mapping_value not in self.mappings:
            msg = f"Unknown mapping {mapping_value!r}"
            raise MappingConfigurationError(msg)
        return self.mappings[mapping_value]
