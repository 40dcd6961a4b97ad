"""Read-only record repository backed by a JSON export file."""

import json
from pathlib import Path
from typing import Any

from loguru import logger

from content_tree.config import (
    DATA_STRUCTURE_FIELD,
    FLEX_FIELD,
    NEXT_DATA_STRUCTURE_FIELD,
    PAGE_TABLE,
    table_config,
)
from content_tree.core.importer.flexform import FlexFormParser, xml_to_dict
from content_tree.exceptions import (
    MappingConfigurationError,
    MissingRecordError,
    SchemaResolutionError,
    StoredDataParseError,
)
from content_tree.models.node import MappingConfiguration

NO_TITLE = "[No title]"


def _truthy(value: Any) -> bool:
    return value not in (None, "", 0, "0", False)


class ExportRepository:
    """In-memory view of an export, implementing every collaborator Protocol.

    The export is a JSON object::

        {"tables": {"pages": [...], "tt_content": [...]},
         "data_structures": {"<key>": "<T3DataStructure>...", ...},
         "mapping_configurations": {"<key>": {"backend_layout": "..."}}}
    """

    def __init__(
        self,
        tables: dict[str, list[dict[str, Any]]],
        *,
        data_structures: dict[str, Any] | None = None,
        mapping_configurations: dict[str, Any] | None = None,
        parser: FlexFormParser | None = None,
    ) -> None:
        self._records: dict[str, dict[int, dict[str, Any]]] = {}
        for table, rows in tables.items():
            by_uid: dict[int, dict[str, Any]] = {}
            for row in rows:
                if "uid" not in row:
                    msg = f"Record without uid in table {table!r}: {row!r}"
                    raise ValueError(msg)
                by_uid[int(row["uid"])] = row
            self._records[table] = by_uid

        self.data_structures = data_structures or {}
        self.mapping_configurations = mapping_configurations or {}
        self.parser = parser or FlexFormParser()

    @classmethod
    def from_data(cls, data: dict[str, Any]) -> "ExportRepository":
        # Guard against export format changes
        unknown = data.keys() - {"tables", "data_structures", "mapping_configurations"}
        if "tables" not in data or unknown:
            msg = f"bad export keys: {sorted(data.keys())!r}"
            raise ValueError(msg)
        return cls(
            data["tables"],
            data_structures=data.get("data_structures"),
            mapping_configurations=data.get("mapping_configurations"),
        )

    @classmethod
    def from_file(cls, path: Path) -> "ExportRepository":
        data = json.loads(path.read_text(encoding="utf-8"))
        repository = cls.from_data(data)
        logger.debug(
            "Loaded export {}: {}",
            path,
            ", ".join(f"{t}={len(r)}" for t, r in repository._records.items()),
        )
        return repository

    def get(self, table: str, uid: int) -> dict[str, Any] | None:
        """Return a record regardless of its deleted flag."""
        return self._records.get(table, {}).get(uid)

    # --- RecordLookup ---

    def title_of(self, table: str, record: dict[str, Any]) -> str:
        label = record.get(table_config(table).label_field)
        title = str(label).strip() if label is not None else ""
        return title or NO_TITLE

    def icon_hint_of(self, table: str, record: dict[str, Any]) -> str:
        hint = f"id={record['uid']}"
        if _truthy(record.get(table_config(table).hidden_field)):
            hint += " - Hidden"
        return hint

    def truncate(self, text: str, max_length: int) -> str:
        if max_length <= 0 or len(text) <= max_length:
            return text
        return text[:max_length] + "..."

    # --- RecordFetcher ---

    def fetch(self, table: str, uid: int) -> dict[str, Any] | None:
        record = self.get(table, uid)
        if record is None or _truthy(record.get(table_config(table).deleted_field)):
            return None
        return record

    def require(self, table: str, uid: int) -> dict[str, Any]:
        """Return an available record or raise MissingRecordError."""
        record = self.fetch(table, uid)
        if record is None:
            msg = f"Record {table}:{uid} not found or deleted"
            raise MissingRecordError(msg)
        return record

    # --- RelationResolver ---

    def resolve_relations(self, id_list: str, table: str) -> list[tuple[int, int]]:
        """Split ``"11,12"`` or ``"tt_content_11,pages_3"`` into ``(position, uid)``.

        Tokens naming another table are dropped. Positions start at 1.
        """
        resolved: list[tuple[int, int]] = []
        for token in str(id_list).split(","):
            token = token.strip()
            if not token:
                continue
            item_table, uid_part = table, token
            if not token.isdigit():
                item_table, _, uid_part = token.rpartition("_")
            if item_table != table or not uid_part.isdigit() or int(uid_part) <= 0:
                logger.debug("Ignoring relation item {!r} for table {}", token, table)
                continue
            resolved.append((len(resolved) + 1, int(uid_part)))
        return resolved

    # --- LocalizationLookup ---

    def variants_of(self, table: str, uid: int) -> list[dict[str, Any]]:
        config = table_config(table)
        return [
            record
            for record in self._records.get(table, {}).values()
            if not _truthy(record.get(config.deleted_field))
            and int(record.get(config.translation_parent_field) or 0) == uid
            and int(record.get(config.language_field) or 0) > 0
        ]

    # --- SchemaResolver ---

    def identifier_for(self, table: str, record: dict[str, Any]) -> str:
        key = str(record.get(DATA_STRUCTURE_FIELD) or "")
        if not key and table == PAGE_TABLE:
            key = self._inherited_data_structure(record)
        return json.dumps(
            {
                "type": "tca",
                "tableName": table,
                "fieldName": FLEX_FIELD,
                "dataStructureKey": key,
            },
            separators=(",", ":"),
        )

    def _inherited_data_structure(self, page: dict[str, Any]) -> str:
        """Walk up the rootline for the template subpages should use."""
        seen = {int(page["uid"])}
        parent_uid = int(page.get("pid") or 0)
        while parent_uid and parent_uid not in seen:
            seen.add(parent_uid)
            parent = self.fetch(PAGE_TABLE, parent_uid)
            if parent is None:
                break
            key = parent.get(NEXT_DATA_STRUCTURE_FIELD) or parent.get(DATA_STRUCTURE_FIELD)
            if key:
                return str(key)
            parent_uid = int(parent.get("pid") or 0)
        return ""

    def resolve_data_structure(self, identifier: str) -> dict[str, Any]:
        try:
            parsed = json.loads(identifier)
        except json.JSONDecodeError as e:
            msg = f"Invalid data structure identifier {identifier!r}"
            raise SchemaResolutionError(msg) from e

        key = parsed.get("dataStructureKey") if isinstance(parsed, dict) else None
        if not key:
            msg = f"No data structure found for identifier {identifier!r}"
            raise SchemaResolutionError(msg)
        if key not in self.data_structures:
            msg = f"Unknown data structure {key!r}"
            raise SchemaResolutionError(msg)

        raw = self.data_structures[key]
        if isinstance(raw, str):
            try:
                return xml_to_dict(raw)
            except StoredDataParseError as e:
                msg = f"Data structure {key!r} is malformed: {e}"
                raise SchemaResolutionError(msg) from e
        if isinstance(raw, dict):
            return raw
        msg = f"Data structure {key!r} is neither XML nor a mapping"
        raise SchemaResolutionError(msg)

    # --- MappingConfigLookup ---

    def resolve_mapping(self, mapping_value: str) -> MappingConfiguration:
        entry = self.mapping_configurations.get(mapping_value)
        if entry is None:
            msg = f"Unknown mapping configuration {mapping_value!r}"
            raise MappingConfigurationError(msg)
        if not isinstance(entry, dict):
            msg = f"Mapping configuration {mapping_value!r} is not a mapping"
            raise MappingConfigurationError(msg)
        backend_layout = entry.get("backend_layout", "")
        if not isinstance(backend_layout, str):
            msg = f"Mapping configuration {mapping_value!r} has a malformed backend_layout"
            raise MappingConfigurationError(msg)
        return MappingConfiguration(identifier=mapping_value, backend_layout=backend_layout)
