"""Data structure (schema) models.

A parsed data structure is a loosely typed mapping. It is classified once into
sheets and a tree of tagged field variants so the walker never has to inspect
raw field configuration again.
"""

from dataclasses import dataclass, field
from typing import Any

from content_tree.config import DEFAULT_SHEET_KEY, FILE_TABLES
from content_tree.exceptions import SchemaResolutionError


@dataclass(frozen=True)
class LeafField:
    """A plain value field; carries no children."""

    key: str
    config: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class FixedContainer:
    """A non-repeating group of nested fields."""

    key: str
    fields: dict[str, "Field"] = field(default_factory=dict)


@dataclass(frozen=True)
class RepeatableContainer:
    """A section: nested fields with zero or more stored entries."""

    key: str
    fields: dict[str, "Field"] = field(default_factory=dict)


@dataclass(frozen=True)
class RelationField:
    """A database group field referencing records of ``target_table``."""

    key: str
    target_table: str


Field = LeafField | FixedContainer | RepeatableContainer | RelationField


@dataclass(frozen=True)
class Sheet:
    key: str
    title: str
    fields: dict[str, Field]


@dataclass(frozen=True)
class Schema:
    """A resolved data structure.

    ``error`` is set when resolution failed; such a schema has no sheets.
    """

    identifier: str = ""
    sheets: dict[str, Sheet] = field(default_factory=dict)
    meta: dict[str, Any] = field(default_factory=dict)
    error: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.sheets

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, identifier: str = "") -> "Schema":
        """Classify a parsed data structure mapping.

        Raises:
            SchemaResolutionError: If the structure or its sheets are not mappings.
        """
        if not isinstance(data, dict):
            msg = f"Data structure {identifier!r} is not a mapping"
            raise SchemaResolutionError(msg)
        raw_sheets = data.get("sheets")
        if raw_sheets and not isinstance(raw_sheets, dict):
            msg = f"Data structure {identifier!r} has malformed sheets: {raw_sheets!r}"
            raise SchemaResolutionError(msg)
        if not isinstance(raw_sheets, dict) and isinstance(data.get("ROOT"), dict):
            # Single sheet data structures have no sheets wrapper
            raw_sheets = {DEFAULT_SHEET_KEY: {"ROOT": data["ROOT"]}}

        sheets: dict[str, Sheet] = {}
        for sheet_key, sheet_data in (raw_sheets or {}).items():
            # Sheets may be file references in the raw structure; only inline ones count
            if not isinstance(sheet_data, dict):
                continue
            root = sheet_data.get("ROOT")
            if not isinstance(root, dict) or not isinstance(root.get("el"), dict):
                continue
            sheets[sheet_key] = Sheet(
                key=sheet_key,
                title=_sheet_title(root),
                fields=parse_fields(root["el"]),
            )

        meta = data.get("meta")
        return cls(
            identifier=identifier,
            sheets=sheets,
            meta=meta if isinstance(meta, dict) else {},
        )

    @classmethod
    def failed(cls, identifier: str, message: str) -> "Schema":
        return cls(identifier=identifier, error=message)


def _sheet_title(root: dict[str, Any]) -> str:
    title = root.get("sheetTitle")
    if title is None and isinstance(root.get("TCEforms"), dict):
        title = root["TCEforms"].get("sheetTitle")
    return str(title) if title else ""


def _field_config(config: dict[str, Any]) -> dict[str, Any]:
    """Return the TCA config of a field, from ``TCEforms.config`` or ``config``."""
    tce_forms = config.get("TCEforms")
    if isinstance(tce_forms, dict) and isinstance(tce_forms.get("config"), dict):
        return tce_forms["config"]
    if isinstance(config.get("config"), dict):
        return config["config"]
    return {}


def _relation_target(tca_config: dict[str, Any]) -> str | None:
    if tca_config.get("type") != "group":
        return None
    if tca_config.get("internal_type", "db") != "db":
        return None
    allowed = [t.strip() for t in str(tca_config.get("allowed") or "").split(",") if t.strip()]
    # Multiple allowed tables are not supported; the first content table wins
    for table in allowed:
        if table not in FILE_TABLES:
            return table
    return None


def parse_field(key: str, config: Any) -> Field:
    """Classify a single raw field configuration."""
    if not isinstance(config, dict):
        return LeafField(key=key)

    if config.get("type") == "array":
        nested = config.get("el")
        fields = parse_fields(nested) if isinstance(nested, dict) else {}
        if _is_truthy(config.get("section")):
            return RepeatableContainer(key=key, fields=fields)
        return FixedContainer(key=key, fields=fields)

    tca_config = _field_config(config)
    target = _relation_target(tca_config)
    if target is not None:
        return RelationField(key=key, target_table=target)
    return LeafField(key=key, config=tca_config)


def parse_fields(elements: dict[str, Any]) -> dict[str, Field]:
    return {key: parse_field(key, config) for key, config in elements.items()}


def _is_truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip() not in ("", "0")
    return bool(value)
