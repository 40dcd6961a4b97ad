"""Configuration constants for content-tree."""

import os
from dataclasses import dataclass
from pathlib import Path

PAGE_TABLE: str = "pages"
CONTENT_TABLE: str = "tt_content"

# Content elements of this CType carry a data structure and may have children.
FLEXIBLE_CONTENT_TYPE: str = "templavoilaplus_pi1"
TYPE_FIELD: str = "CType"

FLEX_FIELD: str = "tx_templavoilaplus_flex"
MAPPING_FIELD: str = "tx_templavoilaplus_map"
DATA_STRUCTURE_FIELD: str = "tx_templavoilaplus_ds"
NEXT_DATA_STRUCTURE_FIELD: str = "tx_templavoilaplus_next_ds"

# Only the default language slots are traversed.
SOURCE_LANGUAGE_KEYS: tuple[str, ...] = ("lDEF",)
VALUE_LANGUAGE_KEYS: tuple[str, ...] = ("vDEF",)
DEFAULT_SHEET_KEY: str = "sDEF"

# Relation targets in these tables are files, not content.
FILE_TABLES: frozenset[str] = frozenset({"sys_file", "sys_file_reference"})

SHORT_TITLE_LENGTH: int = 50

# Ceiling for mutually referencing content elements.
MAX_TREE_DEPTH: int = 32
MAX_TREE_NODES: int = 10_000


@dataclass(frozen=True)
class TableConfig:
    """Control settings of a table, as far as tree building needs them."""

    label_field: str
    description_field: str = "rowDescription"
    language_field: str = "sys_language_uid"
    translation_parent_field: str = "l10n_parent"
    hidden_field: str = "hidden"
    deleted_field: str = "deleted"


TABLES: dict[str, TableConfig] = {
    PAGE_TABLE: TableConfig(label_field="title"),
    CONTENT_TABLE: TableConfig(label_field="header", translation_parent_field="l18n_parent"),
}


def table_config(table: str) -> TableConfig:
    """Return the control settings for a table, with generic defaults for unknown ones."""
    return TABLES.get(table, TableConfig(label_field="title"))


# Export file location. First file found is used.
EXPORT_FILES: list[Path] = [
    Path("content-export.json"),
    Path("~/.local/share/content-tree/export.json").expanduser(),
    Path("~/.config/content-tree/export.json").expanduser(),
]


def resolve_export_file() -> Path | None:
    """Return the export file to read, honouring ``CONTENT_TREE_EXPORT``."""
    override = os.environ.get("CONTENT_TREE_EXPORT")
    if override:
        return Path(override).expanduser()
    for candidate in EXPORT_FILES:
        if candidate.is_file():
            return candidate
    return None
