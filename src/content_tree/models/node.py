"""Domain models for content trees."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from content_tree.config import PAGE_TABLE
from content_tree.models.schema import Schema


@dataclass(frozen=True)
class MappingConfiguration:
    """Layout mapping of a record, as far as the tree needs it."""

    identifier: str
    backend_layout: str = ""

    @property
    def combined_backend_layout_identifier(self) -> str:
        if not self.backend_layout:
            return ""
        return f"{self.identifier}/{self.backend_layout}"


@dataclass(frozen=True)
class Rendering:
    """Display metadata derived for a node."""

    short_title: str
    full_title: str
    hint_title: str
    description: str
    belongs_to_current_page: bool
    count_used_on_page: int
    self_location_pointer: str
    backend_layout: str
    fingerprint: str


@dataclass(frozen=True)
class Node:
    """A single record rendered as an element of a content tree."""

    table: str
    record: dict[str, Any]
    rendering: Rendering
    schema: Schema = field(default_factory=Schema)
    stored_data: dict[str, Any] = field(default_factory=dict)
    localized_variants: dict[int, "Node"] = field(default_factory=dict)
    children: dict[str, Any] = field(default_factory=dict)

    @property
    def uid(self) -> int:
        return int(self.record["uid"])

    @property
    def page_id(self) -> int:
        """The page this record lives on (the page itself for page records)."""
        if self.table == PAGE_TABLE:
            return self.uid
        return int(self.record.get("pid", 0))

    def iter_child_nodes(self) -> Iterator["Node"]:
        """Yield direct child nodes in tree order."""
        yield from _iter_nodes(self.children)


def _iter_nodes(structure: Any) -> Iterator[Node]:
    if isinstance(structure, Node):
        yield structure
    elif isinstance(structure, dict):
        for value in structure.values():
            yield from _iter_nodes(value)


@dataclass(frozen=True)
class ContentTree:
    """Result of one tree build: the root node and the record usage report."""

    node: Node
    usage: dict[str, dict[int, int]]

    def reused_records(self) -> list[tuple[str, int, int]]:
        """Return ``(table, uid, count)`` for records visited more than once."""
        return [
            (table, uid, count)
            for table, counts in self.usage.items()
            for uid, count in counts.items()
            if count > 1
        ]
