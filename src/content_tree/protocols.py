"""Protocols for the collaborators the tree builder depends on."""

from typing import Any, Protocol, runtime_checkable

from content_tree.models.node import MappingConfiguration


@runtime_checkable
class RecordLookup(Protocol):
    """Display helpers for stored records."""

    def title_of(self, table: str, record: dict[str, Any]) -> str:
        """Return the display title of a record."""
        ...

    def icon_hint_of(self, table: str, record: dict[str, Any]) -> str:
        """Return the hover text shown for the record icon."""
        ...

    def truncate(self, text: str, max_length: int) -> str:
        """Shorten text to max_length characters, marking the cut."""
        ...


@runtime_checkable
class SchemaResolver(Protocol):
    """Locate and parse data structures."""

    def identifier_for(self, table: str, record: dict[str, Any]) -> str:
        """Return the data structure identifier for a record."""
        ...

    def resolve_data_structure(self, identifier: str) -> dict[str, Any]:
        """Return the parsed data structure, raising SchemaResolutionError."""
        ...


@runtime_checkable
class StoredDataParser(Protocol):
    """Parse persisted flexform payloads."""

    def parse(self, payload: str) -> dict[str, Any] | None:
        """Return the structured values, or None for an unstructured payload."""
        ...


@runtime_checkable
class RelationResolver(Protocol):
    """Expand encoded relation lists."""

    def resolve_relations(self, id_list: str, table: str) -> list[tuple[int | str, int]]:
        """Return ordered ``(position, uid)`` pairs for records of table.

        Positions are opaque to the tree builder and end up in pointers as is.
        """
        ...


@runtime_checkable
class RecordFetcher(Protocol):
    """Fetch single records, including hidden ones."""

    def fetch(self, table: str, uid: int) -> dict[str, Any] | None:
        """Return the record, or None if it is deleted or unknown."""
        ...


@runtime_checkable
class LocalizationLookup(Protocol):
    """Find translated siblings of a record."""

    def variants_of(self, table: str, uid: int) -> list[dict[str, Any]]:
        """Return localized records of the given default-language record."""
        ...


@runtime_checkable
class MappingConfigLookup(Protocol):
    """Resolve layout mapping configurations."""

    def resolve_mapping(self, mapping_value: str) -> MappingConfiguration:
        """Return the mapping configuration, raising MappingConfigurationError."""
        ...
