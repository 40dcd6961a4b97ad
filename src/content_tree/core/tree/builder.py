"""Build content trees from pages and flexible content elements."""

import hashlib
from dataclasses import replace
from typing import Any

from loguru import logger

from content_tree.config import (
    CONTENT_TABLE,
    FLEX_FIELD,
    FLEXIBLE_CONTENT_TYPE,
    MAPPING_FIELD,
    MAX_TREE_DEPTH,
    MAX_TREE_NODES,
    PAGE_TABLE,
    SHORT_TITLE_LENGTH,
    TYPE_FIELD,
    table_config,
)
from content_tree.core.importer.repository import ExportRepository
from content_tree.core.tree.pointer import SelfLocationPointer, encode, root_pointer
from content_tree.core.tree.relations import RelationExpander
from content_tree.core.tree.usage import UsageRegistry
from content_tree.core.tree.walker import SchemaFieldWalker
from content_tree.exceptions import (
    MappingConfigurationError,
    RecursionLimitExceeded,
    SchemaResolutionError,
    StoredDataParseError,
)
from content_tree.models.node import ContentTree, MappingConfiguration, Node, Rendering
from content_tree.models.schema import Schema
from content_tree.protocols import (
    LocalizationLookup,
    MappingConfigLookup,
    RecordFetcher,
    RecordLookup,
    RelationResolver,
    SchemaResolver,
    StoredDataParser,
)


def _owning_page_id(table: str, record: dict[str, Any]) -> int:
    if table == PAGE_TABLE:
        return int(record["uid"])
    return int(record.get("pid") or 0)


def _fingerprint(pointer_string: str, table: str, uid: int) -> str:
    return hashlib.md5(f"{pointer_string}/{table}:{uid}".encode()).hexdigest()


class NodeBuilder:
    """Turn records into nodes, following relation fields recursively.

    A single usage registry is shared by every node of one build so reused
    records can be reported. Relation cycles are cut off by ``max_depth`` and
    ``max_nodes``; exceeding either aborts the build.
    """

    def __init__(
        self,
        *,
        records: RecordLookup,
        fetcher: RecordFetcher,
        schemas: SchemaResolver,
        parser: StoredDataParser,
        relations: RelationResolver,
        localizations: LocalizationLookup,
        mappings: MappingConfigLookup,
        max_depth: int = MAX_TREE_DEPTH,
        max_nodes: int = MAX_TREE_NODES,
    ) -> None:
        self._records = records
        self._schemas = schemas
        self._parser = parser
        self._localizations = localizations
        self._mappings = mappings
        self.max_depth = max_depth
        self.max_nodes = max_nodes

        self.expander = RelationExpander(relations=relations, fetcher=fetcher, builder=self)
        self.walker = SchemaFieldWalker(self.expander)

    @classmethod
    def from_repository(
        cls,
        repository: ExportRepository,
        *,
        max_depth: int = MAX_TREE_DEPTH,
        max_nodes: int = MAX_TREE_NODES,
    ) -> "NodeBuilder":
        return cls(
            records=repository,
            fetcher=repository,
            schemas=repository,
            parser=repository.parser,
            relations=repository,
            localizations=repository,
            mappings=repository,
            max_depth=max_depth,
            max_nodes=max_nodes,
        )

    def build_tree(
        self,
        table: str,
        record: dict[str, Any],
        pointer: SelfLocationPointer | None = None,
        base_page_id: int | None = None,
    ) -> ContentTree:
        """Build the full tree below a record with a fresh usage registry."""
        usage = UsageRegistry()
        node = self.build_node(table, record, pointer, base_page_id, usage)
        logger.info(
            "Built tree for {}:{}: {} nodes, {} distinct records",
            table, node.uid, usage.total(), len(usage),
        )
        return ContentTree(node=node, usage=usage.as_report())

    def build_node(
        self,
        table: str,
        record: dict[str, Any],
        pointer: SelfLocationPointer | None = None,
        base_page_id: int | None = None,
        usage: UsageRegistry | None = None,
        *,
        depth: int = 0,
    ) -> Node:
        """Build a node with schema, stored data, localizations and children.

        Args:
            table: Table of the record (pages or tt_content).
            record: The raw record.
            pointer: Slot referencing this record; defaults to ``table:uid``.
            base_page_id: Page the tree is built for; defaults to the record's page.
            usage: Registry shared by the whole build.
            depth: Relation depth below the tree root.

        Raises:
            RecursionLimitExceeded: If the build exceeds max_depth or max_nodes.
        """
        uid = int(record["uid"])
        if usage is None:
            usage = UsageRegistry()
        if depth > self.max_depth:
            msg = f"Content tree deeper than {self.max_depth} levels at {table}:{uid}"
            raise RecursionLimitExceeded(msg)
        if usage.total() >= self.max_nodes:
            msg = f"Content tree has more than {self.max_nodes} nodes at {table}:{uid}"
            raise RecursionLimitExceeded(msg)

        if base_page_id is None:
            base_page_id = _owning_page_id(table, record)
        if pointer is None:
            pointer = root_pointer(table, uid)

        node = self.build_node_from_record(table, record, pointer, base_page_id, usage)
        node = replace(node, schema=self.resolve_schema(node))
        node = replace(node, stored_data=self.resolve_stored_data(node))
        node = replace(node, localized_variants=self.resolve_localized_variants(node))
        return replace(
            node,
            children=self.walker.walk_children(node, base_page_id, usage, depth=depth),
        )

    def build_node_from_record(
        self,
        table: str,
        record: dict[str, Any],
        pointer: SelfLocationPointer | None = None,
        base_page_id: int | None = None,
        usage: UsageRegistry | None = None,
    ) -> Node:
        """Build a node with rendering metadata only (no schema, data or children)."""
        uid = int(record["uid"])
        if base_page_id is None:
            base_page_id = _owning_page_id(table, record)
        if pointer is None:
            pointer = root_pointer(table, uid)
        if usage is None:
            usage = UsageRegistry()

        title = self._records.title_of(table, record)
        pointer_string = encode(pointer)
        mapping_configuration = self.resolve_mapping_configuration(record)
        description = record.get(table_config(table).description_field)

        rendering = Rendering(
            short_title=self._records.truncate(title, SHORT_TITLE_LENGTH),
            full_title=title,
            hint_title=self._records.icon_hint_of(table, record),
            description=str(description) if description is not None else "",
            belongs_to_current_page=base_page_id == _owning_page_id(table, record),
            count_used_on_page=usage.increment(table, uid),
            self_location_pointer=pointer_string,
            backend_layout=(
                mapping_configuration.combined_backend_layout_identifier
                if mapping_configuration
                else ""
            ),
            fingerprint=_fingerprint(pointer_string, table, uid),
        )
        return Node(table=table, record=record, rendering=rendering)

    def resolve_mapping_configuration(self, record: dict[str, Any]) -> MappingConfiguration | None:
        mapping_value = record.get(MAPPING_FIELD)
        if not mapping_value:
            return None
        try:
            return self._mappings.resolve_mapping(mapping_value)
        except (MappingConfigurationError, TypeError) as e:
            logger.debug("No mapping configuration for uid {}: {}", record.get("uid"), e)
            return None

    def resolve_schema(self, node: Node) -> Schema:
        """Resolve the data structure of pages and flexible content elements.

        Other records get an empty schema. A failed resolution is kept as an
        error on the schema, so the node simply has no children.
        """
        is_flexible_content = (
            node.table == CONTENT_TABLE and node.record.get(TYPE_FIELD) == FLEXIBLE_CONTENT_TYPE
        )
        if node.table != PAGE_TABLE and not is_flexible_content:
            return Schema()

        identifier = self._schemas.identifier_for(node.table, node.record)
        try:
            data_structure = self._schemas.resolve_data_structure(identifier)
            return Schema.from_dict(data_structure, identifier=identifier)
        except SchemaResolutionError as e:
            logger.debug("Data structure of {}:{} not resolved: {}", node.table, node.uid, e)
            return Schema.failed(identifier, str(e))

    def resolve_stored_data(self, node: Node) -> dict[str, Any]:
        payload = node.record.get(FLEX_FIELD)
        if not payload:
            return {}
        try:
            stored_data = self._parser.parse(str(payload))
        except StoredDataParseError as e:
            logger.debug("Flexform of {}:{} not parsed: {}", node.table, node.uid, e)
            return {}
        return stored_data if isinstance(stored_data, dict) else {}

    def resolve_localized_variants(self, node: Node) -> dict[int, Node]:
        language_field = table_config(node.table).language_field
        return {
            int(localized.get(language_field) or 0): self.build_node_from_record(
                node.table, localized
            )
            for localized in self._localizations.variants_of(node.table, node.uid)
        }


def build_tree(
    table: str,
    record: dict[str, Any],
    pointer: SelfLocationPointer | None = None,
    base_page_id: int | None = None,
    *,
    builder: NodeBuilder,
) -> ContentTree:
    """Build the content tree of a page or flexible content element."""
    return builder.build_tree(table, record, pointer, base_page_id)
