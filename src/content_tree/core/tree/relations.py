"""Expand relation field values into child subtrees."""

from typing import TYPE_CHECKING

from loguru import logger

from content_tree.core.tree.pointer import SelfLocationPointer
from content_tree.core.tree.usage import UsageRegistry
from content_tree.models.node import Node
from content_tree.protocols import RecordFetcher, RelationResolver

if TYPE_CHECKING:
    from content_tree.core.tree.builder import NodeBuilder


class RelationExpander:
    """Resolve the records referenced by a relation field and build their trees."""

    def __init__(
        self,
        *,
        relations: RelationResolver,
        fetcher: RecordFetcher,
        builder: "NodeBuilder",
    ) -> None:
        self._relations = relations
        self._fetcher = fetcher
        self._builder = builder

    def expand(
        self,
        id_list: str,
        target_table: str,
        pointer: SelfLocationPointer,
        base_page_id: int,
        usage: UsageRegistry,
        *,
        depth: int,
    ) -> dict[str, Node]:
        """Build one subtree per referenced record, keyed ``"table:uid"``.

        Args:
            id_list: Stored relation value, e.g. ``"11,12"``.
            target_table: Table the relation field points to.
            pointer: Slot of the relation field; the position is filled in per item.
            base_page_id: Page the tree is built for.
            usage: Registry of the current build.
            depth: Depth of the node owning the relation field.

        Returns:
            Child nodes in resolution order. Deleted or unavailable records are
            left out and not counted as used.
        """
        nodes: dict[str, Node] = {}
        for position, uid in self._relations.resolve_relations(id_list, target_table):
            record = self._fetcher.fetch(target_table, uid)
            if record is None:
                logger.debug("Skipping {}:{}: record is deleted or unavailable", target_table, uid)
                continue

            nodes[f"{target_table}:{uid}"] = self._builder.build_node(
                target_table,
                record,
                pointer.with_slot(position=position),
                base_page_id,
                usage,
                depth=depth + 1,
            )
        return nodes
