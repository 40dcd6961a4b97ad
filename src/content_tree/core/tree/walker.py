"""Walk a data structure in lockstep with its stored flexform values."""

from typing import Any

from content_tree.config import SOURCE_LANGUAGE_KEYS, VALUE_LANGUAGE_KEYS
from content_tree.core.tree.pointer import SelfLocationPointer
from content_tree.core.tree.relations import RelationExpander
from content_tree.core.tree.usage import UsageRegistry
from content_tree.models.node import Node
from content_tree.models.schema import (
    Field,
    FixedContainer,
    RelationField,
    RepeatableContainer,
)


def _mapping(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


class SchemaFieldWalker:
    """Derive the children structure of a node from its schema and stored data.

    The result mirrors the schema: sheet, then source language, then fields.
    Fixed containers nest directly, sections nest under their stored entry key
    and relation fields nest under the value language key, holding the child
    nodes keyed ``"table:uid"``.
    """

    def __init__(self, expander: RelationExpander) -> None:
        self._expander = expander

    def walk_children(
        self,
        node: Node,
        base_page_id: int,
        usage: UsageRegistry,
        *,
        depth: int = 0,
    ) -> dict[str, Any]:
        children: dict[str, Any] = {}
        data = node.stored_data.get("data")
        if node.schema.is_empty or not isinstance(data, dict):
            return children

        for sheet_key, sheet in node.schema.sheets.items():
            sheet_values = _mapping(data.get(sheet_key))
            for language_key in SOURCE_LANGUAGE_KEYS:
                location = SelfLocationPointer(
                    table=node.table,
                    uid=node.uid,
                    sheet=sheet_key,
                    source_language=language_key,
                )
                children.setdefault(sheet_key, {})[language_key] = self.walk_field_tree(
                    sheet.fields,
                    location,
                    _mapping(sheet_values.get(language_key)),
                    base_page_id,
                    usage,
                    depth=depth,
                )
        return children

    def walk_field_tree(
        self,
        fields: dict[str, Field],
        location: SelfLocationPointer,
        values: dict[str, Any],
        base_page_id: int,
        usage: UsageRegistry,
        *,
        depth: int = 0,
    ) -> dict[str, Any]:
        """Walk one level of fields; ``location`` carries table, uid, sheet and language."""
        children: dict[str, Any] = {}
        for key, field in fields.items():
            field_values = _mapping(values.get(key))

            if isinstance(field, FixedContainer):
                children[key] = self.walk_field_tree(
                    field.fields,
                    location,
                    _mapping(field_values.get("el")),
                    base_page_id,
                    usage,
                    depth=depth,
                )
            elif isinstance(field, RepeatableContainer):
                # Entry keys are stored identifiers, not a sequence
                children[key] = {
                    entry_key: self.walk_field_tree(
                        field.fields,
                        location,
                        _mapping(entry),
                        base_page_id,
                        usage,
                        depth=depth,
                    )
                    for entry_key, entry in _mapping(field_values.get("el")).items()
                }
            elif isinstance(field, RelationField):
                children[key] = self._walk_relation(
                    field, location, field_values, base_page_id, usage, depth=depth
                )
        return children

    def _walk_relation(
        self,
        field: RelationField,
        location: SelfLocationPointer,
        field_values: dict[str, Any],
        base_page_id: int,
        usage: UsageRegistry,
        *,
        depth: int,
    ) -> dict[str, Any]:
        slots: dict[str, Any] = {}
        for value_language in VALUE_LANGUAGE_KEYS:
            id_list = field_values.get(value_language)
            if not id_list:
                slots[value_language] = {}
                continue
            slots[value_language] = self._expander.expand(
                str(id_list),
                field.target_table,
                location.with_slot(field=field.key, value_language=value_language),
                base_page_id,
                usage,
                depth=depth,
            )
        return slots
