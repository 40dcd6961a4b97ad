"""Render content trees as indented text or JSON-ready dicts."""

import io
from collections.abc import Iterator
from dataclasses import asdict
from typing import Any

from content_tree.models.node import ContentTree, Node


def _iter_slots(
    children: dict[str, Any], path: tuple[str, ...] = ()
) -> Iterator[tuple[tuple[str, ...], list[Node]]]:
    """Yield ``(path, nodes)`` for every relation slot holding nodes."""
    nodes = [value for value in children.values() if isinstance(value, Node)]
    if nodes:
        yield path, nodes
        return
    for key, value in children.items():
        if isinstance(value, dict):
            yield from _iter_slots(value, (*path, str(key)))


def _write_node(
    out: io.StringIO,
    node: Node,
    *,
    depth: int,
    max_depth: int | None,
    include_descriptions: bool,
) -> None:
    indent = "    " * depth
    rendering = node.rendering

    line = f"{indent}- {rendering.short_title} [{node.table}:{node.uid}]"
    if rendering.count_used_on_page > 1:
        line += f" (used {rendering.count_used_on_page}x)"
    if not rendering.belongs_to_current_page:
        line += f" (from page {node.page_id})"
    out.write(line + "\n")

    if include_descriptions and rendering.description:
        for description_line in rendering.description.split("\n"):
            out.write(f"{indent}  > {description_line}\n")
    if node.schema.error:
        out.write(f"{indent}  ! {node.schema.error}\n")

    slots = list(_iter_slots(node.children))
    if max_depth is not None and depth >= max_depth:
        child_count = sum(len(nodes) for _path, nodes in slots)
        if child_count:
            noun = "child" if child_count == 1 else "children"
            out.write(f"{indent}    - ... ({child_count} more {noun})\n")
        return

    for path, nodes in slots:
        out.write(f"{indent}    {'/'.join(path)}:\n")
        for child in nodes:
            _write_node(
                out,
                child,
                depth=depth + 1,
                max_depth=max_depth,
                include_descriptions=include_descriptions,
            )


def render_tree_as_text(
    node: Node,
    *,
    max_depth: int | None = None,
    include_descriptions: bool = True,
) -> str:
    """Render a node and its descendants as an indented bullet list.

    Args:
        node: The root node to start rendering from.
        max_depth: Max relation levels below the start node (None = unlimited).
        include_descriptions: Whether to include record descriptions.

    Returns:
        One line per node, with relation slots labelled by their data path.
    """
    out = io.StringIO()
    _write_node(out, node, depth=0, max_depth=max_depth, include_descriptions=include_descriptions)
    return out.getvalue()


def _children_to_dict(structure: Any) -> Any:
    if isinstance(structure, Node):
        return node_to_dict(structure)
    if isinstance(structure, dict):
        return {str(key): _children_to_dict(value) for key, value in structure.items()}
    return structure


def node_to_dict(node: Node) -> dict[str, Any]:
    """Convert a node and its descendants to JSON-serializable data."""
    return {
        "table": node.table,
        "uid": node.uid,
        "record": node.record,
        "rendering": asdict(node.rendering),
        "schema": {
            "identifier": node.schema.identifier,
            "error": node.schema.error,
            "sheets": list(node.schema.sheets),
        },
        "stored_data": node.stored_data,
        "localized_variants": {
            str(language): node_to_dict(variant)
            for language, variant in node.localized_variants.items()
        },
        "children": _children_to_dict(node.children),
    }


def tree_to_dict(tree: ContentTree) -> dict[str, Any]:
    return {
        "node": node_to_dict(tree.node),
        "usage": {
            table: {str(uid): count for uid, count in counts.items()}
            for table, counts in tree.usage.items()
        },
    }
