"""Content trees of pages and flexible content elements."""

from content_tree.core.importer.repository import ExportRepository
from content_tree.core.tree.builder import NodeBuilder, build_tree
from content_tree.core.tree.pointer import SelfLocationPointer
from content_tree.core.tree.usage import UsageRegistry
from content_tree.models.node import ContentTree, Node, Rendering
from content_tree.models.schema import Schema

__all__ = [
    "ContentTree",
    "ExportRepository",
    "Node",
    "NodeBuilder",
    "Rendering",
    "Schema",
    "SelfLocationPointer",
    "UsageRegistry",
    "build_tree",
]
