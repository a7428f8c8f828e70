"""Navigation tree builder.

Folds the flat, ordered list of documents into a tree keyed by path
prefixes. The tree mirrors the site's directory structure and is read-only
once built; the layout walks it to render site navigation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Protocol


class NavEntry(Protocol):
    path: str
    data: dict

    @property
    def excluded(self) -> bool: ...


@dataclass
class NavNode:
    """Navigation node for one path prefix.

    ``data`` is the data of the document at exactly this path, or empty
    when only descendants have documents.
    """

    name: str
    data: dict = field(default_factory=dict)
    children: list[NavNode] = field(default_factory=list)

    def child(self, name: str) -> NavNode | None:
        for item in self.children:
            if item.name == name:
                return item
        return None

    def find(self, name: str) -> NavNode | None:
        """Find the node for a path anywhere below (and including) this node."""
        for node in self.walk():
            if node.name == name:
                return node
        return None

    def walk(self) -> Iterator[NavNode]:
        """Yield this node and its descendants, depth first, in sibling order."""
        yield self
        for item in self.children:
            yield from item.walk()

    @property
    def title(self) -> str:
        meta = self.data.get("meta") or {}
        return meta.get("title") or self.name

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "data": self.data,
            "children": [item.to_dict() for item in self.children],
        }


def prefixes(path: str) -> list[str]:
    """Cumulative prefixes below the root: ``/a/b/`` gives ``/a/``, ``/a/b/``."""
    segments = path.split("/")[1:-1]
    return ["/" + "/".join(segments[: i + 1]) + "/" for i in range(len(segments))]


def insert(root: NavNode, path: str, data: dict) -> NavNode:
    context = root
    for name in prefixes(path):
        item = context.child(name)
        if item is None:
            item = NavNode(name=name)
            context.children.append(item)
        context = item
    # Duplicate paths: the later document replaces the earlier one's data.
    context.data = data
    return root


def build_nav_tree(entries: Iterable[NavEntry]) -> NavNode:
    """Build the navigation tree from documents in input order.

    Excluded documents are skipped entirely and never create placeholder
    nodes. Siblings keep first-seen order.
    """
    root = NavNode(name="/")
    for entry in entries:
        if entry.excluded:
            continue
        insert(root, entry.path, entry.data)
    return root


def sort_key(node: NavNode) -> tuple:
    sort_self = node.data.get("navSortSelf")
    return (sort_self is None, sort_self if sort_self is not None else 0, node.title.lower())


def sorted_children(node: NavNode) -> list[NavNode]:
    """Children in display order; the tree itself is left untouched."""
    return sorted(node.children, key=sort_key)
