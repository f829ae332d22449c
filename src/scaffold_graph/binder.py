"""Bind matrix indices to graph node identities and labels."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from scaffold_graph.collection import ScaffoldNode
from scaffold_graph.errors import InvalidArgumentError

NODE_ATTR_SCAFFOLD = "scaffold_node"
NODE_ATTR_LABEL = "ui.label"


def node_id(index: int) -> str:
    return str(index)


def node_label(level: int, index: int) -> str:
    return f"Level: {level}; Index: {index}"


@dataclass(frozen=True)
class BoundNode:
    node_id: str
    index: int
    level: int
    scaffold_node: ScaffoldNode
    label: Optional[str] = None

    def attributes(self) -> dict[str, Any]:
        attrs: dict[str, Any] = {
            NODE_ATTR_SCAFFOLD: self.scaffold_node,
            "index": self.index,
            "level": self.level,
        }
        if self.label is not None:
            attrs[NODE_ATTR_LABEL] = self.label
        return attrs


def bind_node(collection: Any, index: int, *, label_nodes: bool) -> BoundNode:
    scaffold_node = collection.get_matrix_node(index)
    if scaffold_node is None:
        raise InvalidArgumentError(
            f"Scaffold collection returned no node for matrix index {index}.",
            context={"index": index},
        )
    level = getattr(scaffold_node, "level", None)
    if isinstance(level, bool) or not isinstance(level, int) or level < 0:
        raise InvalidArgumentError(
            f"Node at matrix index {index} has no valid level: {level!r}.",
            context={"index": index},
        )
    return BoundNode(
        node_id=node_id(index),
        index=index,
        level=level,
        scaffold_node=scaffold_node,
        label=node_label(level, index) if label_nodes else None,
    )


__all__ = [
    "NODE_ATTR_SCAFFOLD",
    "NODE_ATTR_LABEL",
    "BoundNode",
    "node_id",
    "node_label",
    "bind_node",
]
