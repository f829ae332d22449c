"""Capability interface of the external scaffold collection.

Scaffold trees and networks are produced elsewhere. This package only
needs an adjacency matrix and, per matrix index, an object exposing a
``level`` and a chemical ``structure`` handle. Tree and network nodes are
not distinguished.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Protocol, runtime_checkable

from scaffold_graph.errors import ConfigError, InvalidArgumentError
from scaffold_graph.io_utils import read_structured


@runtime_checkable
class ScaffoldNode(Protocol):
    level: int
    structure: Any


@runtime_checkable
class ScaffoldCollection(Protocol):
    def get_matrix(self) -> Any:
        ...

    def get_matrix_node(self, index: int) -> ScaffoldNode:
        ...

    def __len__(self) -> int:
        ...


@dataclass(frozen=True)
class NodeRecord:
    """Plain scaffold node: depth in the collection plus a structure handle."""

    level: int
    structure: Any
    name: Optional[str] = None

    def __post_init__(self) -> None:
        if isinstance(self.level, bool) or not isinstance(self.level, int):
            raise InvalidArgumentError(f"level must be an integer, got {self.level!r}.")
        if self.level < 0:
            raise InvalidArgumentError(f"level must be non-negative, got {self.level}.")


@dataclass(frozen=True)
class MatrixCollection:
    """In-memory collection snapshot: an adjacency matrix and its nodes."""

    matrix: Any
    nodes: tuple[ScaffoldNode, ...]

    def __post_init__(self) -> None:
        if self.matrix is None:
            raise InvalidArgumentError("matrix is required.")
        object.__setattr__(self, "nodes", tuple(self.nodes))

    def get_matrix(self) -> Any:
        return self.matrix

    def get_matrix_node(self, index: int) -> ScaffoldNode:
        if index < 0 or index >= len(self.nodes):
            raise IndexError(f"matrix index out of range: {index}")
        return self.nodes[index]

    def __len__(self) -> int:
        return len(self.nodes)


def collection_size(collection: Any) -> int:
    try:
        return len(collection)
    except TypeError as exc:
        raise InvalidArgumentError(
            "Scaffold collection must report its node count via len()."
        ) from exc


def _node_from_payload(entry: Any, index: int) -> NodeRecord:
    if not isinstance(entry, Mapping):
        raise ConfigError(f"nodes[{index}] must be a mapping.")
    structure = entry.get("smiles", entry.get("structure"))
    if not isinstance(structure, str) or not structure.strip():
        raise ConfigError(f"nodes[{index}] requires a non-empty smiles string.")
    level = entry.get("level", 0)
    if isinstance(level, bool) or not isinstance(level, int):
        raise ConfigError(f"nodes[{index}].level must be an integer.")
    name = entry.get("name")
    return NodeRecord(level=level, structure=structure.strip(), name=name)


def collection_from_payload(payload: Any) -> MatrixCollection:
    """Build a collection from ``{"matrix": [[...]], "nodes": [{"level", "smiles"}]}``."""
    if not isinstance(payload, Mapping):
        raise ConfigError("Collection payload must be a mapping.")
    matrix = payload.get("matrix")
    nodes = payload.get("nodes")
    if not isinstance(matrix, Sequence) or isinstance(matrix, (str, bytes)):
        raise ConfigError("Collection payload requires a matrix (list of rows).")
    if not isinstance(nodes, Sequence) or isinstance(nodes, (str, bytes)):
        raise ConfigError("Collection payload requires a nodes list.")
    records = tuple(_node_from_payload(entry, idx) for idx, entry in enumerate(nodes))
    return MatrixCollection(matrix=list(matrix), nodes=records)


def load_collection(path: Path) -> MatrixCollection:
    """Load a collection snapshot from a JSON or YAML file."""
    return collection_from_payload(read_structured(Path(path)))


__all__ = [
    "ScaffoldNode",
    "ScaffoldCollection",
    "NodeRecord",
    "MatrixCollection",
    "collection_size",
    "collection_from_payload",
    "load_collection",
]
