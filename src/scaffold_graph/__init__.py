"""Project scaffold trees and networks into renderable graphs."""

from scaffold_graph.assembler import AssembledGraph, assemble, generate_graph
from scaffold_graph.collection import MatrixCollection, NodeRecord, load_collection
from scaffold_graph.config.schema import RenderConfig, Settings
from scaffold_graph.exporter import export, graph_snapshot, write_snapshot

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "AssembledGraph",
    "MatrixCollection",
    "NodeRecord",
    "RenderConfig",
    "Settings",
    "assemble",
    "export",
    "generate_graph",
    "graph_snapshot",
    "load_collection",
    "write_snapshot",
]
