"""Assemble scaffold collections into renderable networkx graphs."""

from __future__ import annotations

from dataclasses import dataclass, replace
import logging
import re
from typing import Any, Optional

import networkx as nx

from scaffold_graph.binder import BoundNode, bind_node, node_id
from scaffold_graph.collection import collection_size
from scaffold_graph.config.schema import RenderConfig, Settings, get_default_settings
from scaffold_graph.depiction import (
    Depictor,
    ImageScope,
    RDKitDepictor,
    resolve_depiction,
)
from scaffold_graph.errors import (
    DepictionWarning,
    InvalidArgumentError,
    InvalidMatrixError,
    NonEmptyTargetError,
    PathError,
)
from scaffold_graph.matrix import DiscoveredEdge, coerce_matrix, discover_edges

logger = logging.getLogger(__name__)

GRAPH_ATTR_STYLESHEET = "ui.stylesheet"
GRAPH_ATTR_QUALITY = "ui.quality"
GRAPH_ATTR_ANTIALIAS = "ui.antialias"
GRAPH_ATTR_ID = "graph_id"
NODE_ATTR_IMAGE = "image"
NODE_ATTR_IMAGE_PATH = "image_path"
NODE_ATTR_STYLE = "ui.style"
EDGE_ATTR_ID = "edge_id"

_UNSAFE_PREFIX_CHARS = re.compile(r"[^\w.-]")


@dataclass(frozen=True)
class AssembledGraph:
    """Frozen graph of one collection snapshot plus its presentation metadata.

    Release the temporary depiction files with :meth:`release` (or use the
    instance as a context manager) once display/export is done.
    """

    graph: nx.Graph
    graph_id: str
    style_sheet: str
    depiction_failures: tuple[DepictionWarning, ...] = ()
    image_scope: Optional[ImageScope] = None

    @property
    def node_count(self) -> int:
        return self.graph.number_of_nodes()

    @property
    def edge_count(self) -> int:
        return self.graph.number_of_edges()

    def release(self) -> None:
        if self.image_scope is not None:
            self.image_scope.release()

    def __enter__(self) -> "AssembledGraph":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.release()


def _check_target(target: Optional[nx.Graph]) -> nx.Graph:
    if target is None:
        return nx.Graph()
    if not isinstance(target, nx.Graph) or target.is_directed() or target.is_multigraph():
        raise InvalidArgumentError("target must be an undirected networkx.Graph.")
    if target.number_of_nodes() or target.number_of_edges():
        raise NonEmptyTargetError(
            "Target graph must be empty; merging graphs is the collection's job.",
            context={
                "nodes": target.number_of_nodes(),
                "edges": target.number_of_edges(),
            },
        )
    if nx.is_frozen(target):
        raise InvalidArgumentError("target graph is frozen.")
    return target


def _open_image_scope(settings: Settings, graph_id: str) -> Optional[ImageScope]:
    try:
        base_dir = settings.ensure_temp_dir()
    except PathError as exc:
        logger.warning(
            "Temporary image directory unavailable (%s); node images stay in memory only.",
            exc,
        )
        return None
    prefix = _UNSAFE_PREFIX_CHARS.sub("_", graph_id).lstrip(".") or "graph"
    return ImageScope(base_dir, prefix=f"{prefix}-")


def _attach_depiction(
    attrs: dict[str, Any],
    bound: BoundNode,
    depictor: Depictor,
    config: RenderConfig,
    scope: Optional[ImageScope],
    failures: list[DepictionWarning],
) -> None:
    result = resolve_depiction(
        depictor,
        getattr(bound.scaffold_node, "structure", None),
        bound.index,
        config.depiction_size,
    )
    if not result.ok:
        warning = result.warning(bound.index)
        if warning is not None:
            failures.append(warning)
        return
    attrs[NODE_ATTR_IMAGE] = result.image
    if scope is None:
        return
    try:
        path = scope.write(bound.index, result.image)
    except OSError as exc:
        logger.warning("Failed to write image file for index %d: %s", bound.index, exc)
        return
    attrs[NODE_ATTR_IMAGE_PATH] = str(path)
    attrs[NODE_ATTR_STYLE] = f"fill-mode: image-scaled; fill-image: url('{path.resolve()}');"


def assemble(
    collection: Any,
    config: Optional[RenderConfig],
    *,
    settings: Optional[Settings] = None,
    depictor: Optional[Depictor] = None,
    target: Optional[nx.Graph] = None,
) -> AssembledGraph:
    """Project ``collection`` into a frozen, annotated networkx graph.

    Node ``str(i)`` stands for matrix row ``i``; edges come from the lower
    triangle of the adjacency matrix (see :mod:`scaffold_graph.matrix`).
    Structural problems raise before ``target`` is touched; a structure
    that cannot be depicted only leaves its node without an image.
    """
    if collection is None:
        raise InvalidArgumentError("Scaffold collection is required.")
    if config is None:
        raise InvalidArgumentError("Render config is required.")
    if not isinstance(config, RenderConfig):
        raise InvalidArgumentError("config must be a RenderConfig.")
    if not callable(getattr(collection, "get_matrix", None)) or not callable(
        getattr(collection, "get_matrix_node", None)
    ):
        raise InvalidArgumentError(
            "Scaffold collection must provide get_matrix() and get_matrix_node()."
        )
    if settings is None:
        settings = get_default_settings()

    matrix = coerce_matrix(collection.get_matrix())
    size = collection_size(collection)
    rows = len(matrix)
    if rows != size:
        raise InvalidMatrixError(
            f"Adjacency matrix has {rows} rows but the collection holds {size} nodes.",
            context={"rows": rows, "nodes": size},
        )
    edges: list[DiscoveredEdge] = discover_edges(matrix)
    bound_nodes = [
        bind_node(collection, index, label_nodes=config.label_nodes)
        for index in range(size)
    ]
    graph = _check_target(target)
    if depictor is None:
        depictor = RDKitDepictor()

    edges_by_row: dict[int, list[DiscoveredEdge]] = {}
    for edge in edges:
        edges_by_row.setdefault(edge.row, []).append(edge)

    scope = _open_image_scope(settings, config.graph_id) if size else None
    failures: list[DepictionWarning] = []
    try:
        graph.graph[GRAPH_ATTR_STYLESHEET] = config.style_sheet
        graph.graph[GRAPH_ATTR_QUALITY] = True
        graph.graph[GRAPH_ATTR_ANTIALIAS] = True
        graph.graph[GRAPH_ATTR_ID] = config.graph_id
        for bound in bound_nodes:
            attrs = bound.attributes()
            _attach_depiction(attrs, bound, depictor, config, scope, failures)
            graph.add_node(bound.node_id, **attrs)
            for edge in edges_by_row.get(bound.index, ()):
                graph.add_edge(
                    node_id(edge.row),
                    node_id(edge.column),
                    **{EDGE_ATTR_ID: str(edge.edge_id)},
                )
    except BaseException:
        # No partial graph survives an unexpected depictor error.
        graph.clear()
        if scope is not None:
            scope.release()
        raise

    logger.info(
        "Assembled graph %r: %d nodes, %d edges, %d depiction failure(s).",
        config.graph_id,
        graph.number_of_nodes(),
        graph.number_of_edges(),
        len(failures),
    )
    return AssembledGraph(
        graph=nx.freeze(graph),
        graph_id=config.graph_id,
        style_sheet=config.style_sheet,
        depiction_failures=tuple(failures),
        image_scope=scope,
    )


def generate_graph(
    collection: Any,
    *,
    label_nodes: Optional[bool] = None,
    depictor: Optional[Depictor] = None,
) -> AssembledGraph:
    """Assemble with the process-wide default settings."""
    settings = get_default_settings()
    config = settings.render
    if label_nodes is not None:
        config = replace(config, label_nodes=label_nodes)
    return assemble(collection, config, settings=settings, depictor=depictor)


__all__ = [
    "GRAPH_ATTR_STYLESHEET",
    "GRAPH_ATTR_QUALITY",
    "GRAPH_ATTR_ANTIALIAS",
    "GRAPH_ATTR_ID",
    "NODE_ATTR_IMAGE",
    "NODE_ATTR_IMAGE_PATH",
    "NODE_ATTR_STYLE",
    "EDGE_ATTR_ID",
    "AssembledGraph",
    "assemble",
    "generate_graph",
]
