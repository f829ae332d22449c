"""Raster export and JSON snapshots of assembled graphs."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Optional, Union

from matplotlib.figure import Figure
import networkx as nx

from scaffold_graph.assembler import (
    EDGE_ATTR_ID,
    NODE_ATTR_IMAGE,
    NODE_ATTR_IMAGE_PATH,
    AssembledGraph,
)
from scaffold_graph.binder import NODE_ATTR_SCAFFOLD
from scaffold_graph.config.schema import Settings, ensure_directory, get_default_settings
from scaffold_graph.drawing import (
    DEFAULT_LAYOUT,
    FAST_SPRING_ITERATIONS,
    FULL_SPRING_ITERATIONS,
    compute_layout,
    draw_graph,
)
from scaffold_graph.errors import EmptyPathError, InvalidArgumentError, PathError
from scaffold_graph.io_utils import write_json_atomic

logger = logging.getLogger(__name__)

EXPORT_QUALITIES = ("fast", "high")
IMAGE_FORMATS = {".png": "png", ".jpg": "jpeg", ".jpeg": "jpeg"}
SNAPSHOT_SCHEMA_VERSION = 1

PathLike = Union[str, os.PathLike]


def resolve_output_path(path: Optional[PathLike]) -> Path:
    """Validate an output file path and create its parent directory."""
    if path is None or not str(path).strip():
        raise EmptyPathError("Output path must not be blank.")
    target = Path(path).expanduser()
    ensure_directory(target.parent if str(target.parent) else Path.cwd())
    if target.is_dir():
        raise PathError(f"Output path is a directory: {target}", context={"path": str(target)})
    if target.exists() and not os.access(target, os.W_OK):
        raise PathError(f"Output file is not writable: {target}", context={"path": str(target)})
    return target


def _require_graph(graph: Any) -> AssembledGraph:
    if graph is None:
        raise InvalidArgumentError("Graph to export is required.")
    if not isinstance(graph, AssembledGraph):
        raise InvalidArgumentError("Only assembled graphs can be exported.")
    return graph


def _save_figure(figure: Figure, target: Path, *, dpi: Optional[int] = None) -> None:
    fmt = IMAGE_FORMATS.get(target.suffix.lower(), "png")
    try:
        figure.savefig(
            target,
            format=fmt,
            dpi=dpi if dpi is not None else figure.dpi,
            facecolor=figure.get_facecolor(),
        )
    except OSError as exc:
        raise PathError(
            f"Failed to write image: {target}",
            context={"path": str(target), "reason": str(exc)},
        ) from exc


def export(
    graph: AssembledGraph,
    path: PathLike,
    quality: str = "fast",
    *,
    settings: Optional[Settings] = None,
    figure: Optional[Figure] = None,
    layout: str = DEFAULT_LAYOUT,
) -> Path:
    """Write ``graph`` as a raster image, overwriting ``path``.

    ``fast`` saves ``figure`` as it is currently drawn (for instance the
    figure returned by :func:`scaffold_graph.viewer.display`), or draws once
    at screen resolution when no figure is given. ``high`` always runs a
    full off-screen layout and draws at ``settings.high_quality_resolution``.
    """
    graph = _require_graph(graph)
    if quality not in EXPORT_QUALITIES:
        raise InvalidArgumentError(
            f"quality must be one of {', '.join(EXPORT_QUALITIES)}; got {quality!r}."
        )
    target = resolve_output_path(path)
    if settings is None:
        settings = get_default_settings()

    if quality == "fast":
        if figure is None:
            positions = compute_layout(
                graph.graph, method=layout, iterations=FAST_SPRING_ITERATIONS
            )
            figure = draw_graph(
                graph,
                positions=positions,
                resolution=settings.screen_resolution,
                dpi=settings.dpi,
            )
        _save_figure(figure, target)
    else:
        positions = compute_layout(
            graph.graph, method=layout, iterations=FULL_SPRING_ITERATIONS
        )
        rendered = draw_graph(
            graph,
            positions=positions,
            resolution=settings.high_quality_resolution,
            dpi=settings.dpi,
        )
        _save_figure(rendered, target, dpi=settings.dpi)
    logger.info("Exported graph %r (%s quality) to %s", graph.graph_id, quality, target)
    return target


def screenshot_graph(
    graph: AssembledGraph,
    path: PathLike,
    *,
    settings: Optional[Settings] = None,
    figure: Optional[Figure] = None,
) -> Path:
    return export(graph, path, "fast", settings=settings, figure=figure)


def screenshot_graph_high_quality(
    graph: AssembledGraph,
    path: PathLike,
    *,
    settings: Optional[Settings] = None,
) -> Path:
    return export(graph, path, "high", settings=settings)


def _json_safe(value: Any) -> bool:
    return value is None or isinstance(value, (str, int, float, bool))


def graph_snapshot(graph: AssembledGraph) -> dict[str, Any]:
    """Node-link payload of ``graph`` without in-memory images or node objects."""
    graph = _require_graph(graph)
    snapshot = nx.Graph()
    snapshot.graph.update(
        {key: value for key, value in graph.graph.graph.items() if _json_safe(value)}
    )
    snapshot.graph["schema_version"] = SNAPSHOT_SCHEMA_VERSION
    for node, attrs in graph.graph.nodes(data=True):
        payload = {
            key: value
            for key, value in attrs.items()
            if key not in {NODE_ATTR_IMAGE, NODE_ATTR_SCAFFOLD, NODE_ATTR_IMAGE_PATH}
            and _json_safe(value)
        }
        payload["has_image"] = attrs.get(NODE_ATTR_IMAGE) is not None
        structure = getattr(attrs.get(NODE_ATTR_SCAFFOLD), "structure", None)
        if isinstance(structure, str):
            payload["structure"] = structure
        snapshot.add_node(node, **payload)
    for source, target, attrs in graph.graph.edges(data=True):
        snapshot.add_edge(source, target, **{EDGE_ATTR_ID: attrs.get(EDGE_ATTR_ID)})
    data = nx.readwrite.json_graph.node_link_data(snapshot)
    if "links" not in data and "edges" in data:
        data["links"] = data.pop("edges")
    data["depiction_failures"] = [
        {"index": failure.index, "message": failure.message}
        for failure in graph.depiction_failures
    ]
    return data


def write_snapshot(graph: AssembledGraph, path: PathLike) -> Path:
    target = resolve_output_path(path)
    write_json_atomic(target, graph_snapshot(graph))
    return target


__all__ = [
    "EXPORT_QUALITIES",
    "resolve_output_path",
    "export",
    "screenshot_graph",
    "screenshot_graph_high_quality",
    "graph_snapshot",
    "write_snapshot",
]
