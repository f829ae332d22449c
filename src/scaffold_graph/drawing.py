"""Layout and matplotlib drawing of assembled scaffold graphs."""

from __future__ import annotations

from collections.abc import Mapping
import math
import re
from typing import Any, Optional

from matplotlib.figure import Figure
from matplotlib.offsetbox import AnnotationBbox, OffsetImage
import networkx as nx
import numpy as np

from scaffold_graph.binder import NODE_ATTR_LABEL
from scaffold_graph.errors import InvalidArgumentError

LAYOUT_METHODS = ("level", "spring")
DEFAULT_LAYOUT = "level"
FAST_SPRING_ITERATIONS = 50
FULL_SPRING_ITERATIONS = 500
LAYOUT_SEED = 0

_RULE_RE = re.compile(r"([A-Za-z_][\w.-]*)\s*\{([^}]*)\}")
_LENGTH_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*(px)?\s*$")

_STYLE_DEFAULTS: dict[str, dict[str, str]] = {
    "graph": {"fill-color": "white", "padding": "70px"},
    "node": {
        "fill-color": "#f4f4f4",
        "stroke-color": "#555555",
        "text-color": "black",
        "text-size": "9",
        "padding": "6px",
    },
    "edge": {"fill-color": "#333333", "size": "1px"},
}


def parse_style_sheet(text: Optional[str]) -> dict[str, dict[str, str]]:
    """Parse ``selector { prop: value; ... }`` rules into nested dicts.

    Later rules for the same selector override earlier declarations.
    """
    rules: dict[str, dict[str, str]] = {}
    if not text:
        return rules
    for selector, body in _RULE_RE.findall(text):
        declarations = rules.setdefault(selector.strip(), {})
        for declaration in body.split(";"):
            if ":" not in declaration:
                continue
            prop, value = declaration.split(":", 1)
            prop = prop.strip().lower()
            if prop:
                declarations[prop] = value.strip()
    return rules


def resolve_style(style_sheet: Optional[str]) -> dict[str, dict[str, str]]:
    merged = {selector: dict(values) for selector, values in _STYLE_DEFAULTS.items()}
    for selector, values in parse_style_sheet(style_sheet).items():
        merged.setdefault(selector, {}).update(values)
    return merged


def _length(value: Optional[str], default: float) -> float:
    if value is None:
        return default
    match = _LENGTH_RE.match(value)
    if match is None:
        return default
    return float(match.group(1))


def compute_layout(
    graph: nx.Graph,
    *,
    method: str = DEFAULT_LAYOUT,
    iterations: int = FAST_SPRING_ITERATIONS,
    seed: int = LAYOUT_SEED,
) -> dict[Any, np.ndarray]:
    """Node positions; ``level`` stacks collection levels top to bottom."""
    if method not in LAYOUT_METHODS:
        raise InvalidArgumentError(
            f"layout must be one of {', '.join(LAYOUT_METHODS)}; got {method!r}."
        )
    if graph.number_of_nodes() == 0:
        return {}
    if graph.number_of_nodes() == 1:
        return {node: np.zeros(2) for node in graph.nodes}
    if method == "level":
        positions = nx.multipartite_layout(graph, subset_key="level", align="horizontal")
        return {node: np.array([pos[0], -pos[1]]) for node, pos in positions.items()}
    return nx.spring_layout(graph, iterations=iterations, seed=seed)


def _node_pixels(count: int, resolution: tuple[int, int]) -> float:
    per_side = max(1.0, math.ceil(math.sqrt(max(count, 1))))
    return max(24.0, min(resolution) / (per_side + 1.5))


def draw_graph(
    graph: Any,
    *,
    positions: Optional[Mapping[Any, Any]] = None,
    resolution: tuple[int, int] = (1280, 960),
    dpi: int = 100,
    figure: Optional[Figure] = None,
) -> Figure:
    """Draw an assembled graph into ``figure`` (a new one when omitted)."""
    nx_graph: nx.Graph = graph if isinstance(graph, nx.Graph) else graph.graph
    style = resolve_style(nx_graph.graph.get("ui.stylesheet"))
    width_px, height_px = resolution
    if figure is None:
        figure = Figure(figsize=(width_px / dpi, height_px / dpi), dpi=dpi)
    figure.clear()
    figure.set_facecolor(style["graph"].get("fill-color", "white"))
    ax = figure.add_subplot(1, 1, 1)
    ax.set_axis_off()
    if positions is None:
        positions = compute_layout(nx_graph)

    node_px = _node_pixels(nx_graph.number_of_nodes(), resolution)
    node_style = style["node"]
    text_size = _length(node_style.get("text-size"), 9.0)
    points_per_px = 72.0 / dpi

    if nx_graph.number_of_edges():
        edge_style = style["edge"]
        nx.draw_networkx_edges(
            nx_graph,
            pos=positions,
            ax=ax,
            edge_color=edge_style.get("fill-color", "#333333"),
            width=_length(edge_style.get("size"), 1.0),
        )

    for node, attrs in nx_graph.nodes(data=True):
        xy = positions[node]
        image = attrs.get("image")
        if image is not None:
            thumb = image.convert("RGBA")
            thumb.thumbnail((int(node_px), int(node_px)))
            box = AnnotationBbox(
                OffsetImage(np.asarray(thumb), zoom=points_per_px),
                xy,
                frameon=True,
                pad=_length(node_style.get("padding"), 6.0) * points_per_px / 10.0,
                bboxprops={
                    "boxstyle": "round",
                    "facecolor": "white",
                    "edgecolor": node_style.get("stroke-color", "#555555"),
                },
            )
            ax.add_artist(box)
        else:
            # Placeholder for nodes without a depiction.
            ax.text(
                xy[0],
                xy[1],
                str(node),
                ha="center",
                va="center",
                fontsize=text_size,
                color=node_style.get("text-color", "black"),
                bbox={
                    "boxstyle": "round,pad=1.2",
                    "facecolor": node_style.get("fill-color", "#f4f4f4"),
                    "edgecolor": node_style.get("stroke-color", "#555555"),
                },
            )
        label = attrs.get(NODE_ATTR_LABEL)
        if label:
            ax.annotate(
                label,
                xy=(xy[0], xy[1]),
                xytext=(0, -(node_px / 2.0 + 6.0) * points_per_px),
                textcoords="offset points",
                ha="center",
                va="top",
                fontsize=text_size,
                color=node_style.get("text-color", "black"),
            )

    if positions:
        coords = np.array([positions[node] for node in nx_graph.nodes])
        span = coords.max(axis=0) - coords.min(axis=0)
        margin = np.maximum(span * 0.15, 0.3)
        ax.set_xlim(coords[:, 0].min() - margin[0], coords[:, 0].max() + margin[0])
        ax.set_ylim(coords[:, 1].min() - margin[1], coords[:, 1].max() + margin[1])
    padding_px = _length(style["graph"].get("padding"), 70.0)
    pad_x = min(0.4, padding_px / max(width_px, 1))
    pad_y = min(0.4, padding_px / max(height_px, 1))
    figure.subplots_adjust(left=pad_x, right=1 - pad_x, bottom=pad_y, top=1 - pad_y)
    return figure


__all__ = [
    "LAYOUT_METHODS",
    "DEFAULT_LAYOUT",
    "FAST_SPRING_ITERATIONS",
    "FULL_SPRING_ITERATIONS",
    "parse_style_sheet",
    "resolve_style",
    "compute_layout",
    "draw_graph",
]
