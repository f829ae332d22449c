"""Interactive display through matplotlib."""

from __future__ import annotations

import logging
from typing import Any, Optional

import matplotlib

from scaffold_graph.assembler import AssembledGraph, assemble
from scaffold_graph.config.schema import Settings, get_default_settings, validate_backend
from scaffold_graph.depiction import Depictor
from scaffold_graph.drawing import DEFAULT_LAYOUT, compute_layout, draw_graph
from scaffold_graph.errors import InvalidArgumentError

logger = logging.getLogger(__name__)

_MATPLOTLIB_BACKENDS = {"agg": "Agg", "tkagg": "TkAgg"}


def select_backend(name: str) -> Any:
    """Switch matplotlib to ``name`` and return ``pyplot``."""
    backend = validate_backend(name)
    matplotlib.use(_MATPLOTLIB_BACKENDS[backend], force=True)
    import matplotlib.pyplot as plt

    return plt


def display(
    graph: AssembledGraph,
    *,
    settings: Optional[Settings] = None,
    block: bool = True,
    layout: str = DEFAULT_LAYOUT,
) -> Any:
    """Draw ``graph`` in a window and return the figure handle.

    Layout and drawing are blocking. With the ``agg`` backend nothing is
    shown; the figure can still be passed to a fast export. Figures are
    closed in pyplot once they are no longer on screen.
    """
    if not isinstance(graph, AssembledGraph):
        raise InvalidArgumentError("Only assembled graphs can be displayed.")
    if settings is None:
        settings = get_default_settings()
    plt = select_backend(settings.backend)
    width, height = settings.screen_resolution
    figure = plt.figure(
        num=graph.graph_id,
        figsize=(width / settings.dpi, height / settings.dpi),
        dpi=settings.dpi,
    )
    draw_graph(
        graph,
        positions=compute_layout(graph.graph, method=layout),
        resolution=settings.screen_resolution,
        dpi=settings.dpi,
        figure=figure,
    )
    if settings.backend == "agg":
        logger.info("Backend 'agg' is non-interactive; graph %r drawn off-screen.", graph.graph_id)
        # Unregister from pyplot; the figure stays usable for export.
        plt.close(figure)
        return figure
    plt.show(block=block)
    if block:
        plt.close(figure)
    return figure


def display_collection(
    collection: Any,
    label_nodes: Optional[bool] = None,
    *,
    settings: Optional[Settings] = None,
    depictor: Optional[Depictor] = None,
    block: bool = True,
) -> tuple[AssembledGraph, Any]:
    """Assemble ``collection`` with default render options and display it."""
    if settings is None:
        settings = get_default_settings()
    if label_nodes is not None:
        settings = settings.with_render(label_nodes=label_nodes)
    graph = assemble(collection, settings.render, settings=settings, depictor=depictor)
    figure = display(graph, settings=settings, block=block)
    return graph, figure


__all__ = ["select_backend", "display", "display_collection"]
