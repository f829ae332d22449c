"""Adjacency matrix interpretation.

Edges are read from the lower triangle only, diagonal included: rows are
visited 0..N-1 and, within row ``r``, columns 0..r. A visited cell equal to
1 yields one edge ``(r, c)``. Cells above the diagonal are never consulted,
so a non-symmetric matrix contributes only its lower half, and a 1 on the
diagonal yields a self loop.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
import numbers
from typing import Any

import numpy as np

from scaffold_graph.errors import InvalidMatrixError


@dataclass(frozen=True)
class DiscoveredEdge:
    edge_id: int
    row: int
    column: int

    @property
    def is_self_loop(self) -> bool:
        return self.row == self.column


def _coerce_cell(value: Any, row: int, column: int) -> int:
    if isinstance(value, (str, bytes)) or not isinstance(value, numbers.Number):
        raise InvalidMatrixError(
            f"Matrix cell ({row}, {column}) must be 0 or 1, got {value!r}.",
            context={"row": row, "column": column},
        )
    if value == 1:
        return 1
    if value == 0:
        return 0
    raise InvalidMatrixError(
        f"Matrix cell ({row}, {column}) must be 0 or 1, got {value!r}.",
        context={"row": row, "column": column},
    )


def coerce_matrix(matrix: Any) -> list[list[int]]:
    """Return ``matrix`` as a square list of 0/1 rows or raise InvalidMatrixError."""
    if matrix is None:
        raise InvalidMatrixError("Adjacency matrix is missing.")
    if isinstance(matrix, np.ndarray):
        if matrix.ndim != 2 and matrix.size:
            raise InvalidMatrixError(
                f"Adjacency matrix must be two-dimensional, got shape {matrix.shape}.",
                context={"shape": tuple(matrix.shape)},
            )
        matrix = matrix.tolist()
    if not isinstance(matrix, Sequence) or isinstance(matrix, (str, bytes, bytearray)):
        raise InvalidMatrixError("Adjacency matrix must be a sequence of rows.")
    size = len(matrix)
    rows: list[list[int]] = []
    for row_index, row in enumerate(matrix):
        if isinstance(row, np.ndarray):
            row = row.tolist()
        if not isinstance(row, Sequence) or isinstance(row, (str, bytes, bytearray)):
            raise InvalidMatrixError(f"Matrix row {row_index} must be a sequence.")
        if len(row) != size:
            raise InvalidMatrixError(
                f"Adjacency matrix must be square: row {row_index} has {len(row)} "
                f"columns, expected {size}.",
                context={"row": row_index, "columns": len(row), "rows": size},
            )
        rows.append(
            [_coerce_cell(value, row_index, col) for col, value in enumerate(row)]
        )
    return rows


def iter_lower_triangle(matrix: Sequence[Sequence[int]]) -> Iterator[tuple[int, int]]:
    """Yield ``(row, column)`` of every 1-valued cell with ``column <= row``."""
    for row_index, row in enumerate(matrix):
        for column_index in range(row_index + 1):
            if row[column_index] == 1:
                yield row_index, column_index


def discover_edges(matrix: Any) -> list[DiscoveredEdge]:
    """Validate ``matrix`` and number its edges in discovery order from 0."""
    rows = coerce_matrix(matrix)
    return [
        DiscoveredEdge(edge_id=counter, row=row, column=column)
        for counter, (row, column) in enumerate(iter_lower_triangle(rows))
    ]


def edge_pairs(edges: Sequence[DiscoveredEdge]) -> set[frozenset[int]]:
    """Unordered endpoint pairs; a self loop becomes a one-element set."""
    return {frozenset((edge.row, edge.column)) for edge in edges}


__all__ = [
    "DiscoveredEdge",
    "coerce_matrix",
    "iter_lower_triangle",
    "discover_edges",
    "edge_pairs",
]
