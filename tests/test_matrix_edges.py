import numpy as np
import pytest

from scaffold_graph.errors import InvalidMatrixError
from scaffold_graph.matrix import (
    coerce_matrix,
    discover_edges,
    edge_pairs,
    iter_lower_triangle,
)


def test_lower_triangle_example_yields_three_edges() -> None:
    edges = discover_edges([[0, 0, 0], [1, 0, 0], [1, 1, 0]])

    assert [(edge.row, edge.column) for edge in edges] == [(1, 0), (2, 0), (2, 1)]
    assert [edge.edge_id for edge in edges] == [0, 1, 2]
    assert edge_pairs(edges) == {
        frozenset((0, 1)),
        frozenset((0, 2)),
        frozenset((1, 2)),
    }


def test_upper_triangle_is_never_consulted() -> None:
    assert discover_edges([[0, 1, 1], [0, 0, 1], [0, 0, 0]]) == []


def test_non_symmetric_matrix_uses_lower_half_only() -> None:
    edges = discover_edges([[0, 1, 0], [0, 0, 0], [1, 0, 0]])

    assert [(edge.row, edge.column) for edge in edges] == [(2, 0)]


def test_diagonal_one_yields_self_loop() -> None:
    edges = discover_edges([[1, 0], [0, 0]])

    assert len(edges) == 1
    assert edges[0].row == edges[0].column == 0
    assert edges[0].is_self_loop


def test_edge_count_matches_lower_triangle_ones() -> None:
    rng = np.random.default_rng(7)
    matrix = rng.integers(0, 2, size=(9, 9))
    expected = int(np.tril(matrix).sum())

    assert len(discover_edges(matrix)) == expected


def test_reinterpretation_gives_same_pairs() -> None:
    matrix = [[0, 0, 0, 0], [1, 0, 0, 0], [0, 1, 1, 0], [1, 0, 1, 0]]

    first = edge_pairs(discover_edges(matrix))
    second = edge_pairs(discover_edges([list(row) for row in matrix]))

    assert first == second


def test_iter_lower_triangle_visits_rows_in_order() -> None:
    matrix = [[1, 0, 0], [1, 1, 0], [0, 1, 0]]

    assert list(iter_lower_triangle(matrix)) == [(0, 0), (1, 0), (1, 1), (2, 1)]


def test_empty_matrix_has_no_edges() -> None:
    assert discover_edges([]) == []
    assert discover_edges(np.zeros((0, 0), dtype=int)) == []


def test_numpy_and_bool_cells_are_accepted() -> None:
    matrix = np.array([[False, False], [True, False]])

    assert coerce_matrix(matrix) == [[0, 0], [1, 0]]


def test_non_square_matrix_raises() -> None:
    with pytest.raises(InvalidMatrixError) as exc:
        discover_edges([[0, 0, 0], [1, 0, 0]])

    assert "square" in str(exc.value)


def test_ragged_matrix_raises() -> None:
    with pytest.raises(InvalidMatrixError):
        coerce_matrix([[0, 0], [1]])


@pytest.mark.parametrize("cell", [2, -1, "1", None, 0.5])
def test_non_binary_cell_raises(cell) -> None:
    with pytest.raises(InvalidMatrixError) as exc:
        coerce_matrix([[0, 0], [cell, 0]])

    assert "(1, 0)" in str(exc.value)


def test_missing_matrix_raises() -> None:
    with pytest.raises(InvalidMatrixError):
        coerce_matrix(None)
