import networkx as nx
import pytest

from scaffold_graph.config.schema import DEFAULT_GRAPH_STYLE_SHEET
from scaffold_graph.drawing import compute_layout, parse_style_sheet, resolve_style
from scaffold_graph.errors import InvalidArgumentError


def test_parse_default_style_sheet() -> None:
    rules = parse_style_sheet(DEFAULT_GRAPH_STYLE_SHEET)

    assert rules["node"]["shape"] == "rounded-box"
    assert rules["node"]["padding"] == "60px"
    assert rules["graph"]["padding"] == "70px"


def test_later_rules_override_earlier_ones() -> None:
    rules = parse_style_sheet("edge { size: 1px; } edge { size: 3px; fill-color: red; }")

    assert rules == {"edge": {"size": "3px", "fill-color": "red"}}


def test_resolve_style_keeps_defaults() -> None:
    style = resolve_style("node { fill-color: #ff0000; }")

    assert style["node"]["fill-color"] == "#ff0000"
    assert style["node"]["stroke-color"] == "#555555"
    assert style["graph"]["fill-color"] == "white"
    assert parse_style_sheet(None) == {}


def _levelled_graph() -> nx.Graph:
    graph = nx.Graph()
    for node, level in (("0", 0), ("1", 1), ("2", 1), ("3", 2)):
        graph.add_node(node, level=level)
    graph.add_edges_from([("1", "0"), ("2", "0"), ("3", "1")])
    return graph


def test_level_layout_puts_roots_on_top() -> None:
    positions = compute_layout(_levelled_graph(), method="level")

    assert set(positions) == {"0", "1", "2", "3"}
    assert positions["0"][1] > positions["1"][1] > positions["3"][1]
    assert positions["1"][1] == pytest.approx(positions["2"][1])


def test_spring_layout_is_seeded() -> None:
    first = compute_layout(_levelled_graph(), method="spring", iterations=20)
    second = compute_layout(_levelled_graph(), method="spring", iterations=20)

    for node in first:
        assert first[node] == pytest.approx(second[node])


def test_degenerate_layouts() -> None:
    single = nx.Graph()
    single.add_node("0", level=0)

    assert compute_layout(nx.Graph()) == {}
    assert compute_layout(single)["0"].tolist() == [0.0, 0.0]


def test_unknown_layout_raises() -> None:
    with pytest.raises(InvalidArgumentError):
        compute_layout(_levelled_graph(), method="circular")
