import json

import pytest
from matplotlib.figure import Figure
from PIL import Image

from conftest import FakeDepictor, make_collection
from scaffold_graph.assembler import assemble
from scaffold_graph.drawing import draw_graph
from scaffold_graph.errors import EmptyPathError, InvalidArgumentError, PathError
from scaffold_graph.exporter import (
    export,
    graph_snapshot,
    screenshot_graph,
    screenshot_graph_high_quality,
    write_snapshot,
)


@pytest.fixture
def assembled(settings):
    depictor = FakeDepictor(failing={"S2"})
    collection = make_collection(
        [[0, 0, 0, 0], [1, 0, 0, 0], [1, 0, 0, 0], [0, 1, 1, 0]],
        levels=[0, 1, 1, 2],
    )
    graph = assemble(collection, settings.render, settings=settings, depictor=depictor)
    yield graph
    graph.release()


def test_fast_export_writes_png(assembled, settings, tmp_path) -> None:
    target = export(assembled, tmp_path / "out" / "tree_low.png", "fast", settings=settings)

    assert target.exists()
    with Image.open(target) as image:
        assert image.format == "PNG"
        assert image.size == settings.screen_resolution


def test_high_export_uses_fixed_resolution(assembled, settings, tmp_path) -> None:
    target = screenshot_graph_high_quality(assembled, tmp_path / "tree.png", settings=settings)

    with Image.open(target) as image:
        assert image.size == settings.high_quality_resolution


def test_export_overwrites_existing_file(assembled, settings, tmp_path) -> None:
    target = tmp_path / "tree.png"
    target.write_bytes(b"stale")

    export(assembled, target, "high", settings=settings)

    assert target.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"


def test_fast_export_saves_given_figure(assembled, settings, tmp_path) -> None:
    figure = Figure(figsize=(3, 2), dpi=100)
    draw_graph(assembled, figure=figure, resolution=(300, 200), dpi=100)

    target = screenshot_graph(assembled, tmp_path / "screen.png", settings=settings, figure=figure)

    with Image.open(target) as image:
        assert image.size == (300, 200)


def test_spring_layout_export(assembled, settings, tmp_path) -> None:
    target = export(assembled, tmp_path / "spring.png", "fast", settings=settings, layout="spring")

    assert target.exists()


@pytest.mark.parametrize("path", ["", "   ", None])
def test_blank_path_raises(assembled, settings, path) -> None:
    with pytest.raises(EmptyPathError):
        export(assembled, path, "fast", settings=settings)


def test_unusable_directory_raises(assembled, settings, tmp_path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("file", encoding="utf-8")

    with pytest.raises(PathError):
        export(assembled, blocker / "nested" / "out.png", "fast", settings=settings)


def test_directory_target_raises(assembled, settings, tmp_path) -> None:
    with pytest.raises(PathError):
        export(assembled, tmp_path, "fast", settings=settings)


def test_unknown_quality_raises(assembled, settings, tmp_path) -> None:
    with pytest.raises(InvalidArgumentError):
        export(assembled, tmp_path / "out.png", "medium", settings=settings)


def test_only_assembled_graphs_are_exported(settings, tmp_path) -> None:
    with pytest.raises(InvalidArgumentError):
        export(None, tmp_path / "out.png", "fast", settings=settings)


def test_snapshot_payload(assembled) -> None:
    payload = graph_snapshot(assembled)

    nodes = {node["id"]: node for node in payload["nodes"]}
    assert sorted(nodes) == ["0", "1", "2", "3"]
    assert nodes["2"]["has_image"] is False
    assert nodes["0"]["has_image"] is True
    assert nodes["3"]["ui.label"] == "Level: 2; Index: 3"
    assert nodes["1"]["structure"] == "S1"
    assert "scaffold_node" not in nodes["0"]
    assert "image" not in nodes["0"]
    assert len(payload["links"]) == 4
    assert sorted(link["edge_id"] for link in payload["links"]) == ["0", "1", "2", "3"]
    assert payload["depiction_failures"] == [
        {"index": 2, "message": "cannot depict S2"}
    ]
    assert payload["graph"]["graph_id"] == "Graph"
    json.dumps(payload)


def test_write_snapshot(assembled, tmp_path) -> None:
    target = write_snapshot(assembled, tmp_path / "snap" / "graph.json")

    data = json.loads(target.read_text(encoding="utf-8"))
    assert len(data["nodes"]) == 4
