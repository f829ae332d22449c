from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Iterable

import pytest


def pytest_configure() -> None:
    src_root = Path(__file__).resolve().parents[1] / "src"
    src_path = str(src_root)
    if src_path not in sys.path:
        sys.path.insert(0, src_path)
    import matplotlib

    matplotlib.use("Agg")


class FakeDepictor:
    """Depictor returning blank images; structures in ``failing`` raise."""

    def __init__(self, failing: Iterable[Any] = ()) -> None:
        self.failing = set(failing)
        self.calls: list[Any] = []

    def render(self, structure: Any, width: int, height: int) -> Any:
        from PIL import Image

        from scaffold_graph.errors import DepictionError

        self.calls.append(structure)
        if structure in self.failing:
            raise DepictionError(f"cannot depict {structure}")
        return Image.new("RGB", (width, height), "white")


def make_collection(matrix: Any, levels: Iterable[int] = ()) -> Any:
    from scaffold_graph.collection import MatrixCollection, NodeRecord

    levels = list(levels) or [0] * len(matrix)
    nodes = [
        NodeRecord(level=level, structure=f"S{index}")
        for index, level in enumerate(levels)
    ]
    return MatrixCollection(matrix=matrix, nodes=nodes)


@pytest.fixture
def depictor() -> FakeDepictor:
    return FakeDepictor()


@pytest.fixture
def settings(tmp_path: Path) -> Any:
    from scaffold_graph.config.schema import RenderConfig, Settings

    return Settings(
        working_dir=tmp_path,
        backend="agg",
        render=RenderConfig(depiction_size=(32, 32)),
        screen_resolution=(400, 300),
        high_quality_resolution=(600, 400),
        dpi=100,
    )
