from pathlib import Path

import pytest

from scaffold_graph.config.schema import (
    DEFAULT_DEPICTION_SIZE,
    DEFAULT_GRAPH_ID,
    DISPLAY_FOLDER_NAME,
    RenderConfig,
    Settings,
    ensure_directory,
    get_default_settings,
    set_default_settings,
)
from scaffold_graph.errors import ConfigError, PathError, UnsupportedBackendError
from scaffold_graph.hydra_utils import (
    log_level_from_config,
    render_config_from_config,
    settings_from_config,
)


def test_render_config_defaults() -> None:
    config = RenderConfig()

    assert config.label_nodes is True
    assert config.depiction_size == DEFAULT_DEPICTION_SIZE
    assert config.graph_id == DEFAULT_GRAPH_ID
    assert "rounded-box" in config.style_sheet


@pytest.mark.parametrize("size", [(0, 10), (10,), "big", None])
def test_render_config_rejects_bad_size(size) -> None:
    with pytest.raises(ConfigError):
        RenderConfig(depiction_size=size)


def test_render_config_rejects_blank_graph_id() -> None:
    with pytest.raises(ConfigError):
        RenderConfig(graph_id="  ")


def test_backend_is_normalized() -> None:
    assert Settings(backend="TkAgg").backend == "tkagg"


@pytest.mark.parametrize("backend", ["swing", "javafx", "", None])
def test_unsupported_backend_raises(backend) -> None:
    with pytest.raises(UnsupportedBackendError):
        Settings(backend=backend)


def test_folders_derive_from_working_dir(tmp_path) -> None:
    settings = Settings(working_dir=tmp_path)

    assert settings.display_folder() == tmp_path / DISPLAY_FOLDER_NAME
    assert settings.resolved_temp_dir() == tmp_path / DISPLAY_FOLDER_NAME / "temp"
    assert settings.ensure_temp_dir().is_dir()


def test_explicit_temp_dir_wins(tmp_path) -> None:
    settings = Settings(working_dir=tmp_path, temp_dir=str(tmp_path / "scratch"))

    assert settings.resolved_temp_dir() == tmp_path / "scratch"


def test_blank_directory_setting_raises() -> None:
    with pytest.raises(ConfigError):
        Settings(working_dir="  ")


def test_ensure_directory_rejects_file(tmp_path) -> None:
    target = tmp_path / "file.txt"
    target.write_text("x", encoding="utf-8")

    with pytest.raises(PathError):
        ensure_directory(target)


def test_default_settings_can_be_replaced(tmp_path) -> None:
    previous = get_default_settings()
    custom = Settings(working_dir=tmp_path)
    try:
        set_default_settings(custom)
        assert get_default_settings() is custom
        set_default_settings(None)
        assert get_default_settings().working_dir is None
    finally:
        set_default_settings(previous)


def test_settings_from_mapping(tmp_path) -> None:
    cfg = {
        "render": {"label_nodes": False, "depiction_size": [300, 200], "graph_id": "Net"},
        "display": {
            "working_dir": str(tmp_path),
            "temp_dir": "",
            "backend": "agg",
            "screen_resolution": [800, 600],
            "high_quality_resolution": [1920, 1080],
            "dpi": 120,
        },
        "logging": {"level": "debug"},
    }

    settings = settings_from_config(cfg)

    assert settings.working_dir == Path(tmp_path)
    assert settings.temp_dir is None
    assert settings.render == RenderConfig(
        label_nodes=False, depiction_size=(300, 200), graph_id="Net"
    )
    assert settings.high_quality_resolution == (1920, 1080)
    assert settings.dpi == 120
    assert log_level_from_config(cfg) == 10


def test_settings_from_mapping_rejects_bad_values() -> None:
    with pytest.raises(UnsupportedBackendError):
        settings_from_config({"display": {"backend": "swing"}})
    with pytest.raises(ConfigError):
        render_config_from_config({"render": {"label_nodes": "yes"}})
    with pytest.raises(ConfigError):
        log_level_from_config({"logging": {"level": "chatty"}})


def _config_dir() -> Path:
    return Path(__file__).resolve().parents[1] / "configs"


def test_hydra_compose_defaults() -> None:
    pytest.importorskip("hydra")
    from scaffold_graph.hydra_utils import compose_config, format_config, resolve_config

    cfg = compose_config(
        config_path=_config_dir(),
        config_name="default",
        overrides=["render.label_nodes=false", "display.dpi=150"],
    )
    resolved = resolve_config(cfg)

    assert resolved["render"]["label_nodes"] is False
    assert resolved["display"]["backend"] == "agg"
    settings = settings_from_config(cfg)
    assert settings.dpi == 150
    assert settings.render.depiction_size == (2048, 2048)
    assert "render:" in format_config(cfg)


def test_fractional_sizes_are_rejected() -> None:
    with pytest.raises(ConfigError):
        RenderConfig(depiction_size=(2.7, 3.9))
    with pytest.raises(ConfigError):
        Settings(screen_resolution=(800, True))

    assert RenderConfig(depiction_size=(64.0, 32.0)).depiction_size == (64, 32)


@pytest.mark.parametrize("dpi", ["abc", 0, -5, 72.5, None])
def test_invalid_dpi_raises_config_error(dpi) -> None:
    with pytest.raises(ConfigError):
        Settings(dpi=dpi)


def test_dpi_from_mapping_is_validated() -> None:
    with pytest.raises(ConfigError):
        settings_from_config({"display": {"dpi": "high"}})
