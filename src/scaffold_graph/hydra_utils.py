"""Hydra config composition and settings helpers."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

from scaffold_graph.config.schema import (
    DEFAULT_ARE_NODES_LABELLED,
    DEFAULT_BACKEND,
    DEFAULT_DEPICTION_SIZE,
    DEFAULT_DPI,
    DEFAULT_GRAPH_ID,
    DEFAULT_GRAPH_STYLE_SHEET,
    DEFAULT_HIGH_QUALITY_RESOLUTION,
    DEFAULT_SCREEN_RESOLUTION,
    RenderConfig,
    Settings,
)
from scaffold_graph.errors import ConfigError

try:
    from hydra import compose, initialize_config_dir
    from hydra.core.global_hydra import GlobalHydra
    from omegaconf import OmegaConf
except ImportError:  # pragma: no cover - optional dependency
    compose = None
    initialize_config_dir = None
    GlobalHydra = None
    OmegaConf = None

DEFAULT_CONFIG_PATH = "configs"
DEFAULT_CONFIG_NAME = "default"


def _require_hydra() -> None:
    if compose is None or initialize_config_dir is None or GlobalHydra is None:
        raise ConfigError("hydra-core is required to compose configs.")


def _normalize_config_name(config_name: str) -> str:
    if config_name.endswith((".yaml", ".yml")):
        return Path(config_name).stem
    return config_name


def compose_config(
    *,
    config_path: Union[Path, str] = DEFAULT_CONFIG_PATH,
    config_name: str = DEFAULT_CONFIG_NAME,
    overrides: Optional[Sequence[str]] = None,
) -> Any:
    _require_hydra()
    from scaffold_graph.config.schema import register_configs

    register_configs()
    config_dir = Path(config_path)
    if not config_dir.is_absolute():
        config_dir = (Path.cwd() / config_dir).resolve()
    if not config_dir.exists():
        raise ConfigError(f"Config directory not found: {config_dir}")
    if GlobalHydra.instance().is_initialized():
        GlobalHydra.instance().clear()
    with initialize_config_dir(config_dir=str(config_dir), version_base=None):
        return compose(
            config_name=_normalize_config_name(config_name),
            overrides=[item for item in (overrides or []) if item and item != "--"],
        )


def resolve_config(cfg: Any) -> dict[str, Any]:
    if OmegaConf is None or not OmegaConf.is_config(cfg):
        if isinstance(cfg, Mapping):
            return dict(cfg)
        raise ConfigError("OmegaConf is required to resolve Hydra config.")
    resolved = OmegaConf.to_container(
        cfg,
        resolve=True,
        throw_on_missing=False,
    )
    if not isinstance(resolved, dict):
        raise ConfigError("Resolved config must be a mapping.")
    return resolved


def format_config(cfg: Any) -> str:
    if OmegaConf is None or not OmegaConf.is_config(cfg):
        return json.dumps(cfg, indent=2, sort_keys=True, default=str) + "\n"
    return OmegaConf.to_yaml(cfg, resolve=True)


def _section(cfg: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = cfg.get(key) or {}
    if not isinstance(value, Mapping):
        raise ConfigError(f"{key} config must be a mapping.")
    return value


def _optional_path(value: Any) -> Optional[Path]:
    if value is None:
        return None
    if not isinstance(value, (str, Path)):
        raise ConfigError(f"Directory paths must be strings, got {value!r}.")
    if not str(value).strip():
        return None
    return Path(value)


def render_config_from_config(cfg: Any) -> RenderConfig:
    resolved = resolve_config(cfg)
    render_cfg = _section(resolved, "render")
    label_nodes = render_cfg.get("label_nodes", DEFAULT_ARE_NODES_LABELLED)
    if not isinstance(label_nodes, bool):
        raise ConfigError("render.label_nodes must be a boolean.")
    return RenderConfig(
        label_nodes=label_nodes,
        depiction_size=render_cfg.get("depiction_size", DEFAULT_DEPICTION_SIZE),
        style_sheet=render_cfg.get("style_sheet", DEFAULT_GRAPH_STYLE_SHEET),
        graph_id=render_cfg.get("graph_id", DEFAULT_GRAPH_ID),
    )


def settings_from_config(cfg: Any) -> Settings:
    """Build validated :class:`Settings` from a composed config or a mapping."""
    resolved = resolve_config(cfg)
    display_cfg = _section(resolved, "display")
    return Settings(
        working_dir=_optional_path(display_cfg.get("working_dir")),
        temp_dir=_optional_path(display_cfg.get("temp_dir")),
        backend=display_cfg.get("backend", DEFAULT_BACKEND),
        render=render_config_from_config(resolved),
        screen_resolution=display_cfg.get("screen_resolution", DEFAULT_SCREEN_RESOLUTION),
        high_quality_resolution=display_cfg.get(
            "high_quality_resolution", DEFAULT_HIGH_QUALITY_RESOLUTION
        ),
        dpi=display_cfg.get("dpi", DEFAULT_DPI),
    )


def export_quality_from_config(cfg: Any, default: str = "fast") -> str:
    resolved = resolve_config(cfg)
    quality = _section(resolved, "export").get("quality")
    if quality is None:
        return default
    if not isinstance(quality, str) or not quality.strip():
        raise ConfigError(f"export.quality must be a string, got {quality!r}.")
    return quality.strip().lower()


def log_level_from_config(cfg: Any, default: int = logging.INFO) -> int:
    resolved = resolve_config(cfg)
    level = _section(resolved, "logging").get("level")
    if level is None:
        return default
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).upper())
    if not isinstance(value, int):
        raise ConfigError(f"Unknown logging level: {level!r}")
    return value


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_CONFIG_NAME",
    "compose_config",
    "resolve_config",
    "format_config",
    "render_config_from_config",
    "settings_from_config",
    "export_quality_from_config",
    "log_level_from_config",
]
