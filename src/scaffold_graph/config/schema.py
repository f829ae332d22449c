"""Structured config schema and runtime settings."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import logging
import numbers
import os
from pathlib import Path
from typing import Any, Optional

from scaffold_graph.errors import ConfigError, PathError, UnsupportedBackendError

DEFAULT_ARE_NODES_LABELLED = True
DEFAULT_GRAPH_ID = "Graph"
DEFAULT_GRAPH_STYLE_SHEET = (
    "node { shape: rounded-box; size-mode: fit; padding: 60px; } "
    "graph { shape: box; size-mode: fit; padding: 70px; }"
)
DEFAULT_DEPICTION_SIZE = (2048, 2048)
DEFAULT_BACKEND = "agg"
SUPPORTED_BACKENDS = ("agg", "tkagg")
DISPLAY_FOLDER_NAME = "ScaffoldGraphDisplay"
TEMP_FOLDER_NAME = "temp"
DEFAULT_SCREEN_RESOLUTION = (1280, 960)
# UHD 4K.
DEFAULT_HIGH_QUALITY_RESOLUTION = (3840, 2160)
DEFAULT_DPI = 100


def _coerce_positive_int(value: Any, label: str) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{label} must be a positive integer, got {value!r}.")
    if isinstance(value, numbers.Integral):
        number = int(value)
    elif isinstance(value, float) and value.is_integer():
        number = int(value)
    else:
        raise ConfigError(f"{label} must be a positive integer, got {value!r}.")
    if number <= 0:
        raise ConfigError(f"{label} must be a positive integer, got {value!r}.")
    return number


def _coerce_size(value: Any, label: str) -> tuple[int, int]:
    if isinstance(value, (str, bytes)) or value is None:
        raise ConfigError(f"{label} must be a (width, height) pair.")
    try:
        width, height = value
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{label} must be a (width, height) pair.") from exc
    return (
        _coerce_positive_int(width, f"{label} width"),
        _coerce_positive_int(height, f"{label} height"),
    )


def validate_backend(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise UnsupportedBackendError(
            "Display backend must be a non-empty string.",
            context={"backend": value},
        )
    backend = value.strip().lower()
    if backend not in SUPPORTED_BACKENDS:
        raise UnsupportedBackendError(
            f"Display backend must be one of {', '.join(SUPPORTED_BACKENDS)}; got {value!r}.",
            context={"backend": value},
        )
    return backend


@dataclass(frozen=True)
class RenderConfig:
    """Per-assembly options: labels, depiction size, style sheet, graph id."""

    label_nodes: bool = DEFAULT_ARE_NODES_LABELLED
    depiction_size: tuple[int, int] = DEFAULT_DEPICTION_SIZE
    style_sheet: str = DEFAULT_GRAPH_STYLE_SHEET
    graph_id: str = DEFAULT_GRAPH_ID

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "depiction_size",
            _coerce_size(self.depiction_size, "depiction_size"),
        )
        if not isinstance(self.style_sheet, str):
            raise ConfigError("style_sheet must be a string.")
        if not isinstance(self.graph_id, str) or not self.graph_id.strip():
            raise ConfigError("graph_id must be a non-empty string.")


@dataclass(frozen=True)
class Settings:
    """Working/temp directories, display backend and default render options.

    Pass an instance explicitly to assembly, display and export calls. The
    process-wide default (see :func:`get_default_settings`) is only read by
    convenience entry points.
    """

    working_dir: Optional[Path] = None
    temp_dir: Optional[Path] = None
    backend: str = DEFAULT_BACKEND
    render: RenderConfig = field(default_factory=RenderConfig)
    screen_resolution: tuple[int, int] = DEFAULT_SCREEN_RESOLUTION
    high_quality_resolution: tuple[int, int] = DEFAULT_HIGH_QUALITY_RESOLUTION
    dpi: int = DEFAULT_DPI

    def __post_init__(self) -> None:
        object.__setattr__(self, "backend", validate_backend(self.backend))
        for name in ("working_dir", "temp_dir"):
            value = getattr(self, name)
            if value is None:
                continue
            if not str(value).strip():
                raise ConfigError(f"{name} must not be blank.")
            object.__setattr__(self, name, Path(value))
        for name in ("screen_resolution", "high_quality_resolution"):
            object.__setattr__(self, name, _coerce_size(getattr(self, name), name))
        object.__setattr__(self, "dpi", _coerce_positive_int(self.dpi, "dpi"))

    def display_folder(self) -> Path:
        root = self.working_dir if self.working_dir is not None else Path.cwd()
        return root / DISPLAY_FOLDER_NAME

    def resolved_temp_dir(self) -> Path:
        if self.temp_dir is not None:
            return self.temp_dir
        return self.display_folder() / TEMP_FOLDER_NAME

    def ensure_temp_dir(self) -> Path:
        return ensure_directory(self.resolved_temp_dir())

    def with_render(self, **changes: Any) -> "Settings":
        return replace(self, render=replace(self.render, **changes))


def ensure_directory(path: Path) -> Path:
    """Create ``path`` if needed and check it is a readable, writable directory."""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise PathError(
            f"Directory cannot be created: {path}",
            context={"path": str(path), "reason": str(exc)},
        ) from exc
    if not path.is_dir():
        raise PathError(f"Not a directory: {path}", context={"path": str(path)})
    if not os.access(path, os.R_OK | os.W_OK | os.X_OK):
        raise PathError(f"Directory is not writable: {path}", context={"path": str(path)})
    return path


_DEFAULT_SETTINGS: Optional[Settings] = None


def get_default_settings() -> Settings:
    global _DEFAULT_SETTINGS
    if _DEFAULT_SETTINGS is None:
        _DEFAULT_SETTINGS = Settings()
    return _DEFAULT_SETTINGS


def set_default_settings(settings: Optional[Settings]) -> None:
    """Replace the process-wide default; ``None`` restores the built-in one."""
    global _DEFAULT_SETTINGS
    if settings is not None and not isinstance(settings, Settings):
        raise TypeError("settings must be a Settings instance.")
    _DEFAULT_SETTINGS = settings


@dataclass
class RenderSchema:
    label_nodes: bool = DEFAULT_ARE_NODES_LABELLED
    depiction_size: list[int] = field(default_factory=lambda: list(DEFAULT_DEPICTION_SIZE))
    style_sheet: str = DEFAULT_GRAPH_STYLE_SHEET
    graph_id: str = DEFAULT_GRAPH_ID


@dataclass
class DisplaySchema:
    working_dir: str = ""
    temp_dir: str = ""
    backend: str = DEFAULT_BACKEND
    screen_resolution: list[int] = field(
        default_factory=lambda: list(DEFAULT_SCREEN_RESOLUTION)
    )
    high_quality_resolution: list[int] = field(
        default_factory=lambda: list(DEFAULT_HIGH_QUALITY_RESOLUTION)
    )
    dpi: int = DEFAULT_DPI


@dataclass
class AppConfig:
    render: RenderSchema = field(default_factory=RenderSchema)
    display: DisplaySchema = field(default_factory=DisplaySchema)
    export: dict[str, Any] = field(default_factory=lambda: {"quality": "fast"})
    logging: dict[str, Any] = field(default_factory=lambda: {"level": "INFO"})


def register_configs() -> None:
    try:
        from hydra.core.config_store import ConfigStore
    except ModuleNotFoundError:
        return
    except Exception as exc:
        logging.getLogger(__name__).warning(
            "Hydra config store import failed: %s", exc
        )
        return
    cs = ConfigStore.instance()
    try:
        cs.store(group="schema", name="base", node=AppConfig, package="_global_")
    except Exception as exc:
        logging.getLogger(__name__).warning(
            "Hydra config store registration failed: %s", exc
        )


__all__ = [
    "DEFAULT_ARE_NODES_LABELLED",
    "DEFAULT_GRAPH_ID",
    "DEFAULT_GRAPH_STYLE_SHEET",
    "DEFAULT_DEPICTION_SIZE",
    "DEFAULT_BACKEND",
    "SUPPORTED_BACKENDS",
    "DISPLAY_FOLDER_NAME",
    "DEFAULT_HIGH_QUALITY_RESOLUTION",
    "RenderConfig",
    "Settings",
    "AppConfig",
    "validate_backend",
    "ensure_directory",
    "get_default_settings",
    "set_default_settings",
    "register_configs",
]
