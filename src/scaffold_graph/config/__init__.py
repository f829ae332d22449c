"""Configuration schema and runtime settings."""

from scaffold_graph.config.schema import (
    RenderConfig,
    Settings,
    get_default_settings,
    set_default_settings,
)

__all__ = ["RenderConfig", "Settings", "get_default_settings", "set_default_settings"]
