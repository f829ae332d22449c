"""Error hierarchy for scaffold_graph."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional


class ScaffoldGraphError(Exception):
    """Base exception for scaffold_graph failures."""

    def __init__(
        self,
        message: str,
        *,
        user_message: Optional[str] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.user_message = message if user_message is None else user_message
        self.context = dict(context) if context else {}

    def log_message(self) -> str:
        if not self.context:
            return str(self)
        return f"{self}: {self.context}"


class ConfigError(ScaffoldGraphError):
    """Configuration loading or validation error."""


class InvalidArgumentError(ScaffoldGraphError):
    """A required input is missing, None or blank."""


class InvalidMatrixError(ScaffoldGraphError):
    """Adjacency matrix is not square or holds non-binary cells."""


class NonEmptyTargetError(ScaffoldGraphError):
    """Target graph container already holds nodes or edges."""


class UnsupportedBackendError(ConfigError):
    """Display backend is not one of the supported values."""


class PathError(ScaffoldGraphError):
    """Filesystem target cannot be created, read or written."""


class EmptyPathError(PathError):
    """Filesystem target path is blank."""


class DepictionError(ScaffoldGraphError):
    """Raised by a depictor when a structure cannot be rendered."""


@dataclass(frozen=True)
class DepictionWarning:
    """Recovered per-node depiction failure; recorded, never raised."""

    index: int
    message: str

    def __str__(self) -> str:
        return f"Unable to depict structure at index {self.index}: {self.message}"


__all__ = [
    "ScaffoldGraphError",
    "ConfigError",
    "InvalidArgumentError",
    "InvalidMatrixError",
    "NonEmptyTargetError",
    "UnsupportedBackendError",
    "PathError",
    "EmptyPathError",
    "DepictionError",
    "DepictionWarning",
]
