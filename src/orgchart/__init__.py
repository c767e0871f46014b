"""Top-level package for the organization hierarchy builder."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("orgchart")
except PackageNotFoundError:  # pragma: no cover - running from a source checkout
    __version__ = "0.1.0"

from .config.settings import Settings, get_settings
from .entities import Entity, WarningReason
from .hierarchy import (
    HierarchyBuilder,
    HierarchyResult,
    InvalidInputError,
    build_hierarchy,
)

__all__ = [
    "__version__",
    "Settings",
    "get_settings",
    "Entity",
    "WarningReason",
    "HierarchyBuilder",
    "HierarchyResult",
    "InvalidInputError",
    "build_hierarchy",
]
