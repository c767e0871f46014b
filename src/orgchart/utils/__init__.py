"""Utility helpers shared across the hierarchy modules."""

from .helpers import canonical_json, ensure_directory, serialize_json, stable_hash
from .logging import configure_logging, get_logger, log_timing, logging_context

__all__ = [
    "canonical_json",
    "configure_logging",
    "ensure_directory",
    "get_logger",
    "log_timing",
    "logging_context",
    "serialize_json",
    "stable_hash",
]
