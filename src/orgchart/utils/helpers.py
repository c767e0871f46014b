"""General-purpose helpers for deterministic hierarchy output."""

from __future__ import annotations

import json
from hashlib import sha256
from pathlib import Path
from typing import Any

from .logging import get_logger

_LOGGER = get_logger(module=__name__)


def ensure_directory(path: Path | str) -> Path:
    """Ensure that a directory exists and return the resolved Path."""

    target = Path(path)
    target.mkdir(parents=True, exist_ok=True)
    return target.resolve()


def serialize_json(data: object, destination: Path | str, *, indent: int = 2) -> Path:
    """Serialize data to JSON with deterministic ordering."""

    dest_path = Path(destination)
    dest_path.parent.mkdir(parents=True, exist_ok=True)
    dest_path.write_text(
        json.dumps(data, indent=indent, sort_keys=True, ensure_ascii=False, default=str) + "\n",
        encoding="utf-8",
    )
    _LOGGER.debug("Serialized JSON", path=str(dest_path), size=dest_path.stat().st_size)
    return dest_path


def canonical_json(payload: Any) -> str:
    """Serialise *payload* into a canonical JSON string."""

    return json.dumps(payload, separators=(",", ":"), sort_keys=True, default=str)


def stable_hash(payload: Any) -> str:
    """Return a hex digest for *payload* using canonical JSON serialisation."""

    return sha256(canonical_json(payload).encode("utf-8")).hexdigest()


__all__ = [
    "ensure_directory",
    "serialize_json",
    "canonical_json",
    "stable_hash",
]
