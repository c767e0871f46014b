"""I/O utilities for hierarchy records and chart projections."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence

from orgchart.entities.core import Entity
from orgchart.utils.helpers import ensure_directory, serialize_json
from orgchart.utils.logging import get_logger

from .builder import HierarchyBuilder
from .result import HierarchyResult

_LOGGER = get_logger(module=__name__)

EXPORT_FORMATS = ("json", "adjacency", "dot")


def _read_payload(path: Path) -> List[Mapping[str, Any]]:
    if path.suffix.lower() == ".jsonl":
        rows: List[Mapping[str, Any]] = []
        with path.open("r", encoding="utf-8") as handle:
            for line in handle:
                if not line.strip():
                    continue
                rows.append(json.loads(line))
        return rows

    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if isinstance(payload, Mapping):
        payload = payload.get("records", [])
    if not isinstance(payload, list):
        raise ValueError(f"{path} must contain a JSON array or an object with a 'records' array")
    return payload


def load_records(
    input_paths: Sequence[str | Path],
    *,
    organization_id: str | None = None,
) -> List[Entity]:
    """Read records from JSON / JSONL files, optionally keeping one tenant."""

    raw: List[Mapping[str, Any]] = []
    for path_like in input_paths:
        path = Path(path_like)
        if not path.exists():
            raise FileNotFoundError(f"record file not found: {path}")
        raw.extend(_read_payload(path))

    entities = HierarchyBuilder().coerce_records(raw)
    if organization_id is not None:
        organization_id = organization_id.strip()
        entities = [entity for entity in entities if entity.organization_id == organization_id]
    _LOGGER.info(
        "Loaded hierarchy records",
        total=len(entities),
        files=[str(Path(p)) for p in input_paths],
        organization_id=organization_id or "-",
    )
    return entities


def _dot_quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _label(attributes: Mapping[str, Any], fallback: str, attribute: str) -> str:
    value = attributes.get(attribute)
    return fallback if value in (None, "") else str(value)


def adjacency(result: HierarchyResult) -> Dict[str, List[str]]:
    """Return parent id -> ordered child ids."""

    return result.children_map()


def to_dot(result: HierarchyResult, *, display_attribute: str = "name") -> str:
    lines = ["digraph hierarchy {", "  rankdir=TB;", '  node [shape=box];']
    for node in result.nodes:
        label = _label(node.attributes, node.id, display_attribute)
        lines.append(f"  {_dot_quote(node.id)} [label={_dot_quote(label)}];")
    for edge in result.edges:
        lines.append(f"  {_dot_quote(edge.source)} -> {_dot_quote(edge.target)};")
    lines.append("}")
    return "\n".join(lines) + "\n"


def render_tree(
    result: HierarchyResult,
    *,
    display_attribute: str = "name",
    indent: int = 2,
) -> str:
    """Render an indented listing with ``└─`` markers for child rows."""

    lines: List[str] = []
    for node in result.iter_depth_first():
        label = _label(node.attributes, node.id, display_attribute)
        if node.depth == 0:
            lines.append(label)
        else:
            lines.append(" " * (indent * (node.depth - 1)) + "└─ " + label)
    return "\n".join(lines)


def export_projection(
    result: HierarchyResult,
    output_path: str | Path,
    *,
    format: str = "json",
    display_attribute: str = "name",
) -> Path:
    path = Path(output_path)
    ensure_directory(path.parent)
    format = format.lower()
    if format == "json":
        serialize_json(result.to_dict(include_tree=False), path)
    elif format == "adjacency":
        serialize_json(adjacency(result), path)
    elif format == "dot":
        path.write_text(to_dot(result, display_attribute=display_attribute), encoding="utf-8")
    else:
        raise ValueError(f"unsupported export format: {format}")
    _LOGGER.info(
        "Exported hierarchy projection",
        path=str(path),
        format=format,
        organization_id=result.organization_id or "-",
    )
    return path.resolve()


def write_result(result: HierarchyResult, output_path: str | Path) -> Path:
    path = Path(output_path)
    ensure_directory(path.parent)
    serialize_json(result.to_dict(), path)
    _LOGGER.info("Wrote hierarchy result", path=str(path))
    return path.resolve()


def write_warning_report(result: HierarchyResult, output_path: str | Path) -> Path:
    path = Path(output_path)
    ensure_directory(path.parent)
    payload = {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "organization_id": result.organization_id,
        "total": result.warning_count,
        "warnings": [warning.to_dict() for warning in result.warnings],
    }
    serialize_json(payload, path)
    return path.resolve()


__all__ = [
    "EXPORT_FORMATS",
    "adjacency",
    "export_projection",
    "load_records",
    "render_tree",
    "to_dot",
    "write_result",
    "write_warning_report",
]
