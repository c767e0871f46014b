"""Read-side analytics over built hierarchies and raw record sets."""

from __future__ import annotations

from collections import Counter, defaultdict, deque
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping

from orgchart.config.policies import HierarchyPolicy
from orgchart.entities.core import Entity
from orgchart.utils.logging import get_logger

from .builder import HierarchyBuilder, default_sort_key
from .errors import InvalidInputError, InvalidInputReason
from .result import HierarchyResult

_LOGGER = get_logger(module=__name__)


@dataclass(slots=True)
class SpanFinding:
    """A node whose direct-child count exceeds the span-of-control threshold."""

    id: str
    display_name: str
    direct_reports: int
    threshold: int
    severity: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "display_name": self.display_name,
            "direct_reports": self.direct_reports,
            "threshold": self.threshold,
            "severity": self.severity,
        }


def hierarchy_statistics(result: HierarchyResult) -> Dict[str, object]:
    """Return structural statistics for reporting and manifests."""

    children = result.children_map()
    spans = [len(child_ids) for child_ids in children.values()]
    depth_counts = Counter(node.depth for node in result.nodes)
    warning_counts = Counter(warning.reason.value for warning in result.warnings)
    return {
        "node_count": result.node_count,
        "edge_count": len(result.edges),
        "root_count": len(result.roots),
        "leaf_count": sum(1 for span in spans if span == 0),
        "max_depth": max(depth_counts, default=0),
        "depth_counts": {depth: depth_counts[depth] for depth in sorted(depth_counts)},
        "max_span": max(spans, default=0),
        "total_subunits": len(result.edges),
        "warning_counts": dict(sorted(warning_counts.items())),
    }


def span_of_control(
    result: HierarchyResult,
    *,
    max_direct_reports: int | None = None,
    policy: HierarchyPolicy | None = None,
) -> List[SpanFinding]:
    """Report nodes with more direct children than the configured threshold."""

    cfg = policy or HierarchyPolicy()
    threshold = max_direct_reports if max_direct_reports is not None else cfg.max_direct_reports
    if threshold < 1:
        raise ValueError("max_direct_reports must be positive")
    urgent_at = threshold * cfg.urgent_span_multiplier

    by_id = {node.id: node for node in result.nodes}
    findings: List[SpanFinding] = []
    for node_id, child_ids in result.children_map().items():
        count = len(child_ids)
        if count <= threshold:
            continue
        attributes = by_id[node_id].attributes
        name = attributes.get(cfg.display_name_attribute)
        findings.append(
            SpanFinding(
                id=node_id,
                display_name="" if name is None else str(name),
                direct_reports=count,
                threshold=threshold,
                severity="urgent" if count >= urgent_at else "warning",
            )
        )
    findings.sort(key=lambda finding: (-finding.direct_reports, finding.id))
    if findings:
        _LOGGER.info(
            "Span of control exceeded",
            organization_id=result.organization_id,
            offenders=len(findings),
            threshold=threshold,
        )
    return findings


def _index_records(
    records: Iterable[Entity | Mapping[str, Any]],
    policy: HierarchyPolicy | None,
) -> Dict[str, Entity]:
    builder = HierarchyBuilder(policy)
    entities = builder.coerce_records(records)
    builder.validate_input(entities)
    return {entity.id: entity for entity in entities}


def _descendant_ids(index: Mapping[str, Entity], entity_id: str) -> set[str]:
    children: Dict[str, List[str]] = defaultdict(list)
    for entity in index.values():
        if entity.parent_id is not None:
            children[entity.parent_id].append(entity.id)
    found: set[str] = set()
    queue = deque(children.get(entity_id, []))
    while queue:
        current = queue.popleft()
        if current in found:
            continue
        found.add(current)
        queue.extend(children.get(current, []))
    return found


def check_reparent(
    records: Iterable[Entity | Mapping[str, Any]],
    entity_id: str,
    new_parent_id: str | None,
    *,
    policy: HierarchyPolicy | None = None,
) -> None:
    """Validate moving ``entity_id`` under ``new_parent_id``.

    A ``None`` parent (make top-level) is always accepted. Raises
    :class:`InvalidInputError` when the move is not allowed.
    """

    index = _index_records(records, policy)
    if entity_id not in index:
        raise InvalidInputError(
            f"entity '{entity_id}' not found",
            reason=InvalidInputReason.UNKNOWN_ENTITY,
            ids=[entity_id],
        )
    new_parent_id = new_parent_id.strip() if new_parent_id is not None else None
    if not new_parent_id:
        return
    if new_parent_id == entity_id:
        raise InvalidInputError(
            f"entity '{entity_id}' cannot be its own parent",
            reason=InvalidInputReason.SELF_PARENT,
            ids=[entity_id],
        )
    if new_parent_id not in index:
        raise InvalidInputError(
            f"parent '{new_parent_id}' not found in organization",
            reason=InvalidInputReason.UNKNOWN_PARENT,
            ids=[new_parent_id],
        )

    visited: set[str] = set()
    cursor: str | None = new_parent_id
    while cursor is not None and cursor in index and cursor not in visited:
        if cursor == entity_id:
            raise InvalidInputError(
                f"moving '{entity_id}' under '{new_parent_id}' would create a cycle",
                reason=InvalidInputReason.WOULD_CREATE_CYCLE,
                ids=[entity_id, new_parent_id],
            )
        visited.add(cursor)
        cursor = index[cursor].parent_id


def eligible_parents(
    records: Iterable[Entity | Mapping[str, Any]],
    entity_id: str | None = None,
    *,
    policy: HierarchyPolicy | None = None,
) -> List[Entity]:
    """Records selectable as parent for ``entity_id``, in display order."""

    cfg = policy or HierarchyPolicy()
    index = _index_records(records, cfg)
    excluded: set[str] = set()
    if entity_id is not None:
        if entity_id not in index:
            raise InvalidInputError(
                f"entity '{entity_id}' not found",
                reason=InvalidInputReason.UNKNOWN_ENTITY,
                ids=[entity_id],
            )
        excluded = _descendant_ids(index, entity_id)
        excluded.add(entity_id)
    candidates = [entity for entity_key, entity in index.items() if entity_key not in excluded]
    return sorted(candidates, key=default_sort_key(cfg.display_name_attribute))


def ancestors_of(result: HierarchyResult, entity_id: str) -> List[str]:
    """Return ids from the direct parent up to the root of a placed entity."""

    by_id = {node.id: node for node in result.nodes}
    if entity_id not in by_id:
        raise InvalidInputError(
            f"entity '{entity_id}' is not placed in the hierarchy",
            reason=InvalidInputReason.UNKNOWN_ENTITY,
            ids=[entity_id],
        )
    chain: List[str] = []
    parent_id = by_id[entity_id].parent_id
    while parent_id is not None:
        chain.append(parent_id)
        parent_id = by_id[parent_id].parent_id
    return chain


def descendants_of(result: HierarchyResult, entity_id: str) -> List[str]:
    """Return the ids below a placed entity in tree pre-order."""

    for node in result.iter_depth_first():
        if node.id != entity_id:
            continue
        found: List[str] = []
        stack = list(reversed(node.children))
        while stack:
            current = stack.pop()
            found.append(current.id)
            stack.extend(reversed(current.children))
        return found
    raise InvalidInputError(
        f"entity '{entity_id}' is not placed in the hierarchy",
        reason=InvalidInputReason.UNKNOWN_ENTITY,
        ids=[entity_id],
    )


__all__ = [
    "SpanFinding",
    "ancestors_of",
    "check_reparent",
    "descendants_of",
    "eligible_parents",
    "hierarchy_statistics",
    "span_of_control",
]
