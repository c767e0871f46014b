"""Build a validated, cycle-free forest from flat tenant records."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import Any, Callable, Dict, Iterable, List, Mapping, Sequence, Tuple

from pydantic import ValidationError

from orgchart.config.policies import HierarchyPolicy
from orgchart.entities.core import Entity, WarningReason
from orgchart.utils.helpers import stable_hash
from orgchart.utils.logging import get_logger

from .errors import InvalidInputError, InvalidInputReason
from .result import Edge, FlatNode, HierarchyResult, HierarchyWarning, TreeNode

_LOGGER = get_logger(module=__name__)

Comparator = Callable[[Entity, Entity], int]

_PLACED = "placed"
_CYCLE = "cycle"
_BELOW_CYCLE = "below-cycle"
_BELOW_ORPHAN = "below-orphan"


@dataclass(slots=True)
class _Resolution:
    """Memoised outcome of walking one record's ancestor chain."""

    kind: str
    depth: int = 0
    participants: Tuple[str, ...] = field(default_factory=tuple)

    def below(self) -> "_Resolution":
        if self.kind == _PLACED:
            return _Resolution(_PLACED, self.depth + 1)
        if self.kind in (_CYCLE, _BELOW_CYCLE):
            return _Resolution(_BELOW_CYCLE, participants=self.participants)
        return _Resolution(_BELOW_ORPHAN, participants=self.participants)


def default_sort_key(attribute: str = "name") -> Callable[[Entity], Tuple[str, str]]:
    """Order by case-insensitive display name, then by id."""

    def _key(entity: Entity) -> Tuple[str, str]:
        return (entity.display_name(attribute).casefold(), entity.id)

    return _key


def _rotate_cycle(loop: Sequence[str]) -> Tuple[str, ...]:
    """Start the chain at its smallest id."""
    pivot = loop.index(min(loop))
    return tuple(loop[pivot:]) + tuple(loop[:pivot])


class HierarchyBuilder:
    """Stateless transform from flat records to a :class:`HierarchyResult`."""

    def __init__(self, policy: HierarchyPolicy | None = None) -> None:
        self._policy = policy or HierarchyPolicy()

    @property
    def policy(self) -> HierarchyPolicy:
        return self._policy

    # ------------------------------------------------------------------
    # Primary entry point
    # ------------------------------------------------------------------
    def build(
        self,
        records: Iterable[Entity | Mapping[str, Any]],
        *,
        comparator: Comparator | None = None,
    ) -> HierarchyResult:
        entities = self.coerce_records(records)
        organization_id = self.validate_input(entities)
        if not entities:
            return HierarchyResult(organization_id=None, fingerprint=stable_hash([]))

        index: Dict[str, Entity] = {entity.id: entity for entity in entities}
        _LOGGER.debug(
            "Indexed hierarchy records",
            organization_id=organization_id,
            total=len(index),
        )

        children: Dict[str, List[Entity]] = defaultdict(list)
        for entity in entities:
            if entity.parent_id is not None and entity.parent_id in index:
                children[entity.parent_id].append(entity)

        resolutions = self.resolve_ancestry(entities, index)
        warnings = self._collect_warnings(entities, resolutions, organization_id)

        if comparator is not None:
            sort_key: Callable[[Entity], Any] = cmp_to_key(comparator)
        else:
            sort_key = default_sort_key(self._policy.display_name_attribute)

        roots = sorted(
            (
                entity
                for entity in entities
                if resolutions[entity.id].kind == _PLACED and resolutions[entity.id].depth == 0
            ),
            key=sort_key,
        )
        tree_roots, nodes, edges = self._assemble(roots, children, resolutions, sort_key)

        result = HierarchyResult(
            organization_id=organization_id,
            roots=tree_roots,
            nodes=nodes,
            edges=edges,
            warnings=warnings,
            fingerprint=self.fingerprint(entities),
        )
        _LOGGER.info(
            "Hierarchy built",
            organization_id=organization_id,
            records=len(entities),
            placed=len(nodes),
            roots=len(tree_roots),
            warnings=len(warnings),
        )
        return result

    # ------------------------------------------------------------------
    # Input contract
    # ------------------------------------------------------------------
    def coerce_records(self, records: Iterable[Entity | Mapping[str, Any]]) -> List[Entity]:
        entities: List[Entity] = []
        for position, record in enumerate(records):
            if isinstance(record, Entity):
                entities.append(record)
                continue
            if not isinstance(record, Mapping):
                raise InvalidInputError(
                    f"record #{position} is a {type(record).__name__}, expected a mapping",
                    reason=InvalidInputReason.MALFORMED_RECORD,
                )
            try:
                entities.append(Entity.model_validate(record))
            except ValidationError as exc:
                raise InvalidInputError(
                    f"record #{position} is malformed: {exc.errors()[0]['msg']}",
                    reason=InvalidInputReason.MALFORMED_RECORD,
                    ids=[str(record.get("id"))] if record.get("id") is not None else [],
                ) from exc
        return entities

    def validate_input(self, entities: Sequence[Entity]) -> str | None:
        """Check size, id uniqueness and tenant scope; return the tenant id."""

        if len(entities) > self._policy.max_records:
            raise InvalidInputError(
                f"{len(entities)} records exceed max_records={self._policy.max_records}",
                reason=InvalidInputReason.TOO_LARGE,
            )

        seen: set[str] = set()
        duplicates: set[str] = set()
        for entity in entities:
            if entity.id in seen:
                duplicates.add(entity.id)
            seen.add(entity.id)
        if duplicates:
            raise InvalidInputError(
                f"duplicate record ids: {', '.join(sorted(duplicates))}",
                reason=InvalidInputReason.DUPLICATE_ID,
                ids=sorted(duplicates),
            )

        tenants = {entity.organization_id for entity in entities}
        if len(tenants) > 1:
            raise InvalidInputError(
                f"records span {len(tenants)} organizations: {', '.join(sorted(tenants))}",
                reason=InvalidInputReason.MIXED_TENANT,
                ids=sorted(tenants),
            )
        return next(iter(tenants), None)

    # ------------------------------------------------------------------
    # Ancestry resolution
    # ------------------------------------------------------------------
    def resolve_ancestry(
        self,
        entities: Sequence[Entity],
        index: Mapping[str, Entity],
    ) -> Dict[str, _Resolution]:
        """Classify every record by walking its parent chain once.

        Each record enters a walk at most once; later walks stop at the first
        already-resolved ancestor, so the whole pass is linear in the number
        of records.
        """

        resolved: Dict[str, _Resolution] = {}
        for start in entities:
            if start.id in resolved:
                continue
            path: List[str] = []
            position: Dict[str, int] = {}
            current = start.id
            while True:
                if current in resolved:
                    outcome = resolved[current]
                    break
                if current in position:
                    loop = path[position[current] :]
                    participants = _rotate_cycle(loop)
                    for member in loop:
                        resolved[member] = _Resolution(_CYCLE, participants=participants)
                    del path[position[current] :]
                    outcome = resolved[current]
                    break
                position[current] = len(path)
                path.append(current)
                parent_id = index[current].parent_id
                if parent_id is None:
                    outcome = resolved[current] = _Resolution(_PLACED, 0)
                    path.pop()
                    break
                if parent_id not in index:
                    if self._policy.include_orphans_as_roots:
                        outcome = resolved[current] = _Resolution(_PLACED, 0)
                    else:
                        outcome = resolved[current] = _Resolution(
                            _BELOW_ORPHAN, participants=(current,)
                        )
                    path.pop()
                    break
                current = parent_id

            for node_id in reversed(path):
                outcome = outcome.below()
                resolved[node_id] = outcome
        return resolved

    def _collect_warnings(
        self,
        entities: Sequence[Entity],
        resolutions: Mapping[str, _Resolution],
        organization_id: str | None,
    ) -> List[HierarchyWarning]:
        index = {entity.id for entity in entities}
        warnings: List[HierarchyWarning] = []
        for entity in entities:
            resolution = resolutions[entity.id]
            if entity.parent_id is not None and entity.parent_id not in index:
                detail = (
                    f"parent '{entity.parent_id}' not found in organization '{organization_id}'"
                )
                warnings.append(
                    HierarchyWarning(
                        id=entity.id,
                        reason=WarningReason.ORPHAN_PARENT,
                        detail=detail,
                        participants=[entity.parent_id],
                    )
                )
                _LOGGER.warning(
                    "Record references a missing parent",
                    organization_id=organization_id,
                    entity_id=entity.id,
                    parent_id=entity.parent_id,
                    placed_as_root=resolution.kind == _PLACED,
                )
            elif resolution.kind == _BELOW_ORPHAN:
                warnings.append(
                    HierarchyWarning(
                        id=entity.id,
                        reason=WarningReason.ORPHAN_PARENT,
                        detail=f"ancestor '{resolution.participants[0]}' references a missing parent",
                        participants=list(resolution.participants),
                    )
                )
            elif resolution.kind in (_CYCLE, _BELOW_CYCLE):
                detail = (
                    "record is part of a parent cycle"
                    if resolution.kind == _CYCLE
                    else "ancestor chain ends in a parent cycle"
                )
                warnings.append(
                    HierarchyWarning(
                        id=entity.id,
                        reason=WarningReason.CYCLE_DETECTED,
                        detail=detail,
                        participants=list(resolution.participants),
                    )
                )
                _LOGGER.warning(
                    "Excluding record caught in a parent cycle",
                    organization_id=organization_id,
                    entity_id=entity.id,
                    cycle=list(resolution.participants),
                )
        warnings.sort(key=lambda warning: (warning.reason.value, warning.id))
        return warnings

    # ------------------------------------------------------------------
    # Tree assembly
    # ------------------------------------------------------------------
    def _assemble(
        self,
        roots: Sequence[Entity],
        children: Mapping[str, Sequence[Entity]],
        resolutions: Mapping[str, _Resolution],
        sort_key: Callable[[Entity], Any],
    ) -> Tuple[List[TreeNode], List[FlatNode], List[Edge]]:
        tree_roots: List[TreeNode] = []
        nodes: List[FlatNode] = []
        edges: List[Edge] = []

        stack: List[Tuple[Entity, TreeNode | None]] = [(root, None) for root in reversed(roots)]
        while stack:
            entity, parent = stack.pop()
            depth = resolutions[entity.id].depth
            parent_id = parent.id if parent is not None else None
            node = TreeNode(
                id=entity.id,
                parent_id=parent_id,
                depth=depth,
                attributes=dict(entity.attributes),
            )
            if parent is None:
                tree_roots.append(node)
            else:
                parent.children.append(node)
                edges.append(Edge(source=parent.id, target=entity.id))
            nodes.append(
                FlatNode(
                    id=entity.id,
                    parent_id=parent_id,
                    depth=depth,
                    attributes=dict(entity.attributes),
                )
            )
            ordered = sorted(children.get(entity.id, ()), key=sort_key)
            for child in reversed(ordered):
                stack.append((child, node))
        return tree_roots, nodes, edges

    @staticmethod
    def fingerprint(entities: Sequence[Entity]) -> str:
        """Stable digest of the record set, usable as a cache version."""

        payload = sorted(
            (
                [entity.id, entity.parent_id, entity.organization_id, entity.attributes]
                for entity in entities
            ),
            key=lambda row: row[0],
        )
        return stable_hash(payload)


def build_hierarchy(
    records: Iterable[Entity | Mapping[str, Any]],
    *,
    policy: HierarchyPolicy | None = None,
    comparator: Comparator | None = None,
) -> HierarchyResult:
    """Build the hierarchy for one tenant's records.

    Raises :class:`InvalidInputError` for duplicate ids, mixed tenants, or an
    input larger than ``policy.max_records``. Orphans and cycles never raise;
    they are reported in ``result.warnings``.
    """

    return HierarchyBuilder(policy).build(records, comparator=comparator)


__all__ = [
    "Comparator",
    "HierarchyBuilder",
    "build_hierarchy",
    "default_sort_key",
]
