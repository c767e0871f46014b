"""Structures returned by :class:`~orgchart.hierarchy.builder.HierarchyBuilder`."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List

from orgchart.entities.core import WarningReason


@dataclass(slots=True)
class TreeNode:
    """A placed entity together with its ordered children."""

    id: str
    parent_id: str | None
    depth: int
    attributes: Dict[str, Any]
    children: List["TreeNode"] = field(default_factory=list)

    def to_dict(self) -> dict:
        # Built bottom-up with an explicit stack so deep chains stay off the call stack.
        converted: Dict[int, dict] = {}
        stack: List[tuple[TreeNode, bool]] = [(self, False)]
        while stack:
            node, expanded = stack.pop()
            if not expanded:
                stack.append((node, True))
                for child in reversed(node.children):
                    stack.append((child, False))
                continue
            converted[id(node)] = {
                "id": node.id,
                "parentId": node.parent_id,
                "depth": node.depth,
                "attributes": dict(node.attributes),
                "children": [converted.pop(id(child)) for child in node.children],
            }
        return converted[id(self)]


@dataclass(slots=True)
class FlatNode:
    """Chart-layout record for a single placed entity."""

    id: str
    parent_id: str | None
    depth: int
    attributes: Dict[str, Any]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "parentId": self.parent_id,
            "depth": self.depth,
            "attributes": dict(self.attributes),
        }


@dataclass(slots=True, frozen=True)
class Edge:
    """Parent to child relation included in the validated tree."""

    source: str
    target: str

    def to_dict(self) -> dict:
        return {"from": self.source, "to": self.target}


@dataclass(slots=True)
class HierarchyWarning:
    """A record that could not be placed normally, with the reason why."""

    id: str
    reason: WarningReason
    detail: str = ""
    participants: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "reason": self.reason.value,
            "detail": self.detail,
            "participants": list(self.participants),
        }


@dataclass(slots=True)
class HierarchyResult:
    """Forest, flattened projection and integrity warnings for one tenant."""

    organization_id: str | None
    roots: List[TreeNode] = field(default_factory=list)
    nodes: List[FlatNode] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)
    warnings: List[HierarchyWarning] = field(default_factory=list)
    fingerprint: str | None = None

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    def get(self, entity_id: str) -> FlatNode | None:
        for node in self.nodes:
            if node.id == entity_id:
                return node
        return None

    def children_map(self) -> Dict[str, List[str]]:
        """Return parent id -> ordered child ids for every placed node."""

        mapping: Dict[str, List[str]] = defaultdict(list)
        for edge in self.edges:
            mapping[edge.source].append(edge.target)
        return {node.id: list(mapping.get(node.id, [])) for node in self.nodes}

    def iter_depth_first(self) -> Iterator[TreeNode]:
        """Yield tree nodes in pre-order, honouring sibling ordering."""

        stack = list(reversed(self.roots))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def to_dict(self, *, include_tree: bool = True) -> dict:
        payload = {
            "organizationId": self.organization_id,
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
            "warnings": [warning.to_dict() for warning in self.warnings],
            "fingerprint": self.fingerprint,
        }
        if include_tree:
            payload["roots"] = [root.to_dict() for root in self.roots]
        return payload


__all__ = [
    "Edge",
    "FlatNode",
    "HierarchyResult",
    "HierarchyWarning",
    "TreeNode",
]
