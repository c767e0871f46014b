"""Hierarchy construction public API."""

from __future__ import annotations

from .analysis import (
    SpanFinding,
    ancestors_of,
    check_reparent,
    descendants_of,
    eligible_parents,
    hierarchy_statistics,
    span_of_control,
)
from .builder import HierarchyBuilder, build_hierarchy, default_sort_key
from .errors import InvalidInputError, InvalidInputReason
from .io import export_projection, load_records, render_tree
from .main import assemble_from_files
from .result import Edge, FlatNode, HierarchyResult, HierarchyWarning, TreeNode

__all__ = [
    "assemble_from_files",
    "build_hierarchy",
    "default_sort_key",
    "HierarchyBuilder",
    "HierarchyResult",
    "HierarchyWarning",
    "TreeNode",
    "FlatNode",
    "Edge",
    "InvalidInputError",
    "InvalidInputReason",
    "SpanFinding",
    "ancestors_of",
    "check_reparent",
    "descendants_of",
    "eligible_parents",
    "hierarchy_statistics",
    "span_of_control",
    "export_projection",
    "load_records",
    "render_tree",
]
