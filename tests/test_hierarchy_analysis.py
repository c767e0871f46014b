"""Tests for read-side hierarchy analytics."""

from __future__ import annotations

import pytest

from orgchart.config.policies import HierarchyPolicy
from orgchart.entities import Entity
from orgchart.hierarchy import (
    InvalidInputError,
    InvalidInputReason,
    ancestors_of,
    build_hierarchy,
    check_reparent,
    descendants_of,
    eligible_parents,
    hierarchy_statistics,
    span_of_control,
)


def make_team(team_id: str, parent_id=None, name=None) -> Entity:
    return Entity(
        id=team_id,
        parent_id=parent_id,
        organization_id="acme",
        attributes={"name": name or team_id.title()},
    )


@pytest.fixture
def teams() -> list[Entity]:
    return [
        make_team("eng", None, "Engineering"),
        make_team("fe", "eng", "Frontend"),
        make_team("be", "eng", "Backend"),
        make_team("web", "fe", "Web Platform"),
        make_team("ops", None, "Operations"),
    ]


def test_statistics_summarise_structure(teams):
    broken = teams + [make_team("lost", "nowhere")]
    stats = hierarchy_statistics(build_hierarchy(broken))

    assert stats["node_count"] == 6
    assert stats["edge_count"] == 3
    assert stats["total_subunits"] == 3
    assert stats["root_count"] == 3
    assert stats["leaf_count"] == 4
    assert stats["max_depth"] == 2
    assert stats["depth_counts"] == {0: 3, 1: 2, 2: 1}
    assert stats["max_span"] == 2
    assert stats["warning_counts"] == {"ORPHAN_PARENT": 1}


def test_statistics_for_empty_hierarchy():
    stats = hierarchy_statistics(build_hierarchy([]))

    assert stats["node_count"] == 0
    assert stats["max_depth"] == 0
    assert stats["max_span"] == 0


def test_span_of_control_reports_wide_nodes():
    records = [make_team("mgr", None, "Manager")]
    records.extend(make_team(f"r{i}", "mgr") for i in range(6))
    records.append(make_team("lead", None, "Lead"))
    records.extend(make_team(f"l{i}", "lead") for i in range(4))
    records.append(make_team("small", None, "Small"))
    records.extend(make_team(f"s{i}", "small") for i in range(3))
    result = build_hierarchy(records)

    findings = span_of_control(result, max_direct_reports=3)

    assert [finding.id for finding in findings] == ["mgr", "lead"]
    assert findings[0].direct_reports == 6
    assert findings[0].severity == "urgent"
    assert findings[1].severity == "warning"
    assert findings[0].display_name == "Manager"


def test_span_of_control_uses_policy_threshold(teams):
    policy = HierarchyPolicy(max_direct_reports=1)
    findings = span_of_control(build_hierarchy(teams), policy=policy)

    assert [finding.to_dict()["id"] for finding in findings] == ["eng"]
    assert findings[0].threshold == 1


def test_reparent_to_top_level_is_allowed(teams):
    check_reparent(teams, "fe", None)
    check_reparent(teams, "fe", "")


def test_reparent_under_sibling_branch_is_allowed(teams):
    check_reparent(teams, "web", "ops")


def test_reparent_target_is_normalised_like_record_ids(teams):
    check_reparent(teams, "web", " ops ")
    check_reparent(teams, "fe", "   ")

    with pytest.raises(InvalidInputError) as excinfo:
        check_reparent(teams, "fe", " fe ")
    assert excinfo.value.reason is InvalidInputReason.SELF_PARENT


@pytest.mark.parametrize(
    ("entity_id", "parent_id", "reason"),
    [
        ("fe", "fe", InvalidInputReason.SELF_PARENT),
        ("eng", "web", InvalidInputReason.WOULD_CREATE_CYCLE),
        ("eng", "fe", InvalidInputReason.WOULD_CREATE_CYCLE),
        ("fe", "ghost", InvalidInputReason.UNKNOWN_PARENT),
        ("ghost", "eng", InvalidInputReason.UNKNOWN_ENTITY),
    ],
)
def test_reparent_rejections(teams, entity_id, parent_id, reason):
    with pytest.raises(InvalidInputError) as excinfo:
        check_reparent(teams, entity_id, parent_id)

    assert excinfo.value.reason is reason


def test_eligible_parents_exclude_self_and_descendants(teams):
    candidates = eligible_parents(teams, "eng")

    assert [entity.id for entity in candidates] == ["ops"]


def test_eligible_parents_for_new_record_lists_everything_sorted(teams):
    candidates = eligible_parents(teams)

    assert [entity.display_name() for entity in candidates] == [
        "Backend",
        "Engineering",
        "Frontend",
        "Operations",
        "Web Platform",
    ]


def test_ancestors_and_descendants(teams):
    result = build_hierarchy(teams)

    assert ancestors_of(result, "web") == ["fe", "eng"]
    assert ancestors_of(result, "eng") == []
    assert descendants_of(result, "eng") == ["be", "fe", "web"]
    assert descendants_of(result, "ops") == []


def test_ancestors_of_unplaced_entity_raises(teams):
    result = build_hierarchy(teams)

    with pytest.raises(InvalidInputError):
        ancestors_of(result, "ghost")
    with pytest.raises(InvalidInputError):
        descendants_of(result, "ghost")
