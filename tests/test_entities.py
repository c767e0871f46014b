"""Unit tests for orgchart.entities.core."""

from __future__ import annotations

import pytest

from orgchart.entities import Entity, WarningReason


def test_entity_accepts_schema_aliases() -> None:
    entity = Entity.model_validate(
        {"id": " p1 ", "parentId": "p0", "organizationId": "acme", "attributes": {"name": "Pat"}}
    )
    assert entity.id == "p1"
    assert entity.parent_id == "p0"
    assert entity.organization_id == "acme"
    assert entity.display_name() == "Pat"


def test_blank_parent_means_root() -> None:
    entity = Entity(id="p1", parent_id="   ", organization_id="acme")
    assert entity.parent_id is None
    assert entity.attributes == {}


def test_null_attributes_default_to_empty() -> None:
    entity = Entity.model_validate({"id": "p1", "organizationId": "acme", "attributes": None})
    assert entity.attributes == {}
    assert entity.display_name() == ""
    assert entity.display_name("title") == ""


def test_entity_rejects_blank_identifiers() -> None:
    with pytest.raises(ValueError):
        Entity(id="   ", organization_id="acme")
    with pytest.raises(ValueError):
        Entity(id="p1", organization_id="")


def test_warning_reason_values() -> None:
    assert WarningReason("ORPHAN_PARENT") is WarningReason.ORPHAN_PARENT
    assert WarningReason.CYCLE_DETECTED.value == "CYCLE_DETECTED"
