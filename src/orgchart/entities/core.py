"""Core domain entities shared by the hierarchy builder and its consumers."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator


class WarningReason(str, Enum):
    """Data-integrity problems reported alongside a partially built hierarchy."""

    ORPHAN_PARENT = "ORPHAN_PARENT"
    CYCLE_DETECTED = "CYCLE_DETECTED"


class Entity(BaseModel):
    """A person or team row scoped to a single organization.

    Field names follow the persistence schema (``parentId``, ``organizationId``)
    through aliases; Python callers may use the snake_case names directly.
    ``attributes`` is never interpreted beyond reading the display name.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1, description="Tenant-scoped identifier")
    parent_id: str | None = Field(
        default=None,
        alias="parentId",
        description="Identifier of the parent entity, or null for a root.",
    )
    organization_id: str = Field(
        ...,
        min_length=1,
        alias="organizationId",
        description="Tenant the entity belongs to.",
    )
    attributes: Dict[str, Any] = Field(
        default_factory=dict,
        description="Opaque payload carried through to the output unchanged.",
    )

    @field_validator("id", "organization_id")
    @classmethod
    def _strip_identifier(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("identifiers must contain non-whitespace characters")
        return cleaned

    @field_validator("parent_id", mode="before")
    @classmethod
    def _blank_parent_is_root(cls, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, str):
            cleaned = value.strip()
            return cleaned or None
        return value

    @field_validator("attributes", mode="before")
    @classmethod
    def _default_attributes(cls, value: Any) -> Any:
        return {} if value is None else value

    def display_name(self, attribute: str = "name") -> str:
        """Return the human-readable label stored under ``attribute``."""

        value = self.attributes.get(attribute)
        if value is None:
            return ""
        return str(value)


__all__ = ["Entity", "WarningReason"]
