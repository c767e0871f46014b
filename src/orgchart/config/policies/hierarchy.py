"""Hierarchy construction policy models."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class HierarchyPolicy(BaseModel):
    """Configuration controlling hierarchy construction and analysis."""

    max_records: int = Field(
        default=50_000,
        ge=1,
        description="Largest tenant record set accepted before rejecting the input as too large.",
    )
    display_name_attribute: str = Field(
        default="name",
        min_length=1,
        description="Attribute used as the display name when ordering siblings.",
    )
    include_orphans_as_roots: bool = Field(
        default=True,
        description="Place records with a missing parent as additional roots.",
    )
    max_direct_reports: int = Field(
        default=8,
        ge=1,
        description="Span-of-control threshold for direct children of a node.",
    )
    urgent_span_multiplier: float = Field(
        default=1.5,
        ge=1.0,
        description="Span findings at or above threshold * multiplier are reported as urgent.",
    )
    tree_indent: int = Field(default=2, ge=0, le=16)

    @field_validator("display_name_attribute")
    @classmethod
    def _strip_attribute(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("display_name_attribute must not be blank")
        return cleaned
