"""Domain entities for the organization hierarchy."""

from .core import Entity, WarningReason

__all__ = [
    "Entity",
    "WarningReason",
]
