"""Exceptions raised when callers violate the hierarchy input contract."""

from __future__ import annotations

from enum import Enum
from typing import Iterable


class InvalidInputReason(str, Enum):
    """Why a record set or re-assignment request was rejected."""

    DUPLICATE_ID = "DUPLICATE_ID"
    MIXED_TENANT = "MIXED_TENANT"
    TOO_LARGE = "TOO_LARGE"
    MALFORMED_RECORD = "MALFORMED_RECORD"
    UNKNOWN_ENTITY = "UNKNOWN_ENTITY"
    UNKNOWN_PARENT = "UNKNOWN_PARENT"
    SELF_PARENT = "SELF_PARENT"
    WOULD_CREATE_CYCLE = "WOULD_CREATE_CYCLE"


class InvalidInputError(ValueError):
    """Raised for caller-contract violations; never retried automatically."""

    def __init__(
        self,
        message: str,
        *,
        reason: InvalidInputReason,
        ids: Iterable[str] = (),
    ) -> None:
        super().__init__(message)
        self.reason = reason
        self.ids = list(ids)

    def to_dict(self) -> dict:
        return {"reason": self.reason.value, "message": str(self), "ids": list(self.ids)}


__all__ = ["InvalidInputError", "InvalidInputReason"]
