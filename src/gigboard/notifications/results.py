"""Result type for notification operations that never raise to callers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

from gigboard.errors import GigboardError

T = TypeVar("T")


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Outcome of a network-backed operation.

    Lets callers tell "succeeded with no data" apart from "failed".

    Attributes:
        ok: Whether the operation succeeded
        data: Payload on success
        error: The failure, when ``ok`` is False
        skipped: True when the operation did not run (e.g. signed out)
    """

    ok: bool
    data: Optional[T] = None
    error: Optional[Exception] = None
    skipped: bool = False

    @classmethod
    def success(cls, data: Optional[T] = None) -> "OperationResult[T]":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, error: Exception) -> "OperationResult[T]":
        return cls(ok=False, error=error)

    @classmethod
    def skip(cls) -> "OperationResult[T]":
        return cls(ok=False, skipped=True)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"success": self.ok}
        if self.skipped:
            result["skipped"] = True
        if self.error is not None:
            if isinstance(self.error, GigboardError):
                result["error"] = self.error.to_dict()
            else:
                result["error"] = {"message": str(self.error)}
        return result
