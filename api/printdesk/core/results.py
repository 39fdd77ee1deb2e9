"""Outcome wrapper for telemetry boundaries.

Analytics reads and writes never raise to their callers. Instead they hand
back a ``StoreResult`` whose ``value`` is always usable (the zero state on
failure) and whose ``error`` tells "empty because nothing happened" apart
from "empty because the store failed".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class StoreResult(Generic[T]):
    value: T
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> StoreResult[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: BaseException | str, default: T) -> StoreResult[T]:
        message = error if isinstance(error, str) else f"{type(error).__name__}: {error}"
        return cls(value=default, error=message or "unknown error")
