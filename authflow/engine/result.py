"""Result type — tagged success/failure value returned by the step engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either ``ok=True`` with a value, or ``ok=False`` with an error string."""

    ok: bool
    value: Optional[T] = None
    error: Optional[str] = None

    def __post_init__(self) -> None:
        if self.ok and self.error is not None:
            raise ValueError("A successful Result cannot carry an error")
        if not self.ok:
            if not self.error:
                raise ValueError("A failed Result requires an error message")
            if self.value is not None:
                raise ValueError("A failed Result cannot carry a value")

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(ok=True, value=value)

    @classmethod
    def fail(cls, error: str) -> "Result[T]":
        return cls(ok=False, error=error)

    def __bool__(self) -> bool:
        return self.ok
