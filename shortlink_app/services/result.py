"""
Typed outcome of a service operation.

Callers check ``result.error`` and handle each error kind explicitly
instead of relying on exceptions unwinding through the route.
"""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from shortlink_app.errors import ShortUrlError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    value: Optional[T] = None
    error: Optional[ShortUrlError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ShortUrlError) -> "Result[T]":
        return cls(error=error)
