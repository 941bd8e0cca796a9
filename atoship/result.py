"""Result type returned by every service call."""

from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

from .exceptions import APIError, ErrorKind

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Either a successful value or a classified error, never both.

    Example:
        result = await client.orders.get("ord_123")
        if result.is_ok:
            print(result.value.order_number)
        elif result.kind is ErrorKind.NOT_FOUND:
            ...
    """

    value: Optional[T] = None
    error: Optional[APIError] = None

    @classmethod
    def ok(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, error: APIError) -> "Result[T]":
        return cls(error=error)

    @property
    def is_ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> Optional[ErrorKind]:
        return self.error.kind if self.error is not None else None

    def unwrap(self) -> T:
        """Return the value, or raise the classified error."""
        if self.error is not None:
            raise self.error
        return self.value

    def unwrap_or(self, default: T) -> T:
        return default if self.error is not None else self.value

    def map(self, func: Callable[[T], U]) -> "Result[U]":
        if self.error is not None:
            return Result(error=self.error)
        return Result(value=func(self.value))

    def __bool__(self) -> bool:
        return self.is_ok
