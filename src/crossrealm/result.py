"""
Result type for explicit error handling across the replication engine.

Every realm call, transfer attempt and dispatch returns a ``Result`` so that
failures travel as values instead of exceptions raised from unrelated
callback contexts. Only the invocation boundary converts a terminal
``Failure`` into a raised exception.

Usage:
    >>> def split_secret(raw: str) -> Result[tuple[str, str], str]:
    ...     if ":" not in raw:
    ...         return Failure("missing delimiter")
    ...     key_id, secret = raw.split(":", 1)
    ...     return Success((key_id, secret))
    ...
    >>> match split_secret("AKIA:abc"):
    ...     case Success((key_id, _)):
    ...         print(key_id)
    ...     case Failure(error):
    ...         print(error)
    AKIA
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, NoReturn, TypeVar


T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")
F = TypeVar("F")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Successful outcome carrying a value of type T."""

    value: T

    def is_success(self) -> bool:
        return True

    def is_failure(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Return the wrapped value."""
        return self.value

    def map(self, f: Callable[[T], U]) -> Result[U, E]:
        """Transform the success value."""
        return Success(f(self.value))

    def map_error(self, f: Callable[[E], F]) -> Result[T, F]:
        """No-op on Success; keeps the value and retypes the error side."""
        result: Result[T, F] = Success(self.value)
        return result

    def and_then(self, f: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """Chain another Result-returning step."""
        return f(self.value)


@dataclass(frozen=True)
class Failure(Generic[E]):
    """Failed outcome carrying an error of type E."""

    error: E

    def is_success(self) -> bool:
        return False

    def is_failure(self) -> bool:
        return True

    def unwrap(self) -> NoReturn:
        """
        Unwrap the success value.

        Raises:
            RuntimeError: Always, since Failure has no value.
        """
        raise RuntimeError(f"Called unwrap() on Failure: {self.error}")

    def map(self, f: Callable[[T], U]) -> Result[U, E]:
        """No-op on Failure."""
        result: Result[U, E] = Failure(self.error)
        return result

    def map_error(self, f: Callable[[E], F]) -> Result[T, F]:
        """Transform the error value, e.g. to wrap a realm error in a domain error."""
        return Failure(f(self.error))

    def and_then(self, f: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """No-op on Failure; the chain short-circuits here."""
        result: Result[U, E] = Failure(self.error)
        return result


Result = Success[T] | Failure[E]
