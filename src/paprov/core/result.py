"""
Result type for file-level entry points.

Pure analysis functions raise ``PaprovError`` subclasses; the ``run_*``
functions that touch the filesystem wrap everything into an ``Ok``/``Err``
so the CLI can report failures without tracebacks.

Usage:
    >>> result = run_report_pa(...)
    >>> if result.is_err():
    ...     echo_error(result.unwrap_err())
    >>> stats = result.unwrap()
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TypeVar, Generic, Callable, Union, Any

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful outcome carrying a value."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_err(self) -> Any:
        raise ValueError(f"Expected an error, got Ok({self.value!r})")

    def and_then(self, fn: Callable[[T], Result[U, Any]]) -> Result[U, Any]:
        """Feed the value to the next Result-returning step."""
        return fn(self.value)


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failed outcome carrying an error message."""

    error: E

    @classmethod
    def from_exception(cls, exc: BaseException) -> Err[str]:
        """
        Flatten an exception into ``"ClassName: message"``.

        Keeps domain errors (e.g. ``InvalidFocalIndividual``) recognisable
        once they are reported as plain text.
        """
        return cls(f"{type(exc).__name__}: {exc}")

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> Any:
        raise ValueError(f"Called unwrap on Err: {self.error}")

    def unwrap_err(self) -> E:
        return self.error

    def and_then(self, fn: Callable[[Any], Any]) -> Err[E]:
        """Short-circuit: the chained step never runs."""
        return self


Result = Union[Ok[T], Err[E]]
