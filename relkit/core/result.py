"""Result type for explicit error handling.

Release steps, git commands and file operations all report failure as a value
instead of raising. A step either continues with a new state or stops the
release:

    def check_clean(vcs: VcsPort) -> Result[None, Abort]:
        if vcs.is_dirty().unwrap_or(True):
            return Err(Abort("Working directory is dirty.", kind="precondition"))
        return Ok(None)

    match check_clean(vcs):
        case Ok(_):
            console.success("clean")
        case Err(abort):
            console.error(abort.reason)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeGuard, TypeVar

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok[T]:
    """Successful result carrying a value."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map(self, f: Callable[[T], U]) -> Ok[U]:
        """Apply f to the contained value."""
        return Ok(f(self.value))

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err[E]:
    """Failed result carrying an error payload."""

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> None:
        """Raise, since there is no value.

        Raises:
            ValueError: Always, containing the error.
        """
        raise ValueError(f"called unwrap on Err: {self.error}")

    def unwrap_or(self, default: T) -> T:
        return default

    def map(self, f: Callable[[T], U]) -> Err[E]:
        return self

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


type Result[T, E] = Ok[T] | Err[E]


def is_ok[T, E](result: Result[T, E]) -> TypeGuard[Ok[T]]:
    """Type guard narrowing a Result to Ok."""
    return isinstance(result, Ok)


def is_err[T, E](result: Result[T, E]) -> TypeGuard[Err[E]]:
    """Type guard narrowing a Result to Err."""
    return isinstance(result, Err)
