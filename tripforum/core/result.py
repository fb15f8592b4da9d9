"""Result type for pessimistic-apply mutations.

A mutating call returns ``Ok(new_value)`` once the server confirmed it, or
``Err(error)`` when it did not. Callers apply ``new_value`` only on ``Ok``.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

from tripforum.core.errors import ForumError


T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Confirmed outcome."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Err:
    """Failed outcome; local state was left untouched."""

    error: ForumError

    @property
    def ok(self) -> bool:
        return False

    @property
    def code(self) -> str:
        return self.error.code


Result = Ok[T] | Err
