"""Tagged success/failure values returned by QueryRunner.query."""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from dig_runner.utils.exceptions import DigRunnerError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """A successful outcome."""

    value: T

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    """A failed outcome carrying the typed error."""

    error: DigRunnerError

    @property
    def is_ok(self) -> bool:
        return False

    def unwrap(self):
        raise self.error


Outcome = Union[Ok[T], Err]
