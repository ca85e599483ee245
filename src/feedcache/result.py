"""Result values delivered to asynchronous completions."""

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Success:
    """A completed operation and its value (``None`` for operations without one)."""

    value: Any = None


@dataclass(frozen=True)
class Failure:
    """A failed operation and the error that caused it."""

    error: Exception


Result = Union[Success, Failure]
