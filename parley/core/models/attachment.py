from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Unattached:
    """Nothing has been attached to this slot yet."""


@dataclass(frozen=True, slots=True)
class Attached(Generic[T]):
    """A slot holding an externally owned collaborator."""
    value: T
