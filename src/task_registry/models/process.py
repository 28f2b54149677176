"""
Process data models for the task registry.
"""

from dataclasses import dataclass, field
from enum import Enum
from functools import total_ordering
from typing import Any, Callable, Dict, Hashable, Optional

from ..utils.errors import ValidationError


@total_ordering
class Priority(Enum):
    """Priority of a process, ordered LOW < MEDIUM < HIGH."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        """Explicit position in the total order."""
        return _PRIORITY_RANKS[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Priority):
            return NotImplemented
        return self.rank < other.rank


_PRIORITY_RANKS: Dict[Priority, int] = {
    Priority.LOW: 0,
    Priority.MEDIUM: 1,
    Priority.HIGH: 2,
}


class Ordering(str, Enum):
    """Sort key used when listing running processes."""
    BY_ID = "id"
    BY_CREATION_TIME = "creation_time"
    BY_PRIORITY = "priority"


TerminateHook = Callable[["Process"], Any]


@dataclass(frozen=True)
class Process:
    """
    A process tracked by a registry.

    Equality and hashing use ``id`` and ``priority`` only. The optional
    ``on_terminate`` hook is where callers wire in real termination; the
    registry calls :meth:`terminate` exactly once when it removes the process.
    """
    id: Hashable
    priority: Priority
    on_terminate: Optional[TerminateHook] = field(
        default=None, compare=False, hash=False, repr=False
    )

    def __post_init__(self) -> None:
        if not isinstance(self.priority, Priority):
            # Accept "low"/"medium"/"high" in any case for config- and JSON-driven callers
            value = self.priority
            try:
                priority = Priority(value.lower() if isinstance(value, str) else value)
            except ValueError:
                raise ValidationError(
                    "priority", value, "must be one of low, medium, high"
                ) from None
            object.__setattr__(self, "priority", priority)

    def terminate(self) -> None:
        """Kill the process. Does nothing unless a hook was supplied."""
        if self.on_terminate is not None:
            self.on_terminate(self)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": str(self.id),
            "priority": self.priority.value,
        }


@dataclass(frozen=True)
class AdmittedProcess:
    """A process together with the admission rank its registry assigned."""
    process: Process
    rank: int

    @property
    def priority(self) -> Priority:
        return self.process.priority
