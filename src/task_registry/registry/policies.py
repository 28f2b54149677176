"""
Admission policies for the process registry.

A policy decides what happens when ``admit`` is called. Each policy is a pure
function of the admitted entries (oldest first), the incoming process and the
registry capacity. It never mutates anything; the registry applies the
returned decision.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence

from ..models.process import AdmittedProcess, Process


class DecisionKind(str, Enum):
    """Outcome of an admission policy."""
    ACCEPT = "accept"
    EVICT = "evict"
    REFUSE = "refuse"
    DISCARD = "discard"


@dataclass(frozen=True)
class AdmissionDecision:
    """What the registry should do with an incoming process."""
    kind: DecisionKind
    victim: Optional[AdmittedProcess] = None

    @classmethod
    def accept(cls) -> "AdmissionDecision":
        return cls(DecisionKind.ACCEPT)

    @classmethod
    def evict(cls, victim: AdmittedProcess) -> "AdmissionDecision":
        return cls(DecisionKind.EVICT, victim)

    @classmethod
    def refuse(cls) -> "AdmissionDecision":
        return cls(DecisionKind.REFUSE)

    @classmethod
    def discard(cls) -> "AdmissionDecision":
        return cls(DecisionKind.DISCARD)


AdmissionPolicy = Callable[[Sequence[AdmittedProcess], Process, int], AdmissionDecision]


def reject_policy(
    admitted: Sequence[AdmittedProcess],
    incoming: Process,
    maximum_size: int
) -> AdmissionDecision:
    """Admit while there is room, refuse with an error once full."""
    if len(admitted) >= maximum_size:
        return AdmissionDecision.refuse()
    return AdmissionDecision.accept()


def fifo_policy(
    admitted: Sequence[AdmittedProcess],
    incoming: Process,
    maximum_size: int
) -> AdmissionDecision:
    """Always admit; when full, evict the oldest admitted process."""
    if len(admitted) < maximum_size:
        return AdmissionDecision.accept()
    return AdmissionDecision.evict(min(admitted, key=lambda entry: entry.rank))


def priority_policy(
    admitted: Sequence[AdmittedProcess],
    incoming: Process,
    maximum_size: int
) -> AdmissionDecision:
    """
    When full, evict the lowest-priority process that ranks strictly below the
    incoming one, oldest first among equals. If nothing qualifies the incoming
    process is discarded without an error.
    """
    if len(admitted) < maximum_size:
        return AdmissionDecision.accept()

    candidates = [
        entry for entry in admitted
        if entry.priority.rank < incoming.priority.rank
    ]
    if not candidates:
        return AdmissionDecision.discard()

    victim = min(candidates, key=lambda entry: (entry.priority.rank, entry.rank))
    return AdmissionDecision.evict(victim)


__all__ = [
    'AdmissionDecision',
    'AdmissionPolicy',
    'DecisionKind',
    'reject_policy',
    'fifo_policy',
    'priority_policy',
]
