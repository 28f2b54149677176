"""
Bounded process registry.

Holds the processes admitted so far, oldest first, and enforces a fixed
capacity through an admission policy. Listing and termination behave the
same for every policy; only the reaction to ``admit`` on a full registry
differs.
"""

import itertools
import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Union

from ..models.process import AdmittedProcess, Ordering, Priority, Process, TerminateHook
from ..utils.errors import (
    CapacityExceededError,
    DuplicateProcessError,
    ErrorContext,
    ProcessNotFoundError,
    TaskRegistryError,
    ValidationError,
)
from ..utils.logging import get_logger
from ..utils.metrics import MetricsCollector
from .policies import AdmissionPolicy, DecisionKind, reject_policy

logger = get_logger("task-registry.registry")


@dataclass(frozen=True)
class AdmissionResult:
    """Result of a single ``admit`` call."""
    process: Process
    admitted: bool
    evicted: Optional[Process] = None


@dataclass(frozen=True)
class RegistryStats:
    """Point-in-time view of a registry and its lifetime counters."""
    name: str
    policy: str
    maximum_size: int
    size: int
    admitted: int
    evicted: int
    discarded: int
    refused: int
    terminated: int

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "name": self.name,
            "policy": self.policy,
            "maximum_size": self.maximum_size,
            "size": self.size,
            "admitted": self.admitted,
            "evicted": self.evicted,
            "discarded": self.discarded,
            "refused": self.refused,
            "terminated": self.terminated,
        }


def _policy_name(policy: AdmissionPolicy) -> str:
    name = getattr(policy, "__name__", type(policy).__name__)
    return name[:-len("_policy")] if name.endswith("_policy") else name


class ProcessRegistry:
    """
    Tracks running processes up to a fixed capacity.

    All public operations are serialized by a re-entrant lock, so an eviction
    and the append that follows it are never observed separately. The lock is
    re-entrant so terminate hooks may read the registry they are removed from.
    Hooks must not modify it: admit and the terminate operations raise
    TaskRegistryError when called from inside a hook.

    Termination hooks run before the entry is removed. A hook that raises
    aborts the current operation and leaves that entry admitted.
    """

    def __init__(
        self,
        maximum_size: int,
        policy: AdmissionPolicy = reject_policy,
        *,
        name: Optional[str] = None,
        reject_duplicate_ids: bool = False,
        on_terminate: Optional[TerminateHook] = None,
        processes: Iterable[Process] = (),
        metrics: Optional[MetricsCollector] = None,
    ):
        """
        Initialize the registry.

        Args:
            maximum_size: Number of processes that may run at once, must be positive
            policy: Admission policy applied by ``admit``
            name: Name used in logs, errors and metric tags
            reject_duplicate_ids: Raise DuplicateProcessError for an id that is already running
            on_terminate: Called with each removed process after its own ``terminate``
            processes: Processes admitted in order, through the policy, at construction
            metrics: Collector to report into (a private one by default)
        """
        if isinstance(maximum_size, bool) or not isinstance(maximum_size, int):
            raise ValidationError("maximum_size", maximum_size, "must be an integer")
        if maximum_size <= 0:
            raise ValidationError("maximum_size", maximum_size, "must be greater than 0")

        self.name = name or "default"
        self._maximum_size = maximum_size
        self._policy = policy
        self._policy_name = _policy_name(policy)
        self._reject_duplicate_ids = reject_duplicate_ids
        self._on_terminate = on_terminate

        self._entries: List[AdmittedProcess] = []
        self._ranks = itertools.count(1)
        self._lock = threading.RLock()
        self._terminating = False

        self._metrics = metrics or MetricsCollector()
        self._tags = {"registry": self.name, "policy": self._policy_name}
        self.logger = logger.bind(registry=self.name, policy=self._policy_name)

        self.logger.debug("registry_created", maximum_size=maximum_size)

        for process in processes:
            self.admit(process)

    @property
    def maximum_size(self) -> int:
        return self._maximum_size

    @property
    def policy_name(self) -> str:
        return self._policy_name

    @property
    def metrics(self) -> MetricsCollector:
        return self._metrics

    @property
    def is_full(self) -> bool:
        with self._lock:
            return len(self._entries) >= self._maximum_size

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, process: object) -> bool:
        with self._lock:
            return any(entry.process == process for entry in self._entries)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self.name!r}, policy={self._policy_name!r}, "
            f"size={len(self)}, maximum_size={self._maximum_size})"
        )

    def admit(self, process: Process) -> AdmissionResult:
        """
        Admit a process according to the registry's policy.

        Raises:
            CapacityExceededError: The policy refuses admission into a full registry
            DuplicateProcessError: Duplicate ids are rejected and the id is running
        """
        if not isinstance(process, Process):
            raise ValidationError("process", process, "must be a Process instance")

        with self._lock, self._metrics.timing("registry.admit", self._tags):
            self._check_mutable("admit")
            if self._reject_duplicate_ids and any(
                entry.process.id == process.id for entry in self._entries
            ):
                raise DuplicateProcessError(process.id, context=self._context("admit"))

            decision = self._policy(tuple(self._entries), process, self._maximum_size)

            if decision.kind is DecisionKind.REFUSE:
                self._metrics.counter("registry.refused", tags=self._tags)
                self.logger.warning(
                    "capacity_exceeded",
                    process_id=str(process.id),
                    maximum_size=self._maximum_size,
                )
                raise CapacityExceededError(self._maximum_size, context=self._context("admit"))

            if decision.kind is DecisionKind.DISCARD:
                self._metrics.counter("registry.discarded", tags=self._tags)
                self.logger.info(
                    "admission_discarded",
                    process_id=str(process.id),
                    priority=process.priority.value,
                )
                return AdmissionResult(process=process, admitted=False)

            evicted = None
            if decision.kind is DecisionKind.EVICT:
                victim = decision.victim
                if victim is None or victim not in self._entries:
                    raise TaskRegistryError(
                        f"Policy {self._policy_name!r} chose a process that is not running",
                        context=self._context("admit"),
                    )
                self._remove(victim, reason="evicted")
                evicted = victim.process
            elif decision.kind is not DecisionKind.ACCEPT:
                raise TaskRegistryError(
                    f"Unknown admission decision: {decision.kind!r}",
                    context=self._context("admit"),
                )

            # Capacity is never exceeded, whatever a custom policy decides
            if len(self._entries) >= self._maximum_size:
                raise CapacityExceededError(self._maximum_size, context=self._context("admit"))

            entry = AdmittedProcess(process=process, rank=next(self._ranks))
            self._entries.append(entry)

            self._metrics.counter("registry.admitted", tags=self._tags)
            self._metrics.gauge("registry.size", len(self._entries), tags=self._tags)
            self.logger.info(
                "process_admitted",
                process_id=str(process.id),
                priority=process.priority.value,
                rank=entry.rank,
                evicted_id=str(evicted.id) if evicted is not None else None,
            )
            return AdmissionResult(process=process, admitted=True, evicted=evicted)

    def list(self, ordering: Union[Ordering, str] = Ordering.BY_CREATION_TIME) -> List[Process]:
        """
        Snapshot of the running processes, without duplicates, in ascending order.

        BY_ID sorts by identifier, BY_CREATION_TIME keeps admission order and
        BY_PRIORITY sorts LOW to HIGH keeping admission order among equals.
        """
        ordering = Ordering(ordering)

        with self._lock:
            seen = set()
            unique: List[Process] = []
            for entry in self._entries:
                if entry.process not in seen:
                    seen.add(entry.process)
                    unique.append(entry.process)

        if ordering is Ordering.BY_ID:
            return sorted(unique, key=lambda process: process.id)
        if ordering is Ordering.BY_PRIORITY:
            return sorted(unique, key=lambda process: process.priority.rank)
        return unique

    def terminate_one(self, process: Process) -> None:
        """
        Terminate and remove a running process.

        Raises:
            ProcessNotFoundError: No running process equals ``process``
        """
        with self._lock:
            self._check_mutable("terminate_one")
            entry = next((e for e in self._entries if e.process == process), None)
            if entry is None:
                raise ProcessNotFoundError(
                    getattr(process, "id", process),
                    context=self._context("terminate_one"),
                )
            self._remove(entry, reason="killed")

    def terminate_by_priority(self, priority: Union[Priority, str]) -> List[Process]:
        """Terminate and remove every running process with ``priority``."""
        priority = Priority(priority)

        with self._lock:
            self._check_mutable("terminate_by_priority")
            matching = [entry for entry in self._entries if entry.priority is priority]
            for entry in matching:
                if entry not in self._entries:
                    continue
                self._remove(entry, reason="killed_by_priority")

        if matching:
            self.logger.info(
                "processes_terminated_by_priority",
                priority=priority.value,
                count=len(matching),
            )
        return [entry.process for entry in matching]

    def terminate_all(self) -> List[Process]:
        """Terminate and remove every running process."""
        with self._lock:
            self._check_mutable("terminate_all")
            removed = list(self._entries)
            for entry in removed:
                if entry not in self._entries:
                    continue
                self._remove(entry, reason="killed_all")

        if removed:
            self.logger.info("all_processes_terminated", count=len(removed))
        return [entry.process for entry in removed]

    def stats(self) -> RegistryStats:
        """Current size and lifetime counters."""
        with self._lock:
            size = len(self._entries)

        def count(metric: str) -> int:
            return int(self._metrics.get_counter(f"registry.{metric}", self._tags))

        return RegistryStats(
            name=self.name,
            policy=self._policy_name,
            maximum_size=self._maximum_size,
            size=size,
            admitted=count("admitted"),
            evicted=count("evicted"),
            discarded=count("discarded"),
            refused=count("refused"),
            terminated=count("terminated"),
        )

    def _remove(self, entry: AdmittedProcess, reason: str) -> None:
        # Caller holds the lock
        self._terminating = True
        try:
            entry.process.terminate()
            if self._on_terminate is not None:
                self._on_terminate(entry.process)
        finally:
            self._terminating = False
        self._entries.remove(entry)

        self._metrics.counter("registry.terminated", tags=self._tags)
        if reason == "evicted":
            self._metrics.counter("registry.evicted", tags=self._tags)
        self._metrics.gauge("registry.size", len(self._entries), tags=self._tags)
        self.logger.info(
            "process_terminated",
            process_id=str(entry.process.id),
            priority=entry.priority.value,
            rank=entry.rank,
            reason=reason,
        )

    def _check_mutable(self, operation: str) -> None:
        # Caller holds the lock, so only a hook on this thread sees the flag set
        if self._terminating:
            raise TaskRegistryError(
                f"Cannot {operation} from inside a terminate hook",
                context=self._context(operation),
            )

    def _context(self, operation: str) -> ErrorContext:
        return ErrorContext(
            registry=self.name,
            component="registry",
            operation=operation,
            metadata={
                "policy": self._policy_name,
                "maximum_size": self._maximum_size,
                "size": len(self._entries),
            },
        )


__all__ = [
    'AdmissionResult',
    'ProcessRegistry',
    'RegistryStats',
]
