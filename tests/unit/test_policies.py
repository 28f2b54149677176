"""
Unit tests for the admission policies.
"""

from task_registry.models.process import AdmittedProcess, Priority, Process
from task_registry.registry.policies import (
    DecisionKind,
    fifo_policy,
    priority_policy,
    reject_policy,
)


def admitted(*priorities):
    return tuple(
        AdmittedProcess(Process(f"p{rank}", priority), rank)
        for rank, priority in enumerate(priorities, start=1)
    )


class TestRejectPolicy:
    """Test reject-on-full policy."""

    def test_accepts_with_room(self):
        """Test accepting below capacity."""
        decision = reject_policy(admitted(Priority.LOW), Process("n", Priority.LOW), 2)
        assert decision.kind is DecisionKind.ACCEPT

    def test_refuses_when_full(self):
        """Test refusing at capacity."""
        decision = reject_policy(admitted(Priority.LOW), Process("n", Priority.HIGH), 1)
        assert decision.kind is DecisionKind.REFUSE
        assert decision.victim is None


class TestFifoPolicy:
    """Test FIFO eviction policy."""

    def test_accepts_with_room(self):
        """Test accepting below capacity."""
        assert fifo_policy((), Process("n", Priority.LOW), 1).kind is DecisionKind.ACCEPT

    def test_evicts_lowest_rank_regardless_of_priority(self):
        """Test the oldest entry is chosen even if it has the highest priority."""
        entries = admitted(Priority.HIGH, Priority.LOW)

        decision = fifo_policy(entries, Process("n", Priority.LOW), 2)

        assert decision.kind is DecisionKind.EVICT
        assert decision.victim == entries[0]


class TestPriorityPolicy:
    """Test priority eviction policy."""

    def test_accepts_with_room(self):
        """Test accepting below capacity."""
        decision = priority_policy(admitted(Priority.HIGH), Process("n", Priority.LOW), 2)
        assert decision.kind is DecisionKind.ACCEPT

    def test_evicts_oldest_of_lowest_priority(self):
        """Test the lowest priority wins, then the lowest rank."""
        entries = admitted(Priority.HIGH, Priority.LOW, Priority.LOW)

        decision = priority_policy(entries, Process("n", Priority.MEDIUM), 3)

        assert decision.kind is DecisionKind.EVICT
        assert decision.victim == entries[1]

    def test_prefers_lower_priority_over_older(self):
        """Test an older MEDIUM loses to a newer LOW when HIGH arrives."""
        entries = admitted(Priority.MEDIUM, Priority.LOW)

        decision = priority_policy(entries, Process("n", Priority.HIGH), 2)

        assert decision.victim == entries[1]

    def test_discards_without_strictly_lower_candidate(self):
        """Test equal priority does not qualify for eviction."""
        entries = admitted(Priority.HIGH, Priority.MEDIUM, Priority.LOW)

        decision = priority_policy(entries, Process("n", Priority.LOW), 3)

        assert decision.kind is DecisionKind.DISCARD
        assert decision.victim is None

    def test_does_not_mutate_input(self):
        """Test policies are pure."""
        entries = list(admitted(Priority.LOW, Priority.LOW))
        snapshot = list(entries)

        priority_policy(entries, Process("n", Priority.HIGH), 2)

        assert entries == snapshot
