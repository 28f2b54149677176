"""
Bounded process registry.

This package provides admission control for running processes:
- A registry with ordered listing and selective termination
- Reject-on-full, FIFO-eviction and priority-eviction admission policies
- Construction by variant name or configuration
"""

from .base import ProcessRegistry, AdmissionResult, RegistryStats
from .policies import (
    AdmissionDecision,
    AdmissionPolicy,
    DecisionKind,
    reject_policy,
    fifo_policy,
    priority_policy,
)
from .factory import POLICIES, create_registry, create_registry_from_config

__all__ = [
    # Registry
    'ProcessRegistry',
    'AdmissionResult',
    'RegistryStats',

    # Policies
    'AdmissionDecision',
    'AdmissionPolicy',
    'DecisionKind',
    'reject_policy',
    'fifo_policy',
    'priority_policy',

    # Construction
    'POLICIES',
    'create_registry',
    'create_registry_from_config',
]
