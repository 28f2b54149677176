"""
Task Registry - bounded admission control for running processes.

This package tracks a fixed number of running processes and decides what
happens when a new one arrives at a full registry:
- reject it with an error
- evict the oldest running process
- evict an older, lower-priority process or silently skip the new one
"""

__version__ = "0.1.0"

from .models.process import Ordering, Priority, Process
from .registry import (
    AdmissionResult,
    ProcessRegistry,
    RegistryStats,
    create_registry,
    create_registry_from_config,
)
from .utils.config import RegistryConfig, RegistryVariant, configure_logging, load_config
from .utils.errors import (
    CapacityExceededError,
    ConfigurationError,
    DuplicateProcessError,
    ProcessNotFoundError,
    TaskRegistryError,
    ValidationError,
)

__all__ = [
    'Ordering',
    'Priority',
    'Process',
    'AdmissionResult',
    'ProcessRegistry',
    'RegistryStats',
    'create_registry',
    'create_registry_from_config',
    'RegistryConfig',
    'RegistryVariant',
    'load_config',
    'configure_logging',
    'CapacityExceededError',
    'ConfigurationError',
    'DuplicateProcessError',
    'ProcessNotFoundError',
    'TaskRegistryError',
    'ValidationError',
]
