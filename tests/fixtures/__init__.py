"""
Test fixtures for the task registry.

Provides reusable processes with spy terminate hooks.
"""

from .registry_fixtures import RegistryFixtures

__all__ = [
    "RegistryFixtures",
]
