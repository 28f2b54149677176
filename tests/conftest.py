"""
Pytest configuration and shared fixtures for task registry tests.
"""

import os
import pytest
import tempfile
import shutil
from pathlib import Path
from typing import Callable, Generator

from task_registry.models.process import Process
from task_registry.registry import ProcessRegistry, create_registry
from task_registry.utils.logging import setup_logging
from tests.fixtures.registry_fixtures import RegistryFixtures


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path)


@pytest.fixture
def make_process() -> Callable[..., Process]:
    """Factory for processes carrying a Mock terminate hook."""
    return RegistryFixtures.create_process


@pytest.fixture
def reject_registry() -> ProcessRegistry:
    """Reject-on-full registry with room for three processes."""
    return create_registry("reject", 3, name="reject-test")


@pytest.fixture
def fifo_registry() -> ProcessRegistry:
    """FIFO registry with room for two processes."""
    return create_registry("fifo", 2, name="fifo-test")


@pytest.fixture
def priority_registry() -> ProcessRegistry:
    """Priority registry with room for three processes."""
    return create_registry("priority", 3, name="priority-test")


@pytest.fixture(autouse=True)
def clean_registry_env(monkeypatch):
    """Keep TASK_REGISTRY_* variables from the host out of the tests."""
    for key in list(os.environ):
        if key.startswith("TASK_REGISTRY_"):
            monkeypatch.delenv(key, raising=False)


# Logging setup for tests
setup_logging(log_level="DEBUG", enable_json=False)
