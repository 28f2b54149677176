"""
Unit tests for registry construction.
"""

import logging

import pytest

from task_registry.registry import (
    POLICIES,
    ProcessRegistry,
    create_registry,
    create_registry_from_config,
    fifo_policy,
    priority_policy,
    reject_policy,
)
from task_registry.utils.config import RegistryConfig, RegistryVariant
from task_registry.utils.errors import ValidationError
from task_registry.utils.logging import setup_logging


class TestCreateRegistry:
    """Test create_registry."""

    @pytest.mark.parametrize("variant,policy", [
        ("reject", reject_policy),
        ("fifo", fifo_policy),
        ("priority", priority_policy),
        (RegistryVariant.FIFO, fifo_policy),
    ])
    def test_variant_selects_policy(self, variant, policy):
        """Test each variant maps to its policy."""
        registry = create_registry(variant, 4)

        assert isinstance(registry, ProcessRegistry)
        assert registry.policy_name == RegistryVariant(variant).value
        assert POLICIES[RegistryVariant(variant)] is policy

    def test_unknown_variant(self):
        """Test unknown variants raise ValidationError."""
        with pytest.raises(ValidationError) as exc_info:
            create_registry("lifo", 4)
        assert exc_info.value.field == "variant"

    def test_invalid_capacity(self):
        """Test capacity validation applies to every variant."""
        with pytest.raises(ValidationError):
            create_registry("priority", 0)

    def test_options_passed_through(self):
        """Test keyword options reach the registry."""
        registry = create_registry("fifo", 2, name="workers")
        assert registry.name == "workers"


class TestCreateRegistryFromConfig:
    """Test create_registry_from_config."""

    def test_builds_from_config(self):
        """Test config values are applied."""
        config = RegistryConfig(name="cfg", variant="priority", maximum_size=5)

        registry = create_registry_from_config(config)

        assert registry.name == "cfg"
        assert registry.policy_name == "priority"
        assert registry.maximum_size == 5

    def test_apply_logging(self):
        """Test apply_logging configures the root logger from the config."""
        config = RegistryConfig(name="logged", logging={"level": "error", "format": "console"})

        try:
            registry = create_registry_from_config(config, apply_logging=True)
            assert logging.getLogger().level == logging.ERROR
        finally:
            setup_logging(log_level="DEBUG", enable_json=False)

        assert registry.name == "logged"

    def test_logging_left_alone_by_default(self):
        """Test the root logger is untouched without apply_logging."""
        level = logging.getLogger().level

        create_registry_from_config(RegistryConfig(logging={"level": "critical"}))

        assert logging.getLogger().level == level
