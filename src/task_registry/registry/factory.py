"""
Registry construction by variant name or configuration.
"""

from typing import Any, Dict, Union

from ..utils.config import RegistryConfig, RegistryVariant, configure_logging
from ..utils.errors import ValidationError, error_context
from ..utils.logging import get_logger, log_function_call
from .base import ProcessRegistry
from .policies import AdmissionPolicy, fifo_policy, priority_policy, reject_policy

logger = get_logger("task-registry.registry.factory")


POLICIES: Dict[RegistryVariant, AdmissionPolicy] = {
    RegistryVariant.REJECT: reject_policy,
    RegistryVariant.FIFO: fifo_policy,
    RegistryVariant.PRIORITY: priority_policy,
}


def create_registry(
    variant: Union[RegistryVariant, str],
    maximum_size: int,
    **options: Any
) -> ProcessRegistry:
    """
    Create a registry for one of the built-in admission policies.

    Args:
        variant: ``reject``, ``fifo`` or ``priority``
        maximum_size: Number of processes that may run at once
        **options: Passed through to :class:`ProcessRegistry`

    Raises:
        ValidationError: Unknown variant or invalid capacity
    """
    try:
        variant = RegistryVariant(variant)
    except ValueError:
        raise ValidationError(
            "variant", variant, f"must be one of {[v.value for v in RegistryVariant]}"
        ) from None

    return ProcessRegistry(maximum_size, POLICIES[variant], **options)


@log_function_call(logger)
def create_registry_from_config(
    config: RegistryConfig,
    apply_logging: bool = False,
    **options: Any
) -> ProcessRegistry:
    """
    Create a registry from a loaded :class:`RegistryConfig`.

    With ``apply_logging`` the config's logging section is applied first.
    """
    if apply_logging:
        configure_logging(config)

    with error_context("registry", "create_from_config", name=config.name):
        return create_registry(
            config.variant,
            config.maximum_size,
            name=config.name,
            reject_duplicate_ids=config.reject_duplicate_ids,
            **options
        )


__all__ = [
    'POLICIES',
    'create_registry',
    'create_registry_from_config',
]
