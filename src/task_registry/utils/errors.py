"""
Error handling framework for the task registry.

This module provides:
- A single exception hierarchy rooted at TaskRegistryError
- Error context preservation
- Structured error responses
- An error context manager for wrapping unexpected failures
"""

from typing import Optional, Dict, Any, List
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from contextlib import contextmanager
import traceback

from .logging import get_logger


logger = get_logger("task-registry.errors")


class ErrorSeverity(Enum):
    """Error severity levels."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification."""
    CAPACITY = "capacity"
    LOOKUP = "lookup"
    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    INTERNAL = "internal"
    UNKNOWN = "unknown"


@dataclass
class ErrorContext:
    """Context information for an error."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    registry: Optional[str] = None
    component: Optional[str] = None
    operation: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    stack_trace: Optional[str] = None


@dataclass
class ErrorInfo:
    """Structured error information."""
    code: str
    message: str
    severity: ErrorSeverity
    category: ErrorCategory
    context: ErrorContext
    cause: Optional[BaseException] = None
    suggestions: List[str] = field(default_factory=list)


class TaskRegistryError(Exception):
    """Base exception for all task registry errors."""

    code: str = "TASK_REGISTRY_ERROR"
    default_message: str = "An error occurred in the task registry"
    severity: ErrorSeverity = ErrorSeverity.ERROR
    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: Optional[str] = None,
        context: Optional[ErrorContext] = None,
        cause: Optional[BaseException] = None,
        **kwargs
    ):
        """Initialize registry error."""
        self.message = message or self.default_message
        self.context = context or ErrorContext()
        self.cause = cause
        self.kwargs = kwargs

        if not self.context.stack_trace and cause is not None:
            self.context.stack_trace = "".join(
                traceback.format_exception(type(cause), cause, cause.__traceback__)
            )

        super().__init__(self.message)

    def to_info(self) -> ErrorInfo:
        """Convert to structured error info."""
        return ErrorInfo(
            code=self.code,
            message=self.message,
            severity=self.severity,
            category=self.category,
            context=self.context,
            cause=self.cause,
            suggestions=self.get_suggestions(),
        )

    def get_suggestions(self) -> List[str]:
        """Get error resolution suggestions."""
        return []

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        info = self.to_info()
        return {
            "error": {
                "code": info.code,
                "message": info.message,
                "severity": info.severity.value,
                "category": info.category.value,
                "suggestions": info.suggestions,
                "context": {
                    "timestamp": info.context.timestamp.isoformat(),
                    "registry": info.context.registry,
                    "component": info.context.component,
                    "operation": info.context.operation,
                    "metadata": info.context.metadata
                }
            }
        }


# Capacity Errors

class CapacityExceededError(TaskRegistryError):
    """Raised when a reject-on-full registry has no room for another process."""
    code = "CAPACITY_EXCEEDED"
    default_message = "Maximum number of running processes reached"
    category = ErrorCategory.CAPACITY
    severity = ErrorSeverity.WARNING

    def __init__(self, maximum_size: int, **kwargs):
        self.maximum_size = maximum_size
        message = f"Cannot admit process: registry is full ({maximum_size} running)"
        super().__init__(message, **kwargs)

    def get_suggestions(self) -> List[str]:
        return [
            "Terminate a running process before admitting a new one",
            "Use the fifo or priority variant to evict instead of rejecting"
        ]


# Lookup Errors

class ProcessNotFoundError(TaskRegistryError):
    """Raised when a process is not currently admitted."""
    code = "PROCESS_NOT_FOUND"
    default_message = "Process is not running"
    category = ErrorCategory.LOOKUP
    severity = ErrorSeverity.WARNING

    def __init__(self, process_id: Any, **kwargs):
        self.process_id = process_id
        message = f"No running process matches {process_id!r}"
        super().__init__(message, **kwargs)


# Validation Errors

class ValidationError(TaskRegistryError):
    """Input validation errors."""
    code = "VALIDATION_ERROR"
    default_message = "Validation error"
    category = ErrorCategory.VALIDATION
    severity = ErrorSeverity.WARNING

    def __init__(self, field: str, value: Any, constraint: str, **kwargs):
        self.field = field
        self.value = value
        self.constraint = constraint
        message = f"Validation failed for field '{field}': {constraint}"
        super().__init__(message, **kwargs)

    def get_suggestions(self) -> List[str]:
        return [
            f"Check the value of field '{self.field}'",
            f"Ensure it meets the constraint: {self.constraint}"
        ]


class DuplicateProcessError(ValidationError):
    """Raised when a registry that rejects duplicates sees a known id."""
    code = "DUPLICATE_PROCESS"

    def __init__(self, process_id: Any, **kwargs):
        super().__init__("id", process_id, "must not match an admitted process", **kwargs)


# Configuration Errors

class ConfigurationError(TaskRegistryError):
    """Configuration errors."""
    code = "CONFIG_ERROR"
    default_message = "Configuration error"
    category = ErrorCategory.CONFIGURATION
    severity = ErrorSeverity.ERROR

    def get_suggestions(self) -> List[str]:
        return [
            "Check your configuration file syntax",
            "Ensure all required configuration values are set",
            "Verify configuration file permissions"
        ]


# Error Context Manager

@contextmanager
def error_context(
    component: str,
    operation: str,
    reraise: bool = True,
    **metadata
):
    """
    Context manager for error handling with context.

    Args:
        component: Component name
        operation: Operation name
        reraise: Whether to reraise exceptions
        **metadata: Additional context metadata
    """
    context = ErrorContext(
        component=component,
        operation=operation,
        metadata=metadata
    )

    try:
        yield context
    except TaskRegistryError as e:
        e.context.component = e.context.component or component
        e.context.operation = e.context.operation or operation
        e.context.metadata.update(metadata)
        logger.debug(
            "registry_error_in_context",
            error=e.to_dict(),
        )
        if reraise:
            raise
    except Exception as e:
        wrapped = TaskRegistryError(
            message=str(e),
            context=context,
            cause=e
        )
        logger.error(
            "unexpected_error_in_context",
            error=wrapped.to_dict(),
            exc_info=True
        )
        if reraise:
            raise wrapped from e


__all__ = [
    # Base classes
    'TaskRegistryError',
    'ErrorContext',
    'ErrorInfo',
    'ErrorSeverity',
    'ErrorCategory',

    # Error types
    'CapacityExceededError',
    'ProcessNotFoundError',
    'ValidationError',
    'DuplicateProcessError',
    'ConfigurationError',

    # Utilities
    'error_context',
]
