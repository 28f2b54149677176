"""
Logging configuration for the task registry.

This module provides centralized logging setup with:
- Structured logging through structlog
- Rich console output
- Optional rotating JSON log files
- Optional Sentry error tracking
"""

import logging
import logging.handlers
import sys
import functools
import inspect
import os
from pathlib import Path
from typing import Optional, Dict, Any
import json
from datetime import datetime, timezone
import structlog
from rich.logging import RichHandler
from rich.console import Console
from rich.traceback import install as install_rich_traceback
import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration


_RESERVED_RECORD_KEYS = frozenset((
    'name', 'msg', 'args', 'created', 'filename', 'funcName', 'levelname',
    'levelno', 'lineno', 'module', 'msecs', 'message', 'pathname', 'process',
    'processName', 'relativeCreated', 'thread', 'threadName', 'exc_info',
    'exc_text', 'stack_info', 'taskName',
))


class JSONFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_obj = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
            'thread_name': record.threadName,
        }

        for key, value in record.__dict__.items():
            if key in _RESERVED_RECORD_KEYS:
                continue
            try:
                json.dumps(value)
                log_obj[key] = value
            except (TypeError, ValueError):
                log_obj[key] = str(value)

        if record.exc_info:
            log_obj['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_obj)


def setup_logging(
    app_name: str = "task-registry",
    log_level: str = "INFO",
    log_dir: Optional[Path] = None,
    enable_json: bool = True,
    enable_sentry: bool = False,
    sentry_dsn: Optional[str] = None,
    console: Optional[Console] = None,
) -> Dict[str, Any]:
    """
    Set up logging for the application.

    Args:
        app_name: Application name for log identification
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for rotating log files, no file logging if None
        enable_json: Render structlog events and log files as JSON
        enable_sentry: Enable Sentry error tracking
        sentry_dsn: Sentry DSN for error tracking
        console: Rich console for terminal output (defaults to stderr)

    Returns:
        Dictionary with the main logger and the applied configuration
    """
    install_rich_traceback()
    console = console or Console(file=sys.stderr)

    renderer = structlog.processors.JSONRenderer() if enable_json else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
    )
    console_handler.setFormatter(logging.Formatter('%(message)s'))
    root_logger.addHandler(console_handler)

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_dir / f"{app_name}.log",
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=10,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        if enable_json:
            file_handler.setFormatter(JSONFormatter())
        else:
            file_handler.setFormatter(logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
            ))
        root_logger.addHandler(file_handler)

    if enable_sentry and sentry_dsn:
        sentry_logging = LoggingIntegration(
            level=logging.INFO,
            event_level=logging.ERROR
        )
        sentry_sdk.init(
            dsn=sentry_dsn,
            integrations=[sentry_logging],
            traces_sample_rate=0.1,
        )

    main_logger = structlog.get_logger(app_name)
    main_logger.info(
        "logging_initialized",
        app_name=app_name,
        log_level=log_level,
        log_dir=str(log_dir) if log_dir else None,
        enable_json=enable_json,
        enable_sentry=enable_sentry,
        pid=os.getpid(),
    )

    return {
        'logger': main_logger,
        'log_dir': log_dir,
        'console': console,
        'config': {
            'app_name': app_name,
            'log_level': log_level,
            'enable_json': enable_json,
            'enable_sentry': enable_sentry,
        }
    }


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a logger instance by name."""
    return structlog.get_logger(name)


def log_function_call(logger: structlog.BoundLogger):
    """Decorator to log function calls with timing."""
    def decorator(func):
        async def async_wrapper(*args, **kwargs):
            start_time = datetime.now(timezone.utc)
            logger.debug(f"calling_{func.__name__}")
            try:
                result = await func(*args, **kwargs)
                duration_ms = (datetime.now(timezone.utc) - start_time).total_seconds() * 1000
                logger.debug(
                    f"completed_{func.__name__}",
                    duration_ms=duration_ms,
                    success=True
                )
                return result
            except Exception as e:
                duration_ms = (datetime.now(timezone.utc) - start_time).total_seconds() * 1000
                logger.debug(
                    f"failed_{func.__name__}",
                    duration_ms=duration_ms,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise

        def sync_wrapper(*args, **kwargs):
            start_time = datetime.now(timezone.utc)
            logger.debug(f"calling_{func.__name__}")
            try:
                result = func(*args, **kwargs)
                duration_ms = (datetime.now(timezone.utc) - start_time).total_seconds() * 1000
                logger.debug(
                    f"completed_{func.__name__}",
                    duration_ms=duration_ms,
                    success=True
                )
                return result
            except Exception as e:
                duration_ms = (datetime.now(timezone.utc) - start_time).total_seconds() * 1000
                logger.debug(
                    f"failed_{func.__name__}",
                    duration_ms=duration_ms,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise

        if inspect.iscoroutinefunction(func):
            return functools.wraps(func)(async_wrapper)
        return functools.wraps(func)(sync_wrapper)

    return decorator


__all__ = [
    'setup_logging',
    'get_logger',
    'log_function_call',
    'JSONFormatter',
]
