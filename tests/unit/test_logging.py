"""
Unit tests for logging setup.
"""

import io
import json
import logging

from rich.console import Console

from task_registry.utils.logging import JSONFormatter, get_logger, log_function_call, setup_logging


class TestSetupLogging:
    """Test setup_logging."""

    def teardown_method(self):
        setup_logging(log_level="DEBUG", enable_json=False)

    def test_writes_log_file(self, temp_dir):
        """Test a rotating log file is created in log_dir."""
        result = setup_logging(
            app_name="registry-test",
            log_level="INFO",
            log_dir=temp_dir,
            console=Console(file=io.StringIO()),
        )

        logging.getLogger("registry-test").info("hello")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert result["log_dir"] == temp_dir
        assert (temp_dir / "registry-test.log").exists()
        assert "hello" in (temp_dir / "registry-test.log").read_text()

    def test_no_file_without_log_dir(self, temp_dir):
        """Test only the console handler is installed without log_dir."""
        setup_logging(log_level="WARNING", console=Console(file=io.StringIO()))

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1


class TestJSONFormatter:
    """Test JSONFormatter."""

    def test_formats_record_with_extras(self):
        """Test records render as JSON including extra fields."""
        record = logging.LogRecord("registry", logging.INFO, __file__, 1, "admitted %s", ("p1",), None)
        record.process_id = "p1"

        data = json.loads(JSONFormatter().format(record))

        assert data["message"] == "admitted p1"
        assert data["level"] == "INFO"
        assert data["process_id"] == "p1"


class TestLogFunctionCall:
    """Test log_function_call."""

    def test_wraps_and_returns(self):
        """Test the decorated function keeps its name and result."""
        @log_function_call(get_logger("test"))
        def add(a, b):
            return a + b

        assert add(1, 2) == 3
        assert add.__name__ == "add"
