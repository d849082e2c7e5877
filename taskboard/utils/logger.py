"""
Logging Utility for the Taskboard services.

Provides structured (one JSON object per line) logging with appropriate levels.
"""

import json
import logging
import sys
from typing import Dict

from taskboard.config import get_settings, utc_now


class StructuredLogger:
    """Structured logger for services."""

    def __init__(self, name: str, level: int = None):
        """
        Initialize structured logger.

        Args:
            name: Logger name, reported as the ``service`` field
            level: Logging level, defaults to ``LOG_LEVEL`` from settings
        """
        self.logger = logging.getLogger(name)
        if level is None:
            level = logging.getLevelName(get_settings().log_level)
            if not isinstance(level, int):
                level = logging.INFO
        self.logger.setLevel(level)

        # Prevent adding handlers multiple times
        if not self.logger.handlers:
            self._setup_handlers()

    def _setup_handlers(self):
        """Set up logging handlers."""
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        self.logger.addHandler(console_handler)

    def _payload(self, level_name: str, message: str, **kwargs) -> str:
        log_data = {
            "timestamp": utc_now().isoformat(),
            "level": level_name,
            "message": message,
            "service": self.logger.name,
        }
        log_data.update(kwargs)
        # dates and uuids are rendered with str()
        return json.dumps(log_data, default=str)

    def _log_structured(self, level: int, message: str, **kwargs):
        """
        Log a structured message.

        Args:
            level: Logging level
            message: Log message
            **kwargs: Additional structured data
        """
        if self.logger.isEnabledFor(level):
            self.logger.log(level, self._payload(logging.getLevelName(level), message, **kwargs))

    def debug(self, message: str, **kwargs):
        """Log debug message."""
        self._log_structured(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs):
        """Log info message."""
        self._log_structured(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message."""
        self._log_structured(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs):
        """Log error message."""
        self._log_structured(logging.ERROR, message, **kwargs)

    def exception(self, message: str, **kwargs):
        """Log exception with traceback."""
        if self.logger.isEnabledFor(logging.ERROR):
            self.logger.exception(self._payload("ERROR", message, exception=True, **kwargs))


_loggers: Dict[str, StructuredLogger] = {}


def get_logger(service_name: str) -> StructuredLogger:
    """
    Get a logger for the specified service.

    Args:
        service_name: Name of the service

    Returns:
        StructuredLogger instance
    """
    if service_name not in _loggers:
        _loggers[service_name] = StructuredLogger(service_name)
    return _loggers[service_name]
