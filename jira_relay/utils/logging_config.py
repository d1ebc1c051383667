"""Logging setup for the relay process, driven by environment variables."""

import os
import logging
import sys
from pythonjsonlogger.json import JsonFormatter

# Relay loggers that follow LOG_LEVEL even when the root is raised
RELAY_LOGGERS = ("jira_relay",)

# Client libraries whose per-request INFO lines would repeat our own
QUIET_LOGGERS = ("httpx", "httpcore")


class LoggingConfig:
    """Process-wide logging settings, read once at import."""

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "json").lower()
    LOG_MASK_SENSITIVE = os.environ.get("LOG_MASK_SENSITIVE", "true").lower() == "true"
    LOG_SLOW_OPERATION_THRESHOLD_MS = int(os.environ.get("LOG_SLOW_OPERATION_THRESHOLD_MS", "1000"))

    @classmethod
    def level(cls) -> int:
        return getattr(logging, cls.LOG_LEVEL, logging.INFO)

    @classmethod
    def build_formatter(cls) -> logging.Formatter:
        """JSON lines for log collectors, or plain text for local runs."""
        if cls.LOG_FORMAT == "json":
            return JsonFormatter(
                "%(timestamp)s %(levelname)s %(name)s %(message)s",
                timestamp=True
            )
        return logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    @classmethod
    def setup_logging(cls) -> None:
        """Install a single stdout handler on the root logger."""
        root_logger = logging.getLogger()
        root_logger.setLevel(cls.level())
        root_logger.handlers.clear()

        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(cls.level())
        handler.setFormatter(cls.build_formatter())
        root_logger.addHandler(handler)

        for name in RELAY_LOGGERS:
            logging.getLogger(name).setLevel(cls.level())
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(name)
