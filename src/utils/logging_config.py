"""Logging setup for the Vercel functions and the dashboard, driven by environment variables."""

import os
import logging
import sys
from pythonjsonlogger.json import JsonFormatter

JSON_FIELDS = "%(timestamp)s %(levelname)s %(name)s %(message)s"
TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Client libraries that log every request at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "hpack", "supabase", "postgrest")


class LoggingConfig:
    """Environment-driven logging settings shared by every entry point."""

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "json").lower()
    LOG_MASK_SENSITIVE = os.environ.get("LOG_MASK_SENSITIVE", "true").lower() == "true"
    LOG_CORRELATION_ID_HEADER = os.environ.get("LOG_CORRELATION_ID_HEADER", "X-Correlation-ID")
    LOG_SLOW_OPERATION_THRESHOLD_MS = int(os.environ.get("LOG_SLOW_OPERATION_THRESHOLD_MS", "1000"))

    _configured = False

    @classmethod
    def level(cls) -> int:
        """Numeric level for LOG_LEVEL; unknown names fall back to INFO."""
        value = logging.getLevelName(cls.LOG_LEVEL)
        return value if isinstance(value, int) else logging.INFO

    @classmethod
    def build_formatter(cls) -> logging.Formatter:
        """JSON records (`level` instead of `levelname`) unless LOG_FORMAT=text."""
        if cls.LOG_FORMAT == "text":
            return logging.Formatter(TEXT_FORMAT)
        return JsonFormatter(
            JSON_FIELDS,
            rename_fields={"levelname": "level"},
            timestamp=True,
        )

    @classmethod
    def setup_logging(cls, force: bool = False) -> None:
        """Install a single stdout handler on the root logger. Runs once unless forced."""
        if cls._configured and not force:
            return

        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(cls.level())
        handler.setFormatter(cls.build_formatter())

        root_logger = logging.getLogger()
        root_logger.handlers.clear()
        root_logger.addHandler(handler)
        root_logger.setLevel(cls.level())

        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

        cls._configured = True


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(name)
