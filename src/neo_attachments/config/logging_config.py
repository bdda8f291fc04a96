"""Logging configuration for neo-attachments.

Provides consistent, environment-controlled logging for the upload
lifecycle and quiets chatty third-party image libraries.
"""

import logging
import logging.config
import os
from enum import Enum
from typing import Any, Dict, Optional


class LogLevel(str, Enum):
    """Supported log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log format options."""
    SIMPLE = "simple"
    DETAILED = "detailed"
    JSON = "json"


FORMAT_STRINGS = {
    LogFormat.SIMPLE: "%(asctime)s - %(levelname)s - %(message)s",
    LogFormat.DETAILED: "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s",
    LogFormat.JSON: '{"time":"%(asctime)s","level":"%(levelname)s","module":"%(name)s","message":"%(message)s"}',
}


class LoggingConfig:
    """Logging configuration manager."""

    PACKAGE_LOGGER = "neo_attachments"

    # Third-party modules that should only log warnings and above
    QUIET_MODULES = [
        "PIL",
        "asyncio",
    ]

    @classmethod
    def build(cls, level: Optional[str] = None, log_format: Optional[str] = None) -> Dict[str, Any]:
        """Build a ``dictConfig`` mapping.

        Arguments override the ``LOG_LEVEL`` and ``LOG_FORMAT`` environment
        variables; unknown formats fall back to ``simple``.
        """
        effective_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
        if effective_level not in LogLevel.__members__:
            effective_level = LogLevel.INFO.value

        try:
            fmt = LogFormat((log_format or os.getenv("LOG_FORMAT", "simple")).lower())
        except ValueError:
            fmt = LogFormat.SIMPLE

        config: Dict[str, Any] = {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": FORMAT_STRINGS[fmt],
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "level": effective_level,
                    "formatter": "default",
                    "stream": "ext://sys.stdout",
                },
            },
            "loggers": {
                cls.PACKAGE_LOGGER: {
                    "level": effective_level,
                    "handlers": ["console"],
                    "propagate": False,
                },
            },
        }

        for module in cls.QUIET_MODULES:
            config["loggers"][module] = {
                "level": "WARNING" if effective_level != "DEBUG" else "INFO",
                "handlers": ["console"],
                "propagate": False,
            }

        return config

    @classmethod
    def configure(cls, level: Optional[str] = None, log_format: Optional[str] = None) -> None:
        """Configure logging based on arguments or environment variables."""
        config = cls.build(level, log_format)
        logging.config.dictConfig(config)

        logger = logging.getLogger(__name__)
        logger.debug(
            f"Logging configured: level={config['handlers']['console']['level']}, "
            f"format={config['formatters']['default']['format']}"
        )

    @classmethod
    def set_module_level(cls, module_name: str, level: str) -> None:
        """Set log level for a specific module."""
        logging.getLogger(module_name).setLevel(getattr(logging, level.upper()))

    @classmethod
    def silence_module(cls, module_name: str) -> None:
        cls.set_module_level(module_name, "CRITICAL")


def setup_logging(level: Optional[str] = None) -> None:
    """Setup logging configuration.

    Called once at application startup; falls back to the configured
    ``ATTACHMENTS_LOG_LEVEL`` when no level is given.
    """
    if level is None and "LOG_LEVEL" not in os.environ:
        from .settings import get_settings
        level = get_settings().log_level
    LoggingConfig.configure(level)
