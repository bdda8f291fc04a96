"""Configuration for neo-attachments.

Environment-driven settings and logging setup.
"""

from .settings import AttachmentSettings, get_settings, reset_settings
from .logging_config import LogFormat, LogLevel, LoggingConfig, setup_logging

__all__ = [
    "AttachmentSettings",
    "get_settings",
    "reset_settings",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "setup_logging",
]
