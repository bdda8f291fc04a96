"""Attachment settings.

Process-wide configuration for the upload lifecycle, loaded from
environment variables (prefix ``ATTACHMENTS_``) and an optional ``.env``
file. Per-attribute options live on the attribute declarations instead.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AttachmentSettings(BaseSettings):
    """Storage, URL and processing settings shared by all upload attributes."""

    model_config = SettingsConfigDict(
        env_prefix="ATTACHMENTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Storage
    storage_root: Path = Field(
        default=Path("public"),
        description="Directory every store_dir and tmp_dir is relative to"
    )
    url_prefix: str = Field(default="/", description="Prefix prepended to relative paths to build URLs")
    file_permissions: int = Field(default=0o644, description="Mode applied to committed files")
    directory_permissions: int = Field(default=0o755, description="Mode for directories created on commit")

    # Processing
    jpeg_quality: int = Field(default=85, ge=1, le=95, description="Quality used when re-encoding JPEGs")

    # Cleanup
    stale_tmp_max_age_hours: float = Field(
        default=24.0,
        gt=0,
        description="Age after which abandoned staging directories are removed"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Level for the neo_attachments logger")

    @field_validator("file_permissions", "directory_permissions", mode="before")
    @classmethod
    def parse_mode(cls, value):
        """Accept octal strings such as ``"0640"`` or ``"0o640"``."""
        if isinstance(value, str):
            text = value.strip().lower()
            if text.startswith("0o"):
                text = text[2:]
            return int(text, 8)
        return value

    @field_validator("file_permissions", "directory_permissions")
    @classmethod
    def check_mode(cls, value: int) -> int:
        if not 0 <= value <= 0o777:
            raise ValueError(f"Invalid permission mode: {oct(value)}")
        return value

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {value}")
        return level

    @property
    def tmp_max_age_seconds(self) -> float:
        return self.stale_tmp_max_age_hours * 3600


@lru_cache()
def get_settings() -> AttachmentSettings:
    """Get cached settings instance."""
    return AttachmentSettings()


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    get_settings.cache_clear()
