"""Configuration management for magnetic-grid.

Loads settings from environment variables or a .env file. Grid geometry
itself (columns, row height, width set) is fixed in
``magnetic_grid.grid.constants``; these settings cover the host-facing
knobs only.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from magnetic_grid.exceptions import ConfigurationError

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class MagneticGridSettings(BaseSettings):
    """Application settings loaded from environment variables and .env files.

    Priority (highest to lowest):
      1. Explicit constructor arguments
      2. Environment variables (MAGNETIC_GRID_CONTAINER_WIDTH, etc.)
      3. .env file in current directory
    """

    model_config = SettingsConfigDict(
        env_prefix="MAGNETIC_GRID_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Rendered width of the grid container, in pointer units
    container_width: Annotated[
        float, Field(description="Container width in pointer units (pixels)")
    ] = 400.0

    # Persistence
    storage_dir: Annotated[
        str, Field(description="Directory for persisted layouts")
    ] = "~/.magnetic-grid"
    storage_key: Annotated[
        str, Field(description="Key under which the layout is persisted")
    ] = "magnetic_form_field_configs"

    # Animation frame source
    frame_rate: Annotated[
        int, Field(description="Frames per second used when the host has no frame source")
    ] = 60

    log_level: Annotated[str, Field(description="Logging level name")] = "WARNING"

    @field_validator("container_width")
    @classmethod
    def validate_container_width(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"container_width must be > 0, got {v}")
        return v

    @field_validator("frame_rate")
    @classmethod
    def validate_frame_rate(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"frame_rate must be > 0, got {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        v = v.strip().upper()
        if v not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}, got {v}")
        return v

    @property
    def storage_path(self) -> Path | None:
        if not self.storage_dir:
            return None
        return Path(self.storage_dir).expanduser()

    @property
    def frame_interval(self) -> float:
        """Seconds between animation frames."""
        return 1.0 / self.frame_rate

    @property
    def log_level_value(self) -> int:
        return logging.getLevelName(self.log_level)

    def require_storage(self) -> Path:
        """Raise if no storage directory is configured; return the path."""
        if not self.storage_dir:
            raise ConfigurationError(
                "MAGNETIC_GRID_STORAGE_DIR is not set. Set it in .env or as an environment variable."
            )
        if not self.storage_key:
            raise ConfigurationError("MAGNETIC_GRID_STORAGE_KEY must not be empty.")
        return Path(self.storage_dir).expanduser()


# Singleton-ish: lazily loaded on first access
_settings: MagneticGridSettings | None = None


def get_settings(**overrides: object) -> MagneticGridSettings:
    """Get or create the application settings singleton."""
    global _settings
    if _settings is None or overrides:
        _settings = MagneticGridSettings(**overrides)
    return _settings


def reset_settings() -> None:
    """Reset cached settings (useful for testing)."""
    global _settings
    _settings = None
