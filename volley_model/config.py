"""Configuration management using Pydantic Settings.

This module provides centralized configuration for the volleyball profiling
pipeline, supporting environment variables and .env file loading.

Example:
    >>> from volley_model.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.min_sets_played)
    5
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    Environment variables take precedence over .env file values.

    Attributes:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_dir: Directory for log files.
        output_dir: Directory for exported vectors and profiles.
        min_sets_played: Default minimum sets for a player to enter a season
            population.
        vector_version: Feature scheme used when none is requested.
        pca_max_iterations: Power iteration cap per principal component.
        pca_tolerance: Convergence threshold on the eigenvector change norm.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        alias="LOG_LEVEL",
        description="Logging level",
    )
    log_dir: str = Field(
        default="logs",
        alias="LOG_DIR",
        description="Directory for log files",
    )

    # Output
    output_dir: str = Field(
        default="output",
        alias="OUTPUT_DIR",
        description="Directory for exported vectors and profiles",
    )

    # Population filter
    min_sets_played: int = Field(
        default=5,
        alias="MIN_SETS_PLAYED",
        ge=0,
        description="Minimum sets played to qualify for a season population",
    )

    # Feature scheme
    vector_version: Literal["v1", "v2"] = Field(
        default="v2",
        alias="VECTOR_VERSION",
        description="Feature scheme version (v2 = separated attack types)",
    )

    # PCA
    pca_max_iterations: int = Field(
        default=100,
        alias="PCA_MAX_ITERATIONS",
        ge=1,
        description="Maximum power iterations per principal component",
    )
    pca_tolerance: float = Field(
        default=1e-6,
        alias="PCA_TOLERANCE",
        gt=0.0,
        description="Power iteration convergence threshold",
    )

    @field_validator("log_dir", "output_dir")
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Ensure path strings are valid."""
        if not v or v.isspace():
            raise ValueError("Path cannot be empty or whitespace")
        return v

    @property
    def log_dir_obj(self) -> Path:
        """Return log directory as Path object."""
        return Path(self.log_dir)

    @property
    def output_dir_obj(self) -> Path:
        """Return output directory as Path object."""
        return Path(self.output_dir)

    def ensure_directories(self) -> None:
        """Create required directories if they don't exist."""
        self.log_dir_obj.mkdir(parents=True, exist_ok=True)
        self.output_dir_obj.mkdir(parents=True, exist_ok=True)


# Singleton pattern for settings
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        Settings instance loaded from environment.

    Example:
        >>> settings = get_settings()
        >>> print(settings.vector_version)
        v2
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset the settings singleton (useful for testing)."""
    global _settings
    _settings = None
