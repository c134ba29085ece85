"""Configuration management for sheetnest."""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="NEST_",
        extra="ignore",
    )

    # Paths
    output_dir: Path = Field(default=Path("output"), description="Output directory for exported layouts")

    # Stock sheet
    sheet_width: Optional[float] = Field(default=None, gt=0, description="Default sheet width (mm)")
    sheet_height: Optional[float] = Field(default=None, gt=0, description="Default sheet height (mm)")
    spacing: float = Field(default=5.0, ge=0, description="Gap between parts and between sheets (mm)")

    # Rotation search
    angle_step: int = Field(default=5, gt=0, le=360, description="Sampling step for rotation search (degrees)")
    max_workers: int = Field(default=1, ge=1, description="Threads used for rotation search")
    degenerate_policy: Literal["raise", "skip"] = Field(
        default="raise",
        description="What to do with parts that have no bounding rectangle",
    )

    # Packing
    key_precision: int = Field(default=6, ge=0, description="Decimal places kept in rectangle keys")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def configure(settings: Optional[Settings]) -> None:
    """Override global settings. Passing None resets to environment defaults."""
    global _settings
    _settings = settings
