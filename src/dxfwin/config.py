"""Configuration management for DXF window extraction."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Input
    encoding: str = "utf-8-sig"

    # Drawing conventions
    outline_layer: str = "PJ"  # window outline fragments
    annotation_layer: Optional[str] = None  # None keeps every dimension
    frame_block: str = "TKA4"  # A4 form frame, one per page
    info_block: str = "SC"  # attributed building info block

    # Matching tolerances (drawing units)
    window_gap: float = 20.0
    dimension_gap: float = 30.0
    epsilon: float = 1.0
    row_tolerance: float = 500.0

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
