"""
config.py — Runtime configuration for the scene reconstruction engine.

Uses pydantic-settings for type-safe environment variable handling.
Every field can be overridden with a ``PPTXSCENE_`` prefixed variable.
"""

import logging
from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Parser settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="PPTXSCENE_",
        extra="ignore",
    )

    # Rendering
    render_width: int = Field(default=960, gt=0, description="Target render width in pixels")

    # Concurrency
    max_workers: int = Field(default=1, ge=1, description="Slides extracted in parallel when > 1")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"

    # Groups: "additive" adds the child offset to the group origin,
    # "mapped" maps through chOff/chExt into the group frame.
    group_child_space: Literal["additive", "mapped"] = "additive"

    # Media lookup fallbacks, tried in order with the bare filename
    media_search_dirs: list[str] = Field(default_factory=lambda: [
        "",
        "ppt/media/",
        "media/",
        "word/media/",
        "xl/media/",
        "ppt/embeddings/",
        "embeddings/",
    ])

    placeholder_text: str = "Slide content could not be extracted"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging and the package logger at the given or configured level."""
    level = level or get_settings().log_level
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("pptxscene").setLevel(level)
