"""
Runtime settings for tricolor.

Values come from TRICOLOR_* environment variables or a .env file; nested
fields use a double underscore. Lottery sizing must stay consistent, so set
both values together: TRICOLOR_LOTTERY__DRAWS_PER_CYCLE=9 and
TRICOLOR_LOTTERY__DRAWS_PER_COLOR=3.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from tricolor.animation.phases import AnimationConfig
from tricolor.lottery.models import LotteryConfig


class Settings(BaseSettings):
    """Where data lives and how the lottery and reveal are sized."""

    model_config = SettingsConfigDict(
        env_prefix="TRICOLOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    debug: bool = False

    # Storage
    data_dir: Path = Field(
        default_factory=lambda: Path.home() / "Documents" / "lottery-game"
    )

    # Domain config
    lottery: LotteryConfig = Field(default_factory=LotteryConfig)
    animation: AnimationConfig = Field(default_factory=AnimationConfig)


@lru_cache
def get_settings() -> Settings:
    """Settings for this process, read once."""
    return Settings()
