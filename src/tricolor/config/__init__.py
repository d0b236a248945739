"""Configuration for tricolor."""

from tricolor.animation.phases import AnimationConfig
from tricolor.config.settings import Settings, get_settings
from tricolor.lottery.models import LotteryConfig

__all__ = ["AnimationConfig", "LotteryConfig", "Settings", "get_settings"]
