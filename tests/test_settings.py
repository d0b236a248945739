import os
import unittest
from pathlib import Path
from unittest.mock import patch

from pydantic import ValidationError

from tricolor.config import AnimationConfig, LotteryConfig, Settings, get_settings


class SettingsTests(unittest.TestCase):
    def test_defaults(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        self.assertFalse(settings.debug)
        self.assertEqual(settings.data_dir.name, "lottery-game")
        self.assertEqual(settings.lottery, LotteryConfig())
        self.assertEqual(settings.animation, AnimationConfig())

    def test_environment_overrides(self) -> None:
        env = {
            "TRICOLOR_DEBUG": "true",
            "TRICOLOR_DATA_DIR": "/tmp/tricolor-data",
            "TRICOLOR_LOTTERY__DRAWS_PER_CYCLE": "9",
            "TRICOLOR_LOTTERY__DRAWS_PER_COLOR": "3",
            "TRICOLOR_ANIMATION__SLOWING_DURATION": "1500",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = Settings(_env_file=None)

        self.assertTrue(settings.debug)
        self.assertEqual(settings.data_dir, Path("/tmp/tricolor-data"))
        self.assertEqual(settings.lottery.draws_per_cycle, 9)
        self.assertEqual(settings.lottery.draws_per_color, 3)
        self.assertEqual(settings.animation.slowing_duration, 1500)

    def test_inconsistent_lottery_sizing_is_rejected(self) -> None:
        env = {"TRICOLOR_LOTTERY__DRAWS_PER_CYCLE": "7"}
        with patch.dict(os.environ, env, clear=True):
            with self.assertRaises(ValidationError):
                Settings(_env_file=None)

    def test_invalid_spin_range_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            AnimationConfig(spin_duration=(3000, 2000))

    def test_get_settings_is_cached(self) -> None:
        get_settings.cache_clear()
        try:
            self.assertIs(get_settings(), get_settings())
        finally:
            get_settings.cache_clear()


if __name__ == "__main__":
    unittest.main()
