"""Easing curves used by the reveal.

Each curve maps phase progress in [0, 1] to eased progress, with
``f(0) == 0`` and ``f(1) == 1``. ``ease_out_back`` overshoots in between.
"""

from enum import Enum
from typing import Callable
import math

EasingFunc = Callable[[float], float]

# Standard overshoot for the "back" curve (~10%)
BACK_OVERSHOOT = 1.70158


class Easing(Enum):
    """Curve names, usable as strings in config."""
    LINEAR = "linear"
    EASE_OUT_CUBIC = "ease_out_cubic"
    EASE_IN_OUT_SINE = "ease_in_out_sine"
    EASE_OUT_BACK = "ease_out_back"


def linear(t: float) -> float:
    return t


def ease_out_cubic(t: float) -> float:
    """Fast start, long settle. Drives the slowing phase."""
    inverse = 1.0 - t
    return 1.0 - inverse * inverse * inverse


def ease_in_out_sine(t: float) -> float:
    """Gentle at both ends; used for the prepare glow."""
    return 0.5 - 0.5 * math.cos(math.pi * t)


def ease_out_back(t: float, overshoot: float = BACK_OVERSHOOT) -> float:
    """Runs past 1 near the end and springs back; used for the winner pop."""
    shifted = t - 1.0
    return 1.0 + shifted * shifted * ((overshoot + 1.0) * shifted + overshoot)


_CURVES: dict[Easing, EasingFunc] = {
    Easing.LINEAR: linear,
    Easing.EASE_OUT_CUBIC: ease_out_cubic,
    Easing.EASE_IN_OUT_SINE: ease_in_out_sine,
    Easing.EASE_OUT_BACK: ease_out_back,
}


def get_easing(easing: Easing | str) -> EasingFunc:
    """Resolve a curve from its enum member or name (case-insensitive).

    Raises:
        ValueError: If the name does not match any curve
    """
    if not isinstance(easing, Easing):
        try:
            easing = Easing(str(easing).lower())
        except ValueError:
            raise ValueError(f"Unknown easing curve: {easing!r}") from None
    return _CURVES[easing]


def interpolate(start: float, end: float, t: float, easing: Easing | str = Easing.LINEAR) -> float:
    """Blend from ``start`` to ``end`` at progress ``t``, clamped to [0, 1]."""
    progress = min(max(t, 0.0), 1.0)
    return start + (end - start) * get_easing(easing)(progress)
