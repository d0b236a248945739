"""Animation module for the draw reveal."""

from tricolor.animation.easing import Easing, get_easing, interpolate
from tricolor.animation.phases import AnimationConfig, AnimationPhase, PhaseMachine
from tricolor.animation.performance import FPSMonitor, FrameRateLimiter
from tricolor.animation.controller import AnimationPhaseController, PrizeVisualState

__all__ = [
    # Easing
    "Easing",
    "get_easing",
    "interpolate",
    # Phases
    "AnimationConfig",
    "AnimationPhase",
    "PhaseMachine",
    # Performance
    "FPSMonitor",
    "FrameRateLimiter",
    # Controller
    "AnimationPhaseController",
    "PrizeVisualState",
]
