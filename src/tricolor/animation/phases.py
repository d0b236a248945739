"""
Phase machine for the draw reveal.

Phases:
    IDLE: Nothing animating; initial state and re-entered after every reveal
    PREPARE: Short synchronized wobble of every item
    SPINNING: Randomized flicker across items, slowing as it goes
    SLOWING: Highlight converges on the already-chosen winner
    RESULT: Winner locked in, everything else dimmed
"""

from enum import Enum
from typing import Callable
import logging

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


class AnimationPhase(Enum):
    """Reveal phases."""
    IDLE = "idle"
    PREPARE = "prepare"
    SPINNING = "spinning"
    SLOWING = "slowing"
    RESULT = "result"


# Forward order of a complete reveal
NEXT_PHASE: dict[AnimationPhase, AnimationPhase] = {
    AnimationPhase.PREPARE: AnimationPhase.SPINNING,
    AnimationPhase.SPINNING: AnimationPhase.SLOWING,
    AnimationPhase.SLOWING: AnimationPhase.RESULT,
    AnimationPhase.RESULT: AnimationPhase.IDLE,
}


class AnimationConfig(BaseModel):
    """Timing knobs for the reveal (durations in milliseconds)."""

    model_config = ConfigDict(frozen=True)

    prepare_duration: float = Field(default=200.0, ge=0.0)
    spin_duration: tuple[float, float] = (2000.0, 3000.0)
    slowing_duration: float = Field(default=1000.0, ge=0.0)
    result_duration: float = Field(default=500.0, ge=0.0)

    # Base interval between highlight switches while spinning
    spin_switch_interval: float = Field(default=100.0, gt=0.0)

    # Rendering
    target_fps: int = Field(default=60, gt=0)
    performance_threshold: int = Field(default=30, ge=0)
    throttled_fps: int = Field(default=30, gt=0)

    @field_validator("spin_duration")
    @classmethod
    def _check_spin_range(cls, value: tuple[float, float]) -> tuple[float, float]:
        low, high = value
        if low < 0 or high < low:
            raise ValueError(f"spin_duration must be a [min, max] range, got {value}")
        return value


PhaseListener = Callable[[AnimationPhase, AnimationPhase], None]


class PhaseMachine:
    """
    Tracks the current reveal phase and enforces legal transitions.

    Only the forward sequence is allowed, plus a jump to IDLE from
    anywhere (cancellation). Listeners are told about every change.
    """

    VALID_TRANSITIONS: set[tuple[AnimationPhase, AnimationPhase]] = {
        (AnimationPhase.IDLE, AnimationPhase.PREPARE),
        *NEXT_PHASE.items(),
        # Cancel
        (AnimationPhase.PREPARE, AnimationPhase.IDLE),
        (AnimationPhase.SPINNING, AnimationPhase.IDLE),
        (AnimationPhase.SLOWING, AnimationPhase.IDLE),
    }

    def __init__(self) -> None:
        self._phase = AnimationPhase.IDLE
        self._listeners: list[PhaseListener] = []

    @property
    def phase(self) -> AnimationPhase:
        """Get current phase."""
        return self._phase

    def can_transition(self, to_phase: AnimationPhase) -> bool:
        """Check if transition to given phase is valid."""
        return (self._phase, to_phase) in self.VALID_TRANSITIONS

    def transition(self, to_phase: AnimationPhase) -> bool:
        """
        Attempt to move to a new phase.

        Returns:
            True if transition successful, False otherwise
        """
        if not self.can_transition(to_phase):
            logger.warning(f"Invalid phase transition: {self._phase.name} -> {to_phase.name}")
            return False

        old_phase = self._phase
        self._phase = to_phase
        logger.debug(f"Phase transition: {old_phase.name} -> {to_phase.name}")

        for listener in list(self._listeners):
            try:
                listener(old_phase, to_phase)
            except Exception as e:
                logger.error(f"Error in phase listener: {e}")

        return True

    def add_listener(self, callback: PhaseListener) -> None:
        """Add a phase change listener."""
        self._listeners.append(callback)

    def remove_listener(self, callback: PhaseListener) -> None:
        """Remove a phase change listener."""
        if callback in self._listeners:
            self._listeners.remove(callback)
