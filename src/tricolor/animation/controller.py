"""Timed reveal of an already-decided draw outcome.

The controller never picks the winner. It is handed the committed prize id
and walks PREPARE -> SPINNING -> SLOWING -> RESULT -> IDLE on wall-clock
time, producing per-prize visual attributes for whoever renders them.

Time only moves when ``tick`` is called, so the controller can be driven by
any frame loop (or by hand in tests). ``start_animation`` is a ready-made
asyncio loop around it.
"""

from dataclasses import dataclass, replace
from typing import Callable, Sequence
import asyncio
import logging
import math
import time

import numpy as np

from tricolor.animation.easing import Easing, ease_out_cubic, interpolate
from tricolor.animation.performance import FPSMonitor, FrameRateLimiter
from tricolor.animation.phases import (
    NEXT_PHASE,
    AnimationConfig,
    AnimationPhase,
    PhaseListener,
    PhaseMachine,
)
from tricolor.lottery.errors import AnimationError

logger = logging.getLogger(__name__)


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


@dataclass
class PrizeVisualState:
    """Visual emphasis for one prize in the current frame."""

    is_highlighted: bool = False
    scale: float = 1.0
    rotation: float = 0.0
    opacity: float = 1.0
    glow_intensity: float = 0.0


class AnimationPhaseController:
    """Phase-timed reveal state machine.

    Args:
        prize_ids: Display order of the prizes; distances in the slowing
            phase are measured in this order
        config: Timing configuration
        rng: Cosmetic randomness (spin duration, flicker)
        clock: Millisecond clock used when ``tick`` is called without a time
    """

    def __init__(
        self,
        prize_ids: Sequence[str],
        config: AnimationConfig | None = None,
        rng: np.random.Generator | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        if not prize_ids:
            raise ValueError("AnimationPhaseController needs at least one prize")

        self._prize_ids = list(prize_ids)
        self._positions = {prize_id: i for i, prize_id in enumerate(self._prize_ids)}
        self._config = config or AnimationConfig()
        self._rng = rng if rng is not None else np.random.default_rng()
        self._clock = clock or _monotonic_ms

        self._machine = PhaseMachine()
        self._states = self._neutral_states()
        self._target_id: str | None = None
        self._animating = False

        # Phase timing
        self._phase_start = 0.0
        self._spin_duration = 0.0
        self._highlight_index = 0
        self._last_switch = 0.0

        # Bumped on every start/stop; a loop holding a stale value must not act
        self._generation = 0
        self._completed_generation = -1

        self._fps = FPSMonitor(initial_fps=self._config.target_fps)
        self._limiter = FrameRateLimiter(self._config.throttled_fps)

        logger.debug(f"AnimationPhaseController initialized for {len(self._prize_ids)} prizes")

    # Introspection
    @property
    def phase(self) -> AnimationPhase:
        return self._machine.phase

    @property
    def target_id(self) -> str | None:
        return self._target_id

    @property
    def is_animating(self) -> bool:
        return self._animating

    @property
    def fps(self) -> float:
        """Rolling frames-per-second estimate."""
        return self._fps.fps

    @property
    def config(self) -> AnimationConfig:
        return self._config

    @property
    def prize_ids(self) -> list[str]:
        return list(self._prize_ids)

    @property
    def prize_states(self) -> dict[str, PrizeVisualState]:
        """Snapshot of every prize's visual state."""
        return {prize_id: replace(state) for prize_id, state in self._states.items()}

    @property
    def spin_duration(self) -> float:
        """Spinning window chosen for the current reveal (ms)."""
        return self._spin_duration

    @property
    def is_degraded(self) -> bool:
        """True while spinning below the performance threshold."""
        return (
            self.phase is AnimationPhase.SPINNING
            and self._fps.fps < self._config.performance_threshold
        )

    @property
    def frame_interval_ms(self) -> float:
        """How long a frame loop should wait before the next ``tick``."""
        if self.is_degraded:
            return 1000.0 / self._config.throttled_fps
        return 1000.0 / self._config.target_fps

    def add_listener(self, callback: PhaseListener) -> None:
        """Register ``callback(old_phase, new_phase)`` for every transition."""
        self._machine.add_listener(callback)

    def remove_listener(self, callback: PhaseListener) -> None:
        self._machine.remove_listener(callback)

    def on_fps_update(self, callback: Callable[[float], None]) -> Callable[[], None]:
        return self._fps.on_update(callback)

    # Control
    def begin(self, target_id: str, now_ms: float | None = None) -> bool:
        """Start a reveal towards ``target_id``.

        Returns:
            False if a reveal is already running (it is left alone)

        Raises:
            ValueError: If ``target_id`` is not one of the controller's prizes
        """
        if target_id not in self._positions:
            raise ValueError(f"Unknown prize id for animation: {target_id}")
        if self._animating:
            logger.warning(f"Reveal already running for {self._target_id}, ignoring {target_id}")
            return False

        now = self._now(now_ms)
        low, high = self._config.spin_duration
        self._spin_duration = float(self._rng.uniform(low, high)) if high > low else float(low)

        self._generation += 1
        self._target_id = target_id
        self._animating = True
        self._states = self._neutral_states()
        self._highlight_index = int(self._rng.integers(len(self._prize_ids)))
        self._fps.reset(now)
        self._limiter.reset()

        logger.debug(f"Reveal started for {target_id} (spin {self._spin_duration:.0f}ms)")
        self._enter(AnimationPhase.PREPARE, now, now)
        return True

    def tick(self, now_ms: float | None = None) -> AnimationPhase:
        """Advance to ``now_ms`` and recompute visuals.

        Several phases may be crossed in one call if frames were late; each
        crossing is reported to listeners in order.

        Returns:
            The phase after advancing

        Raises:
            AnimationError: If computing the frame failed. The controller is
                already back in IDLE with neutral visuals when this is raised.
        """
        if not self._animating:
            return self.phase

        now = self._now(now_ms)
        try:
            self._fps.record_frame(now)
            self._advance(now)
            if self._animating:
                if self.is_degraded and not self._limiter.should_render(now):
                    return self.phase
                self._render(self.phase, now)
        except Exception as exc:
            failed_phase = self.phase
            target = self._target_id
            self.stop()
            raise AnimationError(
                f"Reveal frame failed during {failed_phase.value}: {exc}",
                {"phase": failed_phase.value, "target_id": target},
            ) from exc
        return self.phase

    def stop(self) -> None:
        """Abort any reveal and return to IDLE with neutral visuals.

        Safe to call at any time, any number of times. Pending loops see the
        generation change and exit without touching state.
        """
        was_animating = self._animating
        self._generation += 1
        self._animating = False
        self._target_id = None
        self._states = self._neutral_states()
        if self._machine.phase is not AnimationPhase.IDLE:
            self._machine.transition(AnimationPhase.IDLE)
        if was_animating:
            logger.debug("Reveal stopped")

    async def start_animation(self, target_id: str) -> bool:
        """Run a full reveal on the event loop.

        Returns:
            True if the reveal ran to completion, False if it was stopped or
            another reveal was already running

        Raises:
            AnimationError: If a frame failed
        """
        if not self.begin(target_id):
            return False
        generation = self._generation

        try:
            while self._animating and self._generation == generation:
                await asyncio.sleep(self.frame_interval_ms / 1000.0)
                if self._generation != generation:
                    break
                self.tick()
        except asyncio.CancelledError:
            if self._generation == generation:
                self.stop()
            raise

        return self._completed_generation == generation

    # Internals
    def _now(self, now_ms: float | None) -> float:
        return self._clock() if now_ms is None else float(now_ms)

    def _neutral_states(self) -> dict[str, PrizeVisualState]:
        return {prize_id: PrizeVisualState() for prize_id in self._prize_ids}

    def _phase_duration(self, phase: AnimationPhase) -> float:
        if phase is AnimationPhase.PREPARE:
            return self._config.prepare_duration
        if phase is AnimationPhase.SPINNING:
            return self._spin_duration
        if phase is AnimationPhase.SLOWING:
            return self._config.slowing_duration
        if phase is AnimationPhase.RESULT:
            return self._config.result_duration
        return math.inf

    def _advance(self, now: float) -> None:
        while self._animating:
            phase = self.phase
            duration = self._phase_duration(phase)
            if now - self._phase_start < duration:
                return
            self._enter(NEXT_PHASE[phase], self._phase_start + duration, now)

    def _enter(self, phase: AnimationPhase, start: float, now: float) -> None:
        self._phase_start = start

        if phase is AnimationPhase.IDLE:
            self._finish()
            return

        if phase is AnimationPhase.SPINNING:
            self._last_switch = start
        # Listeners see the new phase's first frame, not the previous one's last
        self._render(phase, now)
        self._machine.transition(phase)

    def _finish(self) -> None:
        self._completed_generation = self._generation
        self._animating = False
        target = self._target_id
        self._target_id = None
        self._states = self._neutral_states()
        self._machine.transition(AnimationPhase.IDLE)
        logger.debug(f"Reveal finished for {target}")

    def _progress(self, phase: AnimationPhase, now: float) -> tuple[float, float]:
        elapsed = max(0.0, now - self._phase_start)
        duration = self._phase_duration(phase)
        if duration <= 0:
            return elapsed, 1.0
        return elapsed, min(elapsed / duration, 1.0)

    def _render(self, phase: AnimationPhase, now: float) -> None:
        elapsed, progress = self._progress(phase, now)
        if phase is AnimationPhase.PREPARE:
            self._render_prepare(elapsed, progress)
        elif phase is AnimationPhase.SPINNING:
            self._render_spinning(elapsed, progress, now)
        elif phase is AnimationPhase.SLOWING:
            self._render_slowing(elapsed, progress)
        elif phase is AnimationPhase.RESULT:
            self._render_result(elapsed, progress)

    def _render_prepare(self, elapsed: float, progress: float) -> None:
        # Every item shares the same wobble; nothing is singled out
        wobble = math.sin(elapsed * 0.01) * 2
        scale = 1 + math.sin(progress * math.pi) * 0.05
        glow = interpolate(0.0, 0.3, progress, Easing.EASE_IN_OUT_SINE)
        for state in self._states.values():
            state.is_highlighted = False
            state.scale = scale
            state.rotation = wobble
            state.opacity = 1.0
            state.glow_intensity = glow

    def _render_spinning(self, elapsed: float, progress: float, now: float) -> None:
        interval = self._config.spin_switch_interval * (1 + progress * 2)
        if now - self._last_switch >= interval:
            # Uniform over all items, target included: no bias towards the winner
            self._highlight_index = int(self._rng.integers(len(self._prize_ids)))
            self._last_switch = now

        intensity = math.sin(elapsed * 0.01) * 0.5 + 0.5
        for index, prize_id in enumerate(self._prize_ids):
            state = self._states[prize_id]
            highlighted = index == self._highlight_index
            state.is_highlighted = highlighted
            state.scale = 1.1 + intensity * 0.1 if highlighted else 1.0
            state.rotation = math.sin(elapsed * 0.02) * 10 if highlighted else 0.0
            state.opacity = 1.0
            state.glow_intensity = intensity if highlighted else 0.1

    def _render_slowing(self, elapsed: float, progress: float) -> None:
        eased = ease_out_cubic(progress)
        target_index = self._positions[self._target_id]

        distance = np.abs(np.arange(len(self._prize_ids)) - target_index)
        probability = np.clip(0.3 - distance * 0.1, 0.0, None) * (1 - eased)
        # Reaches exactly 1.0 at the end of the phase
        probability[target_index] = 0.7 + 0.3 * eased
        highlighted = self._rng.random(len(self._prize_ids)) < probability

        for index, prize_id in enumerate(self._prize_ids):
            state = self._states[prize_id]
            lit = bool(highlighted[index])
            state.is_highlighted = lit
            state.scale = 1.08 if lit else 1.0
            state.rotation = math.sin(elapsed * 0.015) * 5 if lit else 0.0
            state.glow_intensity = 0.6 + eased * 0.4 if lit else 0.05
            state.opacity = 1.0 if index == target_index else 1 - eased * 0.3

    def _render_result(self, elapsed: float, progress: float) -> None:
        for prize_id, state in self._states.items():
            winner = prize_id == self._target_id
            state.is_highlighted = winner
            if winner:
                # Overshoots past 1.2 then settles
                state.scale = interpolate(1.0, 1.2, progress, Easing.EASE_OUT_BACK)
                state.rotation = math.sin(elapsed * 0.005) * 3
                state.glow_intensity = 1.0
                state.opacity = 1.0
            else:
                state.scale = 0.95
                state.rotation = 0.0
                state.glow_intensity = 0.0
                state.opacity = 0.4
