"""
Lottery session.

Ties the draw engine, persistence, the reveal controller and the event bus
together into the operations a UI needs: load, draw, reveal, start a new
cycle, stats, backup and restore.
"""

from typing import Callable
import logging

import numpy as np

from tricolor.animation.controller import AnimationPhaseController, PrizeVisualState
from tricolor.animation.phases import AnimationConfig, AnimationPhase
from tricolor.core.events import Event, EventBus, EventType
from tricolor.lottery.catalog import create_initial_state
from tricolor.lottery.engine import DrawEngine
from tricolor.lottery.errors import LotteryError, StorageError
from tricolor.lottery.fairness import HistoryStats, LotteryStats, generate_stats, history_stats
from tricolor.lottery.models import (
    DEFAULT_LOTTERY_CONFIG,
    CycleProgress,
    DrawResult,
    LotteryConfig,
    LotteryState,
    Prize,
)
from tricolor.storage.base import StorageBackend
from tricolor.storage.serialization import cycle_to_dict

logger = logging.getLogger(__name__)

SOURCE = "lottery"


class LotterySession:
    """
    Stateful front for one lottery.

    The session owns the single current ``LotteryState`` and replaces it
    wholesale after every operation. Draws are committed and saved before
    the reveal starts, so an interrupted reveal never loses a draw.

    Usage:
        session = LotterySession(JsonFileStorage(settings.data_dir))
        await session.load()
        result = await session.draw()
    """

    def __init__(
        self,
        storage: StorageBackend,
        engine: DrawEngine | None = None,
        animation_config: AnimationConfig | None = None,
        event_bus: EventBus | None = None,
        animation_rng: np.random.Generator | None = None,
        clock: Callable[[], float] | None = None,
        lottery_config: LotteryConfig = DEFAULT_LOTTERY_CONFIG,
    ) -> None:
        self._storage = storage
        self._lottery_config = lottery_config
        self._engine = engine or DrawEngine()
        self._animation_config = animation_config or AnimationConfig()
        self._animation_rng = animation_rng
        self._clock = clock
        self.events = event_bus or EventBus()

        self._state: LotteryState | None = None
        self._controller: AnimationPhaseController | None = None

    # State access
    @property
    def state(self) -> LotteryState:
        if self._state is None:
            raise RuntimeError("Lottery state not loaded; call load() first")
        return self._state

    @property
    def is_loaded(self) -> bool:
        return self._state is not None

    @property
    def prizes(self) -> tuple[Prize, ...]:
        return self.state.prizes

    @property
    def controller(self) -> AnimationPhaseController:
        """Reveal controller for the current catalog (created on demand)."""
        prize_ids = [prize.id for prize in self.state.prizes]
        if self._controller is None or self._controller.prize_ids != prize_ids:
            if self._controller is not None:
                self._controller.stop()
            self._controller = AnimationPhaseController(
                prize_ids,
                config=self._animation_config,
                rng=self._animation_rng,
                clock=self._clock,
            )
            self._controller.add_listener(self._on_phase_change)
        return self._controller

    @property
    def is_animating(self) -> bool:
        return self._controller is not None and self._controller.is_animating

    def prize_states(self) -> dict[str, PrizeVisualState]:
        return self.controller.prize_states

    # Persistence
    async def load(self) -> LotteryState:
        """Load saved state, or create and save the default on first run."""
        state = await self._storage.load()
        if state is None:
            logger.info("No saved lottery data, starting with the default catalog")
            state = create_initial_state(config=self._lottery_config)
            await self._storage.save(state)
        elif state.current_cycle is None:
            state = self._engine.initialize_new_cycle(state)

        self._state = state
        self.events.emit(Event(
            type=EventType.STATE_LOADED,
            data={"cycle_id": state.current_cycle.id, "history": len(state.history)},
            source=SOURCE,
        ))
        return state

    async def save(self) -> None:
        await self._storage.save(self.state)
        self.events.emit(Event(type=EventType.STATE_SAVED, source=SOURCE))

    async def backup(self) -> str:
        return await self._storage.backup()

    async def validate(self) -> bool:
        """Run the storage integrity check on the saved data."""
        return await self._storage.validate()

    async def restore(self, locator: str) -> LotteryState:
        """Restore a backup and reload it as the current state."""
        self.stop_animation()
        await self._storage.restore(locator)
        return await self.load()

    # Queries
    def can_draw(self) -> bool:
        if self._state is None or self.is_animating:
            return False
        return DrawEngine.can_draw(self._state.current_cycle, self._state.config)

    def progress(self) -> CycleProgress:
        state = self.state
        return DrawEngine.get_cycle_progress(state.current_cycle, state.config)

    def stats(self) -> LotteryStats:
        state = self.state
        return generate_stats(state.history, state.prizes, state.config)

    def history_stats(self) -> HistoryStats:
        return history_stats(self.state)

    # Commands
    async def draw(self, animate: bool | None = None) -> DrawResult:
        """
        Draw once, save, then (optionally) play the reveal.

        Args:
            animate: Play the reveal; defaults to the config's
                ``enable_animations``

        Returns:
            The committed DrawResult

        Raises:
            LotteryError: If the engine rejected the draw. Invariant
                violations also reset the current cycle before re-raising.
            AnimationError: If the reveal failed; the draw stays committed
        """
        if self.is_animating:
            raise RuntimeError("Cannot draw while a reveal is running")

        state = self.state
        previous_cycle = state.current_cycle
        try:
            outcome = self._engine.draw(state)
        except LotteryError as e:
            if e.invariant_violation:
                await self._recover_from_violation(e)
            raise

        self._state = outcome.new_state
        result = outcome.result
        cycle_done = outcome.new_state.current_cycle.id != previous_cycle.id

        await self._save_after_draw()

        self.events.emit(Event(
            type=EventType.DRAW_COMPLETED,
            data={
                "prize_id": result.prize_id,
                "cycle_id": result.cycle_id,
                "draw_number": result.draw_number,
            },
            source=SOURCE,
        ))
        if cycle_done:
            self.events.emit(Event(
                type=EventType.CYCLE_COMPLETED,
                data={"cycle_id": previous_cycle.id},
                source=SOURCE,
            ))
            self._emit_cycle_started()

        if animate is None:
            animate = self.state.config.enable_animations
        if animate:
            await self.start_animation(result.prize_id)
        return result

    async def init_new_cycle(self) -> LotteryState:
        """Abandon the current cycle (it is not archived) and start a new one."""
        self.stop_animation()
        self._state = self._engine.initialize_new_cycle(self.state)
        await self.save()
        self._emit_cycle_started()
        return self._state

    async def start_animation(self, target_id: str) -> bool:
        """Play the reveal for ``target_id``. Returns True if it ran to the end."""
        finished = await self.controller.start_animation(target_id)
        self.events.emit(Event(
            type=EventType.ANIMATION_FINISHED,
            data={"target_id": target_id, "completed": finished},
            source=SOURCE,
        ))
        return finished

    def stop_animation(self) -> None:
        if self._controller is not None:
            self._controller.stop()

    # Internals
    async def _save_after_draw(self) -> None:
        try:
            await self.save()
        except StorageError as e:
            # The draw is already committed in memory; keep it
            logger.warning(f"Auto-save after draw failed: {e}")

    async def _recover_from_violation(self, error: LotteryError) -> None:
        state = self.state
        cycle = state.current_cycle
        logger.error(
            f"Cycle accounting broken ({error.code.value}): {error.message}; "
            f"cycle={cycle_to_dict(cycle) if cycle is not None else None}"
        )
        self._state = self._engine.initialize_new_cycle(state)
        await self._save_after_draw()
        self.events.emit(Event(
            type=EventType.ERROR,
            data={"code": error.code.value, "message": error.message, **error.details},
            source=SOURCE,
        ))
        self._emit_cycle_started()

    def _emit_cycle_started(self) -> None:
        self.events.emit(Event(
            type=EventType.CYCLE_STARTED,
            data={"cycle_id": self.state.current_cycle.id},
            source=SOURCE,
        ))

    def _on_phase_change(self, old: AnimationPhase, new: AnimationPhase) -> None:
        self.events.emit(Event(
            type=EventType.ANIMATION_PHASE_CHANGED,
            data={"from": old.value, "to": new.value},
            source=SOURCE,
        ))
