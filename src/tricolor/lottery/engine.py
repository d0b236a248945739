"""Draw engine: fairness-constrained random selection over a cycle."""

from dataclasses import replace
import logging
import math
import random
import secrets

from tricolor.lottery.errors import (
    CycleCompletedError,
    DrawLimitReachedError,
    NoAvailableColorsError,
    NoAvailablePrizesError,
)
from tricolor.lottery.models import (
    DEFAULT_LOTTERY_CONFIG,
    Cycle,
    CycleProgress,
    DrawOutcome,
    DrawResult,
    LotteryConfig,
    LotteryState,
    Prize,
    PrizeColor,
    create_cycle,
    utc_now,
)

logger = logging.getLogger(__name__)


def default_random_source() -> random.Random:
    """OS-backed CSPRNG, or the stock PRNG when the OS offers none."""
    rng = secrets.SystemRandom()
    try:
        rng.random()
    except NotImplementedError:
        logger.warning("No OS randomness source available, falling back to random.Random")
        return random.Random()
    return rng


class DrawEngine:
    """Stateless draw algorithm.

    The engine holds nothing but its random source, so constructing one is
    cheap and any number can share the same state objects. Every operation
    returns new objects; inputs are never modified.

    Usage:
        engine = DrawEngine()
        outcome = engine.draw(state)
        state = outcome.new_state
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or default_random_source()

    def draw(self, state: LotteryState) -> DrawOutcome:
        """Perform one draw against the current cycle.

        Args:
            state: Aggregate to draw from; left untouched

        Returns:
            DrawOutcome with the replacement state and the new DrawResult

        Raises:
            CycleCompletedError: No current cycle, or it is already completed
            NoAvailablePrizesError: Catalog empty, or missing a color that
                still has quota
            DrawLimitReachedError: Cycle at capacity but not flagged completed
            NoAvailableColorsError: Every quota exhausted but not flagged
                completed
        """
        self._validate_draw_conditions(state)
        cycle = state.current_cycle

        available_colors = cycle.available_colors()
        if not available_colors:
            raise NoAvailableColorsError(
                "No available colors for drawing",
                {"cycle_id": cycle.id, "remaining": _remaining_dict(cycle)},
            )
        self._check_catalog_coverage(state.prizes, available_colors)

        color = self._rng.choice(available_colors)
        prize = self._select_prize(state.prizes, color)

        result = DrawResult(
            prize_id=prize.id,
            timestamp=utc_now(),
            cycle_id=cycle.id,
            draw_number=cycle.draw_count + 1,
        )
        updated = cycle.with_result(result, color)
        logger.debug(
            f"Draw {result.draw_number}/{state.config.draws_per_cycle} in {cycle.id}: "
            f"{prize.id} ({color.value})"
        )

        if updated.completed:
            logger.info(f"Cycle completed: {updated.id} ({updated.draw_count} draws)")
            new_state = replace(
                state,
                current_cycle=create_cycle(state.config),
                history=state.history + (updated,),
            )
        else:
            new_state = replace(state, current_cycle=updated)

        return DrawOutcome(new_state=new_state, result=result)

    def initialize_new_cycle(self, state: LotteryState) -> LotteryState:
        """Replace the current cycle with a fresh one. History is untouched."""
        new_cycle = create_cycle(state.config)
        if state.current_cycle is not None:
            logger.info(
                f"New cycle {new_cycle.id} replaces {state.current_cycle.id} "
                f"after {state.current_cycle.draw_count} draws"
            )
        return replace(state, current_cycle=new_cycle)

    @staticmethod
    def can_draw(cycle: Cycle | None, config: LotteryConfig = DEFAULT_LOTTERY_CONFIG) -> bool:
        """Cheap pre-check for gating the draw action in a UI."""
        if cycle is None:
            return False
        return not cycle.completed and cycle.draw_count < config.draws_per_cycle

    @staticmethod
    def get_cycle_progress(
        cycle: Cycle,
        config: LotteryConfig = DEFAULT_LOTTERY_CONFIG,
    ) -> CycleProgress:
        completed_draws = cycle.draw_count
        total_draws = config.draws_per_cycle
        return CycleProgress(
            completed_draws=completed_draws,
            total_draws=total_draws,
            # Halves round up
            percentage=math.floor(completed_draws / total_draws * 100 + 0.5),
            remaining_by_color=_remaining_dict(cycle),
        )

    def _validate_draw_conditions(self, state: LotteryState) -> None:
        cycle = state.current_cycle
        if cycle is None:
            raise CycleCompletedError("No current cycle available")
        if cycle.completed:
            raise CycleCompletedError(
                "Current cycle is already completed", {"cycle_id": cycle.id}
            )
        if not state.prizes:
            raise NoAvailablePrizesError("No available prizes configured")
        if cycle.draw_count >= state.config.draws_per_cycle:
            raise DrawLimitReachedError(
                "Draw limit reached for current cycle",
                {"cycle_id": cycle.id, "draw_count": cycle.draw_count},
            )

    @staticmethod
    def _check_catalog_coverage(prizes: tuple[Prize, ...], colors: list[PrizeColor]) -> None:
        # A color with quota but no prizes would make the draw succeed or fail
        # depending on which color comes up; reject it up front instead.
        stocked = {prize.color for prize in prizes}
        missing = [color.value for color in colors if color not in stocked]
        if missing:
            raise NoAvailablePrizesError(
                f"No available prizes for color(s): {', '.join(missing)}",
                {"colors": missing},
            )

    def _select_prize(self, prizes: tuple[Prize, ...], color: PrizeColor) -> Prize:
        candidates = [prize for prize in prizes if prize.color == color]
        if not candidates:
            raise NoAvailablePrizesError(
                f"No available prizes for color: {color.value}", {"color": color.value}
            )
        return self._rng.choice(candidates)


def available_prizes(state: LotteryState) -> list[Prize]:
    """Prizes whose color still has quota in the current cycle."""
    cycle = state.current_cycle
    if cycle is None:
        return []
    return [prize for prize in state.prizes if cycle.remaining.get(prize.color, 0) > 0]


def _remaining_dict(cycle: Cycle) -> dict[PrizeColor, int]:
    return {color: cycle.remaining.get(color, 0) for color in PrizeColor}
