"""Fairness validation and statistics over cycles.

All functions are pure: they read cycles and the catalog and return fresh
values. A cycle is fair when every color was drawn exactly
``draws_per_color`` times.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable

from tricolor.lottery.models import (
    DEFAULT_LOTTERY_CONFIG,
    Cycle,
    LotteryConfig,
    LotteryState,
    Prize,
    PrizeColor,
)


@dataclass(frozen=True)
class FairnessReport:
    """Detailed fairness verdict for one cycle.

    Attributes:
        cycle_id: Cycle that was checked
        completed: Whether the cycle was finished (unfinished cycles never pass)
        color_counts: Tally of results per color
        unknown_prize_ids: Result prize ids missing from the catalog
        imbalanced_colors: Colors whose tally differs from the quota
    """

    cycle_id: str
    completed: bool
    color_counts: dict[PrizeColor, int]
    unknown_prize_ids: tuple[str, ...] = ()
    imbalanced_colors: tuple[PrizeColor, ...] = ()

    @property
    def is_fair(self) -> bool:
        return self.completed and not self.imbalanced_colors

    @property
    def catalog_mismatch(self) -> bool:
        """True when the verdict is skewed by results the catalog can't resolve."""
        return bool(self.unknown_prize_ids)


@dataclass(frozen=True)
class LotteryStats:
    """Aggregate over completed cycles."""

    total_cycles: int
    total_draws: int
    fairness_passed: int
    color_distribution: dict[PrizeColor, int] = field(default_factory=dict)


@dataclass(frozen=True)
class HistoryStats:
    """Summary over history plus the in-progress cycle."""

    total_cycles: int
    completed_cycles: int
    total_draws: int
    color_stats: dict[PrizeColor, int] = field(default_factory=dict)


def build_color_lookup(prizes: Iterable[Prize]) -> dict[str, PrizeColor]:
    """Map prize id to color."""
    return {prize.id: prize.color for prize in prizes}


def count_colors(cycle: Cycle, lookup: dict[str, PrizeColor]) -> dict[PrizeColor, int]:
    """Tally results per color. Unknown prize ids are not counted."""
    counts = Counter(
        lookup[result.prize_id] for result in cycle.results if result.prize_id in lookup
    )
    return {color: counts.get(color, 0) for color in PrizeColor}


def evaluate_cycle_fairness(
    cycle: Cycle,
    prizes: Iterable[Prize],
    config: LotteryConfig = DEFAULT_LOTTERY_CONFIG,
) -> FairnessReport:
    """Check a cycle against the quota and explain any failure."""
    lookup = build_color_lookup(prizes)
    counts = count_colors(cycle, lookup)
    unknown = tuple(r.prize_id for r in cycle.results if r.prize_id not in lookup)
    imbalanced = tuple(
        color for color in PrizeColor if counts[color] != config.draws_per_color
    )
    return FairnessReport(
        cycle_id=cycle.id,
        completed=cycle.completed,
        color_counts=counts,
        unknown_prize_ids=unknown,
        imbalanced_colors=imbalanced,
    )


def validate_cycle_fairness(
    cycle: Cycle,
    prizes: Iterable[Prize],
    config: LotteryConfig = DEFAULT_LOTTERY_CONFIG,
) -> bool:
    """True iff the cycle is completed and every color hit its quota exactly.

    Results whose prize id is not in the catalog count toward no color, so
    catalog/state drift shows up as an unfair cycle.
    """
    if not cycle.completed:
        return False
    return evaluate_cycle_fairness(cycle, prizes, config).is_fair


def generate_stats(
    cycles: Iterable[Cycle],
    prizes: Iterable[Prize],
    config: LotteryConfig = DEFAULT_LOTTERY_CONFIG,
) -> LotteryStats:
    """Aggregate totals over the completed cycles in ``cycles``.

    Incomplete cycles are skipped entirely.
    """
    catalog = tuple(prizes)
    lookup = build_color_lookup(catalog)
    completed = [cycle for cycle in cycles if cycle.completed]

    distribution = Counter({color: 0 for color in PrizeColor})
    passed = 0
    for cycle in completed:
        if validate_cycle_fairness(cycle, catalog, config):
            passed += 1
        distribution.update(count_colors(cycle, lookup))

    return LotteryStats(
        total_cycles=len(completed),
        total_draws=sum(cycle.draw_count for cycle in completed),
        fairness_passed=passed,
        color_distribution=dict(distribution),
    )


def history_stats(state: LotteryState) -> HistoryStats:
    """Summarize history together with the current cycle."""
    cycles = list(state.history)
    if state.current_cycle is not None:
        cycles.append(state.current_cycle)

    lookup = build_color_lookup(state.prizes)
    color_stats = Counter({color: 0 for color in PrizeColor})
    for cycle in cycles:
        color_stats.update(count_colors(cycle, lookup))

    return HistoryStats(
        total_cycles=len(cycles),
        completed_cycles=len(state.history),
        total_draws=sum(cycle.draw_count for cycle in cycles),
        color_stats=dict(color_stats),
    )


def check_state_integrity(state: LotteryState) -> bool:
    """Sanity-check loaded state before trusting it.

    Checks the config sizing, that the current cycle's remaining quota plus
    its results add up to one full cycle, and that the catalog is non-empty.
    """
    config = state.config
    if config.draws_per_cycle != config.draws_per_color * len(PrizeColor):
        return False
    if not state.prizes:
        return False

    cycle = state.current_cycle
    if cycle is None:
        return False
    if any(value < 0 for value in cycle.remaining.values()):
        return False
    if cycle.remaining_total + cycle.draw_count != config.draws_per_cycle:
        return False
    if cycle.completed != (cycle.remaining_total == 0):
        return False
    return all(
        result.draw_number == index
        for index, result in enumerate(cycle.results, start=1)
    )
