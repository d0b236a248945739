"""Draw engine, cycle model and fairness checks."""

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
)
from tricolor.lottery.errors import (
    AnimationError,
    CycleCompletedError,
    DrawLimitReachedError,
    LotteryError,
    LotteryErrorCode,
    NoAvailableColorsError,
    NoAvailablePrizesError,
    StorageError,
)
from tricolor.lottery.catalog import create_default_prizes, create_initial_state
from tricolor.lottery.engine import DrawEngine, available_prizes, default_random_source
from tricolor.lottery.fairness import (
    FairnessReport,
    HistoryStats,
    LotteryStats,
    check_state_integrity,
    evaluate_cycle_fairness,
    generate_stats,
    history_stats,
    validate_cycle_fairness,
)

__all__ = [
    # Model
    "DEFAULT_LOTTERY_CONFIG",
    "Cycle",
    "CycleProgress",
    "DrawOutcome",
    "DrawResult",
    "LotteryConfig",
    "LotteryState",
    "Prize",
    "PrizeColor",
    "create_cycle",
    # Errors
    "AnimationError",
    "CycleCompletedError",
    "DrawLimitReachedError",
    "LotteryError",
    "LotteryErrorCode",
    "NoAvailableColorsError",
    "NoAvailablePrizesError",
    "StorageError",
    # Catalog
    "create_default_prizes",
    "create_initial_state",
    # Engine
    "DrawEngine",
    "available_prizes",
    "default_random_source",
    # Fairness
    "FairnessReport",
    "HistoryStats",
    "LotteryStats",
    "check_state_integrity",
    "evaluate_cycle_fairness",
    "generate_stats",
    "history_stats",
    "validate_cycle_fairness",
]
