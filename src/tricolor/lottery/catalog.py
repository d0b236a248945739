"""Default prize catalog and initial state."""

from typing import Iterable

from tricolor.lottery.models import (
    DEFAULT_LOTTERY_CONFIG,
    LotteryConfig,
    LotteryState,
    Prize,
    PrizeColor,
    create_cycle,
)


# (id, name, color, description, value)
DEFAULT_PRIZES = (
    ("prize_red_1", "Red Grand Prize", PrizeColor.RED, "A generous red gift", 100),
    ("prize_red_2", "Red Keepsake", PrizeColor.RED, "Limited edition red souvenir", 120),
    ("prize_yellow_1", "Yellow Collectible", PrizeColor.YELLOW, "Classic yellow collectible", 80),
    ("prize_yellow_2", "Yellow Comfort", PrizeColor.YELLOW, "Cozy yellow household item", 90),
    ("prize_green_1", "Green Wellness", PrizeColor.GREEN, "Eco-friendly green product", 70),
    ("prize_green_2", "Green Decor", PrizeColor.GREEN, "Fresh green decoration", 85),
)


def create_default_prizes() -> tuple[Prize, ...]:
    """Build the stock six-prize catalog, two per color."""
    return tuple(
        Prize(id=prize_id, name=name, color=color, description=description, value=value)
        for prize_id, name, color, description, value in DEFAULT_PRIZES
    )


def create_initial_state(
    prizes: Iterable[Prize] | None = None,
    config: LotteryConfig = DEFAULT_LOTTERY_CONFIG,
) -> LotteryState:
    """Create a fresh aggregate: new cycle, empty history."""
    catalog = tuple(prizes) if prizes is not None else create_default_prizes()
    ids = [prize.id for prize in catalog]
    if len(ids) != len(set(ids)):
        raise ValueError("Prize ids must be unique")
    return LotteryState(
        current_cycle=create_cycle(config),
        history=(),
        prizes=catalog,
        config=config,
    )
