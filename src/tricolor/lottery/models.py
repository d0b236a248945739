"""
Data model for three-color prize draws.

A cycle is the fairness unit: every color is drawn exactly
``draws_per_color`` times before the cycle completes. All records here are
frozen; transitions build new objects with ``dataclasses.replace`` so an old
state stays valid for anyone still holding it.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Mapping
import uuid

from pydantic import BaseModel, ConfigDict, Field, model_validator


class PrizeColor(Enum):
    """Closed set of prize categories."""
    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"


class LotteryConfig(BaseModel):
    """Cycle sizing for the draw engine."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    draws_per_cycle: int = Field(default=6, gt=0, alias="drawsPerCycle")
    draws_per_color: int = Field(default=2, gt=0, alias="drawsPerColor")
    enable_animations: bool = Field(default=True, alias="enableAnimations")

    @model_validator(mode="after")
    def _check_cycle_size(self) -> "LotteryConfig":
        expected = self.draws_per_color * len(PrizeColor)
        if self.draws_per_cycle != expected:
            raise ValueError(
                f"draws_per_cycle must equal draws_per_color x {len(PrizeColor)} "
                f"colors ({expected}), got {self.draws_per_cycle}"
            )
        return self


DEFAULT_LOTTERY_CONFIG = LotteryConfig()


def utc_now() -> datetime:
    """Current wall-clock time, timezone aware."""
    return datetime.now(timezone.utc)


def generate_id(prefix: str) -> str:
    """Generate a unique, roughly time-ordered identifier."""
    stamp = int(utc_now().timestamp() * 1000)
    return f"{prefix}_{stamp}_{uuid.uuid4().hex[:8]}"


@dataclass(frozen=True)
class Prize:
    """Catalog entry. Created once at startup, never mutated.

    Attributes:
        id: Unique identifier
        name: Display name
        color: Fairness category
        description: Optional longer text
        icon: Optional icon reference for the UI
        value: Nominal value, used only for sorting/display
    """

    id: str
    name: str
    color: PrizeColor
    description: str | None = None
    icon: str | None = None
    value: int = 0


@dataclass(frozen=True)
class DrawResult:
    """One completed draw."""

    prize_id: str
    timestamp: datetime
    cycle_id: str
    draw_number: int  # 1-based position within the cycle


@dataclass(frozen=True)
class Cycle:
    """One fairness window.

    Invariants:
        remaining[c] + (results drawn with color c) == draws_per_color
        completed <=> sum(remaining) == 0 <=> len(results) == draws_per_cycle
    """

    id: str
    start_time: datetime
    remaining: Mapping[PrizeColor, int]
    results: tuple[DrawResult, ...] = ()
    completed: bool = False
    end_time: datetime | None = None

    def __post_init__(self) -> None:
        # Freeze the quota map so a shared cycle can't be edited in place
        if not isinstance(self.remaining, MappingProxyType):
            object.__setattr__(self, "remaining", MappingProxyType(dict(self.remaining)))
        if not isinstance(self.results, tuple):
            object.__setattr__(self, "results", tuple(self.results))

    @property
    def remaining_total(self) -> int:
        return sum(self.remaining.values())

    @property
    def draw_count(self) -> int:
        return len(self.results)

    def available_colors(self) -> list[PrizeColor]:
        """Colors that still have quota, in enumeration order."""
        return [color for color in PrizeColor if self.remaining.get(color, 0) > 0]

    def with_result(self, result: DrawResult, color: PrizeColor) -> "Cycle":
        """Return a copy with ``result`` appended and ``color`` charged.

        The copy is marked completed (with an end time) exactly when the
        quotas are exhausted.
        """
        remaining = dict(self.remaining)
        remaining[color] = remaining.get(color, 0) - 1
        completed = sum(remaining.values()) == 0
        return replace(
            self,
            remaining=remaining,
            results=self.results + (result,),
            completed=completed,
            end_time=result.timestamp if completed else self.end_time,
        )


def create_cycle(config: LotteryConfig = DEFAULT_LOTTERY_CONFIG) -> Cycle:
    """Create a fresh cycle with full quotas and no results."""
    return Cycle(
        id=generate_id("cycle"),
        start_time=utc_now(),
        remaining={color: config.draws_per_color for color in PrizeColor},
    )


@dataclass(frozen=True)
class LotteryState:
    """Aggregate session state.

    Owns exactly one current cycle plus the append-only history of
    completed cycles. The prize catalog is shared and read-only.
    """

    current_cycle: Cycle | None
    history: tuple[Cycle, ...] = ()
    prizes: tuple[Prize, ...] = ()
    config: LotteryConfig = field(default_factory=LotteryConfig)

    def __post_init__(self) -> None:
        if not isinstance(self.history, tuple):
            object.__setattr__(self, "history", tuple(self.history))
        if not isinstance(self.prizes, tuple):
            object.__setattr__(self, "prizes", tuple(self.prizes))

    def prize_by_id(self, prize_id: str) -> Prize | None:
        for prize in self.prizes:
            if prize.id == prize_id:
                return prize
        return None


@dataclass(frozen=True)
class CycleProgress:
    """Derived, read-only view of how far a cycle has got."""

    completed_draws: int
    total_draws: int
    percentage: int
    remaining_by_color: dict[PrizeColor, int]


@dataclass(frozen=True)
class DrawOutcome:
    """Return value of a draw: the replacement state plus the new result."""

    new_state: LotteryState
    result: DrawResult
