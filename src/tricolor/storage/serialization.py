"""JSON mapping of the lottery aggregate.

Keys are camelCase and timestamps are epoch milliseconds; this is the
on-disk ``data.json`` format.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from tricolor.lottery.models import (
    Cycle,
    DrawResult,
    LotteryConfig,
    LotteryState,
    Prize,
    PrizeColor,
)


def _to_millis(value: datetime) -> int:
    return round(value.timestamp() * 1000)


def _from_millis(value: int | float) -> datetime:
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


def prize_to_dict(prize: Prize) -> dict[str, Any]:
    return {
        "id": prize.id,
        "name": prize.name,
        "color": prize.color.value,
        "description": prize.description,
        "icon": prize.icon,
        "value": prize.value,
    }


def prize_from_dict(data: dict[str, Any]) -> Prize:
    return Prize(
        id=str(data["id"]),
        name=str(data["name"]),
        color=PrizeColor(data["color"]),
        description=data.get("description"),
        icon=data.get("icon"),
        value=int(data.get("value", 0)),
    )


def result_to_dict(result: DrawResult) -> dict[str, Any]:
    return {
        "prizeId": result.prize_id,
        "timestamp": _to_millis(result.timestamp),
        "cycleId": result.cycle_id,
        "drawNumber": result.draw_number,
    }


def result_from_dict(data: dict[str, Any]) -> DrawResult:
    return DrawResult(
        prize_id=str(data["prizeId"]),
        timestamp=_from_millis(data["timestamp"]),
        cycle_id=str(data["cycleId"]),
        draw_number=int(data["drawNumber"]),
    )


def cycle_to_dict(cycle: Cycle) -> dict[str, Any]:
    return {
        "id": cycle.id,
        "startTime": _to_millis(cycle.start_time),
        "endTime": _to_millis(cycle.end_time) if cycle.end_time is not None else None,
        "completed": cycle.completed,
        "results": [result_to_dict(result) for result in cycle.results],
        "remainingDraws": {
            color.value: cycle.remaining.get(color, 0) for color in PrizeColor
        },
    }


def cycle_from_dict(data: dict[str, Any]) -> Cycle:
    remaining = data["remainingDraws"]
    end_time = data.get("endTime")
    return Cycle(
        id=str(data["id"]),
        start_time=_from_millis(data["startTime"]),
        end_time=_from_millis(end_time) if end_time is not None else None,
        completed=bool(data["completed"]),
        results=tuple(result_from_dict(item) for item in data.get("results", [])),
        remaining={color: int(remaining.get(color.value, 0)) for color in PrizeColor},
    )


def state_to_dict(state: LotteryState) -> dict[str, Any]:
    """Convert the aggregate to plain JSON-ready data."""
    return {
        "currentCycle": (
            cycle_to_dict(state.current_cycle) if state.current_cycle is not None else None
        ),
        "history": [cycle_to_dict(cycle) for cycle in state.history],
        "availablePrizes": [prize_to_dict(prize) for prize in state.prizes],
        "config": state.config.model_dump(by_alias=True),
    }


def state_from_dict(data: dict[str, Any]) -> LotteryState:
    """Rebuild the aggregate from ``state_to_dict`` output.

    Raises:
        ValueError: If the data is missing fields or holds invalid values
    """
    try:
        current = data.get("currentCycle")
        return LotteryState(
            current_cycle=cycle_from_dict(current) if current is not None else None,
            history=tuple(cycle_from_dict(item) for item in data.get("history", [])),
            prizes=tuple(prize_from_dict(item) for item in data.get("availablePrizes", [])),
            config=LotteryConfig.model_validate(data.get("config", {})),
        )
    except ValidationError as e:
        raise ValueError(f"Invalid lottery config: {e}") from e
    except (KeyError, TypeError, AttributeError) as e:
        raise ValueError(f"Malformed lottery data: {e!r}") from e
