"""Error taxonomy for the draw engine and its collaborators."""

from enum import Enum
from typing import Any


class LotteryErrorCode(Enum):
    """Machine-readable error categories."""
    CYCLE_COMPLETED = "CYCLE_COMPLETED"
    NO_AVAILABLE_PRIZES = "NO_AVAILABLE_PRIZES"
    DRAW_LIMIT_REACHED = "DRAW_LIMIT_REACHED"
    NO_AVAILABLE_COLORS = "NO_AVAILABLE_COLORS"
    STORAGE_ERROR = "STORAGE_ERROR"
    ANIMATION_ERROR = "ANIMATION_ERROR"


class LotteryError(Exception):
    """Base class for expected, caller-recoverable failures.

    Attributes:
        code: Error category
        details: Extra context for logs and diagnostics
        invariant_violation: True when the error means cycle accounting is
            broken, rather than ordinary user-facing friction
    """

    code: LotteryErrorCode = LotteryErrorCode.CYCLE_COMPLETED
    invariant_violation: bool = False

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, code={self.code.value})"


class CycleCompletedError(LotteryError):
    """Draw attempted on a finished (or missing) cycle; start a new one first."""
    code = LotteryErrorCode.CYCLE_COMPLETED


class NoAvailablePrizesError(LotteryError):
    """Catalog empty or lacking prizes for a color that still has quota."""
    code = LotteryErrorCode.NO_AVAILABLE_PRIZES


class DrawLimitReachedError(LotteryError):
    """Cycle is at capacity but was never flagged completed."""
    code = LotteryErrorCode.DRAW_LIMIT_REACHED
    invariant_violation = True


class NoAvailableColorsError(LotteryError):
    """All quotas exhausted without the cycle being flagged completed."""
    code = LotteryErrorCode.NO_AVAILABLE_COLORS
    invariant_violation = True


class StorageError(LotteryError):
    """Persistence collaborator failed to save, load, back up or restore."""
    code = LotteryErrorCode.STORAGE_ERROR


class AnimationError(LotteryError):
    """A reveal frame failed; the controller has already reset to idle."""
    code = LotteryErrorCode.ANIMATION_ERROR
