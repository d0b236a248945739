"""Persistence contract consumed by the lottery session."""

from abc import ABC, abstractmethod

from tricolor.lottery.fairness import check_state_integrity
from tricolor.lottery.models import LotteryState


class StorageBackend(ABC):
    """Where lottery state lives between runs.

    Implementations are single-writer from one process. Every method raises
    ``StorageError`` on failure; retry policy, if any, belongs to the
    implementation.
    """

    @abstractmethod
    async def save(self, state: LotteryState) -> None:
        """Persist ``state``, replacing whatever was saved before."""

    @abstractmethod
    async def load(self) -> LotteryState | None:
        """Return the last saved state, or None if nothing was ever saved."""

    @abstractmethod
    async def backup(self) -> str:
        """Take a point-in-time copy and return an opaque locator for it."""

    @abstractmethod
    async def restore(self, locator: str) -> None:
        """Make the copy identified by ``locator`` the saved state."""

    async def validate(self) -> bool:
        """Check that the saved state (if any) is usable."""
        state = await self.load()
        return state is None or check_state_integrity(state)
