"""In-process storage, for tests and for running without a disk."""

import itertools
import logging

from tricolor.lottery.errors import StorageError
from tricolor.lottery.models import LotteryState
from tricolor.storage.base import StorageBackend

logger = logging.getLogger(__name__)


class InMemoryStorage(StorageBackend):
    """Keeps saved state and backups in memory.

    States are immutable, so holding references is enough; no copying is
    needed to give each backup its own point-in-time snapshot.
    """

    def __init__(self, initial: LotteryState | None = None) -> None:
        self._state = initial
        self._backups: dict[str, LotteryState] = {}
        self._counter = itertools.count(1)
        self.save_count = 0

    async def save(self, state: LotteryState) -> None:
        self._state = state
        self.save_count += 1

    async def load(self) -> LotteryState | None:
        return self._state

    async def backup(self) -> str:
        if self._state is None:
            raise StorageError("No saved state, nothing to back up")
        locator = f"memory-backup-{next(self._counter)}"
        self._backups[locator] = self._state
        logger.debug(f"In-memory backup created: {locator}")
        return locator

    async def restore(self, locator: str) -> None:
        try:
            self._state = self._backups[locator]
        except KeyError:
            raise StorageError(f"Unknown backup: {locator}") from None
