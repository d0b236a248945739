"""JSON file storage for lottery state.

Layout:
<data_dir>/
├── data.json                          # current state
└── data_backup_YYYYmmdd_HHMMSS.json   # one per backup() call
"""

from datetime import datetime
from pathlib import Path
import asyncio
import json
import logging
import shutil

from tricolor.lottery.errors import StorageError
from tricolor.lottery.models import LotteryState
from tricolor.storage.base import StorageBackend
from tricolor.storage.serialization import state_from_dict, state_to_dict

logger = logging.getLogger(__name__)

DATA_FILENAME = "data.json"


class JsonFileStorage(StorageBackend):
    """Stores the aggregate as pretty-printed JSON in ``data_dir``.

    File I/O runs in a worker thread so the event loop (and any running
    reveal) is not blocked.
    """

    def __init__(self, data_dir: str | Path) -> None:
        self.data_dir = Path(data_dir).expanduser()
        self.data_file = self.data_dir / DATA_FILENAME

    async def save(self, state: LotteryState) -> None:
        payload = json.dumps(state_to_dict(state), ensure_ascii=False, indent=2)
        try:
            await asyncio.to_thread(self._write, payload)
        except OSError as e:
            logger.error(f"Failed to save lottery data to {self.data_file}: {e}")
            raise StorageError(f"Failed to write {self.data_file}: {e}") from e
        logger.info(f"Lottery data saved to {self.data_file}")

    async def load(self) -> LotteryState | None:
        if not self.data_file.exists():
            logger.info(f"No data file at {self.data_file}, nothing to load")
            return None
        state = await self._read_state(self.data_file)
        logger.info(f"Lottery data loaded from {self.data_file}")
        return state

    async def backup(self) -> str:
        if not self.data_file.exists():
            raise StorageError("No data file found, nothing to back up")

        backup_path = self._backup_path()
        try:
            await asyncio.to_thread(shutil.copyfile, self.data_file, backup_path)
        except OSError as e:
            logger.error(f"Backup to {backup_path} failed: {e}")
            raise StorageError(f"Backup failed: {e}") from e

        logger.info(f"Lottery data backed up to {backup_path}")
        return str(backup_path)

    async def restore(self, locator: str) -> None:
        backup_path = Path(locator)
        if not backup_path.exists():
            raise StorageError(f"Backup file does not exist: {backup_path}")

        # Refuse to overwrite good data with a broken backup
        await self._read_state(backup_path)
        try:
            await asyncio.to_thread(self._copy_into_place, backup_path)
        except OSError as e:
            logger.error(f"Restore from {backup_path} failed: {e}")
            raise StorageError(f"Restore failed: {e}") from e
        logger.info(f"Lottery data restored from {backup_path}")

    async def validate(self) -> bool:
        try:
            return await super().validate()
        except StorageError as e:
            logger.warning(f"Stored lottery data failed validation: {e}")
            return False

    async def _read_state(self, path: Path) -> LotteryState:
        try:
            text = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to read {path}: {e}")
            raise StorageError(f"Failed to read {path}: {e}") from e

        try:
            return state_from_dict(json.loads(text))
        except ValueError as e:
            # json.JSONDecodeError is a ValueError too
            logger.error(f"Lottery data in {path} is corrupt: {e}")
            raise StorageError(f"Data in {path} is corrupt: {e}") from e

    def _write(self, payload: str) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        tmp_path = self.data_file.with_suffix(".json.tmp")
        tmp_path.write_text(payload, encoding="utf-8")
        tmp_path.replace(self.data_file)

    def _copy_into_place(self, source: Path) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, self.data_file)

    def _backup_path(self) -> Path:
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        path = self.data_dir / f"data_backup_{stamp}.json"
        suffix = 1
        while path.exists():
            path = self.data_dir / f"data_backup_{stamp}_{suffix}.json"
            suffix += 1
        return path
