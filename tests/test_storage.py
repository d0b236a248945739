import json
import random
import tempfile
import unittest
from pathlib import Path

from tricolor.lottery import DrawEngine, StorageError, create_initial_state
from tricolor.storage import InMemoryStorage, JsonFileStorage, state_from_dict, state_to_dict


def played_state(draws: int = 8, seed: int = 4):
    engine = DrawEngine(rng=random.Random(seed))
    state = create_initial_state()
    for _ in range(draws):
        state = engine.draw(state).new_state
    return state


class SerializationTests(unittest.TestCase):
    def test_wire_format_uses_camel_case(self) -> None:
        data = state_to_dict(played_state())
        self.assertEqual(
            set(data), {"currentCycle", "history", "availablePrizes", "config"}
        )
        self.assertEqual(data["config"], {
            "drawsPerCycle": 6, "drawsPerColor": 2, "enableAnimations": True,
        })
        cycle = data["history"][0]
        self.assertEqual(
            set(cycle), {"id", "startTime", "endTime", "completed", "results", "remainingDraws"}
        )
        self.assertEqual(cycle["remainingDraws"], {"red": 0, "yellow": 0, "green": 0})
        self.assertIsInstance(cycle["results"][0]["timestamp"], int)
        self.assertEqual(cycle["results"][0]["drawNumber"], 1)

    def test_restores_state(self) -> None:
        state = played_state()
        data = state_to_dict(state)
        restored = state_from_dict(json.loads(json.dumps(data)))

        self.assertEqual(state_to_dict(restored), data)
        self.assertEqual(dict(restored.current_cycle.remaining), dict(state.current_cycle.remaining))
        self.assertEqual(restored.prizes, state.prizes)

    def test_malformed_data_raises_value_error(self) -> None:
        with self.assertRaises(ValueError):
            state_from_dict({"currentCycle": {"id": "x"}})
        with self.assertRaises(ValueError):
            state_from_dict({"currentCycle": None, "config": {"drawsPerCycle": 5}})


class JsonFileStorageTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.data_dir = Path(self._tmp.name) / "lottery-game"
        self.storage = JsonFileStorage(self.data_dir)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    async def test_load_without_file_returns_none(self) -> None:
        self.assertIsNone(await self.storage.load())
        self.assertTrue(await self.storage.validate())

    async def test_save_then_load(self) -> None:
        state = played_state()
        await self.storage.save(state)

        self.assertTrue((self.data_dir / "data.json").exists())
        loaded = await self.storage.load()
        self.assertEqual(state_to_dict(loaded), state_to_dict(state))
        self.assertTrue(await self.storage.validate())

    async def test_corrupt_file(self) -> None:
        self.data_dir.mkdir(parents=True)
        (self.data_dir / "data.json").write_text("{not json", encoding="utf-8")

        with self.assertRaises(StorageError):
            await self.storage.load()
        self.assertFalse(await self.storage.validate())

    async def test_backup_requires_data(self) -> None:
        with self.assertRaises(StorageError):
            await self.storage.backup()

    async def test_backup_and_restore(self) -> None:
        original = played_state(draws=2)
        await self.storage.save(original)
        locator = await self.storage.backup()

        backup_path = Path(locator)
        self.assertTrue(backup_path.exists())
        self.assertTrue(backup_path.name.startswith("data_backup_"))

        await self.storage.save(played_state(draws=9))
        await self.storage.restore(locator)

        loaded = await self.storage.load()
        self.assertEqual(state_to_dict(loaded), state_to_dict(original))

    async def test_two_backups_do_not_collide(self) -> None:
        await self.storage.save(played_state())
        first = await self.storage.backup()
        second = await self.storage.backup()
        self.assertNotEqual(first, second)

    async def test_restore_rejects_missing_or_corrupt_backup(self) -> None:
        state = played_state()
        await self.storage.save(state)

        with self.assertRaises(StorageError):
            await self.storage.restore(str(self.data_dir / "nope.json"))

        corrupt = self.data_dir / "data_backup_broken.json"
        corrupt.write_text('{"currentCycle": 1}', encoding="utf-8")
        with self.assertRaises(StorageError):
            await self.storage.restore(str(corrupt))

        loaded = await self.storage.load()
        self.assertEqual(state_to_dict(loaded), state_to_dict(state))


class InMemoryStorageTests(unittest.IsolatedAsyncioTestCase):
    async def test_backup_is_point_in_time(self) -> None:
        storage = InMemoryStorage()
        self.assertIsNone(await storage.load())
        with self.assertRaises(StorageError):
            await storage.backup()

        first = played_state(draws=1)
        await storage.save(first)
        locator = await storage.backup()
        await storage.save(played_state(draws=3))

        await storage.restore(locator)
        self.assertIs(await storage.load(), first)
        with self.assertRaises(StorageError):
            await storage.restore("missing")


if __name__ == "__main__":
    unittest.main()
