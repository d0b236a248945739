import random
import tempfile
import unittest
from dataclasses import replace
from pathlib import Path

import numpy as np

from tricolor.animation import AnimationConfig, AnimationPhase
from tricolor.config import Settings
from tricolor.core import EventBus, EventType
from tricolor.lottery import (
    CycleCompletedError,
    DrawEngine,
    LotteryConfig,
    NoAvailableColorsError,
    PrizeColor,
    StorageError,
    create_initial_state,
)
from tricolor.lottery.session import LotterySession
from tricolor.main import build_session
from tricolor.storage import InMemoryStorage

# Every phase lasts zero time, so one frame walks the whole reveal
INSTANT = AnimationConfig(
    prepare_duration=0,
    spin_duration=(0, 0),
    slowing_duration=0,
    result_duration=0,
    target_fps=1000,
    performance_threshold=0,
)


class FailingSaveStorage(InMemoryStorage):
    async def save(self, state) -> None:
        raise StorageError("disk full")


def make_session(storage=None, seed: int = 0) -> LotterySession:
    return LotterySession(
        storage if storage is not None else InMemoryStorage(),
        engine=DrawEngine(rng=random.Random(seed)),
        animation_config=INSTANT,
        event_bus=EventBus(history_limit=500),
        animation_rng=np.random.default_rng(seed),
    )


def event_types(session: LotterySession) -> list:
    return [event.type for event in session.events.get_history(limit=500)]


class LotterySessionTests(unittest.IsolatedAsyncioTestCase):
    async def test_first_load_creates_and_saves_default_state(self) -> None:
        storage = InMemoryStorage()
        session = make_session(storage)
        self.assertFalse(session.is_loaded)
        self.assertFalse(session.can_draw())

        state = await session.load()
        self.assertTrue(session.is_loaded)

        self.assertEqual(len(state.prizes), 6)
        self.assertEqual(storage.save_count, 1)
        self.assertIs(await storage.load(), state)
        self.assertTrue(session.can_draw())
        self.assertEqual(event_types(session), [EventType.STATE_LOADED])

    async def test_first_load_uses_configured_sizing(self) -> None:
        storage = InMemoryStorage()
        session = LotterySession(
            storage,
            engine=DrawEngine(rng=random.Random(1)),
            lottery_config=LotteryConfig(draws_per_cycle=9, draws_per_color=3),
        )

        state = await session.load()

        self.assertEqual(state.config.draws_per_cycle, 9)
        self.assertEqual(dict(state.current_cycle.remaining), {color: 3 for color in PrizeColor})
        self.assertEqual(session.progress().total_draws, 9)
        self.assertIs(await storage.load(), state)

    async def test_cli_session_reads_lottery_settings(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            settings = Settings(
                _env_file=None,
                data_dir=Path(tmp),
                lottery=LotteryConfig(draws_per_cycle=9, draws_per_color=3),
            )
            state = await build_session(settings).load()

        self.assertEqual(state.config.draws_per_cycle, 9)
        self.assertEqual(state.config.draws_per_color, 3)

    async def test_state_requires_load(self) -> None:
        with self.assertRaises(RuntimeError):
            make_session().state

    async def test_full_cycle_is_fair_and_archived(self) -> None:
        session = make_session(seed=3)
        await session.load()

        results = [await session.draw(animate=False) for _ in range(6)]

        self.assertEqual([r.draw_number for r in results], [1, 2, 3, 4, 5, 6])
        colors = [session.state.prize_by_id(r.prize_id).color for r in results]
        for color in PrizeColor:
            self.assertEqual(colors.count(color), 2)

        stats = session.stats()
        self.assertEqual(stats.total_cycles, 1)
        self.assertEqual(stats.fairness_passed, 1)
        self.assertEqual(session.progress().completed_draws, 0)

        types = event_types(session)
        self.assertEqual(types.count(EventType.DRAW_COMPLETED), 6)
        self.assertEqual(types.count(EventType.CYCLE_COMPLETED), 1)
        self.assertEqual(types.count(EventType.CYCLE_STARTED), 1)

    async def test_draw_is_saved_before_reveal(self) -> None:
        storage = InMemoryStorage()
        session = make_session(storage)
        await session.load()

        result = await session.draw(animate=False)

        saved = await storage.load()
        self.assertEqual(saved.current_cycle.results, (result,))
        self.assertEqual(session.progress().percentage, 17)

    async def test_draw_with_reveal_reports_phases(self) -> None:
        session = make_session()
        await session.load()

        result = await session.draw()

        changes = [
            e.data["to"] for e in session.events.get_history(EventType.ANIMATION_PHASE_CHANGED, limit=50)
        ]
        self.assertEqual(changes, [phase.value for phase in (
            AnimationPhase.PREPARE,
            AnimationPhase.SPINNING,
            AnimationPhase.SLOWING,
            AnimationPhase.RESULT,
            AnimationPhase.IDLE,
        )])
        finished = session.events.get_history(EventType.ANIMATION_FINISHED)[-1]
        self.assertEqual(finished.data, {"target_id": result.prize_id, "completed": True})
        self.assertFalse(session.is_animating)
        self.assertTrue(session.can_draw())
        self.assertFalse(any(s.is_highlighted for s in session.prize_states().values()))

    async def test_save_failure_keeps_the_draw(self) -> None:
        session = make_session(FailingSaveStorage(initial=create_initial_state()))
        await session.load()

        with self.assertLogs("tricolor.lottery.session", level="WARNING"):
            result = await session.draw(animate=False)

        self.assertEqual(session.state.current_cycle.results, (result,))

    async def test_invariant_violation_resets_cycle(self) -> None:
        state = create_initial_state()
        broken = replace(state.current_cycle, remaining={color: 0 for color in PrizeColor})
        storage = InMemoryStorage(initial=replace(state, current_cycle=broken))
        session = make_session(storage)
        await session.load()

        with self.assertLogs("tricolor.lottery.session", level="ERROR"):
            with self.assertRaises(NoAvailableColorsError):
                await session.draw(animate=False)

        fresh = session.state.current_cycle
        self.assertNotEqual(fresh.id, broken.id)
        self.assertEqual(dict(fresh.remaining), {color: 2 for color in PrizeColor})
        self.assertEqual(session.state.history, ())
        self.assertIs(await storage.load(), session.state)

        errors = session.events.get_history(EventType.ERROR)
        self.assertEqual(errors[-1].data["code"], "NO_AVAILABLE_COLORS")
        # The session can carry on
        await session.draw(animate=False)

    async def test_ordinary_errors_leave_state_alone(self) -> None:
        state = create_initial_state()
        done = replace(state.current_cycle, completed=True)
        session = make_session(InMemoryStorage(initial=replace(state, current_cycle=done)))
        await session.load()

        with self.assertRaises(CycleCompletedError):
            await session.draw(animate=False)

        self.assertEqual(session.state.current_cycle.id, done.id)
        self.assertEqual(session.events.get_history(EventType.ERROR), [])

    async def test_init_new_cycle_abandons_current(self) -> None:
        session = make_session()
        await session.load()
        await session.draw(animate=False)
        await session.draw(animate=False)
        old_id = session.state.current_cycle.id

        state = await session.init_new_cycle()

        self.assertNotEqual(state.current_cycle.id, old_id)
        self.assertEqual(state.history, ())
        self.assertEqual(session.history_stats().total_draws, 0)

    async def test_backup_and_restore_reload_state(self) -> None:
        session = make_session()
        await session.load()
        await session.draw(animate=False)
        locator = await session.backup()

        await session.draw(animate=False)
        await session.draw(animate=False)
        self.assertEqual(session.progress().completed_draws, 3)

        await session.restore(locator)

        self.assertEqual(session.progress().completed_draws, 1)
        self.assertTrue(await session.validate())


if __name__ == "__main__":
    unittest.main()
