"""
Console entry point for tricolor.

Runs the lottery headless against the JSON data directory: draws with the
timed reveal, shows progress and statistics, and manages backups.

Usage:
  tricolor draw [-n N] [--no-animate]
  tricolor status
  tricolor new-cycle
  tricolor backup
  tricolor restore PATH
  tricolor validate
"""

import argparse
import asyncio
import logging
import sys

from dotenv import load_dotenv

from tricolor.animation.phases import AnimationPhase
from tricolor.config.settings import Settings, get_settings
from tricolor.core.events import Event, EventType
from tricolor.lottery.errors import LotteryError
from tricolor.lottery.session import LotterySession
from tricolor.storage.json_store import JsonFileStorage

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S"
    )


def build_session(settings: Settings) -> LotterySession:
    storage = JsonFileStorage(settings.data_dir)
    return LotterySession(
        storage,
        animation_config=settings.animation,
        lottery_config=settings.lottery,
    )


def print_progress(session: LotterySession) -> None:
    progress = session.progress()
    remaining = ", ".join(
        f"{color.value}={count}" for color, count in progress.remaining_by_color.items()
    )
    print(
        f"Cycle {session.state.current_cycle.id}: "
        f"{progress.completed_draws}/{progress.total_draws} ({progress.percentage}%) "
        f"remaining [{remaining}]"
    )


def print_stats(session: LotterySession) -> None:
    stats = session.stats()
    summary = session.history_stats()
    print(
        f"Completed cycles: {stats.total_cycles}, fair: {stats.fairness_passed}, "
        f"draws in history: {stats.total_draws}"
    )
    tally = ", ".join(f"{color.value}={count}" for color, count in summary.color_stats.items())
    print(f"All draws by color (including current cycle): {tally}")


async def cmd_draw(session: LotterySession, args: argparse.Namespace) -> int:
    def show_phase(event: Event) -> None:
        if event.data.get("to") == AnimationPhase.RESULT.value:
            print("  ...and the prize is")

    unsubscribe = session.events.subscribe(EventType.ANIMATION_PHASE_CHANGED, show_phase)
    try:
        for _ in range(args.count):
            result = await session.draw(animate=not args.no_animate)
            prize = session.state.prize_by_id(result.prize_id)
            label = f"{prize.name} ({prize.color.value})" if prize else result.prize_id
            print(f"Draw #{result.draw_number}: {label}")
    finally:
        unsubscribe()

    print_progress(session)
    return 0


async def cmd_status(session: LotterySession, args: argparse.Namespace) -> int:
    print_progress(session)
    print_stats(session)
    return 0


async def cmd_new_cycle(session: LotterySession, args: argparse.Namespace) -> int:
    state = await session.init_new_cycle()
    print(f"Started new cycle {state.current_cycle.id}")
    return 0


async def cmd_backup(session: LotterySession, args: argparse.Namespace) -> int:
    path = await session.backup()
    print(f"Backup written to {path}")
    return 0


async def cmd_restore(session: LotterySession, args: argparse.Namespace) -> int:
    await session.restore(args.path)
    print(f"Restored from {args.path}")
    print_progress(session)
    return 0


async def cmd_validate(session: LotterySession, args: argparse.Namespace) -> int:
    valid = await session.validate()
    print("Data is valid" if valid else "Data failed validation")
    return 0 if valid else 1


async def run(args: argparse.Namespace, settings: Settings) -> int:
    session = build_session(settings)
    await session.load()
    logger.info(
        f"Loaded lottery with {len(session.prizes)} prizes, "
        f"can draw: {session.can_draw()}"
    )
    return await args.func(session, args)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tricolor",
        description="Three-color fair lottery",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command")

    p_draw = subparsers.add_parser("draw", help="Draw prizes")
    p_draw.add_argument("-n", "--count", type=int, default=1, help="Number of draws (default: 1)")
    p_draw.add_argument("--no-animate", action="store_true", help="Skip the reveal")
    p_draw.set_defaults(func=cmd_draw)

    p_status = subparsers.add_parser("status", help="Show cycle progress and statistics")
    p_status.set_defaults(func=cmd_status)

    p_new = subparsers.add_parser("new-cycle", help="Abandon the current cycle")
    p_new.set_defaults(func=cmd_new_cycle)

    p_backup = subparsers.add_parser("backup", help="Back up the data file")
    p_backup.set_defaults(func=cmd_backup)

    p_restore = subparsers.add_parser("restore", help="Restore a backup")
    p_restore.add_argument("path", help="Backup file to restore")
    p_restore.set_defaults(func=cmd_restore)

    p_validate = subparsers.add_parser("validate", help="Check the data file")
    p_validate.set_defaults(func=cmd_validate)

    return parser


def main() -> None:
    """Main entry point."""
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        sys.exit(1)

    settings = get_settings()
    setup_logging(args.debug or settings.debug)
    logger.info(f"tricolor starting (data dir: {settings.data_dir})")

    try:
        code = asyncio.run(run(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        code = 130
    except LotteryError as e:
        logger.error(f"{e.code.value}: {e.message}")
        code = 1
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        code = 1

    sys.exit(code)


if __name__ == "__main__":
    main()
