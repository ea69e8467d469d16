"""Main entry point for the terminal match host."""

import argparse
import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from mathmatch.config import Config, EventLogConfig, load_config
from mathmatch.game.engine import MatchEngine
from mathmatch.game.generator import BoardGenerator, PreferenceError
from mathmatch.game.scheduler import ManualScheduler
from mathmatch.logging import EventLogger
from mathmatch.models.card import InvalidFlipRequest
from mathmatch.models.events import EventType, MatchEvent
from mathmatch.models.preferences import Preferences
from mathmatch.utils.logger import BoardDisplay, setup_logging

logger = logging.getLogger(__name__)


def generate_log_filename(log_dir: str, pairs: int) -> str:
    """Generate log filename with timestamp and board size.

    Format: {ISO timestamp}_{pairs}pairs.jsonl

    Args:
        log_dir: Directory for log files.
        pairs: Number of pairs on the board.

    Returns:
        Full path to log file.
    """
    timestamp = datetime.now().strftime("%Y%m%dT%H%M%S")
    return str(Path(log_dir) / f"{timestamp}_{pairs}pairs.jsonl")


def build_preferences(config: Config, args: argparse.Namespace) -> Preferences:
    """Merge command-line overrides into the configured default preferences."""
    data: dict[str, Any] = config.defaults.model_dump()
    if args.pairs is not None:
        data["total_pairs"] = args.pairs
    if args.flip_time is not None:
        data["flip_time_seconds"] = args.flip_time
    if args.expression:
        data["custom_expressions"] = args.expression
    if args.difficulty:
        data["difficulty"] = args.difficulty
    if args.max_result is not None:
        data["max_result"] = args.max_result
    if args.highlight:
        data["highlight_revealed_cards"] = True
    return Preferences.model_validate(data)


class WallClock:
    """Drives a ManualScheduler with real elapsed time."""

    def __init__(self, scheduler: ManualScheduler):
        self.scheduler = scheduler
        self._start = time.monotonic()

    def sync(self) -> int:
        """Run every task that became due since the last sync."""
        elapsed = time.monotonic() - self._start
        return self.scheduler.advance(max(0.0, elapsed - self.scheduler.now))

    def wait(self, seconds: float) -> int:
        """Sleep, then run due tasks."""
        time.sleep(seconds)
        return self.sync()


def play(engine: MatchEngine, clock: WallClock, display: BoardDisplay) -> bool:
    """Play the live session until it is won or input ends.

    Returns:
        True if the game was won.
    """
    session = engine.session
    timing = engine.config.timing
    won = False

    def on_event(event: MatchEvent) -> None:
        nonlocal won
        display.print_event(event)
        if event.type == EventType.GAME_WON:
            won = True

    unsubscribe = engine.on_event(on_event)
    try:
        while not won:
            clock.sync()
            display.print_board(session.board)
            display.print_status(session)
            try:
                line = input("Card number (q to quit)> ").strip()
            except EOFError:
                print()
                break
            clock.sync()

            if line.lower() in ("q", "quit", "exit"):
                break
            if not line.isdigit():
                print("Enter a card number.")
                continue

            try:
                accepted = engine.flip(int(line))
            except InvalidFlipRequest:
                print(f"There is no card {line}.")
                continue
            if not accepted:
                print("That card cannot be flipped now.")
                continue

            if session.locked:
                display.print_board(session.board)
                clock.wait(timing.mismatch_delay_seconds)
            elif session.finished:
                display.print_board(session.board)
                clock.wait(timing.win_delay_seconds)
    finally:
        unsubscribe()

    return won


def main() -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success)
    """
    parser = argparse.ArgumentParser(
        description="Math memory match: pair expressions with their results"
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="Path to config file (YAML)",
    )
    parser.add_argument(
        "-p",
        "--pairs",
        type=int,
        help="Number of pairs (overrides config)",
    )
    parser.add_argument(
        "-t",
        "--flip-time",
        type=float,
        help="Seconds before a revealed card flips back (0 = never)",
    )
    parser.add_argument(
        "-e",
        "--expression",
        action="append",
        help="Custom expression, may be repeated",
    )
    parser.add_argument(
        "--difficulty",
        help="easy, medium, hard or impossible",
    )
    parser.add_argument(
        "--max-result",
        type=int,
        help="Largest result for generated pairs (1-99)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Seed for a reproducible board",
    )
    parser.add_argument(
        "--highlight",
        action="store_true",
        help="Highlight revealed cards",
    )
    parser.add_argument(
        "--reveal",
        action="store_true",
        help="Show all card faces (debugging)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "--event-log",
        type=Path,
        help="Directory for event log files (filename auto-generated)",
    )

    args = parser.parse_args()

    # Load config
    config = load_config(args.config)

    # Apply command-line overrides
    if args.verbose:
        config.logging.level = "DEBUG"
    if args.reveal:
        config.logging.show_faces = True

    setup_logging(config.logging.level)

    try:
        preferences = build_preferences(config, args)
    except ValidationError as e:
        print(f"Invalid preferences:\n{e}")
        return 1

    scheduler = ManualScheduler()
    engine = MatchEngine(
        config,
        scheduler=scheduler,
        generator=BoardGenerator(seed=args.seed),
    )
    display = BoardDisplay(show_faces=config.logging.show_faces)

    try:
        session = engine.start_session(preferences)
    except PreferenceError as e:
        print(f"Invalid preferences: {e}")
        return 1

    # CLI argument overrides config file
    event_log_enabled = args.event_log is not None or config.event_log.enabled
    if args.event_log:
        log_path = generate_log_filename(str(args.event_log), session.board.pair_count)
    else:
        log_path = config.event_log.output_path
    event_log_config = EventLogConfig(enabled=event_log_enabled, output_path=log_path)
    if event_log_enabled:
        print(f"Event log: {log_path}")

    display.print_session_start(session.board.pair_count)

    try:
        with EventLogger(event_log_config) as event_logger:
            event_logger.log_session_start(session, preferences)
            event_logger.attach(engine)
            won = play(engine, WallClock(scheduler), display)
            event_logger.log_session_end(session, won)

        display.print_result(session)
        return 0

    except KeyboardInterrupt:
        print("\nMatch interrupted by user")
        return 1
    except Exception as e:
        logger.exception(f"Match error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
