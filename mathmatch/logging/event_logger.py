"""Event logger for match replay."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, TextIO

from mathmatch.config import EventLogConfig
from mathmatch.models.events import MatchEvent
from mathmatch.models.preferences import Preferences
from mathmatch.models.session import MatchSession

from .formatters import format_states

if TYPE_CHECKING:
    from mathmatch.game.engine import MatchEngine


class EventLogger:
    """Logger for match events in JSONL format.

    Each line in the output file is a JSON object representing one event.
    This allows step-by-step replay of a session.
    """

    def __init__(self, config: EventLogConfig | None = None):
        """Initialize event logger.

        Args:
            config: Logging configuration. If None, logging is disabled.
        """
        self.config = config or EventLogConfig()
        self._file: TextIO | None = None
        self._seq = 0

    def __enter__(self) -> "EventLogger":
        """Context manager entry."""
        if self.config.enabled and self.config.output_path:
            path = Path(self.config.output_path)
            path.parent.mkdir(parents=True, exist_ok=True)
            self._file = open(path, "a", encoding="utf-8")
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.close()

    def close(self) -> None:
        """Close the log file."""
        if self._file:
            self._file.close()
            self._file = None

    def _write(self, record: dict[str, Any]) -> None:
        """Write a record to the log file.

        Args:
            record: Record dictionary to write as JSON.
        """
        if self._file:
            self._file.write(json.dumps(record, ensure_ascii=False) + "\n")
            self._file.flush()

    def attach(self, engine: MatchEngine) -> Callable[[], None]:
        """Log every event of `engine`.

        Returns:
            Function that stops logging.
        """

        def handler(event: MatchEvent) -> None:
            if engine.session is not None:
                self.log_event(event, engine.session)

        return engine.on_event(handler)

    def log_session_start(self, session: MatchSession, preferences: Preferences) -> None:
        """Log session start with the generated board.

        Args:
            session: New session.
            preferences: Preferences the board was generated from.
        """
        self._seq = 0
        self._write({
            "type": "session_start",
            "timestamp": datetime.now().isoformat(),
            "pairs": session.board.pair_count,
            "flip_time": preferences.flip_time_seconds,
            "board": session.board.face_values(),
        })

    def log_event(self, event: MatchEvent, session: MatchSession) -> None:
        """Log a single engine event.

        Args:
            event: Event emitted by the engine.
            session: Session state right after the event.
        """
        self._seq += 1
        record = {"seq": self._seq, **event.to_dict()}
        record["states"] = format_states(session.board)
        self._write(record)

    def log_session_end(self, session: MatchSession, won: bool) -> None:
        """Log session end with counters.

        Args:
            session: Finished (or abandoned) session.
            won: Whether every pair was found.
        """
        self._write({
            "type": "session_end",
            "timestamp": datetime.now().isoformat(),
            "won": won,
            "stats": session.stats(),
        })
