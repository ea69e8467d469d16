"""Tests for the JSONL event logger."""

import json

from mathmatch.config import EventLogConfig
from mathmatch.game.engine import MatchEngine
from mathmatch.game.generator import BoardGenerator
from mathmatch.game.scheduler import ManualScheduler
from mathmatch.logging import EventLogger, format_card, format_states
from mathmatch.models.card import Board
from mathmatch.models.preferences import Preferences


def no_shuffle(values: list[str]) -> None:
    """Keep generation order."""


def read_records(path):
    with open(path, encoding="utf-8") as f:
        return [json.loads(line) for line in f]


class TestEventLogger:
    """Tests for EventLogger."""

    def test_disabled_writes_nothing(self, tmp_path):
        """Test that the default config does not create a file."""
        path = tmp_path / "events.jsonl"
        with EventLogger(EventLogConfig(output_path=str(path))) as event_logger:
            event_logger.log_session_end(
                MatchEngine().start_session({"totalPairs": 1}), won=False
            )
        assert not path.exists()

    def test_session_records(self, tmp_path):
        """Test a logged session from start to win."""
        path = tmp_path / "logs" / "events.jsonl"
        scheduler = ManualScheduler()
        engine = MatchEngine(
            scheduler=scheduler,
            generator=BoardGenerator(seed=1, shuffle=no_shuffle),
        )
        preferences = Preferences(total_pairs=1, custom_expressions=["2 × 3"])
        session = engine.start_session(preferences)

        with EventLogger(EventLogConfig(enabled=True, output_path=str(path))) as event_logger:
            event_logger.log_session_start(session, preferences)
            event_logger.attach(engine)
            engine.flip(0)
            engine.flip(1)
            scheduler.advance(engine.config.timing.win_delay_seconds)
            event_logger.log_session_end(session, won=True)

        records = read_records(path)
        assert [r["type"] for r in records] == [
            "session_start",
            "card-revealed",
            "card-revealed",
            "pair-matched",
            "game-won",
            "session_end",
        ]
        assert records[0]["board"] == ["2 × 3", "6"]
        assert records[1] == {"seq": 1, "type": "card-revealed", "cards": [0], "states": "RH"}
        assert records[3]["streak"] == 0
        assert records[3]["states"] == "MM"
        assert records[-1]["won"] is True
        assert records[-1]["stats"]["matches"] == 1


class TestFormatters:
    """Tests for log formatters."""

    def test_format_card_and_states(self):
        """Test compact card and state strings."""
        board = Board(["1 + 1", "2"])
        board[1].reveal()

        assert format_card(board[0]) == "0:H:1 + 1"
        assert format_card(board[1]) == "1:R:2"
        assert format_states(board) == "HR"
