"""Logging utilities and board display."""

import logging
import sys
from typing import TYPE_CHECKING

from mathmatch.game.evaluator import to_display

if TYPE_CHECKING:
    from mathmatch.models.card import Board
    from mathmatch.models.events import MatchEvent
    from mathmatch.models.session import MatchSession


def setup_logging(level: str = "INFO") -> None:
    """Configure logging for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stdout,
    )


class BoardDisplay:
    """Display board and events to stdout."""

    def __init__(self, show_faces: bool = False, columns: int = 4):
        """Initialize display.

        Args:
            show_faces: Whether to show hidden card faces (debugging)
            columns: Cards per row
        """
        self.show_faces = show_faces
        self.columns = columns

    def print_separator(self) -> None:
        """Print a separator line."""
        print("=" * 60)

    def print_session_start(self, pairs: int) -> None:
        """Print session start message."""
        self.print_separator()
        print(f"NEW MATCH: {pairs} pairs")
        self.print_separator()

    def cell(self, board: "Board", card_id: int) -> str:
        """Render a single card cell."""
        card = board[card_id]
        if card.is_hidden and not self.show_faces:
            face = "?"
        else:
            face = to_display(card.face_value)
        if card.is_matched:
            face = f"({face})"
        elif card.highlighted:
            face = f"*{face}*"
        return f"{card_id:>2}: {face:<12}"

    def print_board(self, board: "Board") -> None:
        """Print the board in rows."""
        print()
        for start in range(0, len(board), self.columns):
            ids = range(start, min(start + self.columns, len(board)))
            print("  ".join(self.cell(board, i) for i in ids))
        print()

    def print_event(self, event: "MatchEvent") -> None:
        """Print an engine event."""
        print(f"  -> {event}")

    def print_status(self, session: "MatchSession") -> None:
        """Print session progress."""
        print(f"Status: {session}")

    def print_result(self, session: "MatchSession") -> None:
        """Print final session counters."""
        self.print_separator()
        print("YOU WIN!" if session.is_complete() else "Match abandoned")
        self.print_separator()
        for name, value in session.stats().items():
            print(f"  {name}: {value}")
