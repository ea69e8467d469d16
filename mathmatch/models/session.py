"""Match session state."""

from enum import Enum

from pydantic import BaseModel, ConfigDict

from .card import Board


class RoundPhase(str, Enum):
    """Phase of the current round, derived from session fields."""

    IDLE = "idle"  # No card revealed
    REVEALED_FIRST = "revealed-first"
    PENDING_COMPARE = "revealed-pending-compare"
    LOCKED_MISMATCH = "locked-mismatch"
    WON = "won"


class MatchSession(BaseModel):
    """Flip state for one game.

    Created together with its board and replaced when a new game starts.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    board: Board

    # Current round
    first_revealed: int | None = None
    second_revealed: int | None = None
    locked: bool = False  # Mismatch resolution in progress

    # Progress
    streak: int = 0  # Consecutive matching rounds
    last_round_matched: bool = False
    matched_count: int = 0
    finished: bool = False  # All cards matched, no more flips
    won_announced: bool = False

    # In-memory counters, reported to the host through events and snapshots
    cards_revealed: int = 0
    matches: int = 0
    mismatches: int = 0
    best_streak: int = 0

    @property
    def phase(self) -> RoundPhase:
        """Get the current round phase."""
        if self.finished:
            return RoundPhase.WON
        if self.locked:
            return RoundPhase.LOCKED_MISMATCH
        if self.second_revealed is not None:
            return RoundPhase.PENDING_COMPARE
        if self.first_revealed is not None:
            return RoundPhase.REVEALED_FIRST
        return RoundPhase.IDLE

    def clear_round(self) -> None:
        """Forget the revealed cards of the current round."""
        self.first_revealed = None
        self.second_revealed = None

    def is_complete(self) -> bool:
        """Check if every card on the board is matched."""
        return self.matched_count == len(self.board)

    def stats(self) -> dict[str, int]:
        """Get session counters."""
        return {
            "cards_revealed": self.cards_revealed,
            "matches": self.matches,
            "mismatches": self.mismatches,
            "streak": self.streak,
            "best_streak": self.best_streak,
            "matched_cards": self.matched_count,
        }

    def __str__(self) -> str:
        parts = [f"{self.matched_count}/{len(self.board)} matched"]
        if self.locked:
            parts.append("[LOCKED]")
        parts.append(f"streak={self.streak}")
        return " ".join(parts)
