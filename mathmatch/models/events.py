"""Events emitted by the match engine to the host UI."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable


class EventType(str, Enum):
    """Lifecycle event kinds."""

    CARD_REVEALED = "card-revealed"
    PAIR_MATCHED = "pair-matched"
    PAIR_MISMATCHED = "pair-mismatched"
    CARDS_RESET = "cards-reset"  # Mismatched pair turned face down again
    CARD_HIDDEN = "card-hidden"  # Auto-hide timeout fired
    GAME_WON = "game-won"


@dataclass(frozen=True)
class MatchEvent:
    """Single engine event."""

    type: EventType
    card_ids: tuple[int, ...] = field(default_factory=tuple)
    streak: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dict."""
        data: dict[str, Any] = {"type": self.type.value, "cards": list(self.card_ids)}
        if self.streak is not None:
            data["streak"] = self.streak
        return data

    def __str__(self) -> str:
        parts = [self.type.value]
        if self.card_ids:
            parts.append(",".join(str(i) for i in self.card_ids))
        if self.streak is not None:
            parts.append(f"streak={self.streak}")
        return " ".join(parts)


EventHandler = Callable[[MatchEvent], None]
