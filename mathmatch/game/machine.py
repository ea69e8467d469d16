"""Card-flip state machine for one match session."""

from __future__ import annotations

import logging
from typing import Callable

from mathmatch.config import TimingConfig
from mathmatch.models.card import Card, CardState
from mathmatch.models.events import EventType, MatchEvent
from mathmatch.models.preferences import Preferences
from mathmatch.models.session import MatchSession, RoundPhase

from .evaluator import equivalent
from .scheduler import ScheduledTask, Scheduler

logger = logging.getLogger(__name__)


class MatchStateMachine:
    """Applies flip requests to a MatchSession.

    Rejected flips (locked board, re-click on the revealed card, matched
    card, finished game) are silent no-ops. Deferred work (mismatch reset,
    auto-hide, win announcement) is scheduled on `scheduler` and checks the
    session state when it fires.
    """

    def __init__(
        self,
        session: MatchSession,
        scheduler: Scheduler,
        emit: Callable[[MatchEvent], None],
        preferences: Preferences | None = None,
        timing: TimingConfig | None = None,
    ):
        """Initialize state machine.

        Args:
            session: Session to drive (owned by the caller)
            scheduler: Scheduler for deferred work
            emit: Called with every event, in order
            preferences: Session preferences (defaults if not provided)
            timing: Engine delays (defaults if not provided)
        """
        self.session = session
        self.scheduler = scheduler
        self.preferences = preferences or Preferences()
        self.timing = timing or TimingConfig()
        self._emit = emit
        self.tasks: list[ScheduledTask] = []

    @property
    def phase(self) -> RoundPhase:
        return self.session.phase

    def get_card_state(self, card_id: int) -> CardState:
        """Get a card's state. Raises InvalidFlipRequest for unknown ids."""
        return self.session.board.get(card_id).state

    def flip(self, card_id: int) -> bool:
        """Request to turn a card face up.

        Args:
            card_id: Position of the card on the board.

        Returns:
            True if the flip was accepted, False if it was ignored.

        Raises:
            InvalidFlipRequest: If no card has that id.
        """
        session = self.session
        card = session.board.get(card_id)

        if session.finished:
            logger.debug(f"Flip {card_id} ignored: game finished")
            return False
        if session.locked:
            logger.debug(f"Flip {card_id} ignored: board locked")
            return False
        if card_id == session.first_revealed:
            logger.debug(f"Flip {card_id} ignored: already revealed")
            return False
        if not card.is_hidden:
            logger.debug(f"Flip {card_id} ignored: card is {card.state.value}")
            return False

        token = card.reveal(highlight=self.preferences.highlight_revealed_cards)
        session.cards_revealed += 1
        if self.preferences.auto_hide:
            self._schedule(
                self.preferences.flip_time_seconds, self._auto_hide, card_id, token
            )

        if session.first_revealed is None:
            session.first_revealed = card_id
            self._emit(MatchEvent(EventType.CARD_REVEALED, (card_id,)))
            return True

        session.second_revealed = card_id
        self._emit(MatchEvent(EventType.CARD_REVEALED, (card_id,)))
        self._compare()
        return True

    def _compare(self) -> None:
        session = self.session
        first = session.board.get(session.first_revealed)
        second = session.board.get(session.second_revealed)

        if equivalent(first.face_value, second.face_value):
            self._on_match(first, second)
        else:
            self._on_mismatch(first, second)

    def _on_match(self, first: Card, second: Card) -> None:
        session = self.session
        first.state = CardState.MATCHED
        second.state = CardState.MATCHED
        session.matched_count += 2
        session.matches += 1

        # Only a match right after another match extends the streak
        if session.last_round_matched:
            session.streak += 1
        session.last_round_matched = True
        session.best_streak = max(session.best_streak, session.streak)
        session.clear_round()

        logger.debug(f"Matched {first} and {second} (streak {session.streak})")
        self._emit(
            MatchEvent(
                EventType.PAIR_MATCHED,
                (first.card_id, second.card_id),
                streak=session.streak,
            )
        )

        if session.is_complete():
            session.finished = True
            self._schedule(self.timing.win_delay_seconds, self._announce_win)

    def _on_mismatch(self, first: Card, second: Card) -> None:
        session = self.session
        first.state = CardState.LOCKED_OPEN
        second.state = CardState.LOCKED_OPEN
        session.streak = 0
        session.last_round_matched = False
        session.mismatches += 1
        session.locked = True

        logger.debug(f"Mismatch {first} and {second}")
        self._emit(
            MatchEvent(
                EventType.PAIR_MISMATCHED,
                (first.card_id, second.card_id),
                streak=session.streak,
            )
        )
        self._schedule(
            self.timing.mismatch_delay_seconds,
            self._reset_mismatch,
            first.card_id,
            second.card_id,
        )

    def _reset_mismatch(self, first_id: int, second_id: int) -> None:
        session = self.session
        for card_id in (first_id, second_id):
            card = session.board.get(card_id)
            if card.state == CardState.LOCKED_OPEN:
                card.hide()
        session.clear_round()
        session.locked = False
        self._emit(MatchEvent(EventType.CARDS_RESET, (first_id, second_id)))

    def _auto_hide(self, card_id: int, token: int) -> None:
        session = self.session
        card = session.board.get(card_id)
        # Matched, waiting for a mismatch reset, or revealed again since
        if card.state != CardState.REVEALED or card.reveal_token != token:
            logger.debug(f"Auto-hide for card {card_id} skipped ({card.state.value})")
            return

        card.hide()
        if session.first_revealed == card_id:
            session.first_revealed = None
        self._emit(MatchEvent(EventType.CARD_HIDDEN, (card_id,)))

    def _announce_win(self) -> None:
        session = self.session
        if session.won_announced or not session.is_complete():
            return
        session.won_announced = True
        logger.info(f"Game won: {session}")
        self._emit(MatchEvent(EventType.GAME_WON, streak=session.streak))

    def _schedule(self, delay: float, callback: Callable[..., None], *args: int) -> None:
        self.tasks = [t for t in self.tasks if not (t.done or t.cancelled)]
        self.tasks.append(self.scheduler.call_later(delay, callback, *args))

    def cancel_pending(self) -> int:
        """Cancel deferred work that has not run yet.

        Returns:
            Number of tasks cancelled.
        """
        cancelled = 0
        for task in self.tasks:
            if not task.done and not task.cancelled:
                task.cancel()
                cancelled += 1
        self.tasks.clear()
        return cancelled
