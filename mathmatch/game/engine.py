"""Match engine facade."""

from __future__ import annotations

import logging
import random
from typing import Any, Callable, Mapping

from mathmatch.config import Config
from mathmatch.models.card import Board, CardState, InvalidFlipRequest
from mathmatch.models.events import EventHandler, MatchEvent
from mathmatch.models.preferences import Preferences
from mathmatch.models.session import MatchSession

from .generator import BoardGenerator
from .machine import MatchStateMachine
from .scheduler import ManualScheduler, Scheduler

logger = logging.getLogger(__name__)


class MatchEngine:
    """Public entry point for a host UI.

    Owns at most one live session. The host starts a session, forwards
    flip requests, queries card state for rendering and subscribes to
    events.
    """

    def __init__(
        self,
        config: Config | None = None,
        scheduler: Scheduler | None = None,
        rng: random.Random | None = None,
        generator: BoardGenerator | None = None,
    ):
        """Initialize match engine.

        Args:
            config: Configuration (uses defaults if not provided)
            scheduler: Scheduler for deferred work (a ManualScheduler if not provided)
            rng: Random source for board generation
            generator: Board generator (built from `rng` if not provided)
        """
        self.config = config or Config()
        self.scheduler = scheduler or ManualScheduler()
        self.generator = generator or BoardGenerator(rng=rng)

        self.preferences: Preferences | None = None
        self._machine: MatchStateMachine | None = None
        self._handlers: list[EventHandler] = []

    @property
    def session(self) -> MatchSession | None:
        """Get the live session, if any."""
        return self._machine.session if self._machine else None

    @property
    def board(self) -> Board | None:
        """Get the live board, if any."""
        return self._machine.session.board if self._machine else None

    def on_event(self, handler: EventHandler) -> Callable[[], None]:
        """Subscribe to engine events.

        Args:
            handler: Called with each MatchEvent.

        Returns:
            Function that removes the subscription.
        """
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def start_session(self, preferences: Preferences | Mapping[str, Any] | None = None) -> MatchSession:
        """Start a new game, replacing any previous session.

        Args:
            preferences: Preferences model or mapping (config defaults if None).

        Returns:
            The new session.

        Raises:
            PreferenceError: If a custom expression is unusable.
        """
        if preferences is None:
            preferences = self.config.defaults
        elif not isinstance(preferences, Preferences):
            preferences = Preferences.model_validate(preferences)

        board = self.generator.generate(preferences)

        if self._machine:
            cancelled = self._machine.cancel_pending()
            logger.debug(f"Replaced previous session ({cancelled} timers cancelled)")

        session = MatchSession(board=board)
        machine = MatchStateMachine(
            session,
            self.scheduler,
            emit=lambda event: self._dispatch(machine, event),
            preferences=preferences,
            timing=self.config.timing,
        )
        self.preferences = preferences
        self._machine = machine

        logger.info(f"Session started: {board.pair_count} pairs")
        return session

    def flip(self, card_id: int) -> bool:
        """Request to turn a card face up.

        Returns:
            True if accepted, False if ignored.

        Raises:
            InvalidFlipRequest: Unknown card id, or no session started.
        """
        machine = self._require_machine()
        try:
            return machine.flip(card_id)
        except InvalidFlipRequest as e:
            logger.error(f"Invalid flip request: {e}")
            raise

    def get_card_state(self, card_id: int) -> CardState:
        """Get a card's state for rendering."""
        return self._require_machine().get_card_state(card_id)

    def snapshot(self) -> dict[str, Any]:
        """Get a JSON-serializable view of the live session.

        Face values are only included for cards that are face up.
        """
        machine = self._require_machine()
        session = machine.session
        cards = []
        for card in session.board:
            entry: dict[str, Any] = {
                "id": card.card_id,
                "state": card.state.value,
                "highlighted": card.highlighted,
            }
            if not card.is_hidden:
                entry["value"] = card.face_value
            cards.append(entry)
        return {
            "phase": session.phase.value,
            "locked": session.locked,
            "cards": cards,
            "stats": session.stats(),
        }

    def _require_machine(self) -> MatchStateMachine:
        if self._machine is None:
            raise InvalidFlipRequest("No session started")
        return self._machine

    def _dispatch(self, source: MatchStateMachine, event: MatchEvent) -> None:
        # Timers of a replaced session must not reach the host
        if source is not self._machine:
            logger.debug(f"Dropped event from stale session: {event}")
            return
        for handler in list(self._handlers):
            try:
                handler(event)
            except Exception:
                logger.exception(f"Event handler failed on {event}")
