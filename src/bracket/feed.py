"""
Event-driven adapter around the bracket engine.

Change notifications come in as plain dict events; the feed threads the
latest bracket for each tournament through the engine and hands the
result to subscribers. No transport lives here.
"""
import logging
from typing import Callable, Dict, List

from bracket.elimination import apply_result, reconstruct_bracket
from bracket.models import Bracket

logger = logging.getLogger(__name__)

Subscriber = Callable[[str, Bracket], None]


class BracketFeed:
    def __init__(self):
        self._brackets: Dict[str, Bracket] = {}
        self._subscribers: Dict[str, List[Subscriber]] = {}

    def subscribe(self, tournament_id, callback: Subscriber) -> None:
        self._subscribers.setdefault(tournament_id, []).append(callback)

    def unsubscribe(self, tournament_id, callback: Subscriber) -> None:
        callbacks = self._subscribers.get(tournament_id, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def current(self, tournament_id):
        return self._brackets.get(tournament_id)

    def load(self, tournament_id, rows) -> Bracket:
        """Replace the known bracket with one rebuilt from match rows."""
        bracket = reconstruct_bracket(rows)
        self._publish(tournament_id, bracket)
        return bracket

    def handle_event(self, event: Dict):
        """
        Dispatch one change notification.

        ``match_completed`` applies a result to the known bracket,
        ``matches_reloaded`` rebuilds it from rows. Returns the new bracket,
        or None for events that were ignored.
        """
        event_type = event.get('type')
        tournament_id = event.get('tournament_id')

        if event_type == 'matches_reloaded':
            return self.load(tournament_id, event.get('matches', []))

        if event_type == 'match_completed':
            bracket = self._brackets.get(tournament_id)
            if bracket is None:
                logger.warning('Result for unknown tournament %s ignored', tournament_id)
                return None
            updated = apply_result(
                bracket,
                event['round'],
                event['match_number'],
                event['winner_id'],
                event.get('player1_score', 0),
                event.get('player2_score', 0),
            )
            if updated == bracket:
                return updated
            self._publish(tournament_id, updated)
            return updated

        logger.warning('Unknown bracket event type: %s', event_type)
        return None

    def _publish(self, tournament_id, bracket: Bracket) -> None:
        self._brackets[tournament_id] = bracket
        for callback in list(self._subscribers.get(tournament_id, [])):
            try:
                callback(tournament_id, bracket)
            except Exception:
                logger.exception('Bracket subscriber failed for %s', tournament_id)
