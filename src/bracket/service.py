"""
Drives the pure bracket engine against a MatchStore.

The engine decides; this layer reads the current rows, applies the
engine's answer back to storage and updates the tournament record when a
champion emerges.
"""
import logging
from typing import List, Dict, Optional

from bracket.elimination import (
    generate_bracket,
    apply_result,
    reconstruct_bracket,
    seed_participants,
    changed_matches,
)
from bracket.errors import (
    BracketError,
    BracketExistsError,
    MatchNotFound,
    MatchAlreadyComplete,
)
from bracket.models import Participant, Bracket
from bracket.stats import compute_stats
from bracket.store import MatchStore

logger = logging.getLogger(__name__)


class BracketService:
    def __init__(self, store: MatchStore):
        self.store = store

    def set_participants(self, tournament_id, participants: List[Participant]) -> None:
        if self.store.has_bracket(tournament_id):
            raise BracketExistsError(tournament_id)
        self.store.save_participants(tournament_id, participants)

    def get_participants(self, tournament_id) -> List[Participant]:
        return self.store.load_participants(tournament_id)

    def generate(self, tournament_id) -> Bracket:
        """Generate and store the bracket for a tournament's registered participants."""
        with self.store.lock(tournament_id):
            if self.store.has_bracket(tournament_id):
                raise BracketExistsError(tournament_id)

            seeded = seed_participants(self.store.load_participants(tournament_id))
            try:
                bracket, matches = generate_bracket(seeded, tournament_id)
            except BracketError as e:
                logger.warning('Bracket generation refused for %s: %s', tournament_id, e)
                raise

            self.store.save_participants(tournament_id, seeded)
            self.store.insert_matches(tournament_id, matches)
            self.store.update_tournament(tournament_id, status='in_progress', winner_id=None)

        logger.info('Generated bracket for %s: %d participants, %d rounds',
                    tournament_id, len(seeded), bracket.total_rounds)
        return bracket

    def get_bracket(self, tournament_id) -> Optional[Bracket]:
        rows = self.store.load_matches(tournament_id)
        if not rows:
            return None
        return reconstruct_bracket(rows)

    def report_result(self, tournament_id, round_number: int, match_number: int, winner_id,
                      player1_score: int = 0, player2_score: int = 0) -> Bracket:
        """
        Apply one reported result and persist what changed.

        An identical replay writes nothing and returns the current bracket.
        """
        with self.store.lock(tournament_id):
            before = self.get_bracket(tournament_id)
            if before is None:
                raise BracketError(f"Tournament {tournament_id} has no bracket")

            try:
                after = apply_result(before, round_number, match_number, winner_id,
                                     player1_score, player2_score)
            except (MatchNotFound, MatchAlreadyComplete) as e:
                logger.error('Stored bracket for %s disagrees with reported result: %s', tournament_id, e)
                raise
            except BracketError as e:
                logger.warning('Rejected result for %s: %s', tournament_id, e)
                raise

            changed = changed_matches(before, after)
            if not changed:
                logger.info('Ignored replayed result for %s R%d-M%d', tournament_id, round_number, match_number)
                return after

            updates = [(match, before.get_match(match.round, match.match_number).status)
                       for match in changed]
            conflicts = self.store.update_matches(tournament_id, updates)
            if conflicts:
                match = conflicts[0]
                logger.error('Concurrent update of %s in %s', match.match_code, tournament_id)
                raise MatchAlreadyComplete(match.round, match.match_number)

            if after.champion is not None and before.champion is None:
                self.store.update_tournament(tournament_id, status='completed', winner_id=after.champion.id)
                logger.info('Tournament %s won by %s', tournament_id, after.champion.display_name)

        logger.info('Recorded R%d-M%d for %s: winner %s (%d-%d)', round_number, match_number,
                    tournament_id, winner_id, player1_score, player2_score)
        return after

    def get_stats(self, tournament_id) -> Optional[Dict]:
        bracket = self.get_bracket(tournament_id)
        if bracket is None:
            return None
        return compute_stats(bracket)

    def reset(self, tournament_id) -> bool:
        """Drop the stored bracket and reopen the tournament."""
        with self.store.lock(tournament_id):
            deleted = self.store.delete_bracket(tournament_id)
            self.store.update_tournament(tournament_id, status='open', winner_id=None)
        return deleted
