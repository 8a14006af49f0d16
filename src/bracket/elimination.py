"""
Single elimination bracket generation and progression.

Everything here is pure: functions take explicit state and return new
objects. Storage and notification are the caller's job.
"""
import copy
import math
from typing import List, Dict, Tuple, Optional, Iterable, Union

from bracket.errors import (
    BracketError,
    InsufficientParticipants,
    MatchNotFound,
    InvalidWinner,
    MatchNotReady,
    MatchAlreadyComplete,
    InvalidScore,
)
from bracket.models import Participant, MatchSlot, MatchStatus, Round, Bracket


def get_round_name(round_number: int, total_rounds: int) -> str:
    """Get the name of a round from its distance to the final."""
    rounds_from_end = total_rounds - round_number + 1
    if rounds_from_end == 1:
        return "Final"
    elif rounds_from_end == 2:
        return "Semifinal"
    elif rounds_from_end == 3:
        return "Quarterfinal"
    elif rounds_from_end == 4:
        return "Round of 16"
    elif rounds_from_end == 5:
        return "Round of 32"
    else:
        return f"Round {round_number}"


def calculate_bracket_size(num_participants: int) -> int:
    """Calculate the bracket size (next power of 2)."""
    if num_participants <= 0:
        return 0
    return 2 ** math.ceil(math.log2(num_participants))


def calculate_byes(num_participants: int) -> int:
    """Calculate number of byes needed."""
    return calculate_bracket_size(num_participants) - num_participants


def calculate_total_rounds(num_participants: int) -> int:
    bracket_size = calculate_bracket_size(num_participants)
    if bracket_size < 2:
        return 0
    return int(math.log2(bracket_size))


def _generate_bracket_order(bracket_size: int) -> List[int]:
    """
    Generate the standard tournament bracket order.
    If every higher seed wins, seeds meet in the proper rounds.

    For 8 slots: [1, 8, 4, 5, 2, 7, 3, 6]
    This gives matchups: 1v8, 4v5, 2v7, 3v6
    Final: 1v2 (if chalk)
    """
    if bracket_size <= 2:
        return [1, 2]

    half_size = bracket_size // 2
    upper_half = _generate_bracket_order(half_size)

    # Each seed in the smaller bracket faces its mirror in this one
    result = []
    for seed in upper_half:
        result.extend([seed, bracket_size + 1 - seed])

    return result


def seed_participants(participants: Iterable[Participant]) -> List[Participant]:
    """
    Order participants by seed and number them 1..n.

    Participants carrying a seed come first, ascending by seed; ties and
    unseeded participants keep their input order. Returns copies, the
    input objects are left untouched.
    """
    indexed = list(enumerate(participants))
    seeded = sorted((item for item in indexed if item[1].seed is not None),
                    key=lambda item: (item[1].seed, item[0]))
    unseeded = [item for item in indexed if item[1].seed is None]

    return [participant.with_seed(position)
            for position, (_, participant) in enumerate(seeded + unseeded, start=1)]


def _match_id(tournament_id, round_number: int, match_number: int) -> str:
    return f"{tournament_id}-R{round_number}-M{match_number}"


def create_bracket_matchups(seeded: List[Participant], tournament_id) -> List[MatchSlot]:
    """
    Create first round slots using standard bracket seeding (1 vs 16, 8 vs 9, etc.)

    Missing seeds beyond the field size become byes, so the top seeds are
    the ones that skip round 1. A bye slot is completed with its sole
    player as winner.
    """
    bracket_size = calculate_bracket_size(len(seeded))
    seed_to_participant = {p.seed: p for p in seeded}
    bracket_order = _generate_bracket_order(bracket_size)

    matchups = []
    for i in range(0, len(bracket_order), 2):
        match_number = i // 2 + 1
        player1 = seed_to_participant.get(bracket_order[i])
        player2 = seed_to_participant.get(bracket_order[i + 1])

        if player1 is None and player2 is None:
            raise BracketError(f"Round 1 match {match_number} has no players")
        elif player1 is None or player2 is None:
            bye_winner = player1 or player2
            matchups.append(MatchSlot(
                id=_match_id(tournament_id, 1, match_number),
                tournament_id=tournament_id,
                round=1,
                match_number=match_number,
                player1=bye_winner,
                player2=None,
                winner=bye_winner,
                status=MatchStatus.COMPLETED,
                is_bye=True,
            ))
        else:
            matchups.append(MatchSlot(
                id=_match_id(tournament_id, 1, match_number),
                tournament_id=tournament_id,
                round=1,
                match_number=match_number,
                player1=player1,
                player2=player2,
            ))

    return matchups


def next_match_position(round_number: int, match_number: int) -> Tuple[int, int, str]:
    """Where the winner of (round, match_number) plays next: (round, match_number, slot)."""
    slot = 'player1' if match_number % 2 == 1 else 'player2'
    return round_number + 1, math.ceil(match_number / 2), slot


def _propagate_winner(bracket: Bracket, match: MatchSlot) -> Optional[MatchSlot]:
    """Place the winner of ``match`` into its next round slot; returns that slot."""
    if match.round >= bracket.total_rounds:
        return None
    next_round, next_number, slot = next_match_position(match.round, match.match_number)
    next_match = bracket.get_match(next_round, next_number)
    if next_match is None:
        raise MatchNotFound(next_round, next_number)
    setattr(next_match, slot, match.winner)
    return next_match


def generate_bracket(participants: Iterable[Participant], tournament_id) -> Tuple[Bracket, List[MatchSlot]]:
    """
    Generate a single elimination bracket.

    Returns the bracket and the flat list of match rows for storage. Round 1
    byes are resolved and their winners already placed in round 2.
    """
    participants = list(participants)
    if len(participants) < 2:
        raise InsufficientParticipants(len(participants))

    seeded = seed_participants(participants)
    bracket_size = calculate_bracket_size(len(seeded))
    total_rounds = calculate_total_rounds(len(seeded))

    rounds = [Round(1, get_round_name(1, total_rounds), create_bracket_matchups(seeded, tournament_id))]

    # Later rounds start empty and fill as winners advance
    matches_in_round = bracket_size // 4
    for round_number in range(2, total_rounds + 1):
        round_matches = []
        for i in range(matches_in_round):
            round_matches.append(MatchSlot(
                id=_match_id(tournament_id, round_number, i + 1),
                tournament_id=tournament_id,
                round=round_number,
                match_number=i + 1,
            ))
        rounds.append(Round(round_number, get_round_name(round_number, total_rounds), round_matches))
        matches_in_round //= 2

    bracket = Bracket(rounds)
    for match in rounds[0].matches:
        if match.is_bye:
            _propagate_winner(bracket, match)

    return bracket, bracket.all_matches()


def _validate_score(score) -> None:
    if isinstance(score, bool) or not isinstance(score, int) or score < 0:
        raise InvalidScore(score)


def apply_result(bracket: Bracket, round_number: int, match_number: int, winner_id,
                 player1_score: int = 0, player2_score: int = 0) -> Bracket:
    """
    Record a match result and advance the winner.

    Returns a new bracket; ``bracket`` is not modified. Replaying the exact
    result already recorded returns an equal bracket. Completing the final
    sets the champion.
    """
    if bracket.get_match(round_number, match_number) is None:
        raise MatchNotFound(round_number, match_number)
    _validate_score(player1_score)
    _validate_score(player2_score)

    updated = copy.deepcopy(bracket)
    match = updated.get_match(round_number, match_number)
    player_ids = [p.id for p in match.players()]

    if match.is_completed:
        if (match.winner is not None and match.winner.id == winner_id
                and match.player1_score == player1_score
                and match.player2_score == player2_score):
            return updated
        if winner_id not in player_ids:
            raise InvalidWinner(round_number, match_number, winner_id)
        raise MatchAlreadyComplete(round_number, match_number)

    if match.player1 is None or match.player2 is None:
        raise MatchNotReady(round_number, match_number, winner_id)
    if winner_id not in player_ids:
        raise InvalidWinner(round_number, match_number, winner_id)

    match.winner = match.player1 if match.player1.id == winner_id else match.player2
    match.player1_score = player1_score
    match.player2_score = player2_score
    match.status = MatchStatus.COMPLETED

    if round_number < updated.total_rounds:
        _propagate_winner(updated, match)
    else:
        updated.champion = match.winner

    return updated


def reconstruct_bracket(flat_matches: Iterable[Union[MatchSlot, Dict]]) -> Bracket:
    """
    Rebuild a bracket from stored match rows in any order.

    Rows may be MatchSlot objects or dicts as produced by ``MatchSlot.to_dict``.
    """
    rounds_map = {}
    for row in flat_matches:
        match = copy.deepcopy(row) if isinstance(row, MatchSlot) else MatchSlot.from_dict(row)
        rounds_map.setdefault(match.round, []).append(match)

    if not rounds_map:
        raise BracketError("Cannot reconstruct a bracket from zero matches")

    total_rounds = len(rounds_map)
    expected = list(range(1, total_rounds + 1))
    if sorted(rounds_map) != expected:
        raise BracketError(f"Match rows cover rounds {sorted(rounds_map)}, expected {expected}")

    rounds = []
    for round_number in expected:
        matches = sorted(rounds_map[round_number], key=lambda m: m.match_number)
        numbers = [m.match_number for m in matches]
        if len(set(numbers)) != len(numbers):
            raise BracketError(f"Duplicate match rows in round {round_number}: {numbers}")
        slots = 2 ** (total_rounds - round_number)
        if numbers != list(range(1, slots + 1)):
            raise BracketError(
                f"Round {round_number} has matches {numbers}, expected 1..{slots}")
        rounds.append(Round(round_number, get_round_name(round_number, total_rounds), matches))

    final_match = rounds[-1].matches[0]
    champion = final_match.winner if final_match.is_completed else None

    return Bracket(rounds, champion)


def changed_matches(before: Bracket, after: Bracket) -> List[MatchSlot]:
    """Slots in ``after`` that differ from the same slot in ``before``."""
    changed = []
    for match in after.all_matches():
        if before.get_match(match.round, match.match_number) != match:
            changed.append(match)
    return changed
