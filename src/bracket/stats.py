"""
Progress statistics derived from a bracket snapshot.
"""
from typing import Dict

from bracket.models import Bracket


def compute_stats(bracket: Bracket) -> Dict:
    """
    Count matches and work out how far the tournament has progressed.

    Byes count as matches and as completed ones, so a fresh bracket with
    byes already shows some progress.
    """
    matches = bracket.all_matches()
    total_matches = len(matches)
    completed_matches = sum(1 for m in matches if m.is_completed)
    progress_percent = 100.0 * completed_matches / total_matches if total_matches else 0.0

    # Every entrant appears exactly once in round 1
    participant_ids = set()
    if bracket.rounds:
        for match in bracket.rounds[0].matches:
            participant_ids.update(p.id for p in match.players())

    current_round = bracket.total_rounds
    for r in bracket.rounds:
        if any(not m.is_completed for m in r.matches):
            current_round = r.round
            break

    return {
        'total_matches': total_matches,
        'completed_matches': completed_matches,
        'pending_matches': total_matches - completed_matches,
        'progress_percent': progress_percent,
        'progress': int(round(progress_percent)),
        'bye_matches': sum(1 for m in matches if m.is_bye),
        'playable_matches': sum(1 for m in matches if m.is_playable),
        'total_participants': len(participant_ids),
        'total_rounds': bracket.total_rounds,
        'current_round': current_round,
    }
