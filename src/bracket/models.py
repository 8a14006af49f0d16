"""
Data model for single elimination brackets.

Participants, match slots, rounds and the bracket itself. Every class
compares by value and round-trips through plain dicts so match rows can be
written to YAML/JSON and read back.
"""
from typing import List, Dict, Optional


class MatchStatus:
    PENDING = 'pending'
    IN_PROGRESS = 'in_progress'
    COMPLETED = 'completed'

    ALL = (PENDING, IN_PROGRESS, COMPLETED)


class Participant:
    def __init__(self, id, tournament_id, user_id=None, seed=None, joined_at=None, display_name=None):
        self.id = id
        self.tournament_id = tournament_id
        self.user_id = user_id if user_id is not None else id
        self.seed = seed
        self.joined_at = joined_at
        self.display_name = display_name if display_name is not None else str(id)

    def with_seed(self, seed: int) -> 'Participant':
        """Return a copy of this participant carrying the given seed."""
        return Participant(self.id, self.tournament_id, self.user_id, seed,
                           self.joined_at, self.display_name)

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'tournament_id': self.tournament_id,
            'user_id': self.user_id,
            'seed': self.seed,
            'joined_at': self.joined_at,
            'display_name': self.display_name,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Participant':
        return cls(
            id=data['id'],
            tournament_id=data.get('tournament_id'),
            user_id=data.get('user_id'),
            seed=data.get('seed'),
            joined_at=data.get('joined_at'),
            display_name=data.get('display_name'),
        )

    def __eq__(self, other):
        if not isinstance(other, Participant):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"Participant(id={self.id}, seed={self.seed}, display_name={self.display_name})"


def participants_from_entries(entries, tournament_id) -> List[Participant]:
    """
    Build participants from loaded YAML/JSON entries.

    An entry is either a plain name or a mapping with at least ``id``
    (``display_name``, ``user_id``, ``seed`` and ``joined_at`` optional).
    """
    participants = []
    for entry in entries or []:
        if isinstance(entry, dict):
            if entry.get('id') is None:
                raise ValueError(f"Participant entry missing 'id': {entry}")
            seed = entry.get('seed')
            participants.append(Participant(
                id=str(entry['id']),
                tournament_id=tournament_id,
                user_id=entry.get('user_id'),
                seed=int(seed) if seed is not None else None,
                joined_at=entry.get('joined_at'),
                display_name=entry.get('display_name'),
            ))
        else:
            name = str(entry).strip()
            if not name:
                raise ValueError("Participant name cannot be empty")
            participants.append(Participant(id=name, tournament_id=tournament_id, display_name=name))

    ids = [p.id for p in participants]
    if len(ids) != len(set(ids)):
        raise ValueError("Participant ids must be unique")
    return participants


def _participant_from(data) -> Optional[Participant]:
    if data is None or isinstance(data, Participant):
        return data
    return Participant.from_dict(data)


class MatchSlot:
    def __init__(self, id, tournament_id, round, match_number, player1=None, player2=None,
                 winner=None, player1_score=0, player2_score=0,
                 status=MatchStatus.PENDING, is_bye=False):
        self.id = id
        self.tournament_id = tournament_id
        self.round = round
        self.match_number = match_number
        self.player1 = player1
        self.player2 = player2
        self.winner = winner
        self.player1_score = player1_score
        self.player2_score = player2_score
        self.status = status
        self.is_bye = is_bye

    @property
    def match_code(self) -> str:
        return f"R{self.round}-M{self.match_number}"

    @property
    def is_completed(self) -> bool:
        return self.status == MatchStatus.COMPLETED

    @property
    def is_playable(self) -> bool:
        """Both contestants are known and no result has been recorded."""
        return (not self.is_completed
                and self.player1 is not None
                and self.player2 is not None)

    def players(self) -> List[Participant]:
        return [p for p in (self.player1, self.player2) if p is not None]

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'tournament_id': self.tournament_id,
            'round': self.round,
            'match_number': self.match_number,
            'player1': self.player1.to_dict() if self.player1 else None,
            'player2': self.player2.to_dict() if self.player2 else None,
            'winner': self.winner.to_dict() if self.winner else None,
            'player1_score': self.player1_score,
            'player2_score': self.player2_score,
            'status': self.status,
            'is_bye': self.is_bye,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'MatchSlot':
        """Build a slot from a stored row.

        Rows written before ``is_bye`` was recorded get it derived: only a
        round 1 slot with exactly one player can be a bye.
        """
        player1 = _participant_from(data.get('player1'))
        player2 = _participant_from(data.get('player2'))
        is_bye = data.get('is_bye')
        if is_bye is None:
            is_bye = data['round'] == 1 and (player1 is None) != (player2 is None)
        return cls(
            id=data.get('id') or f"{data.get('tournament_id')}-R{data['round']}-M{data['match_number']}",
            tournament_id=data.get('tournament_id'),
            round=data['round'],
            match_number=data['match_number'],
            player1=player1,
            player2=player2,
            winner=_participant_from(data.get('winner')),
            player1_score=data.get('player1_score') or 0,
            player2_score=data.get('player2_score') or 0,
            status=data.get('status') or MatchStatus.PENDING,
            is_bye=bool(is_bye),
        )

    def __eq__(self, other):
        if not isinstance(other, MatchSlot):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        p1 = self.player1.display_name if self.player1 else None
        p2 = self.player2.display_name if self.player2 else 'BYE' if self.is_bye else None
        return f"MatchSlot({self.match_code}, {p1} vs {p2}, status={self.status})"


class Round:
    def __init__(self, round, name, matches=None):
        self.round = round
        self.name = name
        self.matches = matches if matches else []

    def to_dict(self) -> Dict:
        return {
            'round': self.round,
            'name': self.name,
            'matches': [m.to_dict() for m in self.matches],
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Round':
        return cls(data['round'], data['name'], [MatchSlot.from_dict(m) for m in data.get('matches', [])])

    def __eq__(self, other):
        if not isinstance(other, Round):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"Round(round={self.round}, name={self.name}, matches={len(self.matches)})"


class Bracket:
    def __init__(self, rounds=None, champion=None):
        self.rounds = rounds if rounds else []
        self.champion = champion

    @property
    def total_rounds(self) -> int:
        return len(self.rounds)

    def get_match(self, round_number: int, match_number: int) -> Optional[MatchSlot]:
        """Return the slot at (round, match_number), or None if absent."""
        if round_number < 1 or round_number > len(self.rounds):
            return None
        for match in self.rounds[round_number - 1].matches:
            if match.match_number == match_number:
                return match
        return None

    def all_matches(self) -> List[MatchSlot]:
        return [m for r in self.rounds for m in r.matches]

    def to_dict(self) -> Dict:
        return {
            'rounds': [r.to_dict() for r in self.rounds],
            'champion': self.champion.to_dict() if self.champion else None,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Bracket':
        return cls([Round.from_dict(r) for r in data.get('rounds', [])],
                   _participant_from(data.get('champion')))

    def __eq__(self, other):
        if not isinstance(other, Bracket):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        champion = self.champion.display_name if self.champion else None
        return f"Bracket(rounds={self.total_rounds}, champion={champion})"
