"""
Unit tests for the data models.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from bracket.models import (
    Participant,
    MatchSlot,
    MatchStatus,
    Round,
    Bracket,
    participants_from_entries,
)


class TestParticipant:

    def test_defaults(self):
        """user_id and display_name fall back to the id."""
        p = Participant(id='p1', tournament_id='t1')
        assert p.user_id == 'p1'
        assert p.display_name == 'p1'
        assert p.seed is None

    def test_with_seed_returns_copy(self):
        p = Participant(id='p1', tournament_id='t1', display_name='Ann')
        seeded = p.with_seed(3)
        assert seeded.seed == 3
        assert seeded.display_name == 'Ann'
        assert p.seed is None

    def test_dict_round_trip(self):
        p = Participant(id='p1', tournament_id='t1', user_id='u1', seed=2,
                        joined_at='2026-01-01T10:00:00', display_name='Ann')
        assert Participant.from_dict(p.to_dict()) == p

    def test_repr(self):
        assert 'Ann' in repr(Participant(id='p1', tournament_id='t1', display_name='Ann'))


class TestMatchSlot:

    def test_defaults(self):
        match = MatchSlot(id='m', tournament_id='t1', round=2, match_number=3)
        assert match.status == MatchStatus.PENDING
        assert match.player1_score == 0
        assert not match.is_bye
        assert match.match_code == 'R2-M3'
        assert not match.is_playable

    def test_is_playable(self):
        a = Participant(id='A', tournament_id='t1')
        b = Participant(id='B', tournament_id='t1')
        match = MatchSlot(id='m', tournament_id='t1', round=1, match_number=1, player1=a, player2=b)
        assert match.is_playable
        match.status = MatchStatus.COMPLETED
        assert not match.is_playable

    def test_from_dict_fills_missing_fields(self):
        match = MatchSlot.from_dict({'tournament_id': 't1', 'round': 1, 'match_number': 2,
                                     'player1_score': None})
        assert match.id == 't1-R1-M2'
        assert match.player1_score == 0
        assert match.status == MatchStatus.PENDING

    def test_repr_shows_bye(self):
        a = Participant(id='A', tournament_id='t1')
        match = MatchSlot(id='m', tournament_id='t1', round=1, match_number=1,
                          player1=a, winner=a, status=MatchStatus.COMPLETED, is_bye=True)
        assert 'BYE' in repr(match)


class TestBracket:

    def test_get_match_out_of_range(self):
        bracket = Bracket([Round(1, 'Final', [MatchSlot(id='m', tournament_id='t1', round=1, match_number=1)])])
        assert bracket.get_match(1, 1) is not None
        assert bracket.get_match(1, 2) is None
        assert bracket.get_match(2, 1) is None
        assert bracket.get_match(0, 1) is None

    def test_dict_round_trip(self):
        a = Participant(id='A', tournament_id='t1')
        b = Participant(id='B', tournament_id='t1')
        final = MatchSlot(id='m', tournament_id='t1', round=1, match_number=1, player1=a, player2=b,
                          winner=b, player1_score=1, player2_score=2, status=MatchStatus.COMPLETED)
        bracket = Bracket([Round(1, 'Final', [final])], champion=b)
        assert Bracket.from_dict(bracket.to_dict()) == bracket

    def test_equality_against_other_types(self):
        assert Bracket() != {'rounds': [], 'champion': None}


class TestParticipantsFromEntries:

    def test_names(self):
        participants = participants_from_entries(['Ann', ' Bob '], 't1')
        assert [p.id for p in participants] == ['Ann', 'Bob']
        assert all(p.tournament_id == 't1' for p in participants)

    def test_mappings(self):
        participants = participants_from_entries(
            [{'id': 7, 'display_name': 'Ann', 'seed': '2'}, {'id': 'b', 'user_id': 'u-b'}], 't1')
        assert participants[0].id == '7'
        assert participants[0].seed == 2
        assert participants[1].user_id == 'u-b'
        assert participants[1].seed is None

    def test_empty(self):
        assert participants_from_entries(None, 't1') == []

    def test_duplicate_ids(self):
        with pytest.raises(ValueError):
            participants_from_entries(['Ann', 'Ann'], 't1')

    def test_missing_id(self):
        with pytest.raises(ValueError):
            participants_from_entries([{'display_name': 'Ann'}], 't1')

    def test_blank_name(self):
        with pytest.raises(ValueError):
            participants_from_entries(['  '], 't1')
