"""
Tests for YAML match storage.
"""
import os
import pytest
import sys
import yaml

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from bracket.elimination import generate_bracket, apply_result
from bracket.errors import BracketError, BracketExistsError
from bracket.models import MatchStatus


class TestParticipantsStorage:

    def test_save_and_load(self, store, four_players):
        store.save_participants('t1', four_players)
        assert store.load_participants('t1') == four_players

    def test_load_missing(self, store):
        assert store.load_participants('nothing') == []


class TestMatchStorage:

    def test_insert_and_load(self, store, four_players, tmp_path):
        _, matches = generate_bracket(four_players, 't1')
        store.insert_matches('t1', matches)

        rows = store.load_matches('t1')
        assert len(rows) == 3
        assert rows[0]['round'] == 1 and rows[0]['match_number'] == 1
        assert store.has_bracket('t1')

        with open(tmp_path / 't1' / 'matches.yaml', encoding='utf-8') as f:
            assert len(yaml.safe_load(f)['matches']) == 3

    def test_insert_twice_refused(self, store, four_players):
        _, matches = generate_bracket(four_players, 't1')
        store.insert_matches('t1', matches)
        with pytest.raises(BracketExistsError):
            store.insert_matches('t1', matches)

    def test_conditional_update(self, store, four_players):
        bracket, matches = generate_bracket(four_players, 't1')
        store.insert_matches('t1', matches)
        completed = apply_result(bracket, 1, 1, 'A', 2, 0).get_match(1, 1)

        assert store.update_match(completed, expected_status=MatchStatus.PENDING)
        assert store.load_matches('t1')[0]['status'] == MatchStatus.COMPLETED

        # Second writer expecting pending loses
        assert not store.update_match(completed, expected_status=MatchStatus.PENDING)

    def test_unconditional_update(self, store, four_players):
        bracket, matches = generate_bracket(four_players, 't1')
        store.insert_matches('t1', matches)
        match = bracket.get_match(2, 1)
        match.player1 = bracket.get_match(1, 1).player1
        assert store.update_match(match)
        assert store.load_matches('t1')[2]['player1']['id'] == 'A'

    def test_update_missing_row(self, store, four_players):
        _, matches = generate_bracket(four_players, 't1')
        with pytest.raises(BracketError):
            store.update_match(matches[0])

    def test_batch_update_all_or_nothing(self, store, four_players):
        bracket, matches = generate_bracket(four_players, 't1')
        store.insert_matches('t1', matches)
        after = apply_result(bracket, 1, 1, 'A', 2, 0)

        final = bracket.get_match(2, 1)
        final.status = MatchStatus.IN_PROGRESS
        store.update_match(final)

        conflicts = store.update_matches('t1', [
            (after.get_match(1, 1), MatchStatus.PENDING),
            (after.get_match(2, 1), MatchStatus.PENDING),
        ])
        assert [m.match_code for m in conflicts] == ['R2-M1']
        rows = store.load_matches('t1')
        assert rows[0]['status'] == MatchStatus.PENDING
        assert rows[2]['player1'] is None

    def test_batch_update_writes_every_row(self, store, four_players):
        bracket, matches = generate_bracket(four_players, 't1')
        store.insert_matches('t1', matches)
        after = apply_result(bracket, 1, 1, 'A', 2, 0)

        assert store.update_matches('t1', [
            (after.get_match(1, 1), MatchStatus.PENDING),
            (after.get_match(2, 1), MatchStatus.PENDING),
        ]) == []
        rows = store.load_matches('t1')
        assert rows[0]['winner']['id'] == 'A'
        assert rows[2]['player1']['id'] == 'A'

    def test_delete_bracket(self, store, four_players):
        _, matches = generate_bracket(four_players, 't1')
        store.insert_matches('t1', matches)
        assert store.delete_bracket('t1')
        assert store.load_matches('t1') == []
        assert not store.delete_bracket('t1')


class TestTournamentRecord:

    def test_default_record(self, store):
        assert store.load_tournament('t1') == {'id': 't1', 'status': 'open', 'winner_id': None}

    def test_update(self, store):
        store.update_tournament('t1', status='completed', winner_id='A')
        record = store.load_tournament('t1')
        assert record['status'] == 'completed'
        assert record['winner_id'] == 'A'


class TestLocking:

    def test_nested_lock_reenters(self, store):
        with store.lock('t1'):
            store.update_tournament('t1', status='in_progress')
        assert store.load_tournament('t1')['status'] == 'in_progress'

    def test_lock_file_in_tournament_dir(self, store, tmp_path):
        with store.lock('t1'):
            pass
        assert os.path.isdir(tmp_path / 't1')

    @pytest.mark.parametrize("tournament_id", ['../escape', '', 'a/b', '.hidden'])
    def test_invalid_tournament_id(self, store, tournament_id):
        with pytest.raises(BracketError):
            store.tournament_dir(tournament_id)
