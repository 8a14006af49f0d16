"""
YAML file storage for participants, match rows and tournament records.

Each tournament lives in its own directory:

    <data_dir>/<tournament_id>/participants.yaml
    <data_dir>/<tournament_id>/matches.yaml
    <data_dir>/<tournament_id>/tournament.yaml

Writes to a tournament take a FileLock on ``<tournament_dir>/.lock`` so
separate processes sharing the directory see one writer at a time.
"""
import os
import re
import logging
from typing import List, Dict, Optional, Tuple

import yaml
from filelock import FileLock

from bracket.errors import BracketError, BracketExistsError
from bracket.models import Participant, MatchSlot

logger = logging.getLogger(__name__)

LOCK_TIMEOUT = 10
_TOURNAMENT_ID_RE = re.compile(r'^[A-Za-z0-9][A-Za-z0-9_-]*$')


class MatchStore:
    def __init__(self, data_dir: str, lock_timeout: float = LOCK_TIMEOUT):
        self.data_dir = data_dir
        self.lock_timeout = lock_timeout
        self._locks = {}

    def tournament_dir(self, tournament_id) -> str:
        tournament_id = str(tournament_id)
        if not _TOURNAMENT_ID_RE.match(tournament_id):
            raise BracketError(f"Invalid tournament id: {tournament_id!r}")
        return os.path.join(self.data_dir, tournament_id)

    def _file_path(self, tournament_id, filename: str) -> str:
        return os.path.join(self.tournament_dir(tournament_id), filename)

    def lock(self, tournament_id) -> FileLock:
        """Lock guarding every file of one tournament.

        The same FileLock instance is returned per tournament, so nested
        ``with store.lock(...)`` blocks re-enter instead of deadlocking.
        """
        path = self.tournament_dir(tournament_id)
        lock = self._locks.get(path)
        if lock is None:
            os.makedirs(path, exist_ok=True)
            lock = FileLock(os.path.join(path, '.lock'), timeout=self.lock_timeout)
            self._locks[path] = lock
        return lock

    def _read(self, tournament_id, filename: str):
        path = self._file_path(tournament_id, filename)
        if not os.path.exists(path):
            return None
        with open(path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f)

    def _write(self, tournament_id, filename: str, data) -> None:
        path = self._file_path(tournament_id, filename)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    # Participants

    def load_participants(self, tournament_id) -> List[Participant]:
        data = self._read(tournament_id, 'participants.yaml')
        if not data:
            return []
        return [Participant.from_dict(p) for p in data.get('participants', [])]

    def save_participants(self, tournament_id, participants: List[Participant]) -> None:
        with self.lock(tournament_id):
            self._write(tournament_id, 'participants.yaml',
                        {'participants': [p.to_dict() for p in participants]})

    # Matches

    def load_matches(self, tournament_id) -> List[Dict]:
        """Stored match rows, in file order."""
        data = self._read(tournament_id, 'matches.yaml')
        if not data:
            return []
        return data.get('matches', [])

    def has_bracket(self, tournament_id) -> bool:
        return bool(self.load_matches(tournament_id))

    def insert_matches(self, tournament_id, matches: List[MatchSlot]) -> None:
        """Bulk insert the rows of a freshly generated bracket."""
        with self.lock(tournament_id):
            if self.load_matches(tournament_id):
                raise BracketExistsError(tournament_id)
            self._write(tournament_id, 'matches.yaml', {'matches': [m.to_dict() for m in matches]})
        logger.info('Stored %d match rows for tournament %s', len(matches), tournament_id)

    def update_match(self, match: MatchSlot, expected_status: Optional[str] = None) -> bool:
        """
        Replace the stored row keyed by (round, match_number).

        With ``expected_status`` the write only happens when the stored row
        still has that status; returns False otherwise. Raises BracketError
        when no such row exists.
        """
        return not self.update_matches(match.tournament_id, [(match, expected_status)])

    def update_matches(self, tournament_id, updates: List[Tuple[MatchSlot, Optional[str]]]) -> List[MatchSlot]:
        """
        Replace several rows in one write of ``matches.yaml``.

        ``updates`` pairs each new row with the status its stored row must
        still have (None skips the check). If any check fails nothing is
        written and the conflicting rows are returned; an empty list means
        every row was written.
        """
        with self.lock(tournament_id):
            rows = self.load_matches(tournament_id)
            index = {(row['round'], row['match_number']): i for i, row in enumerate(rows)}

            conflicts = []
            for match, expected_status in updates:
                i = index.get((match.round, match.match_number))
                if i is None:
                    raise BracketError(f"No stored row for {match.match_code} in tournament {tournament_id}")
                if expected_status is not None and rows[i].get('status') != expected_status:
                    logger.debug('Skipped update of %s: status is %s, expected %s',
                                 match.match_code, rows[i].get('status'), expected_status)
                    conflicts.append(match)
            if conflicts:
                return conflicts

            for match, _ in updates:
                rows[index[(match.round, match.match_number)]] = match.to_dict()
            self._write(tournament_id, 'matches.yaml', {'matches': rows})
        return []

    def delete_bracket(self, tournament_id) -> bool:
        with self.lock(tournament_id):
            path = self._file_path(tournament_id, 'matches.yaml')
            if not os.path.exists(path):
                return False
            os.remove(path)
        logger.info('Deleted bracket for tournament %s', tournament_id)
        return True

    # Tournament record

    def load_tournament(self, tournament_id) -> Dict:
        data = self._read(tournament_id, 'tournament.yaml')
        if not data:
            return {'id': str(tournament_id), 'status': 'open', 'winner_id': None}
        return data

    def update_tournament(self, tournament_id, **fields) -> Dict:
        with self.lock(tournament_id):
            record = self.load_tournament(tournament_id)
            record.update(fields)
            self._write(tournament_id, 'tournament.yaml', record)
        return record
