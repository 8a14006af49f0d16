"""
Shared pytest fixtures for bracket engine tests.

Running tests:
    pytest tests/
"""
import pytest
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from bracket.models import Participant


def build_participants(names, tournament_id='t1', seeds=None):
    """Participants named after ``names``; ids equal the names."""
    seeds = seeds or [None] * len(names)
    return [Participant(id=name, tournament_id=tournament_id, user_id=f'user-{name}',
                        seed=seed, display_name=name)
            for name, seed in zip(names, seeds)]


@pytest.fixture
def four_players():
    """Seeds 1-4 by input order: A, B, C, D."""
    return build_participants(['A', 'B', 'C', 'D'])


@pytest.fixture
def three_players():
    return build_participants(['A', 'B', 'C'])


@pytest.fixture
def client(tmp_path):
    """Flask test client writing to a temporary data directory."""
    from app import app
    app.config['TESTING'] = True
    original_dir = app.config['BRACKET_DATA_DIR']
    app.config['BRACKET_DATA_DIR'] = str(tmp_path)
    with app.test_client() as client:
        yield client
    app.config['BRACKET_DATA_DIR'] = original_dir


@pytest.fixture
def store(tmp_path):
    from bracket.store import MatchStore
    return MatchStore(str(tmp_path))


@pytest.fixture
def service(store):
    from bracket.service import BracketService
    return BracketService(store)
