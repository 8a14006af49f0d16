"""
Flask JSON API for single elimination brackets.
"""
import os
from flask import Flask, request, jsonify

from bracket.errors import (
    BracketError,
    BracketExistsError,
    MatchNotFound,
    MatchAlreadyComplete,
)
from bracket.models import participants_from_entries
from bracket.service import BracketService
from bracket.store import MatchStore

app = Flask(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('BRACKET_DATA_DIR', os.path.join(BASE_DIR, 'data'))

app.config['BRACKET_DATA_DIR'] = DATA_DIR

# Engine errors that mean the stored bracket and the request disagree
_CONFLICT_ERRORS = (BracketExistsError, MatchAlreadyComplete)


def get_service() -> BracketService:
    """Service bound to the configured data directory."""
    return BracketService(MatchStore(app.config['BRACKET_DATA_DIR']))


def _error(message: str, status: int):
    return jsonify({'success': False, 'error': message}), status


def _error_status(error: BracketError) -> int:
    if isinstance(error, MatchNotFound):
        return 404
    if isinstance(error, _CONFLICT_ERRORS):
        return 409
    return 400


def _is_number(value) -> bool:
    # JSON true/false arrive as bool, which is an int subclass
    return isinstance(value, int) and not isinstance(value, bool)


@app.errorhandler(BracketError)
def handle_bracket_error(error):
    status = _error_status(error)
    if isinstance(error, (MatchNotFound, MatchAlreadyComplete)):
        app.logger.error(f'Bracket state mismatch: {error}')
    return _error(error.message, status)


@app.route('/api/tournaments/<tournament_id>/participants', methods=['GET'])
def api_get_participants(tournament_id):
    participants = get_service().get_participants(tournament_id)
    return jsonify({'success': True, 'participants': [p.to_dict() for p in participants]})


@app.route('/api/tournaments/<tournament_id>/participants', methods=['POST'])
def api_set_participants(tournament_id):
    """Replace the participant list. Body: {"participants": [name | {id, display_name, seed}]}."""
    data = request.get_json(silent=True)
    if not data or not isinstance(data.get('participants'), list):
        return _error('participants must be a list', 400)

    try:
        participants = participants_from_entries(data['participants'], tournament_id)
    except (ValueError, TypeError) as e:
        return _error(str(e), 400)

    get_service().set_participants(tournament_id, participants)
    return jsonify({'success': True, 'count': len(participants)})


@app.route('/api/tournaments/<tournament_id>/bracket', methods=['POST'])
def api_generate_bracket(tournament_id):
    bracket = get_service().generate(tournament_id)
    app.logger.info(f'Generated bracket for {tournament_id}')
    return jsonify({'success': True, 'bracket': bracket.to_dict()}), 201


@app.route('/api/tournaments/<tournament_id>/bracket', methods=['GET'])
def api_get_bracket(tournament_id):
    bracket = get_service().get_bracket(tournament_id)
    if bracket is None:
        return _error('Bracket not found', 404)
    return jsonify({'success': True, 'bracket': bracket.to_dict()})


@app.route('/api/tournaments/<tournament_id>/bracket', methods=['DELETE'])
def api_reset_bracket(tournament_id):
    deleted = get_service().reset(tournament_id)
    return jsonify({'success': True, 'deleted': deleted})


@app.route('/api/tournaments/<tournament_id>/results', methods=['POST'])
def api_report_result(tournament_id):
    """
    Record a match result.

    Requires: round, match_number, winner_id in JSON body;
    player1_score and player2_score default to 0.
    """
    data = request.get_json(silent=True)
    if not data:
        return _error('No data provided', 400)

    round_number = data.get('round')
    match_number = data.get('match_number')
    winner_id = data.get('winner_id')
    if not _is_number(round_number) or not _is_number(match_number) or not winner_id:
        return _error('Missing required fields', 400)

    bracket = get_service().report_result(
        tournament_id,
        round_number,
        match_number,
        str(winner_id),
        data.get('player1_score', 0),
        data.get('player2_score', 0),
    )

    return jsonify({
        'success': True,
        'bracket': bracket.to_dict(),
        'champion': bracket.champion.to_dict() if bracket.champion else None,
    })


@app.route('/api/tournaments/<tournament_id>/stats', methods=['GET'])
def api_get_stats(tournament_id):
    stats = get_service().get_stats(tournament_id)
    if stats is None:
        return _error('Bracket not found', 404)
    return jsonify({'success': True, 'stats': stats})


@app.route('/api/tournaments/<tournament_id>', methods=['GET'])
def api_get_tournament(tournament_id):
    record = get_service().store.load_tournament(tournament_id)
    return jsonify({'success': True, 'tournament': record})


if __name__ == '__main__':
    app.run(debug=os.environ.get('FLASK_DEBUG') == '1')
