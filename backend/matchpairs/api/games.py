from flask import Blueprint, jsonify, request
from matchpairs import socketio
from matchpairs.errors import InvalidRequest
from matchpairs.services.games import engine, leaderboard as ranker


games = Blueprint('games', __name__)


def _json_body():
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidRequest('Request body must be a JSON object')
    return data


def notify_leaderboard(entry):
    socketio.emit(
        'leaderboard_update',
        {'entry': entry.to_dict()},
        to='leaderboard',
        namespace='/ws',
    )


@games.route('/session', methods=['POST'])
def create_session():
    return jsonify(engine.new_session()), 201


@games.route('/session/<string:session_id>', methods=['GET'])
def get_session(session_id):
    return jsonify(engine.get_progress(session_id))


@games.route('/session/<string:session_id>/move', methods=['POST'])
def submit_move(session_id):
    data = _json_body()
    if 'position' not in data:
        raise InvalidRequest('position is required')
    return jsonify(engine.submit_move(session_id, data['position']))


@games.route('/session/<string:session_id>/complete', methods=['POST'])
def complete_game(session_id):
    data = _json_body()
    if data.get('end_time') is None or data.get('moves') is None:
        raise InvalidRequest('end_time and moves are required')
    return jsonify(engine.finalize_completion(session_id, data['end_time'], data['moves']))


@games.route('/session/<string:session_id>/score', methods=['POST'])
def submit_score(session_id):
    data = _json_body()
    entry = ranker.submit(session_id, data.get('name'), data.get('country'))
    notify_leaderboard(entry)
    return jsonify({'accepted': True, 'entry': entry.to_dict()}), 201
