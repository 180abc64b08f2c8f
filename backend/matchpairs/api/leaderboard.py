from flask import Blueprint, jsonify, request
from matchpairs.errors import InvalidRequest
from matchpairs.services.games import engine, leaderboard as ranker
from .games import _json_body, notify_leaderboard


leaderboard = Blueprint('leaderboard', __name__)


def _int_arg(name, default=None):
    raw = request.args.get(name)
    if raw is None or raw == '':
        return default
    try:
        return int(raw)
    except ValueError:
        raise InvalidRequest(f'{name} must be an integer')


@leaderboard.route('', methods=['GET'])
def list_leaderboard():
    page = _int_arg('page', 1)
    page_size = _int_arg('page_size')
    as_of = _int_arg('as_of')
    return jsonify(ranker.list_page(page, page_size=page_size, as_of=as_of))


# Single-endpoint command surface used by the original web client:
# {"action": "...", "sessionId": ..., ...}
@leaderboard.route('', methods=['POST'])
def dispatch_action():
    data = _json_body()
    action = data.get('action')
    session_id = data.get('sessionId')

    if action == 'initializeGame':
        created = engine.new_session()
        return jsonify({
            'sessionId': created['session_id'],
            'cardCount': created['card_count'],
            'deckToken': created['deck_token'],
        })

    if action == 'makeMove':
        if data.get('cardId') is None:
            raise InvalidRequest('cardId is required')
        result = engine.submit_move(session_id, data['cardId'])
        return jsonify({
            'gameState': {
                'flippedCards': [card['position'] for card in result['revealed']],
                'revealed': result['revealed'],
                'matchedPairs': result['matched_count'],
                'moves': result['move_count'],
                'completed': result['completed'],
                'matchedCardIds': result['matched'],
            },
            'isComplete': result['completed'],
        })

    if action == 'completeGame':
        if not session_id or data.get('endTime') is None or data.get('moves') is None:
            raise InvalidRequest('Invalid request body')
        return jsonify(engine.finalize_completion(session_id, data['endTime'], data['moves']))

    if action == 'submitScore':
        if not session_id or not data.get('name'):
            raise InvalidRequest('Missing required fields')
        entry = ranker.submit(session_id, data.get('name'), data.get('country'))
        notify_leaderboard(entry)
        return jsonify({'message': 'Score submitted successfully', 'rank': entry.rank}), 201

    raise InvalidRequest('Invalid action')
