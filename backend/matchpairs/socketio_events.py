from flask_socketio import join_room, leave_room, emit
from matchpairs import socketio
from matchpairs.services.games import leaderboard as ranker

LEADERBOARD_ROOM = 'leaderboard'


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_join_leaderboard(data=None):
    """Subscribe to live leaderboard updates; replies with the first page."""
    join_room(LEADERBOARD_ROOM)
    page_size = data.get('page_size') if isinstance(data, dict) else None
    emit('joined', {'room': LEADERBOARD_ROOM})
    emit('leaderboard_snapshot', ranker.list_page(1, page_size=page_size if isinstance(page_size, int) else None))


def handle_leave_leaderboard(data=None):
    leave_room(LEADERBOARD_ROOM)
    emit('left', {'room': LEADERBOARD_ROOM})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        socketio.on_event('connect', handle_connect, namespace=namespace)
        socketio.on_event('join_leaderboard', handle_join_leaderboard, namespace=namespace)
        socketio.on_event('leave_leaderboard', handle_leave_leaderboard, namespace=namespace)
        socketio.on_event('ping', handle_ping, namespace=namespace)
