import os
import sys
import pytest

# Ensure the backend root (containing the `matchpairs` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from config import Config
from matchpairs import create_app, db, socketio


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CARD_SYMBOLS = ['A', 'B', 'C', 'D']
    MIN_MOVE_INTERVAL_MS = 500
    MIN_COMPLETION_MS = 5000
    SESSION_IDLE_TTL_SEC = 1800
    SESSION_SWEEP_INTERVAL_SEC = 0
    LEADERBOARD_PAGE_SIZE = 10
    CORS_ORIGINS = '*'


class FakeClock:
    def __init__(self, start=1_700_000_000_000):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms
        return self.now


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import matchpairs.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def clock(monkeypatch):
    fake = FakeClock()
    monkeypatch.setattr('matchpairs.services.games.clock.now_ms', fake)
    return fake


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


PAIRED_DECK = ['A', 'A', 'B', 'B', 'C', 'C', 'D', 'D']


@pytest.fixture()
def make_session(flask_app, clock):
    """Persist a session with a known deck created at the fake clock's time."""
    from matchpairs.services.games import store

    def _make(cards=None):
        return store.create(list(cards or PAIRED_DECK), now=clock.now).id

    return _make


@pytest.fixture()
def play_to_completion(clock):
    """Flip every pair of a PAIRED_DECK-style session in order."""
    from matchpairs.services.games import engine

    def _play(session_id, card_count=8, step_ms=600):
        result = None
        for position in range(card_count):
            clock.advance(step_ms)
            result = engine.submit_move(session_id, position)
        return result

    return _play


@pytest.fixture()
def file_app(tmp_path, clock):
    """App on a file-backed SQLite database so several threads can write."""

    class FileConfig(TestConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'matchpairs.sqlite3'}"
        SQLALCHEMY_ENGINE_OPTIONS = {'connect_args': {'check_same_thread': False, 'timeout': 30}}
        MIN_MOVE_INTERVAL_MS = 0

    application = create_app(FileConfig)
    with application.app_context():
        import matchpairs.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()
