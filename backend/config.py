import os

DEFAULT_SYMBOLS = "🐶,🐱,🐭,🐹,🐰,🦊,🐻,🐼"

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///matchpairs.sqlite3'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Symbols dealt into every new deck (each appears twice)
    CARD_SYMBOLS = [s.strip() for s in os.environ.get('CARD_SYMBOLS', DEFAULT_SYMBOLS).split(',') if s.strip()]
    # Anti-cheat thresholds (ms)
    MIN_MOVE_INTERVAL_MS = int(os.environ.get('MIN_MOVE_INTERVAL_MS', '500'))
    MIN_COMPLETION_MS = int(os.environ.get('MIN_COMPLETION_MS', '5000'))
    # Unfinished sessions idle longer than this are purged (sec)
    SESSION_IDLE_TTL_SEC = int(os.environ.get('SESSION_IDLE_TTL_SEC', '1800'))
    # Optional: background sweeper period (sec). 0 disables.
    SESSION_SWEEP_INTERVAL_SEC = int(os.environ.get('SESSION_SWEEP_INTERVAL_SEC', '0'))
    STORE_UPDATE_RETRIES = int(os.environ.get('STORE_UPDATE_RETRIES', '3'))
    # Leaderboard
    LEADERBOARD_PAGE_SIZE = int(os.environ.get('LEADERBOARD_PAGE_SIZE', '10'))
    LEADERBOARD_MAX_PAGE_SIZE = int(os.environ.get('LEADERBOARD_MAX_PAGE_SIZE', '100'))
    NAME_MAX_LENGTH = int(os.environ.get('NAME_MAX_LENGTH', '32'))
    DEFAULT_COUNTRY = os.environ.get('DEFAULT_COUNTRY', '🌎')
    CORS_ORIGINS = [
        o.strip() for o in os.environ.get(
            'CORS_ORIGINS',
            'http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173',
        ).split(',') if o.strip()
    ]
