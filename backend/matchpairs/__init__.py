from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ORIGINS') or '*'

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, origins=allowed_origins)

    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from matchpairs.main import main
    flask_app.register_blueprint(main)

    from matchpairs.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/games')

    from matchpairs.api.leaderboard import leaderboard
    flask_app.register_blueprint(leaderboard, url_prefix='/api/leaderboard')

    from matchpairs.errors import GameError, RateLimited

    @flask_app.errorhandler(GameError)
    def handle_game_error(exc):
        response = jsonify(exc.to_dict())
        response.status_code = exc.status
        if isinstance(exc, RateLimited):
            response.headers['Retry-After'] = str(exc.retry_after_sec)
        return response

    from matchpairs.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    from matchpairs.services.games.sweeper import start_sweeper, purge_expired_sessions

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates the database tables."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            print('Database has been reset!')

    @click.command('purge-sessions')
    def purge_sessions_command():
        """Deletes idle unfinished sessions and old retired ones."""
        with flask_app.app_context():
            purged = purge_expired_sessions()
            print(f'Purged {purged} expired session(s).')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(purge_sessions_command)

    start_sweeper(flask_app)

    return flask_app
