import threading

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []

    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One in-memory store per app; every command runs under the lock
    from quizroom.services.quiz import GameStore
    flask_app.extensions['quizroom'] = {
        'store': GameStore(
            question_duration_ms=flask_app.config.get('QUESTION_DURATION_MS', 120000),
            max_points=flask_app.config.get('SCORING_MAX_POINTS', 120),
            time_limit_ms=flask_app.config.get('SCORING_TIME_LIMIT_MS', 120000),
        ),
        'lock': threading.RLock(),
        'timers': set(),
    }

    # Import and register blueprints here
    from quizroom.main import main
    flask_app.register_blueprint(main)

    from quizroom.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    # Register Socket.IO event handlers
    from quizroom.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    @click.command('quiz-sim')
    @click.option('--room', 'room_id', default='room_debug', help='Room id to simulate in.')
    def quiz_sim_command(room_id):
        """Plays a scripted host + two player game and prints every step."""
        from quizroom.simulation import run_simulation
        for line in run_simulation(flask_app.config, room_id):
            click.echo(line)

    flask_app.cli.add_command(quiz_sim_command)

    return flask_app
