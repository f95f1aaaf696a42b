from flask import Flask, current_app
from flask_cors import CORS
from flask_socketio import SocketIO

from fluff.config import Config
from fluff.services.games import RoomRegistry

socketio = SocketIO(async_mode=None)


def get_registry() -> RoomRegistry:
    return current_app.extensions['room_registry']


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    origins = flask_app.config.get('CORS_ORIGINS', [])
    CORS(flask_app, origins=origins)

    # One registry per app: rooms live in process memory only
    flask_app.extensions['room_registry'] = RoomRegistry(
        default_hand_size=flask_app.config['DEFAULT_HAND_SIZE'],
        min_players=flask_app.config['MIN_PLAYERS'],
        room_id_length=flask_app.config['ROOM_ID_LENGTH'],
    )

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=origins)

    from fluff.main import main
    flask_app.register_blueprint(main)

    from fluff.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/games')

    from fluff.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=flask_app.config['SOCKETIO_NAMESPACE'])

    return flask_app
