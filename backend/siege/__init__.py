from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

from siege.services.games import RoomRegistry

socketio = SocketIO(async_mode=None)
rooms = RoomRegistry()


def _allowed_origins(config):
    origins = config.get('CORS_ORIGINS') or '*'
    if origins == '*' or '*' in origins:
        return '*'
    return list(origins)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = _allowed_origins(flask_app.config)
    CORS(flask_app, supports_credentials=allowed_origins != '*', origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/ws')

    def _emit_to(event, payload, sid):
        socketio.emit(event, payload, to=sid, namespace=namespace)

    # Rooms hold connection ids only; delivery goes through the transport
    rooms.init_app(flask_app, emit=_emit_to)

    from siege.main import main
    flask_app.register_blueprint(main)

    from siege.api.rooms import api_rooms
    flask_app.register_blueprint(api_rooms, url_prefix='/api/rooms')

    from siege.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace)

    flask_app.logger.info(f"[startup] namespace={namespace} origins={allowed_origins}")
    return flask_app
