import os
import sys
import pytest

# Ensure the backend root (containing the `siege` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from siege import create_app, socketio
from siege.services.games import GameRoom

NAMESPACE = '/ws'


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = ['*']
    SOCKETIO_NAMESPACE = NAMESPACE
    ROOM_CODE_LENGTH = 6
    HOST = 'localhost'
    PORT = 3000


class EmitRecorder:
    """Stands in for the transport: remembers every (event, payload, sid)."""

    def __init__(self):
        self.sent = []

    def __call__(self, event, payload, sid):
        self.sent.append((event, payload, sid))

    def to(self, sid):
        return [(event, payload) for event, payload, target in self.sent if target == sid]

    def events(self, sid):
        return [event for event, _ in self.to(sid)]


@pytest.fixture()
def recorder():
    return EmitRecorder()


@pytest.fixture()
def room(recorder):
    return GameRoom('room_test', recorder)


@pytest.fixture()
def playing_room(room):
    room.add_player('sid-a')
    room.add_player('sid-d')
    return room


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


def _connect(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace=NAMESPACE
    )
    # The greeting carries the connection id the server knows us by
    greeting = [pkt for pkt in test_client.get_received(NAMESPACE) if pkt['name'] == 'connected']
    test_client.player_id = greeting[0]['args'][0]['playerId']
    return test_client


@pytest.fixture()
def connect(flask_app):
    """Factory for extra Socket.IO clients; all are disconnected afterwards."""
    clients = []

    def _factory():
        c = _connect(flask_app)
        clients.append(c)
        return c

    yield _factory
    for c in clients:
        try:
            if c.is_connected(NAMESPACE):
                c.disconnect(namespace=NAMESPACE)
        except RuntimeError:
            pass


@pytest.fixture()
def sio_client(connect):
    return connect()
