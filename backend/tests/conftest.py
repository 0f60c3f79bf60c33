import os
import sys
import pytest

# Ensure the backend root (containing the `brushrush` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from brushrush.config import Config
from brushrush.server import create_app


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret'
    SOCKETIO_ASYNC_MODE = 'threading'
    ENABLE_BACKGROUND_TASKS = False
    HIDE_WORD_FROM_GUESSERS = False
    DEFAULT_ROUNDS = 3
    DEFAULT_DRAW_TIME_SEC = 60
    DEFAULT_MAX_PLAYERS = 8


class Seat:
    """A connected test client plus everything it has received so far."""

    def __init__(self, client):
        self.client = client
        self.inbox = []
        self.sid = None

    def emit(self, event, payload=None):
        if payload is None:
            self.client.emit(event)
        else:
            self.client.emit(event, payload)

    def drain(self):
        self.inbox.extend(self.client.get_received())
        return self.inbox

    def events(self, name):
        self.drain()
        return [pkt['args'][0] if pkt['args'] else None for pkt in self.inbox if pkt['name'] == name]

    def names(self):
        return [pkt['name'] for pkt in self.drain()]

    def clear(self):
        self.drain()
        self.inbox = []


@pytest.fixture()
def app_bundle():
    return create_app(TestConfig)


@pytest.fixture()
def flask_app(app_bundle):
    return app_bundle[0]


@pytest.fixture()
def socketio(app_bundle):
    return app_bundle[1]


@pytest.fixture()
def directory(flask_app):
    return flask_app.extensions['brushrush']['directory']


@pytest.fixture()
def scheduler(flask_app):
    return flask_app.extensions['brushrush']['scheduler']


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def connect(flask_app, socketio):
    clients = []

    def _connect():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(test_client)
        return Seat(test_client)

    yield _connect

    for test_client in clients:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass


@pytest.fixture()
def open_room(connect):
    """Create a room hosted by a new client and seat `guests` more clients."""

    def _open(guests=1, room_data=None, host_name='Host'):
        host = connect()
        payload = {'roomData': {'name': 'Test Room', **(room_data or {})}, 'player': {'name': host_name}}
        host.emit('create-room', payload)
        created = host.events('room-created')[-1]
        room_id = created['roomId']
        host.sid = created['room']['players'][0]['id']

        seated = []
        for i in range(guests):
            guest = connect()
            guest.emit('join-room', {
                'roomId': room_id,
                'player': {'name': f'Guest{i + 1}'},
                'password': (room_data or {}).get('password'),
            })
            joined = guest.events('room-joined')[-1]
            guest.sid = joined['room']['players'][-1]['id']
            seated.append(guest)

        host.clear()
        for guest in seated:
            guest.clear()
        return room_id, host, seated

    return _open
