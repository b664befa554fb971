import itertools
import os
import sys
import pytest

# Ensure the backend root (containing the `quizroom` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from quizroom import create_app, socketio
from quizroom.services.quiz import GameStore

T0 = 1_000_000


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = ['http://localhost:5173']
    QUESTION_DURATION_MS = 120000
    SCORING_TIME_LIMIT_MS = 120000
    SCORING_MAX_POINTS = 120
    ROUND_TICK_INTERVAL_SEC = 1


class FakeClock:
    def __init__(self, now_ms=T0):
        self.now_ms = now_ms

    def __call__(self):
        return self.now_ms

    def advance(self, ms):
        self.now_ms += ms


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def store(clock):
    counter = itertools.count(1)
    return GameStore(id_factory=lambda: f'p_{next(counter)}', clock=clock)


@pytest.fixture()
def flask_app(clock):
    application = create_app(TestConfig)
    application.extensions['quizroom']['store'].clock = clock
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app):
    clients = []

    def _make():
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
            namespace='/ws'
        )
        clients.append(test_client)
        return test_client

    yield _make
    for test_client in clients:
        if test_client.is_connected('/ws'):
            test_client.disconnect(namespace='/ws')


@pytest.fixture()
def sio_client(sio_factory):
    return sio_factory()


QUESTIONS = [
    {'title': 'Capital of France?', 'options': ['Berlin', 'Paris', 'Rome', 'Madrid'], 'correctOptionIndex': 1},
    {'title': '2 + 2 = ?', 'options': ['3', '4', '5', '22'], 'correctOptionIndex': 1},
    {'title': 'Largest planet?', 'options': ['Mars', 'Venus', 'Jupiter', 'Earth'], 'correctOptionIndex': 2},
]


@pytest.fixture()
def questions():
    return [dict(q, options=list(q['options'])) for q in QUESTIONS]


def event_payloads(received, name):
    """Payloads of every enveloped `name` event in a get_received() batch."""
    return [pkt['args'][0]['payload'] for pkt in received if pkt['name'] == name]


def join(test_client, room_id, username):
    test_client.emit('room.join', {'roomId': room_id, 'username': username}, namespace='/ws')
    received = test_client.get_received('/ws')
    acks = event_payloads(received, 'room.join_ack')
    return acks[0] if acks else None
