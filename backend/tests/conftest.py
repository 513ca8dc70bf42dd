import os
import sys

import pytest

# Ensure the backend root (containing the `trivia` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from trivia.game.errors import ProviderFailure
from trivia.game.models import Question
from trivia.server import create_app


class TestConfig:
    TESTING = True
    SECRET_KEY = 'test-secret'
    CORS_ORIGINS = '*'
    TRUST_PROXY_HEADERS = False
    SOCKETIO_ASYNC_MODE = 'threading'
    LOG_LEVEL = 'WARNING'
    QUESTION_API_URL = 'http://questions.invalid/api'
    QUESTION_TIMEOUT_SEC = 1.0
    QUESTIONS_FILE = ''
    NAME_MAX_LENGTH = 20
    ROOM_MAX_LENGTH = 32


PARIS = Question(
    question='What is the capital of France?',
    candidate_answers=('London', 'Paris', 'Rome', 'Berlin'),
    correct_answer='Paris',
)


class FakeProvider:
    """Serves queued questions; raises ProviderFailure when told to."""

    def __init__(self, *questions):
        self.questions = list(questions) or [PARIS]
        self.calls = 0
        self.fail = False
        self.on_fetch = None

    def fetch_question(self):
        self.calls += 1
        if self.on_fetch is not None:
            self.on_fetch()
        if self.fail:
            raise ProviderFailure('The question service has no question right now.')
        return self.questions[(self.calls - 1) % len(self.questions)]


class RecordingTransport:
    def __init__(self):
        self.sent = []
        self.rooms = {}

    def broadcast_to_room(self, room, event, payload):
        self.sent.append(('room', room, None, event, payload))

    def broadcast_to_room_except(self, connection_id, room, event, payload):
        self.sent.append(('room_except', room, connection_id, event, payload))

    def send_to_connection(self, connection_id, event, payload):
        self.sent.append(('direct', None, connection_id, event, payload))

    def add_to_room(self, connection_id, room):
        self.rooms.setdefault(room, set()).add(connection_id)

    def remove_from_room(self, connection_id, room):
        self.rooms.get(room, set()).discard(connection_id)

    def events(self, name):
        return [s for s in self.sent if s[3] == name]


@pytest.fixture()
def provider():
    return FakeProvider()


@pytest.fixture()
def transport():
    return RecordingTransport()


@pytest.fixture()
def app_and_socketio(provider):
    return create_app(TestConfig, question_provider=provider)


@pytest.fixture()
def flask_app(app_and_socketio):
    return app_and_socketio[0]


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def connect(app_and_socketio):
    flask_app, socketio = app_and_socketio
    clients = []

    def _connect():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(test_client)
        return test_client

    yield _connect
    for c in clients:
        try:
            if c.is_connected():
                c.disconnect()
        except Exception:
            pass
