import os
import sys
import pytest

# Ensure the backend root (containing the `dice_duel` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from dice_duel import create_app, socketio
from dice_duel.services.sessions import SessionEngine, SessionRegistry


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = ['http://localhost:5173']
    SOCKETIO_NAMESPACE = '/'
    SESSION_CODE_LENGTH = 6
    SESSION_CODE_ATTEMPTS = 32
    NOTIFY_OPPONENT_LEFT = False
    LOG_LEVEL = 'DEBUG'


class ScriptedRoller:
    """Hands out predetermined dice values in order."""

    def __init__(self, values):
        self._values = list(values)

    def __call__(self):
        assert self._values, 'scripted roller ran out of values'
        return self._values.pop(0)


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def app_engine(flask_app):
    return flask_app.extensions['dice_duel']


@pytest.fixture()
def script_rolls(app_engine):
    def _script(*values):
        app_engine.roller = ScriptedRoller(values)
    return _script


@pytest.fixture()
def engine():
    return SessionEngine(SessionRegistry())


def connect_client(application):
    """Connect a Socket.IO test client and return it with its connection id."""
    test_client = socketio.test_client(application, flask_test_client=application.test_client())
    received = test_client.get_received()
    sid = next(pkt['args'][0]['id'] for pkt in received if pkt['name'] == 'connected')
    return test_client, sid


@pytest.fixture()
def sio_clients(flask_app):
    opened = []

    def _open():
        test_client, sid = connect_client(flask_app)
        opened.append(test_client)
        return test_client, sid

    yield _open
    for test_client in opened:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass
