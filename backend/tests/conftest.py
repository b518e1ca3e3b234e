import os
import sys
import pytest

# Ensure the backend root (containing the `chessnd` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from chessnd import create_app, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = ['http://localhost:3000']
    SOCKETIO_NAMESPACE = '/'
    NOTIFY_OUT_OF_TURN = False
    LOG_LEVEL = 'DEBUG'
    ROOM_ID_LENGTH = 8


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def registry(flask_app):
    return flask_app.extensions['chessnd.registry']


@pytest.fixture()
def sio_factory(flask_app):
    """Open Socket.IO test clients; every client is disconnected on teardown."""
    opened = []

    def _open():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        opened.append(test_client)
        return test_client

    yield _open
    for test_client in opened:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass


def _drain(test_client):
    """Received packets as (name, first_arg) pairs."""
    return [(pkt['name'], pkt['args'][0] if pkt['args'] else None) for pkt in test_client.get_received()]


@pytest.fixture()
def drain():
    return _drain
