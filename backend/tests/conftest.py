import os
import sys
import pytest

# Ensure the backend root (containing the `fluff` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from fluff import create_app, socketio
from fluff.config import Config
from fluff.services.games.state import GameState


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret'
    DEFAULT_HAND_SIZE = 5
    MAX_HAND_SIZE = 10
    MIN_PLAYERS = 2
    AUTO_CREATE_ROOMS = True
    DISCORD_WEBHOOK_URL = None


class ScriptedRoller:
    """Dice roller that hands out prepared hands, then falls back to all sixes."""

    def __init__(self, hands=None):
        self.hands = list(hands or [])
        self.calls = []

    def roll(self, n):
        self.calls.append(n)
        if self.hands:
            return list(self.hands.pop(0))[:n]
        return [6] * n


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
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
    for c in clients:
        try:
            if c.is_connected('/ws'):
                c.disconnect(namespace='/ws')
        except Exception:
            pass


@pytest.fixture()
def roller():
    return ScriptedRoller()


@pytest.fixture()
def make_game(roller):
    def _make(*names, hand_size=5):
        game = GameState('room1', default_hand_size=hand_size, roller=roller)
        for name in names:
            game.join(name.lower(), name)
        return game
    return _make
