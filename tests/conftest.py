import pytest

from pac_maze import Grid
from pac_session import PLAYING, Session
from pac_settings import DEFAULT_CONFIG


@pytest.fixture
def config():
    return DEFAULT_CONFIG.copy()


@pytest.fixture
def grid():
    return Grid()


@pytest.fixture
def session(config):
    s = Session(config, seed=7)
    s.start_new_game(3)
    s.drain_events()
    return s


@pytest.fixture
def playing(session):
    session.state = PLAYING
    session.player.dir = (0, 0)
    session.player.due = (0, 0)
    return session


@pytest.fixture
def prefs_path(tmp_path):
    return str(tmp_path / "prefs.json")
