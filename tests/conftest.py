import os
import sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, ROOT)

from backend import Backend
from shoplist.db_helpers import build_db_url


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def db_url(tmp_path):
    return build_db_url(str(tmp_path / "shopping.db"))


@pytest.fixture
def backend(db_url):
    b = Backend(db_url=db_url, pin="", default_list_name="Lista Principal")
    yield b
    b.close()


@pytest.fixture
def pin_backend(db_url):
    b = Backend(db_url=db_url, pin="4242")
    yield b
    b.close()
