# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from bakery_ledger.config import Settings
from bakery_ledger.database import LedgerDB
from bakery_ledger.main import create_app


class TickingClock:
    """Deterministic nanosecond clock: every reading is ``step`` later than the last."""

    def __init__(self, start: int = 1_000_000, step: int = 1_000):
        self.now = start
        self.step = step

    def __call__(self) -> int:
        value = self.now
        self.now += self.step
        return value


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "ledger.db")


@pytest.fixture
def ledger(db_path):
    db = LedgerDB.open(db_path, clock=TickingClock())
    yield db
    db.close()


@pytest.fixture
def app(db_path):
    return create_app(Settings(database_path=db_path, log_level="WARNING"))


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
