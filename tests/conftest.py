"""Shared fixtures for the trade journal test suite."""

import os

# Must be set before tradejournal.config is imported.
os.environ.setdefault("TJ_DATABASE_URL", "sqlite://")

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from tradejournal.database import create_db_and_tables, get_session
from tradejournal.engine import Trade
from tradejournal.main import app

T0 = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Raw records and canonical trades
# ---------------------------------------------------------------------------

def make_record(**overrides) -> dict:
    """A datastore-shaped (snake_case) trade row."""
    record = {
        "id": "t-1",
        "trade_pair": "EUR/USD",
        "trade_type": "buy",
        "entry_price": 1.0850,
        "exit_price": 1.0900,
        "lot_size": 10,
        "timeframe": "1h",
        "status": "closed",
        "notes": None,
        "created_at": "2024-03-01T09:30:00Z",
        "updated_at": "2024-03-01T10:30:00Z",
    }
    record.update(overrides)
    return record


def make_trade(
    entry: str,
    exit: str | None,
    size: str = "1",
    direction: str = "long",
    status: str = "closed",
    minutes: int = 0,
    **extra,
) -> Trade:
    return Trade(
        id=extra.pop("id", f"trade-{entry}-{exit}-{minutes}"),
        instrument=extra.pop("instrument", "EUR/USD"),
        direction=direction,
        entry_price=Decimal(entry),
        exit_price=None if exit is None else Decimal(exit),
        position_size=Decimal(size),
        status=status,
        created_at=T0 + timedelta(minutes=minutes),
        **extra,
    )


# ---------------------------------------------------------------------------
# Database / API
# ---------------------------------------------------------------------------

@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(db_engine):
    with Session(db_engine) as session:
        yield session


@pytest.fixture
def client(db_engine):
    def _override_session():
        with Session(db_engine) as session:
            yield session

    app.dependency_overrides[get_session] = _override_session
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
