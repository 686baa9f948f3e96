"""Schema creation for the trade table."""

from sqlalchemy import inspect
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from tradejournal.database import create_db_and_tables


def _memory_engine():
    return create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)


def test_creates_trade_table():
    engine = _memory_engine()
    create_db_and_tables(engine)
    columns = {col["name"] for col in inspect(engine).get_columns("trade")}
    assert {"lot_size", "entry_price", "exit_price", "stop_loss", "take_profit", "notes"} <= columns


def test_create_is_repeatable():
    engine = _memory_engine()
    create_db_and_tables(engine)
    create_db_and_tables(engine)
    assert inspect(engine).get_table_names() == ["trade"]
