"""TradeRecord model — one journal entry as stored by the write path."""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlmodel import SQLModel, Field


class TradeRecord(SQLModel, table=True):
    __tablename__ = "trade"

    id: str = Field(default_factory=lambda: uuid.uuid4().hex, primary_key=True)
    user_id: str | None = Field(default=None, index=True)
    trade_pair: str = Field(index=True)  # e.g. "EUR/USD", "BTC/USD"
    trade_type: str  # "buy" or "sell"

    # NUMERIC(10,5): values >= 100000 are stored divided, see engine.scaling
    entry_price: Decimal = Field(max_digits=10, decimal_places=5)
    exit_price: Decimal | None = Field(default=None, max_digits=10, decimal_places=5)
    stop_loss: Decimal | None = Field(default=None, max_digits=10, decimal_places=5)
    take_profit: Decimal | None = Field(default=None, max_digits=10, decimal_places=5)

    lot_size: float
    timeframe: str = "1h"
    status: str = "open"  # "open", "closed", "cancelled"
    notes: str | None = None  # may start with a [SCALED_xN] marker
    chart_screenshot_url: str | None = None  # URL or data URI, stored as-is
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), index=True)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
