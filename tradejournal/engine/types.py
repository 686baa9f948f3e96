"""Canonical in-memory types produced by the accounting engine.

Attributes are snake_case; ``model_dump(by_alias=True)`` and the API emit the
camelCase names dashboards already consume (``entryPrice``, ``netPnL``...).
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, Field, PlainSerializer, field_validator
from pydantic.alias_generators import to_camel

# Decimals stay exact in Python and become JSON numbers on the wire.
JsonDecimal = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class Direction(str, Enum):
    LONG = "long"
    SHORT = "short"


class TradeStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    CANCELLED = "cancelled"


class TradeResult(str, Enum):
    WIN = "win"
    LOSS = "loss"
    BREAKEVEN = "breakeven"
    PENDING = "pending"


class Trade(BaseModel):
    """A normalized, read-only trade."""

    id: str | None = None
    instrument: str = Field(min_length=1)
    direction: Direction
    entry_price: JsonDecimal = Field(ge=0)
    exit_price: JsonDecimal | None = Field(default=None, ge=0)
    position_size: JsonDecimal = Field(ge=0)
    status: TradeStatus = TradeStatus.OPEN
    notes: str | None = None
    timeframe: str | None = None
    chart_screenshot_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"alias_generator": to_camel, "populate_by_name": True, "frozen": True}

    @field_validator("created_at", "updated_at")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class PnLResult(BaseModel):
    pnl: JsonDecimal = Decimal("0")
    pnl_percent: JsonDecimal = Decimal("0")
    is_realized: bool = False
    result: TradeResult = TradeResult.PENDING

    model_config = {"alias_generator": to_camel, "populate_by_name": True, "frozen": True}


class EquityPoint(BaseModel):
    trade_index: int
    cumulative_pnl: JsonDecimal = Field(alias="cumulativePnL")
    timestamp: datetime | None = None
    trade_id: str | None = None

    model_config = {"alias_generator": to_camel, "populate_by_name": True, "frozen": True}


class PortfolioStats(BaseModel):
    """Summary statistics over a set of trades. Recomputed on every call."""

    total_trades: int = 0
    closed_trades: int = 0
    open_trades: int = 0
    cancelled_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    breakeven_trades: int = 0
    win_rate: JsonDecimal = Decimal("0")
    net_pnl: JsonDecimal = Field(default=Decimal("0"), alias="netPnL")
    total_profit: JsonDecimal = Decimal("0")
    total_loss: JsonDecimal = Decimal("0")
    profit_factor: JsonDecimal = Decimal("0")
    average_pnl: JsonDecimal = Field(default=Decimal("0"), alias="averagePnL")
    average_win: JsonDecimal = Decimal("0")
    average_loss: JsonDecimal = Decimal("0")
    best_trade: JsonDecimal = Decimal("0")
    worst_trade: JsonDecimal = Decimal("0")
    average_risk_reward: JsonDecimal = Decimal("0")
    total_volume: JsonDecimal = Decimal("0")
    max_drawdown: JsonDecimal = Decimal("0")
    equity_curve: list[EquityPoint] = Field(default_factory=list)

    model_config = {"alias_generator": to_camel, "populate_by_name": True, "frozen": True}
