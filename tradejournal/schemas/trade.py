"""Pydantic schemas for the trade and dashboard APIs."""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from tradejournal.engine.types import JsonDecimal, PortfolioStats, Trade, TradeResult
from tradejournal.utils.constants import VALID_TIMEFRAMES

TRADE_TYPES = ("buy", "sell", "long", "short")
TRADE_STATUSES = ("open", "closed", "cancelled")


def _check_trade_type(value: str) -> str:
    text = value.strip().lower()
    if text not in TRADE_TYPES:
        raise ValueError(f"must be one of: {', '.join(TRADE_TYPES)}")
    return text


def _check_timeframe(value: str) -> str:
    if value not in VALID_TIMEFRAMES:
        raise ValueError(f"must be one of: {', '.join(VALID_TIMEFRAMES)}")
    return value


class TradeCreate(BaseModel):
    user_id: str | None = Field(default=None, max_length=64)
    title: str | None = Field(default=None, max_length=100)
    trade_pair: str = Field(min_length=1, max_length=20)
    trade_type: str = "buy"
    entry_price: Decimal = Field(gt=0)
    exit_price: Decimal | None = Field(default=None, gt=0)
    stop_loss: Decimal | None = Field(default=None, gt=0)
    take_profit: Decimal | None = Field(default=None, gt=0)
    lot_size: float = Field(gt=0, lt=1_000_000)
    timeframe: str = "1h"
    notes: str | None = Field(default=None, max_length=1000)
    chart_screenshot_url: str | None = None

    @field_validator("trade_pair")
    @classmethod
    def _trim_pair(cls, value: str) -> str:
        text = value.strip().upper()
        if not text:
            raise ValueError("must not be empty")
        return text

    @field_validator("trade_type")
    @classmethod
    def _validate_trade_type(cls, value: str) -> str:
        return _check_trade_type(value)

    @field_validator("timeframe")
    @classmethod
    def _validate_timeframe(cls, value: str) -> str:
        return _check_timeframe(value)


class TradeUpdate(BaseModel):
    trade_pair: str | None = Field(default=None, min_length=1, max_length=20)
    trade_type: str | None = None
    entry_price: Decimal | None = Field(default=None, gt=0)
    exit_price: Decimal | None = Field(default=None, gt=0)
    stop_loss: Decimal | None = Field(default=None, gt=0)
    take_profit: Decimal | None = Field(default=None, gt=0)
    lot_size: float | None = Field(default=None, gt=0, lt=1_000_000)
    timeframe: str | None = None
    status: str | None = None
    notes: str | None = Field(default=None, max_length=1000)
    chart_screenshot_url: str | None = None

    @field_validator("trade_type")
    @classmethod
    def _validate_optional_trade_type(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return _check_trade_type(value)

    @field_validator("timeframe")
    @classmethod
    def _validate_optional_timeframe(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return _check_timeframe(value)

    @field_validator("status")
    @classmethod
    def _validate_status(cls, value: str | None) -> str | None:
        if value is None:
            return None
        text = value.strip().lower()
        if text not in TRADE_STATUSES:
            raise ValueError(f"must be one of: {', '.join(TRADE_STATUSES)}")
        return text

    @model_validator(mode="after")
    def _validate_explicit_nulls(self):
        # exit_price, stop_loss, take_profit and notes may be cleared; the rest may not
        for name in ("trade_pair", "trade_type", "entry_price", "lot_size", "timeframe"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class TradeView(Trade):
    """A descaled trade with its P&L, as shown in the journal."""

    pnl: JsonDecimal = Decimal("0")
    pnl_percent: JsonDecimal = Decimal("0")
    is_realized: bool = False
    result: TradeResult = TradeResult.PENDING
    stop_loss: JsonDecimal | None = None
    take_profit: JsonDecimal | None = None
    planned_risk_reward: JsonDecimal | None = None


class RejectedRecord(BaseModel):
    index: int
    field: str
    message: str


class AnalyzeRequest(BaseModel):
    trades: list[Any] = Field(default_factory=list)
    strict: bool = False


class AnalyzeResponse(BaseModel):
    stats: PortfolioStats
    trades: list[TradeView]
    rejected: list[RejectedRecord]
