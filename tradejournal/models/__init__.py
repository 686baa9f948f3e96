"""Database models."""

from tradejournal.models.trade import TradeRecord

__all__ = [
    "TradeRecord",
]
