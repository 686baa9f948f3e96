"""Trade accounting engine: normalize, descale, price and aggregate trades."""

from tradejournal.engine.normalizer import MalformedTradeError, normalize_trade, resolve_stop_loss
from tradejournal.engine.pnl import compute_pnl, planned_risk_reward, risk_reward_ratio
from tradejournal.engine.portfolio import aggregate, build_equity_curve, max_drawdown
from tradejournal.engine.scaling import descale, detect_scaling, display_price, scale_price, scale_prices
from tradejournal.engine.types import (
    Direction,
    EquityPoint,
    PnLResult,
    PortfolioStats,
    Trade,
    TradeResult,
    TradeStatus,
)

__all__ = [
    "MalformedTradeError",
    "normalize_trade",
    "resolve_stop_loss",
    "compute_pnl",
    "planned_risk_reward",
    "risk_reward_ratio",
    "aggregate",
    "build_equity_curve",
    "max_drawdown",
    "descale",
    "detect_scaling",
    "display_price",
    "scale_price",
    "scale_prices",
    "Direction",
    "EquityPoint",
    "PnLResult",
    "PortfolioStats",
    "Trade",
    "TradeResult",
    "TradeStatus",
]
