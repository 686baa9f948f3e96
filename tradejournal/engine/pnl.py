"""Per-trade profit and loss.

All functions are pure computation over descaled trades. Values are kept at
full precision until the final rounding to cents.
"""

from decimal import ROUND_HALF_UP, Decimal

from tradejournal.engine.types import Direction, PnLResult, Trade, TradeResult, TradeStatus
from tradejournal.utils.constants import MONEY_PLACES

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def round_money(value: Decimal) -> Decimal:
    """Round half away from zero to two places; never returns -0.00."""
    rounded = value.quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)
    return rounded.copy_abs() if rounded.is_zero() else rounded


def is_realized(trade: Trade) -> bool:
    # Status decides; an exit price on an open trade is only a plan.
    return trade.status == TradeStatus.CLOSED and trade.exit_price is not None


def price_move(trade: Trade) -> Decimal:
    """Signed per-unit move in the trade's favour. Requires an exit price."""
    if trade.direction == Direction.LONG:
        return trade.exit_price - trade.entry_price
    return trade.entry_price - trade.exit_price


def compute_pnl(trade: Trade) -> PnLResult:
    """Realized P&L for one trade; pending trades report zero."""
    if not is_realized(trade):
        return PnLResult()

    pnl = price_move(trade) * trade.position_size
    cost = trade.entry_price * trade.position_size
    pnl_percent = pnl / cost * HUNDRED if cost else ZERO

    rounded = round_money(pnl)
    if rounded > 0:
        result = TradeResult.WIN
    elif rounded < 0:
        result = TradeResult.LOSS
    else:
        result = TradeResult.BREAKEVEN

    return PnLResult(
        pnl=rounded,
        pnl_percent=round_money(pnl_percent),
        is_realized=True,
        result=result,
    )


def risk_reward_ratio(trade: Trade, stop_loss: Decimal | None) -> Decimal:
    """Realized reward over the risk taken to the stop.

    reward = |exit - entry|, risk = |entry - stop|. Zero when there is no
    stop, no exit or no risk.
    """
    if stop_loss is None or trade.exit_price is None:
        return ZERO
    risk = abs(trade.entry_price - stop_loss)
    if not risk:
        return ZERO
    return abs(trade.exit_price - trade.entry_price) / risk


def planned_risk_reward(
    entry_price: Decimal,
    stop_loss: Decimal | None,
    take_profit: Decimal | None,
) -> Decimal | None:
    """Ratio the trade was planned with: |tp - entry| / |entry - stop|."""
    if stop_loss is None or take_profit is None:
        return None
    risk = abs(entry_price - stop_loss)
    if not risk:
        return None
    return abs(take_profit - entry_price) / risk
