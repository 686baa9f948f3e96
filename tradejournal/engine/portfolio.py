"""Portfolio statistics and equity curve over a set of trades.

Pure computation: the result depends only on the trades given, not on their
order. Trades must already be normalized and descaled.
"""

from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from decimal import Decimal

from tradejournal.engine.pnl import ZERO, HUNDRED, compute_pnl, risk_reward_ratio, round_money
from tradejournal.engine.types import EquityPoint, PnLResult, PortfolioStats, Trade, TradeStatus

_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


def _mean(values: list[Decimal]) -> Decimal:
    return sum(values, ZERO) / len(values) if values else ZERO


def _chronological_key(item: tuple[Trade, PnLResult]):
    trade, result = item
    # Undated trades first; the remaining fields break timestamp ties so any
    # input order yields the same curve, id-less trades included.
    return (
        trade.created_at is not None,
        trade.created_at or _EARLIEST,
        trade.id or "",
        trade.entry_price,
        trade.exit_price,
        trade.direction.value,
        trade.position_size,
        result.pnl,
    )


def build_equity_curve(realized: Iterable[tuple[Trade, PnLResult]]) -> list[EquityPoint]:
    """Running cumulative P&L, one point per realized trade, oldest first."""
    curve = []
    cumulative = ZERO
    for index, (trade, result) in enumerate(sorted(realized, key=_chronological_key), start=1):
        cumulative += result.pnl
        curve.append(
            EquityPoint(
                trade_index=index,
                cumulative_pnl=cumulative,
                timestamp=trade.created_at,
                trade_id=trade.id,
            )
        )
    return curve


def max_drawdown(curve: list[EquityPoint]) -> Decimal:
    """Largest fall from a running peak of the curve (peak starts at zero)."""
    peak = ZERO
    worst = ZERO
    for point in curve:
        peak = max(peak, point.cumulative_pnl)
        worst = max(worst, peak - point.cumulative_pnl)
    return worst


def aggregate(
    trades: Iterable[Trade],
    stop_losses: Mapping[str, Decimal] | None = None,
) -> PortfolioStats:
    """Reduce trades to PortfolioStats.

    ``stop_losses`` maps trade id to stop-loss price; closed trades without
    one contribute a ratio of 0 to ``average_risk_reward``. Rates, ratios
    and averages are rounded to two places; ``total_volume`` covers every
    trade given, whatever its status.
    """
    trades = list(trades)
    stop_losses = stop_losses or {}

    closed = [t for t in trades if t.status == TradeStatus.CLOSED]
    realized = [(t, r) for t, r in ((t, compute_pnl(t)) for t in closed) if r.is_realized]

    pnls = [r.pnl for _, r in realized]
    wins = [p for p in pnls if p > 0]
    losses = [p for p in pnls if p < 0]

    total_profit = sum(wins, ZERO)
    total_loss = abs(sum(losses, ZERO))
    net_pnl = total_profit - total_loss

    ratios = [risk_reward_ratio(t, stop_losses.get(t.id)) for t in closed]
    curve = build_equity_curve(realized)

    return PortfolioStats(
        total_trades=len(trades),
        closed_trades=len(closed),
        open_trades=sum(1 for t in trades if t.status == TradeStatus.OPEN),
        cancelled_trades=sum(1 for t in trades if t.status == TradeStatus.CANCELLED),
        winning_trades=len(wins),
        losing_trades=len(losses),
        breakeven_trades=len(pnls) - len(wins) - len(losses),
        win_rate=round_money(Decimal(len(wins)) / len(closed) * HUNDRED) if closed else ZERO,
        net_pnl=net_pnl,
        total_profit=total_profit,
        total_loss=total_loss,
        profit_factor=round_money(total_profit / total_loss) if total_loss else ZERO,
        average_pnl=round_money(net_pnl / len(pnls)) if pnls else ZERO,
        average_win=round_money(_mean(wins)),
        average_loss=round_money(_mean(losses)),
        best_trade=max(pnls, default=ZERO),
        worst_trade=min(pnls, default=ZERO),
        average_risk_reward=round_money(_mean(ratios)),
        total_volume=round_money(sum((t.entry_price * t.position_size for t in trades), ZERO)),
        max_drawdown=max_drawdown(curve),
        equity_curve=curve,
    )
