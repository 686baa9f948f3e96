"""Journal service: raw records in, descaled trades with P&L out.

Connects the accounting engine to storage. Reads run every record through
normalize -> descale; writes apply the price scaling workaround before rows
reach the precision-limited columns.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from sqlmodel import Session

from tradejournal.config import settings
from tradejournal.engine import (
    MalformedTradeError,
    Trade,
    compute_pnl,
    descale,
    display_price,
    normalize_trade,
    planned_risk_reward,
    resolve_stop_loss,
    scale_prices,
)
from tradejournal.engine.normalizer import resolve_field, to_decimal
from tradejournal.models.trade import TradeRecord
from tradejournal.schemas.trade import RejectedRecord, TradeCreate, TradeUpdate, TradeView

logger = logging.getLogger(__name__)

ON_ERROR_POLICIES = ("skip", "reject")

TAKE_PROFIT_CANDIDATES = ("take_profit", "takeProfit")
USER_ID_CANDIDATES = ("user_id", "userId")


@dataclass
class PreparedTrade:
    trade: Trade
    stop_loss: Decimal | None = None
    take_profit: Decimal | None = None


@dataclass
class PreparedBatch:
    items: list[PreparedTrade] = field(default_factory=list)
    rejected: list[RejectedRecord] = field(default_factory=list)

    @property
    def trades(self) -> list[Trade]:
        return [item.trade for item in self.items]

    @property
    def stop_losses(self) -> dict[str, Decimal]:
        return {
            item.trade.id: item.stop_loss
            for item in self.items
            if item.trade.id is not None and item.stop_loss is not None
        }


def row_to_record(row: TradeRecord) -> dict[str, Any]:
    """Stored rows already use the datastore's field names."""
    return row.model_dump()


def prepare_trade(record: Mapping[str, Any]) -> PreparedTrade:
    """Normalize and descale one record, restoring its stop and target too.

    Raises MalformedTradeError.
    """
    trade = normalize_trade(record)
    # The marker lives on the stored notes, so read it before descaling.
    stop_loss = display_price(resolve_stop_loss(record), trade.notes)
    take_profit = resolve_field(record, TAKE_PROFIT_CANDIDATES)
    if take_profit is not None:
        take_profit = display_price(to_decimal("take_profit", take_profit), trade.notes)
    return PreparedTrade(trade=descale(trade), stop_loss=stop_loss, take_profit=take_profit)


def prepare_trades(records: Iterable[Any], on_error: str = "skip") -> PreparedBatch:
    """Prepare a batch of raw records.

    ``on_error="skip"`` logs and lists malformed records in ``rejected``;
    ``on_error="reject"`` re-raises the first MalformedTradeError.
    """
    if on_error not in ON_ERROR_POLICIES:
        raise ValueError(f"on_error must be one of: {', '.join(ON_ERROR_POLICIES)}")

    batch = PreparedBatch()
    for index, record in enumerate(records):
        try:
            batch.items.append(prepare_trade(record))
        except MalformedTradeError as e:
            if on_error == "reject":
                raise
            logger.warning(f"Skipping malformed trade record #{index}: {e}")
            batch.rejected.append(RejectedRecord(index=index, field=e.field, message=e.message))
    return batch


def trade_view(item: PreparedTrade) -> TradeView:
    trade = item.trade
    return TradeView(
        **trade.model_dump(),
        **compute_pnl(trade).model_dump(),
        stop_loss=item.stop_loss,
        take_profit=item.take_profit,
        planned_risk_reward=planned_risk_reward(trade.entry_price, item.stop_loss, item.take_profit),
    )


def record_view(row: TradeRecord) -> TradeView:
    return trade_view(prepare_trade(row_to_record(row)))


def combine_notes(title: str | None, notes: str | None) -> str | None:
    """The datastore has no title column, so the title leads the notes."""
    title = (title or "").strip()
    notes = (notes or "").strip()
    if title and notes:
        return f"{title}\n\n{notes}"
    return title or notes or None


def _write_prices(row: TradeRecord, data: TradeCreate):
    scaled = scale_prices(
        data.entry_price,
        data.exit_price,
        combine_notes(data.title, data.notes),
        stop_loss=data.stop_loss,
        take_profit=data.take_profit,
        limit=settings.storage_price_limit,
        factor=settings.price_scale_factor,
    )
    row.entry_price = scaled.entry_price
    row.exit_price = scaled.exit_price
    row.stop_loss = scaled.stop_loss
    row.take_profit = scaled.take_profit
    row.notes = scaled.notes
    if scaled.factor > 1:
        logger.info(f"Scaled prices of trade {row.id} by {scaled.factor} to fit storage precision")


def store_trade(
    session: Session,
    data: TradeCreate,
    *,
    status: str | None = None,
    created_at: datetime | None = None,
) -> TradeRecord:
    """Persist a new trade.

    Unless given, status follows whether an exit price was given. Raises
    ValueError if a price cannot be stored even after scaling.
    """
    row = TradeRecord(
        user_id=data.user_id,
        trade_pair=data.trade_pair,
        trade_type=data.trade_type,
        entry_price=data.entry_price,
        lot_size=data.lot_size,
        timeframe=data.timeframe,
        status=status or ("closed" if data.exit_price is not None else "open"),
        chart_screenshot_url=data.chart_screenshot_url,
    )
    if created_at is not None:
        row.created_at = created_at
        row.updated_at = created_at
    _write_prices(row, data)

    session.add(row)
    session.commit()
    session.refresh(row)
    logger.info(f"Stored trade {row.id} ({row.trade_pair} {row.trade_type}, {row.status})")
    return row


def update_trade(session: Session, row: TradeRecord, data: TradeUpdate) -> TradeRecord:
    """Apply a partial update against the trade's true (descaled) values.

    The merged trade is validated as a whole, so partial updates cannot
    bypass TradeCreate's rules. Raises pydantic.ValidationError or ValueError.
    """
    current = record_view(row)
    changes = data.model_dump(exclude_unset=True)
    requested_status = changes.pop("status", None)

    merged = {
        "user_id": row.user_id,
        "trade_pair": row.trade_pair,
        "trade_type": row.trade_type,
        "entry_price": current.entry_price,
        "exit_price": current.exit_price,
        "stop_loss": current.stop_loss,
        "take_profit": current.take_profit,
        "lot_size": row.lot_size,
        "timeframe": row.timeframe,
        "notes": current.notes,
        "chart_screenshot_url": row.chart_screenshot_url,
        **changes,
    }
    validated = TradeCreate.model_validate(merged)

    if requested_status is None and row.status == "cancelled":
        requested_status = "cancelled"

    for key in ("trade_pair", "trade_type", "lot_size", "timeframe", "chart_screenshot_url"):
        setattr(row, key, getattr(validated, key))
    _write_prices(row, validated)
    if requested_status == "cancelled":
        row.status = "cancelled"
    else:
        row.status = "closed" if validated.exit_price is not None else "open"
    row.updated_at = datetime.now(timezone.utc)

    session.add(row)
    session.commit()
    session.refresh(row)
    logger.info(f"Updated trade {row.id} ({row.status})")
    return row


def import_record(session: Session, record: Mapping[str, Any]) -> TradeRecord:
    """Store a record exported from either source, keeping its status and date.

    Raises MalformedTradeError, pydantic.ValidationError or ValueError.
    """
    item = prepare_trade(record)
    trade = item.trade
    data = TradeCreate(
        user_id=_to_optional_text(resolve_field(record, USER_ID_CANDIDATES)),
        trade_pair=trade.instrument,
        trade_type=trade.direction.value,
        entry_price=trade.entry_price,
        exit_price=trade.exit_price,
        stop_loss=item.stop_loss,
        take_profit=item.take_profit,
        lot_size=float(trade.position_size),
        timeframe=trade.timeframe or "1h",
        notes=trade.notes,
        chart_screenshot_url=trade.chart_screenshot_url,
    )
    return store_trade(session, data, status=trade.status.value, created_at=trade.created_at)


def _to_optional_text(value: Any) -> str | None:
    return None if value is None else str(value)
