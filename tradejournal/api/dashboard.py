"""Dashboard API — portfolio stats and equity curve."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from tradejournal.database import get_session
from tradejournal.engine import EquityPoint, PortfolioStats, aggregate
from tradejournal.models.trade import TradeRecord
from tradejournal.schemas.trade import AnalyzeRequest, AnalyzeResponse
from tradejournal.services.journal import PreparedBatch, prepare_trades, row_to_record, trade_view

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


def _stored_batch(session: Session, user_id: str | None) -> PreparedBatch:
    stmt = select(TradeRecord)
    if user_id is not None:
        stmt = stmt.where(TradeRecord.user_id == user_id)
    rows = session.exec(stmt).all()
    return prepare_trades(row_to_record(row) for row in rows)


@router.get("/stats", response_model=PortfolioStats)
def dashboard_stats(user_id: str | None = None, session: Session = Depends(get_session)):
    """Aggregated stats across the stored journal."""
    batch = _stored_batch(session, user_id)
    return aggregate(batch.trades, batch.stop_losses)


@router.get("/equity", response_model=list[EquityPoint])
def equity_curve(user_id: str | None = None, session: Session = Depends(get_session)):
    """Cumulative realized P&L, oldest trade first. Empty when nothing is closed."""
    batch = _stored_batch(session, user_id)
    return aggregate(batch.trades, batch.stop_losses).equity_curve


@router.post("/analyze", response_model=AnalyzeResponse)
def analyze_trades(body: AnalyzeRequest):
    """Stats for records posted in either source shape, without storing them.

    In strict mode the first malformed record fails the whole request.
    """
    batch = prepare_trades(body.trades)
    if body.strict and batch.rejected:
        raise HTTPException(status_code=422, detail=batch.rejected[0].model_dump())

    if batch.rejected:
        logger.info(f"Analyze skipped {len(batch.rejected)} of {len(body.trades)} records")
    return AnalyzeResponse(
        stats=aggregate(batch.trades, batch.stop_losses),
        trades=[trade_view(item) for item in batch.items],
        rejected=batch.rejected,
    )
