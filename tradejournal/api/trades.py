"""Trade journal API — list, create, update and delete trades."""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError
from sqlmodel import Session, select

from tradejournal.database import get_session
from tradejournal.models.trade import TradeRecord
from tradejournal.schemas.trade import TradeCreate, TradeUpdate, TradeView
from tradejournal.services.journal import (
    prepare_trades,
    record_view,
    row_to_record,
    store_trade,
    trade_view,
    update_trade,
)

router = APIRouter(prefix="/api/trades", tags=["trades"])


@router.get("", response_model=list[TradeView])
def list_trades(
    user_id: str | None = None,
    status: str | None = None,
    instrument: str | None = None,
    limit: int = 50,
    offset: int = 0,
    session: Session = Depends(get_session),
):
    stmt = select(TradeRecord).order_by(TradeRecord.created_at.desc())
    if user_id is not None:
        stmt = stmt.where(TradeRecord.user_id == user_id)
    if status is not None:
        stmt = stmt.where(TradeRecord.status == status.lower())
    if instrument is not None:
        stmt = stmt.where(TradeRecord.trade_pair == instrument.upper())
    stmt = stmt.offset(offset).limit(limit)
    rows = session.exec(stmt).all()
    batch = prepare_trades(row_to_record(row) for row in rows)
    return [trade_view(item) for item in batch.items]


@router.post("", response_model=TradeView, status_code=201)
def create_trade(data: TradeCreate, session: Session = Depends(get_session)):
    try:
        row = store_trade(session, data)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return record_view(row)


@router.get("/{trade_id}", response_model=TradeView)
def get_trade(trade_id: str, session: Session = Depends(get_session)):
    row = session.get(TradeRecord, trade_id)
    if not row:
        raise HTTPException(status_code=404, detail="Trade not found")
    return record_view(row)


@router.put("/{trade_id}", response_model=TradeView)
def edit_trade(
    trade_id: str,
    data: TradeUpdate,
    session: Session = Depends(get_session),
):
    row = session.get(TradeRecord, trade_id)
    if not row:
        raise HTTPException(status_code=404, detail="Trade not found")

    try:
        row = update_trade(session, row, data)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return record_view(row)


@router.delete("/{trade_id}", status_code=204)
def delete_trade(trade_id: str, session: Session = Depends(get_session)):
    row = session.get(TradeRecord, trade_id)
    if not row:
        raise HTTPException(status_code=404, detail="Trade not found")

    session.delete(row)
    session.commit()
