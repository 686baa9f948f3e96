"""System API — health check and journal database status."""

from fastapi import APIRouter, Depends
from sqlmodel import Session, func, select

from tradejournal.config import settings
from tradejournal.database import get_session
from tradejournal.models.trade import TradeRecord

router = APIRouter(prefix="/api/system", tags=["system"])


@router.get("/health")
def health_check():
    return {"status": "ok"}


@router.get("/info")
def system_info(session: Session = Depends(get_session)):
    """Stored trade count and the active price scaling settings."""
    trade_count = session.exec(select(func.count()).select_from(TradeRecord)).one()
    return {
        "trade_count": trade_count,
        "storage_price_limit": float(settings.storage_price_limit),
        "price_scale_factor": settings.price_scale_factor,
    }
