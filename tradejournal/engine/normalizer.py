"""Map raw trade records from either source shape onto the canonical Trade.

Two shapes reach the engine: rows from the managed datastore (snake_case,
``trade_pair`` / ``lot_size``) and documents from the REST backend
(camelCase, ``tradePair`` / ``positionSize``). Each canonical field has an
ordered list of candidate source names; the first one holding a value wins.
"""

from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import ValidationError

from tradejournal.engine.types import Direction, Trade, TradeStatus


class MalformedTradeError(ValueError):
    """A raw record cannot be turned into a canonical Trade."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


# Dotted names reach into nested objects (the REST shape nests the screenshot).
FIELD_CANDIDATES: dict[str, tuple[str, ...]] = {
    "id": ("id", "_id"),
    "instrument": ("trade_pair", "tradePair", "instrument"),
    "direction": ("trade_type", "tradeType", "direction"),
    "entry_price": ("entry_price", "entryPrice"),
    "exit_price": ("exit_price", "exitPrice"),
    "position_size": ("lot_size", "lotSize", "positionSize", "position_size"),
    "status": ("status",),
    "notes": ("notes",),
    "created_at": ("created_at", "createdAt", "entryTime", "dateOpened"),
    "updated_at": ("updated_at", "updatedAt"),
    "timeframe": ("timeframe",),
    "chart_screenshot_url": ("chart_screenshot_url", "chartScreenshot.url"),
}

STOP_LOSS_CANDIDATES: tuple[str, ...] = ("stop_loss", "stopLoss")

REQUIRED_FIELDS = ("instrument", "entry_price", "position_size", "direction")

DIRECTION_ALIASES: dict[str, Direction] = {
    "buy": Direction.LONG,
    "long": Direction.LONG,
    "sell": Direction.SHORT,
    "short": Direction.SHORT,
}

# The REST backend tracks finer-grained states; they collapse onto the three
# journal states.
STATUS_ALIASES: dict[str, TradeStatus] = {
    "open": TradeStatus.OPEN,
    "pending": TradeStatus.OPEN,
    "closed": TradeStatus.CLOSED,
    "tp_hit": TradeStatus.CLOSED,
    "stopped_out": TradeStatus.CLOSED,
    "cancelled": TradeStatus.CANCELLED,
}

_FIELD_BY_ALIAS = {info.alias: name for name, info in Trade.model_fields.items() if info.alias}


def _lookup(raw: Mapping[str, Any], path: str) -> Any:
    value: Any = raw
    for part in path.split("."):
        if not isinstance(value, Mapping):
            return None
        value = value.get(part)
    return value


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def resolve_field(raw: Mapping[str, Any], candidates: tuple[str, ...]) -> Any:
    """Return the first candidate value that is present and not blank."""
    for name in candidates:
        value = _lookup(raw, name)
        if not _is_blank(value):
            return value
    return None


def to_decimal(field: str, value: Any) -> Decimal:
    """Coerce a raw numeric value to a finite, non-negative Decimal."""
    if isinstance(value, bool):
        raise MalformedTradeError(field, f"expected a number, got {value!r}")
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, int):
        number = Decimal(value)
    elif isinstance(value, float):
        # str() keeps the shortest repr, so 1.085 stays 1.085
        number = Decimal(str(value))
    elif isinstance(value, str):
        try:
            number = Decimal(value.strip())
        except InvalidOperation:
            raise MalformedTradeError(field, f"expected a number, got {value!r}") from None
    else:
        raise MalformedTradeError(field, f"expected a number, got {type(value).__name__}")

    if not number.is_finite():
        raise MalformedTradeError(field, f"expected a finite number, got {value!r}")
    if number < 0:
        raise MalformedTradeError(field, f"must not be negative, got {value!r}")
    return number


def normalize_direction(value: Any) -> Direction:
    direction = DIRECTION_ALIASES.get(str(value).strip().lower())
    if direction is None:
        raise MalformedTradeError("direction", f"unrecognized direction {value!r}")
    return direction


def normalize_status(value: Any) -> TradeStatus:
    if value is None:
        return TradeStatus.OPEN
    status = STATUS_ALIASES.get(str(value).strip().lower())
    if status is None:
        raise MalformedTradeError("status", f"unrecognized status {value!r}")
    return status


def _to_text(value: Any) -> str | None:
    return None if value is None else str(value)


def normalize_trade(raw: Mapping[str, Any]) -> Trade:
    """Build a canonical Trade from a record in either source shape.

    Raises MalformedTradeError when a required field is missing or a value
    cannot be interpreted. Missing optional fields stay None.
    """
    if not isinstance(raw, Mapping):
        raise MalformedTradeError("record", f"expected an object, got {type(raw).__name__}")

    values = {name: resolve_field(raw, candidates) for name, candidates in FIELD_CANDIDATES.items()}

    for name in REQUIRED_FIELDS:
        if values[name] is None:
            raise MalformedTradeError(name, "required field is missing")

    exit_price = values["exit_price"]
    fields = {
        "id": _to_text(values["id"]),
        "instrument": str(values["instrument"]).strip(),
        "direction": normalize_direction(values["direction"]),
        "entry_price": to_decimal("entry_price", values["entry_price"]),
        "exit_price": None if exit_price is None else to_decimal("exit_price", exit_price),
        "position_size": to_decimal("position_size", values["position_size"]),
        "status": normalize_status(values["status"]),
        "notes": _to_text(values["notes"]),
        "timeframe": _to_text(values["timeframe"]),
        "chart_screenshot_url": _to_text(values["chart_screenshot_url"]),
        "created_at": values["created_at"],
        "updated_at": values["updated_at"],
    }

    try:
        return Trade(**fields)
    except ValidationError as e:
        error = e.errors()[0]
        loc = str(error["loc"][0]) if error["loc"] else "trade"
        raise MalformedTradeError(_FIELD_BY_ALIAS.get(loc, loc), error["msg"]) from e


def resolve_stop_loss(raw: Mapping[str, Any]) -> Decimal | None:
    """Stop-loss travels beside the trade, not inside it."""
    value = resolve_field(raw, STOP_LOSS_CANDIDATES)
    return None if value is None else to_decimal("stop_loss", value)
