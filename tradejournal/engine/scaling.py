"""Price scaling workaround for the precision-limited price columns.

Prices at or above ``STORAGE_PRICE_LIMIT`` do not fit the storage column, so
the write path divides them by an integer factor and records
``[SCALED_x<factor>]`` at the front of the notes. Reads must multiply the
prices back before anything is computed from them.

This is the only module that looks inside ``notes``.
"""

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from tradejournal.engine.types import Trade
from tradejournal.utils.constants import DEFAULT_SCALE_FACTOR, STORAGE_PRICE_LIMIT, STORAGE_PRICE_PLACES

# Loose on purpose: corrupt markers must be found so they can be counted.
MARKER_PATTERN = re.compile(r"\[SCALED_x([^\]]*)\]")
_MARKER_WITH_SPACE = re.compile(r"\s*\[SCALED_x[^\]]*\]\s*")
_FACTOR_DIGITS = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class ScalingInfo:
    scaled: bool
    factor: int


NOT_SCALED = ScalingInfo(scaled=False, factor=1)


@dataclass(frozen=True)
class ScaledPrices:
    """Values ready to be written to the price columns."""

    entry_price: Decimal
    exit_price: Decimal | None
    stop_loss: Decimal | None
    take_profit: Decimal | None
    notes: str | None
    factor: int = 1


def detect_scaling(notes: str | None) -> ScalingInfo:
    """Find the scale factor recorded in ``notes``.

    Anything other than exactly one marker with an integer factor of at
    least 2 reads as unscaled.
    """
    if not notes:
        return NOT_SCALED
    markers = MARKER_PATTERN.findall(notes)
    if len(markers) != 1 or not _FACTOR_DIGITS.fullmatch(markers[0]):
        return NOT_SCALED
    factor = int(markers[0])
    if factor < 2:
        return NOT_SCALED
    return ScalingInfo(scaled=True, factor=factor)


def strip_markers(notes: str | None) -> str | None:
    """Remove scaling markers and collapse the whitespace around them."""
    if not notes:
        return notes
    text = _MARKER_WITH_SPACE.sub(" ", notes).strip()
    return text or None


def descale(trade: Trade) -> Trade:
    """Return ``trade`` with its true prices restored.

    Unscaled trades come back as the same object, and a descaled trade has
    no marker left, so calling this twice is harmless.
    """
    info = detect_scaling(trade.notes)
    if not info.scaled:
        return trade

    update = {
        "entry_price": restore_price(trade.entry_price, info.factor),
        "notes": strip_markers(trade.notes),
    }
    if trade.exit_price is not None:
        update["exit_price"] = restore_price(trade.exit_price, info.factor)
    return trade.model_copy(update=update)


def restore_price(price: Decimal, factor: int) -> Decimal:
    """Multiply a scaled price back up, at the storage column's precision.

    Division by a factor such as 3 leaves a remainder past the 28th digit;
    quantizing to five places drops it, so ``restore_price(scale_price(p, n), n)``
    equals ``p`` for any price the column can hold.
    """
    return (price * factor).quantize(STORAGE_PRICE_PLACES, rounding=ROUND_HALF_UP)


def display_price(price: Decimal | None, notes: str | None) -> Decimal | None:
    """Scale a single stored price back up using the marker in ``notes``."""
    if price is None:
        return None
    info = detect_scaling(notes)
    if not info.scaled:
        return price
    return restore_price(price, info.factor)


def scale_price(price: Decimal, factor: int) -> Decimal:
    if factor < 1:
        raise ValueError(f"scale factor must be >= 1, got {factor}")
    return price / Decimal(factor)


def needs_scaling(
    entry_price: Decimal,
    exit_price: Decimal | None,
    limit: Decimal = STORAGE_PRICE_LIMIT,
) -> bool:
    return entry_price >= limit or (exit_price is not None and exit_price >= limit)


def scale_prices(
    entry_price: Decimal,
    exit_price: Decimal | None = None,
    notes: str | None = None,
    *,
    stop_loss: Decimal | None = None,
    take_profit: Decimal | None = None,
    limit: Decimal = STORAGE_PRICE_LIMIT,
    factor: int = DEFAULT_SCALE_FACTOR,
) -> ScaledPrices:
    """Apply the write-side workaround.

    When the entry or exit price reaches ``limit`` every supplied price is
    divided by ``factor`` and the marker is prepended to the notes. Markers
    already present in ``notes`` are dropped so a row never carries two.

    Raises ValueError if a price is still too large after scaling.
    """
    notes = strip_markers(notes)
    if not needs_scaling(entry_price, exit_price, limit):
        return ScaledPrices(entry_price, exit_price, stop_loss, take_profit, notes)

    scaled = [
        None if price is None else scale_price(price, factor)
        for price in (entry_price, exit_price, stop_loss, take_profit)
    ]
    if any(price is not None and price >= limit for price in scaled):
        raise ValueError(f"price exceeds storage precision even after scaling by {factor}")

    marker = f"[SCALED_x{factor}]"
    return ScaledPrices(
        entry_price=scaled[0],
        exit_price=scaled[1],
        stop_loss=scaled[2],
        take_profit=scaled[3],
        notes=f"{marker} {notes}" if notes else marker,
        factor=factor,
    )
