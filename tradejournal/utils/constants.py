"""Shared constants and defaults."""

from decimal import Decimal

VALID_TIMEFRAMES = ["1m", "5m", "15m", "30m", "1h", "4h", "1d", "1w"]

# Price columns are NUMERIC(10,5): five integer digits, so anything at or
# above this limit is divided down before it is written.
STORAGE_PRICE_LIMIT = Decimal("100000")
DEFAULT_SCALE_FACTOR = 10
STORAGE_PRICE_PLACES = Decimal("0.00001")

MONEY_PLACES = Decimal("0.01")
