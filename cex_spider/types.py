from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Literal, Optional, Sequence

Timeframe = Literal["1d"]

DAILY: Timeframe = "1d"


class InvalidCandleError(ValueError):
    """Raised when an exchange row does not have the OHLCV shape."""


def _parse_timestamp(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidCandleError(f"timestamp must be numeric, got {value!r}")
    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            raise InvalidCandleError(f"timestamp must be a whole number of ms, got {value!r}")
        return int(value)
    return value


def _parse_decimal(field_name: str, value: object) -> Optional[Decimal]:
    # ccxt reports missing fields (e.g. volume on some venues) as None.
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidCandleError(f"{field_name} must be numeric, got {value!r}")
    try:
        parsed = Decimal(str(value))
    except InvalidOperation as exc:
        raise InvalidCandleError(f"{field_name} must be numeric, got {value!r}") from exc
    if not parsed.is_finite():
        raise InvalidCandleError(f"{field_name} must be finite, got {value!r}")
    return parsed


@dataclass(frozen=True)
class Candle:
    """One daily OHLCV record as returned by the exchange."""

    timestamp: int  # open time, ms since epoch
    open: Optional[Decimal]
    high: Optional[Decimal]
    low: Optional[Decimal]
    close: Optional[Decimal]
    volume: Optional[Decimal]  # None when the exchange omits the field

    @classmethod
    def from_ohlcv(cls, row: Sequence[object]) -> "Candle":
        """Build a candle from a ccxt ``[timestamp, o, h, l, c, v]`` row.

        Raises:
            InvalidCandleError: If the row is too short or a present field is not numeric.
        """
        if isinstance(row, (str, bytes)) or not isinstance(row, Sequence) or len(row) < 6:
            raise InvalidCandleError(f"expected [timestamp, open, high, low, close, volume], got {row!r}")

        return cls(
            timestamp=_parse_timestamp(row[0]),
            open=_parse_decimal("open", row[1]),
            high=_parse_decimal("high", row[2]),
            low=_parse_decimal("low", row[3]),
            close=_parse_decimal("close", row[4]),
            volume=_parse_decimal("volume", row[5]),
        )

    @property
    def open_time(self) -> datetime:
        """Open time in the local timezone."""
        return datetime.fromtimestamp(self.timestamp / 1000)


def has_valid_timestamp(row: object) -> bool:
    """Return True if ``row`` looks like an OHLCV row with a usable timestamp."""
    if isinstance(row, (str, bytes)) or not isinstance(row, Sequence) or not row:
        return False
    try:
        _parse_timestamp(row[0])
    except InvalidCandleError:
        return False
    return True


class FetchErrorKind(str, Enum):
    """Classification of adapter errors raised during a candle fetch."""

    RATE_LIMIT = "rate_limit"
    NETWORK = "network"
    OTHER = "other"
