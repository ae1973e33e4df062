"""Paginated daily candle fetch for one exchange.

The fetcher walks ``fetch_ohlcv`` forward in time: every request starts one
millisecond after the last candle received, and the walk ends on an empty
page or on a page shorter than the requested limit.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any, Iterator, Mapping, Optional

from ccxt.base.errors import DDoSProtection, NetworkError, RateLimitExceeded

from cex_spider.context import AppContext
from cex_spider.market_data.base import ExchangeAdapter
from cex_spider.types import DAILY, Candle, FetchErrorKind, InvalidCandleError, has_valid_timestamp

DEFAULT_SINCE_MS = 1_577_836_800_000  # 2020-01-01T00:00:00Z
DEFAULT_LIMIT = 100
REQUEST_DELAY_SECONDS = 1.0

_SEPARATORS = ("-", "_")


def symbol_variants(symbol: str) -> Iterator[str]:
    """Yield lookup candidates: verbatim, then "/" replaced by "-", then "_"."""
    seen = {symbol}
    yield symbol
    for separator in _SEPARATORS:
        variant = symbol.replace("/", separator)
        if variant not in seen:
            seen.add(variant)
            yield variant


def resolve_symbol(symbol: str, markets: Mapping[str, Any]) -> Optional[str]:
    """Return the first variant of ``symbol`` listed in ``markets``, or None."""
    for variant in symbol_variants(symbol):
        if variant in markets:
            return variant
    return None


def classify_fetch_error(exc: BaseException) -> FetchErrorKind:
    if isinstance(exc, (DDoSProtection, RateLimitExceeded)) or "rate limit" in str(exc).lower():
        return FetchErrorKind.RATE_LIMIT
    if isinstance(exc, NetworkError):
        return FetchErrorKind.NETWORK
    return FetchErrorKind.OTHER


def _day(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).strftime("%Y-%m-%d")


class CandleFetcher:
    """Fetch the full daily history of a symbol from one exchange adapter."""

    def __init__(
        self,
        exchange: ExchangeAdapter,
        ctx: AppContext,
        *,
        request_delay_seconds: float = REQUEST_DELAY_SECONDS,
    ) -> None:
        self.exchange = exchange
        self.ctx = ctx
        self.request_delay_seconds = request_delay_seconds
        self.logger = ctx.child_logger("fetcher")
        self.requests_made = 0

    @property
    def exchange_id(self) -> str:
        return str(getattr(self.exchange, "id", "unknown"))

    async def fetch_symbol_data(
        self,
        symbol: str,
        since: Optional[int] = None,
        limit: int = DEFAULT_LIMIT,
    ) -> list[Candle]:
        """Fetch every daily candle of ``symbol`` from ``since`` until today.

        Args:
            symbol: Trading pair, e.g. "ETH/USDT"; "-" and "_" variants are tried
            since: Start time in ms since epoch (default 2020-01-01 UTC)
            limit: Candles requested per page

        Returns:
            Candles in ascending time order; empty if the exchange does not list the symbol.

        Raises:
            ValueError: If ``limit`` is not positive
            ccxt.BaseError: Any adapter error, logged and re-raised unchanged
        """
        if limit <= 0:
            raise ValueError("limit must be > 0")

        try:
            return await self._fetch(symbol, since=since, limit=limit)
        except Exception as exc:
            self._log_failure(symbol, exc)
            raise

    async def _fetch(self, symbol: str, *, since: Optional[int], limit: int) -> list[Candle]:
        log = self.logger
        log.info("Starting to fetch all historical daily data for %s from %s exchange", symbol, self.exchange_id)

        log.debug("Loading exchange market data")
        markets = await self.exchange.load_markets()
        log.debug("Exchange has %d trading pairs", len(markets))

        resolved = resolve_symbol(symbol, markets)
        if resolved is None:
            log.warning("%s trading pair not found in exchange %s", symbol, self.exchange_id)
            return []
        if resolved != symbol:
            log.info("Found symbol variant: %s", resolved)
        log.info("Using trading pair symbol: %s", resolved)

        cursor = DEFAULT_SINCE_MS if since is None else since
        log.info("Fetching data starting from: %s", _day(cursor))

        candles: list[Candle] = []
        self.requests_made = 0

        while True:
            self.requests_made += 1
            if self.requests_made > 1:
                await asyncio.sleep(self.request_delay_seconds)

            log.debug("Fetching data batch #%d, since: %s, limit: %d", self.requests_made, _day(cursor), limit)
            page = await self.exchange.fetch_ohlcv(resolved, DAILY, cursor, limit)
            log.debug("Received %d data points in batch #%d", len(page), self.requests_made)

            if not page:
                log.info("No more data available, breaking loop")
                break

            fresh = self._ingest(page)
            if candles:
                fresh = [c for c in fresh if c.timestamp > candles[-1].timestamp]
            candles.extend(fresh)

            last = page[-1]
            if not has_valid_timestamp(last):
                log.warning("Invalid timestamp in last data entry, breaking loop")
                break
            next_cursor = int(last[0]) + 1
            if next_cursor <= cursor:
                log.warning("Cursor did not advance past %s, breaking loop", _day(cursor))
                break
            cursor = next_cursor

            if len(page) < limit:
                log.info("Received less data (%d) than limit (%d), breaking loop", len(page), limit)
                break

        log.info("Successfully fetched all data: %d data points in %d requests", len(candles), self.requests_made)
        return candles

    def _ingest(self, page: Any) -> list[Candle]:
        parsed: list[Candle] = []
        for row in page:
            try:
                parsed.append(Candle.from_ohlcv(row))
            except InvalidCandleError as exc:
                self.logger.warning("Skipping malformed candle: %s", exc)
        return parsed

    def _log_failure(self, symbol: str, exc: Exception) -> None:
        kind = classify_fetch_error(exc)
        self.logger.error(
            "Failed to fetch data for %s on %s (%s): %s",
            symbol,
            self.exchange_id,
            type(exc).__name__,
            exc,
            exc_info=exc,
        )
        if kind is FetchErrorKind.RATE_LIMIT:
            self.logger.error("Rate limit exceeded. Consider increasing delay between requests.")
        elif kind is FetchErrorKind.NETWORK:
            self.logger.error(
                "Network error, possibly due to proxy configuration issues or network connectivity problems"
            )
