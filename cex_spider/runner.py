"""Fetch every configured (exchange, symbol) pair and write one CSV per pair.

Usage:
    cex-spider
    python -m cex_spider

Configuration comes from the environment (see ``cex_spider.config``).
A failing symbol or exchange is logged and skipped; only a failure before any
work starts (e.g. malformed configuration) makes the process exit with 1.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from pydantic import ValidationError

from cex_spider.context import AppContext, build_context
from cex_spider.export.csv import write_ohlcv_csv
from cex_spider.market_data.base import ExchangeRegistry, default_registry
from cex_spider.market_data.fetcher import REQUEST_DELAY_SECONDS, CandleFetcher

logger = logging.getLogger(__name__)


@dataclass
class RunSummary:
    pairs_succeeded: list[str] = field(default_factory=list)
    pairs_failed: list[str] = field(default_factory=list)
    exchanges_failed: list[str] = field(default_factory=list)

    @property
    def pairs_attempted(self) -> int:
        return len(self.pairs_succeeded) + len(self.pairs_failed)


async def process_exchange(
    ctx: AppContext,
    exchange_id: str,
    symbols: Sequence[str],
    summary: RunSummary,
    *,
    registry: ExchangeRegistry,
    request_delay_seconds: float = REQUEST_DELAY_SECONDS,
) -> None:
    """Fetch and persist every symbol for one exchange.

    Adapter construction errors propagate to the caller; per-symbol errors
    are logged and recorded in ``summary``.
    """
    log = ctx.logger
    log.info("Processing exchange: %s", exchange_id)

    exchange = registry.create(exchange_id, proxy_url=ctx.settings.proxy)
    try:
        fetcher = CandleFetcher(exchange, ctx, request_delay_seconds=request_delay_seconds)
        for symbol in symbols:
            pair = f"{exchange_id}:{symbol}"
            try:
                log.info("Processing symbol: %s on exchange: %s", symbol, exchange_id)
                candles = await fetcher.fetch_symbol_data(symbol)
                write_ohlcv_csv(candles, exchange_id, symbol, ctx=ctx)
            except Exception as exc:
                log.error("Error processing symbol %s on exchange %s: %s", symbol, exchange_id, exc, exc_info=exc)
                summary.pairs_failed.append(pair)
                continue
            summary.pairs_succeeded.append(pair)
    finally:
        await exchange.close()


async def run(
    ctx: AppContext,
    *,
    registry: Optional[ExchangeRegistry] = None,
    request_delay_seconds: float = REQUEST_DELAY_SECONDS,
) -> RunSummary:
    """Process configured exchanges in order, isolating each one's failures."""
    if registry is None:
        registry = default_registry()
    settings = ctx.settings
    summary = RunSummary()

    ctx.logger.info("Starting data fetching task for configured exchanges and symbols")
    for exchange_id in settings.exchanges:
        try:
            await process_exchange(
                ctx,
                exchange_id,
                settings.symbols,
                summary,
                registry=registry,
                request_delay_seconds=request_delay_seconds,
            )
        except Exception as exc:
            ctx.logger.error("Error processing exchange %s: %s", exchange_id, exc, exc_info=exc)
            summary.exchanges_failed.append(exchange_id)
            continue

    ctx.logger.info(
        "All data fetching tasks completed: %d/%d pairs succeeded, %d exchange(s) failed",
        len(summary.pairs_succeeded),
        summary.pairs_attempted,
        len(summary.exchanges_failed),
    )
    return summary


def main() -> int:
    try:
        ctx = build_context()
    except ValidationError as exc:
        logging.basicConfig(level=logging.ERROR, format="%(asctime)s [%(levelname)s] %(message)s")
        logger.error("Invalid configuration:\n%s", exc)
        return 1

    try:
        asyncio.run(run(ctx))
    except Exception as exc:
        ctx.logger.critical("Error occurred during execution: %s", exc, exc_info=exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
