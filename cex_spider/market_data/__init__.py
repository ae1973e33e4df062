"""Market data ingestion: exchange adapters, symbol resolution and candle fetch."""

from cex_spider.market_data.base import (
    ExchangeAdapter,
    ExchangeRegistry,
    UnsupportedExchangeError,
    build_exchange_config,
    default_registry,
)
from cex_spider.market_data.fetcher import CandleFetcher, classify_fetch_error, resolve_symbol, symbol_variants

__all__ = [
    "ExchangeAdapter",
    "ExchangeRegistry",
    "UnsupportedExchangeError",
    "build_exchange_config",
    "default_registry",
    "CandleFetcher",
    "classify_fetch_error",
    "resolve_symbol",
    "symbol_variants",
]
