"""Daily OHLCV history downloader for centralized exchanges.

This package contains the building blocks of the spider:

- config: environment-driven settings
- context: the application context (settings + logger) built once at startup
- market_data: exchange registry, symbol resolution and paginated candle fetch
- export: CSV serialization of candle series
- runner: per-exchange / per-symbol orchestration
- proxy_check: standalone proxy connectivity smoke test
"""

__version__ = "1.0.0"
