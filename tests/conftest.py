"""Shared test fixtures for pytest.

Provides a scripted stand-in for a ccxt async exchange, an application
context with test settings, and sample candle data.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Optional

import pytest

from cex_spider.config import Settings
from cex_spider.context import AppContext
from cex_spider.types import Candle

DAY_MS = 86_400_000
START_MS = 1_577_836_800_000  # 2020-01-01T00:00:00Z

_ENV_VARS = ("PROXY_URL", "LOG_LEVEL", "APP_ENV", "NODE_ENV", "EXCHANGES", "SYMBOLS", "DATA_DIR")


def make_rows(count: int, start_ms: int = START_MS) -> list[list[Any]]:
    """Consecutive daily ccxt rows starting at ``start_ms``."""
    return [
        [start_ms + i * DAY_MS, 100.0 + i, 110.0 + i, 95.0 + i, 105.5 + i, 1000.25]
        for i in range(count)
    ]


class FakeExchange:
    """Minimal async exchange that serves scripted pages in order."""

    def __init__(
        self,
        *,
        markets: Optional[dict[str, Any]] = None,
        pages: Optional[list[list[Any]]] = None,
        error: Optional[Exception] = None,
        exchange_id: str = "fake",
    ) -> None:
        self.id = exchange_id
        self.markets = markets if markets is not None else {"ETH/USDT": {"id": "ETH-USDT"}}
        self.pages = list(pages or [])
        self.error = error
        self.calls: list[dict[str, Any]] = []
        self.closed = False
        self.config: dict[str, Any] = {}

    async def load_markets(self) -> dict[str, Any]:
        return self.markets

    async def fetch_ohlcv(self, symbol: str, timeframe: str = "1m", since: Optional[int] = None, limit: Optional[int] = None) -> list[Any]:
        self.calls.append({"symbol": symbol, "timeframe": timeframe, "since": since, "limit": limit})
        if self.error is not None:
            raise self.error
        if not self.pages:
            return []
        return self.pages.pop(0)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's environment out of settings-driven tests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(_env_file=None, DATA_DIR=str(tmp_path / "data"), APP_ENV="test")


@pytest.fixture
def ctx(settings: Settings) -> AppContext:
    return AppContext(settings=settings, logger=logging.getLogger("cex_spider.tests"))


@pytest.fixture
def sample_candles() -> list[Candle]:
    """Three consecutive daily ETH/USDT candles."""
    return [Candle.from_ohlcv(row) for row in make_rows(3)]

