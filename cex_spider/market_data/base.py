"""Exchange adapter registry.

Adapters come from ``ccxt.async_support``. The registry maps each exchange
identifier to the factory that builds its adapter, so lookups are plain dict
accesses and unknown identifiers fail with an explicit error.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Mapping, Optional, Protocol, Sequence

import ccxt.async_support as ccxt_async

from cex_spider.config import mask_url

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_MS = 30_000


class ExchangeAdapter(Protocol):
    """The subset of the ccxt async exchange API the spider relies on."""

    id: str

    async def load_markets(self) -> Mapping[str, Any]:
        ...

    async def fetch_ohlcv(
        self,
        symbol: str,
        timeframe: str = "1m",
        since: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Sequence[Sequence[Any]]:
        ...

    async def close(self) -> None:
        ...


ExchangeFactory = Callable[[dict[str, Any]], ExchangeAdapter]


class UnsupportedExchangeError(ValueError):
    """Raised when no adapter is registered for an exchange identifier."""


def proxy_option_key(proxy_url: str) -> str:
    """Pick the ccxt proxy option matching the proxy's scheme."""
    scheme = proxy_url.split("://", 1)[0].lower() if "://" in proxy_url else "http"
    if scheme.startswith("socks"):
        return "socksProxy"
    if scheme == "https":
        return "httpsProxy"
    return "httpProxy"


def build_exchange_config(*, proxy_url: Optional[str] = None, timeout_ms: int = REQUEST_TIMEOUT_MS) -> dict[str, Any]:
    """Constructor options shared by every adapter."""
    config: dict[str, Any] = {
        "enableRateLimit": True,
        "timeout": timeout_ms,
    }
    if proxy_url:
        config[proxy_option_key(proxy_url)] = proxy_url
    return config


class ExchangeRegistry:
    """Explicit identifier -> adapter factory mapping."""

    def __init__(self, factories: Optional[Mapping[str, ExchangeFactory]] = None) -> None:
        self._factories: dict[str, ExchangeFactory] = {}
        for exchange_id, factory in (factories or {}).items():
            self.register(exchange_id, factory)

    @classmethod
    def from_ccxt(cls, exchange_ids: Optional[Iterable[str]] = None) -> "ExchangeRegistry":
        ids = ccxt_async.exchanges if exchange_ids is None else exchange_ids
        return cls({exchange_id: getattr(ccxt_async, exchange_id) for exchange_id in ids})

    def register(self, exchange_id: str, factory: ExchangeFactory) -> None:
        key = exchange_id.strip().lower()
        if not key:
            raise ValueError("exchange id is required")
        self._factories[key] = factory

    def __contains__(self, exchange_id: object) -> bool:
        return isinstance(exchange_id, str) and exchange_id.strip().lower() in self._factories

    @property
    def exchange_ids(self) -> list[str]:
        return sorted(self._factories)

    def create(self, exchange_id: str, *, proxy_url: Optional[str] = None) -> ExchangeAdapter:
        """Instantiate the adapter for ``exchange_id``.

        Args:
            exchange_id: ccxt exchange identifier (e.g. "okx", "binance")
            proxy_url: Optional HTTP(S)/SOCKS proxy for every request

        Raises:
            UnsupportedExchangeError: If the identifier is not registered
        """
        key = exchange_id.strip().lower()
        factory = self._factories.get(key)
        if factory is None:
            raise UnsupportedExchangeError(f"Exchange {exchange_id} is not supported by ccxt")

        if proxy_url:
            logger.info("Using proxy URL: %s", mask_url(proxy_url))
        else:
            logger.info("No proxy URL configured")

        exchange = factory(build_exchange_config(proxy_url=proxy_url))
        logger.debug("%s exchange instance created successfully", key)
        return exchange


_default_registry: Optional[ExchangeRegistry] = None


def default_registry() -> ExchangeRegistry:
    """Registry of every exchange ccxt ships, built on first use."""
    global _default_registry
    if _default_registry is None:
        _default_registry = ExchangeRegistry.from_ccxt()
    return _default_registry
