"""Smoke-test the configured proxy with one HTTPS request (no fetch, no files).

Usage:
    cex-spider-proxy-check
    python -m cex_spider.proxy_check
"""

from __future__ import annotations

import logging
from typing import Optional

import requests
from pydantic import ValidationError

from cex_spider.config import mask_url
from cex_spider.context import AppContext, build_context

TEST_URL = "https://www.okx.com/api/v5/market/tickers"
TIMEOUT_S = 30


def check_proxy(ctx: AppContext, *, url: str = TEST_URL, timeout_s: int = TIMEOUT_S) -> Optional[int]:
    """Issue one GET through the proxy and log status and payload size.

    Returns:
        The HTTP status code, or None when no proxy is configured.

    Raises:
        requests.RequestException: If the request fails
    """
    log = ctx.child_logger("proxy_check")
    log.info("Starting proxy connection test")

    proxy = ctx.settings.proxy
    if not proxy:
        log.warning("No proxy URL configured")
        return None

    log.info("Testing proxy URL: %s", mask_url(proxy))
    resp = requests.get(url, proxies={"http": proxy, "https": proxy}, timeout=timeout_s)
    log.info("Response status code: %d", resp.status_code)
    log.info("Received data: %d bytes", len(resp.content))
    log.info("Request completed")
    return resp.status_code


def main() -> int:
    try:
        ctx = build_context()
    except ValidationError as exc:
        logging.basicConfig(level=logging.ERROR, format="%(asctime)s [%(levelname)s] %(message)s")
        logging.getLogger(__name__).error("Invalid configuration:\n%s", exc)
        return 1

    try:
        check_proxy(ctx)
    except requests.RequestException as exc:
        ctx.logger.error("Request failed: %s", exc, exc_info=exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
