"""CSV export of daily candle series."""

from __future__ import annotations

import io
from decimal import Decimal
from pathlib import Path
from typing import Iterable, Optional, Union

from cex_spider.context import AppContext
from cex_spider.types import Candle

CSV_HEADER = ("timestamp", "open", "high", "low", "close", "volume")


def format_number(value: Optional[Decimal]) -> str:
    """Render a decimal in plain notation without trailing zeros (110.0 -> 110).

    A missing value renders as an empty cell.
    """
    if value is None:
        return ""
    if value == 0:
        return "0"
    return format(value.normalize(), "f")


def format_row(candle: Candle) -> str:
    """One CSV line: quoted local calendar date, then the raw OHLCV numbers."""
    date = candle.open_time.strftime("%Y-%m-%d")
    numbers = (candle.open, candle.high, candle.low, candle.close, candle.volume)
    return f'"{date}",' + ",".join(format_number(n) for n in numbers) + "\n"


def export_ohlcv_to_csv(candles: Iterable[Candle]) -> str:
    """Export daily candles to CSV format.

    Args:
        candles: Candles in the order they should appear

    Returns:
        CSV string with header, every line terminated by ``\\n``
    """
    output = io.StringIO()
    output.write(",".join(CSV_HEADER) + "\n")
    for candle in candles:
        output.write(format_row(candle))
    return output.getvalue()


def default_csv_path(exchange_id: str, symbol: str, data_dir: Union[str, Path] = "./data") -> Path:
    clean_symbol = symbol.replace("/", "-").replace("\\", "-")
    return Path(data_dir) / f"{exchange_id}_{clean_symbol}_daily.csv"


def write_ohlcv_csv(
    candles: list[Candle],
    exchange_id: str,
    symbol: str,
    *,
    ctx: AppContext,
    file_path: Optional[Union[str, Path]] = None,
) -> Path:
    """Write a candle series to disk, replacing any previous file.

    Missing parent directories are created. I/O errors are logged and re-raised.
    """
    log = ctx.child_logger("export")
    path = Path(file_path) if file_path is not None else default_csv_path(exchange_id, symbol, ctx.settings.data_dir)
    log.info("Starting to write data to CSV file: %s", path)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8", newline="") as fh:
            fh.write(export_ohlcv_to_csv(candles))
    except OSError as exc:
        log.error("Failed to write CSV file %s: %s", path, exc, exc_info=exc)
        raise

    log.info("Data successfully written to CSV file: %s, wrote %d rows", path, len(candles))
    return path
