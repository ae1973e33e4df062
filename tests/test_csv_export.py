"""Tests for CSV export utilities."""

import csv
from datetime import datetime
from decimal import Decimal
from pathlib import Path

import pytest

from cex_spider.export.csv import (
    default_csv_path,
    export_ohlcv_to_csv,
    format_number,
    write_ohlcv_csv,
)
from cex_spider.types import Candle


def _local_day(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d")


def test_export_ohlcv_to_csv_body_line():
    """The row renders a quoted local date followed by the raw numbers."""
    candle = Candle.from_ohlcv([1700000000000, 100.5, 110, 95, 105.25, 123.4])

    result = export_ohlcv_to_csv([candle])

    header, body = result.split("\n", 1)
    assert header == "timestamp,open,high,low,close,volume"
    assert body == f'"{_local_day(1700000000000)}",100.5,110,95,105.25,123.4\n'


def test_export_float_integers_drop_trailing_zero():
    candle = Candle.from_ohlcv([1700000000000, 110.0, 120.50, 0.0, 1e-7, 2500000.0])

    body = export_ohlcv_to_csv([candle]).splitlines()[1]

    assert body.endswith(",110,120.5,0,0.0000001,2500000")


def test_export_missing_volume_renders_empty_cell():
    candle = Candle.from_ohlcv([1700000000000, 100.5, 110, 95, 105.25, None])

    body = export_ohlcv_to_csv([candle]).splitlines()[1]

    assert body == f'"{_local_day(1700000000000)}",100.5,110,95,105.25,'


def test_export_empty_candles():
    """Test exporting empty candles list."""
    assert export_ohlcv_to_csv([]) == "timestamp,open,high,low,close,volume\n"


@pytest.mark.parametrize(
    "value,expected",
    [
        (Decimal("110.0"), "110"),
        (Decimal("100.50"), "100.5"),
        (Decimal("0.00"), "0"),
        (Decimal("-3.10"), "-3.1"),
        (Decimal("1E+3"), "1000"),
        (None, ""),
    ],
)
def test_format_number(value, expected):
    assert format_number(value) == expected


def test_default_csv_path_replaces_separators():
    assert default_csv_path("okx", "ETH/USDT") == Path("./data") / "okx_ETH-USDT_daily.csv"
    assert default_csv_path("okx", "A\\B", "out") == Path("out") / "okx_A-B_daily.csv"


def test_write_creates_parent_directories(ctx, sample_candles, tmp_path):
    target = tmp_path / "nested" / "deeper" / "out.csv"

    path = write_ohlcv_csv(sample_candles, "okx", "ETH/USDT", ctx=ctx, file_path=target)

    assert path == target
    assert target.exists()
    assert target.read_text(encoding="utf-8").count("\n") == len(sample_candles) + 1


def test_write_uses_default_path_under_data_dir(ctx, sample_candles):
    path = write_ohlcv_csv(sample_candles, "binance", "ETH/USDT", ctx=ctx)

    assert path == Path(ctx.settings.data_dir) / "binance_ETH-USDT_daily.csv"
    assert path.exists()


def test_write_is_idempotent_full_overwrite(ctx, sample_candles, tmp_path):
    target = tmp_path / "out.csv"

    write_ohlcv_csv(sample_candles, "okx", "ETH/USDT", ctx=ctx, file_path=target)
    first = target.read_bytes()
    write_ohlcv_csv(sample_candles, "okx", "ETH/USDT", ctx=ctx, file_path=target)

    assert target.read_bytes() == first
    assert b"\r\n" not in first


def test_write_overwrites_longer_previous_file(ctx, sample_candles, tmp_path):
    target = tmp_path / "out.csv"
    write_ohlcv_csv(sample_candles, "okx", "ETH/USDT", ctx=ctx, file_path=target)

    write_ohlcv_csv(sample_candles[:1], "okx", "ETH/USDT", ctx=ctx, file_path=target)

    assert len(target.read_text(encoding="utf-8").splitlines()) == 2


def test_written_rows_round_trip(ctx, sample_candles, tmp_path):
    target = tmp_path / "out.csv"
    write_ohlcv_csv(sample_candles, "okx", "ETH/USDT", ctx=ctx, file_path=target)

    with target.open(newline="", encoding="utf-8") as fh:
        rows = list(csv.reader(fh))

    assert rows[0] == ["timestamp", "open", "high", "low", "close", "volume"]
    for row, candle in zip(rows[1:], sample_candles):
        assert row[0] == _local_day(candle.timestamp)
        assert [Decimal(v) for v in row[1:]] == [candle.open, candle.high, candle.low, candle.close, candle.volume]
    assert len(rows) == len(sample_candles) + 1


def test_write_propagates_os_error(ctx, sample_candles, tmp_path, caplog):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")

    with caplog.at_level("ERROR", logger="cex_spider"):
        with pytest.raises(OSError):
            write_ohlcv_csv(sample_candles, "okx", "ETH/USDT", ctx=ctx, file_path=blocker / "out.csv")

    assert "Failed to write CSV file" in caplog.text
