"""Export module."""

from cex_spider.export.csv import default_csv_path, export_ohlcv_to_csv, write_ohlcv_csv

__all__ = [
    "default_csv_path",
    "export_ohlcv_to_csv",
    "write_ohlcv_csv",
]
