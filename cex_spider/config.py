"""Environment-driven settings.

Values come from the process environment and an optional `.env` file in the
working directory. Empty variables are treated as unset so the defaults apply.
"""

from __future__ import annotations

from typing import Annotated, Literal, Optional
from urllib.parse import urlsplit, urlunsplit

from pydantic import AliasChoices, AnyUrl, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

LogLevelName = Literal["trace", "debug", "info", "warn", "error", "fatal"]
AppEnv = Literal["development", "production", "test"]

DEFAULT_EXCHANGES: tuple[str, ...] = ("okx",)
DEFAULT_SYMBOLS: tuple[str, ...] = ("ETH/USDT",)


def parse_list(value: object, default: tuple[str, ...]) -> list[str]:
    """Split a comma-separated value into trimmed, non-empty items."""
    if value is None or value == "":
        return list(default)
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return [str(item).strip() for item in value if str(item).strip()]


def mask_url(url: str) -> str:
    """Hide the password part of a URL so it can be logged."""
    parts = urlsplit(url)
    if not parts.password:
        return url
    host = parts.hostname or ""
    if parts.port:
        host = f"{host}:{parts.port}"
    netloc = f"{parts.username}:***@{host}" if parts.username else f"***@{host}"
    return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
    )

    proxy_url: Optional[AnyUrl] = Field(default=None, validation_alias="PROXY_URL")
    log_level: LogLevelName = Field(default="info", validation_alias="LOG_LEVEL")
    app_env: AppEnv = Field(
        default="development",
        validation_alias=AliasChoices("APP_ENV", "NODE_ENV"),
    )
    exchanges: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_EXCHANGES),
        validation_alias="EXCHANGES",
    )
    symbols: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_SYMBOLS),
        validation_alias="SYMBOLS",
    )
    data_dir: str = Field(default="./data", validation_alias="DATA_DIR")

    @field_validator("log_level", "app_env", mode="before")
    @classmethod
    def _lowercase(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("exchanges", mode="before")
    @classmethod
    def _split_exchanges(cls, value: object) -> list[str]:
        return parse_list(value, DEFAULT_EXCHANGES)

    @field_validator("symbols", mode="before")
    @classmethod
    def _split_symbols(cls, value: object) -> list[str]:
        return parse_list(value, DEFAULT_SYMBOLS)

    @property
    def proxy(self) -> Optional[str]:
        """Proxy URL as a plain string, or None when not configured."""
        return str(self.proxy_url) if self.proxy_url is not None else None

    def redacted(self) -> dict[str, object]:
        """Settings as a dict that is safe to log."""
        data = self.model_dump()
        data["proxy_url"] = mask_url(self.proxy) if self.proxy else None
        return data


def load_settings(**overrides: object) -> Settings:
    """Load settings from the environment.

    Keyword overrides use the environment variable names (e.g. ``LOG_LEVEL``).

    Raises:
        pydantic.ValidationError: If any value is malformed.
    """
    return Settings(**overrides)
