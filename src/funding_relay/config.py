"""Configuration system using pydantic-settings with environment variable loading."""

import sys
from typing import Literal

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


def _is_linux() -> bool:
    return sys.platform.startswith("linux")


def default_host() -> str:
    """Bind on all interfaces on Linux (container deploys), loopback elsewhere."""
    return "0.0.0.0" if _is_linux() else "localhost"


def default_log_level() -> str:
    """Quiet by default on Linux, verbose on developer machines."""
    return "ERROR" if _is_linux() else "DEBUG"


class ServerSettings(BaseSettings):
    """HTTP listener configuration."""

    model_config = SettingsConfigDict(env_prefix="SERVER_", populate_by_name=True)

    host: str = Field(default_factory=default_host)
    port: int = Field(8080, validation_alias=AliasChoices("SERVER_PORT", "PORT"))


class ExchangeSettings(BaseSettings):
    """bitFlyer Lightning connection settings.

    Only public endpoints are used, so credentials are optional.
    """

    model_config = SettingsConfigDict(env_prefix="EXCHANGE_")

    api_key: SecretStr = SecretStr("")
    api_secret: SecretStr = SecretStr("")
    default_product_code: str = "FX_BTC_JPY"
    request_timeout: float = 10.0  # seconds, per outbound call


class StoreSettings(BaseSettings):
    """Snapshot document store configuration.

    ``product_code_source`` selects what the stored ``product_code`` field holds:
    ``resolved`` writes the product the request resolved to, ``legacy`` always
    writes ``legacy_product_code`` as the first deployments did.
    """

    model_config = SettingsConfigDict(env_prefix="STORE_")

    backend: Literal["firestore", "sqlite"] = "firestore"
    collection: str = "funding_rate"
    firestore_project: str = ""  # empty -> PROJECT_ID
    sqlite_path: str = "data/snapshots.db"
    write_timeout: float = 10.0  # seconds
    product_code_source: Literal["resolved", "legacy"] = "resolved"
    legacy_product_code: str = "FX_BTC_JPY"


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        populate_by_name=True,
        extra="ignore",
    )

    # Shared secret for the ProjectId header; also the default Firestore project.
    project_id: SecretStr = Field(
        SecretStr(""), validation_alias=AliasChoices("PROJECT_ID", "PROJECTID")
    )
    log_level: str = Field(default_factory=default_log_level)
    log_format: Literal["console", "json"] = "console"
    server: ServerSettings = Field(default_factory=ServerSettings)
    exchange: ExchangeSettings = Field(default_factory=ExchangeSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
