"""Configuration system using pydantic-settings with environment variable loading."""

from decimal import Decimal
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class EtherscanSettings(BaseSettings):
    """Etherscan API settings (gas oracle and secondary ETH price)."""

    model_config = SettingsConfigDict(
        env_prefix="ETHERSCAN_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_url: str = "https://api.etherscan.io/api"
    api_key: SecretStr = SecretStr("")
    timeout_seconds: float = 10.0  # gas oracle
    price_timeout_seconds: float = 5.0  # stats/ethprice fallback


class PriceFeedSettings(BaseSettings):
    """Primary ETH/USD price feed (CoinGecko) and last-resort default."""

    model_config = SettingsConfigDict(
        env_prefix="PRICE_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    coingecko_url: str = "https://api.coingecko.com/api/v3/simple/price"
    asset_id: str = "ethereum"
    timeout_seconds: float = 10.0
    fallback_usd: Decimal = Decimal("3000")


class BarkSettings(BaseSettings):
    """Bark push notification settings.

    An empty key disables notifications entirely.
    """

    model_config = SettingsConfigDict(
        env_prefix="BARK_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    key: SecretStr = SecretStr("")
    server_url: str = "https://api.day.app"
    timeout_seconds: float = 10.0


class HistorySettings(BaseSettings):
    """Query history file configuration.

    Recording is off by default: the history file is loaded and summarized
    every cycle, but new records are only appended when enabled.
    """

    model_config = SettingsConfigDict(
        env_prefix="HISTORY_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    enabled: bool = False
    path: str = "gas_history.json"
    max_entries: int = Field(default=100, ge=1)
    summary_window: int = Field(default=10, ge=1)


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"

    gas_threshold: Decimal = Field(default=Decimal("1.0"), ge=0)  # gwei
    notification_cooldown: int = Field(default=30, ge=0)  # minutes
    default_interval: int = Field(default=1, ge=1)  # minutes between cycles

    etherscan: EtherscanSettings = Field(default_factory=EtherscanSettings)
    price: PriceFeedSettings = Field(default_factory=PriceFeedSettings)
    bark: BarkSettings = Field(default_factory=BarkSettings)
    history: HistorySettings = Field(default_factory=HistorySettings)

    @property
    def cooldown_ms(self) -> int:
        return self.notification_cooldown * 60 * 1000
