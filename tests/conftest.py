"""Shared test fixtures for the gas tracker."""

from decimal import Decimal

import pytest

from gas_tracker.config import (
    AppSettings,
    BarkSettings,
    EtherscanSettings,
    HistorySettings,
    PriceFeedSettings,
)

from tests.helpers import BARK_URL, COINGECKO_URL, ETHERSCAN_URL


@pytest.fixture
def etherscan_settings() -> EtherscanSettings:
    return EtherscanSettings(
        api_url=ETHERSCAN_URL,
        api_key="",  # type: ignore[arg-type]
        timeout_seconds=10.0,
        price_timeout_seconds=5.0,
    )


@pytest.fixture
def price_settings() -> PriceFeedSettings:
    return PriceFeedSettings(
        coingecko_url=COINGECKO_URL,
        asset_id="ethereum",
        timeout_seconds=10.0,
        fallback_usd=Decimal("3000"),
    )


@pytest.fixture
def bark_settings() -> BarkSettings:
    return BarkSettings(
        key="test-device-key",  # type: ignore[arg-type]
        server_url=BARK_URL,
        timeout_seconds=10.0,
    )


@pytest.fixture
def mock_settings(
    etherscan_settings: EtherscanSettings,
    price_settings: PriceFeedSettings,
    bark_settings: BarkSettings,
    tmp_path,
) -> AppSettings:
    """Return AppSettings with test defaults (1 gwei threshold, 30 min cooldown)."""
    return AppSettings(
        log_level="DEBUG",
        gas_threshold=Decimal("1.0"),
        notification_cooldown=30,
        default_interval=1,
        etherscan=etherscan_settings,
        price=price_settings,
        bark=bark_settings,
        history=HistorySettings(path=str(tmp_path / "gas_history.json")),
    )
