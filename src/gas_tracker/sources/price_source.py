"""ETH/USD price feed with provider fallback and a cached last-known value.

Provider order:
1. CoinGecko simple/price (primary)
2. Etherscan stats/ethprice (secondary)
3. Last successfully fetched price, or the configured default if none yet

fetch_asset_price_usd() therefore always returns a price.
"""

import asyncio
from decimal import Decimal, InvalidOperation

import httpx

from gas_tracker.config import EtherscanSettings, PriceFeedSettings
from gas_tracker.exceptions import MalformedResponseError, UpstreamError
from gas_tracker.logging import get_logger
from gas_tracker.sources.fallback import FallbackChain, Provider
from gas_tracker.sources.gas_source import ETHERSCAN_OK

logger = get_logger(__name__)


def _positive_price(raw: object, provider: str) -> Decimal:
    """Parse raw as a finite price > 0."""
    try:
        price = Decimal(str(raw))
    except InvalidOperation:
        raise MalformedResponseError(f"{provider} price is not a number: {raw!r}") from None
    if not price.is_finite() or price <= 0:
        raise MalformedResponseError(f"{provider} returned invalid price {raw!r}")
    return price


def parse_coingecko_price(payload: dict, asset_id: str) -> Decimal:
    """Extract `{asset_id: {usd: n}}` from a CoinGecko response.

    A missing, zero or non-finite price is treated as malformed.
    """
    try:
        raw = payload[asset_id]["usd"]
    except (KeyError, TypeError):
        raise MalformedResponseError("unexpected CoinGecko response shape") from None
    return _positive_price(raw, "CoinGecko")


def parse_etherscan_price(payload: dict) -> Decimal:
    """Extract result.ethusd from an Etherscan stats/ethprice response."""
    if not isinstance(payload, dict) or str(payload.get("status")) != ETHERSCAN_OK:
        status = payload.get("status") if isinstance(payload, dict) else None
        raise UpstreamError(f"ethprice returned status {status!r}")
    try:
        raw = payload["result"]["ethusd"]
    except (KeyError, TypeError):
        raise MalformedResponseError("unexpected ethprice response shape") from None
    return _positive_price(raw, "Etherscan")


class PriceSource:
    """ETH/USD price with a CoinGecko -> Etherscan -> cache fallback chain.

    The cached price is updated only on a successful provider fetch and is
    guarded by an asyncio.Lock.

    Args:
        client: Shared async HTTP client.
        settings: CoinGecko endpoint, timeout and default price.
        etherscan: Etherscan endpoint, key and secondary timeout.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        settings: PriceFeedSettings,
        etherscan: EtherscanSettings,
    ) -> None:
        self._client = client
        self._settings = settings
        self._etherscan = etherscan
        self._cached_price: Decimal | None = None
        self._lock = asyncio.Lock()
        self._chain: FallbackChain[Decimal] = FallbackChain(
            "price",
            [
                Provider("coingecko", self._fetch_coingecko, settings.timeout_seconds),
                Provider(
                    "etherscan",
                    self._fetch_etherscan,
                    etherscan.price_timeout_seconds,
                ),
            ],
        )

    @property
    def cached_price(self) -> Decimal | None:
        """Last successfully fetched price, or None if never fetched."""
        return self._cached_price

    async def fetch_asset_price_usd(self) -> Decimal:
        """Return the current ETH/USD price. Never raises."""
        price = await self._chain.run()

        async with self._lock:
            if price is not None:
                self._cached_price = price
                return price

            fallback = (
                self._cached_price
                if self._cached_price is not None
                else self._settings.fallback_usd
            )

        logger.warning(
            "price_using_fallback",
            price=str(fallback),
            source="cache" if self._cached_price is not None else "default",
        )
        return fallback

    async def _fetch_coingecko(self, timeout: float) -> Decimal:
        response = await self._client.get(
            self._settings.coingecko_url,
            params={"ids": self._settings.asset_id, "vs_currencies": "usd"},
            timeout=timeout,
        )
        response.raise_for_status()
        return parse_coingecko_price(response.json(), self._settings.asset_id)

    async def _fetch_etherscan(self, timeout: float) -> Decimal:
        params = {"module": "stats", "action": "ethprice"}
        api_key = self._etherscan.api_key.get_secret_value()
        if api_key:
            params["apikey"] = api_key

        response = await self._client.get(
            self._etherscan.api_url, params=params, timeout=timeout
        )
        response.raise_for_status()
        return parse_etherscan_price(response.json())
