"""Etherscan gas oracle client.

Fetches the safe/propose/fast gas tiers from Etherscan's gastracker module.
Etherscan does not always report every tier (StandardGasPrice in particular
is usually absent), so each tier falls back to its siblings:

  safe     <- SafeGasPrice | ProposeGasPrice | 0
  standard <- StandardGasPrice | ProposeGasPrice | SafeGasPrice | 0
  fast     <- FastGasPrice | ProposeGasPrice | 0
  propose  <- ProposeGasPrice | 0
"""

from decimal import Decimal, InvalidOperation

import httpx

from gas_tracker.config import EtherscanSettings
from gas_tracker.exceptions import MalformedResponseError, UpstreamError
from gas_tracker.logging import get_logger
from gas_tracker.models import GasEstimate
from gas_tracker.sources.fallback import FallbackChain, Provider

logger = get_logger(__name__)

ETHERSCAN_OK = "1"


def _first_present(result: dict, *keys: str) -> Decimal:
    """Return the first key with a non-empty value as Decimal, else 0.

    Raises:
        MalformedResponseError: The value is not a finite number >= 0.
    """
    for key in keys:
        value = result.get(key)
        if value is None or value == "":
            continue
        try:
            price = Decimal(str(value))
        except InvalidOperation:
            raise MalformedResponseError(f"{key} is not a number: {value!r}") from None
        if not price.is_finite() or price < 0:
            raise MalformedResponseError(f"{key} is not a valid gas price: {value!r}")
        return price
    return Decimal("0")


def parse_gas_oracle(payload: dict) -> GasEstimate:
    """Map an Etherscan gasoracle payload to a GasEstimate.

    Raises:
        UpstreamError: The payload status is not "1".
        MalformedResponseError: The payload shape or a tier value is invalid.
    """
    if not isinstance(payload, dict):
        raise MalformedResponseError("gas oracle payload is not an object")

    if str(payload.get("status")) != ETHERSCAN_OK:
        raise UpstreamError(
            f"gas oracle returned status {payload.get('status')!r}: "
            f"{payload.get('message') or payload.get('result')}"
        )

    result = payload.get("result")
    if not isinstance(result, dict):
        raise MalformedResponseError("gas oracle result is not an object")

    return GasEstimate(
        safe=_first_present(result, "SafeGasPrice", "ProposeGasPrice"),
        standard=_first_present(
            result, "StandardGasPrice", "ProposeGasPrice", "SafeGasPrice"
        ),
        fast=_first_present(result, "FastGasPrice", "ProposeGasPrice"),
        propose=_first_present(result, "ProposeGasPrice"),
    )


class GasSource:
    """Fetches tiered gas estimates from the Etherscan gas oracle.

    Args:
        client: Shared async HTTP client.
        settings: Etherscan endpoint, key and timeout.
    """

    def __init__(self, client: httpx.AsyncClient, settings: EtherscanSettings) -> None:
        self._client = client
        self._settings = settings
        self._chain: FallbackChain[GasEstimate] = FallbackChain(
            "gas",
            [Provider("etherscan", self._fetch_etherscan, settings.timeout_seconds)],
        )

    async def fetch_gas_estimate(self) -> GasEstimate | None:
        """Return the current gas estimate, or None to skip this cycle."""
        estimate = await self._chain.run()
        if estimate is not None:
            logger.debug(
                "gas_estimate_fetched",
                safe=str(estimate.safe),
                standard=str(estimate.standard),
                fast=str(estimate.fast),
            )
        return estimate

    async def _fetch_etherscan(self, timeout: float) -> GasEstimate:
        params = {"module": "gastracker", "action": "gasoracle"}
        api_key = self._settings.api_key.get_secret_value()
        if api_key:
            params["apikey"] = api_key

        response = await self._client.get(
            self._settings.api_url, params=params, timeout=timeout
        )
        response.raise_for_status()
        return parse_gas_oracle(response.json())
