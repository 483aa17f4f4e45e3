"""Transaction fee estimation for a plain ETH transfer.

All calculations use Decimal arithmetic. Rounding is applied only to the
returned display values (fee_native to 6 places, fee_usd to 2 places,
ROUND_HALF_UP); fee_usd is derived from the unrounded native fee.

  fee_gwei   = gas_units * price_gwei
  fee_native = fee_gwei / 1e9
  fee_usd    = fee_native * eth_price_usd
"""

from decimal import ROUND_HALF_UP, Decimal

from gas_tracker.models import FeeEstimate, GasEstimate

TRANSFER_GAS_UNITS = 21000  # gas limit of a simple ETH transfer
GWEI_PER_ETH = Decimal("1000000000")

_NATIVE_PLACES = Decimal("0.000001")
_USD_PLACES = Decimal("0.01")


class FeeEstimator:
    """Converts gas prices into ETH and USD transaction fees.

    Args:
        gas_units: Gas consumed by the transaction being priced.
    """

    def __init__(self, gas_units: int = TRANSFER_GAS_UNITS) -> None:
        self._gas_units = gas_units

    @property
    def gas_units(self) -> int:
        return self._gas_units

    def estimate_fee(self, price_gwei: Decimal, eth_price_usd: Decimal) -> FeeEstimate:
        """Estimate the fee of one transaction at price_gwei.

        Args:
            price_gwei: Gas price in gwei.
            eth_price_usd: USD per ETH.

        Returns:
            FeeEstimate with full-precision fee_gwei and rounded
            fee_native / fee_usd.
        """
        fee_gwei = Decimal(self._gas_units) * price_gwei
        fee_native = fee_gwei / GWEI_PER_ETH
        fee_usd = fee_native * eth_price_usd
        return FeeEstimate(
            gas_units=self._gas_units,
            price_gwei=price_gwei,
            fee_gwei=fee_gwei,
            fee_native=fee_native.quantize(_NATIVE_PLACES, rounding=ROUND_HALF_UP),
            fee_usd=fee_usd.quantize(_USD_PLACES, rounding=ROUND_HALF_UP),
        )

    def estimate_tiers(
        self, gas: GasEstimate, eth_price_usd: Decimal
    ) -> dict[str, FeeEstimate]:
        """Estimate fees for the safe, standard and fast tiers."""
        return {
            tier: self.estimate_fee(price, eth_price_usd)
            for tier, price in gas.tiers().items()
        }


def estimate_fee(price_gwei: Decimal, eth_price_usd: Decimal) -> FeeEstimate:
    """Estimate a transfer fee with the default 21000 gas units."""
    return FeeEstimator().estimate_fee(price_gwei, eth_price_usd)
