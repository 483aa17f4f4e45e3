"""Upstream data sources -- gas oracle, ETH price feed, and provider fallback."""

from gas_tracker.sources.fallback import FallbackChain, Provider
from gas_tracker.sources.gas_source import GasSource
from gas_tracker.sources.price_source import PriceSource

__all__ = ["FallbackChain", "GasSource", "PriceSource", "Provider"]
