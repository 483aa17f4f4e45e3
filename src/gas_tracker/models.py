"""Shared data models for the gas tracker.

All gas prices, ETH prices and fees are Decimal. Floats only appear when a
HistoryRecord is serialized to the JSON history file.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal


@dataclass(frozen=True)
class GasEstimate:
    """Tiered gas prices in gwei as reported by the gas oracle."""

    safe: Decimal
    standard: Decimal
    fast: Decimal
    propose: Decimal = Decimal("0")

    def tiers(self) -> dict[str, Decimal]:
        """Return the three notification tiers in display order."""
        return {"safe": self.safe, "standard": self.standard, "fast": self.fast}


@dataclass(frozen=True)
class FeeEstimate:
    """Estimated cost of a transaction at a given gas price.

    fee_native and fee_usd are display values (6 and 2 decimal places).
    """

    gas_units: int
    price_gwei: Decimal
    fee_gwei: Decimal
    fee_native: Decimal
    fee_usd: Decimal


@dataclass
class NotificationState:
    """Cooldown state owned by the NotificationGate.

    last_fired_at_ms is 0 until the first confirmed dispatch and resets on
    restart.
    """

    threshold_gwei: Decimal
    cooldown_ms: int
    last_fired_at_ms: int = 0


@dataclass(frozen=True)
class GateDecision:
    """Outcome of a single NotificationGate evaluation."""

    should_fire: bool
    reason: str
    remaining_cooldown_minutes: int | None = None


@dataclass
class HistoryRecord:
    """One query result as stored in the history file."""

    timestamp: str
    safe: Decimal
    standard: Decimal
    fast: Decimal
    eth_price: Decimal
    safe_fee_usd: Decimal | None = None
    standard_fee_usd: Decimal | None = None
    fast_fee_usd: Decimal | None = None

    @property
    def has_usd_fees(self) -> bool:
        return self.safe_fee_usd is not None

    def to_dict(self) -> dict:
        """Serialize using the history file's camelCase keys."""
        data: dict = {
            "timestamp": self.timestamp,
            "safe": float(self.safe),
            "standard": float(self.standard),
            "fast": float(self.fast),
            "ethPrice": float(self.eth_price),
        }
        if self.has_usd_fees:
            data["safeFeeUsd"] = float(self.safe_fee_usd)
            data["standardFeeUsd"] = float(self.standard_fee_usd or 0)
            data["fastFeeUsd"] = float(self.fast_fee_usd or 0)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "HistoryRecord":
        """Parse a history file entry.

        Raises:
            KeyError: A required field is missing.
            decimal.InvalidOperation: A numeric field is not a number.
        """

        def _optional(key: str) -> Decimal | None:
            value = data.get(key)
            return Decimal(str(value)) if value is not None else None

        return cls(
            timestamp=str(data["timestamp"]),
            safe=Decimal(str(data["safe"])),
            standard=Decimal(str(data["standard"])),
            fast=Decimal(str(data["fast"])),
            eth_price=Decimal(str(data["ethPrice"])),
            safe_fee_usd=_optional("safeFeeUsd"),
            standard_fee_usd=_optional("standardFeeUsd"),
            fast_fee_usd=_optional("fastFeeUsd"),
        )


@dataclass(frozen=True)
class HistorySummary:
    """Rolling averages over the most recent history records."""

    count: int
    avg_safe: Decimal
    avg_standard: Decimal
    avg_fast: Decimal
    avg_safe_fee_usd: Decimal | None = None
    avg_standard_fee_usd: Decimal | None = None
    avg_fast_fee_usd: Decimal | None = None


@dataclass
class CycleResult:
    """What a single query cycle observed and did."""

    ok: bool
    gas: GasEstimate | None = None
    eth_price_usd: Decimal | None = None
    fees: dict[str, FeeEstimate] = field(default_factory=dict)
    decision: GateDecision | None = None
    notified: bool = False
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
