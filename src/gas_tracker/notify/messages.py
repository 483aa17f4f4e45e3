"""Low-gas alert message formatting."""

from decimal import Decimal

from gas_tracker.models import FeeEstimate, GasEstimate
from gas_tracker.notify.bark import NotificationOptions

LOW_GAS_TITLE = "🎉 Gas price is super low!"

# Critical level bypasses Do Not Disturb on the receiving device.
LOW_GAS_OPTIONS = NotificationOptions(
    sound="bell",
    icon="🚀",
    group="gas-tracker",
    level="critical",
    badge=1,
)

_TIER_LABELS = {
    "safe": "🐌 Safe",
    "standard": "⚡ Standard",
    "fast": "🚀 Fast",
}


def format_low_gas_body(
    gas: GasEstimate,
    fees: dict[str, FeeEstimate],
    threshold_gwei: Decimal,
) -> str:
    """Build the alert body listing all three tiers and their transfer fees."""
    lines = [f"Gas price triggered the alert (<= {threshold_gwei} Gwei)", ""]
    for tier, price in gas.tiers().items():
        fee = fees[tier]
        lines.append(f"{_TIER_LABELS[tier]}: {price:.2f} Gwei")
        lines.append(f"   Fee: {fee.fee_native} ETH (${fee.fee_usd})")
        lines.append("")
    lines.append("Now is a good time to transact!")
    return "\n".join(lines)
