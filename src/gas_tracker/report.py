"""Console rendering of query results and history averages."""

from datetime import datetime
from decimal import Decimal

from gas_tracker.models import FeeEstimate, GasEstimate, HistorySummary

_TIER_HEADINGS = {
    "safe": "🐌 Slow (Safe)",
    "standard": "⚡ Standard",
    "fast": "🚀 Fast",
}


def format_gas_report(
    gas: GasEstimate,
    eth_price_usd: Decimal,
    fees: dict[str, FeeEstimate],
    queried_at: datetime,
) -> str:
    """Render the per-cycle gas price report."""
    gas_units = next(iter(fees.values())).gas_units if fees else 21000
    lines = [
        "",
        "=== Ethereum Mainnet Gas Prices ===",
        f"Queried at: {queried_at.astimezone():%Y-%m-%d %H:%M:%S}",
        f"ETH price: ${eth_price_usd:.2f}",
        "",
    ]
    for tier, price in gas.tiers().items():
        fee = fees[tier]
        lines.append(f"{_TIER_HEADINGS[tier]}:")
        lines.append(f"   Gas price: {price:.2f} Gwei")
        lines.append(f"   Transfer fee: {fee.fee_native} ETH (${fee.fee_usd})")
        lines.append("")
    lines.append(f"Note: transfer fees assume a {gas_units} gas limit")
    lines.append("=" * 37)
    return "\n".join(lines)


def format_history_summary(summary: HistorySummary | None) -> str:
    """Render the rolling averages line, or a "no data" notice."""
    if summary is None:
        return "No history data yet"

    header = f"\n📊 Average of the last {summary.count} queries:"
    if summary.avg_safe_fee_usd is None:
        body = (
            f"Slow: {summary.avg_safe} Gwei | "
            f"Standard: {summary.avg_standard} Gwei | "
            f"Fast: {summary.avg_fast} Gwei"
        )
    else:
        body = (
            f"Slow: {summary.avg_safe} Gwei (${summary.avg_safe_fee_usd}) | "
            f"Standard: {summary.avg_standard} Gwei (${summary.avg_standard_fee_usd}) | "
            f"Fast: {summary.avg_fast} Gwei (${summary.avg_fast_fee_usd})"
        )
    return f"{header}\n{body}"
