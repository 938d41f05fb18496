# src/parkchain/adapters/formatting/formatter.py
"""
Message Formatter - Text Formatting and Presentation

This module renders service snapshots as plain-text Telegram messages:
gateway metrics, tier status, routing decisions, batch statistics,
achievements and network conditions.

Files that USE this module:
- parkchain.adapters.telegram.handlers (one formatter per command)
- tests.test_formatter (unit tests)

Files that this module USES:
- parkchain.domain.models (RouteSelection, TierProgress)
- parkchain.domain.tiers (TierDefinition)
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from parkchain.domain.models import RouteSelection, TierProgress
from parkchain.domain.tiers import TierDefinition

CONDITION_ICONS = {
    "low": "🟢",
    "normal": "🟡",
    "high": "🟠",
    "critical": "🔴",
}

RARITY_ICONS = {
    "common": "⚪",
    "rare": "🔵",
    "epic": "🟣",
    "legendary": "🟡",
}


def _sol(value: float) -> str:
    return f"{value:.6f} SOL"


def _ms_to_seconds(value: float) -> str:
    return f"{value / 1000:.1f}s"


def format_metrics(metrics: Dict[str, Any]) -> str:
    """
    Format the transaction metrics snapshot.

    Args:
        metrics: Dictionary returned by TransactionStore.get_metrics()

    Returns:
        Multi-line summary with counts, rates, fees and savings
    """
    if not metrics.get("total_transactions"):
        return "📊 Gateway Metrics\nNo transactions recorded yet."

    lines = [
        "📊 Gateway Metrics",
        f"— Transactions: {metrics['total_transactions']} "
        f"(✅ {metrics['successful_transactions']} / ❌ {metrics['failed_transactions']} "
        f"/ ⏳ {metrics.get('pending_transactions', 0)})",
        f"— Success rate: {metrics['success_rate']}%",
        f"— Avg confirmation: {_ms_to_seconds(metrics['average_confirmation_time'])}",
        f"— Tips refunded: {_sol(metrics['total_jito_tips_refunded'])}",
        f"— Gateway fees: {_sol(metrics['total_gateway_fees'])}",
        f"— Net savings: {_sol(metrics['total_savings'])}",
    ]
    return "\n".join(lines)


def format_tier(tier: TierDefinition, progress: TierProgress, lane: Optional[Dict[str, Any]] = None) -> str:
    """Format the current tier, its benefits and progress to the next tier."""
    b = tier.benefits
    lines = [
        f"🏅 Tier: {tier.name} (level {tier.level})",
        f"— Fee discount: {b.fee_discount * 100:.0f}%",
        f"— Max batch size: {b.max_batch_size}",
        f"— Speed boost: {b.confirmation_speed_boost}x",
    ]
    if lane:
        lines.append(f"— Lane: {lane['lane']} ({lane['estimated_confirmation']})")

    if progress.next_tier is None:
        lines.append("You have reached the highest tier.")
    else:
        lines.append(f"Next: {progress.next_tier.name}")
        lines.append(
            f"— Transactions: {progress.transactions_progress:.1f}% "
            f"({progress.remaining_transactions} to go)"
        )
        lines.append(
            f"— Volume: {progress.volume_progress:.1f}% "
            f"({progress.remaining_volume:,.0f} to go)"
        )
    return "\n".join(lines)


def format_route(selection: RouteSelection) -> str:
    """Format a routing decision with its alternatives."""
    icon = CONDITION_ICONS.get(selection.conditions, "")
    primary = selection.primary
    lines = [
        f"🧭 Route for {icon} {selection.conditions} network",
        f"— Primary: {primary.info.name} (score {primary.score:.1f})",
    ]
    for alt in selection.alternatives:
        lines.append(f"— Alternative: {alt.info.name} (score {alt.score:.1f})")
    lines.append(selection.recommendation)
    return "\n".join(lines)


def format_batch_stats(stats: Dict[str, Any], efficiency: Optional[Dict[str, Any]] = None) -> str:
    """Format batch statistics and, optionally, a batching efficiency estimate."""
    lines = [
        "📦 Batches",
        f"— Executed: {stats['total_batches']} ({stats['success_rate']}% successful)",
        f"— Transactions batched: {stats['total_transactions']}",
        f"— Average size: {stats['average_batch_size']}",
        f"— Estimated savings: {_sol(stats['total_savings'])}",
        f"— Active: {stats['active_batches']}",
    ]
    if efficiency:
        lines.append(
            f"Batching {efficiency['transaction_count']} transactions saves "
            f"{_sol(efficiency['savings'])} ({efficiency['savings_percent']})"
        )
    return "\n".join(lines)


def format_achievements(stats: Dict[str, Any], unlocked: Iterable[Any], recent: Optional[List[Any]] = None) -> str:
    """
    Format achievement progress.

    Args:
        stats: Dictionary returned by AchievementTracker.get_stats()
        unlocked: Unlocked achievements
        recent: Achievements unlocked by the latest check, highlighted first
    """
    lines = []
    for achievement in recent or []:
        lines.append(f"🎉 Unlocked: {achievement.name} (+{achievement.points} pts)")

    lines.append(
        f"🏆 Achievements: {stats['unlocked_count']}/{stats['total_count']} "
        f"({stats['completion_rate']}%) · {stats['total_points']} pts"
    )
    for achievement in unlocked:
        lines.append(f"{RARITY_ICONS.get(achievement.rarity, '')} {achievement.name}: {achievement.description}")
    return "\n".join(lines)


def format_network(conditions: str, routing_stats: Dict[str, Any]) -> str:
    """Format the monitored network condition and routing history summary."""
    icon = CONDITION_ICONS.get(conditions, "")
    lines = [f"🌐 Network: {icon} {conditions}"]
    if routing_stats.get("total_routed"):
        lines.append(
            f"— Routed: {routing_stats['total_routed']} "
            f"({routing_stats['success_rate']}% successful)"
        )
        lines.append(f"— Avg confirmation: {_ms_to_seconds(routing_stats['average_confirm_time'])}")
        for channel, count in sorted(routing_stats["channel_distribution"].items()):
            lines.append(f"— {channel}: {count}")
    else:
        lines.append("No routed transactions yet.")
    return "\n".join(lines)
