# tests/test_formatter.py
"""
Formatter Tests - Plain-text Telegram Messages
"""
from parkchain.adapters.formatting.formatter import (
    format_achievements,
    format_batch_stats,
    format_metrics,
    format_network,
    format_route,
    format_tier,
)
from parkchain.application.achievements import ACHIEVEMENTS
from parkchain.domain.channels import ROUTING_CHANNELS
from parkchain.domain.models import RouteScore, RouteSelection, TierProgress
from parkchain.domain.tiers import BASIC, FREE, VIP


class TestFormatMetrics:
    def test_empty(self):
        assert "No transactions recorded yet." in format_metrics({"total_transactions": 0})

    def test_with_data(self):
        text = format_metrics({
            "total_transactions": 4,
            "successful_transactions": 2,
            "failed_transactions": 1,
            "pending_transactions": 1,
            "success_rate": "50.00",
            "average_confirmation_time": 2500,
            "total_jito_tips_refunded": 0.003,
            "total_gateway_fees": 0.0002,
            "total_savings": 0.0028,
        })
        assert "Transactions: 4" in text
        assert "Success rate: 50.00%" in text
        assert "Avg confirmation: 2.5s" in text
        assert "Net savings: 0.002800 SOL" in text


class TestFormatTier:
    def test_with_next_tier(self):
        progress = TierProgress(
            next_tier=BASIC,
            transactions_progress=50.0,
            volume_progress=25.0,
            remaining_transactions=5,
            remaining_volume=750.0,
        )
        text = format_tier(FREE, progress, {"lane": "standard", "estimated_confirmation": "8-15s"})
        assert text.startswith("🏅 Tier: Free (level 0)")
        assert "Next: Basic" in text
        assert "Transactions: 50.0% (5 to go)" in text
        assert "Volume: 25.0% (750 to go)" in text
        assert "Lane: standard (8-15s)" in text

    def test_top_tier(self):
        progress = TierProgress(None, 100.0, 100.0, 0, 0.0)
        text = format_tier(VIP, progress)
        assert "Fee discount: 50%" in text
        assert "highest tier" in text


class TestFormatRoute:
    def test_route(self):
        selection = RouteSelection(
            primary=RouteScore("gateway", 115.2, ROUTING_CHANNELS["gateway"]),
            alternatives=[RouteScore("rpc", 87.96, ROUTING_CHANNELS["rpc"])],
            conditions="critical",
            recommendation="Network is congested. Using Gateway Optimized for fastest delivery.",
        )
        text = format_route(selection)
        assert "🔴 critical" in text
        assert "Primary: Gateway Optimized (score 115.2)" in text
        assert "Alternative: Standard RPC (score 88.0)" in text
        assert text.endswith("for fastest delivery.")


class TestFormatBatchStats:
    def test_with_efficiency(self):
        stats = {
            "total_batches": 2,
            "success_rate": "50.00",
            "total_transactions": 4,
            "average_batch_size": 2.0,
            "total_savings": 0.00016,
            "active_batches": 0,
        }
        efficiency = {"transaction_count": 5, "savings": 0.00035, "savings_percent": "70.0%"}
        text = format_batch_stats(stats, efficiency)
        assert "Executed: 2 (50.00% successful)" in text
        assert "Batching 5 transactions saves 0.000350 SOL (70.0%)" in text

    def test_without_efficiency(self):
        stats = {
            "total_batches": 0,
            "success_rate": "0.00",
            "total_transactions": 0,
            "average_batch_size": 0.0,
            "total_savings": 0.0,
            "active_batches": 1,
        }
        assert "Batching" not in format_batch_stats(stats)


class TestFormatAchievements:
    def test_recent_and_unlocked(self):
        first = ACHIEVEMENTS["first_transaction"]
        stats = {
            "unlocked_count": 1,
            "total_count": 16,
            "completion_rate": "6.2",
            "total_points": 100,
        }
        text = format_achievements(stats, [first], [first])
        lines = text.split("\n")
        assert lines[0] == "🎉 Unlocked: First Steps (+100 pts)"
        assert "1/16" in lines[1]
        assert "First Steps: Complete your first Gateway transaction" in text


class TestFormatNetwork:
    def test_no_routes(self):
        text = format_network("low", {"total_routed": 0})
        assert text.startswith("🌐 Network: 🟢 low")
        assert "No routed transactions yet." in text

    def test_with_routes(self):
        text = format_network("high", {
            "total_routed": 3,
            "success_rate": "66.67",
            "average_confirm_time": 3000,
            "channel_distribution": {"rpc": 1, "gateway": 2},
        })
        assert "Routed: 3 (66.67% successful)" in text
        assert "Avg confirmation: 3.0s" in text
        assert text.endswith("— rpc: 1")
