# src/parkchain/application/routing.py
"""
Routing Selector - Smart Channel Selection and Performance Tracking

This module scores the fixed set of delivery channels for the current
network condition and tier, picks a primary route with two alternatives,
and folds every recorded delivery result into per-channel exponential
moving averages. Routing never fails: rpc and gateway are always eligible.

Files that USE this module:
- parkchain.application.gateway (selects and records routes per delivery)
- parkchain.adapters.telegram.handlers (/route and /network commands)
- parkchain.adapters.telegram.jobs (network monitor job)

Files that this module USES:
- parkchain.application.tier_engine (tier level for eligibility and bonuses)
- parkchain.adapters.persistence.file_store (channel performance document)
- parkchain.domain.channels (static channel catalogue and thresholds)
"""
from __future__ import annotations

import logging
from collections import deque
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List, Optional, Protocol

from parkchain.adapters.persistence.file_store import CHANNEL_PERFORMANCE_KEY, JsonFileStore
from parkchain.application.tier_engine import TierEngine
from parkchain.config import Settings
from parkchain.domain.channels import (
    CRITICAL,
    DEFAULT_CHANNEL_PERFORMANCE,
    HIGH,
    LOW,
    NETWORK_CONDITIONS,
    NORMAL,
    PREMIUM_CHANNELS,
    ROUTING_CHANNELS,
    SPEED_BONUS,
    condition_for_load,
)
from parkchain.domain.errors import StorageError
from parkchain.domain.models import ChannelPerformance, RouteScore, RouteSelection, RoutingRecord
from parkchain.domain.tiers import TierDefinition

logger = logging.getLogger(__name__)

PERFORMANCE_SAMPLE_LIMIT = 10


class PerformanceSampler(Protocol):
    """Anything that can return recent per-slot performance samples."""

    def get_recent_performance_samples(self, limit: int = PERFORMANCE_SAMPLE_LIMIT) -> List[Dict[str, Any]]:
        ...


def _default_performance() -> Dict[str, ChannelPerformance]:
    return {
        channel: ChannelPerformance(success_rate=rate, avg_confirm_time=confirm)
        for channel, (rate, confirm) in DEFAULT_CHANNEL_PERFORMANCE.items()
    }


class RoutingSelector:
    """Scores channels and tracks their observed performance."""

    def __init__(self, store: JsonFileStore, tiers: TierEngine, settings: Settings):
        self._store = store
        self._tiers = tiers
        self._alpha = settings.ema_alpha
        self._network_conditions = NORMAL
        self._channel_performance = self._load_channel_performance()
        self._history: Deque[RoutingRecord] = deque(maxlen=settings.routing_history_limit)

    def _load_channel_performance(self) -> Dict[str, ChannelPerformance]:
        performance = _default_performance()
        raw = self._store.load(CHANNEL_PERFORMANCE_KEY, default={})
        try:
            for channel, data in (raw or {}).items():
                if channel in performance:
                    performance[channel] = ChannelPerformance(
                        success_rate=float(data["success_rate"]),
                        avg_confirm_time=float(data["avg_confirm_time"]),
                        total_txs=int(data.get("total_txs", 0)),
                    )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.error("Failed to load channel performance, using defaults: %s", e)
            return _default_performance()
        return performance

    def _save_channel_performance(self) -> None:
        try:
            self._store.save(
                CHANNEL_PERFORMANCE_KEY,
                {channel: perf.to_json() for channel, perf in self._channel_performance.items()},
            )
        except StorageError as e:
            logger.error("Failed to persist channel performance: %s", e)

    # --- network conditions ---

    def get_network_conditions(self) -> str:
        return self._network_conditions

    def set_network_conditions(self, conditions: str) -> None:
        if conditions not in NETWORK_CONDITIONS:
            raise ValueError(f"Unknown network condition: {conditions!r}")
        self._network_conditions = conditions

    def monitor_network_conditions(self, client: Optional[PerformanceSampler]) -> str:
        """
        Sample recent performance and bucket the average load into a condition.

        Without a client the current condition is left unchanged. Sampling
        errors reset the condition to normal.

        Returns:
            The network condition after sampling
        """
        if client is None:
            logger.warning("No client provided for network monitoring")
            return self._network_conditions

        try:
            samples = client.get_recent_performance_samples(PERFORMANCE_SAMPLE_LIMIT)
            if samples:
                avg_tx = sum(float(s["numTransactions"]) for s in samples) / len(samples)
                self._network_conditions = condition_for_load(avg_tx)
                logger.info("Network conditions: %s (%.0f tx/sample)", self._network_conditions, avg_tx)
        except (RuntimeError, KeyError, TypeError, ValueError) as e:
            logger.error("Network monitoring failed, assuming normal: %s", e)
            self._network_conditions = NORMAL

        return self._network_conditions

    # --- scoring ---

    def calculate_route_score(self, channel: str, conditions: str, tier: TierDefinition) -> float:
        """
        Weighted score for one channel; higher is better.

        reliability*50 + success_rate*30 + max(0, 20 - confirm_seconds)
        + 20 when the channel suits the condition + 15 for premium channels
        at level 2+ - base_cost*10000.
        """
        info = ROUTING_CHANNELS.get(channel)
        if info is None:
            return 0.0

        score = info.reliability * 50

        perf = self._channel_performance.get(channel)
        if perf:
            score += perf.success_rate * 30
            score += max(0.0, 20 - perf.avg_confirm_time / 1000)

        if conditions in info.best_for:
            score += 20

        if tier.level >= 2 and channel in PREMIUM_CHANNELS:
            score += 15

        score -= info.base_cost * 10000
        return score

    def eligible_channels(self, tier: TierDefinition) -> List[str]:
        channels = ["rpc", "gateway"]
        if tier.level >= 1:
            channels.append("jito")
        if tier.level >= 2:
            channels.append("triton")
        return channels

    def select_route(self, conditions: Optional[str] = None, prioritize: str = "balanced") -> RouteSelection:
        """
        Pick the best channel for the given condition and the current tier.

        Args:
            conditions: Network condition (defaults to the monitored one)
            prioritize: balanced, speed or cost

        Returns:
            RouteSelection with primary, two alternatives and a recommendation
        """
        conditions = conditions or self._network_conditions
        tier = self._tiers.get_current_tier()

        scores = []
        for channel in self.eligible_channels(tier):
            info = ROUTING_CHANNELS[channel]
            score = self.calculate_route_score(channel, conditions, tier)
            if prioritize == "speed":
                score += SPEED_BONUS.get(info.speed, 0)
            elif prioritize == "cost":
                score += (1 / info.base_cost) * 5
            scores.append(RouteScore(channel=channel, score=score, info=info))

        # sorted() is stable, equal scores keep eligibility order
        ranked = sorted(scores, key=lambda s: s.score, reverse=True)
        primary = ranked[0]

        return RouteSelection(
            primary=primary,
            alternatives=ranked[1:3],
            conditions=conditions,
            recommendation=self.generate_recommendation(primary, conditions, tier),
        )

    @staticmethod
    def generate_recommendation(route: RouteScore, conditions: str, tier: TierDefinition) -> str:
        name = route.info.name
        if conditions == CRITICAL:
            text = f"Network is congested. Using {name} for fastest delivery."
        elif conditions == HIGH:
            text = f"Network is busy. {name} offers best balance."
        elif conditions == LOW:
            text = f"Network is clear. {name} provides cost-effective delivery."
        else:
            text = f"{name} recommended for current conditions."

        if tier.level < 2 and route.channel == "gateway":
            text += " Upgrade to Premium for more routing options."
        return text

    # --- results ---

    def record_routing_result(
        self,
        channel: str,
        success: bool,
        confirmation_time: Optional[float] = None,
        signature: Optional[str] = None,
    ) -> None:
        """
        Fold a delivery result into the channel's EMA and the routing history.

        Unknown channels are still added to the history but have no
        performance entry to update.
        """
        perf = self._channel_performance.get(channel)
        if perf is not None:
            perf.record(success, confirmation_time, self._alpha)
            self._save_channel_performance()

        self._history.appendleft(RoutingRecord(
            timestamp=datetime.now(timezone.utc),
            channel=channel,
            success=success,
            confirmation_time=confirmation_time,
            signature=signature,
            conditions=self._network_conditions,
        ))

    def get_channel_performance(self) -> Dict[str, ChannelPerformance]:
        return dict(self._channel_performance)

    def get_routing_history(self) -> List[RoutingRecord]:
        return list(self._history)

    def get_routing_stats(self) -> Dict[str, Any]:
        total = len(self._history)
        if total == 0:
            return {
                "total_routed": 0,
                "channel_distribution": {},
                "average_confirm_time": 0,
                "success_rate": "0.00",
                "network_conditions": self._network_conditions,
            }

        distribution: Dict[str, int] = {}
        for record in self._history:
            distribution[record.channel] = distribution.get(record.channel, 0) + 1

        successful = sum(1 for r in self._history if r.success)
        timed = [r.confirmation_time for r in self._history if r.success and r.confirmation_time]

        return {
            "total_routed": total,
            "channel_distribution": distribution,
            "average_confirm_time": round(sum(timed) / len(timed)) if timed else 0,
            "success_rate": f"{successful / total * 100:.2f}",
            "network_conditions": self._network_conditions,
            "channel_performance": {c: p.to_json() for c, p in self._channel_performance.items()},
        }

    def get_bulk_routing_strategy(self, transaction_count: int) -> Dict[str, Any]:
        """Batch through the gateway when the tier allows it, otherwise route sequentially."""
        tier = self._tiers.get_current_tier()

        if tier.benefits.max_batch_size >= transaction_count:
            return {
                "recommended": "batch",
                "channels": ["gateway"],
                "estimated_time": 5000,
                "estimated_cost": 0.0001 + transaction_count * 0.00001,
            }

        route = self.select_route(conditions=self._network_conditions)
        perf = self._channel_performance.get(route.primary.channel)
        return {
            "recommended": "sequential",
            "channels": [route.primary.channel],
            "estimated_time": transaction_count * (perf.avg_confirm_time if perf else 5000),
            "estimated_cost": transaction_count * route.primary.info.base_cost,
        }

    def reset_performance_data(self) -> None:
        self._channel_performance = _default_performance()
        self._history.clear()
        self._save_channel_performance()
        logger.info("Routing performance data reset")
