# src/parkchain/application/tier_engine.py
"""
Tier Engine - User Tier Calculation and Fee Discounts

This module derives the user's tier from the transaction log and exposes
the fee and lane calculations that depend on it. The persisted tier only
changes when ``update_tier`` is called, so ``get_current_tier`` and
``calculate_user_tier`` can disagree in between.

Files that USE this module:
- parkchain.application.routing (tier level gates channel eligibility)
- parkchain.application.batch (max batch size and discounted fees)
- parkchain.application.gateway (discounted gateway fee)
- parkchain.application.achievements (tier level achievements)
- parkchain.adapters.telegram.handlers (/tier command)

Files that this module USES:
- parkchain.application.transaction_store (successful count and volume)
- parkchain.adapters.persistence.file_store (persisted tier id)
- parkchain.domain.tiers (static tier catalogue)
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List

from parkchain.adapters.persistence.file_store import USER_TIER_KEY, JsonFileStore
from parkchain.application.transaction_store import TransactionStore
from parkchain.domain.channels import CONDITION_FEE_MULTIPLIERS, NORMAL
from parkchain.domain.errors import StorageError
from parkchain.domain.models import TierProgress, TierUpdate
from parkchain.domain.tiers import FREE, USER_TIERS, TierDefinition, get_tier, next_tier, tiers_descending

logger = logging.getLogger(__name__)

# Priority lane per tier level
PRIORITY_LANES: Dict[int, Dict[str, Any]] = {
    3: {"lane": "vip-dedicated", "priority": "highest", "estimated_confirmation": "1-2s", "dedicated": True},
    2: {"lane": "premium", "priority": "high", "estimated_confirmation": "2-4s", "dedicated": True},
    1: {"lane": "standard-fast", "priority": "medium", "estimated_confirmation": "4-8s", "dedicated": False},
    0: {"lane": "standard", "priority": "normal", "estimated_confirmation": "8-15s", "dedicated": False},
}


class TierEngine:
    """Calculates and persists the user's tier."""

    def __init__(self, store: JsonFileStore, transactions: TransactionStore):
        self._store = store
        self._transactions = transactions
        self._current_tier_id = self._load_user_tier()

    def _load_user_tier(self) -> str:
        tier_id = self._store.load(USER_TIER_KEY, default=FREE.id)
        if not isinstance(tier_id, str) or tier_id.lower() not in USER_TIERS:
            logger.warning("Ignoring unknown persisted tier %r, using free", tier_id)
            return FREE.id
        return tier_id.lower()

    def save_user_tier(self, tier_id: str) -> TierDefinition:
        """
        Persist a tier id and make it current.

        Raises:
            UnknownTierError: If the id is not a known tier
        """
        tier = get_tier(tier_id)
        self._current_tier_id = tier.id
        try:
            self._store.save(USER_TIER_KEY, tier.id)
        except StorageError as e:
            logger.error("Failed to persist user tier: %s", e)
        return tier

    def calculate_user_tier(self) -> str:
        """
        Highest tier whose count AND volume thresholds are both met.

        Checked from VIP downward; the first match wins.
        """
        count, volume = self._transactions.get_successful_totals()
        for tier in tiers_descending():
            if tier.qualifies(count, volume):
                return tier.id
        return FREE.id

    def get_current_tier(self) -> TierDefinition:
        """Persisted tier (not recalculated)."""
        return USER_TIERS[self._current_tier_id]

    def update_tier(self) -> TierUpdate:
        """
        Recalculate and persist the tier if it changed.

        Returns:
            TierUpdate; ``upgraded`` is True on any change and ``downgraded``
            marks a change to a lower level
        """
        old_tier = self.get_current_tier()
        new_tier = USER_TIERS[self.calculate_user_tier()]

        if new_tier.id == old_tier.id:
            return TierUpdate(upgraded=False, old_tier=old_tier, new_tier=old_tier)

        self.save_user_tier(new_tier.id)
        downgraded = new_tier.level < old_tier.level
        if downgraded:
            message = f"Your tier changed from {old_tier.name} to {new_tier.name}."
        else:
            message = f"Congratulations! You've been upgraded to {new_tier.name} tier!"
        logger.info("Tier changed: %s -> %s", old_tier.id, new_tier.id)

        return TierUpdate(
            upgraded=True,
            old_tier=old_tier,
            new_tier=new_tier,
            message=message,
            downgraded=downgraded,
        )

    def get_next_tier_progress(self) -> TierProgress:
        """Progress toward the tier above the persisted one; VIP reports 100/100."""
        upcoming = next_tier(self.get_current_tier())
        if upcoming is None:
            return TierProgress(
                next_tier=None,
                transactions_progress=100.0,
                volume_progress=100.0,
                remaining_transactions=0,
                remaining_volume=0.0,
            )

        count, volume = self._transactions.get_successful_totals()
        required = upcoming.requirements
        return TierProgress(
            next_tier=upcoming,
            transactions_progress=round(min(count / required.min_transactions * 100, 100.0), 1),
            volume_progress=round(min(volume / required.min_volume * 100, 100.0), 1),
            remaining_transactions=max(0, required.min_transactions - count),
            remaining_volume=max(0.0, required.min_volume - volume),
        )

    def calculate_priority_fee(self, base_fee: float, network_conditions: str = NORMAL) -> float:
        """Base fee scaled by network condition and the tier's priority multiplier."""
        condition_multiplier = CONDITION_FEE_MULTIPLIERS.get(network_conditions, 1.0)
        return base_fee * condition_multiplier * self.get_current_tier().benefits.priority_multiplier

    def calculate_gateway_fee(self, base_fee: float = 0.0001) -> float:
        """Base fee after the tier's discount."""
        return base_fee * (1 - self.get_current_tier().benefits.fee_discount)

    def can_use_batch(self, batch_size: int) -> bool:
        return batch_size <= self.get_current_tier().benefits.max_batch_size

    def get_priority_lane(self) -> Dict[str, Any]:
        return dict(PRIORITY_LANES[self.get_current_tier().level])

    def get_all_tiers(self) -> List[TierDefinition]:
        return list(USER_TIERS.values())

    def get_tier_stats(self) -> Dict[str, Any]:
        tier = self.get_current_tier()
        metrics = self._transactions.get_metrics()
        count, volume = self._transactions.get_successful_totals()
        average_savings = tier.benefits.fee_discount * 0.0001 * metrics["total_transactions"]

        return {
            "tier": tier.name,
            "level": tier.level,
            "total_transactions": count,
            "total_volume": round(volume, 2),
            "average_savings": round(average_savings, 6),
            "speed_improvement": f"{tier.benefits.confirmation_speed_boost}x",
            "fee_discount": f"{tier.benefits.fee_discount * 100:.0f}%",
            "max_batch_size": tier.benefits.max_batch_size,
        }
