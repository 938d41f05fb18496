# src/parkchain/application/achievements.py
"""
Achievement Tracker - Milestones Over Gateway Activity

Unlocks a static catalogue of milestones (transaction counts, savings,
tier levels, batching, daily consistency) from the current state of the
other services. Unlocks are persisted and never revoked.

Files that USE this module:
- parkchain.adapters.telegram.handlers (/achievements command)
- parkchain.application.container (composition)

Files that this module USES:
- parkchain.application.transaction_store (counts, savings, daily activity)
- parkchain.application.tier_engine (current tier level)
- parkchain.application.batch (batch counts and sizes)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from parkchain.adapters.persistence.file_store import ACHIEVEMENTS_KEY, JsonFileStore
from parkchain.application.batch import BatchCoordinator
from parkchain.application.tier_engine import TierEngine
from parkchain.application.transaction_store import TransactionStore
from parkchain.domain.errors import StorageError
from parkchain.domain.models import SUCCESS, parse_timestamp

logger = logging.getLogger(__name__)

RARITIES = ("common", "rare", "epic", "legendary")


@dataclass(frozen=True)
class Achievement:
    id: str
    category: str
    name: str
    description: str
    requirement: str
    threshold: float
    points: int
    badge: str
    rarity: str


ACHIEVEMENTS: Dict[str, Achievement] = {
    a.id: a
    for a in (
        Achievement("first_transaction", "transactions", "First Steps",
                    "Complete your first Gateway transaction", "transaction_count", 1, 100, "bronze", "common"),
        Achievement("ten_transactions", "transactions", "Getting Started",
                    "Complete 10 transactions", "transaction_count", 10, 250, "silver", "common"),
        Achievement("fifty_transactions", "transactions", "Gateway Regular",
                    "Complete 50 transactions", "transaction_count", 50, 500, "gold", "rare"),
        Achievement("hundred_transactions", "transactions", "Century Club",
                    "Complete 100 transactions", "transaction_count", 100, 1000, "platinum", "epic"),
        Achievement("first_savings", "savings", "Smart Saver",
                    "Save your first 0.001 SOL", "total_savings", 0.001, 150, "bronze", "common"),
        Achievement("big_saver", "savings", "Master Optimizer",
                    "Save 0.1 SOL in total", "total_savings", 0.1, 750, "gold", "rare"),
        Achievement("whale_saver", "savings", "Whale Optimizer",
                    "Save 1 SOL in total", "total_savings", 1.0, 2000, "platinum", "legendary"),
        Achievement("basic_tier", "tiers", "Rising Star",
                    "Reach Basic tier", "tier_level", 1, 300, "silver", "common"),
        Achievement("premium_tier", "tiers", "Premium Member",
                    "Reach Premium tier", "tier_level", 2, 750, "gold", "rare"),
        Achievement("vip_tier", "tiers", "VIP Legend",
                    "Reach VIP tier", "tier_level", 3, 2000, "platinum", "legendary"),
        Achievement("first_batch", "batching", "Batch Master",
                    "Execute your first batch transaction", "batch_count", 1, 200, "bronze", "common"),
        Achievement("big_batch", "batching", "Efficiency Expert",
                    "Execute a batch with 10+ transactions", "batch_size", 10, 500, "gold", "rare"),
        Achievement("batch_addict", "batching", "Batch Enthusiast",
                    "Execute 20 batch transactions", "batch_count", 20, 1000, "platinum", "epic"),
        Achievement("seven_day_streak", "consistency", "Consistent User",
                    "Transact for 7 days in a row", "streak_days", 7, 500, "silver", "rare"),
        Achievement("thirty_day_streak", "consistency", "Dedicated Pro",
                    "Transact for 30 days in a row", "streak_days", 30, 2500, "platinum", "legendary"),
        Achievement("perfect_day", "special", "Perfect Day",
                    "100% success rate with 10+ transactions in a day", "perfect_success", 10, 750, "gold", "epic"),
    )
}


class AchievementTracker:
    """Checks and persists achievement unlocks."""

    def __init__(
        self,
        store: JsonFileStore,
        transactions: TransactionStore,
        tiers: TierEngine,
        batches: BatchCoordinator,
    ):
        self._store = store
        self._transactions = transactions
        self._tiers = tiers
        self._batches = batches
        self._unlocked: Dict[str, Dict[str, Any]] = self._load()

    def _load(self) -> Dict[str, Dict[str, Any]]:
        raw = self._store.load(ACHIEVEMENTS_KEY, default={})
        if not isinstance(raw, dict):
            logger.error("Ignoring malformed achievements document")
            return {}
        return {k: v for k, v in raw.items() if k in ACHIEVEMENTS and isinstance(v, dict)}

    def _save(self) -> None:
        try:
            self._store.save(ACHIEVEMENTS_KEY, self._unlocked)
        except StorageError as e:
            logger.error("Failed to persist achievements: %s", e)

    def _current_value(self, requirement: str, now: datetime) -> float:
        if requirement == "transaction_count":
            return self._transactions.get_metrics()["total_transactions"]
        if requirement == "total_savings":
            return self._transactions.get_metrics()["total_savings"]
        if requirement == "tier_level":
            return self._tiers.get_current_tier().level
        if requirement == "batch_count":
            return self._batches.get_batch_stats()["total_batches"]
        if requirement == "batch_size":
            return self._batches.get_batch_stats()["largest_batch_size"]
        if requirement == "streak_days":
            return self.current_streak(now)
        if requirement == "perfect_success":
            return self._perfect_day_count(now)
        return 0

    def _perfect_day_count(self, now: datetime) -> int:
        """Today's transaction count if every one of them succeeded, else 0."""
        today = now.date()
        todays = [tx for tx in self._transactions.get_transactions() if tx.timestamp.date() == today]
        if todays and all(tx.status == SUCCESS for tx in todays):
            return len(todays)
        return 0

    def current_streak(self, now: Optional[datetime] = None) -> int:
        """Consecutive UTC days with at least one transaction, ending today."""
        now = parse_timestamp(now) if now else datetime.now(timezone.utc)
        active_days = {tx.timestamp.date() for tx in self._transactions.get_transactions()}
        day = now.date()
        streak = 0
        while day in active_days:
            streak += 1
            day -= timedelta(days=1)
        return streak

    def check_achievements(self, now: Optional[datetime] = None) -> List[Achievement]:
        """
        Unlock every achievement whose requirement is now met.

        Returns:
            Achievements unlocked by this call, in catalogue order
        """
        now = parse_timestamp(now) if now else datetime.now(timezone.utc)
        newly_unlocked = []
        for achievement in ACHIEVEMENTS.values():
            if self.is_unlocked(achievement.id):
                continue
            if self._current_value(achievement.requirement, now) >= achievement.threshold:
                self.unlock(achievement.id, now=now)
                newly_unlocked.append(achievement)
        if newly_unlocked:
            logger.info("Unlocked achievements: %s", ", ".join(a.id for a in newly_unlocked))
        return newly_unlocked

    def unlock(self, achievement_id: str, now: Optional[datetime] = None) -> bool:
        """Mark an achievement unlocked. Unknown ids are ignored."""
        achievement = ACHIEVEMENTS.get(achievement_id)
        if achievement is None:
            return False
        self._unlocked[achievement_id] = {
            "id": achievement_id,
            "unlocked": True,
            "unlocked_at": (now or datetime.now(timezone.utc)).isoformat(),
            "points": achievement.points,
        }
        self._save()
        return True

    def is_unlocked(self, achievement_id: str) -> bool:
        return bool(self._unlocked.get(achievement_id, {}).get("unlocked"))

    def get_unlocked_achievements(self) -> List[Achievement]:
        return [a for a in ACHIEVEMENTS.values() if self.is_unlocked(a.id)]

    def get_locked_achievements(self) -> List[Achievement]:
        return [a for a in ACHIEVEMENTS.values() if not self.is_unlocked(a.id)]

    def get_achievements_by_category(self, category: str) -> List[Achievement]:
        return [a for a in ACHIEVEMENTS.values() if a.category == category]

    def get_progress(self, achievement_id: str, now: Optional[datetime] = None) -> float:
        """Percentage toward an achievement, capped at 100; unknown ids report 0."""
        achievement = ACHIEVEMENTS.get(achievement_id)
        if achievement is None:
            return 0.0
        now = parse_timestamp(now) if now else datetime.now(timezone.utc)
        current = self._current_value(achievement.requirement, now)
        return min(current / achievement.threshold * 100, 100.0)

    def get_total_points(self) -> int:
        return sum(ACHIEVEMENTS[a].points for a in self._unlocked if self.is_unlocked(a))

    def get_stats(self) -> Dict[str, Any]:
        unlocked = self.get_unlocked_achievements()
        total = len(ACHIEVEMENTS)
        return {
            "total_points": self.get_total_points(),
            "unlocked_count": len(unlocked),
            "total_count": total,
            "completion_rate": f"{len(unlocked) / total * 100:.1f}",
            "by_rarity": {r: sum(1 for a in unlocked if a.rarity == r) for r in RARITIES},
        }

    def clear_achievements(self) -> None:
        self._unlocked = {}
        self._save()
