# src/parkchain/application/batch.py
"""
Batch Coordinator - Grouped Transaction Execution

This module groups transaction payloads into batches bounded by the tier's
max batch size and executes them strictly in order through the simulated
gateway. Every executed item is written to the transaction log.

Atomic batches stop at the first failed item. Records written for earlier
items stay in the log; pass ``staged=True`` to hold all records back until
the batch finishes and drop them on an atomic abort.

Files that USE this module:
- parkchain.application.achievements (batch counts and sizes)
- parkchain.adapters.telegram.handlers (/batches command)
- parkchain.application.container (composition)

Files that this module USES:
- parkchain.application.gateway (per-item delivery)
- parkchain.application.tier_engine (max batch size, discounted fee)
- parkchain.application.transaction_store (item outcome records)
- parkchain.adapters.persistence.file_store (batch history document)
"""
from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from parkchain.adapters.persistence.file_store import BATCH_HISTORY_KEY, JsonFileStore
from parkchain.application.gateway import SimulatedGateway
from parkchain.application.tier_engine import TierEngine
from parkchain.application.transaction_store import TransactionStore
from parkchain.config import Settings
from parkchain.domain.errors import (
    BatchExecutionError,
    BatchFullError,
    BatchingNotSupportedError,
    BatchItemNotFoundError,
    BatchNotFoundError,
    BatchStateError,
    DeliveryError,
    EmptyBatchError,
    StorageError,
)
from parkchain.domain.models import (
    FAILED,
    SUCCESS,
    Batch,
    BatchExecution,
    BatchItem,
    BatchItemResult,
    BatchStatus,
)
from parkchain.shared.ids import new_id

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[Dict[str, Any]], None]

BATCH_DELIVERY_METHOD = "gateway-batch"

# Batches of this size or more are worth recommending
RECOMMENDED_MIN_BATCH = 3


def estimate_savings(count: int, fee: float, overhead: float) -> float:
    """Individual cost minus batched cost, floored at zero."""
    individual = count * fee
    batched = fee + count * overhead
    return max(0.0, individual - batched)


class BatchCoordinator:
    """Creates, fills and executes transaction batches."""

    def __init__(
        self,
        store: JsonFileStore,
        tiers: TierEngine,
        transactions: TransactionStore,
        gateway: SimulatedGateway,
        settings: Settings,
    ):
        self._store = store
        self._tiers = tiers
        self._transactions = transactions
        self._gateway = gateway
        self._fee = settings.gateway_fee
        self._overhead = settings.batch_overhead_fee
        self._history_limit = settings.batch_history_limit
        self._active: Dict[str, Batch] = {}
        self._history: List[Batch] = self._load_history()

    def _load_history(self) -> List[Batch]:
        raw = self._store.load(BATCH_HISTORY_KEY, default=[])
        try:
            return [Batch.from_json(item) for item in raw]
        except (KeyError, TypeError, ValueError) as e:
            logger.error("Failed to load batch history, starting empty: %s", e)
            return []

    def _save_history(self) -> None:
        try:
            self._store.save(BATCH_HISTORY_KEY, [b.to_json() for b in self._history])
        except StorageError as e:
            logger.error("Failed to persist batch history: %s", e)

    def _get_active(self, batch_id: str) -> Batch:
        batch = self._active.get(batch_id)
        if batch is None:
            raise BatchNotFoundError(f"Batch {batch_id} not found")
        return batch

    @staticmethod
    def _require_pending(batch: Batch, action: str) -> None:
        if batch.status != BatchStatus.PENDING:
            raise BatchStateError(f"Cannot {action} batch: batch is {batch.status}")

    def _refresh_savings(self, batch: Batch) -> None:
        batch.estimated_savings = estimate_savings(len(batch.items), self._fee, self._overhead)

    # --- building ---

    def create_batch(
        self,
        priority: str = "normal",
        atomic: bool = True,
        staged: bool = False,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Batch:
        """
        Create an empty pending batch sized by the current tier.

        Raises:
            BatchingNotSupportedError: If the tier's max batch size is 1 or less
        """
        tier = self._tiers.get_current_tier()
        max_size = tier.benefits.max_batch_size
        if max_size <= 1:
            raise BatchingNotSupportedError(
                f"Your tier ({tier.name}) does not support batch transactions. Upgrade to Basic or higher."
            )

        batch = Batch(
            id=new_id("batch"),
            max_size=max_size,
            created_at=datetime.now(timezone.utc),
            metadata={
                "tier": tier.id,
                "priority": priority,
                "atomic": atomic,
                "staged": staged,
                **(metadata or {}),
            },
        )
        self._active[batch.id] = batch
        logger.info("Created batch %s (max %d, atomic=%s)", batch.id, max_size, atomic)
        return batch

    def add_to_batch(self, batch_id: str, payload: Dict[str, Any]) -> Tuple[Batch, str]:
        """
        Append a payload to a pending batch.

        Returns:
            (batch, item id)

        Raises:
            BatchNotFoundError, BatchStateError, BatchFullError
        """
        batch = self._get_active(batch_id)
        self._require_pending(batch, "add to")
        if len(batch.items) >= batch.max_size:
            raise BatchFullError(f"Batch is full (max {batch.max_size} transactions)")

        item = BatchItem(id=new_id("tx"), payload=dict(payload), added_at=datetime.now(timezone.utc))
        batch.items.append(item)
        self._refresh_savings(batch)
        return batch, item.id

    def remove_from_batch(self, batch_id: str, item_id: str) -> Batch:
        batch = self._get_active(batch_id)
        self._require_pending(batch, "remove from")

        for index, item in enumerate(batch.items):
            if item.id == item_id:
                del batch.items[index]
                self._refresh_savings(batch)
                return batch
        raise BatchItemNotFoundError(f"Transaction {item_id} not found in batch")

    def cancel_batch(self, batch_id: str) -> Batch:
        """Drop a pending batch. Batches that started executing cannot be cancelled."""
        batch = self._get_active(batch_id)
        self._require_pending(batch, "cancel")
        del self._active[batch_id]
        logger.info("Cancelled batch %s", batch_id)
        return batch

    # --- execution ---

    async def execute_batch(
        self,
        batch_id: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> BatchExecution:
        """
        Deliver every item in order and move the batch to history.

        Non-atomic batches end as success, failed or partial. Atomic batches
        abort on the first failed item: that item's failed record is written,
        the batch is marked failed and moved to history, and
        BatchExecutionError is raised. Records already written for earlier
        items are kept unless the batch is staged.

        Args:
            batch_id: Id of an active pending batch
            on_progress: Called with stage dictionaries while executing

        Returns:
            BatchExecution with the final batch, per-item results and a summary

        Raises:
            BatchNotFoundError, BatchStateError, EmptyBatchError,
            BatchExecutionError
        """
        batch = self._get_active(batch_id)
        self._require_pending(batch, "execute")
        if not batch.items:
            raise EmptyBatchError("Cannot execute empty batch")

        def notify(event: Dict[str, Any]) -> None:
            if on_progress:
                on_progress(event)

        started = time.monotonic()
        total = len(batch.items)
        staged: List[Dict[str, Any]] = []
        results: List[BatchItemResult] = []

        batch.status = BatchStatus.BUILDING
        notify({"stage": "building", "message": "Building batch transaction..."})

        for index, item in enumerate(batch.items):
            notify({
                "stage": "executing",
                "message": f"Executing transaction {index + 1}/{total}...",
                "progress": round(index / total * 100),
            })

            def forward(event: Dict[str, Any], _position: str = f"{index + 1}/{total}") -> None:
                notify({**event, "batch_progress": _position})

            try:
                delivery = await self._gateway.execute_transaction(item.payload, on_progress=forward)
            except DeliveryError as e:
                item.status = FAILED
                item.error = str(e)
                results.append(BatchItemResult(item_id=item.id, success=False, error=str(e)))
                self._write_record(batch, staged, {
                    "signature": f"failed_{item.id}",
                    "amount": item.amount,
                    "status": FAILED,
                    "delivery_method": BATCH_DELIVERY_METHOD,
                    "gateway_used": True,
                    "metadata": {**item.metadata, "batch_id": batch.id, "error": str(e)},
                })

                if batch.atomic:
                    self._finish(batch, BatchStatus.FAILED, results, started, error=str(e))
                    notify({"stage": "error", "message": f"Batch failed atomically: {e}"})
                    if staged:
                        logger.info("Discarding %d staged records for batch %s", len(staged), batch.id)
                    raise BatchExecutionError(f"Batch failed atomically: {e}", batch_id=batch.id) from e
                continue

            item.status = SUCCESS
            item.signature = delivery.signature
            item.confirmed_at = datetime.now(timezone.utc)
            results.append(BatchItemResult(item_id=item.id, success=True, signature=delivery.signature))
            self._write_record(batch, staged, {
                "signature": delivery.signature,
                "amount": item.amount,
                "status": SUCCESS,
                "delivery_method": BATCH_DELIVERY_METHOD,
                "gateway_used": True,
                "confirmation_time": delivery.confirmation_time,
                "gateway_fee": delivery.gateway_fee / total,
                "metadata": {**item.metadata, "batch_id": batch.id, "batch_size": total},
            })

        for record in staged:
            self._transactions.add_transaction(**record)

        successful = sum(1 for r in results if r.success)
        failed = total - successful
        if successful == total:
            status = BatchStatus.SUCCESS
        elif failed == total:
            status = BatchStatus.FAILED
        else:
            status = BatchStatus.PARTIAL
        self._finish(batch, status, results, started)

        notify({
            "stage": "complete",
            "message": f"Batch complete: {successful}/{total} succeeded",
        })

        return BatchExecution(
            success=status == BatchStatus.SUCCESS,
            batch=batch,
            results=results,
            summary={
                "total": total,
                "successful": successful,
                "failed": failed,
                "execution_time": batch.execution_time,
                "estimated_savings": batch.estimated_savings,
            },
        )

    def _write_record(self, batch: Batch, staged: List[Dict[str, Any]], record: Dict[str, Any]) -> None:
        if batch.staged:
            staged.append(record)
        else:
            self._transactions.add_transaction(**record)

    def _finish(
        self,
        batch: Batch,
        status: str,
        results: List[BatchItemResult],
        started: float,
        error: Optional[str] = None,
    ) -> None:
        batch.status = status
        batch.results = list(results)
        batch.error = error
        batch.completed_at = datetime.now(timezone.utc)
        batch.execution_time = round((time.monotonic() - started) * 1000)

        self._active.pop(batch.id, None)
        self._history.insert(0, batch)
        self._save_history()
        logger.info("Batch %s finished: %s (%d results)", batch.id, status, len(results))

    # --- queries ---

    def get_batch(self, batch_id: str) -> Optional[Batch]:
        return self._active.get(batch_id)

    def get_active_batches(self) -> List[Batch]:
        return list(self._active.values())

    def get_batch_history(self, limit: Optional[int] = None) -> List[Batch]:
        """Finished batches, most recent first."""
        return self._history[: limit if limit is not None else self._history_limit]

    def get_batch_stats(self) -> Dict[str, Any]:
        total_batches = len(self._history)
        successful = sum(1 for b in self._history if b.status == BatchStatus.SUCCESS)
        total_items = sum(len(b.items) for b in self._history)
        total_savings = sum(b.estimated_savings for b in self._history)

        return {
            "total_batches": total_batches,
            "successful_batches": successful,
            "success_rate": f"{successful / total_batches * 100:.2f}" if total_batches else "0.00",
            "total_transactions": total_items,
            "average_batch_size": round(total_items / total_batches, 1) if total_batches else 0.0,
            "largest_batch_size": max((len(b.items) for b in self._history), default=0),
            "total_savings": round(total_savings, 6),
            "active_batches": len(self._active),
        }

    def calculate_batch_efficiency(self, transaction_count: int) -> Dict[str, Any]:
        """
        Compare individual and batched cost for ``transaction_count`` items.

        The count is clamped to the current tier's max batch size.
        """
        count = min(transaction_count, self._tiers.get_current_tier().benefits.max_batch_size)
        individual = count * self._fee
        batched = self._fee + count * self._overhead
        savings = estimate_savings(count, self._fee, self._overhead)
        percent = savings / individual * 100 if individual > 0 else 0.0

        return {
            "transaction_count": count,
            "individual_cost": round(individual, 6),
            "batch_cost": round(batched, 6),
            "savings": round(savings, 6),
            "savings_percent": f"{percent:.1f}%",
            "recommended": count >= RECOMMENDED_MIN_BATCH,
        }

    def clear_history(self) -> None:
        self._history = []
        self._save_history()
