# src/parkchain/application/transaction_store.py
"""
Transaction Store - Simulated Transaction Log and Rolling Metrics

This module keeps the append-only log of simulated gateway transactions and
the metrics aggregate derived from it. Records are prepended (most recent
first) and both documents are rewritten on every insert. The aggregate is
updated incrementally; ``reconcile_metrics`` recomputes it from the log to
detect drift.

Files that USE this module:
- parkchain.application.tier_engine (successful count and volume)
- parkchain.application.batch (records batch item outcomes)
- parkchain.application.achievements (metrics and daily activity)
- parkchain.adapters.telegram.handlers (/metrics command)
- parkchain.application.container (composition)

Files that this module USES:
- parkchain.adapters.persistence.file_store (JsonFileStore, storage keys)
- parkchain.domain.models (TransactionRecord, Metrics)
- parkchain.config (Settings for the default gateway fee)
"""
from __future__ import annotations

import csv
import io
import json
import logging
import random
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from parkchain.adapters.persistence.file_store import METRICS_KEY, TRANSACTIONS_KEY, JsonFileStore
from parkchain.config import Settings
from parkchain.domain.errors import StorageError
from parkchain.domain.models import FAILED, PENDING, SUCCESS, Metrics, TransactionRecord, parse_timestamp
from parkchain.shared.ids import new_id

logger = logging.getLogger(__name__)

CSV_HEADERS = [
    "ID", "Timestamp", "Signature", "Amount", "Status", "Delivery Method",
    "Gateway Used", "Confirmation Time", "Jito Tip Refunded", "Gateway Fee",
]


class TransactionStore:
    """Append-only transaction log with a persisted metrics aggregate."""

    def __init__(self, store: JsonFileStore, settings: Settings):
        """
        Initialize the log and load persisted state.

        An unreadable log starts empty. A missing or unreadable metrics
        document is rebuilt from the log. Nothing is surfaced to the caller.
        """
        self._store = store
        self._settings = settings
        self._transactions: List[TransactionRecord] = self._load_transactions()
        metrics = self._load_metrics()
        if metrics is None:
            metrics = Metrics.from_records(self._transactions)
            if self._transactions:
                logger.warning("Metrics missing or unreadable, rebuilt from %d records", len(self._transactions))
        self._metrics: Metrics = metrics

    def _load_transactions(self) -> List[TransactionRecord]:
        raw = self._store.load(TRANSACTIONS_KEY, default=[])
        try:
            return [TransactionRecord.from_json(item) for item in raw]
        except (KeyError, TypeError, ValueError) as e:
            logger.error("Failed to load transactions, starting empty: %s", e)
            return []

    def _load_metrics(self) -> Optional[Metrics]:
        raw = self._store.load(METRICS_KEY, default=None)
        if not raw:
            return None
        try:
            return Metrics.from_json(raw)
        except (TypeError, ValueError) as e:
            logger.error("Failed to load metrics: %s", e)
            return None

    def _persist(self) -> None:
        """Write both documents; failures are logged and the in-memory state kept."""
        try:
            self._store.save(TRANSACTIONS_KEY, [tx.to_json() for tx in self._transactions])
        except StorageError as e:
            logger.error("Failed to persist transactions: %s", e)
        try:
            self._store.save(METRICS_KEY, self._metrics.to_json())
        except StorageError as e:
            logger.error("Failed to persist metrics: %s", e)

    def add_transaction(
        self,
        amount: float = 0.0,
        status: str = PENDING,
        delivery_method: str = "gateway",
        gateway_used: bool = True,
        confirmation_time: float = 0.0,
        jito_tip_refunded: float = 0.0,
        gateway_fee: float = 0.0,
        signature: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        timestamp: Optional[datetime] = None,
    ) -> TransactionRecord:
        """
        Record a simulated transaction and update the aggregate.

        No validation is applied to amount or status.

        Args:
            amount: Points moved by the transaction
            status: pending, success or failed
            delivery_method: Channel label
            gateway_used: Whether gateway fees apply
            confirmation_time: Confirmation duration in milliseconds
            jito_tip_refunded: Refunded tip in SOL
            gateway_fee: Gateway fee in SOL
            signature: Optional delivery signature
            metadata: Extra key/value data
            timestamp: Creation instant (defaults to now, UTC)

        Returns:
            The stored TransactionRecord
        """
        record = TransactionRecord(
            id=new_id("tx"),
            timestamp=parse_timestamp(timestamp) if timestamp else datetime.now(timezone.utc),
            amount=amount or 0.0,
            status=status or PENDING,
            delivery_method=delivery_method or "gateway",
            gateway_used=gateway_used,
            confirmation_time=confirmation_time or 0.0,
            jito_tip_refunded=jito_tip_refunded or 0.0,
            gateway_fee=gateway_fee or 0.0,
            signature=signature,
            metadata=dict(metadata or {}),
        )

        self._transactions.insert(0, record)
        self._metrics.apply(record)
        self._persist()

        logger.debug("Recorded transaction %s (%s via %s)", record.id, record.status, record.delivery_method)
        return record

    def get_transactions(self) -> List[TransactionRecord]:
        """All records, most recent first."""
        return list(self._transactions)

    def get_filtered_transactions(
        self,
        status: Optional[str] = None,
        delivery_method: Optional[str] = None,
        gateway_used: Optional[bool] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
    ) -> List[TransactionRecord]:
        """Records matching every given filter, most recent first."""
        lower = parse_timestamp(date_from) if date_from else None
        upper = parse_timestamp(date_to) if date_to else None
        return [
            tx for tx in self._transactions
            if (status is None or tx.status == status)
            and (delivery_method is None or tx.delivery_method == delivery_method)
            and (gateway_used is None or tx.gateway_used == gateway_used)
            and (lower is None or tx.timestamp >= lower)
            and (upper is None or tx.timestamp <= upper)
        ]

    def get_metrics(self) -> Dict[str, Any]:
        """
        Snapshot of the aggregate plus derived rates.

        ``success_rate`` divides by every record including pending ones;
        ``resolved_success_rate`` only counts success and failed records.

        Returns:
            Dictionary with counters, sums and percentage strings
        """
        m = self._metrics
        resolved = m.successful_transactions + m.failed_transactions
        snapshot = m.to_json()
        snapshot.update({
            "pending_transactions": m.total_transactions - resolved,
            "success_rate": _pct(m.successful_transactions, m.total_transactions),
            "resolved_success_rate": _pct(m.successful_transactions, resolved),
        })
        return snapshot

    def get_successful_totals(self) -> Tuple[int, float]:
        """(successful transaction count, successful volume) from the aggregate."""
        return self._metrics.successful_transactions, self._metrics.successful_volume

    def get_metrics_over_time(self, days: int = 7, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """
        Bucket the log into UTC days over the trailing window.

        Args:
            days: Number of days including today
            now: Reference instant (defaults to now, UTC)

        Returns:
            One dict per day, oldest first, with date, label, count,
            success_rate and savings. Days without transactions report zeros.
        """
        now = parse_timestamp(now) if now else datetime.now(timezone.utc)
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)
        buckets = []

        for offset in range(days - 1, -1, -1):
            start = today - timedelta(days=offset)
            end = start + timedelta(days=1)
            day_txs = [tx for tx in self._transactions if start <= tx.timestamp < end]
            successful = sum(1 for tx in day_txs if tx.status == SUCCESS)
            total = len(day_txs)

            buckets.append({
                "date": start.date().isoformat(),
                "label": start.strftime("%b %d"),
                "count": total,
                "success_rate": round(successful / total * 100, 2) if total else 0.0,
                "savings": round(sum(tx.net_savings for tx in day_txs), 6),
            })

        return buckets

    def get_delivery_method_distribution(self) -> Dict[str, int]:
        distribution: Dict[str, int] = {}
        for tx in self._transactions:
            method = tx.delivery_method or "unknown"
            distribution[method] = distribution.get(method, 0) + 1
        return distribution

    def reconcile_metrics(self) -> bool:
        """
        Recompute the aggregate from the log and replace it if it drifted.

        Returns:
            True if drift was found and corrected
        """
        rebuilt = Metrics.from_records(self._transactions)
        current = self._metrics.to_json()
        drifted = any(
            abs(float(value) - float(current.get(name, 0))) > 1e-9
            for name, value in rebuilt.to_json().items()
        )
        if drifted:
            logger.warning("Metrics drift detected, rebuilding from %d records", len(self._transactions))
            self._metrics = rebuilt
            self._persist()
        return drifted

    def clear_all(self) -> None:
        """Wipe the log and reset the aggregate. Irreversible."""
        self._transactions = []
        self._metrics = Metrics()
        self._persist()
        logger.info("Transaction log cleared")

    def export_to_json(self, path: Optional[Path] = None) -> Dict[str, Any]:
        """
        Export the log and aggregate.

        Args:
            path: Optional file to write the export to

        Returns:
            Dictionary with transactions, metrics and exported_at
        """
        data = {
            "transactions": [tx.to_json() for tx in self._transactions],
            "metrics": self._metrics.to_json(),
            "exported_at": datetime.now(timezone.utc).isoformat(),
        }
        if path is not None:
            Path(path).write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
            logger.info("Exported %d transactions to %s", len(self._transactions), path)
        return data

    def import_from_json(self, data: Dict[str, Any]) -> int:
        """
        Replace the log with an export produced by ``export_to_json``.

        The aggregate is rebuilt from the imported records rather than trusted.

        Returns:
            Number of imported records
        """
        records = [TransactionRecord.from_json(item) for item in data.get("transactions", [])]
        self._transactions = records
        self._metrics = Metrics.from_records(records)
        self._persist()
        logger.info("Imported %d transactions", len(records))
        return len(records)

    def export_to_csv(self, path: Optional[Path] = None) -> str:
        """Export the log as CSV text, optionally writing it to ``path``."""
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(CSV_HEADERS)
        for tx in self._transactions:
            writer.writerow([
                tx.id,
                tx.timestamp.isoformat(),
                tx.signature or "",
                tx.amount,
                tx.status,
                tx.delivery_method,
                tx.gateway_used,
                tx.confirmation_time,
                tx.jito_tip_refunded,
                tx.gateway_fee,
            ])
        text = buffer.getvalue()
        if path is not None:
            Path(path).write_text(text, encoding="utf-8")
        return text

    def generate_demo_data(self, count: int = 20, rng: Optional[random.Random] = None) -> List[TransactionRecord]:
        """
        Insert ``count`` random transactions spread over the last 7 days.

        Roughly 80% succeed and 70% use the gateway.
        """
        rng = rng or random.Random()
        now = datetime.now(timezone.utc)
        methods = ["gateway", "rpc", "jito"]
        statuses = [SUCCESS, SUCCESS, SUCCESS, SUCCESS, FAILED]
        created = []

        for i in range(count):
            gateway_used = rng.random() > 0.3
            status = rng.choice(statuses)
            created.append(self.add_transaction(
                signature=f"demo_{i}_{rng.getrandbits(40):x}",
                amount=50 + rng.random() * 950,
                status=status,
                delivery_method=rng.choice(methods),
                gateway_used=gateway_used,
                confirmation_time=2000 + rng.random() * 5000 if status == SUCCESS else 0.0,
                jito_tip_refunded=0.001 + rng.random() * 0.002 if gateway_used and rng.random() > 0.5 else 0.0,
                gateway_fee=self._settings.gateway_fee if gateway_used else 0.0,
                timestamp=now - timedelta(hours=rng.randrange(168)),
            ))

        logger.info("Generated %d demo transactions", count)
        return created


def _pct(part: int, whole: int) -> str:
    return f"{part / whole * 100:.2f}" if whole > 0 else "0.00"
