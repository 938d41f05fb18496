# src/parkchain/domain/models.py
"""
Domain Models - Pure Business Objects

This module contains domain models representing core business concepts:
- Simulated transaction records and the rolling metrics aggregate
- Channel performance and routing decisions
- Tier change and progress reports
- Batches, batch items and execution results

Files that USE this module:
- parkchain.application.* (all services use domain models)
- parkchain.adapters.formatting.formatter (renders models as text)
- tests.* (tests use domain models for assertions)

Files that this module USES:
- parkchain.domain.channels (ChannelInfo for route scores)
- parkchain.domain.tiers (TierDefinition for tier reports)
"""

from __future__ import annotations  # Enable postponed evaluation of annotations

from dataclasses import asdict, dataclass, field  # Decorators for creating data classes
from datetime import datetime, timezone  # Date/time utilities for timestamps
from typing import Any, Dict, List, Optional  # Type hints

from parkchain.domain.channels import ChannelInfo
from parkchain.domain.tiers import TierDefinition

# Transaction statuses
PENDING = "pending"
SUCCESS = "success"
FAILED = "failed"


class BatchStatus:
    """Batch lifecycle: pending -> building -> success | failed | partial."""
    PENDING = "pending"
    BUILDING = "building"
    SUCCESS = "success"
    FAILED = "failed"
    PARTIAL = "partial"

    TERMINAL = (SUCCESS, FAILED, PARTIAL)


def parse_timestamp(raw: Any) -> datetime:
    """
    Parse an ISO-8601 timestamp into an aware UTC datetime.

    Accepts both "...Z" and "+00:00" suffixes; naive values are treated as UTC.
    Anything unparseable falls back to the current time.
    """
    if isinstance(raw, datetime):
        ts = raw
    elif isinstance(raw, str) and raw:
        try:
            ts = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            return datetime.now(timezone.utc)
    else:
        return datetime.now(timezone.utc)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def _iso(ts: Optional[datetime]) -> Optional[str]:
    return ts.isoformat() if ts else None


@dataclass(frozen=True)
class TransactionRecord:
    """
    One simulated payment attempt.

    Attributes:
        id: Opaque unique token assigned at creation
        timestamp: Creation instant (UTC)
        amount: Quantity of the application's point unit
        status: pending, success or failed
        delivery_method: Channel label (gateway, rpc, gateway-batch, ...)
        gateway_used: Whether the gateway handled it
        confirmation_time: Synthetic confirmation duration in milliseconds
        jito_tip_refunded: Refunded tip in SOL
        gateway_fee: Gateway fee in SOL
        signature: Optional delivery signature
        metadata: Open key/value bag (batch_id when applicable)
    """
    id: str
    timestamp: datetime
    amount: float = 0.0
    status: str = PENDING
    delivery_method: str = "gateway"
    gateway_used: bool = True
    confirmation_time: float = 0.0
    jito_tip_refunded: float = 0.0
    gateway_fee: float = 0.0
    signature: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def net_savings(self) -> float:
        return self.jito_tip_refunded - (self.gateway_fee if self.gateway_used else 0.0)

    def to_json(self) -> dict:
        d = asdict(self)
        d["timestamp"] = self.timestamp.isoformat()
        return d

    @staticmethod
    def from_json(data: dict) -> "TransactionRecord":
        return TransactionRecord(
            id=str(data["id"]),
            timestamp=parse_timestamp(data.get("timestamp")),
            amount=float(data.get("amount") or 0),
            status=data.get("status") or PENDING,
            delivery_method=data.get("delivery_method") or "gateway",
            gateway_used=bool(data.get("gateway_used", True)),
            confirmation_time=float(data.get("confirmation_time") or 0),
            jito_tip_refunded=float(data.get("jito_tip_refunded") or 0),
            gateway_fee=float(data.get("gateway_fee") or 0),
            signature=data.get("signature"),
            metadata=dict(data.get("metadata") or {}),
        )


@dataclass
class Metrics:
    """Rolling aggregate over the transaction log (non-frozen for updates)."""
    total_transactions: int = 0
    successful_transactions: int = 0
    failed_transactions: int = 0
    total_jito_tips_refunded: float = 0.0
    total_gateway_fees: float = 0.0
    total_savings: float = 0.0
    average_confirmation_time: float = 0.0
    # Running sums so derived values never need a rescan
    successful_volume: float = 0.0
    confirmation_time_sum: float = 0.0

    def apply(self, record: TransactionRecord) -> None:
        """Fold one newly inserted record into the aggregate."""
        self.total_transactions += 1
        if record.status == SUCCESS:
            self.successful_transactions += 1
            self.successful_volume += record.amount
            self.confirmation_time_sum += record.confirmation_time
            self.average_confirmation_time = (
                self.confirmation_time_sum / self.successful_transactions
            )
        elif record.status == FAILED:
            self.failed_transactions += 1

        self.total_jito_tips_refunded += record.jito_tip_refunded
        if record.gateway_used:
            self.total_gateway_fees += record.gateway_fee
        self.total_savings = self.total_jito_tips_refunded - self.total_gateway_fees

    @classmethod
    def from_records(cls, records: List[TransactionRecord]) -> "Metrics":
        metrics = cls()
        # Oldest first, matching insertion order
        for record in reversed(records):
            metrics.apply(record)
        return metrics

    def to_json(self) -> dict:
        return asdict(self)

    @classmethod
    def from_json(cls, data: dict) -> "Metrics":
        known = {name for name in cls.__dataclass_fields__}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class ChannelPerformance:
    """EMA-tracked performance of one channel."""
    success_rate: float
    avg_confirm_time: float
    total_txs: int = 0

    def record(self, success: bool, confirmation_time: Optional[float], alpha: float) -> None:
        self.total_txs += 1
        self.success_rate = alpha * (1.0 if success else 0.0) + (1 - alpha) * self.success_rate
        if success and confirmation_time:
            self.avg_confirm_time = alpha * confirmation_time + (1 - alpha) * self.avg_confirm_time

    def to_json(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class RoutingRecord:
    """One entry of the capped routing history."""
    timestamp: datetime
    channel: str
    success: bool
    confirmation_time: Optional[float]
    signature: Optional[str]
    conditions: str


@dataclass(frozen=True)
class RouteScore:
    channel: str
    score: float
    info: ChannelInfo


@dataclass(frozen=True)
class RouteSelection:
    """
    Outcome of a routing decision.

    Attributes:
        primary: Highest-scoring eligible channel
        alternatives: Next two channels by score
        conditions: Network condition the decision was made for
        recommendation: Human-readable explanation
    """
    primary: RouteScore
    alternatives: List[RouteScore]
    conditions: str
    recommendation: str


@dataclass(frozen=True)
class TierUpdate:
    upgraded: bool
    old_tier: TierDefinition
    new_tier: TierDefinition
    message: str = ""
    downgraded: bool = False


@dataclass(frozen=True)
class TierProgress:
    """Progress toward the next tier (percentages capped at 100)."""
    next_tier: Optional[TierDefinition]
    transactions_progress: float
    volume_progress: float
    remaining_transactions: int
    remaining_volume: float


@dataclass
class BatchItem:
    """A transaction payload waiting inside a batch."""
    id: str
    payload: Dict[str, Any]
    added_at: datetime
    status: str = PENDING
    signature: Optional[str] = None
    error: Optional[str] = None
    confirmed_at: Optional[datetime] = None

    @property
    def amount(self) -> float:
        return float(self.payload.get("amount") or 0)

    @property
    def metadata(self) -> Dict[str, Any]:
        return dict(self.payload.get("metadata") or {})

    def to_json(self) -> dict:
        return {
            "id": self.id,
            "payload": self.payload,
            "added_at": _iso(self.added_at),
            "status": self.status,
            "signature": self.signature,
            "error": self.error,
            "confirmed_at": _iso(self.confirmed_at),
        }

    @staticmethod
    def from_json(data: dict) -> "BatchItem":
        return BatchItem(
            id=data["id"],
            payload=dict(data.get("payload") or {}),
            added_at=parse_timestamp(data.get("added_at")),
            status=data.get("status") or PENDING,
            signature=data.get("signature"),
            error=data.get("error"),
            confirmed_at=parse_timestamp(data["confirmed_at"]) if data.get("confirmed_at") else None,
        )


@dataclass
class BatchItemResult:
    item_id: str
    success: bool
    signature: Optional[str] = None
    error: Optional[str] = None


@dataclass
class Batch:
    """
    A bounded, ordered group of transactions executed under one synthetic fee.

    max_size is copied from the tier at creation and never re-checked.
    """
    id: str
    max_size: int
    created_at: datetime
    status: str = BatchStatus.PENDING
    items: List[BatchItem] = field(default_factory=list)
    estimated_savings: float = 0.0
    metadata: Dict[str, Any] = field(default_factory=dict)
    results: List[BatchItemResult] = field(default_factory=list)
    completed_at: Optional[datetime] = None
    execution_time: Optional[float] = None  # milliseconds
    error: Optional[str] = None

    @property
    def atomic(self) -> bool:
        return bool(self.metadata.get("atomic", True))

    @property
    def staged(self) -> bool:
        return bool(self.metadata.get("staged", False))

    def to_json(self) -> dict:
        return {
            "id": self.id,
            "max_size": self.max_size,
            "created_at": _iso(self.created_at),
            "status": self.status,
            "items": [item.to_json() for item in self.items],
            "estimated_savings": self.estimated_savings,
            "metadata": self.metadata,
            "results": [asdict(r) for r in self.results],
            "completed_at": _iso(self.completed_at),
            "execution_time": self.execution_time,
            "error": self.error,
        }

    @staticmethod
    def from_json(data: dict) -> "Batch":
        return Batch(
            id=data["id"],
            max_size=int(data.get("max_size", 0)),
            created_at=parse_timestamp(data.get("created_at")),
            status=data.get("status") or BatchStatus.PENDING,
            items=[BatchItem.from_json(i) for i in data.get("items") or []],
            estimated_savings=float(data.get("estimated_savings") or 0),
            metadata=dict(data.get("metadata") or {}),
            results=[BatchItemResult(**r) for r in data.get("results") or []],
            completed_at=parse_timestamp(data["completed_at"]) if data.get("completed_at") else None,
            execution_time=data.get("execution_time"),
            error=data.get("error"),
        )


@dataclass(frozen=True)
class BatchExecution:
    success: bool
    batch: Batch
    results: List[BatchItemResult]
    summary: Dict[str, Any]


@dataclass(frozen=True)
class DeliveryResult:
    """Outcome of one simulated delivery through the gateway."""
    signature: str
    channel: str
    confirmation_time: float  # milliseconds
    gateway_fee: float
