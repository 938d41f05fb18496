# tests/test_transaction_store.py
"""
Transaction Store Tests - Log, Aggregate and Import/Export

Covers record defaults, the metrics aggregate invariants, persistence,
daily bucketing, reconciliation and the JSON/CSV exports.
"""
import random
from datetime import datetime, timedelta, timezone

import pytest

from parkchain.adapters.persistence.file_store import METRICS_KEY, TRANSACTIONS_KEY
from parkchain.application.tier_engine import TierEngine
from parkchain.application.transaction_store import CSV_HEADERS, TransactionStore
from parkchain.domain.models import FAILED, PENDING, SUCCESS


class TestAddTransaction:
    def test_defaults(self, transactions):
        record = transactions.add_transaction()

        assert record.id.startswith("tx_")
        assert record.status == PENDING
        assert record.delivery_method == "gateway"
        assert record.gateway_used is True
        assert record.amount == 0.0
        assert record.gateway_fee == 0.0
        assert record.timestamp.tzinfo is not None

    def test_most_recent_first(self, transactions):
        first = transactions.add_transaction(amount=1)
        second = transactions.add_transaction(amount=2)
        assert [tx.id for tx in transactions.get_transactions()] == [second.id, first.id]

    def test_caller_timestamp_is_kept(self, transactions):
        ts = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
        record = transactions.add_transaction(timestamp=ts)
        assert record.timestamp == ts

    def test_ids_are_unique(self, transactions):
        ids = {transactions.add_transaction().id for _ in range(25)}
        assert len(ids) == 25


class TestMetrics:
    def test_total_counts_every_call_until_clear(self, transactions):
        for status in (SUCCESS, FAILED, PENDING, SUCCESS):
            transactions.add_transaction(status=status)
        assert transactions.get_metrics()["total_transactions"] == 4

        transactions.clear_all()
        assert transactions.get_metrics()["total_transactions"] == 0
        assert transactions.get_transactions() == []

    def test_savings_equals_refunds_minus_fees(self, transactions):
        transactions.add_transaction(status=SUCCESS, jito_tip_refunded=0.002, gateway_fee=0.0001)
        transactions.add_transaction(status=FAILED, gateway_fee=0.0001)
        transactions.add_transaction(status=SUCCESS, jito_tip_refunded=0.0015, gateway_fee=0.0003)

        m = transactions.get_metrics()
        assert m["total_savings"] == pytest.approx(m["total_jito_tips_refunded"] - m["total_gateway_fees"])
        assert m["total_savings"] == pytest.approx(0.0035 - 0.0005)

    def test_fees_only_count_when_gateway_used(self, transactions):
        transactions.add_transaction(status=SUCCESS, gateway_used=False, gateway_fee=0.5)
        transactions.add_transaction(status=SUCCESS, gateway_used=True, gateway_fee=0.0001)
        assert transactions.get_metrics()["total_gateway_fees"] == pytest.approx(0.0001)

    def test_average_confirmation_time_over_successes_only(self, transactions):
        transactions.add_transaction(status=SUCCESS, confirmation_time=2000)
        transactions.add_transaction(status=FAILED, confirmation_time=9000)
        transactions.add_transaction(status=SUCCESS, confirmation_time=4000)
        assert transactions.get_metrics()["average_confirmation_time"] == pytest.approx(3000)

    def test_success_rate_counts_pending_in_denominator(self, transactions):
        transactions.add_transaction(status=SUCCESS)
        transactions.add_transaction(status=PENDING)

        m = transactions.get_metrics()
        assert m["success_rate"] == "50.00"
        assert m["resolved_success_rate"] == "100.00"
        assert m["pending_transactions"] == 1

    def test_success_rate_when_empty(self, transactions):
        m = transactions.get_metrics()
        assert m["success_rate"] == "0.00"
        assert m["resolved_success_rate"] == "0.00"

    def test_successful_totals(self, transactions):
        transactions.add_transaction(status=SUCCESS, amount=300)
        transactions.add_transaction(status=FAILED, amount=1000)
        transactions.add_transaction(status=SUCCESS, amount=200)
        assert transactions.get_successful_totals() == (2, 500)


class TestPersistence:
    def test_reload_from_store(self, store, settings, transactions):
        transactions.add_transaction(status=SUCCESS, amount=42, signature="sig")

        reloaded = TransactionStore(store, settings)
        assert [tx.to_json() for tx in reloaded.get_transactions()] == [
            tx.to_json() for tx in transactions.get_transactions()
        ]
        assert reloaded.get_metrics() == transactions.get_metrics()

    def test_corrupt_log_starts_empty(self, store, settings):
        store.path_for(TRANSACTIONS_KEY).write_text("[{broken", encoding="utf-8")
        fresh = TransactionStore(store, settings)
        assert fresh.get_transactions() == []

    def test_missing_metrics_rebuilt_from_log(self, store, settings, transactions):
        for _ in range(10):
            transactions.add_transaction(status=SUCCESS, amount=500)
        store.delete(METRICS_KEY)

        reloaded = TransactionStore(store, settings)
        m = reloaded.get_metrics()
        assert m["total_transactions"] == 10
        assert m["successful_transactions"] == 10
        assert TierEngine(store, reloaded).calculate_user_tier() == "basic"

    def test_corrupt_metrics_rebuilt_from_log(self, store, settings, transactions):
        transactions.add_transaction(status=SUCCESS, amount=10)
        transactions.add_transaction(status=FAILED)
        store.path_for(METRICS_KEY).write_text("{broken", encoding="utf-8")

        m = TransactionStore(store, settings).get_metrics()
        assert m["total_transactions"] == 2
        assert m["failed_transactions"] == 1

    def test_reconcile_fixes_drifted_metrics(self, store, settings, transactions):
        transactions.add_transaction(status=SUCCESS, amount=10, confirmation_time=1000)
        transactions.add_transaction(status=FAILED)
        store.save(METRICS_KEY, {"total_transactions": 99, "successful_transactions": 7})

        reloaded = TransactionStore(store, settings)
        assert reloaded.get_metrics()["total_transactions"] == 99

        assert reloaded.reconcile_metrics() is True
        m = reloaded.get_metrics()
        assert m["total_transactions"] == 2
        assert m["successful_transactions"] == 1
        assert m["failed_transactions"] == 1
        assert reloaded.reconcile_metrics() is False


class TestQueries:
    def test_filtered_transactions(self, transactions):
        transactions.add_transaction(status=SUCCESS, delivery_method="rpc", gateway_used=False)
        transactions.add_transaction(status=FAILED, delivery_method="gateway")
        transactions.add_transaction(status=SUCCESS, delivery_method="gateway")

        assert len(transactions.get_filtered_transactions(status=SUCCESS)) == 2
        assert len(transactions.get_filtered_transactions(delivery_method="gateway")) == 2
        assert len(transactions.get_filtered_transactions(gateway_used=False)) == 1
        assert len(transactions.get_filtered_transactions(status=SUCCESS, delivery_method="gateway")) == 1

    def test_filtered_by_date(self, transactions):
        now = datetime(2024, 5, 10, 12, tzinfo=timezone.utc)
        transactions.add_transaction(timestamp=now - timedelta(days=3))
        recent = transactions.add_transaction(timestamp=now)

        found = transactions.get_filtered_transactions(date_from=now - timedelta(days=1))
        assert [tx.id for tx in found] == [recent.id]

    def test_metrics_over_time_buckets(self, transactions):
        now = datetime(2024, 5, 10, 15, 30, tzinfo=timezone.utc)
        transactions.add_transaction(status=SUCCESS, jito_tip_refunded=0.002, gateway_fee=0.0001,
                                     timestamp=now - timedelta(hours=1))
        transactions.add_transaction(status=FAILED, timestamp=now - timedelta(hours=2))
        transactions.add_transaction(status=SUCCESS, timestamp=now - timedelta(days=2))

        buckets = transactions.get_metrics_over_time(days=7, now=now)

        assert len(buckets) == 7
        assert buckets[0]["date"] == "2024-05-04"
        assert buckets[-1]["date"] == "2024-05-10"
        assert buckets[-1]["label"] == "May 10"
        assert buckets[-1]["count"] == 2
        assert buckets[-1]["success_rate"] == 50.0
        assert buckets[-1]["savings"] == pytest.approx(0.0019)
        assert buckets[-3]["count"] == 1
        assert buckets[1] == {"date": "2024-05-05", "label": "May 05", "count": 0, "success_rate": 0.0, "savings": 0.0}

    def test_delivery_method_distribution(self, transactions):
        transactions.add_transaction(delivery_method="rpc")
        transactions.add_transaction(delivery_method="gateway")
        transactions.add_transaction(delivery_method="gateway")
        assert transactions.get_delivery_method_distribution() == {"rpc": 1, "gateway": 2}


class TestExportImport:
    def test_export_matches_log(self, transactions):
        transactions.add_transaction(status=SUCCESS, amount=5)
        transactions.add_transaction(status=FAILED, amount=7)

        exported = transactions.export_to_json()
        assert exported["transactions"] == [tx.to_json() for tx in transactions.get_transactions()]
        assert exported["metrics"]["total_transactions"] == 2
        assert "exported_at" in exported

    def test_export_to_file_and_import(self, tmp_path, store, settings, transactions):
        transactions.add_transaction(status=SUCCESS, amount=500, confirmation_time=1500)
        path = tmp_path / "export.json"
        data = transactions.export_to_json(path)
        assert path.exists()

        other = TransactionStore(store, settings)
        other.clear_all()
        assert other.import_from_json(data) == 1
        assert other.get_successful_totals() == (1, 500)
        assert other.get_metrics()["average_confirmation_time"] == pytest.approx(1500)

    def test_export_to_csv(self, transactions):
        transactions.add_transaction(status=SUCCESS, amount=12.5, signature="abc")
        lines = transactions.export_to_csv().strip().split("\n")

        assert lines[0] == ",".join(CSV_HEADERS)
        assert len(lines) == 2
        assert "abc" in lines[1]
        assert "success" in lines[1]


class TestDemoData:
    def test_generates_records_within_last_week(self, transactions):
        created = transactions.generate_demo_data(count=15, rng=random.Random(7))

        assert len(created) == 15
        assert transactions.get_metrics()["total_transactions"] == 15
        cutoff = datetime.now(timezone.utc) - timedelta(days=7, minutes=1)
        assert all(tx.timestamp >= cutoff for tx in created)
        assert all(tx.status in (SUCCESS, FAILED) for tx in created)
