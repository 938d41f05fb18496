# tests/conftest.py
"""
Shared pytest fixtures: isolated settings, file store and service container
rooted in a temporary data directory, with simulated delivery delays off.
"""
from unittest.mock import Mock

import pytest

from parkchain.adapters.persistence.file_store import JsonFileStore
from parkchain.application.container import build_services
from parkchain.application.tier_engine import TierEngine
from parkchain.application.transaction_store import TransactionStore
from parkchain.config import Settings


@pytest.fixture
def settings(tmp_path):
    return Settings(
        bot_token="",
        data_dir=tmp_path / "data",
        simulated_delivery_delay_seconds=0,
    )


@pytest.fixture
def store(settings):
    return JsonFileStore(settings.data_dir)


@pytest.fixture
def transactions(store, settings):
    return TransactionStore(store, settings)


@pytest.fixture
def tiers(store, transactions):
    return TierEngine(store, transactions)


@pytest.fixture
def always_succeed_rng():
    """Random source whose draws always land below any success rate."""
    rng = Mock()
    rng.random.return_value = 0.0
    return rng


@pytest.fixture
def services(settings, always_succeed_rng):
    return build_services(settings, rng=always_succeed_rng)
