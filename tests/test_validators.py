# tests/test_validators.py
"""
Validator and Settings Tests
"""
import pytest
from pydantic import ValidationError

from parkchain.config import Settings
from parkchain.shared.validators import (
    parse_network_condition,
    parse_routing_priority,
    validate_bot_token,
    validate_numeric_input,
    validate_rpc_url,
)

VALID_TOKEN = "123456789:" + "A" * 35


class TestValidators:
    def test_bot_token(self):
        assert validate_bot_token(VALID_TOKEN)
        assert not validate_bot_token("")
        assert not validate_bot_token("not-a-token")
        assert not validate_bot_token("123:" + "A" * 35)

    def test_rpc_url(self):
        assert validate_rpc_url("https://api.devnet.solana.com")
        assert validate_rpc_url("http://localhost:8899")
        assert not validate_rpc_url("ftp://api.devnet.solana.com")
        assert not validate_rpc_url("https://")
        assert not validate_rpc_url("")

    def test_network_condition(self):
        assert parse_network_condition(" HIGH ") == "high"
        assert parse_network_condition("apocalyptic") is None
        assert parse_network_condition(None) is None

    def test_routing_priority(self):
        assert parse_routing_priority("Speed") == "speed"
        assert parse_routing_priority("cheapest") == "balanced"
        assert parse_routing_priority(None) == "balanced"

    def test_numeric_input(self):
        assert validate_numeric_input("12.5", min_val=0)
        assert not validate_numeric_input("-1", min_val=0)
        assert not validate_numeric_input("101", max_val=100)
        assert not validate_numeric_input("abc")
        assert not validate_numeric_input("nan", min_val=1, max_val=200)
        assert not validate_numeric_input("inf", min_val=1)


class TestSettings:
    def test_defaults(self, tmp_path):
        s = Settings(bot_token="", data_dir=tmp_path / "data")
        assert s.gateway_fee == pytest.approx(0.0001)
        assert s.batch_history_limit == 50
        assert (tmp_path / "data").is_dir()

    def test_accepts_valid_token(self, tmp_path):
        s = Settings(bot_token=VALID_TOKEN, data_dir=tmp_path)
        assert s.bot_token == VALID_TOKEN

    def test_rejects_bad_token(self, tmp_path):
        with pytest.raises(ValidationError):
            Settings(bot_token="oops", data_dir=tmp_path)

    def test_rejects_non_http_rpc_url(self, tmp_path):
        with pytest.raises(ValidationError):
            Settings(bot_token="", data_dir=tmp_path, solana_rpc_url="ftp://example.com")

    def test_rejects_non_positive_fee(self, tmp_path):
        with pytest.raises(ValidationError):
            Settings(bot_token="", data_dir=tmp_path, gateway_fee=0)
