# tests/test_solana_rpc.py
"""
Solana RPC Client Tests - JSON-RPC Calls and Error Mapping
"""
from unittest.mock import Mock, patch

import pytest
import requests

from parkchain.adapters.rpc.solana import SolanaRpcClient

RPC_URL = "https://rpc.example.test"


def _response(payload):
    resp = Mock()
    resp.raise_for_status.return_value = None
    resp.json.return_value = payload
    return resp


@pytest.fixture
def client():
    return SolanaRpcClient(url=RPC_URL, timeout=5)


class TestGetRecentPerformanceSamples:
    @patch("parkchain.adapters.rpc.solana.requests.post")
    def test_success(self, mock_post, client):
        samples = [{"numTransactions": 1200, "numSlots": 60, "samplePeriodSecs": 60}]
        mock_post.return_value = _response({"jsonrpc": "2.0", "id": 1, "result": samples})

        assert client.get_recent_performance_samples(3) == samples

        mock_post.assert_called_once_with(
            RPC_URL,
            json={"jsonrpc": "2.0", "id": 1, "method": "getRecentPerformanceSamples", "params": [3]},
            timeout=5,
        )

    @patch("parkchain.adapters.rpc.solana.requests.post")
    def test_request_ids_increase(self, mock_post, client):
        mock_post.return_value = _response({"result": []})
        client.get_recent_performance_samples()
        client.get_recent_performance_samples()
        assert mock_post.call_args.kwargs["json"]["id"] == 2

    @patch("parkchain.adapters.rpc.solana.requests.post")
    def test_timeout(self, mock_post, client):
        mock_post.side_effect = requests.exceptions.Timeout()
        with pytest.raises(RuntimeError, match="Solana RPC timeout after 5s"):
            client.get_recent_performance_samples()

    @patch("parkchain.adapters.rpc.solana.requests.post")
    def test_http_error(self, mock_post, client):
        resp = Mock()
        resp.raise_for_status.side_effect = requests.exceptions.HTTPError("503 Server Error")
        mock_post.return_value = resp
        with pytest.raises(RuntimeError, match="Solana RPC request failed"):
            client.get_recent_performance_samples()

    @patch("parkchain.adapters.rpc.solana.requests.post")
    def test_invalid_json(self, mock_post, client):
        resp = Mock()
        resp.raise_for_status.return_value = None
        resp.json.side_effect = ValueError("Expecting value")
        mock_post.return_value = resp
        with pytest.raises(RuntimeError, match="invalid JSON"):
            client.get_recent_performance_samples()

    @patch("parkchain.adapters.rpc.solana.requests.post")
    def test_error_object(self, mock_post, client):
        mock_post.return_value = _response({"error": {"code": -32601, "message": "Method not found"}})
        with pytest.raises(RuntimeError, match="Solana RPC error: Method not found"):
            client.get_recent_performance_samples()

    @patch("parkchain.adapters.rpc.solana.requests.post")
    def test_non_object_response(self, mock_post, client):
        mock_post.return_value = _response(["not", "an", "object"])
        with pytest.raises(RuntimeError, match="non-object"):
            client.get_recent_performance_samples()

    @patch("parkchain.adapters.rpc.solana.requests.post")
    def test_unexpected_result_shape(self, mock_post, client):
        mock_post.return_value = _response({"result": {"samples": []}})
        with pytest.raises(RuntimeError, match="unexpected performance samples"):
            client.get_recent_performance_samples()
