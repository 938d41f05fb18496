# src/parkchain/adapters/rpc/solana.py
"""
Solana JSON-RPC Client - Network Load Sampling

Minimal client for the one RPC method the routing selector needs:
``getRecentPerformanceSamples``. Each sample reports how many transactions
the cluster processed in a short slot window; the routing selector averages
them into a network condition.

Files that USE this module:
- parkchain.adapters.telegram.jobs (network monitor job)
- parkchain.application.container (builds the client from settings)
- tests.test_solana_rpc (unit tests)

Files that this module USES:
- parkchain.config (RPC endpoint and HTTP timeout defaults)
"""
import logging
from typing import Any, Dict, List, Optional

import requests

log = logging.getLogger(__name__)


class SolanaRpcClient:
    """Thin JSON-RPC 2.0 client over ``requests``."""

    def __init__(self, url: Optional[str] = None, timeout: Optional[int] = None):
        """
        Initialize the client.

        Args:
            url: RPC endpoint (defaults to settings.solana_rpc_url)
            timeout: HTTP timeout in seconds (defaults to settings.http_timeout_seconds)
        """
        if url is None or timeout is None:
            from parkchain.config import settings
            url = url or settings.solana_rpc_url
            timeout = timeout or settings.http_timeout_seconds
        self.url = url
        self.timeout = timeout
        self._request_id = 0

    def _call(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """
        Perform one JSON-RPC call and return its ``result``.

        Raises:
            RuntimeError: On timeout, HTTP failure, invalid JSON or an RPC error object
        """
        self._request_id += 1
        body = {"jsonrpc": "2.0", "id": self._request_id, "method": method, "params": params or []}

        try:
            resp = requests.post(self.url, json=body, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except requests.exceptions.Timeout:
            log.error("Solana RPC timeout after %d seconds (%s)", self.timeout, method)
            raise RuntimeError(f"Solana RPC timeout after {self.timeout}s")
        except requests.exceptions.RequestException as e:
            log.error("Solana RPC request failed (%s): %s", method, e)
            raise RuntimeError(f"Solana RPC request failed: {e}")
        except ValueError as e:
            log.error("Solana RPC returned invalid JSON (%s): %s", method, e)
            raise RuntimeError(f"Solana RPC returned invalid JSON: {e}")

        if not isinstance(data, dict):
            raise RuntimeError("Solana RPC returned non-object JSON")
        if data.get("error"):
            error = data["error"]
            message = error.get("message") if isinstance(error, dict) else error
            log.error("Solana RPC error for %s: %s", method, message)
            raise RuntimeError(f"Solana RPC error: {message}")
        return data.get("result")

    def get_recent_performance_samples(self, limit: int = 10) -> List[Dict[str, Any]]:
        """
        Fetch the most recent performance samples.

        Args:
            limit: Number of samples to request

        Returns:
            List of sample dicts (``numTransactions``, ``numSlots``, ``samplePeriodSecs``, ...)
        """
        result = self._call("getRecentPerformanceSamples", [limit])
        if not isinstance(result, list):
            raise RuntimeError("Solana RPC returned unexpected performance samples")
        log.debug("Fetched %d performance samples", len(result))
        return result
