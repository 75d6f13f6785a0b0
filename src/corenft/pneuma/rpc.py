"""
Node channel - REST gateway client for a Cosmos-SDK node.

Lightweight alternative to a gRPC stack: uses httpx over TLS (1.2 minimum)
against the node's gRPC-gateway endpoints. Transaction bytes travel
base64-encoded inside JSON bodies.

Endpoints used:
    GET  /cosmos/base/tendermint/v1beta1/node_info
    GET  /cosmos/auth/v1beta1/accounts/{address}
    POST /cosmos/tx/v1beta1/simulate
    POST /cosmos/tx/v1beta1/txs
    GET  /cosmos/tx/v1beta1/txs/{hash}
    GET  /coreum/asset/nft/v1/classes/{class_id}
    GET  /coreum/nft/v1beta1/nfts/{class_id}/{id}
"""

from __future__ import annotations

import logging
import ssl
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from ..errors import NodeConnectionError
from ..utils import base64_encode

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

# gRPC status code the gateway reports for missing accounts / txs
_GRPC_NOT_FOUND = 5

# Failures where the request provably never reached the node
_UNDELIVERED = (httpx.ConnectError, httpx.ConnectTimeout, httpx.PoolTimeout, httpx.UnsupportedProtocol)


class NodeTransportError(RuntimeError):
    """The HTTP exchange with the node failed.

    ``delivered`` is False only when the request never left the client
    (DNS, TCP or TLS failure); otherwise the node may have processed it.
    """

    def __init__(self, message: str, *, delivered: bool) -> None:
        super().__init__(message)
        self.delivered = delivered


class NodeResponseError(RuntimeError):
    """The node answered with an error status."""

    def __init__(self, status_code: int, code: Optional[int], message: str) -> None:
        super().__init__(f"node error {status_code} (code {code}): {message}")
        self.status_code = status_code
        self.code = code
        self.message = message

    @property
    def not_found(self) -> bool:
        return self.status_code == 404 or self.code == _GRPC_NOT_FOUND


@dataclass(frozen=True)
class AccountInfo:
    address: str
    account_number: int
    sequence: int


def tls_context() -> ssl.SSLContext:
    """Default verifying context pinned to TLS 1.2 or newer."""
    context = ssl.create_default_context()
    context.minimum_version = ssl.TLSVersion.TLSv1_2
    return context


class NodeChannel:
    """Channel to one node. Thread-safe for concurrent reads (httpx pool)."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self._base_url,
            timeout=timeout,
            verify=tls_context(),
            transport=transport,
            headers={"Accept": "application/json"},
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def closed(self) -> bool:
        return self._client.is_closed

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "NodeChannel":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Low-level request
    # ------------------------------------------------------------------

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = self._client.request(method, path, **kwargs)
        except _UNDELIVERED as exc:
            raise NodeTransportError(
                f"{method} {path}: cannot reach {self._base_url}: {exc}", delivered=False
            ) from exc
        except httpx.TransportError as exc:
            raise NodeTransportError(
                f"{method} {path}: exchange with {self._base_url} failed: {exc}", delivered=True
            ) from exc

        try:
            data = response.json()
        except ValueError:
            data = None

        if response.is_error:
            code = data.get("code") if isinstance(data, dict) else None
            message = (data.get("message") if isinstance(data, dict) else None) or response.text
            raise NodeResponseError(response.status_code, code, message)

        if not isinstance(data, dict):
            raise NodeResponseError(
                response.status_code, None, f"{method} {path}: expected a JSON object"
            )
        return data

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def node_info(self) -> dict[str, Any]:
        return self._request("GET", "/cosmos/base/tendermint/v1beta1/node_info")

    def network(self) -> str:
        """Chain id the node reports."""
        info = self.node_info()
        return str(info.get("default_node_info", {}).get("network", ""))

    def query_account(self, address: str) -> AccountInfo:
        """
        Get account number and sequence for an address.

        Raises:
            NodeResponseError: not_found if the account has never received funds
        """
        data = self._request("GET", f"/cosmos/auth/v1beta1/accounts/{address}")
        base = _find_base_account(data.get("account") or {})
        return AccountInfo(
            address=base.get("address", address),
            account_number=int(base.get("account_number", 0)),
            sequence=int(base.get("sequence", 0)),
        )

    def query_class(self, class_id: str) -> dict[str, Any]:
        return self._request("GET", f"/coreum/asset/nft/v1/classes/{class_id}")

    def query_nft(self, class_id: str, nft_id: str) -> dict[str, Any]:
        return self._request("GET", f"/coreum/nft/v1beta1/nfts/{class_id}/{nft_id}")

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def simulate(self, tx_bytes: bytes) -> dict[str, Any]:
        """
        Dry-run a transaction.

        Returns:
            gas_info dict with gas_wanted and gas_used
        """
        data = self._request(
            "POST", "/cosmos/tx/v1beta1/simulate", json={"tx_bytes": base64_encode(tx_bytes)}
        )
        return data.get("gas_info") or {}

    def broadcast(self, tx_bytes: bytes, mode: str = "BROADCAST_MODE_SYNC") -> dict[str, Any]:
        """
        Submit signed transaction bytes.

        Returns:
            tx_response dict (txhash, code, codespace, raw_log, ...)
        """
        data = self._request(
            "POST",
            "/cosmos/tx/v1beta1/txs",
            json={"tx_bytes": base64_encode(tx_bytes), "mode": mode},
        )
        return data.get("tx_response") or {}

    def get_tx(self, tx_hash: str) -> Optional[dict[str, Any]]:
        """
        Look up an included transaction.

        Returns:
            tx_response dict, or None while the node does not know the hash
        """
        try:
            data = self._request("GET", f"/cosmos/tx/v1beta1/txs/{tx_hash}")
        except NodeResponseError as exc:
            if exc.not_found:
                return None
            raise
        return data.get("tx_response")


def _find_base_account(account: dict[str, Any]) -> dict[str, Any]:
    """Unwrap vesting / module accounts down to the BaseAccount fields."""
    if "account_number" in account or "sequence" in account:
        return account
    for key in ("base_account", "base_vesting_account"):
        nested = account.get(key)
        if isinstance(nested, dict):
            return _find_base_account(nested)
    return account


def open_channel(
    node_url: str,
    *,
    expected_chain_id: Optional[str] = None,
    timeout: float = DEFAULT_TIMEOUT,
    transport: Optional[httpx.BaseTransport] = None,
) -> NodeChannel:
    """
    Open a TLS channel to a node and verify it answers.

    Args:
        node_url: https:// base URL of the node's REST gateway
        expected_chain_id: If given, the node must report this network
        timeout: Per-request timeout in seconds
        transport: Injectable httpx transport (tests)

    Raises:
        NodeConnectionError: Plaintext URL, DNS / TCP / TLS failure, no
            answer, or a node on another network. No retry.
    """
    if not node_url.startswith("https://"):
        raise NodeConnectionError(f"Refusing plaintext channel to {node_url}")

    channel = NodeChannel(node_url, timeout=timeout, transport=transport)
    try:
        network = channel.network()
    except (NodeTransportError, NodeResponseError) as exc:
        channel.close()
        raise NodeConnectionError(f"Cannot open channel to {node_url}: {exc}") from exc

    if expected_chain_id and network != expected_chain_id:
        channel.close()
        raise NodeConnectionError(
            f"Node {node_url} is on network {network!r}, expected {expected_chain_id!r}"
        )

    logger.debug("Opened channel to %s (network %s)", node_url, network)
    return channel
