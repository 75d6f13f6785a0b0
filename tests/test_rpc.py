"""Tests for the node channel against mock transports."""

from __future__ import annotations

import json
import ssl
from typing import Callable
from unittest.mock import patch

import httpx
import pytest

from corenft.errors import NodeConnectionError
from corenft.pneuma import rpc
from corenft.pneuma.rpc import (
    NodeChannel,
    NodeResponseError,
    NodeTransportError,
    open_channel,
    tls_context,
)

from .fakes import CHAIN_ID, NODE_URL, FakeLedger


def _channel(handler: Callable[[httpx.Request], httpx.Response]) -> NodeChannel:
    return NodeChannel(NODE_URL, transport=httpx.MockTransport(handler))


class TestOpenChannel:
    def test_opens_and_reports_network(self) -> None:
        ledger = FakeLedger()
        with open_channel(NODE_URL, expected_chain_id=CHAIN_ID, transport=ledger.transport()) as channel:
            assert channel.network() == CHAIN_ID
            assert channel.base_url == NODE_URL
            assert not channel.closed
        assert channel.closed

    def test_plaintext_refused(self) -> None:
        ledger = FakeLedger()
        with pytest.raises(NodeConnectionError, match="plaintext"):
            open_channel("http://node.test", transport=ledger.transport())
        assert ledger.requests == []

    def test_unreachable(self) -> None:
        ledger = FakeLedger(unreachable=True)
        with pytest.raises(NodeConnectionError, match="Cannot open channel"):
            open_channel(NODE_URL, transport=ledger.transport())

    def test_wrong_network_closes_channel(self) -> None:
        ledger = FakeLedger(chain_id="coreum-mainnet-1")
        opened = []

        def tracking(*args, **kwargs):
            channel = NodeChannel(*args, **kwargs)
            opened.append(channel)
            return channel

        with patch.object(rpc, "NodeChannel", side_effect=tracking):
            with pytest.raises(NodeConnectionError, match="coreum-mainnet-1"):
                open_channel(NODE_URL, expected_chain_id=CHAIN_ID, transport=ledger.transport())
        assert len(opened) == 1
        assert opened[0].closed

    def test_tls_minimum_version(self) -> None:
        assert tls_context().minimum_version >= ssl.TLSVersion.TLSv1_2


class TestQueries:
    def test_account(self) -> None:
        ledger = FakeLedger()
        ledger.fund("devcore1abc", account_number=12, sequence=3)
        with NodeChannel(NODE_URL, transport=ledger.transport()) as channel:
            account = channel.query_account("devcore1abc")
        assert (account.address, account.account_number, account.sequence) == ("devcore1abc", 12, 3)

    def test_missing_account_is_not_found(self) -> None:
        with NodeChannel(NODE_URL, transport=FakeLedger().transport()) as channel:
            with pytest.raises(NodeResponseError) as exc_info:
                channel.query_account("devcore1nobody")
        assert exc_info.value.not_found
        assert exc_info.value.code == 5

    def test_vesting_account_unwrapped(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={
                    "account": {
                        "@type": "/cosmos.vesting.v1beta1.ContinuousVestingAccount",
                        "base_vesting_account": {
                            "base_account": {
                                "address": "devcore1vest",
                                "account_number": "44",
                                "sequence": "9",
                            },
                        },
                    }
                },
            )

        with _channel(handler) as channel:
            account = channel.query_account("devcore1vest")
        assert (account.account_number, account.sequence) == (44, 9)

    def test_get_tx_unknown_is_none(self) -> None:
        with NodeChannel(NODE_URL, transport=FakeLedger().transport()) as channel:
            assert channel.get_tx("AB" * 32) is None

    def test_get_tx_other_errors_raise(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"code": 13, "message": "internal"})

        with _channel(handler) as channel:
            with pytest.raises(NodeResponseError) as exc_info:
                channel.get_tx("AB" * 32)
        assert not exc_info.value.not_found
        assert exc_info.value.message == "internal"

    def test_non_json_error_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="bad gateway")

        with _channel(handler) as channel:
            with pytest.raises(NodeResponseError, match="bad gateway"):
                channel.node_info()


class TestTransactions:
    def test_broadcast_body(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(json.loads(request.content))
            return httpx.Response(200, json={"tx_response": {"txhash": "AA", "code": 0}})

        with _channel(handler) as channel:
            response = channel.broadcast(b"\x01\x02", "BROADCAST_MODE_ASYNC")
        assert seen == {"tx_bytes": "AQI=", "mode": "BROADCAST_MODE_ASYNC"}
        assert response["txhash"] == "AA"

    def test_simulate_returns_gas_info(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"gas_info": {"gas_wanted": "0", "gas_used": "1234"}})

        with _channel(handler) as channel:
            assert channel.simulate(b"tx")["gas_used"] == "1234"

    def test_connect_failure_not_delivered(self) -> None:
        with NodeChannel(NODE_URL, transport=FakeLedger(unreachable=True).transport()) as channel:
            with pytest.raises(NodeTransportError) as exc_info:
                channel.broadcast(b"tx")
        assert exc_info.value.delivered is False

    def test_read_timeout_may_be_delivered(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with _channel(handler) as channel:
            with pytest.raises(NodeTransportError) as exc_info:
                channel.broadcast(b"tx")
        assert exc_info.value.delivered is True
