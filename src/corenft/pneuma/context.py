"""
Client context and transaction factory.

Both are immutable values: every ``with_*`` call returns a new value with
one field replaced. They are built once per process by
``setup_client_context`` and shared read-only by all operations through a
``ClientHandle``.

Setup order: node channel -> identity -> encoding config -> context ->
factory. A failure at any step closes what was already opened.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Optional

import httpx

from ..config import Settings
from ..sigil.keyring import SECP256K1, AccountIdentity, InMemoryKeyring
from .codec import ASSET_NFT, AUTH, EncodingConfig, new_encoding_config
from .rpc import NodeChannel, open_channel

logger = logging.getLogger(__name__)


class BroadcastMode(str, Enum):
    """SYNC waits for the mempool check; ASYNC returns on receipt."""

    SYNC = "sync"
    ASYNC = "async"

    @property
    def wire_name(self) -> str:
        return f"BROADCAST_MODE_{self.name}"


@dataclass(frozen=True)
class ClientContext:
    chain_id: str = ""
    channel: Optional[NodeChannel] = None
    keyring: Optional[InMemoryKeyring] = None
    codec: Optional[EncodingConfig] = None
    broadcast_mode: BroadcastMode = BroadcastMode.SYNC
    await_tx: bool = False
    from_address: str = ""
    from_name: str = ""
    await_timeout: float = 60.0
    poll_interval: float = 1.0

    def with_chain_id(self, chain_id: str) -> "ClientContext":
        return replace(self, chain_id=chain_id)

    def with_channel(self, channel: NodeChannel) -> "ClientContext":
        return replace(self, channel=channel)

    def with_keyring(self, keyring: InMemoryKeyring) -> "ClientContext":
        return replace(self, keyring=keyring)

    def with_codec(self, codec: EncodingConfig) -> "ClientContext":
        return replace(self, codec=codec)

    def with_broadcast_mode(self, mode: BroadcastMode | str) -> "ClientContext":
        return replace(self, broadcast_mode=BroadcastMode(mode))

    def with_await_tx(self, await_tx: bool) -> "ClientContext":
        return replace(self, await_tx=await_tx)

    def with_from(self, identity: AccountIdentity) -> "ClientContext":
        return replace(self, from_address=identity.address, from_name=identity.key_name)

    def with_from_address(self, address: str) -> "ClientContext":
        return replace(self, from_address=address)

    def with_await_timeout(self, timeout: float, poll_interval: Optional[float] = None) -> "ClientContext":
        return replace(
            self,
            await_timeout=timeout,
            poll_interval=self.poll_interval if poll_interval is None else poll_interval,
        )


@dataclass(frozen=True)
class TxFactory:
    keybase: Optional[InMemoryKeyring] = None
    chain_id: str = ""
    tx_config: Optional[EncodingConfig] = None
    simulate_and_execute: bool = False
    gas_limit: int = 200_000
    gas_adjustment: Decimal = Decimal("1")
    gas_price: Decimal = Decimal("0")
    fee_denom: str = ""
    memo: str = ""

    def with_keybase(self, keybase: InMemoryKeyring) -> "TxFactory":
        return replace(self, keybase=keybase)

    def with_chain_id(self, chain_id: str) -> "TxFactory":
        return replace(self, chain_id=chain_id)

    def with_tx_config(self, tx_config: EncodingConfig) -> "TxFactory":
        return replace(self, tx_config=tx_config)

    def with_simulate_and_execute(self, simulate: bool) -> "TxFactory":
        return replace(self, simulate_and_execute=simulate)

    def with_gas(self, gas_limit: int, gas_adjustment: Optional[Decimal] = None) -> "TxFactory":
        return replace(
            self,
            gas_limit=gas_limit,
            gas_adjustment=self.gas_adjustment if gas_adjustment is None else gas_adjustment,
        )

    def with_gas_prices(self, gas_price: Decimal, fee_denom: str) -> "TxFactory":
        return replace(self, gas_price=gas_price, fee_denom=fee_denom)

    def with_memo(self, memo: str) -> "TxFactory":
        return replace(self, memo=memo)


@dataclass(frozen=True)
class ClientHandle:
    """Process-wide, read-only bundle of context, factory and identity."""

    context: ClientContext
    factory: TxFactory
    identity: AccountIdentity

    @property
    def address(self) -> str:
        return self.identity.address

    def close(self) -> None:
        if self.context.channel is not None:
            self.context.channel.close()

    def __enter__(self) -> "ClientHandle":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


def setup_client_context(
    settings: Settings,
    *,
    transport: Optional[httpx.BaseTransport] = None,
) -> ClientHandle:
    """
    Build the process-wide client handle.

    Args:
        settings: Loaded configuration
        transport: Injectable httpx transport for the node channel (tests)

    Returns:
        ClientHandle owning an open node channel; close it on shutdown.

    Raises:
        ConfigError: No seed phrase configured
        NodeConnectionError: Channel could not be opened
        KeyDerivationError: Seed phrase or derivation path rejected
    """
    mnemonic = settings.require_mnemonic()

    channel = open_channel(
        settings.node_url,
        expected_chain_id=settings.chain_id,
        timeout=settings.request_timeout,
        transport=transport,
    )
    try:
        keyring = InMemoryKeyring(settings.address_prefix)
        identity = keyring.new_account(
            settings.key_name, mnemonic, settings.passphrase, settings.hd_path, SECP256K1
        )

        codec = new_encoding_config(AUTH, ASSET_NFT)

        context = (
            ClientContext()
            .with_chain_id(settings.chain_id)
            .with_channel(channel)
            .with_keyring(keyring)
            .with_codec(codec)
            .with_broadcast_mode(settings.broadcast_mode)
            .with_await_tx(settings.await_tx)
            .with_await_timeout(settings.await_timeout, settings.poll_interval)
            .with_from(identity)
        )

        factory = (
            TxFactory()
            .with_keybase(keyring)
            .with_chain_id(context.chain_id)
            .with_tx_config(codec)
            .with_simulate_and_execute(settings.simulate)
            .with_gas(settings.gas_limit, settings.gas_adjustment)
            .with_gas_prices(settings.gas_price, settings.fee_denom)
            .with_memo(settings.memo)
        )
    except BaseException:
        channel.close()
        raise

    logger.info("Client ready: %s on %s via %s", identity.address, settings.chain_id, settings.node_url)
    return ClientHandle(context=context, factory=factory, identity=identity)
