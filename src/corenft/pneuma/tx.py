"""
Transaction pipeline - build, simulate, sign, submit and await.

One message per transaction, SIGN_MODE_DIRECT, single signer. Every step
maps its failures onto one error class so callers can tell a rejected
dry-run from a rejected block inclusion:

    account lookup / submit transport    -> SubmissionError
    dry-run rejected                     -> SimulationError
    signing                              -> SigningError
    check-time rejection                 -> SubmissionError
    included with a non-zero code        -> ExecutionError
    no verdict (deadline, cancel, lost)  -> UnknownOutcomeError

Nothing is retried.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

from cosmpy.protos.cosmos.crypto.secp256k1.keys_pb2 import PubKey
from cosmpy.protos.cosmos.tx.signing.v1beta1.signing_pb2 import SignMode
from cosmpy.protos.cosmos.tx.v1beta1.tx_pb2 import (
    AuthInfo,
    Fee,
    ModeInfo,
    SignDoc,
    SignerInfo,
    TxBody,
    TxRaw,
)

from ..errors import (
    ExecutionError,
    SigningError,
    SimulationError,
    SubmissionError,
    UnknownOutcomeError,
)
from ..sigil.keyring import InMemoryKeyring
from ..utils import ceil_int, tx_hash as compute_tx_hash
from .context import BroadcastMode, ClientContext, TxFactory
from .nft import NftMessage
from .rpc import AccountInfo, NodeResponseError, NodeTransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BroadcastResult:
    tx_hash: str
    code: int = 0
    height: Optional[int] = None
    gas_wanted: Optional[int] = None
    gas_used: Optional[int] = None
    raw_log: str = ""

    @property
    def confirmed(self) -> bool:
        """True once the transaction was seen in a block."""
        return self.height is not None and self.height > 0


# ---------------------------------------------------------------------------
# Building
# ---------------------------------------------------------------------------


def fee_amount(gas_limit: int, gas_price: Decimal) -> int:
    """Fee in the smallest denomination, rounded up."""
    return ceil_int(Decimal(gas_limit) * gas_price)


def _body_bytes(ctx: ClientContext, factory: TxFactory, msg: NftMessage) -> bytes:
    codec = factory.tx_config or ctx.codec
    body = TxBody(messages=[codec.pack(msg.proto)], memo=factory.memo)
    return body.SerializeToString()


def _keyring(ctx: ClientContext, factory: TxFactory) -> InMemoryKeyring:
    keyring = factory.keybase if factory.keybase is not None else ctx.keyring
    if keyring is None:
        raise SigningError("No keyring configured")
    if not ctx.from_name:
        raise SigningError("Client context has no signing key name")
    return keyring


def _auth_info_bytes(
    ctx: ClientContext,
    factory: TxFactory,
    account: AccountInfo,
    gas_limit: int,
) -> bytes:
    identity = _keyring(ctx, factory).key(ctx.from_name)
    codec = factory.tx_config or ctx.codec
    signer = SignerInfo(
        public_key=codec.pack(PubKey(key=identity.public_key)),
        mode_info=ModeInfo(single=ModeInfo.Single(mode=SignMode.SIGN_MODE_DIRECT)),
        sequence=account.sequence,
    )
    fee = Fee(gas_limit=gas_limit)
    amount = fee_amount(gas_limit, factory.gas_price)
    if amount > 0:
        fee.amount.add(denom=factory.fee_denom, amount=str(amount))
    return AuthInfo(signer_infos=[signer], fee=fee).SerializeToString()


def build_sign_doc(
    body_bytes: bytes,
    auth_info_bytes: bytes,
    chain_id: str,
    account_number: int,
) -> bytes:
    return SignDoc(
        body_bytes=body_bytes,
        auth_info_bytes=auth_info_bytes,
        chain_id=chain_id,
        account_number=account_number,
    ).SerializeToString()


# ---------------------------------------------------------------------------
# Pipeline steps
# ---------------------------------------------------------------------------


def _query_account(ctx: ClientContext) -> AccountInfo:
    try:
        return ctx.channel.query_account(ctx.from_address)
    except NodeResponseError as exc:
        if exc.not_found:
            raise SubmissionError(
                f"Account {ctx.from_address} not found on chain; fund it first",
                code=exc.code,
            ) from exc
        raise SubmissionError(f"Account lookup failed: {exc.message}", code=exc.code) from exc
    except NodeTransportError as exc:
        raise SubmissionError(f"Account lookup failed: {exc}") from exc


def simulate_gas(
    ctx: ClientContext,
    factory: TxFactory,
    msg: NftMessage,
    account: AccountInfo,
) -> int:
    """
    Dry-run the transaction and return the adjusted gas limit.

    The simulated copy carries the signer's public key but an empty
    signature; the node skips signature checks in simulation.

    Raises:
        SimulationError: If the node rejects the dry-run or cannot be reached
    """
    body = _body_bytes(ctx, factory, msg)
    auth_info = _auth_info_bytes(ctx, factory, account, gas_limit=0)
    sim_bytes = TxRaw(body_bytes=body, auth_info_bytes=auth_info, signatures=[b""]).SerializeToString()

    try:
        gas_info = ctx.channel.simulate(sim_bytes)
    except NodeResponseError as exc:
        raise SimulationError(f"Simulation rejected: {exc.message}") from exc
    except NodeTransportError as exc:
        raise SimulationError(f"Simulation failed: {exc}") from exc

    gas_used = int(gas_info.get("gas_used", 0))
    adjusted = ceil_int(Decimal(gas_used) * factory.gas_adjustment)
    logger.debug("Simulated %s: gas_used=%d, limit=%d", msg.type_url, gas_used, adjusted)
    return adjusted


def sign_tx(
    ctx: ClientContext,
    factory: TxFactory,
    msg: NftMessage,
    account: AccountInfo,
    gas_limit: int,
) -> bytes:
    """
    Build and sign the transaction.

    Returns:
        Serialized TxRaw, ready to broadcast

    Raises:
        SigningError: If the key is missing or signing fails
    """
    keyring = _keyring(ctx, factory)

    body = _body_bytes(ctx, factory, msg)
    auth_info = _auth_info_bytes(ctx, factory, account, gas_limit)
    sign_doc = build_sign_doc(body, auth_info, factory.chain_id or ctx.chain_id, account.account_number)

    signature = keyring.sign(ctx.from_name, sign_doc)
    return TxRaw(body_bytes=body, auth_info_bytes=auth_info, signatures=[signature]).SerializeToString()


def submit_tx(ctx: ClientContext, tx_bytes: bytes) -> dict[str, Any]:
    """
    Broadcast signed bytes with the context's broadcast mode.

    Raises:
        SubmissionError: Node unreachable, or the transaction failed the
            mempool check
        UnknownOutcomeError: The request may have reached the node but the
            response was lost
    """
    tx_hash = compute_tx_hash(tx_bytes)
    mode = BroadcastMode(ctx.broadcast_mode)

    try:
        response = ctx.channel.broadcast(tx_bytes, mode.wire_name)
    except NodeTransportError as exc:
        if exc.delivered:
            raise UnknownOutcomeError(tx_hash, f"submit response lost: {exc}") from exc
        raise SubmissionError(f"Submit failed: {exc}", tx_hash=tx_hash) from exc
    except NodeResponseError as exc:
        raise SubmissionError(
            f"Submit rejected: {exc.message}", tx_hash=tx_hash, code=exc.code
        ) from exc

    code = int(response.get("code", 0) or 0)
    if code != 0:
        raw_log = str(response.get("raw_log", ""))
        raise SubmissionError(
            f"Transaction rejected at check (code {code}): {raw_log}",
            tx_hash=tx_hash,
            code=code,
            codespace=str(response.get("codespace", "")),
            raw_log=raw_log,
        )

    reported = str(response.get("txhash", "")).upper()
    if reported and reported != tx_hash:
        logger.warning("Node reported hash %s for local hash %s", reported, tx_hash)
    logger.info("Submitted %s (%s)", tx_hash, mode.value)
    return response


def await_tx(
    ctx: ClientContext,
    tx_hash: str,
    *,
    cancel: Optional[threading.Event] = None,
) -> BroadcastResult:
    """
    Poll until the transaction is included, the deadline passes or
    ``cancel`` is set.

    Transport errors while polling are tolerated until the deadline.

    Raises:
        ExecutionError: Included with a non-zero result code
        UnknownOutcomeError: Deadline elapsed or cancelled
    """
    waiter = cancel or threading.Event()
    timeout = ctx.await_timeout
    deadline = time.monotonic() + timeout

    while True:
        try:
            found = ctx.channel.get_tx(tx_hash)
        except (NodeTransportError, NodeResponseError) as exc:
            logger.debug("Polling %s failed: %s", tx_hash, exc)
            found = None

        if found is not None:
            return _included(tx_hash, found)

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            logger.warning("Transaction %s not seen within %gs", tx_hash, timeout)
            raise UnknownOutcomeError(tx_hash, f"not included within {timeout:g}s")
        if waiter.wait(min(ctx.poll_interval, remaining)):
            logger.warning("Await of %s cancelled", tx_hash)
            raise UnknownOutcomeError(tx_hash, "await cancelled")


def _included(tx_hash: str, response: dict[str, Any]) -> BroadcastResult:
    code = int(response.get("code", 0) or 0)
    height = int(response.get("height", 0) or 0)
    raw_log = str(response.get("raw_log", ""))
    if code != 0:
        raise ExecutionError(
            raw_log,
            tx_hash=tx_hash,
            code=code,
            codespace=str(response.get("codespace", "")),
            height=height,
        )
    logger.info("Transaction %s included at height %d", tx_hash, height)
    return BroadcastResult(
        tx_hash=tx_hash,
        code=code,
        height=height,
        gas_wanted=_int_or_none(response.get("gas_wanted")),
        gas_used=_int_or_none(response.get("gas_used")),
        raw_log=raw_log,
    )


def _int_or_none(value: Any) -> Optional[int]:
    return None if value in (None, "") else int(value)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def broadcast_tx(
    ctx: ClientContext,
    factory: TxFactory,
    msg: NftMessage,
    *,
    cancel: Optional[threading.Event] = None,
) -> BroadcastResult:
    """
    Sign, submit and (if the context says so) await one message.

    Args:
        ctx: Client context (channel, keyring, broadcast mode, await policy)
        factory: Transaction factory (chain id, gas policy, fee)
        msg: Message from one of the NFT builders
        cancel: Set to abandon the await step early

    Returns:
        BroadcastResult; ``height`` is None when not awaited
    """
    if ctx.channel is None:
        raise SubmissionError("Client context has no node channel")

    account = _query_account(ctx)

    gas_limit = factory.gas_limit
    if factory.simulate_and_execute:
        gas_limit = simulate_gas(ctx, factory, msg, account)

    tx_bytes = sign_tx(ctx, factory, msg, account, gas_limit)
    tx_hash = compute_tx_hash(tx_bytes)

    response = submit_tx(ctx, tx_bytes)

    if not ctx.await_tx:
        return BroadcastResult(
            tx_hash=tx_hash,
            code=0,
            gas_wanted=gas_limit,
            raw_log=str(response.get("raw_log", "")),
        )

    return await_tx(ctx, tx_hash, cancel=cancel)
