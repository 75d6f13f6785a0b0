"""
The three NFT operations: issue a class, mint an NFT, update its data.

Each operation takes the process-wide ClientHandle and a decoded request,
builds exactly one message and hands it to the broadcast pipeline. The
handle is only read, so operations may run concurrently.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from .errors import RequestDecodeError
from .payloads import Body, IssueClassRequest, MintNftRequest, UpdateNftDataRequest
from .pneuma.context import ClientHandle
from .pneuma.nft import issue_class_msg, mint_msg, update_data_msg
from .pneuma.tx import BroadcastResult, broadcast_tx

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OperationResponse:
    message: str
    tx_hash: str
    class_id: Optional[str] = None
    nft_id: Optional[str] = None
    height: Optional[int] = None

    def to_dict(self) -> dict:
        out = {"message": self.message, "txHash": self.tx_hash}
        if self.class_id is not None:
            out["classID"] = self.class_id
        if self.nft_id is not None:
            out["nftID"] = self.nft_id
        if self.height is not None:
            out["height"] = self.height
        return out


def _respond(message: str, result: BroadcastResult, class_id: Optional[str], nft_id: Optional[str] = None) -> OperationResponse:
    return OperationResponse(
        message=message,
        tx_hash=result.tx_hash,
        class_id=class_id,
        nft_id=nft_id,
        height=result.height,
    )


def issue_class(
    handle: ClientHandle,
    request: IssueClassRequest,
    *,
    cancel: Optional[threading.Event] = None,
) -> OperationResponse:
    ctx, factory = handle.context, handle.factory
    msg = issue_class_msg(ctx, factory, request.symbol, request.name, request.description)
    logger.info("Issuing class %s", msg.class_id)
    result = broadcast_tx(ctx, factory, msg, cancel=cancel)
    return _respond("NFT class created successfully", result, msg.class_id)


def mint_nft(
    handle: ClientHandle,
    request: MintNftRequest,
    *,
    cancel: Optional[threading.Event] = None,
) -> OperationResponse:
    ctx, factory = handle.context, handle.factory
    msg = mint_msg(ctx, factory, request.class_symbol, request.nft_id, request.name, request.description)
    logger.info("Minting %s/%s", msg.class_id, msg.nft_id)
    result = broadcast_tx(ctx, factory, msg, cancel=cancel)
    return _respond("NFT minted successfully", result, msg.class_id, msg.nft_id)


def update_nft_data(
    handle: ClientHandle,
    request: UpdateNftDataRequest,
    *,
    cancel: Optional[threading.Event] = None,
) -> OperationResponse:
    ctx, factory = handle.context, handle.factory
    msg = update_data_msg(ctx, factory, request.class_id, request.nft_id, request.name, request.description)
    logger.info("Updating data of %s/%s", msg.class_id, msg.nft_id)
    result = broadcast_tx(ctx, factory, msg, cancel=cancel)
    return _respond("NFT data updated successfully", result, msg.class_id, msg.nft_id)


_Operation = Callable[..., OperationResponse]

OPERATIONS: dict[str, tuple[Callable[[Body], object], _Operation]] = {
    "create-class": (IssueClassRequest.decode, issue_class),
    "mint": (MintNftRequest.decode, mint_nft),
    "update": (UpdateNftDataRequest.decode, update_nft_data),
}


def dispatch(
    handle: ClientHandle,
    operation: str,
    body: Body,
    *,
    cancel: Optional[threading.Event] = None,
) -> OperationResponse:
    """
    Decode a request body and run the named operation.

    Raises:
        RequestDecodeError: Unknown operation or malformed body (nothing sent)
        SetupError / BroadcastError subclasses from the pipeline
    """
    try:
        decode, run = OPERATIONS[operation]
    except KeyError:
        raise RequestDecodeError(
            f"Unknown operation {operation!r} (expected one of: {', '.join(OPERATIONS)})"
        ) from None
    request = decode(body)
    return run(handle, request, cancel=cancel)
