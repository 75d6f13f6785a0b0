"""
NFT message builders - one pure function per ledger operation.

Builders read the sender from the client context and check the message
type against the factory's encoding config; they never touch the network.

Class IDs are derived, not assigned: ``lower(symbol) + "-" + issuer``.
The same function is used at issuance and at mint time so both sides
agree on the ID.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional, Sequence, Union

from google.protobuf import any_pb2
from google.protobuf.message import Message

from .codec import (
    ClassFeature,
    DataBytes,
    DataDynamic,
    DataDynamicIndexedItem,
    DataDynamicItem,
    DataEditor,
    EncodingConfig,
    MsgIssueClass,
    MsgMint,
    MsgUpdateData,
    type_url,
)

if TYPE_CHECKING:
    from .context import ClientContext, TxFactory

CLASS_ID_SEPARATOR = "-"

# Features every class issued by this client carries
DEFAULT_CLASS_FEATURES: tuple[ClassFeature, ...] = (ClassFeature.FREEZING,)


def build_class_id(symbol: str, issuer: str) -> str:
    """Deterministic class ID for a (symbol, issuer address) pair."""
    return symbol.lower() + CLASS_ID_SEPARATOR + issuer


# ============ Data payloads ============


class DataKind(str, Enum):
    BYTES = "bytes"
    DYNAMIC = "dynamic"


@dataclass(frozen=True)
class DataItem:
    """One editable slot of dynamic data."""

    data: bytes
    editors: tuple[DataEditor, ...] = (DataEditor.OWNER,)

    def __post_init__(self) -> None:
        if not self.editors:
            raise ValueError("A data item must declare at least one editor")
        object.__setattr__(self, "editors", tuple(DataEditor(e) for e in self.editors))


@dataclass(frozen=True)
class BytesData:
    """Immutable opaque data."""

    data: bytes

    @property
    def kind(self) -> DataKind:
        return DataKind.BYTES

    def to_proto(self) -> Message:
        return DataBytes(data=self.data)


@dataclass(frozen=True)
class DynamicData:
    """Data split into items, each editable by its declared editors."""

    items: tuple[DataItem, ...]

    def __post_init__(self) -> None:
        if not self.items:
            raise ValueError("Dynamic data must contain at least one item")
        object.__setattr__(self, "items", tuple(self.items))

    @property
    def kind(self) -> DataKind:
        return DataKind.DYNAMIC

    def to_proto(self) -> Message:
        return DataDynamic(
            items=[
                DataDynamicItem(editors=[int(e) for e in item.editors], data=item.data)
                for item in self.items
            ]
        )


NftData = Union[BytesData, DynamicData]


def pack_data(codec: EncodingConfig, data: NftData) -> any_pb2.Any:
    return codec.pack(data.to_proto())


def unpack_data(codec: EncodingConfig, packed: any_pb2.Any) -> NftData:
    message = codec.unpack(packed)
    if packed.type_url == type_url(DataBytes):
        return BytesData(data=bytes(message.data))
    if packed.type_url == type_url(DataDynamic):
        return DynamicData(
            items=tuple(
                DataItem(data=bytes(item.data), editors=tuple(DataEditor(e) for e in item.editors))
                for item in message.items
            )
        )
    raise ValueError(f"{packed.type_url} is not an NFT data type")


def metadata_document(name: str, description: str) -> bytes:
    """JSON document stored in a data item."""
    return json.dumps({"name": name, "description": description}).encode("utf-8")


# ============ Messages ============


@dataclass(frozen=True)
class NftMessage:
    """A built ledger message, ready for the broadcast pipeline."""

    proto: Message
    class_id: Optional[str] = None
    nft_id: Optional[str] = None

    @property
    def type_url(self) -> str:
        return type_url(self.proto)


def _codec(ctx: "ClientContext", factory: "TxFactory") -> EncodingConfig:
    codec = factory.tx_config or ctx.codec
    if codec is None:
        raise ValueError("No encoding config on the context or the factory")
    return codec


def _sender(ctx: "ClientContext") -> str:
    if not ctx.from_address:
        raise ValueError("Client context has no from address")
    return ctx.from_address


def issue_class_msg(
    ctx: "ClientContext",
    factory: "TxFactory",
    symbol: str,
    name: str,
    description: str,
    features: Sequence[ClassFeature] = DEFAULT_CLASS_FEATURES,
) -> NftMessage:
    """Build MsgIssueClass with the context's address as issuer."""
    codec = _codec(ctx, factory)
    issuer = _sender(ctx)
    codec.require(type_url(MsgIssueClass))

    msg = MsgIssueClass(
        issuer=issuer,
        symbol=symbol,
        name=name,
        description=description,
        features=[int(f) for f in features],
    )
    return NftMessage(proto=msg, class_id=build_class_id(symbol, issuer))


def mint_msg(
    ctx: "ClientContext",
    factory: "TxFactory",
    class_symbol: str,
    nft_id: str,
    name: str,
    description: str,
) -> NftMessage:
    """
    Build MsgMint for a class issued by the context's address.

    The NFT carries dynamic data with a single item, editable by the owner,
    holding the name/description JSON document.
    """
    codec = _codec(ctx, factory)
    sender = _sender(ctx)
    class_id = build_class_id(class_symbol, sender)

    data = DynamicData(items=(DataItem(data=metadata_document(name, description)),))
    msg = MsgMint(
        sender=sender,
        class_id=class_id,
        id=nft_id,
        data=pack_data(codec, data),
    )
    codec.require(type_url(MsgMint))
    return NftMessage(proto=msg, class_id=class_id, nft_id=nft_id)


def update_data_msg(
    ctx: "ClientContext",
    factory: "TxFactory",
    class_id: str,
    nft_id: str,
    name: str,
    description: str,
    index: int = 0,
) -> NftMessage:
    """
    Build MsgUpdateData replacing one data item.

    Existing data is not fetched; the item at ``index`` is overwritten.
    """
    if index != 0:
        raise ValueError("Only data item 0 can be updated")
    codec = _codec(ctx, factory)
    sender = _sender(ctx)
    codec.require(type_url(MsgUpdateData))

    msg = MsgUpdateData(
        sender=sender,
        class_id=class_id,
        id=nft_id,
        items=[DataDynamicIndexedItem(index=index, data=metadata_document(name, description))],
    )
    return NftMessage(proto=msg, class_id=class_id, nft_id=nft_id)
