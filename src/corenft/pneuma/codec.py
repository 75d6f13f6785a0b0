"""
Encoding registry - which protobuf types this client can (de)serialize.

Cosmos transaction envelope types come from cosmpy's bundled protos. The
Coreum ``asset/nft/v1`` messages are not bundled anywhere, so their
descriptors are declared here and registered with the default protobuf
descriptor pool at import time. Only field numbers and full names matter
on the wire; they match the ledger's definitions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from types import MappingProxyType
from typing import Mapping, Type

from cosmpy.protos.cosmos.crypto.secp256k1.keys_pb2 import PubKey
from google.protobuf import any_pb2, descriptor_pb2, descriptor_pool, message_factory
from google.protobuf.message import Message

_F = descriptor_pb2.FieldDescriptorProto

NFT_PACKAGE = "coreum.asset.nft.v1"


class ClassFeature(IntEnum):
    BURNING = 0
    FREEZING = 1
    WHITELISTING = 2
    DISABLE_SENDING = 3
    SOULBOUND = 4


class DataEditor(IntEnum):
    ADMIN = 0
    OWNER = 1


class UnregisteredTypeError(KeyError):
    """Type URL not declared in the encoding config."""


# ============ Coreum asset/nft descriptors ============


def _enum(fd: descriptor_pb2.FileDescriptorProto, name: str, members: type[IntEnum]) -> None:
    enum = fd.enum_type.add(name=name)
    for member in members:
        enum.value.add(name=member.name.lower(), number=member.value)


def _message(fd: descriptor_pb2.FileDescriptorProto, name: str, *fields: tuple) -> None:
    msg = fd.message_type.add(name=name)
    for field_def in fields:
        fname, number, ftype = field_def[:3]
        type_name = field_def[3] if len(field_def) > 3 else None
        repeated = len(field_def) > 4 and field_def[4]
        f = msg.field.add(
            name=fname,
            number=number,
            type=ftype,
            label=_F.LABEL_REPEATED if repeated else _F.LABEL_OPTIONAL,
        )
        if type_name:
            f.type_name = type_name


def _nft_file() -> descriptor_pb2.FileDescriptorProto:
    fd = descriptor_pb2.FileDescriptorProto(
        name="coreum/asset/nft/v1/corenft.proto",
        package=NFT_PACKAGE,
        syntax="proto3",
        dependency=["google/protobuf/any.proto"],
    )
    any_type = ".google.protobuf.Any"
    feature_type = f".{NFT_PACKAGE}.ClassFeature"
    editor_type = f".{NFT_PACKAGE}.DataEditor"

    _enum(fd, "ClassFeature", ClassFeature)
    _enum(fd, "DataEditor", DataEditor)

    _message(fd, "DataBytes", ("data", 1, _F.TYPE_BYTES))
    _message(
        fd,
        "DataDynamicItem",
        ("editors", 1, _F.TYPE_ENUM, editor_type, True),
        ("data", 2, _F.TYPE_BYTES),
    )
    _message(
        fd,
        "DataDynamic",
        ("items", 1, _F.TYPE_MESSAGE, f".{NFT_PACKAGE}.DataDynamicItem", True),
    )
    _message(
        fd,
        "DataDynamicIndexedItem",
        ("index", 1, _F.TYPE_UINT32),
        ("data", 2, _F.TYPE_BYTES),
    )
    _message(
        fd,
        "MsgIssueClass",
        ("issuer", 1, _F.TYPE_STRING),
        ("symbol", 2, _F.TYPE_STRING),
        ("name", 3, _F.TYPE_STRING),
        ("description", 4, _F.TYPE_STRING),
        ("uri", 5, _F.TYPE_STRING),
        ("uri_hash", 6, _F.TYPE_STRING),
        ("data", 7, _F.TYPE_MESSAGE, any_type),
        ("features", 8, _F.TYPE_ENUM, feature_type, True),
        ("royalty_rate", 9, _F.TYPE_STRING),
    )
    _message(
        fd,
        "MsgMint",
        ("sender", 1, _F.TYPE_STRING),
        ("class_id", 2, _F.TYPE_STRING),
        ("id", 3, _F.TYPE_STRING),
        ("uri", 4, _F.TYPE_STRING),
        ("uri_hash", 5, _F.TYPE_STRING),
        ("data", 6, _F.TYPE_MESSAGE, any_type),
        ("recipient", 7, _F.TYPE_STRING),
    )
    _message(
        fd,
        "MsgUpdateData",
        ("sender", 1, _F.TYPE_STRING),
        ("class_id", 2, _F.TYPE_STRING),
        ("id", 3, _F.TYPE_STRING),
        ("items", 4, _F.TYPE_MESSAGE, f".{NFT_PACKAGE}.DataDynamicIndexedItem", True),
    )
    return fd


def _register_nft_types() -> dict[str, Type[Message]]:
    pool = descriptor_pool.Default()
    # any.proto must already be in the pool before the dependent file is added
    pool.FindFileByName(any_pb2.DESCRIPTOR.name)
    pool.AddSerializedFile(_nft_file().SerializeToString())

    classes = {}
    for name in (
        "DataBytes",
        "DataDynamicItem",
        "DataDynamic",
        "DataDynamicIndexedItem",
        "MsgIssueClass",
        "MsgMint",
        "MsgUpdateData",
    ):
        descriptor = pool.FindMessageTypeByName(f"{NFT_PACKAGE}.{name}")
        classes[name] = message_factory.GetMessageClass(descriptor)
    return classes


_NFT = _register_nft_types()

DataBytes = _NFT["DataBytes"]
DataDynamicItem = _NFT["DataDynamicItem"]
DataDynamic = _NFT["DataDynamic"]
DataDynamicIndexedItem = _NFT["DataDynamicIndexedItem"]
MsgIssueClass = _NFT["MsgIssueClass"]
MsgMint = _NFT["MsgMint"]
MsgUpdateData = _NFT["MsgUpdateData"]


def type_url(message_type: Type[Message] | Message) -> str:
    return "/" + message_type.DESCRIPTOR.full_name


# ============ Modules and config ============

# Module name -> message types it contributes
AUTH = "auth"
ASSET_NFT = "asset-nft"

_MODULE_TYPES: dict[str, tuple[Type[Message], ...]] = {
    AUTH: (PubKey,),
    ASSET_NFT: (
        MsgIssueClass,
        MsgMint,
        MsgUpdateData,
        DataBytes,
        DataDynamic,
    ),
}


@dataclass(frozen=True)
class EncodingConfig:
    modules: tuple[str, ...]
    registry: Mapping[str, Type[Message]] = field(repr=False)

    def require(self, url: str) -> Type[Message]:
        try:
            return self.registry[url]
        except KeyError:
            raise UnregisteredTypeError(
                f"{url} is not registered (modules: {', '.join(self.modules)})"
            ) from None

    def pack(self, message: Message) -> any_pb2.Any:
        """Wrap a registered message in an Any."""
        url = type_url(message)
        self.require(url)
        return any_pb2.Any(type_url=url, value=message.SerializeToString())

    def unpack(self, packed: any_pb2.Any) -> Message:
        message = self.require(packed.type_url)()
        message.ParseFromString(packed.value)
        return message


def new_encoding_config(*modules: str) -> EncodingConfig:
    """
    Build an encoding config for the given ledger modules.

    Raises:
        ValueError: If a module name is unknown
    """
    registry: dict[str, Type[Message]] = {}
    for module in modules:
        if module not in _MODULE_TYPES:
            raise ValueError(f"Unknown module: {module}")
        for message_type in _MODULE_TYPES[module]:
            registry[type_url(message_type)] = message_type
    return EncodingConfig(modules=tuple(modules), registry=MappingProxyType(registry))
