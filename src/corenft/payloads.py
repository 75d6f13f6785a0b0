"""
Request bodies for the three NFT operations.

Bodies are JSON objects using the field names of the HTTP API the
operations were first exposed through (``classSymbol``, ``nftID``, ...).
Missing fields decode as empty strings and field contents are left for
the ledger to judge. Only malformed JSON, a non-object body or a
non-string field fails with RequestDecodeError, before anything is sent.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Mapping, Union

from .errors import RequestDecodeError

Body = Union[str, bytes, Mapping[str, Any]]


def _load_object(body: Body) -> Mapping[str, Any]:
    if isinstance(body, Mapping):
        return body
    try:
        data = json.loads(body)
    except (ValueError, UnicodeDecodeError) as exc:
        raise RequestDecodeError(f"Request body is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise RequestDecodeError("Request body must be a JSON object")
    return data


def _field(data: Mapping[str, Any], *names: str) -> str:
    for name in names:
        if name in data:
            value = data[name]
            if not isinstance(value, str):
                raise RequestDecodeError(f"Field {name!r} must be a string")
            return value
    return ""


@dataclass(frozen=True)
class IssueClassRequest:
    symbol: str
    name: str
    description: str = ""

    @classmethod
    def decode(cls, body: Body) -> "IssueClassRequest":
        data = _load_object(body)
        return cls(
            symbol=_field(data, "classSymbol", "symbol"),
            name=_field(data, "className", "name"),
            description=_field(data, "classDescription", "description"),
        )


@dataclass(frozen=True)
class MintNftRequest:
    class_symbol: str
    nft_id: str
    name: str
    description: str = ""

    @classmethod
    def decode(cls, body: Body) -> "MintNftRequest":
        data = _load_object(body)
        return cls(
            class_symbol=_field(data, "classSymbol"),
            nft_id=_field(data, "nftID"),
            name=_field(data, "name"),
            description=_field(data, "description"),
        )


@dataclass(frozen=True)
class UpdateNftDataRequest:
    class_id: str
    nft_id: str
    name: str
    description: str = ""

    @classmethod
    def decode(cls, body: Body) -> "UpdateNftDataRequest":
        data = _load_object(body)
        return cls(
            class_id=_field(data, "classID"),
            nft_id=_field(data, "nftID"),
            name=_field(data, "name"),
            description=_field(data, "description"),
        )
