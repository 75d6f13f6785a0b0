"""
Runtime configuration for corenft.

Values are resolved once at process start, in increasing precedence:
built-in defaults (Coreum devnet), the ``.env`` file (default
``~/.corenft/.env``), then the process environment. The resulting
``Settings`` value is immutable and is passed explicitly into setup.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Mapping, Optional

from dotenv import dotenv_values

from .errors import ConfigError

CORENFT_DIR = Path.home() / ".corenft"
CORENFT_ENV = CORENFT_DIR / ".env"

_DEFAULTS: dict[str, str] = {
    "CORENFT_KEY_NAME": "key-name",
    "CORENFT_PASSPHRASE": "",
    "CORENFT_CHAIN_ID": "coreum-devnet-1",
    "CORENFT_NODE_URL": "https://full-node.devnet-1.coreum.dev:1317",
    "CORENFT_ADDRESS_PREFIX": "devcore",
    "CORENFT_COIN_TYPE": "990",
    "CORENFT_FEE_DENOM": "udevcore",
    "CORENFT_GAS_PRICE": "0.0625",
    "CORENFT_GAS_ADJUSTMENT": "1.2",
    "CORENFT_GAS_LIMIT": "200000",
    "CORENFT_BROADCAST_MODE": "sync",
    "CORENFT_AWAIT_TX": "true",
    "CORENFT_SIMULATE": "true",
    "CORENFT_AWAIT_TIMEOUT": "60",
    "CORENFT_POLL_INTERVAL": "1.0",
    "CORENFT_REQUEST_TIMEOUT": "30",
    "CORENFT_MEMO": "",
}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}
_BROADCAST_MODES = ("sync", "async")
_CHAIN_ID_RE = re.compile(r"^[a-zA-Z0-9_.-]+$")


@dataclass(frozen=True)
class Settings:
    mnemonic: Optional[str]
    passphrase: str
    key_name: str
    chain_id: str
    node_url: str
    address_prefix: str
    coin_type: int
    hd_path: str
    fee_denom: str
    gas_price: Decimal
    gas_adjustment: Decimal
    gas_limit: int
    broadcast_mode: str
    await_tx: bool
    simulate: bool
    await_timeout: float
    poll_interval: float
    request_timeout: float
    memo: str

    @classmethod
    def load(
        cls,
        env_path: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "Settings":
        """
        Resolve settings from defaults, the .env file and the environment.

        Args:
            env_path: .env file to read (default: ~/.corenft/.env). A missing
                file is not an error.
            environ: Environment mapping (default: os.environ)

        Raises:
            ConfigError: If any value fails validation
        """
        env_path = env_path or CORENFT_ENV
        environ = os.environ if environ is None else environ

        values: dict[str, Optional[str]] = dict(_DEFAULTS)
        if env_path.exists():
            values.update(dotenv_values(env_path))
        values.update({k: v for k, v in environ.items() if k.startswith("CORENFT_")})

        return cls.from_mapping(values)

    @classmethod
    def from_mapping(cls, values: Mapping[str, Optional[str]]) -> "Settings":
        merged = {**_DEFAULTS, **{k: v for k, v in values.items() if v is not None}}

        coin_type = _parse_int(merged, "CORENFT_COIN_TYPE", minimum=0)
        hd_path = merged.get("CORENFT_HD_PATH") or f"m/44'/{coin_type}'/0'/0/0"

        chain_id = merged["CORENFT_CHAIN_ID"].strip()
        if not _CHAIN_ID_RE.match(chain_id):
            raise ConfigError(f"CORENFT_CHAIN_ID is not a valid chain id: {chain_id!r}")

        node_url = merged["CORENFT_NODE_URL"].strip().rstrip("/")
        if not node_url.startswith("https://"):
            raise ConfigError(
                f"CORENFT_NODE_URL must be an https:// URL, got {node_url!r}"
            )

        broadcast_mode = merged["CORENFT_BROADCAST_MODE"].strip().lower()
        if broadcast_mode not in _BROADCAST_MODES:
            raise ConfigError(
                f"CORENFT_BROADCAST_MODE must be one of {', '.join(_BROADCAST_MODES)}, "
                f"got {broadcast_mode!r}"
            )

        mnemonic = (merged.get("CORENFT_MNEMONIC") or "").strip() or None

        return cls(
            mnemonic=mnemonic,
            passphrase=merged["CORENFT_PASSPHRASE"],
            key_name=merged["CORENFT_KEY_NAME"],
            chain_id=chain_id,
            node_url=node_url,
            address_prefix=merged["CORENFT_ADDRESS_PREFIX"],
            coin_type=coin_type,
            hd_path=hd_path,
            fee_denom=merged["CORENFT_FEE_DENOM"],
            gas_price=_parse_decimal(merged, "CORENFT_GAS_PRICE", allow_zero=True),
            gas_adjustment=_parse_decimal(merged, "CORENFT_GAS_ADJUSTMENT"),
            gas_limit=_parse_int(merged, "CORENFT_GAS_LIMIT", minimum=1),
            broadcast_mode=broadcast_mode,
            await_tx=_parse_bool(merged, "CORENFT_AWAIT_TX"),
            simulate=_parse_bool(merged, "CORENFT_SIMULATE"),
            await_timeout=_parse_seconds(merged, "CORENFT_AWAIT_TIMEOUT"),
            poll_interval=_parse_seconds(merged, "CORENFT_POLL_INTERVAL"),
            request_timeout=_parse_seconds(merged, "CORENFT_REQUEST_TIMEOUT"),
            memo=merged["CORENFT_MEMO"],
        )

    def require_mnemonic(self) -> str:
        if not self.mnemonic:
            raise ConfigError(
                f"CORENFT_MNEMONIC not set. Add it to {CORENFT_ENV} or the environment."
            )
        return self.mnemonic

    def with_overrides(self, **changes: Any) -> "Settings":
        """Return a copy with the non-None keyword arguments applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    def redacted(self) -> dict[str, str]:
        """Settings as printable strings, secrets masked."""
        return {
            "mnemonic": "<set>" if self.mnemonic else "<not set>",
            "passphrase": "<set>" if self.passphrase else "<empty>",
            "key_name": self.key_name,
            "chain_id": self.chain_id,
            "node_url": self.node_url,
            "address_prefix": self.address_prefix,
            "hd_path": self.hd_path,
            "fee_denom": self.fee_denom,
            "gas_price": str(self.gas_price),
            "gas_adjustment": str(self.gas_adjustment),
            "gas_limit": str(self.gas_limit),
            "broadcast_mode": self.broadcast_mode,
            "await_tx": str(self.await_tx).lower(),
            "simulate": str(self.simulate).lower(),
            "await_timeout": f"{self.await_timeout:g}s",
            "poll_interval": f"{self.poll_interval:g}s",
            "request_timeout": f"{self.request_timeout:g}s",
            "memo": self.memo,
        }


# ============ Parsing helpers ============


def _parse_bool(values: Mapping[str, str], key: str) -> bool:
    raw = values[key].strip().lower()
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ConfigError(f"{key} must be a boolean, got {values[key]!r}")


def _parse_int(values: Mapping[str, str], key: str, minimum: int) -> int:
    try:
        parsed = int(values[key].strip())
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {values[key]!r}") from None
    if parsed < minimum:
        raise ConfigError(f"{key} must be >= {minimum}, got {parsed}")
    return parsed


def _parse_decimal(values: Mapping[str, str], key: str, allow_zero: bool = False) -> Decimal:
    try:
        parsed = Decimal(values[key].strip())
    except InvalidOperation:
        raise ConfigError(f"{key} must be a decimal number, got {values[key]!r}") from None
    if not parsed.is_finite() or parsed < 0 or (parsed == 0 and not allow_zero):
        raise ConfigError(f"{key} out of range: {values[key]!r}")
    return parsed


def _parse_seconds(values: Mapping[str, str], key: str) -> float:
    try:
        parsed = float(values[key].strip())
    except ValueError:
        raise ConfigError(f"{key} must be a number of seconds, got {values[key]!r}") from None
    if parsed <= 0:
        raise ConfigError(f"{key} must be greater than zero, got {parsed}")
    return parsed
