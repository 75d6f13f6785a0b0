"""
secp256k1 signing identity for corenft.

The operator account is derived from a BIP-39 seed phrase along a BIP-32
path (Coreum uses coin type 990) and held in a volatile in-memory keyring.
Nothing is written to disk; the seed phrase is not retained after
derivation.

Addresses follow the Cosmos convention:
    bech32(prefix, RIPEMD-160(SHA-256(compressed public key)))

Dependencies: eth-account (HD derivation), eth-keys (signing),
pycryptodome (RIPEMD-160), bech32.
"""

from __future__ import annotations

import hashlib
import logging
import re
from dataclasses import dataclass

from bech32 import bech32_encode, convertbits
from Crypto.Hash import RIPEMD160
from eth_account import Account
from eth_keys import keys
from eth_utils import ValidationError

from ..errors import KeyDerivationError, SigningError

logger = logging.getLogger(__name__)

SECP256K1 = "secp256k1"

_HD_PATH_RE = re.compile(r"^m(/\d+'?)+$")

Account.enable_unaudited_hdwallet_features()


@dataclass(frozen=True)
class AccountIdentity:
    key_name: str
    hd_path: str
    address: str
    public_key: bytes
    algorithm: str = SECP256K1

    @property
    def public_key_hex(self) -> str:
        return self.public_key.hex()


def pubkey_to_address(public_key: bytes, prefix: str) -> str:
    """
    Encode a compressed secp256k1 public key as a bech32 account address.

    Args:
        public_key: 33-byte compressed public key
        prefix: Human-readable part (e.g. "devcore", "core")
    """
    if len(public_key) != 33:
        raise ValueError(f"expected a 33-byte compressed public key, got {len(public_key)} bytes")
    digest = RIPEMD160.new(hashlib.sha256(public_key).digest()).digest()
    words = convertbits(digest, 8, 5)
    return bech32_encode(prefix, words)


def derive_private_key(mnemonic: str, passphrase: str, hd_path: str) -> keys.PrivateKey:
    """
    Derive a secp256k1 private key from a BIP-39 seed phrase.

    Raises:
        KeyDerivationError: If the seed phrase or the path is rejected
    """
    if not _HD_PATH_RE.match(hd_path):
        raise KeyDerivationError(f"Unsupported derivation path: {hd_path!r}")

    normalized = " ".join(mnemonic.split())
    try:
        account = Account.from_mnemonic(
            normalized, passphrase=passphrase, account_path=hd_path
        )
    except (ValueError, TypeError, ValidationError):
        # The underlying message echoes the words back; drop it.
        raise KeyDerivationError(
            f"Cannot derive key at {hd_path}: malformed seed phrase"
        ) from None

    return keys.PrivateKey(bytes(account.key))


class InMemoryKeyring:
    """
    Volatile key store, name -> private key.

    One instance exists per client handle; it is populated once at setup
    and only read afterwards.
    """

    def __init__(self, address_prefix: str = "devcore") -> None:
        self._prefix = address_prefix
        self._keys: dict[str, keys.PrivateKey] = {}
        self._identities: dict[str, AccountIdentity] = {}

    @property
    def address_prefix(self) -> str:
        return self._prefix

    def new_account(
        self,
        name: str,
        mnemonic: str,
        passphrase: str,
        hd_path: str,
        algorithm: str = SECP256K1,
    ) -> AccountIdentity:
        """
        Derive a key from a seed phrase and store it under ``name``.

        Returns:
            The derived AccountIdentity

        Raises:
            KeyDerivationError: On malformed seed phrase, unsupported path,
                unsupported algorithm or a duplicate key name. The keyring
                is left unchanged.
        """
        if algorithm != SECP256K1:
            raise KeyDerivationError(f"Unsupported key algorithm: {algorithm}")
        if name in self._keys:
            raise KeyDerivationError(f"Key {name!r} already exists in keyring")

        private_key = derive_private_key(mnemonic, passphrase, hd_path)
        public_key = private_key.public_key.to_compressed_bytes()
        identity = AccountIdentity(
            key_name=name,
            hd_path=hd_path,
            address=pubkey_to_address(public_key, self._prefix),
            public_key=public_key,
            algorithm=algorithm,
        )

        self._keys[name] = private_key
        self._identities[name] = identity
        logger.debug("Derived key %s at %s -> %s", name, hd_path, identity.address)
        return identity

    def key(self, name: str) -> AccountIdentity:
        try:
            return self._identities[name]
        except KeyError:
            raise SigningError(f"Key {name!r} not found in keyring") from None

    def sign(self, name: str, payload: bytes) -> bytes:
        """
        Sign SHA-256(payload) with the named key.

        Returns:
            64-byte signature r || s, with s in the lower half of the curve
            order as the ledger requires

        Raises:
            SigningError: If the key is unknown or signing fails
        """
        private_key = self._keys.get(name)
        if private_key is None:
            raise SigningError(f"Key {name!r} not found in keyring")

        digest = hashlib.sha256(payload).digest()
        try:
            signature = private_key.sign_msg_hash(digest)
        except Exception as exc:
            raise SigningError(f"Signing with key {name!r} failed: {exc}") from exc
        return signature.r.to_bytes(32, "big") + signature.s.to_bytes(32, "big")

    def __len__(self) -> int:
        return len(self._keys)


def derive_identity(
    mnemonic: str,
    *,
    key_name: str = "key-name",
    passphrase: str = "",
    hd_path: str = "m/44'/990'/0'/0/0",
    address_prefix: str = "devcore",
) -> AccountIdentity:
    """Derive an identity without keeping the key (e.g. for ``whoami``)."""
    return InMemoryKeyring(address_prefix).new_account(
        key_name, mnemonic, passphrase, hd_path
    )
