"""Tests for seed phrase derivation, addresses and signing."""

from __future__ import annotations

import hashlib

import pytest
from bech32 import bech32_decode, convertbits
from eth_keys import keys

from corenft.errors import KeyDerivationError, SigningError
from corenft.sigil.keyring import (
    SECP256K1,
    InMemoryKeyring,
    derive_identity,
    pubkey_to_address,
)

from .fakes import BAD_MNEMONIC, MNEMONIC

CORE_PATH = "m/44'/990'/0'/0/0"

# secp256k1 group order
_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141


class TestDerivation:
    def test_deterministic(self) -> None:
        first = derive_identity(MNEMONIC)
        second = derive_identity(MNEMONIC)
        assert first == second
        assert first.address.startswith("devcore1")
        assert len(first.public_key) == 33
        assert first.algorithm == SECP256K1

    def test_whitespace_normalized(self) -> None:
        spaced = "  " + MNEMONIC.replace(" ", "   ") + "\n"
        assert derive_identity(spaced).address == derive_identity(MNEMONIC).address

    def test_path_and_passphrase_change_key(self) -> None:
        base = derive_identity(MNEMONIC)
        assert derive_identity(MNEMONIC, hd_path="m/44'/990'/0'/0/1").address != base.address
        assert derive_identity(MNEMONIC, passphrase="extra").address != base.address

    def test_prefix_only_changes_hrp(self) -> None:
        dev = derive_identity(MNEMONIC, address_prefix="devcore").address
        main = derive_identity(MNEMONIC, address_prefix="core").address
        assert bech32_decode(dev)[0] == "devcore"
        assert bech32_decode(main)[0] == "core"
        assert bech32_decode(dev)[1] == bech32_decode(main)[1]

    def test_malformed_mnemonic(self) -> None:
        with pytest.raises(KeyDerivationError) as exc_info:
            derive_identity(BAD_MNEMONIC)
        assert "abandon" not in str(exc_info.value)

    def test_unsupported_path(self) -> None:
        with pytest.raises(KeyDerivationError, match="path"):
            derive_identity(MNEMONIC, hd_path="44/990/0")


class TestKnownVectors:
    def test_cosmos_hub_address(self) -> None:
        identity = derive_identity(MNEMONIC, hd_path="m/44'/118'/0'/0/0", address_prefix="cosmos")
        assert identity.address == "cosmos19rl4cm2hmr8afy4kldpxz3fka4jguq0auqdal4"
        assert identity.public_key.hex() == "024f4e2ad99c34d60b9ba6283c9431a8418af8673212961f97a77b6377fcd05b62"

    def test_coreum_devnet_address(self) -> None:
        identity = derive_identity(MNEMONIC)
        assert identity.address == "devcore1qtk3eq20fuu2ndv3529zd7kqlskjefv333gtfa"
        assert identity.public_key.hex() == "020912bbf77efed4a2a8ab514e4fc44c566ab39e1a252a1adf4243c019bcf903e9"

    def test_coreum_mainnet_prefix(self) -> None:
        assert derive_identity(MNEMONIC, address_prefix="core").address == "core1qtk3eq20fuu2ndv3529zd7kqlskjefv3r09f8p"


class TestAddress:
    def test_address_is_ripemd_of_sha256(self) -> None:
        identity = derive_identity(MNEMONIC)
        _, words = bech32_decode(identity.address)
        digest = bytes(convertbits(words, 5, 8, False))
        assert len(digest) == 20
        assert pubkey_to_address(identity.public_key, "devcore") == identity.address

    def test_rejects_uncompressed_key(self) -> None:
        with pytest.raises(ValueError):
            pubkey_to_address(b"\x04" + b"\x01" * 64, "devcore")


class TestKeyring:
    def test_new_account_and_lookup(self) -> None:
        keyring = InMemoryKeyring("devcore")
        identity = keyring.new_account("operator", MNEMONIC, "", CORE_PATH)
        assert len(keyring) == 1
        assert keyring.key("operator") == identity

    def test_duplicate_name_rejected(self) -> None:
        keyring = InMemoryKeyring()
        keyring.new_account("operator", MNEMONIC, "", CORE_PATH)
        with pytest.raises(KeyDerivationError, match="already exists"):
            keyring.new_account("operator", MNEMONIC, "", CORE_PATH)
        assert len(keyring) == 1

    def test_unsupported_algorithm(self) -> None:
        keyring = InMemoryKeyring()
        with pytest.raises(KeyDerivationError, match="algorithm"):
            keyring.new_account("operator", MNEMONIC, "", CORE_PATH, algorithm="ed25519")
        assert len(keyring) == 0

    def test_failed_derivation_leaves_keyring_empty(self) -> None:
        keyring = InMemoryKeyring()
        with pytest.raises(KeyDerivationError):
            keyring.new_account("operator", BAD_MNEMONIC, "", CORE_PATH)
        assert len(keyring) == 0
        with pytest.raises(SigningError):
            keyring.key("operator")

    def test_unknown_key(self) -> None:
        keyring = InMemoryKeyring()
        with pytest.raises(SigningError):
            keyring.key("ghost")
        with pytest.raises(SigningError):
            keyring.sign("ghost", b"payload")


class TestSigning:
    def test_signature_verifies_and_is_low_s(self) -> None:
        keyring = InMemoryKeyring()
        identity = keyring.new_account("operator", MNEMONIC, "", CORE_PATH)
        payload = b"sign doc bytes"

        signature = keyring.sign("operator", payload)
        assert len(signature) == 64

        r = int.from_bytes(signature[:32], "big")
        s = int.from_bytes(signature[32:], "big")
        assert s <= _N // 2

        public_key = keys.PublicKey.from_compressed_bytes(identity.public_key)
        digest = hashlib.sha256(payload).digest()
        assert public_key.verify_msg_hash(digest, keys.Signature(vrs=(0, r, s)))

    def test_deterministic(self) -> None:
        keyring = InMemoryKeyring()
        keyring.new_account("operator", MNEMONIC, "", CORE_PATH)
        assert keyring.sign("operator", b"x") == keyring.sign("operator", b"x")
