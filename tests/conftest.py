"""Shared fixtures: a funded fake ledger and a client handle wired to it."""

from __future__ import annotations

from typing import Iterator

import pytest

from corenft.config import Settings
from corenft.pneuma.context import ClientHandle, setup_client_context
from corenft.sigil.keyring import AccountIdentity, derive_identity

from .fakes import MNEMONIC, FakeLedger, make_settings


@pytest.fixture()
def settings() -> Settings:
    return make_settings()


@pytest.fixture()
def identity(settings: Settings) -> AccountIdentity:
    return derive_identity(
        MNEMONIC,
        key_name=settings.key_name,
        hd_path=settings.hd_path,
        address_prefix=settings.address_prefix,
    )


@pytest.fixture()
def ledger(identity: AccountIdentity) -> FakeLedger:
    fake = FakeLedger()
    fake.fund(identity.address)
    return fake


@pytest.fixture()
def handle(settings: Settings, ledger: FakeLedger) -> Iterator[ClientHandle]:
    with setup_client_context(settings, transport=ledger.transport()) as client:
        yield client
