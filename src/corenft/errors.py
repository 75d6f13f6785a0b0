"""
Error hierarchy for corenft.

Three families, matching when they can happen:
- input errors: the request body could not be decoded, nothing was attempted
- setup errors: connection, keyring or context construction failed before
  any transaction was built
- broadcast errors: the transaction attempt itself failed

Every class carries the process exit code the CLI uses for it.
"""

from __future__ import annotations

from typing import Optional


class CorenftError(RuntimeError):
    exit_code: int = 1


class ConfigError(CorenftError):
    exit_code = 2


class RequestDecodeError(CorenftError, ValueError):
    exit_code = 3


# ============ Setup ============


class SetupError(CorenftError):
    exit_code = 4


class NodeConnectionError(SetupError, ConnectionError):
    """DNS, TCP or TLS handshake with the node failed."""

    exit_code = 5


class KeyDerivationError(SetupError):
    """Seed phrase or derivation path rejected."""

    exit_code = 6


# ============ Broadcast ============


class BroadcastError(CorenftError):
    exit_code = 10

    def __init__(self, message: str, *, tx_hash: Optional[str] = None) -> None:
        super().__init__(message)
        self.tx_hash = tx_hash


class SimulationError(BroadcastError):
    exit_code = 11


class SigningError(BroadcastError):
    exit_code = 12


class SubmissionError(BroadcastError):
    """The node never accepted the transaction into its mempool."""

    exit_code = 13

    def __init__(
        self,
        message: str,
        *,
        tx_hash: Optional[str] = None,
        code: Optional[int] = None,
        codespace: str = "",
        raw_log: str = "",
    ) -> None:
        super().__init__(message, tx_hash=tx_hash)
        self.code = code
        self.codespace = codespace
        self.raw_log = raw_log


class ExecutionError(BroadcastError):
    """Included in a block, but the ledger rejected the state transition."""

    exit_code = 14

    def __init__(
        self,
        raw_log: str,
        *,
        tx_hash: Optional[str] = None,
        code: int = 0,
        codespace: str = "",
        height: Optional[int] = None,
    ) -> None:
        super().__init__(f"transaction failed on chain (code {code}): {raw_log}", tx_hash=tx_hash)
        self.raw_log = raw_log
        self.code = code
        self.codespace = codespace
        self.height = height


class UnknownOutcomeError(BroadcastError):
    """The node may have the transaction, but no verdict was observed.

    The caller should look the transaction up by ``tx_hash`` before
    deciding to submit it again.
    """

    exit_code = 15

    def __init__(self, tx_hash: str, reason: str) -> None:
        super().__init__(f"outcome of {tx_hash} unknown: {reason}", tx_hash=tx_hash)
        self.reason = reason
