__version__ = "0.1.0"

__all__ = [
    # Configuration
    "Settings",
    # Errors
    "CorenftError",
    "ConfigError",
    "RequestDecodeError",
    "SetupError",
    "NodeConnectionError",
    "KeyDerivationError",
    "BroadcastError",
    "SimulationError",
    "SigningError",
    "SubmissionError",
    "ExecutionError",
    "UnknownOutcomeError",
    # Identity
    "AccountIdentity",
    "InMemoryKeyring",
    "derive_identity",
    "pubkey_to_address",
    # Node channel
    "NodeChannel",
    "open_channel",
    # Encoding
    "ClassFeature",
    "DataEditor",
    "EncodingConfig",
    "new_encoding_config",
    # Context
    "BroadcastMode",
    "ClientContext",
    "ClientHandle",
    "TxFactory",
    "setup_client_context",
    # Messages
    "build_class_id",
    "issue_class_msg",
    "mint_msg",
    "update_data_msg",
    # Broadcast
    "BroadcastResult",
    "broadcast_tx",
    # Operations
    "IssueClassRequest",
    "MintNftRequest",
    "UpdateNftDataRequest",
    "OperationResponse",
    "dispatch",
    "issue_class",
    "mint_nft",
    "update_nft_data",
]

from .config import Settings
from .errors import (
    BroadcastError,
    ConfigError,
    CorenftError,
    ExecutionError,
    KeyDerivationError,
    NodeConnectionError,
    RequestDecodeError,
    SetupError,
    SigningError,
    SimulationError,
    SubmissionError,
    UnknownOutcomeError,
)
from .sigil.keyring import AccountIdentity, InMemoryKeyring, derive_identity, pubkey_to_address
from .pneuma.rpc import NodeChannel, open_channel
from .pneuma.codec import ClassFeature, DataEditor, EncodingConfig, new_encoding_config
from .pneuma.context import BroadcastMode, ClientContext, ClientHandle, TxFactory, setup_client_context
from .pneuma.nft import build_class_id, issue_class_msg, mint_msg, update_data_msg
from .pneuma.tx import BroadcastResult, broadcast_tx
from .payloads import IssueClassRequest, MintNftRequest, UpdateNftDataRequest
from .operations import OperationResponse, dispatch, issue_class, mint_nft, update_nft_data
