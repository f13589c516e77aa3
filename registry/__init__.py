"""
NFT Registry

Ownership ledger, approval index and registry orchestration for a single
non-fungible token collection.
"""

from .exceptions import (
    ErrorKind,
    RegistryError,
    AuthorizationError,
    ValidationError,
    StateConflictError,
    CapacityError,
    PolicyError
)

from .schema import (
    ZERO_ACCOUNT,
    CollectionConfig,
    TokenRecord,
    TransferEvent,
    ApprovalEvent,
    ApprovalForAllEvent,
    RegistrySnapshot,
    is_zero_account
)

from .ledger import OwnershipLedger
from .approvals import ApprovalIndex
from .guards import AccessGuard, SupplyGuard
from .uri import URIResolver, format_token_id, resolve_token_uri
from .events import EventDispatcher, EventRecorder, LoggingSubscriber
from .manager import NFTRegistry
from .concurrency import SerializedRegistry

__version__ = "1.0.0"

__all__ = [
    # Errors
    "ErrorKind",
    "RegistryError",
    "AuthorizationError",
    "ValidationError",
    "StateConflictError",
    "CapacityError",
    "PolicyError",

    # Models
    "ZERO_ACCOUNT",
    "CollectionConfig",
    "TokenRecord",
    "TransferEvent",
    "ApprovalEvent",
    "ApprovalForAllEvent",
    "RegistrySnapshot",
    "is_zero_account",

    # Components
    "OwnershipLedger",
    "ApprovalIndex",
    "AccessGuard",
    "SupplyGuard",
    "URIResolver",
    "format_token_id",
    "resolve_token_uri",
    "EventDispatcher",
    "EventRecorder",
    "LoggingSubscriber",
    "NFTRegistry",
    "SerializedRegistry"
]
