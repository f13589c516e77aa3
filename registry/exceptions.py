"""
NFT Registry - Exceptions

This module defines the typed errors raised by registry operations. Every
error aborts the operation with no side effects.
"""

from enum import Enum
from typing import Any, Dict


class ErrorKind(str, Enum):
    """Error kind enumeration."""
    AUTHORIZATION = "authorization"
    VALIDATION = "validation"
    STATE_CONFLICT = "state_conflict"
    CAPACITY = "capacity"
    POLICY = "policy"


class RegistryError(Exception):
    """Base exception for all registry errors."""

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary format."""
        result: Dict[str, Any] = {
            "kind": self.kind.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = dict(self.details)
        return result


class AuthorizationError(RegistryError):
    """Raised when the caller lacks the admin role or transfer/approval rights."""
    kind = ErrorKind.AUTHORIZATION


class ValidationError(RegistryError):
    """Raised for zero-address arguments, out-of-range ids and self approval."""
    kind = ErrorKind.VALIDATION


class StateConflictError(RegistryError):
    """Raised when a token already exists or does not exist."""
    kind = ErrorKind.STATE_CONFLICT


class CapacityError(RegistryError):
    """Raised when minting would exceed the maximum supply."""
    kind = ErrorKind.CAPACITY


class PolicyError(RegistryError):
    """Raised when minting while the collection is paused."""
    kind = ErrorKind.POLICY


def token_not_found(token_id: Any) -> StateConflictError:
    """Build the error for an operation referencing an unminted token."""
    return StateConflictError("Token does not exist", token_id=token_id)
