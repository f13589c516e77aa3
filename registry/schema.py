"""
NFT Registry - Schema Models

This module defines the Pydantic models for the collection configuration,
token records, ledger notifications and registry snapshots, along with the
account helpers shared by every registry component.
"""

from typing import Any, Dict, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .exceptions import ValidationError


# Reserved "no account" identity
ZERO_ACCOUNT = "0x0000000000000000000000000000000000000000"

Account = str


def is_zero_account(account: Any) -> bool:
    """Check whether an account is the zero identity."""
    return account == ZERO_ACCOUNT


def require_account(account: Any, message: str = "Invalid address") -> Account:
    """Reject the zero identity and non-string accounts."""
    if not isinstance(account, str) or not account or is_zero_account(account):
        raise ValidationError(message, account=account)
    return account


def is_token_id(value: Any) -> bool:
    """Check that a value is usable as a token ID (int, not bool)."""
    return isinstance(value, int) and not isinstance(value, bool)


class CollectionConfig(BaseModel):
    """Collection configuration model."""

    model_config = ConfigDict(validate_assignment=True)

    name: str = Field(..., description="Collection name")
    symbol: str = Field(..., description="Collection symbol")
    max_supply: int = Field(..., gt=0, description="Maximum number of tokens")
    base_uri: str = Field(default="", description="Base metadata URI")
    admin: str = Field(..., min_length=1, description="Administrative account")
    paused: bool = Field(default=False)

    @field_validator('admin')
    @classmethod
    def validate_admin(cls, v):
        """Validate the admin is a real account."""
        if is_zero_account(v):
            raise ValueError('Admin cannot be the zero account')
        return v


class TokenRecord(BaseModel):
    """Single token ownership record."""

    token_id: int = Field(..., gt=0)
    owner: str
    approved: str = Field(default=ZERO_ACCOUNT)


class TransferEvent(BaseModel):
    """Transfer notification, emitted on every mint and transfer."""

    model_config = ConfigDict(frozen=True)

    event: Literal["Transfer"] = "Transfer"
    sequence: int = Field(..., ge=1)
    from_account: str
    to_account: str
    token_id: int


class ApprovalEvent(BaseModel):
    """Approval notification, emitted on every approve."""

    model_config = ConfigDict(frozen=True)

    event: Literal["Approval"] = "Approval"
    sequence: int = Field(..., ge=1)
    owner: str
    approved: str
    token_id: int


class ApprovalForAllEvent(BaseModel):
    """Operator approval notification, emitted on every set_approval_for_all."""

    model_config = ConfigDict(frozen=True)

    event: Literal["ApprovalForAll"] = "ApprovalForAll"
    sequence: int = Field(..., ge=1)
    owner: str
    operator: str
    approved: bool


# Union type for any notification
RegistryEvent = Union[TransferEvent, ApprovalEvent, ApprovalForAllEvent]


class OperatorEntry(BaseModel):
    """Granted operator approval."""

    owner: str
    operator: str


class RegistrySnapshot(BaseModel):
    """Read-only view of the complete registry state."""

    config: CollectionConfig
    total_supply: int = Field(..., ge=0)
    tokens: List[TokenRecord] = Field(default_factory=list)
    balances: Dict[str, int] = Field(default_factory=dict)
    operators: List[OperatorEntry] = Field(default_factory=list)
