"""
NFT Registry - Registry Manager

This module provides NFTRegistry, the composition root exposing the public
operation set. Each operation validates through the access and supply guards,
the approval index and the ownership ledger before any state changes, applies
its mutation in one step and only then emits its notification.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError as SchemaValidationError

from .approvals import ApprovalIndex
from .events import EventCallback, EventDispatcher
from .exceptions import AuthorizationError, RegistryError, ValidationError
from .guards import AccessGuard, SupplyGuard
from .ledger import OwnershipLedger
from .schema import (
    Account, ZERO_ACCOUNT, ApprovalEvent, ApprovalForAllEvent,
    CollectionConfig, OperatorEntry, RegistrySnapshot, TokenRecord,
    TransferEvent, require_account
)
from .uri import URIResolver


class NFTRegistry:
    """
    Non-fungible token registry for a single collection.

    Every mutating operation takes the calling account as its first argument.
    Failed operations raise a RegistryError subclass and leave the state and
    the notification stream untouched.
    """

    def __init__(
        self,
        name: str,
        symbol: str,
        max_supply: int,
        base_uri: str,
        creator: Account,
        uri_resolver: Optional[URIResolver] = None
    ):
        """
        Initialize a registry with an empty ledger.

        Args:
            name: Collection name
            symbol: Collection symbol
            max_supply: Maximum number of tokens, must be positive
            base_uri: Base URI for token metadata
            creator: Account creating the registry; becomes the admin

        Raises:
            ValidationError: invalid collection parameters
        """
        self.logger = logging.getLogger(__name__)

        try:
            self.config = CollectionConfig(
                name=name,
                symbol=symbol,
                max_supply=max_supply,
                base_uri=base_uri,
                admin=creator
            )
        except SchemaValidationError as e:
            raise ValidationError(
                "Invalid collection configuration",
                errors=[err["msg"] for err in e.errors()]
            ) from e

        self.ledger = OwnershipLedger(self.config.max_supply)
        self.approvals = ApprovalIndex(self.ledger)
        self.access = AccessGuard(self.config.admin)
        self.supply = SupplyGuard(self.config, self.ledger)
        self.uri_resolver = uri_resolver or URIResolver()
        self.events = EventDispatcher()

        self.logger.info(
            f"Created registry {self.config.name} ({self.config.symbol}), "
            f"max supply {self.config.max_supply}, admin {self.config.admin}"
        )

    @classmethod
    def from_config(cls, section: Dict[str, Any], creator: Optional[Account] = None) -> "NFTRegistry":
        """
        Create a registry from a `collection` configuration section.

        Args:
            section: Mapping with name, symbol, max_supply, base_uri and admin
            creator: Overrides the admin given in the section
        """
        return cls(
            name=section.get("name", ""),
            symbol=section.get("symbol", ""),
            max_supply=section.get("max_supply", 0),
            base_uri=section.get("base_uri", ""),
            creator=creator if creator is not None else section.get("admin", ""),
        )

    # Collection properties

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def symbol(self) -> str:
        return self.config.symbol

    @property
    def max_supply(self) -> int:
        return self.config.max_supply

    @property
    def total_supply(self) -> int:
        return self.ledger.total_supply

    @property
    def base_uri(self) -> str:
        return self.config.base_uri

    @property
    def owner(self) -> Account:
        """Administrative account (the collection owner)."""
        return self.config.admin

    @property
    def paused(self) -> bool:
        return self.config.paused

    # Queries

    def balance_of(self, account: Account) -> int:
        return self.ledger.balance_of(account)

    def owner_of(self, token_id: int) -> Account:
        return self.ledger.owner_of(token_id)

    def get_approved(self, token_id: int) -> Account:
        return self.approvals.get_approved(token_id)

    def is_approved_for_all(self, owner: Account, operator: Account) -> bool:
        return self.approvals.is_approved_for_all(owner, operator)

    def token_uri(self, token_id: int) -> str:
        """Metadata locator of a minted token."""
        self.ledger.require_exists(token_id)
        return self.uri_resolver.resolve(self.config.base_uri, token_id)

    def tokens_of(self, account: Account) -> List[int]:
        """Token IDs currently owned by an account."""
        return self.ledger.tokens_of(require_account(account))

    def snapshot(self) -> RegistrySnapshot:
        """Capture the complete registry state."""
        approvals = self.approvals.token_approvals()
        return RegistrySnapshot(
            config=self.config.model_copy(),
            total_supply=self.ledger.total_supply,
            tokens=[
                TokenRecord(
                    token_id=token_id,
                    owner=owner,
                    approved=approvals.get(token_id, ZERO_ACCOUNT)
                )
                for token_id, owner in self.ledger.tokens()
            ],
            balances=self.ledger.balances(),
            operators=[
                OperatorEntry(owner=owner, operator=operator)
                for owner, operator in self.approvals.operator_pairs()
            ],
        )

    # Notifications

    def subscribe(self, callback: EventCallback) -> Callable[[], None]:
        """Register a notification subscriber; returns an unsubscribe function."""
        return self.events.subscribe(callback)

    # Mutations

    def mint(self, caller: Account, to: Account, token_id: int) -> None:
        """
        Mint a new token to `to`.

        Raises:
            AuthorizationError: caller is not the admin
            PolicyError: minting is paused
            ValidationError: zero recipient or token ID out of range
            CapacityError: maximum supply reached
            StateConflictError: token already exists
        """
        try:
            self.access.require_admin(caller, "mint")
            self.supply.require_active()
            require_account(to, "Cannot mint to zero address")
            self.supply.require_capacity()
            self.ledger.mint(to, token_id)
        except RegistryError as e:
            self._log_rejection("mint", caller, e)
            raise

        self.logger.info(f"Minted token {token_id} to {to}")
        self.events.emit(TransferEvent(
            sequence=self.events.next_sequence(),
            from_account=ZERO_ACCOUNT,
            to_account=to,
            token_id=token_id
        ))

    def safe_mint(self, caller: Account, to: Account, token_id: int) -> None:
        """Alias of mint kept under the collection's public interface name."""
        self.mint(caller, to, token_id)

    def transfer_from(self, caller: Account, from_account: Account, to: Account, token_id: int) -> None:
        """
        Transfer a token from `from_account` to `to`.

        The caller must be the owner, the token's approved spender or an
        operator of the owner. Any single-token approval is cleared.
        """
        try:
            owner = self.ledger.check_transfer(from_account, to, token_id)
            if not self.approvals.is_authorized(caller, owner, token_id):
                raise AuthorizationError(
                    "Not authorized to transfer",
                    caller=caller,
                    token_id=token_id
                )
            self.ledger.transfer(from_account, to, token_id)
        except RegistryError as e:
            self._log_rejection("transfer_from", caller, e)
            raise

        self.approvals.clear(token_id)

        self.logger.info(f"Transferred token {token_id}: {from_account} -> {to}")
        self.events.emit(TransferEvent(
            sequence=self.events.next_sequence(),
            from_account=from_account,
            to_account=to,
            token_id=token_id
        ))

    def safe_transfer_from(
        self,
        caller: Account,
        from_account: Account,
        to: Account,
        token_id: int,
        data: bytes = b""
    ) -> None:
        """
        Transfer a token, accepting an auxiliary payload.

        The payload is neither inspected nor forwarded and no recipient
        acceptance check takes place, so this behaves exactly like
        transfer_from.
        """
        if data:
            self.logger.debug(f"Ignoring {len(data)} bytes of transfer data for token {token_id}")
        self.transfer_from(caller, from_account, to, token_id)

    def approve(self, caller: Account, to: Account, token_id: int) -> None:
        """Approve `to` to transfer `token_id`; ZERO_ACCOUNT clears the approval."""
        try:
            owner = self.approvals.approve(caller, to, token_id)
        except RegistryError as e:
            self._log_rejection("approve", caller, e)
            raise

        self.logger.info(f"Approved {to} for token {token_id}")
        self.events.emit(ApprovalEvent(
            sequence=self.events.next_sequence(),
            owner=owner,
            approved=to,
            token_id=token_id
        ))

    def set_approval_for_all(self, caller: Account, operator: Account, approved: bool) -> None:
        """Grant or revoke `operator` rights over all of caller's tokens."""
        try:
            self.approvals.set_approval_for_all(caller, operator, bool(approved))
        except RegistryError as e:
            self._log_rejection("set_approval_for_all", caller, e)
            raise

        self.logger.info(f"Operator {operator} for {caller} set to {bool(approved)}")
        self.events.emit(ApprovalForAllEvent(
            sequence=self.events.next_sequence(),
            owner=caller,
            operator=operator,
            approved=bool(approved)
        ))

    def pause(self, caller: Account) -> None:
        """Pause minting. Admin only."""
        self._require_admin(caller, "pause")
        self.supply.pause()
        self.logger.info("Minting paused")

    def unpause(self, caller: Account) -> None:
        """Resume minting. Admin only."""
        self._require_admin(caller, "unpause")
        self.supply.unpause()
        self.logger.info("Minting unpaused")

    def set_base_uri(self, caller: Account, new_base_uri: str) -> None:
        """Replace the base metadata URI. Admin only."""
        self._require_admin(caller, "set_base_uri")
        if not isinstance(new_base_uri, str):
            raise ValidationError("Base URI must be a string", base_uri=new_base_uri)
        self.config.base_uri = new_base_uri
        self.logger.info(f"Base URI set to {new_base_uri}")

    def _require_admin(self, caller: Account, operation: str) -> None:
        try:
            self.access.require_admin(caller, operation)
        except RegistryError as e:
            self._log_rejection(operation, caller, e)
            raise

    def _log_rejection(self, operation: str, caller: Account, error: RegistryError) -> None:
        self.logger.debug(f"Rejected {operation} from {caller}: [{error.kind.value}] {error.message}")
