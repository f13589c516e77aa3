"""
NFT Registry - Ownership Ledger

This module provides the ownership ledger: token existence, the owner of every
minted token, materialized per-account balances and the total supply counter.
All ownership mutations flow through it, and every mutation validates its full
set of preconditions before touching any field.
"""

import logging
from typing import Dict, Iterator, List, Tuple

from .exceptions import StateConflictError, ValidationError, token_not_found
from .schema import Account, is_token_id, require_account


class OwnershipLedger:
    """Token ownership and balance bookkeeping."""

    def __init__(self, max_supply: int):
        self.max_supply = max_supply
        self.logger = logging.getLogger(__name__)
        self._owners: Dict[int, Account] = {}
        self._balances: Dict[Account, int] = {}
        self._total_supply = 0

    @property
    def total_supply(self) -> int:
        """Number of tokens minted so far."""
        return self._total_supply

    def exists(self, token_id: int) -> bool:
        """Check if a token has been minted."""
        return is_token_id(token_id) and token_id in self._owners

    def require_exists(self, token_id: int) -> Account:
        """Return the owner of a token, raising if it was never minted."""
        if not self.exists(token_id):
            raise token_not_found(token_id)
        return self._owners[token_id]

    def owner_of(self, token_id: int) -> Account:
        """Get the current owner of a token."""
        return self.require_exists(token_id)

    def balance_of(self, account: Account) -> int:
        """Get the number of tokens owned by an account."""
        require_account(account)
        return self._balances.get(account, 0)

    def check_token_id(self, token_id: int) -> None:
        """Validate a token ID lies within [1, max_supply]."""
        if not is_token_id(token_id) or not 1 <= token_id <= self.max_supply:
            raise ValidationError(
                "Token ID out of range",
                token_id=token_id,
                max_supply=self.max_supply
            )

    def mint(self, to: Account, token_id: int) -> None:
        """
        Record a new token owned by `to`.

        Args:
            to: Receiving account
            token_id: ID of the token to create

        Raises:
            ValidationError: zero recipient or ID out of range
            StateConflictError: token already exists
        """
        require_account(to, "Cannot mint to zero address")
        self.check_token_id(token_id)
        if self.exists(token_id):
            raise StateConflictError("Token already exists", token_id=token_id)

        self._owners[token_id] = to
        self._balances[to] = self._balances.get(to, 0) + 1
        self._total_supply += 1

        self.logger.debug(f"Ledger minted token {token_id} to {to}")

    def check_transfer(self, from_account: Account, to: Account, token_id: int) -> Account:
        """
        Validate a transfer without applying it.

        Returns:
            The current owner of the token

        Raises:
            StateConflictError: token does not exist
            ValidationError: zero address or `from_account` is not the owner
        """
        owner = self.require_exists(token_id)
        require_account(from_account)
        require_account(to, "Cannot transfer to zero address")
        if owner != from_account:
            raise ValidationError(
                "Transfer from incorrect owner",
                token_id=token_id,
                from_account=from_account
            )
        return owner

    def transfer(self, from_account: Account, to: Account, token_id: int) -> None:
        """Move a token between accounts after check_transfer passes."""
        self.check_transfer(from_account, to, token_id)

        self._balances[from_account] -= 1
        self._balances[to] = self._balances.get(to, 0) + 1
        self._owners[token_id] = to

        self.logger.debug(f"Ledger moved token {token_id}: {from_account} -> {to}")

    def tokens(self) -> Iterator[Tuple[int, Account]]:
        """Iterate (token_id, owner) pairs in ascending token order."""
        for token_id in sorted(self._owners):
            yield token_id, self._owners[token_id]

    def tokens_of(self, account: Account) -> List[int]:
        """List token IDs owned by an account."""
        return [token_id for token_id, owner in self.tokens() if owner == account]

    def balances(self) -> Dict[Account, int]:
        """Copy of the non-zero balances."""
        return {
            account: count
            for account, count in sorted(self._balances.items())
            if count > 0
        }
