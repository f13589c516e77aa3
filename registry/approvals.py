"""
NFT Registry - Approval Index

Stores the single approved spender of each token and the blanket operator
approvals granted by each owner. The ownership ledger is the source of truth
for who the real owner of a token is.
"""

import logging
from typing import Dict, List, Set, Tuple

from .exceptions import AuthorizationError, ValidationError
from .ledger import OwnershipLedger
from .schema import Account, ZERO_ACCOUNT, is_zero_account, require_account


class ApprovalIndex:
    """Per-token and per-owner transfer delegation."""

    def __init__(self, ledger: OwnershipLedger):
        self.ledger = ledger
        self.logger = logging.getLogger(__name__)
        self._token_approvals: Dict[int, Account] = {}
        self._operators: Dict[Account, Set[Account]] = {}

    def approve(self, caller: Account, spender: Account, token_id: int) -> Account:
        """
        Set the approved spender of a token.

        Passing ZERO_ACCOUNT as spender clears the approval.

        Args:
            caller: Account requesting the approval
            spender: Account to approve
            token_id: Token to approve

        Returns:
            The token owner, for the Approval notification
        """
        owner = self.ledger.require_exists(token_id)

        if caller != owner and not self.is_approved_for_all(owner, caller):
            raise AuthorizationError(
                "Approval caller is not owner nor approved for all",
                caller=caller,
                token_id=token_id
            )

        if not is_zero_account(spender):
            require_account(spender, "Invalid spender")
        if spender == owner:
            raise ValidationError("Approval to current owner", token_id=token_id)

        if is_zero_account(spender):
            self._token_approvals.pop(token_id, None)
        else:
            self._token_approvals[token_id] = spender

        self.logger.debug(f"Approval slot of token {token_id} set to {spender}")
        return owner

    def set_approval_for_all(self, caller: Account, operator: Account, approved: bool) -> None:
        """Grant or revoke blanket transfer rights over all of caller's tokens."""
        require_account(caller)
        require_account(operator, "Invalid operator")
        if operator == caller:
            raise ValidationError("Cannot approve self as operator", operator=operator)

        if approved:
            self._operators.setdefault(caller, set()).add(operator)
        else:
            operators = self._operators.get(caller)
            if operators is not None:
                operators.discard(operator)
                if not operators:
                    del self._operators[caller]

        self.logger.debug(f"Operator {operator} of {caller}: {approved}")

    def get_approved(self, token_id: int) -> Account:
        """Get the approved spender of a token, ZERO_ACCOUNT if none."""
        self.ledger.require_exists(token_id)
        return self._token_approvals.get(token_id, ZERO_ACCOUNT)

    def is_approved_for_all(self, owner: Account, operator: Account) -> bool:
        return operator in self._operators.get(owner, ())

    def is_authorized(self, caller: Account, owner: Account, token_id: int) -> bool:
        """Check if caller may transfer `token_id` out of `owner`'s account."""
        if is_zero_account(caller):
            return False

        return (
            caller == owner
            or self._token_approvals.get(token_id) == caller
            or self.is_approved_for_all(owner, caller)
        )

    def clear(self, token_id: int) -> None:
        """Drop the single-token approval, e.g. after a transfer."""
        self._token_approvals.pop(token_id, None)

    def token_approvals(self) -> Dict[int, Account]:
        return dict(sorted(self._token_approvals.items()))

    def operator_pairs(self) -> List[Tuple[Account, Account]]:
        """List granted (owner, operator) pairs in sorted order."""
        return sorted(
            (owner, operator)
            for owner, operators in self._operators.items()
            for operator in operators
        )
