"""
NFT Registry - Access and Supply Guards

AccessGuard checks the administrative role. SupplyGuard enforces the maximum
supply cap against the ledger's counters and owns the mint pause flag.
"""

import logging

from .exceptions import AuthorizationError, CapacityError, PolicyError
from .ledger import OwnershipLedger
from .schema import Account, CollectionConfig


class AccessGuard:
    """Admin role check against the single configured identity."""

    def __init__(self, admin: Account):
        self.admin = admin

    def is_admin(self, caller: Account) -> bool:
        return caller == self.admin

    def require_admin(self, caller: Account, operation: str) -> None:
        """Raise AuthorizationError unless caller is the admin."""
        if not self.is_admin(caller):
            raise AuthorizationError(
                "Only owner can call this function",
                caller=caller,
                operation=operation
            )


class SupplyGuard:
    """
    Supply cap and pause enforcement for mint operations.

    The current supply is always read from the ledger so the guard never
    holds a stale copy of it.
    """

    def __init__(self, config: CollectionConfig, ledger: OwnershipLedger):
        self.config = config
        self.ledger = ledger
        self.logger = logging.getLogger(__name__)

    @property
    def paused(self) -> bool:
        return self.config.paused

    @property
    def remaining_supply(self) -> int:
        """Number of tokens that can still be minted."""
        return self.config.max_supply - self.ledger.total_supply

    def require_active(self) -> None:
        """Raise PolicyError while minting is paused."""
        if self.config.paused:
            raise PolicyError("Minting is paused")

    def require_capacity(self) -> None:
        """Raise CapacityError once the supply cap is reached."""
        if self.ledger.total_supply >= self.config.max_supply:
            raise CapacityError(
                "Max supply reached",
                total_supply=self.ledger.total_supply,
                max_supply=self.config.max_supply
            )

    def pause(self) -> None:
        if self.config.paused:
            self.logger.debug("Collection already paused")
        self.config.paused = True

    def unpause(self) -> None:
        if not self.config.paused:
            self.logger.debug("Collection already active")
        self.config.paused = False
