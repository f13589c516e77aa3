"""
Integration tests running complete registry scenarios.
"""

import random

import pytest

from registry.exceptions import (
    AuthorizationError,
    CapacityError,
    PolicyError,
    RegistryError,
    StateConflictError,
    ValidationError
)
from registry.events import EventRecorder
from registry.manager import NFTRegistry
from registry.schema import ZERO_ACCOUNT


ACCOUNTS = ["A", "B", "C", "D", ZERO_ACCOUNT]


class TestScenarios:
    """Admin A, accounts B, C and D."""

    def test_mint(self, registry, recorder):
        registry.mint("A", "B", 1)

        assert registry.owner_of(1) == "B"
        assert registry.balance_of("B") == 1
        assert registry.total_supply == 1
        event = recorder.last()
        assert (event.event, event.from_account, event.to_account, event.token_id) == \
            ("Transfer", ZERO_ACCOUNT, "B", 1)

    def test_mint_by_non_admin(self, minted_registry, recorder):
        """Test a non-admin mint leaves the state untouched."""
        before = minted_registry.snapshot()

        with pytest.raises(AuthorizationError):
            minted_registry.mint("B", "B", 1)

        assert minted_registry.snapshot() == before
        assert len(recorder) == 0

    def test_mint_conflicts(self, minted_registry, small_registry):
        """Test duplicate, out-of-range and over-capacity mints."""
        with pytest.raises(StateConflictError, match="already exists"):
            minted_registry.mint("A", "C", 1)
        with pytest.raises(ValidationError, match="out of range"):
            minted_registry.mint("A", "B", 101)

        small_registry.mint("A", "B", 1)
        small_registry.mint("A", "B", 2)
        with pytest.raises(CapacityError):
            small_registry.mint("A", "B", 3)

    def test_owner_transfer(self, minted_registry):
        """Test the owner moves a token and an unrelated account cannot."""
        minted_registry.transfer_from("B", "B", "C", 1)

        assert minted_registry.owner_of(1) == "C"
        assert minted_registry.balance_of("B") == 0
        assert minted_registry.balance_of("C") == 1

        with pytest.raises(AuthorizationError):
            minted_registry.transfer_from("D", "C", "B", 1)

    def test_unrelated_caller_cannot_transfer(self, minted_registry):
        with pytest.raises(AuthorizationError, match="Not authorized"):
            minted_registry.transfer_from("D", "B", "C", 1)

    def test_approved_spender_transfer(self, minted_registry, recorder):
        """Test the approved spender transfers and the approval is cleared."""
        minted_registry.approve("B", "C", 1)
        minted_registry.transfer_from("C", "B", "D", 1)

        assert minted_registry.owner_of(1) == "D"
        assert minted_registry.get_approved(1) == ZERO_ACCOUNT
        assert [e.event for e in recorder.events] == ["Approval", "Transfer"]

    def test_pause_blocks_mint(self, minted_registry):
        """Test pausing blocks minting until unpaused."""
        minted_registry.pause("A")
        with pytest.raises(PolicyError):
            minted_registry.mint("A", "B", 2)

        minted_registry.unpause("A")
        minted_registry.mint("A", "B", 2)

        assert minted_registry.owner_of(2) == "B"

    def test_pause_does_not_block_transfers(self, minted_registry):
        minted_registry.pause("A")
        minted_registry.transfer_from("B", "B", "C", 1)
        minted_registry.approve("C", "D", 1)

        assert minted_registry.owner_of(1) == "C"


class TestProperties:
    """Invariants over reachable states."""

    def test_token_uri_round_trip(self, registry):
        for token_id in (1, 9, 100):
            registry.mint("A", "B", token_id)
            assert registry.token_uri(token_id) == f"{registry.base_uri}/{token_id}.json"

    def test_transfer_clears_any_approval(self, minted_registry):
        """Test every successful transfer clears the single-token approval."""
        minted_registry.set_approval_for_all("B", "D", True)
        minted_registry.approve("D", "C", 1)

        minted_registry.transfer_from("D", "B", "D", 1)

        assert minted_registry.get_approved(1) == ZERO_ACCOUNT
        assert minted_registry.is_approved_for_all("B", "D")

    def test_idempotent_operations(self, minted_registry):
        """Test pause and operator approval repeat without effect."""
        minted_registry.pause("A")
        minted_registry.pause("A")
        assert minted_registry.paused

        minted_registry.set_approval_for_all("B", "C", True)
        once = minted_registry.snapshot()
        minted_registry.set_approval_for_all("B", "C", True)

        assert minted_registry.snapshot() == once

    @pytest.mark.parametrize("seed", [1, 7, 42, 2024])
    def test_random_operations_keep_invariants(self, seed, check_invariants):
        """Test random call sequences never break the ledger invariants."""
        rng = random.Random(seed)
        registry = NFTRegistry("Fuzz", "FZ", 20, "ipfs://cid", "A")
        recorder = EventRecorder()
        registry.subscribe(recorder)

        for _ in range(300):
            caller = rng.choice(ACCOUNTS)
            token_id = rng.randint(0, 22)
            op = rng.choice(["mint", "transfer_from", "approve", "set_approval_for_all", "pause", "unpause"])
            if op == "mint":
                args = (caller, rng.choice(ACCOUNTS), token_id)
            elif op == "transfer_from":
                args = (caller, rng.choice(ACCOUNTS), rng.choice(ACCOUNTS), token_id)
            elif op == "approve":
                args = (caller, rng.choice(ACCOUNTS), token_id)
            elif op == "set_approval_for_all":
                args = (caller, rng.choice(ACCOUNTS), rng.random() < 0.5)
            else:
                args = (caller,)

            before = registry.snapshot()
            emitted = len(recorder)
            try:
                getattr(registry, op)(*args)
            except RegistryError:
                assert registry.snapshot() == before
                assert len(recorder) == emitted
            else:
                if op in ("pause", "unpause"):
                    assert len(recorder) == emitted
                else:
                    assert len(recorder) == emitted + 1

            check_invariants(registry)

        assert [e.sequence for e in recorder.events] == list(range(1, len(recorder) + 1))

    def test_replay_is_deterministic(self):
        """Test the same call order reproduces state and notifications."""
        def run():
            registry = NFTRegistry("Det", "DT", 10, "u", "A")
            recorder = EventRecorder()
            registry.subscribe(recorder)
            rng = random.Random(99)
            for _ in range(100):
                try:
                    registry.mint("A", rng.choice("BCD"), rng.randint(1, 10))
                    registry.transfer_from(rng.choice("BCD"), rng.choice("BCD"), rng.choice("BCD"), rng.randint(1, 10))
                except RegistryError:
                    pass
            return registry.snapshot(), recorder.to_list()

        assert run() == run()
