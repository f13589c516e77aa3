"""
Pytest configuration and fixtures for NFT registry tests.
"""

import pytest

from registry.events import EventRecorder
from registry.manager import NFTRegistry


@pytest.fixture
def registry():
    """Create a registry with max supply 100 administered by A."""
    return NFTRegistry(
        name="TestNFT",
        symbol="TNFT",
        max_supply=100,
        base_uri="https://example.com/metadata",
        creator="A"
    )


@pytest.fixture
def small_registry():
    """Create a registry with max supply 2."""
    return NFTRegistry(
        name="Test",
        symbol="TST",
        max_supply=2,
        base_uri="https://test.com",
        creator="A"
    )


@pytest.fixture
def recorder(registry):
    """Record every notification emitted by the registry fixture."""
    recorder = EventRecorder()
    registry.subscribe(recorder)
    return recorder


@pytest.fixture
def minted_registry(registry, recorder):
    """Registry where token 1 is owned by B."""
    registry.mint("A", "B", 1)
    recorder.clear()
    return registry


def assert_ledger_invariants(registry):
    """Check supply and balance invariants against the full token set."""
    snapshot = registry.snapshot()
    owners = [token.owner for token in snapshot.tokens]

    assert registry.total_supply == len(snapshot.tokens)
    assert registry.total_supply <= registry.max_supply

    for account in set(owners):
        assert registry.balance_of(account) == owners.count(account)
    assert sum(snapshot.balances.values()) == registry.total_supply


@pytest.fixture
def check_invariants():
    """Provide the ledger invariant checker."""
    return assert_ledger_invariants


# Test markers for different test categories
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "concurrency: mark test as a concurrency test"
    )


def pytest_collection_modifyitems(config, items):
    """Add markers based on test file paths and names."""
    for item in items:
        if "unit" in str(item.path):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.path):
            item.add_marker(pytest.mark.integration)

        if "concurrent" in item.name or "thread" in item.name:
            item.add_marker(pytest.mark.concurrency)
