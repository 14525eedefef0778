"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from notegraph.models import KnowledgeGraph
from notegraph.vault.graph import build_graph
from notegraph.vault.loader import Vault, load_vault


class FakeClock:
    """Manually advanced stand-in for time.monotonic."""

    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fixture_vault_path() -> Path:
    """Path to the minimal fixture vault."""
    return Path(__file__).parent / "fixtures" / "minimal_vault"


@pytest.fixture
def fixture_vault(fixture_vault_path: Path) -> Vault:
    """Load the minimal fixture vault."""
    return load_vault(fixture_vault_path)


@pytest.fixture
def fixture_graph(fixture_vault: Vault) -> KnowledgeGraph:
    """Build the reference graph from the fixture vault."""
    return build_graph(fixture_vault.notes)
