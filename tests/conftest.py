"""Pytest configuration and fixtures."""

import json
from pathlib import Path

import pytest

from aggregator.network import DecentralizedExchangeNetwork
from tests.helpers import make_network, make_weth_usdc_network

FIXTURES_DIR = Path(__file__).parent / "fixtures"
SNAPSHOTS_DIR = FIXTURES_DIR / "snapshots"


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the fixtures directory path."""
    return FIXTURES_DIR


def load_snapshot_fixture(name: str) -> dict:
    """Load a venue snapshot fixture by name (e.g., "base_weth_usdc")."""
    with open(SNAPSHOTS_DIR / f"{name}.json") as f:
        return json.load(f)


@pytest.fixture
def base_snapshot() -> dict:
    """WETH/USDC venues on Base: one V2 pair, one V3 pool, funded user."""
    return load_snapshot_fixture("base_weth_usdc")


@pytest.fixture
def network() -> DecentralizedExchangeNetwork:
    """Empty network owned by OWNER, USER holding 10 ETH."""
    return make_network()


@pytest.fixture
def v3_network() -> DecentralizedExchangeNetwork:
    """Network with the WETH/USDC 0.3% V3 pool registered and whitelisted."""
    return make_weth_usdc_network(v2=False, v3=True)


@pytest.fixture
def dual_network() -> DecentralizedExchangeNetwork:
    """Network with both the V2 pair and the V3 pool registered and whitelisted."""
    return make_weth_usdc_network(v2=True, v3=True)
