"""Integration tests for the aggregator API against a snapshot-built network."""

from collections.abc import Iterator

import pytest
from eth_abi import decode
from fastapi.testclient import TestClient

from aggregator.api.endpoints import build_network, get_api_keys, get_network
from aggregator.api.main import app
from aggregator.chain.snapshot import load_snapshot
from aggregator.config import Settings
from aggregator.network import DecentralizedExchangeNetwork
from tests.helpers import (
    ONE_ETH,
    STRANGER,
    USDC,
    USDT,
    USER,
    V2_ROUTER,
    V2_USDC_PAIR,
    V3_ROUTER,
    V3_USDC_POOL_3000,
    WETH,
    ZERO,
)
from tests.helpers.constants import NETWORK


@pytest.fixture
def network(base_snapshot) -> DecentralizedExchangeNetwork:
    return load_snapshot(base_snapshot)


@pytest.fixture
def client(network) -> Iterator[TestClient]:
    """Create a test client serving the snapshot network, authenticated as USER."""
    app.dependency_overrides[get_network] = lambda: network
    app.dependency_overrides[get_api_keys] = lambda: {"user-key": USER}
    yield TestClient(app, headers={"X-API-Key": "user-key"})
    app.dependency_overrides.clear()


class TestReadEndpoints:
    def test_routers(self, client):
        response = client.get("/v1/routers")
        assert response.status_code == 200
        assert response.json() == {"v2Routers": [V2_ROUTER], "v3Routers": [V3_ROUTER]}

    def test_pool_supported(self, client):
        response = client.get(f"/v1/pools/{V3_USDC_POOL_3000.upper().replace('0X', '0x')}/supported")
        assert response.json() == {"pool": V3_USDC_POOL_3000, "supported": True}

        response = client.get(f"/v1/pools/{STRANGER}/supported")
        assert response.json()["supported"] is False


class TestQuoteEndpoints:
    def test_best_rate(self, client, network):
        response = client.post(
            "/v1/quote/best-rate",
            json={"tokenIn": WETH, "tokenOut": USDC, "amountIn": str(ONE_ETH)},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["venue"] == V3_ROUTER
        assert data["version"] == 3
        assert data["pool"] == V3_USDC_POOL_3000
        assert int(data["amountOut"]) == network.estimate_amount_out(
            V3_USDC_POOL_3000, WETH, ONE_ETH
        )

    def test_best_rate_fee_tier_hint(self, client):
        response = client.post(
            "/v1/quote/best-rate",
            json={"tokenIn": WETH, "tokenOut": USDC, "amountIn": str(ONE_ETH), "feeTierHint": 500},
        )
        data = response.json()
        assert data["version"] == 2
        assert data["pool"] == V2_USDC_PAIR

    def test_best_rate_no_liquidity(self, client):
        """An unserved pair is a normal answer, not an error."""
        response = client.post(
            "/v1/quote/best-rate",
            json={"tokenIn": WETH, "tokenOut": USDT, "amountIn": str(ONE_ETH)},
        )
        assert response.status_code == 200
        assert response.json() == {"venue": ZERO, "version": 0, "amountOut": "0", "pool": ZERO}

    def test_estimate(self, client):
        response = client.post(
            "/v1/quote/estimate",
            json={"pool": V2_USDC_PAIR, "tokenIn": WETH, "amountIn": str(ONE_ETH)},
        )
        assert response.status_code == 200
        assert 2_490 * 10**6 < int(response.json()["amountOut"]) < 2_491 * 10**6

    def test_estimate_unknown_pool(self, client):
        response = client.post(
            "/v1/quote/estimate",
            json={"pool": STRANGER, "tokenIn": WETH, "amountIn": str(ONE_ETH)},
        )
        assert response.json() == {"amountOut": "0"}


class TestSwapEndpoint:
    def test_swap(self, client, network):
        response = client.post(
            "/v1/swap",
            json={
                "caller": USER,
                "pool": V3_USDC_POOL_3000,
                "tokenOut": USDC,
                "slippageToleranceBps": 100,
                "amountIn": str(ONE_ETH),
            },
        )
        assert response.status_code == 200
        data = response.json()

        assert data["version"] == 3
        assert data["netAmountIn"] == "992500000000000000"
        assert data["systemFee"] == "2500000000000000"
        assert data["partnerFee"] == "5000000000000000"
        assert int(data["amountOut"]) >= int(data["minAmountOut"])
        assert network.ledger.balance_of(USDC, USER) == int(data["amountOut"])

        assert data["interaction"]["target"] == V3_ROUTER
        params = decode(
            ["(address,address,uint24,address,uint256,uint256,uint160)"],
            bytes.fromhex(data["interaction"]["callData"][10:]),
        )[0]
        assert params[0].lower() == WETH
        assert params[1].lower() == USDC
        assert params[2] == 3000
        assert params[3].lower() == NETWORK
        assert params[4] == int(data["netAmountIn"])
        assert params[5] == int(data["minAmountOut"])


class TestBuildNetwork:
    def test_empty_without_snapshot(self):
        network = build_network(Settings())
        assert network.get_supported_v2_routers() == []

    def test_from_snapshot_path(self, fixtures_dir):
        settings = Settings(snapshot_path=str(fixtures_dir / "snapshots" / "base_weth_usdc.json"))
        assert build_network(settings).is_pool_supported(V3_USDC_POOL_3000)

    def test_settings_whitelist_pools(self, fixtures_dir):
        settings = Settings(
            snapshot_path=str(fixtures_dir / "snapshots" / "base_weth_usdc.json"),
            supported_pools=(V3_USDC_POOL_3000, STRANGER),
        )
        network = build_network(settings)
        assert network.is_pool_supported(STRANGER)
        assert network.is_pool_supported(V3_USDC_POOL_3000)

    def test_rpc_routers_need_endpoint(self):
        with pytest.raises(ValueError, match="AGGREGATOR_RPC_URL"):
            build_network(Settings(rpc_v3_routers=(V3_ROUTER,)))
