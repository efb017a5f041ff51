"""Tests for API request size limits and the health endpoint."""

from fastapi.testclient import TestClient

from aggregator.api.endpoints import get_network
from aggregator.api.main import app
from tests.helpers import ONE_ETH, USDC, WETH, make_network


class TestRequestSizeLimits:
    """Request body size limit."""

    def test_oversized_request_returns_413(self):
        """Request with Content-Length exceeding limit returns 413."""
        client = TestClient(app)
        response = client.post(
            "/v1/quote/best-rate",
            json={"tokenIn": WETH, "tokenOut": USDC, "amountIn": str(ONE_ETH)},
            headers={"Content-Length": str(20 * 1024 * 1024)},  # 20 MB
        )
        assert response.status_code == 413
        assert response.json()["detail"] == "Request too large"

    def test_normal_request_accepted(self):
        """Normal-sized request is accepted."""
        app.dependency_overrides[get_network] = make_network
        try:
            client = TestClient(app)
            response = client.post(
                "/v1/quote/best-rate",
                json={"tokenIn": WETH, "tokenOut": USDC, "amountIn": str(ONE_ETH)},
            )
            assert response.status_code == 200
        finally:
            app.dependency_overrides.clear()


class TestHealthEndpoint:
    def test_health_returns_ok(self):
        client = TestClient(app)
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert isinstance(data["rpc_available"], bool)
