"""Tests for PoolResolver."""

from aggregator.amm.base import VenueVersion
from tests.helpers import (
    STRANGER,
    USDC,
    USDT,
    V2_ROUTER,
    V2_USDC_PAIR,
    V3_FACTORY,
    V3_ROUTER,
    V3_USDC_POOL_3000,
    WETH,
    ZERO,
)


class TestResolveV2:
    def test_known_pair_either_order(self, dual_network):
        resolver = dual_network.resolver
        assert resolver.resolve_v2_pool(V2_ROUTER, WETH, USDC) == V2_USDC_PAIR
        assert resolver.resolve_v2_pool(V2_ROUTER, USDC, WETH) == V2_USDC_PAIR

    def test_missing_pair(self, dual_network):
        assert dual_network.resolver.resolve_v2_pool(V2_ROUTER, WETH, USDT) == ZERO

    def test_unknown_router(self, dual_network):
        assert dual_network.resolver.resolve_v2_pool(STRANGER, WETH, USDC) == ZERO

    def test_v3_router_is_not_a_v2_router(self, dual_network):
        assert dual_network.resolver.resolve_v2_pool(V3_ROUTER, WETH, USDC) == ZERO


class TestResolveV3:
    def test_by_factory(self, v3_network):
        resolver = v3_network.resolver
        assert resolver.resolve_v3_pool(V3_FACTORY, WETH, USDC, 3000) == V3_USDC_POOL_3000
        assert resolver.resolve_v3_pool(V3_FACTORY, USDC, WETH, 3000) == V3_USDC_POOL_3000

    def test_other_fee_tier_missing(self, v3_network):
        assert v3_network.resolver.resolve_v3_pool(V3_FACTORY, WETH, USDC, 500) == ZERO

    def test_unknown_factory(self, v3_network):
        assert v3_network.resolver.resolve_v3_pool(STRANGER, WETH, USDC, 3000) == ZERO

    def test_by_router(self, v3_network):
        resolver = v3_network.resolver
        assert resolver.resolve_v3_pool_for_router(V3_ROUTER, WETH, USDC, 3000) == V3_USDC_POOL_3000
        assert resolver.resolve_v3_pool_for_router(STRANGER, WETH, USDC, 3000) == ZERO


class TestDescribe:
    def test_describe(self, dual_network):
        assert dual_network.resolver.describe(V2_USDC_PAIR).version == VenueVersion.V2
        assert dual_network.resolver.describe(V3_USDC_POOL_3000).version == VenueVersion.V3
        assert dual_network.resolver.describe(STRANGER) is None
