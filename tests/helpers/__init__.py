"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Token, venue and actor addresses plus common amounts
- factories: Network and venue factory functions
"""

from tests.helpers.constants import (
    ONE_ETH,
    ONE_USDC,
    OWNER,
    PARTNER,
    PARTNER_FEE_RECEIVER,
    SQRT_PRICE_2500,
    STRANGER,
    SYSTEM_FEE_RECEIVER,
    USDC,
    USDT,
    USER,
    V2_ROUTER,
    V2_USDC_PAIR,
    V3_FACTORY,
    V3_LIQUIDITY,
    V3_ROUTER,
    V3_USDC_POOL_3000,
    WETH,
    ZERO,
)
from tests.helpers.factories import (
    make_network,
    make_v2_venue,
    make_v3_venue,
    make_weth_usdc_network,
    seed_v2_pair,
    seed_v3_pool,
)

__all__ = [
    # Constants
    "WETH",
    "USDC",
    "USDT",
    "ZERO",
    "OWNER",
    "PARTNER",
    "SYSTEM_FEE_RECEIVER",
    "PARTNER_FEE_RECEIVER",
    "USER",
    "STRANGER",
    "V2_ROUTER",
    "V2_USDC_PAIR",
    "V3_ROUTER",
    "V3_FACTORY",
    "V3_USDC_POOL_3000",
    "ONE_ETH",
    "ONE_USDC",
    "SQRT_PRICE_2500",
    "V3_LIQUIDITY",
    # Factories
    "make_network",
    "make_v2_venue",
    "make_v3_venue",
    "seed_v2_pair",
    "seed_v3_pool",
    "make_weth_usdc_network",
]
