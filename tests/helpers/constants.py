"""Shared address and amount constants for tests.

All addresses are lowercase for consistency with normalize_address().

Usage:
    from tests.helpers import WETH, USDC
    # or
    from tests.helpers.constants import WETH, USDC
"""

import math

# =============================================================================
# Base tokens
# =============================================================================

WETH = "0x4200000000000000000000000000000000000006"  # Wrapped Ether (18 decimals)
USDC = "0x833589fcd6edb6e08f4c7c32d4f71b54bda02913"  # USD Coin (6 decimals)
USDT = "0xfde4c96c8593536e31f229ea8f37b2ada2699bb2"  # Tether USD (6 decimals)

# =============================================================================
# Uniswap deployments on Base
# =============================================================================

V2_ROUTER = "0x4752ba5dbc23f44d87826276bf6fd6b1c372ad24"
V2_FACTORY = "0x8909dc15e40173ff4699343b6eb8132c65e18ec6"
V2_USDC_PAIR = "0x88a43bbdf9d098eec7bceda4e2494615dfd9bb9c"

V3_ROUTER = "0x2626664c2603336e57b271c5c0b26f421741e481"
V3_FACTORY = "0x33128a8fc17869897dce68ed026d694621f6fdfd"
V3_USDC_POOL_3000 = "0x6c561b446416e1a00e8e93e221854d6ea4171372"
V3_USDC_POOL_500 = "0xd0b53d9277642d899df5c87a3966a349a798f224"

# A second, unrelated V2 deployment for multi-venue tests
ALT_V2_ROUTER = "0x00000000000000000000000000000000000a2a2a"
ALT_V2_FACTORY = "0x00000000000000000000000000000000000fa2fa"
ALT_V2_USDC_PAIR = "0x00000000000000000000000000000000000b2b2b"

# =============================================================================
# Actors
# =============================================================================

OWNER = "0x0000000000000000000000000000000000000a11"
PARTNER = "0x0000000000000000000000000000000000000b22"
SYSTEM_FEE_RECEIVER = "0x0000000000000000000000000000000000000c33"
PARTNER_FEE_RECEIVER = "0x0000000000000000000000000000000000000d44"
USER = "0x0000000000000000000000000000000000000e55"
STRANGER = "0x0000000000000000000000000000000000000f66"
NETWORK = "0xdec0000000000000000000000000000000000001"

ZERO = "0x0000000000000000000000000000000000000000"

# =============================================================================
# Amounts and prices
# =============================================================================

ONE_ETH = 10**18
ONE_USDC = 10**6

# sqrt(2500 USDC per WETH) in Q64.96, with WETH as token0 (raw units)
SQRT_PRICE_2500 = math.isqrt(2500 * ONE_USDC * 2**192 // ONE_ETH)
# ~10,000 WETH / 25M USDC of virtual reserves at that price
V3_LIQUIDITY = 5 * 10**17
