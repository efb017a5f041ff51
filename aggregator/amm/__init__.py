"""AMM (Automated Market Maker) implementations."""

from aggregator.amm.base import (
    PoolDescriptor,
    SwapResult,
    V2Venue,
    V3Venue,
    VenueVersion,
)
from aggregator.amm.uniswap_v2 import UniswapV2, UniswapV2Pool, uniswap_v2
from aggregator.amm.uniswap_v3 import UniswapV3AMM, UniswapV3Pool, uniswap_v3

__all__ = [
    # Base types
    "VenueVersion",
    "SwapResult",
    "PoolDescriptor",
    "V2Venue",
    "V3Venue",
    # UniswapV2
    "UniswapV2",
    "UniswapV2Pool",
    "uniswap_v2",
    # UniswapV3
    "UniswapV3AMM",
    "UniswapV3Pool",
    "uniswap_v3",
]
