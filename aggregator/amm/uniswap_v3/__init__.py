"""UniswapV3 AMM implementation package.

This package provides UniswapV3 concentrated liquidity pool support:
- Pool dataclass (UniswapV3Pool)
- Single-tick sqrt-price swap math
- Swap encoding for SwapRouter02
- AMM class for single-tick swap steps
"""

from .amm import UniswapV3AMM, uniswap_v3
from .constants import (
    MAX_SQRT_RATIO,
    MIN_SQRT_RATIO,
    PIPS_DENOMINATOR,
    Q96,
    V3_FEE_HIGH,
    V3_FEE_LOW,
    V3_FEE_LOWEST,
    V3_FEE_MEDIUM,
    V3_FEE_TIERS,
)
from .encoding import EXACT_INPUT_SINGLE_SELECTOR, encode_exact_input_single
from .math import SwapStep, compute_swap_exact_input
from .pool import UniswapV3Pool

__all__ = [
    # Constants
    "V3_FEE_LOWEST",
    "V3_FEE_LOW",
    "V3_FEE_MEDIUM",
    "V3_FEE_HIGH",
    "V3_FEE_TIERS",
    "PIPS_DENOMINATOR",
    "Q96",
    "MIN_SQRT_RATIO",
    "MAX_SQRT_RATIO",
    # Pool
    "UniswapV3Pool",
    # Math
    "SwapStep",
    "compute_swap_exact_input",
    # Encoding
    "EXACT_INPUT_SINGLE_SELECTOR",
    "encode_exact_input_single",
    # AMM
    "UniswapV3AMM",
    "uniswap_v3",
]
