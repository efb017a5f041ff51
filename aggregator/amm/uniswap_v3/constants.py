"""UniswapV3 constants: fee tiers and fixed-point scales."""

# V3 fee tiers in pips (hundredths of a basis point)
# Fee = pips / 1,000,000 (e.g., 3000 = 0.3%)
V3_FEE_LOWEST = 100  # 0.01%
V3_FEE_LOW = 500  # 0.05%
V3_FEE_MEDIUM = 3000  # 0.30%
V3_FEE_HIGH = 10000  # 1.00%

V3_FEE_TIERS = [V3_FEE_LOWEST, V3_FEE_LOW, V3_FEE_MEDIUM, V3_FEE_HIGH]

PIPS_DENOMINATOR = 1_000_000

# Q64.96 fixed point used by sqrtPriceX96
RESOLUTION = 96
Q96 = 1 << RESOLUTION

# Bounds of sqrtPriceX96 (TickMath.MIN_SQRT_RATIO / MAX_SQRT_RATIO)
MIN_SQRT_RATIO = 4295128739
MAX_SQRT_RATIO = 1461446703485210103287273052203988822378723970342

__all__ = [
    "V3_FEE_LOWEST",
    "V3_FEE_LOW",
    "V3_FEE_MEDIUM",
    "V3_FEE_HIGH",
    "V3_FEE_TIERS",
    "PIPS_DENOMINATOR",
    "RESOLUTION",
    "Q96",
    "MIN_SQRT_RATIO",
    "MAX_SQRT_RATIO",
]
