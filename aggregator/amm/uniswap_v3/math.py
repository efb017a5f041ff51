"""Integer sqrt-price math for single-tick UniswapV3 swaps.

Follows the rounding conventions of the on-chain SqrtPriceMath and SwapMath
libraries: the price moves against the trader (rounded toward the side that
gives less output), and output amounts are rounded down. Python integers do
not overflow, so the full-precision mulDiv branch is always taken.

A quote computed here assumes the swap stays inside the active tick. A real
execution that crosses initialized ticks may realize a slightly different
amount; the caller's slippage tolerance absorbs that difference.
"""

from __future__ import annotations

from dataclasses import dataclass

from aggregator.safe_int import S

from .constants import MAX_SQRT_RATIO, MIN_SQRT_RATIO, PIPS_DENOMINATOR, Q96, RESOLUTION


@dataclass(frozen=True)
class SwapStep:
    """Outcome of an exact-input swap within the current tick."""

    amount_in: int
    amount_out: int
    fee_amount: int
    sqrt_price_next_x96: int


def next_sqrt_price_from_amount0_rounding_up(sqrt_price_x96: int, liquidity: int, amount: int) -> int:
    """Price after adding `amount` of token0 (price decreases, rounded up)."""
    if amount == 0:
        return sqrt_price_x96
    numerator1 = S(liquidity) << RESOLUTION
    denominator = numerator1 + S(amount) * sqrt_price_x96
    return numerator1.mul_div_rounding_up(sqrt_price_x96, denominator).to_uint160()


def next_sqrt_price_from_amount1_rounding_down(sqrt_price_x96: int, liquidity: int, amount: int) -> int:
    """Price after adding `amount` of token1 (price increases, rounded down)."""
    quotient = (S(amount) << RESOLUTION) // liquidity
    return (quotient + sqrt_price_x96).value


def amount0_delta(sqrt_a_x96: int, sqrt_b_x96: int, liquidity: int, round_up: bool) -> int:
    """Token0 amount between two sqrt prices: L * (sqrtB - sqrtA) / (sqrtA * sqrtB)."""
    if sqrt_a_x96 > sqrt_b_x96:
        sqrt_a_x96, sqrt_b_x96 = sqrt_b_x96, sqrt_a_x96
    numerator1 = S(liquidity) << RESOLUTION
    numerator2 = S(sqrt_b_x96) - sqrt_a_x96
    if round_up:
        return numerator1.mul_div_rounding_up(numerator2, sqrt_b_x96).ceiling_div(sqrt_a_x96).value
    return (numerator1.mul_div(numerator2, sqrt_b_x96) // sqrt_a_x96).value


def amount1_delta(sqrt_a_x96: int, sqrt_b_x96: int, liquidity: int, round_up: bool) -> int:
    """Token1 amount between two sqrt prices: L * (sqrtB - sqrtA)."""
    if sqrt_a_x96 > sqrt_b_x96:
        sqrt_a_x96, sqrt_b_x96 = sqrt_b_x96, sqrt_a_x96
    span = S(sqrt_b_x96) - sqrt_a_x96
    if round_up:
        return S(liquidity).mul_div_rounding_up(span, Q96).value
    return S(liquidity).mul_div(span, Q96).value


def compute_swap_exact_input(
    sqrt_price_x96: int,
    liquidity: int,
    fee: int,
    amount_in: int,
    zero_for_one: bool,
) -> SwapStep:
    """Swap exactly `amount_in` against the active liquidity.

    Args:
        sqrt_price_x96: Current pool sqrt price (Q64.96)
        liquidity: Active liquidity at the current tick
        fee: Pool fee in pips (3000 = 0.3%)
        amount_in: Gross input amount, fee included
        zero_for_one: True when token0 is the input token

    Returns:
        SwapStep with the output amount and the post-swap sqrt price.
        Zero input, zero liquidity or a zero price all yield zero output.
    """
    if amount_in <= 0 or liquidity <= 0 or sqrt_price_x96 <= 0:
        return SwapStep(0, 0, 0, sqrt_price_x96)

    amount_less_fee = S(amount_in).mul_div(PIPS_DENOMINATOR - fee, PIPS_DENOMINATOR).value
    fee_amount = amount_in - amount_less_fee

    if zero_for_one:
        sqrt_next = next_sqrt_price_from_amount0_rounding_up(
            sqrt_price_x96, liquidity, amount_less_fee
        )
        # The price range ends at MIN_SQRT_RATIO; nothing trades beyond it
        sqrt_next = max(sqrt_next, min(MIN_SQRT_RATIO + 1, sqrt_price_x96))
        amount_out = amount1_delta(sqrt_next, sqrt_price_x96, liquidity, round_up=False)
    else:
        sqrt_next = next_sqrt_price_from_amount1_rounding_down(
            sqrt_price_x96, liquidity, amount_less_fee
        )
        sqrt_next = min(sqrt_next, max(MAX_SQRT_RATIO - 1, sqrt_price_x96))
        amount_out = amount0_delta(sqrt_price_x96, sqrt_next, liquidity, round_up=False)

    return SwapStep(
        amount_in=amount_in,
        amount_out=amount_out,
        fee_amount=fee_amount,
        sqrt_price_next_x96=sqrt_next,
    )


__all__ = [
    "SwapStep",
    "next_sqrt_price_from_amount0_rounding_up",
    "next_sqrt_price_from_amount1_rounding_down",
    "amount0_delta",
    "amount1_delta",
    "compute_swap_exact_input",
]
