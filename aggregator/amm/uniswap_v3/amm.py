"""UniswapV3 AMM: single-tick swap steps over a pool snapshot."""

from __future__ import annotations

import structlog

from .math import SwapStep, compute_swap_exact_input
from .pool import UniswapV3Pool

logger = structlog.get_logger()


class UniswapV3AMM:
    """Prices exact-input swaps from a pool's current sqrt price and active liquidity.

    No quoter contract round trip is needed; the step also carries the
    post-swap price so a settling venue can move the pool.
    """

    def swap_step(self, pool: UniswapV3Pool, token_in: str, amount_in: int) -> SwapStep:
        """Run the exact-input step for a pool.

        Raises:
            ValueError: If token_in is not one of the pool's tokens
        """
        if not pool.has_token(token_in):
            raise ValueError(f"Token {token_in} not in pool {pool.address}")
        step = compute_swap_exact_input(
            sqrt_price_x96=pool.sqrt_price_x96,
            liquidity=pool.liquidity,
            fee=pool.fee,
            amount_in=amount_in,
            zero_for_one=pool.is_token0(token_in),
        )
        if step.amount_out == 0 and amount_in > 0:
            logger.debug(
                "v3_amm_zero_quote",
                pool=pool.address,
                liquidity=pool.liquidity,
                amount_in=amount_in,
            )
        return step


uniswap_v3 = UniswapV3AMM()


__all__ = ["UniswapV3AMM", "uniswap_v3"]
