"""UniswapV3Pool dataclass for concentrated liquidity pools."""

from __future__ import annotations

from dataclasses import dataclass

from aggregator.models.types import normalize_address


@dataclass
class UniswapV3Pool:
    """Snapshot of a UniswapV3 pool at its current tick.

    Only the state needed for a single-tick quote is kept:
    - Current price (as sqrtPriceX96)
    - Active liquidity at the current tick
    - Fee tier
    """

    address: str
    token0: str
    token1: str
    fee: int  # Fee in pips (e.g., 3000 for 0.3%)
    sqrt_price_x96: int  # Current sqrt(price) * 2^96
    liquidity: int  # Current active liquidity

    def has_token(self, token: str) -> bool:
        token_norm = normalize_address(token)
        return token_norm in (normalize_address(self.token0), normalize_address(self.token1))

    def get_token_out(self, token_in: str) -> str:
        """Get the output token for a given input token."""
        token_in_norm = normalize_address(token_in)
        if token_in_norm == normalize_address(self.token0):
            return self.token1
        elif token_in_norm == normalize_address(self.token1):
            return self.token0
        else:
            raise ValueError(f"Token {token_in} not in pool")

    def is_token0(self, token: str) -> bool:
        """Check if token is token0 (determines swap direction)."""
        return normalize_address(token) == normalize_address(self.token0)


__all__ = ["UniswapV3Pool"]
