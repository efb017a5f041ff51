"""Constant-product (UniswapV2-style) pair math and router calldata.

Every V2 venue the aggregator talks to, in-memory or over RPC, reduces a
pair to a UniswapV2Pool and prices it here. Forks differ only in the
input fee, so the fee travels with the pair in basis points.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from eth_abi import encode  # type: ignore[attr-defined]

from aggregator.amm.base import SwapResult
from aggregator.constants import FEE_DENOMINATOR
from aggregator.models.types import is_valid_address, normalize_address
from aggregator.safe_int import S

# swapExactTokensForTokens settles inside the aggregator call
_NO_DEADLINE = 2**32 - 1


@dataclass
class UniswapV2Pool:
    """A V2 pair read from a venue: tokens, reserves and input fee."""

    address: str
    token0: str
    token1: str
    reserve0: int
    reserve1: int
    fee_bps: int = 30

    @property
    def fee_multiplier(self) -> int:
        """Share of the input that reaches the curve, out of 10000."""
        return FEE_DENOMINATOR - self.fee_bps

    def _orient(self, token_in: str) -> bool:
        """True when token_in is token0, False when token1."""
        token_in = normalize_address(token_in)
        if token_in == normalize_address(self.token0):
            return True
        if token_in == normalize_address(self.token1):
            return False
        raise ValueError(f"Token {token_in} not in pair {self.address}")

    def has_token(self, token: str) -> bool:
        return normalize_address(token) in (
            normalize_address(self.token0),
            normalize_address(self.token1),
        )

    def get_reserves(self, token_in: str) -> tuple[int, int]:
        """(reserve_in, reserve_out) as seen by a trader selling token_in."""
        if self._orient(token_in):
            return self.reserve0, self.reserve1
        return self.reserve1, self.reserve0

    def get_token_out(self, token_in: str) -> str:
        return self.token1 if self._orient(token_in) else self.token0


class UniswapV2:
    """Exact-input pricing and calldata for V2 routers.

    amount_out = amount_in * m * reserve_out / (reserve_in * 10000 + amount_in * m)
    where m = 10000 - fee_bps (9970 for the canonical 0.3% pair).
    """

    SWAP_EXACT_TOKENS_SELECTOR: ClassVar[str] = "0x38ed1739"

    def get_amount_out(
        self,
        amount_in: int,
        reserve_in: int,
        reserve_out: int,
        fee_multiplier: int = 9970,
    ) -> int:
        """Output of an exact-input swap, rounded down.

        A non-positive input or an empty side quotes 0 rather than raising.
        """
        if amount_in <= 0 or reserve_in <= 0 or reserve_out <= 0:
            return 0

        effective_in = S(amount_in) * fee_multiplier
        return (
            (effective_in * reserve_out) // (S(reserve_in) * FEE_DENOMINATOR + effective_in)
        ).value

    def simulate_swap(self, pool: UniswapV2Pool, token_in: str, amount_in: int) -> SwapResult:
        reserve_in, reserve_out = pool.get_reserves(token_in)
        return SwapResult(
            amount_in=amount_in,
            amount_out=self.get_amount_out(amount_in, reserve_in, reserve_out, pool.fee_multiplier),
            pool_address=pool.address,
            token_in=normalize_address(token_in),
            token_out=normalize_address(pool.get_token_out(token_in)),
        )

    def encode_swap(
        self,
        router: str,
        token_in: str,
        token_out: str,
        amount_in: int,
        amount_out_min: int,
        recipient: str,
    ) -> tuple[str, str]:
        """Build the router call for a single-hop exact-input swap.

        Returns:
            Tuple of (router_address, calldata)

        Raises:
            ValueError: If a token or the recipient is not a valid address
        """
        checked = {"token_in": token_in, "token_out": token_out, "recipient": recipient}
        for label, addr in checked.items():
            if not is_valid_address(addr):
                raise ValueError(f"Invalid address for {label}: {addr}")

        args = encode(
            ["uint256", "uint256", "address[]", "address", "uint256"],
            [
                amount_in,
                amount_out_min,
                [bytes.fromhex(token_in[2:]), bytes.fromhex(token_out[2:])],
                bytes.fromhex(recipient[2:]),
                _NO_DEADLINE,
            ],
        )
        return normalize_address(router), self.SWAP_EXACT_TOKENS_SELECTOR + args.hex()


uniswap_v2 = UniswapV2()


__all__ = ["UniswapV2Pool", "UniswapV2", "uniswap_v2"]
