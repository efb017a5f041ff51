"""Quote engine: exact-input output estimates for V2 and V3 pools.

Pricing dispatches on a small tagged variant (V2PoolState / V3PoolState)
built from the venue's current pool read. Every "no liquidity" condition
(zero input, empty reserve, zero liquidity, unknown pool, token not in the
pool) yields 0 rather than an error, so rate shopping can compare many
venues without one illiquid pool aborting the scan.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from aggregator.amm.base import PoolDescriptor, VenueVersion
from aggregator.amm.uniswap_v2 import UniswapV2Pool, uniswap_v2
from aggregator.amm.uniswap_v3 import UniswapV3Pool, compute_swap_exact_input
from aggregator.chain.venues import VenueBook
from aggregator.models.types import normalize_address
from aggregator.resolver import PoolResolver

logger = structlog.get_logger()


@dataclass(frozen=True)
class V2PoolState:
    """Constant-product pricing inputs, oriented for the swap direction."""

    reserve_in: int
    reserve_out: int
    fee_bps: int = 30

    @classmethod
    def from_pool(cls, pool: UniswapV2Pool, token_in: str) -> V2PoolState:
        reserve_in, reserve_out = pool.get_reserves(token_in)
        return cls(reserve_in=reserve_in, reserve_out=reserve_out, fee_bps=pool.fee_bps)


@dataclass(frozen=True)
class V3PoolState:
    """Single-tick concentrated-liquidity pricing inputs."""

    sqrt_price_x96: int
    liquidity: int
    fee: int
    zero_for_one: bool

    @classmethod
    def from_pool(cls, pool: UniswapV3Pool, token_in: str) -> V3PoolState:
        return cls(
            sqrt_price_x96=pool.sqrt_price_x96,
            liquidity=pool.liquidity,
            fee=pool.fee,
            zero_for_one=pool.is_token0(token_in),
        )


PoolState = V2PoolState | V3PoolState


def quote(state: PoolState, amount_in: int) -> int:
    """Output amount for an exact input against a pool state.

    Raises:
        TypeError: If state is not a known pool state variant
    """
    if amount_in <= 0:
        return 0
    if isinstance(state, V2PoolState):
        return uniswap_v2.get_amount_out(
            amount_in,
            state.reserve_in,
            state.reserve_out,
            fee_multiplier=10000 - state.fee_bps,
        )
    elif isinstance(state, V3PoolState):
        return compute_swap_exact_input(
            sqrt_price_x96=state.sqrt_price_x96,
            liquidity=state.liquidity,
            fee=state.fee,
            amount_in=amount_in,
            zero_for_one=state.zero_for_one,
        ).amount_out
    else:
        raise TypeError(f"Unknown pool state: {type(state)}")


class QuoteEngine:
    """Reads pool state through the venue book and prices exact-input swaps.

    Venue read failures (VenueCallFailed) propagate; callers scanning many
    venues decide whether to skip them.
    """

    def __init__(self, resolver: PoolResolver) -> None:
        self.resolver = resolver

    @property
    def venues(self) -> VenueBook:
        return self.resolver.venues

    def pool_state(self, descriptor: PoolDescriptor, token_in: str) -> PoolState | None:
        """Read the current pricing state of a described pool.

        Returns None if the pool vanished from its venue or token_in is not
        one of its tokens.
        """
        token_in_norm = normalize_address(token_in)
        if not descriptor.has_token(token_in_norm):
            return None

        if descriptor.version == VenueVersion.V2:
            v2 = self.venues.v2_venue(descriptor.router)
            pair = v2.read_pair(descriptor.address) if v2 is not None else None
            return V2PoolState.from_pool(pair, token_in_norm) if pair is not None else None

        v3 = self.venues.v3_venue(descriptor.router)
        pool = v3.read_pool(descriptor.address) if v3 is not None else None
        return V3PoolState.from_pool(pool, token_in_norm) if pool is not None else None

    def estimate_amount_out(self, pool: str, token_in: str, amount_in: int) -> int:
        """Expected output for swapping amount_in of token_in through pool.

        Args:
            pool: Pool or pair address
            token_in: Input token (must be one of the pool's tokens)
            amount_in: Exact input amount

        Returns:
            Output amount, or 0 when there is nothing to quote
        """
        if amount_in <= 0:
            return 0
        descriptor = self.resolver.describe(pool)
        if descriptor is None:
            logger.debug("quote_unknown_pool", pool=pool)
            return 0
        return self.quote_descriptor(descriptor, token_in, amount_in)

    def quote_descriptor(self, descriptor: PoolDescriptor, token_in: str, amount_in: int) -> int:
        state = self.pool_state(descriptor, token_in)
        if state is None:
            logger.debug("quote_token_not_in_pool", pool=descriptor.address, token_in=token_in)
            return 0
        return quote(state, amount_in)

    def quote_v2(self, router: str, pool: str, token_in: str, amount_in: int) -> int:
        """Quote a pair through a specific V2 router (no pool lookup scan)."""
        venue = self.venues.v2_venue(router)
        pair = venue.read_pair(pool) if venue is not None else None
        if pair is None or not pair.has_token(token_in):
            return 0
        return quote(V2PoolState.from_pool(pair, token_in), amount_in)

    def quote_v3(self, router: str, pool: str, token_in: str, amount_in: int) -> int:
        """Quote a pool through a specific V3 router (no pool lookup scan)."""
        venue = self.venues.v3_venue(router)
        v3_pool = venue.read_pool(pool) if venue is not None else None
        if v3_pool is None or not v3_pool.has_token(token_in):
            return 0
        return quote(V3PoolState.from_pool(v3_pool, token_in), amount_in)


__all__ = ["V2PoolState", "V3PoolState", "PoolState", "quote", "QuoteEngine"]
