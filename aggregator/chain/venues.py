"""In-memory V2 and V3 venues.

Pair reserves are the pair's token balances in the Ledger, and V3 price
state lives in ChainState slots, so a failed swap inside an atomic scope
leaves both untouched.
"""

from __future__ import annotations

import structlog

from aggregator.amm.base import PoolDescriptor, V2Venue, V3Venue, VenueVersion
from aggregator.amm.uniswap_v2 import UniswapV2Pool, uniswap_v2
from aggregator.amm.uniswap_v3 import V3_FEE_TIERS, UniswapV3Pool, uniswap_v3
from aggregator.chain.tokens import Ledger
from aggregator.constants import ZERO_ADDRESS
from aggregator.errors import SlippageExceeded, TransferFailed, VenueCallFailed
from aggregator.models.types import normalize_address, sort_tokens

logger = structlog.get_logger()


class V2Factory:
    """Pair directory keyed by the unordered token pair."""

    def __init__(self, address: str) -> None:
        self.address = normalize_address(address)
        self._pairs: dict[tuple[str, str], str] = {}
        self._pair_tokens: dict[str, tuple[str, str]] = {}

    def create_pair(self, token_a: str, token_b: str, address: str) -> str:
        """Register a pair contract for (token_a, token_b).

        Raises:
            ValueError: If the tokens are identical or the pair already exists
        """
        key = sort_tokens(token_a, token_b)
        if key[0] == key[1]:
            raise ValueError(f"Identical tokens: {token_a}")
        if key in self._pairs:
            raise ValueError(f"Pair already exists for {key[0]}/{key[1]}")
        pair = normalize_address(address)
        self._pairs[key] = pair
        self._pair_tokens[pair] = key
        return pair

    def get_pair(self, token_a: str, token_b: str) -> str:
        return self._pairs.get(sort_tokens(token_a, token_b), ZERO_ADDRESS)

    def tokens_of(self, pair: str) -> tuple[str, str] | None:
        return self._pair_tokens.get(normalize_address(pair))


class V2Router:
    """Constant-product router settling against Ledger balances."""

    def __init__(self, address: str, factory: V2Factory, ledger: Ledger, fee_bps: int = 30) -> None:
        self.address = normalize_address(address)
        self.factory = factory
        self.ledger = ledger
        self.fee_bps = fee_bps

    def read_pair(self, pair: str) -> UniswapV2Pool | None:
        tokens = self.factory.tokens_of(pair)
        if tokens is None:
            return None
        token0, token1 = tokens
        pair_norm = normalize_address(pair)
        return UniswapV2Pool(
            address=pair_norm,
            token0=token0,
            token1=token1,
            reserve0=self.ledger.balance_of(token0, pair_norm),
            reserve1=self.ledger.balance_of(token1, pair_norm),
            fee_bps=self.fee_bps,
        )

    def swap_exact_input(
        self,
        pool: str,
        token_in: str,
        amount_in: int,
        amount_out_min: int,
        payer: str,
        recipient: str,
    ) -> int:
        pair = self.read_pair(pool)
        if pair is None or not pair.has_token(token_in):
            raise VenueCallFailed(f"V2 router {self.address} cannot route {token_in} via {pool}")

        result = uniswap_v2.simulate_swap(pair, token_in, amount_in)
        if result.amount_out == 0:
            raise VenueCallFailed(f"Insufficient output amount from pair {pair.address}")
        if result.amount_out < amount_out_min:
            raise SlippageExceeded(
                f"Output {result.amount_out} below minimum {amount_out_min} on {pair.address}"
            )

        try:
            self.ledger.transfer(result.token_in, payer, pair.address, amount_in)
            self.ledger.transfer(result.token_out, pair.address, recipient, result.amount_out)
        except TransferFailed as err:
            raise VenueCallFailed(f"V2 settlement failed on {pair.address}: {err}") from err

        logger.debug(
            "v2_swap_executed",
            pool=pair.address,
            amount_in=amount_in,
            amount_out=result.amount_out,
        )
        return result.amount_out


class V3Factory:
    """Pool directory keyed by (sorted pair, fee tier).

    Price and liquidity for each pool are ChainState slots, read and written
    by the routers sharing this factory.
    """

    def __init__(self, address: str, ledger: Ledger) -> None:
        self.address = normalize_address(address)
        self.ledger = ledger
        self._pools: dict[tuple[str, str, int], str] = {}
        self._pool_keys: dict[str, tuple[str, str, int]] = {}

    def create_pool(
        self,
        token_a: str,
        token_b: str,
        fee: int,
        address: str,
        sqrt_price_x96: int = 0,
        liquidity: int = 0,
    ) -> str:
        """Register a pool for (token_a, token_b, fee) and set its price state.

        Raises:
            ValueError: If the fee tier is unsupported, the tokens are identical,
                or the pool already exists
        """
        if fee not in V3_FEE_TIERS:
            raise ValueError(f"Unsupported V3 fee tier: {fee}")
        token0, token1 = sort_tokens(token_a, token_b)
        if token0 == token1:
            raise ValueError(f"Identical tokens: {token_a}")
        key = (token0, token1, fee)
        if key in self._pools:
            raise ValueError(f"Pool already exists for {token0}/{token1} fee {fee}")

        pool = normalize_address(address)
        self._pools[key] = pool
        self._pool_keys[pool] = key
        self.set_slot0(pool, sqrt_price_x96, liquidity)
        return pool

    def get_pool(self, token_a: str, token_b: str, fee: int) -> str:
        token0, token1 = sort_tokens(token_a, token_b)
        return self._pools.get((token0, token1, fee), ZERO_ADDRESS)

    def key_of(self, pool: str) -> tuple[str, str, int] | None:
        return self._pool_keys.get(normalize_address(pool))

    def slot0(self, pool: str) -> tuple[int, int]:
        """Return (sqrt_price_x96, liquidity) for a pool."""
        pool_norm = normalize_address(pool)
        state = self.ledger.state
        return (
            state.get(("v3", pool_norm, "sqrt_price_x96")),
            state.get(("v3", pool_norm, "liquidity")),
        )

    def set_slot0(self, pool: str, sqrt_price_x96: int, liquidity: int) -> None:
        pool_norm = normalize_address(pool)
        state = self.ledger.state
        state.set(("v3", pool_norm, "sqrt_price_x96"), sqrt_price_x96)
        state.set(("v3", pool_norm, "liquidity"), liquidity)


class V3Router:
    """Concentrated-liquidity router settling a single-tick step."""

    def __init__(self, address: str, factory: V3Factory, ledger: Ledger) -> None:
        self.address = normalize_address(address)
        self.factory = factory
        self.ledger = ledger

    def read_pool(self, pool: str) -> UniswapV3Pool | None:
        key = self.factory.key_of(pool)
        if key is None:
            return None
        token0, token1, fee = key
        sqrt_price_x96, liquidity = self.factory.slot0(pool)
        return UniswapV3Pool(
            address=normalize_address(pool),
            token0=token0,
            token1=token1,
            fee=fee,
            sqrt_price_x96=sqrt_price_x96,
            liquidity=liquidity,
        )

    def swap_exact_input(
        self,
        pool: str,
        token_in: str,
        amount_in: int,
        amount_out_min: int,
        payer: str,
        recipient: str,
    ) -> int:
        v3_pool = self.read_pool(pool)
        if v3_pool is None or not v3_pool.has_token(token_in):
            raise VenueCallFailed(f"V3 router {self.address} cannot route {token_in} via {pool}")

        step = uniswap_v3.swap_step(v3_pool, token_in, amount_in)
        if step.amount_out == 0:
            raise VenueCallFailed(f"Insufficient output amount from pool {v3_pool.address}")
        if step.amount_out < amount_out_min:
            raise SlippageExceeded(
                f"Output {step.amount_out} below minimum {amount_out_min} on {v3_pool.address}"
            )

        token_out = v3_pool.get_token_out(token_in)
        try:
            self.ledger.transfer(token_in, payer, v3_pool.address, amount_in)
            self.ledger.transfer(token_out, v3_pool.address, recipient, step.amount_out)
        except TransferFailed as err:
            raise VenueCallFailed(f"V3 settlement failed on {v3_pool.address}: {err}") from err

        self.factory.set_slot0(v3_pool.address, step.sqrt_price_next_x96, v3_pool.liquidity)
        logger.debug(
            "v3_swap_executed",
            pool=v3_pool.address,
            amount_in=amount_in,
            amount_out=step.amount_out,
            sqrt_price_x96=step.sqrt_price_next_x96,
        )
        return step.amount_out


class VenueBook:
    """Directory of venue routers and V3 factories by address.

    Also answers "which venue owns this pool", which the executor and the
    quote engine need when they are given only a pool address.
    """

    def __init__(self) -> None:
        self._v2: dict[str, V2Venue] = {}
        self._v3: dict[str, V3Venue] = {}
        self._v3_factories: dict[str, V3Venue] = {}
        self._descriptors: dict[str, PoolDescriptor] = {}

    def add_v2_venue(self, venue: V2Venue) -> None:
        self._v2[normalize_address(venue.address)] = venue

    def add_v3_venue(self, venue: V3Venue) -> None:
        self._v3[normalize_address(venue.address)] = venue
        self._v3_factories.setdefault(normalize_address(venue.factory.address), venue)

    def v2_venue(self, router: str) -> V2Venue | None:
        return self._v2.get(normalize_address(router))

    def v3_venue(self, router: str) -> V3Venue | None:
        return self._v3.get(normalize_address(router))

    def v3_venue_for_factory(self, factory: str) -> V3Venue | None:
        """Any V3 router whose factory is `factory`."""
        return self._v3_factories.get(normalize_address(factory))

    def locate(self, pool: str) -> PoolDescriptor | None:
        """Find the venue serving `pool` and describe it.

        Pool identity (tokens, fee tier) never changes once created, so
        descriptors are cached. Venues whose read fails are skipped.
        """
        pool_norm = normalize_address(pool)
        if pool_norm == ZERO_ADDRESS:
            return None
        cached = self._descriptors.get(pool_norm)
        if cached is not None:
            return cached

        descriptor = self._locate_uncached(pool_norm)
        if descriptor is not None:
            self._descriptors[pool_norm] = descriptor
        return descriptor

    def _locate_uncached(self, pool: str) -> PoolDescriptor | None:
        for router, v2 in self._v2.items():
            try:
                pair = v2.read_pair(pool)
            except VenueCallFailed:
                logger.debug("venue_read_skipped", router=router, pool=pool)
                continue
            if pair is not None:
                return PoolDescriptor(
                    address=pool,
                    version=VenueVersion.V2,
                    token0=normalize_address(pair.token0),
                    token1=normalize_address(pair.token1),
                    router=router,
                )
        for router, v3 in self._v3.items():
            try:
                v3_pool = v3.read_pool(pool)
            except VenueCallFailed:
                logger.debug("venue_read_skipped", router=router, pool=pool)
                continue
            if v3_pool is not None:
                return PoolDescriptor(
                    address=pool,
                    version=VenueVersion.V3,
                    token0=normalize_address(v3_pool.token0),
                    token1=normalize_address(v3_pool.token1),
                    router=router,
                    fee=v3_pool.fee,
                )
        return None


__all__ = ["V2Factory", "V2Router", "V3Factory", "V3Router", "VenueBook"]
