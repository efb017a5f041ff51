"""Shared AMM types and the venue collaborator protocols."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from aggregator.amm.uniswap_v2 import UniswapV2Pool
    from aggregator.amm.uniswap_v3 import UniswapV3Pool


class VenueVersion(IntEnum):
    """Pool family served by a venue.

    NONE is only used by QuoteResult to mean "no liquidity found".
    """

    NONE = 0
    V2 = 2
    V3 = 3


@dataclass(frozen=True)
class SwapResult:
    """Result of simulating a swap through a pool."""

    amount_in: int
    amount_out: int
    pool_address: str
    token_in: str
    token_out: str


@dataclass(frozen=True)
class PoolDescriptor:
    """Pool identity derived from factory state (never persisted)."""

    address: str
    version: VenueVersion
    token0: str
    token1: str
    router: str
    fee: int | None = None  # V3 fee tier in pips

    def has_token(self, token: str) -> bool:
        return token in (self.token0, self.token1)


class V2FactoryReader(Protocol):
    """Factory lookup exposed by a V2-style venue."""

    address: str

    def get_pair(self, token_a: str, token_b: str) -> str:
        """Return the pair address for the unordered pair, or the zero address."""
        ...


class V3FactoryReader(Protocol):
    """Factory lookup exposed by a V3-style venue."""

    address: str

    def get_pool(self, token_a: str, token_b: str, fee: int) -> str:
        """Return the pool for (sorted pair, fee tier), or the zero address."""
        ...


@runtime_checkable
class V2Venue(Protocol):
    """A V2-style router: factory lookup, pair reserve read, one swap call."""

    address: str
    factory: V2FactoryReader

    def read_pair(self, pair: str) -> UniswapV2Pool | None:
        """Return pair tokens and reserves, or None if the pair is unknown."""
        ...

    def swap_exact_input(
        self,
        pool: str,
        token_in: str,
        amount_in: int,
        amount_out_min: int,
        payer: str,
        recipient: str,
    ) -> int:
        """Swap exactly amount_in, raising SlippageExceeded below amount_out_min."""
        ...


@runtime_checkable
class V3Venue(Protocol):
    """A V3-style router: factory lookup, pool state read, one swap call."""

    address: str
    factory: V3FactoryReader

    def read_pool(self, pool: str) -> UniswapV3Pool | None:
        """Return pool tokens, fee, sqrt price and liquidity, or None."""
        ...

    def swap_exact_input(
        self,
        pool: str,
        token_in: str,
        amount_in: int,
        amount_out_min: int,
        payer: str,
        recipient: str,
    ) -> int:
        """Swap exactly amount_in, raising SlippageExceeded below amount_out_min."""
        ...


__all__ = [
    "VenueVersion",
    "SwapResult",
    "PoolDescriptor",
    "V2FactoryReader",
    "V3FactoryReader",
    "V2Venue",
    "V3Venue",
]
