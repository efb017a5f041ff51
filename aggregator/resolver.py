"""Pool resolution through venue factories."""

from __future__ import annotations

import structlog

from aggregator.amm.base import PoolDescriptor
from aggregator.chain.venues import VenueBook
from aggregator.constants import ZERO_ADDRESS
from aggregator.models.types import normalize_address

logger = structlog.get_logger()


class PoolResolver:
    """Derives pool addresses from token pairs by asking the venue's factory.

    A missing pool, or a router/factory the venue book does not know, yields
    the zero address. Callers treat that as "no liquidity here", not as an
    error.
    """

    def __init__(self, venues: VenueBook) -> None:
        self.venues = venues

    def resolve_v2_pool(self, router: str, token_a: str, token_b: str) -> str:
        venue = self.venues.v2_venue(router)
        if venue is None:
            logger.debug("v2_router_unknown", router=router)
            return ZERO_ADDRESS
        return normalize_address(venue.factory.get_pair(token_a, token_b))

    def resolve_v3_pool(self, factory: str, token_a: str, token_b: str, fee: int) -> str:
        venue = self.venues.v3_venue_for_factory(factory)
        if venue is None:
            logger.debug("v3_factory_unknown", factory=factory)
            return ZERO_ADDRESS
        return normalize_address(venue.factory.get_pool(token_a, token_b, fee))

    def resolve_v3_pool_for_router(self, router: str, token_a: str, token_b: str, fee: int) -> str:
        """Resolve through a V3 router's own factory."""
        venue = self.venues.v3_venue(router)
        if venue is None:
            logger.debug("v3_router_unknown", router=router)
            return ZERO_ADDRESS
        return normalize_address(venue.factory.get_pool(token_a, token_b, fee))

    def describe(self, pool: str) -> PoolDescriptor | None:
        """Identity of a pool (version, tokens, fee tier, serving router)."""
        return self.venues.locate(pool)


__all__ = ["PoolResolver"]
