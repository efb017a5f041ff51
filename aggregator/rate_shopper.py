"""Best-rate selection across every registered venue."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

import structlog

from aggregator.amm.base import VenueVersion
from aggregator.constants import ZERO_ADDRESS
from aggregator.errors import VenueCallFailed
from aggregator.models.types import normalize_address
from aggregator.quoting import QuoteEngine
from aggregator.registry import VenueRegistry
from aggregator.resolver import PoolResolver

logger = structlog.get_logger()


@dataclass(frozen=True)
class QuoteResult:
    """Winner of a rate comparison.

    Attributes:
        best_venue: Router address of the winning venue (zero if none)
        best_version: VenueVersion.V2, V3, or NONE when nothing quoted
        best_amount_out: Output amount quoted by the winning venue
        best_pool: Pool the winning quote was taken from
    """

    best_venue: str
    best_version: VenueVersion
    best_amount_out: int
    best_pool: str = ZERO_ADDRESS

    @classmethod
    def none(cls) -> QuoteResult:
        """The canonical "no liquidity found" result."""
        return cls(best_venue=ZERO_ADDRESS, best_version=VenueVersion.NONE, best_amount_out=0)

    @property
    def found(self) -> bool:
        return self.best_version != VenueVersion.NONE and self.best_amount_out > 0


class RateShopper:
    """Quotes an exact-input swap on every registered venue and keeps the best.

    V2 routers are scanned before V3 routers, each in registry order. A
    quote replaces the current best only when strictly greater, so ties go
    to the venue found first. Only whitelisted pools take part. Nothing is
    mutated, so repeated calls on unchanged state give identical results.
    """

    def __init__(
        self,
        registry: VenueRegistry,
        resolver: PoolResolver,
        engine: QuoteEngine,
    ) -> None:
        self.registry = registry
        self.resolver = resolver
        self.engine = engine

    def get_best_rate(
        self,
        token_in: str,
        token_out: str,
        amount_in: int,
        v3_fee_tier_hint: int,
    ) -> QuoteResult:
        """Find the venue giving the most token_out for amount_in of token_in.

        Args:
            token_in: Input token address
            token_out: Output token address
            amount_in: Exact input amount
            v3_fee_tier_hint: V3 fee tier (pips) used to pick the pool per V3 venue

        Returns:
            QuoteResult, or QuoteResult.none() if no venue quotes above zero
        """
        token_in = normalize_address(token_in)
        token_out = normalize_address(token_out)
        best = QuoteResult.none()
        if amount_in <= 0 or token_in == token_out:
            return best

        for router in self.registry.get_supported_v2_routers():
            best = self._consider(
                best,
                router,
                VenueVersion.V2,
                lambda r: self.resolver.resolve_v2_pool(r, token_in, token_out),
                lambda r, p: self.engine.quote_v2(r, p, token_in, amount_in),
            )

        for router in self.registry.get_supported_v3_routers():
            best = self._consider(
                best,
                router,
                VenueVersion.V3,
                lambda r: self.resolver.resolve_v3_pool_for_router(
                    r, token_in, token_out, v3_fee_tier_hint
                ),
                lambda r, p: self.engine.quote_v3(r, p, token_in, amount_in),
            )

        logger.debug(
            "best_rate",
            token_in=token_in,
            token_out=token_out,
            amount_in=amount_in,
            venue=best.best_venue,
            version=int(best.best_version),
            amount_out=best.best_amount_out,
        )
        return best

    def _consider(
        self,
        best: QuoteResult,
        router: str,
        version: VenueVersion,
        resolve: Callable[[str], str],
        quote: Callable[[str, str], int],
    ) -> QuoteResult:
        try:
            pool = resolve(router)
            if pool == ZERO_ADDRESS or not self.registry.is_pool_supported(pool):
                return best
            amount_out = quote(router, pool)
        except VenueCallFailed as e:
            logger.warning("venue_skipped", router=router, version=int(version), error=str(e))
            return best

        if amount_out > best.best_amount_out:
            return QuoteResult(
                best_venue=router,
                best_version=version,
                best_amount_out=amount_out,
                best_pool=pool,
            )
        return best


__all__ = ["QuoteResult", "RateShopper"]
