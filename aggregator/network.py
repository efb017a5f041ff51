"""DecentralizedExchangeNetwork: the aggregator wired together.

One object owns the registry, the venue book, the ledger and the fee
settings, and exposes every read and mutation the aggregator supports.
State-mutating calls are serialized by a per-instance lock. Reads do not
take it: they run against one committed version of the ledger, so an
in-flight swap on another thread is never visible to them.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import replace

import structlog

from aggregator.amm.base import V2Venue, V3Venue
from aggregator.chain.tokens import Ledger, WrappedNative
from aggregator.chain.venues import VenueBook
from aggregator.constants import (
    DEFAULT_NETWORK_ADDRESS,
    DEFAULT_PARTNER_FEE_NUMERATOR,
    DEFAULT_SYSTEM_FEE_NUMERATOR,
    ZERO_ADDRESS,
)
from aggregator.errors import ImmutableFeeError, InvalidAddress
from aggregator.events import EventLog
from aggregator.executor import SwapExecutor, SwapReceipt
from aggregator.fees import FeeConfig, FeeSplit, split_fee
from aggregator.models.types import is_valid_address, normalize_address
from aggregator.quoting import QuoteEngine
from aggregator.rate_shopper import QuoteResult, RateShopper
from aggregator.registry import VenueRegistry
from aggregator.resolver import PoolResolver

logger = structlog.get_logger()


class DecentralizedExchangeNetwork:
    """Rate-shopping swap aggregator over V2 and V3 venues.

    Example:
        network = DecentralizedExchangeNetwork(
            weth=WETH, partner=PARTNER, system_fee_receiver=SYSTEM,
            partner_fee_receiver=PARTNER_RECEIVER, owner=OWNER,
        )
        network.add_venue(v3_router)
        network.add_v3_router(OWNER, v3_router.address)
        network.add_supported_pool(OWNER, pool)
        receipt = network.swap_native_for_token(user, pool, USDC, 100, 10**18)
    """

    def __init__(
        self,
        weth: str,
        partner: str,
        system_fee_receiver: str,
        partner_fee_receiver: str,
        partner_fee_numerator: int = DEFAULT_PARTNER_FEE_NUMERATOR,
        *,
        owner: str,
        system_fee_numerator: int = DEFAULT_SYSTEM_FEE_NUMERATOR,
        address: str = DEFAULT_NETWORK_ADDRESS,
        ledger: Ledger | None = None,
        venues: VenueBook | None = None,
        events: EventLog | None = None,
        v2_routers: Iterable[str] = (),
        v3_routers: Iterable[str] = (),
        supported_pools: Iterable[str] = (),
    ) -> None:
        if not is_valid_address(weth) or normalize_address(weth) == ZERO_ADDRESS:
            raise InvalidAddress(f"weth must be a non-zero address, got {weth!r}")

        self.address = normalize_address(address)
        self.ledger = ledger if ledger is not None else Ledger()
        self.venues = venues if venues is not None else VenueBook()
        self.events = events if events is not None else EventLog()
        self.wrapped_native = WrappedNative(self.ledger, weth)

        self.registry = VenueRegistry(
            owner,
            events=self.events,
            v2_routers=v2_routers,
            v3_routers=v3_routers,
            supported_pools=supported_pools,
        )
        self.resolver = PoolResolver(self.venues)
        self.engine = QuoteEngine(self.resolver)
        self.rate_shopper = RateShopper(self.registry, self.resolver, self.engine)
        self.executor = SwapExecutor(
            address=self.address,
            ledger=self.ledger,
            wrapped_native=self.wrapped_native,
            registry=self.registry,
            engine=self.engine,
            rate_shopper=self.rate_shopper,
            fee_config=FeeConfig(
                partner=partner,
                system_fee_receiver=system_fee_receiver,
                partner_fee_receiver=partner_fee_receiver,
                partner_fee_numerator=partner_fee_numerator,
                system_fee_numerator=system_fee_numerator,
            ),
            events=self.events,
        )
        self._lock = threading.Lock()

    # --- Read accessors ---

    @property
    def weth(self) -> str:
        return self.wrapped_native.address

    @property
    def owner(self) -> str:
        return self.registry.owner

    @property
    def fee_config(self) -> FeeConfig:
        return self.executor.fee_config

    @property
    def partner(self) -> str:
        return self.fee_config.partner

    @property
    def system_fee_receiver(self) -> str:
        return self.fee_config.system_fee_receiver

    @property
    def partner_fee_receiver(self) -> str:
        return self.fee_config.partner_fee_receiver

    @property
    def partner_fee_numerator(self) -> int:
        return self.fee_config.partner_fee_numerator

    @property
    def system_fee_numerator(self) -> int:
        return self.fee_config.system_fee_numerator

    # --- Venue wiring ---

    def add_venue(self, venue: V2Venue | V3Venue) -> None:
        """Make a venue implementation reachable by router address.

        This only wires the collaborator; the router still has to be
        registered by the owner before rate shopping considers it.

        Raises:
            TypeError: If venue satisfies neither venue protocol
        """
        if isinstance(venue, V3Venue):
            self.venues.add_v3_venue(venue)
        elif isinstance(venue, V2Venue):
            self.venues.add_v2_venue(venue)
        else:
            raise TypeError(f"Unknown venue type: {type(venue)}")

    # --- Registry ---

    def add_v2_router(self, caller: str, address: str) -> None:
        with self._lock:
            self.registry.add_v2_router(caller, address)

    def remove_v2_router(self, caller: str, index: int) -> str:
        with self._lock:
            return self.registry.remove_v2_router(caller, index)

    def add_v3_router(self, caller: str, address: str) -> None:
        with self._lock:
            self.registry.add_v3_router(caller, address)

    def remove_v3_router(self, caller: str, index: int) -> str:
        with self._lock:
            return self.registry.remove_v3_router(caller, index)

    def add_supported_pool(self, caller: str, address: str) -> None:
        with self._lock:
            self.registry.add_supported_pool(caller, address)

    def remove_supported_pool(self, caller: str, address: str) -> None:
        with self._lock:
            self.registry.remove_supported_pool(caller, address)

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        with self._lock:
            self.registry.transfer_ownership(caller, new_owner)

    def get_supported_v2_routers(self) -> list[str]:
        return self.registry.get_supported_v2_routers()

    def get_supported_v3_routers(self) -> list[str]:
        return self.registry.get_supported_v3_routers()

    def is_pool_supported(self, address: str) -> bool:
        return self.registry.is_pool_supported(address)

    # --- Pools and quotes ---

    def get_v2_pool_from_router(self, router: str, token_a: str, token_b: str) -> str:
        return self.resolver.resolve_v2_pool(router, token_a, token_b)

    def get_v3_pool_from_factory(self, factory: str, token_a: str, token_b: str, fee: int) -> str:
        return self.resolver.resolve_v3_pool(factory, token_a, token_b, fee)

    def estimate_amount_out(self, pool: str, token_in: str, amount_in: int) -> int:
        with self.ledger.state.view():
            return self.engine.estimate_amount_out(pool, token_in, amount_in)

    def get_best_rate(
        self,
        token_in: str,
        token_out: str,
        amount_in: int,
        v3_fee_tier_hint: int,
    ) -> QuoteResult:
        with self.ledger.state.view():
            return self.rate_shopper.get_best_rate(
                token_in, token_out, amount_in, v3_fee_tier_hint
            )

    def split_fee(self, gross_amount_in: int) -> FeeSplit:
        return split_fee(gross_amount_in, self.fee_config)

    # --- Swaps ---

    def swap_native_for_token(
        self,
        caller: str,
        pool: str,
        token_out: str,
        slippage_tolerance_bps: int,
        gross_amount_in: int,
    ) -> SwapReceipt:
        with self._lock:
            return self.executor.swap_native_for_token(
                caller, pool, token_out, slippage_tolerance_bps, gross_amount_in
            )

    def swap_native_at_best_rate(
        self,
        caller: str,
        token_out: str,
        slippage_tolerance_bps: int,
        gross_amount_in: int,
        v3_fee_tier_hint: int,
    ) -> SwapReceipt:
        with self._lock:
            return self.executor.swap_native_at_best_rate(
                caller, token_out, slippage_tolerance_bps, gross_amount_in, v3_fee_tier_hint
            )

    # --- Administration ---

    def update_fee_config(
        self,
        caller: str,
        *,
        partner: str | None = None,
        system_fee_receiver: str | None = None,
        partner_fee_receiver: str | None = None,
        partner_fee_numerator: int | None = None,
        system_fee_numerator: int | None = None,
    ) -> FeeConfig:
        """Replace owner-mutable fee settings and return the new config.

        Raises:
            Unauthorized: If caller is not the owner
            ImmutableFeeError: If system_fee_numerator is passed at all
            InvalidAddress: If a new address is malformed or zero
            InvalidFeeConfig: If the new numerators are out of bounds
        """
        with self._lock:
            self.registry.require_owner(caller)
            if system_fee_numerator is not None:
                raise ImmutableFeeError("The system fee numerator is fixed at construction")

            changes: dict[str, object] = {
                name: value
                for name, value in (
                    ("partner", partner),
                    ("system_fee_receiver", system_fee_receiver),
                    ("partner_fee_receiver", partner_fee_receiver),
                    ("partner_fee_numerator", partner_fee_numerator),
                )
                if value is not None
            }
            config = replace(self.executor.fee_config, **changes)  # type: ignore[arg-type]
            self.executor.fee_config = config
            logger.info("fee_config_updated", changed=sorted(changes))
            return config


__all__ = ["DecentralizedExchangeNetwork"]
