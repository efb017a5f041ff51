"""Swap executor: native asset in, token out, protocol fees split off.

The whole sequence (collect native, pay fees, wrap, swap, forward output)
runs inside one ChainState.atomic() scope. Any failure discards every
balance and price change made by the call, and no SwapCompleted event is
emitted.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from aggregator.amm.base import PoolDescriptor, VenueVersion
from aggregator.amm.uniswap_v2 import uniswap_v2
from aggregator.amm.uniswap_v3 import encode_exact_input_single
from aggregator.chain.tokens import Ledger, WrappedNative
from aggregator.constants import FEE_DENOMINATOR, NATIVE
from aggregator.errors import (
    FeeTransferFailed,
    InsufficientLiquidity,
    InvalidSlippage,
    TransferFailed,
    UnsupportedPool,
    ZeroAmount,
)
from aggregator.events import EventLog, SwapCompleted
from aggregator.fees import FeeConfig, FeeSplit, split_fee
from aggregator.models.types import normalize_address
from aggregator.quoting import QuoteEngine
from aggregator.rate_shopper import RateShopper
from aggregator.registry import VenueRegistry
from aggregator.safe_int import S

logger = structlog.get_logger()


@dataclass(frozen=True)
class SwapReceipt:
    """Outcome of a committed swap.

    Attributes:
        interaction: (router, calldata) of the venue call, ABI-encoded so a
            relayer can replay the route on chain
    """

    caller: str
    pool: str
    version: VenueVersion
    token_out: str
    amount_in: int
    net_amount_in: int
    expected_out: int
    min_amount_out: int
    amount_out: int
    system_fee: int
    partner_fee: int
    interaction: tuple[str, str]


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def min_amount_out(expected_out: int, slippage_tolerance_bps: int) -> int:
    """expected_out reduced by the slippage tolerance, rounded down."""
    return S(expected_out).mul_div(FEE_DENOMINATOR - slippage_tolerance_bps, FEE_DENOMINATOR).value


class SwapExecutor:
    """Executes native-to-token swaps through whitelisted pools.

    The executor holds its balances at ``address`` while a swap is in
    flight: native input is collected there, wrapped there, and the venue
    pays its output there before it is forwarded to the caller.
    """

    def __init__(
        self,
        address: str,
        ledger: Ledger,
        wrapped_native: WrappedNative,
        registry: VenueRegistry,
        engine: QuoteEngine,
        rate_shopper: RateShopper,
        fee_config: FeeConfig,
        events: EventLog,
    ) -> None:
        self.address = normalize_address(address)
        self.ledger = ledger
        self.wrapped_native = wrapped_native
        self.registry = registry
        self.engine = engine
        self.rate_shopper = rate_shopper
        self.fee_config = fee_config
        self.events = events

    @staticmethod
    def _validate(gross_amount_in: int, slippage_tolerance_bps: int) -> None:
        if not _is_int(gross_amount_in) or gross_amount_in <= 0:
            raise ZeroAmount(f"Swap amount must be positive, got {gross_amount_in}")
        if not _is_int(slippage_tolerance_bps) or not (
            0 <= slippage_tolerance_bps <= FEE_DENOMINATOR
        ):
            raise InvalidSlippage(
                f"Slippage tolerance must be in [0, {FEE_DENOMINATOR}] bps, "
                f"got {slippage_tolerance_bps}"
            )

    def swap_native_for_token(
        self,
        caller: str,
        pool: str,
        token_out: str,
        slippage_tolerance_bps: int,
        gross_amount_in: int,
    ) -> SwapReceipt:
        """Swap gross_amount_in of the native asset for token_out through pool.

        Args:
            caller: Identity paying native and receiving token_out
            pool: Whitelisted pool pairing wrapped native with token_out
            token_out: Token delivered to the caller
            slippage_tolerance_bps: Allowed shortfall versus the quote (100 = 1%)
            gross_amount_in: Native amount sent, fees included

        Returns:
            SwapReceipt with the realized output and fee amounts

        Raises:
            ZeroAmount: If gross_amount_in is not positive
            InvalidSlippage: If the tolerance is outside [0, 10000]
            TransferFailed: If the caller cannot pay gross_amount_in
            FeeTransferFailed: If a fee receiver refuses payment
            UnsupportedPool: If the pool is not whitelisted, unknown to every
                venue, or does not pair wrapped native with token_out
            InsufficientLiquidity: If the pool quotes zero for the net input
            SlippageExceeded: If the venue cannot deliver the minimum output
            VenueCallFailed: If the venue call fails for another reason
        """
        self._validate(gross_amount_in, slippage_tolerance_bps)
        caller = normalize_address(caller)
        pool = normalize_address(pool)
        token_out = normalize_address(token_out)
        config = self.fee_config

        with self.ledger.state.atomic():
            self.ledger.transfer(NATIVE, caller, self.address, gross_amount_in)
            split = split_fee(gross_amount_in, config)
            self._pay_fees(split, config)

            descriptor = self._describe_supported(pool, token_out)
            expected_out = self.engine.quote_descriptor(
                descriptor, self.wrapped_native.address, split.net_amount_in
            )
            if expected_out == 0:
                raise InsufficientLiquidity(
                    f"Pool {pool} quotes zero for {split.net_amount_in} wrapped native"
                )
            minimum = min_amount_out(expected_out, slippage_tolerance_bps)

            self.wrapped_native.deposit(self.address, split.net_amount_in)
            amount_out = self._swap(descriptor, split.net_amount_in, minimum)
            self.ledger.transfer(token_out, self.address, caller, amount_out)

            interaction = self._encode(descriptor, token_out, split.net_amount_in, minimum)

        receipt = SwapReceipt(
            caller=caller,
            pool=pool,
            version=descriptor.version,
            token_out=token_out,
            amount_in=gross_amount_in,
            net_amount_in=split.net_amount_in,
            expected_out=expected_out,
            min_amount_out=minimum,
            amount_out=amount_out,
            system_fee=split.system_fee,
            partner_fee=split.partner_fee,
            interaction=interaction,
        )
        self.events.emit(
            SwapCompleted(
                caller=caller,
                pool=pool,
                version=descriptor.version,
                amount_in=gross_amount_in,
                amount_out=amount_out,
                system_fee=split.system_fee,
                partner_fee=split.partner_fee,
            )
        )
        return receipt

    def swap_native_at_best_rate(
        self,
        caller: str,
        token_out: str,
        slippage_tolerance_bps: int,
        gross_amount_in: int,
        v3_fee_tier_hint: int,
    ) -> SwapReceipt:
        """Swap through whichever whitelisted pool quotes best for the net input.

        Raises:
            InsufficientLiquidity: If no venue quotes a positive amount
            (plus every failure of swap_native_for_token)
        """
        self._validate(gross_amount_in, slippage_tolerance_bps)
        net_amount_in = split_fee(gross_amount_in, self.fee_config).net_amount_in
        best = self.rate_shopper.get_best_rate(
            self.wrapped_native.address, token_out, net_amount_in, v3_fee_tier_hint
        )
        if not best.found:
            raise InsufficientLiquidity(f"No venue quotes wrapped native for {token_out}")

        logger.info(
            "best_rate_route_selected",
            venue=best.best_venue,
            pool=best.best_pool,
            version=int(best.best_version),
            quoted_out=best.best_amount_out,
        )
        return self.swap_native_for_token(
            caller, best.best_pool, token_out, slippage_tolerance_bps, gross_amount_in
        )

    def _pay_fees(self, split: FeeSplit, config: FeeConfig) -> None:
        payments = (
            (config.system_fee_receiver, split.system_fee),
            (config.partner_fee_receiver, split.partner_fee),
        )
        for receiver, amount in payments:
            if amount == 0:
                continue
            try:
                self.ledger.transfer(NATIVE, self.address, receiver, amount)
            except TransferFailed as err:
                raise FeeTransferFailed(f"Fee payment of {amount} to {receiver} failed") from err

    def _describe_supported(self, pool: str, token_out: str) -> PoolDescriptor:
        if not self.registry.is_pool_supported(pool):
            raise UnsupportedPool(f"Pool {pool} is not supported")
        descriptor = self.engine.resolver.describe(pool)
        if descriptor is None:
            raise UnsupportedPool(f"Pool {pool} is not served by any known venue")
        wrapped = self.wrapped_native.address
        if token_out == wrapped or not (
            descriptor.has_token(wrapped) and descriptor.has_token(token_out)
        ):
            raise UnsupportedPool(f"Pool {pool} does not trade wrapped native for {token_out}")
        return descriptor

    def _swap(self, descriptor: PoolDescriptor, amount_in: int, amount_out_min: int) -> int:
        venues = self.engine.venues
        venue = (
            venues.v2_venue(descriptor.router)
            if descriptor.version == VenueVersion.V2
            else venues.v3_venue(descriptor.router)
        )
        if venue is None:
            raise UnsupportedPool(f"Router {descriptor.router} for pool {descriptor.address} is gone")
        return venue.swap_exact_input(
            descriptor.address,
            self.wrapped_native.address,
            amount_in,
            amount_out_min,
            self.address,
            self.address,
        )

    def _encode(
        self,
        descriptor: PoolDescriptor,
        token_out: str,
        amount_in: int,
        amount_out_min: int,
    ) -> tuple[str, str]:
        if descriptor.version == VenueVersion.V2:
            return uniswap_v2.encode_swap(
                router=descriptor.router,
                token_in=self.wrapped_native.address,
                token_out=token_out,
                amount_in=amount_in,
                amount_out_min=amount_out_min,
                recipient=self.address,
            )
        return encode_exact_input_single(
            router=descriptor.router,
            token_in=self.wrapped_native.address,
            token_out=token_out,
            fee=descriptor.fee or 0,
            recipient=self.address,
            amount_in=amount_in,
            amount_out_minimum=amount_out_min,
        )


__all__ = ["SwapReceipt", "SwapExecutor", "min_amount_out"]
