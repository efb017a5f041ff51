"""Tests for native-to-token swap execution."""

import pytest

from aggregator.amm.base import VenueVersion
from aggregator.amm.uniswap_v3 import EXACT_INPUT_SINGLE_SELECTOR
from aggregator.chain import V3Factory, V3Router
from aggregator.errors import (
    FeeTransferFailed,
    InsufficientLiquidity,
    InvalidSlippage,
    SlippageExceeded,
    TransferFailed,
    UnsupportedPool,
    ZeroAmount,
)
from aggregator.events import SwapCompleted
from aggregator.executor import min_amount_out
from tests.helpers import (
    ONE_ETH,
    OWNER,
    PARTNER_FEE_RECEIVER,
    SQRT_PRICE_2500,
    STRANGER,
    SYSTEM_FEE_RECEIVER,
    USDC,
    USDT,
    USER,
    V2_ROUTER,
    V2_USDC_PAIR,
    V3_FACTORY,
    V3_ROUTER,
    V3_USDC_POOL_3000,
    WETH,
    make_network,
    make_v3_venue,
    seed_v3_pool,
)
from tests.helpers.constants import NETWORK, V3_USDC_POOL_500


class SandwichedV3Router(V3Router):
    """Router whose pool price is pushed down just before every swap."""

    def swap_exact_input(self, pool, token_in, amount_in, amount_out_min, payer, recipient):
        sqrt_price, liquidity = self.factory.slot0(pool)
        self.factory.set_slot0(pool, sqrt_price * 9 // 10, liquidity)
        return super().swap_exact_input(pool, token_in, amount_in, amount_out_min, payer, recipient)


@pytest.fixture
def sandwiched_network():
    network = make_network()
    venue = SandwichedV3Router(V3_ROUTER, V3Factory(V3_FACTORY, network.ledger), network.ledger)
    network.add_venue(venue)
    network.add_v3_router(OWNER, V3_ROUTER)
    seed_v3_pool(network, venue)
    return network


class TestMinAmountOut:
    @pytest.mark.parametrize(
        "expected,bps,minimum",
        [(10_000, 100, 9_900), (10_000, 0, 10_000), (10_000, 10_000, 0), (999, 50, 994)],
    )
    def test_rounds_down(self, expected, bps, minimum):
        assert min_amount_out(expected, bps) == minimum


class TestSwapNativeForToken:
    """Tests for swap_native_for_token."""

    def test_v3_swap_settles_every_party(self, v3_network):
        receipt = v3_network.swap_native_for_token(USER, V3_USDC_POOL_3000, USDC, 100, ONE_ETH)
        ledger = v3_network.ledger

        assert receipt.system_fee == 2_500_000_000_000_000
        assert receipt.partner_fee == 5_000_000_000_000_000
        assert receipt.net_amount_in == 992_500_000_000_000_000
        assert receipt.version == VenueVersion.V3

        assert ledger.native_balance(USER) == 9 * ONE_ETH
        assert ledger.balance_of(USDC, USER) == receipt.amount_out
        assert ledger.native_balance(SYSTEM_FEE_RECEIVER) == receipt.system_fee
        assert ledger.native_balance(PARTNER_FEE_RECEIVER) == receipt.partner_fee
        assert ledger.native_balance(WETH) == receipt.net_amount_in

        # Nothing stays behind at the aggregator
        assert ledger.native_balance(NETWORK) == 0
        assert ledger.balance_of(WETH, NETWORK) == 0
        assert ledger.balance_of(USDC, NETWORK) == 0

    def test_output_matches_quote_on_net_input(self, v3_network):
        expected = v3_network.estimate_amount_out(V3_USDC_POOL_3000, WETH, 992_500_000_000_000_000)
        receipt = v3_network.swap_native_for_token(USER, V3_USDC_POOL_3000, USDC, 100, ONE_ETH)

        assert receipt.expected_out == expected
        assert receipt.amount_out == expected
        assert receipt.min_amount_out == expected * 9_900 // 10_000

    def test_interaction_encoded(self, v3_network):
        receipt = v3_network.swap_native_for_token(USER, V3_USDC_POOL_3000, USDC, 100, ONE_ETH)
        target, call_data = receipt.interaction
        assert target == V3_ROUTER
        assert call_data.startswith("0x" + EXACT_INPUT_SINGLE_SELECTOR.hex())

    def test_v2_swap(self, dual_network):
        receipt = dual_network.swap_native_for_token(USER, V2_USDC_PAIR, USDC, 50, ONE_ETH)
        assert receipt.version == VenueVersion.V2
        assert receipt.interaction[0] == V2_ROUTER
        assert receipt.interaction[1].startswith("0x38ed1739")
        assert dual_network.ledger.balance_of(USDC, USER) == receipt.amount_out

    def test_emits_swap_completed(self, v3_network):
        v3_network.events.clear()
        receipt = v3_network.swap_native_for_token(USER, V3_USDC_POOL_3000, USDC, 100, ONE_ETH)
        assert v3_network.events.events == [
            SwapCompleted(
                caller=USER,
                pool=V3_USDC_POOL_3000,
                version=VenueVersion.V3,
                amount_in=ONE_ETH,
                amount_out=receipt.amount_out,
                system_fee=receipt.system_fee,
                partner_fee=receipt.partner_fee,
            )
        ]

    def test_second_swap_gets_less(self, v3_network):
        first = v3_network.swap_native_for_token(USER, V3_USDC_POOL_3000, USDC, 100, ONE_ETH)
        second = v3_network.swap_native_for_token(USER, V3_USDC_POOL_3000, USDC, 100, ONE_ETH)
        assert second.amount_out < first.amount_out

    def test_zero_fee_receivers_never_paid(self):
        """A receiver that refuses native does not block a zero-fee swap."""
        network = make_network(partner_fee_numerator=0, system_fee_numerator=0)
        seed_v3_pool(network, make_v3_venue(network))
        network.ledger.reject_native(PARTNER_FEE_RECEIVER)
        network.ledger.reject_native(SYSTEM_FEE_RECEIVER)

        receipt = network.swap_native_for_token(USER, V3_USDC_POOL_3000, USDC, 100, ONE_ETH)
        assert receipt.net_amount_in == ONE_ETH


class TestSwapFailures:
    """Every failure leaves balances, prices and events as they were."""

    @staticmethod
    def assert_untouched(network, before):
        assert network.ledger.state.snapshot() == before
        assert network.events.of_type(SwapCompleted) == []

    @pytest.mark.parametrize("amount", [0, -1, True, False, 1.5])
    def test_zero_amount(self, v3_network, amount):
        before = v3_network.ledger.state.snapshot()
        with pytest.raises(ZeroAmount):
            v3_network.swap_native_for_token(USER, V3_USDC_POOL_3000, USDC, 100, amount)
        self.assert_untouched(v3_network, before)

    @pytest.mark.parametrize("bps", [-1, 10_001, True])
    def test_invalid_slippage(self, v3_network, bps):
        with pytest.raises(InvalidSlippage):
            v3_network.swap_native_for_token(USER, V3_USDC_POOL_3000, USDC, bps, ONE_ETH)

    def test_caller_cannot_pay(self, v3_network):
        before = v3_network.ledger.state.snapshot()
        with pytest.raises(TransferFailed):
            v3_network.swap_native_for_token(USER, V3_USDC_POOL_3000, USDC, 100, 11 * ONE_ETH)
        self.assert_untouched(v3_network, before)

    def test_fee_receiver_refuses(self, v3_network):
        v3_network.ledger.reject_native(PARTNER_FEE_RECEIVER)
        before = v3_network.ledger.state.snapshot()
        with pytest.raises(FeeTransferFailed):
            v3_network.swap_native_for_token(USER, V3_USDC_POOL_3000, USDC, 100, ONE_ETH)
        # The system fee paid before the failure is rolled back too
        assert v3_network.ledger.native_balance(SYSTEM_FEE_RECEIVER) == 0
        self.assert_untouched(v3_network, before)

    def test_pool_not_whitelisted(self, v3_network):
        v3_network.remove_supported_pool(OWNER, V3_USDC_POOL_3000)
        before = v3_network.ledger.state.snapshot()
        with pytest.raises(UnsupportedPool):
            v3_network.swap_native_for_token(USER, V3_USDC_POOL_3000, USDC, 100, ONE_ETH)
        self.assert_untouched(v3_network, before)

    def test_whitelisted_pool_unknown_to_venues(self, v3_network):
        v3_network.add_supported_pool(OWNER, STRANGER)
        with pytest.raises(UnsupportedPool):
            v3_network.swap_native_for_token(USER, STRANGER, USDC, 100, ONE_ETH)

    @pytest.mark.parametrize("token_out", [USDT, WETH])
    def test_pool_does_not_pair_tokens(self, v3_network, token_out):
        with pytest.raises(UnsupportedPool):
            v3_network.swap_native_for_token(USER, V3_USDC_POOL_3000, token_out, 100, ONE_ETH)

    def test_pool_without_liquidity(self, v3_network):
        seed_v3_pool(
            v3_network,
            v3_network.venues.v3_venue(V3_ROUTER),
            pool=V3_USDC_POOL_500,
            fee=500,
            liquidity=0,
        )
        before = v3_network.ledger.state.snapshot()
        with pytest.raises(InsufficientLiquidity):
            v3_network.swap_native_for_token(USER, V3_USDC_POOL_500, USDC, 100, ONE_ETH)
        self.assert_untouched(v3_network, before)

    def test_price_moved_beyond_tolerance(self, sandwiched_network):
        before = sandwiched_network.ledger.state.snapshot()
        with pytest.raises(SlippageExceeded):
            sandwiched_network.swap_native_for_token(USER, V3_USDC_POOL_3000, USDC, 100, ONE_ETH)

        self.assert_untouched(sandwiched_network, before)
        venue = sandwiched_network.venues.v3_venue(V3_ROUTER)
        assert venue.factory.slot0(V3_USDC_POOL_3000)[0] == SQRT_PRICE_2500

    def test_full_tolerance_accepts_moved_price(self, sandwiched_network):
        receipt = sandwiched_network.swap_native_for_token(
            USER, V3_USDC_POOL_3000, USDC, 10_000, ONE_ETH
        )
        assert receipt.min_amount_out == 0
        assert 0 < receipt.amount_out < receipt.expected_out


class TestSwapAtBestRate:
    def test_routes_to_best_pool(self, dual_network):
        receipt = dual_network.swap_native_at_best_rate(USER, USDC, 100, ONE_ETH, 3000)
        assert receipt.pool == V3_USDC_POOL_3000
        assert receipt.amount_out == receipt.expected_out

    def test_hint_without_v3_pool_uses_v2(self, dual_network):
        receipt = dual_network.swap_native_at_best_rate(USER, USDC, 100, ONE_ETH, 500)
        assert receipt.pool == V2_USDC_PAIR

    def test_no_liquidity_anywhere(self, network):
        with pytest.raises(InsufficientLiquidity):
            network.swap_native_at_best_rate(USER, USDC, 100, ONE_ETH, 3000)

    def test_validates_before_shopping(self, dual_network):
        with pytest.raises(ZeroAmount):
            dual_network.swap_native_at_best_rate(USER, USDC, 100, 0, 3000)
