"""Tests for the event log."""

import pytest

from aggregator.amm.base import VenueVersion
from aggregator.events import EventLog, RegistryChanged, RegistryOp, SwapCompleted
from tests.helpers import USER, V2_ROUTER, V3_USDC_POOL_3000


def swap_event():
    return SwapCompleted(
        caller=USER,
        pool=V3_USDC_POOL_3000,
        version=VenueVersion.V3,
        amount_in=100,
        amount_out=90,
        system_fee=1,
        partner_fee=2,
    )


class TestEventLog:
    def test_emit_records_in_order(self):
        log = EventLog()
        first = RegistryChanged(V2_ROUTER, RegistryOp.V2_ROUTER_ADDED)
        log.emit(first)
        log.emit(swap_event())
        assert log.events == [first, swap_event()]

    def test_of_type(self):
        log = EventLog()
        log.emit(RegistryChanged(V2_ROUTER, RegistryOp.V2_ROUTER_ADDED))
        log.emit(swap_event())
        assert log.of_type(SwapCompleted) == [swap_event()]
        assert len(log.of_type(RegistryChanged)) == 1

    def test_subscribers_called(self):
        log = EventLog()
        seen = []
        log.subscribe(seen.append)
        log.emit(swap_event())
        assert seen == [swap_event()]

    def test_listener_error_propagates(self):
        log = EventLog()

        def boom(event):
            raise RuntimeError("listener failed")

        log.subscribe(boom)
        with pytest.raises(RuntimeError):
            log.emit(swap_event())

    def test_clear(self):
        log = EventLog()
        log.emit(swap_event())
        log.clear()
        assert log.events == []

    def test_registry_op_values(self):
        assert RegistryOp("POOL_SUPPORTED") is RegistryOp.POOL_SUPPORTED
        assert len(RegistryOp) == 6
