"""Notifications for off-chain observers.

The aggregator emits two kinds of events: registry changes and completed
swaps. Each emission is also written to the structlog stream.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import asdict, dataclass
from enum import Enum

import structlog

from aggregator.amm.base import VenueVersion

logger = structlog.get_logger()


class RegistryOp(str, Enum):
    """Kind of registry mutation."""

    V2_ROUTER_ADDED = "V2_ROUTER_ADDED"
    V2_ROUTER_REMOVED = "V2_ROUTER_REMOVED"
    V3_ROUTER_ADDED = "V3_ROUTER_ADDED"
    V3_ROUTER_REMOVED = "V3_ROUTER_REMOVED"
    POOL_SUPPORTED = "POOL_SUPPORTED"
    POOL_UNSUPPORTED = "POOL_UNSUPPORTED"


@dataclass(frozen=True)
class RegistryChanged:
    address: str
    op: RegistryOp


@dataclass(frozen=True)
class SwapCompleted:
    caller: str
    pool: str
    version: VenueVersion
    amount_in: int
    amount_out: int
    system_fee: int
    partner_fee: int


Event = RegistryChanged | SwapCompleted
Listener = Callable[[Event], None]


class EventLog:
    """Append-only event record with optional subscribers.

    Listeners run synchronously in emission order. A listener that raises
    propagates to the emitter.
    """

    def __init__(self) -> None:
        self.events: list[Event] = []
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def emit(self, event: Event) -> None:
        self.events.append(event)
        if isinstance(event, RegistryChanged):
            logger.info("registry_changed", address=event.address, op=event.op.value)
        else:
            fields = asdict(event)
            fields["version"] = int(event.version)
            logger.info("swap_completed", **fields)
        for listener in self._listeners:
            listener(event)

    def of_type(self, event_type: type) -> list[Event]:
        return [e for e in self.events if isinstance(e, event_type)]

    def clear(self) -> None:
        self.events.clear()


__all__ = ["RegistryOp", "RegistryChanged", "SwapCompleted", "Event", "EventLog"]
