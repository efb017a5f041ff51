"""Venue registry: supported routers and the pool whitelist.

Router lists are arenas (slot list plus an address-to-slot index), so adds,
removals and membership checks are all O(1). Removal swaps the last slot
into the freed one; callers only rely on membership, and iteration order
is the registration order for entries never displaced by a removal.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

import structlog

from aggregator.constants import ZERO_ADDRESS
from aggregator.errors import (
    AlreadyRegistered,
    IndexOutOfRange,
    InvalidAddress,
    Unauthorized,
    UnsupportedPool,
)
from aggregator.events import EventLog, RegistryChanged, RegistryOp
from aggregator.models.types import is_valid_address, normalize_address

logger = structlog.get_logger()


def _require_address(address: str) -> str:
    """Normalize an address, rejecting malformed and zero addresses.

    Raises:
        InvalidAddress: If the address is malformed or the zero address
    """
    if not isinstance(address, str):
        raise InvalidAddress(f"Address must be a string, got {type(address).__name__}")
    addr = normalize_address(address)
    if not is_valid_address(addr) or addr == ZERO_ADDRESS:
        raise InvalidAddress(f"Invalid address: {address!r}")
    return addr


class RouterSet:
    """Duplicate-free arena of router addresses."""

    def __init__(self) -> None:
        self._slots: list[str] = []
        self._index: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._slots))

    def __contains__(self, address: object) -> bool:
        return isinstance(address, str) and normalize_address(address) in self._index

    def add(self, address: str) -> None:
        if address in self._index:
            raise AlreadyRegistered(f"Router already registered: {address}")
        self._index[address] = len(self._slots)
        self._slots.append(address)

    def remove_at(self, index: int) -> str:
        """Remove the slot at index and return its address."""
        if not 0 <= index < len(self._slots):
            raise IndexOutOfRange(f"Index {index} out of range for {len(self._slots)} routers")
        removed = self._slots[index]
        last = self._slots.pop()
        if index < len(self._slots):
            self._slots[index] = last
            self._index[last] = index
        del self._index[removed]
        return removed

    def index_of(self, address: str) -> int | None:
        return self._index.get(normalize_address(address))

    def to_list(self) -> list[str]:
        return list(self._slots)


class VenueRegistry:
    """Owner-managed lists of V2 and V3 routers plus supported pools.

    Every mutating method takes the caller identity first and fails with
    Unauthorized unless it is the owner. A failed call leaves the registry
    unchanged.
    """

    def __init__(
        self,
        owner: str,
        events: EventLog | None = None,
        v2_routers: Iterable[str] = (),
        v3_routers: Iterable[str] = (),
        supported_pools: Iterable[str] = (),
    ) -> None:
        """Initialize the registry.

        Args:
            owner: The single identity allowed to mutate the registry
            events: Where registry notifications go (a fresh EventLog if None)
            v2_routers: Initial V2 routers (seeding does not emit events)
            v3_routers: Initial V3 routers
            supported_pools: Initial pool whitelist
        """
        self._owner = _require_address(owner)
        self.events = events if events is not None else EventLog()
        self._v2 = RouterSet()
        self._v3 = RouterSet()
        self._supported_pools: set[str] = set()

        for router in v2_routers:
            self._v2.add(_require_address(router))
        for router in v3_routers:
            self._v3.add(_require_address(router))
        for pool in supported_pools:
            self._supported_pools.add(_require_address(pool))

    @property
    def owner(self) -> str:
        return self._owner

    def require_owner(self, caller: str) -> None:
        if not isinstance(caller, str) or normalize_address(caller) != self._owner:
            logger.warning("unauthorized_registry_call", caller=caller)
            raise Unauthorized(f"Caller {caller} is not the owner")

    def _emit(self, address: str, op: RegistryOp) -> None:
        self.events.emit(RegistryChanged(address=address, op=op))

    # --- Routers ---

    def add_v2_router(self, caller: str, address: str) -> None:
        """Append a V2 router.

        Raises:
            Unauthorized: If caller is not the owner
            InvalidAddress: If address is malformed or zero
            AlreadyRegistered: If the router is already listed
        """
        self.require_owner(caller)
        router = _require_address(address)
        self._v2.add(router)
        self._emit(router, RegistryOp.V2_ROUTER_ADDED)

    def remove_v2_router(self, caller: str, index: int) -> str:
        """Remove the V2 router at index and return its address.

        Raises:
            Unauthorized: If caller is not the owner
            IndexOutOfRange: If index is not in [0, len)
        """
        self.require_owner(caller)
        router = self._v2.remove_at(index)
        self._emit(router, RegistryOp.V2_ROUTER_REMOVED)
        return router

    def add_v3_router(self, caller: str, address: str) -> None:
        """Append a V3 router. Same failures as add_v2_router."""
        self.require_owner(caller)
        router = _require_address(address)
        self._v3.add(router)
        self._emit(router, RegistryOp.V3_ROUTER_ADDED)

    def remove_v3_router(self, caller: str, index: int) -> str:
        """Remove the V3 router at index. Same failures as remove_v2_router."""
        self.require_owner(caller)
        router = self._v3.remove_at(index)
        self._emit(router, RegistryOp.V3_ROUTER_REMOVED)
        return router

    def get_supported_v2_routers(self) -> list[str]:
        return self._v2.to_list()

    def get_supported_v3_routers(self) -> list[str]:
        return self._v3.to_list()

    def is_v2_router(self, address: str) -> bool:
        return address in self._v2

    def is_v3_router(self, address: str) -> bool:
        return address in self._v3

    # --- Pools ---

    def add_supported_pool(self, caller: str, address: str) -> None:
        """Whitelist a pool for swap execution and rate shopping.

        Raises:
            Unauthorized: If caller is not the owner
            InvalidAddress: If address is malformed or zero
            AlreadyRegistered: If the pool is already whitelisted
        """
        self.require_owner(caller)
        pool = _require_address(address)
        if pool in self._supported_pools:
            raise AlreadyRegistered(f"Pool already supported: {pool}")
        self._supported_pools.add(pool)
        self._emit(pool, RegistryOp.POOL_SUPPORTED)

    def remove_supported_pool(self, caller: str, address: str) -> None:
        """Drop a pool from the whitelist.

        Raises:
            Unauthorized: If caller is not the owner
            UnsupportedPool: If the pool is not whitelisted
        """
        self.require_owner(caller)
        pool = _require_address(address)
        if pool not in self._supported_pools:
            raise UnsupportedPool(f"Pool not supported: {pool}")
        self._supported_pools.remove(pool)
        self._emit(pool, RegistryOp.POOL_UNSUPPORTED)

    def is_pool_supported(self, address: str) -> bool:
        if not isinstance(address, str):
            return False
        return normalize_address(address) in self._supported_pools

    def get_supported_pools(self) -> list[str]:
        return sorted(self._supported_pools)

    # --- Ownership ---

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        """Hand registry control to another identity.

        Raises:
            Unauthorized: If caller is not the owner
            InvalidAddress: If new_owner is malformed or zero
        """
        self.require_owner(caller)
        previous = self._owner
        self._owner = _require_address(new_owner)
        logger.info("ownership_transferred", previous_owner=previous, new_owner=self._owner)


__all__ = ["RouterSet", "VenueRegistry"]
