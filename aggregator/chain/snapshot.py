"""Venue snapshot: seed an in-memory network from JSON.

A snapshot lists V2 and V3 venues with their pairs and pools, token
balances, the pool whitelist and (optionally) the fee and ownership
settings. Anything the snapshot leaves out comes from Settings.

Example:
    {
      "weth": "0x4200000000000000000000000000000000000006",
      "v3Venues": [{
        "router": "0x2626...", "factory": "0x3312...",
        "pools": [{"address": "0x6c56...", "token0": "...", "token1": "...",
                   "fee": 3000, "sqrtPriceX96": "...", "liquidity": "...",
                   "balance0": "...", "balance1": "..."}]
      }],
      "supportedPools": ["0x6c56..."]
    }
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import structlog
from pydantic import BaseModel, Field

from aggregator.chain.tokens import Ledger
from aggregator.chain.venues import V2Factory, V2Router, V3Factory, V3Router, VenueBook
from aggregator.config import Settings
from aggregator.models.types import Address, Uint256
from aggregator.network import DecentralizedExchangeNetwork

logger = structlog.get_logger()


class SnapshotModel(BaseModel):
    model_config = {"populate_by_name": True}


class PairSnapshot(SnapshotModel):
    address: Address
    token0: Address
    token1: Address
    reserve0: Uint256 = "0"
    reserve1: Uint256 = "0"


class PoolSnapshot(SnapshotModel):
    address: Address
    token0: Address
    token1: Address
    fee: int = Field(description="Fee tier in pips")
    sqrt_price_x96: Uint256 = Field(alias="sqrtPriceX96")
    liquidity: Uint256
    balance0: Uint256 = "0"
    balance1: Uint256 = "0"


class V2VenueSnapshot(SnapshotModel):
    router: Address
    factory: Address
    fee_bps: int = Field(default=30, alias="feeBps")
    registered: bool = Field(default=True, description="Add the router to the registry")
    pairs: list[PairSnapshot] = Field(default_factory=list)


class V3VenueSnapshot(SnapshotModel):
    router: Address
    factory: Address
    registered: bool = True
    pools: list[PoolSnapshot] = Field(default_factory=list)


class BalanceSnapshot(SnapshotModel):
    token: Address = Field(description="Token address, or the zero address for native")
    holder: Address
    amount: Uint256


class FeeSnapshot(SnapshotModel):
    partner: Address | None = None
    system_fee_receiver: Address | None = Field(default=None, alias="systemFeeReceiver")
    partner_fee_receiver: Address | None = Field(default=None, alias="partnerFeeReceiver")
    partner_fee_numerator: int | None = Field(default=None, alias="partnerFeeNumerator")
    system_fee_numerator: int | None = Field(default=None, alias="systemFeeNumerator")


class VenueSnapshot(SnapshotModel):
    """Complete seed state for a DecentralizedExchangeNetwork."""

    weth: Address | None = None
    owner: Address | None = None
    address: Address | None = None
    fees: FeeSnapshot = Field(default_factory=FeeSnapshot)
    v2_venues: list[V2VenueSnapshot] = Field(default_factory=list, alias="v2Venues")
    v3_venues: list[V3VenueSnapshot] = Field(default_factory=list, alias="v3Venues")
    balances: list[BalanceSnapshot] = Field(default_factory=list)
    supported_pools: list[Address] = Field(default_factory=list, alias="supportedPools")
    rejects_native: list[Address] = Field(default_factory=list, alias="rejectsNative")


def _build_venues(snapshot: VenueSnapshot, ledger: Ledger) -> VenueBook:
    book = VenueBook()
    v2_factories: dict[str, V2Factory] = {}
    v3_factories: dict[str, V3Factory] = {}

    for v2 in snapshot.v2_venues:
        factory_key = v2.factory.lower()
        factory = v2_factories.get(factory_key)
        if factory is None:
            factory = v2_factories[factory_key] = V2Factory(v2.factory)
        for pair in v2.pairs:
            address = factory.create_pair(pair.token0, pair.token1, pair.address)
            ledger.mint(pair.token0, address, int(pair.reserve0))
            ledger.mint(pair.token1, address, int(pair.reserve1))
        book.add_v2_venue(V2Router(v2.router, factory, ledger, fee_bps=v2.fee_bps))

    for v3 in snapshot.v3_venues:
        factory_key = v3.factory.lower()
        v3_factory = v3_factories.get(factory_key)
        if v3_factory is None:
            v3_factory = v3_factories[factory_key] = V3Factory(v3.factory, ledger)
        for pool in v3.pools:
            address = v3_factory.create_pool(
                pool.token0,
                pool.token1,
                pool.fee,
                pool.address,
                sqrt_price_x96=int(pool.sqrt_price_x96),
                liquidity=int(pool.liquidity),
            )
            ledger.mint(pool.token0, address, int(pool.balance0))
            ledger.mint(pool.token1, address, int(pool.balance1))
        book.add_v3_venue(V3Router(v3.router, v3_factory, ledger))

    return book


def load_snapshot(
    source: str | Path | dict[str, Any] | VenueSnapshot,
    settings: Settings | None = None,
) -> DecentralizedExchangeNetwork:
    """Build a ready network from a snapshot file, dict, or model.

    Args:
        source: Path to a JSON file, a parsed dict, or a VenueSnapshot
        settings: Fallbacks for anything the snapshot omits (defaults if None)

    Returns:
        DecentralizedExchangeNetwork with venues wired, routers registered,
        balances minted and pools whitelisted

    Raises:
        pydantic.ValidationError: If the snapshot is malformed
        ValueError: If a pool is declared twice or uses an unsupported fee tier
    """
    if isinstance(source, VenueSnapshot):
        snapshot = source
    elif isinstance(source, dict):
        snapshot = VenueSnapshot.model_validate(source)
    else:
        with open(source) as f:
            snapshot = VenueSnapshot.model_validate(json.load(f))

    settings = settings or Settings()
    fees = snapshot.fees
    ledger = Ledger()
    venues = _build_venues(snapshot, ledger)

    for balance in snapshot.balances:
        ledger.mint(balance.token, balance.holder, int(balance.amount))
    for address in snapshot.rejects_native:
        ledger.reject_native(address)

    extra: dict[str, Any] = {}
    if snapshot.address is not None:
        extra["address"] = snapshot.address

    network = DecentralizedExchangeNetwork(
        weth=snapshot.weth or settings.wrapped_native,
        partner=fees.partner or settings.partner,
        system_fee_receiver=fees.system_fee_receiver or settings.system_fee_receiver,
        partner_fee_receiver=fees.partner_fee_receiver or settings.partner_fee_receiver,
        partner_fee_numerator=(
            fees.partner_fee_numerator
            if fees.partner_fee_numerator is not None
            else settings.partner_fee_numerator
        ),
        owner=snapshot.owner or settings.owner,
        system_fee_numerator=(
            fees.system_fee_numerator
            if fees.system_fee_numerator is not None
            else settings.system_fee_numerator
        ),
        ledger=ledger,
        venues=venues,
        v2_routers=[v.router for v in snapshot.v2_venues if v.registered],
        v3_routers=[v.router for v in snapshot.v3_venues if v.registered],
        supported_pools=snapshot.supported_pools,
        **extra,
    )

    logger.info(
        "snapshot_loaded",
        v2_venues=len(snapshot.v2_venues),
        v3_venues=len(snapshot.v3_venues),
        supported_pools=len(snapshot.supported_pools),
    )
    return network


__all__ = [
    "PairSnapshot",
    "PoolSnapshot",
    "V2VenueSnapshot",
    "V3VenueSnapshot",
    "BalanceSnapshot",
    "FeeSnapshot",
    "VenueSnapshot",
    "load_snapshot",
]
