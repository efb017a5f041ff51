"""Read-only venues backed by live contract calls.

Requires the optional ``rpc`` extra (web3). These venues can quote and
resolve pools on a real chain; they cannot execute swaps, since signing
transactions is a wallet concern.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import structlog

from aggregator.amm.uniswap_v2 import UniswapV2Pool
from aggregator.amm.uniswap_v3 import UniswapV3Pool
from aggregator.constants import ZERO_ADDRESS
from aggregator.errors import VenueCallFailed
from aggregator.models.types import normalize_address

logger = structlog.get_logger()


def _fn(name: str, inputs: list[str], outputs: list[str]) -> dict[str, Any]:
    return {
        "name": name,
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": f"arg{i}", "type": t} for i, t in enumerate(inputs)],
        "outputs": [{"name": f"out{i}", "type": t} for i, t in enumerate(outputs)],
    }


# Minimal ABIs, just the view functions we need
ROUTER_ABI = [_fn("factory", [], ["address"])]
V2_FACTORY_ABI = [_fn("getPair", ["address", "address"], ["address"])]
V2_PAIR_ABI = [
    _fn("token0", [], ["address"]),
    _fn("token1", [], ["address"]),
    _fn("getReserves", [], ["uint112", "uint112", "uint32"]),
]
V3_FACTORY_ABI = [_fn("getPool", ["address", "address", "uint24"], ["address"])]
V3_POOL_ABI = [
    _fn("token0", [], ["address"]),
    _fn("token1", [], ["address"]),
    _fn("fee", [], ["uint24"]),
    _fn("liquidity", [], ["uint128"]),
    _fn("slot0", [], ["uint160", "int24", "uint16", "uint16", "uint16", "uint8", "bool"]),
]


def _connect(web3_provider: Any) -> Any:
    """Build a Web3 instance from an RPC URL or pass an existing one through."""
    try:
        from web3 import Web3
    except ImportError as e:
        raise ImportError(
            "web3 package required for RPC venues. Install with: pip install dex-aggregator[rpc]"
        ) from e

    if isinstance(web3_provider, str):
        return Web3(Web3.HTTPProvider(web3_provider))
    return web3_provider


def _checksum(address: str) -> str:
    from web3 import Web3

    return Web3.to_checksum_address(address)


class _Web3Contracts:
    """Shared contract-call plumbing for the RPC venues."""

    def __init__(self, w3: Any) -> None:
        self.w3 = w3

    def contract(self, address: str, abi: list[dict[str, Any]]) -> Any:
        return self.w3.eth.contract(address=_checksum(address), abi=abi)

    def call(self, address: str, abi: list[dict[str, Any]], fn: str, *args: Any) -> Any:
        """Call a view function, wrapping any RPC or decoding error."""
        try:
            return getattr(self.contract(address, abi).functions, fn)(*args).call()
        except Exception as e:
            logger.warning("venue_rpc_call_failed", contract=address, function=fn, error=str(e))
            raise VenueCallFailed(f"{fn} on {address} failed: {e}") from e


class Web3V2Factory:
    def __init__(self, rpc: _Web3Contracts, address: str) -> None:
        self._rpc = rpc
        self.address = normalize_address(address)

    def get_pair(self, token_a: str, token_b: str) -> str:
        pair = self._rpc.call(
            self.address, V2_FACTORY_ABI, "getPair", _checksum(token_a), _checksum(token_b)
        )
        return normalize_address(pair)


class Web3V3Factory:
    def __init__(self, rpc: _Web3Contracts, address: str) -> None:
        self._rpc = rpc
        self.address = normalize_address(address)

    def get_pool(self, token_a: str, token_b: str, fee: int) -> str:
        pool = self._rpc.call(
            self.address, V3_FACTORY_ABI, "getPool", _checksum(token_a), _checksum(token_b), fee
        )
        return normalize_address(pool)


class Web3V2Venue:
    """UniswapV2-style router read through RPC.

    The factory address is read from the router's ``factory()`` once, at
    construction.
    """

    def __init__(self, web3_provider: Any, router_address: str) -> None:
        self._rpc = _Web3Contracts(_connect(web3_provider))
        self.address = normalize_address(router_address)
        factory = self._rpc.call(self.address, ROUTER_ABI, "factory")
        self.factory = Web3V2Factory(self._rpc, factory)

    def read_pair(self, pair: str) -> UniswapV2Pool | None:
        pair_norm = normalize_address(pair)
        if pair_norm == ZERO_ADDRESS:
            return None
        token0 = normalize_address(self._rpc.call(pair_norm, V2_PAIR_ABI, "token0"))
        token1 = normalize_address(self._rpc.call(pair_norm, V2_PAIR_ABI, "token1"))
        # Another factory's pair with the same interface is not ours
        if self.factory.get_pair(token0, token1) != pair_norm:
            return None
        reserve0, reserve1, _ = self._rpc.call(pair_norm, V2_PAIR_ABI, "getReserves")
        return UniswapV2Pool(
            address=pair_norm,
            token0=token0,
            token1=token1,
            reserve0=int(reserve0),
            reserve1=int(reserve1),
        )

    def swap_exact_input(
        self,
        pool: str,
        token_in: str,
        amount_in: int,
        amount_out_min: int,
        payer: str,
        recipient: str,
    ) -> int:
        raise VenueCallFailed(f"RPC venue {self.address} is read-only; swaps need a signer")


class Web3V3Venue:
    """UniswapV3-style router read through RPC."""

    def __init__(
        self,
        web3_provider: Any,
        router_address: str,
        factory_address: str | None = None,
    ) -> None:
        self._rpc = _Web3Contracts(_connect(web3_provider))
        self.address = normalize_address(router_address)
        # SwapRouter02 exposes factory(); older deployments may need it passed in
        if factory_address is None:
            factory_address = self._rpc.call(self.address, ROUTER_ABI, "factory")
        self.factory = Web3V3Factory(self._rpc, factory_address)

    def read_pool(self, pool: str) -> UniswapV3Pool | None:
        pool_norm = normalize_address(pool)
        if pool_norm == ZERO_ADDRESS:
            return None
        token0 = normalize_address(self._rpc.call(pool_norm, V3_POOL_ABI, "token0"))
        token1 = normalize_address(self._rpc.call(pool_norm, V3_POOL_ABI, "token1"))
        fee = int(self._rpc.call(pool_norm, V3_POOL_ABI, "fee"))
        if self.factory.get_pool(token0, token1, fee) != pool_norm:
            return None
        slot0 = self._rpc.call(pool_norm, V3_POOL_ABI, "slot0")
        liquidity = self._rpc.call(pool_norm, V3_POOL_ABI, "liquidity")
        return UniswapV3Pool(
            address=pool_norm,
            token0=token0,
            token1=token1,
            fee=fee,
            sqrt_price_x96=int(slot0[0]),
            liquidity=int(liquidity),
        )

    def swap_exact_input(
        self,
        pool: str,
        token_in: str,
        amount_in: int,
        amount_out_min: int,
        payer: str,
        recipient: str,
    ) -> int:
        raise VenueCallFailed(f"RPC venue {self.address} is read-only; swaps need a signer")


def connect_venues(
    web3_provider: Any,
    v2_routers: Iterable[str] = (),
    v3_routers: Iterable[str] = (),
) -> tuple[list[Web3V2Venue], list[Web3V3Venue]]:
    """Connect once and build a read-only venue per router.

    Args:
        web3_provider: RPC URL or an existing Web3 instance
        v2_routers: UniswapV2-style router addresses
        v3_routers: UniswapV3-style router addresses (factory read from the router)

    Raises:
        ImportError: If web3 is not installed
        VenueCallFailed: If a router does not answer factory()
    """
    w3 = _connect(web3_provider)
    v2 = [Web3V2Venue(w3, router) for router in v2_routers]
    v3 = [Web3V3Venue(w3, router) for router in v3_routers]
    logger.info("rpc_venues_connected", v2_venues=len(v2), v3_venues=len(v3))
    return v2, v3


__all__ = [
    "connect_venues",
    "Web3V2Venue",
    "Web3V3Venue",
    "Web3V2Factory",
    "Web3V3Factory",
    "ROUTER_ABI",
    "V2_FACTORY_ABI",
    "V2_PAIR_ABI",
    "V3_FACTORY_ABI",
    "V3_POOL_ABI",
]
