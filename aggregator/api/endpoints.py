"""API endpoints for the aggregator."""

import asyncio
from collections.abc import Mapping
from functools import partial
from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, Header
from fastapi import Path as PathParam

from aggregator.chain.snapshot import load_snapshot
from aggregator.chain.web3_venues import connect_venues
from aggregator.config import Settings
from aggregator.errors import AggregatorError, Unauthenticated, Unauthorized
from aggregator.models.api import (
    BestRateRequest,
    BestRateResponse,
    EstimateRequest,
    EstimateResponse,
    PoolSupportResponse,
    RoutersResponse,
    SwapRequest,
    SwapResponse,
)
from aggregator.models.types import normalize_address
from aggregator.network import DecentralizedExchangeNetwork

logger = structlog.get_logger()

router = APIRouter(prefix="/v1")

_default_settings: Settings | None = None
_default_network: DecentralizedExchangeNetwork | None = None


def build_network(settings: Settings, web3_provider: Any = None) -> DecentralizedExchangeNetwork:
    """Network from the configured snapshot (or an empty one), plus RPC venues.

    RPC routers are wired, registered and their configured pools whitelisted
    on behalf of the configured owner.

    Args:
        settings: Deployment settings
        web3_provider: Web3 instance to use instead of settings.rpc_url

    Raises:
        ValueError: If RPC routers are configured without an RPC endpoint
    """
    if settings.snapshot_path:
        network = load_snapshot(settings.snapshot_path, settings)
    else:
        network = DecentralizedExchangeNetwork(
            weth=settings.wrapped_native,
            partner=settings.partner,
            system_fee_receiver=settings.system_fee_receiver,
            partner_fee_receiver=settings.partner_fee_receiver,
            partner_fee_numerator=settings.partner_fee_numerator,
            owner=settings.owner,
            system_fee_numerator=settings.system_fee_numerator,
        )

    if settings.rpc_v2_routers or settings.rpc_v3_routers:
        provider = web3_provider if web3_provider is not None else settings.rpc_url
        if provider is None:
            raise ValueError("AGGREGATOR_RPC_URL is required when RPC routers are configured")
        v2_venues, v3_venues = connect_venues(
            provider, settings.rpc_v2_routers, settings.rpc_v3_routers
        )
        for v2 in v2_venues:
            network.add_venue(v2)
            network.add_v2_router(network.owner, v2.address)
        for v3 in v3_venues:
            network.add_venue(v3)
            network.add_v3_router(network.owner, v3.address)

    for pool in settings.supported_pools:
        if not network.is_pool_supported(pool):
            network.add_supported_pool(network.owner, pool)

    return network


def get_settings() -> Settings:
    """Process-wide settings, read from the environment on first use."""
    global _default_settings
    if _default_settings is None:
        _default_settings = Settings.from_env()
    return _default_settings


def get_default_network() -> DecentralizedExchangeNetwork:
    """Process-wide network, built from the environment on first use."""
    global _default_network
    if _default_network is None:
        _default_network = build_network(get_settings())
    return _default_network


def get_network() -> DecentralizedExchangeNetwork:
    """Dependency provider for the network instance.

    Override this in tests to inject a prepared network:
        app.dependency_overrides[get_network] = lambda: network

    Returns:
        The network every endpoint reads from and swaps against.
    """
    return get_default_network()


def get_api_keys() -> Mapping[str, str]:
    """Dependency provider for the API key -> caller address map."""
    return get_settings().api_keys


def get_caller(
    x_api_key: Annotated[str | None, Header()] = None,
    api_keys: Mapping[str, str] = Depends(get_api_keys),
) -> str:
    """Identity authenticated by the X-API-Key header.

    Raises:
        Unauthenticated: If the header is missing or maps to no caller
    """
    caller = api_keys.get(x_api_key) if x_api_key else None
    if caller is None:
        raise Unauthenticated("A valid X-API-Key header is required")
    return normalize_address(caller)


@router.get("/routers")
async def list_routers(
    network: DecentralizedExchangeNetwork = Depends(get_network),
) -> RoutersResponse:
    """Registered V2 and V3 routers."""
    return RoutersResponse(
        v2_routers=network.get_supported_v2_routers(),
        v3_routers=network.get_supported_v3_routers(),
    )


@router.get("/pools/{address}/supported")
async def pool_supported(
    address: Annotated[str, PathParam(pattern=r"^0x[a-fA-F0-9]{40}$")],
    network: DecentralizedExchangeNetwork = Depends(get_network),
) -> PoolSupportResponse:
    return PoolSupportResponse(pool=address.lower(), supported=network.is_pool_supported(address))


@router.post("/quote/best-rate")
async def best_rate(
    request: BestRateRequest,
    network: DecentralizedExchangeNetwork = Depends(get_network),
) -> BestRateResponse:
    """Best exact-input rate across every registered venue.

    A pair nobody has liquidity for is not an error: the response carries
    version 0, amount 0 and the zero address.
    """
    result = network.get_best_rate(
        request.token_in,
        request.token_out,
        int(request.amount_in),
        request.fee_tier_hint,
    )
    return BestRateResponse.from_result(result)


@router.post("/quote/estimate")
async def estimate(
    request: EstimateRequest,
    network: DecentralizedExchangeNetwork = Depends(get_network),
) -> EstimateResponse:
    amount_out = network.estimate_amount_out(request.pool, request.token_in, int(request.amount_in))
    return EstimateResponse(amount_out=str(amount_out))


@router.post("/swap")
async def swap(
    request: SwapRequest,
    caller: str = Depends(get_caller),
    network: DecentralizedExchangeNetwork = Depends(get_network),
) -> SwapResponse:
    """Swap native for a token through a whitelisted pool.

    The payer is the identity behind the X-API-Key header. A body
    `caller`, when given, must match it.

    The swap runs in the default executor so the event loop keeps serving
    quotes; the network's lock serializes concurrent swaps.

    Error Handling:
        - Missing or unknown API key: 401
        - Body caller differs from the authenticated one: 403
        - Invalid request schema: 422 Validation Error (Pydantic)
        - Domain failure (slippage, unsupported pool, ...): 4xx with
          {"error": <code>, "detail": <message>}, see main.py
    """
    if request.caller is not None and normalize_address(request.caller) != caller:
        raise Unauthorized(f"API key is not authorized to spend for {request.caller}")

    logger.info(
        "received_swap",
        caller=caller,
        pool=request.pool,
        token_out=request.token_out,
        amount_in=request.amount_in,
        slippage_tolerance_bps=request.slippage_tolerance_bps,
    )

    loop = asyncio.get_event_loop()
    try:
        receipt = await loop.run_in_executor(
            None,
            partial(
                network.swap_native_for_token,
                caller,
                request.pool,
                request.token_out,
                request.slippage_tolerance_bps,
                int(request.amount_in),
            ),
        )
    except AggregatorError:
        raise
    except Exception:
        logger.exception("swap_error", caller=caller, pool=request.pool)
        raise

    logger.info(
        "returning_swap",
        caller=receipt.caller,
        pool=receipt.pool,
        amount_out=receipt.amount_out,
    )
    return SwapResponse.from_receipt(receipt)
