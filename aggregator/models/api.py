"""Pydantic request/response models for the aggregator HTTP API.

Amounts travel as decimal strings; field names are camelCase on the wire.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from aggregator.executor import SwapReceipt
from aggregator.models.types import Address, Uint256
from aggregator.rate_shopper import QuoteResult


class ApiModel(BaseModel):
    model_config = {"populate_by_name": True}


class BestRateRequest(ApiModel):
    token_in: Address = Field(alias="tokenIn")
    token_out: Address = Field(alias="tokenOut")
    amount_in: Uint256 = Field(alias="amountIn")
    fee_tier_hint: int = Field(
        default=3000,
        alias="feeTierHint",
        description="V3 fee tier in pips used to pick each V3 venue's pool",
    )


class BestRateResponse(ApiModel):
    venue: Address
    version: int = Field(description="2 or 3, or 0 when no venue has liquidity")
    amount_out: Uint256 = Field(alias="amountOut")
    pool: Address

    @classmethod
    def from_result(cls, result: QuoteResult) -> BestRateResponse:
        return cls(
            venue=result.best_venue,
            version=int(result.best_version),
            amount_out=str(result.best_amount_out),
            pool=result.best_pool,
        )


class EstimateRequest(ApiModel):
    pool: Address
    token_in: Address = Field(alias="tokenIn")
    amount_in: Uint256 = Field(alias="amountIn")


class EstimateResponse(ApiModel):
    amount_out: Uint256 = Field(alias="amountOut")


class SwapRequest(ApiModel):
    """Native-to-token swap through a whitelisted pool."""

    caller: Address | None = Field(
        default=None,
        description="Payer; must match the X-API-Key identity when given",
    )
    pool: Address
    token_out: Address = Field(alias="tokenOut")
    slippage_tolerance_bps: int = Field(alias="slippageToleranceBps")
    amount_in: Uint256 = Field(alias="amountIn", description="Gross native amount, fees included")


class Interaction(ApiModel):
    target: Address
    call_data: str = Field(alias="callData")


class SwapResponse(ApiModel):
    caller: Address
    pool: Address
    version: int
    token_out: Address = Field(alias="tokenOut")
    amount_in: Uint256 = Field(alias="amountIn")
    net_amount_in: Uint256 = Field(alias="netAmountIn")
    expected_out: Uint256 = Field(alias="expectedOut")
    min_amount_out: Uint256 = Field(alias="minAmountOut")
    amount_out: Uint256 = Field(alias="amountOut")
    system_fee: Uint256 = Field(alias="systemFee")
    partner_fee: Uint256 = Field(alias="partnerFee")
    interaction: Interaction

    @classmethod
    def from_receipt(cls, receipt: SwapReceipt) -> SwapResponse:
        target, call_data = receipt.interaction
        return cls(
            caller=receipt.caller,
            pool=receipt.pool,
            version=int(receipt.version),
            token_out=receipt.token_out,
            amount_in=str(receipt.amount_in),
            net_amount_in=str(receipt.net_amount_in),
            expected_out=str(receipt.expected_out),
            min_amount_out=str(receipt.min_amount_out),
            amount_out=str(receipt.amount_out),
            system_fee=str(receipt.system_fee),
            partner_fee=str(receipt.partner_fee),
            interaction=Interaction(target=target, call_data=call_data),
        )


class RoutersResponse(ApiModel):
    v2_routers: list[Address] = Field(alias="v2Routers")
    v3_routers: list[Address] = Field(alias="v3Routers")


class PoolSupportResponse(ApiModel):
    pool: Address
    supported: bool


class ErrorResponse(ApiModel):
    error: str = Field(description="Stable error code, e.g. 'slippage_exceeded'")
    detail: str


__all__ = [
    "BestRateRequest",
    "BestRateResponse",
    "EstimateRequest",
    "EstimateResponse",
    "SwapRequest",
    "Interaction",
    "SwapResponse",
    "RoutersResponse",
    "PoolSupportResponse",
    "ErrorResponse",
]
