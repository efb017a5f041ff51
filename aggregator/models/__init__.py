"""Pydantic models and shared address/amount types."""

from aggregator.models.types import (
    UINT256_MAX,
    Address,
    Uint256,
    is_valid_address,
    normalize_address,
    sort_tokens,
)

__all__ = [
    "UINT256_MAX",
    "Address",
    "Uint256",
    "is_valid_address",
    "normalize_address",
    "sort_tokens",
]
