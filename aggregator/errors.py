"""Aggregator error classes.

Every failure of a mutating operation aborts the whole call. Each error
carries a stable ``code`` used by the HTTP layer.
"""


class AggregatorError(Exception):
    """Base error for aggregator operations."""

    code = "aggregator_error"


class InvalidAddress(AggregatorError):
    """Address is malformed or the zero address where one is required."""

    code = "invalid_address"


class AlreadyRegistered(AggregatorError):
    """Router or pool is already present in the registry."""

    code = "already_registered"


class IndexOutOfRange(AggregatorError):
    """Router index is outside [0, length)."""

    code = "index_out_of_range"


class Unauthenticated(AggregatorError):
    """Request carries no API key, or one that maps to no caller."""

    code = "unauthenticated"


class Unauthorized(AggregatorError):
    """Caller may not perform the operation (not the owner, or not the payer)."""

    code = "unauthorized"


class ImmutableFeeError(Unauthorized):
    """The system fee numerator is fixed at construction."""

    code = "immutable_fee"


class UnsupportedPool(AggregatorError):
    """Pool is not whitelisted or not known to any venue."""

    code = "unsupported_pool"


class ZeroAmount(AggregatorError):
    """Swap input amount must be positive."""

    code = "zero_amount"


class InvalidSlippage(AggregatorError):
    """Slippage tolerance must be within [0, 10000] basis points."""

    code = "invalid_slippage"


class InvalidFeeConfig(AggregatorError):
    """Fee numerators are negative or sum to more than the denominator."""

    code = "invalid_fee_config"


class SlippageExceeded(AggregatorError):
    """Venue output fell below the caller's minimum."""

    code = "slippage_exceeded"


class InsufficientLiquidity(AggregatorError):
    """No venue quoted a positive output.

    Quoting paths never raise this; they return zero instead.
    """

    code = "insufficient_liquidity"


class TransferFailed(AggregatorError):
    """Token or native transfer could not be applied."""

    code = "transfer_failed"


class FeeTransferFailed(TransferFailed):
    """Payment to the system or partner fee receiver failed."""

    code = "fee_transfer_failed"


class VenueCallFailed(AggregatorError):
    """External venue read or swap call failed."""

    code = "venue_call_failed"


__all__ = [
    "AggregatorError",
    "InvalidAddress",
    "AlreadyRegistered",
    "IndexOutOfRange",
    "Unauthenticated",
    "Unauthorized",
    "ImmutableFeeError",
    "UnsupportedPool",
    "ZeroAmount",
    "InvalidSlippage",
    "InvalidFeeConfig",
    "SlippageExceeded",
    "InsufficientLiquidity",
    "TransferFailed",
    "FeeTransferFailed",
    "VenueCallFailed",
]
