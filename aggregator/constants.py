"""Protocol constants for the aggregator.

Centralizes well-known addresses and fee parameters.
"""

from aggregator.models.types import is_valid_address

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Ledger key for the chain's native asset (balances held outside any token contract)
NATIVE = ZERO_ADDRESS

# Basis-point denominator for protocol fees and slippage tolerance
FEE_DENOMINATOR = 10_000

# Defaults when not configured. System fee is a deployment constant.
DEFAULT_SYSTEM_FEE_NUMERATOR = 25  # 0.25%
DEFAULT_PARTNER_FEE_NUMERATOR = 50  # 0.5%


def _validate_token_address(name: str, address: str) -> str:
    """Validate and return a token address.

    Raises:
        ValueError: If the address is invalid
    """
    if not is_valid_address(address):
        raise ValueError(f"Invalid {name} address: {address} (must be 0x + 40 hex chars)")
    return address


# Wrapped native token on Base (lowercase for consistency)
WETH_BASE = _validate_token_address("WETH", "0x4200000000000000000000000000000000000006")

# Address the aggregator holds in-flight balances under when none is configured
DEFAULT_NETWORK_ADDRESS = "0xdec0000000000000000000000000000000000001"
