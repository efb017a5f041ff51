"""SwapRouter02 calldata encoding for UniswapV3 swaps."""

from __future__ import annotations

from eth_abi import encode  # type: ignore[attr-defined]

from aggregator.models.types import normalize_address

# exactInputSingle((address,address,uint24,address,uint256,uint256,uint160))
EXACT_INPUT_SINGLE_SELECTOR = bytes.fromhex("04e45aaf")


def encode_exact_input_single(
    router: str,
    token_in: str,
    token_out: str,
    fee: int,
    recipient: str,
    amount_in: int,
    amount_out_minimum: int,
    sqrt_price_limit_x96: int = 0,
) -> tuple[str, str]:
    """Encode SwapRouter02.exactInputSingle call.

    Args:
        router: Router the call is addressed to
        token_in: Input token address
        token_out: Output token address
        fee: Pool fee tier (e.g., 3000 for 0.3%)
        recipient: Address to receive output tokens
        amount_in: Amount of input tokens
        amount_out_minimum: Minimum output amount (slippage protection)
        sqrt_price_limit_x96: Price limit (0 = no limit)

    Returns:
        Tuple of (router_address, calldata_hex)
    """
    token_in_bytes = bytes.fromhex(normalize_address(token_in)[2:])
    token_out_bytes = bytes.fromhex(normalize_address(token_out)[2:])
    recipient_bytes = bytes.fromhex(normalize_address(recipient)[2:])

    encoded_params = encode(
        ["(address,address,uint24,address,uint256,uint256,uint160)"],
        [
            (
                token_in_bytes,
                token_out_bytes,
                fee,
                recipient_bytes,
                amount_in,
                amount_out_minimum,
                sqrt_price_limit_x96,
            )
        ],
    )

    calldata = EXACT_INPUT_SINGLE_SELECTOR + encoded_params
    return normalize_address(router), "0x" + calldata.hex()


__all__ = ["EXACT_INPUT_SINGLE_SELECTOR", "encode_exact_input_single"]
