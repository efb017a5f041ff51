"""Protocol fee splitting.

Uses SafeInt so a misconfigured fee can never drive the net amount negative
silently: FeeConfig already bounds the numerators, and the subtraction
would raise Underflow if that invariant were ever bypassed.
"""

from __future__ import annotations

from aggregator.constants import FEE_DENOMINATOR
from aggregator.fees.config import FeeConfig
from aggregator.fees.result import FeeSplit
from aggregator.safe_int import S


def split_fee(gross_amount_in: int, config: FeeConfig) -> FeeSplit:
    """Split a gross input into (system fee, partner fee, net input).

    Each fee is truncated independently:
        partner_fee = gross * partner_fee_numerator // 10000
        system_fee = gross * system_fee_numerator // 10000
        net = gross - system_fee - partner_fee

    Args:
        gross_amount_in: Amount sent by the caller, fees included
        config: Fee configuration

    Returns:
        FeeSplit whose three parts sum to gross_amount_in exactly
    """
    gross = S(gross_amount_in)
    partner_fee = gross.mul_div(config.partner_fee_numerator, FEE_DENOMINATOR)
    system_fee = gross.mul_div(config.system_fee_numerator, FEE_DENOMINATOR)
    net_amount_in = gross - system_fee - partner_fee

    return FeeSplit(
        system_fee=system_fee.value,
        partner_fee=partner_fee.value,
        net_amount_in=net_amount_in.value,
    )
