"""Protocol fee module.

Usage:
    from aggregator.fees import FeeConfig, split_fee

    config = FeeConfig(partner=..., system_fee_receiver=..., partner_fee_receiver=...)
    split = split_fee(10**18, config)
    assert split.gross_amount_in == 10**18
"""

from aggregator.fees.calculator import split_fee
from aggregator.fees.config import FeeConfig
from aggregator.fees.result import FeeSplit

__all__ = ["FeeConfig", "FeeSplit", "split_fee"]
