"""Fee configuration for the aggregator."""

from __future__ import annotations

from dataclasses import dataclass

from aggregator.constants import (
    DEFAULT_PARTNER_FEE_NUMERATOR,
    DEFAULT_SYSTEM_FEE_NUMERATOR,
    FEE_DENOMINATOR,
    ZERO_ADDRESS,
)
from aggregator.errors import InvalidAddress, InvalidFeeConfig
from aggregator.models.types import is_valid_address, normalize_address


@dataclass(frozen=True)
class FeeConfig:
    """Protocol fee settings.

    Both numerators are basis points over FEE_DENOMINATOR (10000). Their sum
    never exceeds the denominator, so the net swap input is never negative.
    The system numerator is a deployment constant; the partner numerator and
    the four addresses may be replaced by the owner.

    Attributes:
        partner: Partner identity credited with the integration
        system_fee_receiver: Receives the system share of every swap
        partner_fee_receiver: Receives the partner share of every swap
        partner_fee_numerator: Partner fee in bps (50 = 0.5%)
        system_fee_numerator: System fee in bps
    """

    partner: str
    system_fee_receiver: str
    partner_fee_receiver: str
    partner_fee_numerator: int = DEFAULT_PARTNER_FEE_NUMERATOR
    system_fee_numerator: int = DEFAULT_SYSTEM_FEE_NUMERATOR

    def __post_init__(self) -> None:
        for name in ("partner", "system_fee_receiver", "partner_fee_receiver"):
            value = getattr(self, name)
            if not is_valid_address(value) or normalize_address(value) == ZERO_ADDRESS:
                raise InvalidAddress(f"{name} must be a non-zero address, got {value!r}")
            object.__setattr__(self, name, normalize_address(value))

        if self.partner_fee_numerator < 0 or self.system_fee_numerator < 0:
            raise InvalidFeeConfig(
                f"Fee numerators must be non-negative: partner={self.partner_fee_numerator}, "
                f"system={self.system_fee_numerator}"
            )
        if self.total_fee_numerator > FEE_DENOMINATOR:
            raise InvalidFeeConfig(
                f"Total fee {self.total_fee_numerator} bps exceeds {FEE_DENOMINATOR}"
            )

    @property
    def total_fee_numerator(self) -> int:
        return self.partner_fee_numerator + self.system_fee_numerator
