"""Fee split result type."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FeeSplit:
    """Gross swap input divided into system fee, partner fee and net input.

    system_fee + partner_fee + net_amount_in always equals the gross amount;
    any truncation remainder stays in net_amount_in.
    """

    system_fee: int
    partner_fee: int
    net_amount_in: int

    @property
    def gross_amount_in(self) -> int:
        return self.system_fee + self.partner_fee + self.net_amount_in

    @property
    def total_fee(self) -> int:
        return self.system_fee + self.partner_fee
