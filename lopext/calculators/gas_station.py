"""
Gas station cost model.

A taker fronts the gas for a maker who holds no native token, borrows WETH
with a flash loan and is repaid out of the fill. The maker's side of the
trade therefore has to cover the gas reimbursement, the flash-loan premium
and the taker's fee.
"""

from dataclasses import dataclass

from ..constants import BPS_DENOMINATOR, FLASH_LOAN_FEE_BPS
from ..exceptions import ConfigurationError


@dataclass(frozen=True)
class GasCostBreakdown:
    gas_reimbursement: int
    flash_loan_fee: int
    taker_fee: int

    @property
    def total(self) -> int:
        return self.gas_reimbursement + self.flash_loan_fee + self.taker_fee


@dataclass(frozen=True)
class GasStationCosts:
    """
    Deployment parameters of a gas station.

    Args:
        taker_fee_bps: Taker fee in basis points, at most 10000
        gas_stipend: Gas units reimbursed to the taker, non-zero
    """
    taker_fee_bps: int
    gas_stipend: int
    flash_loan_fee_bps: int = FLASH_LOAN_FEE_BPS

    def __post_init__(self):
        if self.taker_fee_bps > BPS_DENOMINATOR or self.taker_fee_bps < 0:
            raise ConfigurationError("GasStation: fee too high")
        if self.gas_stipend <= 0:
            raise ConfigurationError("GasStation: invalid gas stipend")

    def gas_reimbursement(self, gas_price: int) -> int:
        return self.gas_stipend * gas_price

    def flash_loan_fee(self, amount: int) -> int:
        return amount * self.flash_loan_fee_bps // BPS_DENOMINATOR

    def taker_fee(self, amount: int) -> int:
        return amount * self.taker_fee_bps // BPS_DENOMINATOR

    def calculate(self, flash_loan_amount: int, gas_price: int) -> GasCostBreakdown:
        return GasCostBreakdown(
            gas_reimbursement=self.gas_reimbursement(gas_price),
            flash_loan_fee=self.flash_loan_fee(flash_loan_amount),
            taker_fee=self.taker_fee(flash_loan_amount),
        )
