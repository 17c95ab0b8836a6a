# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Mortgage amortization, home appreciation and one-time relocation.

`MortgageState` is the mutable per-trial copy of the household's mortgage;
the functions here advance it by one simulated year or apply a relocation.
"""

import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_APPRECIATION_RATE = 0.03


def amortization_payment(principal: float, annual_rate: float, term_months: int) -> float:
    """Level monthly payment that retires a loan over its term.

    Args:
        principal: Amount borrowed
        annual_rate: Nominal annual interest rate as a decimal
        term_months: Number of monthly payments

    Returns:
        Monthly payment. Zero-rate loans are repaid straight-line; a zero
        term or principal yields no payment.
    """
    if principal <= 0 or term_months <= 0:
        return 0.0
    monthly_rate = annual_rate / 12
    if monthly_rate == 0:
        return principal / term_months
    return principal * monthly_rate / (1 - (1 + monthly_rate) ** -term_months)


@dataclass
class MortgageState:
    """Per-trial mortgage and home value.

    Attributes:
        balance: Remaining principal
        annual_rate: Nominal annual rate as a decimal
        monthly_payment: Scheduled monthly payment
        home_value: Current appraised value of the home
        appreciation_rate: Annual growth of the home value
    """
    balance: float
    annual_rate: float
    monthly_payment: float
    home_value: float
    appreciation_rate: float = DEFAULT_APPRECIATION_RATE

    @property
    def equity(self) -> float:
        return self.home_value - self.balance

    def amortize_year(self) -> float:
        """Apply twelve monthly payments and one year of appreciation.

        Returns:
            Principal repaid during the year
        """
        monthly_rate = self.annual_rate / 12
        repaid = 0.0
        for _ in range(12):
            if self.balance <= 0:
                break
            interest = self.balance * monthly_rate
            principal = max(0.0, min(self.monthly_payment - interest, self.balance))
            self.balance -= principal
            repaid += principal
        if self.balance < 1e-9:
            self.balance = 0.0
        self.home_value *= 1 + self.appreciation_rate
        return repaid


@dataclass(frozen=True)
class RelocationPlan:
    """A one-time sale of the current home and purchase of a new one.

    Attributes:
        age: Age at which the move happens
        new_purchase_price: Price of the new home
        new_mortgage_amount: Amount borrowed for the new home
        new_interest_rate: Annual rate on the new mortgage
        new_term_months: Term of the new mortgage
        sale_price: Sale price of the current home; current value when None
    """
    age: int
    new_purchase_price: float
    new_mortgage_amount: float = 0.0
    new_interest_rate: float = 0.0
    new_term_months: int = 360
    sale_price: Optional[float] = None


def relocate(state: MortgageState, plan: RelocationPlan) -> float:
    """Sell the current home, buy the new one and reset the mortgage.

    Args:
        state: Mortgage state to mutate in place
        plan: Relocation details

    Returns:
        Net cash released to (positive) or drawn from (negative) the portfolio.
        A loan with no term cannot be repaid, so the purchase is then paid
        entirely in cash.
    """
    borrowed = max(0.0, plan.new_mortgage_amount) if plan.new_term_months > 0 else 0.0

    sale_price = plan.sale_price if plan.sale_price is not None else state.home_value
    sale_proceeds = sale_price - state.balance
    down_payment = plan.new_purchase_price - borrowed
    net_cash = sale_proceeds - down_payment

    state.balance = borrowed
    state.annual_rate = plan.new_interest_rate
    state.monthly_payment = amortization_payment(
        borrowed, plan.new_interest_rate, plan.new_term_months
    )
    state.home_value = plan.new_purchase_price

    logger.debug("Relocation at age %s released %.2f", plan.age, net_cash)
    return net_cash
