# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Medicare premiums with income-related surcharges (IRMAA).

The bracket is chosen from modified adjusted gross income; the resulting
monthly premium is annualised and projected forward with medical inflation
from the table's reference year.
"""

from dataclasses import dataclass
from typing import Sequence

from ..limits import (
    IRMAA_BRACKETS,
    MEDICAL_INFLATION_HISTORICAL,
    MEDICARE_BASE_PREMIUM,
    MEDICARE_REFERENCE_YEAR,
    PremiumBracket,
)


@dataclass(frozen=True)
class PremiumQuote:
    """Annual Medicare cost for one simulated year.

    Attributes:
        bracket: Surcharge tier the income fell into
        monthly_premium: Base premium plus surcharge, in reference-year dollars
        annual_cost: Monthly premium x 12, inflated to the simulated year
    """
    bracket: PremiumBracket
    monthly_premium: float
    annual_cost: float

    @property
    def surcharge_applied(self) -> bool:
        return self.bracket.monthly_surcharge > 0


def modified_income(benefit_income: float, pension_income: float,
                    min_distribution: float, investment_income: float) -> float:
    """MAGI used for the surcharge lookup (85% of benefits are included)."""
    return 0.85 * benefit_income + pension_income + min_distribution + investment_income


def find_bracket(magi: float, married: bool,
                 brackets: Sequence[PremiumBracket] = IRMAA_BRACKETS) -> PremiumBracket:
    """Highest bracket whose lower bound does not exceed the income.

    Joint filers use thresholds double those of single filers.
    """
    matched = brackets[0]
    for bracket in brackets:
        if magi >= bracket.lower_bound(married):
            matched = bracket
    return matched


def annual_premium(magi: float, married: bool, calendar_year: int,
                   medical_inflation: float = MEDICAL_INFLATION_HISTORICAL,
                   reference_year: int = MEDICARE_REFERENCE_YEAR,
                   base_premium: float = MEDICARE_BASE_PREMIUM,
                   brackets: Sequence[PremiumBracket] = IRMAA_BRACKETS) -> PremiumQuote:
    """Quote the Medicare premium for a simulated calendar year.

    Args:
        magi: Modified adjusted gross income for the year
        married: Whether joint thresholds apply
        calendar_year: Year being simulated
        medical_inflation: Annual growth of premiums
        reference_year: Year the premium table is denominated in

    Returns:
        PremiumQuote with the matched bracket and the inflated annual cost
    """
    bracket = find_bracket(magi, married, brackets)
    monthly = base_premium + bracket.monthly_surcharge
    years = max(0, calendar_year - reference_year)
    annual = monthly * 12 * (1 + medical_inflation) ** years
    return PremiumQuote(bracket=bracket, monthly_premium=monthly, annual_cost=annual)
