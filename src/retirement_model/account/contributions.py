# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Scheduled contributions and the IRS ceilings that cap them.

Contribution headroom is tracked per account category within a simulated
year: two 401k flows share the employer-plan limit, an IRA and a Roth IRA
share the IRA limit, and brokerage flows are never capped.
"""

from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from ..limits import (
    CONTRIBUTION_LIMITS,
    EMPLOYER_PLAN,
    HSA,
    HSA_FAMILY_BASE,
    IRA,
    UNLIMITED,
    ContributionLimit,
)


def classify_account(account_type: str) -> str:
    """Map a free-form account type onto a contribution-limit category.

    Args:
        account_type: e.g. "401k", "Roth 401(k)", "Roth IRA", "HSA", "Brokerage"

    Returns:
        One of EMPLOYER_PLAN, IRA, HSA or UNLIMITED
    """
    normalized = account_type.lower().strip()

    if any(tag in normalized for tag in ('401', '403', '457', 'simple', 'tsp')):
        return EMPLOYER_PLAN
    if 'hsa' in normalized or 'health' in normalized:
        return HSA
    if 'sep' in normalized:
        return UNLIMITED
    if 'ira' in normalized or normalized == 'roth':
        return IRA
    return UNLIMITED


@dataclass(frozen=True)
class ScheduledContribution:
    """A recurring contribution active over an age range.

    Attributes:
        account_type: Account the money goes to (drives the limit category)
        annual_amount: Requested amount per year in today's dollars
        start_age: First age the contribution is made (inclusive)
        end_age: Last age the contribution is made (inclusive)
        income_linked: Whether the amount follows household income
        income_link_percentage: Share of annual income contributed when linked
    """
    account_type: str
    annual_amount: float
    start_age: int
    end_age: int
    income_linked: bool = False
    income_link_percentage: Optional[float] = None

    def is_active(self, age: int) -> bool:
        return self.start_age <= age <= self.end_age

    def requested_amount(self, annual_income: float, wage_index: float) -> float:
        """Amount requested this year before any ceiling is applied.

        Args:
            annual_income: Household income in today's dollars
            wage_index: Growth of income since the simulation started

        Returns:
            Requested contribution in simulated-year dollars
        """
        if not self.income_linked:
            return self.annual_amount
        if self.income_link_percentage is not None and annual_income > 0:
            return annual_income * self.income_link_percentage / 100 * wage_index
        return self.annual_amount * wage_index


class ContributionLedger:
    """Tracks how much headroom each account category has left this year."""

    def __init__(self, limits: Mapping[str, ContributionLimit] = CONTRIBUTION_LIMITS,
                 hsa_family_coverage: bool = False):
        """Initialize the ledger.

        Args:
            limits: Ceiling per category; categories missing here are uncapped
            hsa_family_coverage: Use the family HSA base limit
        """
        self.limits = limits
        self.hsa_family_coverage = hsa_family_coverage
        self.contributions_this_year: Dict[str, float] = {}

    def annual_limit(self, category: str, age: int) -> Optional[float]:
        """Ceiling for a category at an age, or None when uncapped."""
        limit = self.limits.get(category)
        if limit is None:
            return None
        if category == HSA and self.hsa_family_coverage:
            limit = ContributionLimit(base=HSA_FAMILY_BASE, catch_up=limit.catch_up,
                                      catch_up_age=limit.catch_up_age)
        return limit.max_contribution(age)

    def contribute(self, account_type: str, amount: float, age: int) -> float:
        """Record a contribution, capped at the category's remaining headroom.

        Args:
            account_type: Account type of the contribution
            amount: Requested amount
            age: Contributor's age this year

        Returns:
            Amount actually contributed
        """
        if amount <= 0:
            return 0.0

        category = classify_account(account_type)
        limit = self.annual_limit(category, age)
        used = self.contributions_this_year.get(category, 0.0)

        if limit is None:
            actual = amount
        else:
            actual = max(0.0, min(amount, limit - used))

        self.contributions_this_year[category] = used + actual
        return actual

    def reset_annual_contributions(self):
        """Reset annual contribution tracking (called at year end)"""
        self.contributions_this_year.clear()
