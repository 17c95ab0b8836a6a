# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Social Security claiming rules.

Pure functions for the claiming adjustment (early reduction / delayed credit),
the annual benefit paid to one member, and survivor resolution for a couple.
"""

from ..limits import DELAYED_CREDIT_PER_YEAR, EARLY_REDUCTION_FIRST_MONTHS


def claiming_adjustment(claiming_age: float, full_retirement_age: float) -> float:
    """Factor applied to the primary insurance amount for a claiming age.

    Before full retirement age the benefit is reduced by 5/9 of 1% per month
    for the first 36 months and 5/12 of 1% per month beyond that. After full
    retirement age it grows by 8% per year of delay.

    Args:
        claiming_age: Age benefits start
        full_retirement_age: Age at which the unadjusted amount is paid

    Returns:
        Multiplier for the monthly benefit (1.0 at full retirement age)
    """
    months = (claiming_age - full_retirement_age) * 12

    if months >= 0:
        return 1 + (months / 12) * DELAYED_CREDIT_PER_YEAR

    months_early = -months
    first_months = min(months_early, EARLY_REDUCTION_FIRST_MONTHS)
    extra_months = max(0, months_early - EARLY_REDUCTION_FIRST_MONTHS)
    first_reduction = first_months * 5 / 9 / 100
    extra_reduction = extra_months * 5 / 12 / 100
    return 1 - (first_reduction + extra_reduction)


def annual_benefit(insurance_amount: float, claiming_age: float,
                   full_retirement_age: float, age: float,
                   cola_factor: float = 1.0) -> float:
    """Annual benefit one member would receive at a given age.

    Args:
        insurance_amount: Monthly benefit at full retirement age (today's dollars)
        claiming_age: Age the member claims
        full_retirement_age: Member's full retirement age
        age: Member's age in the simulated year
        cola_factor: Cumulative cost-of-living factor since the simulation start

    Returns:
        Annual benefit, or 0 if the member has not reached the claiming age
    """
    if insurance_amount <= 0 or age < claiming_age:
        return 0.0
    adjustment = claiming_adjustment(claiming_age, full_retirement_age)
    return insurance_amount * adjustment * 12 * cola_factor


def household_benefit(primary_benefit: float, spouse_benefit: float,
                      primary_alive: bool, spouse_alive: bool,
                      married: bool) -> float:
    """Resolve what the household actually receives this year.

    Both benefits are what each member would receive if alive. While both are
    alive they add up; once one has died the survivor keeps the larger of the
    two.

    Args:
        primary_benefit: Primary's benefit as if alive
        spouse_benefit: Spouse's benefit as if alive
        primary_alive: Whether the primary is alive this year
        spouse_alive: Whether the spouse is alive this year
        married: Whether the household is a couple

    Returns:
        Total annual benefit income for the household
    """
    if not married:
        return primary_benefit if primary_alive else 0.0
    if primary_alive and spouse_alive:
        return primary_benefit + spouse_benefit
    if primary_alive or spouse_alive:
        return max(primary_benefit, spouse_benefit)
    return 0.0
