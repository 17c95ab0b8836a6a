# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Regulatory tables used by the simulation rules.

Every table here is immutable and loaded once at import time. Rule functions
take these tables by reference (as default arguments) so tests can pass
alternative tables without patching module state.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

# IRS Uniform Lifetime Table (distribution periods)
RMD_DIVISORS: Mapping[int, float] = MappingProxyType({
    72: 27.4, 73: 26.5, 74: 25.5, 75: 24.6,
    76: 23.7, 77: 22.9, 78: 22.0, 79: 21.1,
    80: 20.2, 81: 19.4, 82: 18.5, 83: 17.7,
    84: 16.8, 85: 16.0, 86: 15.2, 87: 14.4,
    88: 13.7, 89: 12.9, 90: 12.2, 91: 11.5,
    92: 10.8, 93: 10.1, 94: 9.5, 95: 8.9,
})

# SECURE 2.0
RMD_START_AGE = 73


def rmd_divisor(age: int, divisors: Mapping[int, float] = RMD_DIVISORS) -> float:
    """Distribution period for an age; ages past the table reuse its last entry."""
    ceiling = max(divisors)
    floor = min(divisors)
    return divisors[min(max(int(age), floor), ceiling)]


def required_min_distrib(age: int, balance: float,
                         divisors: Mapping[int, float] = RMD_DIVISORS) -> float:
    """Required minimum distribution for a tax-deferred balance.

    Args:
        age: Owner's age during the distribution year
        balance: Tax-deferred balance the distribution is based on

    Returns:
        Amount that must be withdrawn this year. Zero below the RMD start age
        or for non-positive balances.
    """
    if age < RMD_START_AGE or balance <= 0:
        return 0.0
    return balance / rmd_divisor(age, divisors)


# Medicare (2026 baseline)
MEDICARE_ELIGIBILITY_AGE = 65
MEDICARE_PART_B_STANDARD = 202.90
MEDICARE_PART_D_BASE = 35.00
MEDICARE_BASE_PREMIUM = MEDICARE_PART_B_STANDARD + MEDICARE_PART_D_BASE
MEDICARE_REFERENCE_YEAR = 2026
MEDICAL_INFLATION_HISTORICAL = 0.0336


@dataclass(frozen=True)
class PremiumBracket:
    """One income-related monthly adjustment tier.

    Attributes:
        label: Display name for the tier
        single_min: Lower MAGI bound for single filers (inclusive)
        monthly_surcharge: Monthly amount charged on top of the base premium
    """
    label: str
    single_min: float
    monthly_surcharge: float

    def lower_bound(self, married: bool) -> float:
        return self.single_min * 2 if married else self.single_min


# Surcharge = (Part B tier - Part B standard) + Part D tier surcharge
IRMAA_BRACKETS: Tuple[PremiumBracket, ...] = (
    PremiumBracket('Standard', 0, 0.0),
    PremiumBracket('Tier 1', 109000, 94.90),
    PremiumBracket('Tier 2', 137000, 238.20),
    PremiumBracket('Tier 3', 171000, 381.60),
    PremiumBracket('Tier 4', 205000, 524.90),
    PremiumBracket('Tier 5', 500000, 560.10),
)


# Social Security claiming rules
DELAYED_CREDIT_PER_YEAR = 0.08
EARLY_REDUCTION_FIRST_MONTHS = 36
EARLIEST_CLAIMING_AGE = 62
LATEST_CLAIMING_AGE = 70


# Contribution limits (2026)
@dataclass(frozen=True)
class ContributionLimit:
    """Annual contribution ceiling for one account category.

    Attributes:
        base: Limit that applies at every age
        catch_up: Extra amount once age reaches catch_up_age
        catch_up_age: First age eligible for catch_up
        super_catch_up: Replaces catch_up for ages within super_catch_up_ages
        super_catch_up_ages: Inclusive (start, end) age band
    """
    base: float
    catch_up: float = 0.0
    catch_up_age: int = 50
    super_catch_up: float = 0.0
    super_catch_up_ages: Optional[Tuple[int, int]] = None

    def max_contribution(self, age: int) -> float:
        if self.super_catch_up_ages is not None:
            start, end = self.super_catch_up_ages
            if start <= age <= end:
                return self.base + self.super_catch_up
        if age >= self.catch_up_age:
            return self.base + self.catch_up
        return self.base


EMPLOYER_PLAN = 'employer'
IRA = 'ira'
HSA = 'hsa'
UNLIMITED = 'unlimited'

CONTRIBUTION_LIMITS: Mapping[str, ContributionLimit] = MappingProxyType({
    EMPLOYER_PLAN: ContributionLimit(base=24000, catch_up=7500, catch_up_age=50,
                                     super_catch_up=11250, super_catch_up_ages=(60, 63)),
    IRA: ContributionLimit(base=7500, catch_up=1000, catch_up_age=50),
    HSA: ContributionLimit(base=4400, catch_up=1000, catch_up_age=55),
})

HSA_FAMILY_BASE = 8750
