# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

from .social_security import claiming_adjustment, annual_benefit, household_benefit
from .medicare import PremiumQuote, modified_income, find_bracket, annual_premium

__all__ = [
    'claiming_adjustment',
    'annual_benefit',
    'household_benefit',
    'PremiumQuote',
    'modified_income',
    'find_bracket',
    'annual_premium',
]
