# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Monte Carlo simulation module for retirement portfolio projections.

This module provides stratified sampling of correlated asset returns and
inflation, the per-trial simulation loop and the aggregation of trial
trajectories into percentile bands and a success rate.
"""

from .config import MonteCarloConfig
from .errors import SimulationInputError
from .market_assumptions import MarketAssumptions, AssetClassAssumptions
from .params import (
    Allocation,
    ExcessIncomeSettings,
    HouseholdParams,
    MedicareParams,
    MortgageParams,
    RateAssumptions,
    RateRange,
    SimulationParams,
    SocialSecurityParams,
)
from .sampling import RandomSource, inverse_normal_cdf, stratified_normal_samples
from .return_generator import CorrelatedReturnGenerator, YearlyReturns, cholesky_factor
from .simulator import MonteCarloSimulator, run_simulation
from .results import MonteCarloResults
from .worker import SimulationWorker, handle_request

__all__ = [
    'MonteCarloConfig',
    'SimulationInputError',
    'MarketAssumptions',
    'AssetClassAssumptions',
    'Allocation',
    'ExcessIncomeSettings',
    'HouseholdParams',
    'MedicareParams',
    'MortgageParams',
    'RateAssumptions',
    'RateRange',
    'SimulationParams',
    'SocialSecurityParams',
    'RandomSource',
    'inverse_normal_cdf',
    'stratified_normal_samples',
    'CorrelatedReturnGenerator',
    'YearlyReturns',
    'cholesky_factor',
    'MonteCarloSimulator',
    'run_simulation',
    'MonteCarloResults',
    'SimulationWorker',
    'handle_request',
]
