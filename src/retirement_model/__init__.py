# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Retirement Portfolio Engine

Stochastic projection of a household's retirement savings: correlated market
returns, benefit claiming, Medicare premium surcharges, minimum withdrawals,
contribution ceilings, mortgage amortization and a spending guardrail.

Example usage:
    from retirement_model import SimulationParams, Allocation, run_simulation

    params = SimulationParams(current_age=45, retirement_age=65,
                              current_savings=300000, annual_contribution=20000,
                              monthly_retirement_spending=5000,
                              allocation=Allocation(stocks=60, bonds=40))
    results = run_simulation(params, num_simulations=5000, random_seed=1)
    print(results.success_rate)
"""

from .__meta__ import __version__

# Simulation
from .montecarlo import (
    Allocation,
    MarketAssumptions,
    MonteCarloConfig,
    MonteCarloResults,
    MonteCarloSimulator,
    SimulationInputError,
    SimulationParams,
    SimulationWorker,
    handle_request,
    run_simulation,
)

# Rules
from .limits import required_min_distrib
from .insurance import claiming_adjustment, annual_premium
from .account import ContributionLedger
from .housing import MortgageState, RelocationPlan
from .spending import GuardrailPolicy

__all__ = [
    '__version__',
    'Allocation',
    'MarketAssumptions',
    'MonteCarloConfig',
    'MonteCarloResults',
    'MonteCarloSimulator',
    'SimulationInputError',
    'SimulationParams',
    'SimulationWorker',
    'handle_request',
    'run_simulation',
    'required_min_distrib',
    'claiming_adjustment',
    'annual_premium',
    'ContributionLedger',
    'MortgageState',
    'RelocationPlan',
    'GuardrailPolicy',
]
