# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Monte Carlo simulation orchestrator.

This module provides the MonteCarloSimulator class which runs independent
trials of a household's portfolio, year by year, under correlated
stochastic returns and inflation, and hands the trajectories to
MonteCarloResults for aggregation.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Optional
import numpy as np

from ..account.contributions import ContributionLedger
from ..housing.mortgage import MortgageState, relocate
from ..insurance.medicare import annual_premium, modified_income
from ..insurance.social_security import annual_benefit, household_benefit
from ..limits import MEDICARE_ELIGIBILITY_AGE, required_min_distrib
from ..spending.guardrails import GuardrailPolicy
from .config import MonteCarloConfig
from .market_assumptions import MarketAssumptions
from .params import SimulationParams
from .results import MonteCarloResults
from .return_generator import CorrelatedReturnGenerator
from .sampling import RandomSource, stratified_normal_samples

logger = logging.getLogger(__name__)

DEATH_JITTER_YEARS = 5.0


@dataclass
class _StepOutcome:
    benefit_income: float = 0.0
    premium_cost: float = 0.0
    surcharge_applied: bool = False
    activated: bool = False

    def clear(self):
        self.benefit_income = 0.0
        self.premium_cost = 0.0
        self.surcharge_applied = False
        self.activated = False


@dataclass
class TrialState:
    """Scratch state for one trial; a single instance is reset and reused.

    Attributes:
        balance: Running portfolio balance
        inflation_index: Realised inflation compounded since year 0
        retirement_index: inflation_index captured in the first retired year
        mortgage: Mutable copy of the household mortgage, if any
        guardrail: Per-trial guardrail state
        ledger: Contribution headroom for the current simulated year
        primary_death_year: Simulated year the primary dies
        spouse_death_year: Simulated year the spouse dies
        outcome: Per-year diagnostics, cleared at the start of every step
    """
    balance: float = 0.0
    inflation_index: float = 1.0
    retirement_index: float = 1.0
    mortgage: Optional[MortgageState] = None
    guardrail: GuardrailPolicy = field(default_factory=GuardrailPolicy)
    ledger: ContributionLedger = field(default_factory=ContributionLedger)
    primary_death_year: float = 0.0
    spouse_death_year: float = 0.0
    outcome: _StepOutcome = field(default_factory=_StepOutcome)

    def reset(self, params: SimulationParams, primary_death_year: float,
              spouse_death_year: float):
        self.balance = params.current_savings
        self.inflation_index = 1.0
        self.retirement_index = 1.0
        self.guardrail.reset()
        self.ledger.reset_annual_contributions()
        self.primary_death_year = primary_death_year
        self.spouse_death_year = spouse_death_year

        if params.mortgage is None:
            self.mortgage = None
        else:
            m = params.mortgage
            self.mortgage = MortgageState(
                balance=m.balance,
                annual_rate=m.interest_rate,
                monthly_payment=m.monthly_payment,
                home_value=m.home_value,
                appreciation_rate=m.appreciation_rate,
            )


class MonteCarloSimulator:
    """Orchestrates Monte Carlo simulations of a retirement portfolio.

    The workflow:
    1. Pre-generate stratified normal samples for every simulated year
    2. Turn each year's samples into correlated portfolio returns and inflation
    3. Draw each trial's death-year jitter
    4. Step every trial through its years applying contributions, benefits,
       premiums, mortgage, guardrail and withdrawals
    5. Aggregate the trajectories

    Example:
        >>> simulator = MonteCarloSimulator(
        ...     config=MonteCarloConfig(num_simulations=500, random_seed=42)
        ... )
        >>> results = simulator.run(params)
        >>> print(f"Success rate: {results.success_rate:.1f}%")
    """

    def __init__(self,
                 market_assumptions: Optional[MarketAssumptions] = None,
                 config: Optional[MonteCarloConfig] = None,
                 rng: Optional[RandomSource] = None):
        """Initialize the simulator.

        Args:
            market_assumptions: Fixed historical parameters. If None, uses
                                default assumptions.
            config: Simulation configuration. If None, uses defaults.
            rng: Source of uniform randomness. If None, a numpy Generator
                 seeded with config.random_seed is created per run.
        """
        self.market = market_assumptions or MarketAssumptions.create_default()
        self.config = config or MonteCarloConfig()
        self.rng = rng

    def horizon(self, params: SimulationParams) -> int:
        """Number of simulated years (steps) for the parameters."""
        return (params.retirement_age - params.current_age) + self.config.retirement_years

    def run(self, params: SimulationParams) -> MonteCarloResults:
        """Run Monte Carlo simulation.

        Args:
            params: Household parameters for this run

        Returns:
            MonteCarloResults containing aggregated simulation data
        """
        started = time.perf_counter()
        n = self.config.num_simulations
        horizon = self.horizon(params)
        rng = self.rng if self.rng is not None else np.random.default_rng(self.config.random_seed)

        logger.info("Starting Monte Carlo run: %d trials over %d years", n, horizon)

        portfolio_returns, inflation = self._pregenerate(params, rng, n, horizon)
        primary_deaths, spouse_deaths = self._death_years(params, rng, n)

        ages = [params.current_age + year for year in range(horizon + 1)]
        balances = np.zeros((n, horizon + 1))
        retired_years = horizon - (params.retirement_age - params.current_age)
        activations = np.zeros(retired_years, dtype=int)

        track_benefits = params.social_security is not None
        track_premiums = params.medicare is not None and params.medicare.enabled
        benefit_totals = np.zeros(horizon) if track_benefits else None
        premium_totals = np.zeros(horizon) if track_premiums else None
        surcharge_counts = np.zeros(horizon, dtype=int) if track_premiums else None
        equity_totals = np.zeros(horizon + 1) if params.mortgage is not None else None

        state = TrialState(ledger=ContributionLedger(hsa_family_coverage=params.hsa_family_coverage))
        for trial in range(n):
            state.reset(params, primary_deaths[trial], spouse_deaths[trial])
            balances[trial, 0] = state.balance
            if equity_totals is not None:
                equity_totals[0] += state.mortgage.equity

            for year in range(horizon):
                outcome = self._step(params, state, year,
                                     portfolio_returns[year, trial], inflation[year, trial])
                balances[trial, year + 1] = state.balance

                if outcome.activated:
                    activations[year - (params.retirement_age - params.current_age)] += 1
                if benefit_totals is not None:
                    benefit_totals[year] += outcome.benefit_income
                if premium_totals is not None:
                    premium_totals[year] += outcome.premium_cost
                    surcharge_counts[year] += outcome.surcharge_applied
                if equity_totals is not None:
                    equity_totals[year + 1] += state.mortgage.equity

        elapsed_ms = (time.perf_counter() - started) * 1000
        results = MonteCarloResults(
            balances=balances,
            ages=ages,
            retirement_age=params.retirement_age,
            legacy_goal=params.legacy_goal,
            guardrail_activations=activations,
            first_year_inflation=inflation[0],
            execution_time_ms=elapsed_ms,
            benefit_income=None if benefit_totals is None else benefit_totals / n,
            premium_costs=None if premium_totals is None else premium_totals / n,
            surcharge_counts=surcharge_counts,
            home_equity=None if equity_totals is None else equity_totals / n,
        )

        logger.info("Monte Carlo run finished: success rate %.1f%% in %.0f ms",
                    results.success_rate, elapsed_ms)
        return results

    def _pregenerate(self, params: SimulationParams, rng: RandomSource,
                     n: int, horizon: int):
        """Portfolio return and inflation per (year, trial).

        Samples are regenerated for every year so correlation applies within
        a year only.
        """
        generator = CorrelatedReturnGenerator(self.market, params.rate_assumptions)
        weights = params.allocation.normalized()
        logger.debug("Normalised allocation weights: %s", weights)

        portfolio_returns = np.empty((horizon, n))
        inflation = np.empty((horizon, n))
        for year in range(horizon):
            normals = stratified_normal_samples(n, self.market.dimensions, rng)
            yearly = generator.generate_yearly_returns(
                normals, *generator.draw_bound_uniforms(n, rng)
            )
            portfolio_returns[year] = yearly.portfolio_returns(weights)
            inflation[year] = yearly.inflation
        return portfolio_returns, inflation

    def _death_years(self, params: SimulationParams, rng: RandomSource, n: int):
        """Per-trial death years: life expectancy less current age, +/- jitter."""
        primary_le, spouse_le = params.life_expectancies()
        spouse_age = params.current_age
        if params.social_security is not None and params.social_security.spouse_current_age is not None:
            spouse_age = params.social_security.spouse_current_age

        jitter = rng.uniform(-DEATH_JITTER_YEARS, DEATH_JITTER_YEARS, size=2 * n)
        primary = (primary_le - params.current_age) + jitter[0::2]
        spouse = (spouse_le - spouse_age) + jitter[1::2]
        return primary, spouse

    def _step(self, params: SimulationParams, state: TrialState, year: int,
              portfolio_return: float, inflation: float) -> _StepOutcome:
        """Advance one trial by one simulated year.

        Before retirement the year's contributions are added after the
        return is applied. In retirement the net withdrawal is taken after
        the return. Premiums are only quoted in retired years, since that is
        when they are paid from the portfolio.
        """
        age = params.current_age + year
        retired = age >= params.retirement_age
        outcome = state.outcome
        outcome.clear()

        if retired and age == params.retirement_age:
            state.retirement_index = state.inflation_index
            state.guardrail.set_reference(state.balance)

        if params.social_security is not None and retired:
            outcome.benefit_income = self._benefit_income(params, state, year, age)

        medicare = params.medicare
        if (medicare is not None and medicare.enabled and retired
                and age >= MEDICARE_ELIGIBILITY_AGE):
            growth = state.balance / params.current_savings if params.current_savings > 0 else 1.0
            min_distribution = required_min_distrib(
                age, medicare.estimated_tax_deferred_balance * growth
            )
            magi = modified_income(outcome.benefit_income, medicare.pension_income,
                                   min_distribution, medicare.investment_income)
            quote = annual_premium(magi, params.married, self.config.start_year + year,
                                   medical_inflation=medicare.medical_inflation)
            outcome.premium_cost = quote.annual_cost
            outcome.surcharge_applied = quote.surcharge_applied

        relocation_cash = 0.0
        if state.mortgage is not None:
            state.mortgage.amortize_year()
            plan = params.mortgage.relocation
            if plan is not None and age == plan.age:
                relocation_cash = relocate(state.mortgage, plan)

        if not retired:
            contributed = params.annual_contribution + self._scheduled_contributions(
                params, state, age
            )
            state.balance = (state.balance + relocation_cash) * (1 + portfolio_return) + contributed
            if params.excess_income is not None:
                state.balance += params.excess_income.annual_saving() * state.inflation_index
        else:
            spending = (params.monthly_retirement_spending * 12
                        * state.inflation_index / state.retirement_index)
            decision = state.guardrail.evaluate(state.balance)
            outcome.activated = decision.activated
            withdrawal = max(0.0, spending * decision.spending_factor
                             + outcome.premium_cost - outcome.benefit_income)
            state.balance = (state.balance + relocation_cash) * (1 + portfolio_return) - withdrawal

        state.balance = max(0.0, state.balance)
        state.inflation_index *= 1 + inflation
        return outcome

    def _benefit_income(self, params: SimulationParams, state: TrialState,
                        year: int, age: int) -> float:
        ss = params.social_security
        cola = state.inflation_index
        primary = annual_benefit(ss.insurance_amount, ss.claiming_age,
                                 ss.full_retirement_age, age, cola)
        spouse = 0.0
        if ss.married:
            spouse_age = (ss.spouse_current_age if ss.spouse_current_age is not None
                          else params.current_age) + year
            spouse = annual_benefit(ss.spouse_insurance_amount, ss.spouse_claiming_age,
                                    ss.spouse_full_retirement_age, spouse_age, cola)
        return household_benefit(primary, spouse,
                                 primary_alive=year < state.primary_death_year,
                                 spouse_alive=year < state.spouse_death_year,
                                 married=ss.married)

    def _scheduled_contributions(self, params: SimulationParams, state: TrialState,
                                 age: int) -> float:
        ledger = state.ledger
        ledger.reset_annual_contributions()
        total = 0.0
        for flow in params.contributions:
            if flow.is_active(age):
                requested = flow.requested_amount(params.annual_income, state.inflation_index)
                total += ledger.contribute(flow.account_type, requested, age)
        return total


def run_simulation(params: SimulationParams,
                   num_simulations: int = 5000,
                   random_seed: Optional[int] = None,
                   market_assumptions: Optional[MarketAssumptions] = None) -> MonteCarloResults:
    """Convenience wrapper: run one simulation with a fresh configuration."""
    config = MonteCarloConfig(num_simulations=num_simulations, random_seed=random_seed)
    return MonteCarloSimulator(market_assumptions, config).run(params)

