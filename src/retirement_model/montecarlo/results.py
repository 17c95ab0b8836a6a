# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Monte Carlo simulation results aggregation and analysis.

This module provides the MonteCarloResults class which reduces every trial's
balance trajectory into percentile bands, a success rate and the guardrail,
inflation, benefit and premium diagnostics.
"""

from typing import Any, Dict, List, Optional
import pandas as pd
import numpy as np

SURCHARGE_MAJORITY = 0.5


class MonteCarloResults:
    """Aggregates and analyzes Monte Carlo simulation results.

    Percentile values are order statistics: for each year the balances are
    sorted and the value at index `floor(n * p)` is taken.

    Example:
        >>> results = simulator.run(params)
        >>> print(f"Success rate: {results.success_rate:.1f}%")
        >>> print(results.percentiles['p50'][-1])
    """

    # Standard percentile levels for analysis
    PERCENTILES = {
        "p5": 0.05,
        "p25": 0.25,
        "p50": 0.50,
        "p75": 0.75,
        "p95": 0.95,
    }

    # Low / median / high first-year inflation draws
    INFLATION_SCENARIOS = {
        "low": 0.10,
        "median": 0.50,
        "high": 0.90,
    }

    def __init__(self,
                 balances: np.ndarray,
                 ages: List[int],
                 retirement_age: int,
                 legacy_goal: float,
                 guardrail_activations: np.ndarray,
                 first_year_inflation: np.ndarray,
                 execution_time_ms: float = 0.0,
                 benefit_income: Optional[np.ndarray] = None,
                 premium_costs: Optional[np.ndarray] = None,
                 surcharge_counts: Optional[np.ndarray] = None,
                 home_equity: Optional[np.ndarray] = None):
        """Initialize with simulation results.

        Args:
            balances: (trials, years + 1) balance trajectories
            ages: Primary's age at each trajectory point
            retirement_age: Age at which retirement starts
            legacy_goal: Minimum ending balance counted as a success
            guardrail_activations: Activations per year of retirement
            first_year_inflation: Inflation drawn for the first year, per trial
            execution_time_ms: Wall-clock time of the run
            benefit_income: Average benefit income per simulated year
            premium_costs: Average Medicare premium charged per simulated year
                (zero before retirement, when no premium is deducted)
            surcharge_counts: Trials paying a surcharge per simulated year
            home_equity: Average home equity per trajectory point
        """
        self.balances = balances
        self.num_simulations = balances.shape[0]
        self.ages = list(ages)
        self.retirement_age = retirement_age
        self.legacy_goal = legacy_goal
        self.guardrail_activations = guardrail_activations
        self.execution_time_ms = execution_time_ms
        self.benefit_income = benefit_income
        self.premium_costs = premium_costs
        self.surcharge_counts = surcharge_counts
        self.home_equity = home_equity

        self._sorted = np.sort(balances, axis=0)
        self._first_year_inflation = np.sort(first_year_inflation)
        self.percentiles = self.get_percentile_data()

    def _index(self, pct: float) -> int:
        return min(int(self.num_simulations * pct), self.num_simulations - 1)

    def get_percentile_data(self) -> Dict[str, List[float]]:
        """Percentile bands of the balance across years.

        Returns:
            Dict mapping percentile names to lists of values (one per point)
        """
        return {name: self._sorted[self._index(pct)].tolist()
                for name, pct in self.PERCENTILES.items()}

    def get_percentile_df(self) -> pd.DataFrame:
        """Get percentile data as a DataFrame with ages as index.

        Returns:
            DataFrame with ages as index and percentile names as columns
        """
        df = pd.DataFrame(self.percentiles)
        df['Age'] = self.ages
        df = df.set_index('Age')
        return df

    def get_final_values(self) -> np.ndarray:
        """Ending balance of every trial."""
        return self.balances[:, -1].copy()

    @property
    def successes(self) -> int:
        final = self.balances[:, -1]
        if self.legacy_goal > 0:
            return int(np.count_nonzero(final >= self.legacy_goal))
        return int(np.count_nonzero(final > 0))

    @property
    def success_rate(self) -> float:
        """Percentage (0-100) of trials ending at or above the legacy goal."""
        return self.successes / self.num_simulations * 100

    @property
    def median_end_balance(self) -> float:
        return float(self._sorted[self._index(0.5), -1])

    @property
    def total_guardrail_activations(self) -> int:
        return int(self.guardrail_activations.sum())

    def get_guardrail_events(self) -> List[Dict[str, Any]]:
        """Years of retirement in which at least one trial cut spending.

        The reference year itself (year 0 of retirement) is skipped.
        """
        events = []
        for year, count in enumerate(self.guardrail_activations):
            if year == 0 or count == 0:
                continue
            events.append({
                'year_in_retirement': year,
                'age': self.retirement_age + year,
                'count': int(count),
                'percentage': float(count) / self.num_simulations * 100,
            })
        return events

    def get_inflation_scenarios(self) -> Dict[str, float]:
        """Low / median / high first-year inflation, in percent."""
        n = len(self._first_year_inflation)
        return {name: float(self._first_year_inflation[min(int(n * pct), n - 1)]) * 100
                for name, pct in self.INFLATION_SCENARIOS.items()}

    def get_surcharge_ages(self) -> List[int]:
        """Ages at which most trials paid an income-related premium surcharge."""
        if self.surcharge_counts is None:
            return []
        return [self.ages[year] for year, count in enumerate(self.surcharge_counts)
                if count > 0 and count >= self.num_simulations * SURCHARGE_MAJORITY]

    def _per_year(self, values: Optional[np.ndarray]) -> Optional[List[Dict[str, float]]]:
        if values is None:
            return None
        return [{'age': self.ages[year], 'amount': float(value)}
                for year, value in enumerate(values)]

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready view of the results."""
        result = {
            'ages': self.ages,
            'percentiles': self.percentiles,
            'success_rate': self.success_rate,
            'median_end_balance': self.median_end_balance,
            'num_simulations': self.num_simulations,
            'legacy_goal': self.legacy_goal,
            'execution_time_ms': self.execution_time_ms,
            'guardrails': {
                'total_activations': self.total_guardrail_activations,
                'events': self.get_guardrail_events(),
            },
            'inflation_scenarios': self.get_inflation_scenarios(),
        }
        if self.benefit_income is not None:
            result['benefit_income'] = self._per_year(self.benefit_income)
        if self.premium_costs is not None:
            result['premium_costs'] = self._per_year(self.premium_costs)
            result['surcharge_ages'] = self.get_surcharge_ages()
        if self.home_equity is not None:
            result['home_equity'] = self._per_year(self.home_equity)
        return result

    def __repr__(self) -> str:
        return (f"MonteCarloResults(num_simulations={self.num_simulations}, "
                f"num_years={len(self.ages)}, success_rate={self.success_rate:.1f})")
