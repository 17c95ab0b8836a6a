# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Tests for Monte Carlo simulation module.
"""

import unittest
from datetime import date
import numpy as np

from ..montecarlo.config import MonteCarloConfig
from ..montecarlo.errors import SimulationInputError
from ..montecarlo.market_assumptions import MarketAssumptions, AssetClassAssumptions
from ..montecarlo.params import (
    Allocation,
    RateAssumptions,
    RateRange,
    SimulationParams,
)
from ..montecarlo.results import MonteCarloResults
from ..montecarlo.return_generator import CorrelatedReturnGenerator, cholesky_factor
from ..montecarlo.sampling import stratified_normal_samples


class TestMonteCarloConfig(unittest.TestCase):
    """Tests for MonteCarloConfig."""

    def test_default_values(self):
        """Test default configuration values."""
        config = MonteCarloConfig()
        self.assertEqual(config.num_simulations, 5000)
        self.assertIsNone(config.random_seed)
        self.assertEqual(config.retirement_years, 35)
        self.assertEqual(config.start_year, date.today().year)

    def test_custom_values(self):
        """Test custom configuration values."""
        config = MonteCarloConfig(num_simulations=1000, random_seed=42)
        self.assertEqual(config.num_simulations, 1000)
        self.assertEqual(config.random_seed, 42)

    def test_invalid_num_simulations(self):
        """Test that invalid num_simulations raises error."""
        for bad in (0, -1, 2.5, True, "100"):
            with self.assertRaises(ValueError):
                MonteCarloConfig(num_simulations=bad)

    def test_invalid_retirement_years(self):
        with self.assertRaises(SimulationInputError):
            MonteCarloConfig(retirement_years=0)


class TestAssetClassAssumptions(unittest.TestCase):
    """Tests for AssetClassAssumptions."""

    def test_basic_creation(self):
        asset = AssetClassAssumptions("stocks", 0.07, 0.18)
        self.assertEqual(asset.name, "stocks")
        self.assertEqual(asset.expected_return, 0.07)
        self.assertEqual(asset.volatility, 0.18)

    def test_negative_volatility_raises(self):
        with self.assertRaises(ValueError):
            AssetClassAssumptions("test", 0.10, -0.05)


class TestMarketAssumptions(unittest.TestCase):
    """Tests for MarketAssumptions."""

    def test_create_default(self):
        market = MarketAssumptions.create_default()
        self.assertEqual(market.asset_class_order, ['stocks', 'bonds', 'cash'])
        self.assertEqual(market.dimensions, 4)
        np.testing.assert_allclose(market.get_returns_vector(), [0.07, 0.04, 0.02])
        np.testing.assert_allclose(market.get_volatilities_vector(), [0.18, 0.06, 0.01])
        self.assertAlmostEqual(market.inflation.expected_return, 0.025)
        self.assertAlmostEqual(market.inflation.volatility, 0.01)

    def test_correlation_matrix_is_read_only(self):
        market = MarketAssumptions.create_default()
        with self.assertRaises(ValueError):
            market.correlation_matrix[0, 1] = 0.5

    def test_caller_matrix_is_copied(self):
        corr = np.eye(3)
        default = MarketAssumptions.create_default()
        MarketAssumptions(default.asset_classes, corr, default.asset_class_order,
                          default.inflation)
        corr[0, 0] = 1.0  # still writable

    def test_asymmetric_matrix_raises(self):
        default = MarketAssumptions.create_default()
        corr = np.array([[1.0, 0.2, 0.0], [0.1, 1.0, 0.0], [0.0, 0.0, 1.0]])
        with self.assertRaises(ValueError):
            MarketAssumptions(default.asset_classes, corr, default.asset_class_order,
                              default.inflation)

    def test_bad_diagonal_raises(self):
        default = MarketAssumptions.create_default()
        with self.assertRaises(ValueError):
            MarketAssumptions(default.asset_classes, np.eye(3) * 2,
                              default.asset_class_order, default.inflation)

    def test_shape_mismatch_raises(self):
        default = MarketAssumptions.create_default()
        with self.assertRaises(ValueError):
            MarketAssumptions(default.asset_classes, np.eye(2),
                              default.asset_class_order, default.inflation)

    def test_missing_asset_class_raises(self):
        default = MarketAssumptions.create_default()
        with self.assertRaises(ValueError):
            MarketAssumptions(default.asset_classes, np.eye(4),
                              default.asset_class_order + ['reit'], default.inflation)


class TestCholeskyFactor(unittest.TestCase):
    """Tests for cholesky_factor."""

    def test_reconstructs_default_matrix(self):
        corr = MarketAssumptions.create_default().correlation_matrix
        factor = cholesky_factor(corr)
        np.testing.assert_allclose(factor @ factor.T, corr, atol=1e-12)
        np.testing.assert_array_equal(np.triu(factor, 1), np.zeros((3, 3)))

    def test_matches_numpy(self):
        corr = np.array([[1.0, 0.5, 0.2], [0.5, 1.0, 0.3], [0.2, 0.3, 1.0]])
        np.testing.assert_allclose(cholesky_factor(corr), np.linalg.cholesky(corr), atol=1e-12)

    def test_identity(self):
        np.testing.assert_array_equal(cholesky_factor(np.eye(4)), np.eye(4))

    def test_semi_definite_matrix_stays_finite(self):
        factor = cholesky_factor([[1.0, 1.0], [1.0, 1.0]])
        self.assertTrue(np.all(np.isfinite(factor)))
        np.testing.assert_allclose(factor, [[1.0, 0.0], [1.0, 0.0]])

    def test_zero_pivot_substitutes_one(self):
        with self.assertLogs('retirement_model.montecarlo.return_generator', level='WARNING'):
            factor = cholesky_factor([[0.0, 0.5], [0.5, 1.0]])
        self.assertEqual(factor[0, 0], 0.0)
        self.assertAlmostEqual(factor[1, 0], 0.5)
        self.assertAlmostEqual(factor[1, 1], np.sqrt(0.75))


class TestCorrelatedReturnGenerator(unittest.TestCase):
    """Tests for CorrelatedReturnGenerator."""

    N = 20000

    def _year(self, rates=None, seed=11):
        market = MarketAssumptions.create_default()
        gen = CorrelatedReturnGenerator(market, rates)
        rng = np.random.default_rng(seed)
        normals = stratified_normal_samples(self.N, market.dimensions, rng)
        return gen.generate_yearly_returns(normals, *gen.draw_bound_uniforms(self.N, rng))

    def test_historical_moments(self):
        year = self._year()
        self.assertAlmostEqual(year.stocks.mean(), 0.07, delta=0.003)
        self.assertAlmostEqual(year.stocks.std(), 0.18, delta=0.005)
        self.assertAlmostEqual(year.bonds.mean(), 0.04, delta=0.002)
        self.assertAlmostEqual(year.cash.mean(), 0.02, delta=0.001)

    def test_stock_bond_correlation(self):
        year = self._year()
        corr = np.corrcoef(year.stocks, year.bonds)[0, 1]
        self.assertAlmostEqual(corr, 0.1, delta=0.03)

    def test_inflation_never_negative(self):
        year = self._year()
        self.assertTrue(np.all(year.inflation >= 0))
        self.assertAlmostEqual(year.inflation.mean(), 0.025, delta=0.001)

    def test_stock_bounds_override(self):
        rates = RateAssumptions(stock_returns=RateRange(optimistic=0.10, pessimistic=0.02))
        year = self._year(rates)
        self.assertTrue(np.all(year.stocks >= 0.02))
        self.assertTrue(np.all(year.stocks <= 0.10))
        self.assertAlmostEqual(year.stocks.mean(), 0.06, delta=0.002)

    def test_bond_bounds_override(self):
        rates = RateAssumptions(bond_returns=RateRange(optimistic=0.05, pessimistic=0.01))
        year = self._year(rates)
        self.assertTrue(np.all((year.bonds >= 0.01) & (year.bonds <= 0.05)))

    def test_cash_ignores_bounds(self):
        rates = RateAssumptions(stock_returns=RateRange(0.10, 0.02),
                                bond_returns=RateRange(0.05, 0.01))
        year = self._year(rates)
        self.assertAlmostEqual(year.cash.mean(), 0.02, delta=0.001)
        self.assertGreater(year.cash.std(), 0)

    def test_uniform_inflation_bounds(self):
        rates = RateAssumptions(inflation=RateRange(optimistic=0.01, pessimistic=0.05))
        year = self._year(rates)
        self.assertTrue(np.all((year.inflation >= 0.01) & (year.inflation <= 0.05)))
        self.assertAlmostEqual(year.inflation.mean(), 0.03, delta=0.001)

    def test_triangular_inflation_with_sentiment(self):
        rates = RateAssumptions(inflation=RateRange(0.01, 0.04, market_sentiment=0.03))
        year = self._year(rates)
        self.assertTrue(np.all((year.inflation >= 0.01) & (year.inflation <= 0.04)))
        self.assertAlmostEqual(year.inflation.mean(), (0.01 + 0.04 + 0.03) / 3, delta=0.001)

    def test_sentiment_is_clamped_into_bounds(self):
        rates = RateAssumptions(inflation=RateRange(0.01, 0.04, market_sentiment=0.10))
        year = self._year(rates)
        self.assertTrue(np.all(year.inflation <= 0.04))
        self.assertAlmostEqual(year.inflation.mean(), (0.01 + 0.04 + 0.04) / 3, delta=0.001)

    def test_equal_bounds(self):
        rates = RateAssumptions(inflation=RateRange(0.03, 0.03, market_sentiment=0.03))
        year = self._year(rates)
        np.testing.assert_allclose(year.inflation, 0.03)

    def test_portfolio_returns(self):
        year = self._year()
        blended = year.portfolio_returns((0.6, 0.4, 0.0))
        np.testing.assert_allclose(blended, 0.6 * year.stocks + 0.4 * year.bonds)


class TestSimulationParams(unittest.TestCase):
    """Tests for SimulationParams validation and parsing."""

    BASE = {
        'current_age': 45,
        'retirement_age': 65,
        'current_savings': 300000,
        'annual_contribution': 20000,
        'monthly_retirement_spending': 5000,
        'allocation': {'stocks': 60, 'bonds': 40, 'cash': 0},
    }

    def _with(self, **overrides):
        data = dict(self.BASE)
        data.update(overrides)
        return data

    def test_from_dict_minimal(self):
        params = SimulationParams.from_dict(self.BASE)
        self.assertEqual(params.current_age, 45)
        self.assertEqual(params.allocation.normalized(), (0.6, 0.4, 0.0))
        self.assertIsNone(params.social_security)
        self.assertEqual(params.contributions, ())
        self.assertEqual(params.legacy_goal, 0.0)

    def test_from_dict_camel_case(self):
        data = {
            'currentAge': 50,
            'retirementAge': 62,
            'currentSavings': 100000,
            'monthlyRetirementSpending': 3000,
            'allocation': {'stocks': 1},
            'rateAssumptions': {'inflation': {'optimistic': 0.02, 'pessimistic': 0.04,
                                              'marketSentiment': 0.03}},
            'socialSecurity': {'insuranceAmount': 2000, 'claimingAge': 67, 'married': True,
                               'spouseInsuranceAmount': 1500, 'spouseClaimingAge': 65,
                               'spouseCurrentAge': 48},
            'household': {'legacyGoal': 50000, 'lifeExpectancy': 92},
            'contributions': [{'accountType': '401k', 'annualAmount': 10000,
                               'startAge': 50, 'endAge': 61}],
            'excessIncome': {'enabled': True, 'savePercentage': 25, 'annualSurplus': 8000},
            'mortgage': {'balance': 150000, 'interestRate': 0.05, 'monthlyPayment': 1200,
                         'homeValue': 400000,
                         'relocation': {'age': 70, 'newPurchasePrice': 250000}},
        }
        params = SimulationParams.from_dict(data)
        self.assertEqual(params.retirement_age, 62)
        self.assertEqual(params.annual_contribution, 0.0)
        self.assertAlmostEqual(params.rate_assumptions.inflation.market_sentiment, 0.03)
        self.assertTrue(params.married)
        self.assertEqual(params.social_security.spouse_current_age, 48)
        self.assertEqual(params.legacy_goal, 50000)
        self.assertEqual(params.life_expectancies(), (92, 90))
        self.assertEqual(params.contributions[0].end_age, 61)
        self.assertEqual(params.excess_income.annual_saving(), 2000)
        self.assertEqual(params.mortgage.relocation.new_term_months, 360)

    def test_missing_required_field(self):
        data = self._with()
        del data['current_savings']
        with self.assertRaises(SimulationInputError):
            SimulationParams.from_dict(data)

    def test_missing_allocation(self):
        data = self._with()
        del data['allocation']
        with self.assertRaises(SimulationInputError):
            SimulationParams.from_dict(data)

    def test_wrong_type_is_rejected_not_clamped(self):
        with self.assertRaises(SimulationInputError):
            SimulationParams.from_dict(self._with(current_age='forty'))
        with self.assertRaises(SimulationInputError):
            SimulationParams.from_dict(self._with(current_savings=True))

    def test_flags_must_be_booleans(self):
        bad_flags = [
            {'hsa_family_coverage': 'false'},
            {'social_security': {'insurance_amount': 2000, 'married': 'false'}},
            {'medicare': {'enabled': 0}},
            {'excess_income': {'enabled': 'yes', 'annual_surplus': 1000}},
            {'contributions': [{'account_type': 'IRA', 'annual_amount': 5000, 'start_age': 45,
                                'end_age': 60, 'income_linked': 'no'}]},
        ]
        for override in bad_flags:
            with self.subTest(override=override):
                with self.assertRaises(SimulationInputError):
                    SimulationParams.from_dict(self._with(**override))

        params = SimulationParams.from_dict(self._with(
            medicare={'enabled': False}, hsa_family_coverage=True))
        self.assertFalse(params.medicare.enabled)
        self.assertTrue(params.hsa_family_coverage)

    def test_invalid_values(self):
        bad_inputs = [
            {'retirement_age': 45},
            {'retirement_age': 40},
            {'current_age': -1},
            {'current_savings': -1},
            {'annual_contribution': -5},
            {'monthly_retirement_spending': -100},
            {'allocation': {'stocks': 0, 'bonds': 0, 'cash': 0}},
            {'allocation': {'stocks': -10, 'bonds': 110}},
            {'social_security': {'insurance_amount': 2000, 'claiming_age': 61}},
            {'social_security': {'insurance_amount': 2000, 'claiming_age': 71}},
            {'excess_income': {'enabled': True, 'save_percentage': 120}},
            {'contributions': [{'account_type': 'IRA', 'annual_amount': 5000,
                                'start_age': 60, 'end_age': 50}]},
            {'mortgage': {'balance': -1, 'interest_rate': 0.05,
                          'monthly_payment': 100, 'home_value': 1000}},
            {'mortgage': {'home_value': 300000,
                          'relocation': {'age': 70, 'new_purchase_price': 300000,
                                         'new_mortgage_amount': 250000, 'new_term_months': 0}}},
            {'household': {'legacy_goal': -1}},
        ]
        for override in bad_inputs:
            with self.subTest(override=override):
                with self.assertRaises(SimulationInputError):
                    SimulationParams.from_dict(self._with(**override))

    def test_unmarried_spouse_claiming_age_ignored(self):
        params = SimulationParams.from_dict(self._with(
            social_security={'insurance_amount': 2000, 'spouse_claiming_age': 50}))
        self.assertFalse(params.married)

    def test_allocation_normalized(self):
        self.assertEqual(Allocation(3, 1, 0).normalized(), (0.75, 0.25, 0.0))

    def test_params_are_frozen(self):
        params = SimulationParams.from_dict(self.BASE)
        with self.assertRaises(AttributeError):
            params.current_age = 50


class TestMonteCarloResults(unittest.TestCase):
    """Tests for MonteCarloResults."""

    def _results(self, legacy_goal=0.0):
        balances = np.array([
            [100.0, 110.0, 0.0],
            [100.0, 90.0, 50.0],
            [100.0, 120.0, 150.0],
            [100.0, 105.0, 80.0],
        ])
        return MonteCarloResults(
            balances=balances,
            ages=[64, 65, 66],
            retirement_age=65,
            legacy_goal=legacy_goal,
            guardrail_activations=np.array([0, 2]),
            first_year_inflation=np.array([0.03, 0.01, 0.02, 0.04]),
        )

    def test_percentiles_use_floor_index(self):
        results = self._results()
        self.assertEqual(results.percentiles['p5'], [100.0, 90.0, 0.0])
        self.assertEqual(results.percentiles['p25'], [100.0, 105.0, 50.0])
        self.assertEqual(results.percentiles['p50'], [100.0, 110.0, 80.0])
        self.assertEqual(results.percentiles['p95'], [100.0, 120.0, 150.0])

    def test_success_rate(self):
        self.assertEqual(self._results().success_rate, 75.0)
        self.assertEqual(self._results(legacy_goal=80).success_rate, 50.0)

    def test_median_end_balance(self):
        self.assertEqual(self._results().median_end_balance, 80.0)

    def test_guardrail_summary(self):
        results = self._results()
        self.assertEqual(results.total_guardrail_activations, 2)
        self.assertEqual(results.get_guardrail_events(),
                         [{'year_in_retirement': 1, 'age': 66, 'count': 2, 'percentage': 50.0}])

    def test_inflation_scenarios(self):
        scenarios = self._results().get_inflation_scenarios()
        self.assertAlmostEqual(scenarios['low'], 1.0)
        self.assertAlmostEqual(scenarios['median'], 3.0)
        self.assertAlmostEqual(scenarios['high'], 4.0)

    def test_percentile_df(self):
        df = self._results().get_percentile_df()
        self.assertEqual(list(df.index), [64, 65, 66])
        self.assertEqual(list(df.columns), ['p5', 'p25', 'p50', 'p75', 'p95'])

    def test_to_dict_omits_unconfigured_diagnostics(self):
        result = self._results().to_dict()
        self.assertNotIn('benefit_income', result)
        self.assertNotIn('premium_costs', result)
        self.assertNotIn('home_equity', result)
        self.assertEqual(result['guardrails']['total_activations'], 2)


if __name__ == '__main__':
    unittest.main()
