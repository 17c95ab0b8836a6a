# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Correlated return generator for asset classes and inflation.

This module turns independent standard-normal deviates into correlated
asset-class returns using a Cholesky factor of the market correlation
matrix, and applies caller-supplied rate bounds where they exist.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence
import numpy as np

from .market_assumptions import BONDS, CASH, STOCKS, MarketAssumptions
from .params import RateAssumptions, RateRange

logger = logging.getLogger(__name__)


def cholesky_factor(matrix: Sequence[Sequence[float]]) -> np.ndarray:
    """Lower-triangular L with L @ L.T == matrix.

    Negative pivots (from matrices that are only positive semi-definite, or
    rounding) are floored at zero and a zero pivot is treated as 1 when
    dividing, so the factor never contains NaN or infinity.

    Args:
        matrix: Symmetric positive semi-definite matrix

    Returns:
        numpy array with the lower-triangular factor
    """
    a = np.asarray(matrix, dtype=float)
    n = a.shape[0]
    factor = np.zeros((n, n))

    for i in range(n):
        for j in range(i + 1):
            partial = float(np.dot(factor[i, :j], factor[j, :j]))
            if i == j:
                factor[i, j] = np.sqrt(max(0.0, a[i, i] - partial))
            else:
                pivot = factor[j, j]
                if pivot == 0:
                    logger.warning("Zero Cholesky pivot at column %d; substituting 1", j)
                    pivot = 1.0
                factor[i, j] = (a[i, j] - partial) / pivot

    return factor


@dataclass
class YearlyReturns:
    """Sampled rates for one simulated year, one entry per trial.

    Attributes:
        stocks: Equity return per trial
        bonds: Bond return per trial
        cash: Cash return per trial
        inflation: Inflation rate per trial
    """
    stocks: np.ndarray
    bonds: np.ndarray
    cash: np.ndarray
    inflation: np.ndarray

    def portfolio_returns(self, weights: Sequence[float]) -> np.ndarray:
        """Weighted return per trial for normalised (stocks, bonds, cash) weights."""
        w_stocks, w_bonds, w_cash = weights
        return w_stocks * self.stocks + w_bonds * self.bonds + w_cash * self.cash


def _uniform_between(bounds: RateRange, draws: np.ndarray) -> np.ndarray:
    low, high = bounds.low, bounds.high
    return low + draws * (high - low)


def _triangular_between(bounds: RateRange, draws: np.ndarray) -> np.ndarray:
    low, high = bounds.low, bounds.high
    width = high - low
    if width <= 0:
        return np.full_like(draws, low)

    mode = min(max(bounds.market_sentiment, low), high)
    split = (mode - low) / width
    left = low + np.sqrt(draws * width * (mode - low))
    right = high - np.sqrt((1 - draws) * width * (high - mode))
    return np.where(draws < split, left, right)


class CorrelatedReturnGenerator:
    """Generates correlated asset-class returns and inflation.

    The Cholesky factor is computed once. Asset-class returns follow
    `mean + std * z` on the correlated deviates unless the caller supplied
    optimistic/pessimistic bounds for that factor, in which case the factor
    is drawn uniformly between the bounds from a dedicated uniform value
    (or, for inflation with a market-sentiment anchor, from a triangular
    distribution peaking at the anchor). Cash never takes bounds.

    Example:
        >>> from retirement_model.montecarlo.sampling import stratified_normal_samples
        >>> market = MarketAssumptions.create_default()
        >>> gen = CorrelatedReturnGenerator(market)
        >>> rng = np.random.default_rng(7)
        >>> z = stratified_normal_samples(1000, market.dimensions, rng)
        >>> year = gen.generate_yearly_returns(z, *gen.draw_bound_uniforms(1000, rng))
        >>> year.stocks.shape
        (1000,)
    """

    def __init__(self,
                 market_assumptions: MarketAssumptions,
                 rate_assumptions: Optional[RateAssumptions] = None):
        """Initialize the return generator.

        Args:
            market_assumptions: Fixed historical parameters and correlations
            rate_assumptions: Optional caller-supplied bounds per factor
        """
        self.market = market_assumptions
        self.rates = rate_assumptions or RateAssumptions()
        self._cholesky = cholesky_factor(market_assumptions.correlation_matrix)
        self._means = market_assumptions.get_returns_vector()
        self._vols = market_assumptions.get_volatilities_vector()
        self._index = {name: i for i, name in enumerate(market_assumptions.asset_class_order)}

    @property
    def cholesky(self) -> np.ndarray:
        return self._cholesky

    def draw_bound_uniforms(self, n: int, rng) -> List[np.ndarray]:
        """Dedicated uniforms for bound sampling: stocks, bonds, inflation, triangular."""
        return [rng.random(n) for _ in range(4)]

    def generate_yearly_returns(self,
                                normal_samples: np.ndarray,
                                stock_uniforms: np.ndarray,
                                bond_uniforms: np.ndarray,
                                inflation_uniforms: np.ndarray,
                                triangular_uniforms: np.ndarray) -> YearlyReturns:
        """Generate one year of returns for every trial.

        Args:
            normal_samples: (n, assets + 1) independent deviates; the last
                            column drives inflation
            stock_uniforms: Uniform draws for bound-based stock returns
            bond_uniforms: Uniform draws for bound-based bond returns
            inflation_uniforms: Uniform draws for bound-based inflation
            triangular_uniforms: Uniform draws for sentiment-anchored inflation

        Returns:
            YearlyReturns with one value per trial for each factor
        """
        num_assets = len(self.market.asset_class_order)
        independent = normal_samples[:, :num_assets]

        # z_corr = L @ z for every row
        correlated = independent @ self._cholesky.T
        asset_returns = self._means + self._vols * correlated

        stocks = asset_returns[:, self._index[STOCKS]]
        bonds = asset_returns[:, self._index[BONDS]]
        cash = asset_returns[:, self._index[CASH]]

        if self.rates.stock_returns is not None:
            stocks = _uniform_between(self.rates.stock_returns, stock_uniforms)
        if self.rates.bond_returns is not None:
            bonds = _uniform_between(self.rates.bond_returns, bond_uniforms)

        inflation_bounds = self.rates.inflation
        if inflation_bounds is None:
            inflation = np.maximum(
                0.0,
                self.market.inflation.expected_return
                + self.market.inflation.volatility * normal_samples[:, num_assets]
            )
        elif inflation_bounds.market_sentiment is not None:
            inflation = _triangular_between(inflation_bounds, triangular_uniforms)
        else:
            inflation = _uniform_between(inflation_bounds, inflation_uniforms)

        return YearlyReturns(stocks=stocks, bonds=bonds, cash=cash, inflation=inflation)
