# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Market assumptions for asset classes and inflation.

This module contains the MarketAssumptions class which holds the fixed
historical return, volatility and correlation parameters the engine samples
from when the caller has not supplied bound-based rate assumptions.
"""

from dataclasses import dataclass
from typing import Dict, List
import numpy as np

STOCKS = "stocks"
BONDS = "bonds"
CASH = "cash"


@dataclass(frozen=True)
class AssetClassAssumptions:
    """Return and volatility assumptions for a single asset class.

    Attributes:
        name: Asset class identifier (e.g., "stocks")
        expected_return: Annual expected return as decimal (e.g., 0.07 for 7%)
        volatility: Annual standard deviation as decimal (e.g., 0.18 for 18%)
    """
    name: str
    expected_return: float
    volatility: float

    def __post_init__(self):
        if self.volatility < 0:
            raise ValueError(f"Volatility cannot be negative: {self.volatility}")


class MarketAssumptions:
    """Fixed historical market assumptions.

    Asset classes are correlated through `correlation_matrix`; inflation is
    sampled from its own independent dimension.

    Example:
        >>> assumptions = MarketAssumptions.create_default()
        >>> print(assumptions.asset_class_order)
        ['stocks', 'bonds', 'cash']
        >>> print(assumptions.get_returns_vector())
        [0.07 0.04 0.02]
    """

    def __init__(self,
                 asset_classes: Dict[str, AssetClassAssumptions],
                 correlation_matrix: np.ndarray,
                 asset_class_order: List[str],
                 inflation: AssetClassAssumptions):
        """Initialize market assumptions.

        Args:
            asset_classes: Dict mapping asset class name to its assumptions
            correlation_matrix: NxN correlation matrix for asset classes
            asset_class_order: Order of asset classes in the correlation matrix
            inflation: Mean and volatility of annual inflation

        Raises:
            ValueError: If matrix dimensions don't match or asset classes missing
        """
        self.asset_classes = asset_classes
        self.correlation_matrix = np.array(correlation_matrix, dtype=float)
        self.asset_class_order = list(asset_class_order)
        self.inflation = inflation
        self._validate()
        self.correlation_matrix.setflags(write=False)

    def _validate(self):
        """Validate that all inputs are consistent."""
        n = len(self.asset_class_order)

        if self.correlation_matrix.shape != (n, n):
            raise ValueError(
                f"Correlation matrix shape {self.correlation_matrix.shape} "
                f"doesn't match {n} asset classes"
            )

        missing = [name for name in self.asset_class_order
                   if name not in self.asset_classes]
        if missing:
            raise ValueError(f"Asset classes missing from assumptions: {missing}")

        # Check correlation matrix is symmetric and has 1s on diagonal
        if not np.allclose(self.correlation_matrix, self.correlation_matrix.T):
            raise ValueError("Correlation matrix must be symmetric")

        if not np.allclose(np.diag(self.correlation_matrix), 1.0):
            raise ValueError("Correlation matrix diagonal must be 1.0")

    @property
    def dimensions(self) -> int:
        """Normal deviates needed per trial-year (asset classes + inflation)."""
        return len(self.asset_class_order) + 1

    def get_returns_vector(self) -> np.ndarray:
        """Get expected returns as numpy array in asset_class_order."""
        return np.array([self.asset_classes[name].expected_return
                         for name in self.asset_class_order])

    def get_volatilities_vector(self) -> np.ndarray:
        """Get volatilities as numpy array in asset_class_order."""
        return np.array([self.asset_classes[name].volatility
                         for name in self.asset_class_order])

    @classmethod
    def create_default(cls) -> 'MarketAssumptions':
        """Create default market assumptions for stocks, bonds and cash.

        Returns:
            MarketAssumptions with long-run historical parameters.
        """
        asset_classes = {
            STOCKS: AssetClassAssumptions(STOCKS, 0.07, 0.18),
            BONDS: AssetClassAssumptions(BONDS, 0.04, 0.06),
            CASH: AssetClassAssumptions(CASH, 0.02, 0.01),
        }
        order = [STOCKS, BONDS, CASH]

        # Order: stocks, bonds, cash
        corr = np.array([
            [1.0, 0.1, 0.0],
            [0.1, 1.0, 0.1],
            [0.0, 0.1, 1.0],
        ])

        inflation = AssetClassAssumptions("inflation", 0.025, 0.01)

        return cls(asset_classes, corr, order, inflation)
