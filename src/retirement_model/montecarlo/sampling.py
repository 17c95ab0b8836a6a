# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Stratified (Latin hypercube) sampling of standard-normal deviates.

Each dimension splits the unit interval into `n` equal strata, draws one
uniform value inside every stratum, shuffles the values and maps them to
normal space with a rational inverse-CDF approximation.
"""

from typing import Optional, Protocol, Union, runtime_checkable
import numpy as np

# Acklam's rational approximation, relative error ~1.15e-9
_A = (-3.969683028665376e+01, 2.209460984245205e+02, -2.759285104469687e+02,
      1.383577518672690e+02, -3.066479806614716e+01, 2.506628277459239e+00)
_B = (-5.447609879822406e+01, 1.615858368580409e+02, -1.556989798598866e+02,
      6.680131188771972e+01, -1.328068155288572e+01)
_C = (-7.784894002430293e-03, -3.223964580411365e-01, -2.400758277161838e+00,
      -2.549732539343734e+00, 4.374664141464968e+00, 2.938163982698783e+00)
_D = (7.784695709041462e-03, 3.224671290700398e-01, 2.445134137142996e+00,
      3.754408661907416e+00)

P_LOW = 0.02425
P_HIGH = 1 - P_LOW
P_MIN = 0.0001
P_MAX = 0.9999


@runtime_checkable
class RandomSource(Protocol):
    """Source of uniform randomness used by the engine.

    `numpy.random.Generator` satisfies this protocol; tests substitute a
    seeded generator to make runs reproducible.
    """

    def random(self, size: Optional[int] = None):
        """Uniform values in [0, 1)."""
        ...

    def uniform(self, low: float = 0.0, high: float = 1.0, size: Optional[int] = None):
        """Uniform values in [low, high)."""
        ...

    def permutation(self, x):
        """Randomly permuted copy of a sequence."""
        ...


def _tail(q: np.ndarray) -> np.ndarray:
    num = ((((_C[0] * q + _C[1]) * q + _C[2]) * q + _C[3]) * q + _C[4]) * q + _C[5]
    den = (((_D[0] * q + _D[1]) * q + _D[2]) * q + _D[3]) * q + 1
    return num / den


def inverse_normal_cdf(p: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
    """Map uniform probabilities to standard-normal deviates.

    Args:
        p: Probability or array of probabilities. Values are clamped to
           [0.0001, 0.9999] so the result is always finite.

    Returns:
        Deviate(s) z with Phi(z) ~= p, same shape as the input
    """
    p = np.clip(np.asarray(p, dtype=float), P_MIN, P_MAX)

    q = p - 0.5
    r = q * q
    central = ((((((_A[0] * r + _A[1]) * r + _A[2]) * r + _A[3]) * r + _A[4]) * r + _A[5]) * q /
               (((((_B[0] * r + _B[1]) * r + _B[2]) * r + _B[3]) * r + _B[4]) * r + 1))
    lower = _tail(np.sqrt(-2 * np.log(p)))
    upper = -_tail(np.sqrt(-2 * np.log(1 - p)))

    z = np.where(p < P_LOW, lower, np.where(p <= P_HIGH, central, upper))
    if z.ndim == 0:
        return float(z)
    return z


def stratified_uniforms(n: int, rng: RandomSource) -> np.ndarray:
    """One uniform draw per stratum [i/n, (i+1)/n), in random order."""
    strata = (np.arange(n) + rng.random(n)) / n
    return rng.permutation(strata)


def stratified_normal_samples(n: int, dimensions: int, rng: RandomSource) -> np.ndarray:
    """Generate `n` samples of `dimensions` standard-normal deviates.

    Each column is stratified and shuffled independently, so the columns are
    uncorrelated and every column covers the full distribution evenly.

    Args:
        n: Number of samples (one per trial)
        dimensions: Deviates per sample
        rng: Source of uniform randomness

    Returns:
        Array of shape (n, dimensions)
    """
    if n < 1:
        raise ValueError(f"Sample count must be at least 1, got {n}")
    samples = np.empty((n, dimensions))
    for d in range(dimensions):
        samples[:, d] = inverse_normal_cdf(stratified_uniforms(n, rng))
    return samples
