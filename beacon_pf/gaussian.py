"""
Beacon-PF Gaussian Distribution Utility
=======================================

Immutable univariate normal distribution used to build the per-beacon
likelihood models of the particle filter.

The CDF and quantile are evaluated through rational-polynomial
approximations of erfc / inverse erfc (Numerical Recipes), not through the
exact special functions. Every particle is weighted through the same
approximation, so the approximation itself is the numerical contract:

    erfc   : Numerical Recipes in C 2e, p. 221 (|error| < 1.2e-7)
    ierfc  : Numerical Recipes 3e, p. 265 (rational seed + 2 Newton steps)

License: AGPL-3.0-or-later
"""

import math
from dataclasses import dataclass, field
from typing import Union

import numpy as np

from .errors import InvalidParameterError

ArrayLike = Union[float, np.ndarray]

_SQRT2 = math.sqrt(2.0)
_SQRT_2PI = math.sqrt(2.0 * math.pi)
_TWO_OVER_SQRT_PI = 1.12837916709551257

# Saturation value returned by ierfc outside its (0, 2) domain
IERFC_SATURATION = 100.0


# =============================================================================
# ERROR FUNCTION APPROXIMATIONS
# =============================================================================

def erfc(x: ArrayLike) -> ArrayLike:
    """Complementary error function (Chebyshev rational approximation).

    Accepts scalars or numpy arrays. Absolute error is below 1.2e-7 everywhere.
    """
    x_arr = np.asarray(x, dtype=float)
    z = np.abs(x_arr)
    t = 1.0 / (1.0 + 0.5 * z)
    r = t * np.exp(-z * z - 1.26551223 + t * (1.00002368 +
        t * (0.37409196 + t * (0.09678418 + t * (-0.18628806 +
        t * (0.27886807 + t * (-1.13520398 + t * (1.48851587 +
        t * (-0.82215223 + t * 0.17087277)))))))))
    r = np.where(x_arr >= 0, r, 2.0 - r)
    if r.ndim == 0:
        return float(r)
    return r


def ierfc(x: float) -> float:
    """Inverse complementary error function.

    Returns -100 for x >= 2 and +100 for x <= 0 instead of diverging.
    """
    if x >= 2:
        return -IERFC_SATURATION
    if x <= 0:
        return IERFC_SATURATION

    xx = x if x < 1 else 2 - x
    t = math.sqrt(-2.0 * math.log(xx / 2.0))

    r = -0.70711 * ((2.30753 + t * 0.27061) /
                    (1.0 + t * (0.99229 + t * 0.04481)) - t)

    # Halley refinement
    for _ in range(2):
        err = erfc(r) - xx
        r += err / (_TWO_OVER_SQRT_PI * math.exp(-(r * r)) - r * err)

    return r if x < 1 else -r


# =============================================================================
# GAUSSIAN
# =============================================================================

@dataclass(frozen=True)
class Gaussian:
    """Normal distribution N(mean, variance).

    Attributes:
        mean: Distribution mean
        variance: Distribution variance, strictly positive
        standard_deviation: sqrt(variance), derived

    Example::

        g = Gaussian(0.0, 25.0)
        g.cdf(-3.0)              # likelihood of a 3 m range residual
        g.combine_with(other)    # precision-weighted fusion
    """
    mean: float
    variance: float
    standard_deviation: float = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not self.variance > 0:
            raise InvalidParameterError(
                f"Variance must be > 0 (but was {self.variance})",
                {"mean": self.mean, "variance": self.variance},
            )
        object.__setattr__(self, "standard_deviation", math.sqrt(self.variance))

    @classmethod
    def from_precision_mean(cls, precision: float, precision_mean: float) -> "Gaussian":
        """Build from precision (1/variance) and precision-weighted mean."""
        if not precision > 0:
            raise InvalidParameterError(
                f"Precision must be > 0 (but was {precision})",
                {"precision": precision, "precision_mean": precision_mean},
            )
        return cls(precision_mean / precision, 1.0 / precision)

    @property
    def precision(self) -> float:
        return 1.0 / self.variance

    @property
    def precision_mean(self) -> float:
        return self.mean / self.variance

    # -------------------------------------------------------------------------
    # Evaluation
    # -------------------------------------------------------------------------

    def pdf(self, x: ArrayLike) -> ArrayLike:
        """Probability density at x."""
        x = np.asarray(x, dtype=float)
        m = self.standard_deviation * _SQRT_2PI
        e = np.exp(-((x - self.mean) ** 2) / (2.0 * self.variance))
        out = e / m
        return float(out) if out.ndim == 0 else out

    def cdf(self, x: ArrayLike) -> ArrayLike:
        """Cumulative probability P(X <= x)."""
        x = np.asarray(x, dtype=float)
        return erfc(-(x - self.mean) / (self.standard_deviation * _SQRT2)) * 0.5

    def ppf(self, p: float) -> float:
        """Quantile (inverse CDF) of probability p."""
        return self.mean - self.standard_deviation * _SQRT2 * ierfc(2.0 * p)

    # -------------------------------------------------------------------------
    # Algebra
    # -------------------------------------------------------------------------

    def add(self, other: "Gaussian") -> "Gaussian":
        """Distribution of X + Y for independent X, Y."""
        return Gaussian(self.mean + other.mean, self.variance + other.variance)

    def sub(self, other: "Gaussian") -> "Gaussian":
        """Distribution of X - Y for independent X, Y (variances still add)."""
        return Gaussian(self.mean - other.mean, self.variance + other.variance)

    def scale(self, c: float) -> "Gaussian":
        """Distribution of c * X."""
        return Gaussian(self.mean * c, self.variance * c * c)

    def divide_by(self, c: float) -> "Gaussian":
        """Distribution of X / c."""
        if c == 0:
            raise InvalidParameterError("Cannot divide a Gaussian by zero", {"divisor": c})
        return self.scale(1.0 / c)

    def combine_with(self, other: "Gaussian") -> "Gaussian":
        """Product of densities (Bayesian fusion) in precision form."""
        return Gaussian.from_precision_mean(
            self.precision + other.precision,
            self.precision_mean + other.precision_mean,
        )

    def divide_out(self, other: "Gaussian") -> "Gaussian":
        """Quotient of densities in precision form; inverse of combine_with.

        Raises InvalidParameterError when ``other`` carries at least as much
        precision as ``self`` (resulting variance would be non-positive).
        """
        return Gaussian.from_precision_mean(
            self.precision - other.precision,
            self.precision_mean - other.precision_mean,
        )
