"""Tests for the Beacon-PF Gaussian distribution utility."""
import dataclasses
import math

import numpy as np
import pytest
from numpy.testing import assert_allclose
from scipy import integrate, special
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from beacon_pf.gaussian import Gaussian, erfc, ierfc, IERFC_SATURATION
from beacon_pf.errors import InvalidParameterError


GAUSSIANS = [
    Gaussian(0.0, 1.0),
    Gaussian(10.0, 4.0),
    Gaussian(-3.5, 0.25),
    Gaussian(250.0, 900.0),
]


class TestErrorFunctions:
    """erfc / ierfc rational approximations."""

    def test_erfc_matches_reference(self):
        """Approximation stays within 1.2e-7 of the exact erfc."""
        x = np.linspace(-6.0, 6.0, 2001)
        assert np.max(np.abs(erfc(x) - special.erfc(x))) < 1.2e-7

    def test_erfc_scalar_returns_float(self):
        assert isinstance(erfc(0.3), float)
        assert erfc(0.0) == pytest.approx(1.0, abs=1e-7)

    def test_erfc_symmetry(self):
        """erfc(-x) = 2 - erfc(x)."""
        x = np.linspace(0.1, 4.0, 50)
        assert_allclose(erfc(-x), 2.0 - erfc(x), atol=1e-12)

    def test_ierfc_matches_reference(self):
        x = np.linspace(0.05, 1.95, 77)
        ours = np.array([ierfc(v) for v in x])
        assert_allclose(ours, special.erfcinv(x), atol=1e-5)

    def test_ierfc_inverts_erfc(self):
        for r in [-1.5, -0.4, 0.0, 0.2, 1.1]:
            assert ierfc(erfc(r)) == pytest.approx(r, abs=1e-6)

    @pytest.mark.parametrize("x, expected", [
        (2.0, -IERFC_SATURATION),
        (3.5, -IERFC_SATURATION),
        (0.0, IERFC_SATURATION),
        (-1.0, IERFC_SATURATION),
    ])
    def test_ierfc_saturates_outside_domain(self, x, expected):
        assert ierfc(x) == expected


class TestGaussianConstruction:
    """Construction and validation."""

    @pytest.mark.parametrize("variance", [0.0, -1.0, float('nan')])
    def test_rejects_non_positive_variance(self, variance):
        with pytest.raises(InvalidParameterError) as info:
            Gaussian(0.0, variance)
        assert info.value.kind == "invalid_parameter"
        assert "variance" in info.value.context

    def test_invalid_parameter_is_value_error(self):
        with pytest.raises(ValueError):
            Gaussian(1.0, -2.0)

    def test_standard_deviation(self):
        assert Gaussian(3.0, 16.0).standard_deviation == 4.0

    def test_immutable(self):
        g = Gaussian(0.0, 1.0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            g.mean = 5.0

    def test_from_precision_mean(self):
        g = Gaussian.from_precision_mean(0.5, 1.5)
        assert g.mean == pytest.approx(3.0)
        assert g.variance == pytest.approx(2.0)

    def test_from_precision_mean_rejects_zero_precision(self):
        with pytest.raises(InvalidParameterError):
            Gaussian.from_precision_mean(0.0, 1.0)


class TestGaussianEvaluation:
    """pdf / cdf / ppf laws."""

    @pytest.mark.parametrize("g", GAUSSIANS)
    def test_cdf_at_mean_is_half(self, g):
        assert abs(g.cdf(g.mean) - 0.5) < 1e-6

    @pytest.mark.parametrize("g", GAUSSIANS)
    def test_pdf_integrates_to_one(self, g):
        """Trapezoidal integral over ±8 std."""
        s = g.standard_deviation
        x = np.linspace(g.mean - 8 * s, g.mean + 8 * s, 4001)
        area = integrate.trapezoid(g.pdf(x), x)
        assert abs(area - 1.0) < 1e-3

    def test_pdf_peak(self):
        g = Gaussian(2.0, 9.0)
        assert g.pdf(2.0) == pytest.approx(1.0 / (3.0 * math.sqrt(2 * math.pi)))

    @pytest.mark.parametrize("g", GAUSSIANS)
    def test_ppf_inverts_cdf(self, g):
        s = g.standard_deviation
        for x in np.linspace(g.mean - 3 * s, g.mean + 3 * s, 25):
            assert abs(g.ppf(g.cdf(x)) - x) < 1e-3

    def test_cdf_vectorised(self):
        g = Gaussian(0.0, 1.0)
        out = g.cdf(np.array([-1.0, 0.0, 1.0]))
        assert out.shape == (3,)
        assert_allclose(out, special.ndtr([-1.0, 0.0, 1.0]), atol=1e-7)

    def test_ppf_saturates(self):
        g = Gaussian(0.0, 1.0)
        assert g.ppf(0.0) == pytest.approx(-100.0 * math.sqrt(2))
        assert g.ppf(1.0) == pytest.approx(100.0 * math.sqrt(2))


class TestGaussianAlgebra:
    """add / sub / scale / precision-form fusion."""

    def test_add(self):
        g = Gaussian(1.0, 2.0).add(Gaussian(3.0, 5.0))
        assert (g.mean, g.variance) == (4.0, 7.0)

    def test_sub_adds_variances(self):
        g = Gaussian(1.0, 2.0).sub(Gaussian(3.0, 5.0))
        assert (g.mean, g.variance) == (-2.0, 7.0)

    def test_scale(self):
        g = Gaussian(1.5, 2.0).scale(-2.0)
        assert (g.mean, g.variance) == (-3.0, 8.0)

    def test_divide_by(self):
        g = Gaussian(4.0, 8.0).divide_by(2.0)
        assert g.mean == pytest.approx(2.0)
        assert g.variance == pytest.approx(2.0)

    def test_divide_by_zero(self):
        with pytest.raises(InvalidParameterError):
            Gaussian(4.0, 8.0).divide_by(0.0)

    def test_combine_with(self):
        g = Gaussian(0.0, 1.0).combine_with(Gaussian(2.0, 1.0))
        assert g.mean == pytest.approx(1.0)
        assert g.variance == pytest.approx(0.5)

    def test_combine_then_divide_out_is_identity(self):
        a = Gaussian(1.5, 2.0)
        b = Gaussian(-0.7, 0.5)
        back = a.combine_with(b).divide_out(b)
        assert abs(back.mean - a.mean) < 1e-9
        assert abs(back.variance - a.variance) < 1e-9

    def test_divide_out_rejects_non_positive_precision(self):
        """Removing more precision than is present has no valid result."""
        wide = Gaussian(0.0, 4.0)
        narrow = Gaussian(1.0, 1.0)
        with pytest.raises(InvalidParameterError):
            wide.divide_out(narrow)
        with pytest.raises(InvalidParameterError):
            wide.divide_out(wide)
