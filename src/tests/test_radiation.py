"""
Pytest unit tests for didgetmm.sim.radiation.
"""

import math

import numpy as np
import pytest

from didgetmm.config import AnalysisConfig
from didgetmm.errors import InvalidRadiation
from didgetmm.sim.radiation import radiation_impedance


class TestRadiationImpedance:
    """Tests for radiation_impedance."""

    def test_positive_real_and_imaginary_part(self):
        z = radiation_impedance(0.03, 100.0)
        assert z.real > 0
        assert z.imag > 0

    def test_unflanged_end_correction(self):
        # reactance = Zc * k * 0.6133 a, the mass of an extra 0.6133 a of tube
        a, f, c = 0.025, 80.0, 343.0
        z = radiation_impedance(a, f)
        zc = 1.225 * c / (math.pi * a * a)
        k = 2 * math.pi * f / c
        assert z.imag == pytest.approx(zc * k * 0.6133 * a)
        assert z.real == pytest.approx(zc * 0.25 * (k * a) ** 2)

    def test_magnitude_non_decreasing_with_frequency(self):
        mags = [abs(radiation_impedance(0.03, f)) for f in np.linspace(30, 1000, 200)]
        assert np.all(np.diff(mags) >= 0)

    def test_flanged_has_larger_end_correction(self):
        flanged = AnalysisConfig(radiation_model="flanged")
        assert radiation_impedance(0.03, 200.0, flanged).imag > radiation_impedance(0.03, 200.0).imag

    @pytest.mark.parametrize("radius", [0.0, -0.01, float("nan")])
    def test_bad_radius_raises(self, radius):
        with pytest.raises(InvalidRadiation, match="radius"):
            radiation_impedance(radius, 100.0)

    @pytest.mark.parametrize("f", [0.0, -5.0, float("inf")])
    def test_bad_frequency_raises(self, f):
        with pytest.raises(InvalidRadiation, match="frequency"):
            radiation_impedance(0.03, f)
