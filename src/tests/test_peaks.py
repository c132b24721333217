"""
Pytest unit tests for didgetmm.peaks.
"""

import math

import numpy as np
import pytest

from didgetmm.config import AnalysisConfig
from didgetmm.peaks import (
    find_peak_indices,
    find_resonance_peaks,
    half_power_bandwidth,
    resonance_quality,
)
from didgetmm.spectrum import ImpedanceSpectrum

# two resonances, at 33 Hz and 39 Hz
FREQS = np.arange(30.0, 41.0)
MAGS = np.array([1.0, 1.2, 1.5, 2.0, 1.5, 1.2, 1.0, 1.3, 1.8, 2.5, 1.9])


class TestFindPeakIndices:
    """Tests for find_peak_indices."""

    def test_two_peaks(self):
        assert list(find_peak_indices(MAGS)) == [3, 9]

    def test_flat_has_no_peaks(self):
        assert len(find_peak_indices(np.ones(50))) == 0

    def test_monotonic_has_no_peaks(self):
        assert len(find_peak_indices(np.linspace(1, 10, 50))) == 0

    def test_endpoints_are_not_peaks(self):
        assert len(find_peak_indices([5.0, 1.0, 1.0, 1.0, 5.0])) == 0

    def test_too_short(self):
        assert len(find_peak_indices([1.0, 2.0])) == 0

    def test_ripple_is_ignored(self):
        mags = np.array([1.0, 1.01, 1.0, 1.0, 1.5, 3.0, 1.5, 1.0])
        assert list(find_peak_indices(mags)) == [5]

    def test_small_peak_is_ignored(self):
        mags = np.array([0.0, 10.0, 0.0, 0.0, 0.5, 0.0])
        assert list(find_peak_indices(mags, min_relative_magnitude=0.1)) == [1]
        assert list(find_peak_indices(mags, min_relative_magnitude=0.01)) == [1, 4]


class TestHalfPowerBandwidth:
    """Tests for half_power_bandwidth and resonance_quality."""

    def test_triangle(self):
        freqs = np.array([0.0, 1.0, 2.0, 3.0, 4.0])
        mags = np.array([0.0, 1.0, 2.0, 1.0, 0.0])
        assert half_power_bandwidth(freqs, mags, 2) == pytest.approx(4 - 2 * math.sqrt(2))

    def test_edge_is_used_when_curve_stays_high(self):
        freqs = np.array([0.0, 1.0, 2.0])
        mags = np.array([1.9, 2.0, 1.9])
        assert half_power_bandwidth(freqs, mags, 1) == pytest.approx(2.0)

    def test_quality_range(self):
        for f in [30, 60, 100, 300, 1000]:
            for q in [0.1, 1, 10, 20, 100, math.inf]:
                assert 0 <= resonance_quality(f, q) <= 1

    def test_quality_sharp_low_resonance(self):
        assert resonance_quality(60, 40) == pytest.approx(1.0)

    def test_quality_falls_with_frequency(self):
        assert resonance_quality(300, 40) < resonance_quality(100, 40)


class TestFindResonancePeaks:
    """Tests for find_resonance_peaks."""

    def test_finds_33_and_39_hz(self):
        peaks = find_resonance_peaks(ImpedanceSpectrum.from_magnitudes(FREQS, MAGS))
        assert [p.frequency for p in peaks] == [33.0, 39.0]
        assert [p.index for p in peaks] == [3, 9]

    def test_amplitude_relative_to_strongest(self):
        peaks = find_resonance_peaks(ImpedanceSpectrum.from_magnitudes(FREQS, MAGS))
        assert peaks[0].amplitude == pytest.approx(2.0 / 2.5)
        assert peaks[1].amplitude == pytest.approx(1.0)

    def test_amplitude_and_quality_in_range(self):
        peaks = find_resonance_peaks(ImpedanceSpectrum.from_magnitudes(FREQS, MAGS))
        for p in peaks:
            assert 0 <= p.amplitude <= 1
            assert 0 <= p.quality <= 1
            assert p.q_factor > 0
            assert p.prominence > 0

    def test_flat_spectrum_gives_no_peaks(self):
        spectrum = ImpedanceSpectrum.from_magnitudes(FREQS, np.ones(len(FREQS)))
        assert find_resonance_peaks(spectrum) == []

    def test_max_harmonics(self):
        cfg = AnalysisConfig(max_harmonics=1)
        peaks = find_resonance_peaks(ImpedanceSpectrum.from_magnitudes(FREQS, MAGS), cfg)
        assert [p.frequency for p in peaks] == [33.0]

    def test_ascending_frequencies(self):
        freqs = np.linspace(30, 1000, 2000)
        mags = 1 + np.abs(np.sin(freqs / 40.0))
        peaks = find_resonance_peaks(ImpedanceSpectrum.from_magnitudes(freqs, mags))
        assert len(peaks) == 6
        assert all(a.frequency < b.frequency for a, b in zip(peaks, peaks[1:]))
