"""
Resonance detection in impedance spectra.

Resonances of the bore are the maxima of the input impedance magnitude. A
local maximum counts as a resonance when it stands out of its surroundings
(prominence relative to its height) and is not negligible against the
strongest maximum of the spectrum.
"""

import math
from typing import NamedTuple

import numpy as np
from scipy.signal import argrelextrema, peak_prominences

from .config import DEFAULT_CONFIG

# Q above this counts as perfectly sharp
Q_NORMALIZATION = 20.0


class Resonance(NamedTuple):
    """
    One detected impedance peak.

    Attributes:
        index: sample index in the spectrum.
        frequency: Hz.
        magnitude: |Z| at the peak.
        amplitude: magnitude relative to the strongest peak, in [0, 1].
        quality: sharpness and frequency weighted quality, in [0, 1].
        q_factor: frequency / half-power bandwidth.
        prominence: scipy peak prominence in units of |Z|.
    """
    index: int
    frequency: float
    magnitude: float
    amplitude: float
    quality: float
    q_factor: float
    prominence: float


def find_peak_indices(magnitudes, min_prominence=0.05, min_relative_magnitude=0.1):
    """
    Indices of strict local maxima that qualify as resonances.

    Endpoints are never peaks, neither are plateaus. A maximum is kept if its
    prominence is at least `min_prominence` times its own magnitude and its
    magnitude at least `min_relative_magnitude` times the largest local maximum.

    Returns:
        np.ndarray of ascending indices.
    """
    magnitudes = np.asarray(magnitudes, dtype=np.float64)
    if len(magnitudes) < 3:
        return np.array([], dtype=int)

    candidates = argrelextrema(magnitudes, np.greater)[0]
    if len(candidates) == 0:
        return candidates

    heights = magnitudes[candidates]
    prominences = peak_prominences(magnitudes, candidates)[0]
    keep = (prominences >= min_prominence * heights) & (heights >= min_relative_magnitude * heights.max())
    return candidates[keep]


def _crossing(frequencies, magnitudes, index, level, direction):
    # walk from the peak until the magnitude drops to level, interpolate linearly
    i = index
    last = len(magnitudes) - 1
    while 0 < i < last and magnitudes[i] > level:
        i += direction
    if magnitudes[i] > level:
        return frequencies[i]
    j = i - direction
    m0, m1 = magnitudes[i], magnitudes[j]
    if m1 == m0:
        return frequencies[i]
    return frequencies[i] + (level - m0) * (frequencies[j] - frequencies[i]) / (m1 - m0)


def half_power_bandwidth(frequencies, magnitudes, index):
    """Width in Hz of the peak at `index` at 1/sqrt(2) of its magnitude.

    Where the curve does not fall below that level before the end of the
    spectrum, the last sample is taken as the edge.
    """
    level = magnitudes[index] / math.sqrt(2)
    left = _crossing(frequencies, magnitudes, index, level, -1)
    right = _crossing(frequencies, magnitudes, index, level, 1)
    return right - left


def resonance_quality(frequency, q_factor):
    """
    Map a Q factor to [0, 1] and weight it by frequency.

    Sharpness is Q / 20 capped at 1, the frequency factor falls linearly from 1
    at 60 Hz to 0.3 at 340 Hz and stays there.
    """
    sharpness = min(1.0, q_factor / Q_NORMALIZATION)
    frequency_factor = min(1.0, max(0.3, 1.0 - (frequency - 60.0) / 400.0))
    return sharpness * frequency_factor


def find_resonance_peaks(spectrum, config=DEFAULT_CONFIG):
    """
    Detect the resonances of an impedance spectrum.

    Args:
        spectrum: ImpedanceSpectrum.
        config: AnalysisConfig with min_prominence, min_relative_magnitude and max_harmonics.

    Returns:
        list of Resonance, ascending in frequency, at most config.max_harmonics long.
    """
    frequencies = spectrum.frequencies
    magnitudes = spectrum.magnitudes
    indices = find_peak_indices(magnitudes, config.min_prominence, config.min_relative_magnitude)
    if len(indices) == 0:
        return []

    strongest = magnitudes[argrelextrema(magnitudes, np.greater)[0]].max()
    prominences = peak_prominences(magnitudes, indices)[0]

    resonances = []
    for i, prominence in zip(indices[:config.max_harmonics], prominences):
        frequency = float(frequencies[i])
        bandwidth = half_power_bandwidth(frequencies, magnitudes, i)
        q_factor = frequency / bandwidth if bandwidth > 0 else math.inf
        resonances.append(Resonance(
            index=int(i),
            frequency=frequency,
            magnitude=float(magnitudes[i]),
            amplitude=float(magnitudes[i] / strongest),
            quality=float(resonance_quality(frequency, q_factor)),
            q_factor=float(q_factor),
            prominence=float(prominence),
        ))
    return resonances
