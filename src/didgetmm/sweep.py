"""
Frequency grids for impedance sweeps.
"""

import math

import numpy as np

from .config import DEFAULT_CONFIG


def generate_frequency_range(fmin=30.0, fmax=1000.0, step_low=0.5, step_high=1.0, split=100.0):
    """
    Two-resolution linear frequency grid.

    Frequencies below `split` are spaced `step_low` apart, frequencies at and
    above `split` are spaced `step_high` apart. The first value is exactly
    `fmin` and the last value exactly `fmax`. Values are computed from the
    index, so the grid does not drift with the number of steps.

    Returns:
        np.ndarray of strictly increasing frequencies in Hz.
    """
    if not 0 < fmin < fmax:
        raise ValueError(f"invalid frequency bounds {fmin}..{fmax}")
    if step_low <= 0 or step_high <= 0:
        raise ValueError("frequency steps must be positive")

    low_end = min(split, fmax)
    n_low = max(0, int(math.ceil((low_end - fmin) / step_low - 1e-9)))
    low = fmin + step_low * np.arange(n_low)

    high_start = max(split, fmin)
    if high_start <= fmax:
        n_high = int(math.floor((fmax - high_start) / step_high + 1e-9)) + 1
        high = high_start + step_high * np.arange(n_high)
    else:
        high = np.array([])

    frequencies = np.concatenate((low, high))
    if fmax - frequencies[-1] > 1e-9 * fmax:
        frequencies = np.append(frequencies, fmax)
    else:
        frequencies[-1] = fmax
    return frequencies


def get_log_simulation_frequencies(fmin=30.0, fmax=1000.0, max_error=5):
    """
    Logarithmically spaced frequencies with at most `max_error` cents between neighbours.

    Gives the same relative resolution in every octave, which suits
    resonances whose bandwidth grows with frequency.

    Returns:
        np.ndarray of ascending frequencies in Hz, all <= fmax, starting at fmin.
    """
    if not 0 < fmin < fmax:
        raise ValueError(f"invalid frequency bounds {fmin}..{fmax}")
    if max_error <= 0:
        raise ValueError("max_error must be positive")
    n = int(math.ceil(1200 * math.log2(fmax / fmin) / max_error))
    frequencies = fmin * np.power(2.0, np.arange(n + 1) * max_error / 1200)
    return frequencies[frequencies <= fmax * (1 + 1e-12)]


def sweep_frequencies(config=DEFAULT_CONFIG):
    """Frequency grid selected by config.sweep."""
    if config.sweep == "log":
        return get_log_simulation_frequencies(config.fmin, config.fmax, config.log_max_error)
    return generate_frequency_range(config.fmin, config.fmax, config.step_low, config.step_high,
                                    config.step_split)
