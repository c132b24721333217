"""
Impedance spectrum container.
"""

from typing import NamedTuple

import numpy as np
import pandas as pd


class ImpedanceSample(NamedTuple):
    frequency: float
    impedance: complex
    magnitude: float
    phase: float


class ImpedanceSpectrum:
    """
    Input impedance sampled over a frequency sweep.

    Frequencies are strictly increasing. The arrays are copied on
    construction, so a spectrum never shares memory with its inputs.

    Attributes:
        frequencies: np.ndarray of frequencies in Hz.
        impedances: np.ndarray (complex128) of input impedances in Pa*s/m^3.
        skipped: number of sweep samples dropped by the "skip" error policy.
    """

    def __init__(self, frequencies, impedances, skipped=0):
        self.frequencies = np.array(frequencies, dtype=np.float64)
        self.impedances = np.array(impedances, dtype=np.complex128)
        self.skipped = skipped

        if self.frequencies.ndim != 1 or self.frequencies.shape != self.impedances.shape:
            raise ValueError("frequencies and impedances must be 1-d arrays of equal length")
        if len(self.frequencies) > 1 and not np.all(np.diff(self.frequencies) > 0):
            raise ValueError("frequencies must be strictly increasing")

    @classmethod
    def from_magnitudes(cls, frequencies, magnitudes):
        """Spectrum with real impedances, e.g. for measured magnitude curves."""
        return cls(frequencies, np.asarray(magnitudes, dtype=np.float64))

    @property
    def magnitudes(self):
        return np.abs(self.impedances)

    @property
    def phases(self):
        return np.angle(self.impedances)

    def __len__(self):
        return len(self.frequencies)

    def __getitem__(self, i):
        z = complex(self.impedances[i])
        return ImpedanceSample(float(self.frequencies[i]), z, abs(z), float(np.angle(z)))

    def __iter__(self):
        for i in range(len(self)):
            yield self[i]

    def to_records(self, max_points=200):
        """Down-sampled list of {"frequency", "magnitude", "phase"} dicts (every n-th sample)."""
        step = max(1, int(np.ceil(len(self) / max_points))) if max_points else 1
        magnitudes = self.magnitudes
        phases = self.phases
        return [
            {
                "frequency": float(self.frequencies[i]),
                "magnitude": float(magnitudes[i]),
                "phase": float(phases[i]),
            }
            for i in range(0, len(self), step)
        ]

    def to_dataframe(self):
        return pd.DataFrame({
            "freq": self.frequencies,
            "impedance": self.magnitudes,
            "phase": self.phases,
        })
