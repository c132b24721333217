"""
Result types of a bore analysis.

An analysis yields either a TransferMatrixResult (resonances found in a
computed impedance spectrum) or a SimplifiedResult (empirical quarter-wave
estimate). Both share the list of harmonics and the bore metadata; the
`calculation_method` tag tells them apart, also in serialized form.
"""

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

import pandas as pd

from .spectrum import ImpedanceSpectrum

TRANSFER_MATRIX_METHOD = "transfer_matrix_method"
SIMPLIFIED_METHOD = "simplified"


@dataclass(frozen=True)
class HarmonicResult:
    """
    One resonance of the bore.

    Attributes:
        frequency: Hz.
        harmonic: 1-based partial number, the fundamental is 1.
        note: nearest pitch class, e.g. "D".
        octave: C-based octave of the note.
        cents: deviation from the note in [-50, 50].
        amplitude: relative strength in [0, 1].
        quality: resonance quality in [0, 1].
    """
    frequency: float
    harmonic: int
    note: str
    octave: int
    cents: int
    amplitude: float
    quality: float

    @property
    def note_name(self):
        return f"{self.note}{self.octave}"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class AnalysisMetadata:
    """
    Bore measures and settings of an analysis, in SI units.

    Attributes:
        effective_length: physical length plus the open-end correction, in m.
        physical_length: length of the bore in m.
        average_radius: volume-weighted mean radius in m.
        volume: internal volume in m^3.
        mouthpiece_radius: radius of the first point in m.
        bell_radius: radius of the last point in m.
        reference_pitch: A4 frequency used for the note names.
        impedance_spectrum: computed spectrum (transfer matrix analyses only).
        fallback_reason: why a simplified result was produced by analyze_geometry, if it was.
    """
    effective_length: float
    physical_length: float
    average_radius: float
    volume: float
    mouthpiece_radius: float
    bell_radius: float
    reference_pitch: float
    impedance_spectrum: Optional[ImpedanceSpectrum] = None
    fallback_reason: Optional[str] = None

    def to_dict(self, max_spectrum_points=200) -> Dict[str, Any]:
        d = {
            "effective_length": self.effective_length,
            "physical_length": self.physical_length,
            "average_radius": self.average_radius,
            "volume": self.volume,
            "mouthpiece_radius": self.mouthpiece_radius,
            "bell_radius": self.bell_radius,
            "reference_pitch": self.reference_pitch,
        }
        if self.impedance_spectrum is not None:
            d["impedance_spectrum"] = self.impedance_spectrum.to_records(max_spectrum_points)
            d["skipped_samples"] = self.impedance_spectrum.skipped
        if self.fallback_reason is not None:
            d["fallback_reason"] = self.fallback_reason
        return d


@dataclass
class AnalysisResult(ABC):
    results: List[HarmonicResult] = field(default_factory=list)
    metadata: Optional[AnalysisMetadata] = None

    @property
    @abstractmethod
    def calculation_method(self) -> str:
        pass

    @property
    def fundamental(self) -> Optional[HarmonicResult]:
        return self.results[0] if len(self.results) > 0 else None

    @property
    def frequencies(self) -> List[float]:
        return [r.frequency for r in self.results]

    def to_dict(self, max_spectrum_points=200) -> Dict[str, Any]:
        return {
            "calculation_method": self.calculation_method,
            "results": [r.to_dict() for r in self.results],
            "metadata": None if self.metadata is None else self.metadata.to_dict(max_spectrum_points),
        }

    def to_dataframe(self):
        """One row per harmonic, in the shape of a notes table (freq, note_name, cent_diff, ...)."""
        rows = []
        for r in self.results:
            rows.append({
                "harmonic": r.harmonic,
                "freq": r.frequency,
                "note_name": r.note_name,
                "cent_diff": r.cents,
                "amplitude": r.amplitude,
                "quality": r.quality,
            })
        columns = ["harmonic", "freq", "note_name", "cent_diff", "amplitude", "quality"]
        return pd.DataFrame(rows, columns=columns)


@dataclass
class TransferMatrixResult(AnalysisResult):

    @property
    def calculation_method(self) -> str:
        return TRANSFER_MATRIX_METHOD

    @property
    def impedance_spectrum(self) -> Optional[ImpedanceSpectrum]:
        return None if self.metadata is None else self.metadata.impedance_spectrum


@dataclass
class SimplifiedResult(AnalysisResult):

    @property
    def calculation_method(self) -> str:
        return SIMPLIFIED_METHOD
