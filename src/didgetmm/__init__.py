"""
didgetmm: resonance analysis of didgeridoo bores by the transfer matrix method.

Import from the root for the main API, e.g.::

    from didgetmm import analyze_geometry, AnalysisConfig, Geo

    result = analyze_geometry([(0, 30), (150, 60)])   # positions in cm, diameters in mm
    print(result.to_dataframe())

Submodules (for more specific imports):

- **acoustical_analysis** – analyze_geometry, transfer matrix and simplified analyses
- **geo** – GeometryPoint, BoreSegment, Geo, geometry parsers
- **sim** – transfer matrices, radiation impedance, impedance sweeps
- **peaks** – resonance detection in impedance spectra
- **conv** – note/frequency conversion (classify_frequency, cent_diff)
- **service** – dict based wrappers for clients
- **executor** – thread pool with cancellation
- **app** – application shell, config, logging
"""

from .config import AnalysisConfig, DEFAULT_CONFIG
from .errors import (
    AcousticError,
    InvalidGeometry,
    InsufficientGeometry,
    DegenerateSegment,
    InvalidRadiation,
    DivisionByZero,
    NumericalInstability,
    AnalysisCancelled,
)
from .geo import (
    GeometryPoint,
    BoreSegment,
    Geo,
    create_segments,
    parse_geometry_lines,
    parse_didgmo,
    points_from_text,
)
from .sim.transfer_matrix import TransferMatrix, segment_transfer_matrix, cascade
from .sim.radiation import radiation_impedance
from .sim.tmm import compute_impedance_spectrum, acoustical_simulation
from .spectrum import ImpedanceSpectrum, ImpedanceSample
from .sweep import generate_frequency_range, get_log_simulation_frequencies
from .peaks import Resonance, find_resonance_peaks
from .conv import NoteInfo, classify_frequency, note_to_freq, freq_to_note, cent_diff
from .results import (
    HarmonicResult,
    AnalysisMetadata,
    AnalysisResult,
    TransferMatrixResult,
    SimplifiedResult,
)
from .acoustical_analysis import (
    analyze_geometry,
    analyze_geometry_transfer_matrix,
    analyze_geometry_simplified,
)
from .cancellation import CancellationToken
from .executor import AnalysisExecutor

__all__ = [
    "AnalysisConfig",
    "DEFAULT_CONFIG",
    "AcousticError",
    "InvalidGeometry",
    "InsufficientGeometry",
    "DegenerateSegment",
    "InvalidRadiation",
    "DivisionByZero",
    "NumericalInstability",
    "AnalysisCancelled",
    "GeometryPoint",
    "BoreSegment",
    "Geo",
    "create_segments",
    "parse_geometry_lines",
    "parse_didgmo",
    "points_from_text",
    "TransferMatrix",
    "segment_transfer_matrix",
    "cascade",
    "radiation_impedance",
    "compute_impedance_spectrum",
    "acoustical_simulation",
    "ImpedanceSpectrum",
    "ImpedanceSample",
    "generate_frequency_range",
    "get_log_simulation_frequencies",
    "Resonance",
    "find_resonance_peaks",
    "NoteInfo",
    "classify_frequency",
    "note_to_freq",
    "freq_to_note",
    "cent_diff",
    "HarmonicResult",
    "AnalysisMetadata",
    "AnalysisResult",
    "TransferMatrixResult",
    "SimplifiedResult",
    "analyze_geometry",
    "analyze_geometry_transfer_matrix",
    "analyze_geometry_simplified",
    "CancellationToken",
    "AnalysisExecutor",
]
