"""
Per-call analysis configuration.

Every analysis entry point takes an ``AnalysisConfig``. There is no global
engine state: forcing the simplified model, changing the tuning reference or
the error policy is done by passing a different config, e.g.::

    cfg = AnalysisConfig().replace(transfer_matrix_enabled=False, reference_pitch=432)
"""

from dataclasses import dataclass, fields, replace as _replace
from typing import Optional

from .errors import InvalidGeometry

# factor from the given unit to meters
UNIT_FACTORS = {
    "m": 1.0,
    "cm": 0.01,
    "mm": 0.001,
}

RADIATION_MODELS = ("unflanged", "flanged")
SWEEP_MODES = ("linear", "log")
SAMPLE_ERROR_POLICIES = ("abort", "skip")


@dataclass(frozen=True)
class AnalysisConfig:
    """
    Physical constants, sweep, detection and fallback settings for one analysis.

    Attributes:
        speed_of_sound: c in m/s.
        air_density: rho in kg/m^3.
        viscosity: dynamic viscosity of air in Pa*s (used with viscothermal_losses).
        viscothermal_losses: apply the CADSD boundary-layer loss approximation.
            Without losses the segments are ideal lossless ducts.
        radiation_model: "unflanged" or "flanged" Levine-Schwinger termination.
        reference_pitch: frequency of A4 in Hz for note classification.
        position_unit: unit of GeometryPoint.position ("m", "cm", "mm").
        diameter_unit: unit of GeometryPoint.diameter ("m", "cm", "mm").
        sweep: "linear" (two-step 0.5/1.0 Hz grid) or "log" (bounded cent error).
        fmin, fmax: sweep bounds in Hz.
        step_low, step_high, step_split: linear sweep steps below / at and above step_split.
        log_max_error: cent error bound of the log sweep.
        min_prominence: minimum peak prominence as a fraction of the peak magnitude.
        min_relative_magnitude: minimum peak magnitude as a fraction of the largest peak.
        max_harmonics: number of lowest resonances reported.
        on_sample_error: "abort" raises on the first failing sample, "skip" drops it.
        transfer_matrix_enabled: analyze_geometry tries the transfer-matrix model first.
        end_correction_factor: open-end correction of the simplified model, times bell radius.
        mouth_impedance_factor: default mouth coupling efficiency of the simplified model.
        harmonic_inclusion_threshold: simplified model reports harmonic n if 1/sqrt(n) exceeds it.
        stochastic_harmonics: suppress simplified harmonics by a seeded random draw instead.
        random_seed: seed of the stochastic mode; None draws a fresh seed.
    """

    speed_of_sound: float = 343.0
    air_density: float = 1.225
    viscosity: float = 1.708e-5
    viscothermal_losses: bool = True
    radiation_model: str = "unflanged"
    reference_pitch: float = 440.0
    position_unit: str = "cm"
    diameter_unit: str = "mm"
    sweep: str = "linear"
    fmin: float = 30.0
    fmax: float = 1000.0
    step_low: float = 0.5
    step_high: float = 1.0
    step_split: float = 100.0
    log_max_error: float = 5.0
    min_prominence: float = 0.05
    min_relative_magnitude: float = 0.1
    max_harmonics: int = 6
    on_sample_error: str = "abort"
    transfer_matrix_enabled: bool = True
    end_correction_factor: float = 0.6
    mouth_impedance_factor: float = 0.85
    harmonic_inclusion_threshold: float = 0.2
    stochastic_harmonics: bool = False
    random_seed: Optional[int] = None

    def __post_init__(self):
        if self.position_unit not in UNIT_FACTORS:
            raise InvalidGeometry(f"unknown position unit \"{self.position_unit}\"")
        if self.diameter_unit not in UNIT_FACTORS:
            raise InvalidGeometry(f"unknown diameter unit \"{self.diameter_unit}\"")
        if self.radiation_model not in RADIATION_MODELS:
            raise ValueError(f"unknown radiation model \"{self.radiation_model}\"")
        if self.sweep not in SWEEP_MODES:
            raise ValueError(f"unknown sweep \"{self.sweep}\"")
        if self.on_sample_error not in SAMPLE_ERROR_POLICIES:
            raise ValueError(f"unknown sample error policy \"{self.on_sample_error}\"")
        if self.speed_of_sound <= 0 or self.air_density <= 0 or self.reference_pitch <= 0:
            raise ValueError("speed_of_sound, air_density and reference_pitch must be positive")
        if not 0 < self.fmin < self.fmax:
            raise ValueError(f"invalid sweep bounds {self.fmin}..{self.fmax}")

    @property
    def position_factor(self):
        return UNIT_FACTORS[self.position_unit]

    @property
    def diameter_factor(self):
        return UNIT_FACTORS[self.diameter_unit]

    def replace(self, **changes):
        """Return a copy with the given fields changed."""
        return _replace(self, **changes)

    @classmethod
    def from_app_config(cls, conf):
        """Build a config from a dict such as ``didgetmm.app.get_config()``.

        Keys that are not fields of AnalysisConfig (e.g. log_level) are ignored,
        as are values that are None.
        """
        names = {f.name for f in fields(cls)}
        kwargs = {key: value for key, value in conf.items() if key in names and value is not None}
        return cls(**kwargs)


DEFAULT_CONFIG = AnalysisConfig()
