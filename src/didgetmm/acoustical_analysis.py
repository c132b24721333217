"""
Resonance analysis of didgeridoo bores.

Three entry points:

- analyze_geometry_transfer_matrix: impedance sweep by the transfer matrix
  method and peak detection.
- analyze_geometry_simplified: empirical quarter-wave model, no sweep.
- analyze_geometry: transfer matrix method with automatic fallback to the
  simplified model when the sweep fails or finds no resonance.

All of them validate the geometry before doing any numeric work and accept a
per-call AnalysisConfig.

Example:
    >>> from didgetmm.acoustical_analysis import analyze_geometry
    >>> result = analyze_geometry([(0, 30), (150, 60)])  # cm, mm
    >>> result.calculation_method
    'transfer_matrix_method'
"""

import logging
import math

import numpy as np

from .config import DEFAULT_CONFIG
from .conv import classify_frequency
from .errors import AcousticError, AnalysisCancelled, InvalidGeometry
from .geo import average_radius, compute_volume, create_segments, taper_factor, total_length
from .peaks import find_resonance_peaks
from .results import AnalysisMetadata, HarmonicResult, SimplifiedResult, TransferMatrixResult
from .sim.tmm import compute_impedance_spectrum
from .sweep import sweep_frequencies

# length of the mouthpiece region in m
MOUTHPIECE_REGION = 0.03

# the simplified model reports the partials 1..SIMPLIFIED_HARMONICS
SIMPLIFIED_HARMONICS = 6

# sweep start relative to the quarter-wave fundamental of bores that resonate below fmin
LOW_SWEEP_FACTOR = 0.5


def _harmonic_result(frequency, harmonic, amplitude, quality, config):
    note = classify_frequency(frequency, config.reference_pitch)
    return HarmonicResult(
        frequency=float(frequency),
        harmonic=harmonic,
        note=note.note,
        octave=note.octave,
        cents=note.cents,
        amplitude=float(amplitude),
        quality=float(quality),
    )


def effective_length(segments, config=DEFAULT_CONFIG):
    """Physical length plus the open-end correction at the bell, in m."""
    return total_length(segments) + config.end_correction_factor * segments[-1].r2


def _metadata(segments, config, spectrum=None, fallback_reason=None):
    return AnalysisMetadata(
        effective_length=effective_length(segments, config),
        physical_length=total_length(segments),
        average_radius=average_radius(segments),
        volume=compute_volume(segments),
        mouthpiece_radius=segments[0].r1,
        bell_radius=segments[-1].r2,
        reference_pitch=config.reference_pitch,
        impedance_spectrum=spectrum,
        fallback_reason=fallback_reason,
    )


# transfer matrix method

def quarter_wave_frequency(segments, config=DEFAULT_CONFIG):
    """Uncorrected quarter-wave fundamental c / (4 * effective length), in Hz."""
    return config.speed_of_sound / (4 * effective_length(segments, config))


def _sweep_config(segments, config):
    # long bores resonate below fmin; start the sweep well below their fundamental
    quarter_wave = quarter_wave_frequency(segments, config)
    if quarter_wave >= config.fmin:
        return config
    fmin = LOW_SWEEP_FACTOR * quarter_wave
    logging.info(f"quarter-wave fundamental {quarter_wave:.2f} Hz below sweep range, "
                 f"sweeping from {fmin:.2f} Hz")
    return config.replace(fmin=fmin)


def _analyze_segments_transfer_matrix(segments, config, cancel_token=None):
    frequencies = sweep_frequencies(_sweep_config(segments, config))
    logging.debug(f"sweeping {len(frequencies)} frequencies over {len(segments)} segments")
    spectrum = compute_impedance_spectrum(segments, frequencies, config, cancel_token)
    resonances = find_resonance_peaks(spectrum, config)

    results = [
        _harmonic_result(r.frequency, i + 1, r.amplitude, r.quality, config)
        for i, r in enumerate(resonances)
    ]
    if len(results) > 0:
        f0 = results[0]
        logging.info(f"transfer matrix analysis: fundamental {f0.frequency:.2f} Hz "
                     f"({f0.note_name} {f0.cents:+d} ct), {len(results)} resonances")
    else:
        logging.info("transfer matrix analysis: no resonance found")
    return TransferMatrixResult(results, _metadata(segments, config, spectrum))


def analyze_geometry_transfer_matrix(points, config=None, cancel_token=None):
    """
    Resonances of a bore from its computed input impedance spectrum.

    When the quarter-wave fundamental of the bore lies below config.fmin, the
    sweep starts at half of it instead, so the fundamental is not missed.

    Args:
        points: GeometryPoint sequence, (position, diameter) pairs or a Geo.
        config: AnalysisConfig, DEFAULT_CONFIG if None.
        cancel_token: optional CancellationToken checked once per sweep sample.

    Returns:
        TransferMatrixResult; metadata.impedance_spectrum holds the sweep.

    Raises:
        InsufficientGeometry: fewer than two points.
        InvalidGeometry: malformed profile.
        AnalysisCancelled: the token was cancelled.
        AcousticError: numeric failure with on_sample_error="abort".
    """
    config = config or DEFAULT_CONFIG
    segments = create_segments(points, config=config)
    return _analyze_segments_transfer_matrix(segments, config, cancel_token)


# simplified model

def _radius_at(segments, x):
    for s in segments:
        if x <= s.end_position:
            t = (x - s.start_position) / s.length
            return s.r1 + t * (s.r2 - s.r1)
    return segments[-1].r2


def mouthpiece_correction(segments, config=DEFAULT_CONFIG):
    """
    Coupling efficiency of the player's mouth to the bore.

    Refined from the first 30 mm when the profile has a point inside that
    region, config.mouth_impedance_factor otherwise. Narrow mouthpieces couple
    better (optimum around 15 mm radius); a diameter growth of about 0.3 mm per
    mm over the region is best.
    """
    if segments[0].length > MOUTHPIECE_REGION:
        return config.mouth_impedance_factor

    region = min(MOUTHPIECE_REGION, total_length(segments))
    weighted = 0.0
    for s in segments:
        if s.start_position >= region:
            break
        end = min(s.end_position, region)
        weighted += (s.r1 + _radius_at(segments, end)) / 2 * (end - s.start_position)
    mouthpiece_radius = weighted / region

    size_correction = min(0.95, max(0.75, 1.0 - (mouthpiece_radius - 0.015) * 2.0))

    # diameter growth in mm per mm of bore
    rate = 2 * (_radius_at(segments, region) - segments[0].r1) / region
    taper_correction = min(1.1, max(0.9, 1.0 - abs(rate - 0.3) * 0.1))
    return size_correction * taper_correction


def fundamental_frequency(segments, config=DEFAULT_CONFIG):
    """Quarter-wave fundamental with mouthpiece and radius corrections, in Hz."""
    f0 = quarter_wave_frequency(segments, config)
    radius_correction = 1 - 0.1 * average_radius(segments)
    return f0 * mouthpiece_correction(segments, config) * radius_correction


def harmonic_amplitude(n, taper):
    """Relative amplitude of partial n; the second partial is boosted by flare."""
    amplitude = 1.0 / n
    if n == 2:
        amplitude *= 1 + 0.5 * taper
    return min(1.0, max(0.1, amplitude))


def harmonic_quality(frequency, taper):
    frequency_factor = max(0.3, 1 - (frequency - 60) / 400)
    return min(1.0, frequency_factor + min(0.3, taper))


def _included_partials(config):
    if not config.stochastic_harmonics:
        return [n for n in range(1, SIMPLIFIED_HARMONICS + 1)
                if n == 1 or 1 / math.sqrt(n) > config.harmonic_inclusion_threshold]

    rng = np.random.default_rng(config.random_seed)
    partials = [1]
    for n in range(2, SIMPLIFIED_HARMONICS + 1):
        # suppressed with probability 1 - 1/sqrt(n)
        if rng.random() < 1 / math.sqrt(n):
            partials.append(n)
    return partials


def _analyze_segments_simplified(segments, config, fallback_reason=None):
    f0 = fundamental_frequency(segments, config)
    taper = taper_factor(segments)

    results = []
    for n in _included_partials(config):
        frequency = f0 * n * (1 + taper * math.log(n) * 0.05)
        results.append(_harmonic_result(frequency, n, harmonic_amplitude(n, taper),
                                         harmonic_quality(frequency, taper), config))

    logging.info(f"simplified analysis: fundamental {f0:.2f} Hz, {len(results)} harmonics")
    return SimplifiedResult(results, _metadata(segments, config, fallback_reason=fallback_reason))


def analyze_geometry_simplified(points, config=None, cancel_token=None):
    """
    Harmonics of a bore from the empirical quarter-wave model.

    The cancellation token is accepted for a uniform signature; the model
    runs no sweep.

    Returns:
        SimplifiedResult
    """
    config = config or DEFAULT_CONFIG
    segments = create_segments(points, config=config)
    return _analyze_segments_simplified(segments, config)


# automatic selection

def analyze_geometry(points, config=None, cancel_token=None):
    """
    Analyze a bore, preferring the transfer matrix method.

    The simplified model is used instead when the transfer matrix method is
    disabled, when the bore's quarter-wave fundamental lies above the sweep,
    when the sweep fails with an AcousticError, or when it finds no resonance.
    Validation errors and cancellation are never turned into a fallback.

    Returns:
        TransferMatrixResult or SimplifiedResult; a fallback is recorded in
        metadata.fallback_reason.
    """
    config = config or DEFAULT_CONFIG
    segments = create_segments(points, config=config)

    if not config.transfer_matrix_enabled:
        return _analyze_segments_simplified(segments, config)

    quarter_wave = quarter_wave_frequency(segments, config)
    if quarter_wave > config.fmax:
        reason = f"quarter-wave fundamental {quarter_wave:.0f} Hz above sweep range"
    else:
        try:
            result = _analyze_segments_transfer_matrix(segments, config, cancel_token)
        except (InvalidGeometry, AnalysisCancelled):
            raise
        except AcousticError as e:
            reason = f"transfer matrix analysis failed: {e}"
        else:
            if len(result.results) > 0:
                return result
            reason = "no resonance found in impedance spectrum"

    logging.warning(f"falling back to simplified model: {reason}")
    return _analyze_segments_simplified(segments, config, fallback_reason=reason)


ANALYSIS_METHODS = {
    "auto": analyze_geometry,
    "tmm": analyze_geometry_transfer_matrix,
    "simplified": analyze_geometry_simplified,
}
