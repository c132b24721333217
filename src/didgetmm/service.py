"""
Dictionary based entry points for clients (web front ends, RPC handlers).

Every function returns ``{"success": True, "data": ...}`` or
``{"success": False, "error": message}`` and never raises for bad input.
"""

import logging
import math

import numpy as np

from .acoustical_analysis import analyze_geometry
from .config import DEFAULT_CONFIG
from .conv import classify_frequency
from .errors import AcousticError
from .geo import didgmo_to_points, parse_didgmo

# exceptions turned into {"success": False}
CLIENT_ERRORS = (AcousticError, ValueError, KeyError, TypeError)


def _ok(data):
    return {"success": True, "data": data}


def _error(e):
    logging.debug(f"request failed: {e}")
    return {"success": False, "error": str(e)}


def _require(data, key):
    if not isinstance(data, dict):
        raise TypeError(f"expected a dict, got {type(data).__name__}")
    if key not in data or data[key] is None:
        raise KeyError(f"missing \"{key}\"")
    return data[key]


def _positive_frequency(value, name):
    value = float(value)
    if not (math.isfinite(value) and value > 0):
        raise ValueError(f"{name} must be a positive frequency, got {value}")
    return value


def parse_geometry(text):
    """Parse a DIDGMO string into {"length", "diameters", "format"} (mm)."""
    try:
        length, diameters = parse_didgmo(text)
        return _ok({"length": length, "diameters": diameters, "format": "DIDGMO"})
    except CLIENT_ERRORS as e:
        return _error(e)


def _analyze_didgmo(geometry, config):
    length = float(_require(geometry, "length"))
    diameters = [float(d) for d in _require(geometry, "diameters")]
    points = didgmo_to_points(length, diameters, config=config)
    return analyze_geometry(points, config)


def _note_dict(frequency, config):
    note = classify_frequency(frequency, config.reference_pitch)
    return {"frequency": frequency, "note": note.note, "octave": note.octave, "cents": note.cents,
            "name": note.name}


def calculate_frequencies(geometry, config=None):
    """
    Resonances of a parsed DIDGMO geometry.

    Returns:
        data with "fundamental" (Hz), "harmonics" (Hz, without the fundamental),
        "notes" (one dict per resonance) and "method".
    """
    config = config or DEFAULT_CONFIG
    try:
        result = _analyze_didgmo(geometry, config)
        frequencies = result.frequencies
        return _ok({
            "fundamental": frequencies[0] if frequencies else None,
            "harmonics": frequencies[1:],
            "notes": [_note_dict(f, config) for f in frequencies],
            "method": result.calculation_method,
        })
    except CLIENT_ERRORS as e:
        return _error(e)


def _inharmonicity(fundamental, harmonics):
    if len(harmonics) == 0:
        return 0.0
    ratios = np.asarray(harmonics, dtype=np.float64) / fundamental
    return float(np.mean(np.abs(ratios - np.round(ratios))))


def _brightness(fundamental, harmonics):
    # weighted spectral centroid relative to the fundamental, partial k weighted 1/k
    partials = np.concatenate(([fundamental], np.asarray(harmonics, dtype=np.float64)))
    weights = 1.0 / np.arange(1, len(partials) + 1)
    centroid = np.sum(partials * weights) / np.sum(weights)
    return float(min(1.0, max(0.0, (centroid / fundamental - 1) / 3)))


def _describe(fundamental, brightness, inharmonicity):
    if fundamental < 60:
        register = "deep"
    elif fundamental < 90:
        register = "mid-range"
    else:
        register = "high-pitched"

    if brightness < 0.3:
        color = "warm"
    elif brightness < 0.6:
        color = "balanced"
    else:
        color = "bright"

    clean = "clean" if inharmonicity < 0.1 else "complex"
    return f"{register}, {color} drone with {clean} overtones"


def analyze_tone(frequencies, config=None):
    """
    Tonal character of a fundamental and its overtones.

    Args:
        frequencies: {"fundamental": Hz, "harmonics": [Hz, ...]}.

    Returns:
        data with "note", "pitch" and "characteristics" (harmonic_count,
        inharmonicity, brightness, description).
    """
    config = config or DEFAULT_CONFIG
    try:
        fundamental = _positive_frequency(_require(frequencies, "fundamental"), "fundamental")
        harmonics = [_positive_frequency(f, "harmonic") for f in frequencies.get("harmonics") or []]
        inharmonicity = _inharmonicity(fundamental, harmonics)
        brightness = _brightness(fundamental, harmonics)
        return _ok({
            "note": _note_dict(fundamental, config),
            "pitch": fundamental,
            "characteristics": {
                "harmonic_count": len(harmonics),
                "inharmonicity": inharmonicity,
                "brightness": brightness,
                "description": _describe(fundamental, brightness, inharmonicity),
            },
        })
    except CLIENT_ERRORS as e:
        return _error(e)


def calculate_resonant_modes(geometry, config=None):
    """Resonances of a parsed DIDGMO geometry as a list of modes sorted by frequency."""
    config = config or DEFAULT_CONFIG
    try:
        result = _analyze_didgmo(geometry, config)
        f0 = result.frequencies[0] if result.results else None
        modes = []
        for r in sorted(result.results, key=lambda r: r.frequency):
            mode = r.to_dict()
            mode["ratio"] = r.frequency / f0
            modes.append(mode)
        return _ok({"modes": modes, "method": result.calculation_method})
    except CLIENT_ERRORS as e:
        return _error(e)


def get_quality_metrics(analysis, config=None):
    """
    Scores from 0 to 100 for an analysed tone.

    Args:
        analysis: {"fundamental": Hz, "harmonics": [Hz, ...]}, e.g. the data of
            calculate_frequencies.

    Returns:
        data with "clarity" (closeness of the overtones to integer ratios),
        "richness" (number of overtones), "balance" (evenness of the overtone
        spacing) and "overall" (their mean).
    """
    try:
        fundamental = _positive_frequency(_require(analysis, "fundamental"), "fundamental")
        harmonics = sorted(_positive_frequency(f, "harmonic") for f in analysis.get("harmonics") or [])

        clarity = 100 * max(0.0, 1 - 2 * _inharmonicity(fundamental, harmonics))
        richness = 100 * min(1.0, len(harmonics) / 5)

        spacings = np.abs(np.diff(np.concatenate(([fundamental], harmonics))))
        if len(spacings) > 1 and np.mean(spacings) > 0:
            balance = 100 * max(0.0, 1 - float(np.std(spacings) / np.mean(spacings)))
        elif len(spacings) > 1:
            balance = 0.0
        else:
            balance = 100.0

        return _ok({
            "clarity": float(clarity),
            "richness": float(richness),
            "balance": float(balance),
            "overall": float((clarity + richness + balance) / 3),
        })
    except CLIENT_ERRORS as e:
        return _error(e)
