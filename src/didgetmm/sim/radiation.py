"""
Radiation impedance of the open bell.

Low-frequency approximation of Levine & Schwinger (1948) for a circular
opening of radius a, valid for ka << 1, which covers the didgeridoo band::

    Zrad = Zc * (alpha * (ka)^2 + j * delta * ka),  Zc = rho * c / (pi * a^2)

delta * a is the familiar end correction (0.6133 a unflanged, 0.8216 a flanged).
"""

import math

from ..config import DEFAULT_CONFIG
from ..errors import InvalidRadiation

# (alpha, delta) per termination
LEVINE_SCHWINGER = {
    "unflanged": (0.25, 0.6133),
    "flanged": (0.5, 0.8216),
}


def radiation_impedance(radius, frequency, config=DEFAULT_CONFIG):
    """
    Radiation impedance at the open end.

    Args:
        radius: bell radius in m.
        frequency: frequency in Hz.
        config: AnalysisConfig (speed of sound, air density, radiation_model).

    Returns:
        complex impedance in Pa*s/m^3 with positive real part.

    Raises:
        InvalidRadiation: radius or frequency not positive and finite.
    """
    if not (math.isfinite(radius) and radius > 0):
        raise InvalidRadiation(f"radius must be positive, got {radius}")
    if not (math.isfinite(frequency) and frequency > 0):
        raise InvalidRadiation(f"frequency must be positive, got {frequency}")

    c = config.speed_of_sound
    ka = 2.0 * math.pi * frequency / c * radius
    zc = config.air_density * c / (math.pi * radius * radius)
    alpha, delta = LEVINE_SCHWINGER[config.radiation_model]
    return complex(zc * alpha * ka * ka, zc * delta * ka)
