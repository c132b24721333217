"""
Complex arithmetic helpers used by the transfer-matrix engine.

Values are plain Python ``complex`` numbers. The helpers exist so that the one
operation with an error state, division, fails with a didgetmm error instead
of a bare ZeroDivisionError, and so that scalars coming from numpy are
normalised to ``complex``.
"""

import math

from .errors import DivisionByZero


def to_complex(z):
    """Coerce int, float, numpy scalar or complex to ``complex``."""
    return complex(z)


def add(z1, z2):
    return to_complex(z1) + to_complex(z2)


def subtract(z1, z2):
    return to_complex(z1) - to_complex(z2)


def multiply(z1, z2):
    return to_complex(z1) * to_complex(z2)


def divide(z1, z2):
    """Return z1 / z2.

    Raises:
        DivisionByZero: if ``|z2| == 0``.
    """
    z2 = to_complex(z2)
    if z2.real == 0 and z2.imag == 0:
        raise DivisionByZero(f"complex division by zero ({z1} / {z2})")
    return to_complex(z1) / z2


def magnitude(z):
    """sqrt(re^2 + im^2), computed without intermediate overflow."""
    z = to_complex(z)
    return math.hypot(z.real, z.imag)


def conjugate(z):
    return to_complex(z).conjugate()


def phase(z):
    """Argument of z in radians, in (-pi, pi]."""
    z = to_complex(z)
    return math.atan2(z.imag, z.real)


def is_finite(z):
    z = to_complex(z)
    return math.isfinite(z.real) and math.isfinite(z.imag)
