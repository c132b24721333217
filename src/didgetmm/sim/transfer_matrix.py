"""
Transfer matrices (ABCD) of bore segments and their cascade.

A segment relates acoustic pressure p and volume flow U at its two ends::

    [p_in]   [A  B] [p_out]
    [U_in] = [C  D] [U_out]

Conical segments use the spherical-wave solution of the horn equation for a
truncated cone (Mapes-Riordan, "Horn Modeling with Conical and Cylindrical
Transmission Line Elements", AES 1991), with distances measured along the
slant from the virtual apex. Cylindrical segments use the plane-wave duct
matrix. Both are written for a general propagation constant, so the same code
serves the lossless case (gamma = jk) and the viscothermal loss model
of Frank Geipel's CADSD.
"""

import cmath
import math
from functools import reduce
from typing import NamedTuple

from ..complex_ops import add, divide, multiply
from ..config import DEFAULT_CONFIG
from ..errors import DegenerateSegment

PI = math.pi

# |taper_ratio - 1| below this is treated as a cylinder
CYLINDER_TOLERANCE = 1e-6

# boundary layer constants of the CADSD loss model
LOSS_ATTENUATION = 1.045
LOSS_IMPEDANCE = 0.369


class TransferMatrix(NamedTuple):
    """2x2 complex transfer matrix of an acoustic two-port."""
    A: complex
    B: complex
    C: complex
    D: complex

    @classmethod
    def identity(cls):
        return cls(1 + 0j, 0j, 0j, 1 + 0j)

    def __matmul__(self, other):
        return TransferMatrix(
            self.A * other.A + self.B * other.C,
            self.A * other.B + self.B * other.D,
            self.C * other.A + self.D * other.C,
            self.C * other.B + self.D * other.D,
        )

    def determinant(self):
        """A*D - B*C; 1 for every reciprocal element and for any cascade of them."""
        return self.A * self.D - self.B * self.C

    def input_impedance(self, z_load):
        """Impedance seen at the input when the output is terminated by z_load."""
        return divide(add(multiply(self.A, z_load), self.B), add(multiply(self.C, z_load), self.D))


def _check_segment(segment, frequency):
    values = (segment.length, segment.r1, segment.r2)
    if not all(math.isfinite(v) and v > 0 for v in values):
        raise DegenerateSegment(
            f"segment needs positive length and radii, got length={segment.length}, "
            f"r1={segment.r1}, r2={segment.r2}")
    if not (math.isfinite(frequency) and frequency > 0):
        raise DegenerateSegment(f"frequency must be positive and finite, got {frequency}")


def propagation(segment, omega, config=DEFAULT_CONFIG):
    """
    Propagation constant and characteristic impedance of a segment.

    The characteristic impedance refers to the input (mouthpiece side) area of
    the segment.

    Returns:
        (gamma, zc) as complex numbers.
    """
    c = config.speed_of_sound
    rho = config.air_density
    k = omega / c
    z0 = rho * c / (PI * segment.r1 * segment.r1)

    if not config.viscothermal_losses:
        return 1j * k, complex(z0)

    # ratio of the mean radius to the viscous boundary layer thickness
    rv = segment.average_radius * math.sqrt(rho * omega / config.viscosity)
    gamma = complex(k * LOSS_ATTENUATION / rv, k * (1.0 + LOSS_ATTENUATION / rv))
    zc = complex(z0 * (1.0 + LOSS_IMPEDANCE / rv), -z0 * LOSS_IMPEDANCE / rv)
    return gamma, zc


def cylinder_matrix(gamma, zc, length):
    gl = gamma * length
    ch = cmath.cosh(gl)
    sh = cmath.sinh(gl)
    return TransferMatrix(ch, zc * sh, sh / zc, ch)


def cone_matrix(gamma, zc, r1, r2, length):
    # slant geometry: x_in / x_out are the apex distances of both ends
    phi = math.atan((r2 - r1) / length)
    s = math.sin(phi)
    slant = (r2 - r1) / s
    x_in = r1 / s
    x_out = r2 / s

    ch = cmath.cosh(gamma * slant)
    sh = cmath.sinh(gamma * slant)
    gx_in = gamma * x_in

    A = x_out / x_in * (ch - sh / (gamma * x_out))
    B = x_in / x_out * zc * sh
    C = ((x_out / x_in - 1.0 / (gx_in * gx_in)) * sh + gamma * slant / (gx_in * gx_in) * ch) / zc
    D = x_in / x_out * (ch + sh / gx_in)
    return TransferMatrix(A, B, C, D)


def segment_transfer_matrix(segment, frequency, config=DEFAULT_CONFIG):
    """
    Transfer matrix of one bore segment at the given frequency.

    Args:
        segment: BoreSegment in meters.
        frequency: frequency in Hz.
        config: AnalysisConfig with the physical constants and loss model.

    Returns:
        TransferMatrix with complex entries.

    Raises:
        DegenerateSegment: zero, negative or non-finite length or radius, or a
            non-positive / non-finite frequency.
    """
    _check_segment(segment, frequency)
    omega = 2.0 * PI * frequency
    gamma, zc = propagation(segment, omega, config)

    if abs(segment.taper_ratio - 1.0) < CYLINDER_TOLERANCE:
        return cylinder_matrix(gamma, zc, segment.length)
    return cone_matrix(gamma, zc, segment.r1, segment.r2, segment.length)


def cascade(matrices):
    """Multiply transfer matrices in bore order (mouthpiece first); empty input gives the identity."""
    return reduce(lambda x, y: x @ y, matrices, TransferMatrix.identity())


def bore_transfer_matrix(segments, frequency, config=DEFAULT_CONFIG):
    """Whole-bore transfer matrix at one frequency."""
    return cascade(segment_transfer_matrix(s, frequency, config) for s in segments)
