"""
Input impedance of a bore by the transfer matrix method.

The bore is cascaded segment by segment from the mouthpiece to the bell and
terminated by the radiation impedance of the bell::

    Zin = (A * Zrad + B) / (C * Zrad + D)
"""

import logging

from ..complex_ops import is_finite
from ..config import DEFAULT_CONFIG
from ..errors import (DegenerateSegment, DivisionByZero, InsufficientGeometry, InvalidRadiation,
                      NumericalInstability)
from ..geo import create_segments
from ..spectrum import ImpedanceSpectrum
from .radiation import radiation_impedance
from .sim_interface import AcousticSimulationInterface
from .transfer_matrix import bore_transfer_matrix

# per-sample errors the "skip" policy may drop
SAMPLE_ERRORS = (DegenerateSegment, InvalidRadiation, DivisionByZero, NumericalInstability)


def input_impedance(segments, frequency, config=DEFAULT_CONFIG):
    """
    Input impedance at the mouthpiece for one frequency.

    Raises:
        InsufficientGeometry: no segments.
        DegenerateSegment, InvalidRadiation, DivisionByZero: from the numeric layers.
        NumericalInstability: the result is not finite.
    """
    if len(segments) == 0:
        raise InsufficientGeometry("cannot compute an impedance without segments")
    matrix = bore_transfer_matrix(segments, frequency, config)
    z_rad = radiation_impedance(segments[-1].r2, frequency, config)
    z_in = matrix.input_impedance(z_rad)
    if not is_finite(z_in):
        raise NumericalInstability(f"non-finite input impedance at {frequency} Hz")
    return z_in


def compute_impedance_spectrum(segments, frequencies, config=DEFAULT_CONFIG, cancel_token=None):
    """
    Sweep the input impedance over the given frequencies.

    With config.on_sample_error == "abort" the first failing sample raises.
    With "skip" failing samples are left out and counted in
    ImpedanceSpectrum.skipped. The cancellation token is checked before
    every sample.

    Returns:
        ImpedanceSpectrum

    Raises:
        AnalysisCancelled: the token was cancelled.
    """
    if len(segments) == 0:
        raise InsufficientGeometry("cannot compute an impedance spectrum without segments")

    kept_frequencies = []
    impedances = []
    skipped = 0
    for f in frequencies:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        try:
            z = input_impedance(segments, float(f), config)
        except SAMPLE_ERRORS as e:
            if config.on_sample_error == "abort":
                raise
            logging.debug(f"skipping sample at {f} Hz: {e}")
            skipped += 1
            continue
        kept_frequencies.append(f)
        impedances.append(z)

    if skipped > 0:
        logging.warning(f"skipped {skipped} of {len(frequencies)} sweep samples")
    return ImpedanceSpectrum(kept_frequencies, impedances, skipped=skipped)


class TransferMatrixModel(AcousticSimulationInterface):
    """Transfer matrix simulator for Geo bores."""

    def __init__(self, config=DEFAULT_CONFIG):
        self.config = config

    def get_impedance_spectrum(self, geo, frequencies):
        segments = create_segments(geo, config=self.config)
        return compute_impedance_spectrum(segments, frequencies, self.config)


def acoustical_simulation(geo, frequencies, config=DEFAULT_CONFIG):
    """
    Impedance magnitude of a Geo at the given frequencies.

    Example:
        >>> import numpy as np
        >>> from didgetmm.geo import Geo
        >>> from didgetmm.sim.tmm import acoustical_simulation
        >>> geo = Geo.make_cone(120, 32, 60)  # 1.2 m cone, 32 mm mouth, 60 mm bell
        >>> imp = acoustical_simulation(geo, np.array([73, 150, 300]))
        >>> len(imp) == 3
        True
    """
    return TransferMatrixModel(config).get_impedance_spectrum(geo, frequencies).magnitudes
