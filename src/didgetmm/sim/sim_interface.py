"""
Abstract interface for acoustic simulation backends in didgetmm.

A simulator implements get_impedance_spectrum(geo, frequencies).
"""

from abc import ABC, abstractmethod

import numpy as np

from ..geo import Geo
from ..spectrum import ImpedanceSpectrum


class AcousticSimulationInterface(ABC):
    """Interface for computing the input impedance spectrum of a didgeridoo bore."""

    @abstractmethod
    def get_impedance_spectrum(self, geo: Geo, frequencies: np.ndarray) -> ImpedanceSpectrum:
        """Return the input impedance at each frequency in Hz for the given geometry."""
        pass
