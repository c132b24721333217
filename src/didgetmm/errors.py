"""
Exception types raised by the didgetmm analysis engine.

Validation errors (InvalidGeometry, InsufficientGeometry) are raised before any
numeric work starts. The remaining errors come from the numeric layers and can
be caught by the orchestrator to fall back to the simplified model.
"""


class AcousticError(Exception):
    """Base class of all errors raised by didgetmm."""


class InvalidGeometry(AcousticError, ValueError):
    """Bore profile is malformed (non-increasing positions, bad diameter, bad unit).

    Attributes:
        line: 1-based line number in a parsed geometry text, if known.
    """

    def __init__(self, message, line=None):
        super().__init__(message)
        self.line = line


class InsufficientGeometry(InvalidGeometry):
    """Fewer than two geometry points were given."""


class DegenerateSegment(AcousticError):
    """Segment with zero length or radius, or a non-finite frequency, reached the matrix builder."""


class InvalidRadiation(AcousticError):
    """Non-positive radius or frequency passed to the radiation model."""


class DivisionByZero(AcousticError, ZeroDivisionError):
    """Complex division by a divisor of magnitude zero."""


class NumericalInstability(AcousticError):
    """A sweep sample produced a non-finite impedance."""


class AnalysisCancelled(AcousticError):
    """The cancellation token was set while a sweep was running."""
