"""
Cooperative cancellation of running sweeps.
"""

import threading

from .errors import AnalysisCancelled


class CancellationToken:
    """Flag shared between the caller and a running analysis; checked once per sweep sample."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    def is_cancelled(self):
        return self._event.is_set()

    def raise_if_cancelled(self):
        if self._event.is_set():
            raise AnalysisCancelled("analysis was cancelled")
