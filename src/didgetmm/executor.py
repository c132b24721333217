"""
Running analyses on a thread pool.

The analysis functions are synchronous and reentrant. AnalysisExecutor
submits them to a ThreadPoolExecutor and gives every job its own
CancellationToken, so a caller can keep the UI or server loop responsive and
abandon a sweep that is no longer needed.
"""

import logging
import multiprocessing
import threading
from concurrent.futures import ThreadPoolExecutor

from tqdm import tqdm

from .acoustical_analysis import ANALYSIS_METHODS
from .cancellation import CancellationToken
from .config import DEFAULT_CONFIG


class AnalysisExecutor:
    """
    Thread pool for bore analyses.

    Args:
        max_n_threads: upper bound for the number of worker threads; defaults
            to the number of CPUs.
        config: AnalysisConfig used when a job does not bring its own.
    """

    def __init__(self, max_n_threads=None, config=None):
        num_workers = multiprocessing.cpu_count()
        if max_n_threads is not None:
            num_workers = min(max_n_threads, num_workers)

        logging.info(f"initialize threadpoolexecutor with {num_workers} workers")
        self.pool = ThreadPoolExecutor(max_workers=num_workers)
        self.config = config or DEFAULT_CONFIG
        self._tokens = {}
        self._lock = threading.Lock()

    def submit(self, points, config=None, method="auto"):
        """
        Schedule one analysis.

        Args:
            points: bore profile accepted by the analysis functions.
            config: AnalysisConfig, the executor's config if None.
            method: "auto", "tmm" or "simplified".

        Returns:
            concurrent.futures.Future resolving to an AnalysisResult.
        """
        if method not in ANALYSIS_METHODS:
            raise ValueError(f"unknown analysis method \"{method}\"")
        token = CancellationToken()
        # cancel() waits on the lock until the token is registered
        with self._lock:
            future = self.pool.submit(ANALYSIS_METHODS[method], points, config or self.config, token)
            self._tokens[future] = token
        future.add_done_callback(self._forget)
        return future

    def _forget(self, future):
        with self._lock:
            self._tokens.pop(future, None)

    def cancel(self, future):
        """Cancel a queued job or ask a running one to stop at its next sweep sample."""
        with self._lock:
            token = self._tokens.get(future)
        if future.cancel():
            return
        if token is not None:
            token.cancel()

    def map(self, profiles, config=None, method="auto", progress=False):
        """Analyze several bores; results in input order. The first failure is raised."""
        futures = [self.submit(p, config=config, method=method) for p in profiles]
        return [f.result() for f in tqdm(futures, total=len(futures), disable=not progress)]

    def shutdown(self, wait=True):
        self.pool.shutdown(wait=wait)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.shutdown()
        return False
