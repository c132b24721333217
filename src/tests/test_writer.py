"""
Pytest unit tests for didgetmm.writer.
"""

import gzip
import json
import os
import tempfile

import numpy as np

from didgetmm.acoustical_analysis import analyze_geometry_simplified
from didgetmm.errors import InsufficientGeometry
from didgetmm.writer import NumpyEncoder, result_to_json, write_results

CYLINDER = [(0, 40), (150, 40)]


class TestNumpyEncoder:
    """Tests for NumpyEncoder."""

    def test_numpy_types(self):
        data = {"i": np.int64(3), "f": np.float32(0.5), "a": np.arange(3)}
        assert json.loads(json.dumps(data, cls=NumpyEncoder)) == {"i": 3, "f": 0.5, "a": [0, 1, 2]}

    def test_complex(self):
        decoded = json.loads(json.dumps([1 + 2j, np.complex128(3 - 4j)], cls=NumpyEncoder))
        assert decoded == [{"real": 1.0, "imag": 2.0}, {"real": 3.0, "imag": -4.0}]


class TestWriteResults:
    """Tests for result_to_json and write_results."""

    def test_result_to_json(self):
        result = analyze_geometry_simplified(CYLINDER)
        decoded = json.loads(result_to_json(result))
        assert decoded["calculation_method"] == "simplified"
        assert len(decoded["results"]) == 6

    def test_write_json(self):
        result = analyze_geometry_simplified(CYLINDER)
        with tempfile.TemporaryDirectory() as tmpdir:
            outfile = os.path.join(tmpdir, "results.json")
            write_results({"cylinder": result, "broken": InsufficientGeometry("need 2 points")}, outfile)
            with open(outfile) as f:
                data = json.load(f)
        assert data["cylinder"]["results"][0]["harmonic"] == 1
        assert data["broken"] == {"error": "need 2 points"}

    def test_write_gzip(self):
        result = analyze_geometry_simplified(CYLINDER)
        with tempfile.TemporaryDirectory() as tmpdir:
            outfile = os.path.join(tmpdir, "results.json.gz")
            write_results({"cylinder": result}, outfile)
            with gzip.open(outfile, "rt") as f:
                data = json.load(f)
        assert data["cylinder"]["calculation_method"] == "simplified"
