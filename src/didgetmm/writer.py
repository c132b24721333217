"""
JSON output of analysis results.
"""

import gzip
import json
import logging

import numpy as np


class NumpyEncoder(json.JSONEncoder):
    """JSON encoder that converts numpy scalars, arrays and complex numbers to JSON types."""

    def default(self, obj):
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, np.floating):
            return float(obj)
        if isinstance(obj, (complex, np.complexfloating)):
            return {"real": float(obj.real), "imag": float(obj.imag)}
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        return json.JSONEncoder.default(self, obj)


def result_to_json(result, max_spectrum_points=200):
    """Serialize an AnalysisResult (or any dict) to a JSON string."""
    data = result.to_dict(max_spectrum_points) if hasattr(result, "to_dict") else result
    return json.dumps(data, cls=NumpyEncoder)


def write_results(results, outfile, max_spectrum_points=200):
    """
    Write analysis results to a JSON file, gzip compressed if outfile ends with .gz.

    Args:
        results: dict mapping a name (e.g. the input file) to an AnalysisResult,
            or to an error message string.
    """
    data = {}
    for name, result in results.items():
        if hasattr(result, "to_dict"):
            data[name] = result.to_dict(max_spectrum_points)
        else:
            data[name] = {"error": str(result)}

    if outfile.endswith(".gz"):
        with gzip.open(outfile, "wt") as f:
            json.dump(data, f, cls=NumpyEncoder)
    else:
        with open(outfile, "w") as f:
            json.dump(data, f, cls=NumpyEncoder, indent=2)
    logging.info(f"wrote {len(data)} results to {outfile}")
