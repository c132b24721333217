"""
Entry point for: python -m didgetmm FILE [FILE ...]

Analyzes bore files (line format or DIDGMO) and prints a harmonics table per
file. Analysis options (reference pitch, losses, units, ...) are read like
every other didgetmm setting, from the command line or ./*.conf.
"""

import logging
import sys

import configargparse
from tqdm import tqdm

from .app import add_config_options, init_app
from .config import AnalysisConfig
from .errors import AcousticError
from .executor import AnalysisExecutor
from .geo import check_geometry_limits, points_from_text
from .writer import write_results


def parse_args(args=None):
    p = configargparse.ArgParser(default_config_files=["./*.conf"],
                                 description="Resonance analysis of didgeridoo bores")
    add_config_options(p)
    p.add("files", nargs="+", help="bore files, one 'position diameter' pair per line, or DIDGMO")
    p.add("--method", choices=["auto", "tmm", "simplified"], default="auto",
          help="analysis method; auto falls back to the simplified model")
    p.add("--json", type=str, default=None, help="write the results to this JSON (or .json.gz) file")
    p.add("--threads", type=int, default=None, help="maximum number of worker threads")
    return p.parse_args(args)


def main(args=None):
    args = sys.argv[1:] if args is None else args
    options = parse_args(args)
    app = init_app(args=args)
    config = AnalysisConfig.from_app_config(app.get_config())

    profiles = {}
    results = {}
    for infile in options.files:
        try:
            with open(infile) as f:
                points = points_from_text(f.read(), config=config)
            check_geometry_limits(points, config=config)
            profiles[infile] = points
        except (OSError, ValueError) as e:
            logging.error(f"cannot read {infile}: {e}")
            results[infile] = e

    with AnalysisExecutor(max_n_threads=options.threads, config=config) as executor:
        futures = {name: executor.submit(points, method=options.method) for name, points in profiles.items()}
        for name, future in tqdm(futures.items(), total=len(futures), disable=len(futures) < 2):
            try:
                results[name] = future.result()
            except (AcousticError, ValueError) as e:
                logging.error(f"analysis of {name} failed: {e}")
                results[name] = e

    failed = 0
    for name in options.files:
        result = results[name]
        if isinstance(result, Exception):
            failed += 1
            continue
        print(f"\n{name} ({result.calculation_method})")
        print(result.to_dataframe().to_string(index=False))

    if options.json is not None:
        write_results(results, options.json)

    return 1 if failed > 0 else 0


if __name__ == "__main__":
    sys.exit(main())
