"""
Application shell and configuration for didgetmm.

Provides a singleton App with logging and the configuration read from the
command line and ./*.conf files. Library functions never touch the App; it is
set up by the command line tool (or a notebook) and turned into an
AnalysisConfig with AnalysisConfig.from_app_config(get_config()).
"""

import argparse
import logging
import sys

import configargparse

from .config import RADIATION_MODELS, SAMPLE_ERROR_POLICIES, SWEEP_MODES, UNIT_FACTORS

app = None


def init_app(args=None, log_to_file=None):
    """Create and set the global App. Call once at startup."""
    global app
    app = App(args=args, log_to_file=log_to_file)
    return app


def get_app():
    """Return the global App; initializes with default settings if not yet created."""
    if app is None:
        init_app()
    return app


def get_config():
    """Return the configuration dict from the global App."""
    return get_app().get_config()


def str2bool(value):
    if isinstance(value, bool):
        return value
    if value.lower() in ("yes", "true", "1", "on"):
        return True
    if value.lower() in ("no", "false", "0", "off"):
        return False
    raise argparse.ArgumentTypeError(f"expected a boolean, got \"{value}\"")


def add_config_options(p):
    """Add the log level and all analysis options to an ArgParser. Defaults are None so
    that AnalysisConfig keeps its own defaults for options that were not given."""
    p.add("-log_level", "--log_level", type=str, choices=["info", "error", "debug", "warn"],
          default="info", help="log level")
    p.add("--log_file", type=str, default=None, help="also write the log to this file")
    p.add("--reference_pitch", type=float, default=None, help="frequency of A4 in Hz (440, 432, ...)")
    p.add("--speed_of_sound", type=float, default=None, help="speed of sound in m/s")
    p.add("--viscothermal_losses", type=str2bool, default=None, help="apply wall losses")
    p.add("--radiation_model", choices=RADIATION_MODELS, default=None, help="bell termination")
    p.add("--sweep", choices=SWEEP_MODES, default=None, help="frequency grid")
    p.add("--fmin", type=float, default=None, help="lowest sweep frequency in Hz")
    p.add("--fmax", type=float, default=None, help="highest sweep frequency in Hz")
    p.add("--on_sample_error", choices=SAMPLE_ERROR_POLICIES, default=None,
          help="abort or skip failing sweep samples")
    p.add("--transfer_matrix_enabled", type=str2bool, default=None,
          help="try the transfer matrix method before the simplified model")
    p.add("--max_harmonics", type=int, default=None, help="number of resonances reported")
    p.add("--position_unit", choices=list(UNIT_FACTORS), default=None, help="unit of positions")
    p.add("--diameter_unit", choices=list(UNIT_FACTORS), default=None, help="unit of diameters")
    return p


def build_config_parser():
    return add_config_options(configargparse.ArgParser(default_config_files=["./*.conf"], add_help=False))


class App:
    """
    Central app: logging and configuration.
    """

    def __init__(self, args=None, log_to_file=None):
        self.config = None
        self.args = args

        conf = self.get_config()
        self.init_logging(filename=log_to_file or conf.get("log_file"))
        self.start_message()

        conf_str = "Configuration:"
        for key in sorted(conf.keys()):
            conf_str += f"\n{key}: {conf[key]}"
        logging.debug(conf_str)

    def get_config(self):
        """Load and cache the config from the command line and ./*.conf."""
        if self.config is None:
            options = build_config_parser().parse_known_args(self.args)[0]
            self.config = {}
            for key, value in vars(options).items():
                self.config[key] = value
        return self.config

    def init_logging(self, filename=None):
        """Configure root logger: console and optional file, level from config."""
        logFormatter = logging.Formatter("%(asctime)s [%(levelname)s] {%(filename)s:%(lineno)d} %(message)s")
        rootLogger = logging.getLogger()

        if filename is not None:
            fileHandler = logging.FileHandler(filename)
            fileHandler.setFormatter(logFormatter)
            rootLogger.addHandler(fileHandler)

        consoleHandler = logging.StreamHandler()
        consoleHandler.setFormatter(logFormatter)
        rootLogger.addHandler(consoleHandler)

        levels = {
            "info": logging.INFO,
            "debug": logging.DEBUG,
            "error": logging.ERROR,
            "warn": logging.WARN,
        }
        rootLogger.setLevel(levels[self.get_config()["log_level"]])

    def start_message(self):
        """Log the command line."""
        logging.info("Starting didgetmm " + " ".join(sys.argv))
