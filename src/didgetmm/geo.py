"""
Didgeridoo bore geometry for didgetmm.

A bore profile is an ordered list of GeometryPoint (position, diameter) samples,
mouthpiece first. Units of the points are set by AnalysisConfig (position in
cm and diameter in mm by default); everything derived from them, BoreSegment in
particular, is in meters.

Besides segmentation this module reads the two text formats used for bores:
the line format (one "position diameter" pair per line) and the legacy
DIDGMO format ("DIDGMO:<length_mm>,<d1>,...,<dn>").
"""

import copy
import json
import logging
import math
import re
from dataclasses import dataclass
from typing import List, NamedTuple, Tuple

from .config import DEFAULT_CONFIG, UNIT_FACTORS
from .errors import InsufficientGeometry, InvalidGeometry


class GeometryPoint(NamedTuple):
    """One bore sample: distance from the mouthpiece and inner diameter."""
    position: float
    diameter: float


@dataclass(frozen=True)
class BoreSegment:
    """
    Conical (or cylindrical) piece of the bore between two adjacent points, in meters.

    Attributes:
        start_position: distance of the segment start from the mouthpiece.
        length: axial length.
        r1: radius at the mouthpiece side.
        r2: radius at the bell side.
    """
    start_position: float
    length: float
    r1: float
    r2: float

    @property
    def taper_ratio(self):
        return self.r2 / self.r1

    @property
    def end_position(self):
        return self.start_position + self.length

    @property
    def average_radius(self):
        return (self.r1 + self.r2) / 2

    @property
    def volume(self):
        """Volume of the truncated cone in m^3."""
        return math.pi * self.length * (self.r1 * self.r1 + self.r1 * self.r2 + self.r2 * self.r2) / 3


def as_point(p):
    """Accept a GeometryPoint, a (position, diameter) pair or a dict with those keys."""
    if isinstance(p, GeometryPoint):
        return p
    if isinstance(p, dict):
        return GeometryPoint(float(p["position"]), float(p["diameter"]))
    position, diameter = p
    return GeometryPoint(float(position), float(diameter))


def as_points(points):
    """Normalise any supported point sequence (or Geo) to a list of GeometryPoint."""
    if isinstance(points, Geo):
        points = points.points
    if points is None:
        return []
    try:
        return [as_point(p) for p in points]
    except (TypeError, ValueError, KeyError) as e:
        raise InvalidGeometry(f"cannot read geometry point: {e}") from e


def validate_points(points):
    """Raise if the points do not describe a valid bore.

    Raises:
        InsufficientGeometry: fewer than two points.
        InvalidGeometry: non-finite values, non-increasing positions or non-positive diameters.
    """
    points = as_points(points)
    if len(points) < 2:
        raise InsufficientGeometry(f"Insufficient geometry points: need at least 2, got {len(points)}")

    for i, p in enumerate(points):
        if not (math.isfinite(p.position) and math.isfinite(p.diameter)):
            raise InvalidGeometry(f"point {i} is not finite: {p}")
        if p.diameter <= 0:
            raise InvalidGeometry(f"point {i} has non-positive diameter {p.diameter}")
        if i > 0 and p.position <= points[i - 1].position:
            raise InvalidGeometry(
                f"positions must be strictly increasing: point {i} at {p.position} "
                f"follows {points[i - 1].position}")
    return points


def create_segments(points, position_unit=None, diameter_unit=None, config=DEFAULT_CONFIG):
    """
    Convert an ordered bore profile into BoreSegments (SI units, mouthpiece first).

    Args:
        points: sequence of GeometryPoint, (position, diameter) pairs or a Geo.
        position_unit: unit of the positions; defaults to the Geo's unit or config.position_unit.
        diameter_unit: unit of the diameters; defaults to the Geo's unit or config.diameter_unit.
        config: AnalysisConfig providing the default units.

    Returns:
        list of BoreSegment, one per adjacent pair of points.
    """
    if isinstance(points, Geo):
        position_unit = position_unit or points.position_unit
        diameter_unit = diameter_unit or points.diameter_unit
    position_unit = position_unit or config.position_unit
    diameter_unit = diameter_unit or config.diameter_unit
    if position_unit not in UNIT_FACTORS or diameter_unit not in UNIT_FACTORS:
        raise InvalidGeometry(f"unknown unit \"{position_unit}\" / \"{diameter_unit}\"")
    pf = UNIT_FACTORS[position_unit]
    df = UNIT_FACTORS[diameter_unit]

    points = validate_points(points)
    origin = points[0].position * pf

    segments = []
    for i in range(1, len(points)):
        p0 = points[i - 1]
        p1 = points[i]
        start = p0.position * pf - origin
        length = (p1.position - p0.position) * pf
        r1 = p0.diameter * df / 2
        r2 = p1.diameter * df / 2
        if length <= 0 or r1 <= 0 or r2 <= 0:
            raise InvalidGeometry(f"Invalid segment {i}: length={length}, r1={r1}, r2={r2}")
        segments.append(BoreSegment(start, length, r1, r2))
    return segments


# measures over a list of segments

def total_length(segments):
    """Physical bore length in m."""
    return sum(s.length for s in segments)


def compute_volume(segments):
    """Internal volume in m^3 (sum of truncated cones)."""
    return sum(s.volume for s in segments)


def average_radius(segments):
    """Volume-weighted average radius in m."""
    volume = compute_volume(segments)
    return sum(s.average_radius * s.volume for s in segments) / volume


def taper_factor(segments):
    """Mean of the largest and the average |ln(taper ratio)| over all segments.

    0 for a cylinder, grows with the amount of flare.
    """
    tapers = [abs(math.log(s.taper_ratio)) for s in segments]
    return (max(tapers) + sum(tapers) / len(tapers)) / 2


class Geo:
    """
    Bore profile as a list of GeometryPoint, with the units it was given in.

    Attributes:
        points: list of GeometryPoint (mouthpiece first).
        position_unit: unit of the positions.
        diameter_unit: unit of the diameters.
    """

    def __init__(self, points=None, position_unit="cm", diameter_unit="mm", infile=None):
        if position_unit not in UNIT_FACTORS or diameter_unit not in UNIT_FACTORS:
            raise InvalidGeometry(f"unknown unit \"{position_unit}\" / \"{diameter_unit}\"")
        self.position_unit = position_unit
        self.diameter_unit = diameter_unit
        self.points = []

        if infile is not None:
            self.points = self.read_geo(infile)

        if points is not None:
            self.points = as_points(points)

    @classmethod
    def make_cone(cls, length, d1, d2, n_segments=2, position_unit="cm", diameter_unit="mm"):
        """Conical bore of the given length from diameter d1 (mouth) to d2 (bell), n_segments points."""
        if n_segments < 2:
            raise InsufficientGeometry("a cone needs at least 2 points")
        shape = []
        for i in range(n_segments):
            x = length * i / (n_segments - 1)
            shape.append(GeometryPoint(x, d1 + (d2 - d1) * i / (n_segments - 1)))
        return cls(shape, position_unit=position_unit, diameter_unit=diameter_unit)

    @classmethod
    def make_cylinder(cls, length, d, position_unit="cm", diameter_unit="mm"):
        return cls.make_cone(length, d, d, 2, position_unit=position_unit, diameter_unit=diameter_unit)

    def read_geo(self, infile):
        """Load points from a JSON file (list of [position, diameter] pairs) or a line-format text file."""
        with open(infile) as f:
            text = f.read()
        if text.lstrip().startswith("["):
            return as_points(json.loads(text))
        return parse_geometry_lines(text)

    def write_geo(self, outfile):
        """Write the profile in line format (one 'position diameter' line per point)."""
        with open(outfile, "w") as f:
            f.write(f"# position({self.position_unit}) diameter({self.diameter_unit})\n")
            for p in self.points:
                f.write(f"{p.position:.10f} {p.diameter:.10f}\n")

    def copy(self):
        return Geo(copy.deepcopy(self.points), self.position_unit, self.diameter_unit)

    def length(self):
        """Length of the profile in its position unit."""
        return self.points[-1].position - self.points[0].position

    def bellsize(self):
        """Bell diameter in the diameter unit."""
        return self.points[-1].diameter

    def diameter_at_x(self, x):
        """Linearly interpolated diameter at position x (position unit)."""
        if not self.points[0].position <= x <= self.points[-1].position:
            raise ValueError(f"position {x} is outside of the bore")
        for i in range(1, len(self.points)):
            p0, p1 = self.points[i - 1], self.points[i]
            if x <= p1.position:
                if p1.position == p0.position:
                    return p1.diameter
                t = (x - p0.position) / (p1.position - p0.position)
                return p0.diameter + t * (p1.diameter - p0.diameter)
        return self.points[-1].diameter

    def segments(self):
        """BoreSegments of this profile in meters."""
        return create_segments(self.points, self.position_unit, self.diameter_unit)

    def compute_volume(self):
        """Internal volume in m^3."""
        return compute_volume(self.segments())

    def sort_points(self):
        self.points = sorted(self.points, key=lambda p: p.position)

    def to_json(self):
        return [[p.position, p.diameter] for p in self.points]


def _parse_number(s):
    value = float(s)
    if not math.isfinite(value):
        raise ValueError(f"not a finite number: {s}")
    return value


def parse_geometry_lines(text):
    """
    Parse the line format: one "position diameter" pair per line.

    Blank lines and comments (starting with # or //, also inline) are ignored.
    Values may be separated by whitespace, commas or semicolons. Points are
    returned sorted by position.

    Raises:
        InvalidGeometry: with ``line`` set to the 1-based line number of the
            first malformed line.
    """
    if not isinstance(text, str):
        raise InvalidGeometry("geometry must be a string")

    points = []
    for line_number, line in enumerate(text.splitlines(), start=1):
        line = line.split("#")[0].split("//")[0].strip()
        if not line:
            continue
        parts = [p for p in re.split(r"[\s,;]+", line) if p]
        if len(parts) < 2:
            raise InvalidGeometry(
                f"line {line_number}: expected 'position diameter', got \"{line}\"", line=line_number)
        try:
            position = _parse_number(parts[0])
            diameter = _parse_number(parts[1])
        except ValueError:
            raise InvalidGeometry(
                f"line {line_number}: position and diameter must be numbers", line=line_number)
        if position < 0:
            raise InvalidGeometry(f"line {line_number}: position must not be negative", line=line_number)
        if diameter <= 0:
            raise InvalidGeometry(f"line {line_number}: diameter must be positive", line=line_number)
        points.append(GeometryPoint(position, diameter))

    return sorted(points, key=lambda p: p.position)


DIDGMO_PREFIX = "DIDGMO:"


def parse_didgmo(text) -> Tuple[float, List[float]]:
    """
    Parse the legacy DIDGMO format ``DIDGMO:<length_mm>,<d1>,<d2>,...,<dn>``.

    Returns:
        (length_mm, diameters_mm)

    Raises:
        InvalidGeometry: empty input, unknown prefix, non-numeric or non-positive fields.
    """
    if text is None or not str(text).strip():
        raise InvalidGeometry("geometry is empty")
    text = str(text).strip()
    if not text.upper().startswith(DIDGMO_PREFIX):
        raise InvalidGeometry("unknown geometry format, expected \"DIDGMO:<length>,<d1>,...\"")

    fields = [f.strip() for f in text[len(DIDGMO_PREFIX):].split(",")]
    if len(fields) < 2 or any(f == "" for f in fields):
        raise InvalidGeometry("DIDGMO geometry needs a length and at least one diameter")
    try:
        values = [_parse_number(f) for f in fields]
    except ValueError:
        raise InvalidGeometry(f"DIDGMO geometry contains non-numeric fields: {','.join(fields)}")
    if any(v <= 0 for v in values):
        raise InvalidGeometry("DIDGMO length and diameters must be positive")
    return values[0], values[1:]


def didgmo_to_points(length_mm, diameters, config=DEFAULT_CONFIG):
    """Spread DIDGMO diameters evenly along the bore, mouthpiece first.

    Positions are returned in config.position_unit, diameters (given in mm) in
    config.diameter_unit.
    """
    diameters = list(diameters)
    n = len(diameters)
    if n < 2:
        raise InsufficientGeometry(f"Insufficient geometry points: need at least 2 diameters, got {n}")
    to_position = 0.001 / config.position_factor
    to_diameter = 0.001 / config.diameter_factor
    return [
        GeometryPoint(length_mm * i / (n - 1) * to_position, d * to_diameter)
        for i, d in enumerate(diameters)
    ]


def points_from_text(text, config=DEFAULT_CONFIG):
    """Read a bore from DIDGMO or line-format text."""
    if text.strip().upper().startswith(DIDGMO_PREFIX):
        length, diameters = parse_didgmo(text)
        return didgmo_to_points(length, diameters, config=config)
    return parse_geometry_lines(text)


# soft limits for hand-made didgeridoos, in cm / mm
GEOMETRY_LIMITS = {
    "min_length_cm": 50,
    "max_length_cm": 300,
    "min_diameter_mm": 15,
    "max_diameter_mm": 80,
    "min_points": 2,
    "max_points": 50,
    "max_gap_cm": 50,
    "max_first_position_cm": 5,
}


def check_geometry_limits(points, config=DEFAULT_CONFIG):
    """
    Compare a bore with the usual range of playable didgeridoos.

    Nothing is rejected; every violated limit yields one warning string, which
    is also logged.
    """
    points = as_points(points)
    warnings = []
    lim = GEOMETRY_LIMITS

    if not lim["min_points"] <= len(points) <= lim["max_points"]:
        warnings.append(f"{len(points)} points, expected {lim['min_points']}-{lim['max_points']}")

    if len(points) > 0:
        to_cm = config.position_factor * 100
        to_mm = config.diameter_factor * 1000

        length_cm = (points[-1].position - points[0].position) * to_cm
        if len(points) > 1 and not lim["min_length_cm"] <= length_cm <= lim["max_length_cm"]:
            warnings.append(
                f"length {length_cm:.1f} cm outside {lim['min_length_cm']}-{lim['max_length_cm']} cm")

        for p in points:
            d_mm = p.diameter * to_mm
            if not lim["min_diameter_mm"] <= d_mm <= lim["max_diameter_mm"]:
                warnings.append(
                    f"diameter {d_mm:.1f} mm at {p.position} outside "
                    f"{lim['min_diameter_mm']}-{lim['max_diameter_mm']} mm")

        for i in range(1, len(points)):
            gap_cm = (points[i].position - points[i - 1].position) * to_cm
            if gap_cm > lim["max_gap_cm"]:
                warnings.append(f"gap of {gap_cm:.1f} cm between points {i - 1} and {i}")

        if points[0].position * to_cm > lim["max_first_position_cm"]:
            warnings.append(f"first point at {points[0].position * to_cm:.1f} cm, expected near 0")

    for w in warnings:
        logging.warning(f"unusual geometry: {w}")
    return warnings
