"""
Musical note and frequency conversion for didgetmm.

Note numbers are semitones relative to A4 (A4 = 0, C4 = -9). Note names are
C-based scientific pitch (C4 is middle C). The tuning reference (frequency of
A4) defaults to 440 Hz; 432 Hz is the other common didgeridoo tuning.

freq_to_note, note_to_freq and cent_diff accept Python scalars or numpy
arrays; a scalar in gives a float out.
"""

import math
import re
from typing import NamedTuple

import numpy as np

NOTE_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

# index of A in NOTE_NAMES
A_OFFSET = 9


class NoteInfo(NamedTuple):
    """
    Nearest equal-tempered note of a frequency.

    Attributes:
        note: pitch class, e.g. "A#".
        octave: octave number, C-based (A4 = 440 Hz is octave 4).
        cents: deviation from the note in whole cents, in [-50, 50].
        note_number: semitones relative to A4.
    """
    note: str
    octave: int
    cents: int
    note_number: int

    @property
    def name(self):
        return f"{self.note}{self.octave}"


def _scalar_or_array(out, *args):
    if all(np.ndim(a) == 0 for a in args):
        return float(out)
    return out


def _round_half_up(x):
    return int(math.floor(x + 0.5))


def freq_to_note(freq, base_freq=440.0):
    """Fractional note number of a frequency (440 -> 0.0, 880 -> 12.0)."""
    out = 12 * (np.log2(np.asarray(freq, dtype=np.float64)) - np.log2(base_freq))
    return _scalar_or_array(out, freq, base_freq)


def note_to_freq(note, base_freq=440.0):
    """Frequency in Hz of a (fractional) note number."""
    out = base_freq * np.power(2.0, np.asarray(note, dtype=np.float64) / 12)
    return _scalar_or_array(out, note, base_freq)


def cent_diff(freq1, freq2):
    """Distance from freq1 to freq2 in cents (1200 * log2(freq2 / freq1))."""
    out = 1200 * np.log2(np.asarray(freq2, dtype=np.float64) / np.asarray(freq1, dtype=np.float64))
    return _scalar_or_array(out, freq1, freq2)


def classify_frequency(frequency, reference_pitch=440.0):
    """
    Nearest note, octave and cent deviation of a frequency.

    Semitones and cents are rounded half up, so a frequency exactly between two
    notes is assigned to the upper one.

    Raises:
        ValueError: frequency or reference pitch not positive and finite.
    """
    if not (math.isfinite(frequency) and frequency > 0):
        raise ValueError(f"frequency must be positive, got {frequency}")
    if not (math.isfinite(reference_pitch) and reference_pitch > 0):
        raise ValueError(f"reference pitch must be positive, got {reference_pitch}")

    semitones = 12 * math.log2(frequency / reference_pitch)
    note_number = _round_half_up(semitones)
    cents = _round_half_up((semitones - note_number) * 100)

    from_c0 = note_number + A_OFFSET
    return NoteInfo(
        note=NOTE_NAMES[from_c0 % 12],
        octave=from_c0 // 12 + 4,
        cents=cents,
        note_number=note_number,
    )


def note_name(note):
    """Name of a note number (0 -> "A4", -9 -> "C4"), rounded half up like classify_frequency."""
    from_c0 = _round_half_up(note) + A_OFFSET
    return f"{NOTE_NAMES[from_c0 % 12]}{from_c0 // 12 + 4}"


_NOTE_RE = re.compile(r"^([A-G]#?)(-?\d+)$")


def note_name_to_number(name):
    """Note number of a name such as "A4", "C#2" or "D-1"."""
    m = _NOTE_RE.match(name.strip())
    if m is None:
        raise ValueError(f"cannot parse note name \"{name}\"")
    pitch_class, octave = m.group(1), int(m.group(2))
    return NOTE_NAMES.index(pitch_class) - A_OFFSET + 12 * (octave - 4)
