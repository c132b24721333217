"""
Pytest unit tests for didgetmm.conv (note/frequency conversion utilities).
"""

import numpy as np
import pytest

from didgetmm.conv import (
    NoteInfo,
    cent_diff,
    classify_frequency,
    freq_to_note,
    note_name,
    note_name_to_number,
    note_to_freq,
)


class TestClassifyFrequency:
    """Tests for classify_frequency."""

    def test_a4(self):
        n = classify_frequency(440.0)
        assert isinstance(n, NoteInfo)
        assert (n.note, n.octave, n.cents) == ("A", 4, 0)
        assert n.name == "A4"

    def test_middle_c(self):
        n = classify_frequency(261.63)
        assert (n.note, n.octave, n.cents) == ("C", 4, 0)

    def test_low_drone(self):
        n = classify_frequency(55.0)
        assert n.name == "A1"
        assert n.note_number == -36

    def test_octave_boundary(self):
        assert classify_frequency(130.81).name == "C3"
        assert classify_frequency(123.47).name == "B2"

    def test_sharp_note(self):
        n = classify_frequency(69.3)
        assert n.name == "C#2"

    def test_cents_sign(self):
        assert classify_frequency(445.0).cents > 0
        assert classify_frequency(435.0).cents < 0

    def test_cents_range(self):
        for f in np.linspace(30, 1000, 997):
            assert -50 <= classify_frequency(float(f)).cents <= 50

    def test_432_reference(self):
        n = classify_frequency(432.0, reference_pitch=432.0)
        assert (n.name, n.cents) == ("A4", 0)

    def test_reference_pitch_shifts_cents(self):
        n = classify_frequency(432.0, reference_pitch=440.0)
        assert n.name == "A4"
        assert n.cents == -32

    @pytest.mark.parametrize("f", [0.0, -1.0, float("nan"), float("inf")])
    def test_invalid_frequency_raises(self, f):
        with pytest.raises(ValueError):
            classify_frequency(f)

    def test_invalid_reference_raises(self):
        with pytest.raises(ValueError):
            classify_frequency(100.0, reference_pitch=0)


class TestNoteConversions:
    """Tests for note_to_freq, freq_to_note and cent_diff."""

    def test_note_to_freq(self):
        assert note_to_freq(0) == 440.0
        assert note_to_freq(12) == pytest.approx(880.0)
        assert note_to_freq(-12, 432) == pytest.approx(216.0)

    def test_freq_to_note(self):
        assert freq_to_note(880) == pytest.approx(12.0)
        assert freq_to_note(220, base_freq=440) == pytest.approx(-12.0)

    def test_scalar_in_float_out(self):
        assert isinstance(freq_to_note(300.0), float)
        assert isinstance(note_to_freq(3), float)

    def test_array_in_array_out(self):
        out = freq_to_note(np.array([220.0, 440.0, 880.0]))
        assert isinstance(out, np.ndarray)
        assert np.allclose(out, [-12, 0, 12])

    def test_round_trip(self):
        for note in [-36, -9, 0, 7, 19]:
            assert freq_to_note(note_to_freq(note)) == pytest.approx(note)

    def test_cent_diff(self):
        assert cent_diff(440, 880) == pytest.approx(1200)
        assert cent_diff(440, 440) == pytest.approx(0)
        assert cent_diff(880, 440) == pytest.approx(-1200)


class TestNoteNames:
    """Tests for note_name and note_name_to_number."""

    def test_note_name(self):
        assert note_name(0) == "A4"
        assert note_name(-9) == "C4"
        assert note_name(3) == "C5"
        assert note_name(-36) == "A1"

    def test_note_name_rounds_half_up(self):
        assert note_name(0.5) == "A#4"
        assert note_name(2.5) == "C5"
        assert note_name(-0.5) == "A4"

    def test_note_name_to_number(self):
        assert note_name_to_number("A4") == 0
        assert note_name_to_number("C4") == -9
        assert note_name_to_number("C#2") == -32
        assert note_name_to_number("D-1") == -67

    @pytest.mark.parametrize("name", ["A4", "C#2", "D1", "G#3", "B0", "E6"])
    def test_round_trip(self, name):
        assert note_name(note_name_to_number(name)) == name

    @pytest.mark.parametrize("name", ["H2", "A", "C##4", ""])
    def test_invalid_name_raises(self, name):
        with pytest.raises(ValueError):
            note_name_to_number(name)
