"""
Pytest unit tests for didgetmm.sim.transfer_matrix.
"""

import math

import pytest

from didgetmm.config import AnalysisConfig
from didgetmm.errors import DegenerateSegment
from didgetmm.geo import BoreSegment
from didgetmm.sim.transfer_matrix import (
    TransferMatrix,
    bore_transfer_matrix,
    cascade,
    segment_transfer_matrix,
)

LOSSLESS = AnalysisConfig(viscothermal_losses=False)
LOSSY = AnalysisConfig(viscothermal_losses=True)


def cone(start=0.0, length=0.3, r1=0.015, r2=0.02):
    return BoreSegment(start, length, r1, r2)


class TestTransferMatrix:
    """Tests for the TransferMatrix value type."""

    def test_identity(self):
        m = TransferMatrix.identity()
        assert m == (1, 0, 0, 1)
        assert m.determinant() == 1

    def test_matmul(self):
        m = TransferMatrix(1, 2, 3, 4) @ TransferMatrix(5, 6, 7, 8)
        assert m == (19, 22, 43, 50)

    def test_identity_is_neutral(self):
        m = TransferMatrix(1 + 2j, 3, 4j, 5)
        assert m @ TransferMatrix.identity() == m
        assert TransferMatrix.identity() @ m == m

    def test_input_impedance_of_identity_is_load(self):
        assert TransferMatrix.identity().input_impedance(3 + 4j) == pytest.approx(3 + 4j)


class TestSegmentTransferMatrix:
    """Tests for segment_transfer_matrix."""

    def test_lossless_cylinder_matches_plane_wave_duct(self):
        seg = BoreSegment(0.0, 1.0, 0.02, 0.02)
        f = 100.0
        m = segment_transfer_matrix(seg, f, LOSSLESS)
        kl = 2 * math.pi * f / 343.0 * 1.0
        zc = 1.225 * 343.0 / (math.pi * 0.02 ** 2)
        assert m.A == pytest.approx(complex(math.cos(kl), 0), abs=1e-12)
        assert m.D == pytest.approx(complex(math.cos(kl), 0), abs=1e-12)
        assert m.B == pytest.approx(1j * zc * math.sin(kl), rel=1e-12)
        assert m.C == pytest.approx(1j * math.sin(kl) / zc, rel=1e-12)

    @pytest.mark.parametrize("config", [LOSSLESS, LOSSY])
    @pytest.mark.parametrize("f", [30.0, 73.0, 440.0, 1000.0])
    def test_cone_determinant_is_one(self, config, f):
        m = segment_transfer_matrix(cone(), f, config)
        assert m.determinant() == pytest.approx(1 + 0j, abs=1e-9)

    @pytest.mark.parametrize("f", [30.0, 250.0, 1000.0])
    def test_narrowing_cone_determinant_is_one(self, f):
        m = segment_transfer_matrix(cone(r1=0.03, r2=0.012), f, LOSSY)
        assert m.determinant() == pytest.approx(1 + 0j, abs=1e-9)

    def test_cylinder_determinant_is_one_with_losses(self):
        m = segment_transfer_matrix(BoreSegment(0.0, 1.5, 0.02, 0.02), 56.0, LOSSY)
        assert m.determinant() == pytest.approx(1 + 0j, abs=1e-9)

    def test_almost_cylindrical_cone_approaches_cylinder(self):
        f = 100.0
        cyl = segment_transfer_matrix(BoreSegment(0.0, 1.0, 0.02, 0.02), f, LOSSLESS)
        near = segment_transfer_matrix(BoreSegment(0.0, 1.0, 0.02, 0.02 * (1 + 1e-5)), f, LOSSLESS)
        for a, b in zip(cyl, near):
            assert b == pytest.approx(a, rel=1e-2, abs=1e-9)

    def test_losses_damp_the_duct(self):
        seg = BoreSegment(0.0, 1.0, 0.02, 0.02)
        lossless = segment_transfer_matrix(seg, 200.0, LOSSLESS)
        lossy = segment_transfer_matrix(seg, 200.0, LOSSY)
        assert lossless.A.real != pytest.approx(lossy.A.real, abs=1e-6)
        assert lossy.B.real != 0

    def test_zero_length_raises(self):
        with pytest.raises(DegenerateSegment):
            segment_transfer_matrix(BoreSegment(0.0, 0.0, 0.02, 0.02), 100.0)

    def test_zero_radius_raises(self):
        with pytest.raises(DegenerateSegment):
            segment_transfer_matrix(BoreSegment(0.0, 1.0, 0.0, 0.02), 100.0)

    @pytest.mark.parametrize("f", [0.0, -10.0, float("nan"), float("inf")])
    def test_bad_frequency_raises(self, f):
        with pytest.raises(DegenerateSegment, match="frequency"):
            segment_transfer_matrix(cone(), f)


class TestCascade:
    """Tests for cascade and bore_transfer_matrix."""

    def segments(self):
        return [
            cone(0.0, 0.2, 0.015, 0.016),
            cone(0.2, 0.4, 0.016, 0.02),
            BoreSegment(0.6, 0.3, 0.02, 0.02),
            cone(0.9, 0.4, 0.02, 0.03),
            cone(1.3, 0.2, 0.03, 0.045),
        ]

    def test_empty_is_identity(self):
        assert cascade([]) == TransferMatrix.identity()

    def test_single_matrix(self):
        m = segment_transfer_matrix(cone(), 80.0)
        assert cascade([m]) == m

    @pytest.mark.parametrize("f", [40.0, 123.5, 700.0])
    def test_cascade_determinant_is_one(self, f):
        m = bore_transfer_matrix(self.segments(), f, LOSSY)
        assert m.determinant() == pytest.approx(1 + 0j, abs=1e-6)

    def test_associative(self):
        m1, m2, m3 = (segment_transfer_matrix(s, 150.0) for s in self.segments()[:3])
        left = (m1 @ m2) @ m3
        right = m1 @ (m2 @ m3)
        for a, b in zip(left, right):
            assert a == pytest.approx(b, rel=1e-9, abs=1e-15)

    def test_order_matters(self):
        m1 = segment_transfer_matrix(cone(r1=0.015, r2=0.03), 150.0)
        m2 = segment_transfer_matrix(cone(r1=0.03, r2=0.05), 150.0)
        assert (m1 @ m2).A != pytest.approx((m2 @ m1).A, rel=1e-6)

    def test_cascade_equals_bore_matrix(self):
        segs = self.segments()
        f = 90.0
        expected = cascade([segment_transfer_matrix(s, f) for s in segs])
        assert bore_transfer_matrix(segs, f) == expected

    def test_two_halves_of_cylinder_equal_whole(self):
        f = 75.0
        whole = segment_transfer_matrix(BoreSegment(0.0, 1.0, 0.02, 0.02), f, LOSSLESS)
        halves = bore_transfer_matrix(
            [BoreSegment(0.0, 0.5, 0.02, 0.02), BoreSegment(0.5, 0.5, 0.02, 0.02)], f, LOSSLESS)
        for a, b in zip(whole, halves):
            assert b == pytest.approx(a, rel=1e-9, abs=1e-12)
