"""Tests for RGB normalization."""

import pytest
import torch

from color_accessibility.data.normalize import normalize_color, normalize_colors


class TestNormalizeColor:
    def test_divides_by_255(self) -> None:
        assert normalize_color([0, 128, 255]) == [0.0, 128 / 255, 1.0]
        assert normalize_color([0, 128, 255])[1] == pytest.approx(0.50196, abs=1e-5)

    def test_preserves_channel_order(self) -> None:
        r, g, b = normalize_color([255, 0, 51])
        assert (r, g, b) == (1.0, 0.0, 0.2)

    def test_out_of_range_passes_through(self) -> None:
        """No clamping: values outside 0-255 map outside 0-1."""
        out = normalize_color([-255, 510, 255])
        assert out == [-1.0, 2.0, 1.0]

    def test_accepts_tuples_and_floats(self) -> None:
        assert normalize_color((25.5, 51.0, 76.5)) == pytest.approx([0.1, 0.2, 0.3])


class TestNormalizeColors:
    def test_matches_scalar_version(self) -> None:
        raw = torch.tensor([[0.0, 128.0, 255.0], [10.0, 20.0, 30.0]])
        out = normalize_colors(raw)
        assert out.shape == (2, 3)
        assert out[0].tolist() == pytest.approx(normalize_color([0, 128, 255]))
        assert out[1].tolist() == pytest.approx(normalize_color([10, 20, 30]))
