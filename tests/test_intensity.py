"""
Tests for intensity tiers.
"""

import pytest

from fittrack.intensity import (
    DEFAULT_THRESHOLDS,
    IntensityThresholds,
    IntensityTier,
    classify,
)


class TestClassify:
    """Tests for classify with the default thresholds."""

    def test_zero_is_none(self):
        assert classify(0) == IntensityTier.NONE

    @pytest.mark.parametrize(
        "total, expected",
        [
            (0.001, "low"),
            (49.999, "low"),
            (50, "medium"),
            (99.999, "medium"),
            (100, "high"),
            (199.999, "high"),
            (200, "veryHigh"),
            (10_000, "veryHigh"),
        ],
    )
    def test_boundaries(self, total, expected):
        assert classify(total) == expected
        assert classify(total).value == expected

    def test_negative_is_none(self):
        assert classify(-1) == IntensityTier.NONE


class TestThresholds:
    """Tests for configurable thresholds."""

    def test_defaults(self):
        assert DEFAULT_THRESHOLDS == IntensityThresholds(50, 100, 200)

    def test_custom_thresholds(self):
        thresholds = IntensityThresholds(medium=10, high=20, very_high=30)

        assert classify(9, thresholds) == IntensityTier.LOW
        assert classify(10, thresholds) == IntensityTier.MEDIUM
        assert classify(20, thresholds) == IntensityTier.HIGH
        assert classify(30, thresholds) == IntensityTier.VERY_HIGH

    def test_from_values_parses_strings(self):
        assert IntensityThresholds.from_values(["5", "10", "15.5"]) == IntensityThresholds(
            5, 10, 15.5
        )

    @pytest.mark.parametrize("values", [(0, 10, 20), (10, 10, 20), (30, 20, 10), (-1, 5, 9)])
    def test_invalid_thresholds_raise(self, values):
        with pytest.raises(ValueError):
            IntensityThresholds(*values)

    def test_from_values_wrong_length(self):
        with pytest.raises(ValueError):
            IntensityThresholds.from_values(["1", "2"])
