"""
Intensity tiers for calendar heatmap cells.
"""

from dataclasses import dataclass
from enum import Enum


class IntensityTier(str, Enum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "veryHigh"


@dataclass(frozen=True)
class IntensityThresholds:
    """Lower bounds (inclusive) of the medium, high and veryHigh tiers."""

    medium: float = 50.0
    high: float = 100.0
    very_high: float = 200.0

    def __post_init__(self):
        if not 0 < self.medium < self.high < self.very_high:
            raise ValueError(
                "Thresholds must be positive and strictly increasing: "
                f"{self.medium}, {self.high}, {self.very_high}"
            )

    @classmethod
    def from_values(cls, values) -> "IntensityThresholds":
        """Build thresholds from three numbers (e.g. a config list of strings)."""
        medium, high, very_high = (float(value) for value in values)
        return cls(medium=medium, high=high, very_high=very_high)


DEFAULT_THRESHOLDS = IntensityThresholds()


def classify(
    total_magnitude: float, thresholds: IntensityThresholds = DEFAULT_THRESHOLDS
) -> IntensityTier:
    """
    Map a day's summed magnitude to an intensity tier.

    0 is none, (0, medium) low, [medium, high) medium, [high, very_high)
    high, and very_high or more is veryHigh.
    """
    if total_magnitude <= 0:
        return IntensityTier.NONE
    elif total_magnitude < thresholds.medium:
        return IntensityTier.LOW
    elif total_magnitude < thresholds.high:
        return IntensityTier.MEDIUM
    elif total_magnitude < thresholds.very_high:
        return IntensityTier.HIGH
    else:
        return IntensityTier.VERY_HIGH
