"""Reference nutritional targets and scoring policy.

Values are expressed on a dry-matter basis and follow the FEDIAF
recommendations for complete adult cat food.
"""

from dataclasses import dataclass, field
from enum import Enum


class UnitCorrection(str, Enum):
    """Heuristic used to repair values declared in the wrong unit."""

    MAGNITUDE = "magnitude"
    TAURINE_ONLY = "taurine_only"
    NONE = "none"


@dataclass(frozen=True)
class Range:
    """Acceptable band for a nutrient; open ends are ``None``."""

    min: float | None = None
    max: float | None = None

    def contains(self, value: float) -> bool:
        """Return True when the value lies inside the closed band."""
        if self.min is not None and value < self.min:
            return False
        return not (self.max is not None and value > self.max)


@dataclass(frozen=True)
class ProteinTarget:
    """Protein minimum, ideal, and sanity ceiling."""

    min: float = 25.0
    ideal: float = 38.0
    max: float | None = 70.0

    def __post_init__(self) -> None:
        if not self.ideal > self.min:
            raise ValueError(
                f"Protein ideal must exceed the minimum: {self.ideal}, {self.min}"
            )
        if self.max is not None and self.max < self.ideal:
            raise ValueError(
                f"Protein ceiling must not be below the ideal: "
                f"{self.max}, {self.ideal}"
            )


@dataclass(frozen=True)
class FatTarget:
    """Fat is scored by distance to a single ideal value."""

    min: float = 9.0
    ideal: float = 15.0
    max: float = 20.0
    tolerance: float = 6.0

    def __post_init__(self) -> None:
        if not self.tolerance > 0:
            raise ValueError(f"Fat tolerance must be positive: {self.tolerance}")
        if not self.min <= self.ideal <= self.max:
            raise ValueError(
                f"Fat ideal must lie within min and max: "
                f"{self.min}, {self.ideal}, {self.max}"
            )


@dataclass(frozen=True)
class TaurineTarget:
    """Taurine minimums depend on whether the product is wet or dry."""

    min_dry: float = 0.10
    min_wet: float = 0.20
    ideal: float = 0.20
    wet_moisture_threshold: float = 50.0

    def minimum_for(self, moisture: float) -> float:
        """Return the regulatory minimum for the product's wetness class."""
        if moisture > self.wet_moisture_threshold:
            return self.min_wet
        return self.min_dry


@dataclass(frozen=True)
class RatioTarget:
    """Calcium to phosphorus ratio band with an ideal point."""

    min: float = 1.0
    ideal: float = 1.2
    max: float = 1.8


@dataclass(frozen=True)
class NutritionalTargets:
    """Reference-target table used by normalization and scoring."""

    protein: ProteinTarget = field(default_factory=ProteinTarget)
    fat: FatTarget = field(default_factory=FatTarget)
    taurine: TaurineTarget = field(default_factory=TaurineTarget)
    calcium: Range = field(default_factory=lambda: Range(min=0.40, max=1.00))
    phosphorus: Range = field(default_factory=lambda: Range(min=0.26, max=0.84))
    sodium: Range = field(default_factory=lambda: Range(min=0.08, max=0.16))
    magnesium: Range = field(default_factory=lambda: Range(min=0.04, max=0.10))
    ca_p_ratio: RatioTarget = field(default_factory=RatioTarget)
    default_moisture: float = 10.0

    def mineral_bands(self) -> dict[str, Range]:
        """Return the per-mineral acceptable bands in scoring order."""
        return {
            "calcium": self.calcium,
            "phosphorus": self.phosphorus,
            "sodium": self.sodium,
            "magnesium": self.magnesium,
        }


@dataclass(frozen=True)
class TierThresholds:
    """Minimum scores for tiers S, A, B and C; anything lower is D."""

    s: float = 88.0
    a: float = 72.0
    b: float = 58.0
    c: float = 42.0

    def __post_init__(self) -> None:
        if not self.s > self.a > self.b > self.c:
            raise ValueError(
                f"Tier thresholds must be strictly decreasing: "
                f"{self.s}, {self.a}, {self.b}, {self.c}"
            )


@dataclass(frozen=True)
class ScoringPolicy:
    """Everything tunable about an evaluation."""

    targets: NutritionalTargets = field(default_factory=NutritionalTargets)
    tiers: TierThresholds = field(default_factory=TierThresholds)
    unit_correction: UnitCorrection = UnitCorrection.MAGNITUDE


DEFAULT_POLICY = ScoringPolicy()
