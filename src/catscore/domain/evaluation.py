"""Domain models for evaluation results."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from catscore.domain.nutrients import IngredientSignals, NutrientProfile

GRANULAR_MAX = 25.0


class FoodTier(str, Enum):
    """Ordinal quality grade, S best and D worst."""

    S = "S"
    A = "A"
    B = "B"
    C = "C"
    D = "D"


@dataclass(frozen=True)
class GranularScores:
    """Display breakdown, each bucket bounded to ``GRANULAR_MAX``."""

    animal_protein: float
    fillers_and_cereals: float
    transparency: float
    nutrient_balance: float


@dataclass(frozen=True)
class CategoryScores:
    """Raw points earned per scoring category."""

    protein: float
    fat: float
    taurine: float
    minerals: float
    purity: float
    transparency: float
    omega: float

    @property
    def total(self) -> float:
        """Sum of all category points before clamping."""
        return (
            self.protein
            + self.fat
            + self.taurine
            + self.minerals
            + self.purity
            + self.transparency
            + self.omega
        )


@dataclass(frozen=True)
class ScoreCard:
    """Scorer output before it is wrapped into an evaluation result."""

    score: float
    tier: FoodTier
    categories: CategoryScores
    granular_scores: GranularScores
    warnings: tuple[str, ...]
    observations: tuple[str, ...]


@dataclass(frozen=True)
class EvaluationResult:
    """Immutable record of a single label evaluation."""

    id: str
    name: str
    created_at: datetime
    raw_nutrients: NutrientProfile
    dry_matter_nutrients: NutrientProfile
    ingredients: IngredientSignals
    score: float
    granular_scores: GranularScores
    tier: FoodTier
    summary: str
    warnings: tuple[str, ...]
    observations: tuple[str, ...]
    assumptions: tuple[str, ...]
