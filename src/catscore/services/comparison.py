"""Side-by-side comparison of evaluation results."""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from catscore.domain.evaluation import EvaluationResult, FoodTier, GranularScores
from catscore.domain.targets import NutritionalTargets

MIN_COMPARED = 2


class ComparisonError(ValueError):
    """Raised when a comparison is requested with too few results."""


class NutrientStatus(str, Enum):
    """Traffic-light classification of a dry-matter value."""

    UNKNOWN = "unknown"
    LOW = "low"
    BORDERLINE = "borderline"
    HIGH = "high"
    OK = "ok"


@dataclass(frozen=True)
class ComparedNutrient:
    """A key dry-matter value shown in the comparison."""

    nutrient: str
    value: float
    unit: str
    status: NutrientStatus


@dataclass(frozen=True)
class ComparisonRow:
    """One result in a side-by-side comparison."""

    id: str
    name: str
    score: float
    tier: FoodTier
    is_top: bool
    nutrients: list[ComparedNutrient]
    granular_scores: GranularScores


def compare(
    results: Sequence[EvaluationResult], targets: NutritionalTargets
) -> list[ComparisonRow]:
    """Build comparison rows, flagging every result with the top score."""
    if len(results) < MIN_COMPARED:
        raise ComparisonError(
            f"Select at least {MIN_COMPARED} results to compare, got {len(results)}"
        )
    top_score = max(result.score for result in results)
    return [
        ComparisonRow(
            id=result.id,
            name=result.name,
            score=result.score,
            tier=result.tier,
            is_top=result.score == top_score,
            nutrients=_key_nutrients(result, targets),
            granular_scores=result.granular_scores,
        )
        for result in results
    ]


def nutrient_status(
    nutrient: str,
    value: float | None,
    targets: NutritionalTargets,
    moisture: float | None = None,
) -> NutrientStatus:
    """Classify a dry-matter value against the reference targets.

    ``moisture`` is the as-fed moisture of the product and selects the wet or
    dry taurine minimum; the default moisture applies when it is unknown.
    """
    if value is None:
        return NutrientStatus.UNKNOWN
    if nutrient == "protein":
        return _ramp_status(value, targets.protein.min, targets.protein.ideal)
    if nutrient == "taurine":
        if moisture is None:
            moisture = targets.default_moisture
        minimum = targets.taurine.minimum_for(moisture)
        return _ramp_status(value, minimum, targets.taurine.ideal)
    if nutrient == "fat":
        if value < targets.fat.min:
            return NutrientStatus.LOW
        return NutrientStatus.OK
    if nutrient == "ca_p_ratio":
        band = targets.ca_p_ratio
        if value < band.min:
            return NutrientStatus.LOW
        if value > band.max:
            return NutrientStatus.HIGH
        return NutrientStatus.OK
    band = targets.mineral_bands().get(nutrient)
    if band is None:
        return NutrientStatus.UNKNOWN
    if band.min is not None and value < band.min:
        return NutrientStatus.LOW
    if band.max is not None and value > band.max:
        return NutrientStatus.HIGH
    return NutrientStatus.OK


def _ramp_status(value: float, minimum: float, ideal: float) -> NutrientStatus:
    if value < minimum:
        return NutrientStatus.LOW
    if value < ideal:
        return NutrientStatus.BORDERLINE
    return NutrientStatus.OK


def _key_nutrients(
    result: EvaluationResult, targets: NutritionalTargets
) -> list[ComparedNutrient]:
    dm = result.dry_matter_nutrients
    moisture = result.raw_nutrients.moisture
    candidates = (
        ("protein", dm.protein, "%"),
        ("fat", dm.fat, "%"),
        ("sodium", dm.sodium, "%"),
        ("taurine", dm.taurine, "%"),
        ("ca_p_ratio", dm.ca_p_ratio, ":1"),
    )
    return [
        ComparedNutrient(
            nutrient=name,
            value=round(value, 2),
            unit=unit,
            status=nutrient_status(name, value, targets, moisture),
        )
        for name, value, unit in candidates
        if value
    ]
