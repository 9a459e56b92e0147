"""Pydantic models for the HTTP API."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from catscore.domain.evaluation import EvaluationResult, FoodTier, GranularScores
from catscore.domain.extraction import ExtractedIngredients, ExtractedNutrients
from catscore.domain.nutrients import NUTRIENT_FIELDS, NutrientProfile
from catscore.services.comparison import ComparisonRow, NutrientStatus


class LabelSubmission(BaseModel):
    """Raw label text submitted for evaluation."""

    name: str = Field(min_length=1)
    guaranteed_analysis: str = Field(min_length=1)
    ingredients: str = Field(min_length=1)

    @field_validator("name", "guaranteed_analysis", "ingredients")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()


class StructuredSubmission(BaseModel):
    """Already-extracted label data submitted for scoring."""

    name: str = Field(min_length=1)
    nutrients: ExtractedNutrients
    ingredients: ExtractedIngredients = Field(default_factory=ExtractedIngredients)
    summary: str = ""


class CompareRequest(BaseModel):
    """Result ids to compare side by side."""

    ids: list[str]


class GranularScoresOut(BaseModel):
    """Score breakdown for display."""

    animal_protein: float
    fillers_and_cereals: float
    transparency: float
    nutrient_balance: float

    @classmethod
    def from_scores(cls, scores: GranularScores) -> "GranularScoresOut":
        """Build the response body for a granular breakdown."""
        return cls(
            animal_protein=scores.animal_protein,
            fillers_and_cereals=scores.fillers_and_cereals,
            transparency=scores.transparency,
            nutrient_balance=scores.nutrient_balance,
        )


class EvaluationOut(BaseModel):
    """Serialized evaluation result."""

    id: str
    name: str
    created_at: datetime
    raw_nutrients: ExtractedNutrients
    dry_matter_nutrients: ExtractedNutrients
    ingredients: ExtractedIngredients
    score: float
    granular_scores: GranularScoresOut
    tier: FoodTier
    summary: str
    warnings: list[str]
    observations: list[str]
    assumptions: list[str]

    @classmethod
    def from_result(cls, result: EvaluationResult) -> "EvaluationOut":
        """Build the response body for a domain result."""
        return cls(
            id=result.id,
            name=result.name,
            created_at=result.created_at,
            raw_nutrients=_nutrients_out(result.raw_nutrients),
            dry_matter_nutrients=_nutrients_out(result.dry_matter_nutrients),
            ingredients=ExtractedIngredients(**result.ingredients.as_dict()),
            score=result.score,
            granular_scores=GranularScoresOut.from_scores(result.granular_scores),
            tier=result.tier,
            summary=result.summary,
            warnings=list(result.warnings),
            observations=list(result.observations),
            assumptions=list(result.assumptions),
        )


class ComparedNutrientOut(BaseModel):
    """Key nutrient in a comparison row."""

    nutrient: str
    value: float
    unit: str
    status: NutrientStatus


class ComparisonRowOut(BaseModel):
    """Serialized comparison row."""

    id: str
    name: str
    score: float
    tier: FoodTier
    is_top: bool
    nutrients: list[ComparedNutrientOut]
    granular_scores: GranularScoresOut

    @classmethod
    def from_row(cls, row: ComparisonRow) -> "ComparisonRowOut":
        """Build the response body for a comparison row."""
        return cls(
            id=row.id,
            name=row.name,
            score=row.score,
            tier=row.tier,
            is_top=row.is_top,
            nutrients=[
                ComparedNutrientOut(
                    nutrient=item.nutrient,
                    value=item.value,
                    unit=item.unit,
                    status=item.status,
                )
                for item in row.nutrients
            ],
            granular_scores=GranularScoresOut.from_scores(row.granular_scores),
        )


def _nutrients_out(profile: NutrientProfile) -> ExtractedNutrients:
    return ExtractedNutrients(
        **{name: getattr(profile, name) for name in NUTRIENT_FIELDS}
    )
