"""Models for structured label extraction results."""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict

from catscore.domain.nutrients import IngredientSignals, NutrientProfile


class ExtractedNutrients(BaseModel):
    """Guaranteed-analysis values as percentages; null when not declared."""

    protein: float | None = None
    fat: float | None = None
    moisture: float | None = None
    fiber: float | None = None
    ash: float | None = None
    calcium: float | None = None
    phosphorus: float | None = None
    magnesium: float | None = None
    sodium: float | None = None
    potassium: float | None = None
    omega3: float | None = None
    omega6: float | None = None
    taurine: float | None = None

    def to_profile(self) -> NutrientProfile:
        """Convert to an as-fed domain profile."""
        return NutrientProfile(**self.model_dump())


class ExtractedIngredients(BaseModel):
    """Ingredient-list markers returned by the extractor."""

    model_config = ConfigDict(extra="ignore")

    first_ingredient_animal: bool = False
    meat_in_top_three: bool = False
    has_vegetable_protein: bool = False
    has_gluten: bool = False
    fractionated_cereals: bool = False
    has_generic_byproducts: bool = False
    has_variable_formulation: bool = False
    has_taurine_added: bool = False
    has_chelated_minerals: bool = False
    has_omega_sources: bool = False
    has_excessive_salt: bool = False
    has_essential_vitamins: bool = False
    has_salt_in_ingredients: bool = False

    def to_signals(self) -> IngredientSignals:
        """Convert to domain ingredient signals."""
        return IngredientSignals(**self.model_dump())


class LabelExtract(BaseModel):
    """Structured output for label extraction."""

    nutrients: ExtractedNutrients
    ingredients: ExtractedIngredients
    summary: str


@dataclass(frozen=True)
class ParsedLabel:
    """Extraction output converted to domain types."""

    nutrients: NutrientProfile
    ingredients: IngredientSignals
    summary: str
