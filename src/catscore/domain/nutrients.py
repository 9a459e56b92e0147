"""Nutrient and ingredient domain models."""

from dataclasses import dataclass, fields
from enum import Enum

NUTRIENT_FIELDS = (
    "protein",
    "fat",
    "moisture",
    "fiber",
    "ash",
    "calcium",
    "phosphorus",
    "magnesium",
    "sodium",
    "potassium",
    "omega3",
    "omega6",
    "taurine",
)


class Basis(str, Enum):
    """Reference basis of the values in a nutrient profile."""

    AS_FED = "as_fed"
    DRY_MATTER = "dry_matter"


@dataclass(frozen=True)
class NutrientProfile:
    """Nutrient percentages; ``None`` means not declared."""

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
    basis: Basis = Basis.AS_FED

    def declared(self) -> dict[str, float]:
        """Return declared nutrient values keyed by nutrient name."""
        return {
            name: value
            for name in NUTRIENT_FIELDS
            if (value := getattr(self, name)) is not None
        }

    @property
    def ca_p_ratio(self) -> float | None:
        """Calcium to phosphorus ratio when both are known and non-zero."""
        if not self.calcium or not self.phosphorus:
            return None
        return self.calcium / self.phosphorus


@dataclass(frozen=True)
class IngredientSignals:
    """Boolean quality markers derived from an ingredient list."""

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

    def as_dict(self) -> dict[str, bool]:
        """Return the signals as a plain mapping."""
        return {field.name: getattr(self, field.name) for field in fields(self)}
