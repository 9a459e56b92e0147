"""Dry-matter normalization of declared nutrient values."""

import math
from dataclasses import dataclass

from catscore.domain.nutrients import (
    NUTRIENT_FIELDS,
    Basis,
    IngredientSignals,
    NutrientProfile,
)
from catscore.domain.targets import (
    DEFAULT_POLICY,
    NutritionalTargets,
    ScoringPolicy,
    UnitCorrection,
)

_MAGNITUDE_CORRECTED = frozenset(
    {"protein", "fat", "taurine", "calcium", "phosphorus", "sodium", "magnesium"}
)
_PER_TEN_THOUSAND_FLOOR = 1000.0
_OFF_BY_TEN_FLOOR = 50.0
_TAURINE_SANITY_MAX = 2.0
_MAX_MOISTURE = 100.0


class InvalidNutrientError(ValueError):
    """Raised when a declared profile cannot be normalized."""


@dataclass(frozen=True)
class NormalizedProfile:
    """Dry-matter profile with the context used to build it."""

    dry_matter: NutrientProfile
    moisture: float
    dm_factor: float
    assumptions: tuple[str, ...]


def validate_profile(raw: NutrientProfile) -> None:
    """Reject degenerate moisture and negative or non-finite values."""
    for name, value in raw.declared().items():
        if not math.isfinite(value):
            raise InvalidNutrientError(f"{name} must be a finite number, got {value}")
        if value < 0:
            raise InvalidNutrientError(f"{name} cannot be negative, got {value}")
    if raw.moisture is not None and raw.moisture >= _MAX_MOISTURE:
        raise InvalidNutrientError(
            f"moisture must be below 100%, got {raw.moisture}"
        )


def dm_factor_for(moisture: float) -> float:
    """Return the multiplier converting as-fed values to dry matter."""
    if moisture >= _MAX_MOISTURE:
        raise InvalidNutrientError(f"moisture must be below 100%, got {moisture}")
    return _MAX_MOISTURE / (_MAX_MOISTURE - moisture)


def correct_units(name: str, value: float, mode: UnitCorrection) -> float:
    """Repair values that were most likely declared in mg/kg or g/kg."""
    if mode is UnitCorrection.MAGNITUDE and name in _MAGNITUDE_CORRECTED:
        if value >= _PER_TEN_THOUSAND_FLOOR:
            return value / 10000
        if value >= _OFF_BY_TEN_FLOOR:
            return value / 10
        return value
    if (
        mode is UnitCorrection.TAURINE_ONLY
        and name == "taurine"
        and value > _TAURINE_SANITY_MAX
    ):
        return value / 10000
    return value


def normalize(
    raw: NutrientProfile,
    signals: IngredientSignals,
    policy: ScoringPolicy = DEFAULT_POLICY,
) -> NormalizedProfile:
    """Convert a declared profile to dry matter and back-fill inferable gaps.

    Moisture falls back to the policy default without an assumption
    message. Every other declared value is unit-corrected and scaled by
    the dry-matter factor; moisture itself is never carried over.
    """
    if raw.basis is not Basis.AS_FED:
        raise InvalidNutrientError("profile is already on a dry-matter basis")
    validate_profile(raw)

    targets = policy.targets
    moisture = raw.moisture if raw.moisture is not None else targets.default_moisture
    factor = dm_factor_for(moisture)

    values: dict[str, float | None] = dict.fromkeys(NUTRIENT_FIELDS)
    for name, value in raw.declared().items():
        if name == "moisture":
            continue
        values[name] = correct_units(name, value, policy.unit_correction) * factor

    assumptions = _backfill(values, moisture, signals, targets)
    dry_matter = NutrientProfile(basis=Basis.DRY_MATTER, **values)
    return NormalizedProfile(
        dry_matter=dry_matter,
        moisture=moisture,
        dm_factor=factor,
        assumptions=tuple(assumptions),
    )


def _backfill(
    values: dict[str, float | None],
    moisture: float,
    signals: IngredientSignals,
    targets: NutritionalTargets,
) -> list[str]:
    assumptions: list[str] = []
    if values["taurine"] is None and signals.has_taurine_added:
        minimum = targets.taurine.minimum_for(moisture)
        values["taurine"] = minimum
        assumptions.append(
            "Taurine: not declared but listed among the ingredients, so the "
            f"FEDIAF minimum of {minimum:.2f}% DM is assumed. "
            "Ask the manufacturer for the real value."
        )
    if values["calcium"] is None and signals.has_chelated_minerals:
        minimum = targets.calcium.min or 0.0
        values["calcium"] = minimum
        assumptions.append(
            "Calcium: not declared but chelated minerals are listed, so the "
            f"FEDIAF minimum of {minimum:.2f}% DM is assumed."
        )
    if values["phosphorus"] is None and values["calcium"] is not None:
        ideal_ratio = targets.ca_p_ratio.ideal
        values["phosphorus"] = values["calcium"] / ideal_ratio
        assumptions.append(
            "Phosphorus: not declared, derived from calcium at the ideal "
            f"{ideal_ratio:.1f}:1 Ca:P ratio ({values['phosphorus']:.2f}% DM)."
        )
    return assumptions
