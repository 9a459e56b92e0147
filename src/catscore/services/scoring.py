"""Additive multi-criteria scoring of dry-matter label data."""

import logging
from dataclasses import dataclass, field

from catscore.domain.evaluation import (
    GRANULAR_MAX,
    CategoryScores,
    FoodTier,
    GranularScores,
    ScoreCard,
)
from catscore.domain.nutrients import Basis, IngredientSignals, NutrientProfile
from catscore.domain.targets import (
    DEFAULT_POLICY,
    NutritionalTargets,
    Range,
    RatioTarget,
    ScoringPolicy,
    TierThresholds,
)

PROTEIN_BASE_POINTS = 6.0
PROTEIN_RAMP_POINTS = 12.0
ANIMAL_SOURCE_POINTS = 6.0
FAT_POINTS = 10.0
TAURINE_BASE_POINTS = 4.0
TAURINE_RAMP_POINTS = 6.0
MINERAL_POINTS = 2.5
RATIO_POINTS = 5.0
RATIO_PENALTY = 2.5
PURITY_ALLOTMENT = 16.0
VEGETABLE_PROTEIN_PENALTY = 6.0
GLUTEN_PENALTY = 5.0
FRACTIONATED_CEREALS_PENALTY = 5.0
EXCESSIVE_SALT_PENALTY = 4.0
NO_ADDED_SALT_POINTS = 2.0
ANIMAL_FIRST_PURITY_POINTS = 2.0
TRANSPARENCY_ALLOTMENT = 8.0
BYPRODUCT_PENALTY = 4.0
VARIABLE_FORMULATION_PENALTY = 4.0
VITAMIN_POINTS = 2.0
OMEGA_POINTS = 5.0

PROTEIN_MAX = PROTEIN_BASE_POINTS + PROTEIN_RAMP_POINTS + 2 * ANIMAL_SOURCE_POINTS
PURITY_MAX = PURITY_ALLOTMENT + NO_ADDED_SALT_POINTS + ANIMAL_FIRST_PURITY_POINTS
TRANSPARENCY_MAX = TRANSPARENCY_ALLOTMENT + VITAMIN_POINTS
BALANCE_MAX = (
    FAT_POINTS
    + TAURINE_BASE_POINTS
    + TAURINE_RAMP_POINTS
    + 4 * MINERAL_POINTS
    + RATIO_POINTS
    + OMEGA_POINTS
)
SCORE_MAX = 100.0

_RATIO_OBSERVATION_CLOSENESS = 0.75

_logger = logging.getLogger(__name__)


@dataclass
class _Notes:
    warnings: list[str] = field(default_factory=list)
    observations: list[str] = field(default_factory=list)

    def warn(self, message: str) -> None:
        self.warnings.append(message)

    def observe(self, message: str) -> None:
        self.observations.append(message)


def score_profile(
    dm: NutrientProfile,
    raw: NutrientProfile,
    signals: IngredientSignals,
    policy: ScoringPolicy = DEFAULT_POLICY,
) -> ScoreCard:
    """Score a dry-matter profile and collect warnings and observations.

    Missing nutrients never raise; they simply earn no credit. Passing an
    as-fed profile is a programming error.
    """
    if dm.basis is not Basis.DRY_MATTER:
        raise ValueError("score_profile requires a dry-matter profile")

    targets = policy.targets
    moisture = raw.moisture if raw.moisture is not None else targets.default_moisture
    notes = _Notes()
    categories = CategoryScores(
        protein=score_protein(dm, signals, targets, notes),
        fat=score_fat(dm, targets, notes),
        taurine=score_taurine(dm, moisture, targets, notes),
        minerals=score_minerals(dm, targets, notes),
        purity=score_purity(signals, notes),
        transparency=score_transparency(signals, notes),
        omega=score_omega(dm, signals, notes),
    )
    score = _clamp(round(categories.total, 2), 0.0, SCORE_MAX)
    tier = tier_for_score(score, policy.tiers)
    _logger.debug("Scored profile: score=%s tier=%s", score, tier.value)
    return ScoreCard(
        score=score,
        tier=tier,
        categories=categories,
        granular_scores=project_granular(categories),
        warnings=tuple(notes.warnings),
        observations=tuple(notes.observations),
    )


def score_protein(
    dm: NutrientProfile,
    signals: IngredientSignals,
    targets: NutritionalTargets,
    notes: _Notes,
) -> float:
    """Linear ramp from the minimum to the ideal plus animal-source credit."""
    target = targets.protein
    protein = dm.protein
    points = 0.0
    if protein is None:
        notes.warn("Protein is not declared on the label.")
    elif protein < target.min:
        notes.warn(
            f"Protein below the FEDIAF minimum ({protein:.2f}% DM vs {target.min:g}%)."
        )
    else:
        progress = min(1.0, (protein - target.min) / (target.ideal - target.min))
        points += PROTEIN_BASE_POINTS + progress * PROTEIN_RAMP_POINTS
        if target.max is not None and protein > target.max:
            notes.warn(
                f"Protein of {protein:.2f}% DM is implausibly high; "
                "check the declared value."
            )
        elif protein >= target.ideal:
            notes.observe(
                f"Protein meets the {target.ideal:g}% ideal ({protein:.2f}% DM)."
            )

    if signals.first_ingredient_animal:
        points += ANIMAL_SOURCE_POINTS
        notes.observe("Animal-based first ingredient.")
    else:
        notes.warn("Main protein base is not animal-derived (filler risk).")
    if signals.meat_in_top_three:
        points += ANIMAL_SOURCE_POINTS
    return points


def score_fat(dm: NutrientProfile, targets: NutritionalTargets, notes: _Notes) -> float:
    """Symmetric penalty around the ideal fat level."""
    target = targets.fat
    fat = dm.fat
    if fat is None:
        notes.warn("Fat is not declared on the label.")
        return 0.0

    deviation = abs(fat - target.ideal)
    points = FAT_POINTS * max(0.0, 1 - deviation / target.tolerance)
    if fat < target.min:
        notes.warn(f"Fat below the FEDIAF minimum ({fat:.2f}% DM vs {target.min:g}%).")
    elif fat > target.max:
        notes.warn(
            f"Fat above the recommended maximum ({fat:.2f}% DM vs {target.max:g}%)."
        )
    elif deviation <= target.tolerance / 4:
        notes.observe(f"Fat close to the {target.ideal:g}% ideal ({fat:.2f}% DM).")
    return points


def score_taurine(
    dm: NutrientProfile,
    moisture: float,
    targets: NutritionalTargets,
    notes: _Notes,
) -> float:
    """Linear ramp from the wetness-specific minimum to the ideal."""
    target = targets.taurine
    taurine = dm.taurine
    if taurine is None:
        notes.warn("Taurine is neither declared nor listed among the ingredients.")
        return 0.0

    minimum = target.minimum_for(moisture)
    if taurine < minimum:
        notes.warn(
            f"Taurine below the FEDIAF minimum ({taurine:.2f}% DM vs {minimum:.2f}%)."
        )
        return 0.0

    if target.ideal > minimum:
        progress = min(1.0, (taurine - minimum) / (target.ideal - minimum))
    else:
        progress = 1.0
    if taurine >= target.ideal:
        notes.observe(
            f"Taurine meets the {target.ideal:.2f}% ideal ({taurine:.2f}% DM)."
        )
    return TAURINE_BASE_POINTS + progress * TAURINE_RAMP_POINTS


def score_minerals(
    dm: NutrientProfile, targets: NutritionalTargets, notes: _Notes
) -> float:
    """Per-mineral band checks plus the calcium to phosphorus balance.

    Out-of-band minerals are reported together in a single warning; the
    Ca:P ratio is a separate condition with its own warning.
    """
    points = 0.0
    outside: list[str] = []
    for name, band in targets.mineral_bands().items():
        value = getattr(dm, name)
        if value is None:
            continue
        if band.contains(value):
            points += MINERAL_POINTS
        else:
            outside.append(f"{name} {value:.2f}% DM ({_format_band(band)})")
    if outside:
        notes.warn(f"Minerals outside the recommended range: {', '.join(outside)}.")

    ratio = dm.ca_p_ratio
    if ratio is not None:
        points += score_ca_p_ratio(ratio, targets.ca_p_ratio, notes)
    return max(0.0, points)


def score_ca_p_ratio(ratio: float, target: RatioTarget, notes: _Notes) -> float:
    """Full credit at the ideal ratio, zero at the band edges, penalty beyond."""
    if ratio < target.min or ratio > target.max:
        notes.warn(
            f"Ca:P ratio {ratio:.2f}:1 outside the "
            f"{target.min:.1f}-{target.max:.1f}:1 range."
        )
        return -RATIO_PENALTY

    edge = target.min if ratio < target.ideal else target.max
    span = abs(target.ideal - edge)
    closeness = 1.0 if span == 0 else 1 - abs(ratio - target.ideal) / span
    if closeness >= _RATIO_OBSERVATION_CLOSENESS:
        notes.observe(
            f"Ca:P ratio {ratio:.2f}:1 close to the {target.ideal:.1f}:1 ideal."
        )
    return RATIO_POINTS * closeness


def score_purity(signals: IngredientSignals, notes: _Notes) -> float:
    """Start from an allotment and subtract per filler or salt marker.

    Every marker found is listed in one warning for the category.
    """
    markers = (
        (
            signals.has_vegetable_protein,
            VEGETABLE_PROTEIN_PENALTY,
            "vegetable protein",
        ),
        (signals.has_gluten, GLUTEN_PENALTY, "gluten"),
        (
            signals.fractionated_cereals,
            FRACTIONATED_CEREALS_PENALTY,
            "fractionated cereals",
        ),
        (signals.has_excessive_salt, EXCESSIVE_SALT_PENALTY, "excessive salt"),
    )
    allotment = PURITY_ALLOTMENT
    found: list[str] = []
    for present, penalty, label in markers:
        if present:
            allotment -= penalty
            found.append(label)
    if found:
        notes.warn(f"Filler markers: {', '.join(found)}.")
    else:
        notes.observe("No vegetable protein, gluten or cereal fractions declared.")

    points = max(0.0, allotment)
    if not signals.has_salt_in_ingredients:
        points += NO_ADDED_SALT_POINTS
    if signals.first_ingredient_animal:
        points += ANIMAL_FIRST_PURITY_POINTS
    return points


def score_transparency(signals: IngredientSignals, notes: _Notes) -> float:
    """Penalize vague wording, reward a complete vitamin declaration."""
    points = TRANSPARENCY_ALLOTMENT
    vague: list[str] = []
    if signals.has_generic_byproducts:
        points -= BYPRODUCT_PENALTY
        vague.append("generic by-products without a named source")
    if signals.has_variable_formulation:
        points -= VARIABLE_FORMULATION_PENALTY
        vague.append("'and/or' wording, so the recipe may vary")
    if vague:
        notes.warn(f"Vague ingredient list: {'; '.join(vague)}.")
    points = max(0.0, points)
    if signals.has_essential_vitamins:
        points += VITAMIN_POINTS
        notes.observe("Declares vitamins A, D, E and the B complex.")
    if signals.has_chelated_minerals:
        notes.observe("Chelated minerals for better absorption.")
    return points


def score_omega(
    dm: NutrientProfile, signals: IngredientSignals, notes: _Notes
) -> float:
    """Credit omega balance, or half credit for qualitative sources."""
    omega3, omega6 = dm.omega3, dm.omega6
    if omega3 is not None and omega6 is not None and (omega3 or omega6):
        if omega3 >= omega6:
            notes.observe("Omega-3 content at or above omega-6.")
            return OMEGA_POINTS
        if omega3:
            notes.warn(f"Omega-6:omega-3 ratio of {omega6 / omega3:.1f}:1.")
        else:
            notes.warn("Omega-6 declared without any omega-3.")
        return OMEGA_POINTS / 2
    if signals.has_omega_sources:
        return OMEGA_POINTS / 2
    return 0.0


def tier_for_score(score: float, thresholds: TierThresholds) -> FoodTier:
    """Map a total score onto the tier ladder."""
    if score >= thresholds.s:
        return FoodTier.S
    if score >= thresholds.a:
        return FoodTier.A
    if score >= thresholds.b:
        return FoodTier.B
    if score >= thresholds.c:
        return FoodTier.C
    return FoodTier.D


def project_granular(categories: CategoryScores) -> GranularScores:
    """Rescale category points onto four equally sized display buckets."""
    balance = categories.fat + categories.taurine + categories.minerals + categories.omega
    return GranularScores(
        animal_protein=_bucket(categories.protein, PROTEIN_MAX),
        fillers_and_cereals=_bucket(categories.purity, PURITY_MAX),
        transparency=_bucket(categories.transparency, TRANSPARENCY_MAX),
        nutrient_balance=_bucket(balance, BALANCE_MAX),
    )


def _bucket(points: float, maximum: float) -> float:
    return round(_clamp(points / maximum * GRANULAR_MAX, 0.0, GRANULAR_MAX), 2)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _format_band(band: Range) -> str:
    if band.min is not None and band.max is not None:
        return f"{band.min:.2f}-{band.max:.2f}%"
    if band.min is not None:
        return f">= {band.min:.2f}%"
    return f"<= {band.max:.2f}%"
