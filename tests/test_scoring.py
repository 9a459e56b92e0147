"""Tests for the additive scoring model."""

import pytest

from catscore.domain.evaluation import FoodTier
from catscore.domain.nutrients import Basis, IngredientSignals, NutrientProfile
from catscore.domain.targets import (
    FatTarget,
    NutritionalTargets,
    ProteinTarget,
    ScoringPolicy,
    TierThresholds,
)
from catscore.services.normalizer import normalize
from catscore.services.scoring import score_profile, tier_for_score
from tests.conftest import premium_profile, premium_signals

DRY = NutrientProfile(moisture=10.0)
WET = NutrientProfile(moisture=80.0)


def dm(**values: float) -> NutrientProfile:
    return NutrientProfile(basis=Basis.DRY_MATTER, **values)


def test_premium_label_reaches_top_tier() -> None:
    raw = premium_profile()
    signals = premium_signals()
    normalized = normalize(raw, signals)

    card = score_profile(normalized.dry_matter, raw, signals)

    assert card.score == pytest.approx(96.11, abs=0.01)
    assert card.tier is FoodTier.S
    assert card.warnings == ()
    assert "Animal-based first ingredient." in card.observations
    assert card.granular_scores.animal_protein == 25.0
    assert card.granular_scores.fillers_and_cereals == 25.0
    assert card.granular_scores.transparency == 25.0


def test_poor_label_scores_zero_with_one_warning_per_failure() -> None:
    raw = NutrientProfile(protein=20.0, fat=8.0, moisture=10.0)
    signals = IngredientSignals(
        has_vegetable_protein=True,
        has_gluten=True,
        fractionated_cereals=True,
        has_excessive_salt=True,
        has_salt_in_ingredients=True,
        has_generic_byproducts=True,
        has_variable_formulation=True,
    )
    normalized = normalize(raw, signals)

    card = score_profile(normalized.dry_matter, raw, signals)

    assert card.score == 0.0
    assert card.tier is FoodTier.D
    assert len(card.warnings) == 6
    assert (
        "Filler markers: vegetable protein, gluten, fractionated cereals, "
        "excessive salt."
    ) in card.warnings
    assert sum(w.startswith("Vague ingredient list") for w in card.warnings) == 1
    assert card.observations == ()


def test_scoring_requires_dry_matter_profile() -> None:
    with pytest.raises(ValueError, match="dry-matter"):
        score_profile(NutrientProfile(protein=30.0), DRY, IngredientSignals())


def test_missing_nutrients_do_not_raise() -> None:
    card = score_profile(dm(), NutrientProfile(), IngredientSignals())

    assert card.categories.protein == 0.0
    assert card.categories.fat == 0.0
    assert card.categories.taurine == 0.0
    assert card.categories.minerals == 0.0
    assert 0.0 <= card.score <= 100.0


def test_protein_between_minimum_and_ideal_gets_partial_credit() -> None:
    raw = NutrientProfile(protein=32.0, moisture=10.0)
    normalized = normalize(raw, IngredientSignals())

    card = score_profile(normalized.dry_matter, raw, IngredientSignals())

    assert normalized.dry_matter.protein == pytest.approx(35.56, abs=0.01)
    assert card.categories.protein == pytest.approx(15.74, abs=0.01)
    assert not any(w.startswith("Protein") for w in card.warnings)
    assert not any(o.startswith("Protein") for o in card.observations)


def test_protein_below_minimum_earns_nothing() -> None:
    card = score_profile(dm(protein=20.0), DRY, IngredientSignals())

    assert card.categories.protein == 0.0
    assert any("Protein below" in w for w in card.warnings)


def test_protein_at_ideal_with_animal_sources_is_full() -> None:
    signals = IngredientSignals(first_ingredient_animal=True, meat_in_top_three=True)

    card = score_profile(dm(protein=38.0), DRY, signals)

    assert card.categories.protein == pytest.approx(30.0)
    assert any(o.startswith("Protein meets") for o in card.observations)


def test_implausible_protein_is_flagged() -> None:
    card = score_profile(dm(protein=75.0), DRY, IngredientSignals())

    assert any("implausibly high" in w for w in card.warnings)


def test_animal_sources_add_credit_independently() -> None:
    first_only = score_profile(
        dm(), DRY, IngredientSignals(first_ingredient_animal=True)
    )
    top_three_only = score_profile(dm(), DRY, IngredientSignals(meat_in_top_three=True))

    assert first_only.categories.protein == pytest.approx(6.0)
    assert top_three_only.categories.protein == pytest.approx(6.0)


def test_fat_penalty_is_symmetric_around_ideal() -> None:
    low = score_profile(dm(fat=12.0), DRY, IngredientSignals())
    high = score_profile(dm(fat=18.0), DRY, IngredientSignals())
    ideal = score_profile(dm(fat=15.0), DRY, IngredientSignals())

    assert low.categories.fat == pytest.approx(5.0)
    assert high.categories.fat == pytest.approx(5.0)
    assert ideal.categories.fat == pytest.approx(10.0)
    assert any(o.startswith("Fat close") for o in ideal.observations)


def test_excess_fat_is_warned() -> None:
    card = score_profile(dm(fat=25.0), DRY, IngredientSignals())

    assert card.categories.fat == 0.0
    assert sum("Fat above" in w for w in card.warnings) == 1


def test_taurine_ramps_between_minimum_and_ideal() -> None:
    card = score_profile(dm(taurine=0.15), DRY, IngredientSignals())

    assert card.categories.taurine == pytest.approx(7.0)


def test_taurine_below_wet_minimum_earns_nothing() -> None:
    card = score_profile(dm(taurine=0.15), WET, IngredientSignals())

    assert card.categories.taurine == 0.0
    assert sum("Taurine below" in w for w in card.warnings) == 1


def test_taurine_at_wet_threshold_uses_dry_minimum() -> None:
    raw = NutrientProfile(moisture=50.0)

    card = score_profile(dm(taurine=0.15), raw, IngredientSignals())

    assert card.categories.taurine == pytest.approx(7.0)


def test_assumed_taurine_earns_credit() -> None:
    raw = NutrientProfile(protein=30.0, moisture=10.0)
    signals = IngredientSignals(has_taurine_added=True)
    normalized = normalize(raw, signals)

    card = score_profile(normalized.dry_matter, raw, signals)

    assert card.categories.taurine > 0
    assert len([a for a in normalized.assumptions if "Taurine" in a]) == 1


def test_undeclared_taurine_without_signal_earns_nothing() -> None:
    raw = NutrientProfile(protein=30.0, moisture=10.0)
    normalized = normalize(raw, IngredientSignals())

    card = score_profile(normalized.dry_matter, raw, IngredientSignals())

    assert card.categories.taurine == 0.0
    assert normalized.assumptions == ()


def test_ca_p_ratio_outside_band_is_penalized() -> None:
    card = score_profile(dm(calcium=1.2, phosphorus=0.6), DRY, IngredientSignals())

    ratio_warnings = [w for w in card.warnings if "Ca:P" in w]
    assert len(ratio_warnings) == 1
    assert "2.00:1" in ratio_warnings[0]
    assert card.categories.minerals == 0.0


def test_ca_p_ratio_at_ideal_gets_full_credit() -> None:
    card = score_profile(dm(calcium=0.6, phosphorus=0.5), DRY, IngredientSignals())

    assert card.categories.minerals == pytest.approx(10.0)
    assert any("Ca:P" in o for o in card.observations)


def test_ca_p_ratio_at_band_edge_gets_no_ratio_credit() -> None:
    card = score_profile(dm(calcium=0.9, phosphorus=0.5), DRY, IngredientSignals())

    assert card.categories.minerals == pytest.approx(5.0)
    assert not any("Ca:P" in w for w in card.warnings)


def test_sodium_inside_band_gets_full_credit() -> None:
    card = score_profile(dm(sodium=0.10), DRY, IngredientSignals())

    assert card.categories.minerals == pytest.approx(2.5)
    assert not any("sodium" in w for w in card.warnings)


def test_mineral_outside_band_is_warned() -> None:
    card = score_profile(dm(magnesium=0.3), DRY, IngredientSignals())

    assert card.categories.minerals == 0.0
    assert (
        "Minerals outside the recommended range: magnesium 0.30% DM (0.04-0.10%)."
    ) in card.warnings


def test_purity_markers_subtract_from_allotment() -> None:
    clean = score_profile(dm(), DRY, IngredientSignals())
    gluten = score_profile(dm(), DRY, IngredientSignals(has_gluten=True))
    salted = score_profile(dm(), DRY, IngredientSignals(has_salt_in_ingredients=True))

    assert clean.categories.purity == pytest.approx(18.0)
    assert gluten.categories.purity == pytest.approx(13.0)
    assert salted.categories.purity == pytest.approx(16.0)
    assert "Filler markers: gluten." in gluten.warnings


def test_transparency_penalties_and_vitamin_bonus() -> None:
    vague = IngredientSignals(
        has_generic_byproducts=True, has_variable_formulation=True
    )
    complete = IngredientSignals(has_essential_vitamins=True)

    vague_card = score_profile(dm(), DRY, vague)
    complete_card = score_profile(dm(), DRY, complete)

    assert vague_card.categories.transparency == 0.0
    assert complete_card.categories.transparency == pytest.approx(10.0)
    vague_warnings = [w for w in vague_card.warnings if "Vague" in w]
    assert len(vague_warnings) == 1
    assert "by-products" in vague_warnings[0]
    assert "and/or" in vague_warnings[0]


def test_omega_balance_credit() -> None:
    balanced = score_profile(dm(omega3=1.0, omega6=0.8), DRY, IngredientSignals())
    skewed = score_profile(dm(omega3=0.5, omega6=5.0), DRY, IngredientSignals())
    sources_only = score_profile(dm(), DRY, IngredientSignals(has_omega_sources=True))

    assert balanced.categories.omega == pytest.approx(5.0)
    assert skewed.categories.omega == pytest.approx(2.5)
    assert any("10.0:1" in w for w in skewed.warnings)
    assert sources_only.categories.omega == pytest.approx(2.5)


def test_scoring_is_deterministic() -> None:
    raw = premium_profile()
    signals = premium_signals()
    normalized = normalize(raw, signals)

    first = score_profile(normalized.dry_matter, raw, signals)
    second = score_profile(normalized.dry_matter, raw, signals)

    assert first == second


def test_granular_scores_stay_within_bounds() -> None:
    raw = NutrientProfile(protein=90.0, fat=40.0, calcium=5.0, moisture=5.0)
    signals = IngredientSignals(first_ingredient_animal=True, meat_in_top_three=True)
    normalized = normalize(raw, signals)

    card = score_profile(normalized.dry_matter, raw, signals)

    for value in vars(card.granular_scores).values():
        assert 0.0 <= value <= 25.0


@pytest.mark.parametrize(
    ("score", "tier"),
    [
        (100.0, FoodTier.S),
        (88.0, FoodTier.S),
        (87.99, FoodTier.A),
        (72.0, FoodTier.A),
        (58.0, FoodTier.B),
        (42.0, FoodTier.C),
        (41.99, FoodTier.D),
        (0.0, FoodTier.D),
    ],
)
def test_tier_thresholds(score: float, tier: FoodTier) -> None:
    assert tier_for_score(score, TierThresholds()) is tier


def test_tiers_are_monotonic() -> None:
    order = [FoodTier.D, FoodTier.C, FoodTier.B, FoodTier.A, FoodTier.S]
    ranks = [order.index(tier_for_score(s / 2, TierThresholds())) for s in range(201)]

    assert ranks == sorted(ranks)


def test_thresholds_must_be_strictly_decreasing() -> None:
    with pytest.raises(ValueError, match="strictly decreasing"):
        TierThresholds(s=90, a=90, b=60, c=40)


@pytest.mark.parametrize(
    ("target", "values"),
    [
        (ProteinTarget, {"min": 30.0, "ideal": 30.0}),
        (ProteinTarget, {"min": 30.0, "ideal": 25.0}),
        (ProteinTarget, {"min": 25.0, "ideal": 38.0, "max": 30.0}),
        (FatTarget, {"tolerance": 0.0}),
        (FatTarget, {"tolerance": -1.0}),
        (FatTarget, {"min": 9.0, "ideal": 25.0, "max": 20.0}),
    ],
)
def test_degenerate_target_tables_are_rejected(
    target: type, values: dict[str, float]
) -> None:
    with pytest.raises(ValueError):
        target(**values)


def test_custom_target_table_scores_without_error() -> None:
    policy = ScoringPolicy(
        targets=NutritionalTargets(
            protein=ProteinTarget(min=30.0, ideal=31.0, max=None),
            fat=FatTarget(min=10.0, ideal=15.0, max=20.0, tolerance=0.5),
        )
    )

    card = score_profile(dm(protein=30.5, fat=15.0), DRY, IngredientSignals(), policy)

    assert card.categories.protein == pytest.approx(12.0)
    assert card.categories.fat == pytest.approx(10.0)


def test_several_out_of_band_minerals_share_one_warning() -> None:
    card = score_profile(
        dm(sodium=0.5, magnesium=0.3, calcium=0.6, phosphorus=0.5),
        DRY,
        IngredientSignals(),
    )

    mineral_warnings = [w for w in card.warnings if w.startswith("Minerals")]
    assert len(mineral_warnings) == 1
    assert "sodium 0.50% DM" in mineral_warnings[0]
    assert "magnesium 0.30% DM" in mineral_warnings[0]
    assert not any("Ca:P" in w for w in card.warnings)
