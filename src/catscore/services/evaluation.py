"""Evaluation service combining normalization and scoring."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from catscore.domain.evaluation import EvaluationResult
from catscore.domain.nutrients import IngredientSignals, NutrientProfile
from catscore.domain.targets import DEFAULT_POLICY, ScoringPolicy
from catscore.services.extraction import LabelExtractionService
from catscore.services.history import EvaluationHistory, InMemoryEvaluationHistory
from catscore.services.normalizer import normalize
from catscore.services.scoring import score_profile

_logger = logging.getLogger(__name__)


def _new_id() -> str:
    return uuid4().hex


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def evaluate(  # noqa: PLR0913
    name: str,
    raw_nutrients: NutrientProfile,
    ingredients: IngredientSignals,
    summary: str,
    *,
    policy: ScoringPolicy = DEFAULT_POLICY,
    id_factory: Callable[[], str] = _new_id,
    clock: Callable[[], datetime] = _utc_now,
) -> EvaluationResult:
    """Normalize and score one label, returning a new immutable result."""
    normalized = normalize(raw_nutrients, ingredients, policy)
    card = score_profile(normalized.dry_matter, raw_nutrients, ingredients, policy)
    return EvaluationResult(
        id=id_factory(),
        name=name,
        created_at=clock(),
        raw_nutrients=raw_nutrients,
        dry_matter_nutrients=normalized.dry_matter,
        ingredients=ingredients,
        score=card.score,
        granular_scores=card.granular_scores,
        tier=card.tier,
        summary=summary,
        warnings=card.warnings,
        observations=card.observations,
        assumptions=normalized.assumptions,
    )


@dataclass
class EvaluationService:
    """Service that evaluates labels and records them in history."""

    extraction_service: LabelExtractionService
    history: EvaluationHistory = field(default_factory=InMemoryEvaluationHistory)
    policy: ScoringPolicy = DEFAULT_POLICY
    id_factory: Callable[[], str] = _new_id
    clock: Callable[[], datetime] = _utc_now

    def evaluate(
        self,
        name: str,
        raw_nutrients: NutrientProfile,
        ingredients: IngredientSignals,
        summary: str,
    ) -> EvaluationResult:
        """Evaluate already-structured label data and store the result."""
        result = evaluate(
            name,
            raw_nutrients,
            ingredients,
            summary,
            policy=self.policy,
            id_factory=self.id_factory,
            clock=self.clock,
        )
        self.history.add(result)
        _logger.info(
            "Evaluated label: name=%s score=%s tier=%s",
            name,
            result.score,
            result.tier.value,
        )
        return result

    async def evaluate_label(
        self, name: str, guaranteed_analysis: str, ingredients_text: str
    ) -> EvaluationResult:
        """Extract structured data from label text, then evaluate it."""
        extract = await self.extraction_service.extract(
            name, guaranteed_analysis, ingredients_text
        )
        return self.evaluate(
            name,
            extract.nutrients,
            extract.ingredients,
            extract.summary,
        )
