"""Shared test fixtures."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from itertools import count

import pytest

from catscore.config import Settings, build_policy
from catscore.containers import AppContainer
from catscore.domain.nutrients import IngredientSignals, NutrientProfile
from catscore.services.evaluation import EvaluationService
from catscore.services.extraction import LabelExtractionClient, LabelExtractionService
from catscore.services.history import InMemoryEvaluationHistory

FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


def premium_nutrients() -> dict[str, float | None]:
    """As-fed guaranteed analysis of a high quality dry food."""
    return {
        "protein": 40.0,
        "fat": 15.0,
        "moisture": 10.0,
        "fiber": 2.5,
        "ash": 7.0,
        "calcium": 0.8,
        "phosphorus": 0.6,
        "magnesium": 0.08,
        "sodium": 0.12,
        "potassium": 0.7,
        "omega3": 1.0,
        "omega6": 0.9,
        "taurine": 0.2,
    }


def premium_ingredients() -> dict[str, bool]:
    """Ingredient signals of a meat-first, cereal-free recipe."""
    return {
        "first_ingredient_animal": True,
        "meat_in_top_three": True,
        "has_vegetable_protein": False,
        "has_gluten": False,
        "fractionated_cereals": False,
        "has_generic_byproducts": False,
        "has_variable_formulation": False,
        "has_taurine_added": True,
        "has_chelated_minerals": True,
        "has_omega_sources": True,
        "has_excessive_salt": False,
        "has_essential_vitamins": True,
        "has_salt_in_ingredients": False,
    }


def premium_profile() -> NutrientProfile:
    return NutrientProfile(**premium_nutrients())


def premium_signals() -> IngredientSignals:
    return IngredientSignals(**premium_ingredients())


def sequential_ids(prefix: str = "eval") -> Callable[[], str]:
    counter = count(1)
    return lambda: f"{prefix}-{next(counter)}"


@dataclass
class FakeLabelClient(LabelExtractionClient):
    """Fake label client returning a fixed payload."""

    payload: dict[str, object] = field(
        default_factory=lambda: {
            "nutrients": premium_nutrients(),
            "ingredients": premium_ingredients(),
            "summary": "Meat-first dry food with complete vitamins.",
        }
    )
    prompts: list[str] = field(default_factory=list)

    async def extract(
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        self.prompts.append(prompt)
        return self.payload


@dataclass
class FlakyLabelClient(FakeLabelClient):
    """Label client that fails a number of times before succeeding."""

    failures: int = 1
    calls: int = 0

    async def extract(
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        self.calls += 1
        if self.calls <= self.failures:
            raise ConnectionError("upstream unavailable")
        return await super().extract(
            model=model,
            reasoning_effort=reasoning_effort,
            store=store,
            schema=schema,
            prompt=prompt,
        )


@pytest.fixture
def settings() -> Settings:
    return Settings(openai_api_key="openai-key")


@pytest.fixture
def label_client() -> FakeLabelClient:
    return FakeLabelClient()


@pytest.fixture
def extraction_service(label_client: FakeLabelClient) -> LabelExtractionService:
    return LabelExtractionService(
        client=label_client,
        model="gpt-5.2",
        reasoning_effort="low",
        store=False,
        retry_delay_seconds=0,
    )


@pytest.fixture
def evaluation_service(
    extraction_service: LabelExtractionService,
) -> EvaluationService:
    return EvaluationService(
        extraction_service=extraction_service,
        history=InMemoryEvaluationHistory(),
        id_factory=sequential_ids(),
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def container(
    settings: Settings,
    extraction_service: LabelExtractionService,
    evaluation_service: EvaluationService,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        policy=build_policy(settings),
        extraction_service=extraction_service,
        evaluation_service=evaluation_service,
        close_resources=close_resources,
    )
