"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from catscore.adapters.openai_label_client import OpenAILabelClient
from catscore.config import Settings, build_policy
from catscore.domain.targets import ScoringPolicy
from catscore.services.evaluation import EvaluationService
from catscore.services.extraction import LabelExtractionService
from catscore.services.history import InMemoryEvaluationHistory


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    policy: ScoringPolicy
    extraction_service: LabelExtractionService
    evaluation_service: EvaluationService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    policy = build_policy(resolved_settings)
    openai_client = OpenAILabelClient.create(resolved_settings.openai_api_key)
    extraction_service = LabelExtractionService(
        client=openai_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
        retry_attempts=resolved_settings.extraction_retry_attempts,
    )
    evaluation_service = EvaluationService(
        extraction_service=extraction_service,
        history=InMemoryEvaluationHistory(max_size=resolved_settings.history_limit),
        policy=policy,
    )

    async def close_resources() -> None:
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        policy=policy,
        extraction_service=extraction_service,
        evaluation_service=evaluation_service,
        close_resources=close_resources,
    )
