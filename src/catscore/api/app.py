"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status

from catscore.api.models import (
    CompareRequest,
    ComparisonRowOut,
    EvaluationOut,
    LabelSubmission,
    StructuredSubmission,
)
from catscore.app_logging import configure_logging
from catscore.containers import AppContainer
from catscore.services.comparison import ComparisonError, compare
from catscore.services.extraction import LabelExtractionError
from catscore.services.normalizer import InvalidNutrientError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/evaluations")
    async def evaluate_label(
        submission: LabelSubmission, request: Request
    ) -> EvaluationOut:
        """Extract a label with the LLM and score it."""
        state_container: AppContainer = request.app.state.container
        try:
            result = await state_container.evaluation_service.evaluate_label(
                submission.name,
                submission.guaranteed_analysis,
                submission.ingredients,
            )
        except LabelExtractionError as exc:
            logger.exception("Label extraction failed for %s", submission.name)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Could not process the label. Try pasting cleaner text.",
            ) from exc
        except InvalidNutrientError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return EvaluationOut.from_result(result)

    @app.post("/evaluations/score")
    async def score_structured(
        submission: StructuredSubmission, request: Request
    ) -> EvaluationOut:
        """Score label data that has already been extracted."""
        state_container: AppContainer = request.app.state.container
        try:
            result = state_container.evaluation_service.evaluate(
                submission.name,
                submission.nutrients.to_profile(),
                submission.ingredients.to_signals(),
                submission.summary,
            )
        except InvalidNutrientError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return EvaluationOut.from_result(result)

    @app.get("/evaluations")
    async def list_evaluations(
        request: Request, limit: int | None = None
    ) -> dict[str, list[EvaluationOut]]:
        """Return recent evaluations, most recent first."""
        state_container: AppContainer = request.app.state.container
        settings = state_container.settings
        resolved_limit = limit if limit is not None else settings.history_limit
        results = state_container.evaluation_service.history.list_recent(
            resolved_limit
        )
        return {"evaluations": [EvaluationOut.from_result(r) for r in results]}

    @app.post("/evaluations/compare")
    async def compare_evaluations(
        payload: CompareRequest, request: Request
    ) -> dict[str, list[ComparisonRowOut]]:
        """Compare two or more evaluations side by side."""
        state_container: AppContainer = request.app.state.container
        selected = state_container.evaluation_service.history.select(payload.ids)
        try:
            rows = compare(selected, state_container.policy.targets)
        except ComparisonError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
            ) from exc
        return {"comparison": [ComparisonRowOut.from_row(row) for row in rows]}

    @app.get("/evaluations/{result_id}")
    async def get_evaluation(result_id: str, request: Request) -> EvaluationOut:
        """Return a single evaluation."""
        state_container: AppContainer = request.app.state.container
        result = state_container.evaluation_service.history.get(result_id)
        if result is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return EvaluationOut.from_result(result)

    return app
