"""Process-lifetime history of evaluation results."""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from catscore.domain.evaluation import EvaluationResult


class EvaluationHistory(Protocol):
    """Ordered store of results, most recent first."""

    def add(self, result: EvaluationResult) -> None:
        """Record a new result ahead of older ones."""

    def list_recent(self, limit: int | None = None) -> list[EvaluationResult]:
        """Return results, most recent first."""

    def get(self, result_id: str) -> EvaluationResult | None:
        """Return a result by id, if present."""

    def select(self, result_ids: Iterable[str]) -> list[EvaluationResult]:
        """Return the known results among the ids, in history order."""

    def clear(self) -> None:
        """Forget every recorded result."""


@dataclass
class InMemoryEvaluationHistory(EvaluationHistory):
    """In-memory history; nothing survives a restart.

    When ``max_size`` is set, the oldest results are dropped once the history
    holds more than that many.
    """

    _results: list[EvaluationResult]
    max_size: int | None

    def __init__(self, max_size: int | None = None) -> None:
        if max_size is not None and max_size < 1:
            raise ValueError(f"max_size must be positive: {max_size}")
        self._results = []
        self.max_size = max_size

    def add(self, result: EvaluationResult) -> None:
        """Prepend a result, evicting the oldest beyond ``max_size``."""
        self._results.insert(0, result)
        if self.max_size is not None:
            del self._results[self.max_size :]

    def list_recent(self, limit: int | None = None) -> list[EvaluationResult]:
        """Return up to ``limit`` results, most recent first."""
        if limit is None:
            return list(self._results)
        return self._results[: max(limit, 0)]

    def get(self, result_id: str) -> EvaluationResult | None:
        """Return a result by id."""
        return next((r for r in self._results if r.id == result_id), None)

    def select(self, result_ids: Iterable[str]) -> list[EvaluationResult]:
        """Return results whose id was requested, keeping history order."""
        wanted = set(result_ids)
        return [r for r in self._results if r.id in wanted]

    def clear(self) -> None:
        """Drop all results."""
        self._results.clear()

    def __len__(self) -> int:
        return len(self._results)
