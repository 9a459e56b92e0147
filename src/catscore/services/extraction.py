"""Label extraction service using LLMs."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from catscore.domain.extraction import LabelExtract, ParsedLabel
from catscore.domain.nutrients import NUTRIENT_FIELDS

_INGREDIENT_FIELDS = (
    "first_ingredient_animal",
    "meat_in_top_three",
    "has_vegetable_protein",
    "has_gluten",
    "fractionated_cereals",
    "has_generic_byproducts",
    "has_variable_formulation",
    "has_taurine_added",
    "has_chelated_minerals",
    "has_omega_sources",
    "has_excessive_salt",
    "has_essential_vitamins",
    "has_salt_in_ingredients",
)

LABEL_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "nutrients": {
            "type": "object",
            "properties": {
                name: {"anyOf": [{"type": "number"}, {"type": "null"}]}
                for name in NUTRIENT_FIELDS
            },
            "required": list(NUTRIENT_FIELDS),
            "additionalProperties": False,
        },
        "ingredients": {
            "type": "object",
            "properties": {name: {"type": "boolean"} for name in _INGREDIENT_FIELDS},
            "required": list(_INGREDIENT_FIELDS),
            "additionalProperties": False,
        },
        "summary": {"type": "string"},
    },
    "required": ["nutrients", "ingredients", "summary"],
    "additionalProperties": False,
}

_PROMPT_TEMPLATE = """\
You are a feline nutrition expert. Extract the nutritional information
from this pet food label text. It may contain OCR errors.

PRODUCT: {name}
GUARANTEED ANALYSIS: {analysis}
INGREDIENTS: {ingredients}

Rules for numeric values:
1. Return every nutrient as a percentage of the product as fed.
2. Taurine is usually between 0.05% and 0.25%. A value such as 1500 is
   mg/kg and must be converted (1500 / 10000 = 0.15%). Never return
   taurine above 2.0%.
3. Calcium, phosphorus and sodium given in g/kg or mg/kg must be converted
   to percent (10 g/kg = 1.0%).
4. If only salt is declared, estimate sodium as 40% of the salt value.
5. Look for omega 3 and omega 6.
6. Use null for anything that is not declared or obviously wrong.

Rules for ingredients:
- has_essential_vitamins is true only when vitamins A, D, E and the B
  complex are all listed explicitly.
- has_salt_in_ingredients is true when salt or sodium chloride is listed.
- has_variable_formulation is true when the list uses "and/or" wording.
- has_generic_byproducts is true for by-products without a named species.

Finish with a short plain-language summary of the product's quality.
"""

_logger = logging.getLogger(__name__)


class LabelExtractionError(RuntimeError):
    """Raised when label text cannot be turned into structured data."""


class LabelExtractionClient(Protocol):
    """Interface for LLM label extraction."""

    async def extract(
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        """Return structured label extraction data."""


@dataclass
class LabelExtractionService:
    """Service that prepares extraction prompts and validates results."""

    client: LabelExtractionClient
    model: str
    reasoning_effort: str | None
    store: bool
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def extract(
        self, name: str, guaranteed_analysis: str, ingredients_text: str
    ) -> ParsedLabel:
        """Extract nutrients, ingredient signals and a summary from label text."""
        prompt = build_prompt(name, guaranteed_analysis, ingredients_text)
        raw = await self._call_with_retry(prompt)
        try:
            extract = LabelExtract.model_validate(raw)
        except ValidationError as exc:
            raise LabelExtractionError(
                f"Extraction response did not match the label schema: {exc}"
            ) from exc
        return ParsedLabel(
            nutrients=extract.nutrients.to_profile(),
            ingredients=extract.ingredients.to_signals(),
            summary=extract.summary,
        )

    async def _call_with_retry(self, prompt: str) -> dict[str, object]:
        """Call the client with a short retry."""
        attempt = 0
        while True:
            try:
                return await self.client.extract(
                    model=self.model,
                    reasoning_effort=self.reasoning_effort,
                    store=self.store,
                    schema=LABEL_SCHEMA,
                    prompt=prompt,
                )
            except Exception as exc:
                attempt += 1
                _logger.warning(
                    "Label extraction failed (attempt %s/%s): %s",
                    attempt,
                    self.retry_attempts + 1,
                    exc,
                )
                if attempt > self.retry_attempts:
                    if isinstance(exc, LabelExtractionError):
                        raise
                    raise LabelExtractionError(str(exc)) from exc
                await asyncio.sleep(self.retry_delay_seconds)


def build_prompt(name: str, guaranteed_analysis: str, ingredients_text: str) -> str:
    """Render the extraction prompt for one label."""
    return _PROMPT_TEMPLATE.format(
        name=name.strip(),
        analysis=guaranteed_analysis.strip(),
        ingredients=ingredients_text.strip(),
    )
