"""Drug report pipeline.

``get_drug_report`` is the single entry point used by the HTTP layer:

    query -> sanitize -> NAFDAC lookup -> first match -> normalize ingredients
          -> openFDA side effects -> condense -> synthesize -> Report

Every step runs sequentially for one request. Upstream data failures end the
run with a ReportError; text generation failures degrade to fallback text.
"""

import re
import logging
from typing import List, Optional

from drugreport.ingredients import normalize_ingredients
from drugreport.llm import GenerativeService, condense_side_effect, get_generative_service, synthesize_report
from drugreport.medical_apis import MedicalAPIClient, get_medical_api_client
from drugreport.models import DrugAnalysisInput, DrugComponent, Report, ReportError, ReportResult

logger = logging.getLogger(__name__)

_TRAILING_NOISE_RE = re.compile(r"(?:[^\w .\-]|_)+$")
_BULLET_MARKER_RE = re.compile(r"^\s*(?:[-•*·]|\d+[.)](?=\s))\s*")


class DrugReportError(Exception):
    """Base class for pipeline failures that end a run."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

class QueryValidationError(DrugReportError):
    pass

class DrugNotFoundError(DrugReportError):
    pass

class IngredientExtractionError(DrugReportError):
    pass

class SummaryGenerationError(DrugReportError):
    pass


def sanitize_query(query: Optional[str]) -> str:
    """Drop trailing punctuation (keeping spaces, periods and hyphens) and trim."""
    text = (query or "").strip()
    return _TRAILING_NOISE_RE.sub("", text).strip()


def split_bullets(text: str) -> List[str]:
    """Split condensed output into distinct bullet lines."""
    bullets = []
    seen = set()
    for line in text.splitlines():
        item = _BULLET_MARKER_RE.sub("", line).strip()
        if item and item.lower() not in seen:
            seen.add(item.lower())
            bullets.append(item)
    return bullets


async def condense_side_effects(raw_effects: List[str], service: Optional[GenerativeService] = None) -> List[str]:
    """Condense all raw side effect fragments in a single generative call.

    When the condenser hands the text back unchanged the original fragments
    are kept as they are.
    """
    if not raw_effects:
        return []

    blob = " ".join(raw_effects)
    condensed = await condense_side_effect(blob, service=service)
    if condensed == blob:
        return list(raw_effects)
    return split_bullets(condensed) or list(raw_effects)


class DrugReportPipeline:
    """Sequences the lookups and generation steps for one drug query."""

    def __init__(self, api_client: MedicalAPIClient, service: GenerativeService):
        self.api_client = api_client
        self.service = service

    async def run(self, request: DrugAnalysisInput) -> Report:
        query = sanitize_query(request.drug_name)
        if not query:
            raise QueryValidationError("Please enter a drug name or NAFDAC registration number.")

        logger.info(f"Building drug report for '{query}'")

        records = await self.api_client.search_registry(query)
        if not records:
            raise DrugNotFoundError(
                f'Information for "{query}" not found in the NAFDAC registry. '
                "Please check the spelling or try a different name or NAFDAC number."
            )

        # First result in API order wins
        record = records[0]
        if len(records) > 1:
            logger.info(f"{len(records)} registry matches for '{query}', using '{record.product_name}'")

        ingredients = normalize_ingredients(record.raw_ingredient_text)
        if not ingredients:
            raise IngredientExtractionError(
                f'Found "{record.product_name}" but could not identify its active ingredients. '
                "Please try a different product name or NAFDAC number."
            )

        raw_effects = await self.api_client.search_adverse_events(ingredients)
        side_effects = await condense_side_effects(raw_effects, service=self.service)

        try:
            synthesis = await synthesize_report(
                query, ingredients, side_effects,
                user_conditions=request.medical_conditions,
                service=self.service,
            )
        except Exception as e:
            logger.error(f"Summary generation failed for '{query}': {e}", exc_info=True)
            raise SummaryGenerationError(f'Failed to generate the summary for "{query}". Please try again.') from e

        if not synthesis.generated:
            logger.warning(f"Using fallback summary for '{query}'")

        return Report(
            drug_name=query,
            product_name=record.product_name,
            registration_number=record.registration_number,
            components=[DrugComponent(name=name) for name in ingredients],
            side_effects=side_effects,
            ai_summary=synthesis.summary,
        )


async def get_drug_report(
    request: DrugAnalysisInput,
    api_client: Optional[MedicalAPIClient] = None,
    service: Optional[GenerativeService] = None,
) -> ReportResult:
    """Build a Report for a drug query, or a ReportError with a user-facing message."""
    api_client = api_client or await get_medical_api_client()
    service = service or get_generative_service()
    pipeline = DrugReportPipeline(api_client, service)

    try:
        return await pipeline.run(request)
    except DrugReportError as e:
        logger.info(f"Drug report for '{request.drug_name}' ended with {type(e).__name__}")
        return ReportError(error=e.message)
    except Exception as e:
        logger.error(f"Unexpected error building report for '{request.drug_name}': {e}", exc_info=True)
        return ReportError(
            error=f'An unexpected error occurred while preparing the report for "{request.drug_name.strip()}". Please try again.'
        )
