import re
import logging
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar
from openai import AsyncOpenAI
from pydantic import BaseModel, ValidationError

from drugreport.config import settings
from drugreport.models import ExtractedDrugName, ReportSummary, SideEffectBullet, SynthesisResult
from drugreport.prompts import CONDITIONS_SECTION, PROMPT_TEMPLATES, SAFETY_DISCLAIMER

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

# Inputs below this length without a full stop are already bullet sized
SHORT_SIDE_EFFECT_LENGTH = 20
MIN_SUMMARY_LENGTH = 50
UNKNOWN_COMPONENT = "Unknown component"

_DATA_URI_RE = re.compile(r"^data:image/[\w.+-]+;base64,[A-Za-z0-9+/=\s]+$")


class GenerativeService:
    """Runs named prompt templates against OpenAI and validates the JSON output."""

    def __init__(self, client: Optional[AsyncOpenAI] = None, model: Optional[str] = None):
        if client is None and settings.OPENAI_API_KEY:
            client = AsyncOpenAI(api_key=settings.OPENAI_API_KEY)
        self.client = client
        self.model = model or settings.OPENAI_MODEL

    @property
    def available(self) -> bool:
        return self.client is not None

    def _build_messages(self, template_name: str, variables: Dict[str, Any], image_url: Optional[str]) -> List[Dict]:
        template = PROMPT_TEMPLATES[template_name]
        user_text = template["user"].format(**variables)
        if image_url:
            user_content: Any = [
                {"type": "text", "text": user_text},
                {"type": "image_url", "image_url": {"url": image_url}},
            ]
        else:
            user_content = user_text
        return [
            {"role": "system", "content": template["system"]},
            {"role": "user", "content": user_content},
        ]

    async def run(
        self,
        template_name: str,
        variables: Dict[str, Any],
        output_model: Type[T],
        image_url: Optional[str] = None,
        model: Optional[str] = None,
    ) -> Optional[T]:
        """Run a template and return the validated output, or None on any failure."""
        if not self.client:
            logger.warning(f"No OpenAI client configured; skipping '{template_name}'")
            return None

        messages = self._build_messages(template_name, variables, image_url)

        try:
            response = await self.client.chat.completions.create(
                model=model or self.model,
                messages=messages,
                response_format={"type": "json_object"},
                temperature=settings.OPENAI_TEMPERATURE,
                max_tokens=settings.OPENAI_MAX_TOKENS,
            )
            content = response.choices[0].message.content
        except Exception as e:
            logger.error(f"OpenAI call for '{template_name}' failed: {e}")
            return None

        if not content:
            logger.warning(f"OpenAI returned no output for '{template_name}'")
            return None

        try:
            return output_model.model_validate_json(content)
        except ValidationError as e:
            logger.warning(f"Output of '{template_name}' does not match {output_model.__name__}: {e}")
            return None


async def condense_side_effect(text: str, service: Optional[GenerativeService] = None) -> str:
    """Restate a raw side effect description as one patient-facing bullet point.

    Never drops content: on any generation problem the input comes back unchanged.
    """
    if len(text) < SHORT_SIDE_EFFECT_LENGTH and "." not in text:
        return text

    service = service or get_generative_service()
    output = await service.run("process_side_effect", {"original_effect": text}, SideEffectBullet)

    if not output or not output.bullet_point.strip():
        return text
    return output.bullet_point.strip()


def build_fallback_summary(drug_name: str, components: Sequence[str], side_effects: Sequence[str]) -> str:
    """Deterministic summary used whenever generation is unavailable."""
    components_text = ", ".join(components) if components else "N/A"
    side_effects_text = ", ".join(side_effects) if side_effects else "N/A"
    return (
        f"Summary for {drug_name or 'N/A'}.\n\n"
        f"Active ingredients: {components_text}.\n\n"
        f"Reported side effects: {side_effects_text}.\n\n"
        f"An AI-generated summary is not available right now, so only the retrieved data is shown.\n\n"
        f"{SAFETY_DISCLAIMER}"
    )


def _ensure_disclaimer(summary: str) -> str:
    if "consult" in summary.lower():
        return summary
    return f"{summary.rstrip()}\n\n{SAFETY_DISCLAIMER}"


async def synthesize_report(
    drug_name: str,
    components: Sequence[str],
    side_effects: Sequence[str],
    user_conditions: Optional[str] = None,
    service: Optional[GenerativeService] = None,
) -> SynthesisResult:
    """Compose the narrative summary, falling back to a templated one.

    Generated summaries shorter than MIN_SUMMARY_LENGTH are treated as failures.
    """
    components = list(components) or [UNKNOWN_COMPONENT]
    conditions = (user_conditions or "").strip()

    variables = {
        "drug_name": drug_name,
        "components": ", ".join(components),
        "side_effects": ", ".join(side_effects) if side_effects else "None reported",
        "conditions_section": CONDITIONS_SECTION.format(user_conditions=conditions) if conditions else "",
    }

    service = service or get_generative_service()
    output = await service.run("summarize_report", variables, ReportSummary)

    summary = output.summary.strip() if output else ""
    if len(summary) < MIN_SUMMARY_LENGTH:
        if output:
            logger.warning(f"Discarding too-short summary for '{drug_name}' ({len(summary)} chars)")
        return SynthesisResult(
            summary=build_fallback_summary(drug_name, components, side_effects),
            generated=False,
        )

    return SynthesisResult(summary=_ensure_disclaimer(summary), generated=True)


async def extract_drug_name_from_image(photo_data_uri: str, service: Optional[GenerativeService] = None) -> str:
    """Best-guess drug name from a packaging photo given as a base64 data URI."""
    if not photo_data_uri or not _DATA_URI_RE.match(photo_data_uri):
        logger.warning("Rejected image that is not a base64 image data URI")
        return ""

    service = service or get_generative_service()
    output = await service.run(
        "extract_drug_info", {}, ExtractedDrugName,
        image_url=photo_data_uri, model=settings.OPENAI_VISION_MODEL,
    )
    if not output:
        return ""
    return output.drug_name.strip()

# Global service instance
generative_service = GenerativeService()

def get_generative_service() -> GenerativeService:
    """Get the global generative service instance."""
    return generative_service
