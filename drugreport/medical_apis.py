"""Live lookups against the NAFDAC Greenbook registry and openFDA drug labels.

Both lookups are single best-effort attempts. Failures are logged and turned
into "no data" results here so callers never see transport exceptions.
"""

import re
import time
import httpx
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple
from drugreport.config import settings
from drugreport.models import RegistryRecord
import logging

logger = logging.getLogger(__name__)

# Columns of the Greenbook datatable, in the order the endpoint expects them
REGISTRY_COLUMNS = ["sn", "product_name", "registration_number", "holder", "active_ingredients"]
PRODUCT_NAME_COLUMN = 1
REGISTRATION_NUMBER_COLUMN = 2

MIN_PAGE_SIZE = 10
MAX_PAGE_SIZE = 50

OPENFDA_SEARCH_FIELDS = ("openfda.substance_name", "openfda.generic_name", "openfda.brand_name")
OPENFDA_MAX_LIMIT = 100
WARNINGS_PREFIX = "Potential warnings: "

# NAFDAC numbers look like "A4-1234", "04-5678" or "A11-100234"
_REGISTRATION_RE = re.compile(r"^[A-Za-z0-9]{1,4}-\d[A-Za-z0-9]*$")


def _text_value(value: Any) -> str:
    """Flatten a registry ingredient field into comma separated text."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, dict):
        return _text_value(value.get("ingredient_name") or value.get("name"))
    if isinstance(value, (list, tuple)):
        parts = [_text_value(item) for item in value]
        return ", ".join(part for part in parts if part)
    return str(value).strip()


def _composition_text(value: Any) -> str:
    """Free-text composition blocks sometimes carry a "Composition:" label."""
    text = _text_value(value)
    return re.sub(r"^\s*(?:composition|each\s+\w+\s+contains)\s*:?\s*", "", text, flags=re.IGNORECASE)


# Registry records come in several schema variants; probed in order
INGREDIENT_FIELD_PROBES: Sequence[Tuple[Tuple[str, ...], Callable[[Any], str]]] = (
    (("active_ingredients",), _text_value),
    (("ingredient", "ingredient_name"), _text_value),
    (("ingredient",), _text_value),
    (("composition",), _composition_text),
    (("ingredients",), _text_value),
)


def _string_list(value: Any) -> List[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [item for item in value if isinstance(item, str)]
    return []


def _resolve_path(record: Dict[str, Any], path: Iterable[str]) -> Any:
    value: Any = record
    for key in path:
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value


def extract_ingredient_text(record: Dict[str, Any]) -> str:
    """Return the first non-empty ingredient text found in a registry record."""
    for path, parser in INGREDIENT_FIELD_PROBES:
        value = _resolve_path(record, path)
        if value is None:
            continue
        text = parser(value)
        if text:
            return text
    return ""


def is_registration_number(query: str) -> bool:
    """Check whether a query looks like a NAFDAC registration number."""
    return bool(_REGISTRATION_RE.match(query.strip()))


class MedicalAPIClient:
    """Client for the drug registry and adverse-event sources."""

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None):
        self.http_client = http_client or httpx.AsyncClient(
            timeout=settings.HTTP_TIMEOUT_SECONDS,
            headers={"User-Agent": settings.HTTP_USER_AGENT},
        )

    async def close(self):
        """Close the HTTP client."""
        await self.http_client.aclose()

    def _build_registry_params(self, query: str, page_size: int) -> Dict[str, Any]:
        """Build the DataTables query string the Greenbook endpoint expects."""
        search_column = REGISTRATION_NUMBER_COLUMN if is_registration_number(query) else PRODUCT_NAME_COLUMN

        params: Dict[str, Any] = {"draw": 1}
        for index, column in enumerate(REGISTRY_COLUMNS):
            params[f"columns[{index}][data]"] = column
            params[f"columns[{index}][name]"] = ""
            params[f"columns[{index}][searchable]"] = "true"
            params[f"columns[{index}][orderable]"] = "false" if column == "sn" else "true"
            params[f"columns[{index}][search][value]"] = query if index == search_column else ""
            params[f"columns[{index}][search][regex]"] = "false"

        params.update({
            "order[0][column]": PRODUCT_NAME_COLUMN,
            "order[0][dir]": "asc",
            "start": 0,
            "length": max(MIN_PAGE_SIZE, min(MAX_PAGE_SIZE, page_size)),
            "search[value]": query,
            "search[regex]": "false",
            "_": int(time.time() * 1000),  # cache buster
        })
        return params

    def _matches_query(self, item: Dict[str, Any], query_lower: str) -> bool:
        for field in ("product_name", "registration_number", "nafdac_no"):
            value = item.get(field)
            if isinstance(value, str) and query_lower in value.lower():
                return True
        return False

    async def search_registry(self, query: str, page_size: Optional[int] = None) -> Optional[List[RegistryRecord]]:
        """Search the NAFDAC registry by product name or registration number.

        Returns matching records in the order the API returned them, or None
        when nothing matches or the request fails.
        """
        trimmed_query = (query or "").strip()
        if not trimmed_query:
            return None

        params = self._build_registry_params(trimmed_query, page_size or settings.NAFDAC_PAGE_SIZE)
        headers = {
            "Accept": "application/json, text/javascript, */*; q=0.01",
            "X-Requested-With": "XMLHttpRequest",
        }

        try:
            response = await self.http_client.get(settings.NAFDAC_API_URL, params=params, headers=headers)
            response.raise_for_status()
            data = response.json()
        except Exception as e:
            logger.error(f"NAFDAC API error for '{trimmed_query}': {e}")
            return None

        if not isinstance(data, dict):
            logger.error(f"NAFDAC API returned an unexpected payload for '{trimmed_query}'")
            return None

        items = [item for item in (data.get("data") or []) if isinstance(item, dict)]

        # Server-side filtering is loose, so confirm each candidate locally
        query_lower = trimmed_query.lower()
        records = []
        for item in items:
            if not self._matches_query(item, query_lower):
                continue
            records.append(RegistryRecord(
                product_name=_text_value(item.get("product_name")) or "Unknown Product",
                registration_number=_text_value(item.get("registration_number") or item.get("nafdac_no")) or "Unknown NAFDAC No",
                raw_ingredient_text=extract_ingredient_text(item),
            ))

        if not records:
            logger.info(f"No NAFDAC match for '{trimmed_query}' among {len(items)} candidates")
            return None

        logger.info(f"NAFDAC search returned {len(records)} matches for '{trimmed_query}'")
        return records

    def _build_adverse_event_query(self, ingredients: Sequence[str]) -> str:
        clauses = []
        for name in ingredients:
            term = name.replace('"', "").strip()
            if not term:
                continue
            clauses.extend(f'{field}:"{term}"' for field in OPENFDA_SEARCH_FIELDS)
        return " OR ".join(clauses)

    async def search_adverse_events(self, ingredients: Sequence[str]) -> List[str]:
        """Collect adverse reactions (or warnings) for a set of ingredients from openFDA.

        Always returns a list; an empty list means no known effects.
        """
        search = self._build_adverse_event_query(ingredients or [])
        if not search:
            return []

        limit = max(1, min(OPENFDA_MAX_LIMIT, len(ingredients) * settings.OPENFDA_RESULTS_PER_INGREDIENT))
        params: Dict[str, Any] = {"search": search, "limit": limit}
        if settings.OPENFDA_API_KEY:
            params["api_key"] = settings.OPENFDA_API_KEY

        try:
            response = await self.http_client.get(settings.OPENFDA_LABEL_URL, params=params)
            if response.status_code == 404:
                # openFDA answers 404 when the search matched nothing
                logger.info(f"OpenFDA has no label records for {list(ingredients)}")
                return []
            response.raise_for_status()
            data = response.json()
        except Exception as e:
            logger.error(f"OpenFDA API error for {list(ingredients)}: {e}")
            return []

        if not isinstance(data, dict):
            logger.error("OpenFDA API returned an unexpected payload")
            return []

        side_effects = []
        seen = set()
        for result in data.get("results") or []:
            if not isinstance(result, dict):
                continue
            for text in self._side_effect_texts(result):
                text = text.strip()
                if text and text not in seen:
                    seen.add(text)
                    side_effects.append(text)

        logger.info(f"OpenFDA search returned {len(side_effects)} side effect entries for {list(ingredients)}")
        return side_effects

    def _side_effect_texts(self, result: Dict[str, Any]) -> List[str]:
        """Adverse reactions when present, else prefixed warnings, else nothing."""
        reactions = [r for r in _string_list(result.get("adverse_reactions")) if r.strip()]
        if reactions:
            return reactions

        warnings = [w.strip() for w in _string_list(result.get("warnings")) if w.strip()]
        if warnings:
            return [WARNINGS_PREFIX + " ".join(warnings)]

        return []

# Global client instance
medical_api_client = MedicalAPIClient()

async def get_medical_api_client() -> MedicalAPIClient:
    """Get the global medical API client instance."""
    return medical_api_client

async def close_medical_api_client():
    """Close the global medical API client."""
    await medical_api_client.close()
