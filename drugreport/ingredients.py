"""Active ingredient normalization for registry records.

Registry ingredient text is free text typed by applicants, e.g.::

    "Amlodipine (as Besylate) 5mg\\r<br />Paracetamol 500mg BP"

``normalize_ingredients`` turns it into ``["Amlodipine", "Paracetamol"]``.
Everything here is best-effort text heuristics; no external calls are made.
"""

import re
from typing import List, Optional

# Line breaks, including the "<br />" markup the registry embeds
_BREAK_RE = re.compile(r"\r?<br\s*/?>|\r\n|\r|\n", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]*>")
_SPLIT_RE = re.compile(r"[,;]+")
# Thousands separators inside doses, e.g. "1,000mg"
_THOUSANDS_RE = re.compile(r"(?<=\d),(?=\d{3}(?!\d))")

_UNIT = r"(?:mcg|µg|ug|mg|g|kg|ml|l|iu|i\.u\.|units?|%)"
_DOSAGE_RE = re.compile(
    r"\b\d+(?:\.\d+)?\s*" + _UNIT
    + r"(?:\s*/\s*(?:\d+(?:\.\d+)?\s*)?(?:mcg|mg|g|ml|l|tab(?:let)?|cap(?:sule)?|dose|vial|sachet))?"
    + r"(?:\s*[wv]/[wv])?(?![A-Za-z])",
    re.IGNORECASE,
)
_PHARMACOPOEIA_RE = re.compile(r"\b(?:B\.?P|U\.?S\.?P|E\.?P|J\.?P|Ph\.?\s?Eur)\b\.?", re.IGNORECASE)
_AS_PAREN_RE = re.compile(r"\(\s*as\b[^)]*\)?", re.IGNORECASE)
_AS_BARE_RE = re.compile(r"(?<=\S)\s+as\s+\S.*$", re.IGNORECASE)
_EMPTY_PARENS_RE = re.compile(r"\(\s*\)|\[\s*\]")

SALT_FORMS = (
    "HCL", "HYDROCHLORIDE", "HYDROBROMIDE", "SODIUM", "DISODIUM", "POTASSIUM",
    "MALEATE", "BESYLATE", "BESILATE", "MESYLATE", "MESILATE", "SULPHATE",
    "SULFATE", "PHOSPHATE", "CITRATE", "TARTRATE", "SUCCINATE", "FUMARATE",
    "ACETATE", "BROMIDE", "MONOHYDRATE", "DIHYDRATE", "TRIHYDRATE", "ANHYDROUS",
)
_SALT_RE = re.compile(r"(?<=\S)\s+(?:" + "|".join(SALT_FORMS) + r")\.?$", re.IGNORECASE)
_TRAILING_CONJ_RE = re.compile(r"(?<=\S)\s+(?:and|or|&)$", re.IGNORECASE)
_LEADING_CONJ_RE = re.compile(r"^(?:and|or|&)\s+(?=\S)", re.IGNORECASE)
_EDGE_CHARS = " \t-–.:/+*"

MIN_INGREDIENT_LENGTH = 2


def _clean_once(segment: str) -> str:
    text = _AS_PAREN_RE.sub(" ", segment)
    text = _DOSAGE_RE.sub(" ", text)
    text = _PHARMACOPOEIA_RE.sub(" ", text)
    text = _EMPTY_PARENS_RE.sub(" ", text)
    text = " ".join(text.split()).strip(_EDGE_CHARS)
    text = _AS_BARE_RE.sub("", text)

    while True:
        stripped = _SALT_RE.sub("", text)
        stripped = _TRAILING_CONJ_RE.sub("", stripped)
        stripped = _LEADING_CONJ_RE.sub("", stripped).strip(_EDGE_CHARS)
        if stripped == text:
            return text
        text = stripped


def clean_ingredient(segment: str) -> str:
    """Strip dosage, pharmacopoeia, salt and "(as X)" noise from one ingredient."""
    text = segment or ""
    # Repeat until stable so the result is a fixed point
    for _ in range(5):
        cleaned = _clean_once(text)
        if cleaned == text:
            break
        text = cleaned
    return text


def split_ingredient_text(raw: str) -> List[str]:
    """Split a raw registry string into trimmed, non-empty segments."""
    text = _THOUSANDS_RE.sub("", raw)
    text = _BREAK_RE.sub(",", text)
    text = _TAG_RE.sub("", text)
    return [part.strip() for part in _SPLIT_RE.split(text) if part.strip()]


def normalize_ingredients(raw: Optional[str]) -> List[str]:
    """Return distinct ingredient names from raw registry text.

    Deduplication is case-insensitive and keeps the first-seen casing and
    order. ``None`` or empty input yields an empty list.
    """
    if not raw:
        return []

    seen = set()
    ingredients = []
    for segment in split_ingredient_text(raw):
        name = clean_ingredient(segment)
        if len(name) < MIN_INGREDIENT_LENGTH:
            continue
        key = name.lower()
        if key in seen:
            continue
        seen.add(key)
        ingredients.append(name)

    return ingredients
