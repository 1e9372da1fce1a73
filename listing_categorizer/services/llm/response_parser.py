"""Parsing of free-form AI replies into a ClassificationResult.

Models wrap JSON in code fences, add prose around it, or answer with a
label or a loose synonym instead of a category id. Parsing is tolerant of
all of that but never guesses across categories: anything it cannot pin
to a taxonomy id is reported as a failure.
"""
import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

from rapidfuzz import fuzz, process

from listing_categorizer.models.category import CATEGORIES, CATEGORY_IDS
from listing_categorizer.models.classification import (
    ClassificationMethod,
    ClassificationResult,
    Confidence,
)

_FENCED_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
_OBJECT_RE = re.compile(r"\{[\s\S]*\}")

# Ids cannot be shorter than this when matched as a substring of an id
MIN_CONTAINED_LENGTH = 4
FUZZY_SCORE_CUTOFF = 85.0

LABEL_TO_ID: Dict[str, str] = {c.label.lower(): c.id for c in CATEGORIES}

CATEGORY_SYNONYMS: Dict[str, str] = {
    "instrument": "guitars-bass",
    "instruments": "guitars-bass",
    "gitarr": "guitars-bass",
    "guitars": "guitars-bass",
    "bas": "guitars-bass",
    "bass": "guitars-bass",
    "trummor": "drums-percussion",
    "drums": "drums-percussion",
    "percussion": "drums-percussion",
    "piano": "keys-pianos",
    "keyboard": "keys-pianos",
    "keyboards": "keys-pianos",
    "blås": "wind-brass",
    "stränginstrument": "strings-other",
    "förstärkare": "amplifiers",
    "amplifier": "amplifiers",
    "amp": "amplifiers",
    "amps": "amplifiers",
    "pedaler": "pedals-effects",
    "pedals": "pedals-effects",
    "effekter": "pedals-effects",
    "effects": "pedals-effects",
    "pedal": "pedals-effects",
    "synth": "synth-modular",
    "synthesizer": "synth-modular",
    "modulärt": "synth-modular",
    "modular": "synth-modular",
    "studio": "studio",
    "recording": "studio",
    "mikrofon": "studio",
    "dj": "dj-live",
    "live": "dj-live",
    "pa": "dj-live",
    "tillbehör": "accessories-parts",
    "accessories": "accessories-parts",
    "delar": "accessories-parts",
    "parts": "accessories-parts",
    "mjukvara": "software-computers",
    "software": "software-computers",
    "datorer": "software-computers",
    "computers": "software-computers",
    "tjänster": "services",
    "services": "services",
    "övrigt": "other",
    "other": "other",
}

CONFIDENCE_ALIASES: Dict[str, Confidence] = {
    "high": Confidence.HIGH,
    "medium": Confidence.MEDIUM,
    "low": Confidence.LOW,
    "hög": Confidence.HIGH,
    "medel": Confidence.MEDIUM,
    "låg": Confidence.LOW,
}

_FUZZY_CHOICES: Dict[str, str] = {**{cid: cid for cid in CATEGORY_IDS}, **LABEL_TO_ID}


@dataclass(frozen=True)
class ParseOutcome:
    """Either a parsed result or the reason parsing failed."""
    result: Optional[ClassificationResult] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.result is not None


def extract_json_text(content: str) -> Optional[str]:
    """Return the fenced block, else the outermost {...} span, else None."""
    fenced = _FENCED_RE.search(content)
    if fenced:
        return fenced.group(1).strip()
    braces = _OBJECT_RE.search(content)
    if braces:
        return braces.group(0).strip()
    return None


def resolve_category(raw: Optional[str]) -> Optional[str]:
    """Map a model-provided category string onto a taxonomy id.

    Order: exact id, label, synonym, containment against ids, fuzzy match
    on ids and labels. Returns None when nothing is close enough.
    """
    value = (raw or "").strip().lower()
    if not value:
        return None

    if value in CATEGORY_IDS:
        return value
    if value in LABEL_TO_ID:
        return LABEL_TO_ID[value]
    if value in CATEGORY_SYNONYMS:
        return CATEGORY_SYNONYMS[value]

    for category_id in CATEGORY_IDS:
        if category_id in value:
            return category_id
        if len(value) >= MIN_CONTAINED_LENGTH and value in category_id:
            return category_id

    match = process.extractOne(
        value,
        list(_FUZZY_CHOICES.keys()),
        scorer=fuzz.ratio,
        score_cutoff=FUZZY_SCORE_CUTOFF,
    )
    if match:
        return _FUZZY_CHOICES[match[0]]
    return None


def normalize_confidence(raw: Any) -> Confidence:
    """Missing confidence reads as medium, unrecognized values as low."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return Confidence.MEDIUM
    return CONFIDENCE_ALIASES.get(str(raw).strip().lower(), Confidence.LOW)


def parse_classification_response(content: Optional[str]) -> ParseOutcome:
    """Parse an AI reply into a ClassificationResult.

    Args:
        content: Raw message content returned by the model

    Returns:
        ParseOutcome with either `result` or `error` set
    """
    if not content or not content.strip():
        return ParseOutcome(error="empty response")

    json_text = extract_json_text(content)
    if json_text is None:
        return ParseOutcome(error="no JSON object in response")

    try:
        data = json.loads(json_text)
    except json.JSONDecodeError as e:
        return ParseOutcome(error=f"invalid JSON: {e.msg}")

    if not isinstance(data, dict):
        return ParseOutcome(error="JSON is not an object")

    raw_category = data.get("category")
    category = resolve_category(raw_category if isinstance(raw_category, str) else None)
    if category is None:
        return ParseOutcome(error=f"unresolvable category: {raw_category!r}")

    reasoning = data.get("reasoning")
    return ParseOutcome(
        result=ClassificationResult(
            category=category,
            confidence=normalize_confidence(data.get("confidence")),
            method=ClassificationMethod.AI,
            reasoning=str(reasoning) if reasoning else None,
        )
    )
