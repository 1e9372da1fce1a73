"""Deterministic listing classification: keywords and source overrides."""
from listing_categorizer.services.classification.classifier import (
    KeywordClassifier,
    KeywordMatch,
    decode_html_entities,
)
from listing_categorizer.services.classification.keywords import (
    DEFAULT_KEYWORD_TABLE,
    KeywordTable,
)
from listing_categorizer.services.classification.normalizer import CategoryNormalizer
from listing_categorizer.services.classification.overrides import MappingOverrideResolver

__all__ = [
    "KeywordClassifier",
    "KeywordMatch",
    "decode_html_entities",
    "DEFAULT_KEYWORD_TABLE",
    "KeywordTable",
    "CategoryNormalizer",
    "MappingOverrideResolver",
]
