"""Administrator-curated category overrides per source.

Overrides map an external category string, exactly as a source publishes
it, to an internal category id. They take precedence over every heuristic.
"""
from typing import Dict, Iterable, Optional, Tuple
from uuid import UUID

import structlog

from listing_categorizer.models.category import is_valid_category

logger = structlog.get_logger(__name__)


def normalize_external_category(value: Optional[str]) -> str:
    """Lookup key for an external category: trimmed and lower-cased."""
    return (value or "").strip().lower()


class MappingOverrideResolver:
    """Read-only lookup of (source, external category) → internal category.

    Example:
        resolver = MappingOverrideResolver.from_rows([
            (source_id, "Klaviatur", "keys-pianos"),
        ])
        resolver.resolve(source_id, "KLAVIATUR")
        # "keys-pianos"
    """

    def __init__(self, mappings: Optional[Dict[Tuple[UUID, str], str]] = None):
        self._mappings: Dict[Tuple[UUID, str], str] = dict(mappings or {})

    @classmethod
    def from_rows(
        cls,
        rows: Iterable[Tuple[UUID, str, str]],
    ) -> "MappingOverrideResolver":
        """Build a resolver from (source_id, external_category, internal_category) rows.

        Rows whose internal category is not part of the taxonomy are skipped.
        """
        mappings: Dict[Tuple[UUID, str], str] = {}
        for source_id, external, internal in rows:
            key = normalize_external_category(external)
            if not key:
                continue
            if not is_valid_category(internal):
                logger.warning(
                    "override_invalid_category_skipped",
                    source_id=str(source_id),
                    external_category=external,
                    internal_category=internal,
                )
                continue
            mappings[(source_id, key)] = internal
        return cls(mappings)

    def resolve(self, source_id: Optional[UUID], external_category: Optional[str]) -> Optional[str]:
        """Return the override for this source and external category, if any."""
        key = normalize_external_category(external_category)
        if source_id is None or not key:
            return None
        return self._mappings.get((source_id, key))

    def __len__(self) -> int:
        return len(self._mappings)
