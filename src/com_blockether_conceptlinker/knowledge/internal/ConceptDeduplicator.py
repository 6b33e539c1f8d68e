"""
Concept deduplication by normalized name.
"""

import logging
from typing import Dict, List, Sequence

from .ConceptLinkerTypes import ConceptRecord

logger = logging.getLogger(__name__)


class ConceptDeduplicator:
    """Merges concept records that refer to the same concept."""

    @staticmethod
    def normalize(name: str) -> str:
        """
        Normalize a concept name for identity comparison.

        Args:
            name: Concept name as emitted by the model

        Returns:
            Lower-cased name without leading/trailing whitespace
        """
        return name.strip().lower()

    @staticmethod
    def deduplicate(concepts: Sequence[ConceptRecord]) -> List[ConceptRecord]:
        """
        Merge records sharing a normalized name.

        The first record seen for a name provides the canonical spelling. Later
        records add their source files (set union, first-seen order) and replace
        the description only when theirs is strictly longer. Input records are
        never mutated.

        Args:
            concepts: Records in extraction order

        Returns:
            One record per distinct normalized name, in first-seen order
        """
        concept_map: Dict[str, ConceptRecord] = {}

        for concept in concepts:
            key = ConceptDeduplicator.normalize(concept.name)
            existing = concept_map.get(key)

            if existing is None:
                concept_map[key] = concept.model_copy(deep=True)
                continue

            # Merge source files
            existing.source_files = list(dict.fromkeys([*existing.source_files, *concept.source_files]))
            # Keep the longer description
            if len(concept.description) > len(existing.description):
                existing.description = concept.description

        logger.info(f"Deduplicated {len(concepts)} concept records into {len(concept_map)} concepts")
        return list(concept_map.values())
