"""
Index document generation: a single markdown page listing every concept.
"""

from typing import Dict, List, Sequence

from .ConceptLinkerTypes import INDEX_FILENAME, ConceptRecord, Document


class ConceptIndexGenerator:
    """Renders the concept index document. Pure and deterministic."""

    INDEX_FILENAME = INDEX_FILENAME

    @staticmethod
    def count_concepts_per_source(concepts: Sequence[ConceptRecord]) -> Dict[str, int]:
        """Number of concepts attributed to each source document, in first-seen order."""
        counts: Dict[str, int] = {}
        for concept in concepts:
            for source_file in concept.source_files:
                counts[source_file] = counts.get(source_file, 0) + 1
        return counts

    @staticmethod
    def generate(concepts: Sequence[ConceptRecord]) -> Document:
        """
        Render the index for a deduplicated concept list.

        Args:
            concepts: Deduplicated concepts

        Returns:
            Document named INDEX_FILENAME with a section per concept
            (sorted by name, case-sensitive) and a per-source summary
        """
        lines: List[str] = [
            "# Concept Index",
            "",
            f"This knowledge graph contains {len(concepts)} interconnected concepts.",
            "",
            "## All Concepts",
            "",
        ]

        for concept in sorted(concepts, key=lambda c: c.name):
            lines.extend(
                [
                    f"### [[{concept.name}]]",
                    "",
                    concept.description,
                    "",
                    f"*Found in: {', '.join(concept.source_files)}*",
                    "",
                    "---",
                    "",
                ]
            )

        lines.extend(["", "## Source Files", ""])
        for source_file, count in ConceptIndexGenerator.count_concepts_per_source(concepts).items():
            lines.append(f"- **{source_file}**: {count} concepts")

        return Document(name=INDEX_FILENAME, content="\n".join(lines) + "\n")
