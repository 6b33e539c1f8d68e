"""
Concept extraction, deduplication and cross-linking for note collections.

This module turns a batch of text documents into an interlinked knowledge base:
- ConceptLinkerCore: the pipeline (extract -> deduplicate -> link -> index)
- generate_concept_graph: single entry point used by request-handling layers
- Types: Document, ConceptRecord, ProcessedOutput and friends

Example:

    from com_blockether_conceptlinker.knowledge import Document, generate_concept_graph

    output = await generate_concept_graph(
        "research-library",
        [Document(name="a.md", content="Neural networks use backpropagation.")],
    )
"""

from .ConceptLinkerCore import ConceptLinkerCore, generate_concept_graph
from .internal.ConceptLinkerTypes import (
    INDEX_FILENAME,
    MANIFEST_FILENAME,
    RESERVED_FILENAMES,
    ConceptLinkerSettings,
    ConceptRecord,
    Document,
    DocumentStatus,
    ProcessedOutput,
    ProcessingMetadata,
    StageOutcome,
)
from .internal.DocumentLoader import DocumentLoader

__all__ = [
    "INDEX_FILENAME",
    "MANIFEST_FILENAME",
    "RESERVED_FILENAMES",
    "ConceptLinkerCore",
    "ConceptLinkerSettings",
    "ConceptRecord",
    "Document",
    "DocumentLoader",
    "DocumentStatus",
    "ProcessedOutput",
    "ProcessingMetadata",
    "StageOutcome",
    "generate_concept_graph",
]
