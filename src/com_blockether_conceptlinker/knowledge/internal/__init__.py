from .ConceptDeduplicator import ConceptDeduplicator
from .ConceptExtractor import ConceptExtractor
from .ConceptIndexGenerator import ConceptIndexGenerator
from .ConceptLinkerTypes import (
    INDEX_FILENAME,
    MANIFEST_FILENAME,
    RESERVED_FILENAMES,
    ConceptLinkerSettings,
    ConceptRecord,
    Document,
    DocumentExtraction,
    DocumentLinking,
    DocumentStatus,
    ProcessedOutput,
    ProcessingMetadata,
    StageOutcome,
)
from .CrossLinker import CrossLinker
from .DocumentLoader import DocumentLoader

__all__ = [
    "INDEX_FILENAME",
    "MANIFEST_FILENAME",
    "RESERVED_FILENAMES",
    "ConceptDeduplicator",
    "ConceptExtractor",
    "ConceptIndexGenerator",
    "ConceptLinkerSettings",
    "ConceptRecord",
    "CrossLinker",
    "Document",
    "DocumentExtraction",
    "DocumentLinking",
    "DocumentLoader",
    "DocumentStatus",
    "ProcessedOutput",
    "ProcessingMetadata",
    "StageOutcome",
]
