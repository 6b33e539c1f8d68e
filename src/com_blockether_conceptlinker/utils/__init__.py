"""
Utility modules for the concept linker.
"""

from .BatchProcessor import DocumentBatchProcessor
from .ConceptLinkerErrors import (
    ArchivePackagingError,
    ConceptLinkerError,
    ConceptParseError,
    ConfigurationError,
    DocumentStageError,
    ErrorCategory,
    InvalidDocumentBatchError,
    ModelTransportError,
)
from .TypedCalls import GenerationResponse, TextGenerationCall

__all__ = [
    "DocumentBatchProcessor",
    "GenerationResponse",
    "TextGenerationCall",
    "ArchivePackagingError",
    "ConceptLinkerError",
    "ConceptParseError",
    "ConfigurationError",
    "DocumentStageError",
    "ErrorCategory",
    "InvalidDocumentBatchError",
    "ModelTransportError",
]
