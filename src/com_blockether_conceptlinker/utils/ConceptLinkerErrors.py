"""
Exception hierarchy for the concept linking pipeline.

Recoverable per-document problems (malformed extraction output, non-text linking
responses) never surface as exceptions outside their stage. Everything defined here
either stops a run before it starts or escapes to the run boundary, where the caller
maps it to a user-facing ErrorCategory.
"""

from enum import Enum
from typing import Optional


class ConceptLinkerError(Exception):
    """Base class for all errors raised by the concept linker."""


class ConfigurationError(ConceptLinkerError):
    """Raised when the pipeline cannot start because of missing or invalid configuration."""


class InvalidDocumentBatchError(ConceptLinkerError):
    """Raised when a submitted batch is empty, repeats a document name or uses a reserved name."""


class ModelTransportError(ConceptLinkerError):
    """Raised by generation calls when the model service cannot be reached or refuses the call."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class ConceptParseError(ConceptLinkerError):
    """Raised when a model response is not a well-formed JSON array of concepts."""


class DocumentStageError(ConceptLinkerError):
    """An unrecovered failure while processing a single document in a pipeline stage."""

    def __init__(self, document_name: str, stage: str, cause: BaseException):
        super().__init__(f"{stage} failed for '{document_name}': {cause}")
        self.document_name = document_name
        self.stage = stage
        self.cause = cause


class ArchivePackagingError(ConceptLinkerError):
    """Raised when output files cannot be packaged into a single archive."""


class ErrorCategory(str, Enum):
    """Stable, user-facing failure categories for the job status surface."""

    CONFIGURATION = "configuration"
    INVALID_INPUT = "invalid_input"
    MODEL_SERVICE = "model_service"
    INTERNAL = "internal"

    @property
    def user_message(self) -> str:
        return _USER_MESSAGES[self]

    @classmethod
    def from_exception(cls, error: BaseException) -> "ErrorCategory":
        """Classify an exception escaping a run."""
        if isinstance(error, ConfigurationError):
            return cls.CONFIGURATION
        if isinstance(error, (InvalidDocumentBatchError, UnicodeDecodeError)):
            return cls.INVALID_INPUT
        if isinstance(error, ModelTransportError):
            return cls.MODEL_SERVICE
        if isinstance(error, DocumentStageError):
            if isinstance(error.cause, ModelTransportError):
                return cls.MODEL_SERVICE
            return cls.INTERNAL
        return cls.INTERNAL


_USER_MESSAGES = {
    ErrorCategory.CONFIGURATION: "The service is not configured to process documents.",
    ErrorCategory.INVALID_INPUT: "The uploaded documents could not be processed.",
    ErrorCategory.MODEL_SERVICE: "The language model service is unavailable. Please try again later.",
    ErrorCategory.INTERNAL: "Processing failed due to an internal error.",
}
