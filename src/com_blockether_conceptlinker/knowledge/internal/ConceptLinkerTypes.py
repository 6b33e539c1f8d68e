"""
Data types for the concept extraction, deduplication and cross-linking pipeline.
"""

import os
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from com_blockether_conceptlinker.utils.ConceptLinkerErrors import ConfigurationError

INDEX_FILENAME = "00-INDEX.md"
MANIFEST_FILENAME = "concept-graph.json"

# Names the pipeline and the archive write themselves
RESERVED_FILENAMES = frozenset({INDEX_FILENAME, MANIFEST_FILENAME})


class Document(BaseModel):
    """A named text document. Immutable; stages derive new documents instead of mutating."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Identifier, unique within a batch")
    content: str = Field(description="Full document text")


class ConceptRecord(BaseModel):
    """A named concept together with the documents that mention it."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(description="Short concept title, taken verbatim from the model")
    description: str = Field(description="Free-text description")
    source_files: List[str] = Field(
        default_factory=list,
        alias="sourceFiles",
        description="Names of documents mentioning the concept, first-seen order, no duplicates",
    )

    @field_validator("source_files")
    @classmethod
    def _unique_source_files(cls, value: List[str]) -> List[str]:
        return list(dict.fromkeys(value))


class StageOutcome(str, Enum):
    """How a pipeline stage ended for one document."""

    OK = "ok"
    RECOVERED = "recovered"  # degraded but valid result (unparseable concepts, non-text link response)
    FAILED = "failed"  # transport failure isolated to this document
    SKIPPED = "skipped"


class DocumentStatus(BaseModel):
    """Per-document outcome of a run."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(description="Document name")
    extraction: StageOutcome = Field(default=StageOutcome.SKIPPED, description="Extraction outcome")
    concept_count: int = Field(default=0, alias="conceptCount", description="Concepts extracted from this document")
    linking: StageOutcome = Field(default=StageOutcome.SKIPPED, description="Cross-linking outcome")
    errors: List[str] = Field(default_factory=list, description="Human-readable notes about degraded stages")

    @property
    def succeeded(self) -> bool:
        return self.extraction == StageOutcome.OK and self.linking == StageOutcome.OK


class DocumentExtraction(BaseModel):
    """Extraction result for a single document."""

    document_name: str
    concepts: List[ConceptRecord] = Field(default_factory=list)
    outcome: StageOutcome = StageOutcome.OK
    error: Optional[str] = None


class DocumentLinking(BaseModel):
    """Cross-linking result for a single document."""

    document: Document
    outcome: StageOutcome = StageOutcome.OK
    error: Optional[str] = None


class ProcessingMetadata(BaseModel):
    """Run statistics surfaced to status reporting."""

    model_config = ConfigDict(populate_by_name=True)

    total_concepts: int = Field(alias="totalConcepts", description="Number of deduplicated concepts")
    total_links: int = Field(
        alias="totalLinks",
        description="[[wikilink]] occurrences across relinked documents, index excluded",
    )
    index_links: int = Field(default=0, alias="indexLinks", description="[[wikilink]] occurrences in the index")
    processing_time_ms: int = Field(alias="processingTimeMs", description="Wall-clock duration of the run")


class ProcessedOutput(BaseModel):
    """Final bundle of a run: relinked documents plus index, concepts and metadata."""

    model_config = ConfigDict(populate_by_name=True)

    files: List[Document] = Field(description="Relinked documents in input order, index document last")
    concepts: List[ConceptRecord] = Field(description="Deduplicated concepts in first-seen order")
    metadata: ProcessingMetadata
    document_statuses: List[DocumentStatus] = Field(
        default_factory=list,
        alias="documentStatuses",
        description="Per-document outcome, in input order",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def partial(self) -> bool:
        """Whether any document degraded to a fallback result."""
        return any(not status.succeeded for status in self.document_statuses)

    @property
    def index_file(self) -> Document:
        return self.files[-1]

    @property
    def linked_files(self) -> List[Document]:
        return self.files[:-1]


class ConceptLinkerSettings(BaseModel):
    """Settings for model access, budgets and resilience of a run."""

    model: str = Field(default="gpt-4o", description="Model identifier")
    api_base_url: Optional[str] = Field(
        default=None,
        description="OpenAI-compatible endpoint (None for the SDK default)",
    )
    api_key: Optional[str] = Field(default=None, description="Model service credential", repr=False)
    temperature: float = Field(default=0.7, description="Sampling temperature")

    extraction_max_tokens: int = Field(default=4000, description="Output budget for concept extraction")
    linking_max_tokens: int = Field(
        default=8000,
        description="Output budget for cross-linking (documents plus inserted markup)",
    )

    max_concurrent_calls: int = Field(default=5, ge=1, description="Model calls in flight per stage")
    max_attempts: int = Field(default=1, ge=1, description="Attempts per document call, first one included")
    retry_min_wait: int = Field(default=1000, ge=0, description="Minimum backoff between attempts (ms)")
    retry_max_wait: int = Field(default=10000, ge=0, description="Maximum backoff between attempts (ms)")
    call_timeout_seconds: Optional[float] = Field(default=None, gt=0, description="Timeout per model call")
    run_timeout_seconds: Optional[float] = Field(default=None, gt=0, description="Deadline for a whole run")
    isolate_transport_failures: bool = Field(
        default=False,
        description="Degrade a document on transport failure instead of aborting the run",
    )

    def require_api_key(self) -> str:
        """
        Return the API key or fail before any document is processed.

        Raises:
            ConfigurationError: If no API key is configured
        """
        if not self.api_key:
            raise ConfigurationError("CONCEPTLINKER_API_KEY not configured")
        return self.api_key

    @classmethod
    def from_environment(cls) -> "ConceptLinkerSettings":
        """Build settings from CONCEPTLINKER_* environment variables."""

        def optional_float(name: str) -> Optional[float]:
            value = os.environ.get(name)
            return float(value) if value else None

        try:
            return cls(
                model=os.environ.get("CONCEPTLINKER_MODEL", "gpt-4o"),
                api_base_url=os.environ.get("CONCEPTLINKER_API_BASE_URL") or None,
                api_key=os.environ.get("CONCEPTLINKER_API_KEY") or os.environ.get("OPENAI_API_KEY"),
                max_concurrent_calls=int(os.environ.get("CONCEPTLINKER_MAX_CONCURRENT_CALLS", "5")),
                max_attempts=int(os.environ.get("CONCEPTLINKER_MAX_ATTEMPTS", "1")),
                call_timeout_seconds=optional_float("CONCEPTLINKER_CALL_TIMEOUT_SECONDS"),
                run_timeout_seconds=optional_float("CONCEPTLINKER_RUN_TIMEOUT_SECONDS"),
                isolate_transport_failures=os.environ.get("CONCEPTLINKER_ISOLATE_FAILURES", "").lower()
                in {"1", "true", "yes", "on"},
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid concept linker environment configuration: {e}") from e
