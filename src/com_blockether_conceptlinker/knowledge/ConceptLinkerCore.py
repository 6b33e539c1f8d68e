"""
Concept linking pipeline: extraction -> deduplication -> cross-linking -> index.
"""

import logging
import re
import time
from functools import wraps
from typing import Any, Callable, List, Optional, Sequence, TypeVar, cast

import anyio

from com_blockether_conceptlinker.profiles import UseCaseProfile, UseCaseProfileRegistry
from com_blockether_conceptlinker.utils.BatchProcessor import DocumentBatchProcessor
from com_blockether_conceptlinker.utils.ConceptLinkerErrors import InvalidDocumentBatchError
from com_blockether_conceptlinker.utils.openai import OpenAITextGenerationCall
from com_blockether_conceptlinker.utils.TypedCalls import TextGenerationCall

from .internal.ConceptDeduplicator import ConceptDeduplicator
from .internal.ConceptExtractor import ConceptExtractor
from .internal.ConceptIndexGenerator import ConceptIndexGenerator
from .internal.ConceptLinkerTypes import (
    RESERVED_FILENAMES,
    ConceptLinkerSettings,
    ConceptRecord,
    Document,
    DocumentExtraction,
    DocumentLinking,
    DocumentStatus,
    ProcessedOutput,
    ProcessingMetadata,
)
from .internal.CrossLinker import CrossLinker

logger = logging.getLogger(__name__)

T = TypeVar("T")

WIKILINK_PATTERN = re.compile(r"\[\[([^\]]+)\]\]")


def async_timed_operation(
    step_name: str,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator to time async operations and log their duration.

    Args:
        step_name: Name of the operation for logging

    Returns:
        Decorated async function that logs execution time
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            start_time = time.time()
            logger.info(f"{step_name}: Starting...")
            result = await func(*args, **kwargs)  # type: ignore
            elapsed = time.time() - start_time
            logger.info(f"{step_name}: Completed in {elapsed:.2f}s")
            return cast(T, result)

        return wrapper  # type: ignore

    return decorator


class ConceptLinkerCore:
    """Turns a batch of documents into interlinked documents plus a concept index."""

    def __init__(
        self,
        generation_call: TextGenerationCall,
        profile: UseCaseProfile,
        settings: Optional[ConceptLinkerSettings] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            generation_call: Model capability shared by extraction and linking
            profile: Use-case profile chosen for this run
            settings: Budgets, concurrency and resilience settings
        """
        self._settings = settings or ConceptLinkerSettings()
        self._profile = profile

        self._extractor = ConceptExtractor(
            generation_call,
            profile,
            batch_processor=self._create_batch_processor(),
            max_output_tokens=self._settings.extraction_max_tokens,
            isolate_transport_failures=self._settings.isolate_transport_failures,
        )
        self._cross_linker = CrossLinker(
            generation_call,
            profile,
            batch_processor=self._create_batch_processor(),
            max_output_tokens=self._settings.linking_max_tokens,
            isolate_transport_failures=self._settings.isolate_transport_failures,
        )

        logger.debug(f"ConceptLinkerCore initialized for use case '{profile.use_case.value}'")

    def _create_batch_processor(self) -> DocumentBatchProcessor[Document, Any]:
        return DocumentBatchProcessor(
            max_concurrent=self._settings.max_concurrent_calls,
            max_attempts=self._settings.max_attempts,
            retry_min_wait=self._settings.retry_min_wait,
            retry_max_wait=self._settings.retry_max_wait,
            call_timeout=self._settings.call_timeout_seconds,
        )

    @property
    def profile(self) -> UseCaseProfile:
        return self._profile

    @staticmethod
    def count_wikilinks(documents: Sequence[Document]) -> int:
        """
        Count [[wikilink]] occurrences across documents.

        Args:
            documents: Documents to scan

        Returns:
            Total number of references
        """
        return sum(len(WIKILINK_PATTERN.findall(document.content)) for document in documents)

    @staticmethod
    def _validate_batch(documents: Sequence[Document]) -> None:
        if not documents:
            raise InvalidDocumentBatchError("No documents provided")

        seen: set[str] = set()
        for document in documents:
            if document.name in RESERVED_FILENAMES:
                raise InvalidDocumentBatchError(f"Document name is reserved for pipeline output: {document.name}")
            if document.name in seen:
                raise InvalidDocumentBatchError(f"Duplicate document name in batch: {document.name}")
            seen.add(document.name)

    @staticmethod
    def _build_statuses(
        extractions: Sequence[DocumentExtraction],
        linkings: Sequence[DocumentLinking],
    ) -> List[DocumentStatus]:
        statuses = []
        for extraction, linking in zip(extractions, linkings):
            errors = [error for error in (extraction.error, linking.error) if error]
            statuses.append(
                DocumentStatus(
                    name=extraction.document_name,
                    extraction=extraction.outcome,
                    concept_count=len(extraction.concepts),
                    linking=linking.outcome,
                    errors=errors,
                )
            )
        return statuses

    @async_timed_operation("Concept linking pipeline")
    async def process(self, documents: Sequence[Document]) -> ProcessedOutput:
        """
        Run the full pipeline once over a batch.

        Per-document parse failures and non-text responses degrade locally. A
        transport failure aborts the run with DocumentStageError unless
        isolate_transport_failures is set.

        Args:
            documents: Input documents, names unique within the batch

        Returns:
            ProcessedOutput with relinked documents followed by the index document

        Raises:
            InvalidDocumentBatchError: If the batch is empty or has duplicate names
            DocumentStageError: If a document's model call fails unrecoverably
        """
        self._validate_batch(documents)
        start_time = time.monotonic()
        deadline = (
            anyio.current_time() + self._settings.run_timeout_seconds
            if self._settings.run_timeout_seconds is not None
            else None
        )

        logger.info(f"🚀 Starting knowledge graph generation for {len(documents)} files")

        # Step 1: Extract concepts from all files
        logger.info("📊 Step 1/4: Extracting concepts...")
        extractions = await self._extractor.extract_documents(documents, deadline=deadline)
        all_concepts: List[ConceptRecord] = [c for extraction in extractions for c in extraction.concepts]
        logger.info(f"Found {len(all_concepts)} concept records across {len(documents)} files")

        # Step 2: Deduplicate concepts, needs every document's concepts
        logger.info("🔗 Step 2/4: Deduplicating concepts...")
        unique_concepts = ConceptDeduplicator.deduplicate(all_concepts)

        # Step 3: Add wikilinks to each file
        logger.info("✍️  Step 3/4: Adding wikilinks...")
        concept_names = [concept.name for concept in unique_concepts]
        linkings = await self._cross_linker.link_documents(documents, concept_names, deadline=deadline)
        linked_files = [linking.document for linking in linkings]

        # Step 4: Generate concept index file
        logger.info("📚 Step 4/4: Generating concept index...")
        index_file = ConceptIndexGenerator.generate(unique_concepts)

        total_links = self.count_wikilinks(linked_files)
        processing_time_ms = int((time.monotonic() - start_time) * 1000)

        statuses = self._build_statuses(extractions, linkings)
        degraded = [status.name for status in statuses if not status.succeeded]
        if degraded:
            logger.warning(f"{len(degraded)} file(s) completed with fallbacks: {', '.join(degraded)}")

        logger.info(
            f"✅ Complete! Generated {len(unique_concepts)} concepts with {total_links} links in {processing_time_ms}ms"
        )

        return ProcessedOutput(
            files=[*linked_files, index_file],
            concepts=unique_concepts,
            metadata=ProcessingMetadata(
                total_concepts=len(unique_concepts),
                total_links=total_links,
                index_links=self.count_wikilinks([index_file]),
                processing_time_ms=processing_time_ms,
            ),
            document_statuses=statuses,
        )


async def generate_concept_graph(
    use_case: Optional[str],
    documents: Sequence[Document],
    generation_call: Optional[TextGenerationCall] = None,
    settings: Optional[ConceptLinkerSettings] = None,
) -> ProcessedOutput:
    """
    Entry point for request-handling layers.

    Args:
        use_case: Use-case key; unknown keys fall back to research-library
        documents: Input documents
        generation_call: Model capability; built from settings when omitted
        settings: Pipeline settings; read from the environment when omitted

    Returns:
        ProcessedOutput of the run

    Raises:
        ConfigurationError: If no generation call is given and no API key is configured
    """
    settings = settings or ConceptLinkerSettings.from_environment()
    if generation_call is None:
        generation_call = OpenAITextGenerationCall.from_settings(settings)

    profile = UseCaseProfileRegistry.resolve(use_case)
    core = ConceptLinkerCore(generation_call, profile, settings)
    return await core.process(documents)
