"""
Concept extraction: one model call per document, parsed into ConceptRecords.
"""

import json
import logging
import re
from typing import Any, List, Optional, Sequence

from com_blockether_conceptlinker.profiles import UseCaseProfile
from com_blockether_conceptlinker.utils.BatchProcessor import DocumentBatchProcessor
from com_blockether_conceptlinker.utils.ConceptLinkerErrors import (
    ConceptParseError,
    DocumentStageError,
    ModelTransportError,
)
from com_blockether_conceptlinker.utils.TypedCalls import TextGenerationCall

from .ConceptLinkerTypes import ConceptRecord, Document, DocumentExtraction, StageOutcome

logger = logging.getLogger(__name__)

NO_DESCRIPTION = "No description"

# ```json ... ``` or ``` ... ``` around the whole response
_LEADING_FENCE = re.compile(r"^```[\w+-]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"\n?```\s*$")


class ConceptExtractor:
    """Extracts concept records from documents using a use-case profile."""

    EXTRACTION_STAGE = "extraction"

    def __init__(
        self,
        generation_call: TextGenerationCall,
        profile: UseCaseProfile,
        batch_processor: Optional[DocumentBatchProcessor[Document, DocumentExtraction]] = None,
        max_output_tokens: int = 4000,
        isolate_transport_failures: bool = False,
    ):
        """
        Initialize the extractor.

        Args:
            generation_call: Model capability used for extraction
            profile: Use-case profile providing system and extraction prompts
            batch_processor: Concurrency/retry policy for per-document calls
            max_output_tokens: Output budget per extraction call
            isolate_transport_failures: Contribute zero concepts instead of aborting on transport failure
        """
        self._generation_call = generation_call
        self._profile = profile
        self._batch_processor = batch_processor or DocumentBatchProcessor()
        self._max_output_tokens = max_output_tokens
        self._isolate_transport_failures = isolate_transport_failures

    @staticmethod
    def strip_code_fences(response_text: str) -> str:
        """
        Remove a code fence wrapping the response, with or without a language tag.

        Args:
            response_text: Raw model output

        Returns:
            The response without surrounding fence markers, trimmed
        """
        cleaned = response_text.strip()
        cleaned = _LEADING_FENCE.sub("", cleaned, count=1)
        cleaned = _TRAILING_FENCE.sub("", cleaned, count=1)
        return cleaned.strip()

    @staticmethod
    def parse_concepts(response_text: str, document_name: str) -> List[ConceptRecord]:
        """
        Parse a model response into concept records attributed to one document.

        Args:
            response_text: Raw model output, optionally fenced
            document_name: Name of the document the concepts came from

        Returns:
            Concept records in emission order

        Raises:
            ConceptParseError: If the response is not a JSON array
        """
        cleaned = ConceptExtractor.strip_code_fences(response_text)
        try:
            parsed: Any = json.loads(cleaned)
        except json.JSONDecodeError as e:
            raise ConceptParseError(f"Response is not valid JSON: {e}") from e

        if not isinstance(parsed, list):
            raise ConceptParseError(f"Expected a JSON array of concepts, got {type(parsed).__name__}")

        concepts: List[ConceptRecord] = []
        for position, item in enumerate(parsed):
            if not isinstance(item, dict):
                logger.warning(f"Skipping non-object concept #{position} from {document_name}")
                continue

            name = item.get("name")
            if not isinstance(name, str) or not name.strip():
                logger.warning(f"Skipping concept #{position} without a name from {document_name}")
                continue

            description = item.get("description") or item.get("significance") or NO_DESCRIPTION
            concepts.append(
                ConceptRecord(
                    name=name,
                    description=str(description),
                    source_files=[document_name],
                )
            )

        return concepts

    async def _extract_from_document(self, document: Document) -> DocumentExtraction:
        """Call the model for one document; parse failures degrade to zero concepts."""
        logger.info(f"Extracting from: {document.name}")

        prompt = self._profile.build_extraction_prompt(document.content)
        response = await self._generation_call.generate(
            self._profile.system_prompt,
            prompt,
            self._max_output_tokens,
        )

        try:
            if not response.is_text:
                raise ConceptParseError("Model returned a non-text response")
            concepts = self.parse_concepts(response.text or "", document.name)
        except ConceptParseError as e:
            logger.warning(f"Failed to parse concepts from {document.name}: {e}")
            logger.debug(f"Response was: {response.text!r}")
            return DocumentExtraction(
                document_name=document.name,
                outcome=StageOutcome.RECOVERED,
                error=f"Concept extraction output could not be parsed: {e}",
            )

        logger.debug(f"Extracted {len(concepts)} concepts from {document.name}")
        return DocumentExtraction(document_name=document.name, concepts=concepts)

    async def _on_document_failure(self, document: Document, error: Exception) -> DocumentExtraction:
        if not (self._isolate_transport_failures and isinstance(error, ModelTransportError)):
            raise DocumentStageError(document.name, self.EXTRACTION_STAGE, error) from error

        logger.error(f"Extraction failed for {document.name}, continuing without its concepts: {error}")
        return DocumentExtraction(
            document_name=document.name,
            outcome=StageOutcome.FAILED,
            error=f"Concept extraction failed: {error}",
        )

    async def extract_documents(
        self,
        documents: Sequence[Document],
        deadline: Optional[float] = None,
    ) -> List[DocumentExtraction]:
        """
        Extract concepts from every document, one independent model call each.

        Args:
            documents: Documents in batch order
            deadline: Absolute anyio clock time bounding every call

        Returns:
            One DocumentExtraction per document, in input order
        """
        return await self._batch_processor.process_batch(
            documents,
            self._extract_from_document,
            fallback_func=self._on_document_failure,
            deadline=deadline,
        )

    async def extract(self, documents: Sequence[Document], deadline: Optional[float] = None) -> List[ConceptRecord]:
        """
        Extract a flat list of concept records.

        Returns:
            Records in document order, then per-document emission order
        """
        extractions = await self.extract_documents(documents, deadline=deadline)
        return [concept for extraction in extractions for concept in extraction.concepts]
