"""
Cross-linking: rewrites each document with [[wikilinks]] to the deduplicated concepts.
"""

import logging
from typing import List, Optional, Sequence

from com_blockether_conceptlinker.profiles import UseCaseProfile
from com_blockether_conceptlinker.utils.BatchProcessor import DocumentBatchProcessor
from com_blockether_conceptlinker.utils.ConceptLinkerErrors import (
    DocumentStageError,
    ModelTransportError,
)
from com_blockether_conceptlinker.utils.TypedCalls import TextGenerationCall

from .ConceptLinkerTypes import Document, DocumentLinking, StageOutcome

logger = logging.getLogger(__name__)


class CrossLinker:
    """Adds inline concept references to documents using a use-case profile."""

    LINKING_STAGE = "linking"

    def __init__(
        self,
        generation_call: TextGenerationCall,
        profile: UseCaseProfile,
        batch_processor: Optional[DocumentBatchProcessor[Document, DocumentLinking]] = None,
        max_output_tokens: int = 8000,
        isolate_transport_failures: bool = False,
    ):
        """
        Initialize the cross-linker.

        Args:
            generation_call: Model capability used for rewriting
            profile: Use-case profile providing system and linking prompts
            batch_processor: Concurrency/retry policy for per-document calls
            max_output_tokens: Output budget per linking call, larger than extraction
            isolate_transport_failures: Keep original content instead of aborting on transport failure
        """
        self._generation_call = generation_call
        self._profile = profile
        self._batch_processor = batch_processor or DocumentBatchProcessor()
        self._max_output_tokens = max_output_tokens
        self._isolate_transport_failures = isolate_transport_failures

    async def link_document(self, document: Document, concept_names: Sequence[str]) -> DocumentLinking:
        """
        Rewrite one document with wikilinks.

        The model's text is taken verbatim. A non-text or blank response keeps
        the original content.

        Args:
            document: Original document
            concept_names: Full list of deduplicated concept names

        Returns:
            DocumentLinking with the new document under the same name
        """
        logger.info(f"Linking: {document.name}")

        prompt = self._profile.build_linking_prompt(concept_names, document.content)
        response = await self._generation_call.generate(
            self._profile.system_prompt,
            prompt,
            self._max_output_tokens,
        )

        if not response.is_text or not (response.text or "").strip():
            logger.warning(f"Non-text linking response for {document.name}, keeping original content")
            return DocumentLinking(
                document=Document(name=document.name, content=document.content),
                outcome=StageOutcome.RECOVERED,
                error="Cross-linking returned no text; original content kept",
            )

        return DocumentLinking(document=Document(name=document.name, content=response.text or ""))

    async def link_documents(
        self,
        documents: Sequence[Document],
        concept_names: Sequence[str],
        deadline: Optional[float] = None,
    ) -> List[DocumentLinking]:
        """
        Cross-link every document, one independent model call each.

        Args:
            documents: Original documents in batch order
            concept_names: Deduplicated concept names
            deadline: Absolute anyio clock time bounding every call

        Returns:
            One DocumentLinking per document, same order and names as the input
        """
        names = list(concept_names)

        async def process(document: Document) -> DocumentLinking:
            return await self.link_document(document, names)

        async def on_failure(document: Document, error: Exception) -> DocumentLinking:
            if not (self._isolate_transport_failures and isinstance(error, ModelTransportError)):
                raise DocumentStageError(document.name, self.LINKING_STAGE, error) from error

            logger.error(f"Linking failed for {document.name}, keeping original content: {error}")
            return DocumentLinking(
                document=Document(name=document.name, content=document.content),
                outcome=StageOutcome.FAILED,
                error=f"Cross-linking failed: {error}",
            )

        return await self._batch_processor.process_batch(
            documents,
            process,
            fallback_func=on_failure,
            deadline=deadline,
        )

    async def link(
        self,
        documents: Sequence[Document],
        concept_names: Sequence[str],
        deadline: Optional[float] = None,
    ) -> List[Document]:
        """Cross-link documents and return only the rewritten documents."""
        linkings = await self.link_documents(documents, concept_names, deadline=deadline)
        return [linking.document for linking in linkings]
