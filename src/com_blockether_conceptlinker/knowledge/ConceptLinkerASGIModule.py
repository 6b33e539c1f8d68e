"""
Concept Linker ASGI Module - upload notes, poll the job, download the linked archive
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from fastapi import APIRouter, BackgroundTasks, File, Form, HTTPException, UploadFile
from fastapi.responses import Response
from pydantic import Field

from com_blockether_conceptlinker.asgi.ASGICoreModule import ASGICoreModule
from com_blockether_conceptlinker.jobs import (
    ArchivePackager,
    ConceptGraphJob,
    InMemoryJobStore,
    JobNotFoundError,
    JobStatus,
)
from com_blockether_conceptlinker.profiles import UseCaseProfileRegistry
from com_blockether_conceptlinker.utils.ConceptLinkerErrors import ConfigurationError, ErrorCategory
from com_blockether_conceptlinker.utils.openai import OpenAITextGenerationCall
from com_blockether_conceptlinker.utils.TypedCalls import TextGenerationCall

from .ConceptLinkerCore import generate_concept_graph
from .internal.ConceptLinkerTypes import ConceptLinkerSettings, Document

logger = logging.getLogger(__name__)


class ConceptLinkerASGIModule(ASGICoreModule):
    """HTTP surface for queued concept graph generation."""

    job_store: InMemoryJobStore = Field(
        default_factory=InMemoryJobStore, exclude=True, description="Where jobs and their archives live"
    )
    settings: Optional[ConceptLinkerSettings] = Field(
        default=None, description="Pipeline settings (read from the environment per request when None)"
    )
    generation_call: Optional[TextGenerationCall] = Field(
        default=None, exclude=True, description="Model capability (built from settings when None)"
    )

    def __init__(self, prefix: str = "/api", **kwargs: Any) -> None:
        """Initialize the module.

        Args:
            prefix: URL prefix for this module
            **kwargs: Field values (job_store, settings, generation_call) and parent arguments
        """
        init_data = {
            "prefix": prefix,
            "title": "Concept Linker",
            "description": "Turns uploaded notes into an interlinked knowledge base",
            **kwargs,
        }
        super().__init__(**init_data)

    def _resolve_runtime(self) -> Tuple[TextGenerationCall, ConceptLinkerSettings]:
        settings = self.settings or ConceptLinkerSettings.from_environment()
        if self.generation_call is not None:
            return self.generation_call, settings
        return OpenAITextGenerationCall.from_settings(settings), settings

    async def process_job(
        self,
        job_id: str,
        use_case: Optional[str],
        documents: List[Document],
        generation_call: TextGenerationCall,
        settings: ConceptLinkerSettings,
    ) -> ConceptGraphJob:
        """Run the pipeline for a queued job and record the outcome on the job.

        Args:
            job_id: Job to process, must be pending
            use_case: Requested use-case key
            documents: Decoded uploads
            generation_call: Model capability for this run
            settings: Pipeline settings for this run

        Returns:
            The finished job
        """
        self.job_store.transition(job_id, JobStatus.PROCESSING)
        logger.info(f"🚀 Processing job {job_id} with {len(documents)} files")

        try:
            output = await generate_concept_graph(use_case, documents, generation_call=generation_call, settings=settings)
            archive = ArchivePackager.package(output)
        except Exception as e:
            category = ErrorCategory.from_exception(e)
            logger.error(f"❌ Job {job_id} failed ({category.value}): {e}", exc_info=True)
            return self.job_store.transition(
                job_id,
                JobStatus.ERROR,
                error_category=category.value,
                error=category.user_message,
            )

        logger.info(f"✅ Job {job_id} complete!")
        return self.job_store.transition(
            job_id,
            JobStatus.COMPLETE,
            metadata=output.metadata,
            partial=output.partial,
            archive=archive,
            result_url=f"{self.prefix}/download/{job_id}",
        )

    def setup_routes(self, router: APIRouter) -> None:
        """Set up generation, status and download routes."""

        @router.get("/use-cases")
        async def list_use_cases() -> Dict[str, Any]:
            return {
                "useCases": UseCaseProfileRegistry.available(),
                "default": UseCaseProfileRegistry.DEFAULT_USE_CASE.value,
            }

        @router.post("/generate")
        async def generate(
            background_tasks: BackgroundTasks,
            files: Optional[List[UploadFile]] = File(default=None),
            use_case: Optional[str] = Form(default=None, alias="useCase"),
        ) -> Dict[str, str]:
            if not files:
                raise HTTPException(status_code=400, detail="No files provided")

            try:
                generation_call, settings = self._resolve_runtime()
            except ConfigurationError as e:
                logger.error(f"Rejecting generation request: {e}")
                raise HTTPException(status_code=500, detail=str(e)) from e

            documents = []
            for upload in files:
                name = upload.filename or "untitled.md"
                try:
                    content = (await upload.read()).decode("utf-8")
                except UnicodeDecodeError as e:
                    raise HTTPException(status_code=400, detail=f"File is not valid UTF-8 text: {name}") from e
                documents.append(Document(name=name, content=content))

            self.job_store.expire()
            job = self.job_store.create(use_case=use_case, file_count=len(documents))
            background_tasks.add_task(self.process_job, job.id, use_case, documents, generation_call, settings)

            return {"jobId": job.id, "message": "Job queued successfully"}

        @router.get("/status/{job_id}")
        async def get_status(job_id: str) -> Dict[str, Any]:
            try:
                job = self.job_store.get(job_id)
            except JobNotFoundError:
                raise HTTPException(status_code=404, detail="Job not found") from None
            return job.to_status_payload()

        @router.get("/download/{job_id}")
        async def download(job_id: str) -> Response:
            try:
                job = self.job_store.get(job_id)
            except JobNotFoundError:
                raise HTTPException(status_code=404, detail="Job not found") from None

            if job.status != JobStatus.COMPLETE:
                raise HTTPException(status_code=409, detail="Job not complete")
            if job.archive is None:
                raise HTTPException(status_code=404, detail="Result file not found")

            return Response(
                content=job.archive,
                media_type="application/zip",
                headers={"Content-Disposition": f'attachment; filename="knowledge-graph-{job_id}.zip"'},
            )
