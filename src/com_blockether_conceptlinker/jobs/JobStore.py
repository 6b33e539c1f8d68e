"""
Job store for asynchronous concept graph generation requests.

Jobs move through pending -> processing -> complete | error. Finished jobs
expire after a time-to-live so archives do not accumulate in memory.
"""

import logging
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from com_blockether_conceptlinker.knowledge import ProcessingMetadata

logger = logging.getLogger(__name__)


class JobStatus(str, Enum):
    """Lifecycle states of a generation job."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETE = "complete"
    ERROR = "error"

    @property
    def finished(self) -> bool:
        return self in (JobStatus.COMPLETE, JobStatus.ERROR)


ALLOWED_TRANSITIONS: Dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.PENDING: frozenset({JobStatus.PROCESSING, JobStatus.ERROR}),
    JobStatus.PROCESSING: frozenset({JobStatus.COMPLETE, JobStatus.ERROR}),
    JobStatus.COMPLETE: frozenset(),
    JobStatus.ERROR: frozenset(),
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ConceptGraphJob(BaseModel):
    """A single generation request and its result."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=lambda: str(uuid4()), alias="jobId", description="Job identifier")
    status: JobStatus = Field(default=JobStatus.PENDING)
    use_case: Optional[str] = Field(default=None, alias="useCase")
    file_count: int = Field(default=0, alias="fileCount")
    created_at: datetime = Field(default_factory=_utcnow, alias="createdAt")
    completed_at: Optional[datetime] = Field(default=None, alias="completedAt")
    result_url: Optional[str] = Field(default=None, alias="resultUrl")
    metadata: Optional[ProcessingMetadata] = None
    partial: bool = Field(default=False, description="Whether some documents degraded to fallbacks")
    error_category: Optional[str] = Field(default=None, alias="errorCategory")
    error: Optional[str] = Field(default=None, description="User-facing failure message")
    archive: Optional[bytes] = Field(default=None, exclude=True, repr=False)

    def to_status_payload(self) -> Dict[str, Any]:
        """Serialize for the status endpoint (camelCase, no archive bytes)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class JobNotFoundError(KeyError):
    """Raised when a job id is unknown or has expired."""


class InvalidJobTransitionError(ValueError):
    """Raised when a job is moved to a state not reachable from its current one."""


class InMemoryJobStore:
    """
    Process-local job store.

    Instances are injected into the HTTP layer; nothing here is module-level state.
    """

    DEFAULT_TTL = timedelta(hours=1)

    def __init__(self, ttl: timedelta = DEFAULT_TTL):
        """
        Initialize the store.

        Args:
            ttl: How long finished jobs are kept after completion
        """
        self._ttl = ttl
        self._jobs: Dict[str, ConceptGraphJob] = {}

    def __len__(self) -> int:
        return len(self._jobs)

    def create(self, use_case: Optional[str], file_count: int) -> ConceptGraphJob:
        """Create a pending job."""
        job = ConceptGraphJob(use_case=use_case, file_count=file_count)
        self._jobs[job.id] = job
        logger.info(f"Job {job.id} created for {file_count} files (use case: {use_case})")
        return job

    def get(self, job_id: str) -> ConceptGraphJob:
        """
        Look up a job.

        Raises:
            JobNotFoundError: If the job does not exist
        """
        try:
            return self._jobs[job_id]
        except KeyError:
            raise JobNotFoundError(job_id) from None

    def jobs(self) -> List[ConceptGraphJob]:
        """All jobs currently held, in creation order."""
        return list(self._jobs.values())

    def transition(self, job_id: str, status: JobStatus, **updates: Any) -> ConceptGraphJob:
        """
        Move a job to a new state and apply field updates.

        Args:
            job_id: Job identifier
            status: Target state
            **updates: Field values to set alongside the transition

        Returns:
            The updated job

        Raises:
            JobNotFoundError: If the job does not exist
            InvalidJobTransitionError: If the transition is not allowed
        """
        job = self.get(job_id)
        if status not in ALLOWED_TRANSITIONS[job.status]:
            raise InvalidJobTransitionError(f"Job {job_id} cannot move from {job.status.value} to {status.value}")

        job.status = status
        for field_name, value in updates.items():
            setattr(job, field_name, value)
        if status.finished and job.completed_at is None:
            job.completed_at = _utcnow()

        logger.info(f"Job {job_id} -> {status.value}")
        return job

    def expire(self, now: Optional[datetime] = None) -> int:
        """
        Drop finished jobs older than the TTL.

        Args:
            now: Reference time (defaults to the current UTC time)

        Returns:
            Number of jobs removed
        """
        now = now or _utcnow()
        expired = [
            job_id
            for job_id, job in self._jobs.items()
            if job.status.finished and job.completed_at is not None and now - job.completed_at > self._ttl
        ]
        for job_id in expired:
            del self._jobs[job_id]

        if expired:
            logger.info(f"Expired {len(expired)} finished jobs")
        return len(expired)
