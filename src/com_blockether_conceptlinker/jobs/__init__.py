"""
Job lifecycle and archive packaging for asynchronous generation requests.
"""

from .ArchivePackager import ArchivePackager
from .JobStore import (
    ALLOWED_TRANSITIONS,
    ConceptGraphJob,
    InMemoryJobStore,
    InvalidJobTransitionError,
    JobNotFoundError,
    JobStatus,
)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "ArchivePackager",
    "ConceptGraphJob",
    "InMemoryJobStore",
    "InvalidJobTransitionError",
    "JobNotFoundError",
    "JobStatus",
]
