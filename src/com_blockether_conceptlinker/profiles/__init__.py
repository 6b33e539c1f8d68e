"""
Use-case profile registry: prompts and relationship vocabularies per document domain.
"""

from .UseCaseProfiles import (
    CourseMaterialProfile,
    MeetingNotesProfile,
    ProjectDocsProfile,
    ResearchLibraryProfile,
    UseCase,
    UseCaseProfile,
    UseCaseProfileRegistry,
)

__all__ = [
    "UseCase",
    "UseCaseProfile",
    "UseCaseProfileRegistry",
    "ResearchLibraryProfile",
    "CourseMaterialProfile",
    "MeetingNotesProfile",
    "ProjectDocsProfile",
]
