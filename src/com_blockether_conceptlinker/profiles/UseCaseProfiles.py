"""
Use-case profiles: system instructions, prompt builders and relationship vocabularies
tailored to a document domain.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class UseCase(str, Enum):
    """Supported document domains."""

    RESEARCH_LIBRARY = "research-library"
    COURSE_MATERIAL = "course-material"
    MEETING_NOTES = "meeting-notes"
    PROJECT_DOCS = "project-docs"


def _wikilink_list(concept_names: Sequence[str]) -> str:
    return "\n".join(f"- [[{name}]]" for name in concept_names)


JSON_ONLY_INSTRUCTION = "CRITICAL: Output ONLY valid JSON, no other text."
NO_CODE_FENCE_INSTRUCTION = "Return the full content with wikilinks added. Do not wrap in markdown code blocks."


class UseCaseProfile(BaseModel, ABC):
    """
    Base class for use-case profiles.

    A profile is static for the duration of a run. Subclasses provide the two
    prompt builders; the extraction prompt must request a bare JSON array of
    concept objects and the linking prompt must request the complete document
    with [[wikilinks]] and no code-fence wrapper.
    """

    model_config = ConfigDict(frozen=True)

    use_case: UseCase = Field(description="Use case this profile serves")
    system_prompt: str = Field(description="System instruction sent with every model call")
    relationship_types: Tuple[str, ...] = Field(description="Domain relationship vocabulary, in order")

    @abstractmethod
    def build_extraction_prompt(self, content: str) -> str:
        """
        Build the concept extraction prompt for a document.

        Args:
            content: Full document text

        Returns:
            Filled prompt string ready for the model
        """
        pass

    @abstractmethod
    def build_linking_prompt(self, concept_names: Sequence[str], content: str) -> str:
        """
        Build the cross-linking prompt for a document.

        Args:
            concept_names: Deduplicated concept names to link
            content: Original document text

        Returns:
            Filled prompt string ready for the model
        """
        pass


class ResearchLibraryProfile(UseCaseProfile):
    """Academic research organization."""

    use_case: UseCase = UseCase.RESEARCH_LIBRARY
    system_prompt: str = """You are an expert knowledge graph architect specializing in academic research organization. Your goal is to identify key concepts, theories, methodologies, and connections across research materials to create an interconnected web of knowledge.

Focus on:
- Core concepts and theories
- Methodologies and frameworks
- Key findings and conclusions
- Relationships between ideas
- Prerequisites and dependencies
- Contradictions or debates
- Related research areas"""
    relationship_types: Tuple[str, ...] = (
        "builds-upon",
        "contradicts",
        "supports",
        "prerequisite-for",
        "related-to",
        "example-of",
        "methodology-for",
    )

    def build_extraction_prompt(self, content: str) -> str:
        return f"""
Analyze this research content and extract the key concepts that should become nodes in a knowledge graph.

CONTENT:
{content}

For each concept, provide:
1. The concept name (2-5 words, title case)
2. A brief description (1-2 sentences)
3. Why it's significant in this content

Return as JSON array:
[
  {{
    "name": "Concept Name",
    "description": "Brief description",
    "significance": "Why it matters"
  }}
]

{JSON_ONLY_INSTRUCTION}"""

    def build_linking_prompt(self, concept_names: Sequence[str], content: str) -> str:
        return f"""
You are creating an interconnected knowledge graph. Given these concepts and the original content, rewrite the content with wikilinks.

CONCEPTS TO LINK:
{_wikilink_list(concept_names)}

ORIGINAL CONTENT:
{content}

INSTRUCTIONS:
1. Add wikilinks [[Like This]] whenever you mention one of the concepts
2. Only link concepts from the list above
3. Link the FIRST occurrence in each section/paragraph
4. Maintain the original structure and flow
5. Don't force links - only where natural
6. Keep all original information

{NO_CODE_FENCE_INSTRUCTION}"""


class CourseMaterialProfile(UseCaseProfile):
    """Learning-optimized course material."""

    use_case: UseCase = UseCase.COURSE_MATERIAL
    system_prompt: str = """You are an expert educational content organizer. Your goal is to create a learning-optimized knowledge graph that shows how concepts build upon each other, highlights prerequisites, and creates clear learning paths.

Focus on:
- Foundational concepts vs advanced topics
- Prerequisites and dependencies
- Examples and applications
- Common misconceptions
- Practice opportunities
- Real-world applications"""
    relationship_types: Tuple[str, ...] = (
        "prerequisite-for",
        "builds-upon",
        "example-of",
        "applies-to",
        "related-to",
    )

    def build_extraction_prompt(self, content: str) -> str:
        return f"""
Analyze this educational content and extract the key learning concepts.

CONTENT:
{content}

For each concept, provide:
1. The concept name (2-5 words, title case)
2. A brief definition (1-2 sentences)
3. Difficulty level (beginner/intermediate/advanced)
4. Prerequisites (if any)

Return as JSON array:
[
  {{
    "name": "Concept Name",
    "description": "Brief definition",
    "level": "beginner|intermediate|advanced",
    "prerequisites": ["Concept1", "Concept2"]
  }}
]

{JSON_ONLY_INSTRUCTION}"""

    def build_linking_prompt(self, concept_names: Sequence[str], content: str) -> str:
        return f"""
You are creating a learning-focused knowledge graph. Add wikilinks to show how concepts connect.

CONCEPTS TO LINK:
{_wikilink_list(concept_names)}

ORIGINAL CONTENT:
{content}

INSTRUCTIONS:
1. Add wikilinks [[Like This]] for each concept
2. Emphasize prerequisite relationships (e.g., "To understand [[Advanced Topic]], first learn [[Basic Concept]]")
3. Link examples to the concepts they illustrate
4. Maintain pedagogical flow
5. Add "See also:" sections if helpful

{NO_CODE_FENCE_INSTRUCTION}"""


class MeetingNotesProfile(UseCaseProfile):
    """Business communications and meeting notes."""

    use_case: UseCase = UseCase.MEETING_NOTES
    system_prompt: str = """You are an expert at organizing business communications and project documentation. Your goal is to create a knowledge graph that connects decisions, action items, projects, people, and topics across meetings.

Focus on:
- Key decisions made
- Action items and owners
- Project references
- Recurring topics
- People and roles
- Blockers and dependencies"""
    relationship_types: Tuple[str, ...] = (
        "relates-to",
        "blocks",
        "decided-in",
        "action-for",
        "discussed-in",
    )

    def build_extraction_prompt(self, content: str) -> str:
        return f"""
Analyze these meeting notes and extract key entities for a knowledge graph.

CONTENT:
{content}

Extract:
1. Projects/initiatives mentioned
2. Key decisions
3. Action items
4. Topics discussed
5. People mentioned (use roles, not names)

Return as JSON array:
[
  {{
    "name": "Entity Name",
    "type": "project|decision|action|topic|person",
    "description": "Brief context"
  }}
]

{JSON_ONLY_INSTRUCTION}"""

    def build_linking_prompt(self, concept_names: Sequence[str], content: str) -> str:
        return f"""
Create an interconnected meeting notes document with wikilinks.

ENTITIES TO LINK:
{_wikilink_list(concept_names)}

ORIGINAL CONTENT:
{content}

INSTRUCTIONS:
1. Add wikilinks for projects, decisions, action items, and topics
2. Help readers navigate between related meetings
3. Maintain chronological flow
4. Keep all original information

{NO_CODE_FENCE_INSTRUCTION}"""


class ProjectDocsProfile(UseCaseProfile):
    """Technical documentation and project knowledge."""

    use_case: UseCase = UseCase.PROJECT_DOCS
    system_prompt: str = """You are an expert at organizing technical documentation and project knowledge. Your goal is to create a knowledge graph that connects architecture decisions, technical concepts, dependencies, and implementation details.

Focus on:
- Technical concepts and patterns
- Architecture decisions
- System dependencies
- API endpoints and interfaces
- Implementation details
- Technical debt and decisions"""
    relationship_types: Tuple[str, ...] = (
        "depends-on",
        "implements",
        "relates-to",
        "decided-by",
        "alternative-to",
    )

    def build_extraction_prompt(self, content: str) -> str:
        return f"""
Analyze this technical documentation and extract key technical concepts.

CONTENT:
{content}

Extract:
1. Technical concepts/patterns
2. System components
3. Dependencies
4. API/interfaces
5. Architecture decisions

Return as JSON array:
[
  {{
    "name": "Concept Name",
    "type": "concept|component|dependency|api|decision",
    "description": "Technical description"
  }}
]

{JSON_ONLY_INSTRUCTION}"""

    def build_linking_prompt(self, concept_names: Sequence[str], content: str) -> str:
        return f"""
Create interconnected technical documentation with wikilinks.

TECHNICAL ENTITIES TO LINK:
{_wikilink_list(concept_names)}

ORIGINAL CONTENT:
{content}

INSTRUCTIONS:
1. Link technical concepts, components, and dependencies
2. Show architectural relationships
3. Connect related implementations
4. Maintain technical accuracy

{NO_CODE_FENCE_INSTRUCTION}"""


class UseCaseProfileRegistry:
    """Fixed mapping from use-case key to profile. Lookups never fail."""

    DEFAULT_USE_CASE = UseCase.RESEARCH_LIBRARY

    _PROFILES: Dict[UseCase, UseCaseProfile] = {
        profile.use_case: profile
        for profile in (
            ResearchLibraryProfile(),
            CourseMaterialProfile(),
            MeetingNotesProfile(),
            ProjectDocsProfile(),
        )
    }

    @classmethod
    def resolve(cls, use_case_key: Optional[str]) -> UseCaseProfile:
        """
        Resolve a use-case key to its profile.

        Args:
            use_case_key: Key such as "meeting-notes"; unknown or missing keys are allowed

        Returns:
            The matching profile, or the research-library profile as fallback
        """
        try:
            return cls._PROFILES[UseCase(use_case_key)]
        except ValueError:
            logger.warning(f"Unknown use case '{use_case_key}', falling back to '{cls.DEFAULT_USE_CASE.value}'")
            return cls._PROFILES[cls.DEFAULT_USE_CASE]

    @classmethod
    def available(cls) -> List[str]:
        """Keys of all registered use cases."""
        return [use_case.value for use_case in UseCase]


# Every use case must have exactly one profile
_missing = set(UseCase) - set(UseCaseProfileRegistry._PROFILES)
if _missing:
    raise RuntimeError(f"UseCaseProfileRegistry is missing profiles for: {sorted(m.value for m in _missing)}")
