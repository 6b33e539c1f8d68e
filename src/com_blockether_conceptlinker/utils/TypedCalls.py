"""
Text Generation Call Protocol - Generic interface for language model completions.

This defines the protocol that any model provider must follow so the pipeline
stays implementation-agnostic. Stages only ever see this protocol; concrete
clients are injected when the pipeline is constructed.
"""

from abc import abstractmethod
from typing import Optional, Protocol, runtime_checkable

from pydantic import BaseModel, Field


class GenerationResponse(BaseModel):
    """Result of a single text generation call."""

    text: Optional[str] = Field(
        default=None,
        description="Completion text, or None when the model returned a non-text result",
    )
    model: Optional[str] = Field(default=None, description="Model that produced the response")

    @property
    def is_text(self) -> bool:
        """Whether the response carries textual content."""
        return self.text is not None

    @classmethod
    def non_text(cls, model: Optional[str] = None) -> "GenerationResponse":
        """Create a response representing a non-text (e.g. tool or empty) result."""
        return cls(text=None, model=model)


@runtime_checkable
class TextGenerationCall(Protocol):
    """
    Protocol for text generation calls.

    Users can implement this protocol for any provider (OpenAI-compatible servers,
    Anthropic, local models) or for deterministic stubs in tests.

    Implementations must raise ModelTransportError for network, rate limit,
    authentication and timeout failures. Every other outcome, including an empty
    or non-text completion, is returned as a GenerationResponse.
    """

    @abstractmethod
    async def generate(
        self,
        system_instruction: str,
        user_prompt: str,
        max_output_tokens: int,
    ) -> GenerationResponse:
        """
        Generate a completion.

        Args:
            system_instruction: System message framing the model's role
            user_prompt: The filled prompt for this call
            max_output_tokens: Upper bound on completion length

        Returns:
            GenerationResponse with text, or a non-text response
        """
        ...
