"""
Mock text generation implementation for testing the pipeline with fixed responses.

This module provides a deterministic implementation of TextGenerationCall that
returns predefined responses without making real API calls.
"""

from typing import Callable, List, NamedTuple, Optional, Sequence, Union

from ..TypedCalls import GenerationResponse, TextGenerationCall

# A scripted reply: text, None for a non-text response, or an exception to raise
MockReply = Union[str, None, Exception]


class RecordedCall(NamedTuple):
    """A single generate() invocation captured by the mock."""

    system_instruction: str
    user_prompt: str
    max_output_tokens: int


class MockTextGenerationCall(TextGenerationCall):
    """
    Mock implementation of TextGenerationCall that returns scripted replies.

    Replies come either from a router callable inspecting the prompt, or from a
    list of fixed replies cycled in call order. Every call is recorded.
    """

    def __init__(
        self,
        fixed_responses: Optional[Sequence[MockReply]] = None,
        router: Optional[Callable[[str, str, int], MockReply]] = None,
        model_name: str = "mock-model",
    ):
        """
        Initialize the mock generation call.

        Args:
            fixed_responses: Replies to cycle through (ignored when router is set)
            router: Callable (system_instruction, user_prompt, max_output_tokens) -> reply
            model_name: Identifier for this mock model (for debugging)
        """
        if router is None and not fixed_responses:
            raise ValueError("Either fixed_responses or router must be provided")

        self.fixed_responses = list(fixed_responses or [])
        self.router = router
        self.model_name = model_name
        self.calls: List[RecordedCall] = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def generate(
        self,
        system_instruction: str,
        user_prompt: str,
        max_output_tokens: int,
    ) -> GenerationResponse:
        """Return the next scripted reply."""
        self.calls.append(RecordedCall(system_instruction, user_prompt, max_output_tokens))

        if self.router is not None:
            reply = self.router(system_instruction, user_prompt, max_output_tokens)
        else:
            # Cycle through fixed responses
            reply = self.fixed_responses[(len(self.calls) - 1) % len(self.fixed_responses)]

        if isinstance(reply, Exception):
            raise reply
        if reply is None:
            return GenerationResponse.non_text(model=self.model_name)
        return GenerationResponse(text=reply, model=self.model_name)

    def reset(self) -> None:
        """Forget recorded calls and restart the response cycle."""
        self.calls.clear()
