"""
Real text generation implementation using the OpenAI SDK.

This module provides a production-ready implementation of TextGenerationCall
that talks to any OpenAI-compatible chat completions endpoint.
"""

import logging
from typing import Any, Optional

import openai
from openai import AsyncOpenAI

from ..ConceptLinkerErrors import ConfigurationError, ModelTransportError
from ..TypedCalls import GenerationResponse, TextGenerationCall

logger = logging.getLogger(__name__)

# SDK errors that mean the call never produced a usable completion
_TRANSPORT_ERRORS = (
    openai.APIConnectionError,
    openai.APITimeoutError,
    openai.RateLimitError,
    openai.AuthenticationError,
    openai.APIStatusError,
)


class OpenAITextGenerationCall(TextGenerationCall):
    """
    Production implementation of TextGenerationCall using AsyncOpenAI.

    Sends the system instruction and user prompt as two chat messages and returns
    the first choice's content. A choice without string content (tool calls,
    refusals, empty content) is returned as a non-text response.
    """

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str = "gpt-4o",
        temperature: float = 0.7,
    ):
        """
        Initialize the OpenAI text generation call.

        Args:
            client: Configured AsyncOpenAI client
            model: The model to use (default: gpt-4o)
            temperature: Temperature for generation (default: 0.7)
        """
        self._client = client
        self.model = model
        self.temperature = temperature

    @classmethod
    def from_settings(cls, settings: Any) -> "OpenAITextGenerationCall":
        """
        Build a call from ConceptLinkerSettings.

        Raises:
            ConfigurationError: If no API key is configured
        """
        api_key = settings.require_api_key()
        client = AsyncOpenAI(base_url=settings.api_base_url, api_key=api_key, max_retries=0)
        return cls(client=client, model=settings.model, temperature=settings.temperature)

    async def generate(
        self,
        system_instruction: str,
        user_prompt: str,
        max_output_tokens: int,
    ) -> GenerationResponse:
        """
        Make a chat completion call.

        Args:
            system_instruction: System message
            user_prompt: User message
            max_output_tokens: Completion token budget

        Returns:
            GenerationResponse with the completion text, or non-text

        Raises:
            ModelTransportError: On connection, timeout, rate limit, auth or status errors
        """
        if not self._client:
            raise ConfigurationError("OpenAI client is not initialized")

        try:
            completion = await self._client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_instruction},
                    {"role": "user", "content": user_prompt},
                ],
                max_tokens=max_output_tokens,
                temperature=self.temperature,
            )
        except _TRANSPORT_ERRORS as e:
            raise ModelTransportError(f"Model call to '{self.model}' failed: {e}", cause=e) from e

        if not completion.choices:
            logger.debug(f"Model '{self.model}' returned no choices")
            return GenerationResponse.non_text(model=completion.model)

        content: Optional[str] = completion.choices[0].message.content
        if not isinstance(content, str):
            return GenerationResponse.non_text(model=completion.model)

        return GenerationResponse(text=content, model=completion.model)
