"""
Tests for the OpenAI-backed TextGenerationCall with a mocked SDK client.
"""

from types import SimpleNamespace
from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from com_blockether_conceptlinker.knowledge import ConceptLinkerSettings
from com_blockether_conceptlinker.utils import ConfigurationError, ModelTransportError
from com_blockether_conceptlinker.utils.openai import OpenAITextGenerationCall


def _completion(content: Optional[Any], model: str = "gpt-4o-2024") -> SimpleNamespace:
    choices = [] if content is ... else [SimpleNamespace(message=SimpleNamespace(content=content))]
    return SimpleNamespace(choices=choices, model=model)


def _client(result: Any = None, side_effect: Optional[BaseException] = None) -> MagicMock:
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=result, side_effect=side_effect)
    return client


class TestOpenAITextGenerationCall:
    """Test suite for OpenAITextGenerationCall."""

    @pytest.mark.anyio
    async def test_sends_system_and_user_messages(self) -> None:
        client = _client(_completion("linked text"))
        call = OpenAITextGenerationCall(client, model="gpt-4o", temperature=0.2)

        response = await call.generate("You are helpful", "Link this", 8000)

        assert response.text == "linked text"
        assert response.model == "gpt-4o-2024"
        client.chat.completions.create.assert_awaited_once_with(
            model="gpt-4o",
            messages=[
                {"role": "system", "content": "You are helpful"},
                {"role": "user", "content": "Link this"},
            ],
            max_tokens=8000,
            temperature=0.2,
        )

    @pytest.mark.anyio
    async def test_missing_content_is_non_text(self) -> None:
        call = OpenAITextGenerationCall(_client(_completion(None)))

        response = await call.generate("sys", "prompt", 10)

        assert response.is_text is False

    @pytest.mark.anyio
    async def test_no_choices_is_non_text(self) -> None:
        call = OpenAITextGenerationCall(_client(_completion(...)))

        response = await call.generate("sys", "prompt", 10)

        assert response.is_text is False

    @pytest.mark.anyio
    async def test_connection_error_becomes_transport_error(self) -> None:
        error = openai.APIConnectionError(request=httpx.Request("POST", "http://localhost/v1/chat/completions"))
        call = OpenAITextGenerationCall(_client(side_effect=error))

        with pytest.raises(ModelTransportError) as exc_info:
            await call.generate("sys", "prompt", 10)

        assert exc_info.value.cause is error

    def test_from_settings_requires_api_key(self) -> None:
        with pytest.raises(ConfigurationError, match="not configured"):
            OpenAITextGenerationCall.from_settings(ConceptLinkerSettings())

    def test_from_settings_uses_model_and_temperature(self) -> None:
        settings = ConceptLinkerSettings(api_key="sk-test", model="local-model", temperature=0.1)

        call = OpenAITextGenerationCall.from_settings(settings)

        assert call.model == "local-model"
        assert call.temperature == 0.1
