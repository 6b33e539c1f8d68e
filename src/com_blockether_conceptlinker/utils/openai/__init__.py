"""
Text generation call implementations backed by the OpenAI SDK, plus a deterministic mock.
"""

from .MockTextGenerationCall import MockReply, MockTextGenerationCall, RecordedCall
from .OpenAITextGenerationCall import OpenAITextGenerationCall

__all__ = [
    "MockReply",
    "MockTextGenerationCall",
    "OpenAITextGenerationCall",
    "RecordedCall",
]
