"""
Tests for pipeline data types and environment-driven settings.
"""

import pytest

from com_blockether_conceptlinker.knowledge.internal import (
    ConceptLinkerSettings,
    ConceptRecord,
    Document,
    DocumentStatus,
    ProcessedOutput,
    ProcessingMetadata,
    StageOutcome,
)
from com_blockether_conceptlinker.utils import ConfigurationError

ENV_VARS = [
    "CONCEPTLINKER_MODEL",
    "CONCEPTLINKER_API_BASE_URL",
    "CONCEPTLINKER_API_KEY",
    "OPENAI_API_KEY",
    "CONCEPTLINKER_MAX_CONCURRENT_CALLS",
    "CONCEPTLINKER_MAX_ATTEMPTS",
    "CONCEPTLINKER_CALL_TIMEOUT_SECONDS",
    "CONCEPTLINKER_RUN_TIMEOUT_SECONDS",
    "CONCEPTLINKER_ISOLATE_FAILURES",
]


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestConceptRecord:
    """Test suite for ConceptRecord."""

    def test_source_files_are_deduplicated_in_order(self) -> None:
        record = ConceptRecord(name="X", description="d", source_files=["b.md", "a.md", "b.md"])

        assert record.source_files == ["b.md", "a.md"]

    def test_serializes_with_camel_case_alias(self) -> None:
        record = ConceptRecord.model_validate({"name": "X", "description": "d", "sourceFiles": ["a.md"]})

        assert record.model_dump(by_alias=True) == {"name": "X", "description": "d", "sourceFiles": ["a.md"]}


class TestProcessedOutput:
    """Test suite for ProcessedOutput."""

    def _output(self, *statuses: DocumentStatus) -> ProcessedOutput:
        return ProcessedOutput(
            files=[Document(name="a.md", content="x"), Document(name="00-INDEX.md", content="# Concept Index")],
            concepts=[],
            metadata=ProcessingMetadata(total_concepts=0, total_links=0, processing_time_ms=3),
            document_statuses=list(statuses),
        )

    def test_partial_reflects_document_outcomes(self) -> None:
        ok = DocumentStatus(name="a.md", extraction=StageOutcome.OK, linking=StageOutcome.OK)
        recovered = DocumentStatus(name="b.md", extraction=StageOutcome.RECOVERED, linking=StageOutcome.OK)

        assert self._output(ok).partial is False
        assert self._output(ok, recovered).partial is True

    def test_index_is_last_file(self) -> None:
        output = self._output()

        assert output.index_file.name == "00-INDEX.md"
        assert [f.name for f in output.linked_files] == ["a.md"]

    def test_metadata_dump_uses_camel_case(self) -> None:
        dumped = self._output().metadata.model_dump(by_alias=True)

        assert dumped == {"totalConcepts": 0, "totalLinks": 0, "indexLinks": 0, "processingTimeMs": 3}


class TestConceptLinkerSettings:
    """Test suite for ConceptLinkerSettings."""

    def test_defaults(self) -> None:
        settings = ConceptLinkerSettings()

        assert settings.extraction_max_tokens == 4000
        assert settings.linking_max_tokens == 8000
        assert settings.max_concurrent_calls == 5
        assert settings.max_attempts == 1
        assert settings.isolate_transport_failures is False

    def test_api_key_is_hidden_from_repr(self) -> None:
        assert "sk-secret" not in repr(ConceptLinkerSettings(api_key="sk-secret"))

    def test_require_api_key(self) -> None:
        with pytest.raises(ConfigurationError, match="CONCEPTLINKER_API_KEY not configured"):
            ConceptLinkerSettings().require_api_key()
        assert ConceptLinkerSettings(api_key="sk-x").require_api_key() == "sk-x"

    def test_from_environment(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("CONCEPTLINKER_MODEL", "llama3")
        clean_env.setenv("CONCEPTLINKER_API_BASE_URL", "http://localhost:11434/v1")
        clean_env.setenv("CONCEPTLINKER_API_KEY", "sk-local")
        clean_env.setenv("CONCEPTLINKER_MAX_CONCURRENT_CALLS", "2")
        clean_env.setenv("CONCEPTLINKER_MAX_ATTEMPTS", "3")
        clean_env.setenv("CONCEPTLINKER_CALL_TIMEOUT_SECONDS", "30")
        clean_env.setenv("CONCEPTLINKER_ISOLATE_FAILURES", "true")

        settings = ConceptLinkerSettings.from_environment()

        assert settings.model == "llama3"
        assert settings.api_base_url == "http://localhost:11434/v1"
        assert settings.api_key == "sk-local"
        assert settings.max_concurrent_calls == 2
        assert settings.max_attempts == 3
        assert settings.call_timeout_seconds == 30.0
        assert settings.run_timeout_seconds is None
        assert settings.isolate_transport_failures is True

    def test_falls_back_to_openai_api_key(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("OPENAI_API_KEY", "sk-openai")

        assert ConceptLinkerSettings.from_environment().api_key == "sk-openai"

    @pytest.mark.parametrize(
        "name, value",
        [
            ("CONCEPTLINKER_MAX_CONCURRENT_CALLS", "many"),
            ("CONCEPTLINKER_MAX_CONCURRENT_CALLS", "0"),
            ("CONCEPTLINKER_CALL_TIMEOUT_SECONDS", "-1"),
        ],
    )
    def test_invalid_environment_is_a_configuration_error(
        self, clean_env: pytest.MonkeyPatch, name: str, value: str
    ) -> None:
        clean_env.setenv(name, value)

        with pytest.raises(ConfigurationError):
            ConceptLinkerSettings.from_environment()
