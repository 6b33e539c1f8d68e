"""Tests for ConceptLinkerASGIModule."""

import io
import json
import zipfile
from typing import Optional

import pytest
from fastapi.testclient import TestClient

from com_blockether_conceptlinker.jobs import InMemoryJobStore, JobStatus
from com_blockether_conceptlinker.knowledge import ConceptLinkerSettings, Document
from com_blockether_conceptlinker.knowledge.ConceptLinkerASGIModule import ConceptLinkerASGIModule
from com_blockether_conceptlinker.utils import ModelTransportError
from com_blockether_conceptlinker.utils.openai import MockReply, MockTextGenerationCall

EXTRACTION_REPLY = '[{"name":"Neural Networks","description":"A computing paradigm."}]'
LINKING_REPLY = "Neural networks use [[Neural Networks]] and backpropagation."


def _stub(failure: Optional[Exception] = None) -> MockTextGenerationCall:
    def router(system: str, prompt: str, budget: int) -> MockReply:
        if failure is not None:
            return failure
        return LINKING_REPLY if "ORIGINAL CONTENT:" in prompt else EXTRACTION_REPLY

    return MockTextGenerationCall(router=router)


def _upload(name: str = "a.txt", content: bytes = b"Neural networks use backpropagation.") -> tuple:
    return ("files", (name, content, "text/plain"))


class TestConceptLinkerASGIModule:
    """Test suite for ConceptLinkerASGIModule."""

    @pytest.fixture
    def module(self) -> ConceptLinkerASGIModule:
        return ConceptLinkerASGIModule(
            job_store=InMemoryJobStore(),
            settings=ConceptLinkerSettings(),
            generation_call=_stub(),
        )

    @pytest.fixture
    def client(self, module: ConceptLinkerASGIModule) -> TestClient:
        return TestClient(module.app)

    def test_initialization(self, module: ConceptLinkerASGIModule) -> None:
        assert module.prefix == "/api"
        assert module.title == "Concept Linker"
        assert len(module.job_store) == 0

    def test_lists_use_cases(self, client: TestClient) -> None:
        response = client.get("/api/use-cases")

        assert response.status_code == 200
        assert response.json()["default"] == "research-library"
        assert "meeting-notes" in response.json()["useCases"]

    def test_generate_without_files(self, client: TestClient) -> None:
        response = client.post("/api/generate", data={"useCase": "research-library"})

        assert response.status_code == 400
        assert response.json()["detail"] == "No files provided"

    def test_generate_when_not_configured(self) -> None:
        module = ConceptLinkerASGIModule(settings=ConceptLinkerSettings(api_key=None))
        client = TestClient(module.app)

        response = client.post("/api/generate", files=[_upload()], data={"useCase": "research-library"})

        assert response.status_code == 500
        assert "not configured" in response.json()["detail"]
        assert len(module.job_store) == 0

    def test_generate_rejects_binary_uploads(self, client: TestClient, module: ConceptLinkerASGIModule) -> None:
        response = client.post("/api/generate", files=[_upload("image.png", b"\x89PNG\xff\xfe")])

        assert response.status_code == 400
        assert "image.png" in response.json()["detail"]
        assert len(module.job_store) == 0

    def test_full_job_lifecycle(self, client: TestClient) -> None:
        response = client.post("/api/generate", files=[_upload()], data={"useCase": "research-library"})

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Job queued successfully"
        job_id = body["jobId"]

        # TestClient runs background tasks before returning
        status = client.get(f"/api/status/{job_id}").json()
        assert status["jobId"] == job_id
        assert status["status"] == "complete"
        assert status["useCase"] == "research-library"
        assert status["fileCount"] == 1
        assert status["resultUrl"] == f"/api/download/{job_id}"
        assert status["metadata"]["totalConcepts"] == 1
        assert status["metadata"]["totalLinks"] == 1
        assert status["partial"] is False

        download = client.get(f"/api/download/{job_id}")
        assert download.status_code == 200
        assert download.headers["content-type"] == "application/zip"
        assert f'filename="knowledge-graph-{job_id}.zip"' in download.headers["content-disposition"]

        with zipfile.ZipFile(io.BytesIO(download.content)) as archive:
            assert archive.namelist() == ["a.txt", "00-INDEX.md", "concept-graph.json"]
            assert archive.read("a.txt").decode("utf-8") == LINKING_REPLY
            manifest = json.loads(archive.read("concept-graph.json"))
        assert manifest["concepts"][0]["name"] == "Neural Networks"

    def test_failed_job_reports_category(self) -> None:
        module = ConceptLinkerASGIModule(
            settings=ConceptLinkerSettings(),
            generation_call=_stub(failure=ModelTransportError("connection refused")),
        )
        client = TestClient(module.app)

        job_id = client.post("/api/generate", files=[_upload()]).json()["jobId"]
        status = client.get(f"/api/status/{job_id}").json()

        assert status["status"] == "error"
        assert status["errorCategory"] == "model_service"
        assert status["error"] == "The language model service is unavailable. Please try again later."
        assert "connection refused" not in status["error"]
        assert client.get(f"/api/download/{job_id}").status_code == 409

    @pytest.mark.parametrize("names", [["a.txt", "a.txt"], ["00-INDEX.md", "a.txt"]])
    def test_conflicting_upload_names_fail_the_job(self, client: TestClient, names: list) -> None:
        job_id = client.post("/api/generate", files=[_upload(name) for name in names]).json()["jobId"]

        status = client.get(f"/api/status/{job_id}").json()

        assert status["status"] == "error"
        assert status["errorCategory"] == "invalid_input"

    def test_status_unknown_job(self, client: TestClient) -> None:
        response = client.get("/api/status/does-not-exist")

        assert response.status_code == 404
        assert response.json()["detail"] == "Job not found"

    def test_download_unknown_job(self, client: TestClient) -> None:
        assert client.get("/api/download/does-not-exist").status_code == 404

    def test_download_before_completion(self, client: TestClient, module: ConceptLinkerASGIModule) -> None:
        job = module.job_store.create(use_case=None, file_count=1)

        response = client.get(f"/api/download/{job.id}")

        assert response.status_code == 409
        assert module.job_store.get(job.id).status is JobStatus.PENDING

    @pytest.mark.anyio
    async def test_process_job_directly(self, module: ConceptLinkerASGIModule) -> None:
        job = module.job_store.create(use_case="meeting-notes", file_count=1)

        finished = await module.process_job(
            job.id,
            "meeting-notes",
            [Document(name="standup.md", content="We decided to ship.")],
            _stub(),
            ConceptLinkerSettings(),
        )

        assert finished.status is JobStatus.COMPLETE
        assert finished.archive is not None
