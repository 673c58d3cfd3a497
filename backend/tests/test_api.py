"""
Tests for the HTTP surface.
"""

import pytest

from api.routers.documents import completion_message, is_import_complete
from conftest import make_extraction_response
from core.errors import LLMError
from ingest.models import ExtractedContentItem, IngestionResult, IngestionStatus, IngestionSummary


CALENDAR_CSV = (
    "Date,Format,Caption (copy),Visual,CTA\n"
    "2024-03-01,Reel,Spring launch,Flowers,Shop now\n"
)

ITEMS = [
    {"title": "Spring launch", "date": "2024-03-01", "format": "Reel", "platform": "Instagram", "type": "Promotional"},
    {"title": "Team spotlight", "date": "2024-03-04", "format": "Carousel", "platform": "Instagram"},
]


def upload(name="calendar.csv", content=CALENDAR_CSV, content_type="text/csv"):
    return {"file": (name, content.encode("utf-8"), content_type)}


class TestSystemEndpoints:
    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert "x-process-time" in response.headers

    @pytest.mark.asyncio
    async def test_model_config_roundtrip(self, client):
        from core.model_state import model_config
        original = model_config.get_all()
        try:
            response = await client.post("/config/models", json={"extraction": "gemini-2.5-pro"})
            assert response.status_code == 200
            assert response.json()["config"]["extraction"] == "gemini-2.5-pro"

            response = await client.get("/config/models")
            assert response.json() == {"analysis": original["analysis"], "extraction": "gemini-2.5-pro"}
        finally:
            model_config.set_model("extraction", original["extraction"])


class TestIngestUpload:
    @pytest.mark.asyncio
    async def test_upload_extracts_items(self, client, fake_llm):
        fake_llm.chunks = [make_extraction_response(ITEMS)]

        response = await client.post("/document-ingestion/proj-1/ingest", files=upload())

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Extracted 2 content items."
        data = body["data"]
        assert data["fileName"] == "calendar.csv"
        assert data["documentType"] == "Content Calendar"
        assert data["status"] == "success"
        assert data["degradedReason"] is None
        assert data["contentItems"][0]["type"] == "Promotional"
        assert data["summary"]["isComplete"] is False
        assert data["summary"]["alreadyProcessed"] == 0
        assert data["summary"]["totalItems"] == 2

    @pytest.mark.asyncio
    async def test_upload_persists_history(self, client, fake_llm, content_store):
        fake_llm.chunks = [make_extraction_response(ITEMS)]
        response = await client.post("/document-ingestion/proj-1/ingest", files=upload())
        ingestion_id = response.json()["data"]["ingestionId"]

        history = await client.get("/document-ingestion/proj-1/history")
        stored = await client.get(f"/document-ingestion/ingestions/{ingestion_id}")

        assert history.status_code == 200
        assert history.json()["projectId"] == "proj-1"
        assert history.json()["ingestions"][0]["itemCount"] == 2
        assert stored.status_code == 200
        assert stored.json()["extractedData"]["contentItems"][1]["title"] == "Team spotlight"
        assert [s.title for s in content_store.get_skip_items("proj-1")] == ["Team spotlight", "Spring launch"]

    @pytest.mark.asyncio
    async def test_no_items_and_no_skip_list(self, client):
        response = await client.post("/document-ingestion/proj-1/ingest", files=upload())

        body = response.json()
        assert body["message"].startswith("No content items found")
        assert body["data"]["contentItems"] == []

    @pytest.mark.asyncio
    async def test_degraded_run_still_succeeds(self, client, fake_llm):
        fake_llm.structure_error = LLMError("down")
        fake_llm.stream_error = LLMError("down")

        response = await client.post("/document-ingestion/proj-1/ingest", files=upload())

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "degraded"
        assert data["degradedReason"] == "extraction_failed: ExtractionServiceError"
        assert data["contentItems"][0]["title"] == "Section 1"
        assert response.json()["message"].startswith("Document processed with fallback method!")

    @pytest.mark.asyncio
    async def test_invalid_extension_rejected(self, client):
        response = await client.post(
            "/document-ingestion/proj-1/ingest", files=upload(name="deck.pptx")
        )
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_FILE_TYPE"

    @pytest.mark.asyncio
    async def test_invalid_content_type_rejected(self, client):
        response = await client.post(
            "/document-ingestion/proj-1/ingest", files=upload(content_type="image/png")
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unreadable_file_is_422_and_recorded(self, client, content_store):
        response = await client.post(
            "/document-ingestion/proj-1/ingest",
            files=upload(name="broken.xlsx", content="not a workbook", content_type="application/octet-stream"),
        )

        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "DOCUMENT_READ_ERROR"
        assert content_store.get_ingestion_history("proj-1")[0]["status"] == "failed"


class TestProcessExisting:
    async def _upload(self, client):
        response = await client.post("/document-ingestion/proj-1/ingest", files=upload())
        return response.json()["data"]["documentId"]

    @pytest.mark.asyncio
    async def test_reprocess_reports_completion(self, client, fake_llm):
        fake_llm.chunks = [make_extraction_response(ITEMS)]
        document_id = await self._upload(client)

        # Second run: the model honours the skip list and returns nothing new
        fake_llm.chunks = [make_extraction_response([])]
        response = await client.post(
            "/document-ingestion/proj-1/process-existing",
            json={"documentId": document_id, "documentName": "March.csv"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"].startswith("All content has been successfully imported!")
        assert body["data"]["fileName"] == "March.csv"
        assert body["data"]["summary"]["isComplete"] is True
        assert body["data"]["summary"]["alreadyProcessed"] == 2
        _method, prompt, system, _tier = fake_llm.calls[-1]
        assert '"Spring launch" (2024-03-01)' in system

    @pytest.mark.asyncio
    async def test_cut_off_response_is_not_reported_complete(self, client, fake_llm):
        fake_llm.chunks = [make_extraction_response(ITEMS)]
        document_id = await self._upload(client)

        fake_llm.chunks = ['{"contentItems": [{"title": "Spring launch", "da']
        response = await client.post(
            "/document-ingestion/proj-1/process-existing", json={"documentId": document_id}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["data"]["status"] == "degraded"
        assert body["data"]["degradedReason"] == "partial_recovery"
        assert body["data"]["contentItems"] == []
        assert body["data"]["summary"]["isComplete"] is False
        assert body["message"].startswith("Document only partially processed")
        assert "successfully imported" not in body["message"]

    @pytest.mark.asyncio
    async def test_rules_strategy(self, client, fake_llm):
        document_id = await self._upload(client)
        calls_before = len(fake_llm.calls)

        response = await client.post(
            "/document-ingestion/proj-1/process-existing",
            json={"documentId": document_id, "strategy": "rules"},
        )

        assert response.status_code == 200
        assert response.json()["data"]["contentItems"][0]["title"] == "Spring launch"
        assert len(fake_llm.calls) == calls_before

    @pytest.mark.asyncio
    async def test_unknown_document_is_404(self, client):
        response = await client.post(
            "/document-ingestion/proj-1/process-existing", json={"documentId": "missing"}
        )
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "DOCUMENT_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_in_progress_is_409(self, client, lock_registry):
        document_id = await self._upload(client)

        async with lock_registry.hold(document_id):
            response = await client.post(
                "/document-ingestion/proj-1/process-existing", json={"documentId": document_id}
            )

        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "INGESTION_IN_PROGRESS"

    @pytest.mark.asyncio
    async def test_invalid_strategy_rejected(self, client):
        response = await client.post(
            "/document-ingestion/proj-1/process-existing",
            json={"documentId": "abc", "strategy": "magic"},
        )
        assert response.status_code == 422


class TestIngestionLookup:
    @pytest.mark.asyncio
    async def test_unknown_ingestion_is_404(self, client):
        response = await client.get("/document-ingestion/ingestions/nope")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_content_items_paginated(self, client, fake_llm):
        fake_llm.chunks = [make_extraction_response(ITEMS)]
        response = await client.post("/document-ingestion/proj-1/ingest", files=upload())
        ingestion_id = response.json()["data"]["ingestionId"]

        page = await client.get(
            f"/document-ingestion/ingestions/{ingestion_id}/content-items",
            params={"page": 2, "limit": 1},
        )

        assert page.status_code == 200
        body = page.json()
        assert body["ingestionId"] == ingestion_id
        assert [i["title"] for i in body["items"]] == ["Team spotlight"]
        assert body["pagination"] == {"page": 2, "limit": 1, "total": 2, "pages": 2}

    @pytest.mark.asyncio
    async def test_content_items_bad_page_is_400(self, client, fake_llm):
        fake_llm.chunks = [make_extraction_response(ITEMS)]
        response = await client.post("/document-ingestion/proj-1/ingest", files=upload())
        ingestion_id = response.json()["data"]["ingestionId"]

        page = await client.get(
            f"/document-ingestion/ingestions/{ingestion_id}/content-items", params={"page": 0}
        )

        assert page.status_code == 400
        assert page.json()["detail"]["code"] == "INVALID_INPUT"

    @pytest.mark.asyncio
    async def test_content_items_unknown_ingestion_is_404(self, client):
        response = await client.get("/document-ingestion/ingestions/nope/content-items")
        assert response.status_code == 404


class TestAnalytics:
    @pytest.mark.asyncio
    async def test_analytics_after_runs(self, client, fake_llm):
        fake_llm.chunks = [make_extraction_response(ITEMS)]
        await client.post("/document-ingestion/proj-1/ingest", files=upload())
        await client.post(
            "/document-ingestion/proj-1/ingest",
            files=upload(name="broken.xlsx", content="not a workbook", content_type="application/octet-stream"),
        )

        response = await client.get("/document-ingestion/proj-1/analytics")

        assert response.status_code == 200
        body = response.json()
        assert body["projectId"] == "proj-1"
        assert body["overview"]["totalIngestions"] == 2
        assert body["overview"]["successfulIngestions"] == 1
        assert body["overview"]["failedIngestions"] == 1
        assert body["overview"]["avgProcessingTimeMs"] is not None
        assert body["content"]["totalContentItems"] == 2
        assert body["content"]["contentTypesCount"] == 1
        assert body["documentTypes"][0]["documentType"] == "Content Calendar"

    @pytest.mark.asyncio
    async def test_history_carries_processing_time(self, client, fake_llm):
        fake_llm.chunks = [make_extraction_response(ITEMS)]
        await client.post("/document-ingestion/proj-1/ingest", files=upload())

        history = await client.get("/document-ingestion/proj-1/history")

        assert history.json()["ingestions"][0]["processingTimeMs"] >= 0


class TestCompletionMessage:
    def _result(self, items, status=IngestionStatus.SUCCESS, reason=None):
        return IngestionResult(
            document_type="Content Calendar",
            summary=IngestionSummary(document_type="Content Calendar", total_items=len(items)),
            content_items=items,
            status=status,
            degraded_reason=reason,
        )

    def test_partial_recovery_names_the_cut_off(self):
        result = self._result(
            [ExtractedContentItem(title="Spring launch")],
            status=IngestionStatus.DEGRADED,
            reason="partial_recovery",
        )

        message = completion_message(result, already_processed=3)

        assert message.startswith("Document only partially processed")
        assert "Recovered 1 content items" in message
        assert is_import_complete(result, 3) is False

    def test_clean_empty_rerun_is_complete(self):
        result = self._result([])
        assert is_import_complete(result, 2) is True
        assert completion_message(result, 2).startswith("All content has been successfully imported!")

    def test_degraded_empty_rerun_is_not_complete(self):
        result = self._result([], status=IngestionStatus.DEGRADED, reason="partial_recovery")
        assert is_import_complete(result, 2) is False
