"""Tests for httpx request tracking."""

import asyncio
import json

import httpx
import pytest

from api_baseline.recorder import EvidenceRecorder
from api_baseline.tracking import BINARY_BODY, UNPARSABLE_BODY, ApiCallTracker

BASE_URL = "https://stage-api.example.com"


def handler(request: httpx.Request) -> httpx.Response:
    """Fake backend keyed by path."""
    path = request.url.path
    if path == "/contacts/v1/properties":
        return httpx.Response(200, json=[{"id": 1, "name": "email"}])
    if path == "/contacts/v1/contacts":
        body = json.loads(request.content)
        return httpx.Response(201, json={"id": 7, **body})
    if path == "/health":
        return httpx.Response(200, text="ok", headers={"content-type": "text/plain"})
    if path == "/avatar":
        return httpx.Response(
            200, content=b"\x89PNG\r\n", headers={"content-type": "image/png"}
        )
    if path == "/broken":
        return httpx.Response(
            502, content=b"<html>bad gateway", headers={"content-type": "application/json"}
        )
    return httpx.Response(404, json={"error": "not found"})


@pytest.fixture
def tracker() -> ApiCallTracker:
    return ApiCallTracker()


@pytest.fixture
def client(tracker):
    with httpx.Client(base_url=BASE_URL, transport=httpx.MockTransport(handler)) as client:
        tracker.attach(client)
        yield client


class TestApiCallTracker:
    """Tests for ApiCallTracker with a sync client."""

    def test_records_json_get(self, client, tracker):
        response = client.get(
            "/contacts/v1/properties", params={"oid": 1}, headers={"Application-Key": "k"}
        )

        assert response.status_code == 200
        [call] = tracker.calls
        assert call.method == "GET"
        assert call.url == "/contacts/v1/properties?oid=1"
        assert call.endpoint_key == "GET /contacts/v1/properties?oid=1"
        assert call.status_code == 200
        assert call.response_body == [{"id": 1, "name": "email"}]
        assert call.request_body is None
        assert call.headers["application-key"] == "k"
        assert call.response_headers["content-type"] == "application/json"
        assert call.timestamp.endswith("Z")

    def test_response_still_usable_after_tracking(self, client):
        response = client.get("/contacts/v1/properties")

        assert response.json() == [{"id": 1, "name": "email"}]

    def test_records_json_request_body(self, client, tracker):
        client.post("/contacts/v1/contacts", json={"name": "Ada"})

        [call] = tracker.calls
        assert call.method == "POST"
        assert call.request_body == {"name": "Ada"}
        assert call.status_code == 201
        assert call.response_body == {"id": 7, "name": "Ada"}

    def test_text_request_body(self, client, tracker):
        client.put("/notes", content=b"hello")

        [call] = tracker.calls
        assert call.request_body == "hello"
        assert call.status_code == 404

    def test_text_response(self, client, tracker):
        client.get("/health")

        assert tracker.calls[0].response_body == "ok"

    def test_binary_response(self, client, tracker):
        client.get("/avatar")

        assert tracker.calls[0].response_body == BINARY_BODY

    def test_unparsable_json_response(self, client, tracker):
        client.get("/broken")

        [call] = tracker.calls
        assert call.status_code == 502
        assert call.response_body == UNPARSABLE_BODY

    def test_include_host(self):
        tracker = ApiCallTracker(include_host=True)
        with httpx.Client(base_url=BASE_URL, transport=httpx.MockTransport(handler)) as client:
            tracker.attach(client)
            client.get("/health")

        assert tracker.calls[0].url == f"{BASE_URL}/health"

    def test_drain(self, client, tracker):
        client.get("/health")
        client.get("/health")

        assert len(tracker.drain()) == 2
        assert tracker.calls == []

    def test_keeps_existing_hooks(self, tracker):
        seen = []
        with httpx.Client(
            base_url=BASE_URL,
            transport=httpx.MockTransport(handler),
            event_hooks={"response": [lambda r: seen.append(r.status_code)]},
        ) as client:
            tracker.attach(client)
            client.get("/health")

        assert seen == [200]
        assert len(tracker.calls) == 1

    def test_tracking_failure_does_not_break_request(self, client, tracker, monkeypatch, caplog):
        def explode(response):
            raise RuntimeError("boom")

        monkeypatch.setattr(tracker, "build_record", explode)

        response = client.get("/health")

        assert response.status_code == 200
        assert tracker.calls == []
        assert "Failed to track API call" in caplog.text


class TestAsyncTracking:
    """Tests for ApiCallTracker with an async client."""

    def test_records_async_calls(self, tracker):
        async def run():
            async with httpx.AsyncClient(
                base_url=BASE_URL, transport=httpx.MockTransport(handler)
            ) as client:
                tracker.attach(client)
                await client.get("/contacts/v1/properties")
                await client.post("/contacts/v1/contacts", json={"name": "Grace"})

        asyncio.run(run())

        assert [c.endpoint_key for c in tracker.calls] == [
            "GET /contacts/v1/properties",
            "POST /contacts/v1/contacts",
        ]
        assert tracker.calls[1].response_body == {"id": 7, "name": "Grace"}


@pytest.mark.integration
class TestTrackingToComparison:
    """Tracked calls flow into a recorded report."""

    def test_recorded_report_round_trip(self, tmp_path, client, tracker):
        from api_baseline.comparator import compare_reports
        from api_baseline.loader import load_report

        recorder = EvidenceRecorder(output_dir=tmp_path / "reports", environment="stage")
        recorder.begin()

        client.get("/contacts/v1/properties", params={"oid": 1})
        recorder.record_test("p-1", "lists properties", "tests/props.py", "passed", tracker.drain())

        client.post("/contacts/v1/contacts", json={"name": "Ada"})
        recorder.record_test("c-1", "creates contact", "tests/contacts.py", "passed", tracker.drain())

        report = load_report(recorder.end().latest_path)

        assert report.total_api_calls == 2
        assert report.tests[0].api_calls[0].url == "/contacts/v1/properties?oid=1"
        assert compare_reports(report, report).differences == []
