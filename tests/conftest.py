"""Shared test configuration and fixtures.

Factories build evidence reports in memory; ``write_report`` persists them
for loader and CLI tests. Every test runs in its own working directory with
a clean settings cache so that defaults like ``api-baseline-reports/`` never
touch the real filesystem.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Callable

import pytest

from api_baseline.config import reset_settings
from api_baseline.types import ApiCallRecord, EvidenceReport, ReportMetadata, TestRecord


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (may be slower)",
    )


# ============================================================================
# Factories
# ============================================================================


def _make_call(
    method: str = "GET",
    url: str = "/x",
    status_code: int = 200,
    response_body: Any = None,
    **extra: Any,
) -> ApiCallRecord:
    return ApiCallRecord(
        method=method,
        url=url,
        status_code=status_code,
        response_body=response_body,
        timestamp="2026-01-22T10:00:00.000Z",
        **extra,
    )


def _make_test(
    title: str,
    status: str = "passed",
    calls: list[ApiCallRecord] | None = None,
    test_id: str | None = None,
    file: str = "tests/api.spec.ts",
) -> TestRecord:
    return TestRecord(
        test_id=test_id or f"id-{title}",
        test_title=title,
        test_file=file,
        status=status,
        api_calls=calls or [],
    )


def _make_report(
    tests: list[TestRecord],
    environment: str = "https://stage-api.example.com",
    timestamp: str = "2026-01-22T10:00:00.000Z",
) -> EvidenceReport:
    return EvidenceReport(
        metadata=ReportMetadata(
            timestamp=timestamp,
            environment=environment,
            total_tests=len(tests),
            passed_tests=sum(1 for t in tests if t.status.value == "passed"),
            failed_tests=sum(1 for t in tests if t.status.value == "failed"),
        ),
        tests=tests,
    )


@pytest.fixture
def make_call() -> Callable[..., ApiCallRecord]:
    """Factory for ApiCallRecord."""
    return _make_call


@pytest.fixture
def make_test() -> Callable[..., TestRecord]:
    """Factory for TestRecord."""
    return _make_test


@pytest.fixture
def make_report() -> Callable[..., EvidenceReport]:
    """Factory for EvidenceReport with metadata counts derived from the tests."""
    return _make_report


@pytest.fixture
def sample_report() -> EvidenceReport:
    """A small but varied report: nested bodies, arrays, several endpoints."""
    return _make_report(
        [
            _make_test(
                "lists contact properties",
                calls=[
                    _make_call(
                        url="/contacts/v1/properties?oid=1",
                        response_body=[{"id": 1, "name": "email", "meta": {"type": "string"}}],
                    ),
                    _make_call(
                        url="/contacts/v1/properties?oid=1",
                        response_body=[{"id": 2, "name": "phone", "meta": {"type": "string"}}],
                    ),
                ],
            ),
            _make_test(
                "creates a contact",
                calls=[
                    _make_call(
                        method="POST",
                        url="/contacts/v1/contacts",
                        status_code=201,
                        response_body={"id": 7, "properties": {"name": "Ada"}},
                        request_body={"name": "Ada"},
                    ),
                ],
            ),
            _make_test(
                "rejects unauthenticated access",
                calls=[
                    _make_call(url="/auth/session", status_code=401, response_body="Unauthorized"),
                ],
            ),
            _make_test("skipped on stage", status="skipped"),
        ]
    )


@pytest.fixture
def write_report(tmp_path) -> Callable[..., Path]:
    """Write a report as JSON and return its path."""

    def write(report: EvidenceReport, name: str = "report.json", directory: Path | None = None) -> Path:
        directory = directory or tmp_path
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        path.write_text(report.to_json(), encoding="utf-8")
        return path

    return write


# ============================================================================
# Isolation Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Run each test in a temp directory with fresh settings."""
    for key in list(os.environ):
        if key.startswith("API_BASELINE_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    reset_settings()
    yield
    reset_settings()
