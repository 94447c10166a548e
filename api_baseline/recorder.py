"""Evidence recorder.

Collects test outcomes and the API calls made during each test, then writes
the evidence report that later runs are compared against.

Example:
    ```python
    from api_baseline.recorder import EvidenceRecorder
    from api_baseline.tracking import ApiCallTracker

    recorder = EvidenceRecorder(output_dir="api-baseline-reports")
    tracker = ApiCallTracker()
    recorder.begin()

    with httpx.Client(base_url="https://stage-api.example.com") as client:
        tracker.attach(client)
        response = client.get("/contacts/v1/properties")
        recorder.record_test(
            test_id="props-1",
            title="lists contact properties",
            file="tests/properties.py",
            status="passed" if response.status_code == 200 else "failed",
            api_calls=tracker.drain(),
        )

    paths = recorder.end()
    ```
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from api_baseline.clock import file_timestamp, utc_now_iso
from api_baseline.config import get_settings
from api_baseline.renderer import render_evidence_summary
from api_baseline.types import (
    ApiCallRecord,
    EvidenceReport,
    ReportMetadata,
    TestRecord,
    TestStatus,
)

logger = logging.getLogger(__name__)


@dataclass
class RecordedPaths:
    """Files written by a finished recording."""

    report_path: Path
    latest_path: Path
    summary_path: Path


class EvidenceRecorder:
    """Builds an EvidenceReport test by test and persists it."""

    def __init__(
        self,
        output_dir: Path | str | None = None,
        environment: str | None = None,
        base_url: str | None = None,
    ):
        """Initialize the recorder.

        Args:
            output_dir: Where reports are written. Defaults to settings.reports_dir
            environment: Environment label. Defaults to settings.environment
            base_url: Base URL under test. Defaults to the environment label
        """
        settings = get_settings()
        self.output_dir = Path(output_dir) if output_dir else settings.reports_dir
        self.latest_name = settings.latest_report_name
        self.top_endpoints = settings.top_endpoints

        environment = environment or settings.environment
        self._metadata = ReportMetadata(
            timestamp=utc_now_iso(),
            environment=environment,
            base_url=base_url or settings.base_url or environment,
            total_tests=0,
            passed_tests=0,
            failed_tests=0,
            duration=0,
        )
        self._tests: list[TestRecord] = []
        self._start_time: float | None = None

    @property
    def report(self) -> EvidenceReport:
        """The report as recorded so far."""
        return EvidenceReport(metadata=self._metadata.model_copy(), tests=list(self._tests))

    def begin(self) -> None:
        """Start the run clock and make sure the output directory exists."""
        self._start_time = time.monotonic()
        self.output_dir.mkdir(parents=True, exist_ok=True)
        logger.info("Recording API evidence to %s", self.output_dir)

    def record_test(
        self,
        test_id: str,
        title: str,
        file: str,
        status: TestStatus | str,
        api_calls: list[ApiCallRecord | dict[str, Any]] | None = None,
        duration: float = 0,
        errors: list[str] | None = None,
    ) -> TestRecord:
        """Add one finished test to the report.

        Call payloads given as dicts are validated; invalid ones are logged
        and dropped so one bad capture does not lose the whole test.
        """
        calls: list[ApiCallRecord] = []
        for call in api_calls or []:
            if isinstance(call, ApiCallRecord):
                calls.append(call)
                continue
            try:
                calls.append(ApiCallRecord.model_validate(call))
            except ValidationError as e:
                logger.error("Failed to parse API call data for %r: %s", title, e)

        fields: dict[str, Any] = {"errors": errors} if errors else {}
        test = TestRecord(
            test_id=test_id,
            test_title=title,
            test_file=file,
            status=TestStatus(status),
            duration=duration,
            api_calls=calls,
            **fields,
        )
        self._tests.append(test)

        self._metadata.total_tests += 1
        if test.status == TestStatus.PASSED:
            self._metadata.passed_tests += 1
        elif test.status == TestStatus.FAILED:
            self._metadata.failed_tests += 1

        return test

    def end(self, now: datetime | None = None) -> RecordedPaths:
        """Finish the run and write the report, latest copy and summary."""
        if self._start_time is not None:
            self._metadata.duration = round((time.monotonic() - self._start_time) * 1000)

        report = self.report
        content = report.to_json()
        stamp = file_timestamp(now)

        self.output_dir.mkdir(parents=True, exist_ok=True)
        paths = RecordedPaths(
            report_path=self.output_dir / f"baseline-{stamp}.json",
            latest_path=self.output_dir / self.latest_name,
            summary_path=self.output_dir / f"summary-{stamp}.txt",
        )
        paths.report_path.write_text(content, encoding="utf-8")
        paths.latest_path.write_text(content, encoding="utf-8")
        paths.summary_path.write_text(
            render_evidence_summary(report, top=self.top_endpoints), encoding="utf-8"
        )

        logger.info(
            "Saved report %s (%d tests, %d API calls)",
            paths.report_path,
            report.metadata.total_tests,
            report.total_api_calls,
        )
        return paths
