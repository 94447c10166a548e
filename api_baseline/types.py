"""API Baseline Types.

Core types for evidence reports and baseline comparison results.

Field names follow the camelCase JSON produced by the evidence recorder;
Python attributes are snake_case and both spellings are accepted on input.
Unknown fields are kept on the model so that a loaded report can be written
back out without losing data added by newer recorders.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

# =============================================================================
# Evidence Types
# =============================================================================


class TestStatus(str, Enum):
    """Terminal status of a recorded test."""

    __test__ = False

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"
    TIMED_OUT = "timedOut"
    INTERRUPTED = "interrupted"


class ApiCallRecord(BaseModel):
    """One logged request/response pair."""

    method: str
    url: str
    status_code: int = Field(..., alias="statusCode")
    headers: dict[str, str] = Field(default_factory=dict)
    request_body: Any = Field(None, alias="requestBody")
    response_headers: dict[str, str] = Field(default_factory=dict, alias="responseHeaders")
    response_body: Any = Field(None, alias="responseBody")
    duration: float | None = None
    timestamp: str | None = None

    model_config = {"populate_by_name": True, "extra": "allow"}

    @property
    def endpoint_key(self) -> str:
        """Grouping key: literal method and URL, no path normalization."""
        return f"{self.method} {self.url}"


class TestRecord(BaseModel):
    """A single test and the API calls it made."""

    __test__ = False

    test_id: str = Field(..., alias="testId")
    test_title: str = Field(..., alias="testTitle")
    test_file: str = Field(..., alias="testFile")
    status: TestStatus
    duration: float | None = None
    api_calls: list[ApiCallRecord] = Field(..., alias="apiCalls")
    errors: list[str] | None = None

    model_config = {"populate_by_name": True, "extra": "allow"}


class ReportMetadata(BaseModel):
    """Run-level metadata of an evidence report."""

    timestamp: str
    environment: str
    base_url: str | None = Field(None, alias="baseUrl")
    total_tests: int = Field(..., alias="totalTests")
    passed_tests: int = Field(..., alias="passedTests")
    failed_tests: int = Field(..., alias="failedTests")
    duration: float | None = None

    model_config = {"populate_by_name": True, "extra": "allow"}


class EvidenceReport(BaseModel):
    """A captured test run: metadata plus every test and its API calls."""

    metadata: ReportMetadata
    tests: list[TestRecord]

    model_config = {"populate_by_name": True, "extra": "allow"}

    @property
    def total_api_calls(self) -> int:
        return sum(len(test.api_calls) for test in self.tests)

    def to_json(self, indent: int = 2) -> str:
        """Serialize using the camelCase wire names.

        Only fields that were set are written, so a loaded report keeps
        exactly the keys it arrived with, nulls included.
        """
        return self.model_dump_json(by_alias=True, exclude_unset=True, indent=indent)


# =============================================================================
# Comparison Types
# =============================================================================


class DifferenceType(str, Enum):
    """Kind of deviation between baseline and current."""

    STATUS_CODE = "status_code"
    RESPONSE_BODY = "response_body"
    NEW_ENDPOINT = "new_endpoint"
    MISSING_ENDPOINT = "missing_endpoint"
    TEST_STATUS = "test_status"


class Severity(str, Enum):
    """Operational importance of a difference."""

    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


class Difference(BaseModel):
    """One detected deviation."""

    type: DifferenceType
    severity: Severity
    endpoint: str | None = None
    test_title: str | None = Field(None, alias="testTitle")
    details: str
    baseline: Any = None
    current: Any = None

    model_config = {"populate_by_name": True, "frozen": True}

    @property
    def target(self) -> str:
        """Endpoint key or test title, whichever the difference is about."""
        return self.endpoint or self.test_title or "N/A"


class ComparisonSummary(BaseModel):
    """Aggregate counts for a comparison."""

    total_differences: int = Field(..., alias="totalDifferences")
    critical_differences: int = Field(..., alias="criticalDifferences")
    warning_differences: int = Field(..., alias="warningDifferences")
    info_differences: int = Field(..., alias="infoDifferences")
    baseline_tests: int = Field(..., alias="baselineTests")
    current_tests: int = Field(..., alias="currentTests")
    baseline_api_calls: int = Field(..., alias="baselineApiCalls")
    current_api_calls: int = Field(..., alias="currentApiCalls")

    model_config = {"populate_by_name": True, "frozen": True}


class ComparisonResult(BaseModel):
    """Outcome of comparing a baseline report with a current report."""

    summary: ComparisonSummary
    differences: list[Difference] = Field(default_factory=list)
    timestamp: str

    model_config = {"populate_by_name": True, "frozen": True}

    @property
    def has_critical(self) -> bool:
        return self.summary.critical_differences > 0

    @property
    def has_warnings(self) -> bool:
        return self.summary.warning_differences > 0

    def by_severity(self, severity: Severity) -> list[Difference]:
        """Differences of one severity, in detection order."""
        return [d for d in self.differences if d.severity == severity]

    def to_json(self, indent: int = 2) -> str:
        """Serialize using the camelCase wire names."""
        return self.model_dump_json(by_alias=True, exclude_unset=True, indent=indent)
