"""Baseline comparison engine.

Compares a baseline evidence report with a current one and classifies every
deviation by severity. Comparison is a pure function of the two reports:
nothing is read or written here.

Two passes run in a fixed order so the output is deterministic:

1. Test statuses, joined by test title.
2. API calls, grouped by endpoint key (``METHOD URL``, no normalization).
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime
from typing import Any

from api_baseline.clock import utc_now_iso
from api_baseline.types import (
    ApiCallRecord,
    ComparisonResult,
    ComparisonSummary,
    Difference,
    DifferenceType,
    EvidenceReport,
    Severity,
    TestRecord,
    TestStatus,
)

logger = logging.getLogger(__name__)

EndpointMap = dict[str, list[ApiCallRecord]]


# =============================================================================
# Severity rules
# =============================================================================


def status_change_severity(current_status: TestStatus) -> Severity:
    """Severity of a test whose status changed to ``current_status``."""
    return Severity.CRITICAL if current_status == TestStatus.FAILED else Severity.WARNING


def status_code_severity(code: int) -> Severity:
    """Severity of a status code that appears only in the current report."""
    if code >= 500:
        return Severity.CRITICAL
    if code >= 400:
        return Severity.WARNING
    return Severity.INFO


# =============================================================================
# Indexing
# =============================================================================


def index_tests_by_title(report: EvidenceReport) -> dict[str, TestRecord]:
    """Map test title to record. On duplicate titles the later record wins."""
    index: dict[str, TestRecord] = {}
    for test in report.tests:
        if test.test_title in index:
            logger.warning(
                "Duplicate test title %r (ids %s, %s); keeping the later record",
                test.test_title,
                index[test.test_title].test_id,
                test.test_id,
            )
        index[test.test_title] = test
    return index


def build_endpoint_map(report: EvidenceReport) -> EndpointMap:
    """Group every API call in the report by endpoint key, in encounter order."""
    endpoints: EndpointMap = {}
    for test in report.tests:
        for call in test.api_calls:
            endpoints.setdefault(call.endpoint_key, []).append(call)
    return endpoints


def extract_field_paths(body: Any, prefix: str = "") -> list[str]:
    """Flatten a JSON value into dot-joined object key paths.

    Arrays contribute only the shape of their first element. Scalars and
    strings (including parse-failure sentinels) have no paths.
    """
    if isinstance(body, list):
        return extract_field_paths(body[0], prefix) if body else []
    if not isinstance(body, dict):
        return []

    paths = []
    for key, value in body.items():
        full_key = f"{prefix}.{key}" if prefix else str(key)
        paths.append(full_key)
        if isinstance(value, (dict, list)):
            paths.extend(extract_field_paths(value, full_key))
    return paths


def _distinct_status_codes(calls: list[ApiCallRecord]) -> list[int]:
    return list(dict.fromkeys(call.status_code for call in calls))


def _first_success(calls: list[ApiCallRecord]) -> ApiCallRecord | None:
    return next((c for c in calls if 200 <= c.status_code < 300), None)


def _join_codes(codes: list[int]) -> str:
    return ", ".join(str(code) for code in codes)


# =============================================================================
# Pass 1: test statuses
# =============================================================================


def compare_test_statuses(
    baseline: EvidenceReport, current: EvidenceReport
) -> list[Difference]:
    """Detect missing, changed and new tests."""
    baseline_tests = index_tests_by_title(baseline)
    current_tests = index_tests_by_title(current)
    differences: list[Difference] = []

    for title, baseline_test in baseline_tests.items():
        current_test = current_tests.get(title)

        if current_test is None:
            differences.append(
                Difference(
                    type=DifferenceType.TEST_STATUS,
                    severity=Severity.WARNING,
                    test_title=title,
                    details="Test missing in current report",
                    baseline=baseline_test.status.value,
                    current="missing",
                )
            )
        elif baseline_test.status != current_test.status:
            differences.append(
                Difference(
                    type=DifferenceType.TEST_STATUS,
                    severity=status_change_severity(current_test.status),
                    test_title=title,
                    details=(
                        f"Test status changed from {baseline_test.status.value} "
                        f"to {current_test.status.value}"
                    ),
                    baseline=baseline_test.status.value,
                    current=current_test.status.value,
                )
            )

    for title, current_test in current_tests.items():
        if title not in baseline_tests:
            differences.append(
                Difference(
                    type=DifferenceType.TEST_STATUS,
                    severity=Severity.INFO,
                    test_title=title,
                    details="New test added",
                    baseline="missing",
                    current=current_test.status.value,
                )
            )

    return differences


# =============================================================================
# Pass 2: API calls
# =============================================================================


def compare_status_codes(
    endpoint: str,
    baseline_calls: list[ApiCallRecord],
    current_calls: list[ApiCallRecord],
) -> list[Difference]:
    """Compare the sets of status codes seen for one endpoint."""
    baseline_codes = _distinct_status_codes(baseline_calls)
    current_codes = _distinct_status_codes(current_calls)
    differences: list[Difference] = []

    for code in baseline_codes:
        if code not in current_codes:
            differences.append(
                Difference(
                    type=DifferenceType.STATUS_CODE,
                    severity=Severity.CRITICAL,
                    endpoint=endpoint,
                    details=(
                        f"Status code {code} no longer returned "
                        f"(now returns: {_join_codes(current_codes)})"
                    ),
                    baseline=code,
                    current=current_codes,
                )
            )

    for code in current_codes:
        if code not in baseline_codes:
            differences.append(
                Difference(
                    type=DifferenceType.STATUS_CODE,
                    severity=status_code_severity(code),
                    endpoint=endpoint,
                    details=(
                        f"New status code {code} detected "
                        f"(baseline had: {_join_codes(baseline_codes)})"
                    ),
                    baseline=baseline_codes,
                    current=code,
                )
            )

    return differences


def compare_response_shapes(
    endpoint: str,
    baseline_calls: list[ApiCallRecord],
    current_calls: list[ApiCallRecord],
) -> list[Difference]:
    """Compare field paths of the first successful response on each side."""
    baseline_success = _first_success(baseline_calls)
    current_success = _first_success(current_calls)
    if baseline_success is None or current_success is None:
        return []

    baseline_paths = extract_field_paths(baseline_success.response_body)
    current_paths = extract_field_paths(current_success.response_body)
    baseline_set = set(baseline_paths)
    current_set = set(current_paths)
    differences: list[Difference] = []

    missing = [p for p in baseline_paths if p not in current_set]
    if missing:
        differences.append(
            Difference(
                type=DifferenceType.RESPONSE_BODY,
                severity=Severity.WARNING,
                endpoint=endpoint,
                details=f"Response missing fields: {', '.join(missing)}",
                baseline=missing,
                current="missing",
            )
        )

    added = [p for p in current_paths if p not in baseline_set]
    if added:
        differences.append(
            Difference(
                type=DifferenceType.RESPONSE_BODY,
                severity=Severity.INFO,
                endpoint=endpoint,
                details=f"Response has new fields: {', '.join(added)}",
                baseline="missing",
                current=added,
            )
        )

    return differences


def compare_api_calls(
    baseline_endpoints: EndpointMap, current_endpoints: EndpointMap
) -> list[Difference]:
    """Detect missing, changed and new endpoints."""
    differences: list[Difference] = []

    for endpoint, baseline_calls in baseline_endpoints.items():
        current_calls = current_endpoints.get(endpoint)

        if not current_calls:
            differences.append(
                Difference(
                    type=DifferenceType.MISSING_ENDPOINT,
                    severity=Severity.WARNING,
                    endpoint=endpoint,
                    details=(
                        "Endpoint not called in current report "
                        f"(was called {len(baseline_calls)} times in baseline)"
                    ),
                    baseline=len(baseline_calls),
                    current=0,
                )
            )
            continue

        differences.extend(compare_status_codes(endpoint, baseline_calls, current_calls))
        differences.extend(compare_response_shapes(endpoint, baseline_calls, current_calls))

    for endpoint, current_calls in current_endpoints.items():
        if endpoint not in baseline_endpoints:
            differences.append(
                Difference(
                    type=DifferenceType.NEW_ENDPOINT,
                    severity=Severity.INFO,
                    endpoint=endpoint,
                    details=f"New endpoint detected (called {len(current_calls)} times)",
                    baseline=0,
                    current=len(current_calls),
                )
            )

    return differences


# =============================================================================
# Entry point
# =============================================================================


def summarize(
    differences: list[Difference],
    baseline: EvidenceReport,
    current: EvidenceReport,
) -> ComparisonSummary:
    """Count differences by severity and collect run sizes."""
    counts = Counter(d.severity for d in differences)
    return ComparisonSummary(
        total_differences=len(differences),
        critical_differences=counts[Severity.CRITICAL],
        warning_differences=counts[Severity.WARNING],
        info_differences=counts[Severity.INFO],
        baseline_tests=baseline.metadata.total_tests,
        current_tests=current.metadata.total_tests,
        baseline_api_calls=baseline.total_api_calls,
        current_api_calls=current.total_api_calls,
    )


def compare_reports(
    baseline: EvidenceReport,
    current: EvidenceReport,
    now: datetime | None = None,
) -> ComparisonResult:
    """Compare two evidence reports.

    Args:
        baseline: Reference report captured before the change
        current: Report captured after the change
        now: Completion time to stamp on the result (defaults to now)

    Returns:
        A new ComparisonResult. Test status differences come first, then
        API call differences.
    """
    differences = compare_test_statuses(baseline, current)
    differences.extend(
        compare_api_calls(build_endpoint_map(baseline), build_endpoint_map(current))
    )

    summary = summarize(differences, baseline, current)
    logger.debug(
        "Comparison found %d differences (%d critical, %d warning, %d info)",
        summary.total_differences,
        summary.critical_differences,
        summary.warning_differences,
        summary.info_differences,
    )

    return ComparisonResult(
        summary=summary,
        differences=differences,
        timestamp=utc_now_iso(now),
    )
