"""Plain-text and markdown rendering of reports and comparison results."""

from __future__ import annotations

import json
from collections import Counter
from typing import Any

from api_baseline.types import ComparisonResult, Difference, EvidenceReport, Severity

_RULE = "=" * 66

_SEVERITY_HEADINGS = {
    Severity.CRITICAL: "CRITICAL DIFFERENCES",
    Severity.WARNING: "WARNINGS",
    Severity.INFO: "INFORMATIONAL",
}


def _banner(title: str) -> list[str]:
    return [_RULE, f"  {title}", _RULE, ""]


def _json_value(value: Any) -> str:
    return json.dumps(value, default=str)


def _render_difference(index: int, diff: Difference) -> list[str]:
    label = "Test" if diff.endpoint is None and diff.test_title else "Endpoint"
    lines = [
        f"{index}. {diff.type.value.upper()}",
        f"   {label}: {diff.target}",
        f"   Details: {diff.details}",
    ]
    if diff.baseline is not None:
        lines.append(f"   Baseline: {_json_value(diff.baseline)}")
    if diff.current is not None:
        lines.append(f"   Current: {_json_value(diff.current)}")
    return lines


def render_text(result: ComparisonResult) -> str:
    """Render a comparison as a human-readable report, critical first."""
    summary = result.summary
    lines = _banner("API BASELINE COMPARISON REPORT")
    lines += [
        f"Comparison Date: {result.timestamp}",
        "",
        "SUMMARY:",
        f"   Total Differences: {summary.total_differences}",
        f"   Critical: {summary.critical_differences}",
        f"   Warnings: {summary.warning_differences}",
        f"   Info: {summary.info_differences}",
        "",
        "TEST STATISTICS:",
        f"   Baseline Tests: {summary.baseline_tests}",
        f"   Current Tests: {summary.current_tests}",
        f"   Baseline API Calls: {summary.baseline_api_calls}",
        f"   Current API Calls: {summary.current_api_calls}",
        "",
    ]

    if not result.differences:
        lines.append("No differences found! API behavior is consistent.")
        return "\n".join(lines) + "\n"

    for severity, heading in _SEVERITY_HEADINGS.items():
        diffs = result.by_severity(severity)
        if not diffs:
            continue
        lines += ["", f"{heading}:"]
        for i, diff in enumerate(diffs, start=1):
            lines.append("")
            lines += _render_difference(i, diff)

    return "\n".join(lines) + "\n"


def _md_cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")


def render_markdown(result: ComparisonResult) -> str:
    """Render a comparison as markdown for CI comments."""
    summary = result.summary
    if result.has_critical:
        status = "CRITICAL DIFFERENCES"
    elif result.has_warnings:
        status = "WARNINGS"
    else:
        status = "PASSED"

    lines = [
        "## API Baseline Comparison",
        "",
        f"**Status:** {status}",
        f"**Compared at:** {result.timestamp}",
        "",
        "| | Baseline | Current |",
        "|---|---:|---:|",
        f"| Tests | {summary.baseline_tests} | {summary.current_tests} |",
        f"| API calls | {summary.baseline_api_calls} | {summary.current_api_calls} |",
        "",
        f"Differences: {summary.total_differences} "
        f"({summary.critical_differences} critical, "
        f"{summary.warning_differences} warning, "
        f"{summary.info_differences} info)",
    ]

    for severity, heading in _SEVERITY_HEADINGS.items():
        diffs = result.by_severity(severity)
        if not diffs:
            continue
        lines += [
            "",
            f"### {heading.title()}",
            "",
            "| Type | Target | Details |",
            "|------|--------|---------|",
        ]
        for diff in diffs:
            lines.append(
                f"| {diff.type.value} | {_md_cell(diff.target)} | {_md_cell(diff.details)} |"
            )

    return "\n".join(lines) + "\n"


def render_evidence_summary(report: EvidenceReport, top: int = 10) -> str:
    """Summarize a single evidence report.

    Shows test totals, the status code distribution and the most called
    endpoints.
    """
    meta = report.metadata
    total_calls = report.total_api_calls
    status_codes: Counter[int] = Counter()
    endpoints: Counter[str] = Counter()
    for test in report.tests:
        for call in test.api_calls:
            status_codes[call.status_code] += 1
            endpoints[call.endpoint_key] += 1

    lines = _banner("API BASELINE REPORT SUMMARY")
    lines.append(f"Timestamp: {meta.timestamp}")
    lines.append(f"Environment: {meta.environment}")
    if meta.duration is not None:
        lines.append(f"Duration: {meta.duration / 1000:.2f}s")
    lines += [
        "",
        "TEST RESULTS:",
        f"   Total Tests: {meta.total_tests}",
        f"   Passed: {meta.passed_tests}",
        f"   Failed: {meta.failed_tests}",
        "",
        "API CALLS:",
        f"   Total API Calls: {total_calls}",
        "",
        "STATUS CODE DISTRIBUTION:",
    ]
    for code, count in sorted(status_codes.items()):
        percentage = count / total_calls * 100
        lines.append(f"   {code}: {count} ({percentage:.1f}%)")

    lines += ["", "TOP ENDPOINTS:"]
    # most_common keeps first-seen order for ties
    for endpoint, count in endpoints.most_common(top):
        lines.append(f"   {count}x - {endpoint}")

    return "\n".join(lines) + "\n"
