"""API Baseline.

Records API request/response evidence from test runs and compares a baseline
run with a current run to surface behavioral drift after a deployment.

Example:
    ```python
    from api_baseline import compare_reports, load_report, render_text

    baseline = load_report("api-baseline-reports/baseline-before-deploy.json")
    current = load_report("api-baseline-reports/baseline-latest.json")

    result = compare_reports(baseline, current)
    print(render_text(result))

    if result.has_critical:
        raise SystemExit(1)
    ```

Command line:
    ```
    api-baseline compare before.json after.json
    api-baseline report summary after.json
    ```
"""

__version__ = "0.1.0"

from api_baseline.comparator import compare_reports
from api_baseline.errors import MalformedReportError, NotFoundError, ReportError
from api_baseline.loader import load_report, parse_report, validate_report
from api_baseline.recorder import EvidenceRecorder, RecordedPaths
from api_baseline.renderer import render_evidence_summary, render_markdown, render_text
from api_baseline.tracking import ApiCallTracker
from api_baseline.types import (
    ApiCallRecord,
    ComparisonResult,
    ComparisonSummary,
    Difference,
    DifferenceType,
    EvidenceReport,
    ReportMetadata,
    Severity,
    TestRecord,
    TestStatus,
)

__all__ = [
    "__version__",
    # Loading
    "load_report",
    "parse_report",
    "validate_report",
    "NotFoundError",
    "MalformedReportError",
    "ReportError",
    # Comparison
    "compare_reports",
    "render_text",
    "render_markdown",
    "render_evidence_summary",
    # Recording
    "EvidenceRecorder",
    "RecordedPaths",
    "ApiCallTracker",
    # Types
    "ApiCallRecord",
    "TestRecord",
    "TestStatus",
    "ReportMetadata",
    "EvidenceReport",
    "Difference",
    "DifferenceType",
    "Severity",
    "ComparisonSummary",
    "ComparisonResult",
]
