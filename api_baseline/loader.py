"""Evidence report loader and validator."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from api_baseline.errors import MalformedReportError, NotFoundError
from api_baseline.types import EvidenceReport

logger = logging.getLogger(__name__)


def _format_validation_errors(exc: ValidationError) -> list[str]:
    errors = []
    for error in exc.errors():
        loc = ".".join(str(l) for l in error["loc"])
        errors.append(f"{loc}: {error['msg']}")
    return errors


def _read_json(path: Path) -> Any:
    if not path.is_file():
        raise NotFoundError(path)

    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise MalformedReportError(path, [f"JSON syntax error: {e}"]) from e
    except UnicodeDecodeError as e:
        raise MalformedReportError(path, [f"File is not UTF-8 text: {e}"]) from e


def parse_report(data: Any, source: Path | str = "<memory>") -> EvidenceReport:
    """Build an EvidenceReport from already-decoded JSON.

    Raises:
        MalformedReportError: If the data does not match the report shape
    """
    if not isinstance(data, dict):
        raise MalformedReportError(source, ["Report must be a JSON object"])

    try:
        return EvidenceReport.model_validate(data)
    except ValidationError as e:
        raise MalformedReportError(source, _format_validation_errors(e)) from e


def load_report(path: Path | str) -> EvidenceReport:
    """Load an evidence report from a JSON file.

    Args:
        path: Path to the report file

    Returns:
        The parsed report. Unknown fields are preserved on the models.

    Raises:
        NotFoundError: If the file does not exist
        MalformedReportError: If the file is not valid JSON or not a report
    """
    path = Path(path)
    data = _read_json(path)
    report = parse_report(data, source=path)
    logger.debug(
        "Loaded report %s (%d tests, %d API calls)",
        path,
        len(report.tests),
        report.total_api_calls,
    )
    return report


def validate_report(path: Path | str) -> list[str]:
    """Validate a report file.

    Args:
        path: Path to the report file

    Returns:
        List of validation errors (empty if valid)
    """
    try:
        load_report(path)
    except NotFoundError as e:
        return [str(e)]
    except MalformedReportError as e:
        return e.errors
    return []


def list_reports(dir_path: Path | str) -> list[Path]:
    """List JSON report files in a directory, newest name last.

    Args:
        dir_path: Directory holding recorded reports

    Returns:
        Sorted list of report paths (empty if the directory is missing)
    """
    dir_path = Path(dir_path)
    if not dir_path.is_dir():
        return []
    return sorted(p for p in dir_path.glob("*.json") if p.is_file())
