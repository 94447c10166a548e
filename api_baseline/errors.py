"""Errors raised while loading evidence reports."""

from __future__ import annotations

from pathlib import Path


class ReportError(Exception):
    """Base error for report loading failures."""

    exit_code: int = 1


class NotFoundError(ReportError):
    """The report source does not exist."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        super().__init__(f"Report file not found: {self.path}")


class MalformedReportError(ReportError):
    """The report is not valid JSON or does not match the report shape."""

    def __init__(self, path: Path | str, errors: list[str]):
        self.path = Path(path)
        self.errors = errors
        super().__init__(f"Invalid report file {self.path}:\n" + "\n".join(errors))
