"""Tests for settings loading."""

from pathlib import Path

import pytest

from api_baseline.config import PROJECT_FILE, get_settings, load_project_config, reset_settings


def test_defaults():
    settings = get_settings()

    assert settings.reports_dir == Path("api-baseline-reports")
    assert settings.latest_report_path == Path("api-baseline-reports/baseline-latest.json")
    assert settings.comparisons_dir == Path("api-baseline-reports/comparisons")
    assert settings.top_endpoints == 10


def test_settings_are_cached():
    assert get_settings() is get_settings()


def test_environment_variables(monkeypatch):
    monkeypatch.setenv("API_BASELINE_REPORTS_DIR", "evidence")
    monkeypatch.setenv("API_BASELINE_TOP_ENDPOINTS", "3")
    reset_settings()

    settings = get_settings()

    assert settings.latest_report_path == Path("evidence/baseline-latest.json")
    assert settings.top_endpoints == 3


def test_project_file(tmp_path):
    (tmp_path / PROJECT_FILE).write_text(
        "reports_dir: recorded\nenvironment: https://qa-api.example.com\n"
    )

    settings = get_settings()

    assert settings.reports_dir == Path("recorded")
    assert settings.environment == "https://qa-api.example.com"


def test_environment_overrides_project_file(tmp_path, monkeypatch):
    (tmp_path / PROJECT_FILE).write_text("reports_dir: recorded\n")
    monkeypatch.setenv("API_BASELINE_REPORTS_DIR", "from-env")
    reset_settings()

    assert get_settings().reports_dir == Path("from-env")


def test_project_file_must_be_mapping(tmp_path):
    path = tmp_path / PROJECT_FILE
    path.write_text("- just\n- a list\n")

    with pytest.raises(ValueError, match="must be a mapping"):
        load_project_config(path)


def test_missing_project_file(tmp_path):
    assert load_project_config(tmp_path / "missing.yaml") == {}
