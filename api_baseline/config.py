"""Tool configuration.

Settings come from, in order of precedence: explicit arguments, environment
variables (``API_BASELINE_*``), a ``.env`` file, then an optional
``.api-baseline.yaml`` project file in the working directory.
"""

import logging
import sys
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic_settings import (
    BaseSettings,
    InitSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

PROJECT_FILE = ".api-baseline.yaml"


def load_project_config(path: Path | None = None) -> dict[str, Any]:
    """Load the YAML project file, if present."""
    path = path or Path.cwd() / PROJECT_FILE
    if not path.is_file():
        return {}

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Project config must be a mapping: {path}")
    return data


class Settings(BaseSettings):
    """Tool settings."""

    model_config = SettingsConfigDict(
        env_prefix="API_BASELINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Report storage
    reports_dir: Path = Path("api-baseline-reports")
    latest_report_name: str = "baseline-latest.json"
    comparisons_subdir: str = "comparisons"

    # Recording
    environment: str = "local"
    base_url: str | None = None

    # Rendering
    top_endpoints: int = 10

    # Logging
    log_level: str = "WARNING"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        project_settings = InitSettingsSource(settings_cls, init_kwargs=load_project_config())
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            project_settings,
            file_secret_settings,
        )

    @property
    def latest_report_path(self) -> Path:
        return self.reports_dir / self.latest_report_name

    @property
    def comparisons_dir(self) -> Path:
        return self.reports_dir / self.comparisons_subdir


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    get_settings.cache_clear()


def configure_logging(verbose: bool = False) -> None:
    """Send log records to stderr. The first call wins."""
    level = logging.DEBUG if verbose else get_settings().log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
