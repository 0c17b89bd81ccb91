"""Pydantic settings loaded from YAML configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, SecretStr

from ela.core.types import KBItem

_settings: Settings | None = None

_DEFAULT_CONFIG_PATH = Path("config/settings.yaml")


class SummarizerConfig(BaseModel):
    """Summarizer selection and oracle resilience knobs."""

    provider: Literal["rule", "gemini"] = "rule"
    api_key: SecretStr = SecretStr("")
    model: str = ""
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    temperature: float = 0.2
    include_stack_lines: int = 6
    max_retries: int = 2
    timeout_secs: float = 15.0
    backoff_base_secs: float = 0.2
    rule_max_chars: int = 120


class KnowledgeBaseConfig(BaseModel):
    """Static knowledge-base entries."""

    include_defaults: bool = True
    entries: list[KBItem] = Field(default_factory=list)


class DatabaseConfig(BaseModel):
    """Relational store used by the persistence sink."""

    url: SecretStr = SecretStr("sqlite:///ela.db")
    echo: bool = False
    create_schema: bool = True


class SinksConfig(BaseModel):
    """Which sinks receive analysis results."""

    log: bool = True
    database: bool = False


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"
    # JSON-lines file for incident records, in addition to the root stream.
    incident_file: str | None = None


class Settings(BaseModel):
    """Root settings container."""

    summarizer: SummarizerConfig = SummarizerConfig()
    knowledge_base: KnowledgeBaseConfig = KnowledgeBaseConfig()
    database: DatabaseConfig = DatabaseConfig()
    sinks: SinksConfig = SinksConfig()
    logging: LoggingConfig = LoggingConfig()


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from a YAML file and cache globally.

    Args:
        path: Path to YAML config. Defaults to config/settings.yaml.

    Returns:
        Parsed Settings instance.
    """
    global _settings  # noqa: PLW0603

    config_path = Path(path) if path else _DEFAULT_CONFIG_PATH

    data: dict[str, Any] = {}
    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f)
            if isinstance(raw, dict):
                data = raw

    _settings = Settings(**data)
    return _settings


def get_settings() -> Settings:
    """Return the cached settings, loading defaults if not yet loaded."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Reset the cached settings (useful for testing)."""
    global _settings  # noqa: PLW0603
    _settings = None
