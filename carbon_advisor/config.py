"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local secrets and env overrides (gitignored)
  4. Environment variables        — ``CARBON_ADVISOR_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

CLI commands receive an ``AppConfig`` instance — never raw dicts or
individual env var lookups scattered through the codebase.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional
from urllib.parse import quote

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

from carbon_advisor.taxonomy.goal_taxonomy import GoalPath

# ── Sub-config models ─────────────────────────────────────────────────────────


class SourceConfig(BaseModel):
    """Where benchmark action records come from.

    The default source is the public results sheet, exported as CSV through
    the Google Visualization endpoint.  ``records_file`` points at a local CSV
    export instead and takes precedence when set.
    """

    model_config = ConfigDict(frozen=True)

    sheet_id: str = "1RH52lJntYqVS-WW9iVsqFxtN9uWJY7k4Noipt3Tn-qU"
    sheet_name: str = "結果總表"
    sheet_url: Optional[str] = None
    records_file: Optional[str] = None
    timeout_seconds: float = 30.0

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"timeout_seconds must be > 0, got {v}.")
        return v

    @property
    def export_url(self) -> str:
        """CSV export URL for the configured sheet (``sheet_url`` wins if set)."""
        if self.sheet_url:
            return self.sheet_url
        return (
            f"https://docs.google.com/spreadsheets/d/{self.sheet_id}"
            f"/gviz/tq?tqx=out:csv&sheet={quote(self.sheet_name)}"
        )


class RecommendConfig(BaseModel):
    """Matching engine presentation limits."""

    model_config = ConfigDict(frozen=True)

    no_goal_limit: int = 5
    alternatives_limit: int = 2
    default_path: GoalPath = GoalPath.CARBON

    @field_validator("no_goal_limit", "alternatives_limit")
    @classmethod
    def validate_limit(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"Limits must be >= 0, got {v}.")
        return v


class ProfileConfig(BaseModel):
    """Company profile validation rules used by the advisor flow."""

    model_config = ConfigDict(frozen=True)

    tax_id_length: int = 8
    phone_prefix: str = "09"
    phone_length: int = 10
    suggestion_limit: int = 10


class QuoteConfig(BaseModel):
    """Quote-request hand-off for a recommended measure.

    The quote service receives the company's industry and tax ID together
    with the measure and system as query parameters on ``base_url``.
    """

    model_config = ConfigDict(frozen=True)

    base_url: str = "https://rfq.netellus.com/rfq/create"
    source_tag: str = "netellus_ai"

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL, got '{v}'.")
        return v


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = ""
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration — the single source of truth.

    Constructed by ``load_config()`` which merges TOML + .env + environment.
    """

    model_config = ConfigDict(frozen=True)

    source: SourceConfig = SourceConfig()
    recommend: RecommendConfig = RecommendConfig()
    profile: ProfileConfig = ProfileConfig()
    quote: QuoteConfig = QuoteConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``; when that default file is
            absent the built-in defaults are used.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If an explicitly given ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    # 1. Load .env file (silently skip if missing)
    load_dotenv(dotenv_path=root / ".env", override=False)

    # 2. Load TOML config
    raw: dict[str, Any] = {}
    if config_path is None:
        default_path = root / "config" / "default.toml"
        if default_path.exists():
            raw = _read_toml(default_path)
        local_dir = default_path.parent
    else:
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        raw = _read_toml(config_path)
        local_dir = config_path.parent

    # Also merge local.toml if present (gitignored local overrides)
    local_config_path = local_dir / "local.toml"
    if local_config_path.exists():
        raw = _deep_merge(raw, _read_toml(local_config_path))

    # 3. Apply CARBON_ADVISOR_* environment variable overrides
    raw = _apply_env_overrides(raw)

    # 4. Build and validate AppConfig
    return _build_app_config(raw)


def _read_toml(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply CARBON_ADVISOR_* env vars to the raw config dict.

    Supported overrides:
      CARBON_ADVISOR_SHEET_URL     → raw["source"]["sheet_url"]
      CARBON_ADVISOR_RECORDS_FILE  → raw["source"]["records_file"]
      CARBON_ADVISOR_LOG_LEVEL     → raw["logging"]["level"]
      CARBON_ADVISOR_DEBUG         → raw["debug"]
    """
    if sheet_url := os.environ.get("CARBON_ADVISOR_SHEET_URL"):
        raw.setdefault("source", {})["sheet_url"] = sheet_url

    if records_file := os.environ.get("CARBON_ADVISOR_RECORDS_FILE"):
        raw.setdefault("source", {})["records_file"] = records_file

    if log_level := os.environ.get("CARBON_ADVISOR_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if debug := os.environ.get("CARBON_ADVISOR_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})

    return AppConfig(
        source=SourceConfig(**raw.get("source", {})),
        recommend=RecommendConfig(**raw.get("recommend", {})),
        profile=ProfileConfig(**raw.get("profile", {})),
        quote=QuoteConfig(**raw.get("quote", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
