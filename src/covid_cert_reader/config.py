"""
Configuration — typed, validated settings loaded from environment/.env.

Uses pydantic-settings so every knob can be set without touching the CLI:

  COVID_CERT_LOG_LEVEL      structlog filtering level (default WARNING)
  COVID_CERT_MARKER         context identifier stripped from the input (default "HC1:")
  COVID_CERT_OUTPUT_KEYS    "names" (field names) or "wire" (legacy wire keys)
  COVID_CERT_JSON_INDENT    indentation of the rendered JSON, unset for one line
  COVID_CERT_STRICT_CLAIMS  fail on absent CWT claims instead of zero-filling

Command-line flags take precedence; they are passed as init arguments.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve the .env file relative to the project root (two levels above this file).
_ENV_FILE = Path(__file__).parent.parent.parent / ".env"


class AppSettings(BaseSettings):
    """
    Root application settings.

    Load order (highest priority first):
      1. Init arguments (CLI flags)
      2. Environment variables
      3. .env file
      4. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="COVID_CERT_",
        env_file=_ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = Field(default="WARNING", description="Logging level name")
    marker: str = Field(default="HC1:", min_length=1, description="Context identifier prefix")
    output_keys: Literal["names", "wire"] = Field(default="names", description="JSON key style")
    json_indent: int | None = Field(default=2, ge=0, description="JSON indentation, None for compact")
    strict_claims: bool = Field(default=False, description="Reject payloads with absent CWT claims")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Accept only standard logging level names, case-insensitively."""
        level = value.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value!r}")
        return level
