"""
Configuration for the PharmaGuard core.
Centralizes the remote generation settings, reference data paths and
parser thresholds. Values are read from the environment (a .env file is
honoured) when the settings object is first built.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, ValidationError

# Load .env file (walks up directories to find it)
load_dotenv(find_dotenv())

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parent.parent / "data"
DEFAULT_FALLBACK_PATH = DATA_DIR / "fallback_explanations.json"


class Settings(BaseModel):
    """Deployment-time configuration. None of these are user-facing flags."""

    # Remote generation
    openai_api_key: str = Field(
        default="",
        description="Credential for the chat completion endpoint. Empty means offline fallback only."
    )

    openai_model: str = Field(
        default="gpt-3.5-turbo",
        description="Model identifier sent with every completion request"
    )

    openai_base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Base URL of an OpenAI-compatible API"
    )

    request_timeout: float = Field(
        default=30.0,
        gt=0.0,
        description="Timeout in seconds for the single remote completion call"
    )

    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for explanation generation"
    )

    max_tokens: int = Field(
        default=1000,
        gt=0,
        description="Completion token budget"
    )

    # Reference data
    fallback_explanations_path: str = Field(
        default=str(DEFAULT_FALLBACK_PATH),
        description="Path to the canned drug/phenotype explanation table (JSON)"
    )

    # Parser
    min_lines_for_failure: int = Field(
        default=20,
        ge=0,
        description="Inputs shorter than this are reported as successful even with zero variants"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Root log level used by the command-line entry points"
    )

    @property
    def llm_enabled(self) -> bool:
        return bool(self.openai_api_key)


def _settings_from_env() -> Settings:
    overrides = {}
    env_map = {
        "OPENAI_API_KEY": "openai_api_key",
        "OPENAI_MODEL": "openai_model",
        "OPENAI_BASE_URL": "openai_base_url",
        "PHARMAGUARD_LLM_TIMEOUT": "request_timeout",
        "PHARMAGUARD_FALLBACK_PATH": "fallback_explanations_path",
        "PHARMAGUARD_LOG_LEVEL": "log_level",
    }
    for env_name, field_name in env_map.items():
        value = os.environ.get(env_name)
        if not value:
            continue
        try:
            Settings(**{field_name: value.strip()})
        except ValidationError as e:
            logger.warning("Ignoring invalid %s=%r: %s", env_name, value, e.errors()[0]["msg"])
            continue
        overrides[field_name] = value.strip()
    return Settings(**overrides)


# Global configuration instance, built lazily
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = _settings_from_env()
    return _settings


def update_settings(**kwargs) -> Settings:
    """Update settings parameters."""
    global _settings
    current = get_settings().model_dump()
    current.update(kwargs)
    _settings = Settings(**current)
    return _settings


def reload_settings() -> Settings:
    """Re-read the environment (useful for testing)."""
    global _settings
    _settings = _settings_from_env()
    return _settings
