"""Configuration loading from environment variables with validation."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Anchor data paths to the project root (two levels up from the package)
_PROJECT_DIR = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="NOTESTYLE_",
        case_sensitive=False,
    )

    # Anthropic (loaded separately, no prefix)
    anthropic_api_key: str = ""

    # Model settings
    model: str = "claude-sonnet-4-20250514"
    max_tokens: int = 1024
    temperature: float = 0.7

    # Whose profile and samples the commands operate on
    user_id: str = "default"

    # Where the profile lives: a JSON file per user or a database row
    profile_backend: Literal["file", "database"] = "file"

    # Storage paths (absolute, anchored to the project root)
    db_path: Path = _PROJECT_DIR / "data" / "notestyle.db"
    profiles_dir: Path = _PROJECT_DIR / "data" / "style_profiles"

    # Sample library limits
    max_samples: int = 50
    min_sample_chars: int = 20


def get_settings() -> Settings:
    """Load settings from environment and .env file."""
    load_dotenv(_PROJECT_DIR / ".env")
    api_key = os.getenv("ANTHROPIC_API_KEY", "")
    return Settings(anthropic_api_key=api_key)
