"""Shared test fixtures."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from notestyle.config import Settings
from notestyle.llm.client import ClaudeClient
from notestyle.storage.database import dispose_engines
from notestyle.storage.samples import SampleLibrary
from notestyle.storage.store import JsonProfileStore
from notestyle.style.trainer import StyleTrainer

FIXED_NOW = datetime(2026, 3, 14, 9, 30, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _close_databases():
    yield
    dispose_engines()


@pytest.fixture
def tmp_data_dir(tmp_path: Path) -> Path:
    """Create a temporary data directory structure."""
    (tmp_path / "style_profiles").mkdir()
    return tmp_path


@pytest.fixture
def settings(tmp_data_dir: Path) -> Settings:
    """Create test settings with temporary paths."""
    return Settings(
        anthropic_api_key="test-key-not-real",
        model="claude-sonnet-4-20250514",
        max_tokens=512,
        temperature=0.7,
        db_path=tmp_data_dir / "test.db",
        profiles_dir=tmp_data_dir / "style_profiles",
    )


@pytest.fixture
def library(settings: Settings) -> SampleLibrary:
    return SampleLibrary(settings.db_path, settings.user_id)


@pytest.fixture
def trainer(settings: Settings, library: SampleLibrary) -> StyleTrainer:
    """A trainer on temporary storage with a frozen clock."""
    store = JsonProfileStore(settings.profiles_dir, settings.user_id)
    return StyleTrainer(store, library, clock=lambda: FIXED_NOW)


@pytest.fixture
def mock_claude_client(settings: Settings) -> ClaudeClient:
    """Create a ClaudeClient with a mocked Anthropic SDK."""
    client = ClaudeClient(settings)
    client._client = MagicMock()
    return client


def make_mock_response(text: str, input_tokens: int = 100, output_tokens: int = 200):
    """Helper to create a mock Anthropic API response."""
    mock_response = MagicMock()
    mock_response.content = [MagicMock(text=text)]
    mock_response.usage.input_tokens = input_tokens
    mock_response.usage.output_tokens = output_tokens
    return mock_response
