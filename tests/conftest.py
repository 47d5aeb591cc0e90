"""Shared fixtures"""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from homeinspect.api.app import create_app
from homeinspect.domain.config import AppSettings, LimitsConfig, StorageConfig
from homeinspect.infrastructure.config.config_store import ConfigStore
from homeinspect.infrastructure.llm.mock import MockLLMProvider


@pytest.fixture
def settings(tmp_path) -> AppSettings:
    return AppSettings(
        storage=StorageConfig(
            config_path=str(tmp_path / "llm-config.json"),
            upload_dir=str(tmp_path / "uploads"),
        ),
        limits=LimitsConfig(context_max_chars=100, config_test_timeout=0.5),
    )


@pytest.fixture
def store(settings) -> ConfigStore:
    return ConfigStore(Path(settings.storage.config_path))


@pytest.fixture
def mock_provider() -> MockLLMProvider:
    return MockLLMProvider({"response": "Mock inspection report", "fragment_size": 4})


@pytest.fixture
def client(settings, store, mock_provider) -> TestClient:
    return TestClient(create_app(settings, store, mock_provider))
