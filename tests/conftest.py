from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from pixeltune.config import AppConfig
from pixeltune.main import create_app
from pixeltune.media.media_store import MediaStore


@pytest.fixture()
def app_config(tmp_path: Path) -> AppConfig:
    return AppConfig(
        upload_dir=tmp_path / "uploads",
        processed_dir=tmp_path / "processed",
        sweep_enabled=False,
        rate_limit_max_requests=1_000,
        log_json=False,
    )


@pytest.fixture()
def media_store(app_config: AppConfig) -> MediaStore:
    store = MediaStore(app_config.media_paths)
    store.ensure_structure()
    return store


@pytest.fixture()
def client(app_config: AppConfig) -> TestClient:
    return TestClient(create_app(app_config))
