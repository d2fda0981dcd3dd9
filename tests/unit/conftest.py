"""Shared test fixtures."""

from pathlib import Path

import pytest

from todoist_mirror.config import SyncConfig
from todoist_mirror.core.sync.engine import SyncEngine
from todoist_mirror.store import VaultStore
from tests.unit.fakes import TODAY, FakeClock, FakeTodoistApi


@pytest.fixture
def vault(tmp_path: Path) -> Path:
    root = tmp_path / "vault"
    root.mkdir()
    return root


@pytest.fixture
def store(vault: Path) -> VaultStore:
    return VaultStore(vault)


@pytest.fixture
def config(vault: Path) -> SyncConfig:
    return SyncConfig(vault_path=vault, api_token="test-token")


@pytest.fixture
def fake_api() -> FakeTodoistApi:
    return FakeTodoistApi()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(TODAY)


@pytest.fixture
def engine(
    config: SyncConfig, fake_api: FakeTodoistApi, store: VaultStore, clock: FakeClock
) -> SyncEngine:
    return SyncEngine(config, fake_api, store, clock)
