from __future__ import annotations

import pytest

from blepanel.config import ScanningConfig, Settings, get_settings, write_settings


@pytest.fixture(autouse=True)
def _isolate_settings_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("BLEPANEL_CONFIG", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def fast_settings() -> Settings:
    return Settings(scanning=ScanningConfig(duration=0.05, auto_start=False))


@pytest.fixture
def config_env(tmp_path, monkeypatch: pytest.MonkeyPatch):
    path = tmp_path / "config.toml"
    write_settings(Settings(scanning=ScanningConfig(duration=0.05)), path)
    monkeypatch.setenv("BLEPANEL_CONFIG", str(path))
    get_settings.cache_clear()
    return path
