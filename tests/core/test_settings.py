import os
import subprocess
import sys
from pathlib import Path

import pytest
from pydantic import ValidationError
from lru_ttl_cache.core.settings import Settings, LogLevel, get_settings

SRC_DIR = Path(__file__).resolve().parents[2] / "src"


def test_settings_load_defaults(monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("CACHE__TTL_MS", raising=False)
    monkeypatch.delenv("CACHE__ITEM_LIMIT", raising=False)

    settings = Settings(_env_file=None)
    assert settings.log_level == LogLevel.INFO
    assert settings.log_file is None
    assert settings.cache.ttl_ms == 60_000
    assert settings.cache.item_limit == 1000
    assert settings.cache.background_sweep is True


def test_settings_env_override(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("CACHE__TTL_MS", "2500")
    monkeypatch.setenv("CACHE__ITEM_LIMIT", "64")
    monkeypatch.setenv("CACHE__BACKGROUND_SWEEP", "false")

    settings = Settings(_env_file=None)
    assert settings.log_level == LogLevel.DEBUG
    assert settings.cache.ttl_ms == 2500
    assert settings.cache.item_limit == 64
    assert settings.cache.background_sweep is False


def test_unprefixed_cache_vars_are_ignored(monkeypatch):
    monkeypatch.setenv("ITEM_LIMIT", "0")
    monkeypatch.setenv("TTL_MS", "nope")
    monkeypatch.setenv("BACKGROUND_SWEEP", "maybe")
    monkeypatch.setenv("APP_ENV", "development")

    settings = Settings(_env_file=None)
    assert settings.cache.item_limit == 1000
    assert settings.cache.ttl_ms == 60_000


def test_invalid_item_limit(monkeypatch):
    monkeypatch.setenv("CACHE__ITEM_LIMIT", "0")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_invalid_ttl(monkeypatch):
    monkeypatch.setenv("CACHE__TTL_MS", "not_an_int")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_get_settings_is_cached():
    get_settings.cache_clear()
    try:
        assert get_settings() is get_settings()
    finally:
        get_settings.cache_clear()


@pytest.mark.parametrize(
    "env",
    [
        {"LOG_LEVEL": "bogus"},
        {"APP_ENV": "development"},
        {"ITEM_LIMIT": "0"},
        {"CACHE__ITEM_LIMIT": "0"},
    ],
)
def test_import_does_not_read_environment(env, tmp_path):
    code = (
        "from lru_ttl_cache import LRUCache\n"
        "with LRUCache(ttl=1000, item_limit=2, background_sweep=False) as c:\n"
        "    c.set('a', 1)\n"
        "    assert c.get('a') == 1\n"
    )
    result = subprocess.run(
        [sys.executable, "-c", code],
        env={**os.environ, **env, "PYTHONPATH": os.pathsep.join(filter(None, [str(SRC_DIR), os.environ.get("PYTHONPATH")]))},
        cwd=tmp_path,
        capture_output=True,
        text=True,
        timeout=60,
    )
    assert result.returncode == 0, result.stderr
