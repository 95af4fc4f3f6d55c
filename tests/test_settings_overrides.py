from __future__ import annotations

from datastore.sql_store import build_default_store
from services.temperatures import build_default_service
from settings import get_settings


def _clear_caches() -> None:
    for cache in (get_settings, build_default_store, build_default_service):
        cache.cache_clear()


def test_environment_overrides_apply(monkeypatch, tmp_path) -> None:
    database_url = f"sqlite:///{tmp_path / 'custom.db'}"

    monkeypatch.setenv("TEMPS_DATABASE_URL", database_url)
    monkeypatch.setenv("TEMPS_BACKFILL_ON_STARTUP", "off")
    monkeypatch.setenv("TEMPS_RECENT_LIMIT", "25")
    monkeypatch.setenv("TEMPS_CORS_ORIGINS", "http://localhost:5173, http://localhost:3000")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    _clear_caches()

    try:
        settings = get_settings()
        service = build_default_service()

        assert settings.backfill_on_startup is False
        assert settings.cors_origins == ("http://localhost:5173", "http://localhost:3000")
        assert settings.log_level == "DEBUG"
        assert service.recent_limit == 25
        assert service.store is build_default_store()
        assert service.store.url == database_url
    finally:
        _clear_caches()


def test_invalid_values_fall_back_to_defaults(monkeypatch) -> None:
    monkeypatch.setenv("TEMPS_DATABASE_URL", "   ")
    monkeypatch.setenv("TEMPS_BACKFILL_ON_STARTUP", "maybe")
    monkeypatch.setenv("TEMPS_RECENT_LIMIT", "-4")
    monkeypatch.setenv("TEMPS_CORS_ORIGINS", " , ")
    get_settings.cache_clear()

    try:
        settings = get_settings()

        assert settings.database_url == "sqlite:///./tmp/temperatures.db"
        assert settings.backfill_on_startup is True
        assert settings.recent_limit == 100
        assert settings.cors_origins == ("*",)
    finally:
        get_settings.cache_clear()
