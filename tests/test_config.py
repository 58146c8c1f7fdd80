import pytest

from gachaforge.config import GachaConfig, StorageConfig


def test_defaults():
    config = GachaConfig()
    assert config.storage.backend == "memory"
    assert config.draw.cost_per_draw == 30
    assert config.draw.starting_points == 300
    assert config.draw.fragment_set_size == 3


def test_from_env(monkeypatch):
    monkeypatch.setenv("GACHAFORGE_BOT_TOKEN", "123:abc")
    monkeypatch.setenv("GACHAFORGE_STORAGE_BACKEND", "sqlalchemy")
    monkeypatch.setenv("GACHAFORGE_STORAGE_DSN", "sqlite+aiosqlite:///tmp/x.db")
    monkeypatch.setenv("GACHAFORGE_STORAGE_ECHO_SQL", "yes")
    monkeypatch.setenv("GACHAFORGE_STAFF_PASSPHRASE", "hunter2")
    monkeypatch.setenv("GACHAFORGE_DRAW_COST", "25")
    monkeypatch.setenv("GACHAFORGE_DRAW_STARTING_POINTS", "150")
    monkeypatch.setenv("GACHAFORGE_DRAW_ENFORCE_WEIGHT_SUM", "false")
    monkeypatch.setenv("GACHAFORGE_RNG_SEED", "99")
    monkeypatch.setenv("GACHAFORGE_LOG_LEVEL", "debug")

    config = GachaConfig.from_env()

    assert config.bot_token == "123:abc"
    assert config.storage.backend == "sqlalchemy"
    assert config.storage.resolve_dsn() == "sqlite+aiosqlite:///tmp/x.db"
    assert config.storage.echo_sql is True
    assert config.staff.passphrase == "hunter2"
    assert config.draw.cost_per_draw == 25
    assert config.draw.starting_points == 150
    assert config.draw.enforce_weight_sum is False
    assert config.rng_seed == 99
    assert config.log_level == "DEBUG"


def test_from_env_rejects_unknown_backend(monkeypatch):
    monkeypatch.setenv("GACHAFORGE_STORAGE_BACKEND", "supabase")
    with pytest.raises(ValueError):
        GachaConfig.from_env()


def test_resolve_dsn():
    assert StorageConfig().resolve_dsn() is None
    assert StorageConfig(backend="sqlalchemy").resolve_dsn() == "sqlite+aiosqlite:///./gachaforge.db"
    assert StorageConfig(backend="offline").resolve_dsn() is None
