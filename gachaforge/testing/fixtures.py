"""Pytest fixtures for GachaForge."""

from __future__ import annotations

import pytest

from ..app import GachaApp
from ..config import GachaConfig, StaffConfig


@pytest.fixture()
def memory_app() -> GachaApp:
    config = GachaConfig(bot_token="test", staff=StaffConfig(passphrase="staff-secret"))
    return GachaApp(config)


def app_fixture(bot_token: str = "test", **kwargs) -> GachaApp:
    """Helper for ad-hoc tests where pytest is not available."""
    app_kwargs = {
        key: kwargs.pop(key)
        for key in ("account_store", "record_store", "prize_table", "rng", "selector", "notices")
        if key in kwargs
    }
    config = GachaConfig(bot_token=bot_token, **kwargs)
    return GachaApp(config, **app_kwargs)
