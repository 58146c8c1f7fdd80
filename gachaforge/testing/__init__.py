"""Testing utilities for GachaForge."""

from .factory import AccountFactory, PrizeFactory, ScriptedRandom, ScriptedSelector
from .fixtures import app_fixture, memory_app
from .test_client import TestClient

__all__ = [
    "AccountFactory",
    "PrizeFactory",
    "ScriptedRandom",
    "ScriptedSelector",
    "app_fixture",
    "memory_app",
    "TestClient",
]
