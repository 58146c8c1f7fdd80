"""GachaForge public API."""

from .app import GachaApp
from .config import GachaConfig

__all__ = [
    "GachaApp",
    "GachaConfig",
]
