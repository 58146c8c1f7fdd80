"""Configuration models for GachaForge."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Literal

from .domain.prizes import DEFAULT_COST_PER_DRAW
from .domain.session import DEFAULT_STARTING_POINTS


StorageBackend = Literal["memory", "sqlalchemy", "offline"]

_TRUTHY = {"1", "true", "yes"}


@dataclass(slots=True)
class StorageConfig:
    """Configure where accounts and draw records are persisted.

    ``offline`` means no store is configured: nothing is saved and every
    surface shows it.
    """

    backend: StorageBackend = "memory"
    dsn: str | None = None
    echo_sql: bool = False

    def resolve_dsn(self) -> str | None:
        if self.dsn:
            return self.dsn
        if self.backend == "sqlalchemy":
            return "sqlite+aiosqlite:///./gachaforge.db"
        return None


@dataclass(slots=True)
class StaffConfig:
    passphrase: str = field(default="", repr=False)


@dataclass(slots=True)
class DrawConfig:
    """Rules controlling the cost and bookkeeping of draws."""

    cost_per_draw: int = DEFAULT_COST_PER_DRAW
    starting_points: int = DEFAULT_STARTING_POINTS
    history_limit: int = 10
    fragment_set_size: int = 3
    enforce_weight_sum: bool = True
    weight_tolerance: float = 1e-6
    catalog_path: str | None = None


@dataclass(slots=True)
class GachaConfig:
    """Top-level configuration container."""

    bot_token: str = ""
    storage: StorageConfig = field(default_factory=StorageConfig)
    staff: StaffConfig = field(default_factory=StaffConfig)
    draw: DrawConfig = field(default_factory=DrawConfig)
    rng_seed: int | None = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "GachaConfig":
        """Create config from environment variables prefixed with GACHAFORGE_."""
        prefix = "GACHAFORGE_"
        storage_backend = os.getenv(f"{prefix}STORAGE_BACKEND", "memory")
        if storage_backend not in {"memory", "sqlalchemy", "offline"}:
            raise ValueError(f"Unsupported {prefix}STORAGE_BACKEND '{storage_backend}'")
        dsn = os.getenv(f"{prefix}STORAGE_DSN")
        echo_sql = os.getenv(f"{prefix}STORAGE_ECHO_SQL", "false").lower() in _TRUTHY

        draw_config = DrawConfig(
            cost_per_draw=int(os.getenv(f"{prefix}DRAW_COST", str(DEFAULT_COST_PER_DRAW))),
            starting_points=int(
                os.getenv(f"{prefix}DRAW_STARTING_POINTS", str(DEFAULT_STARTING_POINTS))
            ),
            history_limit=int(os.getenv(f"{prefix}DRAW_HISTORY_LIMIT", "10")),
            fragment_set_size=int(os.getenv(f"{prefix}DRAW_FRAGMENT_SET_SIZE", "3")),
            enforce_weight_sum=os.getenv(f"{prefix}DRAW_ENFORCE_WEIGHT_SUM", "true").lower()
            in _TRUTHY,
            catalog_path=os.getenv(f"{prefix}DRAW_CATALOG_PATH") or None,
        )

        return cls(
            bot_token=os.getenv(f"{prefix}BOT_TOKEN", ""),
            storage=StorageConfig(backend=storage_backend, dsn=dsn, echo_sql=echo_sql),
            staff=StaffConfig(passphrase=os.getenv(f"{prefix}STAFF_PASSPHRASE", "")),
            draw=draw_config,
            rng_seed=(
                int(os.getenv(f"{prefix}RNG_SEED")) if os.getenv(f"{prefix}RNG_SEED") else None
            ),
            log_level=os.getenv(f"{prefix}LOG_LEVEL", "INFO").upper(),
        )
