"""Example: run the prize-draw bot with a custom catalogue and SQLite storage."""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from random import Random

from gachaforge import GachaApp, GachaConfig
from gachaforge.cli import run_bot
from gachaforge.diagnostics import DrawSimulator


def build_config() -> GachaConfig:
    config = GachaConfig.from_env()
    config.draw.catalog_path = str(Path(__file__).with_name("catalog") / "prizes.json")
    if config.storage.backend == "memory":
        config.storage.backend = "sqlalchemy"
        config.storage.dsn = "sqlite+aiosqlite:///./kiosk.db"
    return config


def simulate() -> None:
    app = GachaApp(build_config())
    result = DrawSimulator(
        app.prize_table, cost_per_draw=app.settlement.cost_per_draw, rng=Random(7)
    ).simulate(pulls=1000)
    print(f"Spent {result.points_spent} points, {result.points_refunded} refunded as points")


def main() -> None:
    parser = argparse.ArgumentParser(description="Kiosk prize-draw bot")
    parser.add_argument(
        "--simulate", action="store_true", help="Simulate 1000 draws instead of starting the bot"
    )
    args = parser.parse_args()
    if args.simulate:
        simulate()
    else:
        asyncio.run(run_bot(build_config()))


if __name__ == "__main__":
    main()
