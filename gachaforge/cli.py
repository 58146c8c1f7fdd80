"""Command line helpers for GachaForge."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from random import Random

from rich.console import Console
from rich.table import Table

from .app import GachaApp
from .config import GachaConfig
from .diagnostics.draw_simulator import DrawSimulator
from .domain.notices import Severity
from .exceptions import ConfigurationError
from .loaders import validate_catalog_file
from .log import configure_logging
from .validators import validate_app

console = Console()


def _build_app(catalog: str | None) -> GachaApp:
    config = GachaConfig.from_env()
    if catalog:
        config.draw.catalog_path = catalog
    configure_logging(config.log_level, console=console)
    try:
        return GachaApp(config)
    except ConfigurationError as exc:
        console.print(f"[bold red]Configuration error:[/bold red] {exc}")
        sys.exit(1)


def run_simulator() -> None:
    parser = argparse.ArgumentParser(description="GachaForge prize table simulator")
    parser.add_argument("--catalog", help="Path to catalogue JSON (defaults to built-in table)")
    parser.add_argument("--pulls", type=int, default=10000, help="Number of draws to simulate")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    args = parser.parse_args()

    app = _build_app(args.catalog)
    simulator = DrawSimulator(
        app.prize_table,
        cost_per_draw=app.settlement.cost_per_draw,
        rng=Random(args.seed),
    )
    result = simulator.simulate(pulls=args.pulls)

    table = Table(title=f"{result.pulls} simulated draws")
    table.add_column("Prize")
    table.add_column("Category")
    table.add_column("Weight %", justify="right")
    table.add_column("Observed %", justify="right")
    for prize in app.prize_table:
        table.add_row(
            prize.name,
            prize.category.value,
            f"{prize.weight:.2f}",
            f"{result.frequency(prize.prize_id) * 100:.2f}",
        )
    console.print(table)
    console.print(f"Points spent: {result.points_spent}, refunded as points: {result.points_refunded}")
    for category, amount in sorted(result.payout_by_category.items()):
        console.print(f"  {category}: {amount}")
    console.print(
        f"Chi-square: {result.chi_square:.2f} with {result.degrees_of_freedom} degrees of freedom"
    )


def run_validate() -> None:
    parser = argparse.ArgumentParser(description="GachaForge validator")
    parser.add_argument("--catalog", help="Path to catalogue JSON file for validation")
    args = parser.parse_args()

    if args.catalog:
        errors = validate_catalog_file(Path(args.catalog))
        if errors:
            console.print("[bold red]Catalogue errors:[/bold red]")
            for err in errors:
                console.print(f"- {err}")
            sys.exit(1)

    app = _build_app(args.catalog)
    issues = validate_app(app)
    if issues:
        console.print("[bold red]Configuration issues:[/bold red]")
        for issue in issues:
            console.print(f"- {issue}")
        sys.exit(1)
    console.print("[bold green]Configuration is valid[/bold green]")


async def run_bot(config: GachaConfig | None = None) -> None:
    from aiogram import Bot, Dispatcher

    from .telegram import SessionRegistry, build_router, build_staff_notice_relay

    config = config or GachaConfig.from_env()
    configure_logging(config.log_level, console=console)
    if not config.bot_token:
        raise ConfigurationError("GACHAFORGE_BOT_TOKEN is not set")
    app = GachaApp(config)
    await app.init_backend()
    status = app.status()
    if status.banner:
        console.print(f"[bold yellow]{status.banner}[/bold yellow]")

    bot = Bot(config.bot_token)
    dp = Dispatcher()
    registry = SessionRegistry()
    dp.include_router(build_router(app, registry=registry))
    app.notices.subscribe(build_staff_notice_relay(bot, registry), min_severity=Severity.WARNING)
    console.print(
        f"[bold green]GachaForge ready![/bold green] "
        f"{len(app.prize_table)} prizes, {app.settlement.cost_per_draw} points per draw, "
        f"storage: {status.backend}"
    )
    try:
        await dp.start_polling(bot)
    finally:
        await app.close()


def run_bot_sync() -> None:
    """Synchronous wrapper for run_bot."""
    try:
        asyncio.run(run_bot())
    except ConfigurationError as exc:
        console.print(f"[bold red]Configuration error:[/bold red] {exc}")
        sys.exit(1)
