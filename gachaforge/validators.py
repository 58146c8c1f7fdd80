"""Validation utilities for GachaForge applications."""

from __future__ import annotations

from .app import GachaApp
from .domain.prizes import FRAGMENT_500_ID, FRAGMENT_FREE_ID, PrizeCategory


def validate_app(app: GachaApp) -> list[str]:
    """Return list of validation errors discovered in configured app."""
    draw = app.config.draw
    errors = app.prize_table.problems(
        enforce_weight_sum=draw.enforce_weight_sum, tolerance=draw.weight_tolerance
    )

    for fragment_id in (FRAGMENT_500_ID, FRAGMENT_FREE_ID):
        prize = app.prize_table.find(fragment_id)
        if prize is None:
            errors.append(f"Reserved fragment prize '{fragment_id}' is missing from the catalogue.")
        elif prize.category != PrizeCategory.FRAGMENT:
            errors.append(f"Reserved prize '{fragment_id}' must use the FRAGMENT category.")

    for prize in app.prize_table:
        if prize.category == PrizeCategory.FRAGMENT and prize.prize_id not in (
            FRAGMENT_500_ID,
            FRAGMENT_FREE_ID,
        ):
            errors.append(
                f"Prize '{prize.prize_id}' is a FRAGMENT but no counter tracks it."
            )
        if prize.value < 0:
            errors.append(f"Prize '{prize.prize_id}' has negative value {prize.value}.")

    if app.settlement.cost_per_draw <= 0:
        errors.append("Draw configuration 'cost_per_draw' must be positive.")
    if draw.starting_points < 0:
        errors.append("Draw configuration 'starting_points' cannot be negative.")
    if draw.history_limit <= 0:
        errors.append("Draw configuration 'history_limit' must be positive.")
    if draw.fragment_set_size <= 0:
        errors.append("Draw configuration 'fragment_set_size' must be positive.")
    if not app.config.staff.passphrase:
        errors.append("Staff passphrase is not configured; staff login is disabled.")

    return errors


__all__ = ["validate_app"]
