"""Load the prize catalogue from JSON definitions."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable

from ..domain.prizes import (
    DEFAULT_COST_PER_DRAW,
    EXPECTED_WEIGHT_SUM,
    PrizeCategory,
    PrizeDefinition,
    PrizeTable,
    Rarity,
)
from ..exceptions import ConfigurationError


@dataclass(slots=True)
class CatalogDefinition:
    table: PrizeTable
    cost_per_draw: int | None = None


def load_prize_table(path: str | Path) -> CatalogDefinition:
    """Read and parse a catalogue JSON file."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Cannot read prize catalogue {path}: {exc}") from exc
    return parse_catalog_dict(data)


def parse_catalog_dict(data: dict[str, Any]) -> CatalogDefinition:
    """Parse a JSON dict (already decoded) into domain objects."""
    errors = validate_catalog_dict(data)
    if errors:
        raise ConfigurationError(_format_errors("Catalog validation failed", errors))
    prizes = tuple(parse_prize(entry) for entry in data["prizes"])
    return CatalogDefinition(
        table=PrizeTable(prizes),
        cost_per_draw=int(data["costPerDraw"]) if "costPerDraw" in data else None,
    )


def parse_prize(entry: dict[str, Any]) -> PrizeDefinition:
    return PrizeDefinition(
        prize_id=entry["id"],
        name=entry["name"],
        category=PrizeCategory(entry["category"].upper()),
        value=int(entry.get("value", 0)),
        weight=float(entry["weight"]),
        rarity=Rarity[entry.get("rarity", "common").upper()],
        description=entry.get("description", ""),
    )


def dump_catalog_dict(table: PrizeTable, cost_per_draw: int = DEFAULT_COST_PER_DRAW) -> dict[str, Any]:
    return {
        "costPerDraw": cost_per_draw,
        "prizes": [
            {
                "id": prize.prize_id,
                "name": prize.name,
                "category": prize.category.value,
                "value": prize.value,
                "weight": prize.weight,
                "rarity": prize.rarity.label,
                "description": prize.description,
            }
            for prize in table
        ],
    }


def validate_catalog_file(path: str | Path) -> list[str]:
    """Validate catalogue JSON file and return a list of errors."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return validate_catalog_dict(data)


def validate_catalog_dict(data: dict[str, Any], *, enforce_weight_sum: bool = True) -> list[str]:
    errors: list[str] = []
    if not isinstance(data, dict):
        return ["Catalog must be a JSON object."]

    cost = data.get("costPerDraw", DEFAULT_COST_PER_DRAW)
    if not isinstance(cost, int) or isinstance(cost, bool) or cost <= 0:
        errors.append(f"Catalog 'costPerDraw' must be a positive integer, got '{cost}'.")

    prizes_raw = data.get("prizes")
    if not isinstance(prizes_raw, list) or not prizes_raw:
        errors.append("Catalog must contain non-empty 'prizes' array.")
        return errors

    prize_ids: set[str] = set()
    total_weight = 0.0
    categories = {category.value for category in PrizeCategory}
    rarities = {rarity.label for rarity in Rarity}
    for idx, entry in enumerate(prizes_raw, start=1):
        if not isinstance(entry, dict):
            errors.append(f"Prize #{idx} must be an object.")
            continue
        prize_id = entry.get("id")
        if not isinstance(prize_id, str) or not prize_id.strip():
            errors.append(f"Prize #{idx} must define non-empty 'id'.")
            continue
        if prize_id in prize_ids:
            errors.append(f"Prize id '{prize_id}' defined multiple times.")
        prize_ids.add(prize_id)

        name = entry.get("name")
        if not isinstance(name, str) or not name.strip():
            errors.append(f"Prize '{prize_id}' must define non-empty 'name'.")

        category = entry.get("category")
        if not isinstance(category, str) or category.upper() not in categories:
            errors.append(f"Prize '{prize_id}' has invalid category '{category}'.")

        rarity = entry.get("rarity", "common")
        if not isinstance(rarity, str) or rarity.lower() not in rarities:
            errors.append(f"Prize '{prize_id}' has invalid rarity '{rarity}'.")

        value = entry.get("value", 0)
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            errors.append(f"Prize '{prize_id}' 'value' must be non-negative integer.")

        weight = entry.get("weight")
        if not isinstance(weight, (int, float)) or isinstance(weight, bool) or weight < 0:
            errors.append(f"Prize '{prize_id}' has invalid 'weight' value '{weight}'.")
        else:
            total_weight += float(weight)

    if total_weight <= 0:
        errors.append("Prize weights must sum to a positive number.")
    elif enforce_weight_sum and abs(total_weight - EXPECTED_WEIGHT_SUM) > 1e-6:
        errors.append(f"Prize weights sum to {total_weight:g}, expected {EXPECTED_WEIGHT_SUM:g}.")
    return errors


def _format_errors(prefix: str, errors: Iterable[str]) -> str:
    formatted = "\n".join(f"- {err}" for err in errors)
    return f"{prefix}:\n{formatted}"
