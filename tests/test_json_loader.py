import json
from pathlib import Path

import pytest

from gachaforge.app import GachaApp
from gachaforge.config import GachaConfig
from gachaforge.domain.prizes import PrizeCategory, Rarity, default_prize_table
from gachaforge.exceptions import ConfigurationError
from gachaforge.loaders import (
    dump_catalog_dict,
    load_prize_table,
    parse_catalog_dict,
    validate_catalog_dict,
    validate_catalog_file,
)

CATALOG = Path(__file__).resolve().parents[1] / "examples" / "catalog" / "prizes.json"


def _catalog(**overrides):
    data = {
        "costPerDraw": 25,
        "prizes": [
            {"id": "p_empty", "name": "Nothing", "category": "empty", "weight": 60},
            {
                "id": "p_pt_10",
                "name": "10 points",
                "category": "POINT",
                "value": 10,
                "weight": 40,
                "rarity": "Rare",
                "description": "Refund",
            },
        ],
    }
    data.update(overrides)
    return data


def test_parse_catalog_dict_normalises_fields():
    definition = parse_catalog_dict(_catalog())
    assert definition.cost_per_draw == 25
    empty, points = definition.table.prizes
    assert empty.category is PrizeCategory.EMPTY
    assert empty.value == 0
    assert empty.rarity is Rarity.COMMON
    assert points.rarity is Rarity.RARE
    assert points.weight == 40.0
    assert points.description == "Refund"


def test_parse_catalog_dict_rejects_bad_weight_sum():
    data = _catalog()
    data["prizes"][0]["weight"] = 10
    with pytest.raises(ConfigurationError) as excinfo:
        parse_catalog_dict(data)
    assert "expected 100" in str(excinfo.value)


def test_validate_catalog_dict_reports_every_problem():
    data = {
        "costPerDraw": 0,
        "prizes": [
            {"id": "dup", "name": "A", "category": "CASH", "weight": 50, "value": -1},
            {"id": "dup", "name": "", "category": "LOOT", "weight": -5, "rarity": "mythic"},
            {"name": "no id", "category": "CASH", "weight": 1},
        ],
    }
    errors = validate_catalog_dict(data)
    joined = "\n".join(errors)
    assert "costPerDraw" in joined
    assert "defined multiple times" in joined
    assert "non-empty 'name'" in joined
    assert "invalid category 'LOOT'" in joined
    assert "invalid rarity 'mythic'" in joined
    assert "'value' must be non-negative" in joined
    assert "invalid 'weight'" in joined
    assert "non-empty 'id'" in joined


def test_validate_catalog_dict_requires_prizes():
    assert validate_catalog_dict({"prizes": []}) == ["Catalog must contain non-empty 'prizes' array."]
    assert validate_catalog_dict([]) == ["Catalog must be a JSON object."]


def test_weight_sum_check_can_be_disabled():
    data = _catalog()
    data["prizes"][0]["weight"] = 1
    assert validate_catalog_dict(data, enforce_weight_sum=False) == []


def test_dump_then_parse_preserves_default_table():
    table = default_prize_table()
    definition = parse_catalog_dict(dump_catalog_dict(table, 30))
    assert definition.table.prizes == table.prizes
    assert definition.cost_per_draw == 30


def test_load_prize_table_from_file(tmp_path):
    path = tmp_path / "prizes.json"
    path.write_text(json.dumps(_catalog()), encoding="utf-8")
    assert validate_catalog_file(path) == []
    definition = load_prize_table(path)
    assert [prize.prize_id for prize in definition.table] == ["p_empty", "p_pt_10"]


def test_configured_cost_survives_catalog_without_cost(tmp_path):
    data = _catalog()
    del data["costPerDraw"]
    path = tmp_path / "prizes.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    assert load_prize_table(path).cost_per_draw is None

    config = GachaConfig()
    config.draw.cost_per_draw = 50
    config.draw.catalog_path = str(path)
    app = GachaApp(config)

    assert app.settlement.cost_per_draw == 50
    assert config.draw.cost_per_draw == 50


def test_load_prize_table_errors(tmp_path):
    with pytest.raises(ConfigurationError):
        load_prize_table(tmp_path / "missing.json")
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_prize_table(broken)


def test_bundled_example_catalog_drives_app():
    config = GachaConfig()
    config.draw.catalog_path = str(CATALOG)
    app = GachaApp(config)
    assert app.settlement.cost_per_draw == 20
    assert app.prize_table.find("p_frag_500") is not None
    assert app.prize_table.total_weight == pytest.approx(100.0)
