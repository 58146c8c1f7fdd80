from gachaforge.config import DrawConfig, StaffConfig
from gachaforge.domain.prizes import PrizeCategory, PrizeDefinition, PrizeTable, default_prize_table
from gachaforge.testing import app_fixture
from gachaforge.validators import validate_app


def _prize(prize_id, category, weight, value=0):
    return PrizeDefinition(prize_id=prize_id, name=prize_id, category=category, value=value, weight=weight)


def test_default_app_is_valid():
    app = app_fixture(staff=StaffConfig(passphrase="pw"))
    assert validate_app(app) == []


def test_missing_passphrase_is_reported():
    errors = validate_app(app_fixture())
    assert errors == ["Staff passphrase is not configured; staff login is disabled."]


def test_fragment_rules():
    table = PrizeTable(
        [
            _prize("p_empty", PrizeCategory.EMPTY, 50),
            _prize("p_frag_500", PrizeCategory.CASH, 25, value=500),
            _prize("p_frag_mystery", PrizeCategory.FRAGMENT, 25),
        ]
    )
    errors = validate_app(app_fixture(staff=StaffConfig(passphrase="pw"), prize_table=table))
    assert "Reserved fragment prize 'p_frag_free' is missing from the catalogue." in errors
    assert "Reserved prize 'p_frag_500' must use the FRAGMENT category." in errors
    assert "Prize 'p_frag_mystery' is a FRAGMENT but no counter tracks it." in errors


def test_draw_settings_are_checked():
    app = app_fixture(
        staff=StaffConfig(passphrase="pw"),
        draw=DrawConfig(starting_points=-1, history_limit=0, fragment_set_size=0),
    )
    errors = validate_app(app)
    assert len(errors) == 3
    assert any("starting_points" in error for error in errors)
    assert any("history_limit" in error for error in errors)
    assert any("fragment_set_size" in error for error in errors)


def test_default_table_problems_empty():
    assert default_prize_table().problems() == []
