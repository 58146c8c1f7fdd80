from random import Random

import pytest

from gachaforge.domain.prizes import PrizeCategory, PrizeDefinition, default_prize_table
from gachaforge.domain.selector import WeightedSelector
from gachaforge.exceptions import ConfigurationError
from gachaforge.testing import ScriptedRandom


def _prize(prize_id: str, weight: float) -> PrizeDefinition:
    return PrizeDefinition(
        prize_id=prize_id,
        name=prize_id.title(),
        category=PrizeCategory.CASH,
        value=1,
        weight=weight,
    )


PRIZES = (
    _prize("first", 25.0),
    _prize("never", 0.0),
    _prize("third", 25.0),
    _prize("fourth", 50.0),
)


@pytest.mark.parametrize(
    ("uniform", "expected"),
    [
        (0.0, "first"),
        (0.2499, "first"),
        (0.25, "third"),  # boundary belongs to the next non-empty interval
        (0.4999, "third"),
        (0.5, "fourth"),
        (0.9999, "fourth"),
    ],
)
def test_cumulative_intervals(uniform, expected):
    selector = WeightedSelector(ScriptedRandom([uniform]))
    assert selector.select(PRIZES).prize_id == expected


def test_falls_back_to_first_entry_when_walk_is_exhausted():
    class EdgeRandom:
        def random(self) -> float:
            return 1.0

    selector = WeightedSelector(EdgeRandom())
    assert selector.select(PRIZES).prize_id == "first"


def test_zero_weight_is_never_selected():
    selector = WeightedSelector(Random(2024))
    picks = {selector.select(PRIZES).prize_id for _ in range(20000)}
    assert "never" not in picks
    assert picks == {"first", "third", "fourth"}


def test_empty_catalogue_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        WeightedSelector(Random(1)).select(())


def test_negative_weight_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        WeightedSelector(Random(1)).select((_prize("bad", -1.0), _prize("ok", 101.0)))


def test_all_zero_weights_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        WeightedSelector(Random(1)).select((_prize("a", 0.0), _prize("b", 0.0)))


def test_each_call_is_independent_of_previous_ones():
    table = default_prize_table()
    selector = WeightedSelector(ScriptedRandom([0.0, 0.0, 0.0]))
    picks = [selector.select(table.prizes).prize_id for _ in range(3)]
    assert picks == ["p_empty", "p_empty", "p_empty"]
