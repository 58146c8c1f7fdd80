"""Prize definitions and the weighted prize table."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Iterable, Iterator, Sequence

from ..exceptions import ConfigurationError

FRAGMENT_500_ID = "p_frag_500"
FRAGMENT_FREE_ID = "p_frag_free"

EXPECTED_WEIGHT_SUM = 100.0


class PrizeCategory(str, Enum):
    EMPTY = "EMPTY"
    POINT = "POINT"
    CASH = "CASH"
    VOUCHER = "VOUCHER"
    PHYSICAL = "PHYSICAL"
    FRAGMENT = "FRAGMENT"

    @property
    def auto_settled(self) -> bool:
        return self in AUTO_SETTLED_CATEGORIES


AUTO_SETTLED_CATEGORIES = frozenset(
    {PrizeCategory.EMPTY, PrizeCategory.POINT, PrizeCategory.FRAGMENT}
)


class Rarity(IntEnum):
    COMMON = 1
    UNCOMMON = 2
    RARE = 3
    LEGENDARY = 4

    @property
    def label(self) -> str:
        return self.name.lower()


@dataclass(slots=True, frozen=True)
class PrizeDefinition:
    """Immutable catalogue entry.

    ``value`` depends on ``category``: points credited for POINT, the
    redeemable amount for CASH/VOUCHER, the nominal item value for PHYSICAL
    and 0 for EMPTY/FRAGMENT. ``weight`` is expressed in percentage points.
    """

    prize_id: str
    name: str
    category: PrizeCategory
    value: int
    weight: float
    rarity: Rarity = Rarity.COMMON
    description: str = ""


class PrizeTable:
    """Ordered, immutable catalogue of prizes."""

    def __init__(self, prizes: Iterable[PrizeDefinition]) -> None:
        self._prizes: tuple[PrizeDefinition, ...] = tuple(prizes)

    def __iter__(self) -> Iterator[PrizeDefinition]:
        return iter(self._prizes)

    def __len__(self) -> int:
        return len(self._prizes)

    @property
    def prizes(self) -> Sequence[PrizeDefinition]:
        return self._prizes

    @property
    def total_weight(self) -> float:
        return math.fsum(prize.weight for prize in self._prizes)

    def get(self, prize_id: str) -> PrizeDefinition:
        for prize in self._prizes:
            if prize.prize_id == prize_id:
                return prize
        raise KeyError(f"Prize {prize_id} not found")

    def find(self, prize_id: str) -> PrizeDefinition | None:
        try:
            return self.get(prize_id)
        except KeyError:
            return None

    def problems(
        self, *, enforce_weight_sum: bool = True, tolerance: float = 1e-6
    ) -> list[str]:
        """Return every reason this table cannot be drawn from."""
        errors: list[str] = []
        if not self._prizes:
            return ["Prize table is empty."]

        seen: set[str] = set()
        for prize in self._prizes:
            if prize.prize_id in seen:
                errors.append(f"Prize id '{prize.prize_id}' defined multiple times.")
            seen.add(prize.prize_id)
            if prize.weight < 0 or math.isnan(prize.weight):
                errors.append(f"Prize '{prize.prize_id}' has invalid weight {prize.weight}.")

        total = self.total_weight
        if total <= 0:
            errors.append("Prize weights must sum to a positive number.")
        elif enforce_weight_sum and abs(total - EXPECTED_WEIGHT_SUM) > tolerance:
            errors.append(
                f"Prize weights sum to {total:g}, expected {EXPECTED_WEIGHT_SUM:g}."
            )
        return errors

    def ensure_valid(self, *, enforce_weight_sum: bool = True, tolerance: float = 1e-6) -> None:
        errors = self.problems(enforce_weight_sum=enforce_weight_sum, tolerance=tolerance)
        if errors:
            raise ConfigurationError("Invalid prize table: " + " ".join(errors))


def _prize(
    prize_id: str,
    name: str,
    category: PrizeCategory,
    value: int,
    weight: float,
    rarity: Rarity,
    description: str,
) -> PrizeDefinition:
    return PrizeDefinition(prize_id, name, category, value, weight, rarity, description)


DEFAULT_COST_PER_DRAW = 30

DEFAULT_PRIZES: tuple[PrizeDefinition, ...] = (
    _prize("p_empty", "Better luck next time", PrizeCategory.EMPTY, 0, 20.0, Rarity.COMMON,
           "So close!"),
    _prize("p_pt_5", "5 points", PrizeCategory.POINT, 5, 20.0, Rarity.COMMON, "Worth 1 yuan"),
    _prize("p_pt_10", "10 points", PrizeCategory.POINT, 10, 3.52, Rarity.COMMON, "Worth 2 yuan"),
    _prize("p_pt_20", "20 points", PrizeCategory.POINT, 20, 2.0, Rarity.UNCOMMON, "Worth 4 yuan"),
    _prize("p_cash_5", "5 yuan red packet", PrizeCategory.CASH, 5, 15.0, Rarity.UNCOMMON,
           "Paid via WeChat"),
    _prize("p_cash_10", "10 yuan red packet", PrizeCategory.CASH, 10, 5.0, Rarity.UNCOMMON,
           "Paid via WeChat"),
    _prize("p_cash_20", "20 yuan red packet", PrizeCategory.CASH, 20, 3.0, Rarity.RARE,
           "Paid via WeChat"),
    _prize("p_cash_100", "100 yuan red packet", PrizeCategory.CASH, 100, 2.0, Rarity.LEGENDARY,
           "Big red packet!"),
    _prize("p_vou_50", "50 yuan course voucher", PrizeCategory.VOUCHER, 50, 4.0,
           Rarity.UNCOMMON, "Course voucher"),
    _prize("p_vou_200", "200 yuan course voucher", PrizeCategory.VOUCHER, 200, 1.5, Rarity.RARE,
           "Large course voucher"),
    _prize("p_item_drink", "Sports drink / energy bar", PrizeCategory.PHYSICAL, 5, 10.0,
           Rarity.COMMON, "Refuel"),
    _prize("p_item_badge", "Commemorative badge", PrizeCategory.PHYSICAL, 20, 5.0,
           Rarity.UNCOMMON, "Limited edition"),
    _prize("p_item_gear", "Random training gear", PrizeCategory.PHYSICAL, 55, 5.0, Rarity.RARE,
           "Jump rope, yoga mat, dumbbells..."),
    _prize("p_item_cloth", "Training T-shirt / shorts", PrizeCategory.PHYSICAL, 100, 2.0,
           Rarity.RARE, "Custom team kit"),
    _prize("p_item_coat", "Training jacket", PrizeCategory.PHYSICAL, 180, 1.0, Rarity.LEGENDARY,
           "Premium jacket"),
    _prize("p_item_band", "Fitness band", PrizeCategory.PHYSICAL, 200, 0.5, Rarity.LEGENDARY,
           "Smart activity tracker"),
    _prize(FRAGMENT_500_ID, "500 yuan red packet fragment", PrizeCategory.FRAGMENT, 0, 0.24,
           Rarity.LEGENDARY, "Collect 3 to exchange for 500 yuan"),
    _prize(FRAGMENT_FREE_ID, "Free quarter fragment", PrizeCategory.FRAGMENT, 0, 0.24,
           Rarity.LEGENDARY, "Collect 3 to exchange for a free quarter (3500 yuan)"),
)


def default_prize_table() -> PrizeTable:
    return PrizeTable(DEFAULT_PRIZES)
