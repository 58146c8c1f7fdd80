"""Monte-Carlo simulation of the prize table."""

from __future__ import annotations

from dataclasses import dataclass, field
from random import Random
from typing import Dict

from ..domain.prizes import PrizeCategory, PrizeDefinition, PrizeTable
from ..domain.selector import UniformSource, WeightedSelector


@dataclass(slots=True)
class SimulationResult:
    pulls: int
    cost_per_draw: int
    counts: Dict[str, int] = field(default_factory=dict)
    expected: Dict[str, float] = field(default_factory=dict)
    points_refunded: int = 0
    payout_by_category: Dict[str, int] = field(default_factory=dict)

    def merge(self, prize: PrizeDefinition) -> None:
        self.counts[prize.prize_id] = self.counts.get(prize.prize_id, 0) + 1
        if prize.category == PrizeCategory.POINT:
            self.points_refunded += prize.value
        category = prize.category.value
        self.payout_by_category[category] = self.payout_by_category.get(category, 0) + prize.value

    def frequency(self, prize_id: str) -> float:
        return self.counts.get(prize_id, 0) / self.pulls if self.pulls else 0.0

    @property
    def points_spent(self) -> int:
        return self.pulls * self.cost_per_draw

    @property
    def chi_square(self) -> float:
        """Pearson statistic over prizes with non-zero expected count."""
        statistic = 0.0
        for prize_id, expected in self.expected.items():
            if expected <= 0:
                continue
            observed = self.counts.get(prize_id, 0)
            statistic += (observed - expected) ** 2 / expected
        return statistic

    @property
    def degrees_of_freedom(self) -> int:
        return max(0, sum(1 for expected in self.expected.values() if expected > 0) - 1)


class DrawSimulator:
    """Run many selections against a prize table and tally the outcome."""

    def __init__(
        self,
        table: PrizeTable,
        *,
        cost_per_draw: int,
        rng: UniformSource | None = None,
    ) -> None:
        self._table = table
        self._cost = cost_per_draw
        self._selector = WeightedSelector(rng or Random())

    def simulate(self, *, pulls: int = 10000) -> SimulationResult:
        if pulls <= 0:
            raise ValueError("Number of pulls must be positive")
        total = self._table.total_weight
        result = SimulationResult(
            pulls=pulls,
            cost_per_draw=self._cost,
            expected={prize.prize_id: pulls * prize.weight / total for prize in self._table},
        )
        prizes = self._table.prizes
        for _ in range(pulls):
            result.merge(self._selector.select(prizes))
        return result
