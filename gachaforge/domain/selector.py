"""Weighted random prize selection."""

from __future__ import annotations

from random import Random
from typing import Protocol, Sequence

from .prizes import PrizeDefinition
from ..exceptions import ConfigurationError


class UniformSource(Protocol):
    def random(self) -> float:
        """Return a float in ``[0, 1)``."""
        ...


class PrizeSelector(Protocol):
    def select(self, prizes: Sequence[PrizeDefinition]) -> PrizeDefinition:
        ...


class WeightedSelector:
    """Pick one prize by cumulative-weight inversion.

    Each entry owns the half-open interval ``[previous_total, previous_total + weight)``
    of the sampled range, so weight-0 entries can never be hit. If float drift
    walks past the last entry the first entry is returned.
    """

    def __init__(self, rng: UniformSource | None = None) -> None:
        self._rng = rng or Random()

    def select(self, prizes: Sequence[PrizeDefinition]) -> PrizeDefinition:
        if not prizes:
            raise ConfigurationError("Cannot draw from an empty prize table")
        weights = [prize.weight for prize in prizes]
        if any(weight < 0 for weight in weights):
            raise ConfigurationError("Prize weights must be non-negative")
        total = sum(weights)
        if total <= 0:
            raise ConfigurationError("Prize weights must sum to a positive number")

        threshold = self._rng.random() * total
        cumulative = 0.0
        for prize, weight in zip(prizes, weights):
            cumulative += weight
            if threshold < cumulative:
                return prize
        return prizes[0]
