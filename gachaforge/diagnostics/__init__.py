"""Diagnostics for tuning the prize table."""

from .draw_simulator import DrawSimulator, SimulationResult

__all__ = ["DrawSimulator", "SimulationResult"]
