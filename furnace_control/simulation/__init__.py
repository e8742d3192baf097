"""Simulation driver, configuration and scenarios."""

from furnace_control.simulation.config import SimulationConfig
from furnace_control.simulation.state import (
    SimulationState,
    TickRecord,
    SetSetpoint,
    ToggleDisturbance,
)
from furnace_control.simulation.driver import (
    SimulationDriver,
    SimulationResult,
    TickScheduler,
)
from furnace_control.simulation.scenarios import FurnaceScenario, ScenarioLibrary

__all__ = [
    "SimulationConfig",
    "SimulationState",
    "TickRecord",
    "SetSetpoint",
    "ToggleDisturbance",
    "SimulationDriver",
    "SimulationResult",
    "TickScheduler",
    "FurnaceScenario",
    "ScenarioLibrary",
]
