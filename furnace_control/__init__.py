"""
Furnace Temperature Control Simulation
======================================

Closed-loop simulation of an electric furnace:
- Proportional and PI controllers with output saturation and anti-windup
- First-order thermal model with a door-open disturbance
- Tick driver with queued setpoint/door commands and a bounded history
- Performance metrics, linear loop analysis and plotting
"""

from furnace_control.core.controller_params import ControllerParameters, ControllerType
from furnace_control.core.controllers import (
    ProportionalController,
    PIController,
    create_controller,
)
from furnace_control.plants.furnace import (
    PlantParameters,
    DisturbanceState,
    FurnacePlant,
    thermal_step,
)
from furnace_control.simulation.config import SimulationConfig
from furnace_control.simulation.driver import SimulationDriver, TickScheduler
from furnace_control.utils.validators import InvalidConfiguration, InvalidState

__version__ = "1.0.0"
__all__ = [
    "ControllerParameters",
    "ControllerType",
    "ProportionalController",
    "PIController",
    "create_controller",
    "PlantParameters",
    "DisturbanceState",
    "FurnacePlant",
    "thermal_step",
    "SimulationConfig",
    "SimulationDriver",
    "TickScheduler",
    "InvalidConfiguration",
    "InvalidState",
]
