"""Core furnace controller components."""

from furnace_control.core.controller_params import ControllerParameters, ControllerType
from furnace_control.core.controllers import (
    BaseController,
    ControllerState,
    ProportionalController,
    PIController,
    create_controller,
)

__all__ = [
    "ControllerParameters",
    "ControllerType",
    "BaseController",
    "ControllerState",
    "ProportionalController",
    "PIController",
    "create_controller",
]
