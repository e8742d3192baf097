"""Thermal plant models."""

from furnace_control.plants.base_plant import BasePlant
from furnace_control.plants.furnace import (
    PlantParameters,
    DisturbanceState,
    FurnacePlant,
    thermal_step,
)

__all__ = [
    "BasePlant",
    "PlantParameters",
    "DisturbanceState",
    "FurnacePlant",
    "thermal_step",
]
