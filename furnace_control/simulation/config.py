"""
Simulation configuration.

Everything here is fixed when the driver is constructed; runtime inputs
(setpoint, door) go through commands instead.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, Union
import json

from furnace_control.core.controller_params import ControllerParameters
from furnace_control.plants.furnace import PlantParameters
from furnace_control.utils.validators import (
    InvalidConfiguration,
    validate_positive,
    validate_real,
)


@dataclass
class SimulationConfig:
    """
    Complete furnace loop configuration.

    Defaults reproduce the reference run: PI control (Kp=0.9, Ki=0.2) of a
    furnace starting at 25 °C towards 180 °C, one tick per second of wall
    clock, 120 ticks of history.
    """

    controller: ControllerParameters = field(default_factory=ControllerParameters)
    plant: PlantParameters = field(default_factory=PlantParameters)

    initial_temperature: float = 25.0   # °C
    initial_setpoint: float = 180.0     # °C
    tick_period: float = 1.0            # wall-clock seconds per simulated minute
    history_size: int = 120             # ticks kept for display
    reset_on_setpoint_change: bool = True

    def __post_init__(self):
        if isinstance(self.controller, dict):
            self.controller = ControllerParameters.from_dict(self.controller)
        if isinstance(self.plant, dict):
            self.plant = PlantParameters.from_dict(self.plant)

        self.initial_temperature = validate_real(self.initial_temperature, "initial_temperature")
        self.initial_setpoint = validate_real(self.initial_setpoint, "initial_setpoint")
        self.tick_period = validate_positive(self.tick_period, "tick_period")

        if isinstance(self.history_size, bool) or not isinstance(self.history_size, int) \
                or self.history_size < 1:
            raise InvalidConfiguration(
                f"history_size must be a positive integer, got {self.history_size!r}"
            )

    def copy(self, **changes) -> 'SimulationConfig':
        """Create a copy with optional top-level changes."""
        data = {
            'controller': self.controller,
            'plant': self.plant,
            'initial_temperature': self.initial_temperature,
            'initial_setpoint': self.initial_setpoint,
            'tick_period': self.tick_period,
            'history_size': self.history_size,
            'reset_on_setpoint_change': self.reset_on_setpoint_change,
        }
        data.update(changes)
        return SimulationConfig(**data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'controller': self.controller.to_dict(),
            'plant': self.plant.to_dict(),
            'initial_temperature': self.initial_temperature,
            'initial_setpoint': self.initial_setpoint,
            'tick_period': self.tick_period,
            'history_size': self.history_size,
            'reset_on_setpoint_change': self.reset_on_setpoint_change,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SimulationConfig':
        """
        Create from a (possibly partial) dictionary.

        Raises:
            InvalidConfiguration: On unknown keys or invalid values
        """
        unknown = set(data) - set(cls().to_dict())
        if unknown:
            raise InvalidConfiguration(f"Unknown configuration keys: {sorted(unknown)}")
        return cls(**data)

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_json(cls, json_str: str) -> 'SimulationConfig':
        """Create from JSON string."""
        return cls.from_dict(json.loads(json_str))

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> 'SimulationConfig':
        """Load a JSON configuration file."""
        return cls.from_json(Path(path).read_text(encoding='utf-8'))
