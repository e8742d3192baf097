"""
Value objects exchanged by the simulation driver.

SimulationState is owned by the driver and replaced, never mutated, on each
tick. Commands carry external inputs; they are queued and applied at the
start of the next tick.
"""

from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any, Union

from furnace_control.utils.validators import validate_finite


@dataclass(frozen=True)
class SimulationState:
    """Driver-owned loop state between ticks."""
    time_step: int = 0                      # minutes elapsed
    setpoint: float = 180.0                 # °C
    measured_temperature: float = 25.0      # °C
    integral_accumulator: Optional[float] = None  # °C·min, PI only

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TickRecord:
    """Everything published to display collaborators for one tick."""
    time_step: int
    setpoint: float
    measured_temperature: float
    power: float
    error: float
    new_temperature: float
    door_open: bool = False
    integral_accumulator: Optional[float] = None

    COLUMNS = (
        'time_step', 'setpoint', 'measured_temperature', 'power', 'error',
        'new_temperature', 'door_open', 'integral_accumulator',
    )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SetSetpoint:
    """Change the target temperature from the next tick on."""
    value: float

    def __post_init__(self):
        object.__setattr__(self, 'value', validate_finite(self.value, "setpoint"))


@dataclass(frozen=True)
class ToggleDisturbance:
    """Open or close the furnace door from the next tick on."""
    door_open: bool


Command = Union[SetSetpoint, ToggleDisturbance]
