"""
Electric furnace thermal model, one tick = one simulated minute.

    T' = T - drop + (P / 100) * R - k * (T - T_amb) - L_door

where ``drop`` is the one-shot heat loss applied on the first tick after the
door opens and ``L_door`` the continuous loss while it stays open. The
cooling term uses the temperature entering the tick, so an opening tick ends
exactly ``door_initial_drop`` below the same tick with the door closed.

Temperature is not bounded: the linear model has no physical floor or
ceiling and will happily go below ambient with the door open.
"""

from dataclasses import dataclass
from typing import Dict, Any, Optional
import json
import logging

from furnace_control.plants.base_plant import BasePlant
from furnace_control.utils.validators import (
    InvalidConfiguration,
    validate_positive,
    validate_non_negative,
    validate_real,
    validate_finite,
    validate_range,
)

logger = logging.getLogger(__name__)


@dataclass
class PlantParameters:
    """Calibration of the furnace thermal model."""

    max_heating_rate: float = 20.0      # °C/min at 100 % power
    loss_coefficient: float = 0.10      # fraction of (T - ambient) lost per minute
    ambient_temperature: float = 25.0   # °C
    door_initial_drop: float = 8.0      # °C lost once when the door opens
    door_loss_per_minute: float = 6.0   # °C lost every minute the door is open

    def __post_init__(self):
        self.max_heating_rate = validate_positive(self.max_heating_rate, "max_heating_rate")
        self.loss_coefficient = validate_non_negative(self.loss_coefficient, "loss_coefficient")
        self.ambient_temperature = validate_real(self.ambient_temperature, "ambient_temperature")
        self.door_initial_drop = validate_non_negative(self.door_initial_drop, "door_initial_drop")
        self.door_loss_per_minute = validate_non_negative(
            self.door_loss_per_minute, "door_loss_per_minute"
        )

    def copy(self, **changes) -> 'PlantParameters':
        """Create a copy with optional parameter changes."""
        params = self.to_dict()
        params.update(changes)
        return PlantParameters(**params)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'max_heating_rate': self.max_heating_rate,
            'loss_coefficient': self.loss_coefficient,
            'ambient_temperature': self.ambient_temperature,
            'door_initial_drop': self.door_initial_drop,
            'door_loss_per_minute': self.door_loss_per_minute,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PlantParameters':
        unknown = set(data) - set(cls().to_dict())
        if unknown:
            raise InvalidConfiguration(f"Unknown plant parameters: {sorted(unknown)}")
        return cls(**data)

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_json(cls, json_str: str) -> 'PlantParameters':
        """Create from JSON string."""
        return cls.from_dict(json.loads(json_str))


@dataclass
class DisturbanceState:
    """
    Door disturbance flags.

    ``initial_drop_applied`` is re-armed only on a closed -> open edge;
    reopening an already open door does not repeat the drop.
    """
    door_open: bool = False
    initial_drop_applied: bool = False

    def set_door(self, door_open: bool) -> bool:
        """
        Apply a door toggle.

        Returns:
            True if the door state changed
        """
        door_open = bool(door_open)
        if door_open == self.door_open:
            return False
        if door_open:
            self.initial_drop_applied = False
        self.door_open = door_open
        return True

    def copy(self) -> 'DisturbanceState':
        return DisturbanceState(self.door_open, self.initial_drop_applied)


def thermal_step(
    temperature: float,
    power: float,
    disturbance: DisturbanceState,
    params: PlantParameters
) -> float:
    """
    Advance the furnace temperature by one minute.

    Args:
        temperature: Temperature entering the tick (°C)
        power: Heating power in [0, 100] (percent)
        disturbance: Door state; the one-shot flag is updated in place
        params: Plant calibration

    Returns:
        Temperature at the end of the tick (°C)

    Raises:
        InvalidState: If temperature is not finite or power is out of range
    """
    temperature = validate_finite(temperature, "temperature")
    power = validate_range(power, "power", 0.0, 100.0)

    start = temperature
    if disturbance.door_open and not disturbance.initial_drop_applied:
        temperature -= params.door_initial_drop
        disturbance.initial_drop_applied = True
        logger.info(
            "Door opened: initial drop of %.1f °C -> %.2f °C",
            params.door_initial_drop, temperature
        )

    heating = (power / 100.0) * params.max_heating_rate
    cooling = params.loss_coefficient * (start - params.ambient_temperature)
    door_loss = params.door_loss_per_minute if disturbance.door_open else 0.0

    return temperature + heating - cooling - door_loss


class FurnacePlant(BasePlant):
    """
    Stateful furnace plant around :func:`thermal_step`.

    Example:
        >>> plant = FurnacePlant(initial_temperature=25.0)
        >>> plant.update(100.0)
        45.0
    """

    def __init__(
        self,
        params: Optional[PlantParameters] = None,
        initial_temperature: Optional[float] = None
    ):
        self._params = params if params is not None else PlantParameters()
        if initial_temperature is None:
            initial_temperature = self._params.ambient_temperature
        super().__init__(validate_finite(initial_temperature, "initial_temperature"))
        self._disturbance = DisturbanceState()

    def update(self, power: float) -> float:
        """
        Advance one minute.

        The step runs on a copy of the door state; temperature, time and
        door flags are committed together only if it yields a finite result.

        Raises:
            InvalidState: If power is out of range or the result is not finite
        """
        disturbance = self._disturbance.copy()
        temperature = validate_finite(
            thermal_step(self._output, power, disturbance, self._params),
            "temperature"
        )
        self._output = temperature
        self._disturbance = disturbance
        self._time += 1
        return self._output

    def reset(self) -> None:
        self._output = self._initial_temperature
        self._time = 0
        self._disturbance = DisturbanceState()

    def open_door(self) -> bool:
        """Open the door; returns True if it was closed."""
        return self._disturbance.set_door(True)

    def close_door(self) -> bool:
        """Close the door; returns True if it was open."""
        return self._disturbance.set_door(False)

    @property
    def params(self) -> PlantParameters:
        return self._params

    @property
    def disturbance(self) -> DisturbanceState:
        """Copy of the door state."""
        return self._disturbance.copy()

    def equilibrium_temperature(self, power: float) -> Optional[float]:
        """
        Closed-door steady state for a constant power.

        Returns:
            ambient + heating / loss_coefficient, or None without losses
        """
        power = validate_range(power, "power", 0.0, 100.0)
        if self._params.loss_coefficient == 0:
            return None
        heating = (power / 100.0) * self._params.max_heating_rate
        return self._params.ambient_temperature + heating / self._params.loss_coefficient

    def get_state(self) -> Dict[str, Any]:
        state = super().get_state()
        state['door_open'] = self._disturbance.door_open
        state['initial_drop_applied'] = self._disturbance.initial_drop_applied
        return state

    def get_info(self) -> Dict[str, Any]:
        info = {'type': 'FurnacePlant'}
        info.update(self._params.to_dict())
        return info
