"""
Furnace Controller Parameters Configuration.
Encapsulates the controller gains and limits in a validated structure.
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any
from enum import Enum
import json

from furnace_control.utils.validators import (
    InvalidConfiguration,
    validate_positive,
    validate_non_negative,
    validate_real,
)


POWER_MIN = 0.0
POWER_MAX = 100.0


class ControllerType(Enum):
    """Controller variant selection."""
    P = "P"
    PI = "PI"


@dataclass
class ControllerParameters:
    """
    Furnace controller parameters.

    Output is a heating power percentage: the saturation range defaults to
    [0, 100] and may only be narrowed inside it. When ``integral_limit`` is left as None it is derived as
    ``output_max / ki``: the integral alone can then never ask for more
    than full power, which bounds windup while the output is saturated.
    """

    kp: float = 0.9  # Proportional gain (% per °C)
    ki: float = 0.2  # Integral gain (% per °C·min), 0 selects pure P

    output_min: float = 0.0
    output_max: float = 100.0

    integral_limit: Optional[float] = None  # Symmetric anti-windup bound (°C·min)

    controller_type: Optional[ControllerType] = None

    _derived_limit: bool = field(default=False, init=False, repr=False, compare=False)

    def __post_init__(self):
        """Validate parameters and derive the anti-windup bound."""
        if isinstance(self.controller_type, str):
            try:
                self.controller_type = ControllerType(self.controller_type)
            except ValueError:
                raise InvalidConfiguration(
                    f"Unknown controller type: {self.controller_type!r}"
                ) from None
        self._validate()

        if self.controller_type is None:
            self.controller_type = ControllerType.PI if self.ki > 0 else ControllerType.P

        if self.controller_type == ControllerType.PI and self.ki == 0:
            raise InvalidConfiguration("PI controller requires ki > 0")

        if self.controller_type == ControllerType.P:
            self.integral_limit = None
            self._derived_limit = False
        elif self.integral_limit is None:
            self.integral_limit = self.output_max / self.ki
            self._derived_limit = True

    def _validate(self) -> None:
        """Validate all parameters."""
        self.kp = validate_positive(self.kp, "kp")
        self.ki = validate_non_negative(self.ki, "ki")

        self.output_min = validate_real(self.output_min, "output_min")
        self.output_max = validate_real(self.output_max, "output_max")
        if self.output_min >= self.output_max:
            raise InvalidConfiguration("output_min must be less than output_max")
        if self.output_min < POWER_MIN or self.output_max > POWER_MAX:
            raise InvalidConfiguration(
                f"output range must lie within [{POWER_MIN:g}, {POWER_MAX:g}] %, "
                f"got [{self.output_min}, {self.output_max}]"
            )

        if self.integral_limit is not None:
            self.integral_limit = validate_positive(self.integral_limit, "integral_limit")

    @property
    def is_pi(self) -> bool:
        return self.controller_type == ControllerType.PI

    def copy(self, **changes) -> 'ControllerParameters':
        """
        Create a copy with optional parameter changes.

        A derived integral limit is recomputed for the new gains.

        Args:
            **changes: Parameters to override

        Returns:
            New ControllerParameters instance
        """
        params = self.to_dict()
        params['controller_type'] = None if 'ki' in changes else self.controller_type
        params.update(changes)
        return ControllerParameters(**params)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary for serialization.

        Returns:
            Dictionary of parameters
        """
        return {
            'kp': self.kp,
            'ki': self.ki,
            'output_min': self.output_min,
            'output_max': self.output_max,
            'integral_limit': None if self._derived_limit else self.integral_limit,
            'controller_type': self.controller_type.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ControllerParameters':
        """
        Create from dictionary.

        Raises:
            InvalidConfiguration: On unknown keys
        """
        unknown = set(data) - {
            'kp', 'ki', 'output_min', 'output_max', 'integral_limit', 'controller_type'
        }
        if unknown:
            raise InvalidConfiguration(f"Unknown controller parameters: {sorted(unknown)}")
        return cls(**data)

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_json(cls, json_str: str) -> 'ControllerParameters':
        """Create from JSON string."""
        return cls.from_dict(json.loads(json_str))

    def __str__(self) -> str:
        return (
            f"ControllerParameters({self.controller_type.value}, "
            f"Kp={self.kp:.4f}, Ki={self.ki:.4f}, "
            f"limits=[{self.output_min}, {self.output_max}], "
            f"integral_limit={self.integral_limit})"
        )
