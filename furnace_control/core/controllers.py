"""
Furnace power controllers.

Two interchangeable variants map the temperature error (°C) to a heating
power command in percent:

- ProportionalController: power = clamp(Kp * e, 0, 100)
- PIController: rectangular-rule integral (one call = one simulated minute),
  integral clamped to +/- integral_limit (anti-windup), then saturation.

Both implement the BaseController capability set (compute / reset) so the
simulation driver never needs to know which one is active.
"""

from abc import ABC, abstractmethod
from typing import Optional, Dict, Any
from dataclasses import dataclass, asdict, replace
import logging

from furnace_control.core.controller_params import ControllerParameters, ControllerType
from furnace_control.utils.math_utils import clamp
from furnace_control.utils.validators import InvalidConfiguration, validate_finite

logger = logging.getLogger(__name__)


@dataclass
class ControllerState:
    """Diagnostics of the most recent compute() call."""
    error: float = 0.0
    p_term: float = 0.0
    i_term: float = 0.0
    output_unsat: float = 0.0
    output: float = 0.0
    integral_accumulator: Optional[float] = None
    saturated: bool = False
    anti_windup_active: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert state to dictionary."""
        return asdict(self)


class BaseController(ABC):
    """
    Abstract base class for furnace controllers.

    Subclasses implement compute() and reset(); saturation to the
    configured output range is shared here.
    """

    def __init__(self, params: Optional[ControllerParameters] = None):
        self._params = params if params is not None else ControllerParameters()
        self._state = ControllerState()

    @abstractmethod
    def compute(self, error: float) -> float:
        """
        Compute the heating power for one tick.

        Args:
            error: setpoint - measured temperature (°C)

        Returns:
            Heating power in [output_min, output_max] (percent)

        Raises:
            InvalidState: If error is NaN or infinite
        """
        pass

    @abstractmethod
    def reset(self) -> None:
        """Clear accumulated controller memory."""
        pass

    @property
    def params(self) -> ControllerParameters:
        """Get controller parameters."""
        return self._params

    @property
    def state(self) -> ControllerState:
        """Get diagnostics of the last compute() call."""
        return self._state

    @property
    def output(self) -> float:
        """Get last output."""
        return self._state.output

    @property
    def integral(self) -> Optional[float]:
        """Integral accumulator, None for controllers without one."""
        return None

    def set_integral(self, value: float) -> None:
        """Overwrite the integral accumulator; nothing to do without one."""
        pass

    def _saturate(self, value: float) -> float:
        return clamp(value, self._params.output_min, self._params.output_max)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._params})"


class ProportionalController(BaseController):
    """
    Proportional-only furnace controller.

    Example:
        >>> ctrl = ProportionalController(ControllerParameters(kp=2.0, ki=0.0))
        >>> ctrl.compute(10.0)
        20.0
    """

    def compute(self, error: float) -> float:
        error = validate_finite(error, "error")

        p_term = self._params.kp * error
        output = self._saturate(p_term)

        self._state = ControllerState(
            error=error,
            p_term=p_term,
            output_unsat=p_term,
            output=output,
            saturated=output != p_term,
        )
        return output

    def reset(self) -> None:
        self._state = ControllerState()


class PIController(BaseController):
    """
    Proportional-integral furnace controller with integral clamping.

    The accumulator is the plain sum of errors (°C·min) and stays inside
    [-integral_limit, +integral_limit] after every call.

    Example:
        >>> ctrl = PIController(ControllerParameters(kp=0.9, ki=0.2))
        >>> ctrl.compute(155.0)
        100.0
        >>> ctrl.integral
        155.0
    """

    def __init__(self, params: Optional[ControllerParameters] = None):
        super().__init__(params)
        if not self._params.is_pi:
            raise InvalidConfiguration("PIController requires PI parameters (ki > 0)")
        self._integral: float = 0.0
        self._state = ControllerState(integral_accumulator=0.0)

    @property
    def integral(self) -> float:
        """Get current integral accumulator."""
        return self._integral

    @property
    def integral_limit(self) -> float:
        return self._params.integral_limit

    def compute(self, error: float) -> float:
        error = validate_finite(error, "error")
        limit = self._params.integral_limit

        raw_integral = self._integral + error
        self._integral = clamp(raw_integral, -limit, limit)
        clamped = self._integral != raw_integral

        p_term = self._params.kp * error
        i_term = self._params.ki * self._integral
        output_unsat = p_term + i_term
        output = self._saturate(output_unsat)

        self._state = ControllerState(
            error=error,
            p_term=p_term,
            i_term=i_term,
            output_unsat=output_unsat,
            output=output,
            integral_accumulator=self._integral,
            saturated=output != output_unsat,
            anti_windup_active=clamped,
        )
        return output

    def set_integral(self, value: float) -> None:
        """
        Manually set the integral accumulator.

        Used to roll back a failed tick. The value is clamped to
        +/- integral_limit.

        Args:
            value: New integral value (°C·min)
        """
        limit = self._params.integral_limit
        self._integral = clamp(validate_finite(value, "integral"), -limit, limit)
        self._state = replace(self._state, integral_accumulator=self._integral)

    def reset(self) -> None:
        """Reset the integral accumulator, as on a setpoint change."""
        if self._integral != 0.0:
            logger.debug("PI integral reset (was %.1f)", self._integral)
        self._integral = 0.0
        self._state = ControllerState(integral_accumulator=0.0)


def create_controller(params: Optional[ControllerParameters] = None) -> BaseController:
    """
    Build the controller variant selected by ``params.controller_type``.

    Args:
        params: Controller parameters (defaults to the reference PI tuning)

    Returns:
        ProportionalController or PIController
    """
    params = params if params is not None else ControllerParameters()
    if params.controller_type == ControllerType.PI:
        return PIController(params)
    return ProportionalController(params)
