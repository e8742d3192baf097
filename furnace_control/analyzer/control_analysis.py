"""
Linear analysis of the furnace loop using the python-control library.

In deviation from ambient, with the door closed and no saturation, the
furnace is the discrete first-order system (dt = 1 min)

    x[k+1] = a * x[k] + b * u[k],   a = 1 - loss_coefficient,
                                    b = max_heating_rate / 100

and the rectangular-rule PI controller is C(z) = Kp + Ki * z / (z - 1).
"""

from typing import Dict, Any, Optional, Tuple
import numpy as np
import control as ct

from furnace_control.core.controller_params import ControllerParameters
from furnace_control.plants.furnace import PlantParameters
from furnace_control.utils.math_utils import clamp


class FurnaceLoopAnalyzer:
    """Analyze the linearized furnace loop for a given calibration."""

    def __init__(
        self,
        controller_params: Optional[ControllerParameters] = None,
        plant_params: Optional[PlantParameters] = None
    ):
        self._controller_params = controller_params or ControllerParameters()
        self._plant_params = plant_params or PlantParameters()

    def plant_tf(self) -> ct.TransferFunction:
        """G(z) = b / (z - a), temperature rise per percent of power."""
        a = 1.0 - self._plant_params.loss_coefficient
        b = self._plant_params.max_heating_rate / 100.0
        return ct.tf([b], [1.0, -a], 1)

    def controller_tf(self) -> ct.TransferFunction:
        """C(z) of the configured controller variant."""
        kp = self._controller_params.kp
        ki = self._controller_params.ki if self._controller_params.is_pi else 0.0
        if ki == 0:
            return ct.tf([kp], [1.0], 1)
        return ct.tf([kp + ki, -kp], [1.0, -1.0], 1)

    def closed_loop_tf(self) -> ct.TransferFunction:
        """Setpoint-to-temperature transfer function (deviation from ambient)."""
        return ct.feedback(self.controller_tf() * self.plant_tf(), 1)

    def is_stable(self) -> bool:
        """True if every closed-loop pole lies inside the unit circle."""
        return bool(np.all(np.abs(ct.poles(self.closed_loop_tf())) < 1.0))

    def step_response(self, n_ticks: int = 120) -> Tuple[np.ndarray, np.ndarray]:
        """Unsaturated closed-loop response to a unit setpoint step."""
        t = np.arange(n_ticks + 1)
        t_out, y_out = ct.step_response(self.closed_loop_tf(), T=t)
        return t_out, np.squeeze(y_out)

    def holding_power(self, setpoint: float) -> float:
        """Power (percent, unclamped) that keeps the closed furnace at ``setpoint``."""
        p = self._plant_params
        return 100.0 * p.loss_coefficient * (setpoint - p.ambient_temperature) / p.max_heating_rate

    def steady_state_temperature(self, setpoint: float) -> float:
        """
        Temperature the loop settles at with the door closed.

        A PI loop reaches the setpoint whenever the holding power fits in
        the output range. A P loop settles short of it (proportional
        offset). With saturation the furnace settles at the equilibrium of
        the saturated power.
        """
        p = self._plant_params
        c = self._controller_params
        hold = self.holding_power(setpoint)

        if c.is_pi and c.output_min <= hold <= c.output_max:
            return float(setpoint)

        if not c.is_pi:
            gain = c.kp * p.max_heating_rate / 100.0
            temperature = (
                (p.loss_coefficient * p.ambient_temperature + gain * setpoint)
                / (p.loss_coefficient + gain)
            )
            power = c.kp * (setpoint - temperature)
            if c.output_min <= power <= c.output_max:
                return float(temperature)
        else:
            power = hold

        power = clamp(power, c.output_min, c.output_max)
        if p.loss_coefficient == 0:
            return float('inf') if power > 0 else float(p.ambient_temperature)
        return float(p.ambient_temperature + power * p.max_heating_rate / 100.0 / p.loss_coefficient)

    def analyze(self, setpoint: float = 180.0) -> Dict[str, Any]:
        """Complete closed-loop analysis."""
        cl_sys = self.closed_loop_tf()
        return {
            'closed_loop_tf': cl_sys,
            'poles': ct.poles(cl_sys),
            'is_stable': self.is_stable(),
            'dc_gain': float(np.real(ct.dcgain(cl_sys))),
            'holding_power': self.holding_power(setpoint),
            'steady_state_temperature': self.steady_state_temperature(setpoint),
        }
