"""
Performance metrics for furnace runs.
Uses numpy for vectorized calculations. Time is in minutes.
"""

from typing import Dict, Any, Optional, Tuple
from dataclasses import dataclass, asdict
import numpy as np


@dataclass
class StepResponseMetrics:
    """Metrics from a heat-up (or cool-down) response."""
    rise_time: float
    settling_time_2pct: float
    settling_time_5pct: float
    overshoot_percent: float
    peak_time: float
    peak_value: float
    steady_state_value: float
    steady_state_error: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass
class ErrorMetrics:
    """Error-based performance metrics."""
    iae: float
    ise: float
    itae: float
    mae: float
    rmse: float
    max_error: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass
class ControlEffortMetrics:
    """Metrics of the heating power signal."""
    total_variation: float
    mean_power: float
    max_power: float
    saturation_fraction: float  # share of ticks at 0 % or 100 %

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


class PerformanceMetrics:
    """Performance metrics calculator."""

    def calculate_step_response_metrics(
        self,
        timestamps: np.ndarray,
        setpoints: np.ndarray,
        measurements: np.ndarray,
        initial_value: Optional[float] = None
    ) -> StepResponseMetrics:
        """
        Calculate step response metrics against the final setpoint.

        Settling bands are a fraction of the step size, not of the absolute
        setpoint, since furnace setpoints sit far from zero.
        """
        timestamps = np.asarray(timestamps, dtype=float)
        setpoints = np.asarray(setpoints, dtype=float)
        measurements = np.asarray(measurements, dtype=float)
        if len(timestamps) < 2:
            raise ValueError("Need at least 2 data points")

        final_setpoint = setpoints[-1]
        y0 = initial_value if initial_value is not None else measurements[0]
        delta = final_setpoint - y0

        n_ss = max(1, len(measurements) // 10)
        steady_state_value = float(np.mean(measurements[-n_ss:]))

        if abs(delta) < 1e-10:
            return StepResponseMetrics(
                rise_time=0.0, settling_time_2pct=0.0, settling_time_5pct=0.0,
                overshoot_percent=0.0, peak_time=0.0, peak_value=float(measurements[-1]),
                steady_state_value=steady_state_value,
                steady_state_error=float(final_setpoint - steady_state_value)
            )

        y_norm = (measurements - y0) / delta

        reached_10 = y_norm >= 0.1
        reached_90 = y_norm >= 0.9
        if np.any(reached_90):
            t_10 = timestamps[np.argmax(reached_10)]
            t_90 = timestamps[np.argmax(reached_90)]
            rise_time = float(t_90 - t_10)
        else:
            rise_time = float('inf')

        peak_idx = int(np.argmax(y_norm))
        overshoot = max(0.0, (y_norm[peak_idx] - 1.0) * 100)

        return StepResponseMetrics(
            rise_time=rise_time,
            settling_time_2pct=self._find_settling_time(timestamps, measurements, final_setpoint, 0.02 * abs(delta)),
            settling_time_5pct=self._find_settling_time(timestamps, measurements, final_setpoint, 0.05 * abs(delta)),
            overshoot_percent=float(overshoot),
            peak_time=float(timestamps[peak_idx]),
            peak_value=float(measurements[peak_idx]),
            steady_state_value=steady_state_value,
            steady_state_error=float(final_setpoint - steady_state_value)
        )

    def _find_settling_time(self, timestamps: np.ndarray, measurements: np.ndarray,
                            final_value: float, band: float) -> float:
        """Time after which the response stays within +/- band; inf if it never does."""
        outside_indices = np.where(np.abs(measurements - final_value) > band)[0]
        if len(outside_indices) == 0:
            return float(timestamps[0])

        last_outside = outside_indices[-1]
        if last_outside == len(timestamps) - 1:
            return float('inf')
        return float(timestamps[last_outside + 1])

    def calculate_error_metrics(self, timestamps: np.ndarray, setpoints: np.ndarray,
                                measurements: np.ndarray) -> ErrorMetrics:
        """Calculate error integrals (°C·min) and statistics."""
        timestamps = np.asarray(timestamps, dtype=float)
        if len(timestamps) < 2:
            raise ValueError("Need at least 2 data points")

        errors = np.asarray(setpoints, dtype=float) - np.asarray(measurements, dtype=float)
        abs_errors = np.abs(errors)

        return ErrorMetrics(
            iae=float(np.trapezoid(abs_errors, timestamps)),
            ise=float(np.trapezoid(errors ** 2, timestamps)),
            itae=float(np.trapezoid(timestamps * abs_errors, timestamps)),
            mae=float(np.mean(abs_errors)),
            rmse=float(np.sqrt(np.mean(errors ** 2))),
            max_error=float(np.max(abs_errors))
        )

    def calculate_control_effort_metrics(
        self,
        powers: np.ndarray,
        output_limits: Tuple[float, float] = (0.0, 100.0)
    ) -> ControlEffortMetrics:
        """Calculate heating power metrics."""
        powers = np.asarray(powers, dtype=float)
        if len(powers) < 2:
            raise ValueError("Need at least 2 data points")

        at_limits = (powers <= output_limits[0] + 1e-10) | (powers >= output_limits[1] - 1e-10)

        return ControlEffortMetrics(
            total_variation=float(np.sum(np.abs(np.diff(powers)))),
            mean_power=float(np.mean(powers)),
            max_power=float(np.max(powers)),
            saturation_fraction=float(np.mean(at_limits))
        )

    def calculate_all_metrics(self, result) -> Dict[str, Any]:
        """
        Calculate all metrics for a SimulationResult.

        The response is the end-of-tick temperature, starting from the
        measurement of the first tick.
        """
        timestamps = result.time_steps.astype(float)
        return {
            'step_response': self.calculate_step_response_metrics(
                timestamps, result.setpoints, result.temperatures,
                initial_value=float(result.measurements[0])
            ).to_dict(),
            'error': self.calculate_error_metrics(
                timestamps, result.setpoints, result.temperatures
            ).to_dict(),
            'control_effort': self.calculate_control_effort_metrics(result.powers).to_dict(),
        }
