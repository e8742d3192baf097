"""
Plotting utilities for furnace runs.

The layout follows the furnace console: heating power, temperature against
setpoint, and error, stacked over a shared time axis in minutes.
"""

from typing import Tuple, Optional
from collections import deque
import numpy as np
import matplotlib.pyplot as plt
from matplotlib.figure import Figure

from furnace_control.logging.csv_logger import HistoryBuffer
from furnace_control.simulation.driver import SimulationResult
from furnace_control.simulation.state import TickRecord


def _use_style(style: str) -> None:
    try:
        plt.style.use(style)
    except OSError:
        plt.style.use('default')


COLORS = {
    'setpoint': '#2ecc71',
    'measurement': '#3498db',
    'error': '#e74c3c',
    'output': '#9b59b6',
    'door': '#7f8c8d',
}


class FurnacePlotter:
    """Static plots of a finished run or of the driver's history window."""

    def __init__(self, style: str = 'seaborn-v0_8-whitegrid'):
        _use_style(style)

    def plot_series(
        self,
        minutes: np.ndarray,
        setpoints: np.ndarray,
        temperatures: np.ndarray,
        powers: np.ndarray,
        errors: np.ndarray,
        door_open: Optional[np.ndarray] = None,
        title: str = "Furnace Temperature Control",
        figsize: Tuple[int, int] = (12, 9)
    ) -> Figure:
        """
        Plot the three furnace panels.

        Args:
            minutes: Time axis (min)
            setpoints: Setpoint per tick (°C)
            temperatures: Temperature per tick (°C)
            powers: Heating power per tick (%)
            errors: Error per tick (°C)
            door_open: Optional door flags, shaded on every panel
            title: Figure title
            figsize: Figure size

        Returns:
            Matplotlib Figure
        """
        fig, (ax_power, ax_temp, ax_err) = plt.subplots(3, 1, figsize=figsize, sharex=True)
        fig.suptitle(title, fontsize=14, fontweight='bold')

        ax_power.plot(minutes, powers, '-', color=COLORS['output'], linewidth=1.5)
        ax_power.set_ylim(-5, 105)
        ax_power.set_ylabel('Power (%)')

        ax_temp.plot(minutes, setpoints, '--', color=COLORS['setpoint'], linewidth=2, label='Setpoint')
        ax_temp.plot(minutes, temperatures, '-', color=COLORS['measurement'], linewidth=1.5,
                     label='Temperature')
        ax_temp.set_ylabel('Temperature (°C)')
        ax_temp.legend(loc='lower right')

        ax_err.plot(minutes, errors, '-', color=COLORS['error'], linewidth=1.2)
        ax_err.axhline(y=0, color='gray', linestyle=':', alpha=0.5)
        ax_err.set_ylabel('Error (°C)')
        ax_err.set_xlabel('Time (min)')

        for ax in (ax_power, ax_temp, ax_err):
            ax.grid(True, alpha=0.3)
            if door_open is not None and np.any(door_open):
                ax.fill_between(minutes, 0, 1, where=np.asarray(door_open, dtype=bool),
                                color=COLORS['door'], alpha=0.15,
                                transform=ax.get_xaxis_transform(), step='mid')

        fig.tight_layout()
        return fig

    def plot_result(self, result: SimulationResult, **kwargs) -> Figure:
        """Plot a SimulationResult."""
        kwargs.setdefault('title', result.scenario_name or "Furnace Temperature Control")
        return self.plot_series(
            result.time_steps, result.setpoints, result.temperatures,
            result.powers, result.errors, door_open=result.door_open, **kwargs
        )

    def plot_history(self, history: HistoryBuffer, **kwargs) -> Figure:
        """Plot the driver's sliding history window."""
        return self.plot_series(
            history.column('time_step'), history.column('setpoint'),
            history.column('new_temperature'), history.column('power'),
            history.column('error'), door_open=history.column('door_open'), **kwargs
        )

    @staticmethod
    def show():
        """Display all plots."""
        plt.show()


class LiveDisplay:
    """
    Display collaborator that follows a running driver.

    Subscribe it with ``driver.subscribe(display)``; each TickRecord is
    appended to a window of ``window`` ticks. Call refresh() from the GUI
    thread to redraw.
    """

    def __init__(self, window: int = 120, figsize: Tuple[int, int] = (12, 9)):
        if window < 1:
            raise ValueError("window must be at least 1")
        self._records: deque = deque(maxlen=window)

        self.fig, axes = plt.subplots(3, 1, figsize=figsize, sharex=True)
        self.fig.suptitle("Furnace (live)", fontsize=14)
        self._axes = axes

        self._lines = {
            'power': axes[0].plot([], [], '-', color=COLORS['output'])[0],
            'setpoint': axes[1].plot([], [], '--', color=COLORS['setpoint'], label='Setpoint')[0],
            'temperature': axes[1].plot([], [], '-', color=COLORS['measurement'], label='Temperature')[0],
            'error': axes[2].plot([], [], '-', color=COLORS['error'])[0],
        }
        axes[0].set_ylabel('Power (%)')
        axes[1].set_ylabel('Temperature (°C)')
        axes[1].legend(loc='lower right')
        axes[2].set_ylabel('Error (°C)')
        axes[2].set_xlabel('Time (min)')
        for ax in axes:
            ax.grid(True, alpha=0.3)

    def __call__(self, record: TickRecord) -> None:
        self._records.append(record)

    def __len__(self) -> int:
        return len(self._records)

    def refresh(self) -> None:
        """Push the current window into the lines and redraw."""
        records = list(self._records)
        if not records:
            return
        t = [r.time_step for r in records]
        self._lines['power'].set_data(t, [r.power for r in records])
        self._lines['setpoint'].set_data(t, [r.setpoint for r in records])
        self._lines['temperature'].set_data(t, [r.new_temperature for r in records])
        self._lines['error'].set_data(t, [r.error for r in records])

        for ax in self._axes:
            ax.relim()
            ax.autoscale_view()
        self.fig.canvas.draw_idle()
