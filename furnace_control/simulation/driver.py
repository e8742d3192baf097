"""
Furnace simulation driver and scheduler.

One tick is one simulated minute:

    drain commands -> t += 1 -> measure -> error -> controller -> plant
    -> publish TickRecord -> store temperature

External inputs never touch the loop state directly. They are queued as
commands and applied at the start of the next tick, so a tick always sees a
consistent setpoint and door state even when inputs arrive from another
thread.
"""

from typing import Callable, List, Optional
from dataclasses import dataclass, replace
from pathlib import Path
import csv
import logging
import queue
import threading
import time

import numpy as np

from furnace_control.core.controllers import BaseController, create_controller
from furnace_control.logging.csv_logger import CSVLogger, HistoryBuffer
from furnace_control.plants.furnace import DisturbanceState, FurnacePlant
from furnace_control.simulation.config import SimulationConfig
from furnace_control.simulation.scenarios import FurnaceScenario
from furnace_control.simulation.state import (
    Command,
    SetSetpoint,
    SimulationState,
    TickRecord,
    ToggleDisturbance,
)

logger = logging.getLogger(__name__)

TickCallback = Callable[[TickRecord], None]


@dataclass
class SimulationResult:
    """Container for a synchronous run, one array entry per tick."""
    time_steps: np.ndarray
    setpoints: np.ndarray
    measurements: np.ndarray
    powers: np.ndarray
    errors: np.ndarray
    temperatures: np.ndarray
    door_open: np.ndarray
    integrals: np.ndarray  # NaN for controllers without an integral

    scenario_name: str = ""
    execution_time: float = 0.0

    @classmethod
    def from_records(
        cls,
        records: List[TickRecord],
        scenario_name: str = "",
        execution_time: float = 0.0
    ) -> 'SimulationResult':
        return cls(
            time_steps=np.array([r.time_step for r in records], dtype=int),
            setpoints=np.array([r.setpoint for r in records], dtype=float),
            measurements=np.array([r.measured_temperature for r in records], dtype=float),
            powers=np.array([r.power for r in records], dtype=float),
            errors=np.array([r.error for r in records], dtype=float),
            temperatures=np.array([r.new_temperature for r in records], dtype=float),
            door_open=np.array([r.door_open for r in records], dtype=bool),
            integrals=np.array(
                [np.nan if r.integral_accumulator is None else r.integral_accumulator
                 for r in records],
                dtype=float
            ),
            scenario_name=scenario_name,
            execution_time=execution_time,
        )

    @classmethod
    def from_csv(cls, file_path: str) -> 'SimulationResult':
        """Rebuild a result from a CSV tick log written by the driver."""
        with open(file_path, newline='') as f:
            rows = list(csv.DictReader(f))

        def number(value: str) -> Optional[float]:
            return None if value in ('', 'None') else float(value)

        records = [
            TickRecord(
                time_step=int(row['time_step']),
                setpoint=float(row['setpoint']),
                measured_temperature=float(row['measured_temperature']),
                power=float(row['power']),
                error=float(row['error']),
                new_temperature=float(row['new_temperature']),
                door_open=row['door_open'] == 'True',
                integral_accumulator=number(row['integral_accumulator']),
            )
            for row in rows
        ]
        return cls.from_records(records, scenario_name=Path(file_path).stem)

    def __len__(self) -> int:
        return len(self.time_steps)


class SimulationDriver:
    """
    Owns the loop state and runs the controller/plant step.

    Example:
        >>> driver = SimulationDriver()
        >>> record = driver.tick()
        >>> record.power, round(record.new_temperature, 2)
        (100.0, 45.0)
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        controller: Optional[BaseController] = None,
        csv_path: Optional[str] = None
    ):
        """
        Initialize driver.

        Args:
            config: Loop configuration (reference calibration if None)
            controller: Controller instance (built from config.controller if None)
            csv_path: Optional path for per-tick CSV logging
        """
        self._config = config if config is not None else SimulationConfig()
        self._controller = (
            controller if controller is not None
            else create_controller(self._config.controller)
        )

        self._state = SimulationState(
            time_step=0,
            setpoint=self._config.initial_setpoint,
            measured_temperature=self._config.initial_temperature,
            integral_accumulator=self._controller.integral,
        )
        self._plant = FurnacePlant(self._config.plant, self._config.initial_temperature)

        self._commands: queue.Queue = queue.Queue()
        self._tick_lock = threading.Lock()
        self._subscribers: List[TickCallback] = []
        self._history = HistoryBuffer(self._config.history_size)

        self._csv: Optional[CSVLogger] = None
        if csv_path is not None:
            self._csv = CSVLogger(csv_path, columns=TickRecord.COLUMNS)

        p = self._config.plant
        logger.info(
            "Simulation ready: %s, setpoint=%.1f °C, T0=%.1f °C",
            self._controller.params, self._state.setpoint, self._state.measured_temperature
        )
        logger.info(
            "Furnace: heating rate=%.1f °C/min, loss coefficient=%.3f, ambient=%.1f °C",
            p.max_heating_rate, p.loss_coefficient, p.ambient_temperature
        )

    # ------------------------------------------------------------------
    # External inputs
    # ------------------------------------------------------------------

    def submit(self, command: Command) -> None:
        """Queue a command; it takes effect at the start of the next tick."""
        if not isinstance(command, (SetSetpoint, ToggleDisturbance)):
            raise TypeError(f"Unsupported command: {command!r}")
        self._commands.put(command)

    def set_setpoint(self, value: float) -> None:
        self.submit(SetSetpoint(value))

    def set_door_open(self, door_open: bool) -> None:
        self.submit(ToggleDisturbance(door_open))

    def _apply_pending_commands(self) -> None:
        while True:
            try:
                command = self._commands.get_nowait()
            except queue.Empty:
                return
            self._apply_command(command)

    def _apply_command(self, command: Command) -> None:
        if isinstance(command, SetSetpoint):
            if command.value == self._state.setpoint:
                return
            logger.info("Setpoint %.1f -> %.1f °C", self._state.setpoint, command.value)
            self._state = replace(self._state, setpoint=command.value)
            if self._config.reset_on_setpoint_change:
                self._controller.reset()
                self._state = replace(
                    self._state, integral_accumulator=self._controller.integral
                )
        elif (self._plant.open_door() if command.door_open else self._plant.close_door()):
            logger.info("Door %s", "opened" if command.door_open else "closed")

    # ------------------------------------------------------------------
    # Stepping
    # ------------------------------------------------------------------

    def tick(self) -> TickRecord:
        """
        Run one simulated minute.

        Returns:
            The published TickRecord

        A failing tick leaves the loop as it was before the tick: the plant
        commits nothing and the controller integral is restored.

        Raises:
            InvalidState: If the loop diverges to a non-finite temperature
        """
        with self._tick_lock:
            self._apply_pending_commands()

            time_step = self._state.time_step + 1
            setpoint = self._state.setpoint
            measurement = self._plant.output

            error = setpoint - measurement
            integral_before = self._controller.integral
            try:
                power = self._controller.compute(error)
                new_temperature = self._plant.update(power)
            except Exception:
                if integral_before is not None:
                    self._controller.set_integral(integral_before)
                raise

            record = TickRecord(
                time_step=time_step,
                setpoint=setpoint,
                measured_temperature=measurement,
                power=power,
                error=error,
                new_temperature=new_temperature,
                door_open=self._plant.disturbance.door_open,
                integral_accumulator=self._controller.integral,
            )

            logger.debug(
                "t=%d min measurement=%.2f °C error=%.2f power=%.2f %% "
                "integral=%s -> %.2f °C",
                time_step, measurement, error, power,
                "n/a" if record.integral_accumulator is None
                else f"{record.integral_accumulator:.1f}",
                new_temperature
            )

            self._state = SimulationState(
                time_step=time_step,
                setpoint=setpoint,
                measured_temperature=new_temperature,
                integral_accumulator=record.integral_accumulator,
            )
            self._history.append(record)
            if self._csv is not None:
                self._csv.log(record.to_dict())

        for callback in list(self._subscribers):
            callback(record)

        return record

    def run(self, n_ticks: int, scenario_name: str = "") -> SimulationResult:
        """
        Run n_ticks synchronously.

        Args:
            n_ticks: Number of ticks to run
            scenario_name: Label stored in the result

        Returns:
            SimulationResult with one entry per tick
        """
        if n_ticks < 0:
            raise ValueError("n_ticks must be non-negative")

        start_time = time.perf_counter()
        records = [self.tick() for _ in range(n_ticks)]
        self.flush_log()

        return SimulationResult.from_records(
            records,
            scenario_name=scenario_name,
            execution_time=time.perf_counter() - start_time
        )

    def run_scenario(self, scenario: FurnaceScenario) -> SimulationResult:
        """
        Run a scripted scenario from the current state.

        Commands scheduled for tick n are submitted right before the
        driver's n-th tick of this run.
        """
        start_time = time.perf_counter()
        records = []
        for tick in range(1, scenario.duration + 1):
            for command in scenario.commands_at(tick):
                self.submit(command)
            records.append(self.tick())
        self.flush_log()

        return SimulationResult.from_records(
            records,
            scenario_name=scenario.name,
            execution_time=time.perf_counter() - start_time
        )

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    def subscribe(self, callback: TickCallback) -> None:
        """Register a display collaborator called with every TickRecord."""
        self._subscribers.append(callback)

    def unsubscribe(self, callback: TickCallback) -> None:
        self._subscribers.remove(callback)

    def snapshot(self) -> SimulationState:
        """Copy of the current loop state."""
        with self._tick_lock:
            return replace(self._state)

    @property
    def state(self) -> SimulationState:
        return self._state

    @property
    def disturbance(self) -> DisturbanceState:
        """Copy of the door state."""
        return self._plant.disturbance

    @property
    def plant(self) -> FurnacePlant:
        return self._plant

    @property
    def controller(self) -> BaseController:
        return self._controller

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def history(self) -> HistoryBuffer:
        """Most recent ticks, bounded by config.history_size."""
        return self._history

    def flush_log(self) -> None:
        """Flush any buffered CSV rows to disk."""
        if self._csv is not None:
            self._csv.flush()

    def close(self) -> None:
        """Close the CSV log, if any."""
        if self._csv is not None:
            self._csv.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class TickScheduler:
    """
    Calls ``driver.tick()`` every ``tick_period`` seconds on a background thread.

    The first tick happens one period after start(). stop() sets a flag the
    loop checks while sleeping, so it returns within one period at most.
    If a tick raises, the loop stops and join() re-raises the exception.

    Example:
        >>> scheduler = TickScheduler(driver, tick_period=0.1, max_ticks=50)
        >>> scheduler.start()
        >>> scheduler.join()
    """

    def __init__(
        self,
        driver: SimulationDriver,
        tick_period: Optional[float] = None,
        max_ticks: Optional[int] = None
    ):
        period = tick_period if tick_period is not None else driver.config.tick_period
        if period <= 0:
            raise ValueError("tick_period must be positive")
        if max_ticks is not None and max_ticks < 0:
            raise ValueError("max_ticks must be non-negative")

        self._driver = driver
        self._tick_period = float(period)
        self._max_ticks = max_ticks
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._ticks = 0
        self._error: Optional[BaseException] = None

    def start(self) -> None:
        if self.is_running:
            raise RuntimeError("Scheduler already running")
        self._stop_event.clear()
        self._error = None
        self._ticks = 0
        self._thread = threading.Thread(
            target=self._run, name="furnace-tick-scheduler", daemon=True
        )
        self._thread.start()

    def _run(self) -> None:
        logger.info("Scheduler started (period=%.3f s)", self._tick_period)
        try:
            while self._max_ticks is None or self._ticks < self._max_ticks:
                if self._stop_event.wait(self._tick_period):
                    break
                self._driver.tick()
                self._ticks += 1
        except Exception as e:
            logger.exception("Tick failed, stopping scheduler")
            self._error = e
        finally:
            self._stop_event.set()
            logger.info("Scheduler stopped after %d ticks", self._ticks)

    def stop(self) -> None:
        """Request the loop to stop; does not wait for it."""
        self._stop_event.set()

    def join(self, timeout: Optional[float] = None) -> None:
        """
        Wait for the loop to finish.

        Raises:
            Exception: Whatever a failing tick raised
        """
        if self._thread is not None:
            self._thread.join(timeout)
        if self._error is not None:
            raise self._error

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def ticks(self) -> int:
        """Ticks run since start()."""
        return self._ticks

    @property
    def error(self) -> Optional[BaseException]:
        return self._error

    @property
    def tick_period(self) -> float:
        return self._tick_period
