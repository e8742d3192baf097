"""
Unit tests for the simulation driver, scheduler and scenarios.
"""

import csv
import threading
import pytest
import numpy as np
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from furnace_control.core.controller_params import ControllerParameters
from furnace_control.core.controllers import PIController
from furnace_control.plants.furnace import PlantParameters
from furnace_control.simulation.config import SimulationConfig
from furnace_control.simulation.driver import SimulationDriver, SimulationResult, TickScheduler
from furnace_control.simulation.scenarios import FurnaceScenario, ScenarioLibrary
from furnace_control.simulation.state import SetSetpoint, TickRecord, ToggleDisturbance
from furnace_control.utils.validators import InvalidConfiguration, InvalidState


class TestSimulationDriver:
    """Test suite for SimulationDriver."""

    def test_reference_first_tick(self):
        """Test tick 1 of the reference run."""
        driver = SimulationDriver()
        record = driver.tick()

        assert record.time_step == 1
        assert record.setpoint == 180.0
        assert record.measured_temperature == 25.0
        assert record.error == pytest.approx(155.0)
        assert record.power == 100.0
        assert record.new_temperature == pytest.approx(45.0)
        assert record.integral_accumulator == pytest.approx(155.0)

        state = driver.state
        assert state.time_step == 1
        assert state.measured_temperature == pytest.approx(45.0)
        assert state.integral_accumulator == pytest.approx(155.0)

    def test_door_opens_at_tick_two(self):
        """Test the one-shot drop lands on the tick after the door opens."""
        driver = SimulationDriver()
        driver.tick()
        driver.set_door_open(True)

        record = driver.tick()
        assert record.door_open
        # 45 - 8 (drop) + 20 (heating) - 2 (losses) - 6 (door)
        assert record.new_temperature == pytest.approx(49.0)

        record = driver.tick()
        # No second drop: 49 + 20 - 2.4 - 6
        assert record.new_temperature == pytest.approx(60.6)

    def test_closing_door_restores_nothing(self):
        """Test closing the door only stops the continuous loss."""
        driver = SimulationDriver()
        driver.tick()
        driver.set_door_open(True)
        driver.tick()
        driver.set_door_open(False)

        record = driver.tick()
        assert not record.door_open
        assert record.new_temperature == pytest.approx(49.0 + 20.0 - 0.1 * (49.0 - 25.0))

    def test_commands_apply_on_next_tick(self):
        """Test inputs are not visible before the next tick."""
        driver = SimulationDriver()
        driver.set_setpoint(100.0)
        driver.set_door_open(True)

        assert driver.state.setpoint == 180.0
        assert not driver.disturbance.door_open

        record = driver.tick()
        assert record.setpoint == 100.0
        assert record.door_open

    def test_setpoint_change_resets_integral(self):
        """Test a new setpoint clears stale integral history."""
        driver = SimulationDriver()
        for _ in range(3):
            driver.tick()
        assert driver.controller.integral > 155.0

        driver.submit(SetSetpoint(150.0))
        record = driver.tick()
        assert record.integral_accumulator == pytest.approx(record.error)

    def test_same_setpoint_keeps_integral(self):
        """Test resubmitting the current setpoint is not a change."""
        driver = SimulationDriver()
        driver.tick()
        driver.set_setpoint(180.0)
        record = driver.tick()
        assert record.integral_accumulator == pytest.approx(155.0 + 135.0)

    def test_reset_on_setpoint_change_disabled(self):
        """Test the integral survives a setpoint change when configured so."""
        driver = SimulationDriver(SimulationConfig(reset_on_setpoint_change=False))
        driver.tick()
        driver.set_setpoint(200.0)
        record = driver.tick()
        assert record.integral_accumulator == pytest.approx(155.0 + 155.0)

    def test_proportional_driver_has_no_integral(self):
        """Test P configuration leaves integral_accumulator unset."""
        config = SimulationConfig(controller=ControllerParameters(kp=0.9, ki=0.0))
        driver = SimulationDriver(config)
        record = driver.tick()
        assert record.integral_accumulator is None
        assert driver.state.integral_accumulator is None
        assert record.power == 100.0

    def test_explicit_controller_instance(self):
        """Test the driver accepts a prebuilt controller."""
        controller = PIController(ControllerParameters(kp=0.5, ki=0.05))
        driver = SimulationDriver(controller=controller)
        driver.tick()
        assert controller.integral == pytest.approx(155.0)

    def test_history_is_bounded_fifo(self):
        """Test history keeps only the most recent ticks."""
        driver = SimulationDriver(SimulationConfig(history_size=5))
        driver.run(12)

        history = driver.history
        assert len(history) == 5
        assert history.is_full
        assert list(history.column('time_step')) == [8, 9, 10, 11, 12]

    def test_subscribers_receive_records(self):
        """Test display collaborators get every record."""
        driver = SimulationDriver()
        received = []
        driver.subscribe(received.append)
        driver.run(3)
        driver.unsubscribe(received.append)
        driver.tick()

        assert [r.time_step for r in received] == [1, 2, 3]
        assert all(isinstance(r, TickRecord) for r in received)

    def test_run_returns_arrays(self):
        """Test run() collects one entry per tick."""
        result = SimulationDriver().run(30)

        assert len(result) == 30
        assert result.time_steps[0] == 1
        assert np.all((result.powers >= 0) & (result.powers <= 100))
        assert np.allclose(result.measurements[1:], result.temperatures[:-1])
        assert np.allclose(result.errors, result.setpoints - result.measurements)

    def test_pi_reaches_setpoint(self):
        """Test the reference PI loop settles at 180 °C."""
        result = SimulationDriver().run(400)
        assert result.temperatures[-1] == pytest.approx(180.0, abs=0.5)

    def test_snapshot_is_a_copy(self):
        """Test snapshots do not change with later ticks."""
        driver = SimulationDriver()
        snap = driver.snapshot()
        driver.tick()
        assert snap.time_step == 0
        assert driver.state.time_step == 1

    def test_csv_logging(self, tmp_path):
        """Test per-tick rows are written to CSV."""
        path = tmp_path / "furnace.csv"
        with SimulationDriver(csv_path=str(path)) as driver:
            driver.run(10)

        with open(path, newline='') as f:
            rows = list(csv.DictReader(f))

        assert len(rows) == 10
        assert list(rows[0].keys()) == list(TickRecord.COLUMNS)
        assert float(rows[0]['new_temperature']) == pytest.approx(45.0)

    def test_result_from_csv_log(self, tmp_path):
        """Test a CSV log can be loaded back for analysis."""
        path = tmp_path / "door.csv"
        with SimulationDriver(csv_path=str(path)) as driver:
            expected = driver.run_scenario(ScenarioLibrary.door_opening(open_at=5, close_at=8, duration=12))

        loaded = SimulationResult.from_csv(str(path))
        assert loaded.scenario_name == "door"
        assert np.array_equal(loaded.door_open, expected.door_open)
        assert np.allclose(loaded.temperatures, expected.temperatures)
        assert np.allclose(loaded.integrals, expected.integrals)

    def test_rejects_nan_setpoint(self):
        """Test a NaN setpoint fails at submission."""
        driver = SimulationDriver()
        with pytest.raises(InvalidState):
            driver.set_setpoint(float('nan'))

    def test_door_commands_reach_plant(self):
        """Test door commands are applied to the driver's plant."""
        driver = SimulationDriver()
        driver.set_door_open(True)
        driver.tick()

        assert driver.plant.disturbance.door_open
        assert driver.plant.disturbance.initial_drop_applied
        assert driver.plant.output == driver.state.measured_temperature
        assert driver.plant.time == 1

    def test_failed_tick_leaves_loop_unchanged(self):
        """Test a diverging tick rolls back the controller and commits no plant change."""
        config = SimulationConfig(
            plant=PlantParameters(loss_coefficient=1.0, ambient_temperature=-1e308),
            initial_temperature=1e308,
        )
        controller = PIController(config.controller)
        controller.set_integral(120.0)
        driver = SimulationDriver(config, controller=controller)
        driver.set_door_open(True)

        with pytest.raises(InvalidState):
            driver.tick()

        assert controller.integral == pytest.approx(120.0)
        assert driver.state.time_step == 0
        assert driver.state.measured_temperature == 1e308
        assert driver.plant.output == 1e308
        assert driver.disturbance.door_open
        assert not driver.disturbance.initial_drop_applied
        assert len(driver.history) == 0

    def test_output_range_outside_power_percent_rejected(self):
        """Test a configuration that could drive power beyond 100 % is refused up front."""
        with pytest.raises(InvalidConfiguration):
            SimulationConfig.from_dict({'controller': {'output_max': 150.0}})

    def test_rejects_unknown_command(self):
        """Test only known commands can be queued."""
        with pytest.raises(TypeError):
            SimulationDriver().submit("open door")

    def test_commands_from_other_thread(self):
        """Test commands queued concurrently are all applied at tick boundaries."""
        driver = SimulationDriver()

        def toggle():
            for i in range(100):
                driver.submit(ToggleDisturbance(i % 2 == 0))

        threads = [threading.Thread(target=toggle) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        record = driver.tick()
        # Last command of every thread closes the door
        assert not record.door_open


class TestScenarios:
    """Test suite for scripted scenarios."""

    def test_door_opening_scenario(self):
        """Test door flags follow the script."""
        scenario = ScenarioLibrary.door_opening(open_at=10, close_at=15, duration=20)
        result = SimulationDriver().run_scenario(scenario)

        assert result.scenario_name == "Door Opening"
        assert len(result) == 20
        expected = np.zeros(20, dtype=bool)
        expected[9:14] = True
        assert np.array_equal(result.door_open, expected)

    def test_setpoint_steps_scenario(self):
        """Test setpoints change on the scripted ticks."""
        scenario = ScenarioLibrary.setpoint_steps(steps=((1, 150.0), (5, 100.0)), duration=8)
        result = SimulationDriver().run_scenario(scenario)
        assert list(result.setpoints) == [150.0] * 4 + [100.0] * 4

    def test_rejects_invalid_ticks(self):
        """Test events before tick 1 are rejected."""
        with pytest.raises(ValueError):
            FurnaceScenario(name="bad", duration=5).at(0, SetSetpoint(100.0))
        with pytest.raises(ValueError):
            FurnaceScenario(name="bad", duration=0)

    def test_library_scenarios_run(self):
        """Test every library scenario runs end to end."""
        for scenario in ScenarioLibrary.all_scenarios():
            result = SimulationDriver().run_scenario(scenario)
            assert len(result) == scenario.duration


class TestTickScheduler:
    """Test suite for TickScheduler."""

    def test_runs_max_ticks(self):
        """Test the scheduler stops after max_ticks."""
        driver = SimulationDriver()
        scheduler = TickScheduler(driver, tick_period=0.005, max_ticks=5)
        scheduler.start()
        scheduler.join(timeout=5.0)

        assert not scheduler.is_running
        assert scheduler.ticks == 5
        assert driver.state.time_step == 5

    def test_stop(self):
        """Test stop() ends an unbounded run."""
        driver = SimulationDriver()
        scheduler = TickScheduler(driver, tick_period=0.005)
        scheduler.start()
        assert scheduler.is_running

        scheduler.stop()
        scheduler.join(timeout=5.0)
        assert not scheduler.is_running

    def test_failing_tick_is_reraised(self):
        """Test an exception inside a tick stops the loop and surfaces on join()."""
        driver = SimulationDriver()

        def explode(record):
            raise RuntimeError("display failed")

        driver.subscribe(explode)
        scheduler = TickScheduler(driver, tick_period=0.005)
        scheduler.start()

        with pytest.raises(RuntimeError, match="display failed"):
            scheduler.join(timeout=5.0)
        assert isinstance(scheduler.error, RuntimeError)

    def test_uses_configured_period(self):
        """Test the default period comes from the configuration."""
        driver = SimulationDriver(SimulationConfig(tick_period=0.25))
        assert TickScheduler(driver).tick_period == 0.25

    def test_rejects_bad_period(self):
        """Test non-positive periods are rejected."""
        with pytest.raises(ValueError):
            TickScheduler(SimulationDriver(), tick_period=0.0)


class TestSimulationConfig:
    """Test suite for SimulationConfig."""

    def test_defaults(self):
        """Test reference defaults."""
        config = SimulationConfig()
        assert config.initial_setpoint == 180.0
        assert config.initial_temperature == 25.0
        assert config.history_size == 120
        assert config.controller.kp == 0.9
        assert config.plant.max_heating_rate == 20.0

    @pytest.mark.parametrize("changes", [
        {'tick_period': 0.0},
        {'history_size': 0},
        {'initial_temperature': float('nan')},
        {'initial_setpoint': float('inf')},
    ])
    def test_rejects_invalid_values(self, changes):
        """Test invalid top-level values are rejected."""
        with pytest.raises(InvalidConfiguration):
            SimulationConfig(**changes)

    def test_nested_dicts(self):
        """Test nested dictionaries are converted to parameter objects."""
        config = SimulationConfig.from_dict({
            'controller': {'kp': 2.0, 'ki': 0.0},
            'plant': {'loss_coefficient': 0.05},
        })
        assert isinstance(config.controller, ControllerParameters)
        assert config.controller.integral_limit is None
        assert config.plant.loss_coefficient == 0.05

    def test_rejects_unknown_keys(self):
        """Test unknown keys are reported."""
        with pytest.raises(InvalidConfiguration):
            SimulationConfig.from_dict({'sample_time': 0.01})

    def test_from_file(self, tmp_path):
        """Test loading a JSON configuration file."""
        path = tmp_path / "furnace.json"
        path.write_text(SimulationConfig(initial_setpoint=150.0).to_json(), encoding='utf-8')

        config = SimulationConfig.from_file(path)
        assert config.initial_setpoint == 150.0
        assert config == SimulationConfig(initial_setpoint=150.0)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
