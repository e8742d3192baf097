"""
Unit tests for the furnace thermal model.
"""

import pytest
import numpy as np
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from furnace_control.plants.furnace import (
    PlantParameters,
    DisturbanceState,
    FurnacePlant,
    thermal_step,
)
from furnace_control.utils.validators import InvalidConfiguration, InvalidState


@pytest.fixture
def params():
    return PlantParameters()


class TestThermalStep:
    """Test suite for thermal_step."""

    def test_full_power_from_ambient(self, params):
        """Test reference first tick: 25 °C at 100 % gives 45 °C."""
        new_temp = thermal_step(25.0, 100.0, DisturbanceState(), params)
        assert new_temp == pytest.approx(45.0)

    def test_cooling_towards_ambient(self, params):
        """Test losses are proportional to (T - ambient)."""
        assert thermal_step(125.0, 0.0, DisturbanceState(), params) == pytest.approx(115.0)

    def test_below_ambient_warms_up(self, params):
        """Test the symmetric linear model heats a cold furnace towards ambient."""
        assert thermal_step(15.0, 0.0, DisturbanceState(), params) == pytest.approx(16.0)

    def test_heating_scales_with_power(self, params):
        """Test half power gives half the heating rate."""
        assert thermal_step(25.0, 50.0, DisturbanceState(), params) == pytest.approx(35.0)

    def test_monotone_approach_without_heating(self, params):
        """Test |T - ambient| never grows with zero power and door closed."""
        for start in (300.0, -40.0):
            temperature = start
            distances = []
            for _ in range(60):
                temperature = thermal_step(temperature, 0.0, DisturbanceState(), params)
                distances.append(abs(temperature - params.ambient_temperature))
            assert np.all(np.diff(distances) <= 0)

    def test_door_one_shot_drop(self, params):
        """Test the opening tick is exactly drop + continuous loss below a closed tick."""
        closed = thermal_step(100.0, 40.0, DisturbanceState(), params)

        door = DisturbanceState()
        door.set_door(True)
        opened = thermal_step(100.0, 40.0, door, params)

        expected = closed - params.door_initial_drop - params.door_loss_per_minute
        assert opened == pytest.approx(expected)
        assert door.initial_drop_applied

    def test_door_drop_not_repeated(self, params):
        """Test later ticks with the door open only lose the continuous part."""
        door = DisturbanceState()
        door.set_door(True)
        thermal_step(100.0, 0.0, door, params)

        closed = thermal_step(80.0, 0.0, DisturbanceState(), params)
        still_open = thermal_step(80.0, 0.0, door, params)
        assert still_open == pytest.approx(closed - params.door_loss_per_minute)

    def test_temperature_is_unbounded(self, params):
        """Test no floor is applied even far below ambient."""
        door = DisturbanceState(door_open=True, initial_drop_applied=True)
        temperature = 25.0
        for _ in range(20):
            temperature = thermal_step(temperature, 0.0, door, params)
        assert temperature < params.ambient_temperature - 10

    @pytest.mark.parametrize("power", [-1.0, 100.5, float('nan')])
    def test_rejects_invalid_power(self, params, power):
        """Test power outside [0, 100] fails fast."""
        with pytest.raises(InvalidState):
            thermal_step(25.0, power, DisturbanceState(), params)

    @pytest.mark.parametrize("temperature", [float('nan'), float('inf')])
    def test_rejects_non_finite_temperature(self, params, temperature):
        """Test non-finite temperature fails fast."""
        with pytest.raises(InvalidState):
            thermal_step(temperature, 50.0, DisturbanceState(), params)


class TestDisturbanceState:
    """Test suite for door edge handling."""

    def test_opening_rearms_drop(self):
        """Test closed -> open resets the one-shot flag."""
        door = DisturbanceState(door_open=False, initial_drop_applied=True)
        assert door.set_door(True)
        assert door.door_open
        assert not door.initial_drop_applied

    def test_open_while_open_does_not_rearm(self):
        """Test repeating 'open' keeps the drop consumed."""
        door = DisturbanceState(door_open=True, initial_drop_applied=True)
        assert not door.set_door(True)
        assert door.initial_drop_applied

    def test_closing_keeps_flag(self):
        """Test closing only clears door_open."""
        door = DisturbanceState(door_open=True, initial_drop_applied=True)
        assert door.set_door(False)
        assert not door.door_open
        assert door.initial_drop_applied


class TestFurnacePlant:
    """Test suite for FurnacePlant."""

    def test_update_and_time(self):
        """Test update advances temperature and minutes."""
        plant = FurnacePlant(initial_temperature=25.0)
        assert plant.update(100.0) == pytest.approx(45.0)
        assert plant.output == pytest.approx(45.0)
        assert plant.time == 1

    def test_defaults_to_ambient(self):
        """Test initial temperature defaults to ambient."""
        plant = FurnacePlant(PlantParameters(ambient_temperature=18.0))
        assert plant.output == 18.0

    def test_reset(self):
        """Test plant reset restores temperature, time and door."""
        plant = FurnacePlant(initial_temperature=25.0)
        plant.open_door()
        for _ in range(5):
            plant.update(100.0)

        plant.reset()
        assert plant.output == 25.0
        assert plant.time == 0
        assert not plant.disturbance.door_open

    def test_door_cycle_reapplies_drop(self, params):
        """Test closing then reopening applies the drop again."""
        plant = FurnacePlant(params, initial_temperature=100.0)
        plant.open_door()
        plant.update(0.0)
        plant.close_door()
        plant.update(0.0)

        before = plant.output
        reference = thermal_step(before, 0.0, DisturbanceState(), params)
        plant.open_door()
        after = plant.update(0.0)
        assert after == pytest.approx(
            reference - params.door_initial_drop - params.door_loss_per_minute
        )

    def test_door_toggles_report_changes(self):
        """Test open/close report whether the door state changed."""
        plant = FurnacePlant()
        assert plant.open_door()
        assert not plant.open_door()
        assert plant.close_door()
        assert not plant.close_door()

    def test_failed_update_commits_nothing(self):
        """Test a non-finite step leaves temperature, time and door flags unchanged."""
        params = PlantParameters(loss_coefficient=1.0, ambient_temperature=-1e308)
        plant = FurnacePlant(params, initial_temperature=1e308)
        plant.open_door()

        with pytest.raises(InvalidState):
            plant.update(0.0)

        assert plant.output == 1e308
        assert plant.time == 0
        assert plant.disturbance.door_open
        assert not plant.disturbance.initial_drop_applied

    def test_disturbance_is_a_copy(self):
        """Test callers cannot change the door state behind the plant's back."""
        plant = FurnacePlant()
        plant.disturbance.set_door(True)
        assert not plant.disturbance.door_open

    def test_converges_to_equilibrium(self):
        """Test constant power settles at ambient + heating / loss."""
        plant = FurnacePlant(initial_temperature=25.0)
        for _ in range(400):
            plant.update(100.0)
        assert plant.equilibrium_temperature(100.0) == pytest.approx(225.0)
        assert plant.output == pytest.approx(225.0, abs=1e-6)

    def test_no_equilibrium_without_losses(self):
        """Test a lossless furnace has no equilibrium."""
        plant = FurnacePlant(PlantParameters(loss_coefficient=0.0))
        assert plant.equilibrium_temperature(50.0) is None

    def test_get_info(self):
        """Test info reports the calibration."""
        info = FurnacePlant().get_info()
        assert info['type'] == 'FurnacePlant'
        assert info['max_heating_rate'] == 20.0


class TestPlantParameters:
    """Test suite for PlantParameters."""

    @pytest.mark.parametrize("changes", [
        {'max_heating_rate': 0.0},
        {'max_heating_rate': -5.0},
        {'loss_coefficient': -0.1},
        {'door_initial_drop': -1.0},
        {'door_loss_per_minute': -1.0},
        {'ambient_temperature': float('nan')},
    ])
    def test_rejects_invalid_values(self, changes):
        """Test invalid calibrations are rejected."""
        with pytest.raises(InvalidConfiguration):
            PlantParameters(**changes)

    def test_rejects_unknown_keys(self):
        """Test from_dict reports unknown keys."""
        with pytest.raises(InvalidConfiguration):
            PlantParameters.from_dict({'tau': 5.0})

    def test_copy(self):
        """Test parameter copying."""
        params = PlantParameters().copy(loss_coefficient=0.05)
        assert params.loss_coefficient == 0.05
        assert params.max_heating_rate == 20.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
