#!/usr/bin/env python3
"""
Door Disturbance Demo

Compares P and PI control when the furnace door is opened for ten minutes
after the heat-up:
- P control settles below the setpoint (proportional offset)
- PI control recovers the setpoint once the door is closed
"""

import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from furnace_control.core.controller_params import ControllerParameters
from furnace_control.simulation.config import SimulationConfig
from furnace_control.simulation.driver import SimulationDriver
from furnace_control.simulation.scenarios import ScenarioLibrary
from furnace_control.analyzer.control_analysis import FurnaceLoopAnalyzer
from furnace_control.analyzer.metrics import PerformanceMetrics
from furnace_control.analyzer.plots import FurnacePlotter


def main():
    print("=" * 60)
    print("Door Disturbance Demo")
    print("=" * 60)

    variants = {
        'P': ControllerParameters(kp=0.9, ki=0.0),
        'PI': ControllerParameters(kp=0.9, ki=0.2),
    }
    scenario = ScenarioLibrary.door_opening(open_at=60, close_at=70, duration=150)
    plotter = FurnacePlotter()
    metrics = PerformanceMetrics()

    for name, params in variants.items():
        config = SimulationConfig(controller=params)
        analysis = FurnaceLoopAnalyzer(params, config.plant).analyze(config.initial_setpoint)

        result = SimulationDriver(config).run_scenario(scenario)
        door = result.door_open

        print(f"\n{name} controller: {params}")
        print(f"  Closed-loop poles: {analysis['poles']}")
        print(f"  Predicted steady state: {analysis['steady_state_temperature']:.2f} °C")
        print(f"  Temperature before door: {result.temperatures[~door][58]:.2f} °C")
        print(f"  Lowest temperature, door open: {result.temperatures[door].min():.2f} °C")
        print(f"  Final temperature: {result.temperatures[-1]:.2f} °C")

        error = metrics.calculate_error_metrics(
            result.time_steps.astype(float), result.setpoints, result.temperatures
        )
        print(f"  IAE: {error.iae:.1f} °C·min")

        plotter.plot_result(result, title=f"{scenario.name} - {name} control")

    print("\nClose plot windows to exit.")
    FurnacePlotter.show()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    main()
