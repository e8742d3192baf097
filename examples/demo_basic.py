#!/usr/bin/env python3
"""
Basic Furnace Demo

Demonstrates:
- Reference PI heat-up from 25 °C to 180 °C
- CSV logging of every tick
- Performance metrics
- Three-panel plot (power, temperature, error)
"""

import logging
import sys
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from furnace_control.simulation.config import SimulationConfig
from furnace_control.simulation.driver import SimulationDriver
from furnace_control.simulation.scenarios import ScenarioLibrary
from furnace_control.analyzer.metrics import PerformanceMetrics
from furnace_control.analyzer.plots import FurnacePlotter


def main():
    print("=" * 60)
    print("Basic Furnace Demo")
    print("=" * 60)

    config = SimulationConfig()
    print(f"\nController: {config.controller}")
    print(f"Plant: {config.plant.to_dict()}")

    with SimulationDriver(config, csv_path="output/basic_demo.csv") as driver:
        scenario = ScenarioLibrary.reference_heating(setpoint=180.0, duration=120)
        print(f"\nRunning scenario: {scenario.name} ({scenario.description})")
        result = driver.run_scenario(scenario)

    print(f"Simulation completed in {result.execution_time:.3f}s")
    print(f"Final temperature: {result.temperatures[-1]:.2f} °C")
    print(f"Final error: {result.errors[-1]:.4f} °C")

    print("\n" + "=" * 60)
    print("Analysis Results")
    print("=" * 60)

    metrics = PerformanceMetrics().calculate_all_metrics(result)

    step_metrics = metrics['step_response']
    print(f"\nStep Response Metrics:")
    print(f"  Rise Time: {step_metrics['rise_time']:.1f} min")
    print(f"  Settling Time (2%): {step_metrics['settling_time_2pct']:.1f} min")
    print(f"  Overshoot: {step_metrics['overshoot_percent']:.1f}%")
    print(f"  Steady-State Error: {step_metrics['steady_state_error']:.4f} °C")

    effort = metrics['control_effort']
    print(f"\nControl Effort:")
    print(f"  Mean power: {effort['mean_power']:.1f}%")
    print(f"  Time saturated: {effort['saturation_fraction'] * 100:.0f}%")

    print("\nGenerating plots...")
    FurnacePlotter().plot_result(result)

    print("\nClose plot window to exit.")
    FurnacePlotter.show()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    Path("output").mkdir(exist_ok=True)
    main()
