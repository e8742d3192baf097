#!/usr/bin/env python3
"""
Run a furnace simulation from the command line.

Usage:
    python run_furnace.py [options]

Examples:
    python run_furnace.py --ticks 120
    python run_furnace.py --ki 0 --door-open 60 --door-close 70 --csv output/p_door.csv
    python run_furnace.py --config furnace.json --realtime --ticks 30 -v
"""

import argparse
import logging
import sys

from furnace_control.simulation.config import SimulationConfig
from furnace_control.simulation.driver import SimulationDriver, TickScheduler
from furnace_control.simulation.scenarios import FurnaceScenario
from furnace_control.simulation.state import SetSetpoint, ToggleDisturbance
from furnace_control.analyzer.metrics import PerformanceMetrics
from furnace_control.utils.validators import InvalidConfiguration, InvalidState

logger = logging.getLogger("run_furnace")


def build_config(args: argparse.Namespace) -> SimulationConfig:
    config = SimulationConfig.from_file(args.config) if args.config else SimulationConfig()

    controller_changes = {k: v for k, v in (('kp', args.kp), ('ki', args.ki)) if v is not None}
    if controller_changes:
        config = config.copy(controller=config.controller.copy(**controller_changes))
    if args.period is not None:
        config = config.copy(tick_period=args.period)
    return config


def build_scenario(args: argparse.Namespace) -> FurnaceScenario:
    scenario = FurnaceScenario(name="Command Line Run", duration=args.ticks)
    if args.setpoint is not None:
        scenario.at(1, SetSetpoint(args.setpoint))
    if args.door_open is not None:
        scenario.at(args.door_open, ToggleDisturbance(True))
    if args.door_close is not None:
        scenario.at(args.door_close, ToggleDisturbance(False))
    return scenario


def run_realtime(driver: SimulationDriver, scenario: FurnaceScenario) -> None:
    """Tick on the wall clock, feeding scripted commands from the main thread."""
    def feed(record):
        for command in scenario.commands_at(record.time_step + 1):
            driver.submit(command)

    for command in scenario.commands_at(1):
        driver.submit(command)
    driver.subscribe(feed)

    scheduler = TickScheduler(driver, max_ticks=scenario.duration)
    scheduler.start()
    try:
        scheduler.join()
    except KeyboardInterrupt:
        scheduler.stop()
        scheduler.join()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description='Simulate closed-loop furnace temperature control',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('--config', type=str, help='JSON configuration file')
    parser.add_argument('--ticks', type=int, default=120, help='Simulated minutes to run')
    parser.add_argument('--setpoint', type=float, help='Setpoint (°C) from tick 1')
    parser.add_argument('--kp', type=float, help='Proportional gain')
    parser.add_argument('--ki', type=float, help='Integral gain (0 for P control)')
    parser.add_argument('--door-open', type=int, help='Tick at which the door opens')
    parser.add_argument('--door-close', type=int, help='Tick at which the door closes')
    parser.add_argument('--csv', type=str, help='Write every tick to this CSV file')
    parser.add_argument('--realtime', action='store_true',
                        help='Tick on the wall clock instead of as fast as possible')
    parser.add_argument('--period', type=float, help='Seconds per tick in realtime mode')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log every tick')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    try:
        config = build_config(args)
        scenario = build_scenario(args)
    except (InvalidConfiguration, InvalidState, ValueError) as e:
        parser.error(str(e))

    with SimulationDriver(config, csv_path=args.csv) as driver:
        if args.realtime:
            run_realtime(driver, scenario)
            result = None
        else:
            result = driver.run_scenario(scenario)
        final = driver.snapshot()

    logger.info(
        "Finished at t=%d min: %.2f °C (setpoint %.1f °C)",
        final.time_step, final.measured_temperature, final.setpoint
    )

    if result is not None and len(result) >= 2:
        metrics = PerformanceMetrics().calculate_all_metrics(result)
        for group, values in metrics.items():
            print(f"\n{group}:")
            for name, value in values.items():
                print(f"  {name}: {value:.4g}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
