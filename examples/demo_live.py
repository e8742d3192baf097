#!/usr/bin/env python3
"""
Live Furnace Demo

The furnace runs on a background TickScheduler (one simulated minute per
tick period) while the figure redraws the last 120 minutes. A slider sets
the setpoint and a check box opens the door; both are queued as commands
and take effect on the next tick.
"""

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import matplotlib.pyplot as plt
from matplotlib.widgets import Slider, CheckButtons

from furnace_control.simulation.config import SimulationConfig
from furnace_control.simulation.driver import SimulationDriver, TickScheduler
from furnace_control.analyzer.plots import LiveDisplay


def main(tick_period: float = 0.2):
    config = SimulationConfig(tick_period=tick_period)
    driver = SimulationDriver(config)

    display = LiveDisplay(window=config.history_size)
    driver.subscribe(display)
    display.fig.subplots_adjust(bottom=0.18)

    slider_ax = display.fig.add_axes([0.15, 0.05, 0.5, 0.03])
    setpoint = Slider(slider_ax, 'Setpoint (°C)', 50, 250, valinit=config.initial_setpoint, valstep=1)
    setpoint.on_changed(driver.set_setpoint)

    door_ax = display.fig.add_axes([0.75, 0.02, 0.15, 0.08])
    door = CheckButtons(door_ax, ['Door open'], [False])
    door.on_clicked(lambda _label: driver.set_door_open(door.get_status()[0]))

    scheduler = TickScheduler(driver)
    scheduler.start()
    try:
        while plt.fignum_exists(display.fig.number) and scheduler.is_running:
            display.refresh()
            plt.pause(config.tick_period)
    finally:
        scheduler.stop()
        scheduler.join()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description='Interactive furnace simulation')
    parser.add_argument('--period', type=float, default=0.2,
                        help='Wall-clock seconds per simulated minute')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log every tick')
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    main(args.period)
