"""
Scripted furnace scenarios.
A scenario is a duration in ticks plus the commands to inject before given ticks.
"""

from typing import Dict, List, Optional, Sequence, Tuple
from dataclasses import dataclass, field

from furnace_control.simulation.state import Command, SetSetpoint, ToggleDisturbance


@dataclass
class FurnaceScenario:
    """
    A scripted run.

    ``events`` maps a tick number (1-based, the tick in which the command
    first takes effect) to the commands submitted just before it.
    """

    name: str
    duration: int
    events: Dict[int, List[Command]] = field(default_factory=dict)
    description: str = ""

    def __post_init__(self):
        if self.duration < 1:
            raise ValueError("duration must be at least 1 tick")
        for tick in self.events:
            if tick < 1:
                raise ValueError(f"event tick must be >= 1, got {tick}")

    def at(self, tick: int, command: Command) -> 'FurnaceScenario':
        """Schedule a command; returns self for chaining."""
        if tick < 1:
            raise ValueError(f"event tick must be >= 1, got {tick}")
        self.events.setdefault(tick, []).append(command)
        return self

    def commands_at(self, tick: int) -> List[Command]:
        return list(self.events.get(tick, []))


class ScenarioLibrary:
    """Reference furnace scenarios."""

    @staticmethod
    def reference_heating(
        setpoint: float = 180.0,
        duration: int = 120
    ) -> FurnaceScenario:
        """Heat-up from ambient to a fixed setpoint, door closed."""
        return FurnaceScenario(
            name="Reference Heating",
            duration=duration,
            description=f"Heat-up to {setpoint} °C"
        ).at(1, SetSetpoint(setpoint))

    @staticmethod
    def door_opening(
        setpoint: float = 180.0,
        open_at: int = 60,
        close_at: Optional[int] = 70,
        duration: int = 120
    ) -> FurnaceScenario:
        """Heat-up, then open the door once the furnace has settled."""
        scenario = FurnaceScenario(
            name="Door Opening",
            duration=duration,
            description=f"Door open at t={open_at} min"
            + (f", closed at t={close_at} min" if close_at is not None else "")
        ).at(1, SetSetpoint(setpoint)).at(open_at, ToggleDisturbance(True))
        if close_at is not None:
            scenario.at(close_at, ToggleDisturbance(False))
        return scenario

    @staticmethod
    def setpoint_steps(
        steps: Sequence[Tuple[int, float]] = ((1, 180.0), (60, 120.0), (120, 220.0)),
        duration: int = 180
    ) -> FurnaceScenario:
        """Sequence of setpoint changes, as from a slider."""
        scenario = FurnaceScenario(
            name="Setpoint Steps",
            duration=duration,
            description=", ".join(f"{sp:g} °C at t={t}" for t, sp in steps)
        )
        for tick, setpoint in steps:
            scenario.at(tick, SetSetpoint(setpoint))
        return scenario

    @staticmethod
    def all_scenarios() -> List[FurnaceScenario]:
        return [
            ScenarioLibrary.reference_heating(),
            ScenarioLibrary.door_opening(),
            ScenarioLibrary.setpoint_steps(),
        ]
