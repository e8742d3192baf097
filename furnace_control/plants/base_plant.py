"""
Base plant model abstract class.
Defines the interface for thermal plant models driven once per simulated minute.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any


class BasePlant(ABC):
    """
    Abstract base class for plant models.

    A plant holds its own temperature and advances it by one tick
    (one simulated minute) for a given heating power.
    """

    def __init__(self, initial_temperature: float = 0.0):
        """
        Initialize base plant.

        Args:
            initial_temperature: Temperature at time zero (°C)
        """
        self._initial_temperature = float(initial_temperature)
        self._output: float = self._initial_temperature
        self._time: int = 0

    @abstractmethod
    def update(self, power: float) -> float:
        """
        Advance the plant by one tick.

        Args:
            power: Heating power command (percent)

        Returns:
            Temperature at the end of the tick (°C)
        """
        pass

    @abstractmethod
    def reset(self) -> None:
        """Reset plant to initial state."""
        pass

    @property
    def output(self) -> float:
        """Current plant temperature."""
        return self._output

    @property
    def time(self) -> int:
        """Minutes simulated since the last reset."""
        return self._time

    def get_state(self) -> Dict[str, Any]:
        """Get current plant state as dictionary."""
        return {
            'output': self._output,
            'time': self._time,
        }

    @abstractmethod
    def get_info(self) -> Dict[str, Any]:
        """Get plant information/parameters."""
        pass
