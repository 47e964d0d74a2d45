"""
Consist - Rolling stock making up a train.
"""

from enum import Enum
from typing import Sequence


class StockType(Enum):
    """Rolling stock types with their body lengths in meters."""
    LOCOMOTIVE = ("Locomotive", 20.0)
    PASSENGER_CAR = ("Passenger Car", 25.0)
    FLATBED = ("Flatbed", 15.0)
    BOXCAR = ("Boxcar", 15.0)
    
    @property
    def display_name(self) -> str:
        """Player-facing name."""
        return self.value[0]
    
    @property
    def length(self) -> float:
        """Body length in meters."""
        return self.value[1]


def consist_length(consist: Sequence[StockType]) -> float:
    """Total length of a consist in meters."""
    return float(sum(car.length for car in consist))
