"""
Orders - Commands that make up a train's program.

Each order is a small immutable record; a program is an ordered
sequence of them, executed one at a time.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union

from railnet.routing.spots import Spot
from railnet.track.element import SwitchState


class ReverserPosition(Enum):
    """Which track direction counts as forward for the train."""
    FORWARD = "Forward"
    REVERSE = "Reverse"


@dataclass(frozen=True)
class MoveTo:
    """Drive to a named spot and stop there."""
    spot: Spot


@dataclass(frozen=True)
class SetReverser:
    """Set the direction of travel."""
    position: ReverserPosition


@dataclass(frozen=True)
class SetSwitch:
    """Throw a switch."""
    switch_id: str
    position: SwitchState


@dataclass(frozen=True)
class WaitSeconds:
    """Stand still for a number of seconds."""
    seconds: float


@dataclass(frozen=True)
class Couple:
    """Couple to adjacent cars."""


@dataclass(frozen=True)
class Uncouple:
    """Detach cars from the rear of the consist."""
    car_count: int = 1


Order = Union[MoveTo, SetReverser, SetSwitch, WaitSeconds, Couple, Uncouple]

# Switch positions as the player sees them
SWITCH_POSITION_NAMES = {
    SwitchState.NORMAL: "Normal",
    SwitchState.REVERSE: "Diverging",
}


def describe_order(order: Order) -> str:
    """Render an order the way the program editor lists it.
    
    Args:
        order: Order to describe
    
    Returns:
        Human-readable text such as ``"Move To Platform"``
    """
    if isinstance(order, MoveTo):
        return f"Move To {order.spot.value}"
    if isinstance(order, SetReverser):
        return f"Set Reverser {order.position.value}"
    if isinstance(order, SetSwitch):
        return f"Set {order.switch_id} {SWITCH_POSITION_NAMES[order.position]}"
    if isinstance(order, WaitSeconds):
        seconds = int(order.seconds) if float(order.seconds).is_integer() else order.seconds
        return f"Wait {seconds} seconds"
    if isinstance(order, Couple):
        return "Couple"
    if isinstance(order, Uncouple):
        noun = "car" if order.car_count == 1 else "cars"
        return f"Uncouple {order.car_count} {noun}"
    raise TypeError(f"Unknown order: {order!r}")
