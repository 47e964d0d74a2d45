"""
Train state - Per-train execution state and the effects it emits.

Contains:
- Train states (executing, waiting for orders, stopped)
- Effects for the caller to apply to shared world state
- Active train record
"""

from dataclasses import dataclass, field
from typing import Tuple, Union

from railnet.routing.route import Route
from railnet.track.element import SwitchState
from railnet.train.consist import StockType, consist_length
from railnet.train.orders import Order, ReverserPosition


@dataclass(frozen=True)
class Executing:
    """Working through the program."""


@dataclass(frozen=True)
class WaitingForOrders:
    """Program finished; the train coasts to a stop and waits."""


@dataclass(frozen=True)
class Stopped:
    """An order could not be carried out. Terminal for the current program."""
    reason: str


TrainState = Union[Executing, WaitingForOrders, Stopped]


@dataclass(frozen=True)
class SetSwitchEffect:
    """Request to move a switch."""
    switch_id: str
    position: SwitchState


Effect = SetSwitchEffect


@dataclass
class ActiveTrain:
    """A train running on the layout.
    
    ``position`` is the distance of the lead car's front along the route;
    ``speed`` is never negative, the reverser gives the direction.
    """
    train_id: int
    route: Route
    consist: Tuple[StockType, ...] = ()
    program: Tuple[Order, ...] = ()
    
    position: float = 0.0             # Meters along route
    speed: float = 0.0                # m/s, >= 0
    program_counter: int = 0
    train_state: TrainState = field(default_factory=Executing)
    reverser: ReverserPosition = ReverserPosition.FORWARD
    wait_timer: float = 0.0           # Seconds left on the current wait
    
    @property
    def consist_length(self) -> float:
        """Length of the consist in meters."""
        return consist_length(self.consist)
    
    @property
    def direction(self) -> float:
        """+1 when travelling forward along the route, -1 in reverse."""
        return 1.0 if self.reverser == ReverserPosition.FORWARD else -1.0
    
    @property
    def current_order(self) -> Order | None:
        """Order being executed, or None past the end of the program."""
        if self.program_counter < len(self.program):
            return self.program[self.program_counter]
        return None
    
    @property
    def rear_position(self) -> float:
        """Distance of the rearmost point of the consist along the route."""
        return self.position - self.consist_length
    
    def get_state(self) -> dict:
        """Get train state for display or logging."""
        if isinstance(self.train_state, Stopped):
            status = f"Stopped: {self.train_state.reason}"
        else:
            status = type(self.train_state).__name__
        return {
            "train_id": self.train_id,
            "position_m": self.position,
            "speed_mps": self.speed,
            "reverser": self.reverser.value,
            "program_counter": self.program_counter,
            "status": status,
            "consist": [car.display_name for car in self.consist],
        }
