"""
World - World state management for the simulation.

Manages:
- The railway (layout, spots, spawn points)
- Live switch positions
- Scheduled and active trains
- Global time
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple
import logging

from railnet.routing.builder import RouteConfig, build_route
from railnet.track.element import SwitchState
from railnet.track.layout import switch_snapshot
from railnet.train.consist import StockType
from railnet.train.orders import MoveTo, Order, SetSwitch
from railnet.train.state import ActiveTrain, Effect, SetSwitchEffect
from railnet.simulation.railway import Railway

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 3600


@dataclass
class ScheduledTrain:
    """A train waiting in a station for its departure time."""
    train_id: int
    station: str
    departure_time_s: float = 0.0     # Seconds after the simulation start
    consist: Tuple[StockType, ...] = (StockType.LOCOMOTIVE,)
    program: Tuple[Order, ...] = field(default_factory=tuple)


class World:
    """World state container for simulation.
    
    Routes are built once, at spawn, from the switch positions at that
    moment. Throwing a switch afterwards affects trains spawned later,
    not trains already running.
    """
    
    def __init__(
        self,
        railway: Railway,
        start_time_s: float = 0.0,
        route_config: RouteConfig | None = None,
    ):
        """Initialize world.
        
        Args:
            railway: Railway to run trains on
            start_time_s: Clock time of day at simulation start, in seconds
            route_config: Route building configuration
        """
        self.railway = railway
        self.route_config = route_config or RouteConfig()
        self.start_time_s = start_time_s
        
        self._switch_states: Dict[str, SwitchState] = {
            name: SwitchState.NORMAL for name in railway.layout.switches
        }
        self._trains: Dict[int, ActiveTrain] = {}
        self._schedule: List[ScheduledTrain] = []
        
        # Timing
        self._time: float = 0.0
        self._frame: int = 0
    
    @property
    def time(self) -> float:
        """Simulation time elapsed in seconds."""
        return self._time
    
    @property
    def frame(self) -> int:
        """Current frame number."""
        return self._frame
    
    @property
    def trains(self) -> List[ActiveTrain]:
        """Active trains."""
        return list(self._trains.values())
    
    @property
    def train_count(self) -> int:
        """Number of active trains."""
        return len(self._trains)
    
    @property
    def schedule(self) -> List[ScheduledTrain]:
        """Trains not yet spawned, in departure order."""
        return list(self._schedule)
    
    @property
    def switch_states(self) -> Dict[str, SwitchState]:
        """Live switch positions by switch name."""
        return dict(self._switch_states)
    
    def clock_text(self) -> str:
        """Time of day as HH:MM:SS."""
        total = int(self.start_time_s + self._time) % SECONDS_PER_DAY
        hours, rest = divmod(total, 3600)
        minutes, seconds = divmod(rest, 60)
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    
    def get_train(self, train_id: int) -> Optional[ActiveTrain]:
        """Get an active train by id."""
        return self._trains.get(train_id)
    
    def set_switch(self, name: str, position: SwitchState) -> None:
        """Move a switch.
        
        Raises:
            KeyError: If the layout has no switch with this name
        """
        if name not in self._switch_states:
            raise KeyError(f"Unknown switch {name}")
        if self._switch_states[name] != position:
            logger.info("Switch %s set to %s", name, position.value)
        self._switch_states[name] = position
    
    def apply_effects(self, effects: Iterable[Effect]) -> None:
        """Fold train effects into world state.
        
        Effects naming a switch the layout does not have are ignored.
        """
        for effect in effects:
            if isinstance(effect, SetSwitchEffect):
                if effect.switch_id not in self._switch_states:
                    logger.warning("Ignoring effect for unknown switch %s", effect.switch_id)
                    continue
                self.set_switch(effect.switch_id, effect.position)
    
    def schedule_train(self, scheduled: ScheduledTrain) -> None:
        """Add a train to the departure schedule.
        
        Raises:
            KeyError: If the station has no spawn point
        """
        if scheduled.station not in self.railway.spawn_points:
            raise KeyError(f"Unknown station {scheduled.station}")
        self._schedule.append(scheduled)
        self._schedule.sort(key=lambda s: s.departure_time_s)
    
    def routing_states(self, program: Iterable[Order]) -> Dict[str, SwitchState]:
        """Switch positions a program will run under once it starts moving.
        
        Switches the program throws before its first MoveTo are taken at
        their new positions; everything else is read live.
        
        Args:
            program: Train program
        
        Returns:
            Switch positions by switch name
        """
        states = dict(self._switch_states)
        for order in program:
            if isinstance(order, MoveTo):
                break
            if isinstance(order, SetSwitch) and order.switch_id in states:
                states[order.switch_id] = order.position
        return states
    
    def spawn(self, scheduled: ScheduledTrain) -> ActiveTrain:
        """Put a scheduled train on the layout.
        
        The route is built once, here, from the switch positions given by
        ``routing_states``. A train with no program is sent through to the
        far portal.
        
        Args:
            scheduled: Train to spawn
        
        Returns:
            The new active train
        """
        spawn_point = self.railway.spawn_points[scheduled.station]
        program = tuple(scheduled.program) or (MoveTo(spawn_point.exit_spot),)
        
        layout = self.railway.layout
        route = build_route(
            spawn_point.element_id,
            spawn_point.connector_index,
            switch_snapshot(layout, self.routing_states(program)),
            layout,
            self.route_config,
        )
        
        train = ActiveTrain(
            train_id=scheduled.train_id,
            route=route,
            consist=tuple(scheduled.consist),
            program=program,
        )
        self._trains[train.train_id] = train
        logger.info(
            "Train %d spawned at %s (%d orders, %.1f m route)",
            train.train_id,
            scheduled.station,
            len(program),
            route.total_length,
        )
        return train
    
    def spawn_due(self) -> List[ActiveTrain]:
        """Spawn every scheduled train whose departure time has come."""
        spawned = []
        while self._schedule and self._schedule[0].departure_time_s <= self._time:
            spawned.append(self.spawn(self._schedule.pop(0)))
        return spawned
    
    def update_train(self, train: ActiveTrain) -> None:
        """Store a train's new state."""
        self._trains[train.train_id] = train
    
    def despawn_departed(self) -> List[int]:
        """Remove trains whose last car has left the end of their route.
        
        Returns:
            Ids of removed trains
        """
        departed = [
            t.train_id for t in self._trains.values()
            if t.rear_position >= t.route.total_length
        ]
        for train_id in departed:
            del self._trains[train_id]
            logger.info("Train %d left the layout", train_id)
        return departed
    
    def advance_time(self, dt: float) -> None:
        """Advance simulation time.
        
        Args:
            dt: Time step in seconds
        """
        self._time += dt
        self._frame += 1
    
    def reset(self) -> None:
        """Reset world state."""
        self._trains.clear()
        self._schedule.clear()
        self._switch_states = {name: SwitchState.NORMAL for name in self.railway.layout.switches}
        self._time = 0.0
        self._frame = 0
    
    def get_state(self) -> dict:
        """Get world state for inspection.
        
        Returns:
            Dictionary containing world state
        """
        return {
            "railway": self.railway.name,
            "time": self._time,
            "clock": self.clock_text(),
            "frame": self._frame,
            "switches": {name: s.value for name, s in self._switch_states.items()},
            "trains": [t.get_state() for t in self._trains.values()],
            "scheduled": [s.train_id for s in self._schedule],
        }
