"""
Execution engine - Steps a train's program forward in time.

Provides:
- Per-tick program execution (motion, instant orders, waits)
- Failure handling: orders that cannot be carried out stop the train
- Buffer-stop safety brake

Failures are states, not exceptions: a train that cannot carry out an
order ends up in ``Stopped`` with a readable reason.
"""

from dataclasses import replace
from typing import List, Tuple
import logging

from railnet.routing.spots import SpotDefinition, SpotTable, spot_position
from railnet.train.orders import Couple, MoveTo, ReverserPosition, SetReverser, SetSwitch, Uncouple, WaitSeconds
from railnet.train.physics import PhysicsConfig, TrainPhysics
from railnet.train.state import ActiveTrain, Effect, Executing, SetSwitchEffect, Stopped, WaitingForOrders

logger = logging.getLogger(__name__)

COUPLE_NO_CARS = "Couple: no adjacent cars found"
UNCOUPLE_UNSUPPORTED = "Uncouple: not yet supported"

# Reserved for uncoupling once it is supported
UNCOUPLE_WHILE_MOVING = "Uncouple: train must be stationary"
UNCOUPLE_NOTHING = "Uncouple: nothing to uncouple"
UNCOUPLE_LOCOMOTIVE = "Uncouple: cannot detach the locomotive"


def cannot_reach(spot_name: str) -> str:
    """Failure reason for a spot that is not on the train's route."""
    return f"Cannot reach {spot_name}"


class ExecutionEngine:
    """Runs train programs one tick at a time.
    
    ``step`` is pure: it never mutates the train it is given and never
    touches shared state. World changes (switch moves) come back as
    effects for the caller to apply.
    
    Usage:
        engine = ExecutionEngine(spots)
        train, effects = engine.step(0.1, train)
        for effect in effects:
            world.apply(effect)
    """
    
    def __init__(self, spots: SpotTable, config: PhysicsConfig | None = None):
        """Initialize engine.
        
        Args:
            spots: Spot placements used to resolve MoveTo orders
            config: Physics configuration. Uses defaults if None.
        """
        self.spots = spots
        self.physics = TrainPhysics(config)
    
    @property
    def config(self) -> PhysicsConfig:
        """Physics configuration."""
        return self.physics.config
    
    def step(self, dt: float, train: ActiveTrain) -> Tuple[ActiveTrain, List[Effect]]:
        """Advance one train by one tick.
        
        Args:
            dt: Elapsed time in seconds
            train: Train to advance
        
        Returns:
            Tuple of (updated train, effects to apply)
        """
        if isinstance(train.train_state, Stopped):
            return replace(train, speed=0.0), []
        
        if isinstance(train.train_state, WaitingForOrders):
            return self._coast(dt, train), []
        
        order = train.current_order
        if order is None:
            return self._advance(train), []
        
        if isinstance(order, MoveTo):
            return self._move_to(dt, train, order), []
        if isinstance(order, SetReverser):
            return self._advance(replace(train, reverser=order.position)), []
        if isinstance(order, SetSwitch):
            effect = SetSwitchEffect(order.switch_id, order.position)
            return self._advance(train), [effect]
        if isinstance(order, WaitSeconds):
            return self._wait(dt, train, order), []
        if isinstance(order, Couple):
            return self._stop(train, COUPLE_NO_CARS), []
        if isinstance(order, Uncouple):
            return self._stop(train, UNCOUPLE_UNSUPPORTED), []
        
        raise TypeError(f"Unknown order: {order!r}")
    
    def _advance(self, train: ActiveTrain) -> ActiveTrain:
        """Move on to the next order, or wait for orders past the end."""
        next_counter = min(train.program_counter + 1, len(train.program))
        if next_counter >= len(train.program):
            logger.debug("Train %d finished its program", train.train_id)
            return replace(train, program_counter=next_counter, train_state=WaitingForOrders())
        return replace(train, program_counter=next_counter, train_state=Executing())
    
    def _stop(self, train: ActiveTrain, reason: str) -> ActiveTrain:
        logger.warning("Train %d stopped: %s", train.train_id, reason)
        return replace(train, speed=0.0, train_state=Stopped(reason))
    
    def _coast(self, dt: float, train: ActiveTrain) -> ActiveTrain:
        """Brake a train with no orders left until it stands."""
        if train.speed <= 0:
            return train
        speed = self.physics.brake(train.speed, dt)
        position = self.physics.integrate_position(train.position, train.speed, speed, train.direction, dt)
        position, speed = self._safety_brake(dt, train, position, speed)
        return replace(train, position=position, speed=speed)
    
    def _wait(self, dt: float, train: ActiveTrain, order: WaitSeconds) -> ActiveTrain:
        timer = train.wait_timer if train.wait_timer > 0 else order.seconds
        timer -= dt
        if timer <= 0:
            return self._advance(replace(train, speed=0.0, wait_timer=0.0))
        return replace(train, speed=0.0, wait_timer=timer)
    
    def _target_distance(self, train: ActiveTrain, spot: SpotDefinition) -> float | None:
        target = spot_position(spot, train.route)
        if target is None:
            return None
        
        # Sending a train into the far tunnel takes the whole consist inside
        at_far_portal = spot.portal and train.route.end_element_id == spot.portal_id
        if at_far_portal and not train.route.ends_at_buffer_stop and train.reverser == ReverserPosition.FORWARD:
            target += train.consist_length
        return target
    
    def _move_to(self, dt: float, train: ActiveTrain, order: MoveTo) -> ActiveTrain:
        definition = self.spots.get(order.spot)
        target = self._target_distance(train, definition) if definition is not None else None
        if target is None:
            return self._stop(train, cannot_reach(order.spot.value))
        
        threshold = self.config.arrival_threshold
        direction = train.direction
        distance_to_target = (target - train.position) * direction
        
        if abs(distance_to_target) < threshold:
            return self._arrive(train, target)
        
        if distance_to_target > 0:
            braking_distance = self.physics.calculate_braking_distance(train.speed)
            if braking_distance >= distance_to_target:
                speed = self.physics.brake(train.speed, dt)
            else:
                speed = self.physics.accelerate(train.speed, dt)
            position = self.physics.integrate_position(train.position, train.speed, speed, direction, dt)
        else:
            # Overshot: hold and let the arrival check below settle it
            speed = 0.0
            position = train.position
        
        position, speed = self._safety_brake(dt, train, position, speed)
        
        remaining = abs((target - position) * direction)
        if remaining < threshold or (speed == 0 and remaining < 2 * threshold):
            return self._arrive(replace(train, position=position, speed=speed), target)
        
        return replace(train, position=position, speed=speed)
    
    def _arrive(self, train: ActiveTrain, target: float) -> ActiveTrain:
        logger.debug("Train %d arrived at %.2f m", train.train_id, target)
        return self._advance(replace(train, position=target, speed=0.0))
    
    def _safety_brake(
        self,
        dt: float,
        train: ActiveTrain,
        position: float,
        speed: float,
    ) -> Tuple[float, float]:
        """Override motion with emergency braking near a buffer stop.
        
        Only forward travel towards a buffer-stop end is protected. The brake
        engages when either the margin at the start of the tick or the margin
        the tick would leave is shorter than the emergency stop distance, and
        the result never lies past the end of the route.
        
        Args:
            dt: Time step in seconds
            train: Train at the start of the tick
            position: Position the tick would otherwise end at
            speed: Speed the tick would otherwise end at
        
        Returns:
            Tuple of (position, speed) after the override
        """
        route = train.route
        if not route.ends_at_buffer_stop or train.reverser != ReverserPosition.FORWARD:
            return position, speed
        
        consist_length = train.consist_length
        margin_before = route.total_length - train.position
        margin_after = route.total_length - position
        short_before = train.speed > 0 and margin_before < self.physics.emergency_stop_distance(train.speed, consist_length)
        short_after = speed > 0 and margin_after < self.physics.emergency_stop_distance(speed, consist_length)
        
        if short_before or short_after:
            speed = self.physics.emergency_brake(train.speed, dt)
            position = self.physics.integrate_position(train.position, train.speed, speed, 1.0, dt)
        
        return min(position, route.total_length), speed
