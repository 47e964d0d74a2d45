"""
Train physics - Longitudinal motion along a route.

Provides:
- Acceleration and braking limits
- Braking and emergency stopping distances
- Trapezoidal position integration
"""

from dataclasses import dataclass


@dataclass
class PhysicsConfig:
    """Train motion limits."""
    acceleration: float = 2.0         # m/s^2
    braking: float = 3.0              # Service braking, m/s^2
    emergency_braking: float = 5.0    # m/s^2
    max_speed: float = 11.11          # m/s (40 km/h)
    arrival_threshold: float = 0.5    # m


class TrainPhysics:
    """Speed and position updates for a train moving along its route.
    
    Speeds are always non-negative; callers pass the travel direction
    separately when integrating position.
    """
    
    def __init__(self, config: PhysicsConfig | None = None):
        """Initialize physics.
        
        Args:
            config: Physics configuration. Uses defaults if None.
        """
        self.config = config or PhysicsConfig()
    
    def calculate_braking_distance(self, speed: float, deceleration: float | None = None) -> float:
        """Calculate braking distance.
        
        Args:
            speed: Initial speed in m/s
            deceleration: Deceleration in m/s^2 (service braking if None)
        
        Returns:
            Braking distance in m
        """
        deceleration = self.config.braking if deceleration is None else deceleration
        if deceleration < 1e-6:
            return float('inf')
        return speed**2 / (2 * deceleration)
    
    def emergency_stop_distance(self, speed: float, consist_length: float) -> float:
        """Distance the whole consist needs to stop under emergency braking.
        
        Args:
            speed: Current speed in m/s
            consist_length: Length of the train body behind the lead car front
        
        Returns:
            Stopping distance in m
        """
        return self.calculate_braking_distance(speed, self.config.emergency_braking) + consist_length
    
    def accelerate(self, speed: float, dt: float) -> float:
        """Speed after accelerating for ``dt``, capped at max speed."""
        return min(speed + self.config.acceleration * dt, self.config.max_speed)
    
    def brake(self, speed: float, dt: float) -> float:
        """Speed after service braking for ``dt``, floored at zero."""
        return max(speed - self.config.braking * dt, 0.0)
    
    def emergency_brake(self, speed: float, dt: float) -> float:
        """Speed after emergency braking for ``dt``, floored at zero."""
        return max(speed - self.config.emergency_braking * dt, 0.0)
    
    def integrate_position(
        self,
        position: float,
        old_speed: float,
        new_speed: float,
        direction: float,
        dt: float,
    ) -> float:
        """Integrate position with the trapezoid rule.
        
        Args:
            position: Current distance along the route
            old_speed: Speed at the start of the step
            new_speed: Speed at the end of the step
            direction: +1 for forward travel, -1 for reverse
            dt: Time step in seconds
        
        Returns:
            New distance along the route
        """
        return position + direction * (old_speed + new_speed) / 2 * dt
