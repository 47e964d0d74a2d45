"""
Simulator - Main simulation loop and controller.

Provides:
- High-level simulation control
- Time stepping with a speed multiplier
- Spawning, stepping and despawning trains
- Folding train effects into world state
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from railnet.routing.builder import RouteConfig
from railnet.train.execution import ExecutionEngine
from railnet.train.physics import PhysicsConfig
from railnet.train.state import ActiveTrain
from railnet.simulation.railway import Railway, build_sawmill
from railnet.simulation.world import ScheduledTrain, World

TIME_MULTIPLIERS = (1, 2, 4, 8)


@dataclass
class SimulatorConfig:
    """Simulator configuration."""
    # Time stepping
    fixed_dt: float = 0.05            # Tick length in simulated seconds at 1x
    max_dt: float = 0.5               # Longest tick after applying the multiplier
    time_multiplier: int = 1          # 1, 2, 4 or 8
    
    # Clock
    start_time_s: float = 6 * 3600.0  # 06:00


class Simulator:
    """Main railway simulator.
    
    Each tick spawns trains whose departure time has come, steps every
    active train with the same time step, applies their effects to the
    world, and removes trains that have left the layout.
    
    Usage:
        sim = Simulator()
        sim.schedule_train(ScheduledTrain(1, EAST_STATION, program=(...)))
        sim.start()
        
        while sim.is_running:
            sim.step()
    """
    
    def __init__(
        self,
        railway: Railway | None = None,
        config: SimulatorConfig | None = None,
        physics_config: PhysicsConfig | None = None,
        route_config: RouteConfig | None = None,
    ):
        """Initialize simulator.
        
        Args:
            railway: Railway to simulate. Uses the Sawmill layout if None.
            config: Simulator configuration. Uses defaults if None.
            physics_config: Train physics configuration
            route_config: Route building configuration
        """
        self.config = config or SimulatorConfig()
        if self.config.time_multiplier not in TIME_MULTIPLIERS:
            raise ValueError(f"Time multiplier must be one of {TIME_MULTIPLIERS}")
        
        self.world = World(railway or build_sawmill(), self.config.start_time_s, route_config)
        self.engine = ExecutionEngine(self.world.railway.spots, physics_config)
        
        # State
        self._running: bool = False
        self._paused: bool = False
        
        # Step callbacks
        self._post_step_callbacks: List[Callable] = []
    
    @property
    def is_running(self) -> bool:
        """Check if simulation is running."""
        return self._running
    
    @property
    def is_paused(self) -> bool:
        """Check if simulation is paused."""
        return self._paused
    
    @property
    def time(self) -> float:
        """Simulation time elapsed in seconds."""
        return self.world.time
    
    @property
    def trains(self) -> List[ActiveTrain]:
        """Active trains."""
        return self.world.trains
    
    def get_train(self, train_id: int) -> Optional[ActiveTrain]:
        """Get an active train by id."""
        return self.world.get_train(train_id)
    
    def schedule_train(self, scheduled: ScheduledTrain) -> None:
        """Add a train to the departure schedule."""
        self.world.schedule_train(scheduled)
    
    def set_time_multiplier(self, multiplier: int) -> None:
        """Change simulation speed.
        
        Args:
            multiplier: 1, 2, 4 or 8
        """
        if multiplier not in TIME_MULTIPLIERS:
            raise ValueError(f"Time multiplier must be one of {TIME_MULTIPLIERS}")
        self.config.time_multiplier = multiplier
    
    def add_post_step_callback(self, callback: Callable) -> None:
        """Add callback called after each step.
        
        Args:
            callback: Function taking (simulator, dt) arguments
        """
        self._post_step_callbacks.append(callback)
    
    def start(self) -> None:
        """Start the simulation."""
        self._running = True
        self._paused = False
    
    def stop(self) -> None:
        """Stop the simulation."""
        self._running = False
    
    def pause(self) -> None:
        """Pause the simulation."""
        self._paused = True
    
    def resume(self) -> None:
        """Resume the simulation."""
        self._paused = False
    
    def step(self, dt: float | None = None) -> List[ActiveTrain]:
        """Advance simulation by one tick.
        
        Args:
            dt: Time step at 1x (uses fixed_dt if None)
        
        Returns:
            Active trains after the tick
        """
        if not self._running:
            raise RuntimeError("Simulation not started")
        if self._paused:
            return self.world.trains
        
        dt = self.config.fixed_dt if dt is None else dt
        dt = min(dt * self.config.time_multiplier, self.config.max_dt)
        
        self.world.spawn_due()
        
        for train in self.world.trains:
            updated, effects = self.engine.step(dt, train)
            self.world.update_train(updated)
            self.world.apply_effects(effects)
        
        self.world.despawn_departed()
        self.world.advance_time(dt)
        
        for callback in self._post_step_callbacks:
            callback(self, dt)
        
        return self.world.trains
    
    def step_until(
        self,
        condition: Callable[["Simulator"], bool],
        max_steps: int = 100000,
    ) -> int:
        """Step simulation until condition is met.
        
        Args:
            condition: Function returning True when should stop
            max_steps: Maximum steps to take
        
        Returns:
            Number of steps taken
        """
        steps = 0
        while self._running and steps < max_steps:
            if condition(self):
                break
            self.step()
            steps += 1
        return steps
    
    def reset(self) -> None:
        """Reset simulation, clearing trains, schedule and clock."""
        self.world.reset()
        self._running = False
        self._paused = False
    
    def get_state(self) -> Dict[str, Any]:
        """Get complete simulation state.
        
        Returns:
            Dictionary containing simulation state
        """
        return {
            "config": {
                "fixed_dt": self.config.fixed_dt,
                "time_multiplier": self.config.time_multiplier,
            },
            "running": self._running,
            "paused": self._paused,
            "world": self.world.get_state(),
        }
