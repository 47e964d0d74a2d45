"""
Simulation module - Running scheduled trains on a railway.

This module contains:
- Simulator: main loop stepping every train and applying effects
- World: switch positions, schedule, active trains and clock
- Railway: layout with spots and spawn points (Sawmill sample)
"""

from railnet.simulation.simulator import Simulator, SimulatorConfig
from railnet.simulation.world import ScheduledTrain, World
from railnet.simulation.railway import EAST_STATION, MAIN_SWITCH, WEST_STATION, Railway, SpawnPoint, build_sawmill

__all__ = [
    "Simulator",
    "SimulatorConfig",
    "ScheduledTrain",
    "World",
    "EAST_STATION",
    "MAIN_SWITCH",
    "WEST_STATION",
    "Railway",
    "SpawnPoint",
    "build_sawmill",
]
