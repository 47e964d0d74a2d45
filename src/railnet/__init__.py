"""
RailNet - Programmable model train simulation.

This package provides:
- Track element geometry and layout graphs with switchable turnouts
- Route building from live switch positions
- Train programs (move, reverse, throw switches, wait) executed tick by tick
- Buffer-stop safety braking
- A scheduled multi-train simulator on the Sawmill layout
"""

__version__ = "0.1.0"

from railnet.simulation.simulator import Simulator
from railnet.simulation.railway import build_sawmill
from railnet.routing.builder import build_route
from railnet.train.execution import ExecutionEngine

__all__ = ["Simulator", "build_sawmill", "build_route", "ExecutionEngine", "__version__"]
