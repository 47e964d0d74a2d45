"""
Train module - Train programs and their execution.

This module contains:
- Orders and rolling stock
- ActiveTrain with its execution state and effects
- ExecutionEngine: per-tick program execution
- TrainPhysics: acceleration, braking and position integration
"""

from railnet.train.consist import StockType, consist_length
from railnet.train.orders import (
    Couple,
    MoveTo,
    ReverserPosition,
    SetReverser,
    SetSwitch,
    Uncouple,
    WaitSeconds,
    describe_order,
)
from railnet.train.state import (
    ActiveTrain,
    Executing,
    SetSwitchEffect,
    Stopped,
    WaitingForOrders,
)
from railnet.train.physics import PhysicsConfig, TrainPhysics
from railnet.train.execution import ExecutionEngine

__all__ = [
    "StockType",
    "consist_length",
    "Couple",
    "MoveTo",
    "ReverserPosition",
    "SetReverser",
    "SetSwitch",
    "Uncouple",
    "WaitSeconds",
    "describe_order",
    "ActiveTrain",
    "Executing",
    "SetSwitchEffect",
    "Stopped",
    "WaitingForOrders",
    "PhysicsConfig",
    "TrainPhysics",
    "ExecutionEngine",
]
