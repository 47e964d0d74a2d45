"""
Track module - Track element geometry and the layout graph.

This module contains:
- Connector, element types and connector derivation
- SwitchState: live turnout position
- Layout: placed elements joined by connections
"""

from railnet.track.element import (
    Connector,
    Curve,
    End,
    Hand,
    Straight,
    SwitchState,
    Turnout,
    compute_connectors,
    connectors_join,
    normalize_angle,
)
from railnet.track.layout import Connection, Layout, PlacedElement, switch_snapshot

__all__ = [
    "Connector",
    "Curve",
    "End",
    "Hand",
    "Straight",
    "SwitchState",
    "Turnout",
    "compute_connectors",
    "connectors_join",
    "normalize_angle",
    "Connection",
    "Layout",
    "PlacedElement",
    "switch_snapshot",
]
