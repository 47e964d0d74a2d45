"""
Routing module - Turning a layout into paths trains can follow.

This module contains:
- Route, RouteSegment: distance-indexed path through the layout
- build_route: graph walk honouring switch positions
- position_on_route: world pose at a distance along a route
- Spots: named locations and their route distances
"""

from railnet.routing.route import (
    ArcGeometry,
    Route,
    RoutePosition,
    RouteSegment,
    StraightGeometry,
    position_on_route,
)
from railnet.routing.builder import (
    RouteConfig,
    RouteCycleError,
    RouteError,
    RouteStartError,
    RouteTooLongError,
    build_route,
)
from railnet.routing.spots import Spot, SpotDefinition, spot_position

__all__ = [
    "ArcGeometry",
    "Route",
    "RoutePosition",
    "RouteSegment",
    "StraightGeometry",
    "position_on_route",
    "RouteConfig",
    "RouteCycleError",
    "RouteError",
    "RouteStartError",
    "RouteTooLongError",
    "build_route",
    "Spot",
    "SpotDefinition",
    "spot_position",
]
