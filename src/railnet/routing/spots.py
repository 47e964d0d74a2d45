"""
Spots - Named operational locations and where they fall on a route.

A spot sits a fixed distance from connector 0 of one element. Portal
spots sit at whichever end of a route runs through their tunnel mouth.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional
import numpy as np

from railnet.routing.route import Route
from railnet.track.element import POSITION_TOLERANCE_M, Point, End, element_length
from railnet.track.layout import Layout


class Spot(Enum):
    """Named spots trains can be sent to."""
    PLATFORM = "Platform"
    TEAM_TRACK = "Team Track"
    EAST_TUNNEL = "East Tunnel"
    WEST_TUNNEL = "West Tunnel"


@dataclass(frozen=True)
class SpotDefinition:
    """Placement of a spot on the layout."""
    element_id: int
    local_distance: float             # Meters from connector 0
    element_length: float             # Native element length
    native_start: Point               # Connector 0 position of the element
    portal_id: Optional[int] = None   # Tunnel mouth the spot stands for
    
    @property
    def portal(self) -> bool:
        return self.portal_id is not None
    
    @classmethod
    def on_element(cls, layout: Layout, element_id: int, local_distance: float) -> "SpotDefinition":
        """Define a spot part way along an element.
        
        Args:
            layout: Layout holding the element
            element_id: Element the spot lies on
            local_distance: Distance from the element's connector 0
        
        Returns:
            Spot definition
        """
        element = layout.find_element(element_id)
        length = element_length(element.element_type)
        if not 0 <= local_distance <= length:
            raise ValueError(f"Spot distance {local_distance} outside element {element_id}")
        return cls(element_id, local_distance, length, element.connectors[0].position)
    
    @classmethod
    def portal_next_to(cls, layout: Layout, portal_id: int) -> "SpotDefinition":
        """Define a tunnel spot by the track element joined to a portal.
        
        Args:
            layout: Layout holding the portal
            portal_id: Portal ``End`` element id
        
        Returns:
            Spot definition for the tunnel mouth, placed on its neighbour
        """
        portal = layout.find_element(portal_id)
        if not isinstance(portal.element_type, End) or not portal.element_type.portal:
            raise ValueError(f"Element {portal_id} is not a portal")
        neighbour = layout.find_connected((portal_id, 0))
        if neighbour is None:
            raise ValueError(f"Portal {portal_id} is not connected")
        element = layout.find_element(neighbour[0])
        return cls(
            element_id=element.element_id,
            local_distance=0.0,
            element_length=element_length(element.element_type),
            native_start=element.connectors[0].position,
            portal_id=portal_id,
        )


SpotTable = Mapping[Spot, SpotDefinition]


def spot_position(spot: SpotDefinition, route: Route) -> Optional[float]:
    """Get the route distance of a spot.
    
    Args:
        spot: Spot definition
        route: Route the train is following
    
    Returns:
        Distance along the route in meters, or None if the spot's element
        is not on the route
    """
    if not route.segments:
        return None
    
    if spot.portal:
        if route.end_element_id == spot.portal_id:
            return route.total_length
        if route.start_element_id == spot.portal_id:
            return 0.0
        return None
    
    for segment in route.segments:
        if segment.element_id != spot.element_id:
            continue
        start = segment.geometry.start_point
        native = np.hypot(start[0] - spot.native_start[0], start[1] - spot.native_start[1]) <= POSITION_TOLERANCE_M
        local = spot.local_distance if native else spot.element_length - spot.local_distance
        return segment.start_distance + local
    
    return None


def locate_spot(spot: Spot, spots: SpotTable, route: Route) -> Optional[float]:
    """Look a named spot up in a table and locate it on a route.
    
    Returns:
        Distance along the route, or None if the spot is unknown or unreachable
    """
    definition = spots.get(spot)
    if definition is None:
        return None
    return spot_position(definition, route)
