"""
Railway - A layout together with its spots and spawn points.

Contains:
- Spawn points (stations whose trains enter through a portal)
- The Sawmill layout: a mainline between two tunnels with a siding
"""

from dataclasses import dataclass, field
from typing import Dict
import numpy as np

from railnet.routing.spots import Spot, SpotDefinition
from railnet.track.element import Connector, Curve, End, Hand, Straight, Turnout
from railnet.track.layout import Layout

EAST_STATION = "East Station"
WEST_STATION = "West Station"

MAIN_SWITCH = "main"


@dataclass(frozen=True)
class SpawnPoint:
    """Where a station's trains enter the layout."""
    element_id: int                   # Portal element
    connector_index: int              # Connector facing the track
    exit_spot: Spot                   # Portal at the far end of the line


@dataclass
class Railway:
    """Everything a simulation needs to know about the track."""
    name: str
    layout: Layout
    spots: Dict[Spot, SpotDefinition] = field(default_factory=dict)
    spawn_points: Dict[str, SpawnPoint] = field(default_factory=dict)


def build_sawmill() -> Railway:
    """Build the Sawmill layout.
    
    East portal, 250 m of mainline, the ``main`` turnout (30 m through,
    right-hand diverging leg), 220 m of mainline and the West portal. The
    diverging leg curves back parallel to the main and runs 200 m along
    the siding to a buffer stop. Platform and Team Track are on the siding,
    so they can only be reached from the east with the switch reversed.
    
    Returns:
        The Sawmill railway
    """
    layout = Layout()
    diverge = np.radians(15.0)
    
    east_portal = layout.place_element(End(portal=True), Connector((500.0, 0.0), np.pi))
    main_east = layout.place_element_at(Straight(250.0), (east_portal, 0))
    turnout = layout.place_element_at(
        Turnout(through_length=30.0, radius=100.0, sweep=diverge, hand=Hand.RIGHT),
        (main_east, 1),
    )
    main_west = layout.place_element_at(Straight(220.0), (turnout, 1))
    west_portal = layout.place_element_at(End(portal=True), (main_west, 1))
    
    siding_curve = layout.place_element_at(Curve(radius=100.0, sweep=-diverge), (turnout, 2))
    siding = layout.place_element_at(Straight(200.0), (siding_curve, 1))
    layout.place_element_at(End(), (siding, 1))
    
    layout.name_switch(MAIN_SWITCH, turnout)
    
    spots = {
        Spot.PLATFORM: SpotDefinition.on_element(layout, siding, 60.0),
        Spot.TEAM_TRACK: SpotDefinition.on_element(layout, siding, 120.0),
        Spot.EAST_TUNNEL: SpotDefinition.portal_next_to(layout, east_portal),
        Spot.WEST_TUNNEL: SpotDefinition.portal_next_to(layout, west_portal),
    }
    spawn_points = {
        EAST_STATION: SpawnPoint(east_portal, 0, exit_spot=Spot.WEST_TUNNEL),
        WEST_STATION: SpawnPoint(west_portal, 0, exit_spot=Spot.EAST_TUNNEL),
    }
    
    return Railway(name="Sawmill", layout=layout, spots=spots, spawn_points=spawn_points)
