"""
Track elements - Connector geometry for individual pieces of track.

Defines:
- Connectors (attachment points with outward-facing orientation)
- Element types (straight, curve, turnout, end)
- Connector derivation from an element's first connector
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple, Union
import numpy as np


Point = Tuple[float, float]

# Join tolerances for two connectors meeting at a joint
POSITION_TOLERANCE_M = 0.01
ORIENTATION_TOLERANCE_RAD = np.radians(1.0)


class SwitchState(Enum):
    """Live position of a turnout."""
    NORMAL = "Normal"                 # Toe to through heel
    REVERSE = "Reverse"               # Toe to diverging heel


class Hand(Enum):
    """Side to which a turnout's diverging leg branches."""
    RIGHT = "right"
    LEFT = "left"


@dataclass(frozen=True)
class Connector:
    """Attachment point of a track element.
    
    The orientation points outward: it is the direction a train travels
    when it leaves the element through this connector.
    """
    position: Point = (0.0, 0.0)
    orientation: float = 0.0          # Radians, normalized to (-pi, pi]
    
    def flipped(self) -> "Connector":
        """Get the mirror connector a neighbouring element attaches with."""
        return Connector(self.position, normalize_angle(self.orientation + np.pi))


@dataclass(frozen=True)
class Straight:
    """Straight piece of track."""
    length: float = 100.0             # Meters


@dataclass(frozen=True)
class Curve:
    """Circular arc of track.
    
    Positive sweep turns clockwise on the y-down map (a right-hand turn
    for a train entering at connector 0), negative sweep turns the other way.
    """
    radius: float = 100.0             # Meters
    sweep: float = np.pi / 12         # Signed, radians


@dataclass(frozen=True)
class Turnout:
    """Three-connector switch: toe (0), through heel (1), diverging heel (2)."""
    through_length: float = 30.0      # Meters
    radius: float = 100.0             # Diverging leg radius
    sweep: float = np.pi / 12         # Diverging leg sweep magnitude
    hand: Hand = Hand.RIGHT
    
    @property
    def diverging_sweep(self) -> float:
        """Signed sweep of the diverging leg."""
        return -self.sweep if self.hand == Hand.LEFT else self.sweep


@dataclass(frozen=True)
class End:
    """Single-connector terminator.
    
    A portal is a tunnel mouth trains enter and leave the world through;
    anything else is a buffer stop.
    """
    portal: bool = False


ElementType = Union[Straight, Curve, Turnout, End]


def normalize_angle(angle: float) -> float:
    """Normalize an angle to the half-open range (-pi, pi].
    
    Args:
        angle: Angle in radians
    
    Returns:
        Equivalent angle in (-pi, pi]
    """
    wrapped = np.fmod(angle + np.pi, 2 * np.pi)
    if wrapped <= 0:
        wrapped += 2 * np.pi
    return float(wrapped - np.pi)


def connector_count(element_type: ElementType) -> int:
    """Number of connectors an element type carries."""
    if isinstance(element_type, Turnout):
        return 3
    if isinstance(element_type, End):
        return 1
    return 2


def traversal_pairs(element_type: ElementType) -> List[Tuple[int, int]]:
    """Connector pairs a train can pass between.
    
    Args:
        element_type: Element type
    
    Returns:
        List of (from, to) connector index pairs, one per route through
        the element. Turnouts list the through route first.
    """
    if isinstance(element_type, Turnout):
        return [(0, 1), (0, 2)]
    if isinstance(element_type, End):
        return []
    return [(0, 1)]


def element_length(element_type: ElementType) -> float:
    """Native length of an element along its (0, 1) route.
    
    Args:
        element_type: Element type
    
    Returns:
        Length in meters (0 for ends)
    """
    if isinstance(element_type, Straight):
        return element_type.length
    if isinstance(element_type, Curve):
        return element_type.radius * abs(element_type.sweep)
    if isinstance(element_type, Turnout):
        return element_type.through_length
    return 0.0


def arc_center(start: Point, travel_direction: float, radius: float, sweep: float) -> Point:
    """Get the center of an arc leaving ``start`` in ``travel_direction``.
    
    The center sits ``radius`` away on the side the arc turns towards.
    
    Args:
        start: Arc start position
        travel_direction: Heading at the start in radians
        radius: Arc radius in meters
        sweep: Signed sweep, only its sign is used
    
    Returns:
        Center position
    """
    side = np.pi / 2 if sweep >= 0 else -np.pi / 2
    return (
        float(start[0] + radius * np.cos(travel_direction + side)),
        float(start[1] + radius * np.sin(travel_direction + side)),
    )


def _straight_exit(connector0: Connector, length: float) -> Connector:
    direction = connector0.orientation + np.pi
    x, y = connector0.position
    return Connector(
        (float(x + length * np.cos(direction)), float(y + length * np.sin(direction))),
        normalize_angle(direction),
    )


def _curve_exit(connector0: Connector, radius: float, sweep: float) -> Connector:
    direction = connector0.orientation + np.pi
    cx, cy = arc_center(connector0.position, direction, radius, sweep)
    
    # Rotate the entry point around the center by the sweep
    dx = connector0.position[0] - cx
    dy = connector0.position[1] - cy
    cos_s = np.cos(sweep)
    sin_s = np.sin(sweep)
    return Connector(
        (float(cx + dx * cos_s - dy * sin_s), float(cy + dx * sin_s + dy * cos_s)),
        normalize_angle(direction + sweep),
    )


def compute_connectors(connector0: Connector, element_type: ElementType) -> List[Connector]:
    """Derive every connector of an element from its first one.
    
    Args:
        connector0: Connector 0 of the element
        element_type: Element type
    
    Returns:
        Connectors ordered by index, sized to the element type
    """
    first = Connector(connector0.position, normalize_angle(connector0.orientation))
    
    if isinstance(element_type, Straight):
        return [first, _straight_exit(first, element_type.length)]
    if isinstance(element_type, Curve):
        return [first, _curve_exit(first, element_type.radius, element_type.sweep)]
    if isinstance(element_type, Turnout):
        return [
            first,
            _straight_exit(first, element_type.through_length),
            _curve_exit(first, element_type.radius, element_type.diverging_sweep),
        ]
    return [first]


def connectors_join(a: Connector, b: Connector) -> bool:
    """Check whether two connectors meet at a valid joint.
    
    Positions must coincide within 1 cm and orientations must be
    opposite within 1 degree.
    
    Args:
        a: First connector
        b: Second connector
    
    Returns:
        True if the connectors join
    """
    gap = np.hypot(a.position[0] - b.position[0], a.position[1] - b.position[1])
    misalignment = abs(normalize_angle(a.orientation - b.orientation - np.pi))
    return bool(gap <= POSITION_TOLERANCE_M and misalignment <= ORIENTATION_TOLERANCE_RAD)
