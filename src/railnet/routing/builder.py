"""
Route builder - Walks the layout graph into a concrete route.

Turnouts entered at the toe follow the switch snapshot (through when
Normal, diverging when Reverse). Entering at either heel always exits at
the toe, so trailing moves never depend on switch state.
"""

from dataclasses import dataclass
from typing import List, Mapping, Optional, Set, Tuple, Union
import logging
import numpy as np

from railnet.routing.route import ArcGeometry, Route, RouteSegment, SegmentGeometry, StraightGeometry
from railnet.track.element import (
    Connector,
    Curve,
    ElementType,
    End,
    Straight,
    SwitchState,
    Turnout,
    arc_center,
    normalize_angle,
)
from railnet.track.layout import ConnectorRef, Layout

logger = logging.getLogger(__name__)

SwitchSnapshot = Union[SwitchState, Mapping[int, SwitchState]]


class RouteError(RuntimeError):
    """Raised when a layout cannot be walked into a route."""


class RouteStartError(RouteError):
    """Raised when the start connector leads nowhere."""


class RouteCycleError(RouteError):
    """Raised when the walk enters the same element the same way twice."""


class RouteTooLongError(RouteError):
    """Raised when the walk exceeds its segment budget."""


@dataclass
class RouteConfig:
    """Route building configuration."""
    max_segments: int = 256           # Walk budget before giving up


def _switch_state_for(element_id: int, switch_state: SwitchSnapshot) -> SwitchState:
    if isinstance(switch_state, SwitchState):
        return switch_state
    return switch_state.get(element_id, SwitchState.NORMAL)


def exit_connector(
    element_type: ElementType,
    entry: int,
    switch_state: SwitchState = SwitchState.NORMAL,
) -> Optional[int]:
    """Get the connector a train leaves an element through.
    
    Args:
        element_type: Element type
        entry: Connector index the train entered through
        switch_state: Position of the turnout, if the element is one
    
    Returns:
        Exit connector index, or None for ends
    """
    if isinstance(element_type, End):
        return None
    if isinstance(element_type, Turnout):
        if entry == 0:
            return 1 if switch_state == SwitchState.NORMAL else 2
        return 0
    return 1 if entry == 0 else 0


def _arc_segment(
    entry: Connector,
    exit_: Connector,
    radius: float,
    native_sweep: float,
    reversed_: bool,
) -> Tuple[float, ArcGeometry]:
    """Build arc geometry for a traversal entering at ``entry``."""
    # Running an arc backwards turns the opposite way
    turn = -native_sweep if reversed_ else native_sweep
    travel = entry.orientation + np.pi
    center = arc_center(entry.position, travel, radius, turn)
    
    start_angle = float(np.arctan2(entry.position[1] - center[1], entry.position[0] - center[0]))
    end_angle = float(np.arctan2(exit_.position[1] - center[1], exit_.position[0] - center[0]))
    sweep = normalize_angle(end_angle - start_angle)
    if turn > 0 and sweep < 0:
        sweep += 2 * np.pi
    elif turn < 0 and sweep > 0:
        sweep -= 2 * np.pi
    
    geometry = ArcGeometry(center=center, radius=radius, start_angle=start_angle, signed_sweep=sweep)
    return radius * abs(sweep), geometry


def traverse(
    element_type: ElementType,
    connectors: Tuple[Connector, ...],
    entry: int,
    exit_: int,
) -> Tuple[float, SegmentGeometry]:
    """Compute length and geometry of one pass through an element.
    
    Args:
        element_type: Element type
        connectors: The element's connectors
        entry: Connector index the train enters through
        exit_: Connector index the train leaves through
    
    Returns:
        Tuple of (length, geometry)
    """
    start = connectors[entry]
    end = connectors[exit_]
    
    diverging = isinstance(element_type, Turnout) and 2 in (entry, exit_)
    if isinstance(element_type, Curve):
        return _arc_segment(start, end, element_type.radius, element_type.sweep, entry != 0)
    if diverging:
        return _arc_segment(start, end, element_type.radius, element_type.diverging_sweep, entry != 0)
    
    if isinstance(element_type, Straight):
        length = element_type.length
    else:
        length = element_type.through_length
    geometry = StraightGeometry(
        start=start.position,
        end=end.position,
        orientation=normalize_angle(start.orientation + np.pi),
    )
    return length, geometry


def build_route(
    start_element_id: int,
    start_connector_index: int,
    switch_state: SwitchSnapshot,
    layout: Layout,
    config: RouteConfig | None = None,
) -> Route:
    """Walk the layout from a starting connector into a route.
    
    The walk begins at the element joined to the start connector and ends
    at the first ``End`` element or open connector.
    
    Args:
        start_element_id: Element the route starts from (usually a portal)
        start_connector_index: Connector on that element facing the route
        switch_state: One state for every turnout, or a state per turnout id
        layout: Layout to walk
        config: Route configuration. Uses defaults if None.
    
    Returns:
        The built route
    
    Raises:
        RouteStartError: If nothing is attached to the start connector
        RouteCycleError: If the walk loops back on itself
        RouteTooLongError: If the walk exceeds ``config.max_segments``
    """
    config = config or RouteConfig()
    
    current: Optional[ConnectorRef] = layout.find_connected((start_element_id, start_connector_index))
    if current is None:
        raise RouteStartError(
            f"Connector {start_connector_index} of element {start_element_id} is not connected"
        )
    
    segments: List[RouteSegment] = []
    visited: Set[ConnectorRef] = set()
    distance = 0.0
    ends_at_buffer_stop = True
    end_element_id: Optional[int] = None
    
    while current is not None:
        element_id, entry = current
        element = layout.find_element(element_id)
        
        if isinstance(element.element_type, End):
            ends_at_buffer_stop = not element.element_type.portal
            end_element_id = element_id
            break
        
        if current in visited:
            raise RouteCycleError(f"Route loops back into element {element_id} at connector {entry}")
        if len(segments) >= config.max_segments:
            raise RouteTooLongError(f"Route exceeds {config.max_segments} segments")
        visited.add(current)
        
        state = _switch_state_for(element_id, switch_state)
        exit_ = exit_connector(element.element_type, entry, state)
        length, geometry = traverse(element.element_type, element.connectors, entry, exit_)
        
        segments.append(RouteSegment(
            element_id=element_id,
            length=length,
            start_distance=distance,
            geometry=geometry,
        ))
        distance += length
        
        current = layout.find_connected((element_id, exit_))
    
    route = Route(
        segments=tuple(segments),
        total_length=distance,
        ends_at_buffer_stop=ends_at_buffer_stop,
        start_element_id=start_element_id,
        end_element_id=end_element_id,
    )
    logger.debug(
        "Built route from element %d: %d segments, %.1f m, %s",
        start_element_id,
        route.num_segments,
        route.total_length,
        "buffer stop" if ends_at_buffer_stop else "portal",
    )
    return route
