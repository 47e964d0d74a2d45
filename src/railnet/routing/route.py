"""
Route - Distance-indexed path through a track layout.

Provides:
- Segment geometry (straight and arc)
- Route segments with cumulative start distances
- World position and heading at a distance along a route
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union
import numpy as np

from railnet.track.element import Point, normalize_angle


@dataclass(frozen=True)
class StraightGeometry:
    """Straight traversal between two points."""
    start: Point
    end: Point
    orientation: float                # Travel heading in radians
    
    @property
    def start_point(self) -> Point:
        """Point where the traversal begins."""
        return self.start


@dataclass(frozen=True)
class ArcGeometry:
    """Circular traversal around a center point."""
    center: Point
    radius: float
    start_angle: float                # Angle of the start point seen from the center
    signed_sweep: float               # Positive = increasing angle
    
    @property
    def start_point(self) -> Point:
        """Point where the traversal begins."""
        return (
            float(self.center[0] + self.radius * np.cos(self.start_angle)),
            float(self.center[1] + self.radius * np.sin(self.start_angle)),
        )


SegmentGeometry = Union[StraightGeometry, ArcGeometry]


@dataclass(frozen=True)
class RouteSegment:
    """One element's traversal within a route."""
    element_id: int
    length: float
    start_distance: float
    geometry: SegmentGeometry
    
    @property
    def end_distance(self) -> float:
        """Route distance at which this segment ends."""
        return self.start_distance + self.length


@dataclass(frozen=True)
class Route:
    """Ordered, contiguous list of route segments.
    
    Segment ``i`` starts where segment ``i - 1`` ends; the last segment
    ends at ``total_length``.
    """
    segments: Tuple[RouteSegment, ...] = ()
    total_length: float = 0.0
    ends_at_buffer_stop: bool = True  # False when the route runs out through a portal
    start_element_id: Optional[int] = None
    end_element_id: Optional[int] = None      # Terminating End element, None for an open connector
    
    @property
    def num_segments(self) -> int:
        """Number of segments."""
        return len(self.segments)
    
    @property
    def element_ids(self) -> Tuple[int, ...]:
        """Element ids in travel order."""
        return tuple(s.element_id for s in self.segments)
    
    def get_state(self) -> dict:
        """Get route summary for inspection."""
        return {
            "total_length_m": self.total_length,
            "ends_at_buffer_stop": self.ends_at_buffer_stop,
            "start_element_id": self.start_element_id,
            "end_element_id": self.end_element_id,
            "segments": [
                {
                    "element_id": s.element_id,
                    "start_m": s.start_distance,
                    "length_m": s.length,
                    "kind": "arc" if isinstance(s.geometry, ArcGeometry) else "straight",
                }
                for s in self.segments
            ],
        }


@dataclass(frozen=True)
class RoutePosition:
    """World pose at a distance along a route."""
    position: Point
    orientation: float                # Travel heading in radians


def _interpolate(geometry: SegmentGeometry, t: float) -> RoutePosition:
    if isinstance(geometry, StraightGeometry):
        x = geometry.start[0] + t * (geometry.end[0] - geometry.start[0])
        y = geometry.start[1] + t * (geometry.end[1] - geometry.start[1])
        return RoutePosition((float(x), float(y)), geometry.orientation)
    
    angle = geometry.start_angle + t * geometry.signed_sweep
    x = geometry.center[0] + geometry.radius * np.cos(angle)
    y = geometry.center[1] + geometry.radius * np.sin(angle)
    
    # Tangent is perpendicular to the radius, on the side the arc sweeps
    tangent = angle + np.pi / 2 if geometry.signed_sweep >= 0 else angle - np.pi / 2
    return RoutePosition((float(x), float(y)), normalize_angle(tangent))


def position_on_route(distance: float, route: Route) -> Optional[RoutePosition]:
    """Map a distance along a route to a world position and heading.
    
    Args:
        distance: Distance from the route start in meters
        route: Route to interpolate along
    
    Returns:
        Pose at that distance, or None outside [0, total_length]
    """
    if not route.segments or distance < 0 or distance > route.total_length:
        return None
    
    segment = route.segments[-1]
    for candidate in route.segments:
        if distance <= candidate.end_distance:
            segment = candidate
            break
    
    t = (distance - segment.start_distance) / segment.length if segment.length > 0 else 0.0
    t = float(np.clip(t, 0.0, 1.0))
    return _interpolate(segment.geometry, t)
