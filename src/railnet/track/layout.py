"""
Layout - Graph of placed track elements and the joints between them.

Contains:
- Placed elements with derived connectors
- Bidirectional connection list between element connectors
- Named turnouts (switches)
- Joint validation
"""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple

from railnet.track.element import (
    Connector,
    Curve,
    ElementType,
    Straight,
    SwitchState,
    Turnout,
    compute_connectors,
    connectors_join,
)


# (element id, connector index)
ConnectorRef = Tuple[int, int]


@dataclass(frozen=True)
class PlacedElement:
    """A track element placed in the world."""
    element_id: int
    element_type: ElementType
    connectors: Tuple[Connector, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Connection:
    """Joint between two element connectors. Lookup works from either side."""
    a: ConnectorRef
    b: ConnectorRef


def _check_element_type(element_type: ElementType) -> None:
    if isinstance(element_type, Straight) and element_type.length <= 0:
        raise ValueError("Straight length must be positive")
    if isinstance(element_type, Curve) and element_type.radius <= 0:
        raise ValueError("Curve radius must be positive")
    if isinstance(element_type, Turnout):
        if element_type.through_length <= 0:
            raise ValueError("Turnout through length must be positive")
        if element_type.radius <= 0:
            raise ValueError("Turnout radius must be positive")


class Layout:
    """Track layout graph.
    
    Elements are placed one at a time; connectors are always derived from
    connector 0 so geometry stays consistent. Placing an element against
    an existing connector records the joint, which is the usual way to
    build a fully connected layout.
    
    Usage:
        layout = Layout()
        portal = layout.place_element(End(portal=True), Connector((500.0, 0.0), np.pi))
        main = layout.place_element_at(Straight(250.0), (portal, 0))
        
        layout.find_connected((main, 0))  # -> (portal, 0)
    """
    
    def __init__(self):
        """Initialize an empty layout."""
        self._elements: Dict[int, PlacedElement] = {}
        self._connections: List[Connection] = []
        self._switches: Dict[str, int] = {}
        self._next_id: int = 0
    
    @property
    def elements(self) -> List[PlacedElement]:
        """Placed elements in placement order."""
        return list(self._elements.values())
    
    @property
    def connections(self) -> List[Connection]:
        """Recorded joints."""
        return list(self._connections)
    
    @property
    def switches(self) -> Dict[str, int]:
        """Switch names mapped to turnout element ids."""
        return dict(self._switches)
    
    def place_element(self, element_type: ElementType, connector0: Connector) -> int:
        """Place an element with the given first connector.
        
        Args:
            element_type: Element type
            connector0: Connector 0 of the new element
        
        Returns:
            New element id
        """
        _check_element_type(element_type)
        
        element_id = self._next_id
        self._next_id += 1
        
        self._elements[element_id] = PlacedElement(
            element_id=element_id,
            element_type=element_type,
            connectors=tuple(compute_connectors(connector0, element_type)),
        )
        return element_id
    
    def place_element_at(self, element_type: ElementType, target: ConnectorRef) -> int:
        """Place an element joined to an existing connector.
        
        The new element's connector 0 mirrors the target connector, and
        the joint is recorded.
        
        Args:
            element_type: Element type
            target: (element id, connector index) to attach to
        
        Returns:
            New element id
        """
        anchor = self.get_connector(target)
        element_id = self.place_element(element_type, anchor.flipped())
        self.connect(target, (element_id, 0))
        return element_id
    
    def connect(self, a: ConnectorRef, b: ConnectorRef) -> None:
        """Record a joint between two connectors.
        
        Args:
            a: First connector reference
            b: Second connector reference
        """
        self.get_connector(a)
        self.get_connector(b)
        self._connections.append(Connection(a, b))
    
    def name_switch(self, name: str, element_id: int) -> None:
        """Register a turnout under a switch name.
        
        Args:
            name: Switch name used by orders and effects
            element_id: Turnout element id
        """
        element = self.find_element(element_id)
        if not isinstance(element.element_type, Turnout):
            raise ValueError(f"Element {element_id} is not a turnout")
        self._switches[name] = element_id
    
    def find_element(self, element_id: int) -> PlacedElement:
        """Get a placed element by id.
        
        Raises:
            KeyError: If no element has this id
        """
        if element_id not in self._elements:
            raise KeyError(f"Unknown element {element_id}")
        return self._elements[element_id]
    
    def get_connector(self, ref: ConnectorRef) -> Connector:
        """Get a connector by reference.
        
        Raises:
            KeyError: If the element does not exist
            ValueError: If the connector index is out of range
        """
        element_id, index = ref
        element = self.find_element(element_id)
        if not 0 <= index < len(element.connectors):
            raise ValueError(f"Element {element_id} has no connector {index}")
        return element.connectors[index]
    
    def find_connected(self, ref: ConnectorRef) -> Optional[ConnectorRef]:
        """Find the connector joined to ``ref``, searching both directions.
        
        Args:
            ref: Connector reference
        
        Returns:
            The joined connector reference, or None if nothing is attached
        """
        for connection in self._connections:
            if connection.a == ref:
                return connection.b
            if connection.b == ref:
                return connection.a
        return None
    
    def misaligned_connections(self) -> List[Connection]:
        """Get every joint whose connectors do not meet cleanly."""
        return [
            c for c in self._connections
            if not connectors_join(self.get_connector(c.a), self.get_connector(c.b))
        ]
    
    def validate(self) -> None:
        """Validate that every joint lines up.
        
        Raises:
            ValueError: If any connection fails the join tolerances
        """
        bad = self.misaligned_connections()
        if bad:
            joints = ", ".join(f"{c.a}-{c.b}" for c in bad)
            raise ValueError(f"Misaligned connections: {joints}")
    
    def get_state(self) -> dict:
        """Get layout state for inspection.
        
        Returns:
            Dictionary describing elements, joints and switches
        """
        return {
            "elements": [
                {
                    "id": e.element_id,
                    "type": type(e.element_type).__name__,
                    "connectors": [(c.position, c.orientation) for c in e.connectors],
                }
                for e in self._elements.values()
            ],
            "connections": [(c.a, c.b) for c in self._connections],
            "switches": dict(self._switches),
        }


def switch_snapshot(layout: Layout, named_states: Mapping[str, SwitchState]) -> Dict[int, SwitchState]:
    """Convert name-keyed switch state into a turnout-id-keyed snapshot.
    
    Args:
        layout: Layout holding the switch names
        named_states: Live switch state by switch name
    
    Returns:
        Switch state by turnout element id, for route building
    """
    switches = layout.switches
    return {switches[name]: state for name, state in named_states.items() if name in switches}
