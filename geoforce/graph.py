"""In-memory node/link model with endpoint resolution."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Hashable, Iterable, Iterator, List, Optional, Tuple, Union

from .errors import ConfigurationError, DuplicateNodeError, GraphReferenceError

logger = logging.getLogger(__name__)

NodeId = Hashable
Point2D = Tuple[float, float]
GeoCoord = Tuple[float, float]


class NodeKind(str, Enum):
    ANCHORED = "anchored"
    FREE = "free"


@dataclass(frozen=True)
class Free:
    """Placement of a node integrated from its velocity."""


@dataclass(frozen=True)
class Anchored:
    """Placement of a node held exactly at ``(target_x, target_y)``."""

    target_x: float
    target_y: float


Placement = Union[Free, Anchored]
FREE = Free()

LINK_ANCHORED = "anchored"
LINK_MIXED = "mixed"
LINK_FREE = "free"


@dataclass(eq=False)
class Node:
    id: NodeId
    kind: NodeKind = NodeKind.FREE
    radius: float = 15.0
    geo: Optional[GeoCoord] = None
    home: Optional[Point2D] = None
    placement: Placement = FREE
    x: float = math.nan
    y: float = math.nan
    vx: float = 0.0
    vy: float = 0.0
    index: int = -1
    image: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def anchored(self) -> bool:
        return isinstance(self.placement, Anchored)

    @property
    def has_position(self) -> bool:
        return not (math.isnan(self.x) or math.isnan(self.y))

    def pin_to(self, x: float, y: float) -> None:
        self.kind = NodeKind.ANCHORED
        self.placement = Anchored(float(x), float(y))

    def __repr__(self) -> str:
        return f"Node({self.id!r}, kind={self.kind.value}, x={self.x:.3f}, y={self.y:.3f})"


@dataclass(frozen=True)
class LinkSpec:
    """Unresolved link between two node identifiers."""

    source: NodeId
    target: NodeId
    category: Optional[str] = None


@dataclass(eq=False)
class Link:
    source: Node
    target: Node
    index: int
    category: str

    def __repr__(self) -> str:
        return f"Link({self.source.id!r} -> {self.target.id!r}, category={self.category})"


def classify_link(source: Node, target: Node) -> str:
    anchored = int(source.kind is NodeKind.ANCHORED) + int(target.kind is NodeKind.ANCHORED)
    if anchored == 2:
        return LINK_ANCHORED
    if anchored == 1:
        return LINK_MIXED
    return LINK_FREE


def _reconcile_placement(node: Node) -> None:
    """Make placement agree with kind; anchored nodes default to their home point, then their position."""

    anchored = isinstance(node.placement, Anchored)
    if node.kind is NodeKind.FREE and anchored:
        raise ConfigurationError(f"free node {node.id!r} has an anchored placement")
    if node.kind is NodeKind.ANCHORED and not anchored:
        if node.home is not None:
            node.pin_to(*node.home)
        elif node.has_position:
            node.pin_to(node.x, node.y)
        else:
            raise ConfigurationError(
                f"anchored node {node.id!r} has no target: give it a home point or a position, or call pin_to"
            )


class Graph:
    """Nodes and links with every link endpoint resolved to a node object."""

    def __init__(self, nodes: Iterable[Node], links: Iterable[LinkSpec] = ()):
        self.nodes: List[Node] = []
        self._by_id: Dict[NodeId, Node] = {}
        for node in nodes:
            if node.id in self._by_id:
                raise DuplicateNodeError(node.id)
            if node.radius < 0 or math.isnan(node.radius):
                raise ConfigurationError(f"node {node.id!r} has invalid radius {node.radius}")
            _reconcile_placement(node)
            node.index = len(self.nodes)
            self.nodes.append(node)
            self._by_id[node.id] = node

        self.links: List[Link] = []
        unresolved: List[Tuple[int, NodeId, NodeId]] = []
        for idx, spec in enumerate(links):
            source = self._by_id.get(spec.source)
            target = self._by_id.get(spec.target)
            if source is None or target is None:
                unresolved.append((idx, spec.source, spec.target))
                continue
            category = spec.category or classify_link(source, target)
            self.links.append(Link(source, target, len(self.links), category))
        if unresolved:
            raise GraphReferenceError(unresolved)

        self._incident: Dict[NodeId, List[Link]] = {node.id: [] for node in self.nodes}
        for link in self.links:
            self._incident[link.source.id].append(link)
            if link.target is not link.source:
                self._incident[link.target.id].append(link)

        logger.debug("Graph with %d node(s) and %d link(s)", len(self.nodes), len(self.links))

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._by_id

    def node(self, node_id: NodeId) -> Node:
        try:
            return self._by_id[node_id]
        except KeyError as exc:
            raise KeyError(f"Unknown node {node_id!r}") from exc

    def incident_links(self, node_id: NodeId) -> List[Link]:
        self.node(node_id)
        return list(self._incident[node_id])

    def neighbors(self, node_id: NodeId) -> List[Node]:
        seen: Dict[NodeId, Node] = {}
        for link in self.incident_links(node_id):
            other = link.target if link.source.id == node_id else link.source
            seen.setdefault(other.id, other)
        return list(seen.values())

    def anchored_nodes(self) -> List[Node]:
        return [node for node in self.nodes if node.kind is NodeKind.ANCHORED]

    def free_nodes(self) -> List[Node]:
        return [node for node in self.nodes if node.kind is NodeKind.FREE]

    def links_in(self, *categories: str) -> List[Link]:
        wanted = set(categories)
        return [link for link in self.links if link.category in wanted]

    def categories(self) -> List[str]:
        return sorted({link.category for link in self.links})


__all__ = [
    "Anchored",
    "FREE",
    "Free",
    "GeoCoord",
    "Graph",
    "LINK_ANCHORED",
    "LINK_FREE",
    "LINK_MIXED",
    "Link",
    "LinkSpec",
    "Node",
    "NodeId",
    "NodeKind",
    "Placement",
    "classify_link",
]
