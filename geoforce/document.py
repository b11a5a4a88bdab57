"""Input documents: parsing, validation and graph construction."""

from __future__ import annotations

import json
import logging
import math
import numbers
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from .errors import DocumentError
from .graph import Graph, LinkSpec, Node, NodeId, NodeKind
from .projection import GeoProjector

logger = logging.getLogger(__name__)

_KIND_ALIASES: Dict[str, NodeKind] = {
    "anchored": NodeKind.ANCHORED,
    "parent": NodeKind.ANCHORED,
    "fixed": NodeKind.ANCHORED,
    "free": NodeKind.FREE,
    "child": NodeKind.FREE,
}


@dataclass
class NodeRecord:
    id: NodeId
    kind: NodeKind = NodeKind.FREE
    lat: Optional[float] = None
    lon: Optional[float] = None
    radius: Optional[float] = None
    x: Optional[float] = None
    y: Optional[float] = None
    image: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def geo(self):
        if self.lat is None or self.lon is None:
            return None
        return (self.lat, self.lon)


@dataclass
class GraphDocument:
    nodes: List[NodeRecord]
    links: List[LinkSpec]


def _number(value: Any, path: str, *, required: bool = False) -> Optional[float]:
    if value is None:
        if required:
            raise DocumentError(path, "value is required")
        return None
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise DocumentError(path, f"expected a number, got {value!r}")
    number = float(value)
    if not math.isfinite(number):
        raise DocumentError(path, f"expected a finite number, got {value!r}")
    return number


def _identifier(value: Any, path: str) -> NodeId:
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise DocumentError(path, f"identifier must be a string or integer, got {value!r}")
    if isinstance(value, str) and not value:
        raise DocumentError(path, "identifier must not be empty")
    return value


def _parse_node(raw: Any, idx: int) -> NodeRecord:
    base = f"nodes[{idx}]"
    if not isinstance(raw, Mapping):
        raise DocumentError(base, "node must be an object")
    if "id" not in raw:
        raise DocumentError(f"{base}.id", "value is required")
    node_id = _identifier(raw["id"], f"{base}.id")

    kind_key = "kind" if "kind" in raw else "type"
    raw_kind = raw.get(kind_key, "free")
    if not isinstance(raw_kind, str) or raw_kind.lower() not in _KIND_ALIASES:
        choices = "|".join(sorted(_KIND_ALIASES))
        raise DocumentError(f"{base}.{kind_key}", f"kind must be one of {choices}, got {raw_kind!r}")
    kind = _KIND_ALIASES[raw_kind.lower()]

    lat = _number(raw.get("lat"), f"{base}.lat")
    lon = _number(raw.get("lon", raw.get("lng")), f"{base}.lon")
    if (lat is None) != (lon is None):
        raise DocumentError(base, "lat and lon must be given together")
    if lat is not None and not -90.0 <= lat <= 90.0:
        raise DocumentError(f"{base}.lat", f"latitude {lat} out of range")

    radius = _number(raw.get("radius"), f"{base}.radius")
    if radius is not None and radius < 0:
        raise DocumentError(f"{base}.radius", f"radius must be non-negative, got {radius}")

    x = _number(raw.get("x"), f"{base}.x")
    y = _number(raw.get("y"), f"{base}.y")
    if (x is None) != (y is None):
        raise DocumentError(base, "x and y must be given together")

    if kind is NodeKind.ANCHORED and lat is None and x is None:
        raise DocumentError(base, "anchored node needs lat/lon or an explicit x/y position")

    image = raw.get("img", raw.get("imageRef"))
    if image is not None and not isinstance(image, str):
        raise DocumentError(f"{base}.img", "image reference must be a string")

    known = {"id", "kind", "type", "lat", "lon", "lng", "radius", "x", "y", "img", "imageRef"}
    extra = {key: value for key, value in raw.items() if key not in known}
    return NodeRecord(node_id, kind, lat, lon, radius, x, y, image, extra)


def _parse_link(raw: Any, idx: int) -> LinkSpec:
    base = f"links[{idx}]"
    if not isinstance(raw, Mapping):
        raise DocumentError(base, "link must be an object")
    source_key = "from" if "from" in raw else "source"
    target_key = "to" if "to" in raw else "target"
    if source_key not in raw:
        raise DocumentError(f"{base}.from", "value is required")
    if target_key not in raw:
        raise DocumentError(f"{base}.to", "value is required")
    category = raw.get("category")
    if category is not None and not isinstance(category, str):
        raise DocumentError(f"{base}.category", "category must be a string")
    return LinkSpec(
        _identifier(raw[source_key], f"{base}.{source_key}"),
        _identifier(raw[target_key], f"{base}.{target_key}"),
        category,
    )


def parse_document(data: Any) -> GraphDocument:
    """Validate a decoded ``{"nodes": [...], "links": [...]}`` record."""

    if not isinstance(data, Mapping):
        raise DocumentError("", "document must be an object with 'nodes' and 'links'")
    raw_nodes = data.get("nodes")
    raw_links = data.get("links", [])
    if not isinstance(raw_nodes, Sequence) or isinstance(raw_nodes, (str, bytes)):
        raise DocumentError("nodes", "expected a list")
    if not isinstance(raw_links, Sequence) or isinstance(raw_links, (str, bytes)):
        raise DocumentError("links", "expected a list")

    nodes = [_parse_node(raw, idx) for idx, raw in enumerate(raw_nodes)]
    seen: Dict[NodeId, int] = {}
    for idx, record in enumerate(nodes):
        if record.id in seen:
            raise DocumentError(f"nodes[{idx}].id", f"duplicate id {record.id!r} (first at nodes[{seen[record.id]}])")
        seen[record.id] = idx

    links = [_parse_link(raw, idx) for idx, raw in enumerate(raw_links)]
    return GraphDocument(nodes=nodes, links=links)


def load_document(path: Union[str, Path]) -> GraphDocument:
    path = Path(path)
    logger.info("Loading graph document from %s", path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise DocumentError("", f"{path}: invalid JSON at line {exc.lineno}, col {exc.colno}: {exc.msg}") from exc
    document = parse_document(data)
    logger.info("Loaded %d node(s) and %d link(s)", len(document.nodes), len(document.links))
    return document


def build_graph(
    document: GraphDocument,
    projector: Optional[GeoProjector] = None,
    *,
    default_radius: float = 15.0,
) -> Graph:
    """Create a :class:`Graph` from ``document``, projecting geographic coordinates.

    Anchored nodes are pinned to their projected coordinate (or to their
    explicit position when they carry none). Free nodes remember their
    projected coordinate as ``home`` and keep an explicit position if given.
    """

    if projector is None and any(record.geo is not None for record in document.nodes):
        raise DocumentError("", "a projector is required for nodes with geographic coordinates")

    nodes: List[Node] = []
    for record in document.nodes:
        node = Node(
            record.id,
            kind=record.kind,
            radius=default_radius if record.radius is None else record.radius,
            geo=record.geo,
            image=record.image,
            data=dict(record.extra),
        )
        if record.geo is not None:
            node.home = projector.project(*record.geo)  # type: ignore[union-attr]
        if record.x is not None and record.y is not None:
            node.x, node.y = record.x, record.y
        if record.kind is NodeKind.ANCHORED:
            target = node.home if node.home is not None else (node.x, node.y)
            node.pin_to(*target)
            node.x, node.y = target
        nodes.append(node)

    return Graph(nodes, document.links)


__all__ = [
    "GraphDocument",
    "NodeRecord",
    "build_graph",
    "load_document",
    "parse_document",
]
