from .errors import ConfigurationError, DocumentError, DuplicateNodeError, GraphReferenceError
from .graph import FREE, Anchored, Free, Graph, Link, LinkSpec, Node, NodeKind, classify_link
from .document import GraphDocument, NodeRecord, build_graph, load_document, parse_document
from .projection import GeoProjector, MapView, WebMercatorProjector
from .forces import CollideForce, Force, LinkForce, ManyBodyForce, PositionForce, force_x, force_y
from .render import CallbackSink, FrameRecorder, JsonLinesSink, LinkState, NodeState, RenderSink, TickFrame
from .config import (
    ChargeOptions,
    CollideOptions,
    LayoutConfig,
    LinkOptions,
    PositionOptions,
    SimulationOptions,
    get_layout_config,
    set_layout_config,
)
from .simulation import Simulation
from .layout import MapLayout, build_forces

__all__ = [
    'Anchored',
    'CallbackSink',
    'ChargeOptions',
    'CollideForce',
    'CollideOptions',
    'ConfigurationError',
    'DocumentError',
    'DuplicateNodeError',
    'FREE',
    'Force',
    'FrameRecorder',
    'Free',
    'GeoProjector',
    'Graph',
    'GraphDocument',
    'GraphReferenceError',
    'JsonLinesSink',
    'LayoutConfig',
    'Link',
    'LinkForce',
    'LinkOptions',
    'LinkSpec',
    'LinkState',
    'ManyBodyForce',
    'MapLayout',
    'MapView',
    'Node',
    'NodeKind',
    'NodeRecord',
    'NodeState',
    'PositionForce',
    'PositionOptions',
    'RenderSink',
    'Simulation',
    'SimulationOptions',
    'TickFrame',
    'WebMercatorProjector',
    'build_forces',
    'build_graph',
    'classify_link',
    'force_x',
    'force_y',
    'get_layout_config',
    'load_document',
    'parse_document',
    'set_layout_config',
]
