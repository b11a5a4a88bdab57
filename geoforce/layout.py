"""Host-side wiring of a graph document onto a tiled map view."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

from .config import LayoutConfig, LinkOptions, get_layout_config
from .document import GraphDocument, build_graph, load_document
from .forces import CollideForce, Force, LinkForce, ManyBodyForce, PositionForce
from .graph import LINK_ANCHORED, Graph, Link, NodeId
from .logging_utils import apply_debug_logging
from .projection import GeoProjector, MapView, WebMercatorProjector
from .render import RenderSink, TickFrame
from .simulation import Simulation

logger = logging.getLogger(__name__)

ProjectorFactory = Callable[[MapView], GeoProjector]


def _link_force(links: List[Link], options: LinkOptions) -> LinkForce:
    return LinkForce(
        links,
        distance=options.distance,
        strength=options.strength,
        iterations=options.iterations,
    )


def build_forces(graph: Graph, config: LayoutConfig) -> List[Tuple[str, Force]]:
    """Return the named forces of a map layout in application order."""

    forces: List[Tuple[str, Force]] = []
    if config.partition_links:
        anchored = graph.links_in(LINK_ANCHORED)
        others = [link for link in graph.links if link.category != LINK_ANCHORED]
        forces.append(("link", _link_force(others, config.link)))
        forces.append(("link:anchored", _link_force(anchored, config.anchored_link)))
        logger.info("Partitioned links: %d anchored, %d other", len(anchored), len(others))
    else:
        forces.append(("link", _link_force(graph.links, config.link)))

    charge = config.charge
    if charge.enabled:
        forces.append(
            (
                "charge",
                ManyBodyForce(
                    strength=charge.strength,
                    theta=charge.theta,
                    distance_min=charge.distance_min,
                    distance_max=charge.distance_max,
                ),
            )
        )

    collide = config.collide
    if collide.enabled:
        forces.append(
            (
                "collision",
                CollideForce(padding=collide.padding, strength=collide.strength, iterations=collide.iterations),
            )
        )

    if config.position.enabled:
        forces.append(("x", PositionForce("x", strength=config.position.strength)))
        forces.append(("y", PositionForce("y", strength=config.position.strength)))
    return forces


class MapLayout:
    """A running simulation whose anchors follow a map view.

    The host forwards completed pan/zoom events to :meth:`view_changed`,
    which re-projects every anchor and re-energises the simulation so free
    nodes relax toward the new targets.
    """

    def __init__(
        self,
        document: GraphDocument,
        view: MapView,
        *,
        config: Optional[LayoutConfig] = None,
        sinks: Iterable[RenderSink] = (),
        projector_factory: ProjectorFactory = WebMercatorProjector,
    ):
        self.config = config if config is not None else get_layout_config()
        self.config.validate()
        self.view = view
        self._projector_factory = projector_factory
        self.projector = projector_factory(view)
        self.graph = build_graph(document, self.projector, default_radius=self.config.default_radius)
        self.simulation = Simulation(
            self.graph,
            build_forces(self.graph, self.config),
            options=self.config.simulation,
            sinks=sinks,
        )

    @classmethod
    def from_file(cls, path: Union[str, Path], view: MapView, **kwargs) -> "MapLayout":
        return cls(load_document(path), view, **kwargs)

    def step(self) -> bool:
        return self.simulation.step()

    def run(self, max_ticks: int = 10_000) -> int:
        return self.simulation.run(max_ticks)

    def view_changed(self, view: MapView) -> None:
        logger.info("View changed to center=(%.5f, %.5f) zoom=%s", view.center_lat, view.center_lon, view.zoom)
        self.view = view
        self.projector = self._projector_factory(view)
        self.simulation.reanchor_all(self.projector, carry_free_nodes=self.config.carry_free_nodes)
        self.simulation.restart(self.config.restart_alpha)

    def incident_links(self, node_id: NodeId) -> List[Link]:
        return self.graph.incident_links(node_id)

    def positions(self) -> Dict[NodeId, Tuple[float, float]]:
        return {node.id: (node.x, node.y) for node in self.graph.nodes}

    def geo_positions(self) -> Dict[NodeId, Tuple[float, float]]:
        """Current positions mapped back to latitude/longitude."""

        unproject = getattr(self.projector, "unproject", None)
        if unproject is None:
            raise TypeError(f"{type(self.projector).__name__} cannot map pixels back to coordinates")
        return {node.id: unproject(node.x, node.y) for node in self.graph.nodes}

    def frame(self) -> TickFrame:
        return self.simulation.frame()


apply_debug_logging(globals(), logger=logger)


__all__ = ["MapLayout", "ProjectorFactory", "build_forces"]
