"""Step-driven force simulation over a :class:`~geoforce.graph.Graph`."""

from __future__ import annotations

import logging
import math
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from .config import SimulationOptions
from .errors import ConfigurationError
from .forces.base import Force
from .graph import Anchored, Graph, Node, NodeKind
from .logging_utils import debug_log_call
from .projection import GeoProjector
from .render import LinkState, NodeState, RenderSink, TickFrame

logger = logging.getLogger(__name__)

INITIAL_RADIUS = 10.0
INITIAL_ANGLE = math.pi * (3.0 - math.sqrt(5.0))

ForceSpec = Union[Mapping[str, Force], Sequence[Tuple[str, Force]]]


class Simulation:
    """Advance node positions one tick at a time under registered forces.

    Forces run in registration order each tick, scaled by the current
    ``alpha``. Anchored nodes are then snapped onto their override target
    with zero velocity; free nodes integrate their damped velocity. The
    simulation owns node state; sinks receive immutable :class:`TickFrame`
    snapshots after every :meth:`step`.
    """

    def __init__(
        self,
        graph: Graph,
        forces: ForceSpec = (),
        *,
        alpha: float = 1.0,
        options: Optional[SimulationOptions] = None,
        sinks: Iterable[RenderSink] = (),
    ):
        self.options = options or SimulationOptions()
        self.options.validate()
        if alpha < 0:
            raise ConfigurationError(f"alpha must be non-negative, got {alpha}")

        self.graph = graph
        self.nodes: List[Node] = graph.nodes
        self.rng = np.random.default_rng(self.options.seed)
        self._alpha = float(alpha)
        self._alpha_target = float(self.options.alpha_target)
        self._alpha_decay = self.options.resolved_alpha_decay()
        self._velocity_decay = float(self.options.velocity_decay)
        self.ticks = 0
        self._settled = False
        self._sinks: List[RenderSink] = list(sinks)

        self._seed_positions()

        self._forces: Dict[str, Force] = {}
        items = forces.items() if isinstance(forces, Mapping) else forces
        for name, force in items:
            self.add_force(name, force)

        logger.info(
            "Simulation ready: %d node(s), %d link(s), forces=%s, alpha=%.3f, alpha_decay=%.5f",
            len(self.nodes),
            len(graph.links),
            list(self._forces),
            self._alpha,
            self._alpha_decay,
        )

    def _seed_positions(self) -> None:
        for node in self.nodes:
            if isinstance(node.placement, Anchored):
                node.x = node.placement.target_x
                node.y = node.placement.target_y
            elif not node.has_position:
                cx, cy = node.home if node.home is not None else (0.0, 0.0)
                radius = INITIAL_RADIUS * math.sqrt(0.5 + node.index)
                angle = node.index * INITIAL_ANGLE
                node.x = cx + radius * math.cos(angle)
                node.y = cy + radius * math.sin(angle)
            if math.isnan(node.vx) or math.isnan(node.vy):
                node.vx = node.vy = 0.0

    @property
    def alpha(self) -> float:
        return self._alpha

    @property
    def alpha_target(self) -> float:
        return self._alpha_target

    @alpha_target.setter
    def alpha_target(self, value: float) -> None:
        if value < 0:
            raise ConfigurationError(f"alpha_target must be non-negative, got {value}")
        self._alpha_target = float(value)

    @property
    def alpha_decay(self) -> float:
        return self._alpha_decay

    @property
    def settled(self) -> bool:
        return self._alpha < self.options.alpha_min

    @property
    def forces(self) -> Dict[str, Force]:
        return dict(self._forces)

    def force(self, name: str) -> Force:
        try:
            return self._forces[name]
        except KeyError as exc:
            raise KeyError(f"No force registered as {name!r}") from exc

    def add_force(self, name: str, force: Force) -> None:
        if name in self._forces:
            raise ConfigurationError(f"force {name!r} is already registered")
        force.initialize(self.nodes, self.rng)
        self._forces[name] = force

    def remove_force(self, name: str) -> Force:
        return self._forces.pop(name)

    def add_sink(self, sink: RenderSink) -> None:
        self._sinks.append(sink)

    def _advance(self) -> None:
        self._alpha += (self._alpha_target - self._alpha) * self._alpha_decay
        for force in self._forces.values():
            force(self._alpha)

        decay = self._velocity_decay
        for node in self.nodes:
            placement = node.placement
            if isinstance(placement, Anchored):
                node.x = placement.target_x
                node.y = placement.target_y
                node.vx = 0.0
                node.vy = 0.0
            else:
                node.vx *= decay
                node.vy *= decay
                node.x += node.vx
                node.y += node.vy
        self.ticks += 1

    def step(self) -> bool:
        """Run one tick, notify sinks and report whether alpha is below ``alpha_min``."""

        self._advance()
        if self._sinks:
            frame = self.frame()
            for sink in self._sinks:
                sink.on_tick(frame)

        settled = self.settled
        if settled and not self._settled:
            logger.info("Simulation settled after %d tick(s), alpha=%.5f", self.ticks, self._alpha)
        elif logger.isEnabledFor(logging.DEBUG):
            logger.debug("Tick %d alpha=%.5f", self.ticks, self._alpha)
        self._settled = settled
        return settled

    def tick(self, iterations: int = 1) -> None:
        """Advance ``iterations`` ticks without notifying sinks."""

        for _ in range(iterations):
            self._advance()
        self._settled = self.settled

    def run(self, max_ticks: int = 10_000) -> int:
        """Step until settled or ``max_ticks`` steps ran; return the steps taken."""

        taken = 0
        while taken < max_ticks:
            taken += 1
            if self.step():
                break
        return taken

    @debug_log_call(logger, log_result=False)
    def restart(self, alpha: float = 1.0) -> None:
        if alpha < 0:
            raise ConfigurationError(f"alpha must be non-negative, got {alpha}")
        logger.info("Restarting simulation at alpha=%.3f (was %.5f)", alpha, self._alpha)
        self._alpha = float(alpha)
        self._settled = self.settled

    @debug_log_call(logger, log_result=False)
    def reanchor_all(self, projector: GeoProjector, *, carry_free_nodes: bool = False) -> None:
        """Re-project geographic coordinates and refresh cached force targets.

        Anchored nodes get a new override target; every node with a geographic
        coordinate gets a new home point. With ``carry_free_nodes`` free nodes
        move by the same offset as their home point.
        """

        moved = 0
        for node in self.nodes:
            if node.geo is None:
                continue
            home = projector.project(*node.geo)
            if node.kind is NodeKind.ANCHORED:
                node.pin_to(*home)
                moved += 1
            elif carry_free_nodes and node.home is not None:
                node.x += home[0] - node.home[0]
                node.y += home[1] - node.home[1]
            node.home = home
        for force in self._forces.values():
            force.initialize(self.nodes, self.rng)
        logger.info("Re-anchored %d node(s) using %r", moved, projector)

    def find(self, x: float, y: float, radius: float = math.inf) -> Optional[Node]:
        """Return the node closest to ``(x, y)`` within ``radius``, if any."""

        best: Optional[Node] = None
        best_d2 = radius * radius
        for node in self.nodes:
            dx = node.x - x
            dy = node.y - y
            d2 = dx * dx + dy * dy
            if d2 < best_d2:
                best = node
                best_d2 = d2
        return best

    def positions(self) -> np.ndarray:
        return np.array([(node.x, node.y) for node in self.nodes], dtype=float).reshape(-1, 2)

    def velocities(self) -> np.ndarray:
        return np.array([(node.vx, node.vy) for node in self.nodes], dtype=float).reshape(-1, 2)

    def frame(self) -> TickFrame:
        nodes = tuple(
            NodeState(node.id, node.x, node.y, node.vx, node.vy, node.radius, node.anchored)
            for node in self.nodes
        )
        links = tuple(
            LinkState(
                link.source.id,
                link.target.id,
                link.source.x,
                link.source.y,
                link.target.x,
                link.target.y,
                link.category,
            )
            for link in self.graph.links
        )
        return TickFrame(self.ticks, self._alpha, nodes, links)


__all__ = ["INITIAL_ANGLE", "INITIAL_RADIUS", "Simulation"]
