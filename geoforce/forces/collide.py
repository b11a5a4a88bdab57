"""Overlap resolution between circular nodes."""

from __future__ import annotations

import math
from typing import Callable, List, Optional, Union

import numpy as np
from scipy.spatial import cKDTree

from ..errors import ConfigurationError
from ..graph import Node
from .base import Force, check_iterations, check_non_negative, evaluate


class CollideForce(Force):
    """Push apart nodes whose circles overlap.

    Each node occupies a circle of ``radius(node) * padding`` centred on its
    predicted position ``(x + vx, y + vy)``. Overlapping pairs are separated
    in proportion to ``strength``, the smaller circle moving more. Several
    relaxation passes per tick let chains of overlaps settle. Candidate pairs
    come from a k-d tree query so only nearby nodes are compared. The force
    is not scaled by alpha.
    """

    def __init__(
        self,
        *,
        radius: Optional[Union[float, Callable[[Node], float]]] = None,
        padding: float = 1.0,
        strength: float = 1.0,
        iterations: int = 1,
    ):
        super().__init__()
        if radius is not None and not callable(radius):
            check_non_negative("collision radius", radius)
        self.radius = radius
        self.padding = check_non_negative("collision padding", padding)
        self.strength = check_non_negative("collision strength", strength)
        if self.strength > 1.0:
            raise ConfigurationError(f"collision strength must be in [0, 1], got {strength}")
        self.iterations = check_iterations(iterations)
        self._radii: List[float] = []

    def _prepare(self) -> None:
        self._radii = []
        for node in self.nodes:
            base = node.radius if self.radius is None else evaluate(self.radius, node)
            if base < 0 or math.isnan(base):
                raise ConfigurationError(f"collision radius for {node.id!r} must be non-negative, got {base}")
            self._radii.append(base * self.padding)

    def effective_radius(self, node: Node) -> float:
        return self._radii[self.nodes.index(node)]

    def _candidate_pairs(self) -> np.ndarray:
        predicted = np.array([(node.x + node.vx, node.y + node.vy) for node in self.nodes], dtype=float)
        reach = 2.0 * max(self._radii)
        pairs = cKDTree(predicted).query_pairs(r=reach, output_type="ndarray")
        if len(pairs) == 0:
            return pairs
        order = np.lexsort((pairs[:, 1], pairs[:, 0]))
        return pairs[order]

    def apply(self, alpha: float) -> None:
        if len(self.nodes) < 2 or not self.strength or max(self._radii) <= 0:
            return
        radii = self._radii
        for _ in range(self.iterations):
            for i, j in self._candidate_pairs().tolist():
                node = self.nodes[i]
                other = self.nodes[j]
                ri = radii[i]
                rj = radii[j]
                reach = ri + rj
                x = node.x + node.vx - other.x - other.vx
                y = node.y + node.vy - other.y - other.vy
                dist2 = x * x + y * y
                if dist2 >= reach * reach:
                    continue
                if x == 0:
                    x = self._jiggle()
                    dist2 += x * x
                if y == 0:
                    y = self._jiggle()
                    dist2 += y * y
                dist = math.sqrt(dist2)
                push = (reach - dist) / dist * self.strength
                x *= push
                y *= push
                rj2 = rj * rj
                share = rj2 / (ri * ri + rj2)
                node.vx += x * share
                node.vy += y * share
                other.vx -= x * (1.0 - share)
                other.vy -= y * (1.0 - share)


__all__ = ["CollideForce"]
