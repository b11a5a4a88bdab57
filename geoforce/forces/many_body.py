"""Charge force between all node pairs with Barnes-Hut aggregation."""

from __future__ import annotations

import math
from typing import Callable, Dict, List, Union

from ..errors import ConfigurationError
from ..graph import Node
from ..quadtree import Quad, QuadTree
from .base import Force, check_non_negative, evaluate

DEFAULT_STRENGTH = -30.0


class ManyBodyForce(Force):
    """Pairwise charge; negative strength repels, positive attracts.

    Cells whose width over distance is below ``theta`` are treated as a
    single charge at their weighted centre. ``theta=0`` evaluates every pair
    exactly. Distances are clamped below by ``distance_min`` and interactions
    beyond ``distance_max`` are ignored.
    """

    def __init__(
        self,
        *,
        strength: Union[float, Callable[[Node], float]] = DEFAULT_STRENGTH,
        theta: float = 0.9,
        distance_min: float = 1.0,
        distance_max: float = math.inf,
    ):
        super().__init__()
        self.strength = strength
        self.theta = check_non_negative("theta", theta)
        self.distance_min = check_non_negative("distance_min", distance_min)
        self.distance_max = check_non_negative("distance_max", distance_max)
        if self.distance_max < self.distance_min:
            raise ConfigurationError(
                f"distance_max ({self.distance_max}) must not be below distance_min ({self.distance_min})"
            )
        self._strengths: List[float] = []
        self._slots: Dict[int, int] = {}

    def _prepare(self) -> None:
        self._slots = {id(node): idx for idx, node in enumerate(self.nodes)}
        self._strengths = [evaluate(self.strength, node) for node in self.nodes]
        for node, value in zip(self.nodes, self._strengths):
            if math.isnan(value):
                raise ConfigurationError(f"charge strength for {node.id!r} is not a number")

    def _accumulate(self, quad: Quad[Node]) -> None:
        if quad.is_leaf:
            head = quad.items[0]
            quad.cx, quad.cy = head.x, head.y
            quad.value = sum(self._strengths[self._slots[id(item)]] for item in quad.items)
            return
        value = 0.0
        weight = 0.0
        cx = 0.0
        cy = 0.0
        for child in quad.children or ():
            if child is None:
                continue
            charge = abs(child.value)
            if charge:
                value += child.value
                weight += charge
                cx += charge * child.cx
                cy += charge * child.cy
        quad.value = value
        if weight:
            quad.cx = cx / weight
            quad.cy = cy / weight

    def apply(self, alpha: float) -> None:
        if not self.nodes:
            return
        tree: QuadTree[Node] = QuadTree(self.nodes)
        tree.visit_after(self._accumulate)

        theta2 = self.theta * self.theta
        min2 = self.distance_min * self.distance_min
        max2 = self.distance_max * self.distance_max
        strengths = self._strengths
        slots = self._slots

        for node in self.nodes:

            def _visit(quad: Quad[Node]) -> bool:
                if not quad.value:
                    return True
                x = quad.cx - node.x
                y = quad.cy - node.y
                width = quad.width
                dist2 = x * x + y * y

                if width * width < theta2 * dist2:
                    if dist2 < max2:
                        if x == 0:
                            x = self._jiggle()
                            dist2 += x * x
                        if y == 0:
                            y = self._jiggle()
                            dist2 += y * y
                        if dist2 < min2:
                            dist2 = math.sqrt(min2 * dist2)
                        node.vx += x * quad.value * alpha / dist2
                        node.vy += y * quad.value * alpha / dist2
                    return True
                if not quad.is_leaf or dist2 >= max2:
                    return False

                if quad.items[0] is not node or len(quad.items) > 1:
                    if x == 0:
                        x = self._jiggle()
                        dist2 += x * x
                    if y == 0:
                        y = self._jiggle()
                        dist2 += y * y
                    if dist2 < min2:
                        dist2 = math.sqrt(min2 * dist2)
                for other in quad.items:
                    if other is node:
                        continue
                    weight = strengths[slots[id(other)]] * alpha / dist2
                    node.vx += x * weight
                    node.vy += y * weight
                return True

            tree.visit(_visit)


__all__ = ["DEFAULT_STRENGTH", "ManyBodyForce"]
