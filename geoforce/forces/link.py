"""Spring force pulling link endpoints toward a rest distance."""

from __future__ import annotations

import math
from typing import Dict, List, Optional, Sequence

from ..errors import ConfigurationError
from ..graph import Link
from .base import Accessor, Force, check_iterations, evaluate

DEFAULT_DISTANCE = 30.0


class LinkForce(Force):
    """Spring between the endpoints of every link in ``links``.

    Only the given links are considered, so partitioned link classes can be
    driven by separate instances with independent stiffness. Degrees used for
    the default strength and the endpoint bias are counted within this subset.
    When ``strength`` is omitted each link gets ``1 / min(deg(s), deg(t))``.
    """

    def __init__(
        self,
        links: Sequence[Link],
        *,
        distance: Accessor[Link] = DEFAULT_DISTANCE,
        strength: Optional[Accessor[Link]] = None,
        iterations: int = 1,
    ):
        super().__init__()
        self.links: List[Link] = list(links)
        self.distance = distance
        self.strength = strength
        self.iterations = check_iterations(iterations)
        self._distances: List[float] = []
        self._strengths: List[float] = []
        self._bias: List[float] = []
        self._validate_constants()

    def _validate_constants(self) -> None:
        if not callable(self.distance) and float(self.distance) < 0:
            raise ConfigurationError(f"link distance must be non-negative, got {self.distance}")
        if self.strength is not None and not callable(self.strength) and float(self.strength) < 0:
            raise ConfigurationError(f"link strength must be non-negative, got {self.strength}")

    def _prepare(self) -> None:
        members = {id(node) for node in self.nodes}
        count: Dict[int, int] = {}
        for link in self.links:
            if id(link.source) not in members or id(link.target) not in members:
                raise ConfigurationError(f"{link!r} refers to a node outside the simulation")
            count[id(link.source)] = count.get(id(link.source), 0) + 1
            count[id(link.target)] = count.get(id(link.target), 0) + 1

        self._bias = []
        self._distances = []
        self._strengths = []
        for link in self.links:
            s_count = count[id(link.source)]
            t_count = count[id(link.target)]
            self._bias.append(s_count / (s_count + t_count))
            distance = evaluate(self.distance, link)
            if distance < 0 or math.isnan(distance):
                raise ConfigurationError(f"{link!r} has invalid distance {distance}")
            self._distances.append(distance)
            if self.strength is None:
                strength = 1.0 / min(s_count, t_count)
            else:
                strength = evaluate(self.strength, link)
            if strength < 0 or math.isnan(strength):
                raise ConfigurationError(f"{link!r} has invalid strength {strength}")
            self._strengths.append(strength)

    def apply(self, alpha: float) -> None:
        for _ in range(self.iterations):
            for idx, link in enumerate(self.links):
                source = link.source
                target = link.target
                x = target.x + target.vx - source.x - source.vx
                if x == 0:
                    x = self._jiggle()
                y = target.y + target.vy - source.y - source.vy
                if y == 0:
                    y = self._jiggle()
                length = math.sqrt(x * x + y * y)
                factor = (length - self._distances[idx]) / length * alpha * self._strengths[idx]
                x *= factor
                y *= factor
                bias = self._bias[idx]
                target.vx -= x * bias
                target.vy -= y * bias
                source.vx += x * (1.0 - bias)
                source.vy += y * (1.0 - bias)

    def link_strength(self, link: Link) -> float:
        return self._strengths[self.links.index(link)]

    def link_distance(self, link: Link) -> float:
        return self._distances[self.links.index(link)]


__all__ = ["DEFAULT_DISTANCE", "LinkForce"]
