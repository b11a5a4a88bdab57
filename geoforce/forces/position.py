"""Per-axis pull toward a target coordinate."""

from __future__ import annotations

import math
from typing import Callable, List, Optional, Union

from ..errors import ConfigurationError
from ..graph import Anchored, Node
from .base import Force

TargetAccessor = Callable[[Node], Optional[float]]


def _anchor_or_home(axis: str) -> TargetAccessor:
    def target(node: Node) -> Optional[float]:
        placement = node.placement
        if isinstance(placement, Anchored):
            return placement.target_x if axis == "x" else placement.target_y
        if node.home is not None:
            return node.home[0] if axis == "x" else node.home[1]
        return None

    return target


class PositionForce(Force):
    """Pull ``x`` (or ``y``) of each node toward a per-node target.

    ``target`` may be a constant or a callable returning ``None`` for nodes
    that should not be pulled. The default target is the anchored override
    when present, then the node's projected home point. Targets are read in
    :meth:`initialize`; re-initialise after targets move.
    """

    def __init__(
        self,
        axis: str,
        *,
        target: Union[float, TargetAccessor, None] = None,
        strength: Union[float, Callable[[Node], float]] = 0.1,
    ):
        super().__init__()
        if axis not in ("x", "y"):
            raise ConfigurationError(f"axis must be 'x' or 'y', got {axis!r}")
        if not callable(strength) and not 0.0 <= float(strength) <= 1.0:
            raise ConfigurationError(f"position strength must be in [0, 1], got {strength}")
        self.axis = axis
        self.target = target
        self.strength = strength
        self._targets: List[Optional[float]] = []
        self._strengths: List[float] = []

    def _target_for(self, node: Node) -> Optional[float]:
        if self.target is None:
            return _anchor_or_home(self.axis)(node)
        if callable(self.target):
            value = self.target(node)
            return None if value is None else float(value)
        return float(self.target)

    def _prepare(self) -> None:
        self._targets = []
        self._strengths = []
        for node in self.nodes:
            value = self._target_for(node)
            if value is not None and math.isnan(value):
                value = None
            self._targets.append(value)
            strength = float(self.strength(node)) if callable(self.strength) else float(self.strength)
            if not 0.0 <= strength <= 1.0:
                raise ConfigurationError(f"position strength for {node.id!r} must be in [0, 1], got {strength}")
            self._strengths.append(strength)

    def target_of(self, node: Node) -> Optional[float]:
        return self._targets[self.nodes.index(node)]

    def apply(self, alpha: float) -> None:
        horizontal = self.axis == "x"
        for node, target, strength in zip(self.nodes, self._targets, self._strengths):
            if target is None:
                continue
            if horizontal:
                node.vx += (target - node.x) * strength * alpha
            else:
                node.vy += (target - node.y) * strength * alpha


def force_x(**kwargs) -> PositionForce:
    return PositionForce("x", **kwargs)


def force_y(**kwargs) -> PositionForce:
    return PositionForce("y", **kwargs)


__all__ = ["PositionForce", "TargetAccessor", "force_x", "force_y"]
