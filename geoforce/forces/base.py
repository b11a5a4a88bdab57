"""Common plumbing for force contributors."""

from __future__ import annotations

import math
from typing import Callable, List, Optional, Sequence, TypeVar, Union

import numpy as np

from ..errors import ConfigurationError
from ..graph import Node

T = TypeVar("T")
Accessor = Union[float, Callable[[T], float]]

JITTER_SCALE = 1e-6


def jiggle(rng: np.random.Generator) -> float:
    """Tiny non-zero offset used when two positions coincide exactly."""

    return (float(rng.random()) - 0.5) * JITTER_SCALE


def evaluate(accessor: Accessor, item: T) -> float:
    if callable(accessor):
        return float(accessor(item))
    return float(accessor)


def check_finite(name: str, value: float) -> float:
    value = float(value)
    if math.isnan(value):
        raise ConfigurationError(f"{name} must be a number, got {value}")
    return value


def check_non_negative(name: str, value: float) -> float:
    value = check_finite(name, value)
    if value < 0:
        raise ConfigurationError(f"{name} must be non-negative, got {value}")
    return value


def check_iterations(value: int) -> int:
    if isinstance(value, bool) or int(value) != value or value < 1:
        raise ConfigurationError(f"iterations must be a positive integer, got {value!r}")
    return int(value)


class Force:
    """A rule that adds velocity deltas to nodes once per tick.

    Subclasses cache per-node parameters in :meth:`initialize`, which the
    simulation calls on registration and whenever node targets change.
    """

    def __init__(self) -> None:
        self.nodes: List[Node] = []
        self.rng: Optional[np.random.Generator] = None
        self.enabled = True

    def initialize(self, nodes: Sequence[Node], rng: np.random.Generator) -> None:
        self.nodes = list(nodes)
        self.rng = rng
        self._prepare()

    def _prepare(self) -> None:
        """Recompute cached per-node or per-link parameters."""

    def _jiggle(self) -> float:
        if self.rng is None:
            raise RuntimeError(f"{type(self).__name__} used before initialize()")
        return jiggle(self.rng)

    def __call__(self, alpha: float) -> None:
        if self.enabled:
            self.apply(alpha)

    def apply(self, alpha: float) -> None:
        raise NotImplementedError


__all__ = [
    "Accessor",
    "Force",
    "JITTER_SCALE",
    "check_finite",
    "check_iterations",
    "check_non_negative",
    "evaluate",
    "jiggle",
]
