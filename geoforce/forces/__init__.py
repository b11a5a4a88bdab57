"""Force contributors applied by :class:`geoforce.simulation.Simulation`."""

from .base import Force, jiggle
from .collide import CollideForce
from .link import LinkForce
from .many_body import ManyBodyForce
from .position import PositionForce, force_x, force_y

__all__ = [
    "CollideForce",
    "Force",
    "LinkForce",
    "ManyBodyForce",
    "PositionForce",
    "force_x",
    "force_y",
    "jiggle",
]
