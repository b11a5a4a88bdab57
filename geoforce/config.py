"""Tunable options for the simulation and the default map layout."""

from __future__ import annotations

import copy
import json
import math
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Type, TypeVar, Union

from .errors import ConfigurationError

_T = TypeVar("_T")

DEFAULT_TARGET_TICKS = 300


def decay_for_ticks(alpha_min: float, ticks: int = DEFAULT_TARGET_TICKS) -> float:
    """Decay rate that brings alpha from 1 to ``alpha_min`` in ``ticks`` steps."""

    if ticks < 1:
        raise ConfigurationError(f"target tick count must be positive, got {ticks}")
    if alpha_min <= 0:
        return 1.0
    return 1.0 - math.pow(alpha_min, 1.0 / ticks)


@dataclass
class SimulationOptions:
    """Cooling schedule and integration constants.

    ``velocity_decay`` multiplies every free node's velocity once per tick.
    When ``alpha_decay`` is omitted it is derived from ``alpha_min`` and
    ``target_ticks``.
    """

    alpha_min: float = 0.001
    alpha_target: float = 0.0
    alpha_decay: Optional[float] = None
    target_ticks: int = DEFAULT_TARGET_TICKS
    velocity_decay: float = 0.6
    seed: Optional[int] = None

    def resolved_alpha_decay(self) -> float:
        if self.alpha_decay is not None:
            return self.alpha_decay
        return decay_for_ticks(self.alpha_min, self.target_ticks)

    def validate(self) -> None:
        if not 0.0 <= self.alpha_min < 1.0:
            raise ConfigurationError(f"alpha_min must be in [0, 1), got {self.alpha_min}")
        if self.alpha_target < 0:
            raise ConfigurationError(f"alpha_target must be non-negative, got {self.alpha_target}")
        if self.alpha_decay is not None and not 0.0 <= self.alpha_decay <= 1.0:
            raise ConfigurationError(f"alpha_decay must be in [0, 1], got {self.alpha_decay}")
        if not 0.0 <= self.velocity_decay <= 1.0:
            raise ConfigurationError(f"velocity_decay must be in [0, 1], got {self.velocity_decay}")
        decay_for_ticks(self.alpha_min, self.target_ticks)


@dataclass
class LinkOptions:
    distance: float = 30.0
    strength: Optional[float] = None
    iterations: int = 1


@dataclass
class ChargeOptions:
    enabled: bool = True
    strength: float = -30.0
    theta: float = 0.9
    distance_min: float = 1.0
    distance_max: float = math.inf


@dataclass
class CollideOptions:
    enabled: bool = True
    padding: float = 1.5
    strength: float = 1.0
    iterations: int = 1


@dataclass
class PositionOptions:
    enabled: bool = True
    strength: float = 0.1


@dataclass
class LayoutConfig:
    """Force set used by :class:`geoforce.layout.MapLayout`.

    With ``partition_links`` enabled, links between two anchored nodes are
    driven by their own link force configured by ``anchored_link`` and the
    remaining links by ``link``, so parent-parent springs do not drag on
    child links.
    """

    simulation: SimulationOptions = field(default_factory=SimulationOptions)
    link: LinkOptions = field(default_factory=LinkOptions)
    anchored_link: LinkOptions = field(default_factory=lambda: LinkOptions(strength=0.0))
    charge: ChargeOptions = field(default_factory=ChargeOptions)
    collide: CollideOptions = field(default_factory=CollideOptions)
    position: PositionOptions = field(default_factory=PositionOptions)
    partition_links: bool = False
    default_radius: float = 15.0
    restart_alpha: float = 1.0
    carry_free_nodes: bool = False

    def validate(self) -> None:
        self.simulation.validate()
        if self.default_radius < 0:
            raise ConfigurationError(f"default_radius must be non-negative, got {self.default_radius}")
        if not 0.0 <= self.restart_alpha <= 1.0:
            raise ConfigurationError(f"restart_alpha must be in [0, 1], got {self.restart_alpha}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "LayoutConfig":
        config = _build(cls, data, "config")
        config.validate()
        return config

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "LayoutConfig":
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"{path}: invalid JSON: {exc.msg}") from exc
        return cls.from_mapping(data)


_NESTED: Dict[str, Type[Any]] = {
    "simulation": SimulationOptions,
    "link": LinkOptions,
    "anchored_link": LinkOptions,
    "charge": ChargeOptions,
    "collide": CollideOptions,
    "position": PositionOptions,
}


def _build(cls: Type[_T], data: Mapping[str, Any], where: str) -> _T:
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"{where} must be an object")
    known = {f.name: f for f in fields(cls)}  # type: ignore[arg-type]
    unknown = sorted(set(data) - set(known))
    if unknown:
        raise ConfigurationError(f"{where}: unknown option(s) {', '.join(unknown)}")
    kwargs: Dict[str, Any] = {}
    for key, value in data.items():
        if cls is LayoutConfig and key in _NESTED:
            kwargs[key] = _build(_NESTED[key], value, f"{where}.{key}")
        else:
            kwargs[key] = value
    try:
        return cls(**kwargs)
    except TypeError as exc:
        raise ConfigurationError(f"{where}: {exc}") from exc


_LAYOUT_CONFIG = LayoutConfig()


def get_layout_config() -> LayoutConfig:
    return copy.deepcopy(_LAYOUT_CONFIG)


def set_layout_config(config: LayoutConfig) -> None:
    global _LAYOUT_CONFIG
    config.validate()
    _LAYOUT_CONFIG = copy.deepcopy(config)


__all__ = [
    "ChargeOptions",
    "CollideOptions",
    "DEFAULT_TARGET_TICKS",
    "LayoutConfig",
    "LinkOptions",
    "PositionOptions",
    "SimulationOptions",
    "decay_for_ticks",
    "get_layout_config",
    "set_layout_config",
]
