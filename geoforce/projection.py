"""Geographic to layer-pixel projection for slippy-map views."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Optional, Protocol, Tuple

from .errors import ConfigurationError

Point2D = Tuple[float, float]

TILE_SIZE = 256
MAX_LATITUDE = 85.0511287798


class GeoProjector(Protocol):
    """Anything that maps a geographic coordinate to planar pixels."""

    def project(self, lat: float, lon: float) -> Point2D:
        ...


def _round_half_up(value: float) -> float:
    return float(math.floor(value + 0.5))


def world_pixel(lat: float, lon: float, zoom: float) -> Point2D:
    """Return the spherical-Mercator world pixel of ``(lat, lon)`` at ``zoom``."""

    scale = TILE_SIZE * math.pow(2.0, zoom)
    lat = max(min(lat, MAX_LATITUDE), -MAX_LATITUDE)
    phi = math.radians(lat)
    x = scale * (0.5 + lon / 360.0)
    y = scale * (0.5 - math.log(math.tan(math.pi / 4.0 + phi / 2.0)) / (2.0 * math.pi))
    return x, y


def world_pixel_to_latlon(x: float, y: float, zoom: float) -> Point2D:
    scale = TILE_SIZE * math.pow(2.0, zoom)
    lon = (x / scale - 0.5) * 360.0
    n = math.pi * (1.0 - 2.0 * y / scale)
    lat = math.degrees(math.atan(math.sinh(n)))
    return lat, lon


@dataclass(frozen=True)
class MapView:
    """Viewport state of a tiled map.

    ``origin`` is the world pixel of the layer's top-left corner. A map keeps
    its layer origin while panning and recomputes it from the centre only when
    the zoom level changes, so layer coordinates are stable across pans.
    """

    center_lat: float
    center_lon: float
    zoom: float
    width: int = 800
    height: int = 600
    origin: Optional[Point2D] = None

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError(f"view size must be positive, got {self.width}x{self.height}")
        if not -90.0 <= self.center_lat <= 90.0:
            raise ConfigurationError(f"center latitude {self.center_lat} out of range")

    @property
    def pixel_origin(self) -> Point2D:
        if self.origin is not None:
            return self.origin
        cx, cy = world_pixel(self.center_lat, self.center_lon, self.zoom)
        return _round_half_up(cx - self.width / 2.0), _round_half_up(cy - self.height / 2.0)

    def panned_to(self, lat: float, lon: float) -> "MapView":
        return replace(self, center_lat=lat, center_lon=lon, origin=self.pixel_origin)

    def zoomed_to(self, zoom: float, *, lat: Optional[float] = None, lon: Optional[float] = None) -> "MapView":
        return replace(
            self,
            zoom=zoom,
            center_lat=self.center_lat if lat is None else lat,
            center_lon=self.center_lon if lon is None else lon,
            origin=None,
        )


class WebMercatorProjector:
    """Project coordinates into the layer pixel space of a :class:`MapView`."""

    def __init__(self, view: MapView, *, round_pixels: bool = True):
        self.view = view
        self.round_pixels = round_pixels

    def project(self, lat: float, lon: float) -> Point2D:
        x, y = world_pixel(lat, lon, self.view.zoom)
        if self.round_pixels:
            x, y = _round_half_up(x), _round_half_up(y)
        ox, oy = self.view.pixel_origin
        return x - ox, y - oy

    def unproject(self, x: float, y: float) -> Point2D:
        ox, oy = self.view.pixel_origin
        return world_pixel_to_latlon(x + ox, y + oy, self.view.zoom)

    def __repr__(self) -> str:
        return f"WebMercatorProjector({self.view!r})"


__all__ = [
    "GeoProjector",
    "MapView",
    "MAX_LATITUDE",
    "TILE_SIZE",
    "WebMercatorProjector",
    "world_pixel",
    "world_pixel_to_latlon",
]
