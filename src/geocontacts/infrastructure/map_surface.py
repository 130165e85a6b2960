"""MapSurface kept in memory, with Web-Mercator framing like a tile map."""

import math

from geocontacts.application.dto import Marker

TILE_SIZE = 256
MIN_ZOOM = 0
MAX_ZOOM = 21
# Mercator is undefined at the poles.
_MAX_SIN_LAT = 0.9999


def project(latitude: float, longitude: float) -> tuple[float, float]:
    """Map (lat, lng) to world coordinates in [0, 1] x [0, 1]."""
    x = (longitude + 180.0) / 360.0
    siny = math.sin(math.radians(latitude))
    siny = min(max(siny, -_MAX_SIN_LAT), _MAX_SIN_LAT)
    y = 0.5 - math.log((1 + siny) / (1 - siny)) / (4 * math.pi)
    return x, y


def unproject(x: float, y: float) -> tuple[float, float]:
    longitude = x * 360.0 - 180.0
    n = math.pi - 2 * math.pi * y
    latitude = math.degrees(math.atan(math.sinh(n)))
    return latitude, longitude


class InMemoryMapSurface:
    """Holds camera state and markers for a fixed-size viewport.

    fit_bounds picks the largest integer zoom whose padded viewport contains
    every point, the way tile map widgets do.
    """

    def __init__(self, width: int = 640, height: int = 500) -> None:
        self.width = width
        self.height = height
        self.center: tuple[float, float] = (0.0, 0.0)
        self.zoom = MIN_ZOOM
        self.markers: list[Marker] = []
        self.padding = 0
        self.framed: list[tuple[float, float]] = []
        self.marker_renders = 0

    def set_markers(self, markers: list[Marker]) -> None:
        self.markers = list(markers)
        self.marker_renders += 1

    def pan_to(self, latitude: float, longitude: float) -> None:
        self.center = (latitude, longitude)
        self.framed = []

    def zoom_to(self, zoom: int) -> None:
        self.zoom = min(max(int(zoom), MIN_ZOOM), MAX_ZOOM)

    def set_view(self, center: tuple[float, float], zoom: int) -> None:
        self.center = center
        self.zoom_to(zoom)
        self.padding = 0
        self.framed = []

    def fit_bounds(self, points: list[tuple[float, float]], padding: int) -> None:
        if not points:
            raise ValueError("fit_bounds needs at least one point.")
        projected = [project(lat, lng) for lat, lng in points]
        xs = [p[0] for p in projected]
        ys = [p[1] for p in projected]
        span_x = max(xs) - min(xs)
        span_y = max(ys) - min(ys)
        inner_w = max(self.width - 2 * padding, 1)
        inner_h = max(self.height - 2 * padding, 1)
        zooms = [MAX_ZOOM]
        if span_x > 0:
            zooms.append(math.floor(math.log2(inner_w / (TILE_SIZE * span_x))))
        if span_y > 0:
            zooms.append(math.floor(math.log2(inner_h / (TILE_SIZE * span_y))))
        self.zoom = min(max(min(zooms), MIN_ZOOM), MAX_ZOOM)
        self.center = unproject((max(xs) + min(xs)) / 2, (max(ys) + min(ys)) / 2)
        self.padding = padding
        self.framed = list(points)

    def _half_extent(self, inset: int = 0) -> tuple[float, float]:
        scale = TILE_SIZE * 2**self.zoom
        return (self.width / 2 - inset) / scale, (self.height / 2 - inset) / scale

    def contains(self, latitude: float, longitude: float, inset: int = 0) -> bool:
        """Whether the point lies inside the viewport shrunk by `inset` pixels."""
        cx, cy = project(*self.center)
        px, py = project(latitude, longitude)
        half_w, half_h = self._half_extent(inset)
        eps = 1e-12
        return abs(px - cx) <= half_w + eps and abs(py - cy) <= half_h + eps

    def visible_bounds(self) -> tuple[float, float, float, float]:
        """(south, west, north, east) of the current viewport."""
        cx, cy = project(*self.center)
        half_w, half_h = self._half_extent()
        north, west = unproject(cx - half_w, cy - half_h)
        south, east = unproject(cx + half_w, cy + half_h)
        return south, west, north, east
