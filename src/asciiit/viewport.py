"""Placement of a zoomed and panned image inside a fixed-size display container.

Every consumer (preview, sampling, view export) must place the image with
`compute_visible_region` so that what is exported matches what is shown.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

MIN_ZOOM = 0.5
MAX_ZOOM = 10.0
ZOOM_STEP = 0.1
# Added to the computed fill zoom to hide rounding gaps at the container edges
FILL_MARGIN = 0.07


@dataclass(frozen=True)
class ViewportState:
    container_width: float
    container_height: float
    zoom: float = 1.0
    pan_x: float = 0.0
    pan_y: float = 0.0

    def __post_init__(self):
        if self.container_width <= 0 or self.container_height <= 0:
            raise ValueError(f"Container must have positive size, got {self.container_width}x{self.container_height}")
        if not self.zoom >= MIN_ZOOM:
            raise ValueError(f"Zoom must be at least {MIN_ZOOM}, got {self.zoom}")

    @classmethod
    def for_container(cls, width: float, height: float) -> ViewportState:
        return cls(container_width=width, container_height=height)

    @property
    def container_size(self) -> tuple[float, float]:
        return self.container_width, self.container_height


@dataclass(frozen=True)
class Placement:
    """Where the whole image lands in container coordinates (may extend past the edges)."""

    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    def covers(self, width: float, height: float, tolerance: float = 1e-6) -> bool:
        """True if the placement leaves no gap anywhere in a width x height container."""
        return (
            self.left <= tolerance
            and self.top <= tolerance
            and self.right >= width - tolerance
            and self.bottom >= height - tolerance
        )


def fit_contain(image_size: tuple[int, int], container_size: tuple[float, float]) -> tuple[float, float]:
    """Size of the image scaled to fit entirely inside the container ("object-fit: contain")."""
    image_width, image_height = image_size
    container_width, container_height = container_size
    image_aspect = image_width / image_height
    container_aspect = container_width / container_height
    if image_aspect > container_aspect:
        return container_width, container_width / image_aspect
    return container_height * image_aspect, container_height


def compute_visible_region(image_size: tuple[int, int], viewport: ViewportState) -> Placement:
    fitted_width, fitted_height = fit_contain(image_size, viewport.container_size)
    zoomed_width = fitted_width * viewport.zoom
    zoomed_height = fitted_height * viewport.zoom
    left = viewport.container_width / 2 - zoomed_width / 2 + viewport.pan_x
    top = viewport.container_height / 2 - zoomed_height / 2 + viewport.pan_y
    return Placement(left=left, top=top, width=zoomed_width, height=zoomed_height)


def fill_zoom(image_size: tuple[int, int], container_size: tuple[float, float]) -> float:
    """Zoom at which the contain-fitted image exactly covers the container."""
    image_width, image_height = image_size
    container_width, container_height = container_size
    image_aspect = image_width / image_height
    if image_aspect > container_width / container_height:
        return container_height / (container_width / image_aspect)
    return container_width / (container_height * image_aspect)


def fill_container(image_size: tuple[int, int], viewport: ViewportState) -> ViewportState:
    zoom = fill_zoom(image_size, viewport.container_size) + FILL_MARGIN
    return replace(viewport, zoom=zoom, pan_x=0.0, pan_y=0.0)


def clamp_zoom(zoom: float) -> float:
    return max(MIN_ZOOM, min(zoom, MAX_ZOOM))


def zoom_in(viewport: ViewportState, step: float = ZOOM_STEP) -> ViewportState:
    return replace(viewport, zoom=clamp_zoom(viewport.zoom + step))


def zoom_out(viewport: ViewportState, step: float = ZOOM_STEP) -> ViewportState:
    return replace(viewport, zoom=clamp_zoom(viewport.zoom - step))


def zoom_by(viewport: ViewportState, delta: float) -> ViewportState:
    """Wheel/pinch zoom: positive delta zooms in."""
    return replace(viewport, zoom=clamp_zoom(viewport.zoom + delta))


def pan_by(viewport: ViewportState, dx: float, dy: float) -> ViewportState:
    return replace(viewport, pan_x=viewport.pan_x + dx, pan_y=viewport.pan_y + dy)


def reset_view(viewport: ViewportState) -> ViewportState:
    return replace(viewport, zoom=1.0, pan_x=0.0, pan_y=0.0)
