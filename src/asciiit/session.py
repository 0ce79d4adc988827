"""Editing state for one uploaded image: viewport, options and the latest results.

The pipeline itself is pure; this is the caller-side bookkeeping around it. Loads
and generations are tagged with request tokens so that a result arriving after a
newer request has started is dropped instead of overwriting fresher state.
"""

from __future__ import annotations

from dataclasses import replace

from loguru import logger

from asciiit import viewport as vp
from asciiit.bitmap import Bitmap, BitmapSource, decode_bitmap_async
from asciiit.errors import EmptyInputError
from asciiit.grid import CharacterGrid
from asciiit.options import RenderOptions
from asciiit.rasterizer import RenderedImage, rasterize
from asciiit.sampler import sample


class RequestGate:
    """Hands out increasing tokens; only the newest token is current."""

    def __init__(self) -> None:
        self._latest = 0

    def begin(self) -> int:
        self._latest += 1
        return self._latest

    def is_current(self, token: int) -> bool:
        return token == self._latest

    def invalidate(self) -> None:
        self._latest += 1


class EditorSession:
    def __init__(self, container_width: float, container_height: float, options: RenderOptions | None = None):
        self.viewport = vp.ViewportState.for_container(container_width, container_height)
        self.options = options or RenderOptions()
        self.bitmap: Bitmap | None = None
        self.filename: str | None = None
        self.grid: CharacterGrid | None = None
        self.rendered: RenderedImage | None = None
        self._loads = RequestGate()
        self._generations = RequestGate()

    async def load(self, source: BitmapSource, filename: str | None = None) -> bool:
        """Decode and install a new image. Returns False if a newer load superseded this one."""
        token = self._loads.begin()
        # Results of any generation still running belong to the old image
        self._generations.invalidate()
        bitmap = await decode_bitmap_async(source)
        if not self._loads.is_current(token):
            logger.debug("Dropping stale load {}", token)
            return False
        self.bitmap = bitmap
        self.filename = filename
        self.grid = None
        self.rendered = None
        self.viewport = vp.reset_view(self.viewport)
        logger.info("Loaded {} ({}x{})", filename or "image", bitmap.width, bitmap.height)
        return True

    def _require_bitmap(self) -> Bitmap:
        if self.bitmap is None:
            raise EmptyInputError("No image loaded")
        return self.bitmap

    def zoom_in(self) -> None:
        self.viewport = vp.zoom_in(self.viewport)

    def zoom_out(self) -> None:
        self.viewport = vp.zoom_out(self.viewport)

    def pan_by(self, dx: float, dy: float) -> None:
        self.viewport = vp.pan_by(self.viewport, dx, dy)

    def reset_view(self) -> None:
        self.viewport = vp.reset_view(self.viewport)

    def fill(self) -> None:
        self.viewport = vp.fill_container(self._require_bitmap().size, self.viewport)

    def resize_container(self, width: float, height: float) -> None:
        self.viewport = replace(self.viewport, container_width=width, container_height=height)

    def update_options(self, **changes) -> None:
        self.options = replace(self.options, **changes)

    def begin_generation(self) -> tuple[int, Bitmap, vp.ViewportState, RenderOptions]:
        """Snapshot the inputs of a generation. Nothing the caller mutates later can leak in."""
        return self._generations.begin(), self._require_bitmap(), self.viewport, self.options

    def finish_generation(
        self, token: int, grid: CharacterGrid, rendered: RenderedImage
    ) -> tuple[CharacterGrid, RenderedImage] | None:
        if not self._generations.is_current(token):
            logger.debug("Dropping stale generation {}", token)
            return None
        self.grid = grid
        self.rendered = rendered
        return grid, rendered

    def generate(self) -> tuple[CharacterGrid, RenderedImage] | None:
        token, bitmap, viewport, options = self.begin_generation()
        grid = sample(bitmap, viewport, options)
        rendered = rasterize(grid, options.background_color, options.color_enabled, original_filename=self.filename)
        return self.finish_generation(token, grid, rendered)
