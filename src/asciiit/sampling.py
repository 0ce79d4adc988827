import math

import numpy as np
from PIL import Image

from asciiit.bitmap import Bitmap
from asciiit.viewport import ViewportState, compute_visible_region

# Resampling used to draw the zoomed image into the container-sized frame
PLACE_RESAMPLE = Image.Resampling.LANCZOS
# Resampling used for the frame -> grid downscale; BOX averages every source pixel into its cell
GRID_RESAMPLE = Image.Resampling.BOX


def render_frame(bitmap: Bitmap, viewport: ViewportState | None, scale: float = 1.0) -> Image.Image:
    """Draw the visible part of the bitmap into a transparent container-sized RGBA frame.

    With no viewport the frame is the bitmap itself. `scale` multiplies the frame
    resolution (container size and placement alike), as when exporting at 2x.
    """
    if viewport is None:
        return bitmap.image

    frame_width = max(1, round(viewport.container_width * scale))
    frame_height = max(1, round(viewport.container_height * scale))
    frame = Image.new("RGBA", (frame_width, frame_height), (0, 0, 0, 0))

    placement = compute_visible_region(bitmap.size, viewport)
    left, top = placement.left * scale, placement.top * scale
    width, height = placement.width * scale, placement.height * scale

    # Part of the placed image that falls inside the frame, in frame coordinates
    x0, y0 = max(left, 0.0), max(top, 0.0)
    x1, y1 = min(left + width, frame_width), min(top + height, frame_height)
    dest_x0, dest_y0 = round(x0), round(y0)
    dest_width, dest_height = round(x1) - dest_x0, round(y1) - dest_y0
    if dest_width <= 0 or dest_height <= 0:
        return frame

    # The same rectangle in bitmap pixel coordinates
    sx = bitmap.width / width
    sy = bitmap.height / height
    box = (
        min(max((x0 - left) * sx, 0.0), bitmap.width),
        min(max((y0 - top) * sy, 0.0), bitmap.height),
        min(max((x1 - left) * sx, 0.0), bitmap.width),
        min(max((y1 - top) * sy, 0.0), bitmap.height),
    )
    visible = bitmap.image.resize((dest_width, dest_height), PLACE_RESAMPLE, box=box)
    frame.paste(visible, (dest_x0, dest_y0))
    return frame


def grid_size(
    frame_size: tuple[int, int],
    density: int,
    cell_aspect: float,
    base_columns: int,
    max_density: int,
    target_width: int | None = None,
    target_height: int | None = None,
) -> tuple[int, int]:
    """Return (cols, rows) for a frame, compensating for tall glyph cells."""
    frame_width, frame_height = frame_size
    if target_width is not None:
        cols = max(1, math.floor(target_width))
        if target_height is not None:
            return cols, max(1, math.floor(target_height))
    else:
        cols = max(1, math.floor(base_columns * density / max_density))
    # Halves round up
    rows = max(1, math.floor(cols * (frame_height / frame_width) / cell_aspect + 0.5))
    return cols, rows


def downscale(frame: Image.Image, cols: int, rows: int) -> np.ndarray:
    """Single resample of the frame to one pixel per cell. Returns (rows, cols, 4) uint8."""
    # Resample premultiplied so a transparent pixel reads as black at any scale, 1:1 included
    small = frame.convert("RGBa").resize((cols, rows), GRID_RESAMPLE)
    return np.asarray(small.convert("RGBA"), dtype=np.uint8)


def brightness(pixels: np.ndarray) -> np.ndarray:
    """Plain channel average of RGB in 0-1, floored to a whole 0-255 level first."""
    rgb = pixels[..., :3].astype(np.int32)
    return (rgb.sum(axis=-1) // 3) / 255.0


def apply_contrast(values: np.ndarray, contrast: float) -> np.ndarray:
    """Gamma curve b ** (1 / contrast), clamped to 0-1."""
    return np.clip(values ** (1.0 / contrast), 0.0, 1.0)


def quantize(values: np.ndarray, levels: int) -> np.ndarray:
    """Map 0-1 values to ramp indices 0..levels-1."""
    indices = np.floor(values * (levels - 1)).astype(np.int64)
    return np.clip(indices, 0, levels - 1)
