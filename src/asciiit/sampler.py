from __future__ import annotations

from loguru import logger

from asciiit.bitmap import Bitmap
from asciiit.errors import EmptyInputError
from asciiit.grid import Cell, CharacterGrid
from asciiit.options import BASE_COLUMNS, MAX_DENSITY, RenderOptions
from asciiit.sampling import apply_contrast, brightness, downscale, grid_size, quantize, render_frame
from asciiit.viewport import ViewportState


def sample(bitmap: Bitmap | None, viewport: ViewportState | None, options: RenderOptions) -> CharacterGrid:
    """Sample the visible part of a bitmap into a character grid.

    The result depends only on the three arguments, so calling twice with the
    same inputs yields equal grids.
    """
    if bitmap is None:
        raise EmptyInputError("No image provided")
    options = options.clamped()

    frame = render_frame(bitmap, viewport)
    cols, rows = grid_size(
        frame.size,
        options.density,
        options.cell_aspect,
        BASE_COLUMNS,
        MAX_DENSITY,
        target_width=options.target_char_width,
        target_height=options.target_char_height,
    )
    pixels = downscale(frame, cols, rows)
    indices = quantize(apply_contrast(brightness(pixels), options.contrast), len(options.ramp))
    logger.debug("Sampled {}x{} frame into {}x{} grid", frame.width, frame.height, cols, rows)

    ramp = options.ramp
    grid_rows = []
    for y in range(rows):
        row = []
        for x in range(cols):
            r, g, b, a = (int(v) for v in pixels[y, x])
            row.append(
                Cell(
                    character=ramp[indices[y, x]],
                    color=(r, g, b) if options.color_enabled else None,
                    opacity=a / 255 if options.alpha_as_opacity else None,
                )
            )
        grid_rows.append(tuple(row))
    return CharacterGrid(rows=tuple(grid_rows))
