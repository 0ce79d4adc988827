from __future__ import annotations

import io
import re
from dataclasses import dataclass

from loguru import logger
from PIL import Image, ImageColor, ImageDraw

from asciiit.errors import EmptyInputError, EncodeError, OptionsError
from asciiit.fonts import Font, GlyphFonts
from asciiit.grid import Cell, CharacterGrid
from asciiit.options import DEFAULT_BACKGROUND

FONT_SIZE = 12
# Half-width glyph cells, matching DEFAULT_CELL_ASPECT used when sampling
CHAR_WIDTH = FONT_SIZE * 0.5
LINE_HEIGHT = FONT_SIZE
DEFAULT_PIXEL_SCALE = 4
FOREGROUND = (255, 255, 255)


@dataclass(frozen=True)
class RenderedImage:
    filename: str
    data: bytes
    width: int
    height: int
    mime_type: str = "image/png"


def output_filename(original_filename: str | None) -> str:
    """ascii-<name>.png, with the original extension dropped."""
    base = re.sub(r"\.[^/.]+$", "", original_filename) if original_filename else "image"
    return f"ascii-{base}.png"


def parse_color(value: str) -> tuple[int, int, int]:
    try:
        return ImageColor.getrgb(value)[:3]
    except ValueError as exc:
        raise OptionsError(f"Invalid background colour {value!r}") from exc


def _cell_fill(cell: Cell, color_enabled: bool) -> tuple[int, ...]:
    if not color_enabled or not cell.styled:
        return FOREGROUND
    rgb = cell.color if cell.color is not None else FOREGROUND
    if cell.opacity is None:
        return rgb
    return (*rgb, round(cell.opacity * 255))


def rasterize_image(
    grid: CharacterGrid,
    background_color: str = DEFAULT_BACKGROUND,
    color_enabled: bool = False,
    pixel_scale: int = DEFAULT_PIXEL_SCALE,
    font: Font | None = None,
) -> Image.Image:
    """Draw one glyph per cell onto a background-filled RGB canvas."""
    if grid.row_count == 0 or grid.is_blank:
        raise EmptyInputError("Character grid has no visible rows")
    background = parse_color(background_color)
    scale = max(1, int(pixel_scale))

    layout_width = max(1, int(grid.column_count * CHAR_WIDTH))
    layout_height = max(1, int(grid.row_count * LINE_HEIGHT))
    canvas = Image.new("RGB", (layout_width * scale, layout_height * scale), background)
    # RGBA mode blends translucent fills onto the RGB canvas
    draw = ImageDraw.Draw(canvas, "RGBA")
    fonts = GlyphFonts(FONT_SIZE * scale, font)
    cell_width = CHAR_WIDTH * scale

    for row_index, row in enumerate(grid.rows):
        y = row_index * LINE_HEIGHT * scale
        for col_index, cell in enumerate(row):
            if cell.character == " ":
                continue
            glyph_font = fonts.font_for(cell.character)
            x = col_index * cell_width
            if glyph_font is not fonts.primary:
                # Fallback fonts may be proportional; centre the glyph in its cell
                x += max(0.0, (cell_width - glyph_font.getlength(cell.character)) / 2)
            draw.text((x, y), cell.character, fill=_cell_fill(cell, color_enabled), font=glyph_font)

    logger.debug("Rasterized {}x{} grid to {}x{} px", grid.column_count, grid.row_count, canvas.width, canvas.height)
    return canvas


def encode_png(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    try:
        image.save(buffer, format="PNG")
    except (OSError, ValueError) as exc:
        raise EncodeError(f"Failed to create image file: {exc}") from exc
    data = buffer.getvalue()
    if not data:
        raise EncodeError("Failed to create image file: encoder produced no data")
    return data


def rasterize(
    grid: CharacterGrid,
    background_color: str = DEFAULT_BACKGROUND,
    color_enabled: bool = False,
    original_filename: str | None = None,
    pixel_scale: int = DEFAULT_PIXEL_SCALE,
    font: Font | None = None,
) -> RenderedImage:
    """Render a character grid and encode it as a PNG file named after the source image."""
    canvas = rasterize_image(grid, background_color, color_enabled, pixel_scale, font)
    filename = output_filename(original_filename)
    data = encode_png(canvas)
    logger.info("Rendered {} ({}x{}, {} bytes)", filename, canvas.width, canvas.height, len(data))
    return RenderedImage(filename=filename, data=data, width=canvas.width, height=canvas.height)
