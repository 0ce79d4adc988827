from pathlib import Path

from PIL import Image

from asciiit.bitmap import Bitmap, BitmapSource, decode_bitmap
from asciiit.grid import CharacterGrid
from asciiit.options import DEFAULT_BACKGROUND, RenderOptions
from asciiit.rasterizer import RenderedImage, parse_color, rasterize
from asciiit.sampler import sample
from asciiit.sampling import render_frame
from asciiit.viewport import ViewportState

EXPORT_SCALE = 2


def _as_bitmap(image: Bitmap | Image.Image | BitmapSource) -> Bitmap:
    if isinstance(image, Bitmap):
        return image
    if isinstance(image, Image.Image):
        return Bitmap.from_image(image)
    return decode_bitmap(image)


def image_to_ascii(
    image: Bitmap | Image.Image | BitmapSource,
    options: RenderOptions | None = None,
    viewport: ViewportState | None = None,
) -> CharacterGrid:
    return sample(_as_bitmap(image), viewport, options or RenderOptions())


def image_to_png(
    image: Bitmap | Image.Image | BitmapSource,
    options: RenderOptions | None = None,
    viewport: ViewportState | None = None,
    filename: str | None = None,
) -> RenderedImage:
    """Generate the character grid and render it straight to a PNG file."""
    options = options or RenderOptions()
    if filename is None and isinstance(image, (str, Path)):
        filename = Path(image).name
    grid = image_to_ascii(image, options, viewport)
    return rasterize(grid, options.background_color, options.color_enabled, original_filename=filename)


def export_view(
    bitmap: Bitmap,
    viewport: ViewportState,
    background_color: str = DEFAULT_BACKGROUND,
    scale: float = EXPORT_SCALE,
) -> Image.Image:
    """The source image exactly as it appears in the viewport, on the background colour.

    Uses the same placement as sampling, so the exported view and the sampled
    grid cover the same region.
    """
    frame = render_frame(bitmap, viewport, scale=scale)
    canvas = Image.new("RGBA", frame.size, (*parse_color(background_color), 255))
    canvas.alpha_composite(frame)
    return canvas.convert("RGB")
