from __future__ import annotations

import asyncio
import io
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

import numpy as np
from loguru import logger
from PIL import Image, ImageOps, UnidentifiedImageError

from asciiit.errors import DecodeError, EmptyInputError

BitmapSource = bytes | str | Path | BinaryIO


def _narrow_wide_grey(image: Image.Image) -> Image.Image:
    """16-bit greyscale to 8-bit "L" by keeping the high byte; Pillow's own convert clips at 255."""
    levels = np.asarray(image).astype(np.int64) >> 8
    return Image.fromarray(np.clip(levels, 0, 255).astype(np.uint8))


@dataclass(frozen=True)
class Bitmap:
    """Decoded RGBA image. The wrapped image is a private copy and is never drawn on."""

    image: Image.Image

    @classmethod
    def from_image(cls, image: Image.Image) -> Bitmap:
        if image.width == 0 or image.height == 0:
            raise EmptyInputError(f"Bitmap has zero area: {image.width}x{image.height}")
        if image.mode == "I" or image.mode.startswith("I;16"):
            image = _narrow_wide_grey(image)
        return cls(image=image.convert("RGBA") if image.mode != "RGBA" else image.copy())

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size

    def pixels(self) -> np.ndarray:
        """Read-only (height, width, 4) uint8 view of the pixel buffer."""
        arr = np.asarray(self.image, dtype=np.uint8)
        arr.flags.writeable = False
        return arr


def decode_bitmap(source: BitmapSource) -> Bitmap:
    """Decode image bytes, a path or a binary file object into a Bitmap.

    EXIF orientation is applied so the pixels match what a viewer displays.
    """
    if isinstance(source, bytes):
        source = io.BytesIO(source)
    try:
        with Image.open(source) as image:
            image.load()
            upright = ImageOps.exif_transpose(image)
            bitmap = Bitmap.from_image(upright)
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError, SyntaxError) as exc:
        raise DecodeError(f"Cannot decode image: {exc}") from exc
    logger.debug("Decoded bitmap {}x{}", bitmap.width, bitmap.height)
    return bitmap


async def decode_bitmap_async(source: BitmapSource) -> Bitmap:
    """Decode on a worker thread. There is no cancellation; callers drop stale results."""
    return await asyncio.to_thread(decode_bitmap, source)
