import io
import os
import shutil
import subprocess

import pytest
from PIL import Image, ImageFont

from asciiit.bitmap import Bitmap
from asciiit.charsets import BRAILLE
from asciiit.fonts import GlyphFonts, has_glyph

_FONT_CANDIDATES = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationMono-Regular.ttf",
    "/usr/share/fonts/TTF/DejaVuSansMono.ttf",
    "/usr/share/fonts/dejavu-sans-mono-fonts/DejaVuSansMono.ttf",
]


def _find_monospace_font():
    """Find a monospace font on the system."""
    for path in _FONT_CANDIDATES:
        if os.path.exists(path):
            return path
    if shutil.which("fc-match"):
        out = subprocess.run(["fc-match", "-f", "%{file}", "monospace"], capture_output=True, text=True)
        if out.returncode == 0 and out.stdout.strip():
            return out.stdout.strip()
    return None


FONT_PATH = _find_monospace_font()
needs_font = pytest.mark.skipif(FONT_PATH is None, reason="No monospace font found on system")


def _braille_renders():
    """Whether the monospace font, or its fontconfig fallback, draws real braille cells."""
    if FONT_PATH is None:
        return False
    char = BRAILLE[-1]
    font = GlyphFonts(24, ImageFont.truetype(FONT_PATH, 24)).font_for(char)
    return has_glyph(font, char)


needs_braille_font = pytest.mark.skipif(not _braille_renders(), reason="No font on system draws braille")


def solid(width, height, colour, mode="RGB"):
    return Bitmap.from_image(Image.new(mode, (width, height), colour))


def png_bytes(image):
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def white_bitmap():
    return solid(10, 10, (255, 255, 255))


@pytest.fixture
def landscape_bitmap():
    return solid(300, 200, (128, 128, 128))
