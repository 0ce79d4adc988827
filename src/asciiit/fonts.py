import os
import shutil
import subprocess
from functools import lru_cache

import numpy as np
from loguru import logger
from PIL import Image, ImageDraw, ImageFont

FONT_ENV_VAR = "ASCIIIT_FONT"

_FONT_CANDIDATES = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationMono-Regular.ttf",
    "/usr/share/fonts/TTF/DejaVuSansMono.ttf",
    "/usr/share/fonts/dejavu-sans-mono-fonts/DejaVuSansMono.ttf",
    "/Library/Fonts/Courier New.ttf",
    "/System/Library/Fonts/Menlo.ttc",
    "C:\\Windows\\Fonts\\cour.ttf",
]

Font = ImageFont.FreeTypeFont | ImageFont.ImageFont

# Private-use code point that fonts leave unmapped; it renders as the missing-glyph box
_UNMAPPED_CHAR = "\U0010fffd"


def _fc_match(pattern: str) -> str | None:
    """Ask fontconfig for the file providing a pattern."""
    if shutil.which("fc-match") is None:
        return None
    result = subprocess.run(["fc-match", "-f", "%{file}", pattern], capture_output=True, text=True)
    if result.returncode == 0 and result.stdout.strip():
        return result.stdout.strip()
    return None


@lru_cache(maxsize=1)
def find_monospace_font() -> str | None:
    """Path of a monospace TrueType font, or None if the system has none we can find."""
    configured = os.environ.get(FONT_ENV_VAR)
    if configured:
        if os.path.exists(configured):
            return configured
        logger.warning("{} points at missing font {}", FONT_ENV_VAR, configured)
    for path in _FONT_CANDIDATES:
        if os.path.exists(path):
            return path
    return _fc_match("monospace")


def load_font(size: int, font_path: str | None = None) -> Font:
    """Load a monospace font at a pixel size, falling back to Pillow's bundled font."""
    path = font_path or find_monospace_font()
    if path is not None:
        try:
            return ImageFont.truetype(path, size)
        except OSError as exc:
            logger.warning("Cannot load font {}: {}", path, exc)
    logger.warning("No monospace font found, using Pillow's default font")
    return ImageFont.load_default(size=size)


def measure_cell_aspect(font: Font) -> float:
    """Height / width of one glyph cell: line height over the advance of "M"."""
    width = font.getlength("M")
    if isinstance(font, ImageFont.FreeTypeFont):
        ascent, descent = font.getmetrics()
        height = ascent + descent
    else:
        bbox = font.getbbox("M")
        height = bbox[3] - bbox[1]
    if width <= 0 or height <= 0:
        raise ValueError("Font has no measurable cell for 'M'")
    return height / width


@lru_cache(maxsize=None)
def find_fallback_font(char: str) -> str | None:
    """Ask fontconfig which font provides a given character."""
    return _fc_match(f":charset={ord(char):04x}")


def _render_char(char: str, font: Font) -> np.ndarray:
    size = int(getattr(font, "size", 12))
    img = Image.new("L", (size * 2, size * 2), 0)
    ImageDraw.Draw(img).text((0, 0), char, fill=255, font=font)
    return np.asarray(img)


def has_glyph(font: Font, char: str) -> bool:
    """Check if a font draws a character as itself rather than its missing-glyph box."""
    if char.isspace():
        return True
    if not isinstance(font, ImageFont.FreeTypeFont):
        # Bitmap fonts only encode Latin-1
        return ord(char) < 256
    return not np.array_equal(_render_char(char, font), _render_char(_UNMAPPED_CHAR, font))


class GlyphFonts:
    """A primary font plus per-character fontconfig fallbacks, all at one pixel size."""

    def __init__(self, size: int, primary: Font | None = None):
        self.size = size
        self.primary = primary if primary is not None else load_font(size)
        # One font per fallback file; None marks a file that failed to load
        self._fallbacks: dict[str, Font | None] = {}
        self._by_char: dict[str, Font] = {}

    def font_for(self, char: str) -> Font:
        font = self._by_char.get(char)
        if font is None:
            font = self._resolve(char)
            self._by_char[char] = font
        return font

    def _load_fallback(self, path: str) -> Font | None:
        if path not in self._fallbacks:
            try:
                self._fallbacks[path] = ImageFont.truetype(path, self.size)
            except OSError as exc:
                logger.warning("Cannot load fallback font {}: {}", path, exc)
                self._fallbacks[path] = None
        return self._fallbacks[path]

    def _resolve(self, char: str) -> Font:
        if has_glyph(self.primary, char):
            return self.primary
        path = find_fallback_font(char)
        fallback = self._load_fallback(path) if path is not None else None
        if fallback is not None and has_glyph(fallback, char):
            logger.debug("Drawing U+{:04X} with fallback font {}", ord(char), path)
            return fallback
        logger.warning("No font found for U+{:04X}, drawing it with the primary font", ord(char))
        return self.primary
