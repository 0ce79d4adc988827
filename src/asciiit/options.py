from __future__ import annotations

import math
from dataclasses import dataclass, replace

from asciiit.charsets import DEFAULT_RAMP, resolve_ramp
from asciiit.errors import OptionsError

MIN_DENSITY = 1
MAX_DENSITY = 10
MIN_CONTRAST = 1.0
MAX_CONTRAST = 5.0
# Grid width in characters at the highest density
BASE_COLUMNS = 200
# Monospace glyph cells are about twice as tall as they are wide
DEFAULT_CELL_ASPECT = 2.0
DEFAULT_BACKGROUND = "#222222"


@dataclass(frozen=True)
class RenderOptions:
    ramp: str = DEFAULT_RAMP
    color_enabled: bool = False
    alpha_as_opacity: bool = False
    density: int = 5
    contrast: float = 1.0
    background_color: str = DEFAULT_BACKGROUND
    target_char_width: int | None = None
    target_char_height: int | None = None
    cell_aspect: float = DEFAULT_CELL_ASPECT

    def clamped(self) -> RenderOptions:
        """Copy with the ramp resolved and density/contrast forced into range.

        Sizes that cannot be clamped meaningfully raise OptionsError.
        """
        if self.cell_aspect <= 0 or not math.isfinite(self.cell_aspect):
            raise OptionsError(f"cell_aspect must be a positive number, got {self.cell_aspect}")
        for name in ("target_char_width", "target_char_height"):
            value = getattr(self, name)
            if value is not None and value < 1:
                raise OptionsError(f"{name} must be at least 1, got {value}")
        return replace(
            self,
            ramp=resolve_ramp(self.ramp),
            density=clamp_density(self.density),
            contrast=clamp_contrast(self.contrast),
        )


def clamp_density(density: float) -> int:
    return int(max(MIN_DENSITY, min(density, MAX_DENSITY)))


def clamp_contrast(contrast: float) -> float:
    if math.isnan(contrast):
        return MIN_CONTRAST
    return float(max(MIN_CONTRAST, min(contrast, MAX_CONTRAST)))
