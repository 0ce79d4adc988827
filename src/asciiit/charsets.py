from asciiit.errors import OptionsError

DOTS = " .:*-=+%#@"

# Braille patterns U+2800 to U+281F, blank pattern replaced by a plain space
BRAILLE = " " + "".join(chr(i) for i in range(0x2801, 0x2820))

# Light, medium and dark shade followed by the full block
BLOCKS = " ░▒▓█"

PRESETS = {
    "dots": DOTS,
    "braille": BRAILLE,
    "blocks": BLOCKS,
}

# Labels shown in the character dropdown of the editor
DROPDOWN_LABELS = {
    ".:*-=+%#@": "dots",
    "⠁⠂⠃⠄⠅⠆⠇": "braille",
    " ░▒▓█": "blocks",
}

DEFAULT_RAMP = DOTS


def resolve_ramp(ramp: str | None) -> str:
    """Turn a preset name, dropdown label or literal ramp into a ramp string.

    Ramps are ordered from the emptiest glyph to the fullest one.
    """
    if ramp is None:
        return DEFAULT_RAMP
    if ramp in PRESETS:
        return PRESETS[ramp]
    if ramp in DROPDOWN_LABELS:
        return PRESETS[DROPDOWN_LABELS[ramp]]
    if len(ramp) < 2:
        raise OptionsError(f"Character ramp needs at least 2 glyphs, got {ramp!r}")
    return ramp
