class AsciiItError(Exception):
    """Base class for errors raised by the conversion pipeline."""


class DecodeError(AsciiItError):
    """Image bytes could not be read or are in an unsupported format."""


class EmptyInputError(AsciiItError):
    """No bitmap was given to sample, or the grid to rasterize has no visible rows."""


class EncodeError(AsciiItError):
    """The rendered canvas could not be encoded as an image file."""


class OptionsError(AsciiItError, ValueError):
    """A render option (ramp, colour, size) is invalid."""
