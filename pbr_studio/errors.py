"""Exception types raised by PBR Studio.

I/O problems are reported with the builtin ``OSError`` family and are never
wrapped. The classes below cover the failures specific to texture handling,
plugin configuration and export.
"""


class PbrStudioError(Exception):
    """Base class for all PBR Studio errors."""


class TextureShapeError(PbrStudioError, ValueError):
    """A pixel buffer has a zero size or does not match its dimensions."""


class ImageDecodeError(PbrStudioError):
    """An image file exists but could not be decoded."""

    def __init__(self, path, reason):
        super().__init__("Could not decode {}: {}".format(path, reason))
        self.path = path
        self.reason = reason


class PluginConfigError(PbrStudioError):
    """A plugin manifest is malformed or describes an unknown condition."""


class PresetError(PbrStudioError, ValueError):
    """An export preset or target resolution id is not recognised."""


class ExportError(PbrStudioError):
    """A texture cannot be written in the requested format."""
