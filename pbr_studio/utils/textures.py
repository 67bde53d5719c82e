"""In-memory texture representation.

A :class:`TextureMap` owns one decoded RGBA8 image. Its pixel buffer is a
read-only numpy array of shape (height, width, 4) so every transform has to
build a new texture instead of editing one that other pipeline stages may
still be holding.
"""

from pathlib import Path
from typing import Optional

import numpy as np

from ..errors import TextureShapeError
from ..type_annotations import PathLike, PixelBuffer, RGBAPixel

CHANNELS = 4


class TextureMap:
    """A decoded texture with its source path.

    Attributes:
        pixels: Read-only uint8 array of shape (height, width, 4), row-major.
        path: File the texture was loaded from, if any.
    """

    __slots__ = ("pixels", "path")

    def __init__(self, pixels: PixelBuffer, path: Optional[PathLike] = None) -> None:
        buffer = np.asarray(pixels)
        if buffer.ndim != 3 or buffer.shape[2] != CHANNELS:
            raise TextureShapeError(
                "Pixel buffer must have shape (height, width, 4), got {}".format(buffer.shape)
            )
        if buffer.shape[0] == 0 or buffer.shape[1] == 0:
            raise TextureShapeError("Texture dimensions must be > 0, got {}x{}".format(buffer.shape[1], buffer.shape[0]))

        # Take a private frozen copy unless the buffer is already one
        if buffer.dtype != np.uint8 or buffer.flags.writeable:
            buffer = np.array(buffer, dtype=np.uint8)
            buffer.flags.writeable = False

        self.pixels = buffer
        self.path = Path(path) if path is not None else None

    @classmethod
    def from_bytes(cls, width: int, height: int, data: bytes, path: Optional[PathLike] = None) -> "TextureMap":
        """Build a texture from a raw row-major RGBA8 byte buffer.

        Args:
            width: Width in pixels.
            height: Height in pixels.
            data: Exactly ``width * height * 4`` bytes.
            path: Optional source path.

        Returns:
            New texture holding a copy of the data.

        Raises:
            TextureShapeError: If a dimension is zero or the length is wrong.
        """
        if width <= 0 or height <= 0:
            raise TextureShapeError("Texture dimensions must be > 0, got {}x{}".format(width, height))
        expected = width * height * CHANNELS
        if len(data) != expected:
            raise TextureShapeError(
                "Data length mismatch: expected {} bytes, got {}".format(expected, len(data))
            )
        buffer = np.frombuffer(bytes(data), dtype=np.uint8).reshape(height, width, CHANNELS)
        return cls(buffer, path)

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def size(self):
        """(width, height) tuple, in the same order Pillow uses."""
        return self.width, self.height

    @property
    def data(self) -> bytes:
        """Raw RGBA8 bytes, ``width * height * 4`` long."""
        return self.pixels.tobytes()

    def pixel(self, x: int, y: int) -> Optional[RGBAPixel]:
        """Get the pixel at (x, y) as an (r, g, b, a) tuple, or None when out of range."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            return None
        r, g, b, a = (int(v) for v in self.pixels[y, x])
        return r, g, b, a

    def with_pixels(self, pixels: PixelBuffer) -> "TextureMap":
        """Return a new texture with the given pixels and this texture's path."""
        return TextureMap(pixels, self.path)

    def __repr__(self) -> str:
        return "TextureMap({}x{}, path={!r})".format(self.width, self.height, self.path)
