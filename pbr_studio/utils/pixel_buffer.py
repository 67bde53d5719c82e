import numpy as np
from PIL import Image

from ..globs import LUMINANCE_WEIGHTS
from ..type_annotations import PixelBuffer, Size

# A 'pixel buffer' is a uint8 numpy array, viewed in the 3D shape (height, width, channels),
# used to store data representing image pixels. Statistics are computed in float64 so that
# sums over large textures do not overflow.

try:
    resampling = Image.Resampling.LANCZOS
except AttributeError:
    resampling = Image.LANCZOS


def new_pixel_buffer(size: Size, color=(0, 0, 0, 255)) -> PixelBuffer:
    """Create a new pixel buffer filled with a single RGBA color.

    :return: a new writeable (height, width, 4) uint8 ndarray
    """
    width, height = size
    if len(color) != 4:
        raise TypeError("color must have 4 components, but found {} in {}".format(len(color), color))
    return np.full((height, width, 4), fill_value=color, dtype=np.uint8)


def luminance(buffer: PixelBuffer) -> np.ndarray:
    """Per-pixel luminance (0-255 scale) of the RGB channels as a (height, width) float array."""
    rgb = buffer[:, :, :3].astype(np.float64)
    r_weight, g_weight, b_weight = LUMINANCE_WEIGHTS
    return r_weight * rgb[:, :, 0] + g_weight * rgb[:, :, 1] + b_weight * rgb[:, :, 2]


def luminance_stats(buffer: PixelBuffer):
    """Mean, minimum and maximum luminance of a pixel buffer.

    :return: (mean, min, max) on a 0-255 scale
    """
    lum = luminance(buffer)
    return float(lum.mean()), float(lum.min()), float(lum.max())


def channel_mean(buffer: PixelBuffer, channel: int) -> float:
    return float(buffer[:, :, channel].mean(dtype=np.float64))


def channel_stddev(buffer: PixelBuffer, channel: int) -> float:
    """Sample standard deviation of one channel, 0.0 for a single pixel."""
    values = buffer[:, :, channel]
    if values.size < 2:
        return 0.0
    return float(values.std(dtype=np.float64, ddof=1))


def count_clipped_pixels(buffer: PixelBuffer) -> int:
    """Count pixels where any of R, G or B is fully black (0) or fully saturated (255)."""
    rgb = buffer[:, :, :3]
    clipped = np.any((rgb == 0) | (rgb == 255), axis=2)
    return int(np.count_nonzero(clipped))


def buffer_to_image(buffer: PixelBuffer) -> Image.Image:
    """Wrap a pixel buffer into a new Pillow RGBA image (the buffer is copied)."""
    return Image.fromarray(np.ascontiguousarray(buffer, dtype=np.uint8), mode="RGBA")


def image_to_buffer(image: Image.Image) -> PixelBuffer:
    """Convert any Pillow image into an RGBA pixel buffer."""
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    return np.asarray(image, dtype=np.uint8)


def resize_pixel_buffer(buffer: PixelBuffer, size: Size) -> PixelBuffer:
    """Resample a pixel buffer to exactly ``size`` (width, height) with a Lanczos filter.

    Channels are resampled independently, so colour under transparent pixels
    is kept as stored (no alpha premultiplication).

    :return: a new pixel buffer; the input is not modified
    """
    width, height = size
    if buffer.shape[1] == width and buffer.shape[0] == height:
        return buffer.copy()
    bands = buffer_to_image(buffer).split()
    image = Image.merge("RGBA", [band.resize((width, height), resampling) for band in bands])
    return image_to_buffer(image)


def grayscale_channel(buffer: PixelBuffer) -> np.ndarray:
    """The R channel of a grayscale map stored as RGBA (R == G == B)."""
    return buffer[:, :, 0]
