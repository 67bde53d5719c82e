import numpy as np

from ...config import DEFAULT_BLEND_WIDTH
from ...type_annotations import Fingerprint
from ...utils.pixel_buffer import luminance
from ...utils.textures import TextureMap

FINGERPRINT_GRID = 8
MIN_TILEABLE_SIZE = 4


def perceptual_fingerprint(texture: TextureMap) -> Fingerprint:
    """Compute an 8x8 grid of mean block luminance, row by row.

    Blocks are ``max(1, width / 8)`` by ``max(1, height / 8)`` pixels with
    fractional edges truncated, so images smaller than 8 pixels on a side
    produce empty trailing blocks that read as 0.
    """
    lum = luminance(texture.pixels)
    height, width = lum.shape
    block_w = max(1.0, width / FINGERPRINT_GRID)
    block_h = max(1.0, height / FINGERPRINT_GRID)

    fingerprint = []
    for by in range(FINGERPRINT_GRID):
        y0 = int(by * block_h)
        y1 = int(min((by + 1) * block_h, height))
        for bx in range(FINGERPRINT_GRID):
            x0 = int(bx * block_w)
            x1 = int(min((bx + 1) * block_w, width))
            block = lum[y0:y1, x0:x1]
            fingerprint.append(float(block.mean()) if block.size else 0.0)
    return fingerprint


def fingerprint_similarity(a: Fingerprint, b: Fingerprint) -> float:
    """Similarity of two fingerprints in [0, 1], where 1.0 means identical.

    Fingerprints of different lengths, or empty ones, score 0.
    """
    if len(a) != len(b) or not a:
        return 0.0
    diff = np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64)
    max_diff = len(a) * 255.0 * 255.0
    return float(max(0.0, 1.0 - min(1.0, float(np.sum(diff * diff)) / max_diff)))


def edge_difference(texture: TextureMap) -> float:
    """Mean seam strength of a texture when tiled.

    One sample per column compares the top and bottom rows and one sample per
    row compares the left and right columns. Each sample is the summed
    absolute RGB difference, and the result is the mean over all
    ``width + height`` samples.
    """
    rgb = texture.pixels[:, :, :3].astype(np.int32)
    vertical = np.abs(rgb[0, :, :] - rgb[-1, :, :]).sum(axis=1)
    horizontal = np.abs(rgb[:, 0, :] - rgb[:, -1, :]).sum(axis=1)
    samples = np.concatenate((vertical, horizontal))
    return float(samples.mean()) if samples.size else 0.0


def clamp_blend_width(blend_width: int, width: int, height: int) -> int:
    return max(1, min(blend_width, min(width, height) // 4))


def fix_tileability(texture: TextureMap, blend_width: int = DEFAULT_BLEND_WIDTH) -> TextureMap:
    """Blend opposite edges so the texture tiles with a weaker seam.

    The first and last ``blend_width`` rows are replaced pairwise (row i with
    row h-1-i) by their rounded per-channel average, then the same is done for
    columns. Corner regions receive both passes. Textures under 4x4 are
    returned unchanged and the dimensions never change.

    :return: a new texture with the same path
    """
    width, height = texture.size
    if width < MIN_TILEABLE_SIZE or height < MIN_TILEABLE_SIZE:
        return texture

    blend = clamp_blend_width(blend_width, width, height)
    data = texture.pixels.astype(np.uint16)

    top = data[:blend]
    bottom = data[height - blend:][::-1]
    rows = (top + bottom + 1) // 2
    data[:blend] = rows
    data[height - blend:] = rows[::-1]

    left = data[:, :blend]
    right = data[:, width - blend:][:, ::-1]
    columns = (left + right + 1) // 2
    data[:, :blend] = columns
    data[:, width - blend:] = columns[:, ::-1]

    return texture.with_pixels(data.astype(np.uint8))
