"""Resizing and channel packing for texture optimization.

Every function here returns new textures or materials and leaves its inputs
untouched, so the same source material can be exported at several LOD levels
without compounding resampling error.
"""

import math
from typing import Optional, Union

from ...globs import SLOT_AO, SLOT_METALLIC, SLOT_ROUGHNESS
from ...type_annotations import Size
from ...utils.materials import MaterialSet
from ...utils.pixel_buffer import grayscale_channel, new_pixel_buffer, resize_pixel_buffer
from ...utils.textures import TextureMap
from .presets import TargetResolution

Target = Union[TargetResolution, int]


def _max_dimension(target: Target) -> int:
    return target.max_dimension if isinstance(target, TargetResolution) else int(target)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_target_dimensions(width: int, height: int, max_dim: int) -> Size:
    """Compute the size that fits the longer edge to ``max_dim``.

    Sizes already within ``max_dim`` are returned unchanged, so textures are
    never upscaled. Aspect ratio is kept and each edge is at least 1 pixel.

    Args:
        width: Current width.
        height: Current height.
        max_dim: Maximum edge length.

    Returns:
        New (width, height).
    """
    if width <= max_dim and height <= max_dim:
        return width, height

    scale = max_dim / float(max(width, height))
    return max(1, _round_half_up(width * scale)), max(1, _round_half_up(height * scale))


def resize_texture(texture: TextureMap, target: Target) -> TextureMap:
    """Downscale a texture so its longer edge fits the target, using Lanczos resampling.

    The same texture object is returned when no resize is needed.
    """
    size = compute_target_dimensions(texture.width, texture.height, _max_dimension(target))
    if size == texture.size:
        return texture
    return texture.with_pixels(resize_pixel_buffer(texture.pixels, size))


def resize_to_exact(texture: TextureMap, size: Size) -> TextureMap:
    if size == texture.size:
        return texture
    return texture.with_pixels(resize_pixel_buffer(texture.pixels, size))


def resize_material_set(material: MaterialSet, target: Target) -> MaterialSet:
    """Resize every present slot of a material independently to the same target."""
    resized = MaterialSet(name=material.name)
    for slot, texture in material.textures():
        resized.set(slot, resize_texture(texture, target))
    return resized


def pack_rma(roughness: TextureMap, metallic: TextureMap, ao: TextureMap) -> TextureMap:
    """Pack three grayscale maps into one ORM texture.

    The output has the roughness map's size and holds R=AO, G=roughness,
    B=metallic and an opaque alpha. Each input contributes its R channel.
    Metallic and AO are resized to the roughness size first when they differ.
    """
    size = roughness.size
    metallic = resize_to_exact(metallic, size)
    ao = resize_to_exact(ao, size)

    packed = new_pixel_buffer(size, (0, 0, 0, 255))
    packed[:, :, 0] = grayscale_channel(ao.pixels)
    packed[:, :, 1] = grayscale_channel(roughness.pixels)
    packed[:, :, 2] = grayscale_channel(metallic.pixels)
    return TextureMap(packed)


def pack_rma_from_material(material: MaterialSet) -> Optional[TextureMap]:
    """Pack a material's roughness, metallic and AO maps, or None unless all three are present."""
    roughness = material.get(SLOT_ROUGHNESS)
    metallic = material.get(SLOT_METALLIC)
    ao = material.get(SLOT_AO)
    if roughness is None or metallic is None or ao is None:
        return None
    return pack_rma(roughness, metallic, ao)
