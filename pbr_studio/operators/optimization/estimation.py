"""GPU memory estimates for uncompressed RGBA8 textures."""

from dataclasses import asdict, dataclass
from typing import List, Tuple

from ...globs import SLOT_AO, SLOT_METALLIC, SLOT_ROUGHNESS
from ...type_annotations import JsonDict
from ...utils.materials import MaterialSet

BYTES_PER_PIXEL = 4
MIPMAP_OVERHEAD = 4.0 / 3.0
ORM_SLOT = "orm"

_UNITS = (("GB", 1024 ** 3), ("MB", 1024 ** 2), ("KB", 1024))


@dataclass(frozen=True)
class TextureVramEntry:
    slot: str
    width: int
    height: int
    bytes: int


@dataclass(frozen=True)
class VramEstimate:
    bytes: int
    formatted: str
    include_mipmaps: bool
    packed_orm: bool
    textures: Tuple[TextureVramEntry, ...]

    def to_dict(self) -> JsonDict:
        data = asdict(self)
        data["textures"] = [asdict(entry) for entry in self.textures]
        return data


def estimate_texture_bytes(width: int, height: int, include_mipmaps: bool) -> int:
    base = width * height * BYTES_PER_PIXEL
    if include_mipmaps:
        return int(base * MIPMAP_OVERHEAD + 0.5)
    return base


def format_bytes(size: int) -> str:
    """Format a byte count with binary units, e.g. ``"5.3 MB"`` or ``"512 B"``."""
    for unit, factor in _UNITS:
        if size >= factor:
            return "{:.1f} {}".format(size / factor, unit)
    return "{} B".format(size)


def estimate_vram(material: MaterialSet, include_mipmaps: bool = True, packed_orm: bool = True) -> VramEstimate:
    """Estimate the GPU memory a material needs once uploaded.

    Args:
        material: Material to estimate.
        include_mipmaps: Add the 4/3 overhead of a full mip chain.
        packed_orm: Count roughness, metallic and AO as one ORM texture of the
            roughness size when all three are present.

    Returns:
        Per-texture entries and the total.
    """
    entries = []  # type: List[TextureVramEntry]
    can_pack = packed_orm and all(material.has(slot) for slot in (SLOT_ROUGHNESS, SLOT_METALLIC, SLOT_AO))

    for slot, texture in material.textures():
        if can_pack and slot in (SLOT_METALLIC, SLOT_AO):
            continue
        name = ORM_SLOT if can_pack and slot == SLOT_ROUGHNESS else slot
        entries.append(
            TextureVramEntry(
                name, texture.width, texture.height,
                estimate_texture_bytes(texture.width, texture.height, include_mipmaps),
            )
        )

    total = sum(entry.bytes for entry in entries)
    return VramEstimate(total, format_bytes(total), include_mipmaps, packed_orm, tuple(entries))
