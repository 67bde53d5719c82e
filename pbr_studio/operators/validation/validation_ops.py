from typing import List, Optional

from ...globs import MATERIAL_SLOTS, SLOT_KEYWORDS
from ...utils.materials import MaterialSet


def is_power_of_two(value: int) -> bool:
    return value > 0 and (value & (value - 1)) == 0


def format_slot_size(slot: str, size) -> str:
    return "{} ({}x{})".format(slot, size[0], size[1])


def non_power_of_two_slots(material: MaterialSet) -> List[str]:
    """List present slots with a non power-of-two width or height, formatted as ``name (WxH)``."""
    return [
        format_slot_size(slot, texture.size)
        for slot, texture in material.textures()
        if not is_power_of_two(texture.width) or not is_power_of_two(texture.height)
    ]


def oversized_slots(material: MaterialSet, limit: int) -> List[str]:
    return [
        format_slot_size(slot, texture.size)
        for slot, texture in material.textures()
        if texture.width > limit or texture.height > limit
    ]


def resolve_slot_alias(name: str) -> Optional[str]:
    """Map a slot name or one of its file name keywords to the slot name.

    ``"basecolor"`` resolves to ``"albedo"``, ``"bump"`` to ``"height"`` and so
    on. Emissive and unknown names resolve to None.
    """
    name = name.strip().lower()
    for slot, keywords in SLOT_KEYWORDS.items():
        if name == slot or name in keywords:
            return slot if slot in MATERIAL_SLOTS else None
    return None


def has_map(material: MaterialSet, name: str) -> bool:
    slot = resolve_slot_alias(name)
    return slot is not None and material.has(slot)
