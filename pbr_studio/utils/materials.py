"""Material handling for PBR Studio.

A material is a set of up to six texture maps sharing one purpose. This module
holds the :class:`MaterialSet` container and the folder loader that fills it
from texture file names.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

from ..globs import MATERIAL_SLOTS, SLOT_KEYWORDS
from ..type_annotations import JsonDict, PathLike, Size
from .images import detect_slot_from_path, is_image_file, load_image
from .textures import TextureMap

logger = logging.getLogger(__name__)


class MaterialSet:
    """Up to six optional texture slots plus an optional display name.

    Slots are addressed by name (albedo, normal, roughness, metallic, ao,
    height). Dimension consistency between slots is not enforced, it is
    only reported.
    """

    def __init__(self, name: Optional[str] = None, **textures: Optional[TextureMap]) -> None:
        unknown = set(textures) - set(MATERIAL_SLOTS)
        if unknown:
            raise KeyError("Unknown texture slot(s): {}".format(", ".join(sorted(unknown))))
        self.name = name
        self._textures = {}  # type: Dict[str, TextureMap]
        for slot, texture in textures.items():
            if texture is not None:
                self._textures[slot] = texture

    def __getattr__(self, item: str) -> Optional[TextureMap]:
        if item in MATERIAL_SLOTS:
            return self._textures.get(item)
        raise AttributeError("{!r} object has no attribute {!r}".format(type(self).__name__, item))

    def __repr__(self) -> str:
        return "MaterialSet(name={!r}, slots={})".format(self.name, self.present_slots())

    def get(self, slot: str) -> Optional[TextureMap]:
        if slot not in MATERIAL_SLOTS:
            raise KeyError("Unknown texture slot: {}".format(slot))
        return self._textures.get(slot)

    def has(self, slot: str) -> bool:
        return self.get(slot) is not None

    def set(self, slot: str, texture: Optional[TextureMap]) -> None:
        """Put a texture into a slot, or clear the slot when ``texture`` is None."""
        if slot not in MATERIAL_SLOTS:
            raise KeyError("Unknown texture slot: {}".format(slot))
        if texture is None:
            self._textures.pop(slot, None)
        else:
            self._textures[slot] = texture

    def present_slots(self) -> List[str]:
        return [slot for slot in MATERIAL_SLOTS if slot in self._textures]

    def textures(self):
        """Iterate (slot, texture) pairs for present slots in slot order."""
        for slot in self.present_slots():
            yield slot, self._textures[slot]

    def texture_count(self) -> int:
        return len(self._textures)

    def dimensions(self) -> Optional[Size]:
        """Get the (width, height) of the first present slot in slot order."""
        for _, texture in self.textures():
            return texture.size
        return None

    def dimensions_consistent(self) -> bool:
        sizes = {texture.size for _, texture in self.textures()}
        return len(sizes) <= 1

    def display_name(self, folder: Optional[PathLike] = None) -> str:
        """Resolve a human readable name.

        Falls back to the folder's base name, then to the folder path itself,
        then to ``"unknown"``.
        """
        if self.name:
            return self.name
        if folder is not None:
            folder = Path(folder)
            return folder.name or str(folder)
        return "unknown"

    def map_flags(self) -> Dict[str, bool]:
        return {slot: slot in self._textures for slot in MATERIAL_SLOTS}

    def summary(self) -> JsonDict:
        """Build the JSON summary used by reports and script plugins."""
        dims = self.dimensions()
        return {
            "texture_count": self.texture_count(),
            "dimensions": {"width": dims[0], "height": dims[1]} if dims else None,
            "maps": self.map_flags(),
            "dimensions_consistent": self.dimensions_consistent(),
        }


def is_material_folder(folder: PathLike) -> bool:
    """Check whether a folder holds at least one image named after a texture slot."""
    folder = Path(folder)
    if not folder.is_dir():
        return False
    keywords = [keyword for slot in MATERIAL_SLOTS for keyword in SLOT_KEYWORDS[slot]]
    return any(
        is_image_file(entry) and any(keyword in entry.stem.lower() for keyword in keywords)
        for entry in folder.iterdir()
    )


def load_from_folder(folder: PathLike) -> MaterialSet:
    """Load a material from the texture files in a folder.

    Files are considered in file name order and the first file detected for a
    slot wins. Files without a recognised slot keyword are ignored. The
    material is named after the folder.

    Args:
        folder: Directory containing the texture files.

    Returns:
        The loaded material.

    Raises:
        OSError: If the folder or a texture file cannot be read.
        ImageDecodeError: If a texture file cannot be decoded.
    """
    folder = Path(folder)
    candidates = []
    for entry in folder.iterdir():
        if not is_image_file(entry):
            continue
        slot = detect_slot_from_path(entry)
        if slot in MATERIAL_SLOTS:
            candidates.append((entry, slot))

    candidates.sort(key=lambda candidate: candidate[0].name)

    material = MaterialSet(name=folder.name or None)
    for path, slot in candidates:
        if material.has(slot):
            logger.debug("Ignoring %s, slot %s already filled", path, slot)
            continue
        material.set(slot, load_image(path))

    logger.debug("Loaded material %s with slots %s", material.name, material.present_slots())
    return material
