"""Engine-ready texture export.

Exports write fixed file names into a directory (``BaseColor.png``,
``Normal.png``, ``ORM.png`` or the separate roughness/metallic/AO files, and
``Height.png``) for the slots a material actually has. LOD exports nest those
directories as ``LOD0``, ``LOD1``, ... and every LOD level is resized from the
original material.

Typical usage example:
    preset = ExportPreset.parse("unreal")
    written = export_with_lod(material, "out/Brick", preset, preset.default_lod_levels)
"""

import logging
from pathlib import Path
from typing import List, Sequence, Tuple, Union

from ...globs import (
    EXPORT_FILE_NAMES,
    PACKED_ORM_FILE_NAME,
    SLOT_ALBEDO,
    SLOT_AO,
    SLOT_HEIGHT,
    SLOT_METALLIC,
    SLOT_NORMAL,
    SLOT_ROUGHNESS,
)
from ...type_annotations import MaterialEntries, PathLike
from ...utils.images import save_texture
from ...utils.materials import MaterialSet
from .optimization_ops import Target, pack_rma_from_material, resize_material_set
from .presets import ExportPreset, OptimizationPreset, TargetResolution

logger = logging.getLogger(__name__)

PresetLike = Union[ExportPreset, str]

LOD_DIR_TEMPLATE = "LOD{}"
FALLBACK_MATERIAL_DIR = "material"


def _as_preset(preset: PresetLike) -> ExportPreset:
    return preset if isinstance(preset, ExportPreset) else ExportPreset.parse(preset)


def _as_optimization_preset(preset: Union[OptimizationPreset, PresetLike]) -> OptimizationPreset:
    if isinstance(preset, OptimizationPreset):
        return preset
    return OptimizationPreset(_as_preset(preset))


def _write(material: MaterialSet, slot: str, output_dir: Path, written: List[Path]) -> None:
    texture = material.get(slot)
    if texture is not None:
        written.append(save_texture(texture, output_dir / EXPORT_FILE_NAMES[slot]))


def export_material_to_dir(material: MaterialSet, output_dir: PathLike, pack_orm: bool = True) -> List[Path]:
    """Write a material's present slots into a directory with the fixed export names.

    Roughness, metallic and AO go into ``ORM.png`` when ``pack_orm`` is set
    and all three are present, otherwise each is written separately.

    Args:
        material: Material to write.
        output_dir: Target directory, created if missing.
        pack_orm: Whether to pack roughness, metallic and AO.

    Returns:
        Paths of the written files.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    written = []  # type: List[Path]

    _write(material, SLOT_ALBEDO, output_dir, written)
    _write(material, SLOT_NORMAL, output_dir, written)

    packed = pack_rma_from_material(material) if pack_orm else None
    if packed is not None:
        written.append(save_texture(packed, output_dir / PACKED_ORM_FILE_NAME))
    else:
        for slot in (SLOT_ROUGHNESS, SLOT_METALLIC, SLOT_AO):
            _write(material, slot, output_dir, written)

    _write(material, SLOT_HEIGHT, output_dir, written)
    return written


def export_with_target(material: MaterialSet, output_dir: PathLike, target: Target, pack_orm: bool = True) -> List[Path]:
    """Resize a material to a target resolution and export it."""
    written = export_material_to_dir(resize_material_set(material, target), output_dir, pack_orm)
    logger.info("Exported %s to %s (%d files)", material.name or "material", output_dir, len(written))
    return written


def export_with_preset(material: MaterialSet, output_dir: PathLike, preset: PresetLike) -> List[Path]:
    return export_with_target(material, output_dir, _as_preset(preset).target_resolution)


def generate_lod_chain(
    material: MaterialSet, levels: Sequence[Target]
) -> List[Tuple[Target, MaterialSet]]:
    """Resize the original material once per LOD level.

    Returns:
        (level, resized material) pairs in level order.
    """
    return [(level, resize_material_set(material, level)) for level in levels]


def export_with_target_and_lod(
    material: MaterialSet,
    output_dir: PathLike,
    base_resolution: Target,
    lod_levels: Sequence[Target],
    pack_orm: bool = True,
) -> List[Path]:
    """Export ``LOD0`` at the base resolution and ``LOD1``... for each LOD level.

    Returns:
        Paths of every written file, LOD0 first.
    """
    output_dir = Path(output_dir)
    written = export_material_to_dir(
        resize_material_set(material, base_resolution), output_dir / LOD_DIR_TEMPLATE.format(0), pack_orm
    )
    for index, (level, resized) in enumerate(generate_lod_chain(material, lod_levels), start=1):
        lod_dir = output_dir / LOD_DIR_TEMPLATE.format(index)
        written.extend(export_material_to_dir(resized, lod_dir, pack_orm))
        logger.debug("Wrote LOD%d (%s) to %s", index, level, lod_dir)

    logger.info(
        "Exported %s with %d LOD level(s) to %s", material.name or "material", len(lod_levels), output_dir
    )
    return written


def export_with_lod(
    material: MaterialSet, output_dir: PathLike, preset: PresetLike, lod_levels: Sequence[Target]
) -> List[Path]:
    return export_with_target_and_lod(material, output_dir, _as_preset(preset).target_resolution, lod_levels)


def export_with_optimization_preset(
    material: MaterialSet, output_dir: PathLike, preset: OptimizationPreset, include_lod: bool = False
) -> List[Path]:
    """Export with an optimization preset, optionally with its LOD ladder."""
    preset = _as_optimization_preset(preset)
    if include_lod:
        return export_with_target_and_lod(
            material, output_dir, preset.effective_resolution, preset.effective_lod_levels, preset.pack_orm
        )
    return export_with_target(material, output_dir, preset.effective_resolution, preset.pack_orm)


def material_dir_name(folder: PathLike, material: MaterialSet) -> str:
    """Name of a material's sub-directory in a batch export."""
    if material.name:
        return material.name
    return Path(folder).name or FALLBACK_MATERIAL_DIR


def batch_export_with_preset(materials: MaterialEntries, output_root: PathLike, preset: PresetLike) -> List[Path]:
    """Export every material to ``output_root/<name>/`` with the same preset.

    Errors are not caught, so the first failing material aborts the batch.
    """
    preset = _as_preset(preset)
    output_root = Path(output_root)
    output_root.mkdir(parents=True, exist_ok=True)

    written = []
    for folder, material in materials:
        written.extend(export_with_preset(material, output_root / material_dir_name(folder, material), preset))
    return written


def batch_export_with_optimization_preset(
    materials: MaterialEntries,
    output_root: PathLike,
    preset: Union[OptimizationPreset, PresetLike],
    include_lod: bool = False,
) -> List[Path]:
    preset = _as_optimization_preset(preset)
    output_root = Path(output_root)
    output_root.mkdir(parents=True, exist_ok=True)

    written = []
    for folder, material in materials:
        material_dir = output_root / material_dir_name(folder, material)
        written.extend(export_with_optimization_preset(material, material_dir, preset, include_lod))
    return written


__all__ = [
    "TargetResolution",
    "batch_export_with_optimization_preset",
    "batch_export_with_preset",
    "export_material_to_dir",
    "export_with_lod",
    "export_with_optimization_preset",
    "export_with_preset",
    "export_with_target",
    "export_with_target_and_lod",
    "generate_lod_chain",
    "material_dir_name",
]
