"""Cross-material analysis.

Runs over a batch of ``(folder, MaterialSet)`` entries and produces immutable
result records that serialize to JSON:

- duplicate and similar textures within the same slot, via perceptual
  fingerprints,
- resolution distribution and map coverage across materials,
- tileability (edge difference) per texture, with an optional albedo fix.

Typical usage example:
    report = run_advanced_analysis(materials, fix_tileability_maps=True)
    report.write_to_file("reports/analysis.json")
"""

import json
import logging
from collections import OrderedDict
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from ...config import (
    DEFAULT_BLEND_WIDTH,
    DEFAULT_DUPLICATE_THRESHOLD,
    DEFAULT_SIMILAR_THRESHOLD,
    DEFAULT_TILEABILITY_THRESHOLD,
)
from ...globs import MATERIAL_SLOTS, SLOT_ALBEDO
from ...type_annotations import JsonDict, MaterialEntries, PathLike
from ...utils.textures import TextureMap
from .analysis_ops import edge_difference, fingerprint_similarity, fix_tileability, perceptual_fingerprint

logger = logging.getLogger(__name__)

UNKNOWN_PATH = "unknown"


@dataclass(frozen=True)
class DuplicatePair:
    path_a: str
    path_b: str
    slot: str
    material_a: Optional[str]
    material_b: Optional[str]
    similarity: float


@dataclass(frozen=True)
class DuplicateAnalysisResult:
    duplicate_pairs: Tuple[DuplicatePair, ...]
    similar_pairs: Tuple[DuplicatePair, ...]
    duplicate_threshold: float
    similar_threshold: float

    def to_dict(self) -> JsonDict:
        return asdict(self)


@dataclass(frozen=True)
class ResolutionDistribution:
    width: int
    height: int
    count: int
    materials: Tuple[str, ...]


@dataclass(frozen=True)
class MapCoverage:
    slot: str
    present_count: int
    total_count: int
    coverage_percent: float
    missing_in: Tuple[str, ...]


@dataclass(frozen=True)
class CrossMaterialResult:
    material_count: int
    resolution_distributions: Tuple[ResolutionDistribution, ...]
    resolution_inconsistent: bool
    map_coverage: Tuple[MapCoverage, ...]
    recommendations: Tuple[str, ...]

    def to_dict(self) -> JsonDict:
        return asdict(self)


@dataclass(frozen=True)
class TileabilityAnalysisEntry:
    path: str
    slot: str
    material_name: Optional[str]
    edge_difference: float
    needs_fix: bool


@dataclass(frozen=True)
class TileabilityFixResult:
    path: str
    original_edge_difference: float
    fixed_edge_difference: float
    improved: bool


@dataclass(frozen=True)
class AdvancedAnalysisReport:
    duplicates: DuplicateAnalysisResult
    cross_material: CrossMaterialResult
    tileability_analysis: Tuple[TileabilityAnalysisEntry, ...]
    tileability_fixes: Optional[Tuple[TileabilityFixResult, ...]] = None

    def to_dict(self) -> JsonDict:
        data = asdict(self)
        if self.tileability_fixes is None:
            del data["tileability_fixes"]
        return data

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def write_to_file(self, path: PathLike) -> Path:
        """Write the report as pretty JSON, creating parent directories."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_json(), encoding="utf-8")
        logger.info("Wrote analysis report to %s", path)
        return path


def _texture_path(texture: TextureMap) -> str:
    return str(texture.path) if texture.path is not None else UNKNOWN_PATH


def _material_name(folder, material) -> Optional[str]:
    """Material name, else folder base name, else None."""
    if material.name:
        return material.name
    return Path(folder).name or None


def detect_duplicates(
    materials: MaterialEntries,
    duplicate_threshold: float = DEFAULT_DUPLICATE_THRESHOLD,
    similar_threshold: float = DEFAULT_SIMILAR_THRESHOLD,
) -> DuplicateAnalysisResult:
    """Find duplicate and similar textures within each slot.

    Every pair of same-slot textures is compared once, in collection order.
    A pair at or above ``duplicate_threshold`` is a duplicate; otherwise at or
    above ``similar_threshold`` it is similar.
    """
    refs = []
    for folder, material in materials:
        name = _material_name(folder, material)
        for slot, texture in material.textures():
            refs.append((slot, _texture_path(texture), name, perceptual_fingerprint(texture)))

    duplicates = []
    similar = []
    for i, (slot_a, path_a, name_a, hash_a) in enumerate(refs):
        for slot_b, path_b, name_b, hash_b in refs[i + 1:]:
            if slot_a != slot_b:
                continue
            similarity = fingerprint_similarity(hash_a, hash_b)
            pair = DuplicatePair(path_a, path_b, slot_a, name_a, name_b, similarity)
            if similarity >= duplicate_threshold:
                duplicates.append(pair)
            elif similarity >= similar_threshold:
                similar.append(pair)

    logger.debug("Found %d duplicate and %d similar pair(s)", len(duplicates), len(similar))
    return DuplicateAnalysisResult(tuple(duplicates), tuple(similar), duplicate_threshold, similar_threshold)


def analyze_cross_material(materials: MaterialEntries) -> CrossMaterialResult:
    """Summarize resolution distribution and slot coverage over many materials."""
    groups = OrderedDict()
    missing = OrderedDict((slot, []) for slot in MATERIAL_SLOTS)

    for folder, material in materials:
        name = _material_name(folder, material) or str(folder)
        dims = material.dimensions()
        if dims is not None:
            groups.setdefault(dims, []).append(name)
        for slot in MATERIAL_SLOTS:
            if not material.has(slot):
                missing[slot].append(name)

    total = len(materials)
    distributions = tuple(
        ResolutionDistribution(width, height, len(names), tuple(names))
        for (width, height), names in groups.items()
    )
    inconsistent = len(distributions) > 1

    coverage = tuple(
        MapCoverage(
            slot=slot,
            present_count=total - len(names),
            total_count=total,
            coverage_percent=100.0 * (total - len(names)) / total if total else 0.0,
            missing_in=tuple(names),
        )
        for slot, names in missing.items()
    )

    recommendations = []
    if inconsistent:
        recommendations.append(
            "Materials use different resolutions. Consider standardizing to a target (e.g. 2K) for consistency."
        )
    for entry in coverage:
        if 0.0 < entry.coverage_percent < 100.0:
            recommendations.append(
                "Map '{}' missing in {} material(s). Consider adding for consistency.".format(
                    entry.slot, len(entry.missing_in)
                )
            )

    return CrossMaterialResult(total, distributions, inconsistent, coverage, tuple(recommendations))


def analyze_tileability(
    materials: MaterialEntries, threshold: float = DEFAULT_TILEABILITY_THRESHOLD
) -> List[TileabilityAnalysisEntry]:
    """Measure the edge difference of every present texture."""
    entries = []
    for folder, material in materials:
        name = _material_name(folder, material)
        for slot, texture in material.textures():
            difference = edge_difference(texture)
            entries.append(
                TileabilityAnalysisEntry(_texture_path(texture), slot, name, difference, difference > threshold)
            )
    return entries


def fix_tileability_with_report(
    texture: TextureMap, blend_width: int = DEFAULT_BLEND_WIDTH
) -> Tuple[TextureMap, TileabilityFixResult]:
    """Apply the seam fix and measure the edge difference before and after."""
    before = edge_difference(texture)
    fixed = fix_tileability(texture, blend_width)
    after = edge_difference(fixed)
    return fixed, TileabilityFixResult(_texture_path(texture), before, after, after < before)


def run_advanced_analysis(
    materials: MaterialEntries,
    duplicate_threshold: float = DEFAULT_DUPLICATE_THRESHOLD,
    similar_threshold: float = DEFAULT_SIMILAR_THRESHOLD,
    tileability_threshold: float = DEFAULT_TILEABILITY_THRESHOLD,
    fix_tileability_maps: bool = False,
) -> AdvancedAnalysisReport:
    """Run duplicate, cross-material and tileability analysis together.

    With ``fix_tileability_maps`` every albedo map is fixed with the default
    blend width and only fixes that improved the map are reported. The fixed
    textures themselves are not kept.
    """
    materials = list(materials)
    fixes = None
    if fix_tileability_maps:
        improved = []
        for _, material in materials:
            albedo = material.get(SLOT_ALBEDO)
            if albedo is None:
                continue
            _, result = fix_tileability_with_report(albedo, DEFAULT_BLEND_WIDTH)
            if result.improved:
                improved.append(result)
        fixes = tuple(improved) or None

    report = AdvancedAnalysisReport(
        duplicates=detect_duplicates(materials, duplicate_threshold, similar_threshold),
        cross_material=analyze_cross_material(materials),
        tileability_analysis=tuple(analyze_tileability(materials, tileability_threshold)),
        tileability_fixes=fixes,
    )
    logger.info(
        "Analyzed %d material(s): %d duplicate pair(s), %d texture(s) need a tileability fix",
        len(materials),
        len(report.duplicates.duplicate_pairs),
        sum(1 for entry in report.tileability_analysis if entry.needs_fix),
    )
    return report


def run_advanced_analysis_and_write(materials: MaterialEntries, output_path: PathLike, **kwargs) -> AdvancedAnalysisReport:
    report = run_advanced_analysis(materials, **kwargs)
    report.write_to_file(output_path)
    return report
