"""Batch runs over a tree of material folders.

Folders are discovered recursively, loaded one by one and processed in
discovery order. A folder whose textures cannot be decoded is skipped with a
warning and reported as skipped, and the run carries on. Any other error
propagates.

The optional ``recorder`` callable is how batch runs reach an audit log: it
receives one dictionary per recorded action, with an ``"action"`` key.

Typical usage example:
    result = batch_check("assets/materials", Validator.default(), min_score=70)
    sys.exit(result.exit_code)
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from ..config import DEFAULT_MIN_SCORE
from ..errors import ImageDecodeError
from ..globs import Severity
from ..report import MaterialReport, OptimizationSuggestion
from ..type_annotations import JsonDict, MaterialEntry, PathLike, Recorder
from ..utils.materials import is_material_folder, load_from_folder
from .optimization.exporter import batch_export_with_optimization_preset, material_dir_name
from .optimization.presets import OptimizationPreset
from .validation.validator import Issue, Validator

logger = logging.getLogger(__name__)


def find_material_folders(root: PathLike) -> List[Path]:
    """Recursively list the folders below ``root`` that hold slot-named images.

    The root itself is not included. Sub-directories are visited in name
    order, parents before their children.
    """
    root = Path(root)
    found = []
    try:
        children = sorted(entry for entry in root.iterdir() if entry.is_dir())
    except OSError as e:
        logger.debug("Cannot list %s: %s", root, e)
        return found

    for child in children:
        if is_material_folder(child):
            found.append(child)
        found.extend(find_material_folders(child))
    return found


def load_materials(folders: Sequence[PathLike]) -> Tuple[List[MaterialEntry], List[Path]]:
    """Load every folder as a material.

    Returns:
        The loaded ``(folder, material)`` entries and the folders that were
        skipped because a texture could not be decoded.
    """
    loaded = []
    skipped = []
    for folder in folders:
        folder = Path(folder)
        try:
            loaded.append((folder, load_from_folder(folder)))
        except ImageDecodeError as e:
            logger.warning("Skipping %s: %s", folder, e)
            skipped.append(folder)
    return loaded, skipped


@dataclass(frozen=True)
class MaterialCheckResult:
    path: str
    name: str
    score: int
    passed: bool
    issues: Tuple[Issue, ...]
    optimization_suggestions: Tuple[OptimizationSuggestion, ...] = ()

    def count(self, severity: str) -> int:
        return sum(1 for issue in self.issues if issue.severity == severity)

    def to_dict(self) -> JsonDict:
        data = {
            "path": self.path,
            "score": self.score,
            "passed": self.passed,
            "critical_count": self.count(Severity.CRITICAL),
            "major_count": self.count(Severity.MAJOR),
            "minor_count": self.count(Severity.MINOR),
            "issues": [issue.to_dict() for issue in self.issues],
        }
        if self.optimization_suggestions:
            data["optimization_suggestions"] = [
                {"category": suggestion.category, "message": suggestion.message}
                for suggestion in self.optimization_suggestions
            ]
        return data


@dataclass(frozen=True)
class BatchCheckResult:
    min_score: int
    results: Tuple[MaterialCheckResult, ...] = ()
    skipped: Tuple[Path, ...] = field(default=())

    @property
    def failed_count(self) -> int:
        return sum(1 for result in self.results if not result.passed)

    @property
    def passed_count(self) -> int:
        return len(self.results) - self.failed_count

    @property
    def failed(self) -> bool:
        """True when a material scored below the threshold or a folder was skipped."""
        return self.failed_count > 0 or bool(self.skipped)

    @property
    def exit_code(self) -> int:
        return 1 if self.failed else 0

    def to_dict(self) -> JsonDict:
        return {
            "success": not self.failed,
            "min_score": self.min_score,
            "total_materials": len(self.results),
            "passed": self.passed_count,
            "failed": self.failed_count,
            "skipped": [str(path) for path in self.skipped],
            "results": [result.to_dict() for result in self.results],
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def write_to_file(self, path: PathLike) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_json(), encoding="utf-8")
        return path


def _relative(folder: Path, root: Path) -> Path:
    try:
        return folder.relative_to(root)
    except ValueError:
        return folder


def batch_check(
    root: PathLike,
    validator: Optional[Validator] = None,
    min_score: int = DEFAULT_MIN_SCORE,
    recorder: Optional[Recorder] = None,
) -> BatchCheckResult:
    """Validate every material folder under ``root`` against a minimum score.

    Args:
        root: Directory to scan.
        validator: Rules to run, the built-in set when None.
        min_score: Lowest passing score.
        recorder: Optional audit callback.

    Returns:
        Per-material results in discovery order plus the skipped folders.

    Raises:
        NotADirectoryError: If ``root`` is not a directory.
    """
    root = Path(root)
    if not root.is_dir():
        raise NotADirectoryError("Not a directory: {}".format(root))
    validator = validator or Validator.default()

    materials, skipped = load_materials(find_material_folders(root))
    results = []
    for folder, material in materials:
        issues = validator.check(material)
        report = MaterialReport.from_material_set(material, issues)
        passed = report.score >= min_score
        result = MaterialCheckResult(
            path=str(_relative(folder, root)),
            name=material.display_name(folder),
            score=report.score,
            passed=passed,
            issues=tuple(issues),
            optimization_suggestions=report.optimization_suggestions,
        )
        results.append(result)

        if not passed:
            logger.warning("%s scored %d (min %d)", result.path, result.score, min_score)
        if recorder is not None:
            recorder(
                {
                    "action": "validation",
                    "path": str(folder),
                    "score": result.score,
                    "passed": passed,
                    "min_score": min_score,
                    "issue_count": len(issues),
                    "critical_count": result.count(Severity.CRITICAL),
                    "major_count": result.count(Severity.MAJOR),
                }
            )

    batch = BatchCheckResult(min_score, tuple(results), tuple(skipped))
    logger.info(
        "Checked %d material(s) under %s: %d below threshold, %d skipped",
        len(results), root, batch.failed_count, len(skipped),
    )
    return batch


def batch_optimize(
    root: PathLike,
    output_root: PathLike,
    preset,
    include_lod: bool = False,
    recorder: Optional[Recorder] = None,
) -> Tuple[List[Path], List[Path]]:
    """Export every material folder under ``root`` with one preset.

    Args:
        root: Directory to scan.
        output_root: Directory receiving one sub-directory per material.
        preset: An :class:`OptimizationPreset`, an ``ExportPreset`` or a preset id.
        include_lod: Also write the preset's LOD ladder.
        recorder: Optional audit callback.

    Returns:
        The written files and the skipped folders.
    """
    if not isinstance(preset, OptimizationPreset):
        preset = OptimizationPreset.from_id(preset) if isinstance(preset, str) else OptimizationPreset(preset)

    materials, skipped = load_materials(find_material_folders(root))
    output_root = Path(output_root)
    written = []
    for entry in materials:
        files = batch_export_with_optimization_preset([entry], output_root, preset, include_lod)
        written.extend(files)
        if recorder is not None:
            folder, material = entry
            recorder(
                {
                    "action": "optimization",
                    "path": str(folder),
                    "output": str(output_root / material_dir_name(folder, material)),
                    "target": preset.effective_resolution.label,
                    "file_count": len(files),
                }
            )

    logger.info("Exported %d file(s) for %d material(s) to %s", len(written), len(materials), output_root)
    return written, skipped
