"""Per-material JSON reports.

A :class:`MaterialReport` joins a material's summary with its validation
issues, the resulting score, optimization suggestions derived from those
issues and a VRAM estimate. Rendering reports to HTML or PDF is left to the
caller.
"""

import json
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .globs import SLOT_AO, SLOT_METALLIC, SLOT_ROUGHNESS, Severity
from .operators.optimization.estimation import VramEstimate, estimate_vram
from .operators.validation.validator import Issue, compute_score
from .type_annotations import JsonDict
from .utils.materials import MaterialSet

LARGE_TEXTURE_HINT_SIZE = 2048


@dataclass(frozen=True)
class OptimizationSuggestion:
    category: str
    message: str
    priority: Optional[int] = None
    details: Optional[str] = None

    def to_dict(self) -> JsonDict:
        data = {"category": self.category, "message": self.message}
        if self.priority is not None:
            data["priority"] = self.priority
        if self.details is not None:
            data["details"] = self.details
        return data


# rule_id -> (category, message, priority)
_ISSUE_SUGGESTIONS = {
    "texture_resolution": (
        "resolution",
        "Consider downscaling textures over 4K to reduce memory and improve load times",
        2,
    ),
    "albedo_brightness_range": (
        "pbr_correctness",
        "Verify albedo texture values are in valid PBR range",
        None,
    ),
    "roughness_uniformity": (
        "workflow",
        "Use a proper roughness texture for more realistic surface variation",
        None,
    ),
}


def derive_suggestions(material: MaterialSet, issues: Sequence[Issue]) -> List[OptimizationSuggestion]:
    suggestions = []
    for issue in issues:
        if issue.rule_id in _ISSUE_SUGGESTIONS:
            category, message, priority = _ISSUE_SUGGESTIONS[issue.rule_id]
            suggestions.append(OptimizationSuggestion(category, message, priority, issue.message))

    dims = material.dimensions()
    if not suggestions and dims is not None and max(dims) > LARGE_TEXTURE_HINT_SIZE:
        suggestions.append(
            OptimizationSuggestion(
                "resolution", "Textures above 2K may be larger than needed for many use cases", priority=1
            )
        )
    return suggestions


@dataclass(frozen=True)
class MaterialReport:
    name: Optional[str]
    score: int
    summary: JsonDict
    issues: Tuple[Issue, ...]
    optimization_suggestions: Tuple[OptimizationSuggestion, ...]
    passed: bool
    error_count: int
    warning_count: int
    vram_estimate: Optional[VramEstimate] = None

    @classmethod
    def from_material_set(cls, material: MaterialSet, issues: Sequence[Issue]) -> "MaterialReport":
        """Build a report for a material and the issues its validation produced.

        The material passes when it has no critical issues. Critical issues are
        counted as errors and major issues as warnings.
        """
        issues = tuple(issues)
        can_pack = all(material.has(slot) for slot in (SLOT_ROUGHNESS, SLOT_METALLIC, SLOT_AO))
        return cls(
            name=material.name,
            score=compute_score(issues),
            summary=material.summary(),
            issues=issues,
            optimization_suggestions=tuple(derive_suggestions(material, issues)),
            passed=not any(issue.severity == Severity.CRITICAL for issue in issues),
            error_count=sum(1 for issue in issues if issue.severity == Severity.CRITICAL),
            warning_count=sum(1 for issue in issues if issue.severity == Severity.MAJOR),
            vram_estimate=estimate_vram(material, include_mipmaps=True, packed_orm=can_pack),
        )

    def to_dict(self) -> JsonDict:
        data = {}
        if self.name is not None:
            data["name"] = self.name
        summary = dict(self.summary)
        if summary.get("dimensions") is None:
            summary.pop("dimensions", None)
        data.update(
            score=self.score,
            summary=summary,
            issues=[issue.to_dict() for issue in self.issues],
            optimization_suggestions=[suggestion.to_dict() for suggestion in self.optimization_suggestions],
            passed=self.passed,
            error_count=self.error_count,
            warning_count=self.warning_count,
        )
        if self.vram_estimate is not None:
            data["vram_estimate"] = self.vram_estimate.to_dict()
        return data

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)
