"""Built-in validation rules.

Every rule exposes a ``rule_id``, a ``description`` and two checks:
``check_one`` returns at most one issue and ``check_many`` returns all of
them. Built-in rules emit at most one issue, so only rules backed by
external scripts override ``check_many``.
"""

from typing import List, Optional

from ...config import VALIDATION_TILEABILITY_THRESHOLD
from ...globs import RESOLUTION_4K, SLOT_ALBEDO, SLOT_METALLIC, SLOT_NORMAL, SLOT_ROUGHNESS, Severity
from ...utils.materials import MaterialSet
from ...utils.pixel_buffer import channel_mean, channel_stddev, count_clipped_pixels, luminance_stats
from ..analysis.analysis_ops import MIN_TILEABLE_SIZE, edge_difference
from .validation_ops import non_power_of_two_slots, oversized_slots
from .validator import Issue

ALBEDO_MIN_MEAN_LUMINANCE = 5.0
ALBEDO_MAX_LUMINANCE = 250.0
ALBEDO_MAX_CLIPPED_PERCENT = 5.0
ROUGHNESS_MIN_MEAN = 5.0
UNIFORM_STDDEV = 2.0
METALLIC_MID_GRAY = 128.0
METALLIC_MID_GRAY_TOLERANCE = 5.0
NORMAL_MIN_BLUE_MEAN = 100.0


class Rule:
    rule_id = ""
    description = ""

    def check_one(self, material: MaterialSet) -> Optional[Issue]:
        raise NotImplementedError

    def check_many(self, material: MaterialSet) -> List[Issue]:
        issue = self.check_one(material)
        return [issue] if issue is not None else []

    def issue(self, severity: str, message: str) -> Issue:
        return Issue(self.rule_id, severity, message)

    def __repr__(self) -> str:
        return "{}({!r})".format(type(self).__name__, self.rule_id)


class RequiredMapsRule(Rule):
    rule_id = "required_maps"
    description = "Albedo and normal maps are required"

    def check_one(self, material):
        if not material.has(SLOT_ALBEDO):
            return self.issue(Severity.CRITICAL, "Missing albedo/base color map. Required for PBR.")
        if not material.has(SLOT_NORMAL):
            return self.issue(Severity.CRITICAL, "Missing normal map. Required for PBR.")
        return None


class ResolutionMismatchRule(Rule):
    rule_id = "resolution_mismatch"
    description = "All texture maps should share one resolution"

    def check_one(self, material):
        if material.dimensions_consistent():
            return None
        return self.issue(
            Severity.MAJOR, "Texture resolution mismatch. All maps should have the same dimensions."
        )


class NonPowerOfTwoRule(Rule):
    rule_id = "non_power_of_two"
    description = "Texture dimensions should be powers of two"

    def check_one(self, material):
        offending = non_power_of_two_slots(material)
        if not offending:
            return None
        return self.issue(
            Severity.MINOR,
            "Non-power-of-two dimensions: {}. May cause GPU issues.".format(", ".join(offending)),
        )


class TextureResolutionRule(Rule):
    rule_id = "texture_resolution"
    description = "Textures should not exceed 4K"

    def check_one(self, material):
        offending = oversized_slots(material, RESOLUTION_4K)
        if not offending:
            return None
        return self.issue(
            Severity.MAJOR,
            "Texture resolution exceeds 4K: {}. Large textures may impact performance.".format(
                ", ".join(offending)
            ),
        )


class AlbedoBrightnessRule(Rule):
    rule_id = "albedo_brightness_range"
    description = "Albedo values should sit in a plausible PBR range"

    def check_one(self, material):
        albedo = material.get(SLOT_ALBEDO)
        if albedo is None:
            return None

        mean, _, maximum = luminance_stats(albedo.pixels)
        if mean < ALBEDO_MIN_MEAN_LUMINANCE:
            return self.issue(
                Severity.MAJOR, "Albedo appears nearly black (mean luminance {:.1f}/255).".format(mean)
            )
        if maximum > ALBEDO_MAX_LUMINANCE:
            return self.issue(
                Severity.MINOR,
                "Albedo has very bright pixels (max {:.1f}/255). May indicate non-PBR or HDR.".format(maximum),
            )

        clipped_percent = 100.0 * count_clipped_pixels(albedo.pixels) / (albedo.width * albedo.height)
        if clipped_percent > ALBEDO_MAX_CLIPPED_PERCENT:
            return self.issue(
                Severity.MINOR, "Albedo has {:.1f}% clipped pixels (255 or 0).".format(clipped_percent)
            )
        return None


class RoughnessUniformityRule(Rule):
    rule_id = "roughness_uniformity"
    description = "Roughness maps should carry surface variation"

    def check_one(self, material):
        roughness = material.get(SLOT_ROUGHNESS)
        if roughness is None:
            return None

        mean = channel_mean(roughness.pixels, 0)
        if mean < ROUGHNESS_MIN_MEAN:
            return self.issue(
                Severity.MAJOR, "Roughness map is nearly black. May indicate missing or incorrect texture."
            )
        stddev = channel_stddev(roughness.pixels, 0)
        if stddev < UNIFORM_STDDEV:
            return self.issue(
                Severity.MINOR,
                "Roughness map is nearly uniform (stddev {:.2f}, mean {:.1f}).".format(stddev, mean),
            )
        return None


class MetallicMidGrayRule(Rule):
    rule_id = "metallic_mid_gray"
    description = "Metallic maps should not be a flat mid-gray placeholder"

    def check_one(self, material):
        metallic = material.get(SLOT_METALLIC)
        if metallic is None:
            return None

        mean = channel_mean(metallic.pixels, 0)
        if abs(mean - METALLIC_MID_GRAY) >= METALLIC_MID_GRAY_TOLERANCE:
            return None
        if channel_stddev(metallic.pixels, 0) >= UNIFORM_STDDEV:
            return None
        return self.issue(
            Severity.MINOR, "Metallic map is uniformly mid-gray. May indicate uniform or placeholder."
        )


class NormalMapStrengthRule(Rule):
    rule_id = "normal_map_strength"
    description = "Tangent-space normal maps should be blue dominant"

    def check_one(self, material):
        normal = material.get(SLOT_NORMAL)
        if normal is None:
            return None

        blue = channel_mean(normal.pixels, 2)
        if blue >= NORMAL_MIN_BLUE_MEAN:
            return None
        return self.issue(
            Severity.MINOR,
            "Normal map blue channel low (mean {:.1f}). Tangent-space normals typically have dominant blue.".format(
                blue
            ),
        )


class TileabilityRule(Rule):
    rule_id = "tileability"
    description = "Albedo edges should match for seamless tiling"

    def __init__(self, threshold: float = VALIDATION_TILEABILITY_THRESHOLD) -> None:
        self.threshold = threshold

    def check_one(self, material):
        albedo = material.get(SLOT_ALBEDO)
        if albedo is None or albedo.width < MIN_TILEABLE_SIZE or albedo.height < MIN_TILEABLE_SIZE:
            return None

        difference = edge_difference(albedo)
        if difference <= self.threshold:
            return None
        return self.issue(
            Severity.MINOR,
            "High edge difference ({:.1f}). Texture may not tile seamlessly.".format(difference),
        )


BUILTIN_RULE_CLASSES = (
    RequiredMapsRule,
    ResolutionMismatchRule,
    NonPowerOfTwoRule,
    TextureResolutionRule,
    AlbedoBrightnessRule,
    RoughnessUniformityRule,
    MetallicMidGrayRule,
    NormalMapStrengthRule,
    TileabilityRule,
)


def builtin_rules() -> List[Rule]:
    """Create fresh instances of the built-in rules in their fixed order."""
    return [rule_class() for rule_class in BUILTIN_RULE_CLASSES]
