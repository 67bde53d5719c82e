"""Target resolutions and platform export presets."""

from dataclasses import dataclass, replace
from typing import Optional, Tuple

from ...errors import PresetError

FALLBACK_MAX_DIMENSION = 2048


@dataclass(frozen=True)
class TargetResolution:
    """Maximum edge length for resized textures."""

    max_dimension: int

    def __post_init__(self):
        if self.max_dimension < 1:
            raise PresetError("Target resolution must be at least 1px, got {}".format(self.max_dimension))

    @property
    def label(self) -> str:
        return _LABELS.get(self.max_dimension, "{}px".format(self.max_dimension))

    @classmethod
    def custom(cls, pixels: int) -> "TargetResolution":
        return cls(int(pixels))

    @classmethod
    def parse(cls, value: str) -> "TargetResolution":
        """Parse ``4k``/``4096``, ``2k``/``2048``, ``1k``/``1024``, ``512``, ``256`` or ``128``.

        Raises:
            PresetError: If the value is not one of the named resolutions.
        """
        key = str(value).strip().lower()
        if key not in _NAMED:
            raise PresetError(
                "Unknown target resolution {!r}. Use one of: {}".format(value, ", ".join(_NAMED))
            )
        return cls(_NAMED[key])

    @classmethod
    def parse_lenient(cls, value: str) -> "TargetResolution":
        """Parse like :meth:`parse` but fall back to 2K for unknown values.

        Plugin presets are resolved this way so that a typo in a manifest
        does not stop the preset from being listed or used.
        """
        try:
            return cls.parse(value)
        except PresetError:
            return cls(FALLBACK_MAX_DIMENSION)

    def __str__(self) -> str:
        return self.label


RES_4K = TargetResolution(4096)
RES_2K = TargetResolution(2048)
RES_1K = TargetResolution(1024)
RES_512 = TargetResolution(512)
RES_256 = TargetResolution(256)
RES_128 = TargetResolution(128)

_LABELS = {4096: "4K", 2048: "2K", 1024: "1K", 512: "512", 256: "256", 128: "128"}
_NAMED = {
    "4k": 4096,
    "4096": 4096,
    "2k": 2048,
    "2048": 2048,
    "1k": 1024,
    "1024": 1024,
    "512": 512,
    "256": 256,
    "128": 128,
}

DEFAULT_LOD_LEVELS = (RES_512, RES_256, RES_128)
MOBILE_LOD_LEVELS = (RES_256, RES_128)


@dataclass(frozen=True)
class ExportPreset:
    """A platform preset: base resolution plus default LOD ladder."""

    id: str
    label: str
    target_resolution: TargetResolution
    default_lod_levels: Tuple[TargetResolution, ...]

    @classmethod
    def parse(cls, value: str) -> "ExportPreset":
        """Look up a preset by id or alias, case-insensitive.

        Raises:
            PresetError: For unknown ids.
        """
        key = str(value).strip().lower()
        preset_id = _PRESET_ALIASES.get(key)
        if preset_id is None:
            raise PresetError(
                "Unknown export preset {!r}. Use one of: 4k, unreal, unity, mobile".format(value)
            )
        return EXPORT_PRESETS[preset_id]


PRESET_4K = ExportPreset("4k", "4K", RES_4K, DEFAULT_LOD_LEVELS)
PRESET_UNREAL = ExportPreset("unreal", "Unreal Engine", RES_2K, DEFAULT_LOD_LEVELS)
PRESET_UNITY = ExportPreset("unity", "Unity", RES_2K, DEFAULT_LOD_LEVELS)
PRESET_MOBILE = ExportPreset("mobile", "Mobile Optimized", RES_1K, MOBILE_LOD_LEVELS)

EXPORT_PRESETS = {preset.id: preset for preset in (PRESET_4K, PRESET_UNREAL, PRESET_UNITY, PRESET_MOBILE)}

_PRESET_ALIASES = {
    "4k": "4k",
    "4k_high": "4k",
    "unreal": "unreal",
    "unreal_engine": "unreal",
    "unity": "unity",
    "mobile": "mobile",
    "mobile_optimized": "mobile",
}


@dataclass(frozen=True)
class OptimizationPreset:
    """An export preset with optional overrides.

    ``resolution`` and ``lod_levels`` replace the preset defaults when set.
    ``pack_orm`` controls whether roughness, metallic and AO are packed into
    one ORM texture when all three are present.
    """

    preset: ExportPreset
    resolution: Optional[TargetResolution] = None
    lod_levels: Optional[Tuple[TargetResolution, ...]] = None
    pack_orm: bool = True

    @classmethod
    def from_id(cls, value: str) -> "OptimizationPreset":
        return cls(ExportPreset.parse(value))

    def with_resolution(self, resolution: TargetResolution) -> "OptimizationPreset":
        return replace(self, resolution=resolution)

    def with_lod_levels(self, levels) -> "OptimizationPreset":
        return replace(self, lod_levels=tuple(levels))

    @property
    def effective_resolution(self) -> TargetResolution:
        return self.resolution if self.resolution is not None else self.preset.target_resolution

    @property
    def effective_lod_levels(self) -> Tuple[TargetResolution, ...]:
        return self.lod_levels if self.lod_levels is not None else self.preset.default_lod_levels
