"""Global constants for PBR Studio.

This module contains the texture slot tables, file type filters, scoring
penalties and other package-wide constants used throughout the validation,
analysis and export code. Keeping them here gives every module consistent
access to the same naming and ordering.
"""

from collections import OrderedDict

# Slot order matters: it decides which map provides a material's dimensions,
# the order of per-slot reports and the order textures are compared in.
SLOT_ALBEDO = "albedo"
SLOT_NORMAL = "normal"
SLOT_ROUGHNESS = "roughness"
SLOT_METALLIC = "metallic"
SLOT_AO = "ao"
SLOT_HEIGHT = "height"

MATERIAL_SLOTS = (
    SLOT_ALBEDO,
    SLOT_NORMAL,
    SLOT_ROUGHNESS,
    SLOT_METALLIC,
    SLOT_AO,
    SLOT_HEIGHT,
)

# Filename keywords used to detect a slot from a texture's file stem.
# Emissive is recognised so such files are not mistaken for another slot,
# but it is not one of the material slots.
SLOT_KEYWORDS = OrderedDict(
    [
        (SLOT_ALBEDO, ("albedo", "basecolor", "diffuse", "color")),
        (SLOT_NORMAL, ("normal", "norm")),
        (SLOT_METALLIC, ("metallic", "metal")),
        (SLOT_ROUGHNESS, ("roughness", "rough")),
        (SLOT_AO, ("ao", "ambientocclusion", "ambient_occlusion")),
        ("emissive", ("emissive", "emission")),
        (SLOT_HEIGHT, ("height", "displacement", "bump")),
    ]
)

IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".tga", ".exr")
EXPORT_EXTENSIONS = (".png", ".jpg", ".jpeg", ".tga")

# Export file names per slot, written into every LOD directory.
EXPORT_FILE_NAMES = {
    SLOT_ALBEDO: "BaseColor.png",
    SLOT_NORMAL: "Normal.png",
    SLOT_ROUGHNESS: "Roughness.png",
    SLOT_METALLIC: "Metallic.png",
    SLOT_AO: "AmbientOcclusion.png",
    SLOT_HEIGHT: "Height.png",
}
PACKED_ORM_FILE_NAME = "ORM.png"


class Severity:
    """Constants for validation issue severities.

    The value of each constant is the lowercase name used in plugin manifests,
    script responses and JSON reports.
    """

    CRITICAL = "critical"
    MAJOR = "major"
    MINOR = "minor"


SEVERITY_PENALTIES = {
    Severity.CRITICAL: 20,
    Severity.MAJOR: 10,
    Severity.MINOR: 5,
}

# Aliases accepted when reading severities from plugin configs and scripts.
SEVERITY_ALIASES = {
    "critical": Severity.CRITICAL,
    "error": Severity.CRITICAL,
    "major": Severity.MAJOR,
    "warning": Severity.MAJOR,
    "minor": Severity.MINOR,
    "info": Severity.MINOR,
}

MAX_SCORE = 100

# Luminance weights (ITU-R BT.601)
LUMINANCE_WEIGHTS = (0.299, 0.587, 0.114)

RESOLUTION_4K = 4096
