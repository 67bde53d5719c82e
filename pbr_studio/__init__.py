"""PBR Studio texture analysis and optimization.

This package scores PBR material texture sets against correctness rules, finds
duplicate and inconsistent textures across many materials, and exports
resized, channel-packed texture sets with LOD chains for game engines.

MIT License

Copyright (c) 2026 PBR Studio contributors

Permission is hereby granted, free of charge, to any person obtaining a copy
of this software and associated documentation files (the "Software"), to deal
in the Software without restriction, including without limitation the rights
to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
copies of the Software, and to permit persons to whom the Software is
furnished to do so, subject to the following conditions:

The above copyright notice and this permission notice shall be included in all
copies or substantial portions of the Software.

THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
SOFTWARE.
"""

version_info = (0, 1, 0)
__version__ = ".".join(str(part) for part in version_info)

from .errors import (
    ExportError,
    ImageDecodeError,
    PbrStudioError,
    PluginConfigError,
    PresetError,
    TextureShapeError,
)
from .globs import Severity
from .operators.analysis.analysis_ops import edge_difference, fix_tileability
from .operators.analysis.analyzer import (
    analyze_cross_material,
    analyze_tileability,
    detect_duplicates,
    fix_tileability_with_report,
    run_advanced_analysis,
)
from .operators.batch import batch_check, batch_optimize, find_material_folders, load_materials
from .operators.optimization.estimation import estimate_vram
from .operators.optimization.exporter import (
    batch_export_with_optimization_preset,
    batch_export_with_preset,
    export_material_to_dir,
    export_with_lod,
    export_with_optimization_preset,
    export_with_preset,
    export_with_target,
    export_with_target_and_lod,
    generate_lod_chain,
)
from .operators.optimization.optimization_ops import pack_rma, pack_rma_from_material, resize_material_set, resize_texture
from .operators.optimization.presets import ExportPreset, OptimizationPreset, TargetResolution
from .operators.plugins.plugin_loader import PluginInfo, PluginLoader
from .operators.validation.validator import Issue, Validator, check, compute_score
from .report import MaterialReport
from .utils.materials import MaterialSet, load_from_folder
from .utils.textures import TextureMap

__all__ = [
    "ExportError",
    "ExportPreset",
    "ImageDecodeError",
    "Issue",
    "MaterialReport",
    "MaterialSet",
    "OptimizationPreset",
    "PbrStudioError",
    "PluginConfigError",
    "PluginInfo",
    "PluginLoader",
    "PresetError",
    "Severity",
    "TargetResolution",
    "TextureMap",
    "TextureShapeError",
    "Validator",
    "analyze_cross_material",
    "analyze_tileability",
    "batch_check",
    "batch_export_with_optimization_preset",
    "batch_export_with_preset",
    "batch_optimize",
    "check",
    "compute_score",
    "detect_duplicates",
    "edge_difference",
    "estimate_vram",
    "export_material_to_dir",
    "export_with_lod",
    "export_with_optimization_preset",
    "export_with_preset",
    "export_with_target",
    "export_with_target_and_lod",
    "find_material_folders",
    "fix_tileability",
    "fix_tileability_with_report",
    "generate_lod_chain",
    "load_from_folder",
    "load_materials",
    "pack_rma",
    "pack_rma_from_material",
    "resize_material_set",
    "resize_texture",
    "run_advanced_analysis",
]
