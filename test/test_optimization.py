# coding=utf-8
"""
Test Suite for texture optimization and export

Tests for:
- Target resolutions and export presets
- Resizing and ORM channel packing
- Directory, LOD and batch exports
- VRAM estimates
"""
import unittest

from base_test import PbrStudioTestCase, good_material, gray, noise, solid
from pbr_studio.errors import PresetError
from pbr_studio.operators.optimization.estimation import estimate_texture_bytes, estimate_vram, format_bytes
from pbr_studio.operators.optimization.exporter import (
    batch_export_with_preset,
    export_material_to_dir,
    export_with_optimization_preset,
    export_with_preset,
    export_with_target_and_lod,
    generate_lod_chain,
    material_dir_name,
)
from pbr_studio.operators.optimization.optimization_ops import (
    compute_target_dimensions,
    pack_rma,
    pack_rma_from_material,
    resize_material_set,
    resize_texture,
)
from pbr_studio.operators.optimization.presets import (
    PRESET_MOBILE,
    RES_1K,
    ExportPreset,
    OptimizationPreset,
    TargetResolution,
)
from pbr_studio.utils.images import load_image
from pbr_studio.utils.materials import MaterialSet


class TestPresets(unittest.TestCase):
    def test_parse_target_resolution(self):
        self.assertEqual(TargetResolution.parse("4K").max_dimension, 4096)
        self.assertEqual(TargetResolution.parse("1024"), RES_1K)
        self.assertEqual(TargetResolution.parse(" 128 ").label, "128")
        self.assertEqual(TargetResolution.custom(300).label, "300px")
        with self.assertRaises(PresetError):
            TargetResolution.parse("8k")
        with self.assertRaises(PresetError):
            TargetResolution(0)

    def test_parse_lenient_falls_back_to_2k(self):
        self.assertEqual(TargetResolution.parse_lenient("bogus").max_dimension, 2048)
        self.assertEqual(TargetResolution.parse_lenient("512").max_dimension, 512)

    def test_export_presets(self):
        self.assertEqual(ExportPreset.parse("Unreal_Engine").target_resolution.max_dimension, 2048)
        self.assertEqual(ExportPreset.parse("4k_high").id, "4k")
        mobile = ExportPreset.parse("mobile")
        self.assertIs(mobile, PRESET_MOBILE)
        self.assertEqual([level.max_dimension for level in mobile.default_lod_levels], [256, 128])
        with self.assertRaises(PresetError):
            ExportPreset.parse("console")

    def test_optimization_preset_overrides(self):
        preset = OptimizationPreset.from_id("unity")
        self.assertEqual(preset.effective_resolution.max_dimension, 2048)
        self.assertEqual(len(preset.effective_lod_levels), 3)

        custom = preset.with_resolution(TargetResolution(8)).with_lod_levels([TargetResolution(4)])
        self.assertEqual(custom.effective_resolution.max_dimension, 8)
        self.assertEqual(custom.effective_lod_levels, (TargetResolution(4),))
        self.assertIsNone(preset.resolution)


class TestResize(PbrStudioTestCase):
    def test_compute_target_dimensions(self):
        self.assertEqual(compute_target_dimensions(5120, 5120, 4096), (4096, 4096))
        self.assertEqual(compute_target_dimensions(512, 512, 2048), (512, 512))
        self.assertEqual(compute_target_dimensions(4000, 1000, 1024), (1024, 256))
        self.assertEqual(compute_target_dimensions(1000, 3, 100), (100, 1))
        self.assertEqual(compute_target_dimensions(4096, 1, 256), (256, 1))

    def test_resize_texture(self):
        texture = noise(64, 32, seed=5)
        resized = resize_texture(texture, 16)
        self.assertEqual(resized.size, (16, 8))
        self.assertEqual(texture.size, (64, 32))
        self.assertIs(resize_texture(texture, TargetResolution(128)), texture)

    def test_resize_oversized_texture_to_4k(self):
        # same 5120 -> 4096 edge as a full 5K texture, kept a few rows tall
        resized = resize_texture(noise(5120, 5, seed=6), TargetResolution.parse("4k"))
        self.assertEqual(resized.size, (4096, 4))

    def test_resize_keeps_solid_colors(self):
        resized = resize_texture(gray(32, 32, 77), 8)
        self.assertEqual(resized.pixel(3, 3), (77, 77, 77, 255))

    def test_resize_keeps_color_under_transparent_pixels(self):
        resized = resize_texture(solid(8, 8, (200, 200, 200, 0)), 4)
        self.assertEqual(resized.pixel(1, 1), (200, 200, 200, 0))

        resized = resize_texture(solid(8, 8, (10, 120, 240, 128)), 4)
        self.assertEqual(resized.pixel(2, 3), (10, 120, 240, 128))

    def test_resize_material_set(self):
        material = MaterialSet(name="M", albedo=gray(32, 32, 10), ao=gray(8, 8, 20))
        resized = resize_material_set(material, 16)
        self.assertEqual(resized.name, "M")
        self.assertEqual(resized.albedo.size, (16, 16))
        self.assertEqual(resized.ao.size, (8, 8))
        self.assertEqual(material.albedo.size, (32, 32))


class TestPacking(PbrStudioTestCase):
    def test_pack_rma_channels(self):
        packed = pack_rma(gray(4, 4, 64), gray(4, 4, 128), gray(4, 4, 192))
        self.assertEqual(packed.size, (4, 4))
        self.assertEqual(packed.pixel(2, 1), (192, 64, 128, 255))
        self.assertIsNone(packed.path)

    def test_pack_rma_resizes_to_roughness(self):
        packed = pack_rma(gray(8, 8, 10), gray(4, 4, 20), gray(16, 16, 30))
        self.assertEqual(packed.size, (8, 8))
        self.assertEqual(packed.pixel(0, 0), (30, 10, 20, 255))

    def test_pack_rma_from_material_needs_all_three(self):
        self.assertIsNotNone(pack_rma_from_material(good_material(size=4)))
        self.assertIsNone(pack_rma_from_material(MaterialSet(roughness=gray(4, 4, 1), ao=gray(4, 4, 1))))


class TestExport(PbrStudioTestCase):
    def test_export_packs_orm(self):
        written = export_material_to_dir(good_material(size=8), self.tmp / "out")
        self.assertEqual(len(written), 4)
        self.assertFileNames(self.tmp / "out", ["BaseColor.png", "Normal.png", "ORM.png", "Height.png"])
        orm = load_image(self.tmp / "out" / "ORM.png")
        self.assertEqual(orm.pixel(0, 0)[0], 230)
        self.assertEqual(orm.pixel(0, 0)[2], 0)

    def test_export_without_packing(self):
        export_material_to_dir(good_material(size=8), self.tmp / "out", pack_orm=False)
        self.assertFileNames(
            self.tmp / "out",
            ["BaseColor.png", "Normal.png", "Roughness.png", "Metallic.png", "AmbientOcclusion.png", "Height.png"],
        )

    def test_export_partial_material(self):
        material = MaterialSet(albedo=gray(4, 4, 1), roughness=gray(4, 4, 2), ao=gray(4, 4, 3))
        export_material_to_dir(material, self.tmp / "out")
        self.assertFileNames(self.tmp / "out", ["BaseColor.png", "Roughness.png", "AmbientOcclusion.png"])

    def test_export_with_preset_never_upscales(self):
        export_with_preset(good_material(size=8), self.tmp / "out", "mobile")
        self.assertEqual(load_image(self.tmp / "out" / "BaseColor.png").size, (8, 8))

    def test_lod_chain(self):
        chain = generate_lod_chain(good_material(size=16), [8, 4])
        self.assertEqual([level for level, _ in chain], [8, 4])
        self.assertEqual(chain[1][1].albedo.size, (4, 4))

    def test_export_with_lod_levels(self):
        written = export_with_target_and_lod(good_material(size=16), self.tmp / "out", 16, [8, 4])
        self.assertEqual(len(written), 12)
        self.assertEqual(sorted(entry.name for entry in (self.tmp / "out").iterdir()), ["LOD0", "LOD1", "LOD2"])
        for index, size in enumerate((16, 8, 4)):
            lod_dir = self.tmp / "out" / "LOD{}".format(index)
            self.assertFileNames(lod_dir, ["BaseColor.png", "Normal.png", "ORM.png", "Height.png"])
            self.assertEqual(load_image(lod_dir / "Normal.png").size, (size, size))

    def test_export_with_optimization_preset(self):
        preset = (
            OptimizationPreset.from_id("unreal")
            .with_resolution(TargetResolution(8))
            .with_lod_levels([TargetResolution(4)])
        )
        export_with_optimization_preset(good_material(size=16), self.tmp / "out", preset, include_lod=True)
        self.assertEqual(load_image(self.tmp / "out" / "LOD0" / "BaseColor.png").size, (8, 8))
        self.assertEqual(load_image(self.tmp / "out" / "LOD1" / "BaseColor.png").size, (4, 4))

        no_pack = OptimizationPreset(PRESET_MOBILE, pack_orm=False)
        export_with_optimization_preset(good_material(size=4), self.tmp / "flat", no_pack)
        self.assertTrue((self.tmp / "flat" / "Metallic.png").is_file())

    def test_batch_export_with_preset(self):
        materials = [
            (self.tmp / "src" / "Brick", good_material(size=4, name=None)),
            (self.tmp / "src" / "Wood", good_material(size=4, name="Oak")),
        ]
        batch_export_with_preset(materials, self.tmp / "out", "unity")
        self.assertEqual(sorted(entry.name for entry in (self.tmp / "out").iterdir()), ["Brick", "Oak"])

    def test_material_dir_name(self):
        self.assertEqual(material_dir_name("/a/Brick", MaterialSet()), "Brick")
        self.assertEqual(material_dir_name("/", MaterialSet()), "material")


class TestVram(unittest.TestCase):
    def test_estimate_texture_bytes(self):
        self.assertEqual(estimate_texture_bytes(16, 16, False), 1024)
        self.assertEqual(estimate_texture_bytes(16, 16, True), 1365)

    def test_format_bytes(self):
        self.assertEqual(format_bytes(512), "512 B")
        self.assertEqual(format_bytes(2048), "2.0 KB")
        self.assertEqual(format_bytes(3 * 1024 ** 2), "3.0 MB")

    def test_packed_orm_estimate(self):
        estimate = estimate_vram(good_material(size=16))
        self.assertEqual([entry.slot for entry in estimate.textures], ["albedo", "normal", "orm", "height"])
        self.assertEqual(estimate.bytes, 4 * 1365)
        self.assertEqual(estimate.formatted, "5.3 KB")

    def test_unpacked_estimate_without_mipmaps(self):
        estimate = estimate_vram(good_material(size=16), include_mipmaps=False, packed_orm=False)
        self.assertEqual(len(estimate.textures), 6)
        self.assertEqual(estimate.bytes, 6 * 1024)
        self.assertEqual(estimate.to_dict()["textures"][0], {"slot": "albedo", "width": 16, "height": 16, "bytes": 1024})


if __name__ == "__main__":
    unittest.main()
