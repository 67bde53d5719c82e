# coding=utf-8
"""
Test Suite for the texture model

Tests for:
- TextureMap construction, immutability and pixel access
- MaterialSet slot queries and dimension consistency
- Slot detection, image loading and folder loading
"""
import unittest

import numpy as np

from base_test import PbrStudioTestCase, gray, noise, solid
from pbr_studio.errors import ExportError, ImageDecodeError, TextureShapeError
from pbr_studio.utils.images import detect_slot_from_path, load_image, save_texture
from pbr_studio.utils.materials import MaterialSet, is_material_folder, load_from_folder
from pbr_studio.utils.textures import TextureMap


class TestTextureMap(PbrStudioTestCase):
    def test_from_bytes_round_trips_pixels(self):
        data = bytes(range(2 * 3 * 4))
        texture = TextureMap.from_bytes(2, 3, data)
        self.assertEqual(texture.size, (2, 3))
        self.assertEqual(texture.data, data)
        self.assertEqual(texture.pixel(1, 0), (4, 5, 6, 7))
        self.assertEqual(texture.pixel(0, 2), (16, 17, 18, 19))

    def test_from_bytes_rejects_wrong_length(self):
        with self.assertRaises(TextureShapeError):
            TextureMap.from_bytes(2, 2, bytes(15))

    def test_zero_size_is_rejected(self):
        with self.assertRaises(TextureShapeError):
            TextureMap.from_bytes(0, 4, b"")
        with self.assertRaises(TextureShapeError):
            TextureMap(np.zeros((0, 4, 4), dtype=np.uint8))

    def test_non_rgba_buffer_is_rejected(self):
        with self.assertRaises(TextureShapeError):
            TextureMap(np.zeros((4, 4, 3), dtype=np.uint8))
        with self.assertRaises(ValueError):
            TextureMap(np.zeros((4, 4), dtype=np.uint8))

    def test_pixels_are_read_only_copies(self):
        source = np.zeros((2, 2, 4), dtype=np.uint8)
        texture = TextureMap(source)
        source[0, 0] = (9, 9, 9, 9)
        self.assertEqual(texture.pixel(0, 0), (0, 0, 0, 0))
        with self.assertRaises(ValueError):
            texture.pixels[0, 0, 0] = 1

    def test_pixel_out_of_range_returns_none(self):
        texture = gray(4, 4, 10)
        self.assertIsNone(texture.pixel(4, 0))
        self.assertIsNone(texture.pixel(0, -1))


class TestMaterialSet(PbrStudioTestCase):
    def test_empty_material(self):
        material = MaterialSet()
        self.assertEqual(material.texture_count(), 0)
        self.assertEqual(material.present_slots(), [])
        self.assertIsNone(material.dimensions())
        self.assertTrue(material.dimensions_consistent())

    def test_present_slots_follow_fixed_order(self):
        material = MaterialSet(height=gray(4, 4, 1), albedo=gray(4, 4, 2), ao=gray(4, 4, 3))
        self.assertEqual(material.present_slots(), ["albedo", "ao", "height"])
        self.assertEqual(material.texture_count(), 3)
        self.assertTrue(material.has("ao"))
        self.assertFalse(material.has("normal"))
        self.assertIs(material.albedo, material.get("albedo"))

    def test_dimensions_come_from_first_present_slot(self):
        material = MaterialSet(roughness=gray(8, 4, 1), normal=gray(2, 2, 1))
        self.assertEqual(material.dimensions(), (2, 2))
        self.assertFalse(material.dimensions_consistent())

    def test_unknown_slot_raises(self):
        with self.assertRaises(KeyError):
            MaterialSet(emissive=gray(2, 2, 1))
        with self.assertRaises(KeyError):
            MaterialSet().get("specular")

    def test_display_name(self):
        self.assertEqual(MaterialSet(name="Brick").display_name("/x/y"), "Brick")
        self.assertEqual(MaterialSet().display_name("/assets/Wood"), "Wood")
        self.assertEqual(MaterialSet().display_name(), "unknown")

    def test_summary(self):
        material = MaterialSet(name="M", albedo=gray(4, 2, 1))
        summary = material.summary()
        self.assertEqual(summary["texture_count"], 1)
        self.assertEqual(summary["dimensions"], {"width": 4, "height": 2})
        self.assertTrue(summary["maps"]["albedo"])
        self.assertFalse(summary["maps"]["height"])
        self.assertTrue(summary["dimensions_consistent"])


class TestImages(PbrStudioTestCase):
    def test_detect_slot_from_path(self):
        self.assertEqual(detect_slot_from_path("Brick_BaseColor.png"), "albedo")
        self.assertEqual(detect_slot_from_path("brick_normal.tga"), "normal")
        self.assertEqual(detect_slot_from_path("brick_Rough.jpg"), "roughness")
        self.assertEqual(detect_slot_from_path("brick_metalness.png"), "metallic")
        self.assertEqual(detect_slot_from_path("brick_AO.png"), "ao")
        self.assertEqual(detect_slot_from_path("brick_displacement.png"), "height")
        self.assertEqual(detect_slot_from_path("brick_emission.png"), "emissive")
        self.assertIsNone(detect_slot_from_path("readme.png"))

    def test_save_and_load_png(self):
        texture = solid(3, 2, (10, 20, 30, 255))
        path = save_texture(texture, self.tmp / "albedo.png")
        loaded = load_image(path)
        self.assertEqual(loaded.size, (3, 2))
        self.assertEqual(loaded.pixel(2, 1), (10, 20, 30, 255))
        self.assertEqual(loaded.path, path)

    def test_save_rejects_unknown_extension(self):
        with self.assertRaises(ExportError):
            save_texture(gray(2, 2, 1), self.tmp / "albedo.bmp")

    def test_load_corrupt_file_raises_decode_error(self):
        path = self.tmp / "albedo.png"
        path.write_bytes(b"definitely not a png")
        with self.assertRaises(ImageDecodeError):
            load_image(path)

    def test_load_truncated_file_raises_decode_error(self):
        path = self.write_image("albedo.png", noise(32, 32, seed=8))
        data = path.read_bytes()
        path.write_bytes(data[: len(data) // 2])
        with self.assertRaises(ImageDecodeError):
            load_image(path)

    def test_load_missing_file_raises_os_error(self):
        with self.assertRaises(OSError):
            load_image(self.tmp / "missing.png")


class TestLoadFromFolder(PbrStudioTestCase):
    def test_loads_detected_slots(self):
        self.write_image("Brick/Brick_BaseColor.png", gray(4, 4, 100))
        self.write_image("Brick/Brick_Normal.png", solid(4, 4, (128, 128, 255, 255)))
        self.write_image("Brick/Brick_Roughness.png", gray(4, 4, 150))
        self.write_image("Brick/notes.png", gray(4, 4, 0))
        (self.tmp / "Brick" / "readme.txt").write_text("not a texture")

        material = load_from_folder(self.tmp / "Brick")
        self.assertEqual(material.name, "Brick")
        self.assertEqual(material.present_slots(), ["albedo", "normal", "roughness"])
        self.assertEqual(material.normal.pixel(0, 0), (128, 128, 255, 255))

    def test_first_file_by_name_wins(self):
        self.write_image("M/b_albedo.png", gray(4, 4, 200))
        self.write_image("M/a_albedo.png", gray(4, 4, 50))
        material = load_from_folder(self.tmp / "M")
        self.assertEqual(material.albedo.pixel(0, 0), (50, 50, 50, 255))
        self.assertEqual(material.albedo.path.name, "a_albedo.png")

    def test_emissive_files_are_ignored(self):
        self.write_image("M/m_emissive.png", gray(4, 4, 1))
        material = load_from_folder(self.tmp / "M")
        self.assertEqual(material.texture_count(), 0)

    def test_is_material_folder(self):
        self.write_image("Yes/wood_normal.png", gray(2, 2, 1))
        self.write_image("No/picture.png", gray(2, 2, 1))
        self.assertTrue(is_material_folder(self.tmp / "Yes"))
        self.assertFalse(is_material_folder(self.tmp / "No"))
        self.assertFalse(is_material_folder(self.tmp / "Missing"))


if __name__ == "__main__":
    unittest.main()
