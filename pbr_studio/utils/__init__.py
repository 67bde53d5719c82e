"""Texture model utilities.

Modules:
    textures: The in-memory TextureMap.
    materials: MaterialSet and the folder loader.
    images: Pillow based image loading, saving and slot detection.
    pixel_buffer: numpy helpers for RGBA pixel buffers.
"""
