"""Package initialization for optimization operators.

This package resizes textures to platform targets, packs roughness, metallic
and ambient occlusion into ORM textures, writes LOD chains and estimates GPU
memory use.
"""
