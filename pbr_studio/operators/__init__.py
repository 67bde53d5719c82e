"""Operator implementations for PBR Studio.

This package contains the processing stages that work on loaded materials:
- validation: Rule engine and built-in rules
- plugins: Plugin discovery, config rules and script rules
- analysis: Cross-material duplicate, consistency and tileability analysis
- optimization: Resizing, channel packing, LOD export and VRAM estimates
- batch: Folder scanning and batch check/optimize runs
"""
